"""Domain ports package."""

from .report_writer import IReportWriter

__all__ = ["IReportWriter"]
