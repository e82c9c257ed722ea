"""Report writers - Infrastructure Layer."""

from .excel_report_writer import ExcelReportWriter

__all__ = ["ExcelReportWriter"]
