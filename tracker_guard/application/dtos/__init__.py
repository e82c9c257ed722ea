"""
DTOs Package - Application Layer

Data Transfer Objects exchanged between the application layer and the
entry points (Celery task, one-shot runner).
"""

from .automation_dto import AccountRunSummaryDTO, AutomationRunDTO

__all__ = ["AccountRunSummaryDTO", "AutomationRunDTO"]
