"""
Infrastructure Layer Package

Implementations of the interfaces defined in the domain layer: the fleet
API gateway, the Excel report writer and the Celery services.
"""

from tracker_guard.infrastructure import gateways, reports

__all__ = ["gateways", "reports"]
