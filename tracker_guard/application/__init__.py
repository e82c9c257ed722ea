"""
Application Layer Package

Application-specific business rules: the automation use cases and the
DTOs they hand to the entry points.
"""

# Re-export submodules
from tracker_guard.application import dtos, use_cases

__all__ = ["dtos", "use_cases"]
