"""
Domain Layer Package

Core business rules of the automation: entities, gateway contracts, ports
and the pure services that decode and deduplicate device commands.
"""

# Re-export submodules
from tracker_guard.domain import entities, gateways, ports, services

__all__ = ["entities", "gateways", "ports", "services"]
