"""
Gateways Package - Domain Layer

Interfaces for external service communication. Implementations live in
the infrastructure layer.
"""

from .fleet_gateway import IFleetGateway

__all__ = ["IFleetGateway"]
