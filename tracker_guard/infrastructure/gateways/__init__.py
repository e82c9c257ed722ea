"""
Gateways Package - Infrastructure Layer

Concrete implementations of the gateway interfaces defined in the
domain layer.
"""

from .fleet_api_gateway import FleetApiGateway

__all__ = ["FleetApiGateway"]
