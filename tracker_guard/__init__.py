"""
Tracker Guard

Keeps the reporting interval of IoT trackers aligned with their account
profile without flooding devices with redundant configuration commands.

Layer Structure:
- Domain: Entities, gateway contracts and the command decoding/deduplication rules
- Application: Automation use cases and DTOs
- Infrastructure: Fleet API gateway, Excel reports and Celery services
- Shared: Cross-cutting concerns (logging, constants, environment)
- Main: Composition root, settings and entry points
"""

__version__ = "1.0.0"
