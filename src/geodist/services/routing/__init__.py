"""Road routing service helpers."""

from .osrm_client import OSRMClient, OSRMRouteError, check_health
from .service import Router

__all__ = [
    "OSRMClient",
    "OSRMRouteError",
    "Router",
    "check_health",
]
