"""
API routers module.

This module contains all API route definitions organized by domain.
"""
from api.routers.health import router as health_router
from api.routers.users import router as users_router
from api.routers.measurements import router as measurements_router
from api.routers.statistics import router as statistics_router
from api.routers.export import router as export_router
from api.routers.meta import router as meta_router

__all__ = [
    "health_router",
    "users_router",
    "measurements_router",
    "statistics_router",
    "export_router",
    "meta_router",
]
