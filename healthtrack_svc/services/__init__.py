"""
Service layer for business logic.

This module contains all business logic and orchestration services.
The pure statistics core lives in services.statistics.
"""
from services.user_service import UserService
from services.measurement_service import MeasurementService
from services.statistics_service import StatisticsService
from services.export_service import ExportService

__all__ = [
    "UserService",
    "MeasurementService",
    "StatisticsService",
    "ExportService",
]
