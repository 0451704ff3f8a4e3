"""
Repository layer for database access.

This module contains all database access operations, encapsulating SQL and data persistence logic.
"""
from repositories.base import Database
from repositories.user_repository import UserRepository
from repositories.measurement_repository import MeasurementRepository

__all__ = [
    "Database",
    "UserRepository",
    "MeasurementRepository",
]
