"""
Repository for user database operations.

This module contains all database access for users and their doctor
assignments.

Architecture:
    UserRepository is the data access layer for users.
    It should be injected via core.dependencies.get_user_repository().

All SQL is encapsulated in this repository - no SQL in service or API layers.
"""
import sqlite3
import logging
from typing import Optional, List

from repositories.base import Database
from models.user import User, Role
from core.datetime_utils import format_iso, utc_now

logger = logging.getLogger(__name__)


_USER_SELECT = """
    SELECT u.id, u.username, u.name, u.role, u.email, u.created_at,
           p.doctor_id, p.notes
    FROM users u
    LEFT JOIN patients p ON p.user_id = u.id
"""


class UserRepository:
    """
    Repository for user CRUD operations.

    Users with the 'user' role get a patients row on creation, which holds
    their doctor assignment and clinical notes.
    """

    def __init__(self, db: Database):
        """
        Initialize the user repository.

        Args:
            db: Database instance for data access.
                Injected via core.dependencies.get_user_repository().
        """
        self._db = db

    def add(
        self,
        username: str,
        name: str,
        role: Role = Role.USER,
        email: Optional[str] = None,
    ) -> Optional[User]:
        """
        Add a new user and return the created record.

        Returns:
            Optional[User]: The created user, or None if the username is
                already taken (UNIQUE constraint violation).
        """
        conn = self._db.get_connection()
        cursor = conn.cursor()

        try:
            cursor.execute("BEGIN TRANSACTION")
            cursor.execute("""
                INSERT INTO users (username, name, role, email, created_at)
                VALUES (?, ?, ?, ?, ?)
            """, (username, name, role.value, email, format_iso(utc_now())))
            user_id = cursor.lastrowid

            if role is Role.USER:
                cursor.execute(
                    "INSERT INTO patients (user_id) VALUES (?)",
                    (user_id,)
                )

            cursor.execute(_USER_SELECT + " WHERE u.id = ?", (user_id,))
            row = cursor.fetchone()
            conn.commit()
            return User.from_row(row)
        except sqlite3.IntegrityError:
            conn.rollback()
            return None
        finally:
            conn.close()

    def get_by_id(self, user_id: int) -> Optional[User]:
        conn = self._db.get_connection()
        try:
            row = conn.execute(_USER_SELECT + " WHERE u.id = ?", (user_id,)).fetchone()
        finally:
            conn.close()
        return User.from_row(row) if row else None

    def exists(self, user_id: int) -> bool:
        conn = self._db.get_connection()
        try:
            row = conn.execute("SELECT 1 FROM users WHERE id = ?", (user_id,)).fetchone()
        finally:
            conn.close()
        return row is not None

    def get_all(self, role: Optional[Role] = None) -> List[User]:
        """
        Get all users sorted by name, optionally restricted to one role.
        """
        query = _USER_SELECT
        params = []
        if role is not None:
            query += " WHERE u.role = ?"
            params.append(role.value)
        query += " ORDER BY u.name ASC, u.id ASC"

        conn = self._db.get_connection()
        try:
            rows = conn.execute(query, params).fetchall()
        finally:
            conn.close()
        return [User.from_row(row) for row in rows]

    def get_patients_for_doctor(self, doctor_id: int) -> List[User]:
        """Users whose patients row points at the given doctor."""
        conn = self._db.get_connection()
        try:
            rows = conn.execute(
                _USER_SELECT + " WHERE p.doctor_id = ? ORDER BY u.name ASC, u.id ASC",
                (doctor_id,)
            ).fetchall()
        finally:
            conn.close()
        return [User.from_row(row) for row in rows]

    def assign_doctor(self, patient_id: int, doctor_id: int) -> Optional[User]:
        """
        Assign a doctor to a patient, creating the patients row if missing.

        Returns:
            Optional[User]: The updated patient, or None if the patient does
                not exist.
        """
        conn = self._db.get_connection()
        cursor = conn.cursor()

        try:
            cursor.execute("BEGIN TRANSACTION")
            cursor.execute(
                "UPDATE patients SET doctor_id = ? WHERE user_id = ?",
                (doctor_id, patient_id)
            )
            if cursor.rowcount == 0:
                cursor.execute(
                    "INSERT INTO patients (user_id, doctor_id) VALUES (?, ?)",
                    (patient_id, doctor_id)
                )
            cursor.execute(_USER_SELECT + " WHERE u.id = ?", (patient_id,))
            row = cursor.fetchone()
            conn.commit()
        except sqlite3.IntegrityError:
            conn.rollback()
            return None
        finally:
            conn.close()

        logger.info(f"Assigned doctor {doctor_id} to patient {patient_id}")
        return User.from_row(row) if row else None
