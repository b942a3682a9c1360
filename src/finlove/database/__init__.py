"""Database layer for finlove application."""

from finlove.database.base import Database
from finlove.database.factories import create_database, create_sqlite_database

__all__ = ["Database", "create_database", "create_sqlite_database"]
