"""Repository modules - Data access layer"""
from .mongo_client import get_database, get_collection, close_connection, create_indexes, health_check
from .permit_repo import PermitRepository

__all__ = [
    "get_database",
    "get_collection",
    "close_connection",
    "create_indexes",
    "health_check",
    "PermitRepository",
]
