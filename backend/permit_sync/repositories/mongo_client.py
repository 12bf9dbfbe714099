"""MongoDB Client - Permit store connection and indexes

One process-wide pymongo client, created on first use. The sync job and the
CLI share it and close it on the way out.
"""
from typing import Any, Dict, List, Optional, Tuple
from pymongo import ASCENDING, MongoClient
from pymongo.database import Database
from pymongo.collection import Collection
from pymongo.errors import ConnectionFailure, PyMongoError

from ..config.settings import settings
from ..utils.logger import get_logger

logger = get_logger(__name__)

PERMITS_COLLECTION = "permits"

# (field, options) for every index on the permits collection
PERMIT_INDEXES: List[Tuple[str, Dict[str, Any]]] = [
    ("permit_id", {"unique": True}),
    ("activity_id", {}),
    # PEACH sync searches by tracking system, then picks a tracking id
    ("permit_tracking.source_system_kind.source_system", {}),
    ("permit_tracking.tracking_id", {}),
    ("created_at", {}),
    ("updated_at", {}),
]

_client: Optional[MongoClient] = None
_database: Optional[Database] = None


def get_client() -> MongoClient:
    """Shared client, connected and pinged on first call"""
    global _client
    if _client is not None:
        return _client

    client = MongoClient(
        settings.mongo_uri,
        serverSelectionTimeoutMS=settings.mongo_timeout_ms,
        connectTimeoutMS=settings.mongo_timeout_ms,
        tz_aware=True,
    )
    try:
        client.admin.command("ping")
    except ConnectionFailure as e:
        logger.error(f"Permit store unreachable: {e}", extra={"error_type": type(e).__name__})
        client.close()
        raise

    logger.info(f"Connected to permit store, database {settings.mongo_db}")
    _client = client
    return _client


def get_database() -> Database:
    global _database
    if _database is None:
        _database = get_client()[settings.mongo_db]
    return _database


def get_collection(name: str = PERMITS_COLLECTION) -> Collection:
    return get_database()[name]


def close_connection() -> None:
    """Close the shared client; the next call reconnects"""
    global _client, _database
    if _client is None:
        return
    _client.close()
    _client = None
    _database = None
    logger.info("Permit store connection closed")


def create_indexes() -> None:
    """Ensure the permit indexes exist"""
    permits = get_collection(PERMITS_COLLECTION)
    for field, options in PERMIT_INDEXES:
        permits.create_index([(field, ASCENDING)], **options)
    logger.info(f"Ensured {len(PERMIT_INDEXES)} indexes on {PERMITS_COLLECTION}")


def health_check() -> Dict[str, Any]:
    """Ping the permit store and count permits"""
    try:
        permits = get_collection(PERMITS_COLLECTION)
        count = permits.estimated_document_count()
    except PyMongoError as e:
        logger.error(f"Permit store health check failed: {e}", extra={"error_type": type(e).__name__})
        return {"status": "unhealthy", "database": settings.mongo_db, "error": str(e)}
    return {"status": "healthy", "database": settings.mongo_db, "permits": count}
