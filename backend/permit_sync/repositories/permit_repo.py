"""Permit Repository - Data access for permits and their tracking ids"""
from typing import Any, Dict, Iterable, List, Optional
from pymongo import ASCENDING
from pymongo.collection import Collection

from .mongo_client import PERMITS_COLLECTION, get_collection
from ..domain.models import Permit
from ..domain.errors import PermitNotFoundError
from ..utils.logger import get_logger
from ..utils.time import utc_now

logger = get_logger(__name__)

# Stamps only written when the upsert creates the document
_CREATE_ONLY_FIELDS = ("created_at", "created_by")


class PermitRepository:
    """Repository for permit operations"""

    def __init__(self, collection: Optional[Collection] = None):
        self._permits: Collection = collection if collection is not None else get_collection(PERMITS_COLLECTION)

    @staticmethod
    def _to_model(doc: Dict[str, Any]) -> Permit:
        doc.pop("_id", None)
        return Permit.model_validate(doc)

    def get_permit(self, permit_id: str) -> Optional[Permit]:
        """Get permit by ID"""
        doc = self._permits.find_one({"permit_id": permit_id})
        if doc:
            return self._to_model(doc)
        return None

    def get_permit_or_raise(self, permit_id: str) -> Permit:
        """Get permit by ID or raise error"""
        permit = self.get_permit(permit_id)
        if not permit:
            raise PermitNotFoundError(f"Permit {permit_id} not found")
        return permit

    def search_permits(
        self,
        source_systems: Optional[Iterable[str]] = None,
        include_permit_tracking: bool = False
    ) -> List[Permit]:
        """
        Search permits

        Args:
            source_systems: Only permits with a tracking id in one of these systems
            include_permit_tracking: Return the permit_tracking list with each permit

        Returns:
            Matching permits, oldest first
        """
        query: Dict[str, Any] = {}
        if source_systems is not None:
            query["permit_tracking.source_system_kind.source_system"] = {
                "$in": [getattr(s, "value", s) for s in source_systems]
            }

        projection = None if include_permit_tracking else {"permit_tracking": 0}

        docs = self._permits.find(query, projection).sort("created_at", ASCENDING)
        return [self._to_model(doc) for doc in docs]

    def upsert_permit(self, permit: Permit) -> Permit:
        """
        Create or update a permit by permit_id

        The tracking list is left untouched on update when the model does not
        carry one.
        """
        doc = permit.model_dump(mode="json", exclude={"permit_tracking"} if permit.permit_tracking is None else None)
        set_on_insert = {field: doc.pop(field) for field in _CREATE_ONLY_FIELDS if field in doc}
        if set_on_insert.get("created_at") is None:
            set_on_insert["created_at"] = utc_now().isoformat()
        if set_on_insert.get("created_by") is None:
            set_on_insert["created_by"] = permit.updated_by

        result = self._permits.find_one_and_update(
            {"permit_id": permit.permit_id},
            {"$set": doc, "$setOnInsert": set_on_insert},
            upsert=True,
            return_document=True
        )

        logger.info(f"Upserted permit: {permit.permit_id}", extra={"permit_id": permit.permit_id})
        return self._to_model(result)
