"""PEACH Service - Fetch PIES records from the PEACH API"""
import asyncio
from typing import List, Optional, Sequence, Tuple, Union
import httpx

from ..config.settings import settings
from ..domain.errors import PeachApiError, PeachRecordNotFoundError
from ..domain.models import PeachRecord
from ..utils.logger import get_logger

logger = get_logger(__name__)


def _error_message(response: httpx.Response) -> str:
    """Best-effort message from a PEACH error body"""
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        return body.get("detail") or body.get("message") or response.reason_phrase
    return response.reason_phrase


class PeachService:
    """
    Client for the PEACH API

    Each call opens its own AsyncClient so the service holds no connection
    state between sync runs.
    """

    PROCESS_EVENTS_PATH = "/process-events"

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.base_url = (base_url or settings.peach_api_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.peach_api_timeout_seconds
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self._transport
        )

    async def get_peach_record(self, record_id: str, system_id: Optional[str] = None) -> PeachRecord:
        """
        Get a specific PEACH record

        Args:
            record_id: Record ID within the source system
            system_id: ITSM code of the source system

        Returns:
            The PEACH record

        Raises:
            PeachRecordNotFoundError: PEACH has no such record
            PeachApiError: Transport failure, error response or invalid payload
        """
        params = {"recordId": record_id}
        if system_id:
            params["systemId"] = system_id
        context = {"record_id": record_id, "system_id": system_id}

        try:
            async with self._client() as client:
                response = await client.get(self.PROCESS_EVENTS_PATH, params=params)
        except httpx.HTTPError as e:
            logger.error(f"PEACH request failed: {e}", extra=context)
            raise PeachApiError(
                "PEACH request failed",
                details={**context, "status": 502, "error": str(e)}
            ) from e

        if response.status_code == 404:
            raise PeachRecordNotFoundError(
                f"PEACH record {record_id} not found",
                details={**context, "status": 404}
            )

        if response.is_error:
            message = _error_message(response)
            logger.error(f"PEACH API error: {response.status_code} - {message}", extra=context)
            raise PeachApiError(message, details={**context, "status": response.status_code})

        try:
            return PeachRecord.model_validate(response.json())
        except ValueError as e:
            logger.error(f"Invalid PEACH record payload: {e}", extra=context)
            raise PeachApiError(
                "Invalid PEACH record payload",
                details={**context, "status": 502, "error": str(e)}
            ) from e

    async def get_peach_records(
        self,
        system_records: Sequence[Tuple[str, str]]
    ) -> List[Union[PeachRecord, BaseException]]:
        """
        Fetch several records concurrently

        Args:
            system_records: (record_id, system_id) pairs

        Returns:
            One entry per pair, in order: the record, or the exception its fetch raised
        """
        return await asyncio.gather(
            *(self.get_peach_record(record_id, system_id) for record_id, system_id in system_records),
            return_exceptions=True
        )
