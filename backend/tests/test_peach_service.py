"""
Tests for the PEACH API client.

Requests are answered by an httpx.MockTransport; nothing leaves the process.
"""

import httpx
import pytest

from permit_sync.domain.errors import PeachApiError, PeachRecordNotFoundError
from permit_sync.domain.models import PeachRecord
from permit_sync.services.peach_service import PeachService

BASE_URL = "http://peach.test/api/v1"


def record_payload(record_id, system_id="ITSM-6117"):
    return {
        "transaction_id": "01950719-b154-72f5-8437-5572df032a69",
        "version": "0.1.0",
        "kind": "Record",
        "system_id": system_id,
        "record_id": record_id,
        "record_kind": "Permit",
        "process_event_set": [
            {
                "event": {"start_date": "2024-02-01"},
                "process": {
                    "code": "SUBMITTED",
                    "code_display": "Submitted",
                    "code_set": ["APPLICATION", "PRE_APPLICATION", "SUBMITTED"],
                    "code_system": "https://bcgov.github.io/nr-pies/docs/spec/code_system/application_process",
                },
            }
        ],
        "on_hold_event_set": [],
    }


def make_service(handler):
    return PeachService(base_url=BASE_URL, timeout=1.0, transport=httpx.MockTransport(handler))


class TestGetPeachRecord:
    """Single record fetches"""

    @pytest.mark.asyncio
    async def test_returns_record(self):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200, json=record_payload("REC-123"))

        record = await make_service(handler).get_peach_record("REC-123", "ITSM-6117")

        assert isinstance(record, PeachRecord)
        assert record.system_record_id == "ITSM-6117REC-123"
        assert record.process_event_set[0].process.code == "SUBMITTED"
        assert requests[0].url.path == "/api/v1/process-events"
        assert requests[0].url.params["recordId"] == "REC-123"
        assert requests[0].url.params["systemId"] == "ITSM-6117"

    @pytest.mark.asyncio
    async def test_system_id_is_optional(self):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200, json=record_payload("REC-123"))

        await make_service(handler).get_peach_record("REC-123")

        assert "systemId" not in requests[0].url.params

    @pytest.mark.asyncio
    async def test_not_found(self):
        service = make_service(lambda request: httpx.Response(404, json={"detail": "Not found"}))

        with pytest.raises(PeachRecordNotFoundError) as exc_info:
            await service.get_peach_record("REC-404", "ITSM-6117")

        assert exc_info.value.details["status"] == 404

    @pytest.mark.asyncio
    async def test_error_response_keeps_upstream_status_and_message(self):
        service = make_service(lambda request: httpx.Response(503, json={"message": "PEACH is down"}))

        with pytest.raises(PeachApiError) as exc_info:
            await service.get_peach_record("REC-123", "ITSM-6117")

        assert exc_info.value.message == "PEACH is down"
        assert exc_info.value.details["status"] == 503

    @pytest.mark.asyncio
    async def test_error_response_without_json_body(self):
        service = make_service(lambda request: httpx.Response(500, text="boom"))

        with pytest.raises(PeachApiError) as exc_info:
            await service.get_peach_record("REC-123", "ITSM-6117")

        assert exc_info.value.message == "boom"

    @pytest.mark.asyncio
    async def test_transport_failure(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(PeachApiError) as exc_info:
            await make_service(handler).get_peach_record("REC-123", "ITSM-6117")

        assert exc_info.value.details["status"] == 502
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_invalid_payload(self):
        service = make_service(lambda request: httpx.Response(200, json={"record_id": "REC-123"}))

        with pytest.raises(PeachApiError) as exc_info:
            await service.get_peach_record("REC-123", "ITSM-6117")

        assert exc_info.value.message == "Invalid PEACH record payload"


class TestGetPeachRecords:
    """Concurrent fetches"""

    @pytest.mark.asyncio
    async def test_results_in_request_order(self):
        def handler(request):
            record_id = request.url.params["recordId"]
            if record_id == "REC-MISSING":
                return httpx.Response(404)
            return httpx.Response(200, json=record_payload(record_id, request.url.params["systemId"]))

        results = await make_service(handler).get_peach_records([
            ("REC-1", "ITSM-6117"),
            ("REC-MISSING", "ITSM-6117"),
            ("REC-2", "ITSM-6072"),
        ])

        assert len(results) == 3
        assert results[0].record_id == "REC-1"
        assert isinstance(results[1], PeachRecordNotFoundError)
        assert results[2].system_record_id == "ITSM-6072REC-2"

    @pytest.mark.asyncio
    async def test_no_records(self):
        results = await make_service(lambda request: httpx.Response(500)).get_peach_records([])

        assert results == []
