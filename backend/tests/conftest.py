"""
Pytest Configuration and Fixtures

Shared PEACH record and permit fixtures for all tests.
"""

import pytest
from typing import List, Optional

from permit_sync.domain.enums import PeachIntegratedSystem
from permit_sync.domain.models import (
    PeachRecord, PermitTracking, Permit, PiesEvent, Process, ProcessEvent, SourceSystemKind
)


def build_process_event(
    code: str,
    code_set: Optional[List[str]] = None,
    start_date: Optional[str] = None,
    start_datetime: Optional[str] = None
) -> ProcessEvent:
    return ProcessEvent(
        event=PiesEvent(start_date=start_date, start_datetime=start_datetime),
        process=Process(
            code=code,
            code_set=code_set if code_set is not None else ["APPLICATION", code],
            code_system="https://bcgov.github.io/nr-pies/docs/spec/code_system/application_process"
        )
    )


def build_record(
    record_id: str,
    process_events: List[ProcessEvent],
    system_id: str = PeachIntegratedSystem.VFCBC.value
) -> PeachRecord:
    return PeachRecord(
        transaction_id="01950719-b154-72f5-8437-5572df032a69",
        version="0.1.0",
        system_id=system_id,
        record_id=record_id,
        record_kind="Permit",
        process_event_set=process_events,
        on_hold_event_set=[]
    )


def build_tracking(
    tracking_id: Optional[str],
    source_system: Optional[str],
    description: Optional[str]
) -> PermitTracking:
    return PermitTracking(
        tracking_id=tracking_id,
        source_system_kind=SourceSystemKind(
            source_system=source_system,
            description=description,
            integrated=True
        )
    )


# ============================================================================
# PEACH RECORDS
# ============================================================================

@pytest.fixture
def make_process_event():
    """Factory for process events"""
    return build_process_event


@pytest.fixture
def make_record():
    """Factory for PEACH records"""
    return build_record


@pytest.fixture
def submitted_record() -> PeachRecord:
    """Date-only SUBMITTED record"""
    return build_record("REC-SUB", [
        build_process_event("SUBMITTED", ["APPLICATION", "PRE_APPLICATION", "SUBMITTED"], start_date="2024-02-01"),
    ])


@pytest.fixture
def decision_record() -> PeachRecord:
    """ALLOWED record with a datetime"""
    return build_record("REC-DECISION", [
        build_process_event("ALLOWED", ["APPLICATION", "DECISION", "ALLOWED"], start_datetime="2024-03-01T12:00:00.000Z"),
    ])


@pytest.fixture
def issued_record() -> PeachRecord:
    return build_record("REC-ISSUED", [
        build_process_event("ISSUED", ["APPLICATION", "ISSUANCE", "ISSUED"], start_date="2024-07-01"),
    ])


@pytest.fixture
def rejected_record() -> PeachRecord:
    """Rejected out of technical review"""
    return build_record("REC-REJECTED", [
        build_process_event(
            "TECHNICAL_REVIEW",
            ["APPLICATION", "TECH_REVIEW_COMMENT", "TECHNICAL_REVIEW"],
            start_date="2024-04-01"
        ),
        build_process_event("REJECTED", ["APPLICATION", "REJECTED"], start_datetime="2024-05-01T23:12:00.000Z"),
    ])


@pytest.fixture
def unmapped_record() -> PeachRecord:
    """Latest status has no mapping"""
    return build_record("REC-UNMAPPED", [
        build_process_event("PRE_APPLICATION", ["APPLICATION", "PRE_APPLICATION"], start_datetime="2024-06-01T00:00:00.000Z"),
        build_process_event("APPLICATION", ["APPLICATION"], start_datetime="2024-06-01T00:00:00.000Z"),
    ])


# ============================================================================
# PERMITS
# ============================================================================

@pytest.fixture
def make_tracking():
    """Factory for permit tracking ids"""
    return build_tracking


@pytest.fixture
def vfcbc_permit() -> Permit:
    """Permit tracked in VFCBC, not yet synced"""
    return Permit(
        permit_id="PERMIT-123",
        activity_id="ACT-001",
        permit_tracking=[
            build_tracking("REC-123", PeachIntegratedSystem.VFCBC.value, "Tracking Number"),
        ]
    )
