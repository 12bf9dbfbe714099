"""Domain Models - Pydantic schemas for PEACH records, summaries and permits"""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, ConfigDict

from .enums import PermitPhase, PermitStage, PermitState


# ============================================================================
# PIES Elements (PEACH record export)
# ============================================================================

class PiesEvent(BaseModel):
    """
    PIES event element

    Carries either a date or a datetime start. The parser, not the schema,
    rejects an event without either so that a bad event surfaces as a typed
    error at the point it is used.
    """
    model_config = ConfigDict(extra="ignore", frozen=True)

    start_date: Optional[str] = Field(None, description="RFC 3339 date, e.g. 2024-12-01")
    start_datetime: Optional[str] = Field(None, description="RFC 3339 UTC datetime")
    end_date: Optional[str] = None
    end_datetime: Optional[str] = None


class Coding(BaseModel):
    """A code symbol from a PIES code system"""
    model_config = ConfigDict(extra="ignore", frozen=True)

    code: str = Field(..., description="Primary code value")
    code_display: Optional[str] = Field(None, description="Human readable code name")
    code_set: List[str] = Field(default_factory=list, description="Ancestor trail ending in code")
    code_system: Optional[str] = Field(None, description="Code system URI")


class Process(Coding):
    """PIES process element"""
    status: Optional[str] = None
    status_code: Optional[str] = None
    status_description: Optional[str] = None


class ProcessEvent(BaseModel):
    """A process transition at a point in time"""
    model_config = ConfigDict(extra="ignore", frozen=True)

    event: PiesEvent
    process: Process


class CodingEvent(BaseModel):
    """A hold/pause coding at a point in time"""
    model_config = ConfigDict(extra="ignore", frozen=True)

    event: PiesEvent
    coding: Coding


class PeachRecord(BaseModel):
    """PIES record message for one permit application in a source system"""
    model_config = ConfigDict(extra="ignore")

    transaction_id: Optional[str] = None
    version: Optional[str] = None
    kind: Optional[str] = "Record"
    system_id: str = Field(..., description="ITSM code of the source system")
    record_id: str = Field(..., description="Record key within the source system")
    record_kind: Optional[str] = None
    process_event_set: List[ProcessEvent] = Field(default_factory=list)
    on_hold_event_set: List[CodingEvent] = Field(default_factory=list)

    @property
    def system_record_id(self) -> str:
        """Composite key used to index batch summaries"""
        return self.system_id + self.record_id


# ============================================================================
# Summaries
# ============================================================================

class StageState(BaseModel):
    """One status mapping target"""
    model_config = ConfigDict(frozen=True)

    stage: PermitStage
    state: PermitState


class StatusResult(BaseModel):
    """Derived status for one process event; stage/state are None when unmapped"""
    phase: PermitPhase = PermitPhase.APPLICATION
    stage: Optional[PermitStage] = None
    state: Optional[PermitState] = None

    @property
    def is_mapped(self) -> bool:
        return self.stage is not None and self.state is not None


class RecordEvents(BaseModel):
    """Events picked from a record by rank"""
    process_event: ProcessEvent
    on_hold_event: Optional[CodingEvent] = None


class PeachSummary(BaseModel):
    """Compact permit status for one PEACH record"""
    stage: PermitStage
    state: PermitState
    submitted_date: Optional[str] = None
    submitted_time: Optional[str] = None
    decision_date: Optional[str] = None
    decision_time: Optional[str] = None
    status_last_changed: str
    status_last_changed_time: Optional[str] = None


# ============================================================================
# Permits
# ============================================================================

class SourceSystemKind(BaseModel):
    """A kind of tracking id issued by a source system"""
    model_config = ConfigDict(extra="ignore")

    source_system_kind_id: Optional[int] = None
    source_system: Optional[str] = Field(None, description="ITSM code of the source system")
    description: Optional[str] = Field(None, description="Tracking id name, e.g. 'Tracking Number'")
    integrated: bool = False
    kind: Optional[str] = None


class PermitTracking(BaseModel):
    """A tracking id that links a permit to a source system record"""
    model_config = ConfigDict(extra="ignore")

    permit_tracking_id: Optional[int] = None
    permit_id: Optional[str] = None
    tracking_id: Optional[str] = None
    shown_to_proponent: bool = False
    source_system_kind_id: Optional[int] = None
    source_system_kind: Optional[SourceSystemKind] = None


class Permit(BaseModel):
    """Permit document"""
    model_config = ConfigDict(extra="ignore")

    permit_id: str
    permit_type_id: Optional[int] = None
    activity_id: Optional[str] = None
    issued_permit_id: Optional[str] = None
    needed: Optional[str] = None
    stage: Optional[PermitStage] = PermitStage.PRE_SUBMISSION
    state: Optional[PermitState] = PermitState.NONE

    submitted_date: Optional[str] = None
    submitted_time: Optional[str] = None
    decision_date: Optional[str] = None
    decision_time: Optional[str] = None
    status_last_changed: Optional[str] = None
    status_last_changed_time: Optional[str] = None
    status_last_verified: Optional[str] = None
    status_last_verified_time: Optional[str] = None

    created_at: Optional[datetime] = None
    created_by: Optional[str] = None
    updated_at: Optional[datetime] = None
    updated_by: Optional[str] = None

    permit_tracking: Optional[List[PermitTracking]] = None


class PeachSyncResult(BaseModel):
    """Counters for one sync run"""
    checked: int = Field(0, description="Permits returned by the search")
    fetched: int = Field(0, description="PEACH records fetched")
    failed: int = Field(0, description="PEACH fetches that failed")
    updated: int = Field(0, description="Permits upserted")
    unchanged: int = Field(0, description="Permits already in sync")
    skipped: int = Field(0, description="Permits with no tracking id or no mapped PEACH status")
