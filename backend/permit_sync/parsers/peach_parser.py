"""PEACH Record Parser - Summarize PEACH process event history into permit status

Given a PEACH record:
1. Sort its process events newest first (date, then process order on ties)
2. Map the newest event's code to a (stage, state) pair
3. Resolve generic terminal codes (REJECTED, WITHDRAWN) against the stage
   of the event before them
4. Pick submitted/decision dates from the record's own event order

Pure and synchronous. Inputs are never mutated; sorts run on copies.
"""
from datetime import datetime
from functools import cmp_to_key
from typing import Dict, Iterable, Optional, Tuple

from ..domain.enums import PermitPhase
from ..domain.errors import EmptyEventHistoryError, MissingTimestampError, PeachRecordError
from ..domain.models import (
    CodingEvent, PeachRecord, PeachSummary, PiesEvent, ProcessEvent,
    RecordEvents, StatusResult
)
from ..utils.logger import get_logger
from ..utils.time import compare_dates, parse_date, parse_iso, to_date_string, to_time_string
from .status_tables import DEFAULT_TABLES, StatusTables, composite_status_key

logger = get_logger(__name__)

# Rank given to codes missing from the process order table
UNRANKED = -1


# ============================================================================
# Date/Time Normalization
# ============================================================================

def pies_event_to_date(event: PiesEvent) -> datetime:
    """
    Effective date of a PIES event

    start_datetime wins when present; a bare start_date is midnight UTC.

    Raises:
        MissingTimestampError: If the event has neither start field
    """
    if event.start_datetime:
        return parse_iso(event.start_datetime)
    if event.start_date:
        return parse_date(event.start_date)
    raise MissingTimestampError(
        "PIES event has neither start_datetime nor start_date",
        details={"event": event.model_dump(exclude_none=True)}
    )


def pies_event_to_date_parts(event: PiesEvent) -> Tuple[str, Optional[str]]:
    """
    Split a PIES event into the (date, time) strings stored on permits

    A date-only event has no time of day, so its time is None rather than
    midnight.
    """
    dt = pies_event_to_date(event)
    if event.start_datetime:
        return to_date_string(dt), to_time_string(dt)
    return to_date_string(dt), None


def _optional_date_parts(event: Optional[ProcessEvent]) -> Tuple[Optional[str], Optional[str]]:
    if event is None:
        return None, None
    return pies_event_to_date_parts(event.event)


# ============================================================================
# Parser
# ============================================================================

class PeachRecordParser:
    """
    Summarize PEACH records using a set of status tables

    Holds no state beyond the read-only tables, so one instance can be
    shared between threads.
    """

    def __init__(self, tables: StatusTables = DEFAULT_TABLES):
        self.tables = tables

    def _rank(self, code: str) -> int:
        rank = self.tables.rank(code)
        return UNRANKED if rank is None else rank

    def compare_process_events(
        self,
        a: ProcessEvent,
        b: ProcessEvent,
        descending: bool = False
    ) -> int:
        """
        Order two process events

        Earlier date first; on equal dates the code earlier in the process
        order comes first. descending reverses both keys.

        Returns:
            Negative, zero or positive per comparator convention
        """
        result = compare_dates(pies_event_to_date(a.event), pies_event_to_date(b.event))
        if result == 0:
            result = self._rank(a.process.code) - self._rank(b.process.code)
        return -result if descending else result

    def get_record_events(self, record: PeachRecord, n: int = 0, m: int = 0) -> RecordEvents:
        """
        Get the n-th newest process event and m-th newest on-hold event

        Out of range ranks fall back to the newest event.

        Raises:
            EmptyEventHistoryError: If the record has no process events
        """
        if not record.process_event_set:
            raise EmptyEventHistoryError(
                f"PEACH record {record.system_record_id} has no process events",
                details={"system_id": record.system_id, "record_id": record.record_id}
            )

        process_events = sorted(
            record.process_event_set,
            key=cmp_to_key(lambda a, b: self.compare_process_events(a, b, True))
        )
        # No code order is defined for holds yet, date only
        on_hold_events = sorted(
            record.on_hold_event_set,
            key=cmp_to_key(
                lambda a, b: compare_dates(pies_event_to_date(a.event), pies_event_to_date(b.event), True)
            )
        )

        process_event = process_events[n] if 0 <= n < len(process_events) else process_events[0]
        on_hold_event: Optional[CodingEvent] = None
        if on_hold_events:
            on_hold_event = on_hold_events[m] if 0 <= m < len(on_hold_events) else on_hold_events[0]

        return RecordEvents(process_event=process_event, on_hold_event=on_hold_event)

    def generate_status(self, process_event: ProcessEvent, record: PeachRecord) -> StatusResult:
        """
        Map a process event to (phase, stage, state)

        Generic terminal codes are keyed by the stage code of the event
        before them, e.g. TECH_REVIEW_COMMENT:REJECTED. An unmapped key gives
        an empty stage and state.
        """
        # Single phase in both PEACH and the permit tracker
        phase = PermitPhase.APPLICATION
        status_key = process_event.process.code

        if self.tables.is_generic_terminal(status_key):
            previous_event = self.get_record_events(record, 1).process_event
            code_set = previous_event.process.code_set
            if len(code_set) < 2:
                logger.debug(
                    f"No previous stage for terminal code {status_key}",
                    extra={"system_id": record.system_id, "record_id": record.record_id}
                )
                return StatusResult(phase=phase)
            status_key = composite_status_key(code_set[1], status_key)

        mapping = self.tables.lookup(status_key)
        if mapping is None:
            logger.debug(
                f"Unmapped PEACH status {status_key}",
                extra={"system_id": record.system_id, "record_id": record.record_id, "status_key": status_key}
            )
            return StatusResult(phase=phase)

        return StatusResult(phase=phase, stage=mapping.stage, state=mapping.state)

    def find_submitted_event(self, record: PeachRecord) -> Optional[ProcessEvent]:
        """First submitted event in the record's own order"""
        for process_event in record.process_event_set:
            if process_event.process.code == self.tables.submitted_code:
                return process_event
        return None

    def find_decision_event(self, record: PeachRecord) -> Optional[ProcessEvent]:
        """First decision event in the record's own order"""
        for process_event in record.process_event_set:
            if self.tables.is_decision(process_event.process.code):
                return process_event
        return None

    def summarize_record(self, record: PeachRecord) -> Optional[PeachSummary]:
        """
        Summarize one PEACH record

        Returns:
            The summary, or None when the latest status is unmapped
        """
        events = self.get_record_events(record)
        process_event = events.process_event
        # TODO: fold events.on_hold_event into the status once PEACH publishes hold data

        status = self.generate_status(process_event, record)
        if not status.is_mapped:
            return None

        status_last_changed, status_last_changed_time = pies_event_to_date_parts(process_event.event)
        submitted_date, submitted_time = _optional_date_parts(self.find_submitted_event(record))
        decision_date, decision_time = _optional_date_parts(self.find_decision_event(record))

        return PeachSummary(
            stage=status.stage,
            state=status.state,
            submitted_date=submitted_date,
            submitted_time=submitted_time,
            decision_date=decision_date,
            decision_time=decision_time,
            status_last_changed=status_last_changed,
            status_last_changed_time=status_last_changed_time,
        )

    def parse_peach_records(
        self,
        records: Iterable[PeachRecord],
        skip_invalid: bool = False
    ) -> Dict[str, PeachSummary]:
        """
        Summarize many records keyed by system_id + record_id

        Records without a displayable status are left out. A repeated key
        keeps the last record's summary.

        Args:
            records: PEACH records
            skip_invalid: Log and leave out records that break a summarizer
                precondition instead of raising

        Raises:
            PeachRecordError: A record has no process events or an event
                without a timestamp, unless skip_invalid is set
        """
        parsed_records: Dict[str, PeachSummary] = {}
        for record in records:
            try:
                summary = self.summarize_record(record)
            except PeachRecordError as e:
                if not skip_invalid:
                    raise
                logger.warning(
                    f"Skipping invalid PEACH record: {e.message}",
                    extra={"system_id": record.system_id, "record_id": record.record_id, "error_type": e.error_code}
                )
                continue
            if summary is not None:
                parsed_records[record.system_record_id] = summary
        return parsed_records


# ============================================================================
# Module-level API over the default tables
# ============================================================================

_default_parser = PeachRecordParser()


def get_parser() -> PeachRecordParser:
    """Get the parser bound to the default status tables"""
    return _default_parser


def compare_process_events(a: ProcessEvent, b: ProcessEvent, descending: bool = False) -> int:
    return _default_parser.compare_process_events(a, b, descending)


def get_record_events(record: PeachRecord, n: int = 0, m: int = 0) -> RecordEvents:
    return _default_parser.get_record_events(record, n, m)


def generate_status(process_event: ProcessEvent, record: PeachRecord) -> StatusResult:
    return _default_parser.generate_status(process_event, record)


def summarize_record(record: PeachRecord) -> Optional[PeachSummary]:
    return _default_parser.summarize_record(record)


def parse_peach_records(records: Iterable[PeachRecord], skip_invalid: bool = False) -> Dict[str, PeachSummary]:
    return _default_parser.parse_peach_records(records, skip_invalid)
