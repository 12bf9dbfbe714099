"""PEACH Sync Service - Keep permit status in step with PEACH

For every permit tracked in a PEACH integrated system:
1. Pick one tracking id by system priority
2. Fetch the PEACH record for it
3. Summarize the record
4. Upsert the permit when the summary differs from what is stored
"""
from typing import List, Optional, Tuple

from ..config.settings import settings
from ..domain.enums import PeachIntegratedSystem
from ..domain.errors import PeachSummaryNotFoundError
from ..domain.models import PeachRecord, PeachSummary, PeachSyncResult, Permit, PermitTracking
from ..parsers.peach_parser import PeachRecordParser, get_parser
from ..repositories.permit_repo import PermitRepository
from ..utils.logger import get_logger
from ..utils.time import combine_date_time, utc_now
from .peach_service import PeachService

logger = get_logger(__name__)

# (system, tracking id name) in priority order, highest first
PEACH_TRACKING_PRIORITY: Tuple[Tuple[PeachIntegratedSystem, str], ...] = (
    (PeachIntegratedSystem.TANTALIS, "Disposition Transaction ID"),
    (PeachIntegratedSystem.ATS, "Authorization ID"),
    (PeachIntegratedSystem.VFCBC, "Tracking Number"),
)

PEACH_INTEGRATED_SYSTEMS: List[str] = [system.value for system, _ in PEACH_TRACKING_PRIORITY]

# Permit fields a PEACH summary owns
SUMMARY_FIELDS = (
    "stage",
    "state",
    "submitted_date",
    "submitted_time",
    "decision_date",
    "decision_time",
    "status_last_changed",
    "status_last_changed_time",
)


def _priority_index(source_system: str) -> Optional[int]:
    for index, (system, _) in enumerate(PEACH_TRACKING_PRIORITY):
        if system.value == source_system:
            return index
    return None


def find_priority_permit_tracking(permit: Permit) -> Optional[PermitTracking]:
    """
    Pick the tracking id to sync a permit from

    Trackings without a source system, outside the priority list, or whose
    name is not the one PEACH indexes for that system are skipped. Of the
    rest the highest priority wins; the first one wins a tie.
    """
    selected: Optional[PermitTracking] = None
    selected_index = len(PEACH_TRACKING_PRIORITY)

    for tracking in permit.permit_tracking or []:
        kind = tracking.source_system_kind
        if kind is None or not kind.source_system:
            continue

        index = _priority_index(kind.source_system)
        if index is None:
            continue

        _, tracking_name = PEACH_TRACKING_PRIORITY[index]
        if kind.description != tracking_name:
            continue

        if index >= selected_index:
            continue

        selected = tracking
        selected_index = index

    return selected


def has_status_changes(permit: Permit, summary: PeachSummary) -> bool:
    """True when any summary-owned field differs from the stored permit"""
    return any(getattr(permit, field) != getattr(summary, field) for field in SUMMARY_FIELDS)


def apply_summary(permit: Permit, summary: PeachSummary, actor: str) -> Permit:
    """
    Copy of the permit carrying the summary's status

    status_last_verified moves to the new status_last_changed unless the
    stored verification is more recent. The copy carries no permit_tracking,
    so an upsert leaves the stored trackings as they are.
    """
    updates = {field: getattr(summary, field) for field in SUMMARY_FIELDS}

    changed_at = combine_date_time(summary.status_last_changed, summary.status_last_changed_time)
    verified_at = combine_date_time(permit.status_last_verified, permit.status_last_verified_time)
    if verified_at is None or changed_at >= verified_at:
        updates["status_last_verified"] = summary.status_last_changed
        updates["status_last_verified_time"] = summary.status_last_changed_time

    updates["updated_at"] = utc_now()
    updates["updated_by"] = actor
    # Status only; the stored tracking list is never rewritten by a sync
    updates["permit_tracking"] = None
    return permit.model_copy(update=updates)


class PeachSyncService:
    """Service that syncs permit status from PEACH records"""

    def __init__(
        self,
        permit_repo: Optional[PermitRepository] = None,
        peach_service: Optional[PeachService] = None,
        parser: Optional[PeachRecordParser] = None,
        actor: Optional[str] = None
    ):
        self.permit_repo = permit_repo if permit_repo is not None else PermitRepository()
        self.peach_service = peach_service if peach_service is not None else PeachService()
        self.parser = parser if parser is not None else get_parser()
        self.actor = actor or settings.peach_sync_actor

    async def summarize_peach_record(self, record_id: str, system_id: str) -> PeachSummary:
        """
        Fetch and summarize one PEACH record

        Raises:
            PeachSummaryNotFoundError: The record has no displayable status
        """
        record = await self.peach_service.get_peach_record(record_id, system_id)
        summary = self.parser.summarize_record(record)
        if summary is None:
            raise PeachSummaryNotFoundError(
                f"PEACH record {record_id} has no mapped status",
                details={"record_id": record_id, "system_id": system_id}
            )
        return summary

    async def sync_peach_records(self) -> PeachSyncResult:
        """
        Sync every PEACH tracked permit

        Fetch failures are logged and skipped; the remaining permits still sync.
        Every checked permit lands in exactly one of failed, skipped, updated
        or unchanged.

        Returns:
            Counters for the run
        """
        start_time = utc_now()
        result = PeachSyncResult()

        permits = self.permit_repo.search_permits(
            source_systems=PEACH_INTEGRATED_SYSTEMS,
            include_permit_tracking=True
        )
        result.checked = len(permits)

        targets: List[Tuple[Permit, str, str]] = []
        for permit in permits:
            tracking = find_priority_permit_tracking(permit)
            if tracking is None or not tracking.tracking_id:
                result.skipped += 1
                logger.debug(
                    f"Permit {permit.permit_id} has no PEACH tracking id",
                    extra={"permit_id": permit.permit_id}
                )
                continue
            targets.append((permit, tracking.tracking_id, tracking.source_system_kind.source_system))

        outcomes = await self.peach_service.get_peach_records(
            [(record_id, system_id) for _, record_id, system_id in targets]
        )

        records: List[PeachRecord] = []
        fetched_targets: List[Tuple[Permit, str, str]] = []
        for target, outcome in zip(targets, outcomes):
            permit, record_id, system_id = target
            context = {"permit_id": permit.permit_id, "record_id": record_id, "system_id": system_id}
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                result.failed += 1
                logger.warning(
                    f"Failed to fetch PEACH record {record_id}: {outcome}",
                    extra={**context, "error_type": type(outcome).__name__}
                )
                continue
            if outcome.system_record_id != system_id + record_id:
                logger.warning(
                    f"PEACH returned record {outcome.system_id}/{outcome.record_id} for {system_id}/{record_id}",
                    extra=context
                )
            records.append(outcome)
            fetched_targets.append(target)
        result.fetched = len(records)

        parsed_records = self.parser.parse_peach_records(records, skip_invalid=True)

        for permit, record_id, system_id in fetched_targets:
            summary = parsed_records.get(system_id + record_id)
            if summary is None:
                # Unmapped status, invalid record, or a record under another key
                result.skipped += 1
                continue

            if not has_status_changes(permit, summary):
                result.unchanged += 1
                continue

            self.permit_repo.upsert_permit(apply_summary(permit, summary, self.actor))
            result.updated += 1
            logger.info(
                f"Permit {permit.permit_id} updated from PEACH",
                extra={"permit_id": permit.permit_id, "record_id": record_id, "system_id": system_id}
            )

        duration_ms = (utc_now() - start_time).total_seconds() * 1000
        logger.info(
            f"PEACH sync complete: {result.updated} updated, {result.unchanged} unchanged, "
            f"{result.skipped} skipped, {result.failed} failed",
            extra={**result.model_dump(), "duration_ms": round(duration_ms, 2)}
        )
        return result
