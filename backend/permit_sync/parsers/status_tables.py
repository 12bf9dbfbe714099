"""Status Tables - PEACH code to permit status lookups

Built once at import and exposed read-only. Changing a mapping is a code
change, not a configuration reload.
"""
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, Mapping, Optional

from ..domain.enums import PeachProcessCode, PeachTerminatedStage, PermitStage, PermitState
from ..domain.models import StageState

Code = PeachProcessCode


def composite_status_key(previous_code: str, terminal_code: str) -> str:
    """Status key for a terminal code in the context of the stage it ended"""
    return f"{previous_code}:{terminal_code}"


_STATUS_MAPPINGS: Dict[str, StageState] = {
    # Application submission - Initial review
    Code.SUBMITTED.value: StageState(
        stage=PermitStage.APPLICATION_SUBMISSION, state=PermitState.INITIAL_REVIEW
    ),
    Code.SUBMISSION_REVIEW.value: StageState(
        stage=PermitStage.APPLICATION_SUBMISSION, state=PermitState.INITIAL_REVIEW
    ),

    # Technical review - In progress
    Code.TECHNICAL_REVIEW.value: StageState(
        stage=PermitStage.TECHNICAL_REVIEW, state=PermitState.IN_PROGRESS
    ),
    Code.REFERRAL.value: StageState(
        stage=PermitStage.TECHNICAL_REVIEW, state=PermitState.IN_PROGRESS
    ),
    Code.FIRST_NATIONS_CONSULTATION.value: StageState(
        stage=PermitStage.TECHNICAL_REVIEW, state=PermitState.IN_PROGRESS
    ),
    Code.TECH_REVIEW_COMPLETED.value: StageState(
        stage=PermitStage.TECHNICAL_REVIEW, state=PermitState.IN_PROGRESS
    ),

    # Pending decision - In progress
    Code.DECISION_REVIEW.value: StageState(
        stage=PermitStage.PENDING_DECISION, state=PermitState.IN_PROGRESS
    ),

    # Post-decision
    Code.ALLOWED.value: StageState(stage=PermitStage.POST_DECISION, state=PermitState.APPROVED),
    Code.OFFERED.value: StageState(stage=PermitStage.POST_DECISION, state=PermitState.APPROVED),
    Code.DISALLOWED.value: StageState(stage=PermitStage.POST_DECISION, state=PermitState.DENIED),
    Code.DECLINED.value: StageState(stage=PermitStage.POST_DECISION, state=PermitState.DENIED),
    Code.ISSUED.value: StageState(stage=PermitStage.POST_DECISION, state=PermitState.ISSUED),

    # Terminal stages - Rejected
    composite_status_key(Code.INITIAL_SUBMISSION_REVIEW.value, Code.REJECTED.value): StageState(
        stage=PermitStage.APPLICATION_SUBMISSION, state=PermitState.REJECTED
    ),
    composite_status_key(Code.TECH_REVIEW_COMMENT.value, Code.REJECTED.value): StageState(
        stage=PermitStage.TECHNICAL_REVIEW, state=PermitState.REJECTED
    ),

    # Terminal stages - Withdrawn
    composite_status_key(Code.INITIAL_SUBMISSION_REVIEW.value, Code.WITHDRAWN.value): StageState(
        stage=PermitStage.APPLICATION_SUBMISSION, state=PermitState.WITHDRAWN
    ),
    composite_status_key(Code.TECH_REVIEW_COMMENT.value, Code.WITHDRAWN.value): StageState(
        stage=PermitStage.TECHNICAL_REVIEW, state=PermitState.WITHDRAWN
    ),
    composite_status_key(Code.DECISION.value, Code.WITHDRAWN.value): StageState(
        stage=PermitStage.PENDING_DECISION, state=PermitState.WITHDRAWN
    ),
}

STATUS_MAPPINGS: Mapping[str, StageState] = MappingProxyType(_STATUS_MAPPINGS)

# Rank of every known code, in process order (enum declaration order)
PROCESS_CODE_ORDER: Mapping[str, int] = MappingProxyType(
    {code.value: index for index, code in enumerate(PeachProcessCode)}
)

GENERIC_TERMINAL_CODES: FrozenSet[str] = frozenset(code.value for code in PeachTerminatedStage)

SUBMITTED_CODE: str = Code.SUBMITTED.value

DECISION_CODES: FrozenSet[str] = frozenset({
    Code.ALLOWED.value,
    Code.DISALLOWED.value,
    Code.OFFERED.value,
    Code.ISSUED.value,
    Code.DECLINED.value,
})


class StatusTables:
    """
    Read-only bundle of the lookups the PEACH parser runs on

    Tests and callers can build one from synthetic tables instead of the
    module defaults.
    """

    def __init__(
        self,
        status_mappings: Mapping[str, StageState] = STATUS_MAPPINGS,
        process_code_order: Mapping[str, int] = PROCESS_CODE_ORDER,
        generic_terminal_codes: Iterable[str] = GENERIC_TERMINAL_CODES,
        submitted_code: str = SUBMITTED_CODE,
        decision_codes: Iterable[str] = DECISION_CODES
    ):
        self._status_mappings = MappingProxyType(dict(status_mappings))
        self._process_code_order = MappingProxyType(dict(process_code_order))
        self._generic_terminal_codes = frozenset(generic_terminal_codes)
        self._submitted_code = submitted_code
        self._decision_codes = frozenset(decision_codes)

    @property
    def status_mappings(self) -> Mapping[str, StageState]:
        return self._status_mappings

    @property
    def process_code_order(self) -> Mapping[str, int]:
        return self._process_code_order

    @property
    def generic_terminal_codes(self) -> FrozenSet[str]:
        return self._generic_terminal_codes

    @property
    def submitted_code(self) -> str:
        return self._submitted_code

    @property
    def decision_codes(self) -> FrozenSet[str]:
        return self._decision_codes

    def lookup(self, status_key: str) -> Optional[StageState]:
        """Mapped (stage, state) for a status key, None when unmapped"""
        return self._status_mappings.get(status_key)

    def rank(self, code: str) -> Optional[int]:
        """Process order rank of a code, None when the code is unknown"""
        return self._process_code_order.get(code)

    def is_generic_terminal(self, code: str) -> bool:
        return code in self._generic_terminal_codes

    def is_decision(self, code: str) -> bool:
        return code in self._decision_codes

    def referenced_codes(self) -> FrozenSet[str]:
        """Every code the tables mention, including both halves of composite keys"""
        codes = set(self._generic_terminal_codes) | set(self._decision_codes)
        codes.add(self._submitted_code)
        for key in self._status_mappings:
            codes.update(key.split(":"))
        return frozenset(codes)


DEFAULT_TABLES = StatusTables()
