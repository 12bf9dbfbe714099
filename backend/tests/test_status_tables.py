"""
Tests for the PEACH status tables.
"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from permit_sync.domain.enums import PeachProcessCode, PermitStage, PermitState
from permit_sync.domain.models import StageState
from permit_sync.parsers.status_tables import (
    DEFAULT_TABLES,
    DECISION_CODES,
    GENERIC_TERMINAL_CODES,
    PROCESS_CODE_ORDER,
    STATUS_MAPPINGS,
    StatusTables,
    composite_status_key,
)


class TestDefaultTables:
    """Consistency of the built-in tables"""

    def test_every_referenced_code_is_ranked(self):
        unranked = {code for code in DEFAULT_TABLES.referenced_codes() if DEFAULT_TABLES.rank(code) is None}

        assert unranked == set()

    def test_ranks_follow_process_order(self):
        assert PROCESS_CODE_ORDER["APPLICATION"] == 0
        assert PROCESS_CODE_ORDER["PRE_APPLICATION"] < PROCESS_CODE_ORDER["SUBMITTED"]
        assert PROCESS_CODE_ORDER["ALLOWED"] < PROCESS_CODE_ORDER["ISSUED"]
        assert PROCESS_CODE_ORDER["WITHDRAWN"] == len(PeachProcessCode) - 1
        assert sorted(PROCESS_CODE_ORDER.values()) == list(range(len(PeachProcessCode)))

    def test_generic_terminal_codes(self):
        assert GENERIC_TERMINAL_CODES == frozenset({"REJECTED", "WITHDRAWN"})

    def test_decision_codes(self):
        assert DECISION_CODES == frozenset({"ALLOWED", "DISALLOWED", "OFFERED", "ISSUED", "DECLINED"})

    def test_terminal_codes_only_mapped_through_composite_keys(self):
        for code in GENERIC_TERMINAL_CODES:
            assert code not in STATUS_MAPPINGS

    @pytest.mark.parametrize("status_key,stage,state", [
        ("SUBMITTED", PermitStage.APPLICATION_SUBMISSION, PermitState.INITIAL_REVIEW),
        ("FIRST_NATIONS_CONSULTATION", PermitStage.TECHNICAL_REVIEW, PermitState.IN_PROGRESS),
        ("DECISION_REVIEW", PermitStage.PENDING_DECISION, PermitState.IN_PROGRESS),
        ("DECLINED", PermitStage.POST_DECISION, PermitState.DENIED),
        ("INITIAL_SUBMISSION_REVIEW:REJECTED", PermitStage.APPLICATION_SUBMISSION, PermitState.REJECTED),
        ("DECISION:WITHDRAWN", PermitStage.PENDING_DECISION, PermitState.WITHDRAWN),
    ])
    def test_lookup(self, status_key, stage, state):
        assert DEFAULT_TABLES.lookup(status_key) == StageState(stage=stage, state=state)

    @pytest.mark.parametrize("status_key", ["APPLICATION", "PRE_APPLICATION", "DECISION", "DECISION:REJECTED"])
    def test_unmapped_lookup(self, status_key):
        assert DEFAULT_TABLES.lookup(status_key) is None

    def test_composite_status_key(self):
        assert composite_status_key("TECH_REVIEW_COMMENT", "REJECTED") == "TECH_REVIEW_COMMENT:REJECTED"


class TestReadOnlyTables:
    """Tables cannot be changed at runtime"""

    def test_module_mappings_are_read_only(self):
        with pytest.raises(TypeError):
            STATUS_MAPPINGS["APPLICATION"] = StageState(
                stage=PermitStage.PRE_SUBMISSION, state=PermitState.NONE
            )

    def test_module_order_is_read_only(self):
        with pytest.raises(TypeError):
            PROCESS_CODE_ORDER["NEW_CODE"] = 99

    def test_stage_state_is_frozen(self):
        mapping = DEFAULT_TABLES.lookup("SUBMITTED")

        with pytest.raises(PydanticValidationError):
            mapping.state = PermitState.ISSUED

    def test_tables_copy_their_inputs(self):
        mappings = {"OPENED": StageState(stage=PermitStage.PRE_SUBMISSION, state=PermitState.NONE)}
        tables = StatusTables(status_mappings=mappings, process_code_order={"OPENED": 0})

        mappings["CLOSED"] = StageState(stage=PermitStage.POST_DECISION, state=PermitState.CANCELLED)

        assert tables.lookup("CLOSED") is None
        with pytest.raises(TypeError):
            tables.status_mappings["CLOSED"] = mappings["CLOSED"]

    def test_referenced_codes_include_composite_halves(self):
        tables = StatusTables(
            status_mappings={"REVIEWED:CLOSED": StageState(stage=PermitStage.TECHNICAL_REVIEW, state=PermitState.CANCELLED)},
            process_code_order={},
            generic_terminal_codes=["CLOSED"],
            submitted_code="OPENED",
            decision_codes=["GRANTED"]
        )

        assert tables.referenced_codes() == frozenset({"REVIEWED", "CLOSED", "OPENED", "GRANTED"})
