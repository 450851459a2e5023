"""
Tests for DealPipeline requirement transitions.

Tests cover:
- Transition table
- Record-level approve / request revision / reset
- List-level updates including reset_for_revision
- Merging regenerated requirement sets
"""
import logging
from datetime import datetime, timedelta, timezone

import pytest

from dealpipeline.engine import (
    TRANSITIONS,
    approve,
    can_transition,
    evaluate_pipeline,
    generate_requirements,
    get_valid_transitions,
    merge_requirements,
    record_approval,
    record_revision_request,
    request_revision,
    reset,
    reset_for_revision,
)
from dealpipeline.exceptions import InvalidTransitionError, RequirementNotFoundError
from dealpipeline.models import ApprovalStatus, OverallStatus

from tests.conftest import FIXED_TIME, make_chain, make_requirement


PENDING = ApprovalStatus.PENDING
APPROVED = ApprovalStatus.APPROVED
REVISION = ApprovalStatus.REVISION_REQUESTED

LATER = FIXED_TIME + timedelta(days=1)


# =============================================================================
# Transition Table Tests
# =============================================================================

class TestTransitionTable:

    def test_every_status_listed(self):
        assert set(TRANSITIONS) == set(ApprovalStatus)

    def test_pending_transitions(self):
        assert get_valid_transitions(PENDING) == {APPROVED, REVISION}

    def test_approved_is_terminal(self):
        assert get_valid_transitions(APPROVED) == frozenset()

    def test_no_direct_revision_to_approved(self):
        assert not can_transition(REVISION, APPROVED)
        assert can_transition(REVISION, PENDING)

    def test_accepts_string_values(self):
        assert can_transition("pending", "approved")


# =============================================================================
# Record-Level Tests
# =============================================================================

class TestRecordTransitions:

    def test_approve_sets_completed_at(self):
        req = make_requirement()
        approved = approve(req, reviewer="j.doe", at=LATER)

        assert approved.status == APPROVED
        assert approved.completed_at == LATER
        assert approved.reviewer == "j.doe"
        # Input record unchanged
        assert req.status == PENDING
        assert req.completed_at is None

    def test_approve_defaults_timestamp(self):
        approved = approve(make_requirement())
        assert approved.completed_at is not None
        assert approved.completed_at.tzinfo is not None

    def test_request_revision_records_comments(self):
        revised = request_revision(make_requirement(), "Margin too thin", reviewer="trader", at=LATER)

        assert revised.status == REVISION
        assert revised.comments == "Margin too thin"
        assert revised.completed_at == LATER

    def test_reset_clears_completed_at_keeps_comments(self):
        revised = request_revision(make_requirement(), "Fix payment terms", at=LATER)
        pending = reset(revised)

        assert pending.status == PENDING
        assert pending.completed_at is None
        assert pending.comments == "Fix payment terms"

    def test_approve_twice_rejected(self):
        approved = approve(make_requirement())
        with pytest.raises(InvalidTransitionError) as exc:
            approve(approved)
        assert exc.value.code == "DP_INVALID_TRANSITION"
        assert exc.value.deal_id == "42"
        assert exc.value.details["from"] == "approved"

    def test_approve_revision_requested_rejected(self):
        revised = request_revision(make_requirement(), "nope")
        with pytest.raises(InvalidTransitionError):
            approve(revised)

    def test_reset_pending_rejected(self):
        with pytest.raises(InvalidTransitionError):
            reset(make_requirement())

    def test_identity_preserved(self):
        req = make_requirement()
        assert approve(req).id == req.id
        assert approve(req).created_at == req.created_at


# =============================================================================
# List-Level Tests
# =============================================================================

class TestRecordApproval:

    def test_replaces_only_target(self, chain):
        updated = record_approval(chain, chain[0].id, at=LATER)

        assert updated[0].status == APPROVED
        assert updated[1:] == chain[1:]
        assert chain[0].status == PENDING

    def test_unknown_id(self, chain):
        with pytest.raises(RequirementNotFoundError) as exc:
            record_approval(chain, "42-nowhere-finance")
        assert exc.value.details["requirement_id"] == "42-nowhere-finance"

    def test_blocked_approval_allowed_and_logged(self, chain, caplog):
        caplog.set_level(logging.WARNING, logger="dealpipeline")
        updated = record_approval(chain, chain[2].id)

        assert updated[2].status == APPROVED
        assert any("blocked" in r.getMessage() for r in caplog.records)

    def test_unblocked_approval_not_logged(self, chain, caplog):
        caplog.set_level(logging.WARNING, logger="dealpipeline")
        record_approval(chain, chain[0].id)
        assert not caplog.records


class TestRevisionLoop:
    """Full request-revision, reset, approve cycle."""

    def test_reset_for_revision(self):
        a, b, c = make_chain(incentive=APPROVED)
        requirements = record_revision_request([a, b, c], b.id, "Recalculate margin", at=LATER)
        assert evaluate_pipeline(requirements).overall_status == OverallStatus.REVISION_REQUESTED

        requirements = reset_for_revision(requirements, b.id)
        status = evaluate_pipeline(requirements)

        assert requirements[1].status == PENDING
        assert requirements[1].completed_at is None
        assert requirements[1].comments == "Recalculate margin"
        assert status.overall_status == OverallStatus.IN_PROGRESS
        assert status.bottlenecks == [requirements[1]]

    def test_reset_for_revision_requires_revision_state(self, chain):
        with pytest.raises(InvalidTransitionError):
            reset_for_revision(chain, chain[0].id)

    def test_reset_for_revision_unknown_id(self, chain):
        with pytest.raises(RequirementNotFoundError):
            reset_for_revision(chain, "missing")

    def test_full_cycle_to_completion(self):
        requirements = generate_requirements(7, 10000, "grow", "direct", created_at=FIXED_TIME)
        ids = [r.id for r in requirements]

        requirements = record_approval(requirements, ids[0])
        requirements = record_revision_request(requirements, ids[1], "Check pricing")
        requirements = reset_for_revision(requirements, ids[1])
        requirements = record_approval(requirements, ids[1])
        requirements = record_approval(requirements, ids[2], reviewer="md@company.com")

        assert evaluate_pipeline(requirements).overall_status == OverallStatus.COMPLETED


# =============================================================================
# Merge Tests
# =============================================================================

class TestMergeRequirements:
    """Regeneration keeps review state by identity."""

    def test_preserves_status_by_identity(self):
        existing = generate_requirements(42, 1000, "grow", "direct", created_at=FIXED_TIME)
        existing = record_approval(existing, existing[0].id, reviewer="fin", at=LATER)

        regenerated = generate_requirements(
            42, 900000, "grow", "direct", created_at=datetime(2025, 1, 1, tzinfo=timezone.utc),
        )
        merged = merge_requirements(existing, regenerated)

        assert [r.id for r in merged] == [r.id for r in regenerated]
        assert merged[0].status == APPROVED
        assert merged[0].reviewer == "fin"
        assert merged[0].completed_at == LATER
        assert merged[0].created_at == FIXED_TIME
        # Structural fields come from the regenerated record
        assert merged[2].estimated_time == "3-5 business days"

    def test_no_duplicates(self):
        existing = make_chain(incentive=APPROVED)
        merged = merge_requirements(existing, existing + existing)
        assert len(merged) == 3

    def test_new_identity_fresh(self):
        existing = make_chain()[:2]
        merged = merge_requirements(existing, make_chain())
        assert merged[2].status == PENDING

    def test_dropped_identity_logged(self, caplog):
        caplog.set_level(logging.WARNING, logger="dealpipeline")
        stale = make_requirement(id="42-incentive_review-product")
        merged = merge_requirements([stale] + make_chain(), make_chain())

        assert stale.id not in {r.id for r in merged}
        assert any(stale.id in r.getMessage() for r in caplog.records)
