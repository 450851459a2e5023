"""
DealPipeline Requirement Transitions

State machine for individual approval requirements:

    pending -> approved                       (terminal)
    pending -> revision_requested -> pending  (revision loop)

There is no direct revision_requested -> approved transition; a revised
requirement must be reset to pending and re-reviewed.

Requirements are immutable, so every operation returns new records. The
list-level helpers replace a single record by identity and leave the rest
of the set untouched.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import replace
from datetime import datetime, timezone
from typing import Optional

from ..exceptions import InvalidTransitionError, RequirementNotFoundError
from ..models import ApprovalRequirement, ApprovalStatus
from .pipeline_evaluator import is_unblocked

logger = logging.getLogger(__name__)


# Valid status transitions
TRANSITIONS: dict[ApprovalStatus, frozenset[ApprovalStatus]] = {
    ApprovalStatus.PENDING: frozenset({
        ApprovalStatus.APPROVED,
        ApprovalStatus.REVISION_REQUESTED,
    }),
    ApprovalStatus.REVISION_REQUESTED: frozenset({ApprovalStatus.PENDING}),
    ApprovalStatus.APPROVED: frozenset(),  # Terminal
}


def get_valid_transitions(current: ApprovalStatus) -> frozenset[ApprovalStatus]:
    """Get valid transitions from a status."""
    return TRANSITIONS.get(ApprovalStatus(current), frozenset())


def can_transition(current: ApprovalStatus, target: ApprovalStatus) -> bool:
    return ApprovalStatus(target) in get_valid_transitions(current)


# =============================================================================
# Record-Level Operations
# =============================================================================

def transition(
    requirement: ApprovalRequirement,
    target: ApprovalStatus,
    reviewer: Optional[str] = None,
    comments: Optional[str] = None,
    at: Optional[datetime] = None,
) -> ApprovalRequirement:
    """
    Move a requirement to a new status.

    ``completed_at`` is stamped when leaving pending and cleared when
    returning to it.

    Raises:
        InvalidTransitionError: If the state machine does not allow the move
    """
    target = ApprovalStatus(target)
    if not can_transition(requirement.status, target):
        raise InvalidTransitionError(
            message=(
                f"Cannot move requirement {requirement.id} "
                f"from {requirement.status.value} to {target.value}"
            ),
            details={
                "requirement_id": requirement.id,
                "from": requirement.status.value,
                "to": target.value,
                "allowed": sorted(s.value for s in get_valid_transitions(requirement.status)),
            },
            deal_id=requirement.deal_id,
        )

    if target == ApprovalStatus.PENDING:
        completed_at = None
    else:
        completed_at = at or datetime.now(timezone.utc)

    return replace(
        requirement,
        status=target,
        completed_at=completed_at,
        reviewer=reviewer if reviewer is not None else requirement.reviewer,
        comments=comments if comments is not None else requirement.comments,
    )


def approve(
    requirement: ApprovalRequirement,
    reviewer: Optional[str] = None,
    comments: Optional[str] = None,
    at: Optional[datetime] = None,
) -> ApprovalRequirement:
    """Approve a pending requirement."""
    return transition(requirement, ApprovalStatus.APPROVED, reviewer, comments, at)


def request_revision(
    requirement: ApprovalRequirement,
    comments: str,
    reviewer: Optional[str] = None,
    at: Optional[datetime] = None,
) -> ApprovalRequirement:
    """Send a pending requirement back to the submitter with comments."""
    return transition(requirement, ApprovalStatus.REVISION_REQUESTED, reviewer, comments, at)


def reset(requirement: ApprovalRequirement) -> ApprovalRequirement:
    """Return a revision-requested requirement to pending for re-review."""
    return transition(requirement, ApprovalStatus.PENDING)


# =============================================================================
# List-Level Operations
# =============================================================================

def _replace_by_id(
    requirements: Iterable[ApprovalRequirement],
    requirement_id: str,
    update,
) -> list[ApprovalRequirement]:
    requirements = list(requirements)
    for index, req in enumerate(requirements):
        if req.id == requirement_id:
            updated = list(requirements)
            updated[index] = update(req, requirements)
            return updated
    raise RequirementNotFoundError(
        message=f"Requirement not found: {requirement_id}",
        details={
            "requirement_id": requirement_id,
            "known_ids": [r.id for r in requirements],
        },
    )


def record_approval(
    requirements: Iterable[ApprovalRequirement],
    requirement_id: str,
    reviewer: Optional[str] = None,
    comments: Optional[str] = None,
    at: Optional[datetime] = None,
) -> list[ApprovalRequirement]:
    """
    Approve one requirement in a set.

    Approving a requirement whose dependencies are not yet approved is
    allowed but logged.

    Raises:
        RequirementNotFoundError: If no requirement has the id
        InvalidTransitionError: If the requirement is not pending
    """
    def _approve(req: ApprovalRequirement, current: list[ApprovalRequirement]) -> ApprovalRequirement:
        statuses = {r.id: r.status for r in current}
        if not is_unblocked(req, statuses):
            logger.warning(
                "Approving blocked requirement %s; dependencies not all approved: %s",
                req.id, list(req.dependencies),
            )
        return approve(req, reviewer=reviewer, comments=comments, at=at)

    return _replace_by_id(requirements, requirement_id, _approve)


def record_revision_request(
    requirements: Iterable[ApprovalRequirement],
    requirement_id: str,
    comments: str,
    reviewer: Optional[str] = None,
    at: Optional[datetime] = None,
) -> list[ApprovalRequirement]:
    """
    Request revision on one requirement in a set.

    Raises:
        RequirementNotFoundError: If no requirement has the id
        InvalidTransitionError: If the requirement is not pending
    """
    return _replace_by_id(
        requirements,
        requirement_id,
        lambda req, _: request_revision(req, comments=comments, reviewer=reviewer, at=at),
    )


def reset_for_revision(
    requirements: Iterable[ApprovalRequirement],
    requirement_id: str,
) -> list[ApprovalRequirement]:
    """
    Reset a revision-requested requirement in a set back to pending.

    The submitter calls this after addressing the reviewer's comments.

    Raises:
        RequirementNotFoundError: If no requirement has the id
        InvalidTransitionError: If the requirement is not revision_requested
    """
    return _replace_by_id(requirements, requirement_id, lambda req, _: reset(req))


def merge_requirements(
    existing: Iterable[ApprovalRequirement],
    regenerated: Iterable[ApprovalRequirement],
) -> list[ApprovalRequirement]:
    """
    Merge a regenerated (desired) requirement set with existing records.

    The result contains exactly the regenerated identities, in regenerated
    order. Where an identity already exists, its review state (status,
    completed_at, comments, reviewer, created_at) is kept and the structural
    fields come from the regenerated record. Existing identities absent from
    the regenerated set are dropped.
    """
    existing_by_id = {r.id: r for r in existing}
    merged: list[ApprovalRequirement] = []
    seen: set[str] = set()

    for fresh in regenerated:
        if fresh.id in seen:
            continue
        seen.add(fresh.id)
        current = existing_by_id.get(fresh.id)
        if current is None:
            merged.append(fresh)
            continue
        merged.append(replace(
            fresh,
            status=current.status,
            completed_at=current.completed_at,
            comments=current.comments,
            reviewer=current.reviewer,
            created_at=current.created_at,
        ))

    dropped = sorted(set(existing_by_id) - seen)
    if dropped:
        logger.warning("Dropped requirements no longer generated: %s", dropped)

    return merged
