"""
DealPipeline Approval Requirements

The atomic unit of review work: one department's obligation for one stage of
one deal.

Requirements are immutable. Status changes go through
``dealpipeline.engine.transitions`` and produce new records, so a reader
evaluating a requirement set always sees a consistent snapshot.

Invariants:
- ``id`` is derived from (deal_id, stage, department); regenerating the same
  deal always yields the same identities
- ``completed_at`` is set if and only if ``status`` is not pending
- ``dependencies`` only point at requirements of earlier stages
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional, Union

from .enums import ApprovalDepartment, ApprovalStage, ApprovalStatus, FinalApproverLevel


def requirement_id(
    deal_id: Union[int, str],
    stage: ApprovalStage,
    department: ApprovalDepartment,
) -> str:
    """
    Build the stable identity of a requirement.

    Example:
        >>> requirement_id(42, ApprovalStage.MARGIN_REVIEW, ApprovalDepartment.TRADING)
        '42-margin_review-trading'
    """
    return f"{deal_id}-{ApprovalStage(stage).value}-{ApprovalDepartment(department).value}"


@dataclass(frozen=True)
class ApprovalRequirement:
    """
    A single approval obligation.

    Attributes:
        id: Stable composite identity (see requirement_id)
        deal_id: Owning deal
        stage: Pipeline stage this requirement belongs to
        department: Reviewing department
        status: Current review status
        required_for: Incentive-type or aspect tags covered (messaging only)
        can_run_parallel: Copied from the stage definition
        dependencies: Requirement ids that must be approved first
        estimated_time: Informational duration string
        created_at: Generation timestamp
        completed_at: When status left pending (None while pending)
        comments: Reviewer notes, typically set on revision requests
        reviewer: Who last acted on the requirement
        approver_level: Final sign-off tier (final review only)
    """
    id: str
    deal_id: str
    stage: ApprovalStage
    department: ApprovalDepartment
    status: ApprovalStatus = ApprovalStatus.PENDING
    required_for: tuple[str, ...] = ()
    can_run_parallel: bool = False
    dependencies: tuple[str, ...] = ()
    estimated_time: str = ""
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    completed_at: Optional[datetime] = None
    comments: Optional[str] = None
    reviewer: Optional[str] = None
    approver_level: Optional[FinalApproverLevel] = None

    @classmethod
    def create(
        cls,
        deal_id: Union[int, str],
        stage: ApprovalStage,
        department: ApprovalDepartment,
        required_for: tuple[str, ...] = (),
        can_run_parallel: bool = False,
        dependencies: tuple[str, ...] = (),
        estimated_time: str = "",
        created_at: Optional[datetime] = None,
        approver_level: Optional[FinalApproverLevel] = None,
    ) -> ApprovalRequirement:
        """Factory method for a fresh pending requirement with a derived id."""
        return cls(
            id=requirement_id(deal_id, stage, department),
            deal_id=str(deal_id),
            stage=ApprovalStage(stage),
            department=ApprovalDepartment(department),
            status=ApprovalStatus.PENDING,
            required_for=tuple(required_for),
            can_run_parallel=can_run_parallel,
            dependencies=tuple(dependencies),
            estimated_time=estimated_time,
            created_at=created_at or datetime.now(timezone.utc),
            approver_level=approver_level,
        )

    @property
    def is_pending(self) -> bool:
        return self.status == ApprovalStatus.PENDING

    @property
    def is_approved(self) -> bool:
        return self.status == ApprovalStatus.APPROVED

    def to_dict(self) -> dict[str, Any]:
        """Serialize for presentation layers and canonical comparison."""
        return {
            "id": self.id,
            "deal_id": self.deal_id,
            "stage": self.stage.value,
            "department": self.department.value,
            "status": self.status.value,
            "required_for": list(self.required_for),
            "can_run_parallel": self.can_run_parallel,
            "dependencies": list(self.dependencies),
            "estimated_time": self.estimated_time,
            "created_at": self.created_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "comments": self.comments,
            "reviewer": self.reviewer,
            "approver_level": self.approver_level.value if self.approver_level else None,
        }
