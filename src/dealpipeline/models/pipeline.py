"""
DealPipeline Pipeline Projections

Derived, read-only views over a requirement set. Nothing here is stored;
every value is recomputed from the current requirements on demand.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from .enums import (
    ApprovalDepartment,
    ApprovalStage,
    ApprovalStatus,
    FinalApproverLevel,
    OverallStatus,
)
from .requirement import ApprovalRequirement


@dataclass(frozen=True)
class StageProgress:
    """Aggregated progress of one stage."""
    stage: ApprovalStage
    status: ApprovalStatus
    progress: int  # 0-100
    completed_count: int
    total_count: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "stage": self.stage.value,
            "status": self.status.value,
            "progress": self.progress,
            "completed_count": self.completed_count,
            "total_count": self.total_count,
        }


@dataclass
class ApprovalPipelineStatus:
    """
    Summary of a deal's approval pipeline.

    Attributes:
        deal_id: Deal the requirements belong to (None for an empty set)
        current_stage: First stage still pending, else final review
        overall_status: Aggregate status across stages
        stages: Per-stage progress in pipeline order
        next_actions: Advisory text, one per bottleneck
        bottlenecks: Pending requirements whose dependencies are all approved
    """
    deal_id: Optional[str] = None
    current_stage: ApprovalStage = ApprovalStage.INCENTIVE_REVIEW
    overall_status: OverallStatus = OverallStatus.PENDING
    stages: list[StageProgress] = field(default_factory=list)
    next_actions: list[str] = field(default_factory=list)
    bottlenecks: list[ApprovalRequirement] = field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        return self.overall_status == OverallStatus.COMPLETED

    def get_stage(self, stage: ApprovalStage) -> Optional[StageProgress]:
        """Get the progress entry for a stage, if the stage has requirements."""
        for entry in self.stages:
            if entry.stage == stage:
                return entry
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "deal_id": self.deal_id,
            "current_stage": self.current_stage.value,
            "overall_status": self.overall_status.value,
            "stages": [s.to_dict() for s in self.stages],
            "next_actions": list(self.next_actions),
            "bottlenecks": [b.to_dict() for b in self.bottlenecks],
        }


@dataclass(frozen=True)
class ApprovalPlan:
    """
    Output of requirement generation for one deal.

    ``departments`` is the full resolved set. Requirements are currently
    generated one per stage (finance stands in for the incentive stage), so
    departments beyond finance and trading appear here without their own
    requirement.
    """
    deal_id: str
    departments: frozenset[ApprovalDepartment]
    approver_level: FinalApproverLevel
    requirements: tuple[ApprovalRequirement, ...]

    def sorted_departments(self) -> list[ApprovalDepartment]:
        return sorted(self.departments, key=lambda d: d.value)

    def to_dict(self) -> dict[str, Any]:
        return {
            "deal_id": self.deal_id,
            "departments": [d.value for d in self.sorted_departments()],
            "approver_level": self.approver_level.value,
            "requirements": [r.to_dict() for r in self.requirements],
        }
