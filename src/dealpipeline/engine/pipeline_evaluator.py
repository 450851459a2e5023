"""
DealPipeline Pipeline Status Evaluator

Projects a deal's requirement set onto a pipeline status summary.

Key features:
- Per-stage progress and status
- Overall status with revision precedence
- Current stage selection
- Bottleneck detection (pending and unblocked)
- Advisory next-action text

The evaluator is a pure function of the requirement list. It never raises
for well-formed input and can be re-run on every status change.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Optional

from ..models import (
    STAGE_ORDER,
    ApprovalPipelineStatus,
    ApprovalRequirement,
    ApprovalStage,
    ApprovalStatus,
    OverallStatus,
    PipelineConfig,
    StageProgress,
)
from ..packs import get_default_config

logger = logging.getLogger(__name__)


def round_half_up_percent(completed: int, total: int) -> int:
    """
    Percentage of completed over total, rounded half up.

    Integer arithmetic so 1/8 gives 13, not banker's 12.
    """
    if total <= 0:
        return 0
    return (completed * 200 + total) // (2 * total)


def is_unblocked(
    requirement: ApprovalRequirement,
    statuses: dict[str, ApprovalStatus],
) -> bool:
    """
    True if every dependency is currently approved.

    A dependency id with no matching requirement counts as not approved.
    """
    return all(
        statuses.get(dep_id) == ApprovalStatus.APPROVED
        for dep_id in requirement.dependencies
    )


def find_bottlenecks(requirements: Iterable[ApprovalRequirement]) -> list[ApprovalRequirement]:
    """
    Pending requirements whose dependencies are all approved.

    Order follows the input order.
    """
    requirements = list(requirements)
    statuses = {r.id: r.status for r in requirements}
    return [
        r for r in requirements
        if r.status == ApprovalStatus.PENDING and is_unblocked(r, statuses)
    ]


@dataclass
class PipelineEvaluator:
    """
    Computes ApprovalPipelineStatus from a requirement list.

    Usage:
        evaluator = PipelineEvaluator()
        status = evaluator.evaluate(requirements)

        status.overall_status   # OverallStatus.IN_PROGRESS
        status.current_stage    # ApprovalStage.MARGIN_REVIEW
        for action in status.next_actions:
            print(action)
    """

    config: PipelineConfig = field(default_factory=get_default_config)

    def evaluate(self, requirements: Iterable[ApprovalRequirement]) -> ApprovalPipelineStatus:
        """
        Evaluate the pipeline status of one deal.

        Args:
            requirements: Full requirement list for the deal (order not significant)

        Returns:
            ApprovalPipelineStatus; defaults when the list is empty
        """
        requirements = list(requirements)
        if not requirements:
            return ApprovalPipelineStatus()

        stages = self.stage_progress(requirements)
        current_stage = self._current_stage(stages)
        overall_status = self._overall_status(stages)
        bottlenecks = find_bottlenecks(requirements)
        next_actions = [self.describe_action(r) for r in bottlenecks]

        status = ApprovalPipelineStatus(
            deal_id=requirements[0].deal_id,
            current_stage=current_stage,
            overall_status=overall_status,
            stages=stages,
            next_actions=next_actions,
            bottlenecks=bottlenecks,
        )
        logger.debug(
            "Evaluated deal %s: overall=%s current=%s bottlenecks=%d",
            status.deal_id, overall_status.value, current_stage.value, len(bottlenecks),
        )
        return status

    def stage_progress(self, requirements: list[ApprovalRequirement]) -> list[StageProgress]:
        """Aggregate requirements per stage, in pipeline order."""
        groups: dict[ApprovalStage, list[ApprovalRequirement]] = {}
        for req in requirements:
            groups.setdefault(req.stage, []).append(req)

        progress: list[StageProgress] = []
        for stage in self._stage_order():
            members = groups.get(stage)
            if not members:
                continue

            completed = sum(1 for r in members if r.status == ApprovalStatus.APPROVED)
            total = len(members)

            if any(r.status == ApprovalStatus.REVISION_REQUESTED for r in members):
                status = ApprovalStatus.REVISION_REQUESTED
            elif completed == total:
                status = ApprovalStatus.APPROVED
            else:
                status = ApprovalStatus.PENDING

            progress.append(StageProgress(
                stage=stage,
                status=status,
                progress=round_half_up_percent(completed, total),
                completed_count=completed,
                total_count=total,
            ))

        return progress

    def describe_action(self, requirement: ApprovalRequirement) -> str:
        """Advisory next-action text for a bottleneck."""
        name = self.config.department_name(requirement.department)
        if requirement.required_for:
            return f"Waiting for {name} approval ({', '.join(requirement.required_for)})"
        return f"Waiting for {name} approval"

    def _stage_order(self) -> tuple[ApprovalStage, ...]:
        order = self.config.stage_order()
        # Stages left out of a custom pack still get reported
        return order + tuple(s for s in STAGE_ORDER if s not in order)

    def _current_stage(self, stages: list[StageProgress]) -> ApprovalStage:
        for entry in stages:
            if entry.status == ApprovalStatus.PENDING:
                return entry.stage
        return ApprovalStage.FINAL_REVIEW

    def _overall_status(self, stages: list[StageProgress]) -> OverallStatus:
        if any(s.status == ApprovalStatus.REVISION_REQUESTED for s in stages):
            return OverallStatus.REVISION_REQUESTED
        if all(s.status == ApprovalStatus.APPROVED for s in stages):
            return OverallStatus.COMPLETED
        if any(s.progress > 0 for s in stages):
            return OverallStatus.IN_PROGRESS
        return OverallStatus.PENDING


# =============================================================================
# Convenience Functions
# =============================================================================

def evaluate_pipeline(
    requirements: Iterable[ApprovalRequirement],
    config: Optional[PipelineConfig] = None,
) -> ApprovalPipelineStatus:
    """
    Evaluate a deal's pipeline status.

    Convenience function that creates a temporary evaluator.
    """
    evaluator = PipelineEvaluator(config=config or get_default_config())
    return evaluator.evaluate(requirements)
