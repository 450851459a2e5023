"""
DealPipeline Recommendations

Advisory helpers layered over an evaluated pipeline: follow-up contacts,
approver details, review checklists and per-department work queues.

Nothing here changes requirement state.
"""
from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Optional

from ..models import (
    ApprovalDepartment,
    ApprovalPipelineStatus,
    ApprovalRequirement,
    ApprovalStage,
    ApproverLevelDefinition,
    FinalApproverLevel,
    OverallStatus,
    PipelineConfig,
)
from ..packs import get_default_config
from .pipeline_evaluator import find_bottlenecks
from .requirement_generator import DEFAULT_APPROVER_TIMES

RESUBMIT_RECOMMENDATION = "Address revision requests and resubmit"


def get_follow_up_recommendations(
    status: ApprovalPipelineStatus,
    config: Optional[PipelineConfig] = None,
) -> list[str]:
    """
    Who to chase for each bottleneck.

    Returns one "Contact ..." line per bottleneck, followed by a resubmit
    reminder when any stage has a revision request.
    """
    config = config or get_default_config()
    recommendations: list[str] = []

    for req in status.bottlenecks:
        definition = config.get_department(req.department)
        if definition is None:
            name, contact = req.department.value, ""
        else:
            name, contact = definition.display_name, definition.contact_email

        line = f"Contact {name}"
        if contact:
            line += f" ({contact})"
        if req.required_for:
            line += f" about {', '.join(req.required_for)}"
        recommendations.append(line)

    if status.overall_status == OverallStatus.REVISION_REQUESTED:
        recommendations.append(RESUBMIT_RECOMMENDATION)

    return recommendations


def get_approver_details(
    level: FinalApproverLevel,
    config: Optional[PipelineConfig] = None,
) -> ApproverLevelDefinition:
    """Title, description and expected turnaround for a final approver level."""
    config = config or get_default_config()
    level = FinalApproverLevel(level)
    definition = config.get_approver_level(level)
    if definition is not None:
        return definition
    return ApproverLevelDefinition(
        level=level,
        title=level.value,
        estimated_time=DEFAULT_APPROVER_TIMES[level],
    )


def get_review_steps(
    stage: ApprovalStage,
    department: ApprovalDepartment,
    config: Optional[PipelineConfig] = None,
) -> tuple[str, ...]:
    config = config or get_default_config()
    definition = config.get_stage(ApprovalStage(stage))
    if definition is None:
        return ()
    return definition.review_steps.get(ApprovalDepartment(department), ())


def department_queue(
    requirements: Iterable[ApprovalRequirement],
    department: ApprovalDepartment,
) -> list[ApprovalRequirement]:
    """
    Actionable requirements for one department.

    ``requirements`` may span several deals; identities are unique per deal,
    so dependency lookups never cross deals. The queue is oldest first, ties
    broken by id. Naive timestamps are read as UTC.
    """
    department = ApprovalDepartment(department)
    actionable = [r for r in find_bottlenecks(requirements) if r.department == department]
    return sorted(actionable, key=lambda r: (_as_utc(r.created_at), r.id))


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)
