"""
DealPipeline Engine

Core services for building and tracking a deal's approval pipeline.

Services:
- DepartmentResolver: Which departments must review a deal
- RequirementGenerator: Final approver rule and requirement generation
- PipelineEvaluator: Stage progress, overall status and bottlenecks
- transitions: Requirement state machine and list-level updates
- recommendations: Follow-ups, approver details and department queues

Usage:
    from dealpipeline.engine import (
        generate_requirements,
        evaluate_pipeline,
        record_approval,
    )

    requirements = generate_requirements(42, 250000, "grow", "independent_agency")
    requirements = record_approval(requirements, "42-incentive_review-finance")
    status = evaluate_pipeline(requirements)
"""
from __future__ import annotations

# Resolution and generation
from .department_resolver import (
    BASE_DEPARTMENTS,
    UNCONDITIONAL_DEPARTMENTS,
    DepartmentResolver,
    resolve_departments,
    sorted_departments,
)
from .requirement_generator import (
    DEFAULT_APPROVER_TIMES,
    STAGE_DEPARTMENTS,
    RequirementGenerator,
    determine_final_approver_level,
    generate_requirements,
    plan_approvals,
)

# Evaluation
from .pipeline_evaluator import (
    PipelineEvaluator,
    evaluate_pipeline,
    find_bottlenecks,
    is_unblocked,
    round_half_up_percent,
)

# Lifecycle
from .transitions import (
    TRANSITIONS,
    approve,
    can_transition,
    get_valid_transitions,
    merge_requirements,
    record_approval,
    record_revision_request,
    request_revision,
    reset,
    reset_for_revision,
    transition,
)

# Advisory
from .recommendations import (
    RESUBMIT_RECOMMENDATION,
    department_queue,
    get_approver_details,
    get_follow_up_recommendations,
    get_review_steps,
)

__all__ = [
    # Department Resolver
    "BASE_DEPARTMENTS",
    "UNCONDITIONAL_DEPARTMENTS",
    "DepartmentResolver",
    "resolve_departments",
    "sorted_departments",
    # Requirement Generator
    "DEFAULT_APPROVER_TIMES",
    "STAGE_DEPARTMENTS",
    "RequirementGenerator",
    "determine_final_approver_level",
    "generate_requirements",
    "plan_approvals",
    # Pipeline Evaluator
    "PipelineEvaluator",
    "evaluate_pipeline",
    "find_bottlenecks",
    "is_unblocked",
    "round_half_up_percent",
    # Transitions
    "TRANSITIONS",
    "approve",
    "can_transition",
    "get_valid_transitions",
    "merge_requirements",
    "record_approval",
    "record_revision_request",
    "request_revision",
    "reset",
    "reset_for_revision",
    "transition",
    # Recommendations
    "RESUBMIT_RECOMMENDATION",
    "department_queue",
    "get_approver_details",
    "get_follow_up_recommendations",
    "get_review_steps",
]
