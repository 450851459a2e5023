"""
DealPipeline - Multi-Stage Deal Approval Engine

DealPipeline decides who must sign off on a commercial deal and tracks how
far the deal has progressed through review.

Pipeline:
    incentive_review -> margin_review -> final_review

Key Features:
- Department resolution from incentive line items
- Final approver rule (Managing Director vs Executive Committee)
- Stable requirement identities for idempotent regeneration
- Stage progress, overall status, current stage and bottlenecks
- Explicit revision loop (request revision, reset for re-review)
- Injectable configuration loaded from YAML/JSON pipeline packs

Quick Start:
    from dealpipeline import (
        generate_requirements, evaluate_pipeline,
        record_approval, record_revision_request, reset_for_revision,
    )

    requirements = generate_requirements(
        deal_id=42,
        total_value=250000,
        deal_type="grow",
        sales_channel="independent_agency",
        incentive_line_items=[{"type": "product_incentive"}],
    )

    requirements = record_approval(requirements, "42-incentive_review-finance")
    status = evaluate_pipeline(requirements)

    status.overall_status   # OverallStatus.IN_PROGRESS
    status.next_actions     # ["Waiting for Trading Team approval (...)"]

Version: 0.1.0
"""
from __future__ import annotations

__version__ = "0.1.0"

# =============================================================================
# Core Models (Re-exported for convenience)
# =============================================================================
from .models import (
    # Enums
    STAGE_ORDER,
    ApprovalDepartment,
    ApprovalStage,
    ApprovalStatus,
    FinalApproverLevel,
    OverallStatus,
    # Inputs
    DealAttributes,
    IncentiveLineItem,
    # Requirements
    ApprovalRequirement,
    requirement_id,
    # Projections
    ApprovalPipelineStatus,
    ApprovalPlan,
    StageProgress,
    # Configuration
    ApproverLevelDefinition,
    DepartmentDefinition,
    FinalApprovalRule,
    PipelineConfig,
    StageDefinition,
)

# =============================================================================
# Configuration Packs
# =============================================================================
from .packs import (
    PipelinePackLoader,
    get_default_config,
    load_pipeline_pack,
    load_pipeline_pack_from_string,
)

# =============================================================================
# Engine
# =============================================================================
from .engine import (
    DepartmentResolver,
    PipelineEvaluator,
    RequirementGenerator,
    department_queue,
    determine_final_approver_level,
    evaluate_pipeline,
    generate_requirements,
    get_approver_details,
    get_follow_up_recommendations,
    get_review_steps,
    merge_requirements,
    plan_approvals,
    record_approval,
    record_revision_request,
    reset_for_revision,
    resolve_departments,
)

# =============================================================================
# Utilities
# =============================================================================
from .canon import (
    canonical_json,
    canonical_json_bytes,
    content_hash,
)

# =============================================================================
# Exceptions
# =============================================================================
from .exceptions import (
    DealPipelineError,
    InvalidTransitionError,
    PackLoadError,
    PackValidationError,
    PackVersionMismatch,
    RequirementNotFoundError,
)

# =============================================================================
# Public API
# =============================================================================
__all__ = [
    # Version
    "__version__",
    # Enums
    "STAGE_ORDER",
    "ApprovalDepartment",
    "ApprovalStage",
    "ApprovalStatus",
    "FinalApproverLevel",
    "OverallStatus",
    # Inputs
    "DealAttributes",
    "IncentiveLineItem",
    # Requirements
    "ApprovalRequirement",
    "requirement_id",
    # Projections
    "ApprovalPipelineStatus",
    "ApprovalPlan",
    "StageProgress",
    # Configuration
    "ApproverLevelDefinition",
    "DepartmentDefinition",
    "FinalApprovalRule",
    "PipelineConfig",
    "StageDefinition",
    "PipelinePackLoader",
    "get_default_config",
    "load_pipeline_pack",
    "load_pipeline_pack_from_string",
    # Engine
    "DepartmentResolver",
    "PipelineEvaluator",
    "RequirementGenerator",
    "department_queue",
    "determine_final_approver_level",
    "evaluate_pipeline",
    "generate_requirements",
    "get_approver_details",
    "get_follow_up_recommendations",
    "get_review_steps",
    "merge_requirements",
    "plan_approvals",
    "record_approval",
    "record_revision_request",
    "reset_for_revision",
    "resolve_departments",
    # Utilities
    "canonical_json",
    "canonical_json_bytes",
    "content_hash",
    # Exceptions
    "DealPipelineError",
    "InvalidTransitionError",
    "PackLoadError",
    "PackValidationError",
    "PackVersionMismatch",
    "RequirementNotFoundError",
]
