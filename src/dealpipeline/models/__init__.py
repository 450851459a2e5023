"""
DealPipeline Models

Domain models for the deal approval pipeline:

    from dealpipeline.models import (
        # Enums
        ApprovalDepartment, ApprovalStage, ApprovalStatus,
        OverallStatus, FinalApproverLevel,
        # Inputs
        IncentiveLineItem, DealAttributes,
        # Requirements
        ApprovalRequirement, requirement_id,
        # Projections
        ApprovalPipelineStatus, StageProgress, ApprovalPlan,
        # Configuration
        PipelineConfig, DepartmentDefinition, StageDefinition,
        FinalApprovalRule, ApproverLevelDefinition,
    )
"""
from __future__ import annotations

from .enums import (
    STAGE_ORDER,
    ApprovalDepartment,
    ApprovalStage,
    ApprovalStatus,
    FinalApproverLevel,
    OverallStatus,
)
from .deal import (
    DealAttributes,
    IncentiveLineItem,
    LineItemLike,
    incentive_type_of,
)
from .requirement import (
    ApprovalRequirement,
    requirement_id,
)
from .pipeline import (
    ApprovalPipelineStatus,
    ApprovalPlan,
    StageProgress,
)
from .config import (
    ApproverLevelDefinition,
    DepartmentDefinition,
    FinalApprovalRule,
    PipelineConfig,
    StageDefinition,
)

__all__ = [
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
    "LineItemLike",
    "incentive_type_of",
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
]
