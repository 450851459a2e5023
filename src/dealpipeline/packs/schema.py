"""
DealPipeline Pipeline Pack Schemas

Pydantic models for validating pipeline pack YAML/JSON files.

A pipeline pack holds the configuration tables for the approval engine:
which incentive types pull in which departments, how stages are defined,
when final approval escalates to the Executive Committee, and display
details for each approver level. The schemas map to the domain models in
dealpipeline.models.config.

Schema versioning:
- schema_version field tracks breaking changes
- Loaders reject packs with a different major version
"""
from __future__ import annotations

from decimal import Decimal
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


# =============================================================================
# Schema Version
# =============================================================================

SCHEMA_VERSION = "1.0.0"


# =============================================================================
# Enums as Literals (for YAML validation)
# =============================================================================

DepartmentValue = Literal["finance", "trading", "product", "creative", "analytics"]

StageValue = Literal["incentive_review", "margin_review", "final_review"]

ApproverLevelValue = Literal["MD", "Executive"]

REQUIRED_STAGES: tuple[str, ...] = ("incentive_review", "margin_review", "final_review")
REQUIRED_LEVELS: tuple[str, ...] = ("MD", "Executive")


# =============================================================================
# Department / Stage Schemas
# =============================================================================

class DepartmentSchema(BaseModel):
    """Schema for a reviewing department."""
    department: DepartmentValue = Field(..., description="Department tag")
    display_name: str = Field(..., description="Human-readable team name")
    description: str = Field("", description="What the team reviews")
    contact_email: str = Field("", description="Contact channel for follow-ups")
    incentive_types: list[str] = Field(
        default_factory=list,
        description="Incentive-type tags that trigger this department",
    )

    model_config = {"extra": "forbid"}


class StageSchema(BaseModel):
    """Schema for a pipeline stage definition."""
    stage: StageValue = Field(..., description="Stage tag")
    name: str = Field(..., description="Display name")
    description: str = Field("", description="What happens in this stage")
    can_run_parallel: bool = Field(False, description="Whether reviews may proceed together")
    required_departments: list[DepartmentValue] = Field(
        default_factory=list,
        description="Departments nominally required",
    )
    estimated_time: str = Field("", description="Informational duration")
    required_for: list[str] = Field(
        default_factory=list,
        description="Aspect tags covered (empty = department incentive types)",
    )
    review_steps: dict[DepartmentValue, list[str]] = Field(
        default_factory=dict,
        description="Review checklist per department",
    )

    model_config = {"extra": "forbid"}


# =============================================================================
# Final Approval Schemas
# =============================================================================

class FinalApprovalSchema(BaseModel):
    """Schema for the final-approver escalation rule."""
    director_ceiling: Decimal = Field(
        Decimal("500000"),
        description="Deal value at or above which Executive approval is required",
    )
    standard_deal_type: str = Field("grow", description="Canonical non-escalating deal type")
    escalating_sales_channels: list[str] = Field(
        default_factory=lambda: ["holding_company"],
        description="Sales channels that always escalate",
    )

    @field_validator("director_ceiling")
    @classmethod
    def validate_ceiling(cls, v: Decimal) -> Decimal:
        if v < 0:
            raise ValueError("director_ceiling must be non-negative")
        return v

    model_config = {"extra": "forbid"}


class ApproverLevelSchema(BaseModel):
    """Schema for approver level display details."""
    level: ApproverLevelValue = Field(..., description="Approver level tag")
    title: str = Field(..., description="Display title")
    description: str = Field("", description="When this level applies")
    estimated_time: str = Field("", description="Informational duration")

    model_config = {"extra": "forbid"}


# =============================================================================
# Top-Level Pack Schema
# =============================================================================

class PipelinePackSchema(BaseModel):
    """
    Top-level schema for a pipeline pack YAML/JSON file.
    """
    schema_version: str = Field(SCHEMA_VERSION, description="Schema version for compatibility")
    id: str = Field(..., description="Unique identifier (e.g., 'deal-desk-default')")
    name: str = Field(..., description="Human-readable name")
    version: str = Field(..., description="Version string (e.g., '2024.1')")
    description: Optional[str] = None

    departments: list[DepartmentSchema] = Field(..., description="Reviewing departments")
    stages: list[StageSchema] = Field(..., description="Stage definitions")
    final_approval: FinalApprovalSchema = Field(
        default_factory=FinalApprovalSchema,
        description="Final approver escalation rule",
    )
    approver_levels: list[ApproverLevelSchema] = Field(..., description="Approver level details")

    @model_validator(mode="after")
    def validate_tables(self) -> "PipelinePackSchema":
        """Each department, stage and approver level appears at most once; all stages and levels present."""
        departments = [d.department for d in self.departments]
        if len(departments) != len(set(departments)):
            raise ValueError("Duplicate department entries")

        stages = [s.stage for s in self.stages]
        if len(stages) != len(set(stages)):
            raise ValueError("Duplicate stage entries")
        missing_stages = [s for s in REQUIRED_STAGES if s not in stages]
        if missing_stages:
            raise ValueError(f"Missing stage definitions: {', '.join(missing_stages)}")

        levels = [a.level for a in self.approver_levels]
        if len(levels) != len(set(levels)):
            raise ValueError("Duplicate approver level entries")
        missing_levels = [lvl for lvl in REQUIRED_LEVELS if lvl not in levels]
        if missing_levels:
            raise ValueError(f"Missing approver levels: {', '.join(missing_levels)}")

        return self

    model_config = {
        "extra": "forbid",  # Reject unknown fields
    }


# =============================================================================
# Validation Helpers
# =============================================================================

def validate_pipeline_pack(data: dict[str, Any]) -> PipelinePackSchema:
    """
    Validate a pipeline pack dictionary against the schema.

    Raises:
        pydantic.ValidationError: If validation fails
    """
    return PipelinePackSchema.model_validate(data)


def check_schema_version(data: dict[str, Any]) -> bool:
    """Check if a pipeline pack's schema major version is compatible."""
    pack_version = str(data.get("schema_version", SCHEMA_VERSION))
    pack_major = pack_version.split(".")[0]
    current_major = SCHEMA_VERSION.split(".")[0]
    return pack_major == current_major
