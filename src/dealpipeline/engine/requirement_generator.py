"""
DealPipeline Requirement Generator

Builds the approval requirements for a deal.

Key features:
- Final approver rule (MD vs Executive Committee)
- One requirement per stage, in stage order
- Stable identities and dependency sets for idempotent regeneration

Every stage currently receives a single requirement: finance for incentive
review, trading for margin review, and finance standing in for the MD or
Executive approver at final review. The resolved department set is reported
on the ApprovalPlan but not fanned out into per-department requirements.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Optional, Union

from ..models import (
    ApprovalDepartment,
    ApprovalPlan,
    ApprovalRequirement,
    ApprovalStage,
    DealAttributes,
    FinalApproverLevel,
    PipelineConfig,
    StageDefinition,
)
from ..packs import get_default_config
from .department_resolver import DepartmentResolver, sorted_departments

logger = logging.getLogger(__name__)

# Reviewing department per stage
STAGE_DEPARTMENTS: dict[ApprovalStage, ApprovalDepartment] = {
    ApprovalStage.INCENTIVE_REVIEW: ApprovalDepartment.FINANCE,
    ApprovalStage.MARGIN_REVIEW: ApprovalDepartment.TRADING,
    ApprovalStage.FINAL_REVIEW: ApprovalDepartment.FINANCE,
}

# Fallback durations when a pack leaves approver-level timing blank
DEFAULT_APPROVER_TIMES: dict[FinalApproverLevel, str] = {
    FinalApproverLevel.MD: "1-2 business days",
    FinalApproverLevel.EXECUTIVE: "3-5 business days",
}


@dataclass
class RequirementGenerator:
    """
    Generates approval requirements from deal attributes.

    Usage:
        generator = RequirementGenerator()

        plan = generator.plan(
            deal_id=42,
            total_value=600000,
            deal_type="grow",
            sales_channel="independent_agency",
            incentive_line_items=[{"type": "product_incentive"}],
        )

        plan.approver_level   # FinalApproverLevel.EXECUTIVE
        plan.requirements     # incentive -> margin -> final
    """

    config: PipelineConfig = field(default_factory=get_default_config)

    def determine_final_approver_level(
        self,
        total_value: Union[int, float, Decimal],
        deal_type: Optional[str],
        sales_channel: Optional[str],
    ) -> FinalApproverLevel:
        """
        Apply the final approver rule.

        Executive if any of: value at or above the director ceiling, a deal
        type other than the standard one, or an escalating sales channel.
        Otherwise MD. A non-finite value (NaN, infinity) escalates.
        """
        rule = self.config.final_approval
        value = Decimal(str(total_value))
        if (
            not value.is_finite()
            or value >= rule.director_ceiling
            or deal_type != rule.standard_deal_type
            or sales_channel in rule.escalating_sales_channels
        ):
            return FinalApproverLevel.EXECUTIVE
        return FinalApproverLevel.MD

    def plan(
        self,
        deal_id: Union[int, str],
        total_value: Union[int, float, Decimal],
        deal_type: Optional[str],
        sales_channel: Optional[str],
        incentive_line_items: Optional[Iterable[Any]] = None,
        created_at: Optional[datetime] = None,
    ) -> ApprovalPlan:
        """
        Resolve departments, pick the approver level, and build requirements.

        Args:
            deal_id: Owning deal
            total_value: Total deal value (validated non-negative by the caller)
            deal_type: Deal type tag
            sales_channel: Sales channel tag
            incentive_line_items: Incentive selections on the deal
            created_at: Timestamp stamped on every requirement (defaults to now)

        Returns:
            ApprovalPlan with the resolved departments, approver level, and
            requirements in stage order
        """
        departments = DepartmentResolver(config=self.config).resolve(incentive_line_items)
        approver_level = self.determine_final_approver_level(total_value, deal_type, sales_channel)
        created_at = created_at or datetime.now(timezone.utc)

        requirements: list[ApprovalRequirement] = []
        for stage_def in self.config.stages:
            requirement = self._build_requirement(
                deal_id=deal_id,
                stage_def=stage_def,
                preceding=requirements,
                approver_level=approver_level,
                created_at=created_at,
            )
            requirements.append(requirement)

        logger.debug(
            "Generated %d requirements for deal %s (departments=%s, approver=%s)",
            len(requirements),
            deal_id,
            [d.value for d in sorted_departments(departments)],
            approver_level.value,
        )

        return ApprovalPlan(
            deal_id=str(deal_id),
            departments=departments,
            approver_level=approver_level,
            requirements=tuple(requirements),
        )

    def generate(
        self,
        deal_id: Union[int, str],
        total_value: Union[int, float, Decimal],
        deal_type: Optional[str],
        sales_channel: Optional[str],
        incentive_line_items: Optional[Iterable[Any]] = None,
        created_at: Optional[datetime] = None,
    ) -> list[ApprovalRequirement]:
        """Generate the ordered requirement list for a deal."""
        plan = self.plan(
            deal_id, total_value, deal_type, sales_channel,
            incentive_line_items, created_at,
        )
        return list(plan.requirements)

    def plan_for_deal(
        self,
        deal: DealAttributes,
        created_at: Optional[datetime] = None,
    ) -> ApprovalPlan:
        """Plan from a DealAttributes record."""
        return self.plan(
            deal.deal_id, deal.total_value, deal.deal_type, deal.sales_channel,
            deal.incentives, created_at,
        )

    def _build_requirement(
        self,
        deal_id: Union[int, str],
        stage_def: StageDefinition,
        preceding: list[ApprovalRequirement],
        approver_level: FinalApproverLevel,
        created_at: datetime,
    ) -> ApprovalRequirement:
        """Build the single requirement for one stage."""
        stage = stage_def.stage
        department = STAGE_DEPARTMENTS[stage]
        is_final = stage == ApprovalStage.FINAL_REVIEW

        # Only earlier stages; never within a stage
        dependencies = tuple(r.id for r in preceding if r.stage != stage)

        return ApprovalRequirement.create(
            deal_id=deal_id,
            stage=stage,
            department=department,
            required_for=self._required_for(stage_def, department),
            can_run_parallel=stage_def.can_run_parallel,
            dependencies=dependencies,
            estimated_time=(
                self._approver_time(approver_level) if is_final else stage_def.estimated_time
            ),
            created_at=created_at,
            approver_level=approver_level if is_final else None,
        )

    def _required_for(
        self,
        stage_def: StageDefinition,
        department: ApprovalDepartment,
    ) -> tuple[str, ...]:
        """Stage aspect tags, else the reviewing department's incentive types."""
        if stage_def.required_for:
            return stage_def.required_for
        definition = self.config.get_department(department)
        if definition is None:
            return ()
        return definition.sorted_incentive_types()

    def _approver_time(self, level: FinalApproverLevel) -> str:
        definition = self.config.get_approver_level(level)
        if definition is not None and definition.estimated_time:
            return definition.estimated_time
        return DEFAULT_APPROVER_TIMES[level]


# =============================================================================
# Convenience Functions
# =============================================================================

def determine_final_approver_level(
    total_value: Union[int, float, Decimal],
    deal_type: Optional[str],
    sales_channel: Optional[str],
    config: Optional[PipelineConfig] = None,
) -> FinalApproverLevel:
    """Apply the final approver rule with the given (or default) configuration."""
    generator = RequirementGenerator(config=config or get_default_config())
    return generator.determine_final_approver_level(total_value, deal_type, sales_channel)


def generate_requirements(
    deal_id: Union[int, str],
    total_value: Union[int, float, Decimal],
    deal_type: Optional[str],
    sales_channel: Optional[str],
    incentive_line_items: Optional[Iterable[Any]] = None,
    config: Optional[PipelineConfig] = None,
    created_at: Optional[datetime] = None,
) -> list[ApprovalRequirement]:
    """
    Generate approval requirements for a deal.

    Convenience function that creates a temporary generator.
    """
    generator = RequirementGenerator(config=config or get_default_config())
    return generator.generate(
        deal_id, total_value, deal_type, sales_channel,
        incentive_line_items, created_at,
    )


def plan_approvals(
    deal_id: Union[int, str],
    total_value: Union[int, float, Decimal],
    deal_type: Optional[str],
    sales_channel: Optional[str],
    incentive_line_items: Optional[Iterable[Any]] = None,
    config: Optional[PipelineConfig] = None,
    created_at: Optional[datetime] = None,
) -> ApprovalPlan:
    """
    Build a full ApprovalPlan for a deal.

    Convenience function that creates a temporary generator.
    """
    generator = RequirementGenerator(config=config or get_default_config())
    return generator.plan(
        deal_id, total_value, deal_type, sales_channel,
        incentive_line_items, created_at,
    )
