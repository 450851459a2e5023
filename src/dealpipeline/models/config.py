"""
DealPipeline Configuration Tables

Explicit, injectable configuration for the resolver, generator and
evaluator: department trigger tags, stage definitions, the final-approval
escalation rule and approver-level details.

Instances are normally built from a pipeline pack (see dealpipeline.packs);
tests can construct or ``replace`` them directly to substitute alternate
thresholds and tables without touching shared state.
"""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from types import MappingProxyType
from typing import Optional

from .enums import STAGE_ORDER, ApprovalDepartment, ApprovalStage, FinalApproverLevel


@dataclass(frozen=True)
class DepartmentDefinition:
    """
    A reviewing team and the incentive types that trigger its involvement.
    """
    department: ApprovalDepartment
    display_name: str
    description: str = ""
    contact_email: str = ""
    incentive_types: frozenset[str] = frozenset()

    def is_triggered_by(self, incentive_type: str) -> bool:
        return incentive_type in self.incentive_types

    def sorted_incentive_types(self) -> tuple[str, ...]:
        return tuple(sorted(self.incentive_types))


@dataclass(frozen=True)
class StageDefinition:
    """
    One phase of the pipeline.

    Attributes:
        stage: Stage tag
        name: Display name
        description: What is reviewed in this stage
        can_run_parallel: Whether requirements of this stage may proceed together
        required_departments: Departments nominally required
        estimated_time: Informational duration string
        required_for: Aspect tags covered; empty means "use the reviewing
            department's incentive types"
        review_steps: Review checklist per department
    """
    stage: ApprovalStage
    name: str
    description: str = ""
    can_run_parallel: bool = False
    required_departments: tuple[ApprovalDepartment, ...] = ()
    estimated_time: str = ""
    required_for: tuple[str, ...] = ()
    review_steps: Mapping[ApprovalDepartment, tuple[str, ...]] = field(
        default_factory=dict, compare=False, hash=False
    )

    def __post_init__(self) -> None:
        steps = {dept: tuple(items) for dept, items in self.review_steps.items()}
        object.__setattr__(self, "review_steps", MappingProxyType(steps))


@dataclass(frozen=True)
class FinalApprovalRule:
    """
    Escalation rule for final sign-off.

    Any one trigger escalates to Executive:
    - total value at or above ``director_ceiling``
    - deal type other than ``standard_deal_type``
    - sales channel in ``escalating_sales_channels``
    """
    director_ceiling: Decimal = Decimal("500000")
    standard_deal_type: str = "grow"
    escalating_sales_channels: frozenset[str] = frozenset({"holding_company"})


@dataclass(frozen=True)
class ApproverLevelDefinition:
    """Display details for a final approver level."""
    level: FinalApproverLevel
    title: str
    description: str = ""
    estimated_time: str = ""


@dataclass(frozen=True)
class PipelineConfig:
    """
    Complete configuration for one approval pipeline.

    ``stages`` is always held in pipeline order. The lookup tables are held
    as read-only mappings; substitute tables with ``dataclasses.replace``.
    """
    departments: Mapping[ApprovalDepartment, DepartmentDefinition] = field(
        compare=False, hash=False
    )
    stages: tuple[StageDefinition, ...]
    final_approval: FinalApprovalRule
    approver_levels: Mapping[FinalApproverLevel, ApproverLevelDefinition] = field(
        compare=False, hash=False
    )
    pack_id: str = "default"
    pack_version: str = ""
    pack_hash: Optional[str] = None

    def __post_init__(self) -> None:
        ordered = tuple(sorted(self.stages, key=lambda s: STAGE_ORDER.index(s.stage)))
        object.__setattr__(self, "stages", ordered)
        object.__setattr__(self, "departments", MappingProxyType(dict(self.departments)))
        object.__setattr__(self, "approver_levels", MappingProxyType(dict(self.approver_levels)))

    def get_department(self, department: ApprovalDepartment) -> Optional[DepartmentDefinition]:
        return self.departments.get(ApprovalDepartment(department))

    def department_name(self, department: ApprovalDepartment) -> str:
        """Display name for a department, falling back to its tag."""
        definition = self.get_department(department)
        if definition is None:
            return ApprovalDepartment(department).value
        return definition.display_name

    def get_stage(self, stage: ApprovalStage) -> Optional[StageDefinition]:
        for definition in self.stages:
            if definition.stage == stage:
                return definition
        return None

    def get_approver_level(self, level: FinalApproverLevel) -> Optional[ApproverLevelDefinition]:
        return self.approver_levels.get(FinalApproverLevel(level))

    def stage_order(self) -> tuple[ApprovalStage, ...]:
        return tuple(s.stage for s in self.stages)
