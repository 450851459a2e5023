"""
Pytest configuration and fixtures for DealPipeline tests.

Provides helper factories and common fixtures matching actual model definitions.
"""
import logging
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from dealpipeline.models import (
    ApprovalDepartment,
    ApprovalRequirement,
    ApprovalStage,
    ApprovalStatus,
    IncentiveLineItem,
    PipelineConfig,
    requirement_id,
)
from dealpipeline.packs import get_default_config


FIXED_TIME = datetime(2024, 6, 10, 9, 0, tzinfo=timezone.utc)


# =============================================================================
# Factory Helpers
# =============================================================================

def make_line_item(
    incentive_type: str,
    value=None,
    option: str = None,
    notes: str = None,
) -> IncentiveLineItem:
    """Create an IncentiveLineItem."""
    return IncentiveLineItem(
        type=incentive_type,
        value=Decimal(str(value)) if value is not None else None,
        option=option,
        notes=notes,
    )


def make_requirement(
    stage: ApprovalStage = ApprovalStage.INCENTIVE_REVIEW,
    department: ApprovalDepartment = ApprovalDepartment.FINANCE,
    status: ApprovalStatus = ApprovalStatus.PENDING,
    deal_id: str = "42",
    dependencies: tuple = (),
    required_for: tuple = (),
    created_at: datetime = None,
    comments: str = None,
    id: str = None,
) -> ApprovalRequirement:
    """Create an ApprovalRequirement, keeping completed_at consistent with status."""
    created_at = created_at or FIXED_TIME
    return ApprovalRequirement(
        id=id or requirement_id(deal_id, stage, department),
        deal_id=deal_id,
        stage=stage,
        department=department,
        status=status,
        required_for=tuple(required_for),
        dependencies=tuple(dependencies),
        created_at=created_at,
        completed_at=None if status == ApprovalStatus.PENDING else created_at + timedelta(hours=1),
        comments=comments,
    )


def make_chain(
    incentive: ApprovalStatus = ApprovalStatus.PENDING,
    margin: ApprovalStatus = ApprovalStatus.PENDING,
    final: ApprovalStatus = ApprovalStatus.PENDING,
    deal_id: str = "42",
    created_at: datetime = None,
) -> list[ApprovalRequirement]:
    """
    Three-stage chain shaped like generator output.

    incentive (finance) -> margin (trading) -> final (finance)
    """
    a = make_requirement(
        ApprovalStage.INCENTIVE_REVIEW, ApprovalDepartment.FINANCE, incentive,
        deal_id=deal_id, required_for=("financial_incentive",), created_at=created_at,
    )
    b = make_requirement(
        ApprovalStage.MARGIN_REVIEW, ApprovalDepartment.TRADING, margin,
        deal_id=deal_id, dependencies=(a.id,),
        required_for=("margin_validation", "trading_viability"), created_at=created_at,
    )
    c = make_requirement(
        ApprovalStage.FINAL_REVIEW, ApprovalDepartment.FINANCE, final,
        deal_id=deal_id, dependencies=(a.id, b.id),
        required_for=("final_approval",), created_at=created_at,
    )
    return [a, b, c]


def make_config(**final_approval) -> PipelineConfig:
    """Default configuration with an overridden final-approval rule."""
    config = get_default_config()
    if not final_approval:
        return config
    return replace(config, final_approval=replace(config.final_approval, **final_approval))


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def default_config() -> PipelineConfig:
    """The bundled default pipeline configuration."""
    return get_default_config()


@pytest.fixture
def fixed_time() -> datetime:
    return FIXED_TIME


@pytest.fixture
def chain() -> list[ApprovalRequirement]:
    """An untouched three-stage chain."""
    return make_chain()


@pytest.fixture
def debug_logs(caplog):
    """Capture DealPipeline log records at DEBUG level."""
    caplog.set_level(logging.DEBUG, logger="dealpipeline")
    return caplog
