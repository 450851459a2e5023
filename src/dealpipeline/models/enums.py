"""
DealPipeline Enumerations

Closed tag sets used throughout the approval pipeline. Configuration tables
are keyed by these enums rather than by free-form strings.

All enums inherit from (str, Enum) for JSON serialization compatibility.
"""
from __future__ import annotations

from enum import Enum


# =============================================================================
# Departments
# =============================================================================

class ApprovalDepartment(str, Enum):
    """Teams that review deals."""
    FINANCE = "finance"
    TRADING = "trading"
    PRODUCT = "product"
    CREATIVE = "creative"
    ANALYTICS = "analytics"


# =============================================================================
# Stages
# =============================================================================

class ApprovalStage(str, Enum):
    """
    Ordered phases of the approval pipeline.

    Declaration order is pipeline order.
    """
    INCENTIVE_REVIEW = "incentive_review"
    MARGIN_REVIEW = "margin_review"
    FINAL_REVIEW = "final_review"

    @property
    def position(self) -> int:
        """Position of this stage in pipeline order (0-based)."""
        return STAGE_ORDER.index(self)


STAGE_ORDER: tuple[ApprovalStage, ...] = tuple(ApprovalStage)


# =============================================================================
# Statuses
# =============================================================================

class ApprovalStatus(str, Enum):
    """
    Status of a single approval requirement (or an aggregated stage).

    pending -> approved              (terminal)
    pending -> revision_requested -> pending
    """
    PENDING = "pending"
    APPROVED = "approved"
    REVISION_REQUESTED = "revision_requested"


class OverallStatus(str, Enum):
    """Aggregate status of a deal's whole pipeline."""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    REVISION_REQUESTED = "revision_requested"


# =============================================================================
# Final Approver
# =============================================================================

class FinalApproverLevel(str, Enum):
    """Seniority required to grant final sign-off."""
    MD = "MD"
    EXECUTIVE = "Executive"
