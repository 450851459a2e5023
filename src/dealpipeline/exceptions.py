"""
DealPipeline Exception Hierarchy

Errors raised at the engine's fallible seams: loading pipeline packs and
applying explicit status transitions. Resolution, generation and evaluation
are total and never raise for business inputs.

Exception codes follow the pattern: DP_<CATEGORY>_<SPECIFIC>
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class DealPipelineError(Exception):
    """
    Base exception for all DealPipeline errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code (DP_*)
        details: Additional context about the error
        deal_id: Associated deal ID if applicable
    """
    message: str
    code: str = "DP_INTERNAL_ERROR"
    details: dict[str, Any] = field(default_factory=dict)
    deal_id: Optional[str] = None

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def __str__(self) -> str:
        parts = [f"[{self.code}] {self.message}"]
        if self.deal_id:
            parts.append(f"(deal: {self.deal_id})")
        return " ".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Serialize exception for logging/API responses."""
        result: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        if self.deal_id:
            result["deal_id"] = self.deal_id
        return result


# =============================================================================
# Pipeline Pack Errors
# =============================================================================

@dataclass
class PackLoadError(DealPipelineError):
    """Failed to read or parse a pipeline pack."""
    code: str = "DP_PACK_LOAD_ERROR"


@dataclass
class PackValidationError(DealPipelineError):
    """Pipeline pack schema or reference validation failed."""
    code: str = "DP_PACK_VALIDATION_ERROR"


@dataclass
class PackVersionMismatch(DealPipelineError):
    """Pipeline pack schema version is not supported."""
    code: str = "DP_PACK_VERSION_MISMATCH"


# =============================================================================
# Requirement Lifecycle Errors
# =============================================================================

@dataclass
class InvalidTransitionError(DealPipelineError):
    """Requested status change is not allowed by the requirement state machine."""
    code: str = "DP_INVALID_TRANSITION"


@dataclass
class RequirementNotFoundError(DealPipelineError):
    """No requirement with the given identity exists in the set."""
    code: str = "DP_REQUIREMENT_NOT_FOUND"


__all__ = [
    "DealPipelineError",
    "PackLoadError",
    "PackValidationError",
    "PackVersionMismatch",
    "InvalidTransitionError",
    "RequirementNotFoundError",
]
