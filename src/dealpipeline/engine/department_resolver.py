"""
DealPipeline Department Resolver

Determines which departments must review a deal from its incentive line
items.

Rules:
- Finance always reviews
- Each line item adds every department whose trigger tags include its type
- Trading always reviews (margin review is unconditional)

Malformed line items and unknown incentive types are ignored.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, Optional

from ..models import ApprovalDepartment, PipelineConfig, incentive_type_of
from ..packs import get_default_config

logger = logging.getLogger(__name__)

BASE_DEPARTMENTS: frozenset[ApprovalDepartment] = frozenset({ApprovalDepartment.FINANCE})
UNCONDITIONAL_DEPARTMENTS: frozenset[ApprovalDepartment] = frozenset({ApprovalDepartment.TRADING})


@dataclass
class DepartmentResolver:
    """
    Resolves required review departments for a deal.

    Usage:
        resolver = DepartmentResolver()
        departments = resolver.resolve([{"type": "product_incentive"}])
        # frozenset({finance, product, trading})
    """

    config: PipelineConfig = field(default_factory=get_default_config)

    def resolve(self, incentive_line_items: Optional[Iterable[Any]]) -> frozenset[ApprovalDepartment]:
        """
        Resolve the department set for a sequence of incentive line items.

        Args:
            incentive_line_items: IncentiveLineItem objects or mappings with a
                "type" key (may be None or empty)

        Returns:
            Set of required departments
        """
        departments = set(BASE_DEPARTMENTS)

        for item in incentive_line_items or ():
            incentive_type = incentive_type_of(item)
            if incentive_type is None:
                continue
            matched = self.departments_for(incentive_type)
            if not matched:
                logger.debug("Incentive type %r matches no department", incentive_type)
            departments.update(matched)

        departments.update(UNCONDITIONAL_DEPARTMENTS)
        return frozenset(departments)

    def departments_for(self, incentive_type: str) -> frozenset[ApprovalDepartment]:
        """Departments whose trigger tags include the incentive type."""
        return frozenset(
            dept
            for dept, definition in self.config.departments.items()
            if definition.is_triggered_by(incentive_type)
        )


# =============================================================================
# Convenience Functions
# =============================================================================

def resolve_departments(
    incentive_line_items: Optional[Iterable[Any]],
    config: Optional[PipelineConfig] = None,
) -> frozenset[ApprovalDepartment]:
    """
    Resolve required departments.

    Convenience function that creates a temporary resolver.
    """
    resolver = DepartmentResolver(config=config or get_default_config())
    return resolver.resolve(incentive_line_items)


def sorted_departments(departments: Iterable[ApprovalDepartment]) -> list[ApprovalDepartment]:
    """Stable serialization order for a department set (by tag)."""
    return sorted(set(departments), key=lambda d: d.value)
