"""
DealPipeline Deal Inputs

The inbound seam: deal attributes and incentive line items supplied by the
surrounding application's deal-record store.
"""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Optional, Union


@dataclass(frozen=True)
class IncentiveLineItem:
    """
    One incentive selected on a deal.

    Only ``type`` drives department resolution; the remaining fields are
    carried for the caller's benefit.
    """
    type: Optional[str]
    value: Optional[Decimal] = None
    option: Optional[str] = None
    notes: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict, compare=False)


LineItemLike = Union[IncentiveLineItem, Mapping[str, Any]]


def incentive_type_of(item: Any) -> Optional[str]:
    """
    Extract the incentive-type tag from a line item.

    Accepts IncentiveLineItem objects or mappings with a ``"type"`` key.
    Returns None for anything malformed: missing tag, empty string,
    non-string tag, or None items.
    """
    if item is None:
        return None
    if isinstance(item, Mapping):
        tag = item.get("type")
    else:
        tag = getattr(item, "type", None)
    if not isinstance(tag, str) or not tag:
        return None
    return tag


@dataclass(frozen=True)
class DealAttributes:
    """Financial and classification attributes used for requirement generation."""
    deal_id: str
    total_value: Decimal
    deal_type: str
    sales_channel: str
    incentives: tuple[LineItemLike, ...] = ()

    @classmethod
    def create(
        cls,
        deal_id: Union[int, str],
        total_value: Union[int, float, Decimal],
        deal_type: str,
        sales_channel: str,
        incentives: Optional[list[LineItemLike]] = None,
    ) -> DealAttributes:
        """Normalize loosely-typed inputs into a DealAttributes record."""
        return cls(
            deal_id=str(deal_id),
            total_value=Decimal(str(total_value)),
            deal_type=deal_type,
            sales_channel=sales_channel,
            incentives=tuple(incentives or ()),
        )
