"""
Derived trend rows and external item descriptors.

``ItemTrend`` is the per-item aggregate over one reporting window. It is
recomputed on every query and never persisted.

``ItemDescriptor`` is display metadata owned by the host application. The
core only reads it; ``PLACEHOLDER_DESCRIPTOR`` stands in for any id the
host cannot resolve so that a report is never aborted mid-render.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class TrendDirection(StrEnum):
    """Change in recommendation frequency versus the preceding window."""

    UP = "up"
    DOWN = "down"
    STABLE = "stable"


class ItemKind(StrEnum):
    """What sort of catalog entry an item id refers to."""

    BUNDLE = "bundle"
    SUBSCRIPTION = "subscription"


class ItemTrend(BaseModel):
    """Aggregate statistics for one item over a reporting window.

    Attributes:
        item_id: Identifier shared by all aggregated events.
        count: Number of events for the item in the window (always ≥ 1).
        avg_confidence: Arithmetic mean of event confidences.
        avg_position: Arithmetic mean of event rank positions.
        last_recommended_at: Largest event timestamp in the window (epoch ms).
        trend_direction: Count in this window versus the preceding one.
    """

    model_config = ConfigDict(frozen=True)

    item_id: str
    count: int = Field(ge=1)
    avg_confidence: float
    avg_position: float
    last_recommended_at: int
    trend_direction: TrendDirection = TrendDirection.STABLE


class ItemDescriptor(BaseModel):
    """Display metadata for an item, resolved by the host from ``item_id``."""

    model_config = ConfigDict(frozen=True)

    name: str
    category: str
    kind: ItemKind = ItemKind.BUNDLE
    discount_pct: float = 0


PLACEHOLDER_DESCRIPTOR = ItemDescriptor(
    name="Unknown Bundle",
    category="Unknown",
    kind=ItemKind.BUNDLE,
    discount_pct=0,
)

# A joined report row: the aggregate plus its resolved descriptor.
TrendRow = tuple[ItemTrend, ItemDescriptor]
