"""
Recommendation event model — the unit of the append-only history log.

``RecommendationEvent`` records that the external scoring oracle placed an
item at rank ``position`` with score ``confidence`` for ``subject_id`` at
``timestamp`` (epoch milliseconds). One oracle call yields one event per
returned item, all sharing a timestamp.

Events are frozen: once produced they are never altered or removed.
``event_id`` is the store-assigned sequence number and is ``None`` until
the event has been appended.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

MIN_CONFIDENCE = 0.0
MAX_CONFIDENCE = 100.0
# Last millisecond of 9999-12-31 UTC, the largest instant datetime can render.
MAX_TIMESTAMP_MS = 253_402_300_799_999


class RecommendationEvent(BaseModel):
    """One scored, ranked suggestion of an item for a subject.

    Attributes:
        event_id: Store-assigned insertion sequence; ``None`` before append.
        item_id: Opaque identifier of the recommended bundle/subscription.
        timestamp: Creation time in epoch milliseconds.
        subject_id: Entity (agent/account) the recommendation was made for.
        confidence: Oracle score in ``[0, 100]``.
        position: 1-based rank within the oracle batch.
    """

    model_config = ConfigDict(frozen=True)

    event_id: Optional[int] = None
    item_id: str
    timestamp: int = Field(ge=0, le=MAX_TIMESTAMP_MS)
    subject_id: str
    confidence: float = Field(ge=MIN_CONFIDENCE, le=MAX_CONFIDENCE, allow_inf_nan=False)
    position: int = Field(ge=1)

    @field_validator("item_id", "subject_id")
    @classmethod
    def validate_identifier(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("identifier must be a non-empty string.")
        return v
