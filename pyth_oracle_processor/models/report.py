"""Report models produced by the price update pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .price_update import EncodedUpdate, ValidationResult


@dataclass(frozen=True, slots=True)
class FeedRow:
    """Display row for one selected feed."""

    index: int
    feed_id: str
    symbol: str
    price: float
    confidence: float
    publish_time: int
    slot: int = 0


@dataclass(frozen=True, slots=True)
class ReencodeReport:
    """Everything needed to submit and audit a re-encoded update."""

    encoded: EncodedUpdate
    entry_point: str
    calldata: str
    estimated_gas: int
    gas_limit: int
    validation: ValidationResult
    rows: tuple[FeedRow, ...] = ()
    summary: dict[str, Any] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return self.validation.is_valid
