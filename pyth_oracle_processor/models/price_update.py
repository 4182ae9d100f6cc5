"""Value objects produced and consumed by the accumulator codec."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Any


def _scaled(value: int, exponent: int) -> float:
    # Decimal keeps the 64-bit mantissa exact until the final conversion.
    return float(Decimal(value).scaleb(exponent))


@dataclass(frozen=True, slots=True)
class PriceUpdate:
    """One decoded price attestation.

    Every wide field is a plain ``int`` holding the fixed-width wire value;
    human readable prices are derived on demand and never stored.
    ``prev_publish_time`` defaults to ``publish_time`` and ``slot`` is only
    filled in by enrichment from the price service metadata.
    """

    feed_id: str
    price: int
    confidence: int
    exponent: int
    publish_time: int
    ema_price: int
    ema_confidence: int
    prev_publish_time: int | None = None
    slot: int = 0

    def __post_init__(self) -> None:
        if self.prev_publish_time is None:
            object.__setattr__(self, "prev_publish_time", self.publish_time)

    @property
    def feed_id_bytes(self) -> bytes:
        """Return the raw feed id, raising ``ValueError`` if it is not hex."""

        text = self.feed_id[2:] if self.feed_id.startswith("0x") else self.feed_id
        return bytes.fromhex(text)

    @property
    def human_price(self) -> float:
        return _scaled(self.price, self.exponent)

    @property
    def human_confidence(self) -> float:
        return _scaled(self.confidence, self.exponent)

    @property
    def human_ema_price(self) -> float:
        return _scaled(self.ema_price, self.exponent)

    def with_slot(self, slot: int) -> PriceUpdate:
        """Return a copy annotated with the given slot."""

        return replace(self, slot=slot)

    def to_dict(self) -> dict[str, Any]:
        """Serialize with integers rendered as strings, safe for JSON."""

        return {
            "feed_id": self.feed_id,
            "price": str(self.price),
            "confidence": str(self.confidence),
            "exponent": self.exponent,
            "publish_time": self.publish_time,
            "prev_publish_time": self.prev_publish_time,
            "ema_price": str(self.ema_price),
            "ema_confidence": str(self.ema_confidence),
            "slot": self.slot,
        }


@dataclass(frozen=True, slots=True)
class AccumulatorUpdate:
    """A fully parsed accumulator buffer: header fields plus its messages."""

    major_version: int
    minor_version: int
    update_type: int
    updates: tuple[PriceUpdate, ...]
    trailing_header: bytes = b""

    @property
    def version(self) -> str:
        return f"{self.major_version}.{self.minor_version}"

    @property
    def feed_ids(self) -> tuple[str, ...]:
        return tuple(update.feed_id for update in self.updates)


@dataclass(frozen=True, slots=True)
class EncodedUpdate:
    """Output of the encoder: the wire payload and the records it carries."""

    payload: bytes
    selected: tuple[PriceUpdate, ...]
    indices: tuple[int, ...]
    original_count: int

    @property
    def hex(self) -> str:
        return f"0x{self.payload.hex()}"

    @property
    def size(self) -> int:
        return len(self.payload)

    @property
    def selected_count(self) -> int:
        return len(self.selected)

    @property
    def feed_ids(self) -> tuple[str, ...]:
        return tuple(update.feed_id for update in self.selected)


@dataclass(frozen=True, slots=True)
class ShapeReport:
    """Result of the per-record shape check."""

    errors: tuple[str, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.errors


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Report produced by the round-trip validator.

    Only ``errors`` fail the result; ``warnings`` are informational.
    """

    errors: tuple[str, ...]
    warnings: tuple[str, ...]
    expected_feeds: int
    actual_feeds: int
    data_size: int
    missing_feed_ids: tuple[str, ...] = ()
    unexpected_feed_ids: tuple[str, ...] = ()
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return not self.errors
