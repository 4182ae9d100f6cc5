"""Protocols describing remote price services that deliver accumulator payloads."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Protocol, Sequence, runtime_checkable

from ...codec.decoder import hex_to_bytes


@dataclass(frozen=True, slots=True)
class PriceServiceResponse:
    """Raw answer of a latest-updates call.

    ``binary`` holds the hex payload chunks exactly as delivered; ``parsed``
    holds the per-feed JSON metadata the service returns alongside them.
    """

    binary: tuple[str, ...]
    encoding: str = "hex"
    parsed: tuple[Mapping[str, Any], ...] = field(default_factory=tuple)

    def payload_bytes(self, index: int = 0) -> bytes:
        """Return the ``index``-th binary chunk as raw bytes."""

        if not self.binary:
            raise ValueError("price service response carries no binary payload")
        return hex_to_bytes(self.binary[index])

    @property
    def feed_ids(self) -> tuple[str, ...]:
        ids = []
        for entry in self.parsed:
            raw = str(entry.get("id") or "").lower()
            if raw:
                ids.append(raw if raw.startswith("0x") else f"0x{raw}")
        return tuple(ids)


@runtime_checkable
class PriceServiceSource(Protocol):
    """Data source capable of serving signed price update payloads."""

    def fetch_latest_updates(self, feed_ids: Sequence[str]) -> PriceServiceResponse:
        """Return the latest accumulator payload covering ``feed_ids``."""

    def fetch_price_feeds(self) -> Sequence[Mapping[str, Any]]:
        """Return catalog metadata for every feed the service publishes."""

    def close(self) -> None:
        """Release any underlying connection resources."""
