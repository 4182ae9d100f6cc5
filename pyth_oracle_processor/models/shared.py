"""Shared domain models used by the codec, the catalog and the price service."""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum

FEED_ID_RE = re.compile(r"^0x[0-9a-fA-F]{64}$")


class AssetType(StrEnum):
    """Asset classes covered by the price feed catalog."""

    CRYPTO = "crypto"
    EQUITY = "equity"
    COMMODITY = "commodity"
    FOREX = "forex"


# Maps a feed id to a human symbol (``BTC/USD``) or ``None`` when unknown.
SymbolResolver = Callable[[str], str | None]


def is_feed_id(value: object) -> bool:
    """Return ``True`` for a ``0x``-prefixed, 64 hex digit string."""

    return isinstance(value, str) and FEED_ID_RE.fullmatch(value) is not None


def normalize_feed_id(value: str) -> str:
    """Return the canonical lowercase ``0x``-prefixed form of a feed id."""

    text = value.strip().lower()
    if not text.startswith("0x"):
        text = f"0x{text}"
    if not is_feed_id(text):
        raise ValueError(f"feed id must be 32 bytes of hex, got {value!r}")
    return text


def short_feed_id(feed_id: str) -> str:
    """Abbreviate a feed id for log lines and fallback symbols."""

    return f"{feed_id[:8]}..."


@dataclass(frozen=True, slots=True)
class PriceFeedInfo:
    """Catalog entry describing a single price stream."""

    feed_id: str
    symbol: str
    description: str = ""
    asset_type: AssetType = AssetType.CRYPTO

    def __post_init__(self) -> None:
        if not self.symbol:
            raise ValueError("PriceFeedInfo symbol must be a non-empty string.")
        object.__setattr__(self, "feed_id", normalize_feed_id(self.feed_id))

    @property
    def base(self) -> str:
        """Return the base asset of the symbol (``BTC`` for ``BTC/USD``)."""

        return self.symbol.split("/", 1)[0]
