"""Registry utilities for mapping price feed ids to catalog entries."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, MutableMapping

from ..models.shared import AssetType, PriceFeedInfo, normalize_feed_id, short_feed_id


class FeedRegistry:
    """In-memory catalog of known price feeds keyed by normalized feed id."""

    def __init__(self, feeds: Iterable[PriceFeedInfo] = ()) -> None:
        self._feeds: MutableMapping[str, PriceFeedInfo] = {}
        for info in feeds:
            self.register(info)

    def register(self, info: PriceFeedInfo, *, replace: bool = False) -> None:
        """Register a catalog entry for its feed id."""

        if not replace and info.feed_id in self._feeds:
            raise ValueError(f"Price feed {info.feed_id} already registered")
        self._feeds[info.feed_id] = info

    def lookup(self, feed_id: str) -> PriceFeedInfo | None:
        """Return the entry for ``feed_id`` (any case, with or without ``0x``)."""

        try:
            return self._feeds.get(normalize_feed_id(feed_id))
        except ValueError:
            return None

    def resolve(self, feed_id: str) -> str | None:
        """Return the human symbol for ``feed_id`` or ``None`` when unknown."""

        info = self.lookup(feed_id)
        return info.symbol if info is not None else None

    def symbol_for(self, feed_id: str) -> str:
        """Like :meth:`resolve` but falls back to ``Unknown(0x1234ab...)``."""

        return self.resolve(feed_id) or f"Unknown({short_feed_id(feed_id)})"

    def feed_id_for(self, symbol: str) -> str | None:
        """Reverse lookup by symbol (``BTC/USD``) or base asset (``BTC``)."""

        wanted = symbol.upper()
        for info in self._feeds.values():
            if info.symbol.upper() == wanted or info.base.upper() == wanted:
                return info.feed_id
        return None

    def snapshot(self) -> Mapping[str, PriceFeedInfo]:
        """Return a copy of registered entries."""

        return dict(self._feeds)

    def __len__(self) -> int:
        return len(self._feeds)

    def __contains__(self, feed_id: object) -> bool:
        return isinstance(feed_id, str) and self.lookup(feed_id) is not None

    @classmethod
    def from_price_feeds(cls, entries: Iterable[Mapping[str, Any]]) -> FeedRegistry:
        """Build a registry from the price service catalog payload.

        Entries look like ``{"id": "...", "attributes": {"symbol":
        "Crypto.BTC/USD", "asset_type": "Crypto", ...}}``; malformed entries
        are skipped.
        """

        registry = cls()
        for entry in entries:
            info = _info_from_catalog_entry(entry)
            if info is not None:
                registry.register(info, replace=True)
        return registry


_ASSET_TYPES = {
    "crypto": AssetType.CRYPTO,
    "equity": AssetType.EQUITY,
    "metal": AssetType.COMMODITY,
    "commodities": AssetType.COMMODITY,
    "fx": AssetType.FOREX,
}


def _info_from_catalog_entry(entry: Mapping[str, Any]) -> PriceFeedInfo | None:
    attributes = entry.get("attributes") or {}
    raw_symbol = str(attributes.get("symbol") or "")
    # "Crypto.BTC/USD" -> "BTC/USD"
    symbol = raw_symbol.split(".", 1)[-1]
    asset_type = _ASSET_TYPES.get(str(attributes.get("asset_type") or "").lower())
    if not symbol or asset_type is None:
        return None
    try:
        return PriceFeedInfo(
            feed_id=str(entry.get("id") or ""),
            symbol=symbol,
            description=str(attributes.get("description") or ""),
            asset_type=asset_type,
        )
    except ValueError:
        return None


DEFAULT_FEEDS: tuple[PriceFeedInfo, ...] = (
    PriceFeedInfo(
        "0xe62df6c8b4a85fe1a67db44dc12de5db330f7ac66b72dc658afedf0f4a415b43", "BTC/USD", "Bitcoin"
    ),
    PriceFeedInfo(
        "0xff61491a931112ddf1bd8147cd1b641375f79f5825126d665480874634fd0ace", "ETH/USD", "Ethereum"
    ),
    PriceFeedInfo(
        "0xef0d8b6fda2ceba41da15d4095d1da392a0d2f8ed0c6c7bc0f4cfac8c280b56d", "SOL/USD", "Solana"
    ),
    PriceFeedInfo(
        "0x2b89b9dc8fdf9f34709a5b106b472f0f39bb6ca9ce04b0fd7f2e971688e2e53b", "USDT/USD", "Tether"
    ),
    PriceFeedInfo(
        "0xeaa020c61cc479712813461ce153894a96a6c00b21ed0cfc2798d1f9a9e9c94a", "USDC/USD", "USD Coin"
    ),
    PriceFeedInfo(
        "0x2a01deaec9e51a579277b34b122399984d0bbf57e2458a7e42fecd2829867a0d", "ADA/USD", "Cardano"
    ),
    PriceFeedInfo(
        "0x8ac0c70fff57e9aefdf5edf44b51d62c2d433653cbb2cf5cc06bb115af04d221", "LINK/USD", "Chainlink"
    ),
    PriceFeedInfo(
        "0x78d185a741d07edb3412b09008b7c5cfb9bbbd7d568bf00ba737b456ba171501", "UNI/USD", "Uniswap"
    ),
    PriceFeedInfo(
        "0xdcef50dd0a4cd2dcc17e45df1676dcb336a11a61c69df7a0299b0150c672d25c", "DOGE/USD", "Dogecoin"
    ),
    PriceFeedInfo(
        "0x93da3352f9f1d105fdfe4971cfa80e9dd777bfc5d0f683ebb6e1294b92137bb7", "AVAX/USD", "Avalanche"
    ),
    PriceFeedInfo(
        "0x2f95862b045670cd22bee3114c39763a4a08beeb663b145d283c31d7d1101c4f", "BNB/USD", "BNB"
    ),
    PriceFeedInfo(
        "0x49f6b65cb1de6b10eaf75e7c03ca029c306d0357e91b5311b175084a5ad55688",
        "AAPL/USD",
        "Apple Inc.",
        AssetType.EQUITY,
    ),
    PriceFeedInfo(
        "0x16dad506d7db8da01c87581c87ca897a012a153557d4d578c3b9c9e1bc0632f1",
        "TSLA/USD",
        "Tesla Inc.",
        AssetType.EQUITY,
    ),
    PriceFeedInfo(
        "0xd0ca23c1cc005e004ccf1db5bf76aeb6a49218f43dac3d4b275e92de12ded4d1",
        "MSFT/USD",
        "Microsoft Corp.",
        AssetType.EQUITY,
    ),
    PriceFeedInfo(
        "0xb1073854ed24cbc755dc527418f52b7d271f6cc967bbf8d8129112b18860a593",
        "NVDA/USD",
        "NVIDIA Corp.",
        AssetType.EQUITY,
    ),
    PriceFeedInfo(
        "0xb5d0e0fa58a1f8b81498ae670ce93c872d14434b72c364885d4fa1b257cbb07a",
        "AMZN/USD",
        "Amazon.com Inc.",
        AssetType.EQUITY,
    ),
    PriceFeedInfo(
        "0x765d2ba906dbc32ca17cc11f5310a89e9ee1f6420508c63861f2f8ba4ee34bb2",
        "XAU/USD",
        "Gold",
        AssetType.COMMODITY,
    ),
    PriceFeedInfo(
        "0xf2fb02c32b055c805e7238d628e5e9dadef274376114eb1f012337cabe93871e",
        "XAG/USD",
        "Silver",
        AssetType.COMMODITY,
    ),
    PriceFeedInfo(
        "0x84755269cafa0a552ce2962c5ac7369a4da7aef57a01379b87736698387b793b",
        "EUR/USD",
        "Euro",
        AssetType.FOREX,
    ),
    PriceFeedInfo(
        "0x84c2dde9633d93d1bcad84e7dc41c9d56578b7ec52fabedc1f335d673df0a7c1",
        "GBP/USD",
        "British Pound",
        AssetType.FOREX,
    ),
)

_registry = FeedRegistry(DEFAULT_FEEDS)


def register_feed(info: PriceFeedInfo, *, replace: bool = False) -> None:
    """Register a catalog entry globally."""

    _registry.register(info, replace=replace)


def resolve_symbol(feed_id: str) -> str | None:
    """Resolve ``feed_id`` against the global registry."""

    return _registry.resolve(feed_id)


def symbol_for(feed_id: str) -> str:
    return _registry.symbol_for(feed_id)


def registered_feeds() -> Mapping[str, PriceFeedInfo]:
    """Expose the underlying catalog mapping (primarily for debugging/tests)."""

    return _registry.snapshot()
