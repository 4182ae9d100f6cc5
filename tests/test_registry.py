from __future__ import annotations

import pytest

from pyth_oracle_processor.core import registry as registry_module
from pyth_oracle_processor.core.registry import FeedRegistry
from pyth_oracle_processor.models.shared import AssetType, PriceFeedInfo
from tests.update_cases import BTC_FEED_ID, USDT_FEED_ID

UNKNOWN_FEED_ID = "0x1234ab" + "00" * 29


def test_default_registry_resolves_known_feeds():
    assert registry_module.resolve_symbol(BTC_FEED_ID) == "BTC/USD"
    assert registry_module.resolve_symbol(USDT_FEED_ID[2:].upper()) == "USDT/USD"
    assert registry_module.resolve_symbol(UNKNOWN_FEED_ID) is None
    assert registry_module.resolve_symbol("garbage") is None
    assert len(registry_module.registered_feeds()) == 20


def test_symbol_for_falls_back_to_short_id():
    assert registry_module.symbol_for(UNKNOWN_FEED_ID) == "Unknown(0x1234ab...)"
    assert registry_module.symbol_for(BTC_FEED_ID) == "BTC/USD"


def test_register_rejects_duplicates_unless_replacing():
    registry = FeedRegistry([PriceFeedInfo(BTC_FEED_ID, "BTC/USD")])

    with pytest.raises(ValueError):
        registry.register(PriceFeedInfo(BTC_FEED_ID, "XBT/USD"))

    registry.register(PriceFeedInfo(BTC_FEED_ID, "XBT/USD"), replace=True)
    assert registry.resolve(BTC_FEED_ID) == "XBT/USD"
    assert BTC_FEED_ID in registry
    assert len(registry) == 1


def test_feed_id_for_symbol_or_base():
    registry = FeedRegistry(registry_module.DEFAULT_FEEDS)

    assert registry.feed_id_for("btc") == BTC_FEED_ID
    assert registry.feed_id_for("USDT/USD") == USDT_FEED_ID
    assert registry.feed_id_for("XYZ") is None


def test_lookup_exposes_asset_type():
    info = FeedRegistry(registry_module.DEFAULT_FEEDS).lookup(
        "0x765d2ba906dbc32ca17cc11f5310a89e9ee1f6420508c63861f2f8ba4ee34bb2"
    )

    assert info is not None
    assert info.symbol == "XAU/USD"
    assert info.asset_type is AssetType.COMMODITY
    assert info.base == "XAU"


def test_from_price_feeds_catalog():
    entries = [
        {
            "id": BTC_FEED_ID[2:],
            "attributes": {"symbol": "Crypto.BTC/USD", "asset_type": "Crypto", "description": "BITCOIN / US DOLLAR"},
        },
        {"id": USDT_FEED_ID[2:], "attributes": {"symbol": "FX.USDT/USD", "asset_type": "FX"}},
        {"id": "0x12", "attributes": {"symbol": "Crypto.BAD/USD", "asset_type": "Crypto"}},
        {"id": UNKNOWN_FEED_ID, "attributes": {"symbol": "Rates.US10Y", "asset_type": "Rates"}},
    ]

    registry = FeedRegistry.from_price_feeds(entries)

    assert registry.resolve(BTC_FEED_ID) == "BTC/USD"
    assert registry.lookup(USDT_FEED_ID).asset_type is AssetType.FOREX
    assert len(registry) == 2


def test_price_feed_info_normalizes_and_requires_symbol():
    info = PriceFeedInfo(BTC_FEED_ID[2:].upper(), "BTC/USD")

    assert info.feed_id == BTC_FEED_ID
    with pytest.raises(ValueError):
        PriceFeedInfo(BTC_FEED_ID, "")
    with pytest.raises(ValueError):
        PriceFeedInfo("0x12", "BTC/USD")
