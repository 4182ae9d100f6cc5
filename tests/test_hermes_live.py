from __future__ import annotations

import pytest

from pyth_oracle_processor.core.config import AppSettings
from pyth_oracle_processor.core.coordinator import PriceUpdatePipeline
from pyth_oracle_processor.core.errors import PriceServiceTransientError
from pyth_oracle_processor.core.registry import DEFAULT_FEEDS
from pyth_oracle_processor.sources.hermes.client import HermesPriceServiceSource

CRYPTO_FEED_IDS = [info.feed_id for info in DEFAULT_FEEDS[:5]]


@pytest.fixture()
def source():
    source = HermesPriceServiceSource()
    yield source
    source.close()


@pytest.mark.network
@pytest.mark.integration
def test_live_latest_updates_decode(source):
    pipeline = PriceUpdatePipeline(source)
    try:
        response = pipeline.fetch(CRYPTO_FEED_IDS)
    except PriceServiceTransientError as exc:
        pytest.skip(f"Hermes unavailable: {exc}")

    records = pipeline.decode(response).unwrap()

    assert {record.feed_id for record in records} == set(CRYPTO_FEED_IDS)
    assert all(record.publish_time > 0 for record in records)
    assert any(record.slot > 0 for record in records)


@pytest.mark.network
@pytest.mark.integration
def test_live_reencode_round_trips(source):
    pipeline = PriceUpdatePipeline(source, settings=AppSettings())
    try:
        report = pipeline.run(CRYPTO_FEED_IDS, [0, 2, 4])
    except PriceServiceTransientError as exc:
        pytest.skip(f"Hermes unavailable: {exc}")

    assert report.is_valid
    assert report.calldata.startswith("0xa9852bcc")
    assert report.encoded.selected_count == 3
