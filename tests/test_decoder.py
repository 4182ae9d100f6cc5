from __future__ import annotations

import pytest

from pyth_oracle_processor.codec.decoder import (
    decode,
    decode_hex,
    enrich_with_slots,
    hex_to_bytes,
    parse_accumulator_update,
)
from pyth_oracle_processor.codec.validation import validate_records
from pyth_oracle_processor.core.errors import (
    BadMagicError,
    ErrorKind,
    InvalidHexPayloadError,
    TruncatedPayloadError,
    UnsupportedMessageTypeError,
    UnsupportedUpdateTypeError,
)
from pyth_oracle_processor.models.price_update import PriceUpdate
from tests.update_cases import (
    BTC,
    ETH,
    RECORDS,
    SLOT,
    USDT,
    build_buffer,
    hermes_latest_payload,
    message_body,
)


@pytest.fixture()
def buffer() -> bytes:
    return build_buffer([message_body(record) for record in RECORDS])


def test_parse_returns_records_in_wire_order(buffer):
    update = parse_accumulator_update(buffer)

    assert update.version == "1.0"
    assert update.update_type == 0
    assert update.updates == RECORDS
    assert update.feed_ids == tuple(record.feed_id for record in RECORDS)


def test_decode_reports_metadata(buffer):
    result = decode(buffer)

    assert result.ok
    assert result.value == RECORDS
    assert result.warnings == ()
    assert result.metadata["feed_count"] == 3
    assert result.metadata["size"] == len(buffer)


def test_decode_is_idempotent(buffer):
    assert decode(buffer) == decode(buffer)


def test_decode_preserves_wide_integers():
    record = PriceUpdate(
        feed_id=BTC.feed_id,
        price=-(1 << 63),
        confidence=(1 << 64) - 1,
        exponent=-(1 << 31),
        publish_time=(1 << 64) - 1,
        ema_price=(1 << 63) - 1,
        ema_confidence=(1 << 64) - 1,
    )

    (decoded,) = parse_accumulator_update(build_buffer([message_body(record)])).updates

    assert decoded == record
    assert isinstance(decoded.price, int)


@pytest.mark.parametrize(
    "payload",
    [
        build_buffer([message_body(BTC)], magic=b"PNAV"),
        build_buffer([message_body(BTC)], magic=b"\x00\x00\x00\x00"),
        build_buffer([message_body(BTC)], magic=b"UANP"),
        b"\x00" * 4,
        b"GARBAGE!",
        b'{"a":1}\n',
    ],
)
def test_bad_magic_is_rejected(payload):
    with pytest.raises(BadMagicError):
        parse_accumulator_update(payload)

    result = decode(payload)
    assert not result.ok
    assert result.kind is ErrorKind.BAD_MAGIC
    assert result.value is None


def test_truncated_mid_message_fails_instead_of_returning_prefix(buffer):
    cut = buffer[: len(buffer) - 40]

    result = decode(cut)

    assert not result.ok
    assert result.kind is ErrorKind.TRUNCATED
    assert result.value is None
    assert result.metadata["available"] < result.metadata["needed"]


@pytest.mark.parametrize("size", [0, 3, 9, 11, 12])
def test_truncated_header(size, buffer):
    with pytest.raises(TruncatedPayloadError):
        parse_accumulator_update(buffer[:size])


def test_count_larger_than_messages_is_truncated():
    buffer = build_buffer([message_body(BTC)], count=2)

    assert decode(buffer).kind is ErrorKind.TRUNCATED


def test_declared_length_shorter_than_price_message_is_truncated():
    short_body = message_body(BTC)[:40]
    buffer = build_buffer([short_body])

    with pytest.raises(TruncatedPayloadError):
        parse_accumulator_update(buffer)


def test_unsupported_update_type():
    buffer = build_buffer([message_body(BTC)], update_type=1)

    with pytest.raises(UnsupportedUpdateTypeError):
        parse_accumulator_update(buffer)
    assert decode(buffer).kind is ErrorKind.UNSUPPORTED_TYPE


def test_unknown_message_type_fails_decode():
    buffer = build_buffer([message_body(BTC), message_body(ETH, message_type=1)])

    with pytest.raises(UnsupportedMessageTypeError) as excinfo:
        parse_accumulator_update(buffer)
    assert excinfo.value.details["index"] == 1


def test_trailing_header_and_message_extensions_are_skipped():
    bodies = [message_body(BTC, extra=b"\xaa" * 7), message_body(USDT)]
    buffer = build_buffer(bodies, trailing_header=b"\x01\x02\x03")

    update = parse_accumulator_update(buffer)

    assert update.trailing_header == b"\x01\x02\x03"
    assert update.updates == (BTC, USDT)


def test_prev_publish_time_is_read_from_the_wire():
    buffer = build_buffer([message_body(BTC, prev_publish_time=BTC.publish_time - 5)])

    (decoded,) = decode(buffer).unwrap()

    assert decoded.prev_publish_time == BTC.publish_time - 5


def test_version_mismatch_is_a_warning():
    buffer = build_buffer([message_body(BTC)], major=2, minor=3)

    result = decode(buffer)

    assert result.ok
    assert result.value == (BTC,)
    assert result.metadata["version"] == "2.3"
    assert any("Unsupported accumulator version 2.3" in warning for warning in result.warnings)


def test_trailing_bytes_after_last_message_are_a_warning():
    result = decode(build_buffer([message_body(BTC)], tail=b"\x00\x00"))

    assert result.ok
    assert result.warnings == ("2 trailing bytes after the last message were ignored",)


def test_empty_update_decodes_to_no_records():
    result = decode(build_buffer([]))

    assert result.ok
    assert result.value == ()


def test_decode_hex_accepts_prefixed_and_bare(buffer):
    assert decode_hex("0x" + buffer.hex()).value == RECORDS
    assert decode_hex(buffer.hex().upper()).value == RECORDS


def test_decode_hex_rejects_non_hex():
    result = decode_hex("0xnothex")

    assert result.kind is ErrorKind.INVALID_HEX
    with pytest.raises(InvalidHexPayloadError):
        hex_to_bytes("abc")


def test_enrich_with_slots_matches_bare_feed_ids(buffer):
    parsed = hermes_latest_payload(buffer, (BTC, USDT))["parsed"]

    enriched = enrich_with_slots(RECORDS, parsed)

    assert [record.slot for record in enriched] == [SLOT, 0, SLOT]
    assert RECORDS[0].slot == 0


def test_validate_records_accepts_decoded_output(buffer):
    assert validate_records(decode(buffer).unwrap()).is_valid
    assert validate_records([]).is_valid


def test_validate_records_flags_shape_errors():
    bad_id = PriceUpdate("0x1234", 1, 1, -8, 1, 1, 1)
    float_price = PriceUpdate(BTC.feed_id, 1.5, 1, -8, 1, 1, 1)  # type: ignore[arg-type]

    report = validate_records([bad_id, float_price])

    assert not report.is_valid
    assert "Update 0: Invalid feed ID format" in report.errors
    assert "Update 1: Price value is not an integer" in report.errors
    assert validate_records("not a list").errors == ("Decoded updates is not a sequence",)


def test_human_price_is_derived_from_exponent():
    assert BTC.human_price == pytest.approx(61409.93501)
    assert USDT.human_confidence == pytest.approx(0.0005)
    assert BTC.to_dict()["price"] == "6140993501000"
