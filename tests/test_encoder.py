from __future__ import annotations

import struct
from dataclasses import replace

import pytest

from pyth_oracle_processor.codec.decoder import decode, parse_accumulator_update
from pyth_oracle_processor.codec.encoder import (
    encode_accumulator_update,
    encode_price_message,
    encode_selected,
    reencode,
    select_records,
)
from pyth_oracle_processor.codec.validation import validate_records
from pyth_oracle_processor.codec.wire import MAX_MESSAGES
from pyth_oracle_processor.core.errors import (
    ErrorKind,
    FieldOutOfRangeError,
    IndexNotFoundError,
    InvalidFeedIdError,
)
from tests.update_cases import BTC, ETH, RECORDS, USDT, build_buffer, message_body, synthetic_record


def test_single_record_round_trip_is_exact():
    encoded = encode_selected([BTC], [0])

    assert encoded.payload[:4] == bytes.fromhex("504e4155")
    assert encoded.hex.startswith("0x504e4155")
    assert decode(encoded.payload).unwrap() == (BTC,)


def test_two_of_three_selection_keeps_order_and_count():
    encoded = encode_selected(RECORDS, [0, 2])

    assert encoded.payload[11:13] == b"\x00\x02"
    decoded = decode(encoded.payload).unwrap()
    assert decoded == (BTC, USDT)
    assert ETH not in decoded
    assert encoded.selected_count == 2
    assert encoded.original_count == 3
    assert encoded.feed_ids == (BTC.feed_id, USDT.feed_id)


@pytest.mark.parametrize("indices", [[2, 0], [1], [2, 1, 0], []])
def test_round_trip_follows_selection_order(indices):
    encoded = encode_selected(RECORDS, indices)

    decoded = decode(encoded.payload).unwrap()

    assert [record.feed_id for record in decoded] == [RECORDS[i].feed_id for i in indices]


def test_round_trip_over_larger_synthetic_set():
    records = [synthetic_record(i) for i in range(20)]
    indices = [0, 4, 8, 12, 16]

    decoded = decode(encode_selected(records, indices).payload).unwrap()

    assert decoded == tuple(records[i] for i in indices)


def test_encoder_matches_hand_packed_layout():
    expected = build_buffer([message_body(BTC), message_body(ETH)])

    assert encode_accumulator_update([BTC, ETH]) == expected


def test_price_message_is_length_prefixed():
    message = encode_price_message(BTC)

    (length,) = struct.unpack(">H", message[:2])
    assert length == len(message) - 2 == 85
    assert message[2] == 0
    assert message[3:35] == bytes.fromhex(BTC.feed_id[2:])


def test_prev_publish_time_is_rewritten_to_publish_time():
    record = replace(BTC, prev_publish_time=BTC.publish_time - 400)

    (decoded,) = parse_accumulator_update(encode_selected([record], [0]).payload).updates

    assert decoded.prev_publish_time == record.publish_time


def test_out_of_range_index_serializes_nothing():
    with pytest.raises(IndexNotFoundError) as excinfo:
        encode_selected(RECORDS, [0, 99])

    error = excinfo.value
    assert error.kind is ErrorKind.INDEX_NOT_FOUND
    assert error.details["missing_count"] == 1
    assert error.details["missing_indices"] == (99,)
    assert "Found 1 of 2" in str(error)


def test_negative_index_counts_as_missing():
    with pytest.raises(IndexNotFoundError):
        select_records(RECORDS, [-1])


def test_reencode_reports_failure_without_raising():
    result = reencode(RECORDS, [5, 6])

    assert not result.ok
    assert result.kind is ErrorKind.INDEX_NOT_FOUND
    assert result.value is None
    assert result.metadata["missing_count"] == 2
    assert result.metadata["total_feeds"] == 3


def test_reencode_success_metadata():
    result = reencode(RECORDS, [1])

    assert result.ok
    assert result.value.selected == (ETH,)
    assert result.metadata == {"total_feeds": 3, "selected_feeds": 1, "size": result.value.size}


def test_empty_selection_encodes_empty_update():
    encoded = encode_selected(RECORDS, [])

    assert encoded.size == 13
    assert decode(encoded.payload).unwrap() == ()


@pytest.mark.parametrize(
    "field, value",
    [
        ("price", 1 << 63),
        ("confidence", -1),
        ("exponent", 1 << 31),
        ("publish_time", 1 << 64),
        ("ema_price", -(1 << 63) - 1),
        ("ema_confidence", 1 << 64),
    ],
)
def test_values_outside_wire_width_are_rejected(field, value):
    record = replace(BTC, **{field: value})

    with pytest.raises(FieldOutOfRangeError) as excinfo:
        encode_price_message(record)
    assert excinfo.value.details["field"] == field


@pytest.mark.parametrize(
    "feed_id",
    [
        "0x1234",
        "0x" + "zz" * 32,
        "0x" + "ab" * 33,
        "0x" + "ab" * 32 + " ",
        "0x" + "ab " * 32,
        "ab" * 32,
    ],
)
def test_malformed_feed_id_is_rejected(feed_id):
    with pytest.raises(InvalidFeedIdError):
        encode_price_message(replace(BTC, feed_id=feed_id))


def test_encoder_accepts_exactly_what_the_shape_check_accepts():
    record = replace(BTC, feed_id=BTC.feed_id + " ")

    result = reencode([record], [0])

    assert not validate_records([record]).is_valid
    assert not result.ok
    assert result.kind is ErrorKind.INVALID_FEED_ID_LENGTH
    assert validate_records([BTC]).is_valid
    assert reencode([BTC], [0]).ok


def test_message_count_is_bounded():
    with pytest.raises(FieldOutOfRangeError):
        encode_accumulator_update([BTC] * (MAX_MESSAGES + 1))
