"""Serializer that rebuilds an accumulator update from a subset of records."""

from __future__ import annotations

from collections.abc import Sequence

from ..core.errors import EncodeError, FieldOutOfRangeError, IndexNotFoundError, InvalidFeedIdError
from ..core.logging import get_logger
from ..core.results import CodecResult
from ..models.price_update import EncodedUpdate, PriceUpdate
from ..models.shared import is_feed_id
from .wire import (
    ACCUMULATOR_MAGIC,
    FEED_ID_SIZE,
    INT32_MAX,
    INT32_MIN,
    INT64_MAX,
    INT64_MIN,
    MAGIC,
    MAJOR_VERSION,
    MAX_MESSAGES,
    MESSAGE_TYPE_PRICE_FEED,
    MINOR_VERSION,
    PRICE_MESSAGE,
    U16,
    UINT64_MAX,
    UPDATE_TYPE,
    UPDATE_TYPE_PRICE,
    VERSION_HEADER,
)

logger = get_logger(__name__)


def select_records(records: Sequence[PriceUpdate], selected_indices: Sequence[int]) -> tuple[PriceUpdate, ...]:
    """Resolve ``selected_indices`` against ``records`` in selection order.

    Negative indices never wrap around; they count as missing like any other
    index outside ``range(len(records))``.
    """

    missing = [index for index in selected_indices if not 0 <= index < len(records)]
    if missing:
        found = len(selected_indices) - len(missing)
        raise IndexNotFoundError(
            f"Could not find all requested updates. Found {found} of {len(selected_indices)} "
            f"({len(missing)} missing: {missing})",
            requested=len(selected_indices),
            found=found,
            missing_count=len(missing),
            missing_indices=tuple(missing),
            available=len(records),
        )
    return tuple(records[index] for index in selected_indices)


def encode_price_message(record: PriceUpdate) -> bytes:
    """Serialize one record as a length-prefixed price message.

    ``prev_publish_time`` is always written as ``publish_time``.
    """

    feed_id = _feed_id_bytes(record)
    _check_range(record, "price", record.price, INT64_MIN, INT64_MAX)
    _check_range(record, "confidence", record.confidence, 0, UINT64_MAX)
    _check_range(record, "exponent", record.exponent, INT32_MIN, INT32_MAX)
    _check_range(record, "publish_time", record.publish_time, 0, UINT64_MAX)
    _check_range(record, "ema_price", record.ema_price, INT64_MIN, INT64_MAX)
    _check_range(record, "ema_confidence", record.ema_confidence, 0, UINT64_MAX)

    body = PRICE_MESSAGE.pack(
        MESSAGE_TYPE_PRICE_FEED,
        feed_id,
        record.price,
        record.confidence,
        record.exponent,
        record.publish_time,
        record.publish_time,
        record.ema_price,
        record.ema_confidence,
    )
    return U16.pack(len(body)) + body


def encode_accumulator_update(records: Sequence[PriceUpdate]) -> bytes:
    """Serialize ``records`` in order under a v1.0 price update header."""

    if len(records) > MAX_MESSAGES:
        raise FieldOutOfRangeError(
            f"Cannot encode {len(records)} messages, the count field holds at most {MAX_MESSAGES}",
            field="count",
            value=len(records),
        )
    header = (
        MAGIC.pack(ACCUMULATOR_MAGIC)
        + VERSION_HEADER.pack(MAJOR_VERSION, MINOR_VERSION, 0)
        + UPDATE_TYPE.pack(UPDATE_TYPE_PRICE)
        + U16.pack(len(records))
    )
    return header + b"".join(encode_price_message(record) for record in records)


def encode_selected(records: Sequence[PriceUpdate], selected_indices: Sequence[int]) -> EncodedUpdate:
    """Select records by index and serialize them into a new payload.

    Raises :class:`EncodeError` subclasses; nothing is serialized when any
    index is missing.
    """

    selected = select_records(records, selected_indices)
    payload = encode_accumulator_update(selected)
    return EncodedUpdate(
        payload=payload,
        selected=selected,
        indices=tuple(selected_indices),
        original_count=len(records),
    )


def reencode(records: Sequence[PriceUpdate], selected_indices: Sequence[int]) -> CodecResult[EncodedUpdate]:
    """Non-raising form of :func:`encode_selected`."""

    logger.info("reencoding_selected_feeds", selected=len(selected_indices), total=len(records))
    try:
        encoded = encode_selected(records, selected_indices)
    except EncodeError as exc:
        logger.warning("reencode_failed", kind=exc.kind.value, error=str(exc))
        return CodecResult.failure(exc, total_feeds=len(records), selected_feeds=len(selected_indices))
    return CodecResult.success(
        encoded,
        total_feeds=len(records),
        selected_feeds=encoded.selected_count,
        size=encoded.size,
    )


def _feed_id_bytes(record: PriceUpdate) -> bytes:
    if not is_feed_id(record.feed_id):
        raise InvalidFeedIdError(
            f"Feed id {record.feed_id!r} is not 0x followed by {FEED_ID_SIZE} bytes of hex",
            feed_id=record.feed_id,
            expected=FEED_ID_SIZE,
        )
    return record.feed_id_bytes


def _check_range(record: PriceUpdate, name: str, value: object, low: int, high: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or not low <= value <= high:
        raise FieldOutOfRangeError(
            f"{name}={value!r} of feed {record.feed_id} does not fit its wire encoding [{low}, {high}]",
            feed_id=record.feed_id,
            field=name,
            value=value,
        )
