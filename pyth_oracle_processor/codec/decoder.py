"""Parser for the accumulator update wire format."""

from __future__ import annotations

import binascii
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from ..core.errors import (
    BadMagicError,
    DecodeError,
    InvalidHexPayloadError,
    TruncatedPayloadError,
    UnsupportedMessageTypeError,
    UnsupportedUpdateTypeError,
)
from ..core.logging import get_logger
from ..core.results import CodecResult
from ..models.price_update import AccumulatorUpdate, PriceUpdate
from .wire import (
    ACCUMULATOR_MAGIC,
    MAGIC,
    MAJOR_VERSION,
    MESSAGE_TYPE_PRICE_FEED,
    PRICE_MESSAGE,
    PRICE_MESSAGE_SIZE,
    U16,
    UPDATE_TYPE,
    UPDATE_TYPE_PRICE,
    VERSION_HEADER,
    ByteReader,
)

logger = get_logger(__name__)


def hex_to_bytes(payload: str) -> bytes:
    """Convert a hex transport payload (with or without ``0x``) into bytes."""

    text = payload.strip()
    if text[:2].lower() == "0x":
        text = text[2:]
    try:
        return binascii.unhexlify(text)
    except (binascii.Error, ValueError) as exc:
        raise InvalidHexPayloadError(f"Payload is not valid hex: {exc}", length=len(text)) from exc


def parse_accumulator_update(buffer: bytes) -> AccumulatorUpdate:
    """Parse ``buffer`` into header fields and price records.

    Raises a :class:`DecodeError` subclass on any structural violation; no
    partial result is ever returned.
    """

    return _read_update(ByteReader(buffer))


def _read_update(reader: ByteReader) -> AccumulatorUpdate:
    # Magic is validated before any other header field is read.
    (magic,) = reader.unpack(MAGIC, what="magic")
    if magic != ACCUMULATOR_MAGIC:
        raise BadMagicError(
            f"Invalid accumulator magic 0x{magic:08x}, expected 0x{ACCUMULATOR_MAGIC:08x}",
            expected=ACCUMULATOR_MAGIC,
            actual=magic,
        )
    major, minor, trailing_size = reader.unpack(VERSION_HEADER, what="version header")
    # Forward-compatible header extensions are skipped, not interpreted.
    trailing_header = reader.read(trailing_size, what="trailing header")

    (update_type,) = reader.unpack(UPDATE_TYPE, what="update type")
    if update_type != UPDATE_TYPE_PRICE:
        raise UnsupportedUpdateTypeError(
            f"Unsupported update type {update_type}, only price updates ({UPDATE_TYPE_PRICE}) are supported",
            expected=UPDATE_TYPE_PRICE,
            actual=update_type,
        )

    (count,) = reader.unpack(U16, what="message count")
    updates = [_parse_message(reader, index) for index in range(count)]

    return AccumulatorUpdate(
        major_version=major,
        minor_version=minor,
        update_type=update_type,
        updates=tuple(updates),
        trailing_header=trailing_header,
    )


def _parse_message(reader: ByteReader, index: int) -> PriceUpdate:
    (length,) = reader.unpack(U16, what=f"message {index} length")
    start = reader.offset
    reader.require(length, what=f"message {index} body")
    if length < PRICE_MESSAGE_SIZE:
        raise TruncatedPayloadError(
            f"Message {index} declares {length} bytes, a price message needs {PRICE_MESSAGE_SIZE}",
            offset=start,
            needed=PRICE_MESSAGE_SIZE,
            available=length,
        )

    (
        message_type,
        feed_id,
        price,
        confidence,
        exponent,
        publish_time,
        prev_publish_time,
        ema_price,
        ema_confidence,
    ) = reader.unpack(PRICE_MESSAGE, what=f"message {index}")
    if message_type != MESSAGE_TYPE_PRICE_FEED:
        raise UnsupportedMessageTypeError(
            f"Message {index} has unsupported type {message_type}",
            index=index,
            expected=MESSAGE_TYPE_PRICE_FEED,
            actual=message_type,
        )

    # Advance by the declared length so newer messages with extra trailing
    # fields still parse.
    reader.offset = start + length
    return PriceUpdate(
        feed_id=f"0x{feed_id.hex()}",
        price=price,
        confidence=confidence,
        exponent=exponent,
        publish_time=publish_time,
        prev_publish_time=prev_publish_time,
        ema_price=ema_price,
        ema_confidence=ema_confidence,
    )


def version_warnings(update: AccumulatorUpdate) -> tuple[str, ...]:
    if update.major_version != MAJOR_VERSION:
        return (f"Unsupported accumulator version {update.version}, expected major {MAJOR_VERSION}",)
    return ()


def decode(buffer: bytes) -> CodecResult[tuple[PriceUpdate, ...]]:
    """Decode ``buffer`` into records without raising.

    Version mismatches and trailing bytes are reported as warnings; every
    structural violation yields a failed result carrying the error.
    """

    reader = ByteReader(buffer)
    try:
        update = _read_update(reader)
    except DecodeError as exc:
        logger.warning("accumulator_decode_failed", kind=exc.kind.value, error=str(exc), size=len(buffer))
        return CodecResult.failure(exc, size=len(buffer))

    warnings = list(version_warnings(update))
    if reader.remaining:
        warnings.append(f"{reader.remaining} trailing bytes after the last message were ignored")
    for warning in warnings:
        logger.warning("accumulator_decode_warning", warning=warning)

    logger.debug(
        "decoded_accumulator_update",
        feeds=len(update.updates),
        version=update.version,
        size=len(buffer),
    )
    return CodecResult.success(
        update.updates,
        warnings=tuple(warnings),
        version=update.version,
        feed_count=len(update.updates),
        size=len(buffer),
    )


def decode_hex(payload: str) -> CodecResult[tuple[PriceUpdate, ...]]:
    """Like :func:`decode` but accepts a hex transport payload."""

    try:
        buffer = hex_to_bytes(payload)
    except InvalidHexPayloadError as exc:
        logger.warning("accumulator_decode_failed", kind=exc.kind.value, error=str(exc))
        return CodecResult.failure(exc)
    return decode(buffer)


def enrich_with_slots(
    records: Sequence[PriceUpdate], parsed_entries: Iterable[Mapping[str, Any]]
) -> tuple[PriceUpdate, ...]:
    """Annotate records with ``metadata.slot`` from the parsed companion block.

    Matching is by feed id (with or without ``0x``); records without a match
    keep their current slot.
    """

    slots: dict[str, int] = {}
    for entry in parsed_entries:
        feed_id = str(entry.get("id") or "").lower()
        if not feed_id:
            continue
        if not feed_id.startswith("0x"):
            feed_id = f"0x{feed_id}"
        metadata = entry.get("metadata") or {}
        slot = metadata.get("slot") if isinstance(metadata, Mapping) else None
        if slot is not None:
            slots[feed_id] = int(slot)
    return tuple(
        record.with_slot(slots[record.feed_id]) if record.feed_id in slots else record for record in records
    )
