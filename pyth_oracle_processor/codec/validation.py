"""Structural and round-trip checks over decoded records and encoded payloads."""

from __future__ import annotations

from collections.abc import Sequence

from ..core.errors import InvalidCalldataError, RoundTripMismatchError
from ..core.logging import get_logger
from ..models.price_update import PriceUpdate, ShapeReport, ValidationResult
from ..models.shared import is_feed_id
from .calldata import SELECTOR_SIZE, UPDATE_PRICE_FEEDS_SELECTOR, WORD_SIZE, calldata_bytes, selector_bytes
from .decoder import decode

logger = get_logger(__name__)

# Fields compared after a round trip; prev_publish_time is rewritten by the
# encoder and slot never reaches the wire.
_COMPARED_FIELDS = ("price", "confidence", "exponent", "publish_time", "ema_price", "ema_confidence")


def _is_wide_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_records(records: object) -> ShapeReport:
    """Shape-check decoded records.

    Verifies the feed id format and that numeric fields are integers. This is
    not a semantic check: price sign and freshness are not inspected.
    """

    if not isinstance(records, Sequence) or isinstance(records, (str, bytes)):
        return ShapeReport(errors=("Decoded updates is not a sequence",))

    errors: list[str] = []
    for index, record in enumerate(records):
        if not isinstance(record, PriceUpdate):
            errors.append(f"Update {index}: Not a price update record")
            continue
        if not is_feed_id(record.feed_id):
            errors.append(f"Update {index}: Invalid feed ID format")
        if not _is_wide_int(record.price):
            errors.append(f"Update {index}: Price value is not an integer")
        if not _is_wide_int(record.confidence):
            errors.append(f"Update {index}: Confidence is not an integer")
        if not _is_wide_int(record.ema_price):
            errors.append(f"Update {index}: EMA price is not an integer")
        if not _is_wide_int(record.ema_confidence):
            errors.append(f"Update {index}: EMA confidence is not an integer")
        if not _is_wide_int(record.exponent):
            errors.append(f"Update {index}: Exponent is not an integer")
        if not _is_wide_int(record.publish_time):
            errors.append(f"Update {index}: Publish time is not an integer")
    return ShapeReport(errors=tuple(errors))


def validate_round_trip(
    original_records: Sequence[PriceUpdate],
    payload: bytes,
    selected_indices: Sequence[int],
) -> ValidationResult:
    """Re-decode ``payload`` and compare it with the selected originals.

    Decode failures, count mismatches and missing feed ids are errors.
    Unexpected feed ids, reordering, changed field values and version or
    trailing-byte notices are warnings.
    """

    errors: list[str] = []
    warnings: list[str] = []

    expected = [original_records[i] for i in selected_indices if 0 <= i < len(original_records)]
    if len(expected) != len(selected_indices):
        errors.append(
            f"{len(selected_indices) - len(expected)} selected indices do not resolve to original records"
        )

    result = decode(payload)
    if not result.ok:
        errors.append(f"Round-trip decode failed ({result.kind}): {result.message}")
        return _finish(errors, warnings, len(selected_indices), 0, len(payload))

    decoded = result.value or ()
    warnings.extend(result.warnings)
    if len(decoded) != len(selected_indices):
        errors.append(f"Expected {len(selected_indices)} feeds, found {len(decoded)}")

    expected_ids = [record.feed_id.lower() for record in expected]
    actual_ids = [record.feed_id for record in decoded]
    actual_set, expected_set = set(actual_ids), set(expected_ids)
    missing = tuple(feed_id for feed_id in expected_ids if feed_id not in actual_set)
    unexpected = tuple(feed_id for feed_id in actual_ids if feed_id not in expected_set)
    errors.extend(f"Missing expected feed ID: {feed_id}" for feed_id in missing)
    warnings.extend(f"Unexpected feed ID in payload: {feed_id}" for feed_id in unexpected)

    if not missing and not unexpected and expected_ids != actual_ids:
        warnings.append("Feed order differs from the selection order")
    else:
        for original, roundtrip in zip(expected, decoded):
            if original.feed_id.lower() != roundtrip.feed_id:
                continue
            for name in _COMPARED_FIELDS:
                if getattr(original, name) != getattr(roundtrip, name):
                    warnings.append(
                        f"Feed {original.feed_id}: {name} changed from "
                        f"{getattr(original, name)} to {getattr(roundtrip, name)}"
                    )

    return _finish(
        errors,
        warnings,
        len(selected_indices),
        len(decoded),
        len(payload),
        missing=missing,
        unexpected=unexpected,
        version=result.metadata.get("version"),
    )


def _finish(
    errors: list[str],
    warnings: list[str],
    expected_feeds: int,
    actual_feeds: int,
    data_size: int,
    *,
    missing: tuple[str, ...] = (),
    unexpected: tuple[str, ...] = (),
    version: str | None = None,
) -> ValidationResult:
    report = ValidationResult(
        errors=tuple(errors),
        warnings=tuple(warnings),
        expected_feeds=expected_feeds,
        actual_feeds=actual_feeds,
        data_size=data_size,
        missing_feed_ids=missing,
        unexpected_feed_ids=unexpected,
        metadata={"version": version} if version else {},
    )
    if report.is_valid:
        logger.debug("round_trip_validated", feeds=actual_feeds, warnings=len(warnings))
    else:
        logger.warning("round_trip_invalid", errors=list(errors))
    return report


def require_round_trip(
    original_records: Sequence[PriceUpdate],
    payload: bytes,
    selected_indices: Sequence[int],
) -> ValidationResult:
    """Like :func:`validate_round_trip` but raises :class:`RoundTripMismatchError` when invalid."""

    report = validate_round_trip(original_records, payload, selected_indices)
    if not report.is_valid:
        raise RoundTripMismatchError(
            "; ".join(report.errors),
            missing_feed_ids=report.missing_feed_ids,
            unexpected_feed_ids=report.unexpected_feed_ids,
            expected_feeds=report.expected_feeds,
            actual_feeds=report.actual_feeds,
        )
    return report


def validate_calldata(
    calldata: str,
    payload: bytes | None = None,
    selector: bytes | str = UPDATE_PRICE_FEEDS_SELECTOR,
) -> ShapeReport:
    """Check single-``bytes`` calldata: selector, offset, length and padding."""

    try:
        raw = calldata_bytes(calldata)
    except InvalidCalldataError as exc:
        return ShapeReport(errors=(str(exc),))

    errors: list[str] = []
    expected_selector = selector_bytes(selector)
    if raw[:SELECTOR_SIZE] != expected_selector:
        errors.append(f"Invalid function selector 0x{raw[:SELECTOR_SIZE].hex()}, expected 0x{expected_selector.hex()}")

    head_end = SELECTOR_SIZE + 2 * WORD_SIZE
    if len(raw) < head_end:
        errors.append(f"Calldata too short: {len(raw)} bytes, need at least {head_end}")
        return ShapeReport(errors=tuple(errors))

    offset = int.from_bytes(raw[SELECTOR_SIZE : SELECTOR_SIZE + WORD_SIZE], "big")
    length = int.from_bytes(raw[SELECTOR_SIZE + WORD_SIZE : head_end], "big")
    section = raw[head_end:]
    if offset != WORD_SIZE:
        errors.append(f"Offset word is {offset}, expected {WORD_SIZE}")
    if len(section) % WORD_SIZE:
        errors.append(f"Payload section of {len(section)} bytes is not a multiple of {WORD_SIZE}")
    if length > len(section):
        errors.append(f"Length word {length} exceeds the {len(section)} payload bytes present")
    elif any(section[length:]):
        errors.append("Payload padding contains non-zero bytes")
    if payload is not None:
        if length != len(payload):
            errors.append(f"Length word is {length}, payload is {len(payload)} bytes")
        elif section[:length] != payload:
            errors.append("Calldata payload differs from the encoded update")
    return ShapeReport(errors=tuple(errors))
