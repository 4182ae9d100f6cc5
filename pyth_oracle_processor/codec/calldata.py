"""ABI calldata for the on-chain price update entry points.

Two call shapes exist and are kept apart on purpose:

* ``updatePriceFeeds(bytes)`` takes one accumulator payload
  (:func:`build_update_calldata`).
* the accumulator-array entry point takes ``bytes[]``, one payload per element
  (:func:`build_update_array_calldata`).
"""

from __future__ import annotations

from collections.abc import Sequence

from eth_abi import decode as abi_decode
from eth_abi import encode as abi_encode
from eth_abi.exceptions import DecodingError

from ..core.errors import InvalidCalldataError

UPDATE_PRICE_FEEDS_SELECTOR = bytes.fromhex("a9852bcc")
SELECTOR_SIZE = 4
WORD_SIZE = 32


def selector_bytes(selector: bytes | str) -> bytes:
    if isinstance(selector, str):
        text = selector[2:] if selector.startswith("0x") else selector
        selector = bytes.fromhex(text)
    if len(selector) != SELECTOR_SIZE:
        raise ValueError(f"function selector must be {SELECTOR_SIZE} bytes, got {len(selector)}")
    return selector


def build_update_calldata(payload: bytes, selector: bytes | str = UPDATE_PRICE_FEEDS_SELECTOR) -> str:
    """Return ``0x`` calldata for a single ``bytes`` argument.

    Layout: selector, offset word (0x20), length word, payload right-padded
    with zeros to a multiple of 32 bytes.
    """

    return "0x" + (selector_bytes(selector) + abi_encode(["bytes"], [bytes(payload)])).hex()


def build_update_array_calldata(
    payloads: Sequence[bytes], selector: bytes | str = UPDATE_PRICE_FEEDS_SELECTOR
) -> str:
    """Return ``0x`` calldata for a ``bytes[]`` argument (one element per payload)."""

    encoded = abi_encode(["bytes[]"], [[bytes(item) for item in payloads]])
    return "0x" + (selector_bytes(selector) + encoded).hex()


def calldata_bytes(calldata: str) -> bytes:
    text = calldata[2:] if calldata.startswith("0x") else calldata
    try:
        return bytes.fromhex(text)
    except ValueError as exc:
        raise InvalidCalldataError(f"Calldata is not valid hex: {exc}") from exc


def _split_selector(calldata: str, selector: bytes | str) -> bytes:
    raw = calldata_bytes(calldata)
    expected = selector_bytes(selector)
    if raw[:SELECTOR_SIZE] != expected:
        raise InvalidCalldataError(
            f"Unexpected function selector 0x{raw[:SELECTOR_SIZE].hex()}, expected 0x{expected.hex()}",
            expected=f"0x{expected.hex()}",
            actual=f"0x{raw[:SELECTOR_SIZE].hex()}",
        )
    return raw[SELECTOR_SIZE:]


def parse_update_calldata(calldata: str, selector: bytes | str = UPDATE_PRICE_FEEDS_SELECTOR) -> bytes:
    """Extract the payload from single-``bytes`` calldata."""

    args = _split_selector(calldata, selector)
    try:
        (payload,) = abi_decode(["bytes"], args)
    except DecodingError as exc:
        raise InvalidCalldataError(f"Calldata arguments are not ABI bytes: {exc}") from exc
    return payload


def parse_update_array_calldata(
    calldata: str, selector: bytes | str = UPDATE_PRICE_FEEDS_SELECTOR
) -> tuple[bytes, ...]:
    """Extract the payloads from ``bytes[]`` calldata."""

    args = _split_selector(calldata, selector)
    try:
        (payloads,) = abi_decode(["bytes[]"], args)
    except DecodingError as exc:
        raise InvalidCalldataError(f"Calldata arguments are not ABI bytes[]: {exc}") from exc
    return tuple(payloads)


def payload_section(calldata: str) -> bytes:
    """Return the padded payload bytes of single-``bytes`` calldata (after offset and length)."""

    raw = calldata_bytes(calldata)
    return raw[SELECTOR_SIZE + 2 * WORD_SIZE :]
