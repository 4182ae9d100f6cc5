"""Binary codec for accumulator price updates and their on-chain calldata."""

from .calldata import (
    UPDATE_PRICE_FEEDS_SELECTOR,
    build_update_array_calldata,
    build_update_calldata,
    parse_update_array_calldata,
    parse_update_calldata,
)
from .decoder import decode, decode_hex, enrich_with_slots, hex_to_bytes, parse_accumulator_update
from .encoder import encode_accumulator_update, encode_price_message, encode_selected, reencode, select_records
from .gas import EntryPoint, apply_safety_margin, create_summary, estimate_gas
from .validation import require_round_trip, validate_calldata, validate_records, validate_round_trip

__all__ = [
    "UPDATE_PRICE_FEEDS_SELECTOR",
    "EntryPoint",
    "apply_safety_margin",
    "build_update_array_calldata",
    "build_update_calldata",
    "create_summary",
    "decode",
    "decode_hex",
    "encode_accumulator_update",
    "encode_price_message",
    "encode_selected",
    "enrich_with_slots",
    "estimate_gas",
    "hex_to_bytes",
    "parse_accumulator_update",
    "parse_update_array_calldata",
    "parse_update_calldata",
    "reencode",
    "require_round_trip",
    "select_records",
    "validate_calldata",
    "validate_records",
    "validate_round_trip",
]
