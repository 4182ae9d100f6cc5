"""Pyth accumulator price update processor.

This module exposes the public API for the accumulator codec, the price
service contract, and the pipeline that ties fetching, decoding and
re-encoding together.
"""

from .codec import (
    EntryPoint,
    build_update_array_calldata,
    build_update_calldata,
    decode,
    decode_hex,
    encode_selected,
    estimate_gas,
    parse_accumulator_update,
    reencode,
    validate_records,
    validate_round_trip,
)
from .contracts.price_service.interface import PriceServiceResponse, PriceServiceSource
from .core.config import AppSettings, HermesSettings, PipelineSettings
from .core.coordinator import PriceUpdatePipeline
from .core.errors import (
    CodecError,
    DecodeError,
    EncodeError,
    ErrorKind,
    PriceServiceError,
    PriceServiceTransientError,
)
from .core.registry import FeedRegistry, register_feed, resolve_symbol
from .core.results import CodecResult
from .models import EncodedUpdate, PriceFeedInfo, PriceUpdate, ReencodeReport, ValidationResult

__all__ = [
    "AppSettings",
    "CodecError",
    "CodecResult",
    "DecodeError",
    "EncodeError",
    "EncodedUpdate",
    "EntryPoint",
    "ErrorKind",
    "FeedRegistry",
    "HermesSettings",
    "PipelineSettings",
    "PriceFeedInfo",
    "PriceServiceError",
    "PriceServiceResponse",
    "PriceServiceSource",
    "PriceServiceTransientError",
    "PriceUpdate",
    "PriceUpdatePipeline",
    "ReencodeReport",
    "ValidationResult",
    "build_update_array_calldata",
    "build_update_calldata",
    "decode",
    "decode_hex",
    "encode_selected",
    "estimate_gas",
    "parse_accumulator_update",
    "reencode",
    "register_feed",
    "resolve_symbol",
    "validate_records",
    "validate_round_trip",
]
