"""Core utilities for fetching and re-encoding price updates."""

from __future__ import annotations

from importlib import import_module
from typing import Any

__all__ = [
    "PriceUpdatePipeline",
    "AppSettings",
    "HermesSettings",
    "PipelineSettings",
    "FeedRegistry",
    "register_feed",
    "resolve_symbol",
    "CodecResult",
    "CodecError",
    "DecodeError",
    "EncodeError",
    "ErrorKind",
    "PriceServiceError",
    "PriceServiceTransientError",
    "setup_logging",
]

_lazy_targets = {
    "PriceUpdatePipeline": ("coordinator", "PriceUpdatePipeline"),
    "AppSettings": ("config", "AppSettings"),
    "HermesSettings": ("config", "HermesSettings"),
    "PipelineSettings": ("config", "PipelineSettings"),
    "FeedRegistry": ("registry", "FeedRegistry"),
    "register_feed": ("registry", "register_feed"),
    "resolve_symbol": ("registry", "resolve_symbol"),
    "CodecResult": ("results", "CodecResult"),
    "CodecError": ("errors", "CodecError"),
    "DecodeError": ("errors", "DecodeError"),
    "EncodeError": ("errors", "EncodeError"),
    "ErrorKind": ("errors", "ErrorKind"),
    "PriceServiceError": ("errors", "PriceServiceError"),
    "PriceServiceTransientError": ("errors", "PriceServiceTransientError"),
    "setup_logging": ("logging", "setup_logging"),
}


def __getattr__(name: str) -> Any:
    try:
        module_name, attr_name = _lazy_targets[name]
    except KeyError as exc:  # pragma: no cover
        raise AttributeError(f"module 'pyth_oracle_processor.core' has no attribute {name!r}") from exc
    module = import_module(f"{__name__}.{module_name}")
    value = getattr(module, attr_name)
    globals()[name] = value
    return value
