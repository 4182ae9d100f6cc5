"""Domain models for the oracle price processor."""

from .price_update import AccumulatorUpdate, EncodedUpdate, PriceUpdate, ShapeReport, ValidationResult
from .report import FeedRow, ReencodeReport
from .shared import AssetType, PriceFeedInfo, SymbolResolver, is_feed_id, normalize_feed_id

__all__ = [
    "AccumulatorUpdate",
    "AssetType",
    "EncodedUpdate",
    "FeedRow",
    "PriceFeedInfo",
    "PriceUpdate",
    "ReencodeReport",
    "ShapeReport",
    "SymbolResolver",
    "ValidationResult",
    "is_feed_id",
    "normalize_feed_id",
]
