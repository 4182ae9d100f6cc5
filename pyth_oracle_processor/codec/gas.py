"""Coarse gas model and re-encoding summaries."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any


class EntryPoint(StrEnum):
    """On-chain entry points with distinct calldata shapes and gas costs."""

    SINGLE_BYTES = "single_bytes"
    ACCUMULATOR_ARRAY = "accumulator_array"


@dataclass(frozen=True, slots=True)
class GasModel:
    base: int
    per_feed: int


# Linear fits against historical costs, not chain-verified: treat as a floor.
GAS_MODELS: dict[EntryPoint, GasModel] = {
    EntryPoint.SINGLE_BYTES: GasModel(base=50_000, per_feed=30_000),
    EntryPoint.ACCUMULATOR_ARRAY: GasModel(base=100_000, per_feed=50_000),
}
DEFAULT_SAFETY_MULTIPLIER = 1.25


def estimate_gas(count: int, entry_point: EntryPoint = EntryPoint.SINGLE_BYTES) -> int:
    """Return ``base + count * per_feed``; negative counts are clamped to zero."""

    model = GAS_MODELS[EntryPoint(entry_point)]
    return model.base + max(count, 0) * model.per_feed


def apply_safety_margin(gas: int, multiplier: float = DEFAULT_SAFETY_MULTIPLIER) -> int:
    if multiplier < 1.0:
        raise ValueError("safety multiplier must be >= 1.0")
    return int(gas * multiplier)


def create_summary(
    original_count: int,
    selected_count: int,
    selected_indices: Sequence[int],
    feed_ids: Sequence[str],
    data_size: int,
    *,
    entry_point: EntryPoint = EntryPoint.SINGLE_BYTES,
) -> dict[str, Any]:
    """Summarize a re-encoding operation for reports."""

    return {
        "process": "Accumulator update re-encoding",
        "original_feed_count": original_count,
        "selected_feed_count": selected_count,
        "selected_indices": list(selected_indices),
        "selected_feed_ids": list(feed_ids),
        "encoded_data_size": data_size,
        "entry_point": EntryPoint(entry_point).value,
        "estimated_gas_cost": estimate_gas(selected_count, entry_point),
        "timestamp": datetime.now(tz=timezone.utc).isoformat(),
        "summary": f"Re-encoded {selected_count} of {original_count} price feeds into {data_size} bytes",
    }
