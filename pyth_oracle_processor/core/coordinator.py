"""High-level pipeline that fetches, decodes and re-encodes price updates."""

from __future__ import annotations

from collections.abc import Callable, Sequence

from ..codec.calldata import build_update_array_calldata, build_update_calldata
from ..codec.decoder import decode, enrich_with_slots, hex_to_bytes
from ..codec.encoder import encode_selected
from ..codec.gas import EntryPoint, apply_safety_margin, create_summary, estimate_gas
from ..codec.validation import validate_round_trip
from ..contracts.price_service.interface import PriceServiceResponse, PriceServiceSource
from ..models.price_update import PriceUpdate
from ..models.report import FeedRow, ReencodeReport
from ..models.shared import SymbolResolver, short_feed_id
from ..sources.hermes.client import HermesPriceServiceSource
from .config import AppSettings
from .errors import DecodeError, PriceServiceError, PriceServiceTransientError
from .logging import get_logger
from .registry import resolve_symbol
from .results import CodecResult

logger = get_logger(__name__)

FetchStrategy = Callable[[PriceServiceSource, Sequence[str]], PriceServiceResponse]


def fetch_batch(source: PriceServiceSource, feed_ids: Sequence[str]) -> PriceServiceResponse:
    """Fetch every id of the batch in a single request."""

    return source.fetch_latest_updates(feed_ids)


def fetch_each(source: PriceServiceSource, feed_ids: Sequence[str]) -> PriceServiceResponse:
    """Fetch ids one request at a time, keeping whichever succeed."""

    responses: list[PriceServiceResponse] = []
    errors: list[PriceServiceError] = []
    for feed_id in feed_ids:
        try:
            responses.append(source.fetch_latest_updates([feed_id]))
        except PriceServiceError as exc:
            errors.append(exc)
            logger.warning("feed_fetch_failed", feed_id=feed_id, error=str(exc))
    if not responses:
        raise combined_error("No individual feeds could be fetched", errors)
    return merge_responses(responses)


DEFAULT_STRATEGIES: tuple[FetchStrategy, ...] = (fetch_batch, fetch_each)


def combined_error(message: str, errors: Sequence[PriceServiceError]) -> PriceServiceError:
    """Transient only when every underlying failure was transient."""

    if errors and all(isinstance(error, PriceServiceTransientError) for error in errors):
        return PriceServiceTransientError(message)
    return PriceServiceError(message)


def merge_responses(responses: Sequence[PriceServiceResponse]) -> PriceServiceResponse:
    """Concatenate payload chunks and parsed metadata in order."""

    return PriceServiceResponse(
        binary=tuple(chunk for response in responses for chunk in response.binary),
        encoding=responses[0].encoding if responses else "hex",
        parsed=tuple(entry for response in responses for entry in response.parsed),
    )


class PriceUpdatePipeline:
    """Entry point consumed by SDK callers.

    The codec itself never sees the symbol table; ``resolver`` is only used
    for display rows in the report.
    """

    def __init__(
        self,
        source: PriceServiceSource | None = None,
        *,
        resolver: SymbolResolver = resolve_symbol,
        settings: AppSettings | None = None,
        strategies: Sequence[FetchStrategy] = DEFAULT_STRATEGIES,
    ) -> None:
        self._settings = settings or AppSettings()
        self._resolver = resolver
        self._strategies = tuple(strategies)
        self._owns_source = source is None
        if source is None:
            source = HermesPriceServiceSource(settings=self._settings.hermes)
        self._source = source

    @property
    def settings(self) -> AppSettings:
        return self._settings

    # Fetch -------------------------------------------------------------
    def fetch(self, feed_ids: Sequence[str]) -> PriceServiceResponse:
        """Fetch the latest updates in ``batch_size`` chunks.

        Each chunk tries the strategies in order and the first success wins;
        chunks where every strategy fails are skipped.
        """

        batch_size = self._settings.hermes.batch_size
        batches = [feed_ids[i : i + batch_size] for i in range(0, len(feed_ids), batch_size)]
        responses: list[PriceServiceResponse] = []
        errors: list[PriceServiceError] = []
        for number, batch in enumerate(batches, start=1):
            response = self._fetch_batch(number, batch, errors)
            if response is not None:
                responses.append(response)

        if not responses:
            raise combined_error("No price updates could be fetched from any batch", errors)
        return merge_responses(responses)

    def _fetch_batch(
        self, number: int, batch: Sequence[str], errors: list[PriceServiceError]
    ) -> PriceServiceResponse | None:
        for strategy in self._strategies:
            try:
                response = strategy(self._source, batch)
            except PriceServiceError as exc:
                errors.append(exc)
                logger.warning(
                    "fetch_strategy_failed",
                    batch=number,
                    strategy=strategy.__name__,
                    feeds=len(batch),
                    error=str(exc),
                )
                continue
            logger.info("fetch_strategy_succeeded", batch=number, strategy=strategy.__name__, feeds=len(batch))
            return response
        logger.warning("batch_failed", batch=number, feeds=len(batch))
        return None

    # Decode ------------------------------------------------------------
    def decode(self, response: PriceServiceResponse) -> CodecResult[tuple[PriceUpdate, ...]]:
        """Decode every payload chunk and merge slots from the parsed metadata."""

        records: list[PriceUpdate] = []
        warnings: list[str] = []
        size = 0
        for index, chunk in enumerate(response.binary):
            try:
                buffer = hex_to_bytes(chunk)
            except DecodeError as exc:
                return CodecResult.failure(exc, chunk=index)
            result = decode(buffer)
            if not result.ok:
                return CodecResult.failure(result.error, warnings=tuple(warnings), chunk=index)
            records.extend(result.value or ())
            warnings.extend(result.warnings)
            size += len(buffer)

        enriched = enrich_with_slots(records, response.parsed)
        return CodecResult.success(
            enriched,
            warnings=tuple(warnings),
            chunks=len(response.binary),
            feed_count=len(enriched),
            size=size,
        )

    # Re-encode ---------------------------------------------------------
    def reencode(
        self, records: Sequence[PriceUpdate], selected_indices: Sequence[int] | None = None
    ) -> ReencodeReport:
        """Select, encode and validate; raises ``EncodeError`` on bad input."""

        pipeline = self._settings.pipeline
        indices = list(pipeline.selected_indices if selected_indices is None else selected_indices)
        entry_point = EntryPoint(pipeline.entry_point)

        encoded = encode_selected(records, indices)
        if entry_point is EntryPoint.ACCUMULATOR_ARRAY:
            calldata = build_update_array_calldata([encoded.payload])
        else:
            calldata = build_update_calldata(encoded.payload)

        estimated = estimate_gas(encoded.selected_count, entry_point)
        validation = validate_round_trip(records, encoded.payload, indices)
        summary = create_summary(
            len(records),
            encoded.selected_count,
            indices,
            encoded.feed_ids,
            encoded.size,
            entry_point=entry_point,
        )
        rows = tuple(
            FeedRow(
                index=index,
                feed_id=record.feed_id,
                symbol=self._symbol(record.feed_id),
                price=record.human_price,
                confidence=record.human_confidence,
                publish_time=record.publish_time,
                slot=record.slot,
            )
            for index, record in zip(indices, encoded.selected)
        )
        logger.info(
            "reencode_completed",
            selected=encoded.selected_count,
            total=len(records),
            size=encoded.size,
            entry_point=entry_point.value,
            estimated_gas=estimated,
            valid=validation.is_valid,
        )
        return ReencodeReport(
            encoded=encoded,
            entry_point=entry_point.value,
            calldata=calldata,
            estimated_gas=estimated,
            gas_limit=apply_safety_margin(estimated, pipeline.gas_safety_multiplier),
            validation=validation,
            rows=rows,
            summary=summary,
        )

    def run(self, feed_ids: Sequence[str], selected_indices: Sequence[int] | None = None) -> ReencodeReport:
        """Fetch, decode and re-encode in one call."""

        response = self.fetch(feed_ids)
        records = self.decode(response).unwrap()
        return self.reencode(records, selected_indices)

    def close(self) -> None:
        if self._owns_source:
            self._source.close()

    # Internal ----------------------------------------------------------
    def _symbol(self, feed_id: str) -> str:
        return self._resolver(feed_id) or f"Unknown({short_feed_id(feed_id)})"
