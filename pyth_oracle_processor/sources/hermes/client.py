"""Hermes price service client."""

from __future__ import annotations

import time
from collections.abc import Callable, Mapping, Sequence
from typing import Any

import requests

from ...contracts.price_service.interface import PriceServiceResponse, PriceServiceSource
from ...core.config import HermesSettings
from ...core.errors import InvalidFeedIdsError, PriceServiceError, PriceServiceTransientError
from ...core.logging import get_logger
from ...models.shared import is_feed_id

LATEST_UPDATES_ENDPOINT = "/v2/updates/price/latest"
PRICE_FEEDS_ENDPOINT = "/v2/price_feeds"

logger = get_logger(__name__)


def validate_feed_ids(feed_ids: Sequence[str]) -> tuple[list[str], list[str]]:
    """Split ``feed_ids`` into ``(valid, invalid)`` preserving input order."""

    valid: list[str] = []
    invalid: list[str] = []
    for feed_id in feed_ids:
        (valid if is_feed_id(feed_id) else invalid).append(feed_id)
    return valid, invalid


class HermesPriceServiceSource(PriceServiceSource):
    """Requests-backed implementation of :class:`PriceServiceSource`."""

    def __init__(
        self,
        *,
        session: requests.Session | None = None,
        settings: HermesSettings | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._settings = settings or HermesSettings()
        self._session = session or requests.Session()
        self._owns_session = session is None
        self._base_url = self._settings.base_url.rstrip("/")
        self._sleep = sleep

    # ------------------------------------------------------------------
    # Latest updates
    def fetch_latest_updates(self, feed_ids: Sequence[str]) -> PriceServiceResponse:
        valid, invalid = validate_feed_ids(feed_ids)
        if invalid:
            logger.warning("invalid_feed_ids_skipped", count=len(invalid), feed_ids=invalid)
        unique = list(dict.fromkeys(feed_id.lower() for feed_id in valid))
        if not unique:
            raise InvalidFeedIdsError("No valid price feed ids were provided")

        logger.info("fetching_price_updates", feeds=len(unique))
        params = {"ids[]": unique, "encoding": "hex", "parsed": "true"}
        payload = self._request_with_retry(LATEST_UPDATES_ENDPOINT, params)
        return self._parse_latest(payload)

    def fetch_price_feeds(self) -> Sequence[Mapping[str, Any]]:
        payload = self._request_with_retry(PRICE_FEEDS_ENDPOINT, {})
        if not isinstance(payload, list):
            raise PriceServiceError("Hermes returned an unexpected price feed catalog payload")
        return [entry for entry in payload if isinstance(entry, dict)]

    # ------------------------------------------------------------------
    # Internal helpers
    def close(self) -> None:
        if self._owns_session:
            self._session.close()

    def _parse_latest(self, payload: Any) -> PriceServiceResponse:
        if not isinstance(payload, dict):
            raise PriceServiceError("Hermes returned a non-object latest updates payload")
        binary = payload.get("binary")
        if not isinstance(binary, dict) or not binary.get("data"):
            raise PriceServiceError("No price update data in response")
        data = binary["data"]
        if not isinstance(data, list) or not all(isinstance(chunk, str) for chunk in data):
            raise PriceServiceError("Unexpected Hermes binary payload structure")
        parsed = payload.get("parsed") or []
        if not isinstance(parsed, list):
            raise PriceServiceError("Unexpected Hermes parsed payload structure")
        return PriceServiceResponse(
            binary=tuple(data),
            encoding=str(binary.get("encoding") or "hex"),
            parsed=tuple(entry for entry in parsed if isinstance(entry, dict)),
        )

    def _request_with_retry(self, path: str, params: dict[str, Any]) -> Any:
        attempts = self._settings.retry_attempts
        for attempt in range(1, attempts + 1):
            try:
                return self._request(path, params)
            except PriceServiceTransientError as exc:
                if attempt == attempts:
                    logger.error("fetch_failed_permanently", path=path, attempts=attempts, error=str(exc))
                    raise
                logger.warning(
                    "fetch_retry",
                    path=path,
                    attempt=attempt,
                    max_retries=attempts,
                    delay=self._settings.retry_delay,
                    error=str(exc),
                )
                self._sleep(self._settings.retry_delay)
        raise AssertionError("unreachable")  # pragma: no cover

    def _request(self, path: str, params: dict[str, Any]) -> Any:
        url = f"{self._base_url}{path}"
        headers = {"Accept": "application/json", "User-Agent": self._settings.user_agent}
        try:
            response = self._session.get(url, params=params, headers=headers, timeout=self._settings.timeout)
        except requests.RequestException as exc:
            raise PriceServiceTransientError(f"Failed to call Hermes endpoint {path}: {exc}") from exc

        payload = self._decode_response(response)
        if response.status_code >= 400:
            self._raise_http_error(response.status_code, payload)
        return payload

    def _decode_response(self, response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            if response.status_code >= 400:
                return None
            raise PriceServiceError("Hermes returned a non-JSON payload") from None

    def _raise_http_error(self, status_code: int, payload: Any) -> None:
        message = self._extract_message(payload) or f"HTTP {status_code}"
        if status_code in {408, 429} or status_code >= 500:
            raise PriceServiceTransientError(message)
        raise PriceServiceError(message)

    def _extract_message(self, payload: Any) -> str | None:
        if isinstance(payload, dict):
            msg = payload.get("message") or payload.get("error")
            if isinstance(msg, str):
                return msg
        if isinstance(payload, str) and payload:
            return payload
        return None
