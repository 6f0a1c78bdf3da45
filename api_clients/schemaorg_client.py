"""Schema.org vocabulary client for fetching the base JSON-LD release."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import requests
from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from vocabDocs import __version__
from vocabDocs.utils.http_cache import HTTPCache
from vocabDocs.utils.log_json import JsonLogger

_VARY_HEADERS = ("Accept", "User-Agent")
_logger = JsonLogger("schemaorg-client")


def _log_retry(retry_state: RetryCallState) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    wait_time = getattr(retry_state.next_action, "sleep", None) if retry_state.next_action else None
    url = str(retry_state.args[1]) if len(retry_state.args) >= 2 else ""
    _logger.warning(
        "api.retry",
        url=url,
        attempt=retry_state.attempt_number,
        wait_seconds=wait_time,
        error=str(exc) if exc else None,
    )


class SchemaOrgError(Exception):
    """Raised for schema.org download errors or invalid vocabulary payloads."""


class SchemaOrgClient:
    """Client for the published schema.org vocabulary files."""

    DEFAULT_URL = "https://schema.org/version/latest/schemaorg-current-https.jsonld"

    def __init__(
        self,
        *,
        session: requests.Session | None = None,
        cache_dir: Path | None = None,
        timeout: float = 30.0,
    ) -> None:
        self.session = session or requests.Session()
        self._owns_session = session is None
        self.user_agent = os.getenv("VOCABDOCS_USER_AGENT", f"vocabDocs/{__version__}")
        ttl_env = os.getenv("SCHEMAORG_CACHE_TTL_SECONDS")
        self.cache = HTTPCache(
            cache_dir or Path(".cache/api/schemaorg"),
            ttl_seconds=int(ttl_env) if ttl_env else None,
            timeout=timeout,
        )
        _logger.info("api.client.init", user_agent=self.user_agent, cache_dir=str(self.cache.base_dir))

    @retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1),
        retry=retry_if_exception_type(requests.RequestException),
        before_sleep=_log_retry,
    )
    def _get_json(self, url: str) -> Any:
        headers = {
            "User-Agent": self.user_agent,
            "Accept": "application/ld+json, application/json",
        }
        _logger.info("api.request", url=url)
        resp = self.cache.get(self.session, url, headers=headers, vary_headers=_VARY_HEADERS)
        resp.raise_for_status()
        content_type = resp.headers.get("Content-Type", "")
        if "json" not in content_type:
            _logger.error("api.invalid_content_type", url=url, content_type=content_type)
            raise SchemaOrgError(f"Non-JSON response from schema.org at {resp.url or url}")
        try:
            payload = resp.json()
        except ValueError as exc:
            _logger.error("api.invalid_json", url=url, error=str(exc))
            raise SchemaOrgError("Invalid JSON from schema.org") from exc
        _logger.info(
            "api.response",
            url=url,
            status=resp.status_code,
            cache="hit" if getattr(resp, "from_cache", False) else "miss",
        )
        return payload

    def get_vocabulary(self, url: str | None = None) -> dict:
        """Return the parsed JSON-LD document; raise :class:`SchemaOrgError` on failure."""

        url = url or self.DEFAULT_URL
        try:
            payload = self._get_json(url)
        except requests.RequestException as exc:
            _logger.error("api.request_failed", url=url, error=str(exc))
            raise SchemaOrgError(f"Failed to fetch {url}: {exc}") from exc
        if not isinstance(payload, dict) or "@graph" not in payload:
            raise SchemaOrgError(f"Vocabulary at {url} has no @graph")
        _logger.info("api.vocabulary.fetched", url=url, entities=len(payload["@graph"]))
        return payload

    # Resource lifecycle -------------------------------------------------
    def close(self) -> None:
        if self._owns_session:
            self.session.close()

    def __enter__(self) -> "SchemaOrgClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
