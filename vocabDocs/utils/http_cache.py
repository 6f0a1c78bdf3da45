"""On-disk cache for JSON and JSON-LD GET responses.

Entries are revalidated with ``If-None-Match``/``If-Modified-Since``; a 304
reply is answered from disk. Freshness (``ttl_seconds``) and eviction
(``max_entries``, oldest first) both use the entry file's mtime.
"""

from __future__ import annotations

import hashlib
import json
import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Mapping
from urllib.parse import urlencode

import requests

from vocabDocs.utils.log_json import JsonLogger

_CACHEABLE_TYPES = ("application/json", "application/ld+json")
_logger = JsonLogger("http-cache")


@dataclass(frozen=True)
class CachedEntry:
    body: str
    content_type: str = ""
    etag: str | None = None
    last_modified: str | None = None

    def validators(self) -> dict[str, str]:
        headers = {}
        if self.etag:
            headers["If-None-Match"] = self.etag
        if self.last_modified:
            headers["If-Modified-Since"] = self.last_modified
        return headers


class HTTPCache:
    """Persist GET responses under ``base_dir`` keyed by URL, params and vary headers.

    Parameters
    ----------
    base_dir: Path
        Directory holding one JSON file per entry.
    max_entries: int
        Entries kept after each store; ``0`` disables eviction.
    ttl_seconds: float | None
        Entries older than this are ignored and removed.
    timeout: float
        Timeout in seconds passed to ``session.get``.
    """

    def __init__(
        self,
        base_dir: Path,
        *,
        max_entries: int = 64,
        ttl_seconds: float | None = None,
        timeout: float = 30.0,
    ) -> None:
        self.base_dir = Path(base_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)
        self.max_entries = int(max_entries)
        self.ttl_seconds = float(ttl_seconds) if ttl_seconds is not None else None
        self.timeout = float(timeout)

    def _key_path(
        self,
        url: str,
        params: Mapping[str, str],
        headers: Mapping[str, str],
        vary_headers: Iterable[str],
    ) -> Path:
        lowered = {str(k).lower(): str(v) for k, v in headers.items()}
        parts = [url, urlencode(sorted((str(k), str(v)) for k, v in params.items()))]
        parts.extend(f"{name.lower()}={lowered.get(name.lower(), '')}" for name in vary_headers)
        digest = hashlib.sha256("||".join(part for part in parts if part).encode("utf-8")).hexdigest()
        return self.base_dir / f"{digest}.json"

    def _expired(self, path: Path, now: float) -> bool:
        if self.ttl_seconds is None:
            return False
        try:
            return now - path.stat().st_mtime > self.ttl_seconds
        except OSError:
            return True

    def _load(self, path: Path) -> CachedEntry | None:
        if not path.exists():
            return None
        if self._expired(path, time.time()):
            path.unlink(missing_ok=True)
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            return None
        if not isinstance(data, dict):
            return None
        return CachedEntry(
            body=str(data.get("body") or ""),
            content_type=str(data.get("content_type") or ""),
            etag=data.get("etag"),
            last_modified=data.get("last_modified"),
        )

    def _store(self, path: Path, resp: requests.Response, content_type: str) -> None:
        data = {
            "etag": resp.headers.get("ETag"),
            "last_modified": resp.headers.get("Last-Modified"),
            "content_type": content_type,
            "body": resp.text or "",
        }
        tmp = path.with_suffix(".tmp")
        tmp.write_text(json.dumps(data, ensure_ascii=False, sort_keys=True), encoding="utf-8")
        os.replace(tmp, path)

    def get(
        self,
        session: requests.Session,
        url: str,
        params: Mapping[str, str] | None = None,
        *,
        headers: Mapping[str, str] | None = None,
        vary_headers: Iterable[str] | None = None,
    ) -> requests.Response:
        """Fetch ``url``, answering a 304 from disk and storing cacheable 200s."""

        params = dict(params or {})
        request_headers = dict(headers or {})
        path = self._key_path(url, params, request_headers, tuple(vary_headers or ()))
        cached = self._load(path)
        if cached is not None:
            request_headers.update(cached.validators())

        resp = session.get(url, params=params, headers=request_headers, timeout=self.timeout)
        resp.from_cache = False
        if resp.status_code == 304 and cached is not None:
            resp._content = cached.body.encode("utf-8")
            resp.status_code = 200
            if cached.content_type:
                resp.headers["Content-Type"] = cached.content_type
            resp.from_cache = True
            path.touch()
            _logger.info("http_cache.revalidated", url=url)
            return resp

        content_type = resp.headers.get("Content-Type", "")
        if resp.status_code == 200 and content_type.startswith(_CACHEABLE_TYPES):
            self._store(path, resp, content_type)
            self._evict()
        return resp

    def clear(self) -> None:
        for path in self.base_dir.glob("*.json"):
            path.unlink(missing_ok=True)

    def _evict(self) -> None:
        now = time.time()
        live: list[tuple[float, Path]] = []
        for path in self.base_dir.glob("*.json"):
            if self._expired(path, now):
                path.unlink(missing_ok=True)
                continue
            try:
                live.append((path.stat().st_mtime, path))
            except OSError:
                continue
        excess = len(live) - self.max_entries
        if self.max_entries <= 0 or excess <= 0:
            return
        live.sort(key=lambda item: item[0])
        for _, victim in live[:excess]:
            victim.unlink(missing_ok=True)
        _logger.info("http_cache.evicted", count=excess)


__all__ = ["CachedEntry", "HTTPCache"]
