from __future__ import annotations

"""Structured JSON logger shared by every pipeline stage.

Each component owns a ``JsonLogger("<component>")`` writing one JSON object
per event to stderr through the stdlib ``logging`` tree rooted at
``vocabdocs``. :func:`configure_logging` adjusts the level of all of them at
once (the CLI's ``--log-level``).
"""

import json
import logging
import random
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Iterator, Mapping, MutableMapping

ROOT_LOGGER = "vocabdocs"
PROMOTED_FIELDS = ("entity", "kind", "duration_ms", "status")

_LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def configure_logging(level: str = "INFO") -> int:
    """Set the threshold for every vocabDocs logger and return it."""

    numeric = _LEVEL_MAP.get(str(level).upper())
    if numeric is None:
        raise ValueError(f"Unknown log level '{level}'")
    logging.getLogger(ROOT_LOGGER).setLevel(numeric)
    return numeric


def _jsonable(obj: Any) -> Any:
    if isinstance(obj, Mapping):
        return {str(k): _jsonable(v) for k, v in obj.items() if v is not None}
    if isinstance(obj, (list, tuple, set, frozenset)):
        items = [_jsonable(v) for v in obj]
        return sorted(items, key=str) if isinstance(obj, (set, frozenset)) else items
    if obj is None or isinstance(obj, (bool, int, float)):
        return obj
    return str(obj)


def _cap(details: Any, max_bytes: int) -> Any:
    if max_bytes <= 0:
        return details
    blob = json.dumps(details, ensure_ascii=False, sort_keys=True, separators=(",", ":")).encode("utf-8")
    if len(blob) <= max_bytes:
        return details
    return {"note": "truncated", "preview": blob[:max_bytes].decode("utf-8", errors="ignore")}


class JsonLogger:
    """Emit ``{ts, level, service, event, ...}`` JSON lines.

    ``entity``, ``kind``, ``duration_ms`` and ``status`` are promoted to top
    level keys; every other keyword lands under ``details`` (``None`` values
    dropped, anything non-scalar stringified, capped at ``max_details_bytes``).
    """

    def __init__(
        self,
        service: str,
        *,
        logger: logging.Logger | None = None,
        max_details_bytes: int = 4096,
        sample_rate: float = 1.0,
    ) -> None:
        self._service = service
        if logger is None:
            logger = logging.getLogger(f"{ROOT_LOGGER}.{service}")
            root = logging.getLogger(ROOT_LOGGER)
            if not root.handlers:
                handler = logging.StreamHandler()
                handler.setFormatter(logging.Formatter("%(message)s"))
                root.addHandler(handler)
                root.propagate = False
            if root.level == logging.NOTSET:
                root.setLevel(logging.INFO)
        self._logger = logger
        self._max_details_bytes = max(0, int(max_details_bytes))
        self._sample_rate = max(0.0, min(1.0, float(sample_rate)))

    def info(self, event: str, **fields: Any) -> dict[str, Any] | None:
        return self._emit("INFO", event, fields)

    def warning(self, event: str, **fields: Any) -> dict[str, Any] | None:
        return self._emit("WARNING", event, fields)

    def error(self, event: str, **fields: Any) -> dict[str, Any] | None:
        return self._emit("ERROR", event, fields)

    def emit(self, level: str, event: str, **fields: Any) -> dict[str, Any] | None:
        return self._emit(level.upper(), event, dict(fields))

    @contextmanager
    def timed(self, event: str, **fields: Any) -> Iterator[dict[str, Any]]:
        """Log ``<event>.start`` and ``<event>.complete`` with ``duration_ms``.

        The yielded dict is merged into the completion event, so callers can
        attach counts computed inside the block.
        """

        extra: dict[str, Any] = {}
        started = time.monotonic()
        self._emit("INFO", f"{event}.start", dict(fields))
        yield extra
        elapsed = int((time.monotonic() - started) * 1000)
        self._emit("INFO", f"{event}.complete", {**fields, **extra, "duration_ms": elapsed})

    def _sampled(self) -> bool:
        return self._sample_rate >= 1.0 or random.random() <= self._sample_rate

    def _emit(self, level: str, event: str, fields: MutableMapping[str, Any]) -> dict[str, Any] | None:
        numeric = _LEVEL_MAP.get(level, logging.INFO)
        if not self._logger.isEnabledFor(numeric) or not self._sampled():
            return None
        entry: dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": level,
            "service": self._service,
            "event": event,
        }
        for key in PROMOTED_FIELDS:
            value = fields.pop(key, None)
            if value is not None:
                entry[key] = value
        details = _jsonable(fields.pop("details", None) or {})
        if fields:
            details = {**details, **_jsonable(fields)} if isinstance(details, dict) else details
        if details:
            entry["details"] = _cap(details, self._max_details_bytes)
        self._logger.log(numeric, json.dumps(entry, ensure_ascii=False, sort_keys=True, separators=(",", ":")))
        return entry


__all__ = ["JsonLogger", "configure_logging", "ROOT_LOGGER"]
