from __future__ import annotations

"""Error taxonomy for vocabulary loading, rendering and corpus writing.

Entity-level problems (:class:`ParseError`, :class:`DanglingReferenceWarning`,
:class:`RenderFailure`, recoverable :class:`WriteFailure`) are collected and
reported; vocabulary-level problems (:class:`ConflictError`,
:class:`CycleDetected`, fatal :class:`WriteFailure`) abort the run before any
output is published.
"""

from typing import Iterable, Sequence


class VocabDocsError(Exception):
    """Base class for all vocabDocs errors."""


class ParseError(VocabDocsError):
    """A source entity could not be interpreted and was skipped."""

    def __init__(self, message: str, *, entity: str | None = None) -> None:
        super().__init__(message)
        self.entity = entity


class ConflictError(VocabDocsError):
    """Base and extension both define the same names under ``error-on-conflict``."""

    def __init__(self, names: Iterable[str]) -> None:
        self.names = tuple(sorted(set(names)))
        preview = ", ".join(self.names[:10])
        more = f" (+{len(self.names) - 10} more)" if len(self.names) > 10 else ""
        super().__init__(f"Naming conflict between base and extension: {preview}{more}")


class CycleDetected(VocabDocsError):
    """A ``subClassOf`` chain revisits a type before reaching a root."""

    def __init__(self, chain: Sequence[str]) -> None:
        self.chain = tuple(chain)
        super().__init__("subClassOf cycle detected: " + " -> ".join(self.chain))


class DanglingReferenceWarning(UserWarning):
    """An entity references a name that is absent from the vocabulary."""

    def __init__(self, entity: str, field: str, target: str) -> None:
        self.entity = entity
        self.field = field
        self.target = target
        super().__init__(f"{entity}.{field} references unknown '{target}'")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DanglingReferenceWarning):
            return NotImplemented
        return (self.entity, self.field, self.target) == (other.entity, other.field, other.target)

    def __hash__(self) -> int:
        return hash((self.entity, self.field, self.target))


class RenderFailure(VocabDocsError):
    """Generating the document for one entity failed."""

    def __init__(self, entity: str, reason: str) -> None:
        self.entity = entity
        self.reason = reason
        super().__init__(f"Failed to render {entity}: {reason}")


class WriteFailure(VocabDocsError):
    """Persisting corpus output failed.

    ``fatal`` is set when the storage layer is unusable as a whole (for
    example the staging directory cannot be created); otherwise the failure
    concerns a single document.
    """

    def __init__(self, target: str, reason: str, *, fatal: bool = False) -> None:
        self.target = target
        self.reason = reason
        self.fatal = fatal
        super().__init__(f"Failed to write {target}: {reason}")


__all__ = [
    "VocabDocsError",
    "ParseError",
    "ConflictError",
    "CycleDetected",
    "DanglingReferenceWarning",
    "RenderFailure",
    "WriteFailure",
]
