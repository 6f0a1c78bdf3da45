from __future__ import annotations

"""End-to-end generation: load, merge, validate, render and write a corpus."""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Sequence

from vocabDocs.config.site_config import SiteConfig
from vocabDocs.corpus.builder import CorpusWriter
from vocabDocs.errors import RenderFailure
from vocabDocs.render.document import Document
from vocabDocs.render.renderer import DocumentRenderer
from vocabDocs.utils.log_json import JsonLogger
from vocabDocs.vocab.hierarchy import HierarchyIndex, dangling_references
from vocabDocs.vocab.loader import load
from vocabDocs.vocab.merge import MergeOptions, filter_by_source, merge
from vocabDocs.vocab.model import BASE, EXTENSION, empty_vocabulary

_logger = JsonLogger("pipeline")

CORE_TYPES = (
    "Thing", "Action", "CreativeWork", "Event", "Intangible",
    "Organization", "Person", "Place", "Product",
    "Article", "BlogPosting", "WebPage", "WebSite", "WebAPI",
    "ImageObject", "VideoObject", "AudioObject",
    "Offer", "Review", "Rating",
    "PostalAddress", "ContactPoint",
    "LocalBusiness", "Restaurant", "Hotel",
    "Book", "Movie", "MusicRecording",
    "Recipe", "HowTo", "FAQPage",
    "ItemList", "BreadcrumbList",
    "SearchAction", "ReadAction", "WatchAction",
    "SoftwareApplication",
)


@dataclass
class GenerationReport:
    """Counts and messages for one generation run; written next to the corpus."""

    types: int = 0
    properties: int = 0
    skipped: int = 0
    warnings: list[str] = field(default_factory=list)
    failures: list[str] = field(default_factory=list)
    out_dir: str = ""
    files: int = 0

    @property
    def processed(self) -> int:
        return self.types + self.properties

    def as_dict(self) -> dict[str, Any]:
        return {
            "processed": self.processed,
            "types": self.types,
            "properties": self.properties,
            "skipped": self.skipped,
            "warnings": len(self.warnings),
            "messages": {"warnings": list(self.warnings), "failures": list(self.failures)},
        }


def build_vocabulary(
    base_raw: Any,
    extension_raw: Any | None = None,
    *,
    config: SiteConfig | None = None,
    conflict_strategy: str | None = None,
) -> tuple[HierarchyIndex, list[str]]:
    """Load and merge the vocabularies and validate the hierarchy.

    Returns the validated index over the frozen vocabulary and the loader
    warnings. Raises :class:`~vocabDocs.errors.ConflictError` or
    :class:`~vocabDocs.errors.CycleDetected` before anything is rendered.
    """

    config = config or SiteConfig()
    vocab_cfg = config.vocabulary
    base = load(base_raw, source=BASE, context=vocab_cfg.base_context)
    if extension_raw is None:
        extension = empty_vocabulary(vocab_cfg.extension_context)
    else:
        extension = load(extension_raw, source=EXTENSION, context=vocab_cfg.extension_context)
    options = MergeOptions(
        base_context=vocab_cfg.base_context,
        extension_context=vocab_cfg.extension_context,
        conflict_strategy=conflict_strategy or vocab_cfg.conflict_strategy,
        root=vocab_cfg.root_type,
    )
    index = HierarchyIndex(merge(base, extension, options)).validate()
    return index, [*base.warnings, *extension.warnings]


def select_types(
    index: HierarchyIndex,
    *,
    types: Sequence[str] | None = None,
    all_types: bool = False,
    extensions_only: bool = False,
) -> tuple[list[str], list[str]]:
    """Pick the types to publish and return ``(selected, missing)``.

    Every ancestor of a selected type is published as well so breadcrumbs
    and inherited-property headings always have a page to link to.
    """

    vocab = index.vocab
    extension_types = [thing.name for thing in filter_by_source(vocab, EXTENSION)[0]]
    if extensions_only:
        requested = extension_types
    elif all_types:
        requested = vocab.type_names()
    elif types:
        requested = list(types)
    else:
        requested = [*CORE_TYPES, *extension_types]

    missing = sorted({name for name in requested if name not in vocab.things})
    selected: set[str] = set()
    for name in requested:
        if name not in vocab.things or name in selected:
            continue
        selected.add(name)
        selected.update(a for a in index.ancestors(name) if a in vocab.things)
    return sorted(selected), missing


def select_properties(index: HierarchyIndex, type_names: Sequence[str]) -> list[str]:
    """Properties shown on any selected type, plus every extension property."""

    used: set[str] = set()
    for name in type_names:
        used.update(index.properties_for_type(name).names())
    used.update(rel.name for rel in filter_by_source(index.vocab, EXTENSION)[1])
    return sorted(used)


def _render_all(
    renderer: DocumentRenderer,
    type_names: Sequence[str],
    property_names: Sequence[str],
    max_workers: int,
) -> tuple[list[Document], list[RenderFailure]]:
    def render(job: tuple[str, str]) -> Document | RenderFailure:
        kind, name = job
        try:
            if kind == "type":
                return renderer.render_type(name)
            return renderer.render_property(name)
        except Exception as exc:
            _logger.warning("pipeline.render.failed", entity=name, kind=kind, reason=str(exc))
            return RenderFailure(name, f"{type(exc).__name__}: {exc}")

    jobs = [("type", name) for name in type_names] + [("property", name) for name in property_names]
    with ThreadPoolExecutor(max_workers=max(1, max_workers)) as pool:
        results = list(pool.map(render, jobs))
    documents = [r for r in results if isinstance(r, Document)]
    failures = [r for r in results if isinstance(r, RenderFailure)]
    return documents, failures


def generate_site(
    base_raw: Any,
    extension_raw: Any | None = None,
    *,
    config: SiteConfig | None = None,
    out_dir: Path | None = None,
    types: Sequence[str] | None = None,
    all_types: bool = False,
    extensions_only: bool = False,
    profiles: Sequence[str] | None = None,
    conflict_strategy: str | None = None,
) -> GenerationReport:
    """Generate the documentation corpus and return its :class:`GenerationReport`.

    Vocabulary-level errors propagate before any output is written;
    per-entity render and write failures are counted as skipped.
    """

    config = config or SiteConfig()
    target = Path(out_dir or config.output.out_dir)
    with _logger.timed("pipeline.generate", out_dir=str(target)) as outcome:
        report = _generate(
            base_raw,
            extension_raw,
            config=config,
            target=target,
            types=types,
            all_types=all_types,
            extensions_only=extensions_only,
            profiles=profiles,
            conflict_strategy=conflict_strategy,
        )
        outcome.update(
            types=report.types,
            properties=report.properties,
            skipped=report.skipped,
            warnings=len(report.warnings),
        )
    return report


def _generate(
    base_raw: Any,
    extension_raw: Any | None,
    *,
    config: SiteConfig,
    target: Path,
    types: Sequence[str] | None,
    all_types: bool,
    extensions_only: bool,
    profiles: Sequence[str] | None,
    conflict_strategy: str | None,
) -> GenerationReport:
    index, warnings = build_vocabulary(
        base_raw, extension_raw, config=config, conflict_strategy=conflict_strategy
    )
    vocab = index.vocab
    type_names, missing = select_types(
        index, types=types, all_types=all_types, extensions_only=extensions_only
    )
    property_names = select_properties(index, type_names)
    report = GenerationReport(out_dir=str(target))
    report.warnings.extend(warnings)
    report.warnings.extend(f"type '{name}' not found in vocabulary" for name in missing)
    for name in missing:
        _logger.warning("pipeline.select.missing", entity=name, kind="type")

    renderer = DocumentRenderer(
        index,
        summary_chars=config.render.summary_chars,
        inherited_by_limit=config.render.inherited_by_limit,
        published_types=type_names,
        published_properties=property_names,
    )
    documents, render_failures = _render_all(
        renderer, type_names, property_names, config.render.workers
    )
    report.failures.extend(str(failure) for failure in render_failures)
    for doc in documents:
        report.warnings.extend(str(w) for w in doc.warnings)
    dangling = dangling_references(vocab)
    if dangling:
        _logger.info("pipeline.vocab.dangling", count=len(dangling))

    writer = CorpusWriter(
        target,
        index,
        profiles=tuple(profiles or config.output.profiles),
        max_workers=config.output.workers,
    )
    report.types = sum(1 for doc in documents if doc.kind == "type")
    report.properties = len(documents) - report.types
    report.skipped = len(render_failures)
    summary = report.as_dict()
    summary["vocabulary"] = {
        "types": len(vocab.things),
        "properties": len(vocab.relationships),
        "dangling_references": len(dangling),
    }
    written = writer.write(documents, summary=summary)
    if written.skipped:
        published = set(written.written)
        report.types = sum(1 for doc in documents if doc.kind == "type" and doc.slug in published)
        report.properties = len(published) - report.types
        report.skipped += written.skipped
        report.failures.extend(written.failures + written.render_failures)
    report.files = written.files
    return report


__all__ = [
    "CORE_TYPES",
    "GenerationReport",
    "build_vocabulary",
    "generate_site",
    "select_properties",
    "select_types",
]
