from __future__ import annotations

"""Corpus writer with staging, manifest, validation and snapshot helpers."""

import hashlib
import json
import re
import shutil
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping, Sequence

import yaml

from vocabDocs.corpus.navigation import branch_menus, expand_for, navigation_tree
from vocabDocs.errors import RenderFailure, WriteFailure
from vocabDocs.render.document import TYPE, Document
from vocabDocs.render.formats import PROFILES, serialize
from vocabDocs.utils.log_json import JsonLogger
from vocabDocs.vocab.hierarchy import HierarchyIndex

DEFAULT_PROFILES = ("mdx", "markdown", "json")
MANIFEST = "manifest.json"
CHECKSUMS = "checksums.sha256"
REPORT = "generation-report.json"
NAVIGATION = "navigation.json"
SEARCH_INDEX = "search-index.json"
_logger = JsonLogger("corpus")

REQUIRED_FIELDS = {
    "Class": ("$id", "$context", "$type", "$source", "name", "description", "parents"),
    "Property": ("$id", "$context", "$type", "$source", "name", "description"),
}
_LINK_RE = re.compile(r"\]\(([^)\s]+)\)")


@dataclass
class WriteReport:
    out_dir: str
    written: list[str] = field(default_factory=list)
    files: int = 0
    failures: list[str] = field(default_factory=list)
    render_failures: list[str] = field(default_factory=list)

    @property
    def skipped(self) -> int:
        return len(self.failures) + len(self.render_failures)

    def as_dict(self) -> dict[str, Any]:
        return {
            "out_dir": self.out_dir,
            "documents": len(self.written),
            "files": self.files,
            "skipped": self.skipped,
            "write_failures": list(self.failures),
            "render_failures": list(self.render_failures),
        }


def _now() -> datetime:
    return datetime.now(timezone.utc).replace(microsecond=0)


def _file_sha256(path: Path) -> str:
    digest = hashlib.sha256()
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(65536), b""):
            digest.update(chunk)
    return digest.hexdigest()


def _dump_json(payload: Any) -> str:
    return json.dumps(payload, indent=2, ensure_ascii=False) + "\n"


def _write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8", newline="\n") as handle:
        handle.write(text)


class CorpusWriter:
    """Persist rendered documents plus navigation and search artifacts.

    Output is assembled in a sibling staging directory and swapped into
    ``out_dir`` only once the whole batch has been written, so an aborted
    run never leaves a half-written corpus in place.
    """

    def __init__(
        self,
        out_dir: Path,
        index: HierarchyIndex,
        *,
        profiles: Sequence[str] = DEFAULT_PROFILES,
        max_workers: int = 8,
    ) -> None:
        self.out_dir = Path(out_dir)
        self.index = index
        unknown = [p for p in profiles if p not in PROFILES]
        if unknown:
            raise ValueError(f"Unknown output profile(s): {', '.join(unknown)}")
        self.profiles = tuple(profiles) or DEFAULT_PROFILES
        self.max_workers = max(1, int(max_workers))

    # Staging -----------------------------------------------------------
    def _check_target(self) -> None:
        if not self.out_dir.exists():
            return
        if not self.out_dir.is_dir():
            raise WriteFailure(str(self.out_dir), "target exists and is not a directory", fatal=True)
        if (self.out_dir / MANIFEST).exists() or not any(self.out_dir.iterdir()):
            return
        raise WriteFailure(
            str(self.out_dir),
            "refusing to replace a non-empty directory that is not a generated corpus",
            fatal=True,
        )

    def _prepare_staging(self) -> Path:
        staging = self.out_dir.parent / f".{self.out_dir.name}.staging"
        try:
            if staging.exists():
                shutil.rmtree(staging)
            staging.mkdir(parents=True)
        except OSError as exc:
            raise WriteFailure(str(staging), str(exc), fatal=True) from exc
        return staging

    def _publish(self, staging: Path) -> None:
        previous = self.out_dir.parent / f".{self.out_dir.name}.previous"
        try:
            if previous.exists():
                shutil.rmtree(previous)
            if self.out_dir.exists():
                self.out_dir.rename(previous)
            staging.rename(self.out_dir)
        except OSError as exc:
            if previous.exists() and not self.out_dir.exists():
                previous.rename(self.out_dir)
            shutil.rmtree(staging, ignore_errors=True)
            _logger.error("corpus.publish.failed", out_dir=str(self.out_dir), reason=str(exc))
            raise WriteFailure(str(self.out_dir), str(exc), fatal=True) from exc
        shutil.rmtree(previous, ignore_errors=True)

    # Documents ---------------------------------------------------------
    def _write_document(
        self, staging: Path, doc: Document, navigation: list[dict]
    ) -> tuple[Document, int, str | None, str | None]:
        written: list[Path] = []
        try:
            for profile in self.profiles:
                options: dict[str, Any] = {}
                if profile == "html":
                    crumbs = list(reversed(doc.ancestors)) + [doc.name] if doc.kind == TYPE else []
                    options["navigation"] = expand_for(navigation, crumbs)
                ext, text = serialize(doc, profile, **options)
                path = staging / f"{doc.slug}.{ext}"
                _write_text(path, text)
                written.append(path)
        except OSError as exc:
            for path in written:
                path.unlink(missing_ok=True)
            failure = WriteFailure(doc.slug, str(exc))
            _logger.warning("corpus.write.document_failed", entity=doc.name, reason=str(exc))
            return doc, 0, str(failure), None
        except Exception as exc:
            for path in written:
                path.unlink(missing_ok=True)
            failure = RenderFailure(doc.name, f"{type(exc).__name__}: {exc}")
            _logger.warning("corpus.write.serialize_failed", entity=doc.name, reason=str(exc))
            return doc, 0, None, str(failure)
        return doc, len(written), None, None

    def write(
        self,
        documents: Sequence[Document],
        *,
        summary: Mapping[str, Any] | None = None,
    ) -> WriteReport:
        """Write ``documents`` and derived artifacts; return a :class:`WriteReport`."""

        self._check_target()
        staging = self._prepare_staging()
        report = WriteReport(out_dir=str(self.out_dir))
        ordered = sorted(documents, key=lambda doc: (doc.kind, doc.name))
        type_names = [doc.name for doc in ordered if doc.kind == TYPE]
        _logger.info(
            "corpus.write.start",
            out_dir=str(self.out_dir),
            documents=len(ordered),
            profiles=list(self.profiles),
        )
        try:
            navigation = navigation_tree(self.index, include=type_names)
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                results = list(
                    pool.map(lambda doc: self._write_document(staging, doc, navigation), ordered)
                )

            published: list[Document] = []
            for doc, files, write_failure, render_failure in results:
                if write_failure:
                    report.failures.append(write_failure)
                elif render_failure:
                    report.render_failures.append(render_failure)
                else:
                    published.append(doc)
                    report.written.append(doc.slug)
                    report.files += files

            published_types = [doc.name for doc in published if doc.kind == TYPE]
            if len(published_types) != len(type_names):
                navigation = navigation_tree(self.index, include=published_types)
            self._write_artifacts(staging, published, navigation, published_types)
            payload = dict(summary or {})
            payload["write"] = report.as_dict()
            payload["write"].pop("out_dir")
            _write_text(staging / REPORT, _dump_json(payload))
            _write_manifest(staging, payload)
        except OSError as exc:
            shutil.rmtree(staging, ignore_errors=True)
            raise WriteFailure(str(staging), str(exc), fatal=True) from exc
        except BaseException:
            shutil.rmtree(staging, ignore_errors=True)
            raise
        self._publish(staging)
        _logger.info(
            "corpus.write.complete",
            out_dir=str(self.out_dir),
            documents=len(report.written),
            files=report.files,
            skipped=report.skipped,
        )
        return report

    def _write_artifacts(
        self,
        staging: Path,
        published: Sequence[Document],
        navigation: list[dict],
        type_names: Sequence[str],
    ) -> None:
        _write_text(staging / NAVIGATION, _dump_json(navigation))
        _write_text(staging / SEARCH_INDEX, _dump_json(search_index(published)))
        for rel_path, menu in sorted(branch_menus(self.index, include=type_names).items()):
            _write_text(staging / "things" / rel_path, _dump_json(menu))


def search_index(documents: Sequence[Document]) -> list[dict[str, str]]:
    """Flat ``{id, name, description, slug, path, type}`` entries sorted by type and name."""

    entries = [
        {
            "id": str(doc.frontmatter.get("$id", "")),
            "name": doc.name,
            "description": str(doc.frontmatter.get("description", "")),
            "slug": doc.slug,
            "path": f"/{doc.slug}",
            "type": "Type" if doc.kind == TYPE else "Property",
        }
        for doc in documents
    ]
    return sorted(entries, key=lambda entry: (entry["type"], entry["name"]))


def _content_files(root: Path) -> list[Path]:
    skip = {MANIFEST, CHECKSUMS}
    return sorted(
        (p for p in root.rglob("*") if p.is_file() and p.relative_to(root).as_posix() not in skip),
        key=lambda p: p.relative_to(root).as_posix(),
    )


def _write_manifest(root: Path, summary: Mapping[str, Any]) -> dict:
    files = _content_files(root)
    checksums = [(p.relative_to(root).as_posix(), _file_sha256(p)) for p in files]
    manifest = {
        "generated_at": _now().isoformat().replace("+00:00", "Z"),
        "files": len(checksums),
        "summary": {k: v for k, v in summary.items() if k != "write"},
    }
    _write_text(root / MANIFEST, json.dumps(manifest, indent=2, sort_keys=True) + "\n")
    lines = "".join(f"{sha}  {name}\n" for name, sha in checksums)
    _write_text(root / CHECKSUMS, lines)
    return manifest


def _read_frontmatter(path: Path) -> dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if path.suffix == ".json":
        return dict(json.loads(text).get("frontmatter") or {})
    if not text.startswith("---\n"):
        return {}
    end = text.find("\n---\n", 4)
    if end == -1:
        return {}
    data = yaml.safe_load(text[4:end]) or {}
    return dict(data) if isinstance(data, dict) else {}


def validate_corpus(data_dir: Path) -> list[str]:
    """Check frontmatter, checksums and internal links of a written corpus."""

    data_dir = Path(data_dir)
    problems: list[str] = []
    _logger.info("corpus.validate.start", data_dir=str(data_dir))
    if not (data_dir / MANIFEST).exists():
        problems.append(f"{MANIFEST} missing")

    checksum_path = data_dir / CHECKSUMS
    if checksum_path.exists():
        for line in checksum_path.read_text(encoding="utf-8").splitlines():
            if not line.strip():
                continue
            sha, _, name = line.partition("  ")
            target = data_dir / name
            if not target.exists():
                problems.append(f"{name}: listed in {CHECKSUMS} but missing")
            elif _file_sha256(target) != sha:
                problems.append(f"{name}: checksum mismatch")
    else:
        problems.append(f"{CHECKSUMS} missing")

    for collection in ("things", "properties"):
        for path in sorted((data_dir / collection).glob("*")):
            if not path.is_file() or path.suffix not in {".mdx", ".json"} or path.name == "meta.json":
                continue
            rel = path.relative_to(data_dir).as_posix()
            try:
                fields = _read_frontmatter(path)
            except (ValueError, yaml.YAMLError) as exc:
                problems.append(f"{rel}: unreadable frontmatter ({exc})")
                continue
            kind = fields.get("$type")
            if kind not in REQUIRED_FIELDS:
                problems.append(f"{rel}: invalid $type {kind!r}")
                continue
            for key in REQUIRED_FIELDS[kind]:
                if key not in fields:
                    problems.append(f"{rel}: missing {key}")
            if fields.get("name") != path.stem:
                problems.append(f"{rel}: name does not match file name")

        for path in sorted((data_dir / collection).glob("*")):
            if not path.is_file() or path.suffix not in {".mdx", ".md"}:
                continue
            rel = path.relative_to(data_dir).as_posix()
            for target in _LINK_RE.findall(path.read_text(encoding="utf-8")):
                if "://" in target or target.startswith(("#", "/", "mailto:")):
                    continue
                if not (path.parent / target).resolve().exists():
                    problems.append(f"{rel}: broken link {target}")

    if problems:
        _logger.warning("corpus.validate.failed", data_dir=str(data_dir), issues=len(problems))
    else:
        _logger.info("corpus.validate.ok", data_dir=str(data_dir))
    return problems


def snapshot_corpus(data_dir: Path, out_dir: Path) -> Path:
    data_dir = Path(data_dir)
    out_dir = Path(out_dir)
    if not (data_dir / MANIFEST).exists():
        raise ValueError(f"{data_dir} is not a generated corpus (no {MANIFEST})")
    _logger.info("corpus.snapshot.start", data_dir=str(data_dir), out_dir=str(out_dir))
    timestamp = _now().strftime("%Y%m%dT%H%M%SZ")
    target = out_dir / timestamp
    counter = 1
    while target.exists():
        counter += 1
        target = out_dir / f"{timestamp}_{counter:02d}"
    out_dir.mkdir(parents=True, exist_ok=True)
    shutil.copytree(data_dir, target)
    _logger.info("corpus.snapshot.complete", target=str(target))
    return target


__all__ = [
    "CorpusWriter",
    "WriteReport",
    "search_index",
    "validate_corpus",
    "snapshot_corpus",
]
