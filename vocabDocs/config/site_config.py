from __future__ import annotations

"""Loader for the site generation configuration."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import yaml

CONFIG_ENV = "VOCABDOCS_CONFIG"
DEFAULT_CONFIG_NAME = "site.yml"

CONFLICT_STRATEGIES = ("extension-wins", "base-wins", "error-on-conflict")
OUTPUT_PROFILES = ("mdx", "markdown", "json", "html")


@dataclass(slots=True)
class VocabularyConfig:
    """Namespaces and merge policy for the extended vocabulary."""

    base_context: str = "https://schema.org"
    extension_context: str = "https://schema.org.ai"
    conflict_strategy: str = "extension-wins"
    root_type: str = "Thing"


@dataclass(slots=True)
class RenderConfig:
    """Knobs for document rendering."""

    summary_chars: int = 100
    inherited_by_limit: int = 50
    workers: int = 8


@dataclass(slots=True)
class OutputConfig:
    """Corpus layout and write concurrency."""

    out_dir: str = "content"
    profiles: tuple[str, ...] = ("mdx", "markdown", "json")
    workers: int = 8


@dataclass(slots=True)
class SourcesConfig:
    """Where base and extension vocabularies come from."""

    base_url: str = "https://schema.org/version/latest/schemaorg-current-https.jsonld"
    base_path: str | None = None
    extensions_path: str = "extensions.jsonld"
    cache_dir: str = ".cache/api/schemaorg"


@dataclass(slots=True)
class SiteConfig:
    vocabulary: VocabularyConfig = field(default_factory=VocabularyConfig)
    render: RenderConfig = field(default_factory=RenderConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    sources: SourcesConfig = field(default_factory=SourcesConfig)


def _coerce_int(value: Any, default: int, *, minimum: int = 1) -> int:
    try:
        return max(minimum, int(value))
    except (TypeError, ValueError):
        return default


def _coerce_str(value: Any, default: str) -> str:
    if value is None:
        return default
    text = str(value).strip()
    return text or default


def _load_vocabulary(data: Mapping[str, Any] | None) -> VocabularyConfig:
    if not data:
        return VocabularyConfig()
    defaults = VocabularyConfig()
    strategy = _coerce_str(data.get("conflict_strategy"), defaults.conflict_strategy)
    if strategy not in CONFLICT_STRATEGIES:
        raise ValueError(
            f"Unknown conflict_strategy '{strategy}' (expected one of {', '.join(CONFLICT_STRATEGIES)})"
        )
    return VocabularyConfig(
        base_context=_coerce_str(data.get("base_context"), defaults.base_context).rstrip("/"),
        extension_context=_coerce_str(data.get("extension_context"), defaults.extension_context).rstrip("/"),
        conflict_strategy=strategy,
        root_type=_coerce_str(data.get("root_type"), defaults.root_type),
    )


def _load_render(data: Mapping[str, Any] | None) -> RenderConfig:
    if not data:
        return RenderConfig()
    return RenderConfig(
        summary_chars=_coerce_int(data.get("summary_chars"), 100, minimum=10),
        inherited_by_limit=_coerce_int(data.get("inherited_by_limit"), 50),
        workers=_coerce_int(data.get("workers"), 8),
    )


def _load_profiles(value: Any) -> tuple[str, ...]:
    if value is None:
        return OutputConfig().profiles
    if isinstance(value, str):
        value = [value]
    profiles: list[str] = []
    for item in value:
        name = str(item).strip().lower()
        if name not in OUTPUT_PROFILES:
            raise ValueError(f"Unknown output profile '{name}'")
        if name not in profiles:
            profiles.append(name)
    return tuple(profiles) or OutputConfig().profiles


def _load_output(data: Mapping[str, Any] | None) -> OutputConfig:
    if not data:
        return OutputConfig()
    return OutputConfig(
        out_dir=_coerce_str(data.get("out_dir"), "content"),
        profiles=_load_profiles(data.get("profiles")),
        workers=_coerce_int(data.get("workers"), 8),
    )


def _load_sources(data: Mapping[str, Any] | None) -> SourcesConfig:
    if not data:
        return SourcesConfig()
    defaults = SourcesConfig()
    base_path = data.get("base_path")
    return SourcesConfig(
        base_url=_coerce_str(data.get("base_url"), defaults.base_url),
        base_path=str(base_path) if base_path else None,
        extensions_path=_coerce_str(data.get("extensions_path"), defaults.extensions_path),
        cache_dir=_coerce_str(data.get("cache_dir"), defaults.cache_dir),
    )


def config_path(path: Path | None = None) -> Path | None:
    """Resolve the configuration file: argument, environment, then ``site.yml``."""

    if path is not None:
        return Path(path)
    env = os.getenv(CONFIG_ENV)
    if env:
        return Path(env)
    candidate = Path.cwd() / DEFAULT_CONFIG_NAME
    return candidate if candidate.exists() else None


def load_site_config(path: Path | None = None) -> SiteConfig:
    """Load site settings from YAML with safe defaults."""

    resolved = config_path(path)
    if resolved is None or not resolved.exists():
        return SiteConfig()
    raw = yaml.safe_load(resolved.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, Mapping):
        raise ValueError(f"{resolved} must contain a mapping at the top level")
    return SiteConfig(
        vocabulary=_load_vocabulary(raw.get("vocabulary")),
        render=_load_render(raw.get("render")),
        output=_load_output(raw.get("output")),
        sources=_load_sources(raw.get("sources")),
    )


__all__ = [
    "CONFIG_ENV",
    "CONFLICT_STRATEGIES",
    "OUTPUT_PROFILES",
    "VocabularyConfig",
    "RenderConfig",
    "OutputConfig",
    "SourcesConfig",
    "SiteConfig",
    "config_path",
    "load_site_config",
]
