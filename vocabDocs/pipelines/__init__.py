from __future__ import annotations

"""Generation pipelines."""

from .generate import GenerationReport, build_vocabulary, generate_site

__all__ = ["GenerationReport", "build_vocabulary", "generate_site"]
