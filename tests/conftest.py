from __future__ import annotations

import json
import os
from pathlib import Path

import pytest
from pytest_socket import disable_socket, enable_socket, socket_allow_hosts

from vocabDocs.vocab.hierarchy import HierarchyIndex
from vocabDocs.vocab.loader import load
from vocabDocs.vocab.merge import MergeOptions, merge
from vocabDocs.vocab.model import BASE, EXTENSION

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture(autouse=True)
def _disable_network(request: pytest.FixtureRequest):
    """Restrict network access while allowing opt-in socket usage."""

    if os.getenv("PYTEST_ALLOW_NETWORK", "0") == "1":
        yield
        return

    socket_allow_hosts(["127.0.0.1", "::1"])
    if request.node.get_closest_marker("enable_socket"):
        enable_socket()
        try:
            yield
        finally:
            disable_socket()
    else:
        disable_socket()
        try:
            yield
        finally:
            enable_socket()


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES


@pytest.fixture
def base_raw() -> dict:
    return json.loads((FIXTURES / "schemaorg-sample.jsonld").read_text(encoding="utf-8"))


@pytest.fixture
def extension_raw() -> dict:
    return json.loads((FIXTURES / "extensions.jsonld").read_text(encoding="utf-8"))


@pytest.fixture
def vocab(base_raw, extension_raw):
    base = load(base_raw, source=BASE, context="https://schema.org")
    extension = load(extension_raw, source=EXTENSION, context="https://schema.org.ai")
    return merge(base, extension, MergeOptions())


@pytest.fixture
def index(vocab) -> HierarchyIndex:
    return HierarchyIndex(vocab).validate()


def _make_vocab(types: dict[str, list[str]], properties: dict[str, tuple[list[str], list[str]]] | None = None):
    """Build a merged vocabulary from ``{type: parents}`` and ``{prop: (domains, ranges)}``."""

    raw = {
        "types": [{"name": name, "subClassOf": parents} for name, parents in types.items()],
        "properties": [
            {"name": name, "domainIncludes": domains, "rangeIncludes": ranges}
            for name, (domains, ranges) in (properties or {}).items()
        ],
    }
    return merge(load(raw, context="https://schema.org"), None, MergeOptions())


@pytest.fixture
def make_vocab():
    return _make_vocab
