from __future__ import annotations

import json
from pathlib import Path

import pytest
import requests

from api_clients.schemaorg_client import SchemaOrgClient, SchemaOrgError


class FakeSession:
    def __init__(self, responses: list[requests.Response]):
        self._responses = list(responses)
        self.calls: list[tuple[str, dict]] = []

    def get(self, url, params, headers, timeout):
        self.calls.append((url, dict(headers)))
        return self._responses.pop(0) if len(self._responses) > 1 else self._responses[0]


def make_response(payload, *, status: int = 200, content_type: str = "application/ld+json") -> requests.Response:
    resp = requests.Response()
    resp.status_code = status
    resp.url = "https://schema.org/test.jsonld"
    resp._content = (payload if isinstance(payload, str) else json.dumps(payload)).encode("utf-8")
    resp.headers["Content-Type"] = content_type
    return resp


@pytest.fixture(autouse=True)
def _no_retry_sleep(monkeypatch) -> None:
    monkeypatch.setattr(SchemaOrgClient._get_json.retry, "sleep", lambda seconds: None)


def test_get_vocabulary_returns_graph(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("VOCABDOCS_USER_AGENT", "vocabDocs-test")
    session = FakeSession([make_response({"@graph": [{"@id": "schema:Thing"}]})])
    client = SchemaOrgClient(session=session, cache_dir=tmp_path)
    payload = client.get_vocabulary()
    assert payload["@graph"][0]["@id"] == "schema:Thing"
    url, headers = session.calls[0]
    assert url == SchemaOrgClient.DEFAULT_URL
    assert headers["User-Agent"] == "vocabDocs-test"
    assert list(tmp_path.glob("*.json"))


def test_non_json_response_raises(tmp_path: Path) -> None:
    session = FakeSession([make_response("<html></html>", content_type="text/html")])
    client = SchemaOrgClient(session=session, cache_dir=tmp_path)
    with pytest.raises(SchemaOrgError, match="Non-JSON"):
        client.get_vocabulary("https://example.org/vocab.jsonld")


def test_payload_without_graph_raises(tmp_path: Path) -> None:
    session = FakeSession([make_response({"@context": {}})])
    client = SchemaOrgClient(session=session, cache_dir=tmp_path)
    with pytest.raises(SchemaOrgError, match="no @graph"):
        client.get_vocabulary()


def test_http_errors_are_retried_then_wrapped(tmp_path: Path) -> None:
    session = FakeSession([make_response({}, status=503, content_type="application/json")])
    client = SchemaOrgClient(session=session, cache_dir=tmp_path)
    with pytest.raises(SchemaOrgError, match="Failed to fetch"):
        client.get_vocabulary()
    assert len(session.calls) == 3


def test_transient_error_recovers(tmp_path: Path) -> None:
    session = FakeSession(
        [
            make_response({}, status=502, content_type="application/json"),
            make_response({"@graph": []}),
        ]
    )
    with SchemaOrgClient(session=session, cache_dir=tmp_path) as client:
        assert client.get_vocabulary() == {"@graph": []}
    assert len(session.calls) == 2
