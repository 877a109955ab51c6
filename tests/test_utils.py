"""Tests for loading type graph documents."""

import json
from pathlib import Path

import pytest
import requests

from crosstype import utils
from crosstype.codegen.core.ir import GraphFormatError
from crosstype.utils import JSONLoaderError, load_json, load_json_from_file, load_type_graph

DOCUMENT = {"declarations": [{"kind": "struct", "name": "Point"}]}


class FakeResponse:
    def __init__(self, payload=None, status_code: int = 200, body_error: Exception = None):
        self.payload = payload
        self.status_code = status_code
        self.body_error = body_error

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code}", response=self)

    def json(self):
        if self.body_error:
            raise self.body_error
        return self.payload


@pytest.fixture
def fake_get(monkeypatch: pytest.MonkeyPatch):
    """Replace requests.get with a stub returning or raising the given outcome."""

    def _install(outcome):
        calls = []

        def _get(url, timeout):
            calls.append((url, timeout))
            if isinstance(outcome, Exception):
                raise outcome
            return outcome

        monkeypatch.setattr(utils.requests, "get", _get)
        return calls

    return _install


# ###############
# Files
# ###############


def test_load_from_file(tmp_path: Path) -> None:
    path = tmp_path / "graph.json"
    path.write_text(json.dumps(DOCUMENT), encoding="utf-8")

    source, data = load_json(file_path=path)
    assert (source, data) == (str(path), DOCUMENT)


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_json_from_file(tmp_path / "missing.json")


def test_invalid_json_file(tmp_path: Path) -> None:
    path = tmp_path / "graph.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(JSONLoaderError, match="Invalid JSON"):
        load_json_from_file(path)


def test_source_arguments_are_exclusive(tmp_path: Path) -> None:
    with pytest.raises(JSONLoaderError, match="Either file_path or url"):
        load_json()
    with pytest.raises(JSONLoaderError, match="Cannot specify both"):
        load_json(file_path=tmp_path / "a.json", url="https://example.com/a.json")


def test_load_type_graph_from_file(data_dir: Path) -> None:
    graph = load_type_graph(data_dir / "tagged_union.json")
    assert graph.names() == ["Choice"]


def test_malformed_graph_is_reported(tmp_path: Path) -> None:
    path = tmp_path / "graph.json"
    path.write_text(json.dumps({"declarations": [{"kind": "struct"}]}), encoding="utf-8")

    with pytest.raises(GraphFormatError):
        load_type_graph(path)


# ###############
# URLs
# ###############


def test_load_from_url(fake_get) -> None:
    calls = fake_get(FakeResponse(DOCUMENT))

    graph = load_type_graph("https://example.com/graph.json")

    assert graph.names() == ["Point"]
    assert calls == [("https://example.com/graph.json", 30)]


def test_invalid_url() -> None:
    with pytest.raises(JSONLoaderError, match="Invalid URL"):
        load_json(url="example.com/graph.json")


@pytest.mark.parametrize(
    ("outcome", "message"),
    [
        (requests.exceptions.Timeout(), "Request timeout"),
        (requests.exceptions.ConnectionError(), "Connection error"),
        (FakeResponse(status_code=404), "HTTP error 404"),
        (FakeResponse(body_error=ValueError("no body")), "Invalid JSON response"),
    ],
)
def test_url_failures(fake_get, outcome, message: str) -> None:
    fake_get(outcome)
    with pytest.raises(JSONLoaderError, match=message):
        load_json(url="https://example.com/graph.json", timeout=5)
