"""Shared fixtures for the crosstype test suite."""

import importlib.util
import sys
from pathlib import Path

import pytest

from crosstype.codegen.core.ir import TypeGraph, graph_from_dict
from crosstype.utils import load_type_graph

DATA_DIR = Path(__file__).parent / "data"


@pytest.fixture
def data_dir() -> Path:
    return DATA_DIR


@pytest.fixture
def load_graph():
    """Load one of the graphs under tests/data by its stem."""

    def _load(name: str) -> TypeGraph:
        return load_type_graph(DATA_DIR / f"{name}.json")

    return _load


@pytest.fixture
def build_graph():
    """Build a graph from declaration dicts written inline in a test."""

    def _build(*declarations) -> TypeGraph:
        return graph_from_dict({"declarations": list(declarations)})

    return _build


@pytest.fixture
def import_generated(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Write generated Python source to disk and import it as a module."""
    counter = iter(range(1000))

    def _import(code: str):
        name = f"generated_models_{next(counter)}"
        path = tmp_path / f"{name}.py"
        path.write_text(code, encoding="utf-8")

        module_spec = importlib.util.spec_from_file_location(name, path)
        module = importlib.util.module_from_spec(module_spec)
        # pydantic resolves postponed annotations through sys.modules
        monkeypatch.setitem(sys.modules, name, module)
        module_spec.loader.exec_module(module)
        return module

    return _import
