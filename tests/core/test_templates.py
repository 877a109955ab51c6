"""Tests for the template engine wrapper."""

from pathlib import Path

import pytest

from crosstype.codegen.core.templates import TemplateError, create_template_engine, quote_literal


@pytest.fixture
def engine(tmp_path: Path):
    (tmp_path / "fields.j2").write_text(
        "{% for name in names %}\n{{ name }}={{ name | quote }}\n{% endfor %}", encoding="utf-8"
    )
    (tmp_path / "doc.j2").write_text(
        '{{ text | indent_code }}|{{ text | comment }}|{{ text | comment("\\t") }}', encoding="utf-8"
    )
    return create_template_engine(tmp_path)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("plain", '"plain"'),
        ('say "hi"', '"say \\"hi\\""'),
        ("back\\slash", '"back\\\\slash"'),
        ("two\nlines", '"two\\nlines"'),
    ],
)
def test_quote_literal(value: str, expected: str) -> None:
    assert quote_literal(value) == expected


def test_templates_load_from_the_directory(engine) -> None:
    assert engine.template_exists("fields.j2")
    assert not engine.template_exists("missing.j2")
    assert engine.render_template("fields.j2", {"names": ["user-name", "id"]}) == (
        'user-name="user-name"\nid="id"\n'
    )


def test_indent_and_comment_filters(engine) -> None:
    rendered = engine.render_template("doc.j2", {"text": "a\n\nb"})
    assert rendered == "    a\n\n    b|// a\n//\n// b|\t// a\n\t//\n\t// b"


def test_render_failures_raise_template_error(engine) -> None:
    with pytest.raises(TemplateError, match="missing.j2"):
        engine.render_template("missing.j2", {})


def test_engine_without_templates() -> None:
    engine = create_template_engine()
    with pytest.raises(TemplateError, match="struct.j2"):
        engine.render_template("struct.j2", {})
