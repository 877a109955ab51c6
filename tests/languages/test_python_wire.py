"""Wire round-trips through generated pydantic models."""

import pytest

pydantic = pytest.importorskip("pydantic")

from crosstype.codegen.core.generator import generate_code  # noqa: E402
from crosstype.codegen.languages.python import PythonGenerator  # noqa: E402


@pytest.fixture
def models(load_graph, import_generated):
    """Import the Python module generated from one of the data graphs."""

    def _models(name: str):
        return import_generated(PythonGenerator().generate(load_graph(name)))

    return _models


def test_pure_enum_values(models) -> None:
    module = models("unit_enum")
    assert module.Status("A") is module.Status.A
    assert [m.value for m in module.Status] == ["A", "B"]


def test_typed_variant_carries_the_bare_payload(models) -> None:
    module = models("tagged_union")

    value = module.Choice.new_choice_b(5)
    assert value.model_dump(mode="json") == {"type": "B", "content": 5}

    parsed = module.Choice.model_validate({"type": "B", "content": 5})
    assert parsed.type == "B"
    assert parsed.content.root == 5
    assert parsed.model_dump(mode="json") == {"type": "B", "content": 5}


def test_unit_variant_content_is_absent_or_null(models) -> None:
    module = models("tagged_union")

    assert module.Choice.new_choice_a().model_dump(mode="json") == {"type": "A", "content": None}
    assert module.Choice.model_validate({"type": "A"}).content is None
    dumped = module.Choice.model_validate({"type": "A", "content": None}).model_dump(mode="json")
    assert dumped == {"type": "A", "content": None}


def test_unknown_tag_is_rejected(models) -> None:
    module = models("tagged_union")
    with pytest.raises(pydantic.ValidationError):
        module.Choice.model_validate({"type": "Z", "content": 5})


def test_promoted_variant_round_trip(models) -> None:
    module = models("anonymous_variant")
    wire = {
        "type": "Moved",
        "content": {"some_long_field_name": "x", "and": True, "but_one_more": ["a", "b"]},
    }

    parsed = module.Event.model_validate(wire)
    assert isinstance(parsed.content, module.EventMoved)
    assert parsed.content.and_ is True
    assert parsed.model_dump(mode="json", by_alias=True) == wire


def test_skipped_variant_is_not_accepted(models) -> None:
    module = models("skipped_variant")

    assert module.Filter.new_filter_keep().model_dump(mode="json") == {"type": "Keep", "content": None}
    with pytest.raises(pydantic.ValidationError):
        module.Filter.model_validate({"type": "Drop"})
    assert not hasattr(module.Filter, "new_filter_drop")


def test_optional_field_defaults_to_absent(models) -> None:
    module = models("nested_optional")

    assert module.Labels().tags is None
    assert module.Labels.model_validate({"tags": {"env": ["prod"]}}).tags == {"env": ["prod"]}


def test_alias_round_trip(models) -> None:
    module = models("hyphenated_field")

    account = module.Account.model_validate({"user-name": "ann"})
    assert account.user_name == "ann"
    assert account.model_dump(by_alias=True) == {"user-name": "ann"}
    assert module.Account(user_name="bob").model_dump(by_alias=True) == {"user-name": "bob"}


def test_shared_fields_and_custom_keys(models) -> None:
    module = models("mixed")

    text = module.Message.new_message_text("hi", id=7)
    assert text.model_dump(mode="json", by_alias=True) == {"kind": "Text", "data": "hi", "id": 7}

    moved = module.Message.model_validate({"kind": "Move", "data": {"x": 1, "y": -2}, "id": 3})
    assert isinstance(moved.data, module.MessageMove)
    assert (moved.data.x, moved.data.y) == (1, -2)


def test_named_payload_round_trip(models) -> None:
    module = models("mixed")
    user = {
        "id": 1,
        "display-name": "Ann",
        "created_at": "2024-01-02T03:04:05Z",
        "role": "admin",
    }

    joined = module.Message.model_validate({"kind": "Join", "data": user, "id": 9})
    assert joined.data.root.display_name == "Ann"
    assert joined.data.root.role is module.Role.ADMIN
    assert joined.data.root.email is None

    dumped = joined.model_dump(mode="json", by_alias=True)
    assert dumped["kind"] == "Join"
    assert dumped["data"]["display-name"] == "Ann"
    assert dumped["data"]["role"] == "admin"


def test_generic_struct(models) -> None:
    module = models("generics")

    page = module.Page[int].model_validate({"items": [1, 2]})
    assert page.items == [1, 2]
    assert page.next_cursor is None
    assert module.NamePage.model_validate({"items": ["a"], "next_cursor": "c"}).items == ["a"]


def test_unit_field_is_null_on_the_wire(build_graph, import_generated) -> None:
    graph = build_graph(
        {
            "kind": "struct",
            "name": "HasUnit",
            "fields": [
                {"name": "u", "type": {"primitive": "unit"}},
                {"name": "maybe", "type": {"primitive": "unit"}, "optional": True},
            ],
        }
    )
    module = import_generated(PythonGenerator().generate(graph))

    value = module.HasUnit.model_validate_json('{"u": null, "maybe": null}')
    assert value.model_dump(mode="json") == {"u": None, "maybe": None}
    assert module.HasUnit.model_validate_json('{"u": null}').maybe is None
    with pytest.raises(pydantic.ValidationError):
        module.HasUnit.model_validate_json('{"u": {}}')


def test_every_variant_skipped_reports_a_failed_target(build_graph) -> None:
    graph = build_graph(
        {"kind": "enum", "name": "Gone", "variants": [{"name": "A", "skip": True}, {"name": "B", "skip": True}]}
    )
    result = generate_code(PythonGenerator(), graph)

    assert not result.success
    assert result.code == ""
    assert "Gone: enum has no serialized variant" in result.error_message
