"""Tests for the type graph IR and its JSON loader."""

import pytest

from crosstype.codegen.core.ir import (
    AliasDecl,
    EnumDecl,
    GraphFormatError,
    PrimitiveKind,
    StructDecl,
    TypeGraph,
    TypeKind,
    TypeRef,
    VariantKind,
    dependency_order,
    graph_from_dict,
)

# ###############
# TypeRef
# ###############


def test_optional_of_never_nests() -> None:
    inner = TypeRef.optional_of(TypeRef.of_primitive("string"))
    assert TypeRef.optional_of(inner) == inner
    assert inner.element.kind == TypeKind.PRIMITIVE


def test_type_ref_str_reads_like_the_source() -> None:
    ref = TypeRef.optional_of(
        TypeRef.map_of(
            TypeRef.of_primitive("string"),
            TypeRef.list_of(TypeRef.named("Page", (TypeRef.of_primitive("u8"),))),
        )
    )
    assert str(ref) == "Optional<Map<string, List<Page<u8>>>>"


def test_referenced_names_are_unique_and_ordered() -> None:
    ref = TypeRef.map_of(
        TypeRef.named("Key"),
        TypeRef.named("Pair", (TypeRef.named("Value"), TypeRef.named("Key"))),
    )
    assert ref.referenced_names() == ["Key", "Pair", "Value"]


def test_unit_primitive_is_unit() -> None:
    assert TypeRef.of_primitive(PrimitiveKind.UNIT).is_unit()
    assert not TypeRef.of_primitive("bool").is_unit()


# ###############
# Loading
# ###############


def test_loads_every_declaration_kind(load_graph) -> None:
    graph = load_graph("mixed")

    assert graph.names() == ["User", "Role", "UserId", "Message"]
    assert isinstance(graph.get("User"), StructDecl)
    assert isinstance(graph.get("Role"), EnumDecl)
    assert isinstance(graph.get("UserId"), AliasDecl)


def test_enum_keys_and_shared_fields(load_graph) -> None:
    message = load_graph("mixed").get("Message")

    assert message.tag_key == "kind"
    assert message.content_key == "data"
    assert [f.name for f in message.shared_fields] == ["id"]
    assert [v.kind for v in message.variants] == [
        VariantKind.UNIT,
        VariantKind.TYPED,
        VariantKind.TYPED,
        VariantKind.ANONYMOUS_STRUCT,
        VariantKind.TYPED,
    ]
    assert message.variants[-1].skip


def test_enum_keys_default_to_type_and_content(load_graph) -> None:
    choice = load_graph("tagged_union").get("Choice")
    assert (choice.tag_key, choice.content_key) == ("type", "content")


def test_top_level_optional_moves_onto_the_field(load_graph) -> None:
    user = load_graph("mixed").get("User")
    email = next(f for f in user.fields if f.name == "email")
    homepage = next(f for f in user.fields if f.name == "homepage")

    assert email.is_optional
    assert email.type_ref == TypeRef.of_primitive("string")
    assert homepage.is_optional
    assert homepage.type_ref == TypeRef.named("Url")


def test_nested_optional_map_is_preserved(load_graph) -> None:
    tags = load_graph("nested_optional").get("Labels").fields[0]

    assert tags.is_optional
    assert tags.type_ref.kind == TypeKind.MAP
    assert tags.type_ref.element == TypeRef.list_of(TypeRef.of_primitive("string"))


def test_double_optional_is_flattened(build_graph) -> None:
    graph = build_graph(
        {
            "kind": "struct",
            "name": "Box",
            "fields": [
                {
                    "name": "value",
                    "type": {"list": {"optional": {"optional": {"primitive": "i8"}}}},
                }
            ],
        }
    )
    element = graph.get("Box").fields[0].type_ref.element
    assert element == TypeRef.optional_of(TypeRef.of_primitive("i8"))
    assert element.element.kind == TypeKind.PRIMITIVE


def test_renames_and_doc_comments_are_kept(load_graph) -> None:
    graph = load_graph("mixed")
    role = graph.get("Role")
    display_name = graph.get("User").fields[1]

    assert [v.discriminant for v in role.variants] == ["admin", "member"]
    assert display_name.wire_name == "display-name"
    assert display_name.doc_comment == "Name shown next to messages"
    assert graph.get("UserId").doc_comment == "Identifier of a user."


def test_generic_params_and_args(load_graph) -> None:
    graph = load_graph("generics")

    assert graph.get("Page").generic_params == ["T"]
    assert graph.get("NamePage").type_ref == TypeRef.named(
        "Page", (TypeRef.of_primitive("string"),)
    )


@pytest.mark.parametrize(
    ("document", "message"),
    [
        ([], "document must be an object"),
        ({}, "'declarations' must be a list"),
        ({"declarations": [{"kind": "struct"}]}, "$.declarations[0]: missing 'name'"),
        ({"declarations": [{"kind": "trait", "name": "X"}]}, "unknown declaration kind"),
        (
            {"declarations": [{"kind": "alias", "name": "X", "type": {"primitive": "u128"}}]},
            "unknown primitive 'u128'",
        ),
        (
            {"declarations": [{"kind": "alias", "name": "X", "type": {"map": [{"primitive": "u8"}]}}]},
            "'map' must be a [key, value] pair",
        ),
        (
            {"declarations": [{"kind": "alias", "name": "X", "type": {"tuple": []}}]},
            "unrecognized type node",
        ),
        (
            {
                "declarations": [
                    {"kind": "enum", "name": "E", "variants": [{"name": "A", "payload": {"kind": "tuple"}}]}
                ]
            },
            "unknown payload kind 'tuple'",
        ),
        (
            {"declarations": [{"kind": "struct", "name": "S", "generic_params": ["T", "T"]}]},
            "duplicate generic parameter",
        ),
    ],
)
def test_malformed_documents_are_rejected(document, message: str) -> None:
    with pytest.raises(GraphFormatError) as exc_info:
        graph_from_dict(document)
    assert message in str(exc_info.value)


def test_duplicate_declarations_are_rejected() -> None:
    document = {
        "declarations": [
            {"kind": "struct", "name": "Point"},
            {"kind": "struct", "name": "Point"},
        ]
    }
    with pytest.raises(GraphFormatError, match="duplicate declaration 'Point'"):
        graph_from_dict(document)


def test_error_path_points_at_the_field() -> None:
    document = {
        "declarations": [
            {"kind": "struct", "name": "S", "fields": [{"name": "a", "type": {"list": 3}}]}
        ]
    }
    with pytest.raises(GraphFormatError) as exc_info:
        graph_from_dict(document)
    assert exc_info.value.path == "$.declarations[0].fields[0].type"


# ###############
# TypeGraph
# ###############


def test_copy_shares_nothing_mutable(load_graph) -> None:
    graph = load_graph("mixed")
    clone = graph.copy()

    clone.get("Message").variants[0].name = "Changed"
    assert graph.get("Message").variants[0].name == "Ping"
    assert clone != graph


def test_insert_before_places_the_declaration() -> None:
    graph = TypeGraph([StructDecl(name="A"), EnumDecl(name="B")])
    graph.insert_before("B", StructDecl(name="BInner"))
    assert graph.names() == ["A", "BInner", "B"]


def test_insert_before_rejects_duplicates() -> None:
    graph = TypeGraph([StructDecl(name="A")])
    with pytest.raises(GraphFormatError):
        graph.insert_before("A", StructDecl(name="A"))


def test_dependency_order_puts_references_first(load_graph) -> None:
    assert dependency_order(load_graph("mixed")) == ["Role", "User", "UserId", "Message"]


def test_dependency_order_tolerates_cycles(build_graph) -> None:
    graph = build_graph(
        {"kind": "struct", "name": "Node", "fields": [{"name": "next", "type": {"optional": {"named": "Edge"}}}]},
        {"kind": "struct", "name": "Edge", "fields": [{"name": "to", "type": {"named": "Node"}}]},
    )
    assert dependency_order(graph) == ["Edge", "Node"]


def test_skipped_variants_are_not_references(load_graph) -> None:
    graph = load_graph("mixed")
    assert graph.get("Message").referenced_names() == ["UserId", "User"]
