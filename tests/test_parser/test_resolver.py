"""Tests for specgen.parser.resolver."""

from __future__ import annotations

from typing import Any

import pytest

from specgen.exceptions import CyclicReferenceError, ReferenceResolutionError
from specgen.parser.resolver import (
    Document,
    escape_segment,
    is_reference,
    resolve,
    resolve_chain,
    unescape_segment,
)


def _doc(**components: Any) -> Document:
    return Document({"openapi": "3.0.3", "paths": {}, "components": components})


# ---------------------------------------------------------------------------
# Document index
# ---------------------------------------------------------------------------


class TestDocument:
    """Test the pointer index built by Document."""

    def test_indexes_root_and_nested_nodes(self) -> None:
        doc = _doc(schemas={"User": {"type": "object"}})
        assert doc.lookup("#") is doc.raw
        assert doc.lookup("#/components/schemas/User") == {"type": "object"}
        assert doc.lookup("#/components/schemas/User/type") == "object"

    def test_indexes_list_positions(self) -> None:
        doc = _doc(schemas={"Tags": {"enum": ["a", "b"]}})
        assert doc.lookup("#/components/schemas/Tags/enum/1") == "b"

    def test_escapes_slash_and_tilde_keys(self) -> None:
        doc = Document({"paths": {"/users/{id}": {"get": {}}, "a~b": 1}})
        assert "#/paths/~1users~1{id}/get" in doc
        assert doc.lookup("#/paths/a~0b") == 1

    def test_paths_and_schemas_properties(self, users_api: Document) -> None:
        assert "/health" in users_api.paths
        assert set(users_api.schemas) == {"User", "Error"}

    def test_swagger_definitions_used_as_schemas(self) -> None:
        doc = Document({"definitions": {"Pet": {"type": "object"}}})
        assert list(doc.schemas) == ["Pet"]

    def test_missing_paths_is_empty(self) -> None:
        assert dict(Document({"openapi": "3.0.0"}).paths) == {}

    def test_self_referencing_tree_is_indexed_finitely(self) -> None:
        node: dict[str, Any] = {"name": "loop"}
        node["self"] = node
        doc = Document({"components": {"schemas": {"Loop": node}}})
        assert doc.lookup("#/components/schemas/Loop/self") is node
        assert "#/components/schemas/Loop/self/self" not in doc

    def test_lookup_miss_raises_key_error(self) -> None:
        with pytest.raises(KeyError):
            _doc().lookup("#/components/schemas/Nope")


class TestSegments:
    """Test RFC 6901 segment escaping."""

    def test_escape_round_trip(self) -> None:
        assert escape_segment("a/b~c") == "a~1b~0c"
        assert unescape_segment("a~1b~0c") == "a/b~c"


class TestIsReference:
    """Test reference detection."""

    def test_detects_reference(self) -> None:
        assert is_reference({"$ref": "#/components/schemas/User"})

    def test_rejects_non_reference(self) -> None:
        assert not is_reference({"type": "string"})
        assert not is_reference({"$ref": 42})
        assert not is_reference("#/components/schemas/User")


# ---------------------------------------------------------------------------
# resolve
# ---------------------------------------------------------------------------


class TestResolve:
    """Test single-level resolution."""

    def test_resolves_internal_pointer(self) -> None:
        doc = _doc(schemas={"User": {"type": "object"}})
        assert resolve(doc, "#/components/schemas/User") == {"type": "object"}

    def test_resolves_percent_encoded_pointer(self) -> None:
        doc = _doc(schemas={"Page[User]": {"type": "object"}})
        assert resolve(doc, "#/components/schemas/Page%5BUser%5D") == {"type": "object"}

    def test_returns_reference_target_unfollowed(self) -> None:
        doc = _doc(schemas={"A": {"$ref": "#/components/schemas/B"}, "B": {"type": "string"}})
        assert resolve(doc, "#/components/schemas/A") == {"$ref": "#/components/schemas/B"}

    def test_missing_pointer_names_exact_pointer(self) -> None:
        doc = _doc(schemas={"User": {"type": "object"}})
        with pytest.raises(ReferenceResolutionError) as exc_info:
            resolve(doc, "#/components/schemas/Usr")
        assert exc_info.value.pointer == "#/components/schemas/Usr"
        assert "'#/components/schemas/Usr'" in str(exc_info.value)
        assert "key 'Usr' not found under '#/components/schemas'" in str(exc_info.value)

    def test_missing_intermediate_segment(self) -> None:
        with pytest.raises(ReferenceResolutionError, match="key 'parameters' not found under '#/components'"):
            resolve(_doc(), "#/components/parameters/Limit")

    def test_external_reference_rejected(self) -> None:
        with pytest.raises(ReferenceResolutionError, match="external references are not supported"):
            resolve(_doc(), "other.yaml#/components/schemas/User")

    def test_non_pointer_fragment_rejected(self) -> None:
        with pytest.raises(ReferenceResolutionError, match="only JSON Pointer fragments"):
            resolve(_doc(), "#User")


# ---------------------------------------------------------------------------
# resolve_chain
# ---------------------------------------------------------------------------


class TestResolveChain:
    """Test transitive resolution with cycle detection."""

    def test_non_reference_returned_unchanged(self) -> None:
        node = {"type": "string"}
        assert resolve_chain(_doc(), node) is node

    def test_follows_chain(self) -> None:
        doc = _doc(
            parameters={
                "A": {"$ref": "#/components/parameters/B"},
                "B": {"name": "limit", "in": "query"},
            }
        )
        resolved = resolve_chain(doc, {"$ref": "#/components/parameters/A"})
        assert resolved == {"name": "limit", "in": "query"}

    def test_cycle_raises_with_chain(self) -> None:
        doc = _doc(
            schemas={
                "A": {"$ref": "#/components/schemas/B"},
                "B": {"$ref": "#/components/schemas/A"},
            }
        )
        with pytest.raises(CyclicReferenceError) as exc_info:
            resolve_chain(doc, {"$ref": "#/components/schemas/A"})
        exc = exc_info.value
        assert exc.pointer == "#/components/schemas/A"
        assert exc.chain == ("#/components/schemas/A", "#/components/schemas/B")
        assert "#/components/schemas/A -> #/components/schemas/B -> #/components/schemas/A" in str(exc)

    def test_self_reference_is_a_cycle(self) -> None:
        doc = _doc(schemas={"A": {"$ref": "#/components/schemas/A"}})
        with pytest.raises(CyclicReferenceError):
            resolve_chain(doc, {"$ref": "#/components/schemas/A"})

    def test_visited_pointers_are_honoured(self) -> None:
        doc = _doc(schemas={"A": {"type": "string"}})
        with pytest.raises(CyclicReferenceError):
            resolve_chain(doc, {"$ref": "#/components/schemas/A"}, ("#/components/schemas/A",))

    def test_visited_is_not_mutated(self) -> None:
        doc = _doc(schemas={"A": {"$ref": "#/components/schemas/B"}, "B": {"type": "string"}})
        visited: tuple[str, ...] = ()
        resolve_chain(doc, {"$ref": "#/components/schemas/A"}, visited)
        resolve_chain(doc, {"$ref": "#/components/schemas/A"}, visited)
        assert visited == ()

    def test_broken_link_in_chain(self) -> None:
        doc = _doc(schemas={"A": {"$ref": "#/components/schemas/Gone"}})
        with pytest.raises(ReferenceResolutionError) as exc_info:
            resolve_chain(doc, {"$ref": "#/components/schemas/A"})
        assert exc_info.value.pointer == "#/components/schemas/Gone"
