"""Resolve ``$ref`` JSON Reference pointers against an indexed document.

OpenAPI documents commonly use ``$ref`` pointers (e.g.,
``{"$ref": "#/components/parameters/Limit"}``) to avoid repetition.  This
module wraps the loaded document in a read-only :class:`Document` that
indexes every node by its JSON Pointer once, so each lookup is a single
dictionary access instead of a path walk.

Only **internal** references (those starting with ``#/``) are supported.
External file or URL references raise
:class:`~specgen.exceptions.ReferenceResolutionError`.

:func:`resolve` follows exactly one level.  :func:`resolve_chain` follows a
chain of references (a reference whose target is itself a reference) and
carries the pointers already visited, raising
:class:`~specgen.exceptions.CyclicReferenceError` instead of looping.
"""

from __future__ import annotations

from typing import Any, Mapping
from urllib.parse import unquote

from specgen.exceptions import CyclicReferenceError, ReferenceResolutionError

REF_KEY = "$ref"
ROOT_POINTER = "#"


def escape_segment(segment: str) -> str:
    """Escape a mapping key for use in a JSON Pointer (RFC 6901)."""
    return segment.replace("~", "~0").replace("/", "~1")


def unescape_segment(segment: str) -> str:
    """Reverse :func:`escape_segment`."""
    return segment.replace("~1", "/").replace("~0", "~")


def is_reference(node: Any) -> bool:
    """Return ``True`` if *node* is a ``{"$ref": "..."}`` object."""
    return isinstance(node, Mapping) and isinstance(node.get(REF_KEY), str)


class Document:
    """Read-only view of a loaded OpenAPI document with a pointer index.

    The index maps every pointer (``"#"``, ``"#/paths"``,
    ``"#/components/schemas/User"``, ...) to the node it addresses and is
    built once, at construction.  The wrapped dict must not be mutated for
    the lifetime of the instance; the generator never does.

    Args:
        raw: The document as returned by
            :func:`~specgen.parser.loader.load_spec`.

    Example::

        doc = Document(load_spec("openapi.yaml"))
        user = resolve(doc, "#/components/schemas/User")
    """

    def __init__(self, raw: Mapping[str, Any]) -> None:
        self._raw = raw
        self._index = _build_index(raw)

    @property
    def raw(self) -> Mapping[str, Any]:
        """The wrapped document."""
        return self._raw

    @property
    def paths(self) -> Mapping[str, Any]:
        """The ``paths`` map, or an empty mapping when absent."""
        paths = self._raw.get("paths")
        return paths if isinstance(paths, Mapping) else {}

    @property
    def schemas(self) -> Mapping[str, Any]:
        """Reusable schemas: ``components.schemas`` or Swagger-style ``definitions``."""
        components = self._raw.get("components")
        if isinstance(components, Mapping) and isinstance(components.get("schemas"), Mapping):
            return components["schemas"]
        definitions = self._raw.get("definitions")
        return definitions if isinstance(definitions, Mapping) else {}

    def __contains__(self, pointer: object) -> bool:
        return pointer in self._index

    def __len__(self) -> int:
        return len(self._index)

    def lookup(self, pointer: str) -> Any:
        """Return the node at an escaped, decoded *pointer*.

        Raises:
            KeyError: If the pointer is not in the index.
        """
        return self._index[pointer]


def _build_index(root: Mapping[str, Any]) -> dict[str, Any]:
    """Map every node reachable from *root* to its JSON Pointer.

    Containers already on the current branch are not descended into again,
    which keeps self-referencing trees produced by YAML aliases finite.
    """
    index: dict[str, Any] = {ROOT_POINTER: root}
    stack: list[tuple[str, Any, frozenset[int]]] = [(ROOT_POINTER, root, frozenset())]

    while stack:
        pointer, node, ancestors = stack.pop()
        if isinstance(node, Mapping):
            items = [(str(key), value) for key, value in node.items()]
        elif isinstance(node, list):
            items = [(str(position), value) for position, value in enumerate(node)]
        else:
            continue

        branch = ancestors | {id(node)}
        for key, value in items:
            child = f"{pointer}/{escape_segment(key)}"
            index[child] = value
            if id(value) not in branch:
                stack.append((child, value, branch))

    return index


def resolve(document: Document, ref: str) -> Any:
    """Resolve a single ``$ref`` string against *document*, one level deep.

    The pointer may use RFC 6901 escaping (``~0`` for ``~``, ``~1`` for
    ``/``) and URI percent-encoding.  If the target is itself a reference it
    is returned as-is; use :func:`resolve_chain` to follow it.

    Args:
        document: The indexed document.
        ref: The ``$ref`` string (e.g., ``"#/components/schemas/Pet"``).

    Returns:
        The node found at the referenced pointer.

    Raises:
        ReferenceResolutionError: If the reference is external, is not a
            JSON Pointer fragment, or any segment does not exist.  The
            message names the exact pointer and the first missing segment.
    """
    if not isinstance(ref, str) or not ref.startswith(ROOT_POINTER):
        raise ReferenceResolutionError(
            str(ref), "external references are not supported, only internal ones (#/...)"
        )

    pointer = unquote(ref)
    if pointer != ROOT_POINTER and not pointer.startswith("#/"):
        raise ReferenceResolutionError(ref, "only JSON Pointer fragments (#/...) are supported")

    try:
        return document.lookup(pointer)
    except KeyError:
        raise ReferenceResolutionError(ref, _describe_missing(document, pointer)) from None


def _describe_missing(document: Document, pointer: str) -> str:
    """Explain which segment of an unresolvable *pointer* is missing."""
    current = ROOT_POINTER
    for segment in pointer[2:].split("/"):
        candidate = f"{current}/{segment}"
        if candidate not in document:
            return f"key '{unescape_segment(segment)}' not found under '{current}'"
        current = candidate
    return "pointer not found"


def resolve_chain(document: Document, node: Any, visited: tuple[str, ...] = ()) -> Any:
    """Follow ``$ref`` pointers from *node* until a concrete node is reached.

    *visited* holds the pointers already followed on the current branch, in
    order.  It is never mutated: callers that branch (one chain per
    parameter, per response, ...) pass their own tuple to each branch, so a
    pointer shared by two siblings is not mistaken for a cycle.

    Args:
        document: The indexed document.
        node: Any node; non-reference nodes are returned unchanged.
        visited: Pointers already followed before reaching *node*.

    Returns:
        The first node in the chain that is not a reference.

    Raises:
        CyclicReferenceError: If a pointer is reached twice.
        ReferenceResolutionError: If a pointer in the chain does not resolve.
    """
    trail = tuple(visited)
    while is_reference(node):
        ref = node[REF_KEY]
        if ref in trail:
            raise CyclicReferenceError(ref, trail)
        trail = (*trail, ref)
        node = resolve(document, ref)
    return node
