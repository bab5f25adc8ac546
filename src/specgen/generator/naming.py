"""Identifier and file-name normalisation for generated code.

Every function here is pure: no module state, no configuration lookups.
Anything that can vary (the service suffix, the reserved words of the
emitted language) is a parameter with a default.

**Word splitting** is shared by all identifier builders: leading characters
that are not letters are dropped, characters that cannot appear in an
identifier become separators, and the remainder is split at separators,
lower-to-upper case boundaries, acronym boundaries and digit runs::

    "user_id"         -> ["user", "id"]
    "XMLHttpRequest"  -> ["XML", "Http", "Request"]
    "api-version"     -> ["api", "version"]
    "2fa code"        -> ["fa", "code"]
"""

from __future__ import annotations

import re
from typing import AbstractSet, Optional
from urllib.parse import unquote

# ---------------------------------------------------------------------------
# Word splitting
# ---------------------------------------------------------------------------

_LEADING_NON_LETTERS_RE = re.compile(r"^[^a-zA-Z]+")
_ILLEGAL_CHARS_RE = re.compile(r"[^\w\-]+")
_WORD_RE = re.compile(r"[A-Z]+(?=[A-Z][a-z])|[A-Z]?[a-z]+|[A-Z]+|[0-9]+")


def _split_words(value: str) -> list[str]:
    clean = _LEADING_NON_LETTERS_RE.sub("", value)
    clean = _ILLEGAL_CHARS_RE.sub("-", clean)
    return _WORD_RE.findall(clean)


def _capitalize(word: str) -> str:
    return word[:1].upper() + word[1:].lower()


def _camel_case(words: list[str]) -> str:
    if not words:
        return ""
    return words[0].lower() + "".join(_capitalize(word) for word in words[1:])


def _pascal_case(words: list[str]) -> str:
    return "".join(_capitalize(word) for word in words)


# ---------------------------------------------------------------------------
# Identifiers
# ---------------------------------------------------------------------------

RESERVED_WORDS: frozenset[str] = frozenset(
    {
        "arguments", "break", "case", "catch", "class", "const", "continue",
        "debugger", "default", "delete", "do", "else", "enum", "eval",
        "export", "extends", "false", "finally", "for", "function", "if",
        "implements", "import", "in", "instanceof", "interface", "let", "new",
        "null", "package", "private", "protected", "public", "return",
        "static", "super", "switch", "this", "throw", "true", "try", "typeof",
        "var", "void", "while", "with", "yield",
    }
)
"""Words of the emitted language that cannot be used as parameter names."""


def service_class_name(raw_tag: str, suffix: str = "Service") -> str:
    """Convert an operation tag into a PascalCase service class name.

    The *suffix* is appended unless the name already ends with it, so
    ``"users"`` and ``"UsersService"`` both yield ``"UsersService"``.  Leading
    digits and punctuation are dropped, so the result always starts with a
    letter; a tag with no usable characters yields the bare suffix.

    Example::

        >>> service_class_name("user accounts")
        'UserAccountsService'
        >>> service_class_name("2fa")
        'FaService'
    """
    name = _pascal_case(_split_words(raw_tag))
    if name.endswith(suffix):
        return name
    return f"{name}{suffix}"


def operation_name(raw_id_or_fallback: str) -> str:
    """Convert an ``operationId`` (or a fallback name) into a camelCase identifier.

    Example::

        >>> operation_name("Get_User-ById")
        'getUserById'
    """
    return _camel_case(_split_words(raw_id_or_fallback)) or "operation"


def fallback_operation_name(method: str, path: str) -> str:
    """Build the name used for operations that declare no ``operationId``.

    The result is ``{CapitalizedMethod}{PathTitleCase}`` and is meant to be
    passed through :func:`operation_name`.

    Example::

        >>> fallback_operation_name("get", "/users/{userId}")
        'GetUsersUserId'
    """
    return _capitalize(method) + _pascal_case(_split_words(path))


def path_param_name(raw: str, reserved_words: AbstractSet[str] = RESERVED_WORDS) -> str:
    """Convert a path-template variable or parameter name into an identifier.

    The name is camelCased; a name that collides with *reserved_words* gets
    an underscore prefix, and a name with no usable characters becomes
    ``"param"``.

    Example::

        >>> path_param_name("user-id")
        'userId'
        >>> path_param_name("default")
        '_default'
    """
    name = _camel_case(_split_words(raw)) or "param"
    if name in reserved_words:
        return f"_{name}"
    return name


_TYPE_NAME_LEADING_RE = re.compile(r"^[^a-zA-Z_$]+")
_TYPE_NAME_ILLEGAL_RE = re.compile(r"[^\w$]+")


def type_name(ref: str) -> str:
    """Return the model name imported for a ``$ref`` pointer.

    The last pointer segment is unescaped and stripped of characters that
    cannot appear in a type name.

    Example::

        >>> type_name("#/components/schemas/User")
        'User'
        >>> type_name("#/components/schemas/Page%5BUser%5D")
        'Page_User_'
    """
    segment = unquote(ref).rsplit("/", 1)[-1]
    segment = segment.replace("~1", "/").replace("~0", "~")
    segment = _TYPE_NAME_LEADING_RE.sub("", segment)
    return _TYPE_NAME_ILLEGAL_RE.sub("_", segment)


def header_name(raw: str) -> str:
    """Normalise a declared response header name (case is preserved)."""
    return raw.strip()


# ---------------------------------------------------------------------------
# Files and comments
# ---------------------------------------------------------------------------

_SERVICE_TAIL_RE = re.compile(r"[-.\s]*service$")


def service_file_name(name: str) -> str:
    """Convert a service or operation name into a kebab-case file name.

    The result always ends in exactly one ``.service`` suffix.  A trailing
    ``service`` word already present in *name* is folded into the suffix
    rather than repeated, which makes the function idempotent.

    Example::

        >>> service_file_name("UserService")
        'user.service'
        >>> service_file_name("User")
        'user.service'
        >>> service_file_name("user.service")
        'user.service'
    """
    kebab = re.sub(r"([a-z0-9])([A-Z])", r"\1-\2", name)
    kebab = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1-\2", kebab)
    kebab = re.sub(r"[\s_]+", "-", kebab).lower()
    base = _SERVICE_TAIL_RE.sub("", kebab).strip("-.")
    if not base:
        return "service"
    return f"{base}.service"


def clean_comment(text: Optional[str]) -> Optional[str]:
    """Normalise summary/description text; blank text becomes ``None``."""
    if text is None:
        return None
    lines = [line.rstrip() for line in str(text).replace("\r\n", "\n").split("\n")]
    cleaned = "\n".join(lines).strip()
    return cleaned or None
