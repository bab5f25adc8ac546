"""Load OpenAPI documents from a URL, local file, or stdin.

This is the input adapter in front of the generator.  It fetches the raw
text, decodes it as JSON or YAML, and checks the declared OpenAPI version.
The generator itself never performs I/O; it only receives the resulting dict,
usually wrapped in a :class:`~specgen.parser.resolver.Document`.

Public functions:

* :func:`load_spec` -- read and decode a document from any supported source.
* :func:`validate_openapi_version` -- return the ``openapi`` version string,
  rejecting Swagger 2.x and documents without a version.
* :func:`load_document` -- both of the above, returning an indexed
  :class:`~specgen.parser.resolver.Document`.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any

import httpx
import yaml

from specgen.exceptions import SpecParseError
from specgen.parser.resolver import Document

logger = logging.getLogger(__name__)

_URL_PREFIXES = ("http://", "https://")
_FETCH_TIMEOUT = 30.0


def load_spec(source: str) -> dict[str, Any]:
    """Load an OpenAPI document from a URL, file path, or stdin (``-``).

    Args:
        source: An http(s) URL, a file path, or ``"-"`` for stdin.

    Returns:
        The decoded document.

    Raises:
        SpecParseError: If the source cannot be read or decoded.
    """
    if source == "-":
        text, hint = _read_stdin(), ""
    elif source.startswith(_URL_PREFIXES):
        text, hint = _fetch_url(source)
    else:
        text, hint = _read_file(source)

    logger.debug("Loaded %d characters from %s", len(text), source)
    return _decode(text, hint)


def load_document(source: str) -> Document:
    """Load, version-check and index an OpenAPI document.

    Raises:
        SpecParseError: If the document cannot be loaded or is not OpenAPI 3.x.
    """
    raw = load_spec(source)
    version = validate_openapi_version(raw)
    logger.debug("Indexing OpenAPI %s document from %s", version, source)
    return Document(raw)


def _read_stdin() -> str:
    try:
        text = sys.stdin.read()
    except OSError as exc:
        raise SpecParseError(f"Could not read the document from stdin: {exc}") from exc

    if not text.strip():
        raise SpecParseError("No input received from stdin")
    return text


def _fetch_url(url: str) -> tuple[str, str]:
    """Fetch *url* and return its body plus a format hint from the content type."""
    try:
        response = httpx.get(url, timeout=_FETCH_TIMEOUT, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise SpecParseError(
            f"HTTP {exc.response.status_code} fetching document from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise SpecParseError(f"Failed to fetch document from {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "")
    hint = ""
    if "json" in content_type:
        hint = "json"
    elif "yaml" in content_type or "yml" in content_type:
        hint = "yaml"
    return response.text, hint


def _read_file(path: str) -> tuple[str, str]:
    """Read a local file and return its text plus a format hint from the suffix."""
    file_path = Path(path)
    if not file_path.is_file():
        raise SpecParseError(f"Document not found: {path}")

    try:
        text = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SpecParseError(f"Failed to read document {path}: {exc}") from exc

    if not text.strip():
        raise SpecParseError(f"Document is empty: {path}")

    suffix = file_path.suffix.lower()
    if suffix == ".json":
        return text, "json"
    if suffix in (".yaml", ".yml"):
        return text, "yaml"
    return text, ""


def _decode(text: str, hint: str = "") -> dict[str, Any]:
    """Decode *text* as JSON or YAML.

    JSON is tried first unless the hint says YAML: every JSON document is
    also YAML, but the JSON parser is stricter and reports better errors.
    A ``json`` hint disables the YAML fallback.

    Raises:
        SpecParseError: If the text is neither, or is not a mapping.
    """
    errors: list[str] = []

    if hint != "yaml":
        try:
            return _require_mapping(json.loads(text))
        except json.JSONDecodeError as exc:
            if hint == "json":
                raise SpecParseError(f"Invalid JSON: {exc}") from exc
            errors.append(f"JSON error: {exc}")

    try:
        return _require_mapping(yaml.safe_load(text))
    except yaml.YAMLError as exc:
        errors.append(f"YAML error: {exc}")

    raise SpecParseError("Failed to parse document as JSON or YAML\n  " + "\n  ".join(errors))


def _require_mapping(value: Any) -> dict[str, Any]:
    if not isinstance(value, dict):
        found = type(value).__name__ if value is not None else "empty document"
        raise SpecParseError(f"Document must be a JSON/YAML object (got {found})")
    return value


def validate_openapi_version(raw: dict[str, Any]) -> str:
    """Return the document's ``openapi`` version, rejecting anything but 3.x.

    Swagger 2.x documents and documents without an ``openapi`` field fail.

    Args:
        raw: The decoded document.

    Returns:
        The version string (e.g. ``"3.0.3"``, ``"3.1.0"``).

    Raises:
        SpecParseError: If the version is missing, Swagger 2.x, or not 3.x.
    """
    if "swagger" in raw:
        raise SpecParseError(
            f"Swagger {raw['swagger']} is not supported. "
            "Only OpenAPI 3.x documents are supported. "
            "Upgrade it first, for example with https://converter.swagger.io"
        )

    version = raw.get("openapi")
    if version is None:
        raise SpecParseError("Missing 'openapi' field. Is this an OpenAPI 3.x document?")

    version_str = str(version)
    if not version_str.startswith("3."):
        raise SpecParseError(
            f"Unsupported OpenAPI version: {version_str}. Only OpenAPI 3.x is supported."
        )
    return version_str
