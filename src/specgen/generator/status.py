"""HTTP status-code keys as they appear in an OpenAPI ``responses`` map.

Keys may be concrete codes (``200``, ``"404"``), ranges (``"2XX"``) or
``"default"``.  YAML documents often decode concrete codes as integers, so
every helper accepts both forms.
"""

from __future__ import annotations

import http
import re
from typing import Any, Optional, Union

DEFAULT_STATUS = "default"

_CODE_RE = re.compile(r"^[1-5]\d\d$")
_RANGE_RE = re.compile(r"^[1-5]XX$", re.IGNORECASE)


def parse_status_code(key: Any) -> Optional[Union[int, str]]:
    """Return the canonical status key, or ``None`` if *key* is not one.

    Concrete codes become ``int``, ranges become upper-case strings
    (``"2XX"``), and ``"default"`` is returned unchanged.
    """
    text = str(key).strip()
    if text == DEFAULT_STATUS:
        return DEFAULT_STATUS
    if _CODE_RE.match(text):
        return int(text)
    if _RANGE_RE.match(text):
        return text.upper()
    return None


def is_success(code: Union[int, str]) -> bool:
    """Whether *code* is a 2xx code or the ``2XX`` range."""
    if isinstance(code, int):
        return 200 <= code < 300
    return code == "2XX"


def is_error(code: Union[int, str]) -> bool:
    """Whether *code* is a 4xx/5xx code or range."""
    if isinstance(code, int):
        return code >= 400
    return code in ("4XX", "5XX")


def reason_phrase(code: Union[int, str]) -> str:
    """Standard reason phrase for a concrete code, ``""`` otherwise."""
    if not isinstance(code, int):
        return ""
    try:
        return http.HTTPStatus(code).phrase
    except ValueError:
        return ""
