"""
Cell-level normalization for brand exports.

Responsibilities:
- whitespace and punctuation harmonization
- boolean / integer / list parsing
- date parsing to YYYY-MM-DD
- URL validation, normalization and canonical keys
- long-form testing notes
- loose brand reference matching

Every function here is total: unparseable input maps to None (or an empty
value), never to an exception.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from email.utils import parsedate_to_datetime
from typing import Any, List, Optional
from urllib.parse import urlsplit, urlunsplit

from .rules import (
    ALLOWED_URL_SCHEMES,
    DEFAULT_PORTS,
    FALLBACK_DATE_FORMATS,
    FALSE_SPELLINGS,
    TRUE_SPELLINGS,
)

_WS_RE = re.compile(r"\s+")
_SPLIT_RE = re.compile(r"[,;]+")
_INT_RE = re.compile(r"^[+-]?\d+")
_NEWLINES_RE = re.compile(r"\n{3,}")

_US_SLASH_RE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
_DASHED_RE = re.compile(r"^(\d{1,2})-(\d{1,2})-(\d{4})$")
_ISO_RE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})(?:[T ].*)?$")

_PUNCTUATION = str.maketrans({
    "“": '"',
    "”": '"',
    "„": '"',
    "‟": '"',
    "‘": "'",
    "’": "'",
    "‚": "'",
    "‛": "'",
    "–": "-",
    "—": "-",
})


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value == "")


def normalize_whitespace(value: Any) -> str:
    if value is None:
        return ""
    return _WS_RE.sub(" ", str(value).strip())


def harmonize_punctuation(value: Any) -> str:
    """Curly quotes become straight quotes, en/em dashes become '-'."""
    if value is None:
        return ""
    return str(value).translate(_PUNCTUATION)


def normalize_text(value: Any) -> str:
    return harmonize_punctuation(normalize_whitespace(value))


def parse_boolean(value: Any) -> Optional[bool]:
    """
    Interpret a loosely formatted yes/no cell.

    Rules:
    - true, yes, y, 1 -> True (case-insensitive)
    - false, no, n, 0 -> False
    - empty, missing or anything else -> None (the field stays absent)
    """
    if _is_blank(value):
        return None
    token = normalize_whitespace(value).lower()
    if token in TRUE_SPELLINGS:
        return True
    if token in FALSE_SPELLINGS:
        return False
    return None


def parse_integer(value: Any) -> Optional[int]:
    # Leading-digits semantics: "1998 (est.)" -> 1998
    if _is_blank(value):
        return None
    match = _INT_RE.match(normalize_whitespace(value))
    if not match:
        return None
    return int(match.group(0))


def parse_array(value: Any) -> List[str]:
    """
    Split a comma/semicolon separated cell into an ordered, de-duplicated list.

    Duplicates are compared case-sensitively; the first occurrence wins.
    """
    if _is_blank(value):
        return []
    items = [normalize_whitespace(item) for item in _SPLIT_RE.split(normalize_text(value))]
    return list(dict.fromkeys(item for item in items if item))


def _ymd(year: str, month: str, day: str) -> Optional[str]:
    try:
        return date(int(year), int(month), int(day)).isoformat()
    except ValueError:
        return None


def parse_date(value: Any) -> Optional[str]:
    """
    Normalize a date cell to ``YYYY-MM-DD``.

    Rules, in order:
    - MM/DD/YYYY
    - DD-MM-YYYY, then MM-DD-YYYY when the first reading is not a real date
    - YYYY-MM-DD with an optional time suffix (ignored)
    - a handful of month-name / slash forms, then RFC 2822 strings
    Anything else, or an impossible calendar date, returns None.
    """
    if value is None:
        return None
    text = normalize_whitespace(value)
    if not text:
        return None

    m = _US_SLASH_RE.match(text)
    if m:
        month, day, year = m.groups()
        return _ymd(year, month, day)

    m = _DASHED_RE.match(text)
    if m:
        first, second, year = m.groups()
        return _ymd(year, second, first) or _ymd(year, first, second)

    m = _ISO_RE.match(text)
    if m:
        year, month, day = m.groups()
        return _ymd(year, month, day)

    for fmt in FALLBACK_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date().isoformat()
        except ValueError:
            continue

    try:
        return parsedate_to_datetime(text).date().isoformat()
    except (TypeError, ValueError, IndexError):
        return None


def normalize_testing_notes(value: Any) -> Optional[str]:
    """
    Normalize free-form QA notes while keeping paragraph breaks.

    Trims, converts CRLF/CR to LF and collapses three or more newlines to a
    single blank line. Blank input returns None.
    """
    if _is_blank(value):
        return None
    text = str(value).strip()
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = _NEWLINES_RE.sub("\n\n", text)
    return text or None


def normalize_url(value: Any) -> Optional[str]:
    """
    Return the normalized form of an http(s) URL, or None when invalid.

    The scheme and host are lower-cased, default ports dropped, the path
    keeps its case and exactly one trailing slash is removed.
    """
    if _is_blank(value):
        return None
    text = str(value).strip()
    if not text or any(ch.isspace() for ch in text):
        return None
    try:
        parts = urlsplit(text)
        scheme = parts.scheme.lower()
        host = parts.hostname
        port = parts.port
    except ValueError:
        return None
    if scheme not in ALLOWED_URL_SCHEMES or not host:
        return None

    netloc = f"[{host}]" if ":" in host else host
    if port is not None and port != DEFAULT_PORTS[scheme]:
        netloc = f"{netloc}:{port}"
    if parts.username is not None:
        userinfo = parts.username
        if parts.password is not None:
            userinfo = f"{userinfo}:{parts.password}"
        netloc = f"{userinfo}@{netloc}"

    normalized = urlunsplit((scheme, netloc, parts.path or "/", parts.query, parts.fragment))
    if normalized.endswith("/"):
        normalized = normalized[:-1]
    return normalized


def validate_url(value: Any) -> bool:
    return normalize_url(value) is not None


def get_canonical_url_key(url: Optional[str]) -> str:
    if not url:
        return ""
    # "/a//" and "/a" compare equal even though normalize_url strips one slash
    return url.lower().rstrip("/")


def normalize_brand_ref(ref: Any) -> str:
    """'Acme Labs (https://notion.so/...)' -> 'acme labs'"""
    if _is_blank(ref):
        return ""
    cleaned = str(ref).split("(", 1)[0]
    return normalize_text(cleaned).lower()
