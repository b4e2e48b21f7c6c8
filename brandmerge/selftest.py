"""
Built-in normalizer checks, run with ``brandmerge --self-test``.
"""

from __future__ import annotations

import sys
from typing import Any, Callable, List, Optional, TextIO, Tuple

from .normalize import (
    normalize_testing_notes,
    normalize_url,
    parse_array,
    parse_boolean,
    parse_date,
)

Case = Tuple[Any, Any]

BATTERY: List[Tuple[str, Callable[[Any], Any], List[Case]]] = [
    ("Boolean parsing", parse_boolean, [
        ("Yes", True),
        ("no", False),
        ("TRUE", True),
        ("0", False),
        ("1", True),
        ("", None),
        ("maybe", None),
    ]),
    ("Array parsing", parse_array, [
        ("Organic, Vegan ; USP Verified, Vegan", ["Organic", "Vegan", "USP Verified"]),
        ("Item1,,Item2, item1 ,Item3", ["Item1", "Item2", "item1", "Item3"]),
    ]),
    ("Date parsing", parse_date, [
        ("9/3/2025", "2025-09-03"),
        ("2025-09-03T12:00:00Z", "2025-09-03"),
        ("03-09-2025", "2025-09-03"),
        ("invalid date", None),
    ]),
    ("URL normalization", normalize_url, [
        ("https://Example.com/", "https://example.com"),
        ("http://test.org/Path/To/Resource/", "http://test.org/Path/To/Resource"),
        ("not a url", None),
    ]),
    ("Testing notes normalization", normalize_testing_notes, [
        ("  Notes with spaces  ", "Notes with spaces"),
        ("Line 1\r\nLine 2\r\nLine 3", "Line 1\nLine 2\nLine 3"),
        ("Line 1\n\n\n\nLine 2", "Line 1\n\nLine 2"),
        ("", None),
        (None, None),
        ("   ", None),
    ]),
]


def run_self_test(out: Optional[TextIO] = None, err: Optional[TextIO] = None) -> int:
    out = out or sys.stdout
    err = err or sys.stderr
    print("Running self-tests...", file=out)

    failures = 0
    for label, func, cases in BATTERY:
        for given, expected in cases:
            got = func(given)
            if got != expected or type(got) is not type(expected):
                failures += 1
                print(f"FAIL {label} for {given!r}: got {got!r}, expected {expected!r}", file=err)

    if failures:
        print(f"{failures} self-test(s) failed", file=err)
        return 1
    print("All self-tests passed", file=out)
    return 0
