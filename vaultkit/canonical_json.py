"""
Canonical JSON (RFC 8785 JCS) rendering for records and transition results.

Sorted keys, minimal whitespace, UTF-8. The CLI prints records through this so
two hosts looking at the same slot produce byte-identical output.
"""

from typing import Any

import canonicaljson


def canonicalJson(obj: Any) -> str:
    """
    Canonical JSON string of a JSON-compatible object.

    Examples:
        >>> canonicalJson({"b": 2, "a": 1})
        '{"a":1,"b":2}'
    """
    return canonicaljson.encode_canonical_json(obj).decode('utf-8')
