"""
Canonical JSON encoding.

Semantically identical documents produce identical bytes, so contract
fingerprints and audit digests are stable across hosts: keys sorted, no
insignificant whitespace, UTF-8, bytes as lowercase hex. Amounts are
integer satoshis, so floats are refused rather than rounded.
"""

import json
from typing import Any

from .util import to_hex


def _json_ready(value: Any) -> Any:
    if isinstance(value, float):
        raise ValueError(f"Cannot canonicalize float {value!r}: amounts must be integers")
    if isinstance(value, (bytes, bytearray)):
        return to_hex(bytes(value))
    if isinstance(value, dict):
        return {str(k): _json_ready(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_ready(v) for v in value]
    if value is None or isinstance(value, (bool, int, str)):
        return value
    raise ValueError(f"Cannot canonicalize type: {type(value).__name__}")


def canonicalize(obj: Any) -> bytes:
    """Canonical JSON bytes of ``obj``."""
    return json.dumps(
        _json_ready(obj),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    ).encode("utf-8")


def canonicalize_str(obj: Any) -> str:
    return canonicalize(obj).decode("utf-8")
