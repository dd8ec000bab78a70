"""
Encoding helpers shared by the contract, transaction and claim documents.

Binary fields (keys, hashes, signatures, signed messages) travel as
lowercase hex strings in JSON.
"""

import binascii
from typing import Optional, Union

from .errors import MalformedDocumentError


def to_hex(data: bytes) -> str:
    """Hex encode bytes to a lowercase string."""
    return binascii.hexlify(data).decode("ascii")


def from_hex(value: Union[str, bytes], field: str, size: Optional[int] = None) -> bytes:
    """
    Decode a hex field from a JSON document.

    Raw bytes are passed through so callers may build documents in memory.

    Raises:
        MalformedDocumentError: value is not hex, or not ``size`` bytes long
    """
    if isinstance(value, bytes):
        raw = value
    elif isinstance(value, str):
        try:
            raw = binascii.unhexlify(value)
        except (binascii.Error, ValueError):
            raise MalformedDocumentError(f"{field}: not a hex string")
    else:
        raise MalformedDocumentError(f"{field}: expected hex string, got {type(value).__name__}")

    if size is not None and len(raw) != size:
        raise MalformedDocumentError(f"{field}: expected {size} bytes, got {len(raw)}")
    return raw


def require_int(value, field: str) -> int:
    """Return value if it is a non-negative integer (bools excluded)."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise MalformedDocumentError(f"{field}: expected integer, got {type(value).__name__}")
    if value < 0:
        raise MalformedDocumentError(f"{field}: must be non-negative, got {value}")
    return value
