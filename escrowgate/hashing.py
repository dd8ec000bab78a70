"""
escrowgate hashing.

Two digests are used:

- The payout hash: a 20-byte BLAKE2b digest of a public key. An output's
  destination_hash must equal the payout hash of the key it pays.
- Document hashes: SHA-256 over canonical JSON, in the format
  "sha256:<hex>", used to fingerprint contracts and tag audit records.
"""

import hashlib
from typing import Any, Union

from nacl.encoding import RawEncoder
from nacl.hash import blake2b

from .canonicalization import canonicalize

PAYOUT_HASH_SIZE = 20


def payout_hash(public_key: bytes) -> bytes:
    """Compute the destination hash that pays ``public_key``."""
    return blake2b(public_key, digest_size=PAYOUT_HASH_SIZE, encoder=RawEncoder)


def sha256_hash(data: Union[bytes, str]) -> str:
    """
    Compute SHA-256 hash.

    Returns:
        Hash string in format "sha256:abcdef..."
    """
    if isinstance(data, str):
        data = data.encode('utf-8')

    digest = hashlib.sha256(data).hexdigest().lower()
    return f"sha256:{digest}"


def contract_hash(contract: dict) -> str:
    """Fingerprint of a contract parameter document."""
    return sha256_hash(canonicalize(contract))


def document_hash(document: Any) -> str:
    """Hash of a transaction or claim document, for audit records."""
    return sha256_hash(canonicalize(document))
