"""
escrowgate Signing

Ed25519 (RFC 8032) via PyNaCl. The validator only ever verifies; key
generation and signing serve hosts, the CLI and tests.
"""

from dataclasses import dataclass
from typing import Any, Dict, Tuple

from nacl.exceptions import BadSignatureError
from nacl.signing import SigningKey, VerifyKey

from .contract import ContractParameters, Role
from .errors import MalformedDocumentError
from .paths import ReasonCode
from .transaction import SignedMessage
from .util import from_hex, to_hex


@dataclass
class KeyPair:
    """Ed25519 key pair for one contract role."""
    role: Role
    signing_key: bytes
    verify_key: bytes

    @classmethod
    def generate(cls, role: Role) -> 'KeyPair':
        signing_key = SigningKey.generate()
        return cls(
            role=role,
            signing_key=bytes(signing_key),
            verify_key=bytes(signing_key.verify_key),
        )

    def sign(self, data: bytes) -> bytes:
        return sign_data(data, self.signing_key)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "signing_key": to_hex(self.signing_key),
            "verify_key": to_hex(self.verify_key),
        }


class PartyKeyring:
    """
    Key pairs for every role of one contract.

    Useful for demos and tests; in production each party holds only its
    own signing key.
    """

    def __init__(self, keys: Dict[Role, KeyPair]):
        missing = [r.value for r in Role if r not in keys]
        if missing:
            raise ValueError(f"Keyring missing roles: {missing}")
        self._keys = dict(keys)

    @classmethod
    def generate(cls) -> 'PartyKeyring':
        return cls({role: KeyPair.generate(role) for role in Role})

    def __getitem__(self, role: Role) -> KeyPair:
        return self._keys[Role(role)]

    def contract_parameters(self, arbiter_fee: int) -> ContractParameters:
        """Contract parameters binding this keyring's public keys."""
        return ContractParameters(
            arbiter_fee=arbiter_fee,
            **{f"{role.value}_key": self._keys[role].verify_key for role in Role}
        )

    def sign_reason(self, role: Role, reason_code: ReasonCode) -> SignedMessage:
        """Sign ``reason_code`` as ``role``."""
        return sign_reason(reason_code, self[role].signing_key)

    def to_dict(self) -> Dict[str, Any]:
        return {role.value: kp.to_dict() for role, kp in self._keys.items()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PartyKeyring':
        keys = {}
        for role in Role:
            entry = data.get(role.value)
            if not isinstance(entry, dict):
                raise MalformedDocumentError(f"keyring: missing role {role.value}")
            signing_key = from_hex(entry.get("signing_key", ""), f"{role.value}.signing_key", 32)
            verify_key = bytes(SigningKey(signing_key).verify_key)
            keys[role] = KeyPair(role=role, signing_key=signing_key, verify_key=verify_key)
        return cls(keys)


def generate_signing_key() -> Tuple[bytes, bytes]:
    """
    Generate an Ed25519 key pair.

    Returns:
        Tuple of (signing_key_bytes, verify_key_bytes)
    """
    signing_key = SigningKey.generate()
    return bytes(signing_key), bytes(signing_key.verify_key)


def sign_data(data: bytes, signing_key: bytes) -> bytes:
    """Sign data with Ed25519 signing key."""
    key = SigningKey(signing_key)
    return key.sign(data).signature


def sign_reason(reason_code: ReasonCode, signing_key: bytes) -> SignedMessage:
    """Sign a reason code, producing the pair a claim carries."""
    message = reason_code.message
    return SignedMessage(signature=sign_data(message, signing_key), message=message)


def verify_signature(data: bytes, signature: bytes, verify_key: bytes) -> bool:
    """Verify Ed25519 signature. Malformed signatures and keys verify as False."""
    try:
        key = VerifyKey(verify_key)
        key.verify(data, signature)
        return True
    except (BadSignatureError, ValueError, TypeError):
        return False
