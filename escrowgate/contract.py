"""
escrowgate Contract Parameters

The fixed identities and fee a locked balance is created with. Three keys
may sign (arbiter, buyer, seller); two more (buyer payout, seller payout)
only determine where each party's payout goes. None of them, nor the
arbiter fee, change after construction.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict

from .errors import ContractParameterError, MalformedDocumentError
from .hashing import contract_hash, payout_hash
from .util import from_hex, to_hex

PUBLIC_KEY_SIZE = 32


class Party(str, Enum):
    """A principal of the trade. The arbiter is never a payout party."""
    BUYER = "buyer"
    SELLER = "seller"


class Role(str, Enum):
    """Every key slot of a contract."""
    ARBITER = "arbiter"
    BUYER = "buyer"
    SELLER = "seller"
    BUYER_PAYOUT = "buyer_payout"
    SELLER_PAYOUT = "seller_payout"


SIGNING_ROLE = {
    Party.BUYER: Role.BUYER,
    Party.SELLER: Role.SELLER,
}

PAYOUT_ROLE = {
    Party.BUYER: Role.BUYER_PAYOUT,
    Party.SELLER: Role.SELLER_PAYOUT,
}


@dataclass(frozen=True)
class ContractParameters:
    """
    Immutable parameters shared by every validation of one contract.

    Keys are raw 32-byte Ed25519 public keys. ``arbiter_fee`` is an integer
    amount in satoshis.
    """
    arbiter_key: bytes
    buyer_key: bytes
    seller_key: bytes
    buyer_payout_key: bytes
    seller_payout_key: bytes
    arbiter_fee: int

    def __post_init__(self):
        self._validate()

    def _validate(self):
        for role in Role:
            key = self.key_for(role)
            if not isinstance(key, bytes):
                raise ContractParameterError(
                    f"{role.value}_key must be bytes, got {type(key).__name__}"
                )
            if len(key) != PUBLIC_KEY_SIZE:
                raise ContractParameterError(
                    f"{role.value}_key must be {PUBLIC_KEY_SIZE} bytes, got {len(key)}"
                )

        if isinstance(self.arbiter_fee, bool) or not isinstance(self.arbiter_fee, int):
            raise ContractParameterError(
                f"arbiter_fee must be an integer, got {type(self.arbiter_fee).__name__}"
            )
        if self.arbiter_fee < 0:
            raise ContractParameterError(f"arbiter_fee must be non-negative, got {self.arbiter_fee}")

    def key_for(self, role: Role) -> bytes:
        return getattr(self, f"{role.value}_key")

    def signing_key(self, party: Party) -> bytes:
        """Key that must sign for ``party``."""
        return self.key_for(SIGNING_ROLE[party])

    def payout_key(self, party: Party) -> bytes:
        """Key whose hash receives ``party``'s payout."""
        return self.key_for(PAYOUT_ROLE[party])

    def payout_hash(self, party: Party) -> bytes:
        return payout_hash(self.payout_key(party))

    def arbiter_hash(self) -> bytes:
        return payout_hash(self.arbiter_key)

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {f"{role.value}_key": to_hex(self.key_for(role)) for role in Role}
        d["arbiter_fee"] = self.arbiter_fee
        return d

    def fingerprint(self) -> str:
        """Canonical hash identifying this contract in logs and API responses."""
        return contract_hash(self.to_dict())

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ContractParameters':
        """
        Build parameters from a JSON document with hex-encoded keys.

        Raises:
            ContractParameterError: a field is missing or invalid
        """
        if not isinstance(data, dict):
            raise ContractParameterError("contract document must be an object")

        keys = {}
        for role in Role:
            name = f"{role.value}_key"
            if name not in data:
                raise ContractParameterError(f"missing field: {name}")
            try:
                keys[name] = from_hex(data[name], name, PUBLIC_KEY_SIZE)
            except MalformedDocumentError as e:
                raise ContractParameterError(str(e))

        if "arbiter_fee" not in data:
            raise ContractParameterError("missing field: arbiter_fee")

        return cls(arbiter_fee=data["arbiter_fee"], **keys)
