"""
escrowgate Redemption Paths

The locked balance has exactly three ways out, selected by a one-byte
reason code that is also the message every required signature covers:

    x  EXECUTE         seller attests delivery; buyer payout, arbiter fee
    c  CANCEL          buyer attests cancellation; seller payout, no arbiter
    b  RESOLVE_BUYER   arbiter + buyer; buyer payout, arbiter fee
    s  RESOLVE_SELLER  arbiter + seller; seller payout, arbiter fee

A reason code is resolved once into RedemptionTerms, from which the
payout destination, the required signers and the output amounts all
derive.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from .contract import ContractParameters, Party, Role
from .errors import InsufficientFundsError
from .transaction import TxOutput

EXECUTE_MINER_FEE = 900
CANCEL_MINER_FEE = 800
RESOLVE_MINER_FEE = 800

PAYOUT_OUTPUT = 0
ARBITER_OUTPUT = 1


class ReasonCode(str, Enum):
    """Action discriminator and exact signed message."""
    EXECUTE = "x"
    CANCEL = "c"
    RESOLVE_BUYER = "b"
    RESOLVE_SELLER = "s"

    @property
    def message(self) -> bytes:
        """The byte sequence every signature on this path must cover."""
        return self.value.encode("ascii")

    @classmethod
    def parse(cls, raw: Union[bytes, str, 'ReasonCode']) -> Optional['ReasonCode']:
        """Return the matching code, or None if ``raw`` is not one."""
        if isinstance(raw, cls):
            return raw
        if isinstance(raw, (bytes, bytearray)):
            if len(raw) != 1:
                return None
            raw = chr(raw[0])
        if not isinstance(raw, str):
            return None
        try:
            return cls(raw)
        except ValueError:
            return None


class RedemptionPath(str, Enum):
    EXECUTE = "execute"
    CANCEL = "cancel"
    RESOLVE = "resolve"


RESOLUTION_PARTY = {
    ReasonCode.RESOLVE_BUYER: Party.BUYER,
    ReasonCode.RESOLVE_SELLER: Party.SELLER,
}


@dataclass(frozen=True)
class RequiredSigner:
    role: Role
    key: bytes


@dataclass(frozen=True)
class RedemptionTerms:
    """
    What a claim with a given reason code must satisfy.

    ``arbiter_destination`` is None on paths that pay no arbiter fee; on
    those paths ``arbiter_fee`` is 0 and only the payout output is checked.
    """
    reason_code: ReasonCode
    path: RedemptionPath
    miner_fee: int
    arbiter_fee: int
    payout_party: Party
    payout_destination: bytes
    arbiter_destination: Optional[bytes]
    signers: Tuple[RequiredSigner, ...]

    @property
    def pays_arbiter(self) -> bool:
        return self.arbiter_destination is not None

    @property
    def total_fees(self) -> int:
        return self.miner_fee + self.arbiter_fee

    def underflows(self, input_value: int) -> bool:
        """True if ``input_value`` cannot cover the fees of this path."""
        return input_value < self.total_fees

    def spend_amount(self, input_value: int) -> int:
        """Principal payout. Negative when the balance underflows."""
        return input_value - self.miner_fee - self.arbiter_fee

    def output_destinations(self) -> List[bytes]:
        """Required destination per output index."""
        if self.pays_arbiter:
            return [self.payout_destination, self.arbiter_destination]
        return [self.payout_destination]

    def output_values(self, input_value: int) -> List[int]:
        """Required value per output index, without the underflow check."""
        if self.pays_arbiter:
            return [self.spend_amount(input_value), self.arbiter_fee]
        return [self.spend_amount(input_value)]

    def required_outputs(self, input_value: int) -> List[TxOutput]:
        """
        The output layout a valid transaction must start with.

        Raises:
            InsufficientFundsError: input_value < miner fee + arbiter fee
        """
        if self.underflows(input_value):
            raise InsufficientFundsError(input_value, self.total_fees)
        return [
            TxOutput(value=value, destination_hash=destination)
            for value, destination in zip(self.output_values(input_value), self.output_destinations())
        ]

    def plan(self, input_value: int) -> Dict[str, Any]:
        """Required outputs and signers for a host building the transaction."""
        return {
            "reason_code": self.reason_code.value,
            "path": self.path.value,
            "miner_fee": self.miner_fee,
            "arbiter_fee": self.arbiter_fee,
            "input_value": input_value,
            "outputs": [o.to_dict() for o in self.required_outputs(input_value)],
            "signers": [s.role.value for s in self.signers],
        }


def resolve_terms(reason_code: ReasonCode, params: ContractParameters) -> RedemptionTerms:
    """Resolve ``reason_code`` against a contract into the terms it must meet."""
    if reason_code is ReasonCode.EXECUTE:
        return RedemptionTerms(
            reason_code=reason_code,
            path=RedemptionPath.EXECUTE,
            miner_fee=EXECUTE_MINER_FEE,
            arbiter_fee=params.arbiter_fee,
            payout_party=Party.BUYER,
            payout_destination=params.payout_hash(Party.BUYER),
            arbiter_destination=params.arbiter_hash(),
            signers=(RequiredSigner(Role.SELLER, params.seller_key),),
        )

    if reason_code is ReasonCode.CANCEL:
        return RedemptionTerms(
            reason_code=reason_code,
            path=RedemptionPath.CANCEL,
            miner_fee=CANCEL_MINER_FEE,
            arbiter_fee=0,
            payout_party=Party.SELLER,
            payout_destination=params.payout_hash(Party.SELLER),
            arbiter_destination=None,
            signers=(RequiredSigner(Role.BUYER, params.buyer_key),),
        )

    if reason_code in RESOLUTION_PARTY:
        party = RESOLUTION_PARTY[reason_code]
        return RedemptionTerms(
            reason_code=reason_code,
            path=RedemptionPath.RESOLVE,
            miner_fee=RESOLVE_MINER_FEE,
            arbiter_fee=params.arbiter_fee,
            payout_party=party,
            payout_destination=params.payout_hash(party),
            arbiter_destination=params.arbiter_hash(),
            signers=(
                RequiredSigner(Role(party.value), params.signing_key(party)),
                RequiredSigner(Role.ARBITER, params.arbiter_key),
            ),
        )

    raise ValueError(f"Unhandled reason code: {reason_code!r}")
