"""
Proposed transactions and redemption claims.

Both are ephemeral: supplied per validation call and never retained. Only
the shape the validator needs is modelled: input values, and ordered
output (value, destination_hash) pairs.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Union

from .errors import MalformedDocumentError
from .util import from_hex, require_int, to_hex


@dataclass
class TxInput:
    """An input spending the locked balance."""
    value: int

    def __post_init__(self):
        require_int(self.value, "input value")

    def to_dict(self) -> Dict[str, Any]:
        return {"value": self.value}


@dataclass
class TxOutput:
    """An output paying ``value`` to the address identified by ``destination_hash``."""
    value: int
    destination_hash: bytes

    def __post_init__(self):
        require_int(self.value, "output value")
        if not isinstance(self.destination_hash, bytes):
            raise MalformedDocumentError("output destination_hash must be bytes")

    def to_dict(self) -> Dict[str, Any]:
        return {"value": self.value, "destination_hash": to_hex(self.destination_hash)}


@dataclass
class ProposedTransaction:
    """Shape of a candidate fund-transfer transaction."""
    inputs: List[TxInput]
    outputs: List[TxOutput]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "inputs": [i.to_dict() for i in self.inputs],
            "outputs": [o.to_dict() for o in self.outputs],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ProposedTransaction':
        """
        Decode a transaction document.

        Expected form::

            {"inputs": [{"value": 101900}],
             "outputs": [{"value": 100000, "destination_hash": "<hex>"}, ...]}
        """
        if not isinstance(data, dict):
            raise MalformedDocumentError("transaction document must be an object")
        try:
            inputs = [TxInput(value=i["value"]) for i in data.get("inputs", [])]
            outputs = [
                TxOutput(
                    value=o["value"],
                    destination_hash=from_hex(o["destination_hash"], f"outputs[{n}].destination_hash"),
                )
                for n, o in enumerate(data.get("outputs", []))
            ]
        except (KeyError, TypeError) as e:
            raise MalformedDocumentError(f"transaction document: missing or invalid field {e}")
        return cls(inputs=inputs, outputs=outputs)


@dataclass
class SignedMessage:
    """A signature paired with the message it claims to sign."""
    signature: bytes
    message: bytes

    def to_dict(self) -> Dict[str, Any]:
        return {"signature": to_hex(self.signature), "message": to_hex(self.message)}


@dataclass
class RedemptionClaim:
    """
    A request to release the locked balance.

    ``reason_code`` is kept exactly as received; an unrecognised value is a
    rejection reported by the validator, not a construction error. For
    dispute resolution the first signature is the party's and the second
    the arbiter's.
    """
    reason_code: Union[bytes, str]
    signatures: List[SignedMessage] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        reason = self.reason_code
        if isinstance(reason, bytes):
            reason = reason.decode("latin-1")
        return {
            "reason_code": reason,
            "signatures": [s.to_dict() for s in self.signatures],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RedemptionClaim':
        """
        Decode a claim document.

        Expected form::

            {"reason_code": "x",
             "signatures": [{"signature": "<hex>", "message": "78"}]}
        """
        if not isinstance(data, dict):
            raise MalformedDocumentError("claim document must be an object")
        if "reason_code" not in data:
            raise MalformedDocumentError("claim document: missing field reason_code")

        reason = data["reason_code"]
        if not isinstance(reason, (str, bytes)):
            raise MalformedDocumentError("claim document: reason_code must be a string")

        entries = data.get("signatures", [])
        if not isinstance(entries, list):
            raise MalformedDocumentError("claim document: signatures must be a list")

        signatures = []
        for n, s in enumerate(entries):
            try:
                signatures.append(SignedMessage(
                    signature=from_hex(s["signature"], f"signatures[{n}].signature"),
                    message=from_hex(s["message"], f"signatures[{n}].message"),
                ))
            except (KeyError, TypeError) as e:
                raise MalformedDocumentError(f"claim document: missing or invalid field {e}")
        return cls(reason_code=reason, signatures=signatures)
