"""
escrowgate Gates

Each gate is one required check of a redemption path. Gates are
deterministic and fail closed: they return PASS or FAIL with a failure
code and never raise. A path accepts only if every one of its gates
passes.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from .paths import ARBITER_OUTPUT, PAYOUT_OUTPUT, RedemptionPath, RedemptionTerms, ReasonCode
from .signing import verify_signature
from .transaction import ProposedTransaction, RedemptionClaim
from .util import to_hex


class GateResult(str, Enum):
    """Gate evaluation result."""
    PASS = "PASS"
    FAIL = "FAIL"


class FailureCode(str, Enum):
    """Why a redemption claim was rejected."""
    INVALID_INPUT_SHAPE = "INVALID_INPUT_SHAPE"
    INVALID_REASON_CODE = "INVALID_REASON_CODE"
    AMOUNT_MISMATCH = "AMOUNT_MISMATCH"
    DESTINATION_MISMATCH = "DESTINATION_MISMATCH"
    SIGNATURE_INVALID = "SIGNATURE_INVALID"


@dataclass
class GateEvaluation:
    """Result of evaluating a single gate."""
    gate_id: str
    result: GateResult
    failure_code: Optional[FailureCode] = None
    required: Optional[str] = None
    observed: Optional[str] = None

    def passed(self) -> bool:
        return self.result == GateResult.PASS

    def to_dict(self) -> Dict[str, Any]:
        d = {"gate_id": self.gate_id, "result": self.result.value}
        if self.failure_code:
            d["failure_code"] = self.failure_code.value
        if self.required:
            d["required"] = self.required
        if self.observed:
            d["observed"] = self.observed
        return d


class Gate(ABC):
    """Abstract base class for all gate types."""

    def __init__(self, gate_id: str):
        self.gate_id = gate_id

    @abstractmethod
    def evaluate(
        self,
        claim: RedemptionClaim,
        tx: ProposedTransaction,
        terms: Optional[RedemptionTerms]
    ) -> GateEvaluation:
        """Evaluate the gate. Must return PASS or FAIL, never raise."""
        pass

    def _pass(self) -> GateEvaluation:
        return GateEvaluation(gate_id=self.gate_id, result=GateResult.PASS)

    def _fail(
        self,
        code: FailureCode,
        required: str = None,
        observed: str = None
    ) -> GateEvaluation:
        return GateEvaluation(
            gate_id=self.gate_id,
            result=GateResult.FAIL,
            failure_code=code,
            required=required,
            observed=observed
        )


class ReasonCodeGate(Gate):
    """
    The discriminator must be a known reason code, and every supplied
    signature must claim to sign exactly that code.

    ``terms`` is None when the discriminator did not resolve.
    """

    def evaluate(self, claim, tx, terms) -> GateEvaluation:
        if terms is None:
            return self._fail(
                FailureCode.INVALID_REASON_CODE,
                f"one of {[c.value for c in ReasonCode]}",
                repr(claim.reason_code)
            )

        expected = terms.reason_code.message
        for n, pair in enumerate(claim.signatures):
            if pair.message != expected:
                return self._fail(
                    FailureCode.INVALID_REASON_CODE,
                    f"signatures[{n}] over {expected!r}",
                    repr(pair.message)
                )
        return self._pass()


class InputShapeGate(Gate):
    """Exactly one input: the locked balance."""

    def evaluate(self, claim, tx, terms) -> GateEvaluation:
        if len(tx.inputs) != 1:
            return self._fail(FailureCode.INVALID_INPUT_SHAPE, "1 input", f"{len(tx.inputs)} inputs")
        return self._pass()


class OutputAmountGate(Gate):
    """Output ``index`` carries exactly the amount the path computes."""

    def __init__(self, gate_id: str, index: int):
        super().__init__(gate_id)
        self.index = index

    def evaluate(self, claim, tx, terms) -> GateEvaluation:
        input_value = tx.inputs[0].value
        if terms.underflows(input_value):
            return self._fail(
                FailureCode.AMOUNT_MISMATCH,
                f"input value >= {terms.total_fees}",
                str(input_value)
            )

        if len(tx.outputs) <= self.index:
            return self._fail(FailureCode.AMOUNT_MISMATCH, f"output {self.index}", "missing")

        expected = terms.output_values(input_value)[self.index]
        observed = tx.outputs[self.index].value
        if observed != expected:
            return self._fail(FailureCode.AMOUNT_MISMATCH, str(expected), str(observed))
        return self._pass()


class OutputDestinationGate(Gate):
    """Output ``index`` pays the address the path designates."""

    def __init__(self, gate_id: str, index: int):
        super().__init__(gate_id)
        self.index = index

    def evaluate(self, claim, tx, terms) -> GateEvaluation:
        expected = terms.output_destinations()[self.index]
        if len(tx.outputs) <= self.index:
            return self._fail(FailureCode.DESTINATION_MISMATCH, to_hex(expected), "missing")

        observed = tx.outputs[self.index].destination_hash
        if observed != expected:
            return self._fail(FailureCode.DESTINATION_MISMATCH, to_hex(expected), to_hex(observed))
        return self._pass()


class SignatureCountGate(Gate):
    """One signature per required signer, no more and no fewer."""

    def evaluate(self, claim, tx, terms) -> GateEvaluation:
        if len(claim.signatures) != len(terms.signers):
            return self._fail(
                FailureCode.SIGNATURE_INVALID,
                f"{len(terms.signers)} signatures",
                f"{len(claim.signatures)} signatures"
            )
        return self._pass()


class SignatureGate(Gate):
    """
    Signature ``index`` verifies against the key of required signer
    ``index`` over the reason code itself, not over whatever message the
    claim pairs it with.
    """

    def __init__(self, gate_id: str, index: int):
        super().__init__(gate_id)
        self.index = index

    def evaluate(self, claim, tx, terms) -> GateEvaluation:
        signer = terms.signers[self.index]
        required = f"{signer.role.value} signature over {terms.reason_code.message!r}"

        if len(claim.signatures) <= self.index:
            return self._fail(FailureCode.SIGNATURE_INVALID, required, "missing")

        pair = claim.signatures[self.index]
        if not verify_signature(terms.reason_code.message, pair.signature, signer.key):
            return self._fail(FailureCode.SIGNATURE_INVALID, required, "verification failed")
        return self._pass()


def path_gates(terms: RedemptionTerms) -> List[Gate]:
    """
    The output and signature gates of a path, in evaluation order.

    Execute checks the arbiter fee output before the payout; the other
    paths check the payout first.
    """
    if terms.path == RedemptionPath.EXECUTE:
        output_order = [ARBITER_OUTPUT, PAYOUT_OUTPUT]
    elif terms.pays_arbiter:
        output_order = [PAYOUT_OUTPUT, ARBITER_OUTPUT]
    else:
        output_order = [PAYOUT_OUTPUT]

    gates: List[Gate] = []
    for index in output_order:
        name = "payout" if index == PAYOUT_OUTPUT else "arbiter_fee"
        gates.append(OutputAmountGate(f"{name}_amount", index))
        gates.append(OutputDestinationGate(f"{name}_destination", index))

    gates.append(SignatureCountGate("signature_count"))
    for index, signer in enumerate(terms.signers):
        gates.append(SignatureGate(f"{signer.role.value}_signature", index))
    return gates
