"""
escrowgate Redemption Validator

The core authorization predicate:

    VALID(claim, transaction, contract) in { ACCEPT, REJECT }

The reason code selects exactly one redemption path; every gate of that
path must pass. There is no fallback path and no partial success. The
validator holds only the immutable contract parameters, so one instance
may serve any number of concurrent callers.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .contract import ContractParameters
from .hashing import document_hash
from .gates import FailureCode, GateEvaluation, InputShapeGate, ReasonCodeGate, path_gates
from .logging_config import AuditLogger, audit_log
from .paths import RedemptionPath, RedemptionTerms, ReasonCode, resolve_terms
from .transaction import ProposedTransaction, RedemptionClaim

logger = logging.getLogger(__name__)


class Decision(str, Enum):
    ACCEPT = "ACCEPT"
    REJECT = "REJECT"


@dataclass
class ValidationResult:
    """Outcome of validating one claim against one proposed transaction."""
    decision: Decision
    reason_code: Optional[ReasonCode]
    path: Optional[RedemptionPath]
    gate_evaluations: List[GateEvaluation] = field(default_factory=list)
    remediation: List[str] = field(default_factory=list)

    def accepted(self) -> bool:
        return self.decision == Decision.ACCEPT

    @property
    def failed_gates(self) -> List[GateEvaluation]:
        return [e for e in self.gate_evaluations if not e.passed()]

    @property
    def reason(self) -> Optional[FailureCode]:
        """The first failing check, or None on accept."""
        failed = self.failed_gates
        return failed[0].failure_code if failed else None

    def to_dict(self) -> Dict[str, Any]:
        d = {
            "decision": self.decision.value,
            "reason_code": self.reason_code.value if self.reason_code else None,
            "path": self.path.value if self.path else None,
        }
        if self.accepted():
            d["gates"] = [{"gate_id": e.gate_id, "result": e.result.value} for e in self.gate_evaluations]
        else:
            d["reason"] = self.reason.value
            d["failed_gates"] = [e.to_dict() for e in self.failed_gates]
            d["remediation"] = self.remediation
        return d


class RedemptionValidator:
    """
    Validates redemption claims for one contract.

    Evaluation order:
    1. Reason code (unknown code or mismatched signed message stops here)
    2. Input shape (anything but one input stops here)
    3. Output amounts and destinations, in path order
    4. Signature count and each required signature

    Every gate in steps 3-4 is evaluated, so a rejection lists all failed
    checks; the first one is the result's ``reason``.
    """

    def __init__(self, params: ContractParameters, audit: Optional[AuditLogger] = None):
        self.params = params
        self.fingerprint = params.fingerprint()
        self._audit = audit or audit_log

    def terms_for(self, reason_code) -> Optional[RedemptionTerms]:
        """Terms a claim with ``reason_code`` must meet, or None if unrecognised."""
        code = ReasonCode.parse(reason_code)
        if code is None:
            return None
        return resolve_terms(code, self.params)

    def validate(self, claim: RedemptionClaim, tx: ProposedTransaction) -> ValidationResult:
        """
        Decide whether ``tx`` is a valid release of the locked balance.

        Never raises for a well-formed claim and transaction; every failure
        is reported in the returned result.
        """
        self._audit.redemption_request(
            contract=self.fingerprint,
            transaction=document_hash(tx.to_dict()),
            reason_code=repr(claim.reason_code),
            input_count=len(tx.inputs),
            output_count=len(tx.outputs),
            signature_count=len(claim.signatures),
        )

        terms = self.terms_for(claim.reason_code)
        evaluations: List[GateEvaluation] = []

        for gate in (ReasonCodeGate("reason_code"), InputShapeGate("input_shape")):
            evaluation = gate.evaluate(claim, tx, terms)
            evaluations.append(evaluation)
            if not evaluation.passed():
                return self._finish(claim, terms, evaluations)

        for gate in path_gates(terms):
            evaluations.append(gate.evaluate(claim, tx, terms))

        return self._finish(claim, terms, evaluations)

    def first_valid(
        self,
        candidates: Iterable[Tuple[RedemptionClaim, ProposedTransaction]]
    ) -> Optional[Tuple[RedemptionClaim, ProposedTransaction, ValidationResult]]:
        """
        Return the first accepted candidate with its result.

        For hosts collecting claims from several signers: candidates are
        validated in order and evaluation stops at the first accept.
        """
        for claim, tx in candidates:
            result = self.validate(claim, tx)
            if result.accepted():
                return claim, tx, result
        return None

    def _finish(
        self,
        claim: RedemptionClaim,
        terms: Optional[RedemptionTerms],
        evaluations: List[GateEvaluation]
    ) -> ValidationResult:
        failed = [e for e in evaluations if not e.passed()]
        result = ValidationResult(
            decision=Decision.REJECT if failed else Decision.ACCEPT,
            reason_code=terms.reason_code if terms else None,
            path=terms.path if terms else None,
            gate_evaluations=evaluations,
            remediation=self._generate_remediation(failed) if failed else [],
        )

        self._audit.redemption_decision(
            contract=self.fingerprint,
            reason_code=repr(claim.reason_code),
            decision=result.decision.value,
            path=result.path.value if result.path else None,
            failed_gates=[e.to_dict() for e in failed] or None,
        )
        if any(e.failure_code == FailureCode.SIGNATURE_INVALID for e in failed):
            self._audit.security_event(
                "signature_rejected",
                severity="medium",
                contract=self.fingerprint,
                reason_code=repr(claim.reason_code),
            )
        logger.debug("Validated %r: %s", claim.reason_code, result.decision.value)
        return result

    def _generate_remediation(self, failed_gates: List[GateEvaluation]) -> List[str]:
        """Generate remediation hints for failed gates."""
        hints = []
        for gate in failed_gates:
            if gate.failure_code == FailureCode.INVALID_REASON_CODE:
                hints.append(f"Use a recognised reason code and sign exactly it: {gate.required}")
            elif gate.failure_code == FailureCode.INVALID_INPUT_SHAPE:
                hints.append("Spend the locked balance as the only input")
            elif gate.failure_code == FailureCode.AMOUNT_MISMATCH:
                hints.append(f"Set {gate.gate_id} to {gate.required}")
            elif gate.failure_code == FailureCode.DESTINATION_MISMATCH:
                hints.append(f"Pay {gate.gate_id.replace('_destination', '')} output to {gate.required}")
            elif gate.failure_code == FailureCode.SIGNATURE_INVALID:
                hints.append(f"Provide {gate.required}")
            else:
                hints.append(f"Resolve issue with gate: {gate.gate_id}")

        hints.append("Retry with a corrected transaction or claim")
        return hints


def validate(
    claim: RedemptionClaim,
    tx: ProposedTransaction,
    params: ContractParameters
) -> ValidationResult:
    """Convenience function: validate one claim against ``params``."""
    return RedemptionValidator(params).validate(claim, tx)
