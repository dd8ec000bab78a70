"""Shared fixtures for the unittest-style suites."""

import unittest

from escrowgate import (
    PartyKeyring,
    ProposedTransaction,
    RedemptionClaim,
    RedemptionValidator,
    Role,
    TxInput,
    TxOutput,
    payout_hash,
)

ARBITER_FEE = 1000
INPUT_VALUE = 101900


class EscrowTestCase(unittest.TestCase):
    """Fresh keys and a validator for every test."""

    def setUp(self):
        self.keyring = PartyKeyring.generate()
        self.params = self.keyring.contract_parameters(arbiter_fee=ARBITER_FEE)
        self.validator = RedemptionValidator(self.params)

    def dest(self, role: Role) -> bytes:
        """Destination hash paying ``role``'s public key."""
        return payout_hash(self.keyring[role].verify_key)

    def make_claim(self, code, *roles) -> RedemptionClaim:
        return RedemptionClaim(
            reason_code=code.message,
            signatures=[self.keyring.sign_reason(role, code) for role in roles],
        )

    def make_tx(self, outputs, inputs=(INPUT_VALUE,)) -> ProposedTransaction:
        return ProposedTransaction(
            inputs=[TxInput(value=v) for v in inputs],
            outputs=[TxOutput(value=v, destination_hash=d) for v, d in outputs],
        )

    def planned_tx(self, code, input_value=INPUT_VALUE) -> ProposedTransaction:
        """Transaction carrying exactly the outputs the path requires."""
        outputs = self.validator.terms_for(code).required_outputs(input_value)
        return ProposedTransaction(inputs=[TxInput(value=input_value)], outputs=outputs)

    def assertRejected(self, result, code):
        self.assertFalse(result.accepted())
        self.assertEqual(result.reason, code)
