"""
escrowgate Adversarial Claim Suite

Each test is a realistic attempt to release the locked balance along a
path the attacker is not entitled to, or to skim value on a path they
are. Every one must be rejected.

Attack vectors:
- Reusing a signature made for one reason code on another
- Redirecting payouts or the arbiter fee
- Spending more or less than the locked balance
- Merging or splitting inputs
- Forged, tampered or surplus signatures
"""

import unittest

from escrowgate import (
    RESOLVE_MINER_FEE,
    FailureCode,
    RedemptionClaim,
    ReasonCode,
    Role,
    SignedMessage,
    TxInput,
    TxOutput,
    sign_data,
)

from support import ARBITER_FEE, INPUT_VALUE, EscrowTestCase

# Signers a legitimate claim carries, per reason code
LEGITIMATE_SIGNERS = {
    ReasonCode.EXECUTE: (Role.SELLER,),
    ReasonCode.CANCEL: (Role.BUYER,),
    ReasonCode.RESOLVE_BUYER: (Role.BUYER, Role.ARBITER),
    ReasonCode.RESOLVE_SELLER: (Role.SELLER, Role.ARBITER),
}


class TestReasonCodeBinding(EscrowTestCase):
    """
    Attack Vector: Relabel a signed claim.

    Threat: The seller's signature over 'x' is replayed under 'c', 'b' or
    's' to pick a path with a more favourable payout.

    Defense: signatures are verified over the claimed reason code itself.
    """

    def test_execute_signature_rejected_on_other_paths(self):
        """Signed-message pairs still naming 'x' are refused under any other code."""
        seller_x = self.keyring.sign_reason(Role.SELLER, ReasonCode.EXECUTE)
        arbiter_x = self.keyring.sign_reason(Role.ARBITER, ReasonCode.EXECUTE)

        for code in (ReasonCode.CANCEL, ReasonCode.RESOLVE_BUYER, ReasonCode.RESOLVE_SELLER):
            claim = RedemptionClaim(reason_code=code.message, signatures=[seller_x, arbiter_x])
            result = self.validator.validate(claim, self.planned_tx(code))

            self.assertRejected(result, FailureCode.INVALID_REASON_CODE)

    def test_relabelled_message_fails_signature(self):
        """Pairing 'x' signatures with another code's message does not make them signatures over it."""
        for code, signers in LEGITIMATE_SIGNERS.items():
            if code is ReasonCode.EXECUTE:
                continue
            forged = [
                SignedMessage(
                    signature=self.keyring.sign_reason(role, ReasonCode.EXECUTE).signature,
                    message=code.message,
                )
                for role in signers
            ]
            claim = RedemptionClaim(reason_code=code.message, signatures=forged)

            result = self.validator.validate(claim, self.planned_tx(code))

            self.assertRejected(result, FailureCode.SIGNATURE_INVALID)
            self.assertEqual(
                [g.gate_id for g in result.failed_gates],
                [f"{role.value}_signature" for role in signers],
                code
            )

    def test_message_disagreeing_with_reason_code(self):
        claim = RedemptionClaim(
            reason_code=b"c",
            signatures=[self.keyring.sign_reason(Role.BUYER, ReasonCode.EXECUTE)],
        )

        result = self.validator.validate(claim, self.planned_tx(ReasonCode.CANCEL))

        self.assertRejected(result, FailureCode.INVALID_REASON_CODE)
        self.assertEqual(len(result.gate_evaluations), 1)

    def test_arbiter_signs_different_code_than_party(self):
        claim = RedemptionClaim(
            reason_code=b"b",
            signatures=[
                self.keyring.sign_reason(Role.BUYER, ReasonCode.RESOLVE_BUYER),
                self.keyring.sign_reason(Role.ARBITER, ReasonCode.RESOLVE_SELLER),
            ],
        )

        result = self.validator.validate(claim, self.planned_tx(ReasonCode.RESOLVE_BUYER))

        self.assertFalse(result.accepted())

    def test_unknown_reason_code(self):
        for raw in (b"z", "q", b"", b"xs", "execute"):
            claim = RedemptionClaim(reason_code=raw, signatures=[])
            result = self.validator.validate(claim, self.planned_tx(ReasonCode.EXECUTE))

            self.assertRejected(result, FailureCode.INVALID_REASON_CODE)
            self.assertIsNone(result.path)


class TestDestinationAttacks(EscrowTestCase):
    """
    Attack Vector: Redirect value.

    Threat: A signer builds a transaction whose amounts are right but whose
    payout or fee goes to an address they control.
    """

    def test_swapped_outputs_on_resolve(self):
        claim = self.make_claim(ReasonCode.RESOLVE_BUYER, Role.BUYER, Role.ARBITER)
        planned = self.planned_tx(ReasonCode.RESOLVE_BUYER)
        tx = self.make_tx([
            (planned.outputs[1].value, planned.outputs[1].destination_hash),
            (planned.outputs[0].value, planned.outputs[0].destination_hash),
        ])

        result = self.validator.validate(claim, tx)

        self.assertRejected(result, FailureCode.AMOUNT_MISMATCH)
        failed = {g.failure_code for g in result.failed_gates}
        self.assertIn(FailureCode.DESTINATION_MISMATCH, failed)

    def test_swapped_destinations_on_execute(self):
        """Right amounts, but the buyer's payout goes to the arbiter and the fee to the buyer."""
        claim = self.make_claim(ReasonCode.EXECUTE, Role.SELLER)
        tx = self.planned_tx(ReasonCode.EXECUTE)
        tx.outputs[0].destination_hash, tx.outputs[1].destination_hash = (
            tx.outputs[1].destination_hash, tx.outputs[0].destination_hash
        )

        result = self.validator.validate(claim, tx)

        self.assertRejected(result, FailureCode.DESTINATION_MISMATCH)
        self.assertEqual(
            sorted(g.gate_id for g in result.failed_gates),
            ["arbiter_fee_destination", "payout_destination"]
        )

    def test_arbiter_fee_redirected(self):
        for code in (ReasonCode.EXECUTE, ReasonCode.RESOLVE_SELLER):
            claim = self.make_claim(code, *LEGITIMATE_SIGNERS[code])
            tx = self.planned_tx(code)
            tx.outputs[1].destination_hash = self.dest(Role.SELLER)

            result = self.validator.validate(claim, tx)

            self.assertRejected(result, FailureCode.DESTINATION_MISMATCH)
            self.assertEqual(result.failed_gates[0].gate_id, "arbiter_fee_destination")

    def test_payout_redirected_on_every_path(self):
        for code, signers in LEGITIMATE_SIGNERS.items():
            claim = self.make_claim(code, *signers)
            tx = self.planned_tx(code)
            tx.outputs[0].destination_hash = b"\x00" * 20

            self.assertRejected(self.validator.validate(claim, tx), FailureCode.DESTINATION_MISMATCH)

    def test_extra_outputs_beyond_layout_are_not_checked(self):
        """Only the positional outputs the path names are constrained."""
        claim = self.make_claim(ReasonCode.CANCEL, Role.BUYER)
        tx = self.planned_tx(ReasonCode.CANCEL)
        tx.outputs.append(TxOutput(value=0, destination_hash=self.dest(Role.BUYER)))

        self.assertTrue(self.validator.validate(claim, tx).accepted())


class TestAmountAttacks(EscrowTestCase):
    """
    Attack Vector: Skim or inflate value.

    Threat: Outputs sum to more than the input less fees, or fees are
    dodged on a low balance.
    """

    def test_underflow_on_every_path(self):
        for code, signers in LEGITIMATE_SIGNERS.items():
            terms = self.validator.terms_for(code)
            low = terms.total_fees - 1
            claim = self.make_claim(code, *signers)
            tx = self.make_tx(
                [(0, d) for d in terms.output_destinations()],
                inputs=(low,),
            )

            result = self.validator.validate(claim, tx)

            self.assertRejected(result, FailureCode.AMOUNT_MISMATCH)
            self.assertEqual(result.failed_gates[0].observed, str(low))

    def test_payout_one_below_rejected(self):
        for code, signers in LEGITIMATE_SIGNERS.items():
            claim = self.make_claim(code, *signers)
            tx = self.planned_tx(code)
            tx.outputs[0].value -= 1

            self.assertRejected(self.validator.validate(claim, tx), FailureCode.AMOUNT_MISMATCH)

    def test_execute_miner_fee_is_not_resolve_fee(self):
        """Execute pays 900 to miners; using the 800 fee leaves 100 unaccounted."""
        claim = self.make_claim(ReasonCode.EXECUTE, Role.SELLER)
        tx = self.make_tx([
            (INPUT_VALUE - RESOLVE_MINER_FEE - ARBITER_FEE, self.dest(Role.BUYER_PAYOUT)),
            (ARBITER_FEE, self.dest(Role.ARBITER)),
        ])

        self.assertRejected(self.validator.validate(claim, tx), FailureCode.AMOUNT_MISMATCH)


class TestInputShapeAttacks(EscrowTestCase):
    """
    Attack Vector: Merge or drop inputs.

    Threat: A second input inflates the value the outputs are checked
    against, or a zero-input transaction sidesteps the amount checks.
    """

    def test_two_inputs_rejected_on_every_path(self):
        for code, signers in LEGITIMATE_SIGNERS.items():
            claim = self.make_claim(code, *signers)
            tx = self.planned_tx(code)
            tx.inputs.append(TxInput(value=1))

            result = self.validator.validate(claim, tx)

            self.assertRejected(result, FailureCode.INVALID_INPUT_SHAPE)

    def test_zero_inputs_rejected_on_every_path(self):
        for code, signers in LEGITIMATE_SIGNERS.items():
            claim = self.make_claim(code, *signers)
            tx = self.planned_tx(code)
            tx.inputs.clear()

            self.assertRejected(self.validator.validate(claim, tx), FailureCode.INVALID_INPUT_SHAPE)


class TestSignatureAttacks(EscrowTestCase):
    """
    Attack Vector: Forge or pad signatures.
    """

    def test_tampered_signature(self):
        signed = self.keyring.sign_reason(Role.SELLER, ReasonCode.EXECUTE)
        tampered = bytes([signed.signature[0] ^ 0x01]) + signed.signature[1:]
        claim = RedemptionClaim(
            reason_code=b"x",
            signatures=[SignedMessage(signature=tampered, message=b"x")],
        )

        result = self.validator.validate(claim, self.planned_tx(ReasonCode.EXECUTE))

        self.assertRejected(result, FailureCode.SIGNATURE_INVALID)

    def test_truncated_signature(self):
        signed = self.keyring.sign_reason(Role.SELLER, ReasonCode.EXECUTE)
        claim = RedemptionClaim(
            reason_code=b"x",
            signatures=[SignedMessage(signature=signed.signature[:10], message=b"x")],
        )

        result = self.validator.validate(claim, self.planned_tx(ReasonCode.EXECUTE))

        self.assertRejected(result, FailureCode.SIGNATURE_INVALID)

    def test_signature_over_other_data(self):
        sig = sign_data(b"x-but-longer", self.keyring[Role.SELLER].signing_key)
        claim = RedemptionClaim(reason_code=b"x", signatures=[SignedMessage(signature=sig, message=b"x")])

        self.assertRejected(
            self.validator.validate(claim, self.planned_tx(ReasonCode.EXECUTE)),
            FailureCode.SIGNATURE_INVALID
        )

    def test_surplus_signature_rejected(self):
        claim = self.make_claim(ReasonCode.EXECUTE, Role.SELLER, Role.ARBITER)
        result = self.validator.validate(claim, self.planned_tx(ReasonCode.EXECUTE))

        self.assertRejected(result, FailureCode.SIGNATURE_INVALID)
        self.assertEqual(
            [g.gate_id for g in result.failed_gates],
            ["signature_count"]
        )

    def test_no_signatures(self):
        for code in ReasonCode:
            claim = RedemptionClaim(reason_code=code.message, signatures=[])
            self.assertRejected(
                self.validator.validate(claim, self.planned_tx(code)),
                FailureCode.SIGNATURE_INVALID
            )

    def test_duplicated_party_signature_on_resolve(self):
        """Two copies of the party's signature are not the arbiter's."""
        claim = self.make_claim(ReasonCode.RESOLVE_SELLER, Role.SELLER, Role.SELLER)
        result = self.validator.validate(claim, self.planned_tx(ReasonCode.RESOLVE_SELLER))

        self.assertRejected(result, FailureCode.SIGNATURE_INVALID)
        self.assertEqual(result.failed_gates[0].gate_id, "arbiter_signature")


if __name__ == "__main__":
    unittest.main()
