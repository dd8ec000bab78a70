#!/usr/bin/env python3
"""
escrowgate Command Line Interface

Usage:
    escrowgate keygen --output <file>
    escrowgate contract --keys <file> --arbiter-fee <n> --output <file>
    escrowgate sign --keys <file> --role <role> --reason <code>
    escrowgate plan --contract <file> --reason <code> --input-value <n>
    escrowgate validate --contract <file> --transaction <file> --claim <file>
    escrowgate demo
"""

import argparse
import json
import sys

from . import config
from .contract import Role
from .errors import EscrowGateError
from .logging_config import configure_logging
from .paths import ReasonCode
from .signing import PartyKeyring
from .transaction import ProposedTransaction, RedemptionClaim, TxInput
from .validator import RedemptionValidator


def load_json(path: str) -> dict:
    """Load JSON from file."""
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


def save_json(data: dict, path: str):
    """Save JSON to file."""
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2)


def emit(data: dict, output: str = None):
    if output:
        save_json(data, output)
        print(f"Saved to: {output}", file=sys.stderr)
    else:
        print(json.dumps(data, indent=2))


def parse_reason(raw: str) -> ReasonCode:
    code = ReasonCode.parse(raw)
    if code is None:
        raise EscrowGateError(
            f"Unknown reason code {raw!r}: expected one of {[c.value for c in ReasonCode]}"
        )
    return code


def cmd_keygen(args):
    """Generate Ed25519 keys for every contract role."""
    keyring = PartyKeyring.generate()
    emit(keyring.to_dict(), args.output)
    print("Keep this file private: it holds every party's signing key.", file=sys.stderr)
    return 0


def cmd_contract(args):
    """Build contract parameters from a keyring."""
    keyring = PartyKeyring.from_dict(load_json(args.keys))
    params = keyring.contract_parameters(args.arbiter_fee)
    emit(params.to_dict(), args.output)
    print(f"Contract fingerprint: {params.fingerprint()}", file=sys.stderr)
    return 0


def cmd_sign(args):
    """Sign a reason code as one role."""
    keyring = PartyKeyring.from_dict(load_json(args.keys))
    signed = keyring.sign_reason(Role(args.role), parse_reason(args.reason))
    emit(signed.to_dict(), args.output)
    return 0


def cmd_plan(args):
    """Print the outputs a transaction on the given path must carry."""
    params = config.load_contract(args.contract)
    validator = RedemptionValidator(params)
    terms = validator.terms_for(parse_reason(args.reason))
    emit(terms.plan(args.input_value), args.output)
    return 0


def cmd_validate(args):
    """Validate a claim and proposed transaction against a contract."""
    params = config.load_contract(args.contract)
    tx = ProposedTransaction.from_dict(load_json(args.transaction))
    claim = RedemptionClaim.from_dict(load_json(args.claim))

    result = RedemptionValidator(params).validate(claim, tx)
    emit(result.to_dict(), args.output)

    if result.accepted():
        print(f"\n✓ ACCEPT ({result.path.value})", file=sys.stderr)
        return 0

    print(f"\n✗ REJECT: {result.reason.value}", file=sys.stderr)
    for gate in result.failed_gates:
        print(f"  - {gate.gate_id}: {gate.failure_code.value}", file=sys.stderr)
    return 1


def cmd_demo(args):
    """Run a demonstration of every redemption path."""
    keyring = PartyKeyring.generate()
    params = keyring.contract_parameters(arbiter_fee=1000)
    validator = RedemptionValidator(params)
    input_value = 101900

    print("=" * 60)
    print("escrowgate Demonstration")
    print("=" * 60)
    print(f"\nContract: {params.fingerprint()}")
    print(f"Arbiter fee: {params.arbiter_fee}  Locked balance: {input_value}")

    scenarios = [
        ("Seller confirms delivery", ReasonCode.EXECUTE, [Role.SELLER]),
        ("Buyer cancels", ReasonCode.CANCEL, [Role.BUYER]),
        ("Arbiter rules for buyer", ReasonCode.RESOLVE_BUYER, [Role.BUYER, Role.ARBITER]),
        ("Arbiter rules for seller", ReasonCode.RESOLVE_SELLER, [Role.SELLER, Role.ARBITER]),
        ("Buyer tries to execute", ReasonCode.EXECUTE, [Role.BUYER]),
    ]

    for title, code, roles in scenarios:
        print("\n" + "-" * 60)
        print(f"{title} ({code.value!r})")
        print("-" * 60)

        terms = validator.terms_for(code)
        tx = ProposedTransaction(
            inputs=[TxInput(value=input_value)],
            outputs=terms.required_outputs(input_value),
        )
        claim = RedemptionClaim(
            reason_code=code.message,
            signatures=[keyring.sign_reason(role, code) for role in roles],
        )
        result = validator.validate(claim, tx)

        print(f"Outputs: {[o.value for o in tx.outputs]}  Signed by: {[r.value for r in roles]}")
        print(f"Decision: {result.decision.value}")
        for gate in result.failed_gates:
            print(f"  Failed: {gate.gate_id} - {gate.failure_code.value}")

    print("\n" + "=" * 60)
    print("Demonstration complete.")
    print("=" * 60)
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="escrowgate: three-party escrow redemption validator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  escrowgate demo
  escrowgate keygen -o keys.json
  escrowgate contract -k keys.json -f 1000 -o contract.json
  escrowgate sign -k keys.json -r seller -R x
  escrowgate plan -c contract.json -R x -i 101900
  escrowgate validate -c contract.json -t tx.json -C claim.json
        """
    )
    parser.add_argument("--log-level", default=config.LOG_LEVEL, help="Log level")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    keygen_parser = subparsers.add_parser("keygen", help="Generate keys for every role")
    keygen_parser.add_argument("-o", "--output", help="Output file for the keyring")

    contract_parser = subparsers.add_parser("contract", help="Build contract parameters")
    contract_parser.add_argument("-k", "--keys", required=True, help="Keyring JSON file")
    contract_parser.add_argument("-f", "--arbiter-fee", required=True, type=int, help="Arbiter fee in satoshis")
    contract_parser.add_argument("-o", "--output", help="Output file for the contract")

    sign_parser = subparsers.add_parser("sign", help="Sign a reason code")
    sign_parser.add_argument("-k", "--keys", required=True, help="Keyring JSON file")
    sign_parser.add_argument("-r", "--role", required=True, choices=[Role.ARBITER.value, Role.BUYER.value, Role.SELLER.value])
    sign_parser.add_argument("-R", "--reason", required=True, help="Reason code (x, c, b, s)")
    sign_parser.add_argument("-o", "--output", help="Output file for the signed message")

    plan_parser = subparsers.add_parser("plan", help="Show required outputs for a path")
    plan_parser.add_argument("-c", "--contract", required=True, help="Contract JSON file")
    plan_parser.add_argument("-R", "--reason", required=True, help="Reason code (x, c, b, s)")
    plan_parser.add_argument("-i", "--input-value", required=True, type=int, help="Locked balance")
    plan_parser.add_argument("-o", "--output", help="Output file for the plan")

    validate_parser = subparsers.add_parser("validate", help="Validate a redemption claim")
    validate_parser.add_argument("-c", "--contract", required=True, help="Contract JSON file")
    validate_parser.add_argument("-t", "--transaction", required=True, help="Transaction JSON file")
    validate_parser.add_argument("-C", "--claim", required=True, help="Claim JSON file")
    validate_parser.add_argument("-o", "--output", help="Output file for the result")

    subparsers.add_parser("demo", help="Run demonstration")

    args = parser.parse_args(argv)
    configure_logging(args.log_level, json_format=config.LOG_JSON, log_file=config.LOG_FILE)

    commands = {
        "keygen": cmd_keygen,
        "contract": cmd_contract,
        "sign": cmd_sign,
        "plan": cmd_plan,
        "validate": cmd_validate,
        "demo": cmd_demo,
    }

    if args.command not in commands:
        parser.print_help()
        return 2

    try:
        return commands[args.command](args)
    except (EscrowGateError, OSError, json.JSONDecodeError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
