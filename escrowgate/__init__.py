"""
escrowgate: Three-Party Escrow Redemption Validator

Version: 1.0.0

Funds locked under a buyer, a seller and an arbiter can be released only
along one of three mutually exclusive redemption paths. escrowgate
evaluates a single predicate:

    VALID(claim, transaction, contract) in { ACCEPT, REJECT }

There is no third state. A claim that does not satisfy every check of the
path its reason code selects is rejected.

Usage:
    from escrowgate import (
        PartyKeyring,
        ProposedTransaction,
        RedemptionClaim,
        RedemptionValidator,
        ReasonCode,
        TxInput,
        Role,
    )

    keyring = PartyKeyring.generate()
    params = keyring.contract_parameters(arbiter_fee=1000)
    validator = RedemptionValidator(params)

    # Seller attests the trade completed
    terms = validator.terms_for(ReasonCode.EXECUTE)
    tx = ProposedTransaction(
        inputs=[TxInput(value=101900)],
        outputs=terms.required_outputs(101900),
    )
    claim = RedemptionClaim(
        reason_code=ReasonCode.EXECUTE.message,
        signatures=[keyring.sign_reason(Role.SELLER, ReasonCode.EXECUTE)],
    )

    result = validator.validate(claim, tx)
    if result.accepted():
        ...  # hand the transaction to the execution environment
    else:
        failed = result.failed_gates
"""

__version__ = "1.0.0"
__license__ = "Apache-2.0"

# Errors
from .errors import (
    EscrowGateError,
    ContractParameterError,
    MalformedDocumentError,
    InsufficientFundsError,
)

# Contract and transaction types
from .contract import (
    ContractParameters,
    Party,
    Role,
)
from .transaction import (
    TxInput,
    TxOutput,
    ProposedTransaction,
    SignedMessage,
    RedemptionClaim,
)

# Hashing
from .canonicalization import canonicalize, canonicalize_str
from .hashing import (
    payout_hash,
    sha256_hash,
    contract_hash,
    document_hash,
)

# Paths
from .paths import (
    ReasonCode,
    RedemptionPath,
    RedemptionTerms,
    RequiredSigner,
    resolve_terms,
    EXECUTE_MINER_FEE,
    CANCEL_MINER_FEE,
    RESOLVE_MINER_FEE,
)

# Gates
from .gates import (
    Gate,
    GateResult,
    GateEvaluation,
    FailureCode,
    ReasonCodeGate,
    InputShapeGate,
    OutputAmountGate,
    OutputDestinationGate,
    SignatureCountGate,
    SignatureGate,
    path_gates,
)

# Validator
from .validator import (
    RedemptionValidator,
    ValidationResult,
    Decision,
    validate,
)

# Signing
from .signing import (
    KeyPair,
    PartyKeyring,
    generate_signing_key,
    sign_data,
    sign_reason,
    verify_signature,
)


__all__ = [
    "__version__",

    # Errors
    "EscrowGateError",
    "ContractParameterError",
    "MalformedDocumentError",
    "InsufficientFundsError",

    # Types
    "ContractParameters",
    "Party",
    "Role",
    "TxInput",
    "TxOutput",
    "ProposedTransaction",
    "SignedMessage",
    "RedemptionClaim",

    # Hashing
    "canonicalize",
    "canonicalize_str",
    "payout_hash",
    "sha256_hash",
    "contract_hash",
    "document_hash",

    # Paths
    "ReasonCode",
    "RedemptionPath",
    "RedemptionTerms",
    "RequiredSigner",
    "resolve_terms",
    "EXECUTE_MINER_FEE",
    "CANCEL_MINER_FEE",
    "RESOLVE_MINER_FEE",

    # Gates
    "Gate",
    "GateResult",
    "GateEvaluation",
    "FailureCode",
    "ReasonCodeGate",
    "InputShapeGate",
    "OutputAmountGate",
    "OutputDestinationGate",
    "SignatureCountGate",
    "SignatureGate",
    "path_gates",

    # Validator
    "RedemptionValidator",
    "ValidationResult",
    "Decision",
    "validate",

    # Signing
    "KeyPair",
    "PartyKeyring",
    "generate_signing_key",
    "sign_data",
    "sign_reason",
    "verify_signature",
]
