"""
escrowgate exceptions.

Rejections of a redemption claim are never raised: they come back as a
ValidationResult carrying a FailureCode. The exceptions here cover malformed
host input (contract files, transaction and claim documents) and payout
planning on an underfunded balance.
"""


class EscrowGateError(ValueError):
    """Base class for escrowgate input errors."""


class ContractParameterError(EscrowGateError):
    """Contract parameters are missing, malformed or out of range."""


class MalformedDocumentError(EscrowGateError):
    """A transaction or claim document cannot be decoded."""


class InsufficientFundsError(EscrowGateError):
    """The locked balance cannot cover the miner fee and arbiter fee."""

    def __init__(self, input_value: int, required: int):
        self.input_value = input_value
        self.required = required
        super().__init__(
            f"input value {input_value} is below the {required} required for fees"
        )
