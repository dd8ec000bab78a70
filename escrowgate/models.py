from typing import List

from pydantic import BaseModel, Field


class TxInputModel(BaseModel):
    value: int = Field(ge=0)


class TxOutputModel(BaseModel):
    value: int = Field(ge=0)
    destination_hash: str


class TransactionModel(BaseModel):
    inputs: List[TxInputModel] = Field(default_factory=list)
    outputs: List[TxOutputModel] = Field(default_factory=list)


class SignedMessageModel(BaseModel):
    signature: str
    message: str


class ClaimModel(BaseModel):
    reason_code: str
    signatures: List[SignedMessageModel] = Field(default_factory=list)


class ValidateRequest(BaseModel):
    transaction: TransactionModel
    claim: ClaimModel


class PlanRequest(BaseModel):
    reason_code: str
    input_value: int = Field(ge=0)
