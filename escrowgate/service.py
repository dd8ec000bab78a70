"""
escrowgate HTTP service.

A thin FastAPI wrapper over RedemptionValidator for hosts that validate
candidate transactions out of process. The contract is loaded once at
startup from ESCROWGATE_CONTRACT_PATH; the validator is shared by all
requests.
"""

import json
import logging
from typing import Optional

from fastapi import FastAPI, HTTPException, Request

from . import config
from .contract import ContractParameters
from .errors import EscrowGateError, InsufficientFundsError
from .logging_config import configure_logging, set_request_id
from .models import PlanRequest, ValidateRequest
from .paths import ReasonCode
from .transaction import ProposedTransaction, RedemptionClaim
from .validator import RedemptionValidator

logger = logging.getLogger(__name__)

app = FastAPI(title="escrowgate")

VALIDATOR: Optional[RedemptionValidator] = None


def install_contract(params: ContractParameters) -> RedemptionValidator:
    """Serve ``params``, replacing any previously loaded contract."""
    global VALIDATOR
    VALIDATOR = RedemptionValidator(params)
    logger.info("Serving contract %s", VALIDATOR.fingerprint)
    return VALIDATOR


def get_validator() -> RedemptionValidator:
    if VALIDATOR is None:
        raise HTTPException(503, "CONTRACT_NOT_LOADED")
    return VALIDATOR


@app.on_event("startup")
def _startup():
    configure_logging(config.LOG_LEVEL, config.LOG_JSON, config.LOG_FILE)
    try:
        install_contract(config.load_contract())
    except FileNotFoundError:
        logger.error("Contract file not found: %s", config.CONTRACT_PATH)
    except (EscrowGateError, json.JSONDecodeError) as e:
        logger.error("Invalid contract file %s: %s", config.CONTRACT_PATH, e)


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    request_id = set_request_id(request.headers.get("x-request-id"))
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


@app.get("/health")
def health():
    return {"status": "ok", "contract_loaded": VALIDATOR is not None}


@app.get("/contract")
def contract():
    validator = get_validator()
    return {"fingerprint": validator.fingerprint, "contract": validator.params.to_dict()}


@app.post("/validate")
def validate(req: ValidateRequest):
    validator = get_validator()
    try:
        tx = ProposedTransaction.from_dict(req.transaction.model_dump())
        claim = RedemptionClaim.from_dict(req.claim.model_dump())
    except EscrowGateError as e:
        raise HTTPException(400, str(e))
    return validator.validate(claim, tx).to_dict()


@app.post("/plan")
def plan(req: PlanRequest):
    validator = get_validator()
    terms = validator.terms_for(req.reason_code)
    if terms is None:
        raise HTTPException(422, "INVALID_REASON_CODE")
    try:
        return terms.plan(req.input_value)
    except InsufficientFundsError as e:
        raise HTTPException(400, f"INSUFFICIENT_FUNDS: {e}")


@app.get("/reason_codes")
def reason_codes():
    return {code.name.lower(): code.value for code in ReasonCode}
