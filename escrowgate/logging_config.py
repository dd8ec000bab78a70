"""
Logging configuration for escrowgate.

Records go out as one JSON object per line. Redemption requests and
decisions are written to the ``escrowgate.audit`` logger with the contract
fingerprint attached, so a host can reconstruct which claims were accepted
against which contract.
"""

import json
import logging
import sys
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import IO, List, Optional

AUDIT_LOGGER = "escrowgate.audit"

# Request ID of the HTTP request (or CLI invocation) being served
request_id_var: ContextVar[str] = ContextVar('request_id', default='')

SEVERITY_LEVELS = {
    "low": logging.INFO,
    "medium": logging.WARNING,
    "high": logging.ERROR,
    "critical": logging.CRITICAL,
}


class RequestIdFilter(logging.Filter):
    """Stamp each record with the current request ID."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get()
        return True


class StructuredFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Audit records carry their fields in ``record.extra_fields``; those are
    merged into the top-level object.
    """

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        entry = {
            "timestamp": created.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "source": f"{record.module}:{record.funcName}:{record.lineno}",
        }

        request_id = getattr(record, "request_id", None) or request_id_var.get()
        if request_id:
            entry["request_id"] = request_id

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        entry.update(getattr(record, "extra_fields", {}))
        return json.dumps(entry, default=str)


class AuditLogger:
    """Audit trail of redemption validation."""

    def __init__(self, name: str = AUDIT_LOGGER):
        self._logger = logging.getLogger(name)

    def _emit(self, level: int, event_type: str, message: str, **fields) -> None:
        fields["event_type"] = event_type
        fields["request_id"] = request_id_var.get()
        self._logger.log(level, "%s: %s", event_type, message, extra={"extra_fields": fields})

    def redemption_request(
        self,
        contract: str,
        transaction: str,
        reason_code: str,
        input_count: int,
        output_count: int,
        signature_count: int
    ) -> None:
        """Log a claim about to be validated. DEBUG only: every call is followed by a decision."""
        self._emit(
            logging.DEBUG,
            "REDEMPTION_REQUEST",
            f"Redemption requested with reason {reason_code}",
            contract=contract,
            transaction=transaction,
            reason_code=reason_code,
            input_count=input_count,
            output_count=output_count,
            signature_count=signature_count,
        )

    def redemption_decision(
        self,
        contract: str,
        reason_code: str,
        decision: str,
        path: Optional[str] = None,
        failed_gates: Optional[List[dict]] = None
    ) -> None:
        """Log a redemption decision: INFO on accept, WARNING on reject."""
        self._emit(
            logging.INFO if decision == "ACCEPT" else logging.WARNING,
            "REDEMPTION_DECISION",
            f"Redemption decision: {decision}",
            contract=contract,
            reason_code=reason_code,
            decision=decision,
            path=path,
            failed_gates=failed_gates,
        )

    def security_event(self, event: str, severity: str = "medium", **details) -> None:
        self._emit(
            SEVERITY_LEVELS.get(severity, logging.WARNING),
            "SECURITY_EVENT",
            f"Security event: {event}",
            security_event=event,
            severity=severity,
            **details
        )


def configure_logging(
    level: str = "INFO",
    json_format: bool = True,
    log_file: Optional[str] = None,
    stream: Optional[IO[str]] = None
) -> logging.Logger:
    """
    Replace the root logger's handlers.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: One JSON object per line; plain text otherwise
        log_file: Also append records to this file
        stream: Console stream, stderr by default so stdout stays free for
            command output

    Returns:
        The root logger
    """
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        raise ValueError(f"Unknown log level: {level}")

    if json_format:
        formatter = StructuredFormatter()
    else:
        formatter = logging.Formatter('%(asctime)s %(levelname)s [%(name)s] %(message)s')

    handlers: List[logging.Handler] = [logging.StreamHandler(stream or sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(RequestIdFilter())
        root.addHandler(handler)
    root.setLevel(numeric)
    return root


def set_request_id(request_id: Optional[str] = None) -> str:
    """Bind ``request_id`` (or a fresh one) to the current context and return it."""
    request_id = request_id if request_id is not None else uuid.uuid4().hex
    request_id_var.set(request_id)
    return request_id


def get_request_id() -> str:
    return request_id_var.get()


audit_log = AuditLogger()
