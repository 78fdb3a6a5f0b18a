"""
Logging configuration for Order Guard.

Provides structured JSON logging for diagnostics. Order contents and key
material are never written to the log; payloads appear only as fingerprints.
"""

import json
import logging
import sys
import time
import uuid
from contextvars import ContextVar
from typing import Optional

# Context variable for request ID tracking
request_id_var: ContextVar[str] = ContextVar('request_id', default='')


class StructuredFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Outputs one JSON object per line, suitable for log aggregation.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": time.strftime('%Y-%m-%dT%H:%M:%SZ', time.gmtime(record.created)),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        request_id = request_id_var.get()
        if request_id:
            log_data["request_id"] = request_id

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if hasattr(record, 'extra_fields'):
            log_data.update(record.extra_fields)

        return json.dumps(log_data, default=str)


class AuditLogger:
    """
    Specialized logger for pipeline events.

    One method per event the router, registry, verifier and vault emit.
    """

    def __init__(self, name: str = "orderguard.audit"):
        self._logger = logging.getLogger(name)

    def _log(self, level: int, event_type: str, **kwargs) -> None:
        """Internal logging method with extra fields."""
        if not self._logger.isEnabledFor(level):
            return
        extra = {
            "event_type": event_type,
            "request_id": request_id_var.get(),
            **kwargs
        }

        record = self._logger.makeRecord(
            self._logger.name,
            level,
            "",
            0,
            f"{event_type}: {kwargs.get('message', '')}",
            (),
            None
        )
        record.extra_fields = extra
        self._logger.handle(record)

    def client_registered(self, client_id: int, key_fingerprint: str, new: bool) -> None:
        """Log a registration (new or idempotent repeat)."""
        self._log(
            logging.INFO if new else logging.DEBUG,
            "CLIENT_REGISTERED",
            client_id=client_id,
            key_fingerprint=key_fingerprint,
            new=new,
            message=f"Client {client_id} {'registered' if new else 're-registered'}"
        )

    def envelope_malformed(self, stage: str, reason: str) -> None:
        """Log an envelope or inner message that could not be decoded."""
        self._log(
            logging.WARNING,
            "ENVELOPE_MALFORMED",
            stage=stage,
            reason=reason,
            message=f"Malformed input at {stage}"
        )

    def signature_rejected(self, client_id: int, reason: str) -> None:
        """Log a failed signature check."""
        self._log(
            logging.WARNING,
            "SIGNATURE_REJECTED",
            client_id=client_id,
            reason=reason,
            message=f"Signature rejected for client {client_id}"
        )

    def order_stored(self, client_id: int, ledger_size: int, evicted: bool) -> None:
        """Log a successful encrypted append."""
        self._log(
            logging.INFO,
            "ORDER_STORED",
            client_id=client_id,
            ledger_size=ledger_size,
            evicted=evicted,
            message=f"Order stored for client {client_id}"
        )

    def orders_retrieved(self, client_id: int, count: int, failed: int) -> None:
        """Log a ledger retrieval."""
        self._log(
            logging.INFO if failed == 0 else logging.ERROR,
            "ORDERS_RETRIEVED",
            client_id=client_id,
            count=count,
            failed=failed,
            message=f"Retrieved {count} orders for client {client_id}"
        )

    def crypto_failure(self, operation: str, client_id: Optional[int] = None, reason: str = "") -> None:
        """Log an encryption or decryption primitive failure."""
        self._log(
            logging.ERROR,
            "CRYPTO_FAILURE",
            operation=operation,
            client_id=client_id,
            reason=reason,
            message=f"{operation} failed"
        )


def configure_logging(
    level: str = "INFO",
    json_format: bool = True,
    log_file: Optional[str] = None
) -> None:
    """
    Configure logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Use JSON formatting (recommended for production)
        log_file: Optional file path for log output
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if json_format:
        formatter = StructuredFormatter()
    else:
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)


def set_request_id(request_id: Optional[str] = None) -> str:
    """
    Set the request ID for the current context.

    Args:
        request_id: Request ID to set, or None to generate one

    Returns:
        The request ID that was set
    """
    if request_id is None:
        request_id = str(uuid.uuid4())
    request_id_var.set(request_id)
    return request_id


def get_request_id() -> str:
    """Get the current request ID."""
    return request_id_var.get()


# Global audit logger instance
audit_log = AuditLogger()
