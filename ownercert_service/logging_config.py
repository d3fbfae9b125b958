"""
Logging configuration for the ownership certificate service.

Provides structured JSON logging for audit trails and debugging.
Subject emails are masked and secrets are never logged.
"""

import json
import logging
import sys
import time
import uuid
from contextvars import ContextVar
from typing import Optional

from ownercert import mask_email

# Context variable for request ID tracking
request_id_var: ContextVar[str] = ContextVar('request_id', default='')


class StructuredFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Outputs logs in a consistent JSON format suitable for
    log aggregation systems like ELK, Splunk, or CloudWatch.
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
    Specialized logger for certificate audit events.

    Records issuance and verification outcomes. Nothing here is a
    certificate store: identifiers are logged for tracing only.
    """

    def __init__(self, name: str = "ownercert.audit"):
        self._logger = logging.getLogger(name)

    def _log(self, level: int, event_type: str, **kwargs) -> None:
        """Internal logging method with extra fields."""
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

    def certificate_issued(
        self,
        kind: str,
        certificate_id: str,
        subject_email: str,
        artifact_id: Optional[str] = None
    ) -> None:
        """Log a newly issued certificate."""
        self._log(
            logging.INFO,
            "CERTIFICATE_ISSUED",
            kind=kind,
            certificate_id=certificate_id,
            subject=mask_email(subject_email),
            artifact_id=artifact_id,
            message=f"Issued {kind} certificate {certificate_id}"
        )

    def issuance_rejected(
        self,
        kind: str,
        field: str,
        reason: str
    ) -> None:
        """Log an issuance request rejected for missing inputs."""
        self._log(
            logging.WARNING,
            "ISSUANCE_REJECTED",
            kind=kind,
            field=field,
            reason=reason,
            message=f"Issuance rejected: {field} {reason}"
        )

    def certificate_verified(
        self,
        kind: str,
        certificate_id: str,
        method: str,
        artifact_bytes_verified: Optional[bool] = None
    ) -> None:
        """Log a successful verification."""
        self._log(
            logging.INFO,
            "CERTIFICATE_VERIFIED",
            kind=kind,
            certificate_id=certificate_id,
            method=method,
            artifact_bytes_verified=artifact_bytes_verified,
            message=f"Verified {kind} certificate {certificate_id} ({method})"
        )

    def verification_failed(
        self,
        kind: str,
        certificate_id: Optional[str],
        reason: str,
        detail: str
    ) -> None:
        """Log a failed verification (corruption and tampering look the same)."""
        self._log(
            logging.WARNING,
            "VERIFICATION_FAILED",
            kind=kind,
            certificate_id=certificate_id,
            reason=reason,
            detail=detail,
            message=f"Verification failed ({reason}): {detail}"
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
