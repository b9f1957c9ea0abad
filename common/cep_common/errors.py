"""
Error types shared by the gateway and resolver services.

Every error carries an ErrorKind. HTTP status codes are chosen from the
kind, never from the message text.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    """Closed set of failure categories in the request pipeline."""

    INVALID_FORMAT = "invalid_format"
    NOT_FOUND = "not_found"
    UPSTREAM_FAILURE = "upstream_failure"
    CONFIG_MISSING = "config_missing"


INVALID_ZIPCODE_MESSAGE = "invalid zipcode"
ZIPCODE_NOT_FOUND_MESSAGE = "can not find zipcode"
CEP_HEADER_REQUIRED_MESSAGE = "CEP header is required"


class CepServiceError(Exception):
    """Base exception for all CEP temperature service errors."""

    kind: ErrorKind = ErrorKind.UPSTREAM_FAILURE

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class InvalidZipcodeError(CepServiceError):
    """Raised when a CEP is malformed or rejected by the directory API."""

    kind = ErrorKind.INVALID_FORMAT

    def __init__(self, cep: str):
        super().__init__(message=INVALID_ZIPCODE_MESSAGE, details={"cep": cep})


class ZipcodeNotFoundError(CepServiceError):
    """Raised when the directory API has no entry for a CEP."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, cep: str):
        super().__init__(message=ZIPCODE_NOT_FOUND_MESSAGE, details={"cep": cep})


class UpstreamServiceError(CepServiceError):
    """Raised when an upstream HTTP service fails or returns garbage."""

    kind = ErrorKind.UPSTREAM_FAILURE

    def __init__(
        self,
        service: str,
        reason: str,
        status_code: Optional[int] = None,
    ):
        self.service = service
        self.status_code = status_code
        super().__init__(
            message=reason,
            details={"service": service, "status_code": status_code},
        )


class ConfigurationMissingError(CepServiceError):
    """Raised when a required configuration value is not set."""

    kind = ErrorKind.CONFIG_MISSING

    def __init__(self, setting: str):
        self.setting = setting
        super().__init__(message=f"{setting} not set", details={"setting": setting})


STATUS_BY_KIND: Dict[ErrorKind, int] = {
    ErrorKind.INVALID_FORMAT: 422,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.UPSTREAM_FAILURE: 500,
    ErrorKind.CONFIG_MISSING: 500,
}


def status_code_for(error: CepServiceError) -> int:
    """
    Map an error to the HTTP status code the services respond with.

    Args:
        error: Error raised in the request pipeline

    Returns:
        HTTP status code for the error's kind
    """
    return STATUS_BY_KIND[error.kind]
