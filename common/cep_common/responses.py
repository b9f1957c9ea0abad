"""
HTTP response helpers for the error contract shared by both services.

Validation and lookup failures are answered with a small JSON body
(``{"error": "..."}``); internal failures with a plain-text message.
"""

from fastapi import Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from .errors import CepServiceError, ErrorKind, status_code_for
from .middleware import REQUEST_ID_HEADER

_JSON_ERROR_KINDS = frozenset({ErrorKind.INVALID_FORMAT, ErrorKind.NOT_FOUND})


def json_error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def plain_error(status_code: int, message: str) -> PlainTextResponse:
    return PlainTextResponse(status_code=status_code, content=message)


def error_response(error: CepServiceError) -> Response:
    """
    Build the HTTP response for a pipeline error.

    Args:
        error: Error raised while handling the request

    Returns:
        JSON error body for client-facing kinds, plain text otherwise
    """
    status_code = status_code_for(error)
    if error.kind in _JSON_ERROR_KINDS:
        return json_error(status_code, error.message)
    return plain_error(status_code, error.message)


def internal_error(request: Request) -> PlainTextResponse:
    """Plain-text 500 for unhandled exceptions, echoing the request ID."""
    response = plain_error(500, "internal server error")
    request_id = getattr(request.state, "request_id", None)
    if request_id:
        response.headers[REQUEST_ID_HEADER] = request_id
    return response
