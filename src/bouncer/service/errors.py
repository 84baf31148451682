"""Classification of remote verdict service failures.

Every failure raised by the service client is reduced to a small set of
facts (HTTP status, error code, message) and then mapped to exactly one
``ServiceErrorType``. The order of the checks in ``classify_failure`` is
part of the contract: status checks first, then error codes, then
message heuristics.
"""

from __future__ import annotations

import socket
from dataclasses import dataclass
from enum import Enum

import httpx
from google.genai import errors as genai_errors

NETWORK_CODES = frozenset({"ENOTFOUND", "ECONNREFUSED"})
TIMEOUT_CODE = "ETIMEDOUT"

_DNS_HINTS = (
    "name or service not known",
    "nodename nor servname",
    "temporary failure in name resolution",
    "no address associated",
    "getaddrinfo",
)


class ServiceErrorType(str, Enum):
    """Failure categories for calls to the verdict service."""

    AUTHENTICATION = "Authentication"
    RATE_LIMIT = "Rate Limit"
    SERVER = "Server"
    API = "API"
    NETWORK = "Network"
    TIMEOUT = "Timeout"
    QUOTA = "Quota"
    UNEXPECTED = "Unexpected"


@dataclass(frozen=True)
class ServiceFailure:
    """Facts extracted from a raised exception."""

    message: str
    status: int | None = None
    code: str | None = None


@dataclass(frozen=True)
class ServiceErrorKind:
    """A classified failure with its user-facing message and remedy."""

    type: ServiceErrorType
    label: str
    message: str
    action: str
    failure: ServiceFailure


_FIXED: dict[ServiceErrorType, tuple[str, str]] = {
    ServiceErrorType.AUTHENTICATION: (
        "Authentication error: Invalid API key or insufficient permissions.",
        "Please check your Gemini API key and ensure it has proper permissions.",
    ),
    ServiceErrorType.RATE_LIMIT: (
        "Rate Limit error: Too many requests to the Gemini API.",
        "Wait a minute before committing again, or check your rate limits in Google AI Studio.",
    ),
    ServiceErrorType.SERVER: (
        "Server error: Gemini API is currently experiencing issues.",
        "Please try again later.",
    ),
    ServiceErrorType.API: (
        "API error: The Gemini API rejected the request.",
        "Check the error details and the Gemini API documentation.",
    ),
    ServiceErrorType.NETWORK: (
        "Network error: Could not connect to Gemini API.",
        "Please check your internet connection and try again.",
    ),
    ServiceErrorType.TIMEOUT: (
        "Timeout error: The Gemini API is taking too long to respond.",
        "Please try again later when the service might be less busy.",
    ),
    ServiceErrorType.QUOTA: (
        "Quota error: Your Gemini API quota has been exhausted.",
        "Check your plan and billing settings in Google AI Studio.",
    ),
    ServiceErrorType.UNEXPECTED: (
        "Unexpected error while calling the Gemini API.",
        "Re-run with --debug for more details.",
    ),
}


def _message_of(exc: BaseException) -> str:
    message = getattr(exc, "message", None)
    if isinstance(message, str) and message:
        return message
    return str(exc) or type(exc).__name__


def _connect_code(exc: BaseException, message: str) -> str:
    cause = exc.__cause__ or exc.__context__
    if isinstance(cause, socket.gaierror):
        return "ENOTFOUND"
    lowered = message.lower()
    if any(hint in lowered for hint in _DNS_HINTS):
        return "ENOTFOUND"
    return "ECONNREFUSED"


def describe_failure(exc: BaseException) -> ServiceFailure:
    """Reduce an exception from the service client to classification facts."""
    message = _message_of(exc)

    if isinstance(exc, genai_errors.APIError):
        status = exc.code if isinstance(exc.code, int) else None
        code = exc.status if isinstance(exc.status, str) else None
        return ServiceFailure(message=message, status=status, code=code)

    if isinstance(exc, (httpx.TimeoutException, TimeoutError)):
        return ServiceFailure(message=message, code=TIMEOUT_CODE)
    if isinstance(exc, socket.gaierror):
        return ServiceFailure(message=message, code="ENOTFOUND")
    if isinstance(exc, ConnectionRefusedError):
        return ServiceFailure(message=message, code="ECONNREFUSED")
    if isinstance(exc, httpx.ConnectError):
        return ServiceFailure(message=message, code=_connect_code(exc, message))

    status = getattr(exc, "status", None)
    code = getattr(exc, "code", None)
    return ServiceFailure(
        message=message,
        status=status if isinstance(status, int) and not isinstance(status, bool) else None,
        code=code if isinstance(code, str) else None,
    )


def _kind(
    error_type: ServiceErrorType,
    failure: ServiceFailure,
    *,
    label: str | None = None,
    message: str | None = None,
) -> ServiceErrorKind:
    fixed_message, action = _FIXED[error_type]
    return ServiceErrorKind(
        type=error_type,
        label=label or error_type.value,
        message=message or fixed_message,
        action=action,
        failure=failure,
    )


def classify_failure(failure: ServiceFailure) -> ServiceErrorKind:
    """Map failure facts to exactly one category; the first match wins."""
    status = failure.status
    if status is not None:
        if status in (401, 403):
            return _kind(ServiceErrorType.AUTHENTICATION, failure)
        if status == 429:
            return _kind(ServiceErrorType.RATE_LIMIT, failure)
        if status >= 500:
            return _kind(ServiceErrorType.SERVER, failure)
        return _kind(
            ServiceErrorType.API,
            failure,
            label=f"API ({status})",
            message=f"API error ({status}): {failure.message}",
        )

    if failure.code in NETWORK_CODES:
        return _kind(ServiceErrorType.NETWORK, failure)
    if failure.code == TIMEOUT_CODE:
        return _kind(ServiceErrorType.TIMEOUT, failure)
    if "quota" in failure.message.lower():
        return _kind(ServiceErrorType.QUOTA, failure)
    return _kind(ServiceErrorType.UNEXPECTED, failure)


def classify_service_error(exc: BaseException) -> ServiceErrorKind:
    return classify_failure(describe_failure(exc))
