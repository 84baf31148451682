"""Remote verdict service: contract, Gemini client and failure classification."""

from bouncer.service.errors import (
    ServiceErrorKind,
    ServiceErrorType,
    ServiceFailure,
    classify_failure,
    classify_service_error,
    describe_failure,
)
from bouncer.service.types import GenerationResult, ServiceUsage, VerdictService

__all__ = [
    "GenerationResult",
    "ServiceErrorKind",
    "ServiceErrorType",
    "ServiceFailure",
    "ServiceUsage",
    "VerdictService",
    "classify_failure",
    "classify_service_error",
    "describe_failure",
]
