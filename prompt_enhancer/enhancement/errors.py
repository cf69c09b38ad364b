"""Error taxonomy for prompt enhancement.

Every failure the enhancement pipeline can surface is an EnhancementError
tagged with an ErrorCategory. Callers branch on the category, never on the
message text.
"""

from enum import Enum
from typing import Optional


class ErrorCategory(str, Enum):
    """Kind of failure, one per user-facing error message."""
    VALIDATION = "validation"
    CONFIGURATION = "configuration"
    AUTH = "auth"
    QUOTA = "quota"
    RATE_LIMITED = "rate_limited"
    MODEL_UNAVAILABLE = "model_unavailable"
    TIMEOUT = "timeout"
    NETWORK = "network"
    EMPTY_COMPLETION = "empty_completion"
    UNKNOWN_UPSTREAM = "unknown_upstream"


class ValidationFailure(str, Enum):
    """Reason a prompt was rejected before any network call."""
    EMPTY_INPUT = "empty_input"
    TOO_LONG = "too_long"
    NOT_TEXT = "not_text"


CATEGORY_MESSAGES = {
    ErrorCategory.AUTH: "Invalid OpenAI API key",
    ErrorCategory.QUOTA: "OpenAI API quota exceeded. Please check your billing.",
    ErrorCategory.RATE_LIMITED: "OpenAI API rate limit exceeded. Please try again later.",
    ErrorCategory.MODEL_UNAVAILABLE: "OpenAI model not available",
    ErrorCategory.TIMEOUT: "Request timeout. Please try again.",
    ErrorCategory.NETWORK: "Network error. Please check your internet connection.",
    ErrorCategory.EMPTY_COMPLETION: "No enhanced prompt received from OpenAI",
    ErrorCategory.UNKNOWN_UPSTREAM: "Unknown error occurred",
}

# Everything not listed maps to 500
CATEGORY_HTTP_STATUS = {
    ErrorCategory.VALIDATION: 400,
    ErrorCategory.TIMEOUT: 408,
}


class EnhancementError(Exception):
    """Base for all enhancement errors."""

    category: ErrorCategory = ErrorCategory.UNKNOWN_UPSTREAM

    def __init__(self, message: Optional[str] = None):
        self.message = message or CATEGORY_MESSAGES.get(
            self.category, "Unknown error occurred"
        )
        super().__init__(self.message)

    @property
    def http_status(self) -> int:
        """HTTP status the service answers with for this error."""
        return CATEGORY_HTTP_STATUS.get(self.category, 500)


class PromptValidationError(EnhancementError):
    """Prompt rejected by the validation layer."""

    category = ErrorCategory.VALIDATION

    def __init__(self, reason: ValidationFailure, message: str):
        self.reason = reason
        super().__init__(message)


class ConfigurationError(EnhancementError):
    """No credential (or other required setting) is configured."""

    category = ErrorCategory.CONFIGURATION


class UpstreamError(EnhancementError):
    """The upstream completion call did not succeed.

    Attributes:
        status_code: HTTP status returned upstream, None for transport failures.
        code: Structured error code from the upstream body, if any.
    """

    def __init__(
        self,
        category: ErrorCategory,
        message: Optional[str] = None,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
    ):
        self.category = category
        self.status_code = status_code
        self.code = code
        super().__init__(message)


class EmptyCompletionError(EnhancementError):
    """Upstream answered but returned no usable text."""

    category = ErrorCategory.EMPTY_COMPLETION


def category_for_status(status_code: Optional[int], code: Optional[str] = None) -> ErrorCategory:
    """Map an upstream HTTP status and body error code to an error category.

    The body code wins over the status because the API reports quota
    exhaustion and rate limiting with the same 429 status.
    """
    if code == "invalid_api_key":
        return ErrorCategory.AUTH
    if code == "insufficient_quota":
        return ErrorCategory.QUOTA
    if code == "model_not_found":
        return ErrorCategory.MODEL_UNAVAILABLE

    if status_code in (401, 403):
        return ErrorCategory.AUTH
    if status_code == 429:
        return ErrorCategory.RATE_LIMITED
    if status_code == 404:
        return ErrorCategory.MODEL_UNAVAILABLE
    if status_code in (408, 504):
        return ErrorCategory.TIMEOUT
    return ErrorCategory.UNKNOWN_UPSTREAM
