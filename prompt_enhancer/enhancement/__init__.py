"""Prompt enhancement: validation, request building and completion clients."""

from .errors import (
    ConfigurationError,
    EmptyCompletionError,
    EnhancementError,
    ErrorCategory,
    PromptValidationError,
    UpstreamError,
    ValidationFailure,
)
from .openai_enhancer import PromptEnhancer, create_enhancer_from_config, pin_api_key, resolve_api_key
from .proxy_client import ServiceProxyEnhancer
from .request_builder import ENHANCEMENT_SYSTEM_PROMPT, EnhancementRequest, build_request
from .result import EnhancementResult
from .validation import MAX_PROMPT_LENGTH, validate_prompt

__all__ = [
    "ConfigurationError",
    "EmptyCompletionError",
    "EnhancementError",
    "ErrorCategory",
    "PromptValidationError",
    "UpstreamError",
    "ValidationFailure",
    "PromptEnhancer",
    "create_enhancer_from_config",
    "pin_api_key",
    "resolve_api_key",
    "ServiceProxyEnhancer",
    "ENHANCEMENT_SYSTEM_PROMPT",
    "EnhancementRequest",
    "build_request",
    "EnhancementResult",
    "MAX_PROMPT_LENGTH",
    "validate_prompt",
]
