"""Prompt validation, run before any network resource is touched."""

import logging
from typing import Any

from .errors import PromptValidationError, ValidationFailure


logger = logging.getLogger(__name__)

MAX_PROMPT_LENGTH = 5000


def validate_prompt(value: Any) -> str:
    """Check raw prompt input and return it unchanged.

    Args:
        value: Raw input as received from the caller.

    Returns:
        The same text, untrimmed.

    Raises:
        PromptValidationError: If the input is not a string, is blank after
            trimming, or exceeds MAX_PROMPT_LENGTH characters.
    """
    if not isinstance(value, str):
        logger.debug(f"Rejected non-text prompt of type {type(value).__name__}")
        raise PromptValidationError(
            ValidationFailure.NOT_TEXT,
            "Prompt is required and must be a string",
        )

    if not value.strip():
        raise PromptValidationError(
            ValidationFailure.EMPTY_INPUT,
            "Prompt cannot be empty",
        )

    if len(value) > MAX_PROMPT_LENGTH:
        logger.debug(f"Rejected prompt of {len(value)} chars")
        raise PromptValidationError(
            ValidationFailure.TOO_LONG,
            f"Prompt is too long (max {MAX_PROMPT_LENGTH} characters)",
        )

    return value
