"""Prompt enhancement using OpenAI-compatible APIs."""

import logging
import os
import subprocess
from pathlib import Path
from typing import Any, Optional

from openai import APIConnectionError, APIStatusError, APITimeoutError, OpenAI

from prompt_enhancer.config.schema import CompletionConfig

from .errors import (
    ConfigurationError,
    EmptyCompletionError,
    EnhancementError,
    ErrorCategory,
    UpstreamError,
    category_for_status,
)
from .request_builder import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_MODEL,
    DEFAULT_TEMPERATURE,
    ENHANCEMENT_SYSTEM_PROMPT,
    EnhancementRequest,
    build_request,
)
from .result import EnhancementResult, utc_now
from .validation import validate_prompt


logger = logging.getLogger(__name__)

MISSING_KEY_MESSAGE = (
    "OpenAI API key not configured. Please set OPENAI_API_KEY environment variable."
)


def preview(text: str, limit: int = 100) -> str:
    """Shorten text for log lines."""
    return text[:limit] + ("..." if len(text) > limit else "")


def map_upstream_error(exc: Exception) -> UpstreamError:
    """Translate an OpenAI SDK exception into a tagged UpstreamError.

    Classification uses the structured status code and body error code.
    """
    # APITimeoutError subclasses APIConnectionError, check it first
    if isinstance(exc, APITimeoutError):
        return UpstreamError(ErrorCategory.TIMEOUT)

    if isinstance(exc, APIConnectionError):
        return UpstreamError(ErrorCategory.NETWORK)

    if isinstance(exc, APIStatusError):
        code = exc.code if isinstance(exc.code, str) else None
        category = category_for_status(exc.status_code, code)
        message = None
        if category == ErrorCategory.UNKNOWN_UPSTREAM:
            message = f"OpenAI API error ({exc.status_code}): {exc.message}"
        return UpstreamError(
            category,
            message,
            status_code=exc.status_code,
            code=code,
        )

    return UpstreamError(ErrorCategory.UNKNOWN_UPSTREAM, str(exc) or None)


class PromptEnhancer:
    """Enhances prompts using OpenAI-compatible APIs."""

    def __init__(
        self,
        api_key: str,
        api_base_url: str = "https://api.openai.com/v1",
        model: str = DEFAULT_MODEL,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        temperature: float = DEFAULT_TEMPERATURE,
        timeout: float = 30.0,
        system_prompt: Optional[str] = None,
        system_prompt_file: Optional[str] = None,
    ):
        """Initialize prompt enhancer.

        Args:
            api_key: API key for authentication.
            api_base_url: Base URL for OpenAI-compatible API.
            model: Model to use for enhancement.
            max_tokens: Maximum tokens in response.
            temperature: Model temperature (lower = more deterministic).
            timeout: Seconds to wait for the API before failing.
            system_prompt: Custom system prompt (overrides file).
            system_prompt_file: Path to system prompt file.

        Raises:
            ConfigurationError: If no API key is given.
        """
        if not api_key:
            raise ConfigurationError(MISSING_KEY_MESSAGE)

        self.api_key = api_key
        self.api_base_url = api_base_url
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.timeout = timeout

        self.system_prompt = self._load_system_prompt(
            system_prompt,
            system_prompt_file
        )

        # One attempt per invocation, failures surface to the caller
        self._client = OpenAI(
            api_key=api_key,
            base_url=api_base_url,
            timeout=timeout,
            max_retries=0,
        )

        logger.info(f"PromptEnhancer initialized with model={model}")

    def _load_system_prompt(
        self,
        custom_prompt: Optional[str],
        prompt_file: Optional[str]
    ) -> str:
        """Load system prompt from various sources.

        Priority: custom_prompt > prompt_file > default
        """
        if custom_prompt:
            logger.debug("Using custom system prompt")
            return custom_prompt

        if prompt_file:
            path = Path(prompt_file)
            if path.exists():
                logger.debug(f"Loading system prompt from {prompt_file}")
                return path.read_text().strip()
            else:
                logger.warning(f"Prompt file not found: {prompt_file}, using default")

        return ENHANCEMENT_SYSTEM_PROMPT

    def build_request(self, text: str) -> EnhancementRequest:
        """Build the outbound request for already-validated text."""
        return build_request(
            text,
            model=self.model,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
            system_prompt=self.system_prompt,
        )

    def enhance(self, text: Any) -> str:
        """Rewrite a prompt into a clearer, more structured one.

        Args:
            text: Raw prompt text.

        Returns:
            Enhanced prompt, trimmed.

        Raises:
            PromptValidationError: If the prompt is rejected before sending.
            UpstreamError: If the API call fails.
            EmptyCompletionError: If the API returns no usable text.
        """
        text = validate_prompt(text)
        request = self.build_request(text)

        logger.info(f'Enhancing prompt: "{preview(text)}"')

        try:
            response = self._client.chat.completions.create(**request.to_payload())
        except Exception as e:
            error = map_upstream_error(e)
            logger.error(
                f"Enhancement failed: {error.category.value} "
                f"(status={error.status_code}, code={error.code}): {e}"
            )
            raise error from e

        enhanced_text = self.extract_text(response)

        logger.info(
            f"Enhancement completed. Original length: {len(text)}, "
            f"Enhanced length: {len(enhanced_text)}"
        )
        return enhanced_text

    @staticmethod
    def extract_text(response: Any) -> str:
        """Pull the first choice's message content out of a completion.

        Raises:
            EmptyCompletionError: If there are no choices or the content is blank.
        """
        choices = getattr(response, "choices", None) or []
        if not choices:
            raise EmptyCompletionError()

        message = getattr(choices[0], "message", None)
        content = getattr(message, "content", None)
        if not isinstance(content, str) or not content.strip():
            raise EmptyCompletionError()

        return content.strip()

    def run(self, text: Any) -> EnhancementResult:
        """Enhance a prompt, capturing any failure in the result."""
        started_at = utc_now()
        try:
            enhanced = self.enhance(text)
        except EnhancementError as e:
            return EnhancementResult.failed(text, e, started_at)
        return EnhancementResult.succeeded(text, enhanced, started_at)

    @property
    def client(self) -> OpenAI:
        """Get the OpenAI client."""
        return self._client

    def close(self) -> None:
        """Release the underlying HTTP connection pool."""
        self._client.close()

    def test_connection(self) -> bool:
        """Test API connection.

        Returns:
            True if connection works.
        """
        try:
            self._client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": "Hi"}],
                max_tokens=5,
            )
            return True
        except Exception as e:
            logger.error(f"Connection test failed: {map_upstream_error(e).message} ({e})")
            return False


def resolve_api_key(
    api_key: Optional[str] = None,
    api_key_helper: Optional[str] = None,
    api_key_env_var: Optional[str] = None,
) -> Optional[str]:
    """Resolve API key from various sources with priority.

    Priority order:
    1. Direct api_key value (if non-empty)
    2. api_key_helper command output
    3. api_key_env_var environment variable

    Args:
        api_key: Direct API key value.
        api_key_helper: Shell command to retrieve API key.
        api_key_env_var: Environment variable name containing API key.

    Returns:
        Resolved API key or None if not found.
    """
    if api_key and api_key.strip():
        logger.debug("Using direct api_key value")
        return api_key.strip()

    if api_key_helper and api_key_helper.strip():
        logger.debug(f"Running api_key_helper command: {api_key_helper[:50]}...")
        try:
            result = subprocess.run(
                api_key_helper,
                shell=True,
                capture_output=True,
                text=True,
                timeout=30,
            )
            if result.returncode == 0 and result.stdout.strip():
                logger.info("API key retrieved from helper command")
                return result.stdout.strip()
            else:
                logger.warning(f"api_key_helper command failed: {result.stderr}")
        except subprocess.TimeoutExpired:
            logger.error("api_key_helper command timed out")
        except OSError as e:
            logger.error(f"api_key_helper command error: {e}")

    if api_key_env_var and api_key_env_var.strip():
        env_value = os.environ.get(api_key_env_var.strip())
        if env_value and env_value.strip():
            logger.info(f"API key retrieved from environment variable: {api_key_env_var}")
            return env_value.strip()
        else:
            logger.debug(f"Environment variable {api_key_env_var} not set or empty")

    return None


def pin_api_key(config: CompletionConfig) -> CompletionConfig:
    """Resolve the API key once and return settings that carry it directly.

    The helper command is dropped from the returned copy so it never runs
    again for these settings. When nothing resolves, the environment
    variable is still read on later calls.
    """
    resolved_key = resolve_api_key(
        config.api_key,
        config.api_key_helper,
        config.api_key_env_var,
    )
    update = {"api_key_helper": None}
    if resolved_key:
        update["api_key"] = resolved_key
    return config.model_copy(update=update)


def create_enhancer_from_config(
    config: CompletionConfig,
    missing_key_message: str = MISSING_KEY_MESSAGE,
) -> PromptEnhancer:
    """Create a PromptEnhancer from configuration.

    API key is resolved with priority: api_key > api_key_helper > api_key_env_var

    Args:
        config: Completion settings.
        missing_key_message: Error text used when no key resolves.

    Returns:
        PromptEnhancer instance.

    Raises:
        ConfigurationError: If no API key resolved.
    """
    resolved_key = resolve_api_key(
        config.api_key,
        config.api_key_helper,
        config.api_key_env_var,
    )

    if not resolved_key:
        logger.warning("No API key resolved, prompt enhancement unavailable")
        raise ConfigurationError(missing_key_message)

    return PromptEnhancer(
        api_key=resolved_key,
        api_base_url=config.api_base_url,
        model=config.model,
        max_tokens=config.max_tokens,
        temperature=config.temperature,
        timeout=config.timeout,
        system_prompt=config.custom_system_prompt,
        system_prompt_file=config.system_prompt_file,
    )
