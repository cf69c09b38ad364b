"""Client for the proxying deployment: prompts go through a running service.

The service answers with the same JSON contract it exposes to any caller;
this client maps those answers back onto ErrorCategory so the interactive
front-end treats both deployments alike.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from .errors import (
    EmptyCompletionError,
    ErrorCategory,
    PromptValidationError,
    UpstreamError,
    ValidationFailure,
)
from .validation import validate_prompt

logger = logging.getLogger(__name__)


class ServiceProxyEnhancer:
    """Sync httpx client for the Prompt Enhancer HTTP service.

    Usage::

        with ServiceProxyEnhancer("http://localhost:3000") as enhancer:
            text = enhancer.enhance("make a todo app")
    """

    def __init__(
        self,
        service_url: str = "http://localhost:3000",
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the service client.

        Args:
            service_url: Base URL of the service.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport, used by tests.
        """
        self.service_url = service_url.rstrip("/")
        self.timeout = timeout
        self._client = httpx.Client(
            base_url=self.service_url,
            timeout=timeout,
            transport=transport,
            headers={"Content-Type": "application/json"},
        )

    def enhance(self, text: Any) -> str:
        """Send a prompt to the service and return the enhanced text.

        Raises:
            PromptValidationError: Rejected locally or by the service (400).
            UpstreamError: Service unreachable, timed out or failed.
            EmptyCompletionError: Service reported success without text.
        """
        text = validate_prompt(text)

        try:
            response = self._client.post("/api/enhance", json={"prompt": text})
        except httpx.TimeoutException as exc:
            logger.error(f"Enhancement service timed out: {exc}")
            raise UpstreamError(ErrorCategory.TIMEOUT) from exc
        except httpx.TransportError as exc:
            logger.error(f"Enhancement service unreachable at {self.service_url}: {exc}")
            raise UpstreamError(ErrorCategory.NETWORK) from exc

        data = self._json_body(response)

        if response.is_success and data.get("success"):
            enhanced = data.get("enhanced_prompt")
            if not isinstance(enhanced, str) or not enhanced.strip():
                raise EmptyCompletionError()
            return enhanced.strip()

        message = data.get("error") or f"Enhancement service error ({response.status_code})"
        raise self._error_for(response.status_code, message)

    @staticmethod
    def _json_body(response: httpx.Response) -> dict:
        try:
            data = response.json()
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}

    def _error_for(self, status_code: int, message: str) -> Exception:
        if status_code == 400:
            # The service only checks what validate_prompt already checked,
            # so any 400 here means the service is stricter than we are.
            return PromptValidationError(ValidationFailure.NOT_TEXT, message)
        if status_code == 408:
            return UpstreamError(ErrorCategory.TIMEOUT, message, status_code=status_code)
        if status_code == 404:
            return UpstreamError(
                ErrorCategory.NETWORK,
                f"No enhancement service found at {self.service_url}",
                status_code=status_code,
            )
        return UpstreamError(ErrorCategory.UNKNOWN_UPSTREAM, message, status_code=status_code)

    def health(self) -> bool:
        """Return True if the service answers its health check."""
        try:
            response = self._client.get("/health")
        except httpx.HTTPError as exc:
            logger.error(f"Health check failed: {exc}")
            return False
        return response.status_code == 200 and self._json_body(response).get("status") == "healthy"

    def test_connection(self) -> bool:
        return self.health()

    def close(self) -> None:
        """Close the underlying httpx client."""
        self._client.close()

    def __enter__(self) -> ServiceProxyEnhancer:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
