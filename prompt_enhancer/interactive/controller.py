"""Interactive controller behind the "enhance prompt" and "enhance selection" commands."""

import logging
import threading
import time
from typing import Any, Callable, Optional, Protocol

from prompt_enhancer.config.schema import DeploymentMode, EnhancerConfig
from prompt_enhancer.enhancement.errors import (
    ConfigurationError,
    EnhancementError,
    ErrorCategory,
    UpstreamError,
)
from prompt_enhancer.enhancement.openai_enhancer import create_enhancer_from_config, preview
from prompt_enhancer.enhancement.proxy_client import ServiceProxyEnhancer
from prompt_enhancer.enhancement.result import EnhancementResult, utc_now
from prompt_enhancer.enhancement.validation import validate_prompt

from .context import OperationContext
from .documents import FileDocument, Workspace
from .presenter import ResultPresenter, UserInterface
from .state_store import StateStore


logger = logging.getLogger(__name__)

WELCOME_FLAG = "has_shown_welcome"
INTERACTIVE_MISSING_KEY = "OpenAI API key not configured. Please add your API key in settings."
SETTINGS_HINT = "Run 'prompt-enhancer config --api-key-env-var OPENAI_API_KEY' or pass --api-key."


class Enhancer(Protocol):
    def enhance(self, text: Any) -> str: ...


def create_interactive_enhancer(config: EnhancerConfig) -> Enhancer:
    """Build the completion client for the configured deployment.

    Raises:
        ConfigurationError: In direct mode, if no API key resolves.
    """
    if config.interactive.mode == DeploymentMode.PROXY:
        logger.info(f"Using enhancement service at {config.interactive.service_url}")
        return ServiceProxyEnhancer(
            config.interactive.service_url,
            timeout=config.completion.timeout,
        )
    return create_enhancer_from_config(
        config.completion,
        missing_key_message=INTERACTIVE_MISSING_KEY,
    )


class EnhancementController:
    """Runs validate -> call -> present for one interactive command.

    The completion call runs on a worker thread while this thread waits,
    so Ctrl+C stays responsive and cancels the operation.
    """

    # Slack on top of the client timeout for connection setup
    WAIT_GRACE = 5.0

    def __init__(
        self,
        config: EnhancerConfig,
        ui: UserInterface,
        workspace: Workspace,
        state_store: StateStore,
        document: Optional[FileDocument] = None,
        enhancer_factory: Callable[[EnhancerConfig], Enhancer] = create_interactive_enhancer,
        poll_interval: float = 0.05,
    ):
        """Initialize the controller.

        Args:
            config: Application configuration.
            ui: Prompts, pickers and notifications.
            workspace: New-document and clipboard destinations.
            state_store: Persisted one-time flags.
            document: Originating document, if any.
            enhancer_factory: Builds the completion client per operation.
            poll_interval: Seconds between cancellation checks while waiting.
        """
        self.config = config
        self.ui = ui
        self.workspace = workspace
        self.state_store = state_store
        self.document = document
        self.enhancer_factory = enhancer_factory
        self.poll_interval = poll_interval
        self.presenter = ResultPresenter(ui, workspace, document)

    @property
    def wait_limit(self) -> float:
        """Upper bound on the network wait."""
        return self.config.completion.timeout + self.WAIT_GRACE

    def show_welcome(self) -> bool:
        """Show the one-time welcome notice. Returns True if it was shown."""
        if self.state_store.get(WELCOME_FLAG, False):
            return False
        self.ui.info("✨ Prompt Enhancer installed! Set your OpenAI API key in settings to get started.")
        self.state_store.set(WELCOME_FLAG, True)
        return True

    def enhance_prompt(self, text: Optional[str] = None) -> Optional[EnhancementResult]:
        """Enhance the selection, else the given text, else ask for a prompt."""
        has_selection = False
        prompt = ""

        if self.document is not None and self.document.has_selection:
            prompt = self.document.selected_text()
            has_selection = True

        if not prompt.strip():
            has_selection = False
            prompt = text if text is not None else (self.ui.ask_prompt() or "")
            if not prompt:
                logger.info("No prompt given, nothing to do")
                return None

        return self.perform_enhancement(prompt, has_selection)

    def enhance_selection(self) -> Optional[EnhancementResult]:
        """Enhance the current selection. Requires one."""
        if self.document is None or not self.document.has_selection:
            self.ui.info("Please select some text to enhance first!")
            return None
        return self.perform_enhancement(self.document.selected_text(), True)

    def perform_enhancement(
        self,
        prompt: str,
        has_selection: bool,
        context: Optional[OperationContext] = None,
    ) -> Optional[EnhancementResult]:
        """Enhance a prompt and offer the result to the user.

        Returns:
            The result, or None if the operation was cancelled.
        """
        started_at = utc_now()

        try:
            validate_prompt(prompt)
            enhancer = self.enhancer_factory(self.config)
        except ConfigurationError as e:
            self.ui.error(e.message, hint=SETTINGS_HINT)
            return EnhancementResult.failed(prompt, e, started_at)
        except EnhancementError as e:
            self.ui.error(f"Enhancement failed: {e.message}")
            return EnhancementResult.failed(prompt, e, started_at)

        error: Optional[EnhancementError] = None
        enhanced = ""

        try:
            with self.ui.progress("✨ Enhancing prompt with AI...") as sink:
                context = context or OperationContext()
                context.on_progress = context.on_progress or sink
                context.report(20, "Calling OpenAI API...")
                try:
                    enhanced = self._wait_for_enhancement(enhancer, prompt, context)
                    if not context.cancelled:
                        context.report(70, "Enhancement complete!")
                except EnhancementError as e:
                    error = e
        finally:
            close = getattr(enhancer, "close", None)
            if callable(close):
                close()

        if context.cancelled:
            logger.info(f'Discarded enhancement of "{preview(prompt, 40)}" after cancel')
            return None

        if error is not None:
            logger.error(f"Enhancement error: {error.category.value}: {error.message}")
            self.ui.error(f"Enhancement failed: {error.message}")
            return EnhancementResult.failed(prompt, error, started_at)

        self.presenter.present(enhanced, has_selection)
        return EnhancementResult.succeeded(prompt, enhanced, started_at)

    def _wait_for_enhancement(self, enhancer: Enhancer, prompt: str, context: OperationContext) -> str:
        """Run the completion call on a worker thread and wait for it.

        Returns an empty string if cancelled; the caller checks the context.
        """
        outcome: dict[str, Any] = {}
        done = threading.Event()

        def worker() -> None:
            try:
                outcome["text"] = enhancer.enhance(prompt)
            except EnhancementError as e:
                outcome["error"] = e
            except Exception as e:
                logger.error(f"Unexpected enhancement failure: {e}", exc_info=e)
                outcome["error"] = UpstreamError(ErrorCategory.UNKNOWN_UPSTREAM, str(e) or None)
            finally:
                done.set()

        thread = threading.Thread(target=worker, name="prompt-enhancement", daemon=True)
        thread.start()

        deadline = time.monotonic() + self.wait_limit
        try:
            while not done.wait(self.poll_interval):
                if context.cancelled:
                    return ""
                if time.monotonic() >= deadline:
                    raise UpstreamError(ErrorCategory.TIMEOUT)
        except KeyboardInterrupt:
            context.cancel()
            return ""

        if "error" in outcome:
            raise outcome["error"]
        return outcome["text"]
