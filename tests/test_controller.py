"""Tests for the interactive enhancement controller."""

import threading
import pytest
from unittest.mock import patch

import pyperclip

from prompt_enhancer.config.schema import DeploymentMode
from prompt_enhancer.enhancement.errors import (
    ConfigurationError,
    ErrorCategory,
    UpstreamError,
)
from prompt_enhancer.enhancement.openai_enhancer import PromptEnhancer
from prompt_enhancer.enhancement.proxy_client import ServiceProxyEnhancer
from prompt_enhancer.interactive.context import OperationContext
from prompt_enhancer.interactive.controller import (
    WELCOME_FLAG,
    EnhancementController,
    create_interactive_enhancer,
)
from prompt_enhancer.interactive.documents import FileDocument, Workspace
from prompt_enhancer.interactive.presenter import Disposition
from prompt_enhancer.interactive.state_store import MemoryStateStore


DRAFT = "intro\nmake a todo app\n"


@pytest.fixture
def draft(tmp_dir):
    path = tmp_dir / "draft.md"
    path.write_text(DRAFT)
    return path


@pytest.fixture
def make_controller(config, ui, tmp_dir):
    """Build a controller around a given enhancer and optional document."""
    def _make(enhancer, document=None, store=None):
        controller = EnhancementController(
            config,
            ui,
            Workspace(str(tmp_dir / "enhanced")),
            store or MemoryStateStore(),
            document=document,
            enhancer_factory=lambda _config: enhancer,
            poll_interval=0.01,
        )
        return controller

    return _make


class TestWelcome:
    """Tests for the one-time welcome notice."""

    def test_shown_once(self, make_controller, stub_enhancer, ui):
        store = MemoryStateStore()
        controller = make_controller(stub_enhancer(), store=store)

        assert controller.show_welcome() is True
        assert controller.show_welcome() is False

        assert len(ui.infos) == 1
        assert store.get(WELCOME_FLAG) is True

    def test_not_shown_when_flag_set(self, make_controller, stub_enhancer, ui):
        controller = make_controller(stub_enhancer(), store=MemoryStateStore({WELCOME_FLAG: True}))

        assert controller.show_welcome() is False
        assert ui.infos == []


class TestEnhancePrompt:
    """Tests for the "enhance prompt" command."""

    def test_replaces_selection(self, make_controller, stub_enhancer, ui, draft):
        ui.disposition = Disposition.REPLACE
        enhancer = stub_enhancer(result="Build a todo application.")
        controller = make_controller(enhancer, FileDocument.from_line_range(draft, "2"))

        result = controller.enhance_prompt()

        assert result.success is True
        assert result.original_text == "make a todo app"
        assert enhancer.calls == ["make a todo app"]
        assert draft.read_text() == "intro\nBuild a todo application.\n"
        assert ui.infos == ["✨ Prompt enhanced and replaced!"]
        assert enhancer.closed is True

    def test_inserts_at_cursor_without_selection(self, make_controller, stub_enhancer, ui, draft):
        ui.disposition = Disposition.REPLACE
        controller = make_controller(stub_enhancer(result="Enhanced"), FileDocument(draft))

        result = controller.enhance_prompt("make a todo app")

        assert result.success is True
        assert draft.read_text() == DRAFT + "Enhanced"
        assert ui.disposition_requests == [False]
        assert ui.infos == ["✨ Enhanced prompt inserted!"]

    def test_asks_when_no_selection_or_text(self, make_controller, stub_enhancer, ui):
        ui.prompt_answer = "create a login form"
        ui.disposition = Disposition.NEW_DOCUMENT
        enhancer = stub_enhancer()

        result = make_controller(enhancer).enhance_prompt()

        assert result.success is True
        assert enhancer.calls == ["create a login form"]

    def test_dismissed_input_box_is_noop(self, make_controller, stub_enhancer, ui):
        ui.prompt_answer = None
        enhancer = stub_enhancer()

        assert make_controller(enhancer).enhance_prompt() is None
        assert enhancer.calls == []
        assert ui.errors == []

    def test_copy_to_clipboard(self, make_controller, stub_enhancer, ui):
        ui.disposition = Disposition.COPY

        with patch('prompt_enhancer.interactive.documents.pyperclip') as mock_clip:
            make_controller(stub_enhancer(result="Enhanced")).enhance_prompt("make a todo app")

        mock_clip.copy.assert_called_once_with("Enhanced")

    def test_clipboard_failure_is_shown(self, make_controller, stub_enhancer, ui):
        ui.disposition = Disposition.COPY

        with patch('pyperclip.copy', side_effect=pyperclip.PyperclipException("no clipboard")):
            result = make_controller(stub_enhancer(result="Enhanced")).enhance_prompt("make a todo app")

        assert result.success is True
        assert ui.errors == ["Enhancement failed: no clipboard"]

    def test_progress_reported(self, make_controller, stub_enhancer, ui):
        ui.disposition = None

        make_controller(stub_enhancer()).enhance_prompt("make a todo app")

        assert ui.progress_titles == ["✨ Enhancing prompt with AI..."]
        assert ui.progress_updates == [(20, "Calling OpenAI API..."), (90, "Enhancement complete!")]


class TestEnhanceSelection:
    """Tests for the "enhance selection" command."""

    def test_requires_selection(self, make_controller, stub_enhancer, ui, draft):
        enhancer = stub_enhancer()

        result = make_controller(enhancer, FileDocument(draft)).enhance_selection()

        assert result is None
        assert ui.infos == ["Please select some text to enhance first!"]
        assert enhancer.calls == []

    def test_enhances_selection(self, make_controller, stub_enhancer, ui, draft):
        ui.disposition = Disposition.REPLACE
        controller = make_controller(stub_enhancer(result="Better"), FileDocument.from_line_range(draft, "2"))

        result = controller.enhance_selection()

        assert result.success is True
        assert draft.read_text() == "intro\nBetter\n"


class TestFailures:
    """Tests for failures surfaced to the user."""

    def test_upstream_error_leaves_document_untouched(self, make_controller, stub_enhancer, ui, draft):
        ui.disposition = Disposition.REPLACE
        enhancer = stub_enhancer(error=UpstreamError(ErrorCategory.AUTH, status_code=401))
        controller = make_controller(enhancer, FileDocument.from_line_range(draft, "2"))

        result = controller.enhance_prompt()

        assert result.success is False
        assert result.error_category == ErrorCategory.AUTH
        assert ui.errors == ["Enhancement failed: Invalid OpenAI API key"]
        assert ui.shown == []
        assert draft.read_text() == DRAFT
        assert enhancer.closed is True

    def test_validation_error(self, make_controller, stub_enhancer, ui):
        enhancer = stub_enhancer()

        result = make_controller(enhancer).perform_enhancement("x" * 5001, False)

        assert result.error_category == ErrorCategory.VALIDATION
        assert ui.errors == ["Enhancement failed: Prompt is too long (max 5000 characters)"]
        assert enhancer.calls == []

    def test_missing_configuration(self, config, ui, tmp_dir):
        def factory(_config):
            raise ConfigurationError("OpenAI API key not configured. Please add your API key in settings.")

        controller = EnhancementController(
            config, ui, Workspace(str(tmp_dir)), MemoryStateStore(), enhancer_factory=factory
        )

        result = controller.enhance_prompt("make a todo app")

        assert result.error_category == ErrorCategory.CONFIGURATION
        assert ui.errors == ["OpenAI API key not configured. Please add your API key in settings."]
        assert ui.hints[0] is not None

    def test_unexpected_exception_is_reported(self, make_controller, stub_enhancer, ui):
        result = make_controller(stub_enhancer(error=RuntimeError("boom"))).enhance_prompt("hello")

        assert result.success is False
        assert result.error_category == ErrorCategory.UNKNOWN_UPSTREAM
        assert ui.errors == ["Enhancement failed: boom"]

    def test_wait_times_out(self, make_controller, stub_enhancer, ui, config, draft):
        release = threading.Event()
        config.completion.timeout = 0.05
        controller = make_controller(
            stub_enhancer(on_call=lambda: release.wait(2)),
            FileDocument.from_line_range(draft, "2"),
        )
        controller.WAIT_GRACE = 0

        try:
            result = controller.enhance_prompt()
        finally:
            release.set()

        assert result.error_category == ErrorCategory.TIMEOUT
        assert ui.errors == ["Enhancement failed: Request timeout. Please try again."]
        assert draft.read_text() == DRAFT


class TestCancellation:
    """Tests for user cancellation."""

    def test_cancel_after_response_discards_result(self, make_controller, stub_enhancer, ui, draft):
        ui.disposition = Disposition.REPLACE
        context = OperationContext()
        enhancer = stub_enhancer(on_call=context.cancel)
        controller = make_controller(enhancer, FileDocument.from_line_range(draft, "2"))

        result = controller.perform_enhancement("make a todo app", True, context)

        assert result is None
        assert ui.errors == []
        assert ui.shown == []
        assert draft.read_text() == DRAFT

    def test_cancel_while_waiting(self, make_controller, stub_enhancer, ui, draft):
        release = threading.Event()
        context = OperationContext()

        def blocking_call():
            context.cancel()
            release.wait(2)

        controller = make_controller(stub_enhancer(on_call=blocking_call), FileDocument.from_line_range(draft, "2"))

        try:
            result = controller.perform_enhancement("make a todo app", True, context)
        finally:
            release.set()

        assert result is None
        assert ui.errors == []
        assert draft.read_text() == DRAFT

    def test_keyboard_interrupt_cancels(self, make_controller, stub_enhancer, ui, draft):
        release = threading.Event()
        context = OperationContext()
        controller = make_controller(
            stub_enhancer(on_call=lambda: release.wait(2)),
            FileDocument.from_line_range(draft, "2"),
        )

        with patch('prompt_enhancer.interactive.controller.time.monotonic',
                   side_effect=[0.0, KeyboardInterrupt()]):
            try:
                result = controller.perform_enhancement("make a todo app", True, context)
            finally:
                release.set()

        assert result is None
        assert context.cancelled is True
        assert draft.read_text() == DRAFT


class TestCreateInteractiveEnhancer:
    """Tests for deployment selection."""

    def test_direct_mode(self, config):
        with patch('prompt_enhancer.enhancement.openai_enhancer.OpenAI'):
            enhancer = create_interactive_enhancer(config)

        assert isinstance(enhancer, PromptEnhancer)

    def test_direct_mode_without_key(self, config):
        config.completion.api_key = ""

        with pytest.raises(ConfigurationError, match="add your API key in settings"):
            create_interactive_enhancer(config)

    def test_proxy_mode(self, config):
        config.completion.api_key = ""
        config.interactive.mode = DeploymentMode.PROXY
        config.interactive.service_url = "http://svc:3000"

        enhancer = create_interactive_enhancer(config)

        assert isinstance(enhancer, ServiceProxyEnhancer)
        assert enhancer.service_url == "http://svc:3000"
        enhancer.close()
