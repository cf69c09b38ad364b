"""Shared fixtures for Prompt Enhancer tests."""

import json
from contextlib import contextmanager
from pathlib import Path
from unittest.mock import MagicMock

import httpx
import pytest

from prompt_enhancer.config.schema import EnhancerConfig


@pytest.fixture(autouse=True)
def no_ambient_api_key(monkeypatch):
    """Keep a developer's real OPENAI_API_KEY out of the tests."""
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("PORT", raising=False)


@pytest.fixture
def tmp_dir(tmp_path) -> Path:
    """Temporary directory for test files."""
    return tmp_path


@pytest.fixture
def sample_config_data(tmp_dir) -> dict:
    """Configuration data as it would appear in a config file."""
    return {
        "completion": {
            "api_key": "",
            "api_key_env_var": "OPENAI_API_KEY",
            "model": "gpt-4o-mini",
            "max_tokens": 1000,
        },
        "service": {"port": 3000},
        "interactive": {
            "mode": "direct",
            "service_url": "http://localhost:3000",
            "state_file": str(tmp_dir / "state.json"),
            "documents_dir": str(tmp_dir / "enhanced"),
        },
        "log_level": "INFO",
    }


@pytest.fixture
def config_file(tmp_dir, sample_config_data) -> Path:
    """Config file on disk with sample data."""
    path = tmp_dir / "prompt_enhancer.json"
    path.write_text(json.dumps(sample_config_data))
    return path


@pytest.fixture
def config(sample_config_data) -> EnhancerConfig:
    """Configuration with a direct API key set."""
    cfg = EnhancerConfig.model_validate(sample_config_data)
    cfg.completion.api_key = "test-key"
    return cfg


@pytest.fixture
def completion_response():
    """Build a mock chat completion response carrying the given content."""
    def _make(content):
        response = MagicMock()
        if content is None:
            response.choices = []
        else:
            response.choices = [MagicMock()]
            response.choices[0].message.content = content
        return response

    return _make


@pytest.fixture
def upstream_request() -> httpx.Request:
    return httpx.Request("POST", "https://api.openai.com/v1/chat/completions")


@pytest.fixture
def status_error(upstream_request):
    """Build an OpenAI SDK status error as the SDK raises it."""
    def _make(cls, status_code, code=None, message="upstream said no"):
        response = httpx.Response(status_code, request=upstream_request)
        body = {"message": message, "type": "error", "code": code} if code else None
        return cls(message, response=response, body=body)

    return _make


class RecordingUI:
    """UserInterface double that records everything shown to the user."""

    def __init__(self):
        self.prompt_answer = None
        self.disposition = None
        self.infos = []
        self.errors = []
        self.hints = []
        self.shown = []
        self.disposition_requests = []
        self.progress_updates = []
        self.progress_titles = []

    def ask_prompt(self):
        return self.prompt_answer

    def show_result(self, enhanced):
        self.shown.append(enhanced)

    def choose_disposition(self, has_selection):
        self.disposition_requests.append(has_selection)
        return self.disposition

    def info(self, message):
        self.infos.append(message)

    def error(self, message, hint=None):
        self.errors.append(message)
        self.hints.append(hint)

    @contextmanager
    def progress(self, title):
        self.progress_titles.append(title)
        yield lambda percent, message: self.progress_updates.append((percent, message))


@pytest.fixture
def ui() -> RecordingUI:
    return RecordingUI()


class StubEnhancer:
    """Enhancer double returning a canned result or raising a canned error."""

    def __init__(self, result="Enhanced prompt", error=None, on_call=None):
        self.result = result
        self.error = error
        self.on_call = on_call
        self.calls = []
        self.closed = False

    def enhance(self, text):
        self.calls.append(text)
        if self.on_call:
            self.on_call()
        if self.error:
            raise self.error
        return self.result

    def close(self):
        self.closed = True


@pytest.fixture
def stub_enhancer():
    """Factory for StubEnhancer instances."""
    return StubEnhancer
