"""Tests for CLI module."""

import json
import pytest
from unittest.mock import MagicMock, patch
from typer.testing import CliRunner

from prompt_enhancer.cli import app


runner = CliRunner()


@pytest.fixture
def draft(tmp_dir):
    path = tmp_dir / "draft.md"
    path.write_text("intro\nmake a todo app\n")
    return path


@pytest.fixture
def mock_openai(completion_response):
    """Patch the OpenAI client used by the enhancer."""
    with patch('prompt_enhancer.enhancement.openai_enhancer.OpenAI') as mock_cls:
        client = MagicMock()
        mock_cls.return_value = client
        client.chat.completions.create.return_value = completion_response("Build a todo app.")
        yield client


class TestCliVersion:
    """Tests for version command."""

    def test_version_flag(self):
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert "Prompt Enhancer version" in result.output

    def test_version_short_flag(self):
        result = runner.invoke(app, ["-v"])

        assert result.exit_code == 0
        assert "Prompt Enhancer version" in result.output


class TestCliConfig:
    """Tests for config command."""

    def test_config_init(self, tmp_dir):
        config_path = tmp_dir / "new_config.json"

        result = runner.invoke(app, ["config", "--init", "--path", str(config_path)])

        assert result.exit_code == 0
        assert "Created config file" in result.output
        assert json.loads(config_path.read_text())["completion"]["model"] == "gpt-4o-mini"

    def test_config_show(self, config_file):
        result = runner.invoke(app, ["config", "--show", "--path", str(config_file)])

        assert result.exit_code == 0
        assert "Current Configuration" in result.output
        assert "gpt-4o-mini" in result.output

    def test_config_set_model(self, config_file):
        result = runner.invoke(app, ["config", "--path", str(config_file), "--model", "gpt-4o"])

        assert result.exit_code == 0
        assert "Configuration updated" in result.output
        assert json.loads(config_file.read_text())["completion"]["model"] == "gpt-4o"

    def test_config_set_mode(self, config_file):
        result = runner.invoke(app, ["config", "--path", str(config_file), "--mode", "proxy"])

        assert result.exit_code == 0
        assert json.loads(config_file.read_text())["interactive"]["mode"] == "proxy"

    def test_config_invalid_mode(self, config_file):
        result = runner.invoke(app, ["config", "--path", str(config_file), "--mode", "bogus"])

        assert result.exit_code == 1
        assert "Invalid mode" in result.output

    def test_config_invalid_max_tokens(self, config_file):
        result = runner.invoke(app, ["config", "--path", str(config_file), "--max-tokens", "0"])

        assert result.exit_code == 1

    def test_config_invalid_port(self, config_file):
        before = config_file.read_text()

        result = runner.invoke(app, ["config", "--path", str(config_file), "--port", "0"])

        assert result.exit_code == 1
        assert "Invalid port" in result.output
        assert config_file.read_text() == before


class TestCliEnhance:
    """Tests for enhance and enhance-selection commands."""

    def test_enhance_replaces_selected_lines(self, config_file, draft, mock_openai):
        result = runner.invoke(
            app,
            ["enhance", "--config", str(config_file), "--api-key", "test-key",
             "--file", str(draft), "--lines", "2"],
            input="replace\n",
        )

        assert result.exit_code == 0, result.output
        assert draft.read_text() == "intro\nBuild a todo app.\n"
        assert "Prompt enhanced and replaced" in result.output

    def test_enhance_text_copied(self, config_file, mock_openai):
        with patch('prompt_enhancer.interactive.documents.pyperclip') as mock_clip:
            result = runner.invoke(
                app,
                ["enhance", "make a todo app", "--config", str(config_file), "--api-key", "test-key"],
                input="copy\n",
            )

        assert result.exit_code == 0, result.output
        mock_clip.copy.assert_called_once_with("Build a todo app.")

    def test_enhance_without_api_key(self, config_file):
        result = runner.invoke(app, ["enhance", "make a todo app", "--config", str(config_file)])

        assert result.exit_code == 1
        assert "API key not configured" in result.output

    def test_enhance_upstream_failure(self, config_file, draft, status_error):
        import openai

        with patch('prompt_enhancer.enhancement.openai_enhancer.OpenAI') as mock_cls:
            mock_cls.return_value.chat.completions.create.side_effect = status_error(
                openai.AuthenticationError, 401
            )
            result = runner.invoke(
                app,
                ["enhance", "--config", str(config_file), "--api-key", "bad",
                 "--file", str(draft), "--lines", "2"],
            )

        assert result.exit_code == 1
        assert "Invalid OpenAI API key" in result.output
        assert draft.read_text() == "intro\nmake a todo app\n"

    def test_welcome_shown_once(self, config_file, tmp_dir, mock_openai):
        args = ["enhance", "hello", "--config", str(config_file), "--api-key", "test-key"]

        first = runner.invoke(app, args, input="cancel\n")
        second = runner.invoke(app, args, input="cancel\n")

        assert "Prompt Enhancer installed" in first.output
        assert "Prompt Enhancer installed" not in second.output
        assert json.loads((tmp_dir / "state.json").read_text())["has_shown_welcome"] is True

    def test_missing_file(self, config_file, tmp_dir):
        result = runner.invoke(
            app, ["enhance", "--config", str(config_file), "--file", str(tmp_dir / "missing.md")]
        )

        assert result.exit_code == 1
        assert "File not found" in result.output

    def test_lines_without_file(self, config_file):
        result = runner.invoke(app, ["enhance", "--config", str(config_file), "--lines", "2"])

        assert result.exit_code == 1
        assert "--lines requires --file" in result.output

    def test_bad_line_range(self, config_file, draft):
        result = runner.invoke(
            app, ["enhance", "--config", str(config_file), "--file", str(draft), "--lines", "9:12"]
        )

        assert result.exit_code == 1

    def test_enhance_selection_requires_selection(self, config_file, draft):
        result = runner.invoke(
            app, ["enhance-selection", "--config", str(config_file), "--file", str(draft)]
        )

        assert result.exit_code == 0
        assert "Please select some text to enhance first!" in result.output


class TestCliCheck:
    """Tests for check command."""

    def test_check_without_key(self, config_file):
        result = runner.invoke(app, ["check", "--config", str(config_file)])

        assert result.exit_code == 1
        assert "API key not configured" in result.output

    def test_check_direct_ok(self, config_file, mock_openai):
        result = runner.invoke(app, ["check", "--config", str(config_file), "--api-key", "test-key"])

        assert result.exit_code == 0
        assert "Connection OK" in result.output

    def test_check_proxy_unreachable(self, config_file):
        with patch('prompt_enhancer.cli.ServiceProxyEnhancer') as mock_proxy:
            mock_proxy.return_value.__enter__.return_value.health.return_value = False

            result = runner.invoke(
                app,
                ["check", "--config", str(config_file), "--mode", "proxy",
                 "--service-url", "http://localhost:9"],
            )

        assert result.exit_code == 1
        assert "Connection failed" in result.output
        mock_proxy.assert_called_once()


class TestCliServe:
    """Tests for serve command."""

    def test_serve_applies_overrides(self, config_file):
        with patch('prompt_enhancer.server.app.run_server') as mock_run:
            result = runner.invoke(
                app, ["serve", "--config", str(config_file), "--host", "0.0.0.0", "--port", "8080"]
            )

        assert result.exit_code == 0, result.output
        served = mock_run.call_args.args[0]
        assert served.service.host == "0.0.0.0"
        assert served.service.port == 8080

    def test_serve_port_from_env(self, config_file, monkeypatch):
        monkeypatch.setenv("PORT", "4000")

        with patch('prompt_enhancer.server.app.run_server') as mock_run:
            result = runner.invoke(app, ["serve", "--config", str(config_file)])

        assert result.exit_code == 0, result.output
        assert mock_run.call_args.args[0].service.port == 4000

    @pytest.mark.parametrize("port", ["0", "70000"])
    def test_serve_rejects_invalid_port(self, config_file, port):
        with patch('prompt_enhancer.server.app.run_server') as mock_run:
            result = runner.invoke(app, ["serve", "--config", str(config_file), "--port", port])

        assert result.exit_code == 1
        assert "Invalid service setting" in result.output
        mock_run.assert_not_called()
