"""Prompt Enhancer CLI application.

Provides commands for:
- serve: Run the HTTP enhancement service
- enhance: Enhance a selection, a prompt argument, or a prompt typed in
- enhance-selection: Enhance the selected lines of a file
- config: Show/edit configuration
- check: Check the API key or service connection
"""

import logging
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from prompt_enhancer import __app_name__, __version__
from prompt_enhancer.config.manager import ConfigManager
from prompt_enhancer.config.schema import DeploymentMode, EnhancerConfig
from prompt_enhancer.enhancement.errors import ConfigurationError
from prompt_enhancer.enhancement.openai_enhancer import create_enhancer_from_config
from prompt_enhancer.enhancement.proxy_client import ServiceProxyEnhancer
from prompt_enhancer.interactive.console_ui import ConsoleUI
from prompt_enhancer.interactive.controller import EnhancementController
from prompt_enhancer.interactive.documents import FileDocument, Workspace
from prompt_enhancer.interactive.state_store import JsonStateStore
from prompt_enhancer.logging_config import get_default_log_file, get_logger, parse_level, setup_logging


app = typer.Typer(
    name="prompt-enhancer",
    help="Prompt Enhancer - Rewrite rough prompts into clear, structured ones",
    add_completion=False,
)

console = Console()
logger = get_logger("prompt_enhancer.cli")


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        console.print(f"{__app_name__} version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Prompt Enhancer - Rewrite rough prompts into clear, structured ones."""
    pass


def _load_config(config_file: Optional[Path]) -> tuple[ConfigManager, EnhancerConfig]:
    manager = ConfigManager(str(config_file) if config_file else None)
    return manager, manager.load()


def _parse_mode(mode: str) -> DeploymentMode:
    try:
        return DeploymentMode(mode)
    except ValueError:
        console.print(f"[red]Invalid mode: {mode}[/red]")
        console.print(f"Valid options: {', '.join(m.value for m in DeploymentMode)}")
        raise typer.Exit(1)


def _apply_overrides(
    config: EnhancerConfig,
    mode: Optional[str] = None,
    service_url: Optional[str] = None,
    model: Optional[str] = None,
    max_tokens: Optional[int] = None,
    api_key: Optional[str] = None,
) -> EnhancerConfig:
    """Apply command-line overrides on top of the loaded configuration."""
    if mode:
        config.interactive.mode = _parse_mode(mode)
    if service_url:
        config.interactive.service_url = service_url
    if model:
        config.completion.model = model
    if max_tokens is not None:
        if max_tokens <= 0:
            console.print(f"[red]--max-tokens must be positive, got {max_tokens}[/red]")
            raise typer.Exit(1)
        config.completion.max_tokens = max_tokens
    if api_key:
        config.completion.api_key = api_key
    return config


def _run_interactive(
    selection_only: bool,
    text: Optional[str],
    file: Optional[Path],
    lines: Optional[str],
    config_file: Optional[Path],
    mode: Optional[str],
    service_url: Optional[str],
    model: Optional[str],
    max_tokens: Optional[int],
    api_key: Optional[str],
    debug: bool,
) -> None:
    setup_logging(level=logging.WARNING, debug=debug)

    _, config = _load_config(config_file)
    config = _apply_overrides(config, mode, service_url, model, max_tokens, api_key)

    document = None
    if file is not None:
        if not file.exists():
            console.print(f"[red]File not found: {file}[/red]")
            raise typer.Exit(1)
        try:
            document = FileDocument.from_line_range(file, lines)
        except ValueError as e:
            console.print(f"[red]{e}[/red]")
            raise typer.Exit(1)
    elif lines:
        console.print("[red]--lines requires --file[/red]")
        raise typer.Exit(1)

    controller = EnhancementController(
        config,
        ui=ConsoleUI(console),
        workspace=Workspace(config.interactive.documents_dir),
        state_store=JsonStateStore(config.interactive.state_file),
        document=document,
    )
    controller.show_welcome()

    if selection_only:
        result = controller.enhance_selection()
    else:
        result = controller.enhance_prompt(text)

    if result is not None and not result.success:
        raise typer.Exit(1)


@app.command()
def enhance(
    text: Optional[str] = typer.Argument(
        None,
        help="Prompt to enhance. Ignored when --file/--lines select text. Asked for if omitted.",
    ),
    file: Optional[Path] = typer.Option(None, "--file", "-f", help="Document to work on."),
    lines: Optional[str] = typer.Option(None, "--lines", "-l", help="Selected lines in --file, e.g. '3:7'."),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to configuration file."),
    mode: Optional[str] = typer.Option(None, "--mode", help="'direct' (call the API) or 'proxy' (use the service)."),
    service_url: Optional[str] = typer.Option(None, "--service-url", help="Service URL for proxy mode."),
    model: Optional[str] = typer.Option(None, "--model", "-m", help="Model used to rewrite the prompt."),
    max_tokens: Optional[int] = typer.Option(None, "--max-tokens", help="Maximum output tokens."),
    api_key: Optional[str] = typer.Option(None, "--api-key", help="API key for the completion API.", envvar="OPENAI_API_KEY"),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging with verbose output."),
) -> None:
    """Enhance a prompt.

    Uses the selected lines of --file if given, otherwise TEXT, otherwise
    asks for a prompt. Then offers to replace the selection (or insert at
    the cursor), open the result as a new document, or copy it.
    """
    _run_interactive(False, text, file, lines, config_file, mode, service_url, model, max_tokens, api_key, debug)


@app.command("enhance-selection")
def enhance_selection(
    file: Optional[Path] = typer.Option(None, "--file", "-f", help="Document to work on."),
    lines: Optional[str] = typer.Option(None, "--lines", "-l", help="Selected lines in --file, e.g. '3:7'."),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to configuration file."),
    mode: Optional[str] = typer.Option(None, "--mode", help="'direct' (call the API) or 'proxy' (use the service)."),
    service_url: Optional[str] = typer.Option(None, "--service-url", help="Service URL for proxy mode."),
    model: Optional[str] = typer.Option(None, "--model", "-m", help="Model used to rewrite the prompt."),
    max_tokens: Optional[int] = typer.Option(None, "--max-tokens", help="Maximum output tokens."),
    api_key: Optional[str] = typer.Option(None, "--api-key", help="API key for the completion API.", envvar="OPENAI_API_KEY"),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging with verbose output."),
) -> None:
    """Enhance the selected lines of a file."""
    _run_interactive(True, None, file, lines, config_file, mode, service_url, model, max_tokens, api_key, debug)


@app.command()
def serve(
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to configuration file."),
    host: Optional[str] = typer.Option(None, "--host", help="Interface to bind."),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port to listen on.", envvar="PORT"),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging with verbose output."),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        help="Path to log file. If not specified, logs go to stderr only.",
    ),
) -> None:
    """Run the HTTP enhancement service.

    Press Ctrl+C to stop the service.
    """
    from prompt_enhancer.server.app import run_server

    log_path = str(log_file) if log_file else None
    if debug and not log_path:
        # In debug mode, auto-create log file if not specified
        log_path = get_default_log_file("./tmp/logs")

    setup_logging(debug=debug, log_file=log_path)
    logger.info(f"{__app_name__} v{__version__} starting...")

    _, config = _load_config(config_file)
    if not debug:
        try:
            setup_logging(level=parse_level(config.log_level), log_file=log_path)
        except ValueError as e:
            console.print(f"[red]{e}[/red]")
            raise typer.Exit(1)

    try:
        if host:
            config.service.host = host
        if port is not None:
            config.service.port = port
    except ValidationError as e:
        console.print(f"[red]Invalid service setting: {e.errors()[0]['msg']}[/red]")
        raise typer.Exit(1)

    if debug:
        config.log_level = "DEBUG"

    console.print(Panel.fit(
        f"[bold green]{__app_name__} v{__version__}[/bold green]\n\n"
        f"Listening: [cyan]http://{config.service.host}:{config.service.port}[/cyan]\n"
        f"Model: [cyan]{config.completion.model}[/cyan]\n"
        f"Max tokens: [cyan]{config.completion.max_tokens}[/cyan]",
        title="Starting Enhancement Service",
    ))
    console.print("\nPress [bold]Ctrl+C[/bold] to stop.\n")

    run_server(config)


@app.command()
def check(
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to configuration file."),
    mode: Optional[str] = typer.Option(None, "--mode", help="'direct' or 'proxy'."),
    service_url: Optional[str] = typer.Option(None, "--service-url", help="Service URL for proxy mode."),
    api_key: Optional[str] = typer.Option(None, "--api-key", help="API key for the completion API.", envvar="OPENAI_API_KEY"),
) -> None:
    """Check that enhancement requests can be served.

    In direct mode sends a tiny request to the completion API; in proxy
    mode calls the service health check.
    """
    setup_logging(level=logging.WARNING)
    _, config = _load_config(config_file)
    config = _apply_overrides(config, mode=mode, service_url=service_url, api_key=api_key)

    if config.interactive.mode == DeploymentMode.PROXY:
        target = config.interactive.service_url
        with ServiceProxyEnhancer(target, timeout=config.completion.timeout) as proxy:
            ok = proxy.health()
    else:
        target = config.completion.api_base_url
        try:
            enhancer = create_enhancer_from_config(config.completion)
        except ConfigurationError as e:
            console.print(f"[red]❌ {e.message}[/red]")
            raise typer.Exit(1)
        try:
            ok = enhancer.test_connection()
        finally:
            enhancer.close()

    if ok:
        console.print(f"[green]✅ Connection OK:[/green] {target}")
    else:
        console.print(f"[red]❌ Connection failed:[/red] {target}")
        raise typer.Exit(1)


@app.command()
def config(
    show: bool = typer.Option(
        False,
        "--show",
        "-s",
        help="Show current configuration.",
    ),
    init: bool = typer.Option(
        False,
        "--init",
        "-i",
        help="Create a new config file with defaults.",
    ),
    path: Optional[Path] = typer.Option(
        None,
        "--path",
        "-p",
        help="Path to config file (for --init or --show).",
    ),
    set_model: Optional[str] = typer.Option(None, "--model", help="Set the enhancement model."),
    set_max_tokens: Optional[int] = typer.Option(None, "--max-tokens", help="Set maximum output tokens."),
    set_api_key_env_var: Optional[str] = typer.Option(
        None,
        "--api-key-env-var",
        help="Set the environment variable the API key is read from.",
    ),
    set_mode: Optional[str] = typer.Option(None, "--mode", help="Set interactive mode (direct, proxy)."),
    set_service_url: Optional[str] = typer.Option(None, "--service-url", help="Set the service URL for proxy mode."),
    set_port: Optional[int] = typer.Option(None, "--port", help="Set the service port."),
) -> None:
    """Show or modify configuration.

    Without options, shows the current configuration.
    Use --init to create a new config file with defaults.
    """
    manager = ConfigManager(str(path) if path else None)

    if init:
        out_path = path or Path("prompt_enhancer.json")
        ConfigManager.create_default_config_file(out_path)
        console.print(f"[green]Created config file:[/green] {out_path}")
        return

    cfg = manager.load()
    modified = False

    if set_model:
        cfg.completion.model = set_model
        modified = True

    if set_max_tokens is not None:
        if set_max_tokens <= 0:
            console.print(f"[red]Invalid max tokens: {set_max_tokens}[/red]")
            raise typer.Exit(1)
        cfg.completion.max_tokens = set_max_tokens
        modified = True

    if set_api_key_env_var:
        cfg.completion.api_key_env_var = set_api_key_env_var
        modified = True

    if set_mode:
        cfg.interactive.mode = _parse_mode(set_mode)
        modified = True

    if set_service_url:
        cfg.interactive.service_url = set_service_url
        modified = True

    if set_port is not None:
        try:
            cfg.service.port = set_port
        except ValidationError as e:
            console.print(f"[red]Invalid port: {e.errors()[0]['msg']}[/red]")
            raise typer.Exit(1)
        modified = True

    if modified:
        manager.save(cfg)
        console.print("[green]Configuration updated.[/green]")

    if show or not modified:
        table = Table(title="Current Configuration")
        table.add_column("Setting", style="cyan")
        table.add_column("Value")

        table.add_row("Model", cfg.completion.model)
        table.add_row("Max Tokens", str(cfg.completion.max_tokens))
        table.add_row("Temperature", str(cfg.completion.temperature))
        table.add_row("API Base URL", cfg.completion.api_base_url)
        table.add_row("API Key", "set" if cfg.completion.api_key else "not set")
        table.add_row("API Key Env Var", cfg.completion.api_key_env_var or "-")
        table.add_row("Interactive Mode", cfg.interactive.mode.value)
        table.add_row("Service URL", cfg.interactive.service_url)
        table.add_row("Service Port", str(cfg.service.port))
        table.add_row("Log Level", cfg.log_level)

        console.print(table)

        if manager.config_path and Path(manager.config_path).exists():
            console.print(f"\n[dim]Config file: {manager.config_path}[/dim]")


if __name__ == "__main__":
    app()
