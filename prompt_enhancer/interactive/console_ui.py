"""Terminal rendition of the editor prompts, pickers and notifications."""

from contextlib import contextmanager
from typing import Iterator, Optional

from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from .context import ProgressSink
from .presenter import Disposition


class ConsoleUI:
    """UserInterface backed by a rich console."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def ask_prompt(self) -> Optional[str]:
        """Ask for prompt text. Empty input counts as cancel."""
        self.console.print("[dim]e.g., make a todo app, create a login form...[/dim]")
        text = Prompt.ask("✨ Enter the prompt you want to enhance", default="", console=self.console)
        return text or None

    def show_result(self, enhanced: str) -> None:
        self.console.print(Panel(Markdown(enhanced), title="Enhanced Prompt", border_style="green"))

    def choose_disposition(self, has_selection: bool) -> Optional[Disposition]:
        table = Table(title="✨ What would you like to do with the enhanced prompt?")
        table.add_column("Option", style="cyan")
        table.add_column("Action")
        table.add_row(
            Disposition.REPLACE.value,
            "Replace the selected text" if has_selection else "Insert at cursor",
        )
        table.add_row(Disposition.NEW_DOCUMENT.value, "Open enhanced prompt in a new document")
        table.add_row(Disposition.COPY.value, "Copy enhanced prompt to clipboard")
        table.add_row("cancel", "Do nothing")
        self.console.print(table)

        answer = Prompt.ask(
            "Choose",
            choices=[d.value for d in Disposition] + ["cancel"],
            default="cancel",
            console=self.console,
        )
        if answer == "cancel":
            return None
        return Disposition(answer)

    def info(self, message: str) -> None:
        self.console.print(f"[green]{message}[/green]")

    def error(self, message: str, hint: Optional[str] = None) -> None:
        self.console.print(f"[red]{message}[/red]")
        if hint:
            self.console.print(f"[dim]{hint}[/dim]")

    @contextmanager
    def progress(self, title: str) -> Iterator[ProgressSink]:
        """Show a spinner while the enhancement runs. Yields a progress sink."""
        with self.console.status(title) as status:
            def sink(percent: int, message: str) -> None:
                status.update(f"{title} [dim]{percent}% {message}[/dim]")

            yield sink
