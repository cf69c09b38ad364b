"""Document and workspace operations used by the interactive front-end."""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

import pyperclip


logger = logging.getLogger(__name__)


class FileDocument:
    """A text file with an optional selection and a cursor.

    Offsets are character offsets into the file contents. The cursor
    defaults to the end of the file.
    """

    def __init__(
        self,
        path: Path,
        selection: Optional[tuple[int, int]] = None,
        cursor: Optional[int] = None,
    ):
        self.path = Path(path)
        text = self.text
        if selection is not None:
            start, end = selection
            if not 0 <= start <= end <= len(text):
                raise ValueError(f"Selection {start}:{end} outside document of {len(text)} chars")
        self.selection = selection
        self.cursor = len(text) if cursor is None else max(0, min(cursor, len(text)))

    @classmethod
    def from_line_range(cls, path: Path, lines: Optional[str] = None) -> "FileDocument":
        """Open a document selecting whole lines.

        Args:
            path: File to open.
            lines: 1-based inclusive range "START:END", a single line "N",
                or None for no selection.
        """
        path = Path(path)
        if not lines:
            return cls(path)

        first, _, last = lines.partition(":")
        try:
            start_line = int(first)
            end_line = int(last) if last else start_line
        except ValueError:
            raise ValueError(f"Invalid line range: {lines!r} (expected START:END)")
        if start_line < 1 or end_line < start_line:
            raise ValueError(f"Invalid line range: {lines!r}")

        text_lines = path.read_text().splitlines(keepends=True)
        if end_line > len(text_lines):
            raise ValueError(f"Line range {lines} exceeds {len(text_lines)} lines in {path}")

        start = sum(len(line) for line in text_lines[:start_line - 1])
        selected = "".join(text_lines[start_line - 1:end_line])
        # Keep the final newline out of the selection so a replacement
        # doesn't swallow the line break.
        end = start + len(selected.rstrip("\r\n"))
        return cls(path, selection=(start, end))

    @property
    def text(self) -> str:
        return self.path.read_text()

    @property
    def has_selection(self) -> bool:
        return self.selection is not None and self.selection[0] != self.selection[1]

    def selected_text(self) -> str:
        if not self.has_selection:
            return ""
        start, end = self.selection  # type: ignore[misc]
        return self.text[start:end]

    def replace_selection(self, new_text: str) -> None:
        """Replace the selected range and select the inserted text."""
        if not self.has_selection:
            raise ValueError("No selection to replace")
        start, end = self.selection  # type: ignore[misc]
        text = self.text
        self.path.write_text(text[:start] + new_text + text[end:])
        self.selection = (start, start + len(new_text))
        self.cursor = start + len(new_text)
        logger.info(f"Replaced {end - start} chars with {len(new_text)} chars in {self.path}")

    def insert_at_cursor(self, new_text: str) -> None:
        text = self.text
        self.path.write_text(text[:self.cursor] + new_text + text[self.cursor:])
        logger.info(f"Inserted {len(new_text)} chars at offset {self.cursor} in {self.path}")
        self.cursor += len(new_text)


class Workspace:
    """Places an enhanced prompt can go besides the originating document."""

    def __init__(self, documents_dir: str = "./enhanced"):
        self.documents_dir = Path(documents_dir).expanduser()

    def open_new_document(self, content: str, language: str = "markdown") -> Path:
        """Write content to a new standalone document and return its path."""
        suffix = ".md" if language == "markdown" else ".txt"
        self.documents_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        path = self.documents_dir / f"enhanced_prompt_{timestamp}{suffix}"
        counter = 1
        while path.exists():
            path = self.documents_dir / f"enhanced_prompt_{timestamp}_{counter}{suffix}"
            counter += 1
        path.write_text(content)
        logger.info(f"Opened new document {path}")
        return path

    def copy_to_clipboard(self, text: str) -> None:
        pyperclip.copy(text)
        logger.debug(f"Copied text to clipboard ({len(text)} chars)")
