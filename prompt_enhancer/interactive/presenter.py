"""Hands an enhanced prompt to the user's chosen destination."""

import logging
from enum import Enum
from typing import Optional, Protocol

import pyperclip

from .documents import FileDocument, Workspace


logger = logging.getLogger(__name__)


class Disposition(str, Enum):
    """What to do with an enhanced prompt."""
    REPLACE = "replace"
    NEW_DOCUMENT = "new"
    COPY = "copy"


class UserInterface(Protocol):
    def ask_prompt(self) -> Optional[str]: ...

    def show_result(self, enhanced: str) -> None: ...

    def choose_disposition(self, has_selection: bool) -> Optional[Disposition]: ...

    def info(self, message: str) -> None: ...

    def error(self, message: str, hint: Optional[str] = None) -> None: ...

    def progress(self, title: str): ...


class ResultPresenter:
    """Offers the three dispositions and applies the one the user picks."""

    def __init__(
        self,
        ui: UserInterface,
        workspace: Workspace,
        document: Optional[FileDocument] = None,
    ):
        self.ui = ui
        self.workspace = workspace
        self.document = document

    def present(self, enhanced: str, has_selection: bool) -> Optional[Disposition]:
        """Ask what to do with the enhanced prompt and do it.

        Returns:
            The applied disposition, or None if the user dismissed the choice
            or it could not be applied.
        """
        self.ui.show_result(enhanced)
        choice = self.ui.choose_disposition(has_selection)
        if choice is None:
            logger.info("Disposition dismissed, nothing applied")
            return None

        try:
            applied = self._apply(choice, enhanced, has_selection)
        except (pyperclip.PyperclipException, OSError) as e:
            logger.error(f"Failed to apply disposition {choice.value}: {e}")
            self.ui.error(f"Enhancement failed: {e}")
            return None

        if applied:
            logger.info(f"Applied disposition: {choice.value}")
            return choice
        return None

    def _apply(self, choice: Disposition, enhanced: str, has_selection: bool) -> bool:
        if choice == Disposition.REPLACE:
            if self.document is None:
                self.ui.info("No open document to insert into. Choose another option next time.")
                return False
            if has_selection and self.document.has_selection:
                self.document.replace_selection(enhanced)
                self.ui.info("✨ Prompt enhanced and replaced!")
            else:
                self.document.insert_at_cursor(enhanced)
                self.ui.info("✨ Enhanced prompt inserted!")

        elif choice == Disposition.NEW_DOCUMENT:
            path = self.workspace.open_new_document(enhanced, language="markdown")
            self.ui.info(f"✨ Enhanced prompt opened in new document! ({path})")

        elif choice == Disposition.COPY:
            self.workspace.copy_to_clipboard(enhanced)
            self.ui.info("✨ Enhanced prompt copied to clipboard!")

        return True
