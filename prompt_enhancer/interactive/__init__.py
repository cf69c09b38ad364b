"""Interactive (editor-style) front-end."""

from .context import OperationContext
from .controller import EnhancementController, create_interactive_enhancer
from .documents import FileDocument, Workspace
from .presenter import Disposition, ResultPresenter
from .state_store import JsonStateStore, MemoryStateStore

__all__ = [
    "OperationContext",
    "EnhancementController",
    "create_interactive_enhancer",
    "FileDocument",
    "Workspace",
    "Disposition",
    "ResultPresenter",
    "JsonStateStore",
    "MemoryStateStore",
]
