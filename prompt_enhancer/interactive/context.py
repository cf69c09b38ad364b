"""Per-operation progress and cancellation."""

import logging
import threading
from typing import Callable, Optional


logger = logging.getLogger(__name__)

ProgressSink = Callable[[int, str], None]


class OperationContext:
    """Carries the cancellation flag and progress sink for one enhancement.

    The controller polls `cancelled` after the network wait returns and
    before touching any document.
    """

    def __init__(self, on_progress: Optional[ProgressSink] = None):
        self.on_progress = on_progress
        self.progress = 0
        self._cancelled = threading.Event()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self) -> None:
        """Request cancellation. Safe to call from any thread."""
        if not self._cancelled.is_set():
            logger.info("Enhancement cancelled by user")
        self._cancelled.set()

    def report(self, increment: int, message: str) -> None:
        """Advance progress and forward the update to the sink."""
        self.progress = min(100, self.progress + increment)
        logger.debug(f"Progress {self.progress}%: {message}")
        if self.on_progress:
            try:
                self.on_progress(self.progress, message)
            except Exception as e:
                logger.error(f"Progress callback error: {e}")
