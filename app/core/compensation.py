"""
Compensated multi-step writes.

Supabase calls are independent HTTP requests, so a sequence like
"update lead, then reserve property" is not atomic. Each step registers an
undo callable; if a later step raises, the registered undos run in reverse
order and the original exception propagates.
"""

import logging
from typing import Any, Callable, List, Optional, Tuple

logger = logging.getLogger(__name__)


class CompensatingSequence:
    def __init__(self, name: str):
        self.name = name
        self._undo: List[Tuple[str, Callable[[], Any]]] = []

    def step(self, label: str, action: Callable[[], Any], undo: Optional[Callable[[], Any]] = None) -> Any:
        result = action()
        if undo is not None:
            self._undo.append((label, undo))
        return result

    def on_rollback(self, label: str, undo: Callable[[], Any]) -> None:
        self._undo.append((label, undo))

    def rollback(self) -> List[str]:
        """Run undos newest first. Returns labels whose undo itself failed."""
        failed = []
        while self._undo:
            label, undo = self._undo.pop()
            try:
                undo()
                logger.info(f"[{self.name}] compensated step '{label}'")
            except Exception as e:
                logger.error(f"[{self.name}] compensation for '{label}' failed: {e}")
                failed.append(label)
        return failed

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc_type is not None:
            logger.warning(f"[{self.name}] step failed, rolling back: {exc}")
            self.rollback()
        else:
            self._undo.clear()
        return False
