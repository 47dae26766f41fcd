"""Keyboard/pointer selection over the candidate list."""

from __future__ import annotations

from typing import Callable

from loguru import logger


class SelectionState:
    """
    Highlighted candidate index, clamped to [0, count - 1].

    With an empty list the index stays at 0 and transitions do nothing.
    Each transition on a non-empty list reports the new index through
    `on_scroll` so the presentation layer can bring it into view.
    """

    def __init__(self, count: int, on_scroll: Callable[[int], None] | None = None):
        self.count = max(0, count)
        self.index = 0
        self._on_scroll = on_scroll

    def _transition(self, index: int) -> int:
        if self.count == 0:
            return self.index
        self.index = min(max(0, index), self.count - 1)
        logger.trace(
            "Selection changed",
            operation="selection",
            index=self.index,
            count=self.count
        )
        if self._on_scroll is not None:
            self._on_scroll(self.index)
        return self.index

    def move_up(self) -> int:
        return self._transition(self.index - 1)

    def move_down(self) -> int:
        return self._transition(self.index + 1)

    def set_index(self, index: int) -> int:
        """Select an index directly (mouse hover/click); out-of-range is clamped."""
        return self._transition(index)

    @property
    def is_empty(self) -> bool:
        return self.count == 0
