"""Incremental "load more" pagination.

The shop grid shows a growing prefix of the filtered, sorted product list.
The window starts at ``INITIAL_VISIBLE`` products and each "load more" adds
``REVEAL_STEP`` more, never past the end of the list.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import TypeVar

T = TypeVar("T")

INITIAL_VISIBLE = 10
REVEAL_STEP = 10


@dataclass
class PaginationWindow:
    """Reveal window over a product sequence.

    The counter only grows through ``reveal_more``. When filters shrink the
    list below the counter the rendered slice shrinks with it, but the
    counter itself is kept.

    Attributes:
        visible_count: Number of products currently revealed.
        step: Products added per reveal.
    """

    visible_count: int = INITIAL_VISIBLE
    step: int = REVEAL_STEP

    def __post_init__(self) -> None:
        self.visible_count = max(self.visible_count, 0)
        self.step = max(self.step, 1)

    def has_more(self, total: int) -> bool:
        """Check whether "load more" should be offered."""
        return self.visible_count < total

    def reveal_more(self, total: int) -> int:
        """Reveal the next batch of products.

        Args:
            total: Size of the filtered and sorted list.

        Returns:
            The new visible count.
        """
        if self.has_more(total):
            self.visible_count = min(self.visible_count + self.step, total)
        return self.visible_count

    def window(self, sequence: Sequence[T]) -> list[T]:
        """Slice of the sequence that is currently revealed."""
        return list(sequence[: self.visible_count])

    def reset(self, visible_count: int = INITIAL_VISIBLE) -> None:
        """Return to the initial window, as on a fresh page mount."""
        self.visible_count = max(visible_count, 0)
