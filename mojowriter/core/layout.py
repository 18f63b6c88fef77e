"""Proportional resizing of adjacent editor panes."""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DragState:
    """Values captured when a resizer handle is grabbed."""

    handle_index: int
    start_x: float
    start_widths: tuple


class PaneLayoutManager:
    """
    Translates pointer drags on resizer handles into pane width percentages.

    Handle ``i`` sits between pane ``i`` and pane ``i + 1``. A drag only ever
    moves width between those two panes; their combined percentage is
    conserved and no other pane is touched. A pane that would shrink below its
    minimum pixel width is clamped to exactly that minimum and the other
    adjacent pane takes the rest.
    """

    def __init__(
        self,
        widths: Sequence[float],
        min_px: Sequence[int],
        container_width: float = 0,
    ):
        if len(widths) != len(min_px):
            raise ValueError("widths and min_px must have the same length")
        if len(widths) < 2:
            raise ValueError("At least two panes are required")
        self._defaults = [float(w) for w in widths]
        self.min_px = [int(m) for m in min_px]
        self.widths: List[float] = list(self._defaults)
        self.container_width = float(container_width)
        self._drag: Optional[DragState] = None

    @property
    def pane_count(self) -> int:
        return len(self.widths)

    @property
    def is_dragging(self) -> bool:
        return self._drag is not None

    def set_container_width(self, width_px: float) -> None:
        """Record the measured container width (0 while not mounted)."""
        self.container_width = max(0.0, float(width_px))

    def pixel_widths(self) -> List[float]:
        return [w * self.container_width / 100.0 for w in self.widths]

    def reset(self) -> None:
        """Restore the default widths and drop any drag in progress."""
        self.widths = list(self._defaults)
        self._drag = None

    def begin_drag(self, handle_index: int, pointer_x: float) -> bool:
        """
        Start dragging a handle.

        Always starts from the last computed widths; an unfinished drag on
        another handle is ended first. Returns False when the drag is ignored.
        """
        if not 0 <= handle_index < self.pane_count - 1:
            raise IndexError(f"No resizer handle at index {handle_index}")
        if self._drag is not None:
            self.end_drag()
        if self.container_width <= 0:
            logger.debug("Ignoring drag: container has no measurable width")
            return False
        self._drag = DragState(handle_index, float(pointer_x), tuple(self.widths))
        return True

    def drag_to(self, pointer_x: float) -> List[float]:
        """Apply a pointer move to the active drag and return the widths."""
        drag = self._drag
        if drag is None or self.container_width <= 0:
            return list(self.widths)

        left, right = drag.handle_index, drag.handle_index + 1
        delta_percent = (float(pointer_x) - drag.start_x) / self.container_width * 100.0

        total = drag.start_widths[left] + drag.start_widths[right]
        min_left = self.min_px[left] / self.container_width * 100.0
        min_right = self.min_px[right] / self.container_width * 100.0
        if min_left + min_right > total:
            # Neither pane can move without breaking the other's minimum
            return list(self.widths)

        new_left = drag.start_widths[left] + delta_percent
        if new_left < min_left:
            new_left = min_left
        elif total - new_left < min_right:
            new_left = total - min_right

        widths = list(drag.start_widths)
        widths[left] = new_left
        widths[right] = total - new_left
        self.widths = widths
        return list(widths)

    def end_drag(self) -> List[float]:
        """Finish the drag; the last computed widths become the resting layout."""
        self._drag = None
        return list(self.widths)
