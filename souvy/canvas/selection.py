from __future__ import annotations

import logging
from enum import Enum
from typing import Optional, Tuple, Union
from dataclasses import dataclass

from souvy.canvas.store import ElementStore

logger = logging.getLogger(__name__)

MIN_WIDTH = 5.0
MIN_HEIGHT = 2.0
# Resize handle hit radius around the bottom-right corner, in pixels
HANDLE_RADIUS_PX = 8.0


class DragMode(str, Enum):
    MOVE = "move"
    RESIZE = "resize"


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Selected:
    id: str


@dataclass(frozen=True)
class Dragging:
    id: str
    mode: DragMode


InteractionState = Union[Idle, Selected, Dragging]


@dataclass
class DragContext:
    """Drag state carried from pointer-down to pointer-up.

    ``offset`` is the pointer position minus the element center at drag
    start (percent); resize drags keep it at zero.
    """
    id: str
    mode: DragMode
    offset: Tuple[float, float] = (0.0, 0.0)


@dataclass
class CanvasGeometry:
    """Pixel size of the on-screen design surface."""
    width: float
    height: float

    def to_percent(self, px: float, py: float) -> Tuple[float, float]:
        w = max(float(self.width), 1e-6)
        h = max(float(self.height), 1e-6)
        return px / w * 100.0, py / h * 100.0


class InteractionController:
    """Pointer state machine translating presses and drags into store updates.

    Coordinates passed in are pixels relative to the top-left corner of the
    design surface; they are converted to percent using :attr:`geometry`.
    A single pointer is assumed, starting a drag replaces any drag in flight.
    """

    def __init__(
        self,
        store: ElementStore,
        geometry: CanvasGeometry,
        min_width: float = MIN_WIDTH,
        min_height: float = MIN_HEIGHT,
    ) -> None:
        self.store = store
        self.geometry = geometry
        self.min_width = float(min_width)
        self.min_height = float(min_height)
        self._drag: Optional[DragContext] = None

    @property
    def state(self) -> InteractionState:
        if self._drag is not None:
            return Dragging(self._drag.id, self._drag.mode)
        if self.store.selected_id is not None:
            return Selected(self.store.selected_id)
        return Idle()

    @property
    def drag(self) -> Optional[DragContext]:
        return self._drag

    def resize_canvas(self, width: float, height: float) -> None:
        self.geometry = CanvasGeometry(width, height)

    # --- Hit testing ---
    def hit_test(self, px: float, py: float) -> Optional[str]:
        """Return the id of the top-most element under the pointer."""
        x, y = self.geometry.to_percent(px, py)
        for el in reversed(self.store.ordered()):
            if el.contains(x, y):
                return el.id
        return None

    def handle_hit(self, px: float, py: float) -> bool:
        """True if the pointer is on the selected element's resize handle."""
        el = self.store.selected
        if el is None:
            return False
        _left, _top, right, bottom = el.bbox()
        hx = right / 100.0 * self.geometry.width
        hy = bottom / 100.0 * self.geometry.height
        return (px - hx) ** 2 + (py - hy) ** 2 <= HANDLE_RADIUS_PX ** 2

    # --- Events ---
    def pointer_down(self, element_id: str, mode: DragMode | str, px: float, py: float) -> None:
        """Select ``element_id`` and start a move or resize drag."""
        mode = DragMode(mode)
        el = self.store.get(element_id)
        if el is None:
            self.pointer_down_empty()
            return
        self.store.select(element_id)
        offset = (0.0, 0.0)
        if mode == DragMode.MOVE:
            x, y = self.geometry.to_percent(px, py)
            offset = (x - el.x, y - el.y)
        self._drag = DragContext(id=element_id, mode=mode, offset=offset)
        logger.debug("Drag start %s on %s offset=%s", mode.value, element_id, offset)

    def pointer_down_at(self, px: float, py: float) -> Optional[str]:
        """Route a raw press: resize handle, element body, or empty canvas."""
        selected = self.store.selected_id
        if selected is not None and self.handle_hit(px, py):
            self.pointer_down(selected, DragMode.RESIZE, px, py)
            return selected
        target = self.hit_test(px, py)
        if target is None:
            self.pointer_down_empty()
            return None
        self.pointer_down(target, DragMode.MOVE, px, py)
        return target

    def pointer_down_empty(self) -> None:
        self._drag = None
        self.store.select(None)

    def pointer_move(self, px: float, py: float) -> bool:
        """Apply the active drag; returns True when the element changed."""
        drag = self._drag
        if drag is None:
            return False
        el = self.store.get(drag.id)
        if el is None:
            # Element was removed mid-drag
            self._drag = None
            return False
        x, y = self.geometry.to_percent(px, py)
        if drag.mode == DragMode.MOVE:
            self.store.update(el.id, x=x - drag.offset[0], y=y - drag.offset[1])
        else:
            dx = x - el.x
            dy = y - el.y
            self.store.update(
                el.id,
                width=max(self.min_width, abs(dx) * 2.0),
                height=max(self.min_height, abs(dy) * 2.0),
            )
        return True

    def pointer_up(self) -> None:
        self._drag = None

    def pointer_leave(self) -> None:
        self._drag = None
