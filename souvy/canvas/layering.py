from __future__ import annotations

import logging
from enum import Enum
from typing import List

from souvy.canvas.object import CanvasElement
from souvy.canvas.store import ElementStore

logger = logging.getLogger(__name__)


class LayerDirection(str, Enum):
    UP = "up"
    DOWN = "down"
    TOP = "top"
    BOTTOM = "bottom"


class LayerManager:
    """Stacking order changes for the elements of an :class:`ElementStore`."""

    def __init__(self, store: ElementStore) -> None:
        self.store = store

    def reorder(self, element_id: str, direction: LayerDirection | str) -> None:
        """Move an element up/down one step or to the top/bottom of the stack.

        top/bottom write a key strictly beyond every current key (and beyond
        0). up/down swap keys with the neighbour in ascending order, so every
        other element keeps its relative position.
        """
        direction = LayerDirection(direction)
        ordered = self.store.ordered()
        idx = next((i for i, el in enumerate(ordered) if el.id == element_id), -1)
        if idx == -1:
            return
        current = ordered[idx]

        if direction == LayerDirection.TOP:
            max_z = max([el.z_index for el in ordered] + [0])
            self.store.update(element_id, z_index=max_z + 1)
        elif direction == LayerDirection.BOTTOM:
            min_z = min([el.z_index for el in ordered] + [0])
            self.store.update(element_id, z_index=min_z - 1)
        elif direction == LayerDirection.UP and idx < len(ordered) - 1:
            self._swap(current, ordered[idx + 1])
        elif direction == LayerDirection.DOWN and idx > 0:
            self._swap(current, ordered[idx - 1])

    def _swap(self, a: CanvasElement, b: CanvasElement) -> None:
        z_a = a.z_index
        self.store.update(a.id, z_index=b.z_index)
        self.store.update(b.id, z_index=z_a)
        logger.debug("Swapped z of %s and %s", a.id, b.id)

    def layers(self) -> List[CanvasElement]:
        """Elements top-most first, as listed in the layers panel."""
        return list(reversed(self.store.ordered()))

    def normalize(self) -> None:
        """Renumber z to 0..n-1 preserving paint order."""
        for idx, el in enumerate(self.store.ordered()):
            self.store.update(el.id, z_index=idx)
