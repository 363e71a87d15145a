from __future__ import annotations

import copy
import logging
from dataclasses import fields
from typing import Dict, Iterable, Iterator, List, Optional

from souvy.canvas.object import CanvasElement, ElementType, new_element_id

logger = logging.getLogger(__name__)

DEFAULT_TEXT = "New Message"
DEFAULT_FONT_SIZE = 24
DEFAULT_FONT_FAMILY = "Playfair Display"
DEFAULT_TEXT_COLOR = "#004D4D"

# Fields callers may change through update(); the id is fixed at creation
_WRITABLE_FIELDS = frozenset(f.name for f in fields(CanvasElement)) - {"id"}

# (width %, height %) of freshly added elements
DEFAULT_SIZES = {
    ElementType.TEXT: (30.0, 8.0),
    ElementType.IMAGE: (20.0, 20.0),
}


class ElementStore:
    """Owns the design elements of one editor session and the current selection.

    Elements are kept in insertion order; paint order is derived on demand by
    a stable sort on ``z_index`` (see :meth:`ordered`). Operations addressing
    an id that is not present are silently ignored.
    """

    def __init__(self, elements: Optional[Iterable[CanvasElement]] = None) -> None:
        self._elements: Dict[str, CanvasElement] = {}
        self._selected: Optional[str] = None
        if elements:
            self.replace_all(elements)

    def __len__(self) -> int:
        return len(self._elements)

    def __iter__(self) -> Iterator[CanvasElement]:
        return iter(list(self._elements.values()))

    def __contains__(self, element_id: object) -> bool:
        return element_id in self._elements

    def get(self, element_id: Optional[str]) -> Optional[CanvasElement]:
        if element_id is None:
            return None
        return self._elements.get(element_id)

    # --- Mutations ---
    def add(self, type: ElementType | str, content: Optional[str] = None) -> str:
        """Create an element centered on the canvas, select it and return its id.

        The new element's ``z_index`` equals the element count before the
        insertion, so it paints above everything added earlier unless the
        order was changed in between.
        """
        kind = ElementType(type)
        element_id = new_element_id()
        while element_id in self._elements:
            element_id = new_element_id()
        w, h = DEFAULT_SIZES[kind]
        if kind == ElementType.TEXT:
            element = CanvasElement(
                id=element_id,
                type=kind,
                content=content or DEFAULT_TEXT,
                width=w,
                height=h,
                z_index=len(self._elements),
                font_size=DEFAULT_FONT_SIZE,
                font_family=DEFAULT_FONT_FAMILY,
                color=DEFAULT_TEXT_COLOR,
            )
        else:
            element = CanvasElement(
                id=element_id,
                type=kind,
                content=content or "",
                width=w,
                height=h,
                z_index=len(self._elements),
            )
        self._elements[element_id] = element
        self._selected = element_id
        logger.debug("Added %s element %s (z=%d)", kind.value, element_id, element.z_index)
        return element_id

    def update(self, element_id: str, **changes) -> None:
        element = self._elements.get(element_id)
        if element is None:
            return
        for name, value in changes.items():
            if name not in _WRITABLE_FIELDS:
                raise AttributeError(f"CanvasElement has no writable field {name!r}")
            setattr(element, name, value)

    def remove(self, element_id: str) -> None:
        if self._elements.pop(element_id, None) is None:
            return
        if self._selected == element_id:
            self._selected = None
        logger.debug("Removed element %s", element_id)

    def replace_all(self, elements: Iterable[CanvasElement]) -> None:
        """Load elements from a saved design, keeping their ids and order keys."""
        self._elements = {}
        for el in elements:
            self._elements[el.id] = copy.deepcopy(el)
        self._selected = None

    # --- Selection ---
    @property
    def selected_id(self) -> Optional[str]:
        return self._selected

    @property
    def selected(self) -> Optional[CanvasElement]:
        return self.get(self._selected)

    def select(self, element_id: Optional[str]) -> None:
        if element_id is not None and element_id not in self._elements:
            element_id = None
        self._selected = element_id

    # --- Views ---
    def ordered(self) -> List[CanvasElement]:
        """Elements in paint order: ascending z_index, ties in insertion order."""
        return sorted(self._elements.values(), key=lambda el: el.z_index)

    def snapshot(self) -> List[CanvasElement]:
        """Deep copies in insertion order, safe to hand to background work."""
        return [copy.deepcopy(el) for el in self._elements.values()]
