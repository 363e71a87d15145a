from __future__ import annotations

from typing import Iterable, Optional, Set

from souvy.canvas.object import CanvasElement, SafeZone


def is_out_of_bound(element: CanvasElement, safe_zone: Optional[SafeZone]) -> bool:
    """Return True when any edge of the element lies outside the safe zone.

    The zone is given in 0-1000 space and compared in percent. Without a zone
    nothing is reported. The result only drives a warning; it never blocks
    editing or saving.
    """
    if safe_zone is None:
        return False
    zone = safe_zone.to_percent()
    left, top, right, bottom = element.bbox()
    return (
        top < zone.ymin
        or bottom > zone.ymax
        or left < zone.xmin
        or right > zone.xmax
    )


def out_of_bound_ids(elements: Iterable[CanvasElement], safe_zone: Optional[SafeZone]) -> Set[str]:
    return {el.id for el in elements if is_out_of_bound(el, safe_zone)}
