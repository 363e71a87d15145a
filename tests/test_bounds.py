from souvy.canvas.bounds import is_out_of_bound, out_of_bound_ids
from souvy.canvas.object import CanvasElement, SafeZone, FALLBACK_SAFE_ZONE

ZONE = SafeZone(ymin=300, xmin=300, ymax=700, xmax=700)


def element(x, y, w, h, eid="e"):
    return CanvasElement(id=eid, type="text", x=x, y=y, width=w, height=h)


def test_zone_converts_to_percent():
    assert ZONE.to_percent() == SafeZone(30, 30, 70, 70)


def test_centered_element_is_in_bound():
    assert is_out_of_bound(element(50, 50, 10, 10), ZONE) is False


def test_element_past_right_edge_is_out_of_bound():
    assert is_out_of_bound(element(95, 50, 20, 10), ZONE) is True


def test_each_edge_is_checked():
    assert is_out_of_bound(element(50, 32, 10, 10), ZONE)   # top at 27
    assert is_out_of_bound(element(50, 68, 10, 10), ZONE)   # bottom at 73
    assert is_out_of_bound(element(32, 50, 10, 10), ZONE)   # left at 27
    assert is_out_of_bound(element(68, 50, 10, 10), ZONE)   # right at 73


def test_touching_the_edge_is_in_bound():
    assert is_out_of_bound(element(35, 35, 10, 10), ZONE) is False
    assert is_out_of_bound(element(50, 50, 40, 40), ZONE) is False


def test_missing_zone_fails_open():
    assert is_out_of_bound(element(150, -20, 300, 300), None) is False


def test_out_of_bound_ids():
    elements = [element(50, 50, 10, 10, "in"), element(95, 50, 20, 10, "out")]
    assert out_of_bound_ids(elements, FALLBACK_SAFE_ZONE) == {"out"}
