import pytest

from souvy.canvas.layering import LayerManager, LayerDirection
from souvy.canvas.object import CanvasElement
from souvy.canvas.store import ElementStore


@pytest.fixture
def stacked():
    store = ElementStore()
    ids = [store.add("text") for _ in range(3)]
    return store, LayerManager(store), ids


def paint_order(store):
    return [el.id for el in store.ordered()]


def test_top_exceeds_every_other_key(stacked):
    store, layers, (a, b, c) = stacked
    layers.reorder(a, "top")
    others = [el.z_index for el in store if el.id != a]
    assert store.get(a).z_index > max(others)
    assert paint_order(store) == [b, c, a]


def test_bottom_below_every_other_key(stacked):
    store, layers, (a, b, c) = stacked
    layers.reorder(c, LayerDirection.BOTTOM)
    others = [el.z_index for el in store if el.id != c]
    assert store.get(c).z_index < min(others)
    assert store.get(c).z_index == -1
    assert paint_order(store) == [c, a, b]


def test_top_with_all_negative_keys():
    store = ElementStore([
        CanvasElement(id="a", type="text", z_index=-5),
        CanvasElement(id="b", type="text", z_index=-3),
    ])
    LayerManager(store).reorder("a", "top")
    assert store.get("a").z_index == 1


def test_bottom_with_all_positive_keys():
    store = ElementStore([
        CanvasElement(id="a", type="text", z_index=4),
        CanvasElement(id="b", type="text", z_index=7),
    ])
    LayerManager(store).reorder("b", "bottom")
    assert store.get("b").z_index == -1


def test_up_swaps_with_successor(stacked):
    store, layers, (a, b, c) = stacked
    layers.reorder(a, "up")
    assert store.get(a).z_index == 1
    assert store.get(b).z_index == 0
    assert store.get(c).z_index == 2
    assert paint_order(store) == [b, a, c]


def test_down_swaps_with_predecessor(stacked):
    store, layers, (a, b, c) = stacked
    layers.reorder(c, "down")
    assert paint_order(store) == [a, c, b]


def test_up_on_topmost_is_noop(stacked):
    store, layers, (a, b, c) = stacked
    before = {el.id: el.z_index for el in store}
    layers.reorder(c, "up")
    assert {el.id: el.z_index for el in store} == before


def test_down_on_bottommost_is_noop(stacked):
    store, layers, (a, b, c) = stacked
    before = {el.id: el.z_index for el in store}
    layers.reorder(a, "down")
    assert {el.id: el.z_index for el in store} == before


def test_unknown_id_is_noop(stacked):
    store, layers, _ids = stacked
    before = {el.id: el.z_index for el in store}
    layers.reorder("missing", "top")
    assert {el.id: el.z_index for el in store} == before


def test_up_with_sparse_keys_keeps_other_keys():
    store = ElementStore([
        CanvasElement(id="a", type="text", z_index=10),
        CanvasElement(id="b", type="text", z_index=-4),
        CanvasElement(id="c", type="text", z_index=3),
    ])
    LayerManager(store).reorder("b", "up")
    assert store.get("b").z_index == 3
    assert store.get("c").z_index == -4
    assert store.get("a").z_index == 10


def test_layers_lists_topmost_first(stacked):
    store, layers, (a, b, c) = stacked
    assert [el.id for el in layers.layers()] == [c, b, a]


def test_normalize_preserves_order():
    store = ElementStore([
        CanvasElement(id="a", type="text", z_index=10),
        CanvasElement(id="b", type="text", z_index=-4),
        CanvasElement(id="c", type="text", z_index=3),
    ])
    before = paint_order(store)
    LayerManager(store).normalize()
    assert paint_order(store) == before
    assert sorted(el.z_index for el in store) == [0, 1, 2]
