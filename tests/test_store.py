import pytest

from souvy.canvas.object import CanvasElement, ElementType
from souvy.canvas.store import ElementStore, DEFAULT_TEXT


class TestAdd:
    def test_add_grows_store_by_one_with_z_equal_to_prior_count(self, store):
        for expected_z in range(4):
            before = len(store)
            eid = store.add("text" if expected_z % 2 else "image")
            assert len(store) == before + 1
            assert store.get(eid).z_index == before

    def test_add_text_defaults(self, store):
        eid = store.add(ElementType.TEXT)
        el = store.get(eid)
        assert el.content == DEFAULT_TEXT
        assert (el.x, el.y) == (50.0, 50.0)
        assert (el.width, el.height) == (30.0, 8.0)
        assert el.font_size == 24
        assert el.font_family == "Playfair Display"
        assert el.color == "#004D4D"

    def test_add_image_defaults(self, store):
        eid = store.add(ElementType.IMAGE, "data:image/png;base64,AAAA")
        el = store.get(eid)
        assert el.content == "data:image/png;base64,AAAA"
        assert (el.width, el.height) == (20.0, 20.0)
        assert el.font_size is None
        assert el.font_family is None
        assert el.color is None

    def test_add_selects_new_element(self, store):
        first = store.add("text")
        second = store.add("text")
        assert first != second
        assert store.selected_id == second

    def test_ids_are_unique(self, store):
        ids = {store.add("text") for _ in range(50)}
        assert len(ids) == 50

    def test_invalid_type_rejected(self, store):
        with pytest.raises(ValueError):
            store.add("video")


class TestUpdateRemove:
    def test_update_merges_fields(self, store):
        eid = store.add("text")
        store.update(eid, content="Happy Birthday", x=12.5)
        el = store.get(eid)
        assert el.content == "Happy Birthday"
        assert el.x == 12.5
        assert el.y == 50.0

    def test_update_unknown_id_is_noop(self, store):
        eid = store.add("text")
        store.update("missing", x=1.0)
        assert store.get(eid).x == 50.0

    def test_update_unknown_field_raises(self, store):
        eid = store.add("text")
        with pytest.raises(AttributeError):
            store.update(eid, rotation=45)

    def test_remove_clears_selection_of_removed(self, store):
        keep = store.add("text")
        gone = store.add("text")
        store.remove(gone)
        assert gone not in store
        assert store.selected_id is None
        assert keep in store

    def test_remove_other_keeps_selection(self, store):
        a = store.add("text")
        b = store.add("text")
        store.remove(a)
        assert store.selected_id == b

    def test_remove_unknown_is_noop(self, store):
        store.add("text")
        store.remove("missing")
        assert len(store) == 1


def test_ordered_is_stable_for_equal_keys():
    elements = [
        CanvasElement(id="a", type="text", z_index=1),
        CanvasElement(id="b", type="text", z_index=0),
        CanvasElement(id="c", type="text", z_index=1),
        CanvasElement(id="d", type="image", z_index=0),
    ]
    store = ElementStore(elements)
    assert [el.id for el in store.ordered()] == ["b", "d", "a", "c"]
    assert [el.id for el in store.ordered()] == ["b", "d", "a", "c"]


def test_snapshot_is_detached(store):
    eid = store.add("text")
    snap = store.snapshot()
    snap[0].x = 99.0
    assert store.get(eid).x == 50.0


def test_select_unknown_clears(store):
    store.add("text")
    store.select("missing")
    assert store.selected_id is None


def test_update_rejects_methods_and_id(store):
    eid = store.add("text")
    with pytest.raises(AttributeError):
        store.update(eid, bbox=1)
    with pytest.raises(AttributeError):
        store.update(eid, is_text=False)
    with pytest.raises(AttributeError):
        store.update(eid, id="other")
    assert store.get(eid).bbox() == (35.0, 46.0, 65.0, 54.0)
