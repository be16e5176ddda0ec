"""Tests for the Qt-independent parts of klayout_tools.layer_browser."""

import pya

from klayout_tools import layer_browser
from klayout_tools.layer_browser import LayerBrowserState, LayerEntry


def _entries():
    return [
        LayerEntry("M1", 1, 0),
        LayerEntry("M2", 2, 0),
        LayerEntry("VIA1", 3, 0),
        LayerEntry("POLY", 10, 5),
    ]


def test_navigation_wraps():
    st = LayerBrowserState(_entries())
    assert st.current_entry.name == "M1"
    assert st.prev()
    assert st.current == 3
    assert st.next()
    assert st.current == 0

    assert st.jump(2)
    assert st.current_entry.name == "VIA1"
    assert not st.jump(4)
    assert st.current == 2


def test_empty_state():
    st = LayerBrowserState()
    assert len(st) == 0
    assert st.current_entry is None
    assert not st.next()
    assert not st.prev()
    assert not st.keep_current()
    assert st.visible_indices() == set()


def test_filter_and_rows():
    st = LayerBrowserState(_entries())
    assert st.display_name(3) == "3: POLY (10/5)"

    names = st.set_filter("m")
    assert names == ["0: M1 (1/0)", "1: M2 (2/0)"]
    assert st.row_of(1) == 1
    assert st.row_of(2) is None

    assert st.select_row(1)
    assert st.current == 1
    assert not st.select_row(2)

    # matches layer/datatype text too
    assert st.set_filter("10/5") == ["3: POLY (10/5)"]
    assert len(st.set_filter("")) == 4


def test_kept_layers():
    st = LayerBrowserState(_entries())
    assert st.keep_current()
    assert not st.keep_current()
    st.jump(2)
    assert st.keep_current()
    st.jump(3)

    assert st.kept_names() == ["0: M1", "2: VIA1"]
    assert st.visible_indices() == {0, 2, 3}

    assert st.remove_kept(0) == 0
    assert st.remove_kept(5) is None
    assert st.kept == [2]

    st.clear_kept()
    assert st.visible_indices() == {3}


def test_reset_drops_out_of_range_state():
    st = LayerBrowserState(_entries())
    st.jump(3)
    st.keep_current()
    st.reset(_entries()[:2])
    assert st.current == 0
    assert st.kept == []
    assert len(st.filtered) == 2


def test_count_shapes_and_bbox(hier_layout):
    top = hier_layout.cell("TOP")
    assert layer_browser.count_shapes(hier_layout, top, 1, 0) == 3
    assert layer_browser.count_shapes(hier_layout, top, 2, 0) == 5
    assert layer_browser.count_shapes(hier_layout, top, 8, 0) == 0

    box = layer_browser.layer_bbox(hier_layout, top, 1, 0)
    assert box == pya.DBox(0, 0, 5, 2)
    assert layer_browser.layer_bbox(hier_layout, top, 8, 0) is None


def test_export_layer_list(tmp_path):
    out = tmp_path / "layers.csv"
    entries = _entries()
    layer_browser.export_layer_list(str(out), entries, lambda e: e.layer * 10)
    lines = out.read_text().splitlines()
    assert lines[0] == "Index,Name,Layer,Datatype,Shapes"
    assert lines[4] == "3,POLY,10,5,100"


if __name__ == "__main__":
    test_navigation_wraps()
    test_empty_state()
    test_filter_and_rows()
    test_kept_layers()
    test_reset_drops_out_of_range_state()
