"""View-level helpers on a standalone (headless) LayoutView.

Layer list used below:

  GROUP
    M1  1/0
    M2  2/0
  M3    3/0   (hidden)
"""

import pya
import pytest

from conftest import add_box, new_layout
from klayout_tools import common, layer_browser, layer_stats, quick_export
from klayout_tools.layer_browser import LayerBrowserState


def _layer(name, source, visible=True):
    lp = pya.LayerProperties()
    lp.name = name
    lp.source = source
    lp.visible = visible
    return lp


def _view_layout():
    ly = new_layout()
    top = ly.create_cell("TOP")
    add_box(ly, top, 1, 0, (0, 0, 1000, 1000))
    add_box(ly, top, 2, 0, (0, 0, 2000, 500))
    add_box(ly, top, 3, 0, (0, 0, 100, 100))
    return ly


@pytest.fixture
def view():
    ly = _view_layout()
    view = pya.LayoutView(False)
    view.show_layout(ly, "", True, False)

    group = pya.LayerPropertiesNode()
    group.name = "GROUP"
    group.add_child(_layer("M1", "1/0@1"))
    group.add_child(_layer("M2", "2/0@1"))
    view.insert_layer(view.end_layers(), group)
    view.insert_layer(view.end_layers(), _layer("M3", "3/0@1", visible=False))
    return view


def _visibility(view):
    """(name, visible) for every node in layer list order."""
    out = []
    it = view.begin_layers()
    while not it.at_end():
        lp = it.current()
        out.append((lp.name, common.is_visible(lp)))
        it.next()
    return out


def test_each_layer_prop_skips_group_nodes(view):
    names = [lp.name for lp in common.each_layer_prop(view)]
    assert names == ["M1", "M2", "M3"]

    entries = layer_browser.collect_layers(view)
    assert [(e.name, e.layer, e.datatype) for e in entries] == [("M1", 1, 0), ("M2", 2, 0), ("M3", 3, 0)]


def test_active_cellview(view):
    layout, cell = common.active_cellview(view)
    assert cell.name == "TOP"
    assert layout.find_layer(3, 0) is not None


def test_isolation_inside_group(view):
    state = LayerBrowserState(layer_browser.collect_layers(view))
    state.jump(1)
    layer_browser.apply_isolation(view, state)

    assert _visibility(view) == [("GROUP", True), ("M1", False), ("M2", True), ("M3", False)]


def test_show_only_and_show_all(view):
    common.show_only(view, [])
    assert _visibility(view) == [("GROUP", True), ("M1", False), ("M2", False), ("M3", False)]

    common.set_all_visible(view, True)
    assert all(v for _, v in _visibility(view))


def test_snapshot_survives_refresh(view):
    original = _visibility(view)
    snapshot = layer_browser.VisibilitySnapshot(view)

    state = LayerBrowserState(layer_browser.collect_layers(view))
    state.jump(0)
    state.keep_current()
    state.jump(2)
    layer_browser.apply_isolation(view, state)
    assert _visibility(view) == [("GROUP", True), ("M1", True), ("M2", False), ("M3", True)]

    # a refresh rebuilds the entries and re-isolates, the snapshot stays
    state.reset(layer_browser.collect_layers(view))
    layer_browser.apply_isolation(view, state)

    snapshot.restore()
    assert _visibility(view) == original


def test_save_and_restore_visibility(view):
    saved = layer_browser.save_visibility(view)
    assert saved == {0: True, 1: True, 2: True, 3: False}

    common.set_all_visible(view, False)
    layer_browser.restore_visibility(view, saved)
    assert [v for _, v in _visibility(view)] == [True, True, True, False]


def test_visible_layer_indices(view):
    layout, _ = common.active_cellview(view)
    indices = quick_export.visible_layer_indices(view, layout)
    assert indices == [layout.find_layer(1, 0), layout.find_layer(2, 0)]


def test_collect_stats(view):
    stats = layer_stats.collect_stats(view)
    assert [(s.name, s.shapes) for s in stats] == [("M1", 1), ("M2", 1), ("M3", 1)]
    assert stats[1].area == pytest.approx(1.0)
    assert stats[1].bbox == "2.000 x 0.500"


class SpyView:
    """Records save_image_with_options calls; cellviews come from a real view."""

    def __init__(self, view=None):
        self.view = view
        self.calls = []

    def cellviews(self):
        return self.view.cellviews() if self.view is not None else 0

    def cellview(self, index):
        return self.view.cellview(index)

    def save_image_with_options(self, *args):
        self.calls.append(args)


def test_export_image_full_design_renders_cell_bbox(view, tmp_path):
    _, cell = common.active_cellview(view)
    spy = SpyView(view)
    dbox = quick_export.export_region(quick_export.REGION_FULL)

    quick_export.export_image(spy, str(tmp_path / "a.png"), dbox, 800, 600, cell=cell)
    quick_export.export_image(spy, str(tmp_path / "b.png"), dbox, 800, 600, antialias=False)

    for args in spy.calls:
        assert args[6] == pya.DBox(0, 0, 2, 1)
    assert spy.calls[0][1:3] == (800, 600)
    assert spy.calls[0][4] == 3
    assert spy.calls[1][4] == 1


def test_export_image_explicit_box(tmp_path):
    spy = SpyView()
    box = pya.DBox(1, 1, 3, 3)
    quick_export.export_image(spy, str(tmp_path / "c.png"), box, 100, 100)
    assert spy.calls[0][6] == box


def test_export_image_without_cell(tmp_path):
    with pytest.raises(ValueError):
        quick_export.export_image(SpyView(), str(tmp_path / "d.png"), None, 100, 100)

    ly = new_layout()
    empty = ly.create_cell("EMPTY")
    with pytest.raises(ValueError):
        quick_export.export_image(SpyView(), str(tmp_path / "e.png"), None, 100, 100, cell=empty)
