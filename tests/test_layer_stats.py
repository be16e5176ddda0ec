"""Tests for klayout_tools.layer_stats and the stats / hierarchy CLI commands."""

import json

import pytest

from conftest import write_gds
from klayout_tools import cli, layer_stats


def test_layer_stat_counts_through_hierarchy(hier_layout):
    top = hier_layout.cell("TOP")

    st = layer_stats.layer_stat(hier_layout, top, 1, 0, "M1")
    assert st.shapes == 3
    assert st.area == pytest.approx(4.0)
    assert st.bbox == "5.000 x 2.000"

    # 3x1 array in TOP plus one B in each of the two A placements
    st = layer_stats.layer_stat(hier_layout, top, 2, 0, "M2")
    assert st.shapes == 5
    assert st.area == pytest.approx(1.25)

    # the dialog states the hierarchy-wide counting
    assert "below" in layer_stats.COUNT_NOTE


def test_layer_stat_missing_layer(hier_layout):
    assert layer_stats.layer_stat(hier_layout, hier_layout.cell("TOP"), 9, 9, "nope") is None


def test_empty_layer_has_blank_bbox(hier_layout):
    hier_layout.layer(7, 0)
    st = layer_stats.layer_stat(hier_layout, hier_layout.cell("TOP"), 7, 0, "empty")
    assert st.shapes == 0
    assert st.area == 0.0
    assert st.bbox == ""


def test_collect_layout_stats_and_summary(hier_layout):
    top = hier_layout.cell("TOP")
    stats = layer_stats.collect_layout_stats(hier_layout, top)
    assert [(s.layer, s.datatype, s.name) for s in stats] == [(1, 0, "1/0"), (2, 0, "2/0")]

    total = layer_stats.summary(stats, top, hier_layout.dbu)
    assert total.layers == 2
    assert total.shapes == 8
    assert total.area == pytest.approx(5.25)
    assert total.design_bbox == "5.000 x 5.500 um"


def test_row_formatting():
    st = layer_stats.LayerStat(1, 0, "M1", 12345, 1234.5, "1.000 x 2.000")
    assert st.row() == ["1", "0", "M1", "12,345", "1,234.500", "1.000 x 2.000"]


def test_exports(hier_layout, tmp_path):
    stats = layer_stats.collect_layout_stats(hier_layout, hier_layout.cell("TOP"))

    csv_path = tmp_path / "stats.csv"
    layer_stats.export_csv(str(csv_path), stats)
    lines = csv_path.read_text().splitlines()
    assert lines[0] == "Layer,Datatype,Name,Shapes,Area_um2,Bbox"
    assert lines[1].startswith("1,0,1/0,3,")
    assert len(lines) == 3

    json_path = tmp_path / "stats.json"
    layer_stats.export_json(str(json_path), stats)
    data = json.loads(json_path.read_text())
    assert [d["shapes"] for d in data["layers"]] == [3, 5]
    assert set(data["layers"][0]) == {"layer", "datatype", "name", "shapes", "area_um2", "bbox"}


def test_cli_stats_and_hierarchy(hier_layout, tmp_path, capsys):
    gds = write_gds(hier_layout, tmp_path / "hier.gds")
    out_json = tmp_path / "s.json"

    assert cli.main(["stats", gds, "--json", str(out_json)]) == 0
    assert "shapes=8" in capsys.readouterr().out
    assert out_json.exists()

    out_txt = tmp_path / "h.txt"
    assert cli.main(["hierarchy", gds, "--out", str(out_txt)]) == 0
    lines = out_txt.read_text().splitlines()
    assert lines[3] == "TOP (instances: 0, children: 2)"

    assert cli.main(["hierarchy", gds, "--top-cell", "NOPE"]) == 2
