"""Tests for klayout_tools.compare and the compare CLI command."""

import pytest

from conftest import add_box, new_layout, write_gds
from klayout_tools import cli, compare


def _pair():
    """Reference and compared layout.

    1/0 identical, 2/0 moved box, 3/0 only in the second layout.
    """
    ly1 = new_layout()
    top1 = ly1.create_cell("TOP")
    add_box(ly1, top1, 1, 0, (0, 0, 100, 100))
    add_box(ly1, top1, 2, 0, (0, 0, 100, 100))

    ly2 = new_layout()
    top2 = ly2.create_cell("TOP")
    add_box(ly2, top2, 1, 0, (0, 0, 100, 100))
    add_box(ly2, top2, 2, 0, (200, 0, 300, 100))
    add_box(ly2, top2, 3, 0, (0, 0, 50, 50))
    return ly1, ly2


def test_compare_layouts_reports_per_layer():
    ly1, ly2 = _pair()
    result = compare.compare_layouts(ly1, ly2)

    diffs = {(d.layer, d.datatype): d for d in result.diffs}
    assert sorted(diffs) == [(2, 0), (3, 0)]
    assert diffs[(2, 0)].diff_count == 2
    assert diffs[(2, 0)].note is None
    assert diffs[(3, 0)].diff_count == 1
    assert diffs[(3, 0)].note == compare.NOTE_ONLY_IN_2
    assert diffs[(3, 0)].line() == "Layer 3/0: 1 differences (Only in file 2)"
    assert result.total_diff_shapes == 3
    assert not result.identical

    top = result.result_layout.cell(compare.RESULT_TOP_CELL)
    assert top is not None
    assert result.result_layout.find_layer(1, 0) is None


def test_compare_identical():
    ly1, _ = _pair()
    ly2, _ = _pair()
    result = compare.compare_layouts(ly1, ly2)
    assert result.identical
    assert result.total_diff_shapes == 0
    assert "No differences found! Files are identical." in compare.format_report(result, "a.gds", "b.gds")


def test_compare_layer_restriction():
    ly1, ly2 = _pair()
    result = compare.compare_layouts(ly1, ly2, layers=[(1, 0), (3, 0)])
    assert [(d.layer, d.datatype) for d in result.diffs] == [(3, 0)]


def test_compare_different_dbu():
    ly1 = new_layout(0.001)
    add_box(ly1, ly1.create_cell("TOP"), 1, 0, (0, 0, 100, 100))
    ly2 = new_layout(0.002)
    add_box(ly2, ly2.create_cell("TOP"), 1, 0, (0, 0, 50, 50))
    assert compare.compare_layouts(ly1, ly2).identical


def test_progress_callback():
    ly1, ly2 = _pair()
    seen = []
    compare.compare_layouts(ly1, ly2, progress=lambda pct, text: seen.append(pct))
    assert seen == [60, 90, 100]


def test_top_cell_errors():
    ly1, ly2 = _pair()
    with pytest.raises(compare.CompareError, match="matching top cells"):
        compare.resolve_top_cells(ly1, ly2, "NOPE")

    ly1.create_cell("SECOND_TOP")
    with pytest.raises(compare.CompareError):
        compare.resolve_top_cells(ly1, ly2)

    top1, top2 = compare.resolve_top_cells(ly1, ly2, "TOP")
    assert top1.name == top2.name == "TOP"


def test_load_layout_errors(tmp_path):
    with pytest.raises(compare.CompareError, match="not specified"):
        compare.load_layout("", "Reference")
    with pytest.raises(compare.CompareError, match="not found"):
        compare.load_layout(str(tmp_path / "missing.gds"), "Reference")


def test_format_report_with_differences():
    ly1, ly2 = _pair()
    result = compare.compare_layouts(ly1, ly2)
    text = compare.format_report(result, "a.gds", "b.gds")
    lines = text.splitlines()
    assert lines[:6] == ["GDS Compare Results", "=" * 50, "", "File 1: a.gds", "File 2: b.gds", ""]
    assert lines[6] == "Differences found on 2 layers:"
    assert "  Layer 2/0: 2 differences" in lines
    assert lines[-1] == "Total difference shapes: 3"
    assert text.endswith("\n")


def test_compare_files_and_write_result(tmp_path, monkeypatch):
    ly1, ly2 = _pair()
    f1 = write_gds(ly1, tmp_path / "a.gds")
    f2 = write_gds(ly2, tmp_path / "b.gds")

    result = compare.compare_files(f1, f2)
    assert len(result.diffs) == 2

    monkeypatch.setenv("KLAYOUT_TOOLS_TMPDIR", str(tmp_path))
    path = compare.write_result(result)
    assert path == str(tmp_path / "gds_compare_result.gds")
    check = compare.load_layout(path)
    assert check.top_cell().name == compare.RESULT_TOP_CELL


def test_cli_compare_exit_codes(tmp_path, capsys):
    ly1, ly2 = _pair()
    f1 = write_gds(ly1, tmp_path / "a.gds")
    f2 = write_gds(ly2, tmp_path / "b.gds")
    report = tmp_path / "report.txt"
    xor = tmp_path / "xor.gds"

    assert cli.main(["compare", f1, f2, "--report", str(report), "--out", str(xor)]) == 1
    assert "Total difference shapes: 3" in report.read_text()
    assert xor.exists()

    assert cli.main(["compare", f1, f1]) == 0
    assert "Files are identical" in capsys.readouterr().out

    assert cli.main(["compare", f1, str(tmp_path / "missing.gds")]) == 2


def test_cli_parse_layers():
    assert cli.parse_layers("1/0, 2,10/5") == [(1, 0), (2, 0), (10, 5)]
