"""Two-file layout comparison based on per-layer XOR.

For every layer of the reference layout the recursive shapes below the top
cell are XOR'ed against the same layer/datatype of the compared layout.
Layers that only exist in the compared layout are reported entirely as
differences. Non-empty XOR results are collected in a result layout
(top cell ``XOR_RESULT``) that can be written and opened for inspection.
"""

import os

import pya

from . import common, config

RESULT_TOP_CELL = "XOR_RESULT"
NOTE_ONLY_IN_2 = "Only in file 2"


class CompareError(Exception):
    """Comparison cannot run (missing file, unmatched top cell, read error)."""


class LayerDiff:
    def __init__(self, layer, datatype, diff_count, note=None):
        self.layer = int(layer)
        self.datatype = int(datatype)
        self.diff_count = int(diff_count)
        self.note = note

    def line(self):
        note = f" ({self.note})" if self.note else ""
        return f"Layer {self.layer}/{self.datatype}: {self.diff_count} differences{note}"


class CompareResult:
    def __init__(self, result_layout, diffs=None):
        self.result_layout = result_layout
        self.diffs = list(diffs or [])

    @property
    def total_diff_shapes(self):
        return sum(d.diff_count for d in self.diffs)

    @property
    def identical(self):
        return not self.diffs


def load_layout(path, label="Layout"):
    if not path:
        raise CompareError(f"{label} file not specified")
    if not os.path.exists(path):
        raise CompareError(f"{label} file not found: {path}")
    layout = pya.Layout()
    try:
        layout.read(path)
    except Exception as e:
        raise CompareError(f"Failed to read {path}: {e}") from e
    return layout


def resolve_top_cells(layout1, layout2, name=""):
    """Top cells to compare; ``name`` empty means the single top cell of each."""
    try:
        if name:
            top1 = layout1.cell(name)
            top2 = layout2.cell(name)
        else:
            top1 = layout1.top_cell()
            top2 = layout2.top_cell()
    except Exception as e:
        # top_cell() refuses layouts with several top cells
        raise CompareError(f"Could not determine top cell: {e}") from e
    if top1 is None or top2 is None:
        raise CompareError("Could not find matching top cells.")
    return top1, top2


def _region(cell, li, mag=1.0):
    region = pya.Region(cell.begin_shapes_rec(li))
    if mag != 1.0:
        region.transform(pya.ICplxTrans(mag, 0.0, False, 0, 0))
    return region


def compare_layouts(layout1, layout2, top_cell="", flatten=False, layers=None, progress=None):
    """XOR ``layout2`` against the reference ``layout1``.

    layers: optional collection of (layer, datatype) to restrict the compare.
    progress: optional callable(percent, text).

    Flattening modifies the given layouts.
    """

    def report(percent, text):
        if progress is not None:
            progress(percent, text)

    top1, top2 = resolve_top_cells(layout1, layout2, top_cell)
    wanted = None if layers is None else {(int(l), int(d)) for l, d in layers}

    result_layout = pya.Layout()
    result_layout.dbu = layout1.dbu
    result_top = result_layout.create_cell(RESULT_TOP_CELL)

    if flatten:
        top1.flatten(True)
        top2.flatten(True)

    # shapes of layout2 are brought into layout1's database unit
    mag = layout2.dbu / layout1.dbu
    if abs(mag - 1.0) > 1e-9:
        common.log("database units differ:", layout1.dbu, "vs", layout2.dbu)
    else:
        mag = 1.0

    report(60, "Comparing layouts...")

    diffs = []
    for li1 in layout1.layer_indices():
        info = layout1.get_info(li1)
        key = (int(info.layer), int(info.datatype))
        if wanted is not None and key not in wanted:
            continue

        region1 = _region(top1, li1)
        li2 = common.find_layer_index(layout2, *key)
        region2 = _region(top2, li2, mag) if li2 is not None else pya.Region()

        xor = region1 ^ region2
        if xor.is_empty():
            continue

        result_top.shapes(result_layout.layer(*key)).insert(xor)
        diffs.append(LayerDiff(key[0], key[1], xor.count()))

    report(90, "Checking layers only in file 2...")

    for li2 in layout2.layer_indices():
        info = layout2.get_info(li2)
        key = (int(info.layer), int(info.datatype))
        if wanted is not None and key not in wanted:
            continue
        if common.find_layer_index(layout1, *key) is not None:
            continue
        region2 = _region(top2, li2, mag)
        if region2.is_empty():
            continue
        result_top.shapes(result_layout.layer(*key)).insert(region2)
        diffs.append(LayerDiff(key[0], key[1], region2.count(), NOTE_ONLY_IN_2))

    report(100, "Compare complete.")
    return CompareResult(result_layout, diffs)


def compare_files(file1, file2, top_cell="", flatten=False, layers=None, progress=None):
    if progress is not None:
        progress(10, "Loading files...")
    layout1 = load_layout(file1, "Reference")
    if progress is not None:
        progress(30, "Loading files...")
    layout2 = load_layout(file2, "Compare")
    if progress is not None:
        progress(50, "Loading files...")
    result = compare_layouts(layout1, layout2, top_cell, flatten, layers, progress)
    common.log("compare", file1, "vs", file2, "->", len(result.diffs), "layer(s) differ")
    return result


def format_report(result, file1, file2):
    lines = [
        "GDS Compare Results",
        "=" * 50,
        "",
        f"File 1: {file1}",
        f"File 2: {file2}",
        "",
    ]
    if result.identical:
        lines.append("No differences found! Files are identical.")
    else:
        lines.append(f"Differences found on {len(result.diffs)} layers:")
        lines.append("")
        for d in result.diffs:
            lines.append("  " + d.line())
        lines.append("")
        lines.append(f"Total difference shapes: {result.total_diff_shapes}")
    return "\n".join(lines) + "\n"


def write_result(result, path=None):
    """Write the XOR layout; defaults to the temp dir. Returns the path."""
    if path is None:
        path = os.path.join(config.tmp_dir(), config.COMPARE_RESULT_NAME)
    result.result_layout.write(path)
    common.log("XOR result written to", path)
    return path
