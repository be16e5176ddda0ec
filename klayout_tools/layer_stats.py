"""Per-layer statistics: shape count, area and bounding box.

Shapes are counted through the hierarchy below the analysed cell; area is
the sum of the individual polygon/box/path areas (overlaps are not merged).
"""

import csv
import json

from . import common

COUNT_NOTE = "Shapes and areas include all cells placed below the analysed cell."


class LayerStat:
    def __init__(self, layer, datatype, name, shapes, area, bbox, prop=None):
        self.layer = int(layer)
        self.datatype = int(datatype)
        self.name = name
        self.shapes = int(shapes)
        self.area = float(area)      # um^2
        self.bbox = bbox             # "W x H" text, "" when empty
        self.prop = prop

    def row(self):
        """Table cells in column order."""
        return [
            str(self.layer),
            str(self.datatype),
            self.name,
            common.format_number(self.shapes),
            common.format_number(self.area),
            self.bbox,
        ]

    def to_dict(self):
        return {
            "layer": self.layer,
            "datatype": self.datatype,
            "name": self.name,
            "shapes": self.shapes,
            "area_um2": self.area,
            "bbox": self.bbox,
        }


class Summary:
    def __init__(self, layers, shapes, area, design_bbox):
        self.layers = layers
        self.shapes = shapes
        self.area = area
        self.design_bbox = design_bbox


def _bbox_text(dbox):
    if dbox.empty():
        return ""
    return f"{common.format_number(dbox.width())} x {common.format_number(dbox.height())}"


def layer_stat(layout, cell, layer, datatype, name, prop=None):
    """LayerStat for one layer, None when the layout has no such layer."""
    li = common.find_layer_index(layout, layer, datatype)
    if li is None:
        return None

    dbu = layout.dbu
    count = 0
    area = 0.0
    it = cell.begin_shapes_rec(li)
    while not it.at_end():
        shape = it.shape()
        count += 1
        if shape.is_polygon() or shape.is_box() or shape.is_path():
            area += shape.polygon.transformed(it.trans()).area() * dbu * dbu
        it.next()

    bbox = cell.bbox_per_layer(li).to_dtype(dbu)
    return LayerStat(layer, datatype, name, count, area, _bbox_text(bbox), prop)


def collect_stats(view):
    """Stats for the layers listed in a view, in layer list order."""
    layout, cell = common.active_cellview(view)
    if cell is None:
        return []
    stats = []
    for lp in common.each_layer_prop(view):
        st = layer_stat(layout, cell, lp.source_layer, lp.source_datatype, common.layer_display_name(lp), lp)
        if st is not None:
            stats.append(st)
    return stats


def collect_layout_stats(layout, cell):
    """Stats for every layer of a layout (no view needed)."""
    stats = []
    for li in layout.layer_indices():
        info = layout.get_info(li)
        name = info.name or f"{info.layer}/{info.datatype}"
        stats.append(layer_stat(layout, cell, info.layer, info.datatype, name))
    return stats


def summary(stats, cell, dbu):
    design = cell.bbox().to_dtype(dbu)
    design_text = "" if design.empty() else _bbox_text(design) + " um"
    return Summary(
        len(stats),
        sum(s.shapes for s in stats),
        sum(s.area for s in stats),
        design_text,
    )


def export_csv(path, stats):
    with open(path, "w", encoding="utf-8", newline="") as f:
        w = csv.writer(f, lineterminator="\n")
        w.writerow(["Layer", "Datatype", "Name", "Shapes", "Area_um2", "Bbox"])
        for s in stats:
            w.writerow([s.layer, s.datatype, s.name, s.shapes, s.area, s.bbox])
    common.log("layer statistics exported to", path)


def export_json(path, stats):
    with open(path, "w", encoding="utf-8") as f:
        json.dump({"layers": [s.to_dict() for s in stats]}, f, indent=2)
        f.write("\n")
    common.log("layer statistics exported to", path)
