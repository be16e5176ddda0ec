"""Quick export of the current cell (or a window of it).

Layout formats go through a fresh pya.Layout written with the matching
SaveLayoutOptions format. PNG is rendered by the view. SVG is written from
the merged, clipped layer regions with the view's layer colours.
"""

import pya

from . import common

REGION_FULL = "full"
REGION_VISIBLE = "visible"
REGION_CUSTOM = "custom"

KIND_LAYOUT = "layout"
KIND_IMAGE = "image"
KIND_SVG = "svg"


class ExportFormat:
    def __init__(self, label, ext, name, kind, writer=None):
        self.label = label
        self.ext = ext
        self.name = name
        self.kind = kind
        self.writer = writer    # SaveLayoutOptions.format for layout kinds

    @property
    def file_filter(self):
        return f"{self.name} files (*{self.ext});;All files (*)"

    @property
    def is_image(self):
        return self.kind != KIND_LAYOUT


# Combo box order
EXPORT_FORMATS = [
    ExportFormat("GDS II (.gds)", ".gds", "GDS", KIND_LAYOUT, "GDS2"),
    ExportFormat("OASIS (.oas)", ".oas", "OASIS", KIND_LAYOUT, "OASIS"),
    ExportFormat("DXF (.dxf)", ".dxf", "DXF", KIND_LAYOUT, "DXF"),
    ExportFormat("PNG Image (.png)", ".png", "PNG", KIND_IMAGE),
    ExportFormat("SVG Vector (.svg)", ".svg", "SVG", KIND_SVG),
]


def custom_box(x, y, w, h):
    """Micron box from lower-left corner and size."""
    if w <= 0 or h <= 0:
        raise ValueError(f"export area must have a positive size, got {w} x {h}")
    return pya.DBox(x, y, x + w, y + h)


def export_region(mode, view_box=None, custom=None):
    """Micron box to export; None means the whole cell without clipping."""
    if mode == REGION_FULL:
        return None
    if mode == REGION_VISIBLE:
        if view_box is None:
            raise ValueError("visible area requested without a view")
        return view_box
    if mode == REGION_CUSTOM:
        return custom_box(*custom)
    raise ValueError(f"unknown export region: {mode}")


def visible_layer_indices(view, layout):
    """Layout layer indices of the visible entries in the view's layer list."""
    out = []
    for lp in common.each_layer_prop(view):
        if not common.is_visible(lp):
            continue
        li = common.find_layer_index(layout, lp.source_layer, lp.source_datatype)
        if li is not None and li not in out:
            out.append(li)
    return out


def build_export_layout(layout, cell, layer_indices, dbox=None, flatten=False):
    """New layout holding ``cell`` (and its hierarchy) on the given layers.

    With ``dbox`` the result is clipped to that micron box.
    """
    out = pya.Layout()
    out.dbu = layout.dbu
    top = out.create_cell(cell.name)
    top.copy_tree(cell)

    keep = set()
    for li in layer_indices:
        info = layout.get_info(li)
        keep.add((int(info.layer), int(info.datatype)))
    for li in list(out.layer_indices()):
        info = out.get_info(li)
        if (int(info.layer), int(info.datatype)) not in keep:
            out.delete_layer(li)

    if dbox is not None:
        name = top.name
        clipped = out.cell(out.clip(top.cell_index(), dbox.to_itype(out.dbu)))
        top.prune_cell()
        clipped.name = name
        top = clipped

    if flatten:
        top.flatten(True)

    return out


def write_layout(path, layout, fmt):
    opts = pya.SaveLayoutOptions()
    opts.format = fmt.writer
    layout.write(path, opts)
    common.log("exported", fmt.name, "to", path)


def export_layout(path, layout, cell, layer_indices, fmt, dbox=None, flatten=False):
    out = build_export_layout(layout, cell, layer_indices, dbox, flatten)
    write_layout(path, out, fmt)
    return out


def export_image(view, path, dbox, width, height, antialias=True, cell=None):
    """Render ``dbox`` of the view to a PNG.

    With ``dbox`` None the full extent of ``cell`` (default: the view's
    active cell) is rendered. An empty target box would make the view
    render its current window instead.
    """
    target = dbox
    if target is None:
        if cell is None:
            cell = common.active_cellview(view)[1]
        if cell is None:
            raise ValueError("nothing to export: no active cell")
        target = cell.dbbox()
    if target.empty():
        raise ValueError("nothing to export: empty cell")
    view.save_image_with_options(
        path,
        int(width),
        int(height),
        0,                      # linewidth: view default
        3 if antialias else 1,  # oversampling
        0.0,                    # resolution: automatic
        target,
        False,                  # monochrome
    )
    common.log("exported PNG to", path)


def _svg_path(dpoly, flip):
    def ring(points):
        pts = ["%g,%g" % (p.x, flip - p.y) for p in points]
        return "M" + " L".join(pts) + " Z"

    parts = [ring(dpoly.each_point_hull())]
    for h in range(dpoly.holes()):
        parts.append(ring(dpoly.each_point_hole(h)))
    return " ".join(parts)


def export_svg(path, layout, cell, layers, dbox=None, width=None, height=None, background="#ffffff"):
    """Write merged layer geometry as SVG.

    layers: list of (layer_index, fill colour or None).
    Coordinates are micron; the y axis is flipped to SVG orientation.
    """
    dbu = layout.dbu
    box = dbox if dbox is not None else cell.dbbox()
    if box.empty():
        raise ValueError("nothing to export: empty cell")

    clip = pya.Region(box.to_itype(dbu))
    flip = box.top + box.bottom

    size = ""
    if width and height:
        size = f' width="{int(width)}" height="{int(height)}"'

    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        f'<svg xmlns="http://www.w3.org/2000/svg"{size} viewBox="%g %g %g %g">'
        % (box.left, flip - box.top, box.width(), box.height()),
    ]
    if background:
        lines.append(
            '<rect x="%g" y="%g" width="%g" height="%g" fill="%s"/>'
            % (box.left, flip - box.top, box.width(), box.height(), background)
        )

    for li, color in layers:
        info = layout.get_info(li)
        region = (pya.Region(cell.begin_shapes_rec(li)) & clip).merged()
        if region.is_empty():
            continue
        lines.append(
            '<g id="L%d_%d" fill="%s" fill-opacity="0.5" stroke="%s" stroke-width="0" fill-rule="evenodd">'
            % (info.layer, info.datatype, color or "#808080", color or "#808080")
        )
        for poly in region.each():
            lines.append('<path d="%s"/>' % _svg_path(poly.to_dtype(dbu), flip))
        lines.append("</g>")

    lines.append("</svg>")
    common.write_lines(path, lines)
    common.log("exported SVG to", path)
