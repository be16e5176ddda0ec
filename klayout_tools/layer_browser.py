"""Layer browser: step through the layer list one layer at a time.

LayerBrowserState holds the navigation state (current layer, pinned
"kept" layers, search filter) and is independent of Qt. The view helpers
below apply it to a LayoutView's layer properties.
"""

import csv

from . import common


class LayerEntry:
    def __init__(self, name, layer, datatype, prop=None):
        self.name = name
        self.layer = int(layer)
        self.datatype = int(datatype)
        self.prop = prop    # LayerPropertiesNodeRef of the view (None headless)


def collect_layers(view):
    return [
        LayerEntry(common.layer_display_name(lp), lp.source_layer, lp.source_datatype, lp)
        for lp in common.each_layer_prop(view)
    ]


class LayerBrowserState:
    def __init__(self, entries=None):
        self.entries = []
        self.current = 0
        self.kept = []            # layer indices, in pin order
        self.isolate = True
        self.filter_text = ""
        self.filtered = []        # list row -> layer index
        self.reset(entries or [])

    def reset(self, entries):
        self.entries = list(entries)
        if self.current >= len(self.entries):
            self.current = 0
        self.kept = [i for i in self.kept if i < len(self.entries)]
        self.set_filter(self.filter_text)

    def __len__(self):
        return len(self.entries)

    @property
    def current_entry(self):
        if not self.entries:
            return None
        return self.entries[self.current]

    def display_name(self, index):
        e = self.entries[index]
        return f"{index}: {e.name} ({e.layer}/{e.datatype})"

    def set_filter(self, text):
        """Recompute the filtered rows; returns their display names."""
        self.filter_text = text
        needle = text.lower()
        self.filtered = []
        names = []
        for i in range(len(self.entries)):
            name = self.display_name(i)
            if not needle or needle in name.lower():
                self.filtered.append(i)
                names.append(name)
        return names

    def row_of(self, index):
        """Filtered list row of a layer index, None when filtered out."""
        try:
            return self.filtered.index(index)
        except ValueError:
            return None

    def next(self):
        if not self.entries:
            return False
        self.current = (self.current + 1) % len(self.entries)
        return True

    def prev(self):
        if not self.entries:
            return False
        self.current = (self.current - 1) % len(self.entries)
        return True

    def jump(self, index):
        if not self.entries or index < 0 or index >= len(self.entries):
            return False
        self.current = index
        return True

    def select_row(self, row):
        if row < 0 or row >= len(self.filtered):
            return False
        self.current = self.filtered[row]
        return True

    def keep_current(self):
        """Pin the current layer; False when empty or already kept."""
        if not self.entries or self.current in self.kept:
            return False
        self.kept.append(self.current)
        return True

    def clear_kept(self):
        self.kept = []

    def remove_kept(self, row):
        """Unpin by kept-list row; returns the removed layer index or None."""
        if row < 0 or row >= len(self.kept):
            return None
        return self.kept.pop(row)

    def kept_names(self):
        return [f"{i}: {self.entries[i].name}" for i in self.kept if 0 <= i < len(self.entries)]

    def visible_indices(self):
        """Layer indices visible in isolate mode: current + kept."""
        if not self.entries:
            return set()
        shown = {self.current}
        shown.update(i for i in self.kept if 0 <= i < len(self.entries))
        return shown


# -----------------------------------------------------------------------------
# View side
# -----------------------------------------------------------------------------


def save_visibility(view):
    """Visibility of every layer node, by position in the layer list."""
    saved = {}
    it = view.begin_layers()
    index = 0
    while not it.at_end():
        saved[index] = common.is_visible(it.current())
        it.next()
        index += 1
    return saved


def restore_visibility(view, saved):
    it = view.begin_layers()
    index = 0
    while not it.at_end():
        if index in saved:
            it.current().visible = saved[index]
        it.next()
        index += 1


class VisibilitySnapshot:
    """Layer visibility of a view as it was when the browser opened.

    Taken once per dialog; refreshing the layer list keeps it.
    """

    def __init__(self, view):
        self.view = view
        self.saved = save_visibility(view)

    def restore(self):
        restore_visibility(self.view, self.saved)


def apply_isolation(view, state):
    """Show only the current and kept layers."""
    if not state.entries:
        return
    common.show_only(view, [state.entries[i].prop for i in sorted(state.visible_indices())])


def count_shapes(layout, cell, layer, datatype):
    """Shapes on layer/datatype in ``cell`` and below; 0 for unknown layers."""
    li = common.find_layer_index(layout, layer, datatype)
    if li is None or cell is None:
        return 0
    n = 0
    it = cell.begin_shapes_rec(li)
    while not it.at_end():
        n += 1
        it.next()
    return n


def layer_bbox(layout, cell, layer, datatype):
    """Micron bbox of a layer in ``cell``; None when missing or empty."""
    li = common.find_layer_index(layout, layer, datatype)
    if li is None or cell is None:
        return None
    box = cell.bbox_per_layer(li)
    if box.empty():
        return None
    return box.to_dtype(layout.dbu)


def zoom_to_layer(view, layout, cell, entry):
    box = layer_bbox(layout, cell, entry.layer, entry.datatype)
    if box is not None:
        view.zoom_box(common.zoom_margin_box(box))


def export_layer_list(path, entries, shape_counter):
    """CSV of the layer list; ``shape_counter(entry)`` gives the shape count."""
    with open(path, "w", encoding="utf-8", newline="") as f:
        w = csv.writer(f, lineterminator="\n", quoting=csv.QUOTE_MINIMAL)
        w.writerow(["Index", "Name", "Layer", "Datatype", "Shapes"])
        for i, e in enumerate(entries):
            w.writerow([i, e.name, e.layer, e.datatype, shape_counter(e)])
    common.log("layer list exported to", path)
