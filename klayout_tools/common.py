"""Shared helpers: console/status output, number formatting, view access.

Everything that touches the GUI (MainWindow, LayoutView) is best-effort so
that the database-level helpers keep working in headless runs
(``klayout -b`` or the ``klayout`` Python wheel).
"""

import pya

from . import config


# -----------------------------------------------------------------------------
# Output
# -----------------------------------------------------------------------------


def log(*parts):
    """Print a prefixed line to the macro console (stdout when headless)."""
    print(config.LOG_PREFIX, *parts, flush=True)


def status(msg, timeout=config.STATUS_TIMEOUT):
    """Best-effort MainWindow status-bar message; no-op without a GUI."""
    try:
        mw = pya.MainWindow.instance()
    except Exception:
        return
    if mw is None:
        return
    try:
        mw.message(str(msg), int(timeout))
    except Exception:
        pass


# -----------------------------------------------------------------------------
# Formatting
# -----------------------------------------------------------------------------


def format_number(value):
    """Thousands separators; floats keep three decimals."""
    if isinstance(value, float):
        return f"{value:,.3f}"
    return f"{int(value):,}"


def dbox_text(dbox, empty="Empty"):
    """'W x H' (micron, three decimals) for a DBox."""
    if dbox is None or dbox.empty():
        return empty
    return f"{dbox.width():.3f} x {dbox.height():.3f}"


def zoom_margin_box(dbox, fraction=None):
    """DBox enlarged by ``fraction`` of its extent on each axis."""
    if fraction is None:
        fraction = config.ZOOM_MARGIN
    return dbox.enlarged(dbox.width() * fraction, dbox.height() * fraction)


def write_lines(path, lines):
    with open(path, "w", encoding="utf-8", newline="\n") as f:
        for line in lines:
            f.write(line + "\n")


# -----------------------------------------------------------------------------
# Layout / view access
# -----------------------------------------------------------------------------


def active_cellview(view):
    """Return (layout, cell) of cellview 0, or (None, None)."""
    if view is None:
        return None, None
    try:
        if view.cellviews() < 1:
            return None, None
        cv = view.cellview(0)
    except Exception:
        return None, None
    if cv is None or not cv.is_valid():
        return None, None
    return cv.layout(), cv.cell


def find_layer_index(layout, layer, datatype):
    """Layer index for layer/datatype or None when the layout lacks it."""
    li = layout.find_layer(int(layer), int(datatype))
    if li is None or not layout.is_valid_layer(li):
        return None
    return int(li)


def _flag(lp, name):
    # LayerProperties flags are properties in most builds, methods taking
    # the "real" argument in others.
    v = getattr(lp, name, True)
    if callable(v):
        v = v(True)
    return bool(v)


def is_visible(lp):
    return _flag(lp, "visible")


def each_layer_prop(view):
    """Yield the valid leaf layer property nodes of a view, in list order."""
    it = view.begin_layers()
    while not it.at_end():
        lp = it.current()
        if _flag(lp, "valid") and not lp.has_children():
            yield lp
        it.next()


def set_all_visible(view, visible):
    it = view.begin_layers()
    while not it.at_end():
        it.current().visible = bool(visible)
        it.next()


def show_only(view, props):
    """Hide every layer except ``props``.

    Group nodes stay visible: a hidden group hides its members regardless
    of their own visibility.
    """
    it = view.begin_layers()
    while not it.at_end():
        lp = it.current()
        lp.visible = bool(lp.has_children())
        it.next()
    for lp in props:
        lp.visible = True


def layer_display_name(lp):
    return lp.name if lp.name else str(lp.source)


def fill_color(lp):
    """'#rrggbb' fill colour of a layer property node, None when unknown."""
    try:
        c = int(lp.eff_fill_color(True))
    except Exception:
        return None
    return "#%06x" % (c & 0xFFFFFF)
