"""Settings for the macro tools.

Every value can be overridden through the environment of the KLayout
process, e.g. ``KLAYOUT_TOOLS_SHORTCUT_LAYER_BROWSER=Ctrl+Alt+L``.
"""

import os
import tempfile

LOG_PREFIX = "[klayout-tools]"

# Menu anchor the actions are inserted before.
MENU_ANCHOR = os.environ.get("KLAYOUT_TOOLS_MENU_ANCHOR", "tools_menu.end")


def menu_item_path(key, anchor=None):
    """Menu path of a tool action inserted at ``anchor``.

    "tools_menu.end" -> "tools_menu.<key>_action"
    """
    if anchor is None:
        anchor = MENU_ANCHOR
    menu = anchor.rpartition(".")[0]
    name = f"{key}_action"
    return f"{menu}.{name}" if menu else name


_DEFAULT_SHORTCUTS = {
    "cell_hierarchy": "Ctrl+Shift+H",
    "design_ruler": "Ctrl+Shift+R",
    "gds_compare": "Ctrl+Shift+C",
    "layer_browser": "Ctrl+Shift+L",
    "layer_stats": "Ctrl+Shift+S",
    "quick_export": "Ctrl+Shift+E",
}


def shortcut(tool):
    """Keyboard shortcut for a tool key (empty string disables it)."""
    env = os.environ.get("KLAYOUT_TOOLS_SHORTCUT_" + tool.upper())
    if env is not None:
        return env
    return _DEFAULT_SHORTCUTS.get(tool, "")


def _env_float(name, default):
    try:
        return float(os.environ.get(name, default))
    except ValueError:
        return float(default)


# Fraction of the width/height added on each side for "go to" zooms.
ZOOM_MARGIN = _env_float("KLAYOUT_TOOLS_ZOOM_MARGIN", 0.1)

# Design ruler
RULER_GRID_DEFAULT = _env_float("KLAYOUT_TOOLS_RULER_GRID", 0.01)
RULER_GRID_MIN = 0.001
RULER_GRID_MAX = 100.0

# Status bar timeouts (ms)
STATUS_TIMEOUT = 10000
STATUS_TIMEOUT_SHORT = 5000

# Plugin factory priorities (toolbar order)
RULER_PLUGIN_PRIORITY = -800
LAYER_BROWSER_PLUGIN_PRIORITY = -900


def tmp_dir():
    """Directory for temporary result files (compare XOR layout)."""
    return os.environ.get("KLAYOUT_TOOLS_TMPDIR") or tempfile.gettempdir()


COMPARE_RESULT_NAME = "gds_compare_result.gds"
