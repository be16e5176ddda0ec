"""Menu and toolbar registration for all tools.

Registration is idempotent: an action is only inserted when its menu entry
does not exist yet, so re-running the autorun macro is harmless.
"""

import pya

from .. import common, config
from . import widgets
from .cell_hierarchy import CellHierarchyDialog
from .design_ruler import RulerPluginFactory, show_usage
from .gds_compare import GDSCompareDialog
from .layer_browser import LayerBrowserDialog, LayerBrowserPluginFactory
from .layer_stats import LayerStatsDialog
from .quick_export import QuickExportDialog

# Keep references: actions and plugin factories are released by Python
# otherwise.
_ACTIONS = {}
_FACTORIES = []


def main_window():
    return pya.Application.instance().main_window()


def register_action(key, title, callback, shortcut=None):
    mw = main_window()
    menu = mw.menu()
    path = config.menu_item_path(key)
    if menu.is_valid(path):
        return _ACTIONS.get(key)

    action = pya.Action()
    action.title = title
    action.shortcut = config.shortcut(key) if shortcut is None else shortcut
    action.on_triggered = callback
    menu.insert_item(config.MENU_ANCHOR, f"{key}_action", action)
    _ACTIONS[key] = action
    return action


def with_view(factory):
    """Run ``factory(view, parent).exec_()`` for the current view, or warn."""
    mw = main_window()
    view = mw.current_view()
    if view is None:
        widgets.warning("No View", "Please open a layout first.")
        return None
    dialog = factory(view, mw)
    dialog.exec_()
    return dialog


def show_cell_hierarchy():
    return with_view(CellHierarchyDialog)


def show_design_ruler_help():
    if main_window().current_view() is None:
        widgets.warning("No View", "Please open a layout first.")
        return
    show_usage()


def show_gds_compare():
    mw = main_window()
    dialog = GDSCompareDialog(mw, mw.current_view())
    dialog.exec_()
    return dialog


def show_layer_browser():
    return with_view(LayerBrowserDialog)


def show_layer_stats():
    return with_view(LayerStatsDialog)


def show_quick_export():
    return with_view(QuickExportDialog)


def register_plugins():
    if _FACTORIES:
        return
    _FACTORIES.append(RulerPluginFactory())
    _FACTORIES.append(LayerBrowserPluginFactory())


def register_all():
    register_plugins()
    register_action("cell_hierarchy", "Cell Hierarchy", show_cell_hierarchy)
    register_action("design_ruler", "Design Ruler", show_design_ruler_help)
    register_action("gds_compare", "GDS Compare", show_gds_compare)
    register_action("layer_browser", "Layer Browser", show_layer_browser)
    register_action("layer_stats", "Layer Statistics", show_layer_stats)
    register_action("quick_export", "Quick Export", show_quick_export)
    common.log("tools registered")
