"""KLayout macro: Cell Hierarchy Viewer.

Registers the tool menu entries (once) and opens the tool.
"""

from klayout_tools.gui import menu

menu.register_all()
menu.show_cell_hierarchy()
