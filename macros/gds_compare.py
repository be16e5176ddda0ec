"""KLayout macro: GDS Compare.

Registers the tool menu entries (once) and opens the tool.
"""

from klayout_tools.gui import menu

menu.register_all()
menu.show_gds_compare()
