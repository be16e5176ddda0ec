"""KLayout macro: PDK Layer Browser.

Registers the tool menu entries (once) and opens the tool.
"""

from klayout_tools.gui import menu

menu.register_all()
menu.show_layer_browser()
