"""KLayout macro tools.

Database-level helpers live in the top-level modules (hierarchy, ruler,
compare, layer_browser, layer_stats, quick_export) and only need ``pya``
database classes. The Qt dialogs are in ``klayout_tools.gui`` and must be
imported inside the KLayout application.
"""

__version__ = "0.3.0"
