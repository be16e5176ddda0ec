"""Cell Hierarchy Viewer dialog."""

import pya

from .. import common, hierarchy
from . import widgets


class CellHierarchyDialog(pya.QDialog):

    def __init__(self, view, parent=None):
        super().__init__(parent)
        self.view = view
        self.roots = []

        self.windowTitle = "Cell Hierarchy Viewer"
        self.setMinimumWidth(500)
        self.setMinimumHeight(600)

        self._setup_ui()
        self.build_hierarchy()

    def _setup_ui(self):
        main = pya.QVBoxLayout(self)

        self.info_label = pya.QLabel("", self)
        main.addWidget(self.info_label)

        search = pya.QHBoxLayout()
        search.addWidget(pya.QLabel("Search:", self))
        self.search_edit = pya.QLineEdit(self)
        self.search_edit.setPlaceholderText("Filter cells by name...")
        self.search_edit.textChanged = self.filter_tree
        search.addWidget(self.search_edit)
        main.addLayout(search)

        self.tree = pya.QTreeWidget(self)
        # column 3 carries the cell index
        self.tree.setHeaderLabels(["Cell Name", "Instances", "Direct Children", "Index"])
        self.tree.setColumnHidden(3, True)
        self.tree.setColumnWidth(0, 250)
        self.tree.itemDoubleClicked = lambda item, col: self.goto_item(item)
        self.tree.itemSelectionChanged = self.update_info
        main.addWidget(self.tree)

        group = pya.QGroupBox("Selected Cell Info", self)
        grid = pya.QGridLayout(group)
        grid.addWidget(pya.QLabel("Cell Name:", self), 0, 0)
        self.cell_name_label = widgets.bold_label("", self)
        grid.addWidget(self.cell_name_label, 0, 1)
        grid.addWidget(pya.QLabel("Bounding Box:", self), 1, 0)
        self.bbox_label = pya.QLabel("", self)
        grid.addWidget(self.bbox_label, 1, 1)
        grid.addWidget(pya.QLabel("Total Instances:", self), 2, 0)
        self.instances_label = pya.QLabel("", self)
        grid.addWidget(self.instances_label, 2, 1)
        grid.addWidget(pya.QLabel("Hierarchy Depth:", self), 3, 0)
        self.depth_label = pya.QLabel("", self)
        grid.addWidget(self.depth_label, 3, 1)
        main.addWidget(group)

        row = pya.QHBoxLayout()
        widgets.button("Go To Cell", self, self.goto_selected, row)
        widgets.button("Expand All", self, self.tree.expandAll, row)
        widgets.button("Collapse All", self, self.tree.collapseAll, row)
        widgets.button("Export", self, self.export, row)
        row.addStretch(1)
        widgets.button("Close", self, self.accept, row)
        main.addLayout(row)

    # ------------------------------------------------------------------

    def build_hierarchy(self):
        self.tree.clear()
        self.roots = []

        layout, top = common.active_cellview(self.view)
        if top is None:
            self.info_label.text = "No layout loaded"
            return

        self.counts = hierarchy.instance_counts(layout)
        self.info_label.text = f"Design: {top.name} | Total cells: {layout.cells()}"

        root = hierarchy.build_tree(layout, top, self.counts)
        self.roots = [root]
        item = self._make_item(root)
        self.tree.addTopLevelItem(item)
        item.setExpanded(True)

    def _make_item(self, node):
        item = pya.QTreeWidgetItem()
        item.setText(0, node.name)
        item.setText(1, str(node.instances))
        item.setText(2, str(node.child_count))
        item.setText(3, str(node.cell_index))
        for child in node.children:
            item.addChild(self._make_item(child))
        return item

    def _cell_of(self, item):
        layout, _ = common.active_cellview(self.view)
        if layout is None or not item.text(3):
            return None
        return layout.cell(int(item.text(3)))

    def filter_tree(self, text):
        for i in range(widgets.value(self.tree.topLevelItemCount)):
            hierarchy.apply_filter(self.tree.topLevelItem(i), text)

    def update_info(self):
        items = self.tree.selectedItems()
        if not items:
            return
        cell = self._cell_of(items[0])
        if cell is None:
            return
        layout, _ = common.active_cellview(self.view)

        self.cell_name_label.text = cell.name
        dbox = cell.bbox().to_dtype(layout.dbu)
        text = common.dbox_text(dbox)
        self.bbox_label.text = text if dbox.empty() else text + " um"
        self.instances_label.text = str(self.counts.get(int(cell.cell_index()), 0))
        self.depth_label.text = str(hierarchy.hierarchy_depth(cell))

    def goto_selected(self):
        items = self.tree.selectedItems()
        if items:
            self.goto_item(items[0])

    def goto_item(self, item):
        cell = self._cell_of(item)
        if cell is None:
            return
        layout, _ = common.active_cellview(self.view)
        dbox = cell.bbox().to_dtype(layout.dbu)
        if not dbox.empty():
            self.view.zoom_box(common.zoom_margin_box(dbox))

    def export(self):
        if not self.roots:
            return
        path = widgets.save_file_name(
            "Export Cell Hierarchy",
            "Text files (*.txt);;CSV files (*.csv);;All files (*)",
        )
        if path is None:
            return
        widgets.run_export(
            lambda p: hierarchy.export_hierarchy(p, self.roots),
            path,
            "Hierarchy exported to {path}",
        )
