"""Layer Statistics dialog: per-layer shape count, area and extent."""

import pya

from .. import common, layer_stats
from . import widgets

COLUMNS = ["Layer", "Datatype", "Name", "Shapes", "Area (um²)", "Bbox (um)"]


class LayerStatsDialog(pya.QDialog):

    def __init__(self, view, parent=None):
        super().__init__(parent)
        self.view = view
        self.stats = []

        self.windowTitle = "Layer Statistics"
        self.setMinimumWidth(700)
        self.setMinimumHeight(500)

        self._setup_ui()
        self.calculate_stats()

    def _setup_ui(self):
        main = pya.QVBoxLayout(self)

        self.info_label = pya.QLabel("Analyzing layers...", self)
        main.addWidget(self.info_label)

        self.table = pya.QTableWidget(self)
        self.table.setColumnCount(len(COLUMNS))
        self.table.setHorizontalHeaderLabels(COLUMNS)
        self.table.horizontalHeader().setStretchLastSection(True)
        self.table.horizontalHeaderItem(3).setToolTip(layer_stats.COUNT_NOTE)
        self.table.horizontalHeaderItem(4).setToolTip(layer_stats.COUNT_NOTE)
        self.table.setSelectionBehavior(pya.QAbstractItemView.SelectRows)
        self.table.cellDoubleClicked = lambda row, col: self.goto_row(row)
        main.addWidget(self.table)

        group = pya.QGroupBox("Summary", self)
        grid = pya.QGridLayout(group)
        grid.addWidget(pya.QLabel("Total Layers:", self), 0, 0)
        self.total_layers_label = widgets.bold_label("0", self)
        grid.addWidget(self.total_layers_label, 0, 1)
        grid.addWidget(pya.QLabel("Total Shapes:", self), 0, 2)
        self.total_shapes_label = widgets.bold_label("0", self)
        grid.addWidget(self.total_shapes_label, 0, 3)
        grid.addWidget(pya.QLabel("Total Area:", self), 1, 0)
        self.total_area_label = widgets.bold_label("0 um²", self)
        grid.addWidget(self.total_area_label, 1, 1)
        grid.addWidget(pya.QLabel("Design Bbox:", self), 1, 2)
        self.design_bbox_label = widgets.bold_label("", self)
        grid.addWidget(self.design_bbox_label, 1, 3)
        main.addWidget(group)

        row = pya.QHBoxLayout()
        widgets.button("Export CSV", self, self.export_csv, row)
        widgets.button("Export JSON", self, self.export_json, row)
        widgets.button("Refresh", self, self.calculate_stats, row)
        row.addStretch(1)
        widgets.button("Close", self, self.accept, row)
        main.addLayout(row)

    def calculate_stats(self):
        self.stats = []
        self.table.setSortingEnabled(False)
        self.table.setRowCount(0)

        layout, cell = common.active_cellview(self.view)
        if cell is None:
            self.info_label.text = "No layout loaded"
            return

        self.stats = layer_stats.collect_stats(self.view)
        self.table.setRowCount(len(self.stats))
        for r, st in enumerate(self.stats):
            for c, text in enumerate(st.row()):
                self.table.setItem(r, c, pya.QTableWidgetItem(text))

        s = layer_stats.summary(self.stats, cell, layout.dbu)
        self.total_layers_label.text = str(s.layers)
        self.total_shapes_label.text = common.format_number(s.shapes)
        self.total_area_label.text = f"{common.format_number(s.area)} um²"
        self.design_bbox_label.text = s.design_bbox

        self.info_label.text = f"Analysis complete. {layer_stats.COUNT_NOTE} Double-click a row to navigate to that layer."
        self.table.resizeColumnsToContents()
        self.table.setSortingEnabled(True)

    def goto_row(self, row):
        # rows may be re-sorted; identify the layer by its layer/datatype cells
        layer_item = self.table.item(row, 0)
        dt_item = self.table.item(row, 1)
        if layer_item is None or dt_item is None:
            return
        key = (int(layer_item.text()), int(dt_item.text()))
        st = next((s for s in self.stats if (s.layer, s.datatype) == key), None)
        if st is None:
            return

        common.show_only(self.view, [st.prop])

        layout, cell = common.active_cellview(self.view)
        if cell is None:
            return
        li = common.find_layer_index(layout, st.layer, st.datatype)
        if li is None:
            return
        dbox = cell.bbox_per_layer(li).to_dtype(layout.dbu)
        if not dbox.empty():
            self.view.zoom_box(common.zoom_margin_box(dbox))

    def _export(self, title, filters, writer):
        if not self.stats:
            return
        path = widgets.save_file_name(title, filters)
        if path is None:
            return
        widgets.run_export(lambda p: writer(p, self.stats), path, "Statistics exported to {path}")

    def export_csv(self):
        self._export("Export Statistics to CSV", "CSV files (*.csv);;All files (*)", layer_stats.export_csv)

    def export_json(self):
        self._export("Export Statistics to JSON", "JSON files (*.json);;All files (*)", layer_stats.export_json)
