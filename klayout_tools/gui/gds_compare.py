"""GDS Compare dialog: XOR two layout files and report per-layer differences."""

import pya

from .. import common, compare
from . import widgets

LAYOUT_FILTERS = "GDS files (*.gds *.gds2 *.GDS);;OASIS files (*.oas *.oasis);;All files (*)"


class GDSCompareDialog(pya.QDialog):

    def __init__(self, parent=None, view=None):
        super().__init__(parent)
        self.view = view          # used for "visible layers only"
        self.result = None

        self.windowTitle = "GDS Compare"
        self.setMinimumWidth(500)
        self.setMinimumHeight(400)

        self._setup_ui()

    def _setup_ui(self):
        main = pya.QVBoxLayout(self)

        files = pya.QGroupBox("Files to Compare", self)
        grid = pya.QGridLayout(files)
        grid.addWidget(pya.QLabel("File 1 (Reference):", self), 0, 0)
        self.file1_edit = pya.QLineEdit(self)
        self.file1_edit.setReadOnly(True)
        grid.addWidget(self.file1_edit, 0, 1)
        grid.addWidget(widgets.button("Browse...", self, lambda: self._browse(self.file1_edit, "Select Reference GDS")), 0, 2)
        grid.addWidget(pya.QLabel("File 2 (Compare):", self), 1, 0)
        self.file2_edit = pya.QLineEdit(self)
        self.file2_edit.setReadOnly(True)
        grid.addWidget(self.file2_edit, 1, 1)
        grid.addWidget(widgets.button("Browse...", self, lambda: self._browse(self.file2_edit, "Select Compare GDS")), 1, 2)
        main.addWidget(files)

        options = pya.QGroupBox("Options", self)
        opt = pya.QVBoxLayout(options)
        self.all_layers_checkbox = pya.QCheckBox("Compare all layers", self)
        self.all_layers_checkbox.setChecked(True)
        self.all_layers_checkbox.setToolTip("When unchecked, only layers visible in the current view are compared")
        opt.addWidget(self.all_layers_checkbox)
        self.flatten_checkbox = pya.QCheckBox("Flatten before compare", self)
        opt.addWidget(self.flatten_checkbox)
        cell_row = pya.QHBoxLayout()
        cell_row.addWidget(pya.QLabel("Top cell (empty for auto):", self))
        self.cell_edit = pya.QLineEdit(self)
        cell_row.addWidget(self.cell_edit)
        opt.addLayout(cell_row)
        main.addWidget(options)

        self.progress_label = pya.QLabel("", self)
        main.addWidget(self.progress_label)
        self.progress_bar = pya.QProgressBar(self)
        self.progress_bar.setVisible(False)
        main.addWidget(self.progress_bar)

        results = pya.QGroupBox("Results", self)
        res = pya.QVBoxLayout(results)
        self.results_text = pya.QTextEdit(self)
        self.results_text.setReadOnly(True)
        self.results_text.setMinimumHeight(150)
        res.addWidget(self.results_text)
        main.addWidget(results)

        row = pya.QHBoxLayout()
        widgets.button("Compare", self, self.run_compare, row)
        self.view_btn = widgets.button("View Result", self, self.view_result, row)
        self.view_btn.setEnabled(False)
        self.export_btn = widgets.button("Export Report", self, self.export_report, row)
        self.export_btn.setEnabled(False)
        row.addStretch(1)
        widgets.button("Close", self, self.accept, row)
        main.addLayout(row)

    def _browse(self, edit, title):
        path = widgets.open_file_name(title, LAYOUT_FILTERS)
        if path is not None:
            edit.text = path

    def _progress(self, percent, text):
        self.progress_bar.setValue(int(percent))
        self.progress_label.text = text
        pya.Application.instance().process_events()

    def _selected_layers(self):
        if self.all_layers_checkbox.isChecked() or self.view is None:
            return None
        return [(lp.source_layer, lp.source_datatype) for lp in common.each_layer_prop(self.view) if common.is_visible(lp)]

    def run_compare(self):
        file1 = self.file1_edit.text
        file2 = self.file2_edit.text
        if not file1 or not file2:
            widgets.warning("Missing Files", "Please select both files to compare.")
            return

        self.results_text.clear()
        self.progress_bar.setVisible(True)
        self.view_btn.setEnabled(False)
        self.export_btn.setEnabled(False)
        try:
            self.result = compare.compare_files(
                file1,
                file2,
                top_cell=self.cell_edit.text.strip(),
                flatten=self.flatten_checkbox.isChecked(),
                layers=self._selected_layers(),
                progress=self._progress,
            )
        except Exception as e:
            self.progress_label.text = f"Error: {e}"
            widgets.critical("Compare Error", e)
            return
        finally:
            self.progress_bar.setVisible(False)

        self.results_text.setText(compare.format_report(self.result, file1, file2))
        self.progress_label.text = "Compare complete."
        self.view_btn.setEnabled(not self.result.identical)
        self.export_btn.setEnabled(True)

    def view_result(self):
        if self.result is None:
            return
        try:
            path = compare.write_result(self.result)
            pya.MainWindow.instance().load_layout(path, 1)
        except Exception as e:
            widgets.critical("View Result Error", e)
            return
        widgets.info(
            "View Result",
            "XOR result loaded in new view.\n\nShapes shown are differences between the two files.",
        )

    def export_report(self):
        path = widgets.save_file_name("Export Compare Report", "Text files (*.txt);;All files (*)")
        if path is None:
            return
        text = self.results_text.toPlainText()
        widgets.run_export(lambda p: common.write_lines(p, [text.rstrip("\n")]), path, "Report exported to {path}")
