"""Quick Export dialog: GDS / OASIS / DXF / PNG / SVG of the current cell."""

import pya

from .. import common, quick_export
from ..quick_export import EXPORT_FORMATS, KIND_IMAGE, KIND_LAYOUT, KIND_SVG
from . import widgets


def _spin(parent, lo, hi, val=None, decimals=3):
    s = pya.QDoubleSpinBox(parent)
    s.setRange(lo, hi)
    s.setDecimals(decimals)
    if val is not None:
        s.setValue(val)
    return s


class QuickExportDialog(pya.QDialog):

    def __init__(self, view, parent=None):
        super().__init__(parent)
        self.view = view

        self.windowTitle = "Quick Export"
        self.setMinimumWidth(450)
        self.setMinimumHeight(400)

        self._setup_ui()
        self.update_options(0)

    def _setup_ui(self):
        main = pya.QVBoxLayout(self)

        tg = pya.QGroupBox("Export Type", self)
        tl = pya.QVBoxLayout(tg)
        self.type_combo = pya.QComboBox(self)
        for fmt in EXPORT_FORMATS:
            self.type_combo.addItem(fmt.label)
        self.type_combo.currentIndexChanged = self.update_options
        tl.addWidget(self.type_combo)
        main.addWidget(tg)

        rg = pya.QGroupBox("Region", self)
        rl = pya.QVBoxLayout(rg)
        self.full_radio = pya.QRadioButton("Full design", self)
        self.full_radio.setChecked(True)
        rl.addWidget(self.full_radio)
        self.visible_radio = pya.QRadioButton("Visible area only", self)
        rl.addWidget(self.visible_radio)
        self.custom_radio = pya.QRadioButton("Custom area (um):", self)
        rl.addWidget(self.custom_radio)
        grid = pya.QGridLayout()
        grid.addWidget(pya.QLabel("X:", self), 0, 0)
        self.x_spin = _spin(self, -1e6, 1e6)
        grid.addWidget(self.x_spin, 0, 1)
        grid.addWidget(pya.QLabel("Y:", self), 0, 2)
        self.y_spin = _spin(self, -1e6, 1e6)
        grid.addWidget(self.y_spin, 0, 3)
        grid.addWidget(pya.QLabel("Width:", self), 1, 0)
        self.w_spin = _spin(self, 0.001, 1e6, 100)
        grid.addWidget(self.w_spin, 1, 1)
        grid.addWidget(pya.QLabel("Height:", self), 1, 2)
        self.h_spin = _spin(self, 0.001, 1e6, 100)
        grid.addWidget(self.h_spin, 1, 3)
        rl.addLayout(grid)
        main.addWidget(rg)

        self.layout_options = pya.QGroupBox("Layout Options", self)
        lo = pya.QVBoxLayout(self.layout_options)
        self.flatten_checkbox = pya.QCheckBox("Flatten hierarchy", self)
        lo.addWidget(self.flatten_checkbox)
        self.visible_layers_checkbox = pya.QCheckBox("Export visible layers only", self)
        self.visible_layers_checkbox.setChecked(True)
        lo.addWidget(self.visible_layers_checkbox)
        main.addWidget(self.layout_options)

        self.image_options = pya.QGroupBox("Image Options", self)
        io = pya.QGridLayout(self.image_options)
        io.addWidget(pya.QLabel("Width (px):", self), 0, 0)
        self.img_width_spin = pya.QSpinBox(self)
        self.img_width_spin.setRange(100, 10000)
        self.img_width_spin.setValue(1920)
        io.addWidget(self.img_width_spin, 0, 1)
        io.addWidget(pya.QLabel("Height (px):", self), 0, 2)
        self.img_height_spin = pya.QSpinBox(self)
        self.img_height_spin.setRange(100, 10000)
        self.img_height_spin.setValue(1080)
        io.addWidget(self.img_height_spin, 0, 3)
        self.transparent_checkbox = pya.QCheckBox("Transparent background (SVG)", self)
        io.addWidget(self.transparent_checkbox, 1, 0, 1, 2)
        self.antialias_checkbox = pya.QCheckBox("Anti-aliasing (PNG)", self)
        self.antialias_checkbox.setChecked(True)
        io.addWidget(self.antialias_checkbox, 1, 2, 1, 2)
        main.addWidget(self.image_options)

        og = pya.QGroupBox("Output", self)
        ol = pya.QHBoxLayout(og)
        self.output_edit = pya.QLineEdit(self)
        ol.addWidget(self.output_edit)
        widgets.button("Browse...", self, self.browse_output, ol)
        main.addWidget(og)

        row = pya.QHBoxLayout()
        widgets.button("Export", self, self.do_export, row)
        row.addStretch(1)
        widgets.button("Close", self, self.accept, row)
        main.addLayout(row)

        self.status_label = pya.QLabel("", self)
        self.status_label.setStyleSheet("color: gray;")
        main.addWidget(self.status_label)

    # ------------------------------------------------------------------

    @property
    def fmt(self):
        return EXPORT_FORMATS[max(0, widgets.value(self.type_combo.currentIndex))]

    def update_options(self, idx):
        fmt = EXPORT_FORMATS[max(0, int(idx))]
        self.layout_options.setVisible(not fmt.is_image)
        self.image_options.setVisible(fmt.is_image)
        self.transparent_checkbox.setEnabled(fmt.kind == KIND_SVG)
        self.antialias_checkbox.setEnabled(fmt.kind == KIND_IMAGE)

    def browse_output(self):
        path = widgets.save_file_name("Export To", self.fmt.file_filter)
        if path is not None:
            self.output_edit.text = path

    def _region_mode(self):
        if self.full_radio.isChecked():
            return quick_export.REGION_FULL
        if self.visible_radio.isChecked():
            return quick_export.REGION_VISIBLE
        return quick_export.REGION_CUSTOM

    def _image_layers(self, layout):
        out = []
        for lp in common.each_layer_prop(self.view):
            if not common.is_visible(lp):
                continue
            li = common.find_layer_index(layout, lp.source_layer, lp.source_datatype)
            if li is not None:
                out.append((li, common.fill_color(lp)))
        return out

    def do_export(self):
        path = self.output_edit.text.strip()
        if not path:
            widgets.warning("No Output", "Please specify an output file.")
            return
        layout, cell = common.active_cellview(self.view)
        if cell is None:
            widgets.warning("No View", "Please open a layout first.")
            return

        fmt = self.fmt
        self.status_label.text = "Exporting..."
        try:
            dbox = quick_export.export_region(
                self._region_mode(),
                view_box=self.view.box(),
                custom=tuple(widgets.value(s.value) for s in (self.x_spin, self.y_spin, self.w_spin, self.h_spin)),
            )
            if fmt.kind == KIND_LAYOUT:
                if self.visible_layers_checkbox.isChecked():
                    layers = quick_export.visible_layer_indices(self.view, layout)
                else:
                    layers = list(layout.layer_indices())
                quick_export.export_layout(
                    path, layout, cell, layers, fmt, dbox, self.flatten_checkbox.isChecked()
                )
            elif fmt.kind == KIND_IMAGE:
                quick_export.export_image(
                    self.view,
                    path,
                    dbox,
                    widgets.value(self.img_width_spin.value),
                    widgets.value(self.img_height_spin.value),
                    self.antialias_checkbox.isChecked(),
                    cell=cell,
                )
            else:
                quick_export.export_svg(
                    path,
                    layout,
                    cell,
                    self._image_layers(layout),
                    dbox,
                    widgets.value(self.img_width_spin.value),
                    widgets.value(self.img_height_spin.value),
                    background=None if self.transparent_checkbox.isChecked() else "#ffffff",
                )
        except Exception as e:
            self.status_label.text = f"Error: {e}"
            widgets.critical("Export Error", e)
            return

        self.status_label.text = f"Export complete: {path}"
        widgets.info("Export Complete", f"File exported to:\n{path}")
