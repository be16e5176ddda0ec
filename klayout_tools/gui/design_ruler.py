"""Design Ruler: toolbar tool with grid/45° snapping and a measurement list.

Usage (once "Design Ruler" is selected in the toolbar):
  - click to set the first point, click again to finish the measurement
  - Escape cancels the current measurement
"""

import pya

from .. import common, config, ruler
from . import widgets

RULER_FORMAT = "$(sprintf('%.3f um', D))"


class RulerDialog(pya.QDialog):

    def __init__(self, view, parent=None):
        super().__init__(parent)
        self.view = view
        self.measurements = ruler.MeasurementList()

        self.windowTitle = "Design Ruler - Measurements"
        self.setMinimumWidth(400)
        self.setMinimumHeight(300)

        self._setup_ui()
        self.update_list()

    def _setup_ui(self):
        main = pya.QVBoxLayout(self)

        options = pya.QGroupBox("Options", self)
        opt = pya.QVBoxLayout(options)
        self.snap_checkbox = pya.QCheckBox("Snap to grid", self)
        self.snap_checkbox.setChecked(True)
        opt.addWidget(self.snap_checkbox)
        self.angle_checkbox = pya.QCheckBox("Constrain to 45° angles", self)
        self.angle_checkbox.setChecked(False)
        opt.addWidget(self.angle_checkbox)

        grid_row = pya.QHBoxLayout()
        grid_row.addWidget(pya.QLabel("Grid (um):", self))
        self.grid_spin = pya.QDoubleSpinBox(self)
        self.grid_spin.setMinimum(config.RULER_GRID_MIN)
        self.grid_spin.setMaximum(config.RULER_GRID_MAX)
        self.grid_spin.setDecimals(3)
        self.grid_spin.setValue(config.RULER_GRID_DEFAULT)
        grid_row.addWidget(self.grid_spin)
        grid_row.addStretch(1)
        opt.addLayout(grid_row)
        main.addWidget(options)

        group = pya.QGroupBox("Measurements", self)
        lst = pya.QVBoxLayout(group)
        self.list = pya.QListWidget(self)
        self.list.itemDoubleClicked = lambda item: self.goto_measurement(self.list.row(item))
        lst.addWidget(self.list)
        main.addWidget(group)

        row = pya.QHBoxLayout()
        widgets.button("Clear All", self, self.clear_measurements, row)
        widgets.button("Export", self, self.export, row)
        row.addStretch(1)
        widgets.button("Close", self, self.accept, row)
        main.addLayout(row)

    def sync(self, session):
        """Copy the dialog options into a RulerSession."""
        session.snap = self.snap_checkbox.isChecked()
        session.constrain = self.angle_checkbox.isChecked()
        session.grid = widgets.value(self.grid_spin.value)

    def add_measurement(self, m):
        self.measurements.add(m)
        self.update_list()

    def update_list(self):
        self.list.clear()
        for text in self.measurements.labels():
            self.list.addItem(text)

    def goto_measurement(self, row):
        box = self.measurements.zoom_box(row)
        if box is not None:
            self.view.zoom_box(box)

    def clear_measurements(self):
        self.measurements.clear()
        self.view.clear_annotations()
        self.update_list()

    def export(self):
        if not len(self.measurements):
            return
        path = widgets.save_file_name(
            "Export Measurements",
            "CSV files (*.csv);;Text files (*.txt);;All files (*)",
        )
        if path is None:
            return
        widgets.run_export(self.measurements.export_csv, path, "Measurements exported to {path}")


class RulerPlugin(pya.Plugin):

    def __init__(self, view):
        super().__init__()
        self.view = view
        self.dialog = None
        self.session = ruler.RulerSession()
        self.marker = None

    def activated(self):
        if self.dialog is None:
            self.dialog = RulerDialog(self.view, pya.Application.instance().main_window())
        self.dialog.show()
        common.status("Click to set first measurement point")

    def deactivated(self):
        self._drop_marker()
        self.session.cancel()

    def _drop_marker(self):
        if self.marker is not None:
            self.marker._destroy()
            self.marker = None

    def _sync(self):
        if self.dialog is not None:
            self.dialog.sync(self.session)

    def mouse_click_event(self, p, buttons, prio):
        if not prio:
            return False
        self._sync()

        m = self.session.click(p)
        if m is None:
            common.status("Click to set second point (Escape to cancel)")
            return True

        self._drop_marker()
        ant = pya.Annotation()
        ant.p1 = m.p1
        ant.p2 = m.p2
        ant.style = pya.Annotation.StyleRuler
        ant.fmt = RULER_FORMAT
        self.view.insert_annotation(ant)

        if self.dialog is not None:
            self.dialog.add_measurement(m)
        common.status("Measurement: %.3f um @ %.1f°" % (m.distance, m.angle))
        return True

    def mouse_moved_event(self, p, buttons, prio):
        if not prio or not self.session.active:
            return False
        self._sync()

        end, distance = self.session.preview(p)
        self._drop_marker()
        self.marker = pya.Marker(self.view)
        self.marker.set(pya.DEdge(self.session.start, end))
        self.marker.line_style = 0
        self.marker.line_width = 1
        common.status("Distance: %.3f um" % distance, 0)
        return False

    def key_event(self, key, buttons):
        if key != pya.KeyCode.Escape or not self.session.active:
            return False
        self.session.cancel()
        self._drop_marker()
        common.status("Measurement cancelled", config.STATUS_TIMEOUT_SHORT)
        return True


class RulerPluginFactory(pya.PluginFactory):

    def __init__(self):
        super().__init__()
        self.has_tool_entry = True
        self.register(config.RULER_PLUGIN_PRIORITY, "design_ruler", "Design Ruler")

    def create_plugin(self, manager, root, view):
        return RulerPlugin(view)


USAGE = (
    "Select 'Design Ruler' from the toolbar to start measuring.\n\n"
    "Usage:\n"
    "- Click to set first point\n"
    "- Click again to complete measurement\n"
    "- Press Escape to cancel"
)


def show_usage():
    widgets.info("Design Ruler", USAGE)
