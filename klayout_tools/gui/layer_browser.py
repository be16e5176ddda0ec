"""PDK Layer Browser dialog and toolbar plugin.

Keyboard shortcuts inside the dialog:
  N / P       next / previous layer
  K / C       keep (pin) current layer / clear kept layers
  A           show all layers
  I           toggle isolate mode
  Home / End  first / last layer
"""

import pya

from .. import common, config, layer_browser
from . import widgets


class LayerBrowserDialog(pya.QDialog):

    def __init__(self, view, parent=None):
        super().__init__(parent)
        self.view = view
        self.state = layer_browser.LayerBrowserState()
        self.snapshot = layer_browser.VisibilitySnapshot(view)

        self.windowTitle = "PDK Layer Browser"
        self.setMinimumWidth(450)
        self.setMinimumHeight(550)

        self._setup_ui()
        self.refresh_layers()
        self.update_display()

    def _setup_ui(self):
        main = pya.QVBoxLayout(self)

        info = pya.QGroupBox("Current Layer", self)
        inf = pya.QVBoxLayout(info)
        self.layer_name_label = pya.QLabel("", self)
        self.layer_name_label.setStyleSheet("font-size: 14pt; font-weight: bold; color: #2196F3;")
        inf.addWidget(self.layer_name_label)
        self.layer_info_label = pya.QLabel("", self)
        inf.addWidget(self.layer_info_label)
        self.shape_count_label = pya.QLabel("", self)
        inf.addWidget(self.shape_count_label)
        main.addWidget(info)

        prog = pya.QHBoxLayout()
        self.progress_label = pya.QLabel("Layer 0 of 0", self)
        prog.addWidget(self.progress_label)
        self.progress_bar = pya.QProgressBar(self)
        self.progress_bar.setMinimum(0)
        prog.addWidget(self.progress_bar)
        main.addLayout(prog)

        nav = pya.QGroupBox("Navigation", self)
        nv = pya.QHBoxLayout(nav)
        widgets.button("<< Prev (P)", self, self.navigate_prev, nv)
        self.layer_spin = pya.QSpinBox(self)
        self.layer_spin.setMinimum(0)
        self.layer_spin.valueChanged = self.jump_to_layer
        nv.addWidget(self.layer_spin)
        widgets.button("Next (N) >>", self, self.navigate_next, nv)
        main.addWidget(nav)

        lst = pya.QGroupBox("All Layers", self)
        ll = pya.QVBoxLayout(lst)
        search = pya.QHBoxLayout()
        search.addWidget(pya.QLabel("Search:", self))
        self.search_edit = pya.QLineEdit(self)
        self.search_edit.setPlaceholderText("Filter layers by name...")
        self.search_edit.textChanged = self.populate_layer_list
        search.addWidget(self.search_edit)
        ll.addLayout(search)
        self.layer_list = pya.QListWidget(self)
        self.layer_list.currentRowChanged = self.select_layer_from_list
        ll.addWidget(self.layer_list)
        main.addWidget(lst)

        options = pya.QGroupBox("Options", self)
        opt = pya.QVBoxLayout(options)
        self.isolate_checkbox = pya.QCheckBox("Isolate current layer (I)", self)
        self.isolate_checkbox.setChecked(self.state.isolate)
        self.isolate_checkbox.toggled = self.toggle_isolate_mode
        opt.addWidget(self.isolate_checkbox)
        self.zoom_checkbox = pya.QCheckBox("Auto-zoom to layer extent", self)
        opt.addWidget(self.zoom_checkbox)
        main.addWidget(options)

        kept = pya.QGroupBox("Kept Layers (K to add, C to clear)", self)
        kl = pya.QVBoxLayout(kept)
        self.kept_list = pya.QListWidget(self)
        self.kept_list.setMaximumHeight(80)
        self.kept_list.itemDoubleClicked = lambda item: self.remove_kept_layer(self.kept_list.row(item))
        kl.addWidget(self.kept_list)
        kb = pya.QHBoxLayout()
        widgets.button("Keep Current (K)", self, self.keep_current_layer, kb)
        widgets.button("Clear All (C)", self, self.clear_kept_layers, kb)
        kl.addLayout(kb)
        main.addWidget(kept)

        row = pya.QHBoxLayout()
        widgets.button("Show All (A)", self, self.show_all_layers, row)
        widgets.button("Export List", self, self.export_layer_list, row)
        widgets.button("Refresh", self, self.refresh, row)
        widgets.button("Close", self, self.accept, row)
        main.addLayout(row)

        self.status_label = pya.QLabel("", self)
        self.status_label.setStyleSheet("color: gray; font-style: italic;")
        main.addWidget(self.status_label)

    # ------------------------------------------------------------------

    def _count(self, entry):
        layout, cell = common.active_cellview(self.view)
        if cell is None:
            return 0
        return layer_browser.count_shapes(layout, cell, entry.layer, entry.datatype)

    def refresh(self):
        self.refresh_layers()
        self.update_display()

    def refresh_layers(self):
        layout, cell = common.active_cellview(self.view)
        if cell is None:
            self.state.reset([])
            self.populate_layer_list(self.search_edit.text)
            self.status_label.text = "No layout loaded"
            return

        self.state.reset(layer_browser.collect_layers(self.view))
        self.populate_layer_list(self.search_edit.text)

        top = max(len(self.state) - 1, 0)
        self.layer_spin.setMaximum(top)
        self.progress_bar.setMaximum(top)
        self.status_label.text = f"Found {len(self.state)} layers"

    def populate_layer_list(self, text=""):
        self.layer_list.blockSignals(True)
        self.layer_list.clear()
        for name in self.state.set_filter(text):
            self.layer_list.addItem(name)
        self._select_list_row()
        self.layer_list.blockSignals(False)

    def _select_list_row(self):
        row = self.state.row_of(self.state.current)
        if row is not None:
            self.layer_list.setCurrentRow(row)

    def update_display(self):
        entry = self.state.current_entry
        if entry is None:
            return
        n = len(self.state)
        cur = self.state.current

        self.layer_name_label.text = entry.name
        self.layer_info_label.text = f"Layer: {entry.layer} / Datatype: {entry.datatype}"
        self.shape_count_label.text = f"Shapes: {common.format_number(self._count(entry))}"
        self.progress_label.text = f"Layer {cur + 1} of {n}"
        self.progress_bar.setValue(cur)

        self.layer_spin.blockSignals(True)
        self.layer_spin.setValue(cur)
        self.layer_spin.blockSignals(False)

        self.layer_list.blockSignals(True)
        self._select_list_row()
        self.layer_list.blockSignals(False)

        if self.state.isolate:
            layer_browser.apply_isolation(self.view, self.state)
        if self.zoom_checkbox.isChecked():
            layout, cell = common.active_cellview(self.view)
            if cell is not None:
                layer_browser.zoom_to_layer(self.view, layout, cell, entry)

        self.status_label.text = f"Layer {cur + 1} of {n}"

    def navigate_next(self):
        if self.state.next():
            self.update_display()

    def navigate_prev(self):
        if self.state.prev():
            self.update_display()

    def jump_to_layer(self, index):
        if self.state.jump(int(index)):
            self.update_display()

    def select_layer_from_list(self, row):
        if self.state.select_row(int(row)):
            self.update_display()

    def _reisolate(self):
        if self.state.isolate:
            layer_browser.apply_isolation(self.view, self.state)

    def keep_current_layer(self):
        if not len(self.state):
            return
        if self.state.keep_current():
            self.update_kept_list()
            self.status_label.text = f"Kept layer: {self.state.current_entry.name} ({len(self.state.kept)} pinned)"
        else:
            self.status_label.text = "Layer already kept"
        self._reisolate()

    def clear_kept_layers(self):
        self.state.clear_kept()
        self.update_kept_list()
        self.status_label.text = "Cleared all kept layers"
        self._reisolate()

    def remove_kept_layer(self, row):
        removed = self.state.remove_kept(row)
        if removed is None:
            return
        self.update_kept_list()
        if removed < len(self.state):
            self.status_label.text = f"Removed kept layer: {self.state.entries[removed].name}"
        self._reisolate()

    def update_kept_list(self):
        self.kept_list.clear()
        for name in self.state.kept_names():
            self.kept_list.addItem(name)

    def show_all_layers(self):
        common.set_all_visible(self.view, True)
        self.status_label.text = "All layers visible"

    def toggle_isolate_mode(self, enabled):
        self.state.isolate = bool(enabled)
        if self.state.isolate:
            layer_browser.apply_isolation(self.view, self.state)
        else:
            self.show_all_layers()

    def export_layer_list(self):
        if not len(self.state):
            return
        path = widgets.save_file_name(
            "Export Layer List",
            "CSV files (*.csv);;Text files (*.txt);;All files (*)",
        )
        if path is None:
            return
        widgets.run_export(
            lambda p: layer_browser.export_layer_list(p, self.state.entries, self._count),
            path,
            status_label=self.status_label,
        )

    # ------------------------------------------------------------------

    def keyPressEvent(self, event):
        keys = {
            pya.Qt.Key_N.to_i(): self.navigate_next,
            pya.Qt.Key_P.to_i(): self.navigate_prev,
            pya.Qt.Key_K.to_i(): self.keep_current_layer,
            pya.Qt.Key_C.to_i(): self.clear_kept_layers,
            pya.Qt.Key_A.to_i(): self.show_all_layers,
            pya.Qt.Key_I.to_i(): lambda: self.isolate_checkbox.setChecked(not self.isolate_checkbox.isChecked()),
            pya.Qt.Key_Home.to_i(): lambda: self.jump_to_layer(0),
            pya.Qt.Key_End.to_i(): lambda: self.jump_to_layer(len(self.state) - 1),
        }
        handler = keys.get(int(event.key()))
        if handler is None:
            super().keyPressEvent(event)
            return
        handler()

    def done(self, result):
        # leaving with isolation on would keep the view stripped down
        if self.state.isolate:
            self.snapshot.restore()
        super().done(result)


class LayerBrowserPlugin(pya.Plugin):

    def __init__(self, view):
        super().__init__()
        self.view = view
        self.dialog = None

    def activated(self):
        if self.dialog is None or self.dialog.destroyed():
            self.dialog = LayerBrowserDialog(self.view, pya.Application.instance().main_window())
        self.dialog.show()
        self.dialog.raise_()

    def mouse_click_event(self, p, buttons, prio):
        return False


class LayerBrowserPluginFactory(pya.PluginFactory):

    def __init__(self):
        super().__init__()
        self.has_tool_entry = True
        self.register(config.LAYER_BROWSER_PLUGIN_PRIORITY, "layer_browser", "Layer Browser")

    def create_plugin(self, manager, root, view):
        return LayerBrowserPlugin(view)
