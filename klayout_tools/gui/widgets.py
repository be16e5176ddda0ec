"""Small Qt helpers shared by the dialogs."""

import pya

from .. import common


def info(title, text):
    pya.MessageBox.info(title, text, pya.MessageBox.Ok)


def warning(title, text):
    pya.MessageBox.warning(title, text, pya.MessageBox.Ok)


def critical(title, error):
    common.log(title + ":", error)
    pya.MessageBox.critical(title, str(error), pya.MessageBox.Ok)


def save_file_name(title, filters):
    """Save dialog; None when cancelled."""
    path = pya.FileDialog.get_save_file_name(title, ".", filters)
    return path or None


def open_file_name(title, filters):
    path = pya.FileDialog.get_open_file_name(title, ".", filters)
    return path or None


def button(text, parent, handler, row=None):
    btn = pya.QPushButton(text, parent)
    btn.clicked = lambda *args: handler()
    if row is not None:
        row.addWidget(btn)
    return btn


def bold_label(text, parent):
    lbl = pya.QLabel(text, parent)
    lbl.setStyleSheet("font-weight: bold;")
    return lbl


def run_export(writer, path, done_message=None, status_label=None):
    """Run ``writer(path)`` and report the outcome in a message box.

    Returns True on success.
    """
    try:
        writer(path)
    except Exception as e:
        if status_label is not None:
            status_label.text = f"Error: {e}"
        critical("Export Error", e)
        return False
    if status_label is not None:
        status_label.text = f"Exported to {path}"
    if done_message is not None:
        info("Export Complete", done_message.format(path=path))
    return True


def value(x):
    """Qt getters are properties in some KLayout builds, methods in others."""
    return x() if callable(x) else x
