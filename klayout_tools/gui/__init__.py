"""Qt dialogs and plugins; import only inside the KLayout application."""
