"""UI components for media importer.

The window lives in ``media_importer.ui.main_window`` and needs tkinter;
it is imported on demand so the command line works without a display.
"""
