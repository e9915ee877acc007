"""
Dataset display windows and file selection.
"""

import sys
import logging
import numpy as np
from PyQt6.QtWidgets import QApplication, QFileDialog, QMessageBox
import pyqtgraph as pg


class DisplayManager:
    """Opens file dialogs and one image window per displayed dataset."""

    def __init__(self, config=None, logger=None):
        self.logger = logger or logging.getLogger('stack_combiner')
        self.config = config or {}
        self.app = None
        self.windows = []

    def _ensure_app(self):
        """Create the Qt application on first use."""
        if self.app is None:
            self.app = QApplication.instance() or QApplication(sys.argv)
            self.app.setApplicationName("Stack Combiner")

            display = self.config.get('display', {})
            pg.setConfigOptions(
                imageAxisOrder=display.get('image_axis_order', 'row-major'),
                antialias=display.get('antialias', True),
            )
        return self.app

    def choose_file(self, title="Open Dataset", file_filter=""):
        """Ask the user for a file to open. Returns None if cancelled."""
        self._ensure_app()
        file_path, _ = QFileDialog.getOpenFileName(None, title, "", file_filter)
        if not file_path:
            self.logger.info(f"{title}: cancelled")
            return None
        return file_path

    def show_dataset(self, name, dataset):
        """Open an image window showing dataset under the title name."""
        self._ensure_app()

        if dataset.size == 0:
            self.logger.warning(f"Not displaying '{name}': dataset {dataset.shape} is empty")
            return

        image = dataset.data
        # Leading planes at index 0 for ranks above what ImageView handles
        while image.ndim > 3:
            image = image[0]
        if image.ndim == 1:
            image = image.reshape(1, -1)

        self.logger.debug(f"Displaying '{name}' as image of shape {image.shape}")
        view = pg.image(np.asarray(image), title=name)
        self.windows.append(view)

    def show_message(self, text):
        """Show an error message to the user."""
        self._ensure_app()
        QMessageBox.critical(None, "Error", text)

    def exec(self):
        """Run the event loop until all windows are closed."""
        app = self._ensure_app()
        if not self.windows:
            return 0
        return app.exec()
