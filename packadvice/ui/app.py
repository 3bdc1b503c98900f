import sys

from PySide6.QtWidgets import QApplication

from packadvice.logging import configure_logging
from packadvice.ui.main_window import MainWindow


def main() -> int:
    configure_logging(1)
    app = QApplication.instance() or QApplication(sys.argv)
    window = MainWindow()
    window.show()
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
