"""Galaxy Map Editor — Entry Point."""
import logging
import os
import sys

from galaxy_editor.application import configure_logging, create_application
from galaxy_editor.main_window import MainWindow


def main():
    configure_logging(logging.DEBUG if os.environ.get("GALAXY_EDITOR_DEBUG") else logging.INFO)
    app = create_application(sys.argv, lang=os.environ.get("GALAXY_EDITOR_LANG", "en"))
    window = MainWindow()
    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
