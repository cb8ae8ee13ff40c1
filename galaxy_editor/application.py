"""Application factory — QApplication creation, logging and font setup."""

import logging
import sys

from PyQt6.QtCore import QtMsgType, qInstallMessageHandler
from PyQt6.QtWidgets import QApplication
from PyQt6.QtGui import QFont

from galaxy_editor.constants import APP_NAME, APP_ORGANIZATION
from galaxy_editor.core.i18n import TranslationManager
from galaxy_editor.ui.styles.colors import BACKGROUND, PANEL_BG, TEXT_PRIMARY

logger = logging.getLogger(__name__)

_STYLESHEET = f"""
QMainWindow, QWidget {{ background-color: {BACKGROUND}; color: {TEXT_PRIMARY}; }}
QListWidget, QDockWidget {{ background-color: {PANEL_BG}; }}
"""


def _qt_message_handler(msg_type, context, message):
    """Route Qt warnings into the logging tree (QPainter noise dropped)."""
    if "QPainter" in message:
        return
    if msg_type in (QtMsgType.QtCriticalMsg, QtMsgType.QtFatalMsg):
        logger.error("Qt: %s", message)
    elif msg_type == QtMsgType.QtWarningMsg:
        logger.warning("Qt: %s", message)


def configure_logging(level: int = logging.INFO) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def create_application(argv: list[str], lang: str = "en") -> QApplication:
    """Create and configure the QApplication instance."""
    qInstallMessageHandler(_qt_message_handler)

    app = QApplication(argv)
    app.setApplicationName(APP_NAME)
    app.setOrganizationName(APP_ORGANIZATION)

    font = QFont("Segoe UI", 10)
    font.setStyleHint(QFont.StyleHint.SansSerif)
    app.setFont(font)
    app.setStyleSheet(_STYLESHEET)

    TranslationManager.init(lang)
    return app
