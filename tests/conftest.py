"""Test harness configuration: run Qt headless when no display is set."""

import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
