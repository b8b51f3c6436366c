"""Parley backend application."""

from pathlib import Path
import sys

# The ``parley`` domain package lives under ``backend/src`` next to this one.
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.exists() and str(SRC_PATH) not in sys.path:
    sys.path.append(str(SRC_PATH))
