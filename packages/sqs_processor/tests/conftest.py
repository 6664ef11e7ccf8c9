"""Pytest configuration to expose the packages directory on sys.path."""
from pathlib import Path
import sys

PACKAGES_DIR = Path(__file__).resolve().parents[2]

path_str = str(PACKAGES_DIR)
if path_str not in sys.path:
    sys.path.insert(0, path_str)
