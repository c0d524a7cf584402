"""
Test configuration so the checked-in ``archivekit`` package is importable
without installing it first.
"""

import sys
from pathlib import Path

PROJECT_ROOT = str(Path(__file__).resolve().parent)

if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)
