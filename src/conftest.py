"""
Pytest Configuration
====================

Puts src/ on sys.path so `import cellchain` works from a plain checkout,
without `pip install -e .`.

Usage:
    cd src
    pytest tests/ -v
"""

import sys
from pathlib import Path

SRC_ROOT = Path(__file__).parent


def pytest_configure(config):
    """Make cellchain importable before test modules are collected."""
    if str(SRC_ROOT) not in sys.path:
        sys.path.insert(0, str(SRC_ROOT))


# Also at import time, for collection from the repository root
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))
