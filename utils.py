"""
Utility functions for VoiceSplit
"""
from __future__ import annotations
import logging
import os
import time

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def new_entry_id() -> str:
    """Millisecond timestamp id, matching ids stored by earlier versions"""
    return str(int(time.time() * 1000))


def safe_float(x, default: float = 0.0) -> float:
    """Convert to float safely, returning default on error"""
    try:
        return float(x)
    except (TypeError, ValueError):
        return default


def format_amount(amount: float) -> str:
    return f"{amount:.2f}"


def app_dir() -> str:
    """
    Get application data directory: ~/.voicesplit (or $VOICESPLIT_HOME)
    Creates directory if it doesn't exist.
    """
    path = os.environ.get("VOICESPLIT_HOME") or os.path.expanduser("~/.voicesplit")
    os.makedirs(path, exist_ok=True)
    return path


def setup_logging(level: str = "WARNING") -> None:
    """Configure root logging once for command-line use"""
    logging.basicConfig(level=getattr(logging, level.upper(), logging.WARNING), format=LOG_FORMAT)
