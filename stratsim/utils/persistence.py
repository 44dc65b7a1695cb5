"""
JSON persistence utilities.

Backtest summaries and optimization runs are written as JSON so they
can be reloaded later or handed to a front end.  This module provides
simple load/save functions for that purpose.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional


def load_json(path: str) -> Optional[Any]:
    """Load a JSON file.

    Parameters
    ----------
    path : str
        Path to the JSON file.

    Returns
    -------
    object or None
        The decoded document if the file exists, otherwise `None`.
    """
    file_path = Path(path)
    if not file_path.exists():
        return None
    with file_path.open("r", encoding="utf-8") as fh:
        return json.load(fh)


def save_json(path: str, document: Any) -> None:
    """Write a JSON file to disk, creating parent directories.

    Parameters
    ----------
    path : str
        Path to the output file.
    document : object
        Must be serialisable to JSON.
    """
    file_path = Path(path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    with file_path.open("w", encoding="utf-8") as fh:
        json.dump(document, fh, ensure_ascii=False, indent=2, sort_keys=True)
