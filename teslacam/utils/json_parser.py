# teslacam/utils/json_parser.py
"""
Helpers for reading the recorder's event.json files.
Field values are usually strings, even numeric ones ("52.1", "1").
"""

import json
from pathlib import Path
from typing import Optional, Any


def safe_load_json(path: Path) -> Optional[dict]:
    """Read and parse a JSON object from disk. Returns None on any read/parse error."""
    try:
        data = json.loads(Path(path).read_bytes().decode("utf-8", errors="replace"))
    except (OSError, json.JSONDecodeError):
        return None
    return data if isinstance(data, dict) else None


def get_str(data: dict, *keys: str, default: str = "") -> str:
    """
    Return the first present, non-null value among keys as a string.
    Lets newer and legacy field names share one lookup: get_str(d, "est_lat", "lat").
    """
    for key in keys:
        value = data.get(key)
        if value is None:
            continue
        return value if isinstance(value, str) else str(value)
    return default


def get_nested(data: dict, *keys: str, default: Any = None) -> Any:
    """Safely navigate nested dict keys. Returns default if any key is missing."""
    current = data
    for key in keys:
        if not isinstance(current, dict):
            return default
        current = current.get(key, default)
        if current is default:
            return default
    return current
