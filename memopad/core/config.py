from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

from .log import Log

__all__ = ["CONFIG_FILENAME", "DEFAULTS", "load_config"]

CONFIG_FILENAME = "memopad.config.json"

DEFAULTS: Dict[str, Any] = {
    "store_dir": "~/.memopad",
    "verbosity": 0,
    "default_folder_name": "New Folder",
    "log_file": None,
}

def _nonblank_str(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError("expected a non-empty string")
    return value

def _optional_str(value: Any) -> Optional[str]:
    return None if value is None else _nonblank_str(value)

def _verbosity(value: Any) -> int:
    # bool is an int; "2" from a hand-edited file is accepted
    if isinstance(value, bool):
        raise ValueError("expected an integer")
    return int(value)

_CHECKS = {
    "store_dir": _nonblank_str,
    "verbosity": _verbosity,
    "default_folder_name": _nonblank_str,
    "log_file": _optional_str,
}

def _read_file(path: Path) -> Dict[str, Any]:
    """Valid settings from a config file. Bad values are logged and dropped."""
    try:
        user = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        Log.warning(f"could not load {path.name}: {e}")
        return {}
    if not isinstance(user, dict):
        Log.warning(f"could not load {path.name}: top-level value must be an object")
        return {}

    settings = {}
    for key, value in user.items():
        if key not in _CHECKS:
            continue
        try:
            settings[key] = _CHECKS[key](value)
        except (TypeError, ValueError, OverflowError) as e:
            Log.warning(f"ignoring {key}={value!r} in {path.name}: {e}")
    return settings

def load_config(store_dir: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Defaults, then <store_dir>/memopad.config.json, then explicit overrides
    (command-line flags). Override values of None are ignored.
    """
    cfg = dict(DEFAULTS)
    if store_dir is not None:
        cfg["store_dir"] = store_dir

    path = Path(cfg["store_dir"]).expanduser() / CONFIG_FILENAME
    if path.is_file():
        cfg.update(_read_file(path))

    for k, v in (overrides or {}).items():
        if v is not None:
            cfg[k] = v

    # The directory that was searched stays authoritative
    if store_dir is not None:
        cfg["store_dir"] = store_dir
    return cfg
