"""Persistent device identity for the WonderLens client."""

import json
import logging
import os
import platform
import uuid
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)

APP_VERSION = "1.0.0"


def default_state_path() -> Path:
    base = os.getenv("WONDERLENS_HOME")
    return (Path(base) if base else Path.home() / ".wonderlens") / "device.json"


def get_device_id(state_path: Optional[Path] = None) -> str:
    """Return this installation's deviceId, generating and saving one on first use."""
    path = state_path or default_state_path()
    if path.exists():
        try:
            stored = json.loads(path.read_text(encoding="utf-8"))
            if stored.get("deviceId"):
                return stored["deviceId"]
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable device state {path}: {e}")

    device_id = str(uuid.uuid4())
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps({"deviceId": device_id}), encoding="utf-8")
    return device_id


def get_device_info(state_path: Optional[Path] = None) -> Dict[str, str]:
    return {
        "deviceId": get_device_id(state_path),
        "deviceType": platform.system().lower() or "python",
        "osVersion": platform.platform(),
        "appVersion": os.getenv("WONDERLENS_APP_VERSION", APP_VERSION),
    }
