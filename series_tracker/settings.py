from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Optional, Tuple

logger = logging.getLogger(__name__)

CONFIG_PATH = Path.home() / ".tracktui_config.json"
ENV_DATA = "TRACKTUI_DATA"
ENV_CONFIG = "TRACKTUI_CONFIG"


@dataclass
class TrackerSettings:
    data_path: str = "tracktui_data.csv"
    input_max_len: int = 5
    default_series_name: str = "Graph"
    log_path: str = str(Path.home() / ".tracktui.log")
    log_level: str = "INFO"

    def __post_init__(self):
        for name in ("data_path", "log_path", "log_level"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                raise TypeError(f"{name} must be a non-empty string, got {value!r}")
        if isinstance(self.input_max_len, bool):
            raise TypeError(f"input_max_len must be an integer, got {self.input_max_len!r}")
        self.input_max_len = max(1, int(self.input_max_len))
        self.default_series_name = str(self.default_series_name).strip() or "Graph"


def config_path() -> Path:
    env = os.environ.get(ENV_CONFIG, "").strip()
    return Path(env).expanduser() if env else CONFIG_PATH


def load_settings(path: Optional[Path] = None) -> Tuple[TrackerSettings, Optional[str]]:
    """
    Read settings, falling back to defaults for anything missing or broken.

    Returns the settings and, when the config file had to be ignored, the
    reason. Nothing is logged here: the caller configures logging from the
    returned settings first. TRACKTUI_DATA overrides the data file location
    from the config file.
    """
    path = path or config_path()
    settings = TrackerSettings()
    problem = None

    if path.exists():
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            if not isinstance(data, dict):
                raise TypeError(f"expected a JSON object, got {type(data).__name__}")
            known = {f.name for f in fields(TrackerSettings)}
            merged = {**asdict(settings), **{k: v for k, v in data.items() if k in known}}
            settings = TrackerSettings(**merged)
        except (OSError, ValueError, TypeError) as e:
            # If config is corrupt, fall back without blocking app usage.
            problem = f"Ignoring unreadable config {path}: {e}"
            settings = TrackerSettings()

    env_data = os.environ.get(ENV_DATA, "").strip()
    if env_data:
        settings.data_path = env_data
    return settings, problem


def save_settings(settings: TrackerSettings, path: Optional[Path] = None) -> None:
    path = path or config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(asdict(settings), indent=2), encoding="utf-8")


def write_default_config(path: Optional[Path] = None) -> bool:
    """
    Write the default settings on first run so there is a file to edit.

    Returns True when a file was written. An existing config is never touched.
    """
    path = path or config_path()
    if path.exists():
        return False
    try:
        save_settings(TrackerSettings(), path)
    except OSError as e:
        logger.warning("Could not write default config %s: %s", path, e)
        return False
    logger.info("Wrote default config to %s", path)
    return True
