"""Configuration persistence: load and save the viewer settings."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from platformdirs import user_config_dir

from slice_viewer.models import (
    AUTHORITIES_REFRESH_PERIOD_S,
    CONFIG_APP_NAME,
    MAX_REFRESH_PERIOD_S,
    MIN_REFRESH_PERIOD_S,
    SLICE_DEFAULT_MODE,
    SLICE_MODE_NAMES,
    ViewerConfig,
)
from slice_viewer.themes import THEME_NAMES

logger = logging.getLogger(__name__)

# ============================================================================
# Configuration Persistence
# ============================================================================
#
# Validation contract: _dict_to_config() guarantees valid output for any input:
#
#   Field                   Rule                            Handler
#   ──────────────────────  ──────────────────────────────  ────────────────────────
#   default_mode            in SLICE_MODE_NAMES             _parse_default_mode
#   refresh_period_seconds  1 ≤ x ≤ 300 (int or float)      _coerce_refresh_period
#   granted_permissions[]   non-empty strings, deduped      _parse_permissions
#   theme_name              in THEME_NAMES                  _parse_theme_name
#   version                 int                             _safe_get
#
CONFIG_FILENAME = "config.json"


def get_config_path() -> Path:
    """Get the path to the configuration file.

    Uses platformdirs for cross-platform config directory:
    - Linux: ~/.config/slice-viewer/config.json
    - macOS: ~/Library/Application Support/slice-viewer/config.json
    - Windows: %APPDATA%/slice-viewer/config.json
    """
    config_dir = Path(user_config_dir(CONFIG_APP_NAME))
    return config_dir / CONFIG_FILENAME


def _config_to_dict(config: ViewerConfig) -> dict[str, Any]:
    """Serialize ViewerConfig to a JSON-compatible dictionary."""
    return {
        "version": config.version,
        "default_mode": config.default_mode,
        "refresh_period_seconds": _coerce_refresh_period(config.refresh_period_seconds),
        "granted_permissions": list(config.granted_permissions),
        "theme_name": config.theme_name,
    }


def _safe_get(data: dict, key: str, default: Any, expected_type: type) -> Any:
    """Safely get a value from dict with type validation.

    Returns the default if key is missing or value has wrong type.
    """
    value = data.get(key, default)
    if not isinstance(value, expected_type):
        return default
    return value


def _coerce_refresh_period(value: Any) -> float:
    """Validate and clamp the authority refresh period in seconds."""
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return AUTHORITIES_REFRESH_PERIOD_S
    return float(max(MIN_REFRESH_PERIOD_S, min(value, MAX_REFRESH_PERIOD_S)))


def _parse_default_mode(data: dict[str, Any]) -> str:
    mode = _safe_get(data, "default_mode", SLICE_DEFAULT_MODE.value, str).strip().lower()
    if mode not in SLICE_MODE_NAMES:
        logger.warning("Invalid default_mode %r, defaulting to %r", mode, SLICE_DEFAULT_MODE.value)
        return SLICE_DEFAULT_MODE.value
    return mode


def _parse_permissions(data: dict[str, Any]) -> list[str]:
    raw = _safe_get(data, "granted_permissions", [], list)
    valid = [p.strip() for p in raw if isinstance(p, str) and p.strip()]
    return list(dict.fromkeys(valid))


def _parse_theme_name(data: dict[str, Any]) -> str:
    name = _safe_get(data, "theme_name", "monokai", str)
    if name not in THEME_NAMES:
        logger.warning("Unknown theme_name %r, defaulting to 'monokai'", name)
        return "monokai"
    return name


def _dict_to_config(data: dict[str, Any]) -> ViewerConfig:
    """Deserialize a dictionary to ViewerConfig with type validation."""
    return ViewerConfig(
        default_mode=_parse_default_mode(data),
        refresh_period_seconds=_coerce_refresh_period(
            data.get("refresh_period_seconds", AUTHORITIES_REFRESH_PERIOD_S)
        ),
        granted_permissions=_parse_permissions(data),
        theme_name=_parse_theme_name(data),
        version=_safe_get(data, "version", 1, int),
    )


def load_config() -> ViewerConfig:
    """Load configuration from disk.

    Returns default config if file doesn't exist or is corrupted; in the
    corrupted case ``config_defaulted`` is set so the UI can say so.
    """
    config_path = get_config_path()

    if not config_path.exists():
        return ViewerConfig()

    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            logger.warning("Config file root is not an object, using defaults")
            return ViewerConfig(config_defaulted=True)
        return _dict_to_config(data)
    except json.JSONDecodeError as e:
        logger.warning("Config file has invalid JSON, using defaults: %s", e)
        return ViewerConfig(config_defaulted=True)
    except (KeyError, TypeError, AttributeError) as e:
        logger.warning("Config file has invalid structure, using defaults: %s", e)
        return ViewerConfig(config_defaulted=True)
    except OSError as e:
        logger.warning("Could not read config file, using defaults: %s", e)
        return ViewerConfig(config_defaulted=True)


def save_config(config: ViewerConfig) -> bool:
    """Save configuration to disk atomically.

    Uses write-to-tempfile + os.replace() to prevent partial writes
    on crash/interrupt from corrupting the config file.

    Creates the config directory if it doesn't exist.
    Returns True on success, False on failure.
    """
    config_path = get_config_path()

    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)

        data = _config_to_dict(config)
        json_str = json.dumps(data, indent=2, ensure_ascii=False)
        fd, tmp_path = tempfile.mkstemp(dir=config_path.parent, suffix=".tmp", prefix=".config-")
        closed = False
        try:
            os.write(fd, json_str.encode("utf-8"))
            os.close(fd)
            closed = True
            os.replace(tmp_path, config_path)
        except BaseException:
            if not closed:
                os.close(fd)
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise
        return True
    except OSError as e:
        logger.error("Failed to save config: %s", e)
        return False


__all__ = [
    "CONFIG_APP_NAME",
    "CONFIG_FILENAME",
    "get_config_path",
    "load_config",
    "save_config",
]
