# Configuration helpers for Datasmith Facade
#
# Responsibilities:
# - Key-value settings with precedence: configure() overrides > environment > config file > defaults
# - In-memory caching of resolved settings with thread-safety and a short TTL
# - Cross-platform config path resolution (Windows/macOS/Linux)
# - Default native library location derived from the facade runtime module record
#
# Environment variables supported:
#   DATASMITH_FACADE_LIBRARY       absolute path to the native facade shared library
#   DATASMITH_FACADE_ENGINE_DIR    value substituted for $(EngineDir) in default paths
#   DATASMITH_FACADE_LOG_LEVEL     DEBUG, INFO, WARNING, ...
#   DATASMITH_FACADE_TRACK_HANDLES (truthy: "1", "true", "yes", "on")
#
# Optional config file (JSON object) search order:
#   1) %APPDATA%/DatasmithFacade/config.json (Windows)
#   2) ~/.config/datasmith_facade/config.json (Linux/XDG default)
#   3) ~/Library/Application Support/DatasmithFacade/config.json (macOS)
#   4) ~/.datasmith_facade/config.json (legacy fallback)

from __future__ import annotations

import json
import logging
import os
import threading
import time
from dataclasses import dataclass, fields
from typing import Any, Dict, List, Optional

from ..build.module_rules import TargetRules, expand_path_variables
from ..build.thirdparty import facade_runtime_rules

logger = logging.getLogger(__name__)

ENV_LIBRARY = "DATASMITH_FACADE_LIBRARY"
ENV_ENGINE_DIR = "DATASMITH_FACADE_ENGINE_DIR"
ENV_LOG_LEVEL = "DATASMITH_FACADE_LOG_LEVEL"
ENV_TRACK_HANDLES = "DATASMITH_FACADE_TRACK_HANDLES"

_CACHE_TTL_SEC = 5.0  # small TTL to allow runtime changes without heavy reads


@dataclass(frozen=True)
class FacadeSettings:
    """Resolved configuration"""
    library_path: str
    engine_dir: str = "."
    log_level: str = "INFO"
    track_handles: bool = True


SETTING_KEYS = tuple(f.name for f in fields(FacadeSettings))

# In-memory cache (thread-safe)
_SETTINGS_LOCK = threading.Lock()
_SETTINGS_CACHE: Dict[str, Any] = {
    "settings": None,
    "ts": 0.0,
}
_OVERRIDES: Dict[str, Any] = {}


def _truthy(val: Any) -> bool:
    if isinstance(val, bool):
        return val
    if val is None:
        return False
    s = str(val).strip().lower()
    return s in {"1", "true", "yes", "on"}


def _config_paths() -> List[str]:
    paths: List[str] = []
    # Windows
    appdata = os.environ.get("APPDATA")
    if appdata:
        paths.append(os.path.join(appdata, "DatasmithFacade", "config.json"))
    # Linux (XDG)
    home = os.path.expanduser("~")
    xdg_config_home = os.environ.get("XDG_CONFIG_HOME", os.path.join(home, ".config"))
    paths.append(os.path.join(xdg_config_home, "datasmith_facade", "config.json"))
    # macOS
    paths.append(os.path.join(home, "Library", "Application Support", "DatasmithFacade", "config.json"))
    # Legacy fallback
    paths.append(os.path.join(home, ".datasmith_facade", "config.json"))
    return paths


def _load_config_file() -> Dict[str, Any]:
    for path in _config_paths():
        try:
            if os.path.isfile(path):
                with open(path, "r", encoding="utf-8") as f:
                    data = json.load(f)
                    if isinstance(data, dict):
                        return data
        except (OSError, ValueError) as ex:
            logger.warning(f"Failed reading config file {path}: {ex}")
    return {}


def _get_env_values() -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    if os.environ.get(ENV_LIBRARY):
        out["library_path"] = os.environ[ENV_LIBRARY]
    if os.environ.get(ENV_ENGINE_DIR):
        out["engine_dir"] = os.environ[ENV_ENGINE_DIR]
    if os.environ.get(ENV_LOG_LEVEL):
        out["log_level"] = os.environ[ENV_LOG_LEVEL]
    if os.environ.get(ENV_TRACK_HANDLES) is not None:
        out["track_handles"] = _truthy(os.environ[ENV_TRACK_HANDLES])
    return out


def _get_config_values() -> Dict[str, Any]:
    cfg = _load_config_file()
    out: Dict[str, Any] = {}
    for key in SETTING_KEYS:
        if cfg.get(key) is not None:
            out[key] = cfg[key]
    if "track_handles" in out:
        out["track_handles"] = _truthy(out["track_handles"])
    return out


def default_library_path(engine_dir: str, target: Optional[TargetRules] = None) -> str:
    """
    Location of the native facade library for the host platform, taken from the
    facade runtime module record with $(EngineDir) substituted.
    """
    rules = facade_runtime_rules(target or TargetRules.host())
    return expand_path_variables(rules.runtime_dependencies[0], {"EngineDir": engine_dir})


def configure(**overrides: Any) -> None:
    """
    Set explicit settings with the highest precedence (e.g. from a host application).
    Unknown keys raise ValueError. Passing None for a key removes its override.
    """
    unknown = [k for k in overrides if k not in SETTING_KEYS]
    if unknown:
        raise ValueError(f"Unknown setting(s): {', '.join(unknown)}; known: {', '.join(SETTING_KEYS)}")
    with _SETTINGS_LOCK:
        for key, value in overrides.items():
            if value is None:
                _OVERRIDES.pop(key, None)
            else:
                _OVERRIDES[key] = value
        _SETTINGS_CACHE["ts"] = 0.0


def clear_overrides() -> None:
    with _SETTINGS_LOCK:
        _OVERRIDES.clear()
        _SETTINGS_CACHE["ts"] = 0.0


def _should_reload_cache(now: float) -> bool:
    with _SETTINGS_LOCK:
        ts = float(_SETTINGS_CACHE.get("ts", 0.0))
        cached = _SETTINGS_CACHE.get("settings")
    return cached is None or (now - ts) > _CACHE_TTL_SEC


def reload_settings() -> FacadeSettings:
    """Force reload settings into cache (ignoring TTL)."""
    with _SETTINGS_LOCK:
        _SETTINGS_CACHE["ts"] = 0.0
    return get_settings(force_reload=True)


def get_settings(force_reload: bool = False) -> FacadeSettings:
    """
    Resolve settings with precedence:
      1) configure() overrides
      2) Environment variables
      3) Config file
      4) Defaults (library path from the facade runtime module record)
    Values are cached in-memory with a short TTL, and can be force reloaded.
    """
    now = time.time()
    if not force_reload and not _should_reload_cache(now):
        with _SETTINGS_LOCK:
            return _SETTINGS_CACHE["settings"]

    values: Dict[str, Any] = {}
    values.update(_get_config_values())
    values.update(_get_env_values())
    with _SETTINGS_LOCK:
        values.update(_OVERRIDES)

    engine_dir = str(values.get("engine_dir") or ".")
    library_path = str(values.get("library_path") or default_library_path(engine_dir))
    settings = FacadeSettings(
        library_path=library_path,
        engine_dir=engine_dir,
        log_level=str(values.get("log_level") or "INFO").upper(),
        track_handles=bool(values.get("track_handles", True)),
    )

    with _SETTINGS_LOCK:
        _SETTINGS_CACHE["settings"] = settings
        _SETTINGS_CACHE["ts"] = now

    logger.debug(
        "Settings loaded: library=%s, engine_dir=%s, log_level=%s, track_handles=%s",
        settings.library_path,
        settings.engine_dir,
        settings.log_level,
        settings.track_handles,
    )
    return settings


def get_config_dir() -> str:
    """
    Resolve and ensure the Datasmith Facade config directory exists, following the same
    platform-specific search order as _config_paths(), but returning a directory.
    """
    for d in [os.path.dirname(p) for p in _config_paths()]:
        try:
            os.makedirs(d, exist_ok=True)
            return d
        except OSError:
            continue

    # Fallback to legacy directory under home
    fallback = os.path.join(os.path.expanduser("~"), ".datasmith_facade")
    os.makedirs(fallback, exist_ok=True)
    return fallback
