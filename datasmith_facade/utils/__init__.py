# Datasmith Facade Utils module

from .config import FacadeSettings, configure, get_config_dir, get_settings, reload_settings

__all__ = [
    "FacadeSettings",
    "configure",
    "get_config_dir",
    "get_settings",
    "reload_settings",
]
