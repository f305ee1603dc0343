# Datasmith Facade: Python bindings for the Datasmith scene facade actor hierarchy
#
# Wraps native facade actors (lights, meshes, cameras, generic actors) behind
# ownership-aware handles and rebuilds the most derived wrapper for every actor
# the native library hands back.
#
# License: MIT

import logging
from typing import List, Optional

__version__ = "0.1.0"

# Global logger for the package
logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

# Handler to stderr
handler = logging.StreamHandler()
handler.setLevel(logging.DEBUG)
formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
handler.setFormatter(formatter)
logger.addHandler(handler)

from .core import (  # noqa: E402
    ActorType,
    FacadeActor,
    FacadeActorCamera,
    FacadeActorLight,
    FacadeActorMesh,
    FacadeAreaLight,
    FacadeDirectionalLight,
    FacadeElement,
    FacadeError,
    FacadeLightmassPortal,
    FacadePointLight,
    FacadeSpotLight,
    HandleRecord,
    InvalidArgumentError,
    InvalidHandleError,
    NativeCallError,
    NativeLibraryError,
    NativeSceneEngine,
    get_registry,
)


def register(engine: Optional[NativeSceneEngine] = None) -> None:
    """Bind the native engine and apply configured logging. Call once at host startup."""
    from . import core
    from .utils.config import get_settings

    settings = get_settings()
    logger.setLevel(getattr(logging, settings.log_level, logging.INFO))
    logger.info("Registering Datasmith Facade bindings...")
    core.register(engine)
    logger.info("Datasmith Facade bindings registered.")


def unregister() -> List[HandleRecord]:
    """Report leaked handles and unbind the native engine. Returns the reported records."""
    from . import core

    logger.info("Unregistering Datasmith Facade bindings...")
    reported = core.unregister()
    logger.info("Datasmith Facade bindings unregistered.")
    return reported


__all__ = [
    "ActorType",
    "FacadeActor",
    "FacadeActorCamera",
    "FacadeActorLight",
    "FacadeActorMesh",
    "FacadeAreaLight",
    "FacadeDirectionalLight",
    "FacadeElement",
    "FacadeError",
    "FacadeLightmassPortal",
    "FacadePointLight",
    "FacadeSpotLight",
    "InvalidArgumentError",
    "InvalidHandleError",
    "NativeCallError",
    "NativeLibraryError",
    "NativeSceneEngine",
    "get_registry",
    "register",
    "unregister",
]
