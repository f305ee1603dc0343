# Datasmith Facade Core module

import logging
from typing import List, Optional

from . import native
from .actor import FacadeActor
from .actor_type import ActorType
from .actors import (
    FacadeActorCamera,
    FacadeActorLight,
    FacadeActorMesh,
    FacadeAreaLight,
    FacadeDirectionalLight,
    FacadeLightmassPortal,
    FacadePointLight,
    FacadeSpotLight,
)
from .element import FacadeElement, InvalidHandleError
from .factory import actor_from_pointer, wrapper_class_for
from .handle_registry import HandleRecord, HandleRegistry, HandleStats, get_registry
from .native import (
    CtypesSceneEngine,
    FacadeError,
    InvalidArgumentError,
    NativeCallError,
    NativeLibraryError,
    NativeSceneEngine,
)

logger = logging.getLogger(__name__)


def register(engine: Optional[NativeSceneEngine] = None) -> None:
    """Bind the native engine (explicit, or loaded from configuration) and start handle tracking."""
    if engine is not None:
        native.set_engine(engine)
    else:
        native.get_engine()
    get_registry()


def unregister() -> List[HandleRecord]:
    """Report leaked handles and unbind the native engine. Returns the reported records."""
    reported = get_registry().report_leaks()
    native.reset_engine()
    return reported


__all__ = [
    "ActorType",
    "CtypesSceneEngine",
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
    "HandleRecord",
    "HandleRegistry",
    "HandleStats",
    "InvalidArgumentError",
    "InvalidHandleError",
    "NativeCallError",
    "NativeLibraryError",
    "NativeSceneEngine",
    "actor_from_pointer",
    "get_registry",
    "register",
    "unregister",
    "wrapper_class_for",
]
