# Datasmith Facade wrapper factory
#
# Rebuilds the most derived wrapper for a native actor pointer handed back by the native layer:
#   1) null pointer                      -> None
#   2) probe the pointer (borrowed) and read its ActorType discriminant
#   3) known discriminant                -> concrete wrapper that owns the pointer from now on
#   4) Unsupported / unknown discriminant -> None, and the native object handed to us is released
#
# The probe is detached, never disposed, so at no point do two wrappers own the same pointer.

from __future__ import annotations

import logging
from typing import Dict, FrozenSet, Optional, Type

from .actor import FacadeActor
from .actor_type import ActorType
from .actors import (
    FacadeActorCamera,
    FacadeActorMesh,
    FacadeAreaLight,
    FacadeDirectionalLight,
    FacadeLightmassPortal,
    FacadePointLight,
    FacadeSpotLight,
)
from .native import NativeSceneEngine

logger = logging.getLogger(__name__)

ACTOR_CLASSES: Dict[ActorType, Type[FacadeActor]] = {
    ActorType.DIRECTIONAL_LIGHT: FacadeDirectionalLight,
    ActorType.AREA_LIGHT: FacadeAreaLight,
    ActorType.LIGHTMASS_PORTAL: FacadeLightmassPortal,
    ActorType.POINT_LIGHT: FacadePointLight,
    ActorType.SPOT_LIGHT: FacadeSpotLight,
    ActorType.STATIC_MESH_ACTOR: FacadeActorMesh,
    ActorType.CAMERA: FacadeActorCamera,
    ActorType.ACTOR: FacadeActor,
}

# Discriminants the native layer can report but that have no wrapper.
UNWRAPPABLE: FrozenSet[ActorType] = frozenset({
    ActorType.ENVIRONMENT_LIGHT,
    ActorType.UNSUPPORTED,
})


def _check_exhaustive() -> None:
    covered = set(ACTOR_CLASSES) | set(UNWRAPPABLE)
    missing = [t.name for t in ActorType if t not in covered]
    overlap = [t.name for t in set(ACTOR_CLASSES) & set(UNWRAPPABLE)]
    if missing or overlap:
        raise RuntimeError(f"ActorType dispatch table is inconsistent: missing={missing}, overlap={overlap}")


_check_exhaustive()


def wrapper_class_for(actor_type: ActorType) -> Optional[Type[FacadeActor]]:
    """Wrapper class for a discriminant, or None when the type has no wrapper."""
    return ACTOR_CLASSES.get(ActorType.from_native(actor_type))


def actor_from_pointer(ptr: int, engine: NativeSceneEngine) -> Optional[FacadeActor]:
    """
    Wrap a native actor pointer returned by the native layer in its most derived wrapper.

    Parameters:
      - ptr: native pointer; ownership passes to the caller of this function
      - engine: the engine the pointer belongs to

    Returns an owning wrapper, or None for a null pointer or an unwrappable discriminant.
    """
    if not ptr:
        return None

    probe = FacadeActor._wrap(ptr, False, engine)
    try:
        actor_type = probe.get_actor_type()
    except Exception:
        probe._detach()
        engine.destroy(ptr)
        raise
    probe._detach()

    cls = ACTOR_CLASSES.get(actor_type)
    if cls is None:
        logger.debug(f"Native actor {ptr:#x} has unwrappable type {actor_type.name}; releasing it")
        engine.destroy(ptr)
        return None

    return cls._wrap(ptr, True, engine)
