# Concrete Datasmith Facade actor wrappers.
# Each class pins ACTOR_TYPE, which selects the native constructor and the reconstruction target.

from __future__ import annotations

from .actor import FacadeActor
from .actor_type import ActorType


class FacadeActorMesh(FacadeActor):
    """Static mesh actor."""
    ACTOR_TYPE = ActorType.STATIC_MESH_ACTOR


class FacadeActorCamera(FacadeActor):
    """Camera actor."""
    ACTOR_TYPE = ActorType.CAMERA


class FacadeActorLight(FacadeActor):
    """Common base of light actors; not constructible itself."""

    @classmethod
    def _native_create(cls, engine, name: str) -> int:
        if cls is FacadeActorLight:
            raise TypeError("FacadeActorLight is abstract; create a concrete light type")
        return super()._native_create(engine, name)


class FacadeDirectionalLight(FacadeActorLight):
    ACTOR_TYPE = ActorType.DIRECTIONAL_LIGHT


class FacadeAreaLight(FacadeActorLight):
    ACTOR_TYPE = ActorType.AREA_LIGHT


class FacadeLightmassPortal(FacadeActorLight):
    ACTOR_TYPE = ActorType.LIGHTMASS_PORTAL


class FacadePointLight(FacadeActorLight):
    ACTOR_TYPE = ActorType.POINT_LIGHT


class FacadeSpotLight(FacadePointLight):
    """Spot light; a point light with a cone, as on the native side."""
    ACTOR_TYPE = ActorType.SPOT_LIGHT
