# Datasmith Facade actor discriminant
# Mirrors the native EActorType enumeration; values must stay in sync with the native library.

from __future__ import annotations

from enum import IntEnum


class ActorType(IntEnum):
    """Native actor type discriminant (EActorType)."""
    DIRECTIONAL_LIGHT = 0
    AREA_LIGHT = 1
    ENVIRONMENT_LIGHT = 2
    LIGHTMASS_PORTAL = 3
    POINT_LIGHT = 4
    SPOT_LIGHT = 5
    STATIC_MESH_ACTOR = 6
    CAMERA = 7
    ACTOR = 8
    UNSUPPORTED = 9

    @classmethod
    def from_native(cls, value: int) -> "ActorType":
        """Map a raw native integer to a member; unknown values become UNSUPPORTED."""
        try:
            return cls(int(value))
        except (TypeError, ValueError):
            return cls.UNSUPPORTED
