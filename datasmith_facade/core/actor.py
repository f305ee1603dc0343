"""
Datasmith Facade Actor
======================

Managed view over a native scene actor: transform, layer, tags, component flag,
visibility and the parent/child hierarchy. Hierarchy storage lives on the native
side; this wrapper only requests and queries it.

Every handle-returning query (get_child, get_parent_actor) rebuilds the most
derived wrapper type from the native discriminant, see core.factory.
"""

from __future__ import annotations

import logging
from typing import Iterator, List, Optional, Sequence, Tuple

from .actor_type import ActorType
from .element import FacadeElement
from .native import InvalidArgumentError, NativeSceneEngine

logger = logging.getLogger(__name__)


def _flatten_matrix(matrix: Sequence) -> List[float]:
    """Accept 16 floats or 4 rows of 4 floats."""
    if len(matrix) == 4 and all(isinstance(row, (list, tuple)) for row in matrix):
        values = [v for row in matrix for v in row]
    else:
        values = list(matrix)
    if len(values) != 16:
        raise InvalidArgumentError(f"World transform needs 16 values, got {len(values)}")
    try:
        return [float(v) for v in values]
    except (TypeError, ValueError) as ex:
        raise InvalidArgumentError(f"World transform values must be numbers: {ex}") from ex


class FacadeActor(FacadeElement):
    """Generic scene actor. Subclasses narrow ACTOR_TYPE."""

    ACTOR_TYPE = ActorType.ACTOR

    @classmethod
    def _native_create(cls, engine: NativeSceneEngine, name: str) -> int:
        return engine.create(cls.ACTOR_TYPE, name)

    # --- transform ---

    def set_world_transform(self, matrix: Sequence, row_major: bool = True) -> None:
        """Push a 4x4 world transform; layout is row-major unless row_major=False."""
        self._call("set_world_transform", _flatten_matrix(matrix), bool(row_major))

    def set_scale(self, x: float, y: float, z: float) -> None:
        self._call("set_scale", x, y, z)

    def get_scale(self) -> Tuple[float, float, float]:
        return self._call("get_scale")

    def set_translation(self, x: float, y: float, z: float) -> None:
        self._call("set_translation", x, y, z)

    def get_translation(self) -> Tuple[float, float, float]:
        return self._call("get_translation")

    def set_rotation(self, *components: float) -> None:
        """
        set_rotation(pitch, yaw, roll) sets an Euler rotation,
        set_rotation(x, y, z, w) sets a quaternion. The two are distinct native operations.
        """
        if len(components) == 3:
            self.set_rotation_euler(*components)
        elif len(components) == 4:
            self.set_rotation_quat(*components)
        else:
            raise InvalidArgumentError(
                f"set_rotation takes 3 (pitch, yaw, roll) or 4 (x, y, z, w) values, got {len(components)}"
            )

    def set_rotation_euler(self, pitch: float, yaw: float, roll: float) -> None:
        self._call("set_rotation_euler", pitch, yaw, roll)

    def set_rotation_quat(self, x: float, y: float, z: float, w: float) -> None:
        self._call("set_rotation_quat", x, y, z, w)

    def get_rotation(self, quaternion: bool = False) -> Tuple[float, ...]:
        # The native layer decides the stored representation; both reads are always allowed
        if quaternion:
            return self.get_rotation_quat()
        return self.get_rotation_euler()

    def get_rotation_euler(self) -> Tuple[float, float, float]:
        return self._call("get_rotation_euler")

    def get_rotation_quat(self) -> Tuple[float, float, float, float]:
        return self._call("get_rotation_quat")

    # --- layer and tags ---

    def set_layer(self, layer: str) -> None:
        if layer is None:
            raise InvalidArgumentError("Layer name cannot be None")
        self._call("set_layer", layer)

    def get_layer(self) -> Optional[str]:
        """Layer name, or None when unset."""
        return self._call("get_layer") or None

    def add_tag(self, tag: str) -> None:
        if tag is None:
            raise InvalidArgumentError("Tag cannot be None")
        self._call("add_tag", tag)

    def reset_tags(self) -> None:
        self._call("reset_tags")

    def get_tags_count(self) -> int:
        return self._call("get_tags_count")

    def get_tag(self, index: int) -> Optional[str]:
        """Tag at index. Raises IndexError outside [0, get_tags_count())."""
        with self._lock:
            count = self.get_tags_count()
            if not 0 <= index < count:
                raise IndexError(f"Tag index {index} out of range for {count} tags")
            return self._call("get_tag", index)

    def get_tags(self) -> List[str]:
        with self._lock:
            return [self._call("get_tag", i) for i in range(self.get_tags_count())]

    # --- flags ---

    def is_component(self) -> bool:
        return self._call("is_component")

    def set_is_component(self, value: bool) -> None:
        self._call("set_is_component", bool(value))

    def set_visibility(self, visible: bool) -> None:
        self._call("set_visibility", bool(visible))

    def get_visibility(self) -> bool:
        return self._call("get_visibility")

    def get_actor_type(self) -> ActorType:
        return ActorType.from_native(self._call("get_actor_type"))

    # --- hierarchy ---

    def _child_pointer(self, child: "FacadeActor") -> int:
        if child is None:
            raise InvalidArgumentError("Child actor cannot be None")
        if not isinstance(child, FacadeActor):
            raise InvalidArgumentError(f"Child must be a FacadeActor, got {type(child).__name__}")
        if child is self:
            raise InvalidArgumentError("An actor cannot be its own child")
        with child._lock:
            return child._checked_pointer()

    def add_child(self, child: "FacadeActor") -> None:
        self._call("add_child", self._child_pointer(child))

    def remove_child(self, child: "FacadeActor") -> None:
        """Remove child from this actor; removing an absent child is a native no-op."""
        self._call("remove_child", self._child_pointer(child))

    def get_children_count(self) -> int:
        return self._call("get_children_count")

    def get_child(self, index: int) -> Optional["FacadeActor"]:
        """
        Child at index as its most derived wrapper (owning), or None when the
        native child type has no wrapper. Raises IndexError outside [0, get_children_count()).
        """
        with self._lock:
            count = self.get_children_count()
            if not 0 <= index < count:
                raise IndexError(f"Child index {index} out of range for {count} children")
            raw = self._call("get_child", index)
            return self._reconstruct(raw)

    def iter_children(self) -> Iterator["FacadeActor"]:
        """Yield wrappers for every supported child; unsupported children are skipped."""
        for index in range(self.get_children_count()):
            child = self.get_child(index)
            if child is not None:
                yield child

    def get_parent_actor(self) -> Optional["FacadeActor"]:
        """Parent as its most derived wrapper (owning), or None without a supported parent."""
        with self._lock:
            raw = self._call("get_parent_actor")
            return self._reconstruct(raw)

    def _reconstruct(self, raw: int) -> Optional["FacadeActor"]:
        # factory imports this module
        from .factory import actor_from_pointer
        return actor_from_pointer(raw, self._engine)
