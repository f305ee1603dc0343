"""
Datasmith Facade Native Boundary
================================

Handle-based boundary to the native scene facade library.

- NativeSceneEngine: abstract interface, one method per native entry point
- CtypesSceneEngine: ctypes binding over the shared library (UTF-16 strings, float out-params)
- Module-level engine binding (lazy load under a lock, explicit bind for register() and tests)

Pointers cross this boundary as plain integers; 0 is the null pointer.
"""

from __future__ import annotations

import ctypes
import logging
import os
import threading
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Sequence, Tuple

from .actor_type import ActorType

logger = logging.getLogger(__name__)


class FacadeError(Exception):
    """Base class for all Datasmith Facade binding errors."""
    pass


class InvalidArgumentError(FacadeError, ValueError):
    """Raised when a caller passes an argument the native layer cannot accept (e.g. a None name)."""
    pass


class NativeCallError(FacadeError):
    """Raised when a native entry point reports failure (e.g. constructor returned null)."""
    pass


class NativeLibraryError(FacadeError):
    """Raised when the native facade library cannot be located or loaded."""
    pass


Vector3 = Tuple[float, float, float]
Quaternion = Tuple[float, float, float, float]


class NativeSceneEngine(ABC):
    """Abstract native scene engine. Every call is a synchronous forward to native code."""

    @abstractmethod
    def create(self, actor_type: ActorType, name: str) -> int:
        pass

    @abstractmethod
    def destroy(self, ptr: int) -> None:
        pass

    @abstractmethod
    def get_name(self, ptr: int) -> Optional[str]:
        pass

    @abstractmethod
    def set_name(self, ptr: int, name: str) -> None:
        pass

    @abstractmethod
    def get_label(self, ptr: int) -> Optional[str]:
        pass

    @abstractmethod
    def set_label(self, ptr: int, label: str) -> None:
        pass

    @abstractmethod
    def set_world_transform(self, ptr: int, matrix: Sequence[float], row_major: bool) -> None:
        pass

    @abstractmethod
    def set_scale(self, ptr: int, x: float, y: float, z: float) -> None:
        pass

    @abstractmethod
    def get_scale(self, ptr: int) -> Vector3:
        pass

    @abstractmethod
    def set_translation(self, ptr: int, x: float, y: float, z: float) -> None:
        pass

    @abstractmethod
    def get_translation(self, ptr: int) -> Vector3:
        pass

    @abstractmethod
    def set_rotation_euler(self, ptr: int, pitch: float, yaw: float, roll: float) -> None:
        pass

    @abstractmethod
    def get_rotation_euler(self, ptr: int) -> Vector3:
        pass

    @abstractmethod
    def set_rotation_quat(self, ptr: int, x: float, y: float, z: float, w: float) -> None:
        pass

    @abstractmethod
    def get_rotation_quat(self, ptr: int) -> Quaternion:
        pass

    @abstractmethod
    def set_layer(self, ptr: int, layer: str) -> None:
        pass

    @abstractmethod
    def get_layer(self, ptr: int) -> Optional[str]:
        pass

    @abstractmethod
    def add_tag(self, ptr: int, tag: str) -> None:
        pass

    @abstractmethod
    def reset_tags(self, ptr: int) -> None:
        pass

    @abstractmethod
    def get_tags_count(self, ptr: int) -> int:
        pass

    @abstractmethod
    def get_tag(self, ptr: int, index: int) -> Optional[str]:
        pass

    @abstractmethod
    def is_component(self, ptr: int) -> bool:
        pass

    @abstractmethod
    def set_is_component(self, ptr: int, value: bool) -> None:
        pass

    @abstractmethod
    def add_child(self, ptr: int, child_ptr: int) -> None:
        pass

    @abstractmethod
    def remove_child(self, ptr: int, child_ptr: int) -> None:
        pass

    @abstractmethod
    def get_children_count(self, ptr: int) -> int:
        pass

    @abstractmethod
    def get_child(self, ptr: int, index: int) -> int:
        pass

    @abstractmethod
    def get_parent_actor(self, ptr: int) -> int:
        pass

    @abstractmethod
    def set_visibility(self, ptr: int, visible: bool) -> None:
        pass

    @abstractmethod
    def get_visibility(self, ptr: int) -> bool:
        pass

    @abstractmethod
    def get_actor_type(self, ptr: int) -> int:
        pass


# Native constructor per creatable actor type.
CONSTRUCTOR_SYMBOLS: Dict[ActorType, str] = {
    ActorType.ACTOR: "new_FDatasmithFacadeActor",
    ActorType.STATIC_MESH_ACTOR: "new_FDatasmithFacadeActorMesh",
    ActorType.CAMERA: "new_FDatasmithFacadeActorCamera",
    ActorType.DIRECTIONAL_LIGHT: "new_FDatasmithFacadeDirectionalLight",
    ActorType.AREA_LIGHT: "new_FDatasmithFacadeAreaLight",
    ActorType.LIGHTMASS_PORTAL: "new_FDatasmithFacadeLightmassPortal",
    ActorType.POINT_LIGHT: "new_FDatasmithFacadePointLight",
    ActorType.SPOT_LIGHT: "new_FDatasmithFacadeSpotLight",
}

_P = ctypes.c_void_p
_F = ctypes.c_float
_PF = ctypes.POINTER(ctypes.c_float)
# Native strings are UTF-16 on every platform; c_wchar_p is UTF-32 outside Windows
_W = ctypes.c_void_p
_B = ctypes.c_bool
_I = ctypes.c_int

# (symbol, argtypes, restype)
_SIGNATURES: Tuple[Tuple[str, list, Any], ...] = tuple(
    [(sym, [_W], _P) for sym in CONSTRUCTOR_SYMBOLS.values()]
    + [
        ("delete_FDatasmithFacadeElement", [_P], None),
        ("FDatasmithFacadeElement_GetName", [_P], _W),
        ("FDatasmithFacadeElement_SetName", [_P, _W], None),
        ("FDatasmithFacadeElement_GetLabel", [_P], _W),
        ("FDatasmithFacadeElement_SetLabel", [_P, _W], None),
        ("FDatasmithFacadeActor_SetWorldTransform__SWIG_0", [_P, _PF, _B], None),
        ("FDatasmithFacadeActor_SetScale", [_P, _F, _F, _F], None),
        ("FDatasmithFacadeActor_GetScale", [_P, _PF, _PF, _PF], None),
        ("FDatasmithFacadeActor_SetRotation__SWIG_0", [_P, _F, _F, _F], None),
        ("FDatasmithFacadeActor_GetRotation__SWIG_0", [_P, _PF, _PF, _PF], None),
        ("FDatasmithFacadeActor_SetRotation__SWIG_1", [_P, _F, _F, _F, _F], None),
        ("FDatasmithFacadeActor_GetRotation__SWIG_1", [_P, _PF, _PF, _PF, _PF], None),
        ("FDatasmithFacadeActor_SetTranslation", [_P, _F, _F, _F], None),
        ("FDatasmithFacadeActor_GetTranslation", [_P, _PF, _PF, _PF], None),
        ("FDatasmithFacadeActor_SetLayer", [_P, _W], None),
        ("FDatasmithFacadeActor_GetLayer", [_P], _W),
        ("FDatasmithFacadeActor_AddTag", [_P, _W], None),
        ("FDatasmithFacadeActor_ResetTags", [_P], None),
        ("FDatasmithFacadeActor_GetTagsCount", [_P], _I),
        ("FDatasmithFacadeActor_GetTag", [_P, _I], _W),
        ("FDatasmithFacadeActor_IsComponent", [_P], _B),
        ("FDatasmithFacadeActor_SetIsComponent", [_P, _B], None),
        ("FDatasmithFacadeActor_AddChild", [_P, _P], None),
        ("FDatasmithFacadeActor_RemoveChild", [_P, _P], None),
        ("FDatasmithFacadeActor_GetChildrenCount", [_P], _I),
        ("FDatasmithFacadeActor_GetChild", [_P, _I], _P),
        ("FDatasmithFacadeActor_GetParentActor", [_P], _P),
        ("FDatasmithFacadeActor_SetVisibility", [_P, _B], None),
        ("FDatasmithFacadeActor_GetVisibility", [_P], _B),
        ("FDatasmithFacadeActor_GetActorType", [_P], _I),
    ]
)


def _to_utf16(value: str) -> ctypes.Array:
    """NUL-terminated UTF-16-LE buffer for a native string argument."""
    data = value.encode("utf-16-le") + b"\x00\x00"
    return ctypes.create_string_buffer(data, len(data))


def _from_utf16(address: Optional[int]) -> Optional[str]:
    """Decode a NUL-terminated UTF-16 native string; a null pointer is None."""
    if not address:
        return None
    units = ctypes.cast(address, ctypes.POINTER(ctypes.c_uint16))
    length = 0
    while units[length]:
        length += 1
    return ctypes.string_at(address, length * 2).decode("utf-16-le")


def declare_signatures(lib: Any) -> Any:
    """Attach argtypes/restype to every facade symbol on a loaded library. Returns lib."""
    missing = []
    for symbol, argtypes, restype in _SIGNATURES:
        fn = getattr(lib, symbol, None)
        if fn is None:
            missing.append(symbol)
            continue
        fn.argtypes = argtypes
        fn.restype = restype
    if missing:
        raise NativeLibraryError(f"Native facade library is missing symbols: {', '.join(missing)}")
    return lib


def load_library(path: str) -> Any:
    """Open the shared library at path and declare all facade signatures."""
    if not path:
        raise NativeLibraryError("No native facade library path configured")
    if not os.path.isfile(path):
        raise NativeLibraryError(f"Native facade library not found: {path}")
    try:
        lib = ctypes.CDLL(path)
    except OSError as ex:
        raise NativeLibraryError(f"Failed to load native facade library {path}: {ex}") from ex
    logger.info(f"Loaded native facade library: {path}")
    return declare_signatures(lib)


class CtypesSceneEngine(NativeSceneEngine):
    """NativeSceneEngine over a ctypes-loaded facade library."""

    def __init__(self, lib: Any):
        self._lib = lib

    @classmethod
    def from_path(cls, path: str) -> "CtypesSceneEngine":
        return cls(load_library(path))

    # --- element ---

    def create(self, actor_type: ActorType, name: str) -> int:
        symbol = CONSTRUCTOR_SYMBOLS.get(ActorType(actor_type))
        if symbol is None:
            raise InvalidArgumentError(f"Actor type {ActorType(actor_type).name} cannot be created")
        ptr = getattr(self._lib, symbol)(_to_utf16(name))
        if not ptr:
            raise NativeCallError(f"{symbol}({name!r}) returned a null pointer")
        return int(ptr)

    def destroy(self, ptr: int) -> None:
        self._lib.delete_FDatasmithFacadeElement(ptr)

    def get_name(self, ptr: int) -> Optional[str]:
        return _from_utf16(self._lib.FDatasmithFacadeElement_GetName(ptr))

    def set_name(self, ptr: int, name: str) -> None:
        self._lib.FDatasmithFacadeElement_SetName(ptr, _to_utf16(name))

    def get_label(self, ptr: int) -> Optional[str]:
        return _from_utf16(self._lib.FDatasmithFacadeElement_GetLabel(ptr))

    def set_label(self, ptr: int, label: str) -> None:
        self._lib.FDatasmithFacadeElement_SetLabel(ptr, _to_utf16(label))

    # --- transform ---

    def set_world_transform(self, ptr: int, matrix: Sequence[float], row_major: bool) -> None:
        arr = (ctypes.c_float * 16)(*matrix)
        self._lib.FDatasmithFacadeActor_SetWorldTransform__SWIG_0(ptr, arr, bool(row_major))

    def _get_floats(self, fn, ptr: int, count: int) -> Tuple[float, ...]:
        outs = [ctypes.c_float() for _ in range(count)]
        fn(ptr, *[ctypes.pointer(o) for o in outs])
        return tuple(o.value for o in outs)

    def set_scale(self, ptr: int, x: float, y: float, z: float) -> None:
        self._lib.FDatasmithFacadeActor_SetScale(ptr, x, y, z)

    def get_scale(self, ptr: int) -> Vector3:
        return self._get_floats(self._lib.FDatasmithFacadeActor_GetScale, ptr, 3)  # type: ignore[return-value]

    def set_translation(self, ptr: int, x: float, y: float, z: float) -> None:
        self._lib.FDatasmithFacadeActor_SetTranslation(ptr, x, y, z)

    def get_translation(self, ptr: int) -> Vector3:
        return self._get_floats(self._lib.FDatasmithFacadeActor_GetTranslation, ptr, 3)  # type: ignore[return-value]

    def set_rotation_euler(self, ptr: int, pitch: float, yaw: float, roll: float) -> None:
        self._lib.FDatasmithFacadeActor_SetRotation__SWIG_0(ptr, pitch, yaw, roll)

    def get_rotation_euler(self, ptr: int) -> Vector3:
        return self._get_floats(self._lib.FDatasmithFacadeActor_GetRotation__SWIG_0, ptr, 3)  # type: ignore[return-value]

    def set_rotation_quat(self, ptr: int, x: float, y: float, z: float, w: float) -> None:
        self._lib.FDatasmithFacadeActor_SetRotation__SWIG_1(ptr, x, y, z, w)

    def get_rotation_quat(self, ptr: int) -> Quaternion:
        return self._get_floats(self._lib.FDatasmithFacadeActor_GetRotation__SWIG_1, ptr, 4)  # type: ignore[return-value]

    # --- layer / tags / flags ---

    def set_layer(self, ptr: int, layer: str) -> None:
        self._lib.FDatasmithFacadeActor_SetLayer(ptr, _to_utf16(layer))

    def get_layer(self, ptr: int) -> Optional[str]:
        return _from_utf16(self._lib.FDatasmithFacadeActor_GetLayer(ptr))

    def add_tag(self, ptr: int, tag: str) -> None:
        self._lib.FDatasmithFacadeActor_AddTag(ptr, _to_utf16(tag))

    def reset_tags(self, ptr: int) -> None:
        self._lib.FDatasmithFacadeActor_ResetTags(ptr)

    def get_tags_count(self, ptr: int) -> int:
        return int(self._lib.FDatasmithFacadeActor_GetTagsCount(ptr))

    def get_tag(self, ptr: int, index: int) -> Optional[str]:
        return _from_utf16(self._lib.FDatasmithFacadeActor_GetTag(ptr, index))

    def is_component(self, ptr: int) -> bool:
        return bool(self._lib.FDatasmithFacadeActor_IsComponent(ptr))

    def set_is_component(self, ptr: int, value: bool) -> None:
        self._lib.FDatasmithFacadeActor_SetIsComponent(ptr, bool(value))

    def set_visibility(self, ptr: int, visible: bool) -> None:
        self._lib.FDatasmithFacadeActor_SetVisibility(ptr, bool(visible))

    def get_visibility(self, ptr: int) -> bool:
        return bool(self._lib.FDatasmithFacadeActor_GetVisibility(ptr))

    # --- hierarchy ---

    def add_child(self, ptr: int, child_ptr: int) -> None:
        self._lib.FDatasmithFacadeActor_AddChild(ptr, child_ptr)

    def remove_child(self, ptr: int, child_ptr: int) -> None:
        self._lib.FDatasmithFacadeActor_RemoveChild(ptr, child_ptr)

    def get_children_count(self, ptr: int) -> int:
        return int(self._lib.FDatasmithFacadeActor_GetChildrenCount(ptr))

    def get_child(self, ptr: int, index: int) -> int:
        return int(self._lib.FDatasmithFacadeActor_GetChild(ptr, index) or 0)

    def get_parent_actor(self, ptr: int) -> int:
        return int(self._lib.FDatasmithFacadeActor_GetParentActor(ptr) or 0)

    def get_actor_type(self, ptr: int) -> int:
        return int(self._lib.FDatasmithFacadeActor_GetActorType(ptr))


# --- Module-level engine binding ---

_ENGINE_LOCK = threading.Lock()
_ENGINE: Optional[NativeSceneEngine] = None


def get_engine() -> NativeSceneEngine:
    """
    Return the bound engine, loading the configured native library on first use.
    Raises NativeLibraryError when no library can be loaded.
    """
    global _ENGINE
    with _ENGINE_LOCK:
        if _ENGINE is not None:
            return _ENGINE
        # Local import: config depends on build records, keep native importable on its own
        from ..utils.config import get_settings
        path = get_settings().library_path
        _ENGINE = CtypesSceneEngine.from_path(path)
        return _ENGINE


def set_engine(engine: NativeSceneEngine) -> None:
    """Bind an explicit engine instance (used by register() and tests)."""
    global _ENGINE
    if not isinstance(engine, NativeSceneEngine):
        raise InvalidArgumentError(f"Expected a NativeSceneEngine, got {type(engine).__name__}")
    with _ENGINE_LOCK:
        _ENGINE = engine
    logger.debug(f"Native engine bound: {type(engine).__name__}")


def reset_engine() -> None:
    """Unbind the current engine; the next get_engine() reloads from configuration."""
    global _ENGINE
    with _ENGINE_LOCK:
        _ENGINE = None


def is_engine_bound() -> bool:
    with _ENGINE_LOCK:
        return _ENGINE is not None
