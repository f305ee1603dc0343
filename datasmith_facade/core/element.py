# Datasmith Facade Element: ownership-aware wrapper around an opaque native pointer
#
# Responsibilities:
# - Own (or borrow) exactly one native facade object for the wrapper's lifetime
# - Release an owned native object exactly once, from dispose() or the finalizer, never both
# - Fail fast on any native call through an empty (disposed or null) handle
# - Serialize every native call with disposal through a per-instance reentrant lock
#
# Construction paths:
#   Cls(name, engine=None)              -> new native object, owning
#   Cls._wrap(ptr, owns_memory, engine) -> existing native object (probes, reconstruction)

from __future__ import annotations

import logging
import threading
from typing import Any, Optional

from . import native
from .handle_registry import ReleaseKind, get_registry
from .native import FacadeError, InvalidArgumentError, NativeSceneEngine

logger = logging.getLogger(__name__)


class InvalidHandleError(FacadeError):
    """Raised when a native call is attempted through a disposed or null handle."""
    pass


class FacadeElement:
    """Base wrapper for every native facade element."""

    def __init__(self, name: str, engine: Optional[NativeSceneEngine] = None) -> None:
        if name is None:
            raise InvalidArgumentError(f"{type(self).__name__} requires a name, got None")
        if not isinstance(name, str):
            raise InvalidArgumentError(f"{type(self).__name__} name must be a string, got {type(name).__name__}")
        # Lock first so the finalizer is safe even if native creation fails below
        self._lock = threading.RLock()
        self._ptr = 0
        self._owns_memory = False
        self._engine = engine if engine is not None else native.get_engine()
        ptr = self._native_create(self._engine, name)
        self._attach(ptr, True, self._engine)

    @classmethod
    def _native_create(cls, engine: NativeSceneEngine, name: str) -> int:
        raise NotImplementedError(f"{cls.__name__} cannot be created directly")

    @classmethod
    def _wrap(cls, ptr: int, owns_memory: bool, engine: NativeSceneEngine) -> "FacadeElement":
        """Wrap an existing native pointer without calling the native constructor."""
        obj = cls.__new__(cls)
        obj._lock = threading.RLock()
        obj._attach(ptr, owns_memory, engine)
        return obj

    def _attach(self, ptr: int, owns_memory: bool, engine: NativeSceneEngine) -> None:
        with self._lock:
            self._engine = engine
            self._ptr = int(ptr or 0)
            self._owns_memory = bool(owns_memory) and self._ptr != 0
        if self._owns_memory:
            get_registry().track_created(self._ptr, type(self).__name__)

    # --- handle state ---

    @property
    def pointer(self) -> int:
        return self._ptr

    @property
    def owns_memory(self) -> bool:
        return self._owns_memory

    @property
    def engine(self) -> NativeSceneEngine:
        return self._engine

    @property
    def is_valid(self) -> bool:
        return self._ptr != 0

    def __bool__(self) -> bool:
        return self.is_valid

    def __repr__(self) -> str:
        if not self._ptr:
            return f"<{type(self).__name__} empty>"
        return f"<{type(self).__name__} {self._ptr:#x} {'owned' if self._owns_memory else 'borrowed'}>"

    def _checked_pointer(self) -> int:
        ptr = self._ptr
        if not ptr:
            raise InvalidHandleError(f"{type(self).__name__} handle is empty (disposed or null)")
        return ptr

    def _call(self, method: str, *args: Any) -> Any:
        """Forward one native call under the handle lock."""
        with self._lock:
            ptr = self._checked_pointer()
            return getattr(self._engine, method)(ptr, *args)

    # --- lifetime ---

    def dispose(self) -> None:
        """
        Release the native object if this handle owns it, then clear the handle.
        Idempotent; a borrowed handle only drops its reference.
        """
        self._release(ReleaseKind.EXPLICIT)

    def _release(self, kind: ReleaseKind) -> None:
        lock = getattr(self, "_lock", None)
        if lock is None:
            return
        with lock:
            ptr = self._ptr
            if not ptr:
                return
            owned = self._owns_memory
            # Handle is emptied before the native call so a failing destroy is never retried
            self._owns_memory = False
            self._ptr = 0
            if not owned:
                return
            try:
                self._engine.destroy(ptr)
            finally:
                get_registry().track_released(ptr, kind)
            logger.debug(f"Released {type(self).__name__}@{ptr:#x} ({kind.value})")

    def _detach(self) -> int:
        """Clear the handle without releasing anything. Returns the former pointer."""
        with self._lock:
            ptr = self._ptr
            self._ptr = 0
            self._owns_memory = False
            return ptr

    def __del__(self) -> None:
        try:
            self._release(ReleaseKind.FINALIZER)
        except Exception as ex:
            # Exceptions cannot propagate out of a finalizer
            logger.error(f"Finalizer failed to release {type(self).__name__}: {ex}")

    def __enter__(self) -> "FacadeElement":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.dispose()

    # --- element properties ---

    def get_name(self) -> Optional[str]:
        return self._call("get_name")

    def set_name(self, name: str) -> None:
        if name is None:
            raise InvalidArgumentError("Element name cannot be None")
        self._call("set_name", name)

    def get_label(self) -> Optional[str]:
        return self._call("get_label")

    def set_label(self, label: str) -> None:
        if label is None:
            raise InvalidArgumentError("Element label cannot be None")
        self._call("set_label", label)
