"""
Datasmith Facade Handle Registry
================================

Process-wide ledger of owning native handles:
- Creation / explicit release / finalizer release tracking per native pointer
- Leak detection (owning handles that were only released by the garbage collector)
- Aggregated statistics with process memory usage for diagnostics

Missing explicit disposal is a leak reported here, not a correctness failure:
the finalizer still releases the native object exactly once.
"""

from __future__ import annotations

import logging
import os
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

import psutil

logger = logging.getLogger(__name__)


class ReleaseKind(Enum):
    """How an owning handle released its native object"""
    EXPLICIT = "explicit"      # dispose() / context manager exit
    FINALIZER = "finalizer"    # garbage collector reached an undisposed owner


@dataclass
class HandleRecord:
    """Single tracked owning handle"""
    pointer: int
    type_name: str
    created_at: float = field(default_factory=time.time)
    released_at: Optional[float] = None
    release_kind: Optional[ReleaseKind] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'pointer': hex(self.pointer),
            'type_name': self.type_name,
            'created_at': self.created_at,
            'released_at': self.released_at,
            'release_kind': self.release_kind.value if self.release_kind else None,
        }


@dataclass
class HandleStats:
    """Aggregated handle statistics"""
    created: int = 0
    released: int = 0
    leaked: int = 0
    live: int = 0
    process_rss_mb: float = 0.0


class HandleRegistry:
    """Thread-safe ledger of owning handles"""

    def __init__(self, enabled: bool = True, max_history: int = 1000):
        self.enabled = enabled
        self.max_history = max_history
        # Reentrant: a garbage-collector pass can run a finalizer on a thread already holding it
        self._lock = threading.RLock()
        self._live: Dict[int, HandleRecord] = {}
        self._leaks: List[HandleRecord] = []
        self._created = 0
        self._released = 0

    def track_created(self, pointer: int, type_name: str) -> None:
        """Record a new owning handle"""
        if not self.enabled or not pointer:
            return
        record = HandleRecord(pointer=pointer, type_name=type_name)
        with self._lock:
            self._live[pointer] = record
            self._created += 1
        logger.debug(f"Tracked owning handle {type_name}@{pointer:#x}")

    def track_released(self, pointer: int, kind: ReleaseKind = ReleaseKind.EXPLICIT) -> None:
        """Record the release of an owning handle"""
        if not self.enabled or not pointer:
            return
        with self._lock:
            record = self._live.pop(pointer, None)
            if record is None:
                return
            self._released += 1
            record.released_at = time.time()
            record.release_kind = kind
            if kind is ReleaseKind.FINALIZER:
                self._leaks.append(record)
                if len(self._leaks) > self.max_history:
                    del self._leaks[:-self.max_history]
        if kind is ReleaseKind.FINALIZER:
            logger.warning(
                f"Leaked {record.type_name}@{pointer:#x}: released by finalizer, dispose() was never called"
            )

    def live_handles(self) -> List[HandleRecord]:
        """Owning handles not yet released"""
        with self._lock:
            return list(self._live.values())

    def leaks(self) -> List[HandleRecord]:
        with self._lock:
            return list(self._leaks)

    def snapshot(self) -> HandleStats:
        """Current aggregated statistics"""
        try:
            rss_mb = psutil.Process(os.getpid()).memory_info().rss / (1024 ** 2)
        except psutil.Error as ex:
            logger.debug(f"Could not read process memory: {ex}")
            rss_mb = 0.0
        with self._lock:
            return HandleStats(
                created=self._created,
                released=self._released,
                leaked=len(self._leaks),
                live=len(self._live),
                process_rss_mb=round(rss_mb, 2),
            )

    def report_leaks(self) -> List[HandleRecord]:
        """
        Log every leaked and still-live owning handle.

        Returns:
            Leaked records followed by live records
        """
        with self._lock:
            leaked = list(self._leaks)
            live = list(self._live.values())
        for rec in leaked:
            logger.warning(f"Leak: {rec.type_name}@{rec.pointer:#x} was released by the finalizer")
        for rec in live:
            logger.warning(f"Live owning handle at shutdown: {rec.type_name}@{rec.pointer:#x}")
        if not leaked and not live:
            logger.info("No leaked facade handles")
        return leaked + live

    def reset(self) -> None:
        with self._lock:
            self._live.clear()
            self._leaks.clear()
            self._created = 0
            self._released = 0


# Global registry instance
_registry: Optional[HandleRegistry] = None
_registry_lock = threading.RLock()


def get_registry() -> HandleRegistry:
    """Get the process-wide handle registry"""
    global _registry
    registry = _registry
    if registry is not None:
        return registry
    with _registry_lock:
        if _registry is None:
            from ..utils.config import get_settings
            _registry = HandleRegistry(enabled=get_settings().track_handles)
        return _registry
