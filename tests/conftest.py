import threading
import time

import pytest

import datasmith_facade.core.handle_registry as hr_mod
import datasmith_facade.core.native as native_mod
from datasmith_facade.core.actor_type import ActorType
from datasmith_facade.core.handle_registry import HandleRegistry
from datasmith_facade.core.native import NativeCallError, NativeSceneEngine


# ----------------------------
# Fake native scene engine
# ----------------------------
class _FakeActorState:
    """Native-side actor data shared by every facade proxy pointing at it."""

    def __init__(self, actor_type, name):
        self.actor_type = int(actor_type)
        self.name = name
        self.label = ""
        self.transform = None
        self.row_major = None
        self.scale = (1.0, 1.0, 1.0)
        self.translation = (0.0, 0.0, 0.0)
        self.euler = (0.0, 0.0, 0.0)
        self.quat = (0.0, 0.0, 0.0, 1.0)
        self.layer = ""
        self.tags = []
        self.component = False
        self.visible = True
        self.children = []
        self.parent = None


class FakeSceneEngine(NativeSceneEngine):
    """
    Mimics the native facade: every create/get_child/get_parent_actor hands out a
    fresh proxy pointer the caller must destroy exactly once.
    """

    def __init__(self, destroy_delay=0.0):
        self._lock = threading.Lock()
        self._next_ptr = 0x1000
        self.proxies = {}
        self.release_counts = {}
        self.calls = []
        self.destroy_delay = destroy_delay
        self.fail_create = False

    def _new_proxy(self, state):
        with self._lock:
            ptr = self._next_ptr
            self._next_ptr += 0x10
            self.proxies[ptr] = state
        return ptr

    def state(self, ptr):
        try:
            return self.proxies[ptr]
        except KeyError:
            raise RuntimeError(f"use of released native pointer {ptr:#x}")

    def total_releases(self):
        return sum(self.release_counts.values())

    # --- element ---

    def create(self, actor_type, name):
        if self.fail_create:
            raise NativeCallError(f"constructor for {name!r} returned a null pointer")
        return self._new_proxy(_FakeActorState(ActorType(actor_type), name))

    def destroy(self, ptr):
        if self.destroy_delay:
            time.sleep(self.destroy_delay)
        with self._lock:
            self.release_counts[ptr] = self.release_counts.get(ptr, 0) + 1
            if ptr not in self.proxies:
                raise RuntimeError(f"double free of native pointer {ptr:#x}")
            del self.proxies[ptr]

    def get_name(self, ptr):
        return self.state(ptr).name

    def set_name(self, ptr, name):
        self.state(ptr).name = name

    def get_label(self, ptr):
        return self.state(ptr).label

    def set_label(self, ptr, label):
        self.state(ptr).label = label

    # --- transform ---

    def set_world_transform(self, ptr, matrix, row_major):
        self.calls.append(("set_world_transform", ptr, list(matrix), row_major))
        st = self.state(ptr)
        st.transform = list(matrix)
        st.row_major = row_major

    def set_scale(self, ptr, x, y, z):
        self.state(ptr).scale = (x, y, z)

    def get_scale(self, ptr):
        return self.state(ptr).scale

    def set_translation(self, ptr, x, y, z):
        self.state(ptr).translation = (x, y, z)

    def get_translation(self, ptr):
        return self.state(ptr).translation

    def set_rotation_euler(self, ptr, pitch, yaw, roll):
        self.calls.append(("set_rotation_euler", ptr))
        self.state(ptr).euler = (pitch, yaw, roll)

    def get_rotation_euler(self, ptr):
        return self.state(ptr).euler

    def set_rotation_quat(self, ptr, x, y, z, w):
        self.calls.append(("set_rotation_quat", ptr))
        self.state(ptr).quat = (x, y, z, w)

    def get_rotation_quat(self, ptr):
        return self.state(ptr).quat

    # --- layer / tags / flags ---

    def set_layer(self, ptr, layer):
        self.state(ptr).layer = layer

    def get_layer(self, ptr):
        return self.state(ptr).layer

    def add_tag(self, ptr, tag):
        self.state(ptr).tags.append(tag)

    def reset_tags(self, ptr):
        self.state(ptr).tags = []

    def get_tags_count(self, ptr):
        return len(self.state(ptr).tags)

    def get_tag(self, ptr, index):
        return self.state(ptr).tags[index]

    def is_component(self, ptr):
        return self.state(ptr).component

    def set_is_component(self, ptr, value):
        self.state(ptr).component = value

    def set_visibility(self, ptr, visible):
        self.state(ptr).visible = visible

    def get_visibility(self, ptr):
        return self.state(ptr).visible

    # --- hierarchy ---

    def add_child(self, ptr, child_ptr):
        parent, child = self.state(ptr), self.state(child_ptr)
        if child not in parent.children:
            parent.children.append(child)
        child.parent = parent

    def remove_child(self, ptr, child_ptr):
        parent, child = self.state(ptr), self.state(child_ptr)
        if child in parent.children:
            parent.children.remove(child)
            child.parent = None

    def get_children_count(self, ptr):
        return len(self.state(ptr).children)

    def get_child(self, ptr, index):
        return self._new_proxy(self.state(ptr).children[index])

    def get_parent_actor(self, ptr):
        parent = self.state(ptr).parent
        if parent is None:
            return 0
        return self._new_proxy(parent)

    def get_actor_type(self, ptr):
        return self.state(ptr).actor_type


@pytest.fixture
def registry(monkeypatch):
    reg = HandleRegistry(enabled=True)
    monkeypatch.setattr(hr_mod, "_registry", reg, raising=True)
    return reg


@pytest.fixture
def fake_engine(monkeypatch, registry):
    engine = FakeSceneEngine()
    monkeypatch.setattr(native_mod, "_ENGINE", engine, raising=True)
    return engine
