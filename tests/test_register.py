import logging

import pytest

import datasmith_facade
import datasmith_facade.core.native as native_mod
from datasmith_facade.core.actor import FacadeActor
from datasmith_facade.core.native import InvalidArgumentError, NativeLibraryError
from datasmith_facade.utils.config import clear_overrides, configure

from conftest import FakeSceneEngine


@pytest.fixture
def unbound(monkeypatch, registry):
    monkeypatch.setattr(native_mod, "_ENGINE", None, raising=True)
    clear_overrides()
    yield
    clear_overrides()


def test_register_binds_explicit_engine(unbound):
    engine = FakeSceneEngine()
    datasmith_facade.register(engine)
    assert native_mod.get_engine() is engine
    actor = FacadeActor("Bound")
    assert actor.engine is engine
    actor.dispose()


def test_unregister_unbinds_engine(unbound):
    datasmith_facade.register(FakeSceneEngine())
    datasmith_facade.unregister()
    assert not native_mod.is_engine_bound()


def test_set_engine_rejects_non_engines(unbound):
    with pytest.raises(InvalidArgumentError):
        native_mod.set_engine(object())


def test_unloadable_library_raises_on_first_use(unbound, tmp_path):
    configure(library_path=str(tmp_path / "missing.so"))
    with pytest.raises(NativeLibraryError):
        native_mod.get_engine()
    with pytest.raises(NativeLibraryError):
        FacadeActor("NoLibrary")
    assert not native_mod.is_engine_bound()


def test_unregister_returns_reported_handles_once(unbound, caplog):
    datasmith_facade.register(FakeSceneEngine())
    forgotten = FacadeActor("Forgotten")
    ptr = forgotten.pointer
    with caplog.at_level(logging.WARNING):
        reported = datasmith_facade.unregister()
    assert [rec.pointer for rec in reported] == [ptr]
    warnings = [r for r in caplog.records if r.levelno >= logging.WARNING and f"{ptr:#x}" in r.getMessage()]
    assert len(warnings) == 1
    forgotten._detach()
