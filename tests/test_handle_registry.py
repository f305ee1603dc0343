import logging

from datasmith_facade.core.handle_registry import HandleRegistry, ReleaseKind


def test_explicit_release_lifecycle():
    reg = HandleRegistry()
    reg.track_created(0x100, "FacadeActor")
    assert [r.pointer for r in reg.live_handles()] == [0x100]
    reg.track_released(0x100, ReleaseKind.EXPLICIT)
    stats = reg.snapshot()
    assert (stats.created, stats.released, stats.leaked, stats.live) == (1, 1, 0, 0)
    assert stats.process_rss_mb > 0


def test_finalizer_release_is_a_leak(caplog):
    reg = HandleRegistry()
    reg.track_created(0x200, "FacadePointLight")
    with caplog.at_level(logging.WARNING):
        reg.track_released(0x200, ReleaseKind.FINALIZER)
    leaks = reg.leaks()
    assert len(leaks) == 1
    assert leaks[0].release_kind is ReleaseKind.FINALIZER
    assert leaks[0].to_dict()["pointer"] == "0x200"
    assert "FacadePointLight" in caplog.text


def test_report_leaks_includes_live_handles():
    reg = HandleRegistry()
    reg.track_created(0x300, "FacadeActor")
    reg.track_created(0x310, "FacadeActorMesh")
    reg.track_released(0x300, ReleaseKind.FINALIZER)
    reported = reg.report_leaks()
    assert [r.pointer for r in reported] == [0x300, 0x310]


def test_leak_history_is_bounded():
    reg = HandleRegistry(max_history=3)
    for i in range(1, 6):
        reg.track_created(i, "FacadeActor")
        reg.track_released(i, ReleaseKind.FINALIZER)
    assert [r.pointer for r in reg.leaks()] == [3, 4, 5]


def test_disabled_registry_records_nothing():
    reg = HandleRegistry(enabled=False)
    reg.track_created(0x400, "FacadeActor")
    reg.track_released(0x400, ReleaseKind.FINALIZER)
    stats = reg.snapshot()
    assert stats.created == 0
    assert reg.leaks() == []


def test_reset_clears_everything():
    reg = HandleRegistry()
    reg.track_created(0x500, "FacadeActor")
    reg.reset()
    assert reg.live_handles() == []
    assert reg.snapshot().created == 0


def test_untracked_release_is_not_counted():
    reg = HandleRegistry()
    reg.track_created(0x600, "FacadeActor")
    reg.track_released(0x999, ReleaseKind.EXPLICIT)
    reg.track_released(0x600, ReleaseKind.EXPLICIT)
    reg.track_released(0x600, ReleaseKind.EXPLICIT)
    stats = reg.snapshot()
    assert stats.created == 1
    assert stats.released == 1
