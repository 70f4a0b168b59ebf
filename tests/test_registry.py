from types import SimpleNamespace

import psutil
import pytest

from mediaremote.control import registry as registry_module
from mediaremote.control.registry import TargetRegistry, default_registry, is_process_running
from mediaremote.control.targets import BUILTIN_TARGETS, COG, MUSIC, RADICCIO
from mediaremote.errors import InvalidParameter, TargetNotFound


def _processes(*names):
    def process_iter(attrs=None):
        return [SimpleNamespace(info={"name": name}) for name in names]
    return process_iter


def test_default_registry_keeps_builtin_order() -> None:
    registry = default_registry()

    assert registry.active_targets() == BUILTIN_TARGETS
    assert len(registry) == 5


def test_resolve_by_identity_or_name() -> None:
    registry = default_registry()

    assert registry.resolve("org.cogx.cog") is COG
    assert registry.resolve("radiccio") is RADICCIO
    assert "Music" in registry
    assert "Winamp" not in registry
    assert 42 not in registry
    with pytest.raises(TargetNotFound):
        registry.resolve("Winamp")


def test_duplicate_identity_is_rejected() -> None:
    registry = TargetRegistry([COG])

    with pytest.raises(InvalidParameter):
        registry.register(COG)
    assert len(registry) == 1


def test_unregister() -> None:
    registry = TargetRegistry([COG, MUSIC, RADICCIO])
    snapshot = registry.active_targets()

    assert registry.unregister("Music") is MUSIC
    assert registry.active_targets() == (COG, RADICCIO)
    # Earlier snapshots are unaffected.
    assert snapshot == (COG, MUSIC, RADICCIO)
    with pytest.raises(TargetNotFound):
        registry.unregister("Music")


def test_running_targets(monkeypatch) -> None:
    monkeypatch.setattr(registry_module.psutil, "process_iter", _processes("launchd", "Cog", None, "Radiccio"))

    assert default_registry().running_targets() == [COG, RADICCIO]


def test_is_process_running_tolerates_process_errors(monkeypatch) -> None:
    def process_iter(attrs=None):
        raise psutil.AccessDenied()

    monkeypatch.setattr(registry_module.psutil, "process_iter", process_iter)

    assert is_process_running("Cog") is False


def test_helper_processes_do_not_count_as_the_player(monkeypatch) -> None:
    monkeypatch.setattr(registry_module.psutil, "process_iter", _processes("MusicCacheExtension", "cog"))

    assert default_registry().running_targets() == [COG]
