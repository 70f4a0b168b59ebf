from __future__ import annotations

from pathlib import Path

import pytest

from fakes import FakeProxy, make_radiccio

from mediaremote.control import (
    Application,
    MediaDispatcher,
    ObjectReference,
    PlaylistEntry,
    SaveOption,
    Window,
    default_registry,
)
from mediaremote.control.base import DIRECT_PARAMETER
from mediaremote.control.objects import check_value_type
from mediaremote.control.schema import ObjectKind, PropertyType, TargetProperty
from mediaremote.errors import (
    ObjectGone,
    OperationUnsupportedByTarget,
    PropertyNotReadable,
    RemoteTimeout,
    TypeMismatch,
)


@pytest.fixture
def cog(dispatcher: MediaDispatcher) -> Application:
    return dispatcher.application("Cog")


@pytest.fixture
def window(cog: Application) -> Window:
    return cog.windows()[0]


def test_windows_are_typed_handles(window: Window) -> None:
    assert isinstance(window, Window)
    assert window.path == ("window id 3",)
    assert window.get_property("name") == "Playlist"
    assert window.bounds == (0, 0, 800, 600)


@pytest.mark.parametrize("option, code", [(SaveOption.ASK, "ask"), (SaveOption.NO, "no"), (SaveOption.YES, "yes")])
def test_close_sends_the_target_save_code(window: Window, proxy: FakeProxy, option, code) -> None:
    window.close_saving(option)

    call = proxy.commands()[-1]
    assert call[1:4] == (("window id 3",), "close", {"saving": code})


def test_close_without_options_sends_no_parameters(window: Window, proxy: FakeProxy) -> None:
    window.close_saving()

    assert proxy.commands()[-1][3] == {}


def test_close_with_destination(window: Window, proxy: FakeProxy) -> None:
    window.close_saving(SaveOption.YES, "/tmp/playlist.m3u")

    params = proxy.commands()[-1][3]
    assert params["saving in"] == Path("/tmp/playlist.m3u")


def test_setting_a_read_only_property_makes_no_remote_call(window: Window, proxy: FakeProxy) -> None:
    before = len(proxy.calls)

    with pytest.raises(PropertyNotReadable):
        window.set_property("closeable", False)

    assert len(proxy.calls) == before


def test_setting_a_property_checks_its_type(window: Window, proxy: FakeProxy) -> None:
    with pytest.raises(TypeMismatch):
        window.set_property("zoomed", "yes")
    with pytest.raises(TypeMismatch):
        window.bounds = (0, 0, 800)

    window.bounds = (10, 20, 500, 400)
    assert proxy.apps["org.cogx.cog"].objects[("window id 3",)]["bounds"] == [10, 20, 500, 400]


def test_unknown_property_is_unsupported(window: Window) -> None:
    with pytest.raises(OperationUnsupportedByTarget):
        window.get_property("colour")


def test_exists(cog: Application, window: Window, proxy: FakeProxy) -> None:
    assert cog.exists() is True
    assert window.exists() is True

    del proxy.apps["org.cogx.cog"].objects[("window id 3",)]
    assert window.exists() is False


def test_delete_and_move(cog: Application, window: Window, proxy: FakeProxy) -> None:
    window.move_to(cog)
    window.delete()

    commands = [(call[2], call[3]) for call in proxy.commands()]
    assert commands == [("move", {"to": ObjectReference(())}), ("delete", {})]


def test_duplicate_returns_a_new_handle(cog: Application, proxy: FakeProxy) -> None:
    app = proxy.apps["org.cogx.cog"]
    app.handlers["duplicate"] = lambda app, path, params: ObjectReference(("entry 2",))
    entry = cog.current_entry()

    copy = entry.duplicate_to(cog, {"artist": "AFX"})

    assert isinstance(copy, PlaylistEntry)
    assert copy.path == ("entry 2",)
    assert copy != entry
    assert proxy.commands()[-1][3] == {"to": ObjectReference(()), "with properties": {"artist": "AFX"}}


def test_duplicate_checks_property_types_first(cog: Application, proxy: FakeProxy) -> None:
    entry = cog.current_entry()
    before = len(proxy.calls)

    with pytest.raises(TypeMismatch):
        entry.duplicate_to(cog, {"artist": 42})
    assert len(proxy.calls) == before


def test_structural_operations_follow_the_schema(dispatcher: MediaDispatcher, proxy: FakeProxy) -> None:
    music = dispatcher.application("Music")
    music_window = Window(music.session, ("window id 1",))
    before = len(proxy.calls)

    with pytest.raises(OperationUnsupportedByTarget):
        music_window.delete()
    with pytest.raises(OperationUnsupportedByTarget):
        music_window.move_to(music)
    with pytest.raises(OperationUnsupportedByTarget):
        # Music windows close, but Music has no save options.
        music_window.close_saving(SaveOption.NO)
    with pytest.raises(OperationUnsupportedByTarget):
        dispatcher.application("Radiccio").windows()

    assert [call for call in proxy.calls[before:] if call[0] != "connect"] == []


def test_open_passes_files_as_the_direct_parameter(cog: Application, proxy: FakeProxy) -> None:
    cog.open("/Music/a.flac", "/Music/b.flac")

    call = proxy.commands()[-1]
    assert call[2] == "open"
    assert call[3] == {DIRECT_PARAMETER: [Path("/Music/a.flac"), Path("/Music/b.flac")]}


def test_quit_with_saving_closes_the_session(cog: Application, window: Window, proxy: FakeProxy) -> None:
    cog.quit(SaveOption.NO)

    assert proxy.commands()[-1][2:4] == ("quit", {"saving": "no"})
    assert not cog.is_valid
    assert not window.is_valid
    with pytest.raises(ObjectGone):
        window.get_property("name")


def test_quit_saving_unsupported_where_quit_takes_no_options() -> None:
    proxy = FakeProxy(make_radiccio())
    radiccio = MediaDispatcher(default_registry(), proxy).application("Radiccio")

    with pytest.raises(OperationUnsupportedByTarget):
        radiccio.quit(SaveOption.YES)
    assert proxy.commands() == []


def test_lost_connection_invalidates_handles(window: Window, proxy: FakeProxy) -> None:
    proxy.fail_next = RemoteTimeout("AppleEvent timed out.", -1712, connection_lost=True)

    with pytest.raises(RemoteTimeout):
        window.get_property("name")

    assert not window.is_valid
    calls = len(proxy.calls)
    with pytest.raises(ObjectGone):
        window.get_property("name")
    assert len(proxy.calls) == calls


def test_timeout_without_connection_loss_keeps_handles(window: Window, proxy: FakeProxy) -> None:
    proxy.fail_next = RemoteTimeout("AppleEvent timed out.", -1712)

    with pytest.raises(RemoteTimeout):
        window.get_property("name")

    assert window.is_valid
    assert window.get_property("name") == "Playlist"


def test_handles_compare_by_target_and_path(cog: Application, window: Window) -> None:
    again = cog.windows()[0]

    assert again == window
    assert len({again, window}) == 1
    assert Window(cog.session, ("window id 4",)) != window


@pytest.mark.parametrize("kind, good, bad", [
    (PropertyType.TEXT, "x", 1),
    (PropertyType.INTEGER, 3, True),
    (PropertyType.REAL, 2, "2.0"),
    (PropertyType.BOOLEAN, False, 0),
    (PropertyType.RECT, [0, 0, 10, 10], [0, 0, 10]),
    (PropertyType.OBJECT, ObjectReference(("window id 1",)), "window 1"),
])
def test_check_value_type(kind, good, bad) -> None:
    prop = TargetProperty("p", kind, owner=ObjectKind.APPLICATION)

    check_value_type(prop, good)
    check_value_type(prop, None)
    with pytest.raises(TypeMismatch):
        check_value_type(prop, bad)
