import pytest

from mediaremote.config import Settings
from mediaremote.control import MediaDispatcher
from mediaremote.control import registry as registry_module
from mediaremote.control.targets import COG, DOPPLER, RADICCIO
from mediaremote.diagnostics import main, process_command_line_args, report


def test_report_lists_what_each_player_supports(dispatcher: MediaDispatcher, capsys) -> None:
    report(dispatcher, COG)
    report(dispatcher, RADICCIO)

    out = capsys.readouterr().out
    assert "Cog [org.cogx.cog]" in out
    assert "state            (not supported)" in out
    assert "title            Windowlicker" in out
    assert "windows          1" in out
    assert "queue            (2, 9)" in out
    assert "now playing      (not supported)" in out


def test_report_stops_at_access_state(dispatcher: MediaDispatcher, capsys) -> None:
    report(dispatcher, DOPPLER)

    out = capsys.readouterr().out
    assert "access           not_running" in out
    assert "state" not in out


def test_command_line_options() -> None:
    options = process_command_line_args(["--target", "Cog", "--launch"], Settings())

    assert options == {"--target": "Cog", "--launch": ""}


def test_bad_command_line_exits() -> None:
    with pytest.raises(SystemExit):
        process_command_line_args(["--volume", "5"], Settings())


def test_unknown_target_on_the_command_line(monkeypatch) -> None:
    monkeypatch.setattr(registry_module.psutil, "process_iter", lambda attrs=None: [])

    assert main(["--target=Winamp"]) == 1
