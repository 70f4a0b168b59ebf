# mediaremote/diagnostics.py

"""Quick diagnostic: which media players are running, scriptable, and what are they playing?"""

import getopt
import logging
import sys

from mediaremote.config import Settings, load_settings
from mediaremote.control import MediaDispatcher, Unsupported, default_registry
from mediaremote.control.applescript_transport import AppleScriptProxy
from mediaremote.control.base import AccessState
from mediaremote.errors import MediaRemoteError, TargetNotFound


def setup_logging(level='info'):
    level_dict = {
        'debug': logging.DEBUG,
        'info': logging.INFO,
        'warning': logging.WARNING,
        'error': logging.ERROR,
        'critical': logging.CRITICAL
    }
    numeric_level = level_dict.get(level.lower(), logging.INFO)  # Default to INFO if level is not recognized
    logging.basicConfig(
        level=numeric_level,
        format='%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )


def process_command_line_args(argv: list[str], settings: Settings) -> dict[str, str]:
    try:
        options, _ = getopt.getopt(argv, '', ["target=", "log-level=", "launch"])
    except getopt.GetoptError as e:
        setup_logging(settings.log_level)
        logging.error(f"Command line error: {e}")
        sys.exit(1)
    options = dict(options)
    setup_logging(options.get("--log-level", settings.log_level))
    return options


def _show(label: str, value) -> None:
    if isinstance(value, Unsupported):
        value = "(not supported)"
    elif value is None:
        value = "(unknown)"
    print(f"    {label:<16} {value}")


def report(dispatcher: MediaDispatcher, target, launch: bool = False) -> None:
    print(f"{target.name} [{target.identity}]")
    if launch:
        dispatcher.launch(target)
    state = dispatcher.access_state(target)
    print(f"    {'access':<16} {state.value}")
    if state is not AccessState.AVAILABLE:
        return
    _show("state", dispatcher.playback_state(target))
    _show("volume", dispatcher.get_volume(target))
    _show("position", dispatcher.position(target))
    _show("queue", dispatcher.queue(target))
    windows = dispatcher.windows(target)
    _show("windows", windows if isinstance(windows, Unsupported) else len(windows))
    info = dispatcher.now_playing(target)
    if isinstance(info, Unsupported):
        _show("now playing", info)
        return
    for field_name in ("title", "artist", "album", "duration_seconds"):
        _show(field_name, getattr(info, field_name))


def main(argv: list[str] | None = None) -> int:
    settings = load_settings()
    options = process_command_line_args(sys.argv[1:] if argv is None else argv, settings)

    registry = default_registry()
    dispatcher = MediaDispatcher(registry, AppleScriptProxy(), settings)

    print("=== Media player diagnostic ===\n")
    running = registry.running_targets()
    print(f"Running players ({len(running)}): {', '.join(t.name for t in running) or 'none'}\n")

    try:
        targets = [registry.resolve(options["--target"])] if "--target" in options else registry.active_targets()
    except TargetNotFound as e:
        logging.error(f"Command line error: {e}")
        return 1
    failures = 0
    for target in targets:
        try:
            report(dispatcher, target, launch="--launch" in options)
        except MediaRemoteError as e:
            logging.error(f"{target.name}: {type(e).__name__}: {e}")
            failures += 1
        print()
    dispatcher.close()
    return 1 if failures else 0
