# mediaremote/control/dispatcher.py

"""The generic media-control API.

Every call resolves a target, consults its capability schema and either
returns a result, returns `Unsupported` (the target lacks the feature, which
is a normal outcome), or raises one of the `mediaremote.errors` exceptions
(something went wrong). The two are never merged.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, fields
from enum import Enum
from threading import Lock
from typing import Any

from mediaremote.config import Settings
from mediaremote.errors import (
    InvalidParameter,
    ObjectGone,
    OperationUnsupportedByTarget,
    SchemaError,
    TargetNotFound,
    TypeMismatch,
)

from .base import AccessState, RemoteObjectProxy
from .objects import Application, RemoteObject, RemoteSession, Window, check_value_type
from .registry import TargetRegistry
from .schema import (
    ElementKind,
    GenericOperation,
    GenericProperty,
    ObjectKind,
    PlaybackState,
    TargetProperty,
    Unsupported,
)
from .targets import Target


@dataclass(frozen=True, slots=True)
class NowPlayingInfo:
    """Snapshot of the item being played. None means unknown, never "zero" or "empty"."""

    title: str | None = None
    artist: str | None = None
    album: str | None = None
    album_artist: str | None = None
    composer: str | None = None
    genre: str | None = None
    duration_seconds: float | None = None
    track_number: int | None = None
    disc_number: int | None = None
    year: int | None = None
    bitrate_kbps: int | None = None
    play_count: int | None = None
    play_info_text: str | None = None
    formatted_spam_text: str | None = None
    source_url: str | None = None

    def unknown_fields(self) -> list[str]:
        return [f.name for f in fields(self) if getattr(self, f.name) is None]

    @property
    def is_empty(self) -> bool:
        return len(self.unknown_fields()) == len(fields(self))


_NOW_PLAYING_FIELDS: dict[str, GenericProperty] = {
    "title": GenericProperty.TITLE,
    "artist": GenericProperty.ARTIST,
    "album": GenericProperty.ALBUM,
    "album_artist": GenericProperty.ALBUM_ARTIST,
    "composer": GenericProperty.COMPOSER,
    "genre": GenericProperty.GENRE,
    "duration_seconds": GenericProperty.DURATION,
    "track_number": GenericProperty.TRACK_NUMBER,
    "disc_number": GenericProperty.DISC_NUMBER,
    "year": GenericProperty.YEAR,
    "bitrate_kbps": GenericProperty.BITRATE,
    "play_count": GenericProperty.PLAY_COUNT,
    "play_info_text": GenericProperty.PLAY_INFO,
    "formatted_spam_text": GenericProperty.SPAM_TEXT,
    "source_url": GenericProperty.SOURCE_URL,
}


class SessionState(Enum):
    IDLE = "idle"
    AWAITING_REMOTE = "awaiting_remote"


class ControlSession:
    """Binds the dispatcher to one target. Calls through one session run one at a time, in issue order."""

    def __init__(self, target: Target):
        self.target = target
        self.state = SessionState.IDLE
        self.remote: RemoteSession | None = None
        self._lock = Lock()

    @contextmanager
    def call(self) -> Iterator["ControlSession"]:
        with self._lock:
            self.state = SessionState.AWAITING_REMOTE
            try:
                yield self
            finally:
                self.state = SessionState.IDLE

    def close(self) -> None:
        if self.remote is not None:
            self.remote.close()
            self.remote = None


def require[T](result: T | Unsupported) -> T:
    """Returns `result`, or raises OperationUnsupportedByTarget if it is `Unsupported`."""
    if isinstance(result, Unsupported):
        raise OperationUnsupportedByTarget(result.feature, result.target)
    return result


class MediaDispatcher:
    def __init__(self, registry: TargetRegistry, proxy: RemoteObjectProxy, settings: Settings | None = None):
        self._registry = registry
        self._proxy = proxy
        self._settings = settings or Settings()
        self._sessions: dict[str, ControlSession] = {}
        self._sessions_lock = Lock()

    # Target selection and sessions

    def select(self, target: Target | str | None = None) -> Target:
        """Resolves a target, an identity or a name. None picks the preferred target, else the first active one."""
        if isinstance(target, Target):
            return target
        if target is not None:
            return self._registry.resolve(target)
        if self._settings.preferred_target:
            return self._registry.resolve(self._settings.preferred_target)
        active = self._registry.active_targets()
        if not active:
            raise TargetNotFound("No targets are registered")
        for candidate in active:
            if self._proxy.is_running(candidate.identity):
                return candidate
        return active[0]

    def session(self, target: Target | str | None = None) -> ControlSession:
        resolved = self.select(target)
        with self._sessions_lock:
            session = self._sessions.get(resolved.identity)
            if session is None:
                session = ControlSession(resolved)
                self._sessions[resolved.identity] = session
        return session

    def _remote(self, session: ControlSession, launch_if_needed: bool | None = None) -> RemoteSession:
        # Called with the session's call lock held.
        if session.remote is None or not session.remote.is_open:
            target = session.target
            launch = self._settings.launch_if_needed if launch_if_needed is None else launch_if_needed
            connection = self._proxy.connect(target.identity, launch)
            session.remote = RemoteSession(target, self._proxy, connection, self._settings.timeout)
            logging.info(f"MediaDispatcher: Connected to {target}.")
        return session.remote

    def application(self, target: Target | str | None = None) -> Application:
        """Direct access to the target's remote object model, for callers that need more than the generic API."""
        session = self.session(target)
        with session.call():
            return self._remote(session).application()

    def close(self) -> None:
        with self._sessions_lock:
            sessions = list(self._sessions.values())
            self._sessions.clear()
        for session in sessions:
            session.close()

    # Transport

    def _command(self, op: GenericOperation, target: Target | str | None, timeout: float | None) -> bool | Unsupported:
        session = self.session(target)
        entry = session.target.schema.lookup_operation(op)
        if isinstance(entry, Unsupported):
            logging.debug(f"MediaDispatcher: {session.target.name} does not support {op.value}.")
            return entry
        with session.call():
            app = self._remote(session).application()
            app.invoke_command(entry.command, timeout=timeout)
        logging.debug(f"MediaDispatcher: {op.value} sent to {session.target.name}.")
        return True

    def play(self, target: Target | str | None = None, timeout: float | None = None) -> bool | Unsupported:
        return self._command(GenericOperation.PLAY, target, timeout)

    def pause(self, target: Target | str | None = None, timeout: float | None = None) -> bool | Unsupported:
        return self._command(GenericOperation.PAUSE, target, timeout)

    def stop(self, target: Target | str | None = None, timeout: float | None = None) -> bool | Unsupported:
        return self._command(GenericOperation.STOP, target, timeout)

    def next(self, target: Target | str | None = None, timeout: float | None = None) -> bool | Unsupported:
        return self._command(GenericOperation.NEXT, target, timeout)

    def previous(self, target: Target | str | None = None, timeout: float | None = None) -> bool | Unsupported:
        return self._command(GenericOperation.PREVIOUS, target, timeout)

    def play_pause(self, target: Target | str | None = None, timeout: float | None = None) -> bool | Unsupported:
        return self._command(GenericOperation.PLAY_PAUSE, target, timeout)

    def restart_track(self, target: Target | str | None = None, timeout: float | None = None) -> bool | Unsupported:
        return self._command(GenericOperation.RESTART_TRACK, target, timeout)

    # Properties

    @staticmethod
    def _normalise(prop: TargetProperty, raw: Any) -> Any:
        if raw is None or raw in prop.absent:
            return None
        check_value_type(prop, raw)
        if prop.convert is not None:
            try:
                return prop.convert(raw)
            except (TypeError, ValueError) as e:
                raise TypeMismatch(f"Cannot normalise {prop.name} value {raw!r}: {e}") from e
        if prop.enum is not None:
            return prop.enum.to_canonical(raw)
        return raw

    def _read(self, obj: RemoteObject, prop: TargetProperty, timeout: float | None) -> Any:
        return self._normalise(prop, obj.get_property(prop.name, timeout=timeout))

    def get(self, prop: GenericProperty, target: Target | str | None = None, timeout: float | None = None) -> Any:
        """Reads one application-level generic property, normalised. None if the target answered with no value."""
        session = self.session(target)
        entry = session.target.schema.lookup_property(prop)
        if isinstance(entry, Unsupported):
            return entry
        if entry.owner is not ObjectKind.APPLICATION:
            raise InvalidParameter(f"'{prop.value}' is a property of the {entry.owner.value}, not the application")
        with session.call():
            return self._read(self._remote(session).application(), entry, timeout)

    def playback_state(self, target: Target | str | None = None,
                       timeout: float | None = None) -> PlaybackState | Unsupported:
        resolved = self.select(target)
        state = self.get(GenericProperty.PLAYBACK_STATE, resolved, timeout)
        if state is None:
            raise SchemaError(f"{resolved.name} answered with no player state")
        return state

    def get_volume(self, target: Target | str | None = None, timeout: float | None = None) -> int | Unsupported:
        return self.get(GenericProperty.VOLUME, target, timeout)

    def set_volume(self, value: int, target: Target | str | None = None,
                   timeout: float | None = None) -> bool | Unsupported:
        session = self.session(target)
        entry = session.target.schema.lookup_property(GenericProperty.VOLUME)
        if isinstance(entry, Unsupported):
            return entry
        if not entry.writable:
            return Unsupported("set_volume", session.target.name)
        self._validate_volume(entry, value, session.target)
        with session.call():
            self._remote(session).application().set_property(entry.name, value, timeout=timeout)
        logging.debug(f"MediaDispatcher: Set {session.target.name} volume to {value}%.")
        return True

    @staticmethod
    def _validate_volume(entry: TargetProperty, value: Any, target: Target) -> None:
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidParameter(f"Volume must be an integer, got {value!r}")
        low = 0 if entry.minimum is None else entry.minimum
        high = 100 if entry.maximum is None else entry.maximum
        if not low <= value <= high:
            raise InvalidParameter(f"Volume {value} out of range ({low}-{high}) for {target.name}")
        if entry.step and value % entry.step:
            raise InvalidParameter(f"{target.name} only accepts volumes in steps of {entry.step}, got {value}")

    def position(self, target: Target | str | None = None, timeout: float | None = None) -> float | Unsupported:
        position = self.get(GenericProperty.POSITION, target, timeout)
        return position if isinstance(position, Unsupported) or position is None else float(position)

    def queue(self, target: Target | str | None = None,
              timeout: float | None = None) -> tuple[int | None, int | None] | Unsupported:
        """(position of the current item starting at 1, item count) in the playback queue."""
        count = self.get(GenericProperty.QUEUE_COUNT, target, timeout)
        if isinstance(count, Unsupported):
            return count
        position = self.get(GenericProperty.QUEUE_POSITION, target, timeout)
        return (None if isinstance(position, Unsupported) else position), count

    def now_playing(self, target: Target | str | None = None,
                    timeout: float | None = None) -> NowPlayingInfo | Unsupported:
        session = self.session(target)
        schema = session.target.schema
        entries = {field_name: schema.lookup_property(prop) for field_name, prop in _NOW_PLAYING_FIELDS.items()}
        item_prop = schema.lookup_property(GenericProperty.NOW_PLAYING_ITEM)
        if isinstance(item_prop, Unsupported) and all(isinstance(e, Unsupported) for e in entries.values()):
            return Unsupported("now_playing", session.target.name)
        values: dict[str, Any] = {}
        with session.call():
            app = self._remote(session).application()
            item = None if isinstance(item_prop, Unsupported) else app.current_entry(timeout=timeout)
            for field_name, entry in entries.items():
                if isinstance(entry, Unsupported):
                    continue
                owner = item if entry.owner is ObjectKind.PLAYLIST_ENTRY else app
                if owner is None:
                    continue
                try:
                    values[field_name] = self._read(owner, entry, timeout)
                except (OperationUnsupportedByTarget, ObjectGone) as e:
                    if not app.is_valid:
                        raise
                    logging.debug(f"MediaDispatcher: {session.target.name} {field_name} unknown: {e}")
        info = NowPlayingInfo(**values)
        logging.debug(f"MediaDispatcher: {session.target.name} now playing {info}")
        return info

    # Elements and application state

    def windows(self, target: Target | str | None = None, timeout: float | None = None) -> list[Window] | Unsupported:
        """Open windows. An empty list means none are open; Unsupported means the target has no windows at all."""
        session = self.session(target)
        element = session.target.schema.lookup_element(ElementKind.WINDOW)
        if isinstance(element, Unsupported):
            return element
        with session.call():
            return self._remote(session).application().windows(timeout=timeout)

    def is_running(self, target: Target | str | None = None) -> bool:
        return self._proxy.is_running(self.select(target).identity)

    def access_state(self, target: Target | str | None = None) -> AccessState:
        return self._proxy.access_state(self.select(target).identity)

    def launch(self, target: Target | str | None = None) -> Application:
        """Connects to the target, launching it (hidden, in the background) if it is not running."""
        session = self.session(target)
        with session.call():
            return self._remote(session, launch_if_needed=True).application()
