# mediaremote/control/objects.py

"""Typed handles around remote objects (application, windows, playlist entries).

Handles are scoped to one `RemoteSession` and hold it weakly: once the session
is closed, or the transport reports its connection dead, every handle issued
from it raises `ObjectGone` instead of reaching the transport.
"""

import logging
import os
import threading
import weakref
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any, override

from mediaremote.errors import (
    ObjectGone,
    OperationUnsupportedByTarget,
    PropertyNotReadable,
    RemoteTimeout,
    RemoteUnavailable,
    TypeMismatch,
)

from .base import DIRECT_PARAMETER, Connection, Constant, ObjectPath, ObjectReference, RemoteObjectProxy, StandardSuite
from .schema import (
    ElementKind,
    GenericOperation,
    GenericProperty,
    ObjectKind,
    PropertyType,
    SaveOption,
    StructuralOperation,
    TargetProperty,
    Unsupported,
)
from .targets import Target


def check_value_type(prop: TargetProperty, value: Any) -> None:
    """Raises TypeMismatch if `value` does not have the shape `prop` declares. None (missing value) always fits."""
    if value is None:
        return
    match prop.kind:
        case PropertyType.TEXT | PropertyType.ENUM:
            ok = isinstance(value, str)
        case PropertyType.INTEGER:
            ok = isinstance(value, int) and not isinstance(value, bool)
        case PropertyType.REAL:
            ok = isinstance(value, (int, float)) and not isinstance(value, bool)
        case PropertyType.BOOLEAN:
            ok = isinstance(value, bool)
        case PropertyType.URL:
            ok = isinstance(value, (str, os.PathLike))
        case PropertyType.RECT:
            ok = (isinstance(value, Sequence) and not isinstance(value, str) and len(value) == 4
                  and all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in value))
        case PropertyType.OBJECT:
            ok = isinstance(value, (ObjectReference, RemoteObject))
        case _:
            ok = False
    if not ok:
        raise TypeMismatch(f"'{prop.name}' expects {prop.kind.value}, got {type(value).__name__} {value!r}")


class RemoteSession:
    """One live connection to a target, plus the bookkeeping for the handles issued from it."""

    def __init__(self, target: Target, proxy: RemoteObjectProxy, connection: Connection, timeout: float):
        self.target = target
        self.proxy = proxy
        self.connection = connection
        self.timeout = timeout
        self._closed = False
        self._lock = threading.Lock()

    @property
    def is_open(self) -> bool:
        return not self._closed and self.connection.is_open

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
        logging.debug(f"RemoteSession: Closing session for {self.target.name}.")
        self.connection.close()

    def application(self) -> "Application":
        return Application(self, ())

    def _call(self, what: str, fn, *args, timeout: float | None = None):
        if not self.is_open:
            raise ObjectGone(f"Session for {self.target.name} is closed")
        effective_timeout = self.timeout if timeout is None else timeout
        logging.debug(f"RemoteSession: {self.target.name} {what} (timeout {effective_timeout}s)")
        try:
            return fn(self.connection, *args, effective_timeout)
        except RemoteTimeout as e:
            if e.connection_lost:
                self.close()
            raise
        except RemoteUnavailable:
            if not self.connection.is_open:
                self.close()
            raise

    def __repr__(self) -> str:
        state = "open" if self.is_open else "closed"
        return f"<RemoteSession {self.target.name} {state}>"


class RemoteObject(StandardSuite):
    """A handle to one object inside the target's process.

    Implements the standard suite (`exists`, `close_saving`, `delete`,
    `duplicate_to`, `move_to`) shared by every object kind. Whether the
    target really supports each of them comes from its schema.
    """

    kind: ObjectKind = ObjectKind.APPLICATION

    def __init__(self, session: RemoteSession, path: ObjectPath):
        self._session_ref = weakref.ref(session)
        self.path: ObjectPath = tuple(path)
        self.target = session.target

    @property
    def session(self) -> RemoteSession:
        session = self._session_ref()
        if session is None or not session.is_open:
            raise ObjectGone(f"{self.kind.value} {self.path!r} of {self.target.name} is no longer reachable")
        return session

    @property
    def is_valid(self) -> bool:
        session = self._session_ref()
        return session is not None and session.is_open

    @property
    def properties(self) -> Mapping[str, TargetProperty]:
        """The typed property set this kind of object has on this target."""
        return self.target.schema.object_properties(self.kind)

    def _property(self, name: str) -> TargetProperty:
        try:
            return self.properties[name]
        except KeyError:
            raise OperationUnsupportedByTarget(f"{self.kind.value}.{name}", self.target.name) from None

    # Properties and commands

    def get_property(self, name: str, timeout: float | None = None) -> Any:
        self._property(name)
        session = self.session
        return session._call(f"get {name} of {self.path!r}", session.proxy.get_property, self.path, name,
                             timeout=timeout)

    def set_property(self, name: str, value: Any, timeout: float | None = None) -> None:
        prop = self._property(name)
        if not prop.writable:
            raise PropertyNotReadable(f"'{name}' of {self.target.name} {self.kind.value} is read-only")
        check_value_type(prop, value)
        session = self.session
        session._call(f"set {name} of {self.path!r}", session.proxy.set_property, self.path, name,
                      _to_wire(value), timeout=timeout)

    def invoke_command(self, command: str, params: Mapping[str, Any] | None = None,
                       timeout: float | None = None) -> Any:
        session = self.session
        wire_params = {key: _to_wire(value) for key, value in (params or {}).items()}
        return session._call(f"{command} {self.path!r}", session.proxy.invoke, self.path, command, wire_params,
                             timeout=timeout)

    # Standard suite

    def _require(self, op: StructuralOperation) -> None:
        if not self.target.schema.supports_structural(self.kind, op):
            raise OperationUnsupportedByTarget(f"{self.kind.value}.{op.value}", self.target.name)

    @override
    def exists(self, timeout: float | None = None) -> bool:
        self._require(StructuralOperation.EXISTS)
        return bool(self.invoke_command("exists", timeout=timeout))

    @override
    def close_saving(self, saving: SaveOption | None = None, destination: str | os.PathLike | None = None,
                     timeout: float | None = None) -> None:
        self._require(StructuralOperation.CLOSE)
        params: dict[str, Any] = {}
        if saving is not None:
            if self.target.schema.save_options is None:
                raise OperationUnsupportedByTarget("save options", self.target.name)
            params["saving"] = Constant(self.target.schema.save_option_code(saving))
        if destination is not None:
            params["saving in"] = Path(destination)
        self.invoke_command("close", params, timeout=timeout)

    @override
    def delete(self, timeout: float | None = None) -> None:
        self._require(StructuralOperation.DELETE)
        self.invoke_command("delete", timeout=timeout)

    @override
    def duplicate_to(self, destination: "RemoteObject | ObjectReference",
                     properties: Mapping[str, Any] | None = None, timeout: float | None = None) -> "RemoteObject":
        self._require(StructuralOperation.DUPLICATE)
        params: dict[str, Any] = {"to": destination}
        if properties:
            for name, value in properties.items():
                check_value_type(self._property(name), value)
            params["with properties"] = dict(properties)
        result = self.invoke_command("duplicate", params, timeout=timeout)
        if not isinstance(result, ObjectReference):
            raise TypeMismatch(f"duplicate returned {result!r} instead of an object reference")
        return type(self)(self.session, result.path)

    @override
    def move_to(self, destination: "RemoteObject | ObjectReference", timeout: float | None = None) -> None:
        self._require(StructuralOperation.MOVE)
        self.invoke_command("move", {"to": destination}, timeout=timeout)

    def __eq__(self, other: object) -> bool:
        return (isinstance(other, RemoteObject) and other.kind is self.kind
                and other.target == self.target and other.path == self.path)

    def __hash__(self) -> int:
        return hash((self.kind, self.target.identity, self.path))

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.target.name} {self.path!r}>"


class Window(RemoteObject):
    kind = ObjectKind.WINDOW

    @property
    def bounds(self) -> tuple[int, int, int, int]:
        return tuple(self.get_property("bounds"))

    @bounds.setter
    def bounds(self, value: Sequence[int]) -> None:
        self.set_property("bounds", list(value))


class PlaylistEntry(RemoteObject):
    kind = ObjectKind.PLAYLIST_ENTRY


_ELEMENT_CLASSES: dict[ObjectKind, type[RemoteObject]] = {
    ObjectKind.WINDOW: Window,
    ObjectKind.PLAYLIST_ENTRY: PlaylistEntry,
}


class Application(RemoteObject):
    kind = ObjectKind.APPLICATION

    @override
    def exists(self, timeout: float | None = None) -> bool:
        """True while the application is running."""
        self._require(StructuralOperation.EXISTS)
        return self.session.proxy.is_running(self.target.identity)

    def elements(self, element: ElementKind, timeout: float | None = None) -> list[RemoteObject]:
        """Every element of the given kind. Raises OperationUnsupportedByTarget if the target has none of that kind."""
        entry = self.target.schema.lookup_element(element)
        if isinstance(entry, Unsupported):
            raise OperationUnsupportedByTarget(entry.feature, self.target.name)
        session = self.session
        paths = session._call(f"every {entry.term}", session.proxy.enumerate_children, self.path, entry.term,
                              timeout=timeout)
        cls = _ELEMENT_CLASSES[entry.kind]
        return [cls(session, path) for path in paths]

    def windows(self, timeout: float | None = None) -> list[Window]:
        return self.elements(ElementKind.WINDOW, timeout=timeout)

    def current_entry(self, timeout: float | None = None) -> PlaylistEntry | None:
        """The item being played, or None when there is none."""
        prop = self.target.schema.lookup_property(GenericProperty.NOW_PLAYING_ITEM)
        if isinstance(prop, Unsupported):
            raise OperationUnsupportedByTarget(prop.feature, self.target.name)
        try:
            reference = self.get_property(prop.name, timeout=timeout)
        except ObjectGone:
            # Some players raise "no such object" rather than answering missing value when idle.
            if not self.is_valid:
                raise
            return None
        if reference is None:
            return None
        check_value_type(prop, reference)
        return PlaylistEntry(self.session, reference.path)

    def perform(self, op: GenericOperation, params: Mapping[str, Any] | None = None,
                timeout: float | None = None) -> Any:
        entry = self.target.schema.lookup_operation(op)
        if isinstance(entry, Unsupported):
            raise OperationUnsupportedByTarget(entry.feature, self.target.name)
        return self.invoke_command(entry.command, params, timeout=timeout)

    def quit(self, saving: SaveOption | None = None, timeout: float | None = None) -> None:
        entry = self.target.schema.lookup_operation(GenericOperation.QUIT)
        params = {}
        if saving is not None:
            if isinstance(entry, Unsupported) or "saving" not in entry.parameters:
                raise OperationUnsupportedByTarget("quit saving", self.target.name)
            params["saving"] = Constant(self.target.schema.save_option_code(saving))
        self.perform(GenericOperation.QUIT, params, timeout=timeout)
        self.session.close()

    def open(self, *paths: str | os.PathLike, timeout: float | None = None) -> None:
        params = {DIRECT_PARAMETER: [Path(path) for path in paths]} if paths else None
        self.perform(GenericOperation.OPEN, params, timeout=timeout)


def _to_wire(value: Any) -> Any:
    """Replaces handles with plain references so the transport never sees a RemoteObject."""
    if isinstance(value, RemoteObject):
        return ObjectReference(value.path)
    if isinstance(value, dict):
        return {key: _to_wire(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_wire(item) for item in value]
    return value
