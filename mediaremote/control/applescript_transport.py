# mediaremote/control/applescript_transport.py

"""A RemoteObjectProxy that talks to applications through `osascript`."""

import logging
import re
import subprocess
from collections.abc import Mapping
from typing import Any, override

from mediaremote.errors import (
    AutomationDenied,
    AutomationPending,
    ObjectGone,
    OperationUnsupportedByTarget,
    PropertyNotReadable,
    RemoteConnectionError,
    RemoteError,
    RemoteTimeout,
    TargetNotRunning,
    TypeMismatch,
)

from . import applescript_values
from .base import DIRECT_PARAMETER, AccessState, Connection, ObjectPath, ObjectReference, RemoteObjectProxy

# Extra time granted to the osascript process beyond the script's own `with timeout`.
PROCESS_GRACE_SECONDS = 2.0

_ERROR_NUMBER = re.compile(r"\((-?\d+)\)\s*$")

ERR_APP_NOT_RUNNING = -600


class AppleScriptConnection:
    """The transport's notion of a connection: the target's identity and whether it is still considered alive."""

    def __init__(self, target_identity: str):
        self._target_identity = target_identity
        self._open = True

    @property
    def target_identity(self) -> str:
        return self._target_identity

    @property
    def is_open(self) -> bool:
        return self._open

    def close(self) -> None:
        self._open = False

    def __repr__(self) -> str:
        return f"<AppleScriptConnection {self._target_identity} {'open' if self._open else 'closed'}>"


def _error_code(stderr: str) -> int | None:
    match = _ERROR_NUMBER.search(stderr)
    return int(match.group(1)) if match else None


def raise_for_error(stderr: str, target_identity: str) -> None:
    """Maps an osascript error message onto the mediaremote error taxonomy."""
    code = _error_code(stderr)
    message = f"{target_identity}: {stderr}"
    match code:
        case -600 | -609:  # not running, connection invalid
            raise TargetNotRunning(message, code)
        case -1712:  # timed out
            raise RemoteTimeout(message, code)
        case -1728 | -1719:  # no such object, bad index
            raise ObjectGone(message, code)
        case -1743:  # not permitted
            raise AutomationDenied(message, code)
        case -1744:  # would require user consent
            raise AutomationPending(message, code)
        case -1708:  # not understood
            raise OperationUnsupportedByTarget(stderr, target_identity)
        case -10006:  # write denied
            raise PropertyNotReadable(message)
        case -1700:  # coercion failed
            raise TypeMismatch(message)
        case _:
            raise RemoteError(message, code)


def _tell(target_identity: str, statement: str, timeout: float) -> str:
    seconds = max(1, int(round(timeout)))
    return (
        f"with timeout of {seconds} seconds\n"
        f"    tell application id {applescript_values.quote(target_identity)}\n"
        f"        {statement}\n"
        f"    end tell\n"
        f"end timeout"
    )


def _of(name: str, path: ObjectPath) -> str:
    return f"{name} of {applescript_values.specifier(path)}" if path else name


class AppleScriptProxy(RemoteObjectProxy):
    """Drives target applications by running AppleScript through `osascript -s s`."""

    def __init__(self, osascript: str = "osascript"):
        self._osascript = osascript

    def run(self, script: str, target_identity: str, timeout: float) -> Any:
        """Runs a script and parses its result. Raises a RemoteError subclass on failure."""
        try:
            result = subprocess.run([self._osascript, "-s", "s", "-e", script], capture_output=True, text=True,
                                    check=False, timeout=timeout + PROCESS_GRACE_SECONDS)
        except subprocess.TimeoutExpired:
            raise RemoteTimeout(f"osascript for {target_identity} did not finish within {timeout}s") from None
        except FileNotFoundError:  # pragma: no cover
            logging.error("osascript command not found. AppleScript execution is not possible.")
            raise RemoteConnectionError("osascript not found") from None
        stdout = result.stdout.strip() if result.stdout else ""
        stderr = result.stderr.strip() if result.stderr else ""
        if result.returncode != 0:
            logging.warning(f"AppleScript for {target_identity} exited with code {result.returncode}. Stderr: {stderr}")
            raise_for_error(stderr, target_identity)
        try:
            return applescript_values.parse(stdout)
        except applescript_values.ParseError as e:
            raise TypeMismatch(f"Could not parse AppleScript output for {target_identity}: {e}") from e

    def _run_on(self, connection: Connection, statement: str, timeout: float) -> Any:
        if not connection.is_open:
            raise ObjectGone(f"Connection to {connection.target_identity} is closed")
        try:
            return self.run(_tell(connection.target_identity, statement, timeout), connection.target_identity, timeout)
        except TargetNotRunning:
            connection.close()
            raise

    # Application discovery

    @override
    def is_running(self, target_identity: str) -> bool:
        # Asking for `running` does not launch the application.
        script = f"application id {applescript_values.quote(target_identity)} is running"
        try:
            return bool(self.run(script, target_identity, timeout=5.0))
        except ObjectGone:
            # -1728: no application with this identity is installed.
            logging.debug(f"AppleScript: {target_identity} is not installed.")
            return False

    def is_installed(self, target_identity: str) -> bool:
        from AppKit import NSWorkspace

        return NSWorkspace.sharedWorkspace().URLForApplicationWithBundleIdentifier_(target_identity) is not None

    @override
    def access_state(self, target_identity: str) -> AccessState:
        if not self.is_running(target_identity):
            return AccessState.NOT_RUNNING
        try:
            self.run(_tell(target_identity, "get name", 5.0), target_identity, timeout=5.0)
        except AutomationDenied:
            return AccessState.DENIED
        except AutomationPending:
            return AccessState.PENDING
        except TargetNotRunning:
            return AccessState.NOT_RUNNING
        return AccessState.AVAILABLE

    def launch(self, target_identity: str) -> None:
        """Opens the application hidden and in the background."""
        if not self.is_installed(target_identity):
            raise RemoteConnectionError(f"No application with identity {target_identity} is installed")
        logging.info(f"AppleScript: Launching {target_identity} in the background.")
        result = subprocess.run(["open", "-g", "-j", "-b", target_identity], capture_output=True, text=True,
                                check=False)
        if result.returncode != 0:
            raise RemoteConnectionError(f"Could not launch {target_identity}: {result.stderr.strip()}")

    @override
    def connect(self, target_identity: str, launch_if_needed: bool) -> AppleScriptConnection:
        if not self.is_running(target_identity):
            if not launch_if_needed:
                raise TargetNotRunning(f"{target_identity} is not running", ERR_APP_NOT_RUNNING)
            self.launch(target_identity)
        logging.debug(f"AppleScript: Connected to {target_identity}.")
        return AppleScriptConnection(target_identity)

    # Object model

    @override
    def get_property(self, connection: Connection, object_path: ObjectPath, property_name: str,
                     timeout: float) -> Any:
        return self._run_on(connection, f"get {_of(property_name, object_path)}", timeout)

    @override
    def set_property(self, connection: Connection, object_path: ObjectPath, property_name: str, value: Any,
                     timeout: float) -> None:
        statement = f"set {_of(property_name, object_path)} to {applescript_values.render(value)}"
        self._run_on(connection, statement, timeout)

    @override
    def invoke(self, connection: Connection, object_path: ObjectPath, command_name: str,
               params: Mapping[str, Any], timeout: float) -> Any:
        parts = [command_name]
        if DIRECT_PARAMETER in params:
            parts.append(applescript_values.render(params[DIRECT_PARAMETER]))
        elif object_path:
            parts.append(applescript_values.specifier(object_path))
        for name, value in params.items():
            if name == DIRECT_PARAMETER:
                continue
            parts.append(f"{name} {applescript_values.render(value)}")
        return self._run_on(connection, " ".join(parts), timeout)

    @override
    def enumerate_children(self, connection: Connection, object_path: ObjectPath, child_kind: str,
                           timeout: float) -> list[ObjectPath]:
        result = self._run_on(connection, f"get {_of(f'every {child_kind}', object_path)}", timeout)
        if result is None:
            return []
        if not isinstance(result, list) or not all(isinstance(item, ObjectReference) for item in result):
            raise TypeMismatch(f"Expected a list of {child_kind} references, got {result!r}")
        return [item.path for item in result]
