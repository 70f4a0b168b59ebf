# mediaremote/errors.py

class MediaRemoteError(Exception):
    """Base class for every failure raised by mediaremote."""


class OperationUnsupportedByTarget(MediaRemoteError):
    """The target has no mapping for the requested operation, property or element."""

    def __init__(self, feature: str, target: str | None = None):
        self.feature = feature
        self.target = target
        where = f" by {target}" if target else ""
        super().__init__(f"'{feature}' is not supported{where}")


class SchemaError(MediaRemoteError):
    """A capability schema is malformed, or the target answered with a value it cannot translate."""


class TargetNotFound(MediaRemoteError, LookupError):
    """No registered target matches the requested identity or name."""


class InvalidParameter(MediaRemoteError, ValueError):
    """A caller-supplied value violates a documented constraint. Raised before any remote call."""


class TypeMismatch(MediaRemoteError, TypeError):
    """A value's shape disagrees with the type declared for the property."""


class PropertyNotReadable(MediaRemoteError):
    """The property's declared access mode forbids the attempted access (e.g. setting a read-only property)."""


class RemoteError(MediaRemoteError):
    """The remote application reported an error. `code` is the AppleScript error number, if known."""

    def __init__(self, message: str, code: int | None = None):
        self.code = code
        super().__init__(message)


class RemoteUnavailable(RemoteError):
    """The target process or the addressed object cannot be reached."""


class ObjectGone(RemoteUnavailable):
    """The handle's session was torn down, or the remote object no longer exists."""


class RemoteConnectionError(RemoteUnavailable):
    """A connection to the target could not be opened."""


class TargetNotRunning(RemoteConnectionError):
    """The target application is not running and was not launched."""


class AutomationDenied(RemoteConnectionError):
    """The user has denied automation access to the target."""


class AutomationPending(RemoteConnectionError):
    """The user has not yet been asked to allow automation access to the target."""


class RemoteTimeout(RemoteError):
    """The remote call did not complete within its timeout.

    `connection_lost` is set when the transport also reports the connection
    as dead; handles stay usable otherwise.
    """

    def __init__(self, message: str, code: int | None = None, connection_lost: bool = False):
        super().__init__(message, code)
        self.connection_lost = connection_lost
