# mediaremote/control/base.py

from collections.abc import Mapping, Sequence
from enum import Enum
from typing import Any, Protocol

# A path from the application object down to a remote object, outermost first,
# e.g. ("window id 7",) or ("current entry",). The empty path is the application.
type ObjectPath = tuple[str, ...]

# Parameter name of a command's direct object (the Apple Event keyDirectObject, '----').
DIRECT_PARAMETER = "----"


class Constant(str):
    """An enumerated value or constant as the target names it (e.g. `playing`, `kPSP`, `ask`).

    Kept distinct from `str` so transports can tell a quoted string from a bare term.
    """

    def __repr__(self) -> str:
        return f"Constant({str.__repr__(self)})"


class ObjectReference:
    """A reference to a remote object, as returned by the transport."""

    __slots__ = ("path",)

    def __init__(self, path: Sequence[str]):
        self.path: ObjectPath = tuple(path)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, ObjectReference) and other.path == self.path

    def __hash__(self) -> int:
        return hash(self.path)

    def __repr__(self) -> str:
        return f"ObjectReference({self.path!r})"


class AccessState(Enum):
    """Whether a target application can currently be automated."""

    NOT_RUNNING = "not_running"
    DENIED = "denied"
    PENDING = "pending"
    AVAILABLE = "available"


class Connection(Protocol):
    """A live connection to one target application, owned by the transport."""

    @property
    def target_identity(self) -> str:
        """The bundle identifier this connection addresses."""
        ...

    @property
    def is_open(self) -> bool:
        """False once the transport considers the connection dead."""
        ...

    def close(self) -> None:
        ...


class RemoteObjectProxy(Protocol):
    """Defines the inter-process scripting transport the control layer drives.

    Every call blocks until it completes, fails, or its timeout elapses. Failures
    are raised as `mediaremote.errors.RemoteError` subclasses.
    """

    def connect(self, target_identity: str, launch_if_needed: bool) -> Connection:
        """Opens a connection to the running target, launching it first if asked to."""
        ...

    def get_property(self, connection: Connection, object_path: ObjectPath, property_name: str, timeout: float) -> Any:
        ...

    def set_property(self, connection: Connection, object_path: ObjectPath, property_name: str, value: Any,
                     timeout: float) -> None:
        ...

    def invoke(self, connection: Connection, object_path: ObjectPath, command_name: str,
               params: Mapping[str, Any], timeout: float) -> Any:
        """Sends a command to the object at `object_path`. Returns the command's result, or None."""
        ...

    def enumerate_children(self, connection: Connection, object_path: ObjectPath, child_kind: str,
                           timeout: float) -> list[ObjectPath]:
        """Returns the paths of every `child_kind` element of the object at `object_path`."""
        ...

    def is_running(self, target_identity: str) -> bool:
        ...

    def access_state(self, target_identity: str) -> AccessState:
        ...


class StandardSuite(Protocol):
    """The generic operations every remote object kind answers to.

    A target without genuine support for one of these raises
    `OperationUnsupportedByTarget` instead of sending anything.
    """

    def exists(self) -> bool:
        ...

    def close_saving(self, saving: Any = None, destination: Any = None) -> None:
        ...

    def delete(self) -> None:
        ...

    def duplicate_to(self, destination: Any, properties: Mapping[str, Any] | None = None) -> Any:
        ...

    def move_to(self, destination: Any) -> None:
        ...
