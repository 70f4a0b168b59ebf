# mediaremote/control/__init__.py

from .base import AccessState, Constant, ObjectReference, RemoteObjectProxy
from .dispatcher import ControlSession, MediaDispatcher, NowPlayingInfo, SessionState, require
from .objects import Application, PlaylistEntry, RemoteObject, RemoteSession, Window
from .registry import TargetRegistry, default_registry
from .schema import (
    CapabilitySchema,
    Direction,
    GenericOperation,
    GenericProperty,
    PlaybackState,
    SaveOption,
    Unsupported,
)
from .targets import BUILTIN_TARGETS, Target

__all__ = [
    "AccessState",
    "Application",
    "BUILTIN_TARGETS",
    "CapabilitySchema",
    "Constant",
    "ControlSession",
    "Direction",
    "GenericOperation",
    "GenericProperty",
    "MediaDispatcher",
    "NowPlayingInfo",
    "ObjectReference",
    "PlaybackState",
    "PlaylistEntry",
    "RemoteObject",
    "RemoteObjectProxy",
    "RemoteSession",
    "SaveOption",
    "SessionState",
    "Target",
    "TargetRegistry",
    "Unsupported",
    "Window",
    "default_registry",
    "require",
]
