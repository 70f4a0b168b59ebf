# mediaremote/control/registry.py

import logging
from collections.abc import Iterable
from threading import Lock

import psutil

from mediaremote.errors import InvalidParameter, TargetNotFound

from .targets import BUILTIN_TARGETS, Target


def is_process_running(app_name: str) -> bool:
    """Check if there is any running process named exactly app_name (case-insensitive)."""
    # Helpers such as "MusicCacheExtension" must not count as the app itself.
    try:
        for process in psutil.process_iter(['name']):
            name = process.info['name'] or ""
            if name.lower() == app_name.lower():
                return True
    except psutil.Error as e:
        logging.debug(f"Error accessing process list for '{app_name}': {e}")
    return False


class TargetRegistry:
    """The set of targets the dispatcher can route to, in registration order.

    Readers take a snapshot of an immutable tuple and never block; writers
    replace the tuple under a lock.
    """

    def __init__(self, targets: Iterable[Target] = ()):
        self._targets: tuple[Target, ...] = ()
        self._write_lock = Lock()
        for target in targets:
            self.register(target)

    def register(self, target: Target) -> None:
        with self._write_lock:
            for existing in self._targets:
                if existing.identity == target.identity:
                    raise InvalidParameter(f"A target with identity '{target.identity}' is already registered")
            self._targets = (*self._targets, target)
        logging.debug(f"TargetRegistry: Registered {target}.")

    def unregister(self, identity: str) -> Target:
        target = self.resolve(identity)
        with self._write_lock:
            self._targets = tuple(t for t in self._targets if t.identity != target.identity)
        logging.debug(f"TargetRegistry: Unregistered {target}.")
        return target

    def active_targets(self) -> tuple[Target, ...]:
        return self._targets

    def resolve(self, identity: str) -> Target:
        """Finds a target by bundle identifier or (case-insensitively) by name."""
        targets = self._targets
        for target in targets:
            if target.identity == identity:
                return target
        for target in targets:
            if target.name.lower() == identity.lower():
                return target
        raise TargetNotFound(f"No registered target matches '{identity}'")

    def running_targets(self) -> list[Target]:
        """Registered targets that currently have a live process."""
        return [target for target in self._targets if is_process_running(target.name)]

    def __contains__(self, identity: object) -> bool:
        if not isinstance(identity, str):
            return False
        try:
            self.resolve(identity)
        except TargetNotFound:
            return False
        return True

    def __len__(self) -> int:
        return len(self._targets)


def default_registry() -> TargetRegistry:
    return TargetRegistry(BUILTIN_TARGETS)
