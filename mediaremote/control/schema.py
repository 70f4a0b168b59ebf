# mediaremote/control/schema.py

"""Capability schemas: what each target can do, and under which names.

A schema is a flat record of translations from the generic vocabulary
(`GenericOperation`, `GenericProperty`, `ElementKind`) to the target's own
AppleScript terminology. A key that is missing from a schema is the explicit
"unsupported" entry, so every lookup is total over the generic vocabulary.
"""

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from mediaremote.errors import SchemaError


class GenericOperation(Enum):
    PLAY = "play"
    PAUSE = "pause"
    STOP = "stop"
    NEXT = "next"
    PREVIOUS = "previous"
    PLAY_PAUSE = "play_pause"
    RESTART_TRACK = "restart_track"
    OPEN = "open"
    QUIT = "quit"


class GenericProperty(Enum):
    # Application
    NAME = "name"
    VERSION = "version"
    FRONTMOST = "frontmost"
    PLAYBACK_STATE = "playback_state"
    VOLUME = "volume"
    POSITION = "position"
    QUEUE_POSITION = "queue_position"
    QUEUE_COUNT = "queue_count"
    NOW_PLAYING_ITEM = "now_playing_item"
    # Now-playing item
    TITLE = "title"
    ARTIST = "artist"
    ALBUM = "album"
    ALBUM_ARTIST = "album_artist"
    COMPOSER = "composer"
    GENRE = "genre"
    DURATION = "duration"
    TRACK_NUMBER = "track_number"
    DISC_NUMBER = "disc_number"
    YEAR = "year"
    BITRATE = "bitrate"
    PLAY_COUNT = "play_count"
    PLAY_INFO = "play_info"
    SPAM_TEXT = "spam_text"
    SOURCE_URL = "source_url"


class ElementKind(Enum):
    WINDOW = "window"
    PLAYLIST_ENTRY = "playlist_entry"


class ObjectKind(Enum):
    APPLICATION = "application"
    WINDOW = "window"
    PLAYLIST_ENTRY = "playlist_entry"


class StructuralOperation(Enum):
    EXISTS = "exists"
    CLOSE = "close"
    DELETE = "delete"
    DUPLICATE = "duplicate"
    MOVE = "move"


ALL_STRUCTURAL = frozenset(StructuralOperation)


class PropertyType(Enum):
    TEXT = "text"
    INTEGER = "integer"
    REAL = "real"
    BOOLEAN = "boolean"
    ENUM = "enum"
    URL = "url"
    RECT = "rect"
    OBJECT = "object"


class PlaybackState(Enum):
    STOPPED = "stopped"
    PLAYING = "playing"
    PAUSED = "paused"


class SaveOption(Enum):
    YES = "yes"
    NO = "no"
    ASK = "ask"


class Direction(Enum):
    TO_CANONICAL = "to_canonical"
    TO_TARGET = "to_target"


@dataclass(frozen=True, slots=True)
class Unsupported:
    """The value returned in place of a result when a target lacks a feature.

    Falsy, so `if not result:` reads naturally, but never equal to an empty or
    zero result: absence of a feature is not the same as an empty answer.
    """

    feature: str
    target: str | None = None

    def __bool__(self) -> bool:
        return False

    def __str__(self) -> str:
        where = f" by {self.target}" if self.target else ""
        return f"{self.feature} unsupported{where}"


class EnumTable:
    """Translates a target's enumeration codes to canonical values and back.

    Several codes may map to one canonical value (a terminology name and its
    four-character code, say); the first code declared for a canonical value
    is the one sent to the target.
    """

    def __init__(self, mapping: Mapping[str, Any]):
        if not mapping:
            raise SchemaError("An enum table needs at least one entry")
        self._to_canonical: dict[str, Any] = dict(mapping)
        self._to_target: dict[Any, str] = {}
        for code, canonical in mapping.items():
            self._to_target.setdefault(canonical, code)

    def to_canonical(self, code: Any) -> Any:
        try:
            return self._to_canonical[str(code)]
        except KeyError:
            raise SchemaError(f"Unrecognised target code {code!r}; known codes are {sorted(self._to_canonical)}") from None

    def to_target(self, value: Any) -> str:
        try:
            return self._to_target[value]
        except KeyError:
            raise SchemaError(f"No target code for {value!r}") from None

    def codes(self) -> list[str]:
        return list(self._to_canonical)


@dataclass(frozen=True, slots=True)
class TargetOperation:
    command: str
    parameters: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class TargetProperty:
    """One property of one object kind, as a target names and types it."""

    name: str
    kind: PropertyType
    writable: bool = False
    owner: ObjectKind = ObjectKind.APPLICATION
    enum: EnumTable | None = None
    minimum: int | float | None = None
    maximum: int | float | None = None
    step: int | None = None
    # Target values that mean "no value" (e.g. Cog answers 0 for an unknown year).
    absent: tuple[Any, ...] = ("",)
    # Unit/shape normalisation applied after reading (e.g. milliseconds to seconds).
    convert: Callable[[Any], Any] | None = field(default=None, compare=False)


@dataclass(frozen=True, slots=True)
class TargetElement:
    """An element collection (e.g. `every window`) and the object kind of its members."""

    term: str
    kind: ObjectKind


class CapabilitySchema:
    """Static description of one target's scripting interface."""

    def __init__(
        self,
        name: str,
        operations: Mapping[GenericOperation, TargetOperation] | None = None,
        properties: Mapping[GenericProperty, TargetProperty] | None = None,
        elements: Mapping[ElementKind, TargetElement] | None = None,
        structural: Mapping[ObjectKind, Iterable[StructuralOperation]] | None = None,
        extra_properties: Iterable[TargetProperty] = (),
        save_options: EnumTable | None = None,
    ):
        self.name = name
        self._operations = dict(operations or {})
        self._properties = dict(properties or {})
        self._elements = dict(elements or {})
        self._structural = {kind: frozenset(ops) for kind, ops in (structural or {}).items()}
        self._extra = tuple(extra_properties)
        self.save_options = save_options
        self._validate()
        self._by_kind = self._index_by_kind()

    def _validate(self) -> None:
        for op, entry in self._operations.items():
            if not isinstance(op, GenericOperation) or not isinstance(entry, TargetOperation) or not entry.command:
                raise SchemaError(f"{self.name}: malformed operation entry {op!r} -> {entry!r}")
        reachable = {ObjectKind.APPLICATION} | {element.kind for element in self._elements.values()}
        if GenericProperty.NOW_PLAYING_ITEM in self._properties:
            reachable.add(ObjectKind.PLAYLIST_ENTRY)
        for prop, entry in [*self._properties.items(), *((None, extra) for extra in self._extra)]:
            if prop is not None and not isinstance(prop, GenericProperty):
                raise SchemaError(f"{self.name}: {prop!r} is not a generic property")
            if not isinstance(entry, TargetProperty) or not entry.name:
                raise SchemaError(f"{self.name}: malformed property entry {prop!r} -> {entry!r}")
            if (entry.kind is PropertyType.ENUM) != (entry.enum is not None):
                raise SchemaError(f"{self.name}: property '{entry.name}' must have an enum table exactly when it is an enum")
            if entry.step is not None and entry.kind is not PropertyType.INTEGER:
                raise SchemaError(f"{self.name}: property '{entry.name}' declares a step but is not an integer")
            if entry.owner not in reachable:
                raise SchemaError(f"{self.name}: property '{entry.name}' belongs to unreachable {entry.owner.value}")
        for kind, ops in self._structural.items():
            if kind not in reachable:
                raise SchemaError(f"{self.name}: structural operations declared for unreachable {kind.value}")

    def _index_by_kind(self) -> dict[ObjectKind, dict[str, TargetProperty]]:
        by_kind: dict[ObjectKind, dict[str, TargetProperty]] = {kind: {} for kind in ObjectKind}
        for entry in [*self._properties.values(), *self._extra]:
            by_kind[entry.owner][entry.name] = entry
        return by_kind

    # Lookups

    def lookup_operation(self, op: GenericOperation) -> TargetOperation | Unsupported:
        return self._operations.get(op) or Unsupported(op.value, self.name)

    def lookup_property(self, prop: GenericProperty) -> TargetProperty | Unsupported:
        return self._properties.get(prop) or Unsupported(prop.value, self.name)

    def lookup_element(self, kind: ElementKind) -> TargetElement | Unsupported:
        return self._elements.get(kind) or Unsupported(kind.value, self.name)

    def object_properties(self, kind: ObjectKind) -> Mapping[str, TargetProperty]:
        return self._by_kind[kind]

    def supports_structural(self, kind: ObjectKind, op: StructuralOperation) -> bool:
        return op in self._structural.get(kind, frozenset())

    def translate_enum(self, prop: GenericProperty, value: Any, direction: Direction = Direction.TO_CANONICAL) -> Any:
        entry = self.lookup_property(prop)
        if isinstance(entry, Unsupported) or entry.enum is None:
            raise SchemaError(f"{self.name}: '{prop.value}' has no enum translation table")
        if direction is Direction.TO_CANONICAL:
            return entry.enum.to_canonical(value)
        return entry.enum.to_target(value)

    def save_option_code(self, option: SaveOption) -> str:
        if self.save_options is None:
            raise SchemaError(f"{self.name}: no save options declared")
        return self.save_options.to_target(option)

    def __repr__(self) -> str:
        return f"CapabilitySchema({self.name!r})"
