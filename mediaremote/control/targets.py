# mediaremote/control/targets.py

"""Built-in targets and their capability schemas.

Terminology is taken from each application's scripting dictionary. Enum
tables list both the terminology name (what `osascript` prints when it can
load the dictionary) and the raw four-character code (what it prints when it
can't).
"""

from dataclasses import dataclass

from .schema import (
    ALL_STRUCTURAL,
    CapabilitySchema,
    ElementKind,
    EnumTable,
    GenericOperation as Op,
    GenericProperty as Prop,
    ObjectKind,
    PlaybackState,
    PropertyType as T,
    SaveOption,
    StructuralOperation,
    TargetElement,
    TargetOperation,
    TargetProperty,
)


@dataclass(frozen=True, slots=True)
class Target:
    """An addressable application: its bundle identifier, display name and schema."""

    identity: str
    name: str
    schema: CapabilitySchema

    def __str__(self) -> str:
        return f"{self.name} ({self.identity})"


def _play_count(value) -> int:
    # Cog reports the play count as text.
    return int(str(value).strip())


def _milliseconds_to_seconds(value) -> float:
    return float(value) / 1000.0


_VOLUME = dict(kind=T.INTEGER, writable=True, minimum=0, maximum=100)

_APPLICATION_INFO = {
    Prop.NAME: TargetProperty("name", T.TEXT),
    Prop.VERSION: TargetProperty("version", T.TEXT),
    Prop.FRONTMOST: TargetProperty("frontmost", T.BOOLEAN),
}

# 'kPSS'/'kPSP'/'kPSp' is the player state enumeration shared by Music, Spotify and Doppler.
_STANDARD_PLAYER_STATES = {
    "stopped": PlaybackState.STOPPED,
    "kPSS": PlaybackState.STOPPED,
    "playing": PlaybackState.PLAYING,
    "kPSP": PlaybackState.PLAYING,
    "paused": PlaybackState.PAUSED,
    "kPSp": PlaybackState.PAUSED,
}


def _entry(name: str, kind: T, **kwargs) -> TargetProperty:
    return TargetProperty(name, kind, owner=ObjectKind.PLAYLIST_ENTRY, **kwargs)


def _window(name: str, kind: T, writable: bool = False) -> TargetProperty:
    return TargetProperty(name, kind, writable=writable, owner=ObjectKind.WINDOW)


COG = Target(
    identity="org.cogx.cog",
    name="Cog",
    schema=CapabilitySchema(
        name="Cog",
        operations={
            # Cog's "play" toggles between playing and paused, so it only serves play/pause.
            Op.PLAY_PAUSE: TargetOperation("play"),
            Op.PAUSE: TargetOperation("pause"),
            Op.STOP: TargetOperation("stop"),
            Op.NEXT: TargetOperation("next"),
            Op.PREVIOUS: TargetOperation("previous"),
            Op.OPEN: TargetOperation("open"),
            Op.QUIT: TargetOperation("quit", ("saving",)),
        },
        properties={
            **_APPLICATION_INFO,
            Prop.NOW_PLAYING_ITEM: TargetProperty("current entry", T.OBJECT),
            Prop.TITLE: _entry("title", T.TEXT),
            Prop.ARTIST: _entry("artist", T.TEXT, writable=True),
            Prop.ALBUM: _entry("album", T.TEXT),
            Prop.ALBUM_ARTIST: _entry("albumartist", T.TEXT),
            Prop.COMPOSER: _entry("composer", T.TEXT, writable=True),
            Prop.GENRE: _entry("genre", T.TEXT),
            Prop.DURATION: _entry("length", T.REAL, absent=(0, 0.0)),
            Prop.TRACK_NUMBER: _entry("track", T.INTEGER, absent=(0,)),
            Prop.DISC_NUMBER: _entry("disc", T.INTEGER, absent=(0,)),
            Prop.YEAR: _entry("year", T.INTEGER, absent=(0,)),
            Prop.BITRATE: _entry("bitrate", T.INTEGER, absent=(0,)),
            Prop.PLAY_COUNT: _entry("playcount", T.TEXT, convert=_play_count),
            Prop.PLAY_INFO: _entry("playinfo", T.TEXT),
            Prop.SPAM_TEXT: _entry("spam", T.TEXT),
            Prop.SOURCE_URL: _entry("url", T.URL),
        },
        elements={ElementKind.WINDOW: TargetElement("window", ObjectKind.WINDOW)},
        structural={
            ObjectKind.APPLICATION: {StructuralOperation.EXISTS},
            ObjectKind.WINDOW: ALL_STRUCTURAL,
            ObjectKind.PLAYLIST_ENTRY: ALL_STRUCTURAL,
        },
        extra_properties=[
            _window("name", T.TEXT, writable=True),
            _window("id", T.INTEGER),
            _window("bounds", T.RECT, writable=True),
            _window("document", T.OBJECT),
            _window("closeable", T.BOOLEAN),
            _window("titled", T.BOOLEAN),
            _window("index", T.INTEGER, writable=True),
            _window("floating", T.BOOLEAN),
            _window("miniaturizable", T.BOOLEAN),
            _window("miniaturized", T.BOOLEAN, writable=True),
            _window("modal", T.BOOLEAN),
            _window("resizable", T.BOOLEAN),
            _window("visible", T.BOOLEAN, writable=True),
            _window("zoomable", T.BOOLEAN),
            _window("zoomed", T.BOOLEAN, writable=True),
        ],
        save_options=EnumTable({
            "yes": SaveOption.YES,
            "yes ": SaveOption.YES,
            "no": SaveOption.NO,
            "no  ": SaveOption.NO,
            "ask": SaveOption.ASK,
            "ask ": SaveOption.ASK,
        }),
    ),
)

RADICCIO = Target(
    identity="computer.crispycrunchy.radiccio",
    name="Radiccio",
    schema=CapabilitySchema(
        name="Radiccio",
        operations={
            Op.PLAY: TargetOperation("play"),
            Op.PAUSE: TargetOperation("pause"),
            Op.STOP: TargetOperation("stop"),
            Op.PLAY_PAUSE: TargetOperation("playpause"),
            Op.NEXT: TargetOperation("next track"),
            Op.PREVIOUS: TargetOperation("previous track"),
            Op.RESTART_TRACK: TargetOperation("restart track"),
            Op.QUIT: TargetOperation("quit"),
        },
        properties={
            **_APPLICATION_INFO,
            Prop.PLAYBACK_STATE: TargetProperty("player state", T.ENUM, enum=EnumTable({
                "stopped": PlaybackState.STOPPED,
                "rdST": PlaybackState.STOPPED,
                "playing": PlaybackState.PLAYING,
                "rdPL": PlaybackState.PLAYING,
                "paused": PlaybackState.PAUSED,
                "rdPA": PlaybackState.PAUSED,
            })),
            # 0 = minimum, 100 = maximum; must be divisible by 5.
            Prop.VOLUME: TargetProperty("sound volume", step=5, **_VOLUME),
            Prop.POSITION: TargetProperty("player position", T.REAL, absent=()),
            Prop.QUEUE_POSITION: TargetProperty("queue position", T.INTEGER, absent=(0,)),
            Prop.QUEUE_COUNT: TargetProperty("queue count", T.INTEGER, absent=()),
        },
        structural={ObjectKind.APPLICATION: {StructuralOperation.EXISTS}},
    ),
)

MUSIC = Target(
    identity="com.apple.Music",
    name="Music",
    schema=CapabilitySchema(
        name="Music",
        operations={
            Op.PLAY: TargetOperation("play"),
            Op.PAUSE: TargetOperation("pause"),
            Op.STOP: TargetOperation("stop"),
            Op.PLAY_PAUSE: TargetOperation("playpause"),
            Op.NEXT: TargetOperation("next track"),
            Op.PREVIOUS: TargetOperation("previous track"),
            # Repositions to the start of the track, or goes back one if already there.
            Op.RESTART_TRACK: TargetOperation("back track"),
            Op.OPEN: TargetOperation("open"),
            Op.QUIT: TargetOperation("quit"),
        },
        properties={
            **_APPLICATION_INFO,
            Prop.PLAYBACK_STATE: TargetProperty("player state", T.ENUM, enum=EnumTable({
                **_STANDARD_PLAYER_STATES,
                # Seeking is still playback.
                "fast forwarding": PlaybackState.PLAYING,
                "kPSF": PlaybackState.PLAYING,
                "rewinding": PlaybackState.PLAYING,
                "kPSR": PlaybackState.PLAYING,
            })),
            Prop.VOLUME: TargetProperty("sound volume", **_VOLUME),
            Prop.POSITION: TargetProperty("player position", T.REAL, absent=()),
            Prop.NOW_PLAYING_ITEM: TargetProperty("current track", T.OBJECT),
            Prop.TITLE: _entry("name", T.TEXT, writable=True),
            Prop.ARTIST: _entry("artist", T.TEXT, writable=True),
            Prop.ALBUM: _entry("album", T.TEXT, writable=True),
            Prop.ALBUM_ARTIST: _entry("album artist", T.TEXT, writable=True),
            Prop.COMPOSER: _entry("composer", T.TEXT, writable=True),
            Prop.GENRE: _entry("genre", T.TEXT, writable=True),
            Prop.DURATION: _entry("duration", T.REAL, absent=()),
            Prop.TRACK_NUMBER: _entry("track number", T.INTEGER, writable=True, absent=(0,)),
            Prop.DISC_NUMBER: _entry("disc number", T.INTEGER, writable=True, absent=(0,)),
            Prop.YEAR: _entry("year", T.INTEGER, writable=True, absent=(0,)),
            Prop.BITRATE: _entry("bit rate", T.INTEGER, absent=(0,)),
            Prop.PLAY_COUNT: _entry("played count", T.INTEGER, writable=True, absent=()),
        },
        elements={ElementKind.WINDOW: TargetElement("window", ObjectKind.WINDOW)},
        structural={
            ObjectKind.APPLICATION: {StructuralOperation.EXISTS},
            ObjectKind.WINDOW: {StructuralOperation.EXISTS, StructuralOperation.CLOSE},
            ObjectKind.PLAYLIST_ENTRY: {StructuralOperation.EXISTS, StructuralOperation.DELETE,
                                        StructuralOperation.DUPLICATE},
        },
        extra_properties=[
            _window("name", T.TEXT),
            _window("id", T.INTEGER),
            _window("bounds", T.RECT, writable=True),
            _window("index", T.INTEGER, writable=True),
            _window("visible", T.BOOLEAN, writable=True),
            _window("miniaturized", T.BOOLEAN, writable=True),
            _window("zoomed", T.BOOLEAN, writable=True),
        ],
    ),
)

SPOTIFY = Target(
    identity="com.spotify.client",
    name="Spotify",
    schema=CapabilitySchema(
        name="Spotify",
        operations={
            Op.PLAY: TargetOperation("play"),
            Op.PAUSE: TargetOperation("pause"),
            Op.PLAY_PAUSE: TargetOperation("playpause"),
            Op.NEXT: TargetOperation("next track"),
            Op.PREVIOUS: TargetOperation("previous track"),
            Op.QUIT: TargetOperation("quit"),
        },
        properties={
            **_APPLICATION_INFO,
            Prop.PLAYBACK_STATE: TargetProperty("player state", T.ENUM, enum=EnumTable(_STANDARD_PLAYER_STATES)),
            Prop.VOLUME: TargetProperty("sound volume", **_VOLUME),
            Prop.POSITION: TargetProperty("player position", T.REAL, absent=()),
            Prop.NOW_PLAYING_ITEM: TargetProperty("current track", T.OBJECT),
            Prop.TITLE: _entry("name", T.TEXT),
            Prop.ARTIST: _entry("artist", T.TEXT),
            Prop.ALBUM: _entry("album", T.TEXT),
            Prop.ALBUM_ARTIST: _entry("album artist", T.TEXT),
            Prop.DURATION: _entry("duration", T.INTEGER, absent=(0,), convert=_milliseconds_to_seconds),
            Prop.TRACK_NUMBER: _entry("track number", T.INTEGER, absent=(0,)),
            Prop.DISC_NUMBER: _entry("disc number", T.INTEGER, absent=(0,)),
            Prop.PLAY_COUNT: _entry("played count", T.INTEGER, absent=()),
            Prop.SOURCE_URL: _entry("spotify url", T.TEXT),
        },
        structural={ObjectKind.APPLICATION: {StructuralOperation.EXISTS}},
    ),
)

DOPPLER = Target(
    identity="co.brushedtype.doppler-macos",
    name="Doppler",
    schema=CapabilitySchema(
        name="Doppler",
        operations={
            Op.PLAY: TargetOperation("play"),
            Op.PAUSE: TargetOperation("pause"),
            Op.PLAY_PAUSE: TargetOperation("playpause"),
            Op.NEXT: TargetOperation("next track"),
            Op.PREVIOUS: TargetOperation("previous track"),
        },
        properties={
            Prop.PLAYBACK_STATE: TargetProperty("player state", T.ENUM, enum=EnumTable(_STANDARD_PLAYER_STATES)),
        },
    ),
)

BUILTIN_TARGETS: tuple[Target, ...] = (MUSIC, SPOTIFY, COG, DOPPLER, RADICCIO)
