import pytest

from mediaremote.control.schema import (
    CapabilitySchema,
    Direction,
    ElementKind,
    EnumTable,
    GenericOperation,
    GenericProperty,
    ObjectKind,
    PlaybackState,
    PropertyType,
    SaveOption,
    StructuralOperation,
    TargetElement,
    TargetOperation,
    TargetProperty,
    Unsupported,
)
from mediaremote.control.targets import BUILTIN_TARGETS, COG, MUSIC, RADICCIO, SPOTIFY
from mediaremote.errors import SchemaError


@pytest.mark.parametrize("target", BUILTIN_TARGETS, ids=lambda t: t.name)
def test_lookups_are_total_over_the_vocabulary(target) -> None:
    schema = target.schema
    for op in GenericOperation:
        assert isinstance(schema.lookup_operation(op), (TargetOperation, Unsupported))
    for prop in GenericProperty:
        assert isinstance(schema.lookup_property(prop), (TargetProperty, Unsupported))
    for kind in ElementKind:
        assert isinstance(schema.lookup_element(kind), (TargetElement, Unsupported))


def test_unsupported_names_the_feature_and_target() -> None:
    missing = SPOTIFY.schema.lookup_operation(GenericOperation.STOP)

    assert missing == Unsupported("stop", "Spotify")
    assert not missing
    assert str(missing) == "stop unsupported by Spotify"


def test_target_terminology() -> None:
    assert RADICCIO.schema.lookup_operation(GenericOperation.NEXT).command == "next track"
    assert COG.schema.lookup_operation(GenericOperation.NEXT).command == "next"
    assert MUSIC.schema.lookup_operation(GenericOperation.RESTART_TRACK).command == "back track"
    assert COG.schema.lookup_property(GenericProperty.ALBUM_ARTIST).name == "albumartist"
    assert MUSIC.schema.lookup_property(GenericProperty.ALBUM_ARTIST).name == "album artist"


def test_volume_constraints() -> None:
    volume = RADICCIO.schema.lookup_property(GenericProperty.VOLUME)

    assert (volume.minimum, volume.maximum, volume.step) == (0, 100, 5)
    assert volume.writable
    assert MUSIC.schema.lookup_property(GenericProperty.VOLUME).step is None


def test_translate_enum_both_ways() -> None:
    schema = RADICCIO.schema

    assert schema.translate_enum(GenericProperty.PLAYBACK_STATE, "rdPA") is PlaybackState.PAUSED
    assert schema.translate_enum(GenericProperty.PLAYBACK_STATE, "paused") is PlaybackState.PAUSED
    assert schema.translate_enum(GenericProperty.PLAYBACK_STATE, PlaybackState.PAUSED, Direction.TO_TARGET) == "paused"
    assert MUSIC.schema.translate_enum(GenericProperty.PLAYBACK_STATE, "kPSR") is PlaybackState.PLAYING


def test_translate_enum_rejects_unknown_codes_and_non_enums() -> None:
    with pytest.raises(SchemaError):
        RADICCIO.schema.translate_enum(GenericProperty.PLAYBACK_STATE, "kPSP")
    with pytest.raises(SchemaError):
        RADICCIO.schema.translate_enum(GenericProperty.VOLUME, 50)
    with pytest.raises(SchemaError):
        COG.schema.translate_enum(GenericProperty.PLAYBACK_STATE, "playing")


def test_save_options() -> None:
    assert COG.schema.save_option_code(SaveOption.ASK) == "ask"
    with pytest.raises(SchemaError):
        MUSIC.schema.save_option_code(SaveOption.ASK)


def test_object_properties_by_kind() -> None:
    window = COG.schema.object_properties(ObjectKind.WINDOW)
    entry = COG.schema.object_properties(ObjectKind.PLAYLIST_ENTRY)

    assert window["bounds"].kind is PropertyType.RECT
    assert "title" in entry and "title" not in window
    assert RADICCIO.schema.object_properties(ObjectKind.WINDOW) == {}


def test_structural_support() -> None:
    assert COG.schema.supports_structural(ObjectKind.WINDOW, StructuralOperation.DUPLICATE)
    assert MUSIC.schema.supports_structural(ObjectKind.WINDOW, StructuralOperation.CLOSE)
    assert not MUSIC.schema.supports_structural(ObjectKind.WINDOW, StructuralOperation.MOVE)
    assert not RADICCIO.schema.supports_structural(ObjectKind.WINDOW, StructuralOperation.EXISTS)


@pytest.mark.parametrize("kwargs", [
    {"operations": {GenericOperation.PLAY: TargetOperation("")}},
    {"operations": {"play": TargetOperation("play")}},
    {"properties": {GenericProperty.PLAYBACK_STATE: TargetProperty("player state", PropertyType.ENUM)}},
    {"properties": {GenericProperty.NAME: TargetProperty("name", PropertyType.TEXT,
                                                         enum=EnumTable({"a": 1}))}},
    {"properties": {GenericProperty.VOLUME: TargetProperty("volume", PropertyType.REAL, step=5)}},
    # An item property with no way to reach an item.
    {"properties": {GenericProperty.TITLE: TargetProperty("name", PropertyType.TEXT,
                                                          owner=ObjectKind.PLAYLIST_ENTRY)}},
    {"structural": {ObjectKind.WINDOW: {StructuralOperation.CLOSE}}},
], ids=["empty-command", "non-generic-op", "enum-without-table", "table-without-enum", "step-on-real",
        "unreachable-owner", "unreachable-structural"])
def test_malformed_schemas_are_rejected(kwargs) -> None:
    with pytest.raises(SchemaError):
        CapabilitySchema("Broken", **kwargs)


def test_empty_enum_table_is_rejected() -> None:
    with pytest.raises(SchemaError):
        EnumTable({})


def test_enum_table_sends_the_first_declared_code() -> None:
    table = EnumTable({"playing": PlaybackState.PLAYING, "kPSP": PlaybackState.PLAYING})

    assert table.to_target(PlaybackState.PLAYING) == "playing"
    assert table.codes() == ["playing", "kPSP"]
