"""Tests for JSON encoding and decoding"""

import json
import logging
import math

import pytest

from protojson.proto import (
    FieldDescriptor,
    FieldKind,
    InvalidArgument,
    Message,
    MessageDescriptor,
    ParseError,
    ProtoEnum,
    SchemaError,
    from_dict,
    from_json,
    to_dict,
    to_json,
)


class ResourceId(ProtoEnum):
    NONE = 0
    PLAYER = 1
    MONSTER = 2


class Vector3(Message):
    x: float
    y: float
    z: float

    def with_x(self, value):
        self.x = value
        return self

    def with_y(self, value):
        self.y = value
        return self

    def with_z(self, value):
        self.z = value
        return self


Vector3.__descriptor__ = MessageDescriptor(
    full_name="pokeworld.Vector3",
    fields=(
        FieldDescriptor("x", FieldKind.SCALAR, scalar_type="float"),
        FieldDescriptor("y", FieldKind.SCALAR, scalar_type="float"),
        FieldDescriptor("z", FieldKind.SCALAR, scalar_type="float"),
    ),
)


class Rect(Message):
    __descriptor__ = MessageDescriptor(
        full_name="pokeworld.Rect",
        fields=(
            FieldDescriptor("x", FieldKind.SCALAR, scalar_type="int32"),
            FieldDescriptor("y", FieldKind.SCALAR, scalar_type="int32"),
            FieldDescriptor("width", FieldKind.SCALAR, scalar_type="int32"),
            FieldDescriptor("height", FieldKind.SCALAR, scalar_type="int32"),
        ),
    )


class Player(Message):
    __descriptor__ = MessageDescriptor(
        full_name="pokeworld.Player",
        fields=(
            FieldDescriptor("id", FieldKind.SCALAR, scalar_type="int32"),
            FieldDescriptor("name", FieldKind.SCALAR, scalar_type="string"),
            FieldDescriptor("walkSpeed", FieldKind.SCALAR, scalar_type="float", attr="walk_speed"),
            FieldDescriptor("resourceId", FieldKind.ENUM, enum_type=ResourceId, attr="resource_id"),
            FieldDescriptor("position", FieldKind.MESSAGE, message_type=Vector3),
            FieldDescriptor("tags", FieldKind.SCALAR, repeated=True, scalar_type="string"),
            FieldDescriptor("avatar", FieldKind.SCALAR, scalar_type="bytes"),
            FieldDescriptor("active", FieldKind.SCALAR, scalar_type="bool"),
        ),
    )


class Actor(Message):
    __descriptor__ = MessageDescriptor(
        full_name="pokeworld.Actor",
        fields=(FieldDescriptor("player", FieldKind.MESSAGE, message_type=Player),),
    )


class TbPlayer(Message):
    __descriptor__ = MessageDescriptor(
        full_name="pokeworld.TbPlayer",
        fields=(
            FieldDescriptor(
                "dataList", FieldKind.MESSAGE, repeated=True, message_type=Player, attr="data_list"
            ),
            FieldDescriptor("visited", FieldKind.ENUM, repeated=True, enum_type=ResourceId),
        ),
    )


class NotAMessage:
    pass


def full_player():
    return Player(
        id=7,
        name="Ash",
        walk_speed=2.5,
        resource_id=ResourceId.PLAYER,
        position=Vector3(x=1.0, y=-2.0, z=0.5),
        tags=["hero", "trainer"],
        avatar=b"\x00\x01\xff",
        active=True,
    )


def describe_to_json():
    def serializes_scalars(expect):
        vec = Vector3().with_x(1.5).with_y(2.5).with_z(3.5)

        expect(to_json(vec)) == '{"x":1.5,"y":2.5,"z":3.5}'

    def pretty_prints_with_indent(expect):
        vec = Vector3().with_x(1.5).with_y(2.5).with_z(3.5)

        formatted = to_json(vec, 2)
        expect("\n" in formatted) == True
        expect('  "x": 1.5' in formatted) == True
        expect(json.loads(formatted)) == json.loads(to_json(vec))

    def treats_zero_indent_as_compact(expect):
        vec = Vector3(x=1.5)

        expect(to_json(vec, 0)) == to_json(vec)
        expect("\n" in to_json(vec, 0)) == False

    def emits_every_field_of_a_fresh_instance(expect):
        expect(to_json(Rect())) == '{"x":0,"y":0,"width":0,"height":0}'

        parsed = json.loads(to_json(Player()))
        expect(parsed) == {
            "id": 0,
            "name": "",
            "walkSpeed": 0.0,
            "resourceId": 0,
            "position": {"x": 0.0, "y": 0.0, "z": 0.0},
            "tags": [],
            "avatar": "",
            "active": False,
        }

    def keeps_descriptor_field_order(expect):
        parsed = json.loads(to_json(full_player()))

        expect(list(parsed)) == [
            "id",
            "name",
            "walkSpeed",
            "resourceId",
            "position",
            "tags",
            "avatar",
            "active",
        ]

    def serializes_enums_as_numbers(expect):
        player = Player(resource_id=ResourceId.MONSTER)

        expect('"resourceId":2' in to_json(player)) == True

    def serializes_nested_messages(expect):
        player = Player(id=123, name="Test Player", walk_speed=5.0)
        actor = Actor(player=player)

        parsed = json.loads(to_json(actor))
        expect(parsed["player"]["id"]) == 123
        expect(parsed["player"]["name"]) == "Test Player"
        expect(parsed["player"]["walkSpeed"]) == 5.0

    def serializes_unset_nested_message_as_defaults(expect):
        parsed = json.loads(to_json(Actor()))

        expect(parsed["player"]["id"]) == 0
        expect(parsed["player"]["position"]) == {"x": 0.0, "y": 0.0, "z": 0.0}

    def serializes_repeated_fields_in_order(expect):
        table = TbPlayer(
            data_list=[Player(id=1, name="Player1"), Player(id=2, name="Player2")],
            visited=[ResourceId.MONSTER, ResourceId.PLAYER],
        )

        parsed = json.loads(to_json(table))
        expect([p["id"] for p in parsed["dataList"]]) == [1, 2]
        expect([p["name"] for p in parsed["dataList"]]) == ["Player1", "Player2"]
        expect(parsed["visited"]) == [2, 1]

    def encodes_bytes_as_base64(expect):
        expect(to_dict(Player(avatar=b"\x00\x01\xff"))["avatar"]) == "AAH/"

    def encodes_non_finite_floats_as_strings(expect):
        vec = Vector3(x=math.inf, y=-math.inf, z=math.nan)

        expect(to_json(vec)) == '{"x":"Infinity","y":"-Infinity","z":"NaN"}'

    def keeps_non_ascii_text(expect):
        expect("ピカチュウ" in to_json(Player(name="ピカチュウ"))) == True


def describe_from_json():
    def decodes_parsed_objects(expect):
        vec = from_json(Vector3, {"x": 10, "y": 20, "z": 30})

        expect(vec.x) == 10
        expect(vec.y) == 20
        expect(vec.z) == 30

    def decodes_text(expect):
        vec = from_json(Vector3, '{"x":100,"y":200,"z":300}')

        expect(vec.x) == 100
        expect(vec.z) == 300

    def decodes_bytes(expect):
        vec = from_json(Vector3, b'{"x":1.5}')

        expect(vec.x) == 1.5

    def keeps_defaults_for_missing_keys(expect):
        rect = from_json(Rect, '{"x":10,"y":20}')

        expect(rect.x) == 10
        expect(rect.y) == 20
        expect(rect.width) == 0
        expect(rect.height) == 0

    def ignores_unknown_keys(expect):
        vec = from_json(Vector3, {"x": 1, "y": 2, "z": 3, "extra": 1})

        expect(vec) == Vector3(x=1, y=2, z=3)
        expect(hasattr(vec, "extra")) == False

    def logs_unknown_keys(expect, caplog):
        caplog.set_level(logging.DEBUG, logger="protojson.proto.json_format")

        from_json(Vector3, {"x": 1, "extra": 1})

        expect("Ignoring unknown keys ['extra'] for pokeworld.Vector3" in caplog.text) == True

    def treats_null_as_missing(expect):
        player = from_json(Player, {"name": None, "tags": None, "position": None})

        expect(player.name) == ""
        expect(player.tags) == []
        expect(player.position) == None

    def accepts_attribute_names(expect):
        player = from_json(Player, {"walk_speed": 2.5, "resource_id": 1})

        expect(player.walk_speed) == 2.5
        expect(player.resource_id) == ResourceId.PLAYER

    def decodes_nested_messages(expect):
        actor = from_json(Actor, '{"player":{"id":123,"position":{"x":1.5}}}')

        expect(isinstance(actor.player, Player)) == True
        expect(actor.player.id) == 123
        expect(actor.player.position.x) == 1.5
        expect(actor.player.position.y) == 0.0

    def decodes_repeated_fields_in_order(expect):
        table = from_json(TbPlayer, {"dataList": [{"id": 2}, {"id": 1}], "visited": [1, 0]})

        expect([p.id for p in table.data_list]) == [2, 1]
        expect(table.visited) == [ResourceId.PLAYER, ResourceId.NONE]

    def decodes_empty_or_missing_arrays_as_empty_lists(expect):
        expect(from_json(TbPlayer, {"dataList": []}).data_list) == []
        expect(from_json(TbPlayer, {}).data_list) == []

    def decodes_enums_from_numbers_and_names(expect):
        expect(from_json(Player, {"resourceId": 2}).resource_id is ResourceId.MONSTER) == True
        expect(from_json(Player, {"resourceId": "PLAYER"}).resource_id is ResourceId.PLAYER) == True

    def keeps_unknown_enum_numbers(expect):
        player = from_json(Player, {"resourceId": 42})

        expect(player.resource_id) == 42
        expect(json.loads(to_json(player))["resourceId"]) == 42

    def decodes_base64_bytes(expect):
        expect(from_json(Player, {"avatar": "AAH/"}).avatar) == b"\x00\x01\xff"

    def decodes_non_finite_floats(expect):
        vec = from_json(Vector3, '{"x":"Infinity","y":"-Infinity","z":"NaN"}')

        expect(vec.x) == math.inf
        expect(vec.y) == -math.inf
        expect(math.isnan(vec.z)) == True

    def builds_from_dicts(expect):
        expect(from_dict(Rect, {"width": 4})) == Rect(width=4)


def describe_round_trip():
    def round_trips_scalars(expect):
        original = Vector3(x=42.0, y=99.5, z=-1.25)

        expect(from_json(Vector3, to_json(original))) == original

    def round_trips_every_field_kind(expect):
        original = full_player()

        restored = from_json(Player, to_json(original))
        expect(restored) == original
        expect(restored.resource_id is ResourceId.PLAYER) == True
        expect(restored.avatar) == b"\x00\x01\xff"

    def round_trips_nested_and_repeated_messages(expect):
        original = TbPlayer(data_list=[full_player(), Player(id=2, name="Player2")])

        restored = from_json(TbPlayer, to_json(original, 4))
        expect(restored) == original
        expect(restored.data_list[1].name) == "Player2"

    def round_trips_default_instances(expect):
        expect(from_json(Player, to_json(Player()))) == Player()
        expect(from_json(Actor, to_json(Actor()))) == Actor()


def describe_errors():
    def rejects_null_message(expect):
        with pytest.raises(InvalidArgument, match="cannot be null"):
            to_json(None)

        with pytest.raises(InvalidArgument, match="cannot be null"):
            to_json(None, 2)

        with pytest.raises(InvalidArgument, match="cannot be null"):
            to_dict(None)

    def rejects_bad_indent(expect):
        with pytest.raises(InvalidArgument, match="indent"):
            to_json(Rect(), -1)

        with pytest.raises(InvalidArgument, match="indent"):
            to_json(Rect(), "  ")

    def rejects_objects_without_descriptor(expect):
        with pytest.raises(SchemaError, match="missing __descriptor"):
            to_json(NotAMessage())

    def rejects_non_class_reference(expect):
        with pytest.raises(InvalidArgument, match="must be a function"):
            from_json(None, {})

        with pytest.raises(InvalidArgument, match="must be a function"):
            from_dict(Vector3(), {})

    def rejects_invalid_json_text(expect):
        with pytest.raises(ParseError, match="Failed to parse JSON") as exc:
            from_json(Vector3, "invalid json")

        expect(isinstance(exc.value.__cause__, json.JSONDecodeError)) == True

    def rejects_class_without_descriptor(expect):
        with pytest.raises(SchemaError, match="missing __descriptor"):
            from_json(NotAMessage, {})

    def rejects_non_object_documents(expect):
        with pytest.raises(ParseError, match="expected a JSON object, got array"):
            from_json(Vector3, "[1, 2, 3]")

    def reports_path_of_bad_values(expect):
        with pytest.raises(ParseError, match=r"dataList\[1\]: expected a JSON object, got number"):
            from_json(TbPlayer, {"dataList": [{"id": 1}, 5]})

        with pytest.raises(ParseError, match="dataList: expected a JSON array"):
            from_json(TbPlayer, {"dataList": {"id": 1}})

        with pytest.raises(ParseError, match="player.avatar: invalid base64"):
            from_json(Actor, {"player": {"avatar": "not base64!"}})

    def rejects_unknown_enum_names(expect):
        with pytest.raises(ParseError, match="unknown ResourceId value 'DRAGON'"):
            from_json(Player, {"resourceId": "DRAGON"})

    def errors_share_a_base_class(expect):
        for exc_type in (InvalidArgument, ParseError, SchemaError):
            expect(issubclass(exc_type, RuntimeError)) == True
