"""Tests for command payload encoding and the per-kind command methods."""

import pytest
from conftest import LIGHT_ID, ROOM_GROUP_ID, ROOM_ID, SCENE_ID, ZONE_GROUP_ID, ZONE_ID
from pydantic import ValidationError

from huegraph.commands.colors import XY_COLORS, lookup_xy
from huegraph.commands.encode import (
    STOP_DIMMING,
    encode_brightness,
    encode_color,
    encode_on,
    encode_recall,
    encode_temperature,
    round_mirek,
    with_transition,
)


class TestEncoding:
    def test_on_without_transition(self):
        assert encode_on(True) == {"on": {"on": True}}

    def test_on_with_transition(self):
        assert encode_on(False, 400) == {"on": {"on": False}, "dynamics": {"duration": 400}}

    def test_brightness(self):
        assert encode_brightness(42.5, 100) == {"dimming": {"brightness": 42.5}, "dynamics": {"duration": 100}}

    def test_stop_dimming_ignores_transition(self):
        assert encode_brightness(STOP_DIMMING, 500) == {"dimming_delta": {"action": "stop"}}

    def test_brightness_out_of_range(self):
        with pytest.raises(ValidationError):
            encode_brightness(150)

    def test_color_by_name(self):
        assert encode_color("Red") == {"color": {"xy": XY_COLORS["red"]}}

    def test_unknown_color_name_is_white(self):
        assert encode_color("octarine")["color"]["xy"] == XY_COLORS["white"]

    def test_color_from_pair_and_mapping(self):
        expected = {"color": {"xy": {"x": 0.3, "y": 0.4}}, "dynamics": {"duration": 50}}
        assert encode_color((0.3, 0.4), 50) == expected
        assert encode_color({"x": 0.3, "y": 0.4}, 50) == expected

    def test_bad_color_argument(self):
        with pytest.raises(ValueError):
            encode_color(42)
        with pytest.raises(ValueError):
            encode_color((0.1, 0.2, 0.3))

    def test_lookup_returns_copy(self):
        lookup_xy("blue")["x"] = 0.0
        assert XY_COLORS["blue"]["x"] == 0.1532

    def test_mirek_rounds_half_up(self):
        assert round_mirek(366.5) == 367
        assert round_mirek(366.49) == 366
        assert encode_temperature(366.5) == {"color_temperature": {"mirek": 367}}

    def test_mirek_out_of_range(self):
        with pytest.raises(ValidationError):
            encode_temperature(20)

    def test_recall(self):
        assert encode_recall() == {"recall": {"action": "active"}}
        assert encode_recall(1000) == {"recall": {"action": "active"}, "dynamics": {"duration": 1000}}

    def test_with_transition_does_not_mutate(self):
        payload = {"on": {"on": True}}
        assert with_transition(payload, None) is payload
        assert with_transition(payload, 10) == {"on": {"on": True}, "dynamics": {"duration": 10}}
        assert payload == {"on": {"on": True}}


class TestNodeCommands:
    def test_light_commands_go_to_light_path(self, loaded_registry, sent):
        light = loaded_registry.get(LIGHT_ID)
        light.set_dim(30, 200)
        light.set_temperature(250)

        path = f"/clip/v2/resource/light/{LIGHT_ID}"
        assert sent == [
            (path, {"dimming": {"brightness": 30}, "dynamics": {"duration": 200}}),
            (path, {"color_temperature": {"mirek": 250}}),
        ]

    def test_toggle_uses_current_state(self, loaded_registry, sent):
        loaded_registry.get(LIGHT_ID).toggle()
        loaded_registry.get(ROOM_GROUP_ID).toggle()

        assert sent[0][1] == {"on": {"on": True}}
        assert sent[1][1] == {"on": {"on": False}}

    def test_raw_command(self, loaded_registry, sent):
        loaded_registry.get(LIGHT_ID).raw_command({"alert": {"action": "breathe"}}, 0)
        assert sent[0][1] == {"alert": {"action": "breathe"}, "dynamics": {"duration": 0}}

    def test_room_target_command_goes_to_grouped_light(self, loaded_registry, sent):
        payload = encode_on(True)
        loaded_registry.get(ROOM_ID).target_command(payload)
        loaded_registry.get(ZONE_ID).target_command(payload)

        assert sent == [
            (f"/clip/v2/resource/grouped_light/{ROOM_GROUP_ID}", payload),
            (f"/clip/v2/resource/grouped_light/{ZONE_GROUP_ID}", payload),
        ]

    def test_scene_recall_and_target(self, loaded_registry, sent):
        scene = loaded_registry.get(SCENE_ID)
        scene.recall(300)
        scene.target_command({"on": {"on": False}})

        assert scene.group.id == ROOM_ID
        assert sent == [
            (f"/clip/v2/resource/scene/{SCENE_ID}", {"recall": {"action": "active"}, "dynamics": {"duration": 300}}),
            (f"/clip/v2/resource/grouped_light/{ROOM_GROUP_ID}", {"on": {"on": False}}),
        ]
