"""Tests for GroupService room/zone commands."""

import pytest
from conftest import LIGHT_ID, ROOM_GROUP_ID, ROOM_ID, ZONE_GROUP_ID

from huegraph.commands.colors import XY_COLORS
from huegraph.errors import UnknownResourceError
from huegraph.services.group_service import GroupService

ROOM_GROUP_PATH = f"/clip/v2/resource/grouped_light/{ROOM_GROUP_ID}"


@pytest.fixture
def groups(loaded_registry):
    return GroupService(loaded_registry)


class TestGroupService:
    def test_turn_on_by_group_id(self, groups, sent):
        groups.turn_on(ROOM_GROUP_ID)
        assert sent == [(ROOM_GROUP_PATH, {"on": {"on": True}})]

    def test_turn_off_by_room_id(self, groups, sent):
        groups.turn_off(ROOM_ID, duration_ms=1000)
        assert sent == [(ROOM_GROUP_PATH, {"on": {"on": False}, "dynamics": {"duration": 1000}})]

    def test_brightness_is_clamped(self, groups, sent):
        groups.set_brightness(ZONE_GROUP_ID, 140)
        assert sent[0][1] == {"dimming": {"brightness": 100}, "dynamics": {"duration": 500}}

    def test_brightness_stop(self, groups, sent):
        groups.set_brightness(ROOM_GROUP_ID, -1)
        assert sent[0][1] == {"dimming_delta": {"action": "stop"}}

    def test_color(self, groups, sent):
        groups.set_color(ROOM_GROUP_ID, (1.4, 0.3))
        groups.set_color(ROOM_GROUP_ID, "blue", duration_ms=0)

        assert sent[0][1] == {"color": {"xy": {"x": 1.0, "y": 0.3}}, "dynamics": {"duration": 50}}
        assert sent[1][1] == {"color": {"xy": XY_COLORS["blue"]}, "dynamics": {"duration": 0}}

    def test_color_temperature_is_clamped(self, groups, sent):
        groups.set_color_temp(ROOM_GROUP_ID, 10)
        assert sent[0][1] == {"color_temperature": {"mirek": 50}}

    def test_rejects_non_groups(self, groups):
        with pytest.raises(UnknownResourceError):
            groups.turn_on(LIGHT_ID)
        with pytest.raises(UnknownResourceError):
            groups.turn_on("ghost")
