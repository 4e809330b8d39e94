import logging

from huegraph.commands.encode import (
    STOP_DIMMING,
    encode_brightness,
    encode_color,
    encode_on,
    encode_temperature,
)
from huegraph.errors import UnknownResourceError
from huegraph.resources.kinds import ResourceKind
from huegraph.resources.registry import ResourceRegistry
from huegraph.resources.types import GroupedLight

logger = logging.getLogger(__name__)


class GroupService:
    """Commands for a whole room or zone.

    `group_id` may be the id of a grouped_light or of the room/zone owning it.
    """

    def __init__(self, registry: ResourceRegistry):
        self.registry = registry

    def _groups(self, group_id: str) -> list[GroupedLight]:
        node = self.registry.get(group_id)
        if node is None:
            raise UnknownResourceError(f"no group with id {group_id!r}")
        if node.kind == ResourceKind.GROUPED_LIGHT:
            return [node]
        if node.kind in (ResourceKind.ROOM, ResourceKind.ZONE):
            groups = node.find_services(ResourceKind.GROUPED_LIGHT)
            if not groups:
                logger.warning("%s has no grouped_light", node)
            return groups
        raise UnknownResourceError(f"{node} is not a room, zone or grouped_light")

    def _send(self, group_id: str, payload: dict):
        for group in self._groups(group_id):
            group.send_command(payload)

    def turn_on(self, group_id: str, duration_ms: int | None = None):
        self._send(group_id, encode_on(True, duration_ms))

    def turn_off(self, group_id: str, duration_ms: int | None = None):
        self._send(group_id, encode_on(False, duration_ms))

    def set_brightness(self, group_id: str, level: float, duration_ms: int = 500):
        if level != STOP_DIMMING:
            level = max(0, min(level, 100))
        self._send(group_id, encode_brightness(level, duration_ms))

    def set_color(self, group_id: str, xy: tuple[float, float] | str, duration_ms: int = 50):
        if not isinstance(xy, str):
            xy = tuple(max(0.0, min(c, 1.0)) for c in xy)
        self._send(group_id, encode_color(xy, duration_ms))

    def set_color_temp(self, group_id: str, mirek: float, duration_ms: int | None = None):
        mirek = max(50, min(mirek, 1000))
        self._send(group_id, encode_temperature(mirek, duration_ms))
