from typing import Optional

from huegraph.errors import UnknownResourceError
from huegraph.resources.kinds import ResourceKind
from huegraph.resources.node import ResourceNode
from huegraph.resources.registry import ResourceRegistry
from huegraph.resources.types import Area, Device, GroupedLight, Light, Scene

# Reihenfolge in Tabellen/Baum
BASIC_ORDER = {
    ResourceKind.DEVICE: 1, ResourceKind.ROOM: 2, ResourceKind.ZONE: 3, ResourceKind.SCENE: 10,
}
FULL_ORDER = {
    ResourceKind.DEVICE: 1, ResourceKind.ROOM: 2, ResourceKind.ZONE: 3, ResourceKind.LIGHT: 4,
    ResourceKind.BUTTON: 5, ResourceKind.RELATIVE_ROTARY: 5.5, ResourceKind.TEMPERATURE: 6,
    ResourceKind.LIGHT_LEVEL: 7, ResourceKind.TAMPER: 7.5, ResourceKind.CONTACT: 7.6,
    ResourceKind.MOTION: 8, ResourceKind.GROUPED_LIGHT: 9, ResourceKind.SCENE: 10,
    ResourceKind.ZIGBEE_CONNECTIVITY: 10, ResourceKind.DEVICE_POWER: 11,
}


class HueRepository:
    """Read-only queries across the mirrored resource graph."""

    def __init__(self, registry: ResourceRegistry):
        self.registry = registry

    def _require(self, rid: str, *kinds: ResourceKind) -> ResourceNode:
        node = self.registry.get(rid)
        if node is None or (kinds and node.kind not in kinds):
            expected = "/".join(k.value for k in kinds) or "resource"
            raise UnknownResourceError(f"no {expected} with id {rid!r}")
        return node

    def resolve_group_room(self, group_id: str) -> Area:
        """Room or zone that owns a grouped_light."""
        group = self._require(group_id, ResourceKind.GROUPED_LIGHT)
        owner = group.resolve(group.owner)
        if not owner or owner.kind not in (ResourceKind.ROOM, ResourceKind.ZONE):
            raise UnknownResourceError(f"grouped_light {group_id!r} has no room or zone")
        return owner

    def get_group_lights(self, group_id: str) -> dict[str, Light]:
        # grouped_light -> owner (room/zone) -> children. Im Raum sind die Kinder
        # Devices (deren light-Services zählen), in einer Zone direkt die Lights.
        area = self.resolve_group_room(group_id)
        return self.get_area_lights(area.id)

    def get_area_lights(self, area_id: str) -> dict[str, Light]:
        area = self._require(area_id, ResourceKind.ROOM, ResourceKind.ZONE)
        lights: dict[str, Light] = {}
        for child in area.resolved_children():
            if child.kind == ResourceKind.LIGHT:
                lights[child.id] = child
            elif child.kind == ResourceKind.DEVICE:
                for light in child.find_services(ResourceKind.LIGHT):
                    lights[light.id] = light
        return lights

    def get_room_devices(self, room_id: str) -> list[Device]:
        room = self._require(room_id, ResourceKind.ROOM)
        return [c for c in room.resolved_children() if c.kind == ResourceKind.DEVICE]

    def find_grouped_light(self, hint: str) -> GroupedLight:
        """grouped_light by (partial) name, falling back to the name of its room or zone."""
        needle = hint.lower().strip()
        groups = self.registry.of_kind(ResourceKind.GROUPED_LIGHT)

        for group in groups.values():
            if needle in (group.name or "").lower():
                return group

        for kind in (ResourceKind.ROOM, ResourceKind.ZONE):
            for area in self.registry.of_kind(kind).values():
                if needle in (area.name or "").lower():
                    found = area.find_services(ResourceKind.GROUPED_LIGHT)
                    if found:
                        return found[0]

        raise UnknownResourceError(f"no grouped_light for {hint!r}")

    def get_scene_by_name(self, name: str, room_zone: Optional[str] = None) -> Optional[Scene]:
        for scene in self.registry.of_kind(ResourceKind.SCENE).values():
            if scene.name != name:
                continue
            if room_zone is None or scene.group.name == room_zone:
                return scene
        return None

    def _parent_map(self, nodes) -> dict[ResourceKind, dict[str, str]]:
        parents = {ResourceKind.ROOM: {}, ResourceKind.ZONE: {}}
        for node in nodes:
            if node.kind in parents:
                for ref in node.children:
                    parents[node.kind][ref.rid] = node.name
        return parents

    def device_table(self, full: bool = False) -> dict[str, dict]:
        """Per resource: kind, name, model, room/zone, property keys and button count."""
        order = FULL_ORDER if full else BASIC_ORDER
        nodes = [n for n in self.registry if n.kind in order]
        parents = self._parent_map(nodes)

        table = {}
        for node in nodes:
            entry = {
                "type": node.kind.value,
                "name": node.name,
                "model": node.resource_type,
                "room": parents[ResourceKind.ROOM].get(node.id),
                "zone": parents[ResourceKind.ZONE].get(node.id),
                "props": sorted(node.get_capabilities()),
                "buttons": sum(1 for ref in node.services or () if ref.rtype == ResourceKind.BUTTON.value),
            }
            if node.kind == ResourceKind.SCENE:
                entry["room"] = node.group.name
            table[node.id] = entry
        return table

    def _sorted(self, nodes) -> list:
        nodes = [n for n in nodes if n and n.kind in FULL_ORDER]
        return sorted(nodes, key=lambda n: (FULL_ORDER[n.kind], n.id))

    def render_tree(self) -> str:
        """Indented dump of every top-level resource with its children and services."""
        lines = ["------------------------"]
        for node in self._sorted(self.registry):
            if not node.owner:
                self._render(node, lines, 0)
        lines.append("------------------------")
        return "\n".join(lines)

    def _render(self, node: ResourceNode, lines: list[str], indent: int) -> None:
        pad = " " * indent
        lines.append(f"{pad}{node!r}")
        if node.owner:
            lines.append(f"{pad}  Parent:{node.owner.rid}")
        children = self._sorted(node.resolved_children())
        if children:
            lines.append(f"{pad}  Children:")
            for child in children:
                self._render(child, lines, indent + 4)
        services = self._sorted(node.resolved_services())
        if services:
            lines.append(f"{pad}  Services:")
            for service in services:
                self._render(service, lines, indent + 4)
        actions = node.raw.get("actions")
        if actions:
            lines.append(f"{pad}  Group:{node.resolve(node.raw.get('group'))!r}")
            lines.append(f"{pad}  Targets:")
            for action in actions:
                lines.append(f"{pad}    {node.resolve(action.get('target'))!r}")
