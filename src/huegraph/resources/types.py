"""Resource classes per kind and the factory that picks them.

Kinds without special behaviour use plain ResourceNode.
"""

import logging
from typing import TYPE_CHECKING, Any, Optional

from huegraph.commands.encode import (
    encode_brightness,
    encode_color,
    encode_on,
    encode_recall,
    encode_temperature,
    with_transition,
)
from huegraph.resources.capabilities import OPTIONAL_LIGHT_FEATURES, dig
from huegraph.resources.kinds import ResourceKind
from huegraph.resources.node import ResourceNode

if TYPE_CHECKING:
    from huegraph.resources.registry import ResourceRegistry

logger = logging.getLogger(__name__)

KIND_CLASSES: dict[ResourceKind, type[ResourceNode]] = {}


def resource_kind(*kinds: ResourceKind):
    """Decorator to register a node class for one or more kinds."""
    def decorator(cls):
        for kind in kinds:
            KIND_CLASSES[kind] = cls
            logger.debug("Registered resource kind: %s -> %s", kind.value, cls.__name__)
        return cls
    return decorator


def create_node(kind: ResourceKind, raw: dict, registry: "ResourceRegistry") -> ResourceNode:
    cls = KIND_CLASSES.get(kind, ResourceNode)
    return cls(kind, raw, registry)


@resource_kind(ResourceKind.DEVICE)
class Device(ResourceNode):
    def setup(self, raw: dict) -> None:
        super().setup(raw)
        self.archetype = self.metadata.archetype
        self.name = self.name or "device"

    def __repr__(self):
        return f"[device:{self.id},{self.name},{self.resource_type}]"


class _Lamp(ResourceNode):
    """Shared command set of light and grouped_light."""

    def setup(self, raw: dict) -> None:
        super().setup(raw)
        # Eigenschaften, die die Lampe nicht meldet, gibt es für sie auch nicht
        missing = {key for key in OPTIONAL_LIGHT_FEATURES if key not in self.raw}
        if missing:
            dropped = set().union(*(OPTIONAL_LIGHT_FEATURES[k] for k in missing))
            self.capabilities = self.capabilities.without(missing, dropped)

    @property
    def is_on(self) -> bool:
        return bool(dig(self.raw, ("on", "on"), False))

    def turn_on(self, transition: Optional[int] = None):
        self.send_command(encode_on(True, transition))

    def turn_off(self, transition: Optional[int] = None):
        self.send_command(encode_on(False, transition))

    def toggle(self, transition: Optional[int] = None):
        self.send_command(encode_on(not self.is_on, transition))

    def set_dim(self, value: float, transition: Optional[int] = None):
        self.send_command(encode_brightness(value, transition))

    def set_color(self, color: Any, transition: Optional[int] = None):
        self.send_command(encode_color(color, transition))

    def set_temperature(self, mirek: float, transition: Optional[int] = None):
        self.send_command(encode_temperature(mirek, transition))

    def raw_command(self, payload: dict, transition: Optional[int] = None):
        self.send_command(with_transition(payload, transition))


@resource_kind(ResourceKind.LIGHT)
class Light(_Lamp):
    @property
    def archetype(self) -> str:
        return self.metadata.archetype or self.resolve(self.owner).archetype or "unknown_archetype"

    def __repr__(self):
        return f"[light:{self.id},{self.display_name('LGHT')},{self.resource_type}]"


@resource_kind(ResourceKind.GROUPED_LIGHT)
class GroupedLight(_Lamp):
    def __repr__(self):
        return f"[grouped_light:{self.id},{self.display_name('GROUP')}]"


@resource_kind(ResourceKind.ROOM, ResourceKind.ZONE)
class Area(ResourceNode):
    """Room or zone; commands go to its grouped_light services."""

    def setup(self, raw: dict) -> None:
        super().setup(raw)
        self.resource_name = self.kind.value.capitalize()

    def target_command(self, payload: dict) -> None:
        for group in self.find_services(ResourceKind.GROUPED_LIGHT):
            group.send_command(payload)

    def __repr__(self):
        return f"[{self.kind.value}:{self.id},{self.name},{self.resource_type}]"


@resource_kind(ResourceKind.SCENE)
class Scene(ResourceNode):
    @property
    def group(self):
        """The room or zone this scene belongs to."""
        return self.resolve(self.raw.get("group"))

    @property
    def active(self) -> Optional[str]:
        return dig(self.raw, ("status", "active"))

    def recall(self, transition: Optional[int] = None):
        self.send_command(encode_recall(transition))

    def target_command(self, payload: dict) -> None:
        group = self.group
        if group and hasattr(group, "target_command"):
            group.target_command(payload)

    def handle_delta(self, delta: dict) -> None:
        if isinstance(delta.get("metadata"), dict):
            self.raw.setdefault("metadata", {}).update(delta["metadata"])
            self.name = self.raw["metadata"].get("name", self.name)
        cap = self.capabilities.properties["status"]
        changed, active = cap.changed(self.raw, delta)
        if changed:
            cap.set(self.raw, active)
            self.publish("status", active)

    def __repr__(self):
        return f"[scene:{self.id},{self.name}]"


@resource_kind(ResourceKind.ZIGBEE_CONNECTIVITY, ResourceKind.ZGP_CONNECTIVITY)
class Connectivity(ResourceNode):
    def connected(self) -> bool:
        return self.raw.get("status") == "connected"

    def __repr__(self):
        return f"[{self.kind.value}:{self.id},{self.display_name('CON')}]"


@resource_kind(ResourceKind.DEVICE_POWER)
class DevicePower(ResourceNode):
    def power(self) -> tuple[Optional[int], Optional[str]]:
        state = self.raw.get("power_state") or {}
        return state.get("battery_level"), state.get("battery_state")

    def __repr__(self):
        return f"[device_power:{self.id},{self.display_name()},value:{self.power()}]"


@resource_kind(ResourceKind.BUTTON)
class Button(ResourceNode):
    def button_state(self) -> tuple[Any, Optional[int]]:
        return self.capabilities.properties["button"].get(self.raw), dig(self.raw, ("metadata", "control_id"))

    def __repr__(self):
        return f"[button:{self.id},{self.display_name('BTN')},value:{self.button_state()}]"


@resource_kind(ResourceKind.RELATIVE_ROTARY)
class RelativeRotary(ResourceNode):
    def rotary_state(self) -> tuple[Any, Any]:
        event = dig(self.raw, ("relative_rotary", "last_event"))
        if not event:
            return "N/A", "N/A"
        return dig(event, ("rotation", "steps")), dig(event, ("rotation", "direction"))

    def __repr__(self):
        steps, direction = self.rotary_state()
        return f"[rotary:{self.id},{self.display_name('ROT')},value:{steps}/{direction}]"


class _Sensor(ResourceNode):
    value_key = ""

    def value(self) -> Any:
        return self.capabilities.properties[self.value_key].get(self.raw)

    def __repr__(self):
        return f"[{self.kind.value}:{self.id},{self.display_name()},value:{self.value()}]"


@resource_kind(ResourceKind.TEMPERATURE)
class Temperature(_Sensor):
    value_key = "temperature"

    def temperature(self) -> Optional[float]:
        return self.value()


@resource_kind(ResourceKind.MOTION, ResourceKind.CAMERA_MOTION)
class Motion(_Sensor):
    value_key = "motion"

    def motion(self) -> bool:
        return bool(self.value())


@resource_kind(ResourceKind.LIGHT_LEVEL)
class LightLevel(_Sensor):
    value_key = "light"

    def light_level(self) -> int:
        return self.value() or 0


@resource_kind(ResourceKind.CONTACT)
class Contact(_Sensor):
    value_key = "contact_report"

    def contact(self) -> str:
        return self.value()


@resource_kind(ResourceKind.TAMPER)
class Tamper(_Sensor):
    value_key = "tamper"
