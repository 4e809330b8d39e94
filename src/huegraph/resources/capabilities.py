"""Per-kind capability tables.

A table maps a property key to how it is read from the raw resource
payload (`get`), written back (`set`) and detected in an incoming delta
(`changed(old_raw, delta) -> (changed, new_value)`). It also lists the
command names a kind accepts.
"""

from dataclasses import dataclass, field as dc_field
from typing import Any, Callable, Mapping

from huegraph.resources.kinds import ResourceKind

_MISSING = object()


def dig(raw: Any, path: tuple[str, ...], default: Any = None) -> Any:
    for key in path:
        if not isinstance(raw, dict) or key not in raw:
            return default
        raw = raw[key]
    return raw


def plant(raw: dict, path: tuple[str, ...], value: Any) -> None:
    *parents, leaf = path
    for key in parents:
        if not isinstance(raw.get(key), dict):
            raw[key] = {}
        raw = raw[key]
    raw[leaf] = value


@dataclass(frozen=True)
class Capability:
    get: Callable[[dict], Any]
    set: Callable[[dict, Any], None]
    changed: Callable[[dict, dict], tuple[bool, Any]]
    field: str  # top-level key of the raw payload that carries this property


def nested(*path: str, default: Any = None) -> Capability:
    """Property stored at raw[path[0]][path[1]]..."""

    def changed(old: dict, delta: dict) -> tuple[bool, Any]:
        new = dig(delta, path, _MISSING)
        if new is _MISSING:
            return False, None
        return dig(old, path, default) != new, new

    return Capability(
        get=lambda r: dig(r, path, default),
        set=lambda r, v: plant(r, path, v),
        changed=changed,
        field=path[0],
    )


def reported(field: str, report: str, leaf: str, default: Any = None) -> Capability:
    """Sensor value in raw[field][report][leaf], older firmware uses raw[field][leaf]."""

    def read(r: dict, fallback: Any) -> Any:
        value = dig(r, (field, report, leaf), _MISSING)
        if value is _MISSING:
            value = dig(r, (field, leaf), fallback)
        return value

    def write(r: dict, v: Any) -> None:
        if isinstance(dig(r, (field, report)), dict) or dig(r, (field, leaf), _MISSING) is _MISSING:
            plant(r, (field, report, leaf), v)
        else:
            plant(r, (field, leaf), v)

    def changed(old: dict, delta: dict) -> tuple[bool, Any]:
        new = read(delta, _MISSING)
        if new is _MISSING:
            return False, None
        return read(old, default) != new, new

    return Capability(get=lambda r: read(r, default), set=write, changed=changed, field=field)


def _color_changed(old: dict, delta: dict) -> tuple[bool, Any]:
    nxy = dig(delta, ("color", "xy"))
    if not isinstance(nxy, dict):
        return False, None
    oxy = dig(old, ("color", "xy")) or {}
    return (oxy.get("x") != nxy.get("x") or oxy.get("y") != nxy.get("y")), nxy


def _mirek_changed(old: dict, delta: dict) -> tuple[bool, Any]:
    ct = delta.get("color_temperature") or {}
    mirek = ct.get("mirek")
    # mirek ist null wenn die Lampe gerade im xy-Modus ist
    if mirek is None or not ct.get("mirek_valid", True):
        return False, None
    return dig(old, ("color_temperature", "mirek")) != mirek, mirek


def _power_changed(old: dict, delta: dict) -> tuple[bool, Any]:
    new = delta.get("power_state")
    if not isinstance(new, dict):
        return False, None
    cur = old.get("power_state") or {}
    merged = dict(cur, **new)
    return (cur.get("battery_state") != merged.get("battery_state")
            or cur.get("battery_level") != merged.get("battery_level")), merged


def _button_changed(old: dict, delta: dict) -> tuple[bool, Any]:
    new_event = _button_get(delta)
    if new_event is None:
        return False, None
    return _button_get(old) != new_event, new_event


def _button_set(r: dict, v: Any) -> None:
    plant(r, ("button", "last_event"), v)
    if isinstance(dig(r, ("button", "button_report")), dict):
        plant(r, ("button", "button_report", "event"), v)


def _button_get(r: dict) -> Any:
    return dig(r, ("button", "button_report", "event"), dig(r, ("button", "last_event")))


def _rotary_changed(old: dict, delta: dict) -> tuple[bool, Any]:
    rotary = delta.get("relative_rotary") or {}
    event = rotary.get("last_event", dig(rotary, ("rotary_report",)))
    # jede Drehung ist ein Ereignis, auch mit identischen Werten
    return event is not None, event


def _tamper_get(r: dict) -> Any:
    reports = r.get("tamper_reports") or []
    return reports[0].get("state") if reports else None


def _tamper_set(r: dict, v: Any) -> None:
    reports = r.setdefault("tamper_reports", [])
    if reports:
        reports[0]["state"] = v
    else:
        reports.append({"state": v})


def _tamper_changed(old: dict, delta: dict) -> tuple[bool, Any]:
    if not delta.get("tamper_reports"):
        return False, None
    new = _tamper_get(delta)
    return _tamper_get(old) != new, new


@dataclass(frozen=True)
class CapabilityTable:
    properties: Mapping[str, Capability] = dc_field(default_factory=dict)
    commands: frozenset[str] = frozenset()

    def without(self, keys: set[str], commands: set[str]) -> "CapabilityTable":
        return CapabilityTable(
            properties={k: v for k, v in self.properties.items() if k not in keys},
            commands=self.commands - commands,
        )


EMPTY = CapabilityTable()

LIGHT = CapabilityTable(
    properties={
        "on": nested("on", "on"),
        "dimming": nested("dimming", "brightness"),
        "color_temperature": Capability(
            get=lambda r: dig(r, ("color_temperature", "mirek")),
            set=lambda r, v: plant(r, ("color_temperature", "mirek"), v),
            changed=_mirek_changed,
            field="color_temperature",
        ),
        "color": Capability(
            get=lambda r: dig(r, ("color", "xy")),
            set=lambda r, v: plant(r, ("color", "xy"), v),
            changed=_color_changed,
            field="color",
        ),
    },
    commands=frozenset({"turn_on", "turn_off", "toggle", "set_dim", "set_color", "set_temperature", "raw_command"}),
)

# Property -> commands that only make sense when the lamp reports the property
OPTIONAL_LIGHT_FEATURES = {
    "color": {"set_color"},
    "color_temperature": {"set_temperature"},
    "dimming": {"set_dim"},
}

CONNECTIVITY = CapabilityTable(properties={"status": nested("status")})

TABLES: dict[ResourceKind, CapabilityTable] = {
    ResourceKind.LIGHT: LIGHT,
    ResourceKind.GROUPED_LIGHT: LIGHT,
    ResourceKind.ROOM: CapabilityTable(commands=frozenset({"target_command"})),
    ResourceKind.ZONE: CapabilityTable(commands=frozenset({"target_command"})),
    ResourceKind.SCENE: CapabilityTable(
        properties={"status": nested("status", "active")},
        commands=frozenset({"recall", "target_command"}),
    ),
    ResourceKind.ZIGBEE_CONNECTIVITY: CONNECTIVITY,
    ResourceKind.ZGP_CONNECTIVITY: CONNECTIVITY,
    ResourceKind.DEVICE_POWER: CapabilityTable(properties={
        "power_state": Capability(
            get=lambda r: r.get("power_state"),
            set=lambda r, v: r.__setitem__("power_state", v),
            changed=_power_changed,
            field="power_state",
        ),
    }),
    ResourceKind.CONTACT: CapabilityTable(properties={
        "contact_report": nested("contact_report", "state", default="no_contact"),
    }),
    ResourceKind.TAMPER: CapabilityTable(properties={
        "tamper": Capability(get=_tamper_get, set=_tamper_set, changed=_tamper_changed, field="tamper_reports"),
    }),
    ResourceKind.BUTTON: CapabilityTable(properties={
        "button": Capability(get=_button_get, set=_button_set, changed=_button_changed, field="button"),
    }),
    ResourceKind.RELATIVE_ROTARY: CapabilityTable(properties={
        "relative_rotary": Capability(
            get=lambda r: dig(r, ("relative_rotary", "last_event")),
            set=lambda r, v: plant(r, ("relative_rotary", "last_event"), v),
            changed=_rotary_changed,
            field="relative_rotary",
        ),
    }),
    ResourceKind.TEMPERATURE: CapabilityTable(properties={
        "temperature": reported("temperature", "temperature_report", "temperature"),
    }),
    ResourceKind.MOTION: CapabilityTable(properties={
        "motion": reported("motion", "motion_report", "motion", default=False),
    }),
    ResourceKind.CAMERA_MOTION: CapabilityTable(properties={
        "motion": reported("motion", "motion_report", "motion", default=False),
    }),
    ResourceKind.LIGHT_LEVEL: CapabilityTable(properties={
        "light": reported("light", "light_level_report", "light_level", default=0),
    }),
}


def table_for(kind: ResourceKind) -> CapabilityTable:
    return TABLES.get(kind, EMPTY)
