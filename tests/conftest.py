"""Shared pytest fixtures: a small bridge graph, a fake clock and inline execution."""

import copy
from concurrent.futures import Executor, Future
from unittest.mock import MagicMock

import pytest

from huegraph.api.bridge_client import BridgeClient
from huegraph.api.http_client import HttpClient
from huegraph.config import BridgeSettings
from huegraph.context import BridgeContext
from huegraph.dispatch import Dispatcher
from huegraph.resources.registry import ResourceRegistry

DEVICE_ID = "8dddf049-0a73-44e2-8fdd-e3c2310c1bb1"
LIGHT_ID = "fb31c148-177b-4b52-a1a5-e02d46c1c3dd"
ZIGBEE_ID = "c024b020-395d-45a4-98ce-9df1409eda30"
ROOM_ID = "5f4f3ac1-53d6-4d79-8b1a-3f3b0c6d0f10"
ROOM_GROUP_ID = "39c94b33-7a3d-48e7-8cc1-dc603d401db2"
ZONE_ID = "8a2e7d0c-4f3e-4b0e-9b62-1c0a6f2b7e01"
ZONE_GROUP_ID = "02089710-e819-47ea-a324-9b15efb6092e"
SCENE_ID = "e2b7f3a4-0c6a-4d1e-bd8e-6a0b3f1b9d77"
SWITCH_ID = "a007e50b-0bdd-4e48-bee0-97636d57285a"
BUTTON_ID = "efc3283b-304f-4053-a01a-87d0c51462c3"
POWER_ID = "d6bc1f77-4603-4036-ae5f-28b16eefe4b5"


def ref(rid, rtype):
    return {"rid": rid, "rtype": rtype}


BRIDGE_RESOURCES = [
    {
        "id": DEVICE_ID,
        "type": "device",
        "id_v1": "/lights/5",
        "metadata": {"name": "Sofa lamp", "archetype": "sultan_bulb"},
        "product_data": {"model_id": "LCA001", "product_name": "Hue color lamp", "manufacturer_name": "Signify"},
        "services": [ref(LIGHT_ID, "light"), ref(ZIGBEE_ID, "zigbee_connectivity")],
    },
    {
        "id": LIGHT_ID,
        "type": "light",
        "id_v1": "/lights/5",
        "owner": ref(DEVICE_ID, "device"),
        "metadata": {"name": "Sofa lamp", "archetype": "sultan_bulb"},
        "on": {"on": False},
        "dimming": {"brightness": 58.66},
        "color_temperature": {"mirek": 366, "mirek_valid": True},
        "color": {"xy": {"x": 0.4573, "y": 0.41}},
    },
    {
        "id": ZIGBEE_ID,
        "type": "zigbee_connectivity",
        "owner": ref(DEVICE_ID, "device"),
        "status": "connected",
    },
    {
        "id": SWITCH_ID,
        "type": "device",
        "metadata": {"name": "Dimmer switch", "archetype": "unknown_archetype"},
        "product_data": {"model_id": "RWL021", "product_name": "Hue dimmer switch"},
        "services": [ref(BUTTON_ID, "button"), ref(POWER_ID, "device_power")],
    },
    {
        "id": BUTTON_ID,
        "type": "button",
        "owner": ref(SWITCH_ID, "device"),
        "metadata": {"control_id": 1},
        "button": {"last_event": "initial_press"},
    },
    {
        "id": POWER_ID,
        "type": "device_power",
        "owner": ref(SWITCH_ID, "device"),
        "power_state": {"battery_state": "normal", "battery_level": 76},
    },
    {
        "id": ROOM_ID,
        "type": "room",
        "metadata": {"name": "Living room", "archetype": "living_room"},
        "children": [ref(DEVICE_ID, "device"), ref(SWITCH_ID, "device")],
        "services": [ref(ROOM_GROUP_ID, "grouped_light")],
    },
    {
        "id": ROOM_GROUP_ID,
        "type": "grouped_light",
        "id_v1": "/groups/5",
        "owner": ref(ROOM_ID, "room"),
        "on": {"on": True},
        "dimming": {"brightness": 40.0},
    },
    {
        "id": ZONE_ID,
        "type": "zone",
        "metadata": {"name": "Reading corner", "archetype": "reading"},
        "children": [ref(LIGHT_ID, "light")],
        "services": [ref(ZONE_GROUP_ID, "grouped_light")],
    },
    {
        "id": ZONE_GROUP_ID,
        "type": "grouped_light",
        "owner": ref(ZONE_ID, "zone"),
        "on": {"on": False},
    },
    {
        "id": SCENE_ID,
        "type": "scene",
        "metadata": {"name": "Relax"},
        "group": ref(ROOM_ID, "room"),
        "actions": [{"target": ref(LIGHT_ID, "light"), "action": {"on": {"on": True}}}],
        "status": {"active": "inactive"},
    },
]


@pytest.fixture
def bridge_resources():
    return copy.deepcopy(BRIDGE_RESOURCES)


@pytest.fixture
def sent():
    """Commands the registry handed to the transport, as (path, payload)."""
    return []


@pytest.fixture
def registry(sent):
    return ResourceRegistry(sender=lambda path, payload: sent.append((path, payload)))


@pytest.fixture
def loaded_registry(registry, bridge_resources):
    registry.resync(bridge_resources)
    return registry


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class InlineExecutor(Executor):
    """Runs submitted work immediately in the calling thread."""

    def submit(self, fn, *args, **kwargs):
        future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as e:
            future.set_exception(e)
        return future


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def dispatcher(clock):
    return Dispatcher(clock=clock)


@pytest.fixture
def http():
    return MagicMock(spec=HttpClient)


@pytest.fixture
def settings():
    return BridgeSettings(bridge_ip="192.168.1.100", app_key="test-app-key")


@pytest.fixture
def bridge_client(http, dispatcher):
    return BridgeClient(http, dispatcher, executor=InlineExecutor())


@pytest.fixture
def context(settings, dispatcher, bridge_client):
    return BridgeContext(settings=settings, dispatcher=dispatcher, client=bridge_client)
