from enum import Enum
from typing import Optional


class ResourceKind(str, Enum):
    DEVICE = "device"
    LIGHT = "light"
    GROUPED_LIGHT = "grouped_light"
    ROOM = "room"
    ZONE = "zone"
    SCENE = "scene"
    BUTTON = "button"
    RELATIVE_ROTARY = "relative_rotary"
    TEMPERATURE = "temperature"
    MOTION = "motion"
    CAMERA_MOTION = "camera_motion"
    LIGHT_LEVEL = "light_level"
    CONTACT = "contact"
    TAMPER = "tamper"
    DEVICE_POWER = "device_power"
    ZIGBEE_CONNECTIVITY = "zigbee_connectivity"
    ZGP_CONNECTIVITY = "zgp_connectivity"
    ZIGBEE_DEVICE_DISCOVERY = "zigbee_device_discovery"
    DEVICE_SOFTWARE_UPDATE = "device_software_update"
    BRIDGE = "bridge"
    BRIDGE_HOME = "bridge_home"
    HOMEKIT = "homekit"
    MATTER = "matter"
    ENTERTAINMENT = "entertainment"
    ENTERTAINMENT_CONFIGURATION = "entertainment_configuration"
    BEHAVIOR_SCRIPT = "behavior_script"
    BEHAVIOR_INSTANCE = "behavior_instance"
    GEOLOCATION = "geolocation"
    GEOFENCE_CLIENT = "geofence_client"

    @classmethod
    def parse(cls, value) -> Optional["ResourceKind"]:
        """Kind for a raw `type` string, None when the bridge sent something new."""
        try:
            return cls(value)
        except ValueError:
            return None
