from __future__ import annotations

from dataclasses import dataclass
import re
import socket


@dataclass(frozen=True)
class DeviceIdentity:
    device_id: str
    name: str

    @classmethod
    def from_name(cls, name: str | None = None) -> "DeviceIdentity":
        """Derive the identity from ``name`` or, when absent, the host name."""
        display = name or socket.gethostname()
        return cls(device_id=make_device_id(display), name=display)


def make_device_id(name: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "_", name.lower()).strip("_")
    return slug or "laptop"


@dataclass(frozen=True)
class SensorDefinition:
    component: str
    key: str
    label: str
    device_class: str | None = None
    unit: str | None = None
    icon: str | None = None
    has_attributes: bool = False


CPU_TEMPERATURE = SensorDefinition(
    component="sensor",
    key="cpu_temperature",
    label="CPU Temperature",
    device_class="temperature",
    unit="°F",
    has_attributes=True,
)
CAMERA = SensorDefinition(
    component="binary_sensor",
    key="camera",
    label="Camera",
    icon="mdi:webcam",
)
MICROPHONE = SensorDefinition(
    component="binary_sensor",
    key="microphone",
    label="Microphone",
    icon="mdi:microphone",
)
UPTIME = SensorDefinition(
    component="sensor",
    key="uptime",
    label="Uptime",
    device_class="duration",
    unit="ms",
    icon="mdi:timer-outline",
    has_attributes=True,
)

DISCOVERY_SENSORS = (CPU_TEMPERATURE, CAMERA, MICROPHONE, UPTIME)
FLAT_METRICS = ("cpu", "camera", "microphone", "memory", "disk")


@dataclass(frozen=True)
class TopicSet:
    state: str
    config: str | None = None
    attributes: str | None = None


def discovery_topics(
    root: str, identity: DeviceIdentity, sensor: SensorDefinition
) -> TopicSet:
    base = f"{root}/{sensor.component}/{identity.device_id}/{sensor.key}"
    return TopicSet(
        state=f"{base}/state",
        config=f"{base}/config",
        attributes=f"{base}/attributes" if sensor.has_attributes else None,
    )


def flat_topic(root: str, metric: str) -> TopicSet:
    return TopicSet(state=f"{root}/{metric}")
