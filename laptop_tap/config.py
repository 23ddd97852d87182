from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import configparser

DEFAULT_SENSORS_COMMAND = "sensors -f"
DEFAULT_CAMERA_COMMAND = "lsmod | grep uvcvideo"
DEFAULT_MICROPHONE_COMMAND = "grep RUNNING /proc/asound/card*/pcm*c/sub*/status"
DEFAULT_MEMORY_COMMAND = "free"
DEFAULT_DISK_COMMAND = "df --output=used,avail /"
DEFAULT_UPTIME_COMMAND = "cat /proc/uptime"


@dataclass(frozen=True)
class MqttConfig:
    host: str | None
    port: int = 1883
    username: str | None = None
    password: str | None = None
    client_id: str | None = None
    discovery_topic: str = "homeassistant"
    flat_topic: str = "laptop"
    qos: int = 1
    keepalive: int = 60
    connect_timeout_s: float = 10.0


@dataclass(frozen=True)
class PublishConfig:
    interval_s: int = 10
    mode: str = "discovery"
    device_name: str | None = None


@dataclass(frozen=True)
class CollectorConfig:
    sensors_command: str = DEFAULT_SENSORS_COMMAND
    camera_command: str = DEFAULT_CAMERA_COMMAND
    microphone_command: str = DEFAULT_MICROPHONE_COMMAND
    memory_command: str = DEFAULT_MEMORY_COMMAND
    disk_command: str = DEFAULT_DISK_COMMAND
    uptime_command: str = DEFAULT_UPTIME_COMMAND


@dataclass(frozen=True)
class AppConfig:
    mqtt: MqttConfig
    publish: PublishConfig
    collector: CollectorConfig


MODES = ("flat", "discovery")


def _get_optional(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value if value else None


def default_config() -> AppConfig:
    return AppConfig(
        mqtt=MqttConfig(host=None),
        publish=PublishConfig(),
        collector=CollectorConfig(),
    )


def load_config(path: str | Path) -> AppConfig:
    parser = configparser.ConfigParser(interpolation=None)
    read_files = parser.read(path)
    if not read_files:
        raise FileNotFoundError(f"Config file not found: {path}")

    mqtt = MqttConfig(
        host=_get_optional(parser.get("mqtt", "host", fallback=None)),
        port=parser.getint("mqtt", "port", fallback=1883),
        username=_get_optional(parser.get("mqtt", "username", fallback=None)),
        password=_get_optional(parser.get("mqtt", "password", fallback=None)),
        client_id=_get_optional(parser.get("mqtt", "client_id", fallback=None)),
        discovery_topic=parser.get("mqtt", "discovery_topic", fallback="homeassistant"),
        flat_topic=parser.get("mqtt", "flat_topic", fallback="laptop"),
        qos=parser.getint("mqtt", "qos", fallback=1),
        keepalive=parser.getint("mqtt", "keepalive", fallback=60),
        connect_timeout_s=parser.getfloat("mqtt", "connect_timeout_s", fallback=10.0),
    )

    mode = parser.get("publish", "mode", fallback="discovery").strip().lower()
    if mode not in MODES:
        raise ValueError(f"Unknown publish mode {mode!r}, expected one of {MODES}")
    publish = PublishConfig(
        interval_s=parser.getint("publish", "interval_s", fallback=10),
        mode=mode,
        device_name=_get_optional(parser.get("publish", "device_name", fallback=None)),
    )

    # Probe commands are shell strings; pipes and globs are allowed.
    collector = CollectorConfig(
        sensors_command=parser.get("collector", "sensors_command", fallback=DEFAULT_SENSORS_COMMAND),
        camera_command=parser.get("collector", "camera_command", fallback=DEFAULT_CAMERA_COMMAND),
        microphone_command=parser.get("collector", "microphone_command", fallback=DEFAULT_MICROPHONE_COMMAND),
        memory_command=parser.get("collector", "memory_command", fallback=DEFAULT_MEMORY_COMMAND),
        disk_command=parser.get("collector", "disk_command", fallback=DEFAULT_DISK_COMMAND),
        uptime_command=parser.get("collector", "uptime_command", fallback=DEFAULT_UPTIME_COMMAND),
    )

    return AppConfig(mqtt=mqtt, publish=publish, collector=collector)
