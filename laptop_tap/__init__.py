"""Laptop Tap host telemetry publisher."""

from laptop_tap.collector import MetricsCollector
from laptop_tap.config import AppConfig, load_config
from laptop_tap.gate import ActiveGate
from laptop_tap.mqtt_client import MqttPublisher
from laptop_tap.schema import validate_discovery_config

__all__ = [
    "ActiveGate",
    "AppConfig",
    "MetricsCollector",
    "MqttPublisher",
    "load_config",
    "validate_discovery_config",
]
