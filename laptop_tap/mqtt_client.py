from __future__ import annotations

import json
import logging
import threading
from typing import Any

import paho.mqtt.client as mqtt

from laptop_tap.config import MqttConfig
from laptop_tap.errors import BrokerConnectionError, PublishError
from laptop_tap.topics import DeviceIdentity, SensorDefinition, TopicSet

SW_VERSION = "laptop-tap 1.0"


def serialize_state(value: Any) -> str:
    """Booleans become ON/OFF, containers JSON, everything else ``str()``."""
    if isinstance(value, bool):
        return "ON" if value else "OFF"
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)


def build_discovery_config(
    sensor: SensorDefinition, topics: TopicSet, identity: DeviceIdentity
) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "name": f"{identity.name} {sensor.label}",
        "state_topic": topics.state,
        "unique_id": f"{identity.device_id}_{sensor.key}",
        "device": {
            "identifiers": [identity.device_id],
            "name": identity.name,
            "sw_version": SW_VERSION,
        },
    }
    if sensor.device_class:
        payload["device_class"] = sensor.device_class
    if topics.attributes:
        payload["json_attributes_topic"] = topics.attributes
    if sensor.unit:
        payload["unit_of_measurement"] = sensor.unit
    if sensor.icon:
        payload["icon"] = sensor.icon
    return payload


class MqttPublisher:
    def __init__(self, config: MqttConfig) -> None:
        self.config = config
        self.client = mqtt.Client(
            mqtt.CallbackAPIVersion.VERSION2,
            client_id=config.client_id or "",
            protocol=mqtt.MQTTv311,
        )
        self.logger = logging.getLogger(self.__class__.__name__)
        self._connected = threading.Event()
        self._connack = threading.Event()
        self._connect_rc: Any = None

        self.client.on_connect = self._on_connect
        self.client.on_disconnect = self._on_disconnect

        if config.username:
            self.client.username_pw_set(config.username, config.password)

    @property
    def connected(self) -> bool:
        return self._connected.is_set()

    def _on_connect(
        self,
        client: mqtt.Client,
        userdata: Any,
        flags: Any,
        reason_code: Any,
        properties: Any = None,
    ) -> None:
        self._connect_rc = reason_code
        self._connack.set()
        if not reason_code.is_failure:
            self.logger.info(
                "Connected to MQTT broker %s:%s", self.config.host, self.config.port
            )
            self._connected.set()
        else:
            self.logger.error(
                "Failed to connect to MQTT broker, return code: %s", reason_code
            )

    def _on_disconnect(
        self,
        client: mqtt.Client,
        userdata: Any,
        flags: Any,
        reason_code: Any,
        properties: Any = None,
    ) -> None:
        self._connected.clear()
        if not reason_code.is_failure:
            self.logger.info("Disconnected from MQTT broker (clean)")
        else:
            self.logger.warning(
                "Unexpectedly disconnected from MQTT broker, return code: %s",
                reason_code,
            )

    def connect(self) -> None:
        """Connect and block until the broker acknowledges the session."""
        self.logger.info(
            "Connecting to MQTT broker %s:%s", self.config.host, self.config.port
        )
        try:
            self.client.connect(
                self.config.host,
                self.config.port,
                keepalive=self.config.keepalive,
            )
        except (OSError, ValueError) as exc:
            raise BrokerConnectionError(
                f"Cannot connect to {self.config.host}:{self.config.port}: {exc}"
            ) from exc
        self._connack.clear()
        self.client.loop_start()
        self._connack.wait(self.config.connect_timeout_s)
        if not self._connected.is_set():
            self.client.loop_stop()
            if self._connect_rc is not None:
                reason = f"broker refused connection ({self._connect_rc})"
            else:
                reason = f"no CONNACK within {self.config.connect_timeout_s}s"
            raise BrokerConnectionError(
                f"Cannot connect to {self.config.host}:{self.config.port}: {reason}"
            )

    def disconnect(self) -> None:
        """Stop the network loop, sending DISCONNECT first if still connected."""
        if self._connected.is_set():
            self.client.disconnect()
            self.logger.info("Disconnected from MQTT broker")
        self.client.loop_stop()

    def publish(self, topic: str, payload: str, retain: bool = False) -> None:
        self.logger.debug("Publishing to %s: %s", topic, payload)
        result = self.client.publish(
            topic,
            payload=payload,
            qos=self.config.qos,
            retain=retain,
        )
        if result.rc != mqtt.MQTT_ERR_SUCCESS:
            raise PublishError(topic, result.rc)

    def publish_state(self, topic: str, value: Any) -> None:
        self.publish(topic, serialize_state(value))

    def publish_json(self, topic: str, payload: dict[str, Any], retain: bool = False) -> None:
        self.publish(topic, json.dumps(payload), retain=retain)

    def publish_discovery(
        self, sensor: SensorDefinition, topics: TopicSet, identity: DeviceIdentity
    ) -> dict[str, Any]:
        if topics.config is None:
            raise ValueError(f"Sensor {sensor.key} has no config topic")
        payload = build_discovery_config(sensor, topics, identity)
        self.logger.debug("Publishing Home Assistant discovery to %s", topics.config)
        self.publish_json(topics.config, payload, retain=True)
        return payload
