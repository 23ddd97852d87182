from __future__ import annotations

import argparse
import configparser
from dataclasses import replace
import logging
import sys
import threading
from collections.abc import Callable, Sequence

from laptop_tap import topics
from laptop_tap.collector import MetricsCollector
from laptop_tap.config import MODES, AppConfig, default_config, load_config
from laptop_tap.errors import LaptopTapError
from laptop_tap.gate import ActiveGate
from laptop_tap.logging_utils import configure_logging, resolve_log_level
from laptop_tap.mqtt_client import MqttPublisher, build_discovery_config
from laptop_tap.schema import validate_discovery_config
from laptop_tap.tray import TrayToggle

logger = logging.getLogger("laptop_tap")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Laptop Tap MQTT telemetry publisher")
    parser.add_argument("-s", "--server", help="Address of MQTT server")
    parser.add_argument("-p", "--port", type=int, help="Port of MQTT server (default 1883)")
    parser.add_argument("-u", "--user", help="Username used to authenticate to the MQTT server")
    parser.add_argument("-w", "--password", help="Password used to authenticate to the MQTT server")
    parser.add_argument("-n", "--name", help="Device name (default: host name)")
    parser.add_argument(
        "--mode",
        choices=MODES,
        help="flat: one JSON topic per metric; discovery: Home Assistant topics",
    )
    parser.add_argument(
        "--tray",
        action="store_true",
        help="Show a tray icon with an Active/Inactive toggle",
    )
    parser.add_argument("--config", help="Path to CFG configuration file")
    parser.add_argument("--interval", type=int, help="Seconds between updates (default 10)")
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Enable debug logging (-v) or trace logging (-vv)",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Collect and publish a single update, then exit",
    )
    return parser


def build_config(args: argparse.Namespace, parser: argparse.ArgumentParser) -> AppConfig:
    try:
        config = load_config(args.config) if args.config else default_config()
    except (OSError, ValueError, configparser.Error) as exc:
        parser.error(f"invalid config file {args.config}: {exc}")

    mqtt = config.mqtt
    if args.server:
        mqtt = replace(mqtt, host=args.server)
    if args.port is not None:
        mqtt = replace(mqtt, port=args.port)
    if args.user:
        mqtt = replace(mqtt, username=args.user)
    if args.password:
        mqtt = replace(mqtt, password=args.password)
    if not mqtt.host:
        parser.error("the following arguments are required: -s/--server")
    if mqtt.username and not mqtt.password:
        parser.error("--user requires --password")
    if mqtt.password and not mqtt.username:
        parser.error("--password requires --user")

    publish = config.publish
    if args.mode:
        publish = replace(publish, mode=args.mode)
    if args.name:
        publish = replace(publish, device_name=args.name)
    if args.interval is not None:
        publish = replace(publish, interval_s=args.interval)

    return replace(config, mqtt=mqtt, publish=publish)


def publish_flat_cycle(
    collector: MetricsCollector, publisher: MqttPublisher, root: str
) -> None:
    probes = {
        "cpu": collector.collect_cpu,
        "camera": collector.collect_camera,
        "microphone": collector.collect_microphone,
        "memory": collector.collect_memory,
        "disk": collector.collect_disk,
    }
    for metric in topics.FLAT_METRICS:
        reading = probes[metric]()
        publisher.publish_json(topics.flat_topic(root, metric).state, reading.to_payload())


def publish_discovery_cycle(
    collector: MetricsCollector,
    publisher: MqttPublisher,
    identity: topics.DeviceIdentity,
    root: str,
) -> None:
    cpu = collector.collect_cpu()
    cpu_topics = topics.discovery_topics(root, identity, topics.CPU_TEMPERATURE)
    publisher.publish_discovery(topics.CPU_TEMPERATURE, cpu_topics, identity)
    publisher.publish_state(cpu_topics.state, cpu.temp)
    publisher.publish_json(cpu_topics.attributes, cpu.attributes())

    camera = collector.collect_camera()
    camera_topics = topics.discovery_topics(root, identity, topics.CAMERA)
    publisher.publish_discovery(topics.CAMERA, camera_topics, identity)
    publisher.publish_state(camera_topics.state, camera.active)

    microphone = collector.collect_microphone()
    mic_topics = topics.discovery_topics(root, identity, topics.MICROPHONE)
    publisher.publish_discovery(topics.MICROPHONE, mic_topics, identity)
    publisher.publish_state(mic_topics.state, microphone.active)

    uptime = collector.collect_uptime()
    uptime_topics = topics.discovery_topics(root, identity, topics.UPTIME)
    publisher.publish_discovery(topics.UPTIME, uptime_topics, identity)
    publisher.publish_state(uptime_topics.state, uptime.milliseconds)
    publisher.publish_json(uptime_topics.attributes, uptime.attributes)


def check_discovery_configs(identity: topics.DeviceIdentity, root: str) -> None:
    for sensor in topics.DISCOVERY_SENSORS:
        payload = build_discovery_config(
            sensor, topics.discovery_topics(root, identity, sensor), identity
        )
        schema_errors = validate_discovery_config(payload)
        if schema_errors:
            logger.warning(
                "Discovery config for %s failed validation with %s errors.",
                sensor.key,
                len(schema_errors),
            )
            logger.debug("Schema errors: %s", schema_errors)


def run_loop(
    cycle: Callable[[], None],
    gate: ActiveGate,
    stop: threading.Event,
    interval: float,
    once: bool = False,
) -> None:
    """Run ``cycle`` every ``interval`` seconds until stopped.

    Errors raised by ``cycle`` are not caught here; they end the loop.
    """
    while not stop.is_set():
        gate.wait()
        if stop.is_set():
            break
        logger.info("Updating...")
        cycle()
        logger.info("Done!")
        if once:
            break
        stop.wait(interval)


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    level = resolve_log_level(args.verbose, args.log_level)
    configure_logging(level)
    config = build_config(args, parser)

    identity = topics.DeviceIdentity.from_name(config.publish.device_name)
    collector = MetricsCollector(config.collector)
    gate = ActiveGate()
    stop = threading.Event()

    if config.publish.mode == "flat":
        root = config.mqtt.flat_topic
    else:
        root = config.mqtt.discovery_topic
        check_discovery_configs(identity, root)

    def request_exit() -> None:
        stop.set()
        gate.close()

    tray = None
    if args.tray:
        tray = TrayToggle(gate, request_exit, title=f"Laptop Tap ({identity.name})")
        tray.start()

    publisher = MqttPublisher(config.mqtt)
    try:
        logger.info("Connecting...")
        publisher.connect()
        logger.info("Done!")

        if config.publish.mode == "flat":
            def cycle() -> None:
                publish_flat_cycle(collector, publisher, root)
        else:
            def cycle() -> None:
                publish_discovery_cycle(collector, publisher, identity, root)

        interval = max(1, config.publish.interval_s)
        logger.info(
            "Laptop Tap started for %s (%s mode). Publishing every %s seconds.",
            identity.name,
            config.publish.mode,
            interval,
        )
        run_loop(cycle, gate, stop, interval, once=args.once)
    except LaptopTapError as exc:
        logger.error("Failed!")
        logger.error("%s", exc)
        return 1
    except KeyboardInterrupt:
        logger.info("Laptop Tap stopped.")
    finally:
        publisher.disconnect()
        if tray is not None:
            tray.stop()
    return 0


if __name__ == "__main__":
    sys.exit(main())
