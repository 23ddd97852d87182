from __future__ import annotations

import logging

from laptop_tap import parsers
from laptop_tap.config import CollectorConfig
from laptop_tap.errors import ToleratedExitError
from laptop_tap.runner import run_command

GREP_NO_MATCH = 1


class MetricsCollector:
    """Runs each probe command and hands its output to the matching parser.

    Command failures propagate unchanged; only the microphone probe's
    grep "no match" exit is recovered here.
    """

    def __init__(self, config: CollectorConfig) -> None:
        self.config = config
        self.logger = logging.getLogger(self.__class__.__name__)

    def collect_cpu(self) -> parsers.CpuReading:
        stdout, _ = run_command(self.config.sensors_command)
        reading = parsers.parse_sensors(stdout)
        self.logger.debug(
            "CPU %.1f, %s cores, %s fans",
            reading.temp,
            len(reading.core_temps),
            len(reading.fan_speeds),
        )
        return reading

    def collect_camera(self) -> parsers.CameraReading:
        stdout, _ = run_command(self.config.camera_command)
        return parsers.parse_lsmod(stdout)

    def collect_microphone(self) -> parsers.MicrophoneReading:
        try:
            stdout, _ = run_command(
                self.config.microphone_command, tolerated_exit_codes=(GREP_NO_MATCH,)
            )
        except ToleratedExitError:
            self.logger.debug("No running capture stream found.")
            return parsers.MicrophoneReading(active=False)
        return parsers.parse_microphone(stdout)

    def collect_memory(self) -> parsers.MemoryReading:
        stdout, _ = run_command(self.config.memory_command)
        return parsers.parse_free(stdout)

    def collect_disk(self) -> parsers.DiskReading:
        stdout, _ = run_command(self.config.disk_command)
        return parsers.parse_df(stdout)

    def collect_uptime(self) -> parsers.UptimeReading:
        stdout, _ = run_command(self.config.uptime_command)
        return parsers.parse_uptime(stdout)
