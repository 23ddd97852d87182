from __future__ import annotations


class LaptopTapError(Exception):
    """Base class for every fatal error raised by laptop-tap."""


class BrokerConnectionError(LaptopTapError, ConnectionError):
    """The MQTT broker could not be reached or refused the connection."""


class CommandError(LaptopTapError):
    def __init__(self, command: str, returncode: int, stderr: str = "") -> None:
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        detail = stderr.strip() or f"exit code {returncode}"
        super().__init__(f"Command failed ({command}): {detail}")


class ToleratedExitError(CommandError):
    """A command exited with a code its caller expects, e.g. grep finding nothing."""


class PublishError(LaptopTapError):
    def __init__(self, topic: str, rc: int) -> None:
        self.topic = topic
        self.rc = rc
        super().__init__(f"Failed to publish to {topic}, error code: {rc}")
