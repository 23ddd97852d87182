"""Pytest configuration and shared fixtures."""
from __future__ import annotations

import pytest

from laptop_tap.config import CollectorConfig, MqttConfig
from laptop_tap.topics import DeviceIdentity


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "linux: mark test as depending on Linux command output"
    )
    config.addinivalue_line(
        "markers", "tray: mark test as exercising the tray toggle"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as integration test"
    )


@pytest.fixture
def sensors_output():
    """Sample `sensors -f` output from a ThinkPad."""
    return """coretemp-isa-0000
Adapter: ISA adapter
Package id 0:  +122.0°F  (high = +212.0°F, crit = +212.0°F)
Core 0:        +118.4°F  (high = +212.0°F, crit = +212.0°F)
Core 1:        +120.2°F  (high = +212.0°F, crit = +212.0°F)
Core 2:        +116.6°F  (high = +212.0°F, crit = +212.0°F)
Core 3:        +122.0°F  (high = +212.0°F, crit = +212.0°F)

thinkpad-isa-0000
Adapter: ISA adapter
fan1:        2150 RPM
fan2:        1980 RPM
"""


@pytest.fixture
def lsmod_output():
    return """uvcvideo              114688  2
videobuf2_vmalloc      20480  1 uvcvideo
"""


@pytest.fixture
def free_output():
    return """               total        used        free      shared  buff/cache   available
Mem:        16131928     5237100     6372628      812344     4522200     9726904
Swap:        2097148           0     2097148
"""


@pytest.fixture
def df_output():
    return """     Used     Avail
182345672 291234568
"""


@pytest.fixture
def mic_output():
    return "/proc/asound/card0/pcm0c/sub0/status:state: RUNNING\n"


@pytest.fixture
def collector_config():
    """Create a collector config with the default probe commands."""
    return CollectorConfig()


@pytest.fixture
def mqtt_config():
    """Create an MQTT config pointing at a local broker."""
    return MqttConfig(host="broker.local", port=1883, connect_timeout_s=0.1)


@pytest.fixture
def identity():
    return DeviceIdentity(device_id="test_laptop", name="Test Laptop")
