"""Tests for command execution and the metrics collector."""
from __future__ import annotations

from unittest.mock import Mock, patch
import pytest

from laptop_tap.collector import MetricsCollector
from laptop_tap.errors import CommandError, ToleratedExitError
from laptop_tap.runner import run_command


@pytest.fixture
def collector(collector_config):
    return MetricsCollector(collector_config)


class TestRunCommand:
    @patch("subprocess.run")
    def test_returns_stdout_and_stderr(self, mock_run):
        mock_run.return_value = Mock(returncode=0, stdout="hello\n", stderr="")

        stdout, stderr = run_command("echo hello")

        assert stdout == "hello\n"
        assert stderr == ""
        args, kwargs = mock_run.call_args
        assert args[0] == "echo hello"
        assert kwargs["shell"] is True

    @patch("subprocess.run")
    def test_non_zero_exit_raises(self, mock_run):
        mock_run.return_value = Mock(returncode=2, stdout="", stderr="")

        with pytest.raises(CommandError) as excinfo:
            run_command("false")

        assert excinfo.value.returncode == 2
        assert not isinstance(excinfo.value, ToleratedExitError)

    @patch("subprocess.run")
    def test_stderr_on_success_raises(self, mock_run):
        mock_run.return_value = Mock(
            returncode=0, stdout="output", stderr="warning: something\n"
        )

        with pytest.raises(CommandError, match="warning: something"):
            run_command("sensors -f")

    @patch("subprocess.run")
    def test_tolerated_exit_code(self, mock_run):
        mock_run.return_value = Mock(returncode=1, stdout="", stderr="")

        with pytest.raises(ToleratedExitError):
            run_command("grep nothing", tolerated_exit_codes=(1,))

    @patch("subprocess.run")
    def test_tolerated_exit_code_with_stderr_is_fatal(self, mock_run):
        mock_run.return_value = Mock(returncode=1, stdout="", stderr="grep: oops\n")

        with pytest.raises(CommandError) as excinfo:
            run_command("grep nothing", tolerated_exit_codes=(1,))

        assert not isinstance(excinfo.value, ToleratedExitError)

    @patch("subprocess.run", side_effect=OSError("no shell"))
    def test_os_error_becomes_command_error(self, mock_run):
        with pytest.raises(CommandError, match="no shell"):
            run_command("anything")


@pytest.mark.linux
class TestMetricsCollector:
    @patch("subprocess.run")
    def test_collect_cpu(self, mock_run, collector, sensors_output):
        mock_run.return_value = Mock(returncode=0, stdout=sensors_output, stderr="")

        reading = collector.collect_cpu()

        assert mock_run.call_args[0][0] == "sensors -f"
        assert reading.temp == pytest.approx(122.0)
        assert len(reading.core_temps) == 4

    @patch("subprocess.run")
    def test_collect_camera(self, mock_run, collector, lsmod_output):
        mock_run.return_value = Mock(returncode=0, stdout=lsmod_output, stderr="")

        assert collector.collect_camera().active is True
        assert mock_run.call_args[0][0] == "lsmod | grep uvcvideo"

    @patch("subprocess.run")
    def test_collect_microphone_running(self, mock_run, collector, mic_output):
        mock_run.return_value = Mock(returncode=0, stdout=mic_output, stderr="")

        assert collector.collect_microphone().active is True

    @patch("subprocess.run")
    def test_collect_microphone_grep_no_match(self, mock_run, collector):
        mock_run.return_value = Mock(returncode=1, stdout="", stderr="")

        assert collector.collect_microphone().active is False

    @patch("subprocess.run")
    def test_collect_microphone_other_failure_propagates(self, mock_run, collector):
        mock_run.return_value = Mock(
            returncode=2, stdout="", stderr="grep: /proc/asound/card*: No such file\n"
        )

        with pytest.raises(CommandError):
            collector.collect_microphone()

    @patch("subprocess.run")
    def test_collect_memory(self, mock_run, collector, free_output):
        mock_run.return_value = Mock(returncode=0, stdout=free_output, stderr="")

        reading = collector.collect_memory()

        assert reading.total == 16131928

    @patch("subprocess.run")
    def test_collect_disk(self, mock_run, collector, df_output):
        mock_run.return_value = Mock(returncode=0, stdout=df_output, stderr="")

        reading = collector.collect_disk()

        assert reading.total == reading.used + reading.free
        assert mock_run.call_args[0][0] == "df --output=used,avail /"

    @patch("subprocess.run")
    def test_collect_uptime(self, mock_run, collector):
        mock_run.return_value = Mock(returncode=0, stdout="12345.67 8900.1\n", stderr="")

        assert collector.collect_uptime().milliseconds == 12345670

    @patch("subprocess.run")
    def test_camera_command_failure_is_fatal(self, mock_run, collector):
        mock_run.return_value = Mock(returncode=1, stdout="", stderr="")

        with pytest.raises(CommandError):
            collector.collect_camera()
