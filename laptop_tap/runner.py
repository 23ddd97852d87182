from __future__ import annotations

import logging
import subprocess
from collections.abc import Iterable

from laptop_tap.errors import CommandError, ToleratedExitError
from laptop_tap.logging_utils import TRACE_LEVEL

logger = logging.getLogger(__name__)


def run_command(
    command: str, tolerated_exit_codes: Iterable[int] = ()
) -> tuple[str, str]:
    """Run a shell command and return its ``(stdout, stderr)``.

    Every probe is expected to be silent on stderr, so any stderr output is
    treated as a failure even when the exit code is zero.

    Raises:
        ToleratedExitError: exit code is in ``tolerated_exit_codes`` and
            nothing was written to stderr.
        CommandError: any other non-zero exit, non-empty stderr, or the
            shell could not be started.
    """
    logger.debug("Running command: %s", command)
    try:
        result = subprocess.run(
            command,
            shell=True,
            check=False,
            text=True,
            capture_output=True,
        )
    except OSError as exc:
        raise CommandError(command, -1, str(exc)) from exc

    stdout = result.stdout or ""
    stderr = result.stderr or ""
    if stdout:
        logger.log(TRACE_LEVEL, "stdout: %s", stdout.strip())
    if stderr:
        logger.log(TRACE_LEVEL, "stderr: %s", stderr.strip())

    if result.returncode != 0:
        if result.returncode in tuple(tolerated_exit_codes) and not stderr:
            logger.debug(
                "Command exited with tolerated code %s: %s",
                result.returncode,
                command,
            )
            raise ToleratedExitError(command, result.returncode, stderr)
        raise CommandError(command, result.returncode, stderr)
    if stderr:
        raise CommandError(command, result.returncode, stderr)
    return stdout, stderr
