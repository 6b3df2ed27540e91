"""
Host command runner with timeout and kill escalation.
"""
import logging
import shutil
import subprocess
from typing import List

from .exceptions import BinaryNotFoundError, CommandError, CommandTimeoutError

logger = logging.getLogger(__name__)

# Seconds the command may run before it is sent SIGTERM
DEFAULT_TIMEOUT = 5.0
# Seconds allowed for a clean shutdown after SIGTERM before SIGKILL
KILL_GRACE = 5.0


def run_command(binary: str, args: List[str],
                timeout: float = DEFAULT_TIMEOUT,
                kill_grace: float = KILL_GRACE) -> str:
    """
    Run a host binary and return its combined stdout/stderr.

    The exit code of the command is not checked: a command that exits on its
    own before the timeout always yields its output. Once the timeout has
    fired and SIGTERM was sent, the result is a timeout whatever the command
    exits with.

    Args:
        binary: Name of the binary, resolved on PATH
        args: Command line arguments
        timeout: Seconds before the command is terminated
        kill_grace: Seconds between SIGTERM and SIGKILL

    Returns:
        Combined stdout and stderr text

    Raises:
        BinaryNotFoundError: If the binary is not on PATH
        CommandTimeoutError: If the command had to be terminated
        CommandError: If the command could not be started or waited for
    """
    path = shutil.which(binary)
    if path is None:
        raise BinaryNotFoundError(binary)

    cmd = [path, *args]
    try:
        process = subprocess.Popen(
            cmd,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            errors="replace"
        )
    except OSError as e:
        raise CommandError(f"Failed to start {binary}: {e}") from e

    try:
        try:
            output, _ = process.communicate(timeout=timeout)
        except subprocess.TimeoutExpired:
            _terminate(process, kill_grace)
            raise CommandTimeoutError(cmd, timeout)
        except OSError as e:
            raise CommandError(f"Failed waiting for {binary}: {e}") from e

        if process.returncode != 0:
            logger.debug(f"{binary} exited with status {process.returncode}")
        return output

    finally:
        # Close the pipe and reap the child on every path
        if process.stdout:
            process.stdout.close()
        if process.poll() is None:
            try:
                process.kill()
            except OSError as e:
                logger.error(f"Error killing process: {e}")
            process.wait()


def _terminate(process: subprocess.Popen, kill_grace: float) -> None:
    """Send SIGTERM, then SIGKILL if the process outlives the grace period."""
    try:
        process.terminate()
    except OSError as e:
        logger.error(f"Error terminating process: {e}")

    try:
        process.communicate(timeout=kill_grace)
        return
    except subprocess.TimeoutExpired:
        pass

    try:
        process.kill()
    except OSError as e:
        logger.error(f"Error killing process: {e}")
    process.communicate()
