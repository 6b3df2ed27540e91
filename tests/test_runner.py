"""
Tests for the host command runner.

These spawn the running Python interpreter as the child process so timeout
escalation can be exercised with short timeouts.
"""
import os
import subprocess
import sys
from unittest.mock import patch

import pytest

from pinout import runner
from pinout.exceptions import BinaryNotFoundError, CommandError, CommandTimeoutError
from pinout.runner import run_command

PYTHON = sys.executable

IGNORE_SIGTERM = (
    "import signal, time\n"
    "signal.signal(signal.SIGTERM, signal.SIG_IGN)\n"
    "print('ready', flush=True)\n"
    "time.sleep(60)\n"
)

EXIT_ON_SIGTERM = (
    "import signal, sys, time\n"
    "signal.signal(signal.SIGTERM, lambda *a: sys.exit(0))\n"
    "time.sleep(60)\n"
)


class TestRunCommand:

    def test_returns_stdout(self):
        output = run_command(PYTHON, ["-c", "print('GPIO 0: level=1')"])

        assert output == "GPIO 0: level=1\n"

    def test_merges_stderr_into_output(self):
        output = run_command(PYTHON, [
            "-c",
            "import sys; print('out', flush=True); print('err', file=sys.stderr, flush=True)"
        ])

        assert "out" in output
        assert "err" in output

    def test_nonzero_exit_is_not_an_error(self):
        # Only a failing wait is an error, the exit status is ignored
        output = run_command(PYTHON, ["-c", "import sys; print('partial'); sys.exit(3)"])

        assert output == "partial\n"

    def test_binary_not_found_does_not_spawn(self):
        with patch("pinout.runner.subprocess.Popen") as mock_popen:
            with pytest.raises(BinaryNotFoundError) as exc_info:
                run_command("definitely-not-a-real-binary-4242", ["get"])

        mock_popen.assert_not_called()
        assert exc_info.value.binary == "definitely-not-a-real-binary-4242"

    def test_resolves_binary_on_path(self):
        with patch("pinout.runner.shutil.which", return_value=PYTHON) as mock_which:
            output = run_command("raspi-gpio", ["-c", "print('ok')"])

        mock_which.assert_called_once_with("raspi-gpio")
        assert output == "ok\n"

    def test_start_failure_is_command_error(self):
        with patch("pinout.runner.subprocess.Popen", side_effect=PermissionError("denied")):
            with pytest.raises(CommandError):
                run_command(PYTHON, ["-c", "pass"])

    def test_timeout_exit_on_sigterm_is_still_timeout(self):
        with pytest.raises(CommandTimeoutError):
            run_command(PYTHON, ["-c", EXIT_ON_SIGTERM], timeout=0.5, kill_grace=5.0)

    def test_ignored_sigterm_is_killed(self):
        popen = subprocess.Popen
        spawned = []

        def tracking_popen(*args, **kwargs):
            process = popen(*args, **kwargs)
            spawned.append(process)
            return process

        with patch("pinout.runner.subprocess.Popen", side_effect=tracking_popen):
            with pytest.raises(CommandTimeoutError) as exc_info:
                run_command(PYTHON, ["-c", IGNORE_SIGTERM], timeout=1.0, kill_grace=0.5)

        assert exc_info.value.timeout == 1.0
        process = spawned[0]
        assert process.returncode is not None
        assert process.stdout.closed

    def test_terminate_failure_still_kills(self):
        with patch.object(subprocess.Popen, "terminate", side_effect=OSError("no such process")):
            with pytest.raises(CommandTimeoutError):
                run_command(PYTHON, ["-c", "import time; time.sleep(60)"],
                            timeout=0.3, kill_grace=0.3)

    def test_pipe_closed_after_success(self):
        popen = subprocess.Popen
        spawned = []

        def tracking_popen(*args, **kwargs):
            process = popen(*args, **kwargs)
            spawned.append(process)
            return process

        with patch("pinout.runner.subprocess.Popen", side_effect=tracking_popen):
            run_command(PYTHON, ["-c", "pass"])

        assert spawned[0].stdout.closed
        assert spawned[0].returncode == 0

    def test_defaults(self):
        assert runner.DEFAULT_TIMEOUT == 5.0
        assert runner.KILL_GRACE == 5.0


@pytest.mark.skipif(not os.path.exists("/bin/sh"), reason="needs /bin/sh")
def test_runs_real_shell_command():
    assert run_command("sh", ["-c", "echo BANK0"]) == "BANK0\n"
