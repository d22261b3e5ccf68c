"""Tests for the process liveness probe."""

import errno
import os
import subprocess
import sys
from unittest.mock import patch

import pytest

from tasklock.errors import LivenessProbeError
from tasklock.liveness import process_alive


class TestProcessAlive:
    """Tests for process_alive."""

    def test_current_process_alive(self) -> None:
        """This process is alive."""
        assert process_alive(os.getpid()) is True

    def test_exited_process_dead(self) -> None:
        """A reaped child process is dead."""
        child = subprocess.Popen([sys.executable, "-c", "pass"])
        child.wait()

        assert process_alive(child.pid) is False

    def test_no_such_process(self) -> None:
        """ESRCH means dead."""
        with patch("tasklock.liveness.os.kill", side_effect=ProcessLookupError):
            assert process_alive(4242) is False

    def test_permission_denied_is_alive(self) -> None:
        """EPERM means the process exists under another user."""
        with patch("tasklock.liveness.os.kill", side_effect=PermissionError):
            assert process_alive(1) is True

    def test_other_os_error_raises(self) -> None:
        """Other probe failures raise LivenessProbeError."""
        error = OSError(errno.EINVAL, "Invalid argument")
        with patch("tasklock.liveness.os.kill", side_effect=error):
            with pytest.raises(LivenessProbeError) as exc_info:
                process_alive(4242)

        assert exc_info.value.pid == 4242

    @pytest.mark.parametrize("pid", [0, -1])
    def test_non_process_pid_raises(self, pid: int) -> None:
        """Pids that address process groups are rejected."""
        with pytest.raises(LivenessProbeError):
            process_alive(pid)

    def test_pid_out_of_range_raises(self) -> None:
        """Pids beyond the platform pid range fail the probe, not the caller."""
        with pytest.raises(LivenessProbeError) as exc_info:
            process_alive(2**40)

        assert exc_info.value.pid == 2**40
