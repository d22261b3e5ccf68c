"""Process liveness probe for lock owners.

Sends signal 0 to the recorded owner pid. Only meaningful when every
worker shares one host's pid space: a reused pid reads as alive, and a
pid from another machine says nothing about the real owner.
"""

from __future__ import annotations

import os

from tasklock.errors import LivenessProbeError


def process_alive(pid: int) -> bool:
    """Check whether a process with ``pid`` exists on this host.

    Raises:
        LivenessProbeError: If the probe fails for any reason other than
            the process not existing
    """
    if pid <= 0:
        # 0 and negatives address process groups, not a single process
        raise LivenessProbeError(pid, "not a single-process pid")

    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        # Exists, owned by another user
        return True
    except OSError as e:
        raise LivenessProbeError(pid, str(e)) from e
    except (OverflowError, ValueError) as e:
        # Pid outside the platform pid_t range
        raise LivenessProbeError(pid, str(e)) from e
    return True
