"""
Platform strategies for running a server in its own process group.

A dev server started through npm forks its own children (the bundler, file
watchers). Signalling only the npm PID leaves those running and holding the
port, so the server is started as a group leader and the whole group is
signalled on teardown.

    strategy = default_strategy()
    proc = subprocess.Popen(argv, **strategy.spawn_kwargs())
    strategy.kill(proc.pid)  # raises ProcessLookupError if already gone
"""
from __future__ import annotations

import os
import signal
import subprocess
import sys

# taskkill exit code when no process matches the PID
_TASKKILL_NOT_FOUND = 128


class PosixProcessGroup:
    """New session per server; SIGTERM to the whole group."""

    def spawn_kwargs(self) -> dict:
        return {"start_new_session": True}

    def kill(self, pid: int) -> None:
        # The server is a session leader, so its PGID equals its PID even
        # after the leader itself has exited.
        os.killpg(pid, signal.SIGTERM)

    def listening_pids(self, port: int) -> list[int]:
        result = subprocess.run(
            ["lsof", "-ti", f"TCP:{port}", "-sTCP:LISTEN"],
            capture_output=True,
            text=True,
            timeout=5,
        )
        return _parse_pids(result.stdout.split())


class WindowsProcessTree:
    """New process group per server; taskkill /T for the whole tree."""

    def spawn_kwargs(self) -> dict:
        return {"creationflags": subprocess.CREATE_NEW_PROCESS_GROUP}

    def kill(self, pid: int) -> None:
        result = subprocess.run(
            ["taskkill", "/F", "/T", "/PID", str(pid)],
            capture_output=True,
            text=True,
        )
        if result.returncode == _TASKKILL_NOT_FOUND:
            raise ProcessLookupError(pid, f"No process with PID {pid}")
        if result.returncode != 0:
            raise OSError(
                f"taskkill failed for PID {pid} (code {result.returncode}): "
                f"{result.stderr.strip()}"
            )

    def listening_pids(self, port: int) -> list[int]:
        result = subprocess.run(
            ["netstat", "-ano"],
            capture_output=True,
            text=True,
            timeout=5,
        )
        pids = []
        for line in result.stdout.splitlines():
            fields = line.split()
            # Proto  Local Address  Foreign Address  State  PID
            if len(fields) == 5 and fields[3] == "LISTENING" and fields[1].endswith(f":{port}"):
                pids.append(fields[4])
        return _parse_pids(pids)


def _parse_pids(tokens) -> list[int]:
    pids = []
    for token in tokens:
        try:
            pid = int(token.strip())
        except ValueError:
            continue
        if pid > 0 and pid not in pids:
            pids.append(pid)
    return pids


def default_strategy():
    if sys.platform == "win32":
        return WindowsProcessTree()
    return PosixProcessGroup()


def kill_pid(pid: int) -> None:
    """Forcefully kill a single stale process found on a port."""
    if sys.platform == "win32":
        WindowsProcessTree().kill(pid)
    else:
        os.kill(pid, signal.SIGKILL)
