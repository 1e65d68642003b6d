"""Development server lifecycle for the Time Keeper E2E suite."""

from __future__ import annotations

from .errors import (NoPortAvailable, ServerLifecycleError, ServerNotReady,
                     ServerSpawnError, TerminationFailure)
from .lifecycle import (DevServer, ServerProcess, ServerState, acquire_port,
                        await_ready, launch_server, reclaim_port,
                        terminate_server)

__all__ = [
    "DevServer",
    "NoPortAvailable",
    "ServerLifecycleError",
    "ServerNotReady",
    "ServerProcess",
    "ServerSpawnError",
    "ServerState",
    "TerminationFailure",
    "acquire_port",
    "await_ready",
    "launch_server",
    "reclaim_port",
    "terminate_server",
]
