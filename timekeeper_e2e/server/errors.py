from __future__ import annotations


class ServerLifecycleError(RuntimeError):
    """A development server could not be brought up or shut down."""

    phase = "lifecycle"

    def __init__(self, message: str):
        super().__init__(f"[{self.phase}] {message}")


class NoPortAvailable(ServerLifecycleError):
    phase = "port search"

    def __init__(self, start: int, attempts: int):
        self.start = start
        self.attempts = attempts
        super().__init__(
            f"No available ports found in {start}-{start + attempts - 1}"
        )


class ServerSpawnError(ServerLifecycleError):
    phase = "spawn"


class ServerNotReady(ServerLifecycleError):
    phase = "readiness"

    def __init__(self, url: str, message: str):
        self.url = url
        super().__init__(message)


class TerminationFailure(ServerLifecycleError):
    phase = "teardown"

    def __init__(self, pid: int, message: str):
        self.pid = pid
        super().__init__(message)
