from __future__ import annotations

import logging
import os

from timekeeper_e2e.configurations.configuration_constants import (
    EnvVars, ServerDefaults, Timing)
from timekeeper_e2e.utils.sentinels import NotProvided

logger = logging.getLogger(__name__)

_FALSY = {"0", "false", "no", "off", ""}


class SuiteConfig:
    def __init__(self):

        # Hosting
        self.host: str = ServerDefaults.Host
        self.start_port: int = ServerDefaults.StartPort
        self.port_probe_attempts: int = ServerDefaults.PortProbeAttempts
        self.reclaim_port: bool = True

        # An already running server; when set nothing is spawned
        self.base_url: str | None = None

        # Application under test
        self.app_dir: str = os.getcwd()
        self.dev_command: str = ServerDefaults.DevCommand

        # Readiness polling
        self.ready_timeout_s: float = Timing.ReadyTimeoutSeconds
        self.retry_interval_s: float = Timing.RetryIntervalSeconds

    def hosting(
        self,
        host: str = NotProvided,
        start_port: int = NotProvided,
        port_probe_attempts: int = NotProvided,
        reclaim_port: bool = NotProvided,
        base_url: str | None = NotProvided,
    ) -> SuiteConfig:
        if host is not NotProvided:
            self.host = host

        if start_port is not NotProvided:
            self.start_port = int(start_port)

        if port_probe_attempts is not NotProvided:
            self.port_probe_attempts = port_probe_attempts

        if reclaim_port is not NotProvided:
            self.reclaim_port = reclaim_port

        if base_url is not NotProvided:
            self.base_url = base_url.rstrip("/") if base_url else None

        return self

    def server(
        self,
        app_dir: str = NotProvided,
        dev_command: str = NotProvided,
    ) -> SuiteConfig:
        if app_dir is not NotProvided:
            self.app_dir = app_dir

        if dev_command is not NotProvided:
            self.dev_command = dev_command

        return self

    def readiness(
        self,
        timeout_s: float = NotProvided,
        retry_interval_s: float = NotProvided,
    ) -> SuiteConfig:
        if timeout_s is not NotProvided:
            if timeout_s <= 0:
                raise ValueError(f"Readiness timeout must be positive, got {timeout_s}")
            self.ready_timeout_s = timeout_s

        if retry_interval_s is not NotProvided:
            self.retry_interval_s = retry_interval_s

        return self

    @property
    def spawns_server(self) -> bool:
        return self.base_url is None

    @classmethod
    def from_env(cls, environ=None) -> SuiteConfig:
        """
        Build a config from TIMEKEEPER_* environment variables.

        Unset variables keep the defaults from configuration_constants.
        """
        environ = os.environ if environ is None else environ
        config = cls()

        if EnvVars.StartPort in environ:
            config.hosting(start_port=int(environ[EnvVars.StartPort]))

        if EnvVars.ReclaimPort in environ:
            config.hosting(
                reclaim_port=environ[EnvVars.ReclaimPort].strip().lower() not in _FALSY
            )

        if environ.get(EnvVars.BaseUrl):
            config.hosting(base_url=environ[EnvVars.BaseUrl])
            logger.info(f"Using running server at {config.base_url}")

        if environ.get(EnvVars.AppDir):
            config.server(app_dir=environ[EnvVars.AppDir])

        if environ.get(EnvVars.DevCommand):
            config.server(dev_command=environ[EnvVars.DevCommand])

        if EnvVars.ReadyTimeout in environ:
            config.readiness(timeout_s=float(environ[EnvVars.ReadyTimeout]))

        return config
