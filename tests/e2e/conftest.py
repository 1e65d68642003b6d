"""
E2E fixtures: the Time Keeper dev server and lifecycle stubs.

time_keeper_url starts the application's dev server once per session
(TIMEKEEPER_APP_DIR, TIMEKEEPER_DEV_COMMAND) unless TIMEKEEPER_BASE_URL
points at one that is already running, e.g. in CI.

stub_config builds a SuiteConfig that launches the small Flask stub in
tests/fixtures instead, so the lifecycle code can be exercised without
Node or the real application.
"""

from __future__ import annotations

import os
import shlex
import socket
import sys
from pathlib import Path

import pytest

from timekeeper_e2e.configurations.configuration_constants import (
    EnvVars, ServerDefaults)
from timekeeper_e2e.configurations.suite_config import SuiteConfig
from timekeeper_e2e.server import DevServer

REPO_ROOT = Path(__file__).resolve().parents[2]

STUB_COMMAND = f"{shlex.quote(sys.executable)} -m tests.fixtures.stub_time_keeper"


@pytest.fixture(scope="session")
def time_keeper_url(browser_type):
    """
    Start the Time Keeper dev server for the whole session.

    Scope: session (one server shared by every scenario)
    Yields: root URL of the server

    The port resolved during setup is exported as TEST_SERVER_PORT and the
    URL is rebuilt from it, the same way a scenario run by hand would.
    """
    config = SuiteConfig.from_env()
    if not config.spawns_server:
        yield config.base_url
        return

    dev_server = DevServer(config, browser_type=browser_type)
    dev_server.start()

    port = os.environ.get(EnvVars.TestServerPort, str(ServerDefaults.StartPort))
    yield f"http://{config.host}:{port}"

    dev_server.stop()


@pytest.fixture(scope="function")
def stub_config(monkeypatch, unused_port):
    """
    SuiteConfig that launches the Flask stub on a free port.

    TEST_SERVER_PORT is restored after the test so the stub never leaks
    its port into the scenarios.
    """
    monkeypatch.delenv(EnvVars.TestServerPort, raising=False)
    return (
        SuiteConfig()
        .hosting(start_port=unused_port, reclaim_port=False)
        .server(app_dir=str(REPO_ROOT), dev_command=STUB_COMMAND)
        .readiness(timeout_s=20.0, retry_interval_s=0.5)
    )


@pytest.fixture(scope="function")
def unused_port():
    """A port the OS just handed out, so nothing else is listening on it."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]
