"""
Development server lifecycle for the E2E run.

Provides:
- acquire_port: first bindable port in a small window
- reclaim_port: kill stale listeners left on a port by an earlier run
- launch_server: start the app's dev command in its own process group
- await_ready: poll the root URL with a real browser until it loads
- terminate_server: signal the whole process group, at most once
- DevServer: ties the above together and owns the ServerProcess

Typical use from a pytest session fixture:

    dev_server = DevServer(SuiteConfig.from_env(), browser_type=browser_type)
    server = dev_server.start()
    yield server
    dev_server.stop()

DevServer also registers atexit and SIGINT hooks, so the server is stopped
even when the run is interrupted before fixture teardown gets a chance.
"""
from __future__ import annotations

import atexit
import dataclasses
import errno
import os
import shlex
import shutil
import signal
import socket
import subprocess
import threading
import time

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright

from timekeeper_e2e.configurations.configuration_constants import (
    EnvVars, ServerDefaults, Timing)
from timekeeper_e2e.configurations.suite_config import SuiteConfig
from timekeeper_e2e.logger import setup_logger
from timekeeper_e2e.server import process_group
from timekeeper_e2e.server.errors import (NoPortAvailable, ServerNotReady,
                                          ServerSpawnError, TerminationFailure)
from timekeeper_e2e.utils.retry import RetryTimeout, retry

logger = setup_logger(__name__)


class ServerState:
    Starting = "starting"
    Ready = "ready"
    Stopped = "stopped"


@dataclasses.dataclass
class ServerProcess:
    """
    A running development server owned by a DevServer.

    Only terminate_server() may stop it; the lock and state guarantee a
    single signal no matter how many teardown paths fire.
    """

    process: subprocess.Popen
    port: int
    url: str
    state: str = ServerState.Starting
    _lock: threading.RLock = dataclasses.field(
        default_factory=threading.RLock, repr=False, compare=False
    )

    @property
    def pid(self) -> int:
        return self.process.pid

    def is_alive(self) -> bool:
        return self.process.poll() is None


# ---------------------------------------------------------------------------
# Port discovery
# ---------------------------------------------------------------------------


def _is_port_free(port, host=""):
    """
    Check if a TCP port can be listened on.

    Uses SO_REUSEADDR so sockets in TIME_WAIT from a previous run do not
    count as occupied. Binding and listening is the authoritative check.
    A dev server may listen only on ::1, which an IPv4 bind does not see,
    so the IPv6 wildcard is tried too when the host has IPv6.
    """
    if ":" not in host:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            try:
                s.bind((host, port))
                s.listen(1)
            except OSError:
                return False

    if not socket.has_ipv6 or (host and ":" not in host):
        return True

    try:
        s6 = socket.socket(socket.AF_INET6, socket.SOCK_STREAM)
    except OSError:
        # Kernel built without IPv6
        return True
    with s6:
        s6.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            s6.bind((host or "::", port))
            s6.listen(1)
        except OSError as e:
            # EADDRNOTAVAIL and friends mean no usable IPv6, not a listener
            return e.errno != errno.EADDRINUSE
    return True


def acquire_port(start, attempts=ServerDefaults.PortProbeAttempts, host=""):
    """
    Return the lowest free port in [start, start + attempts).

    Raises:
        NoPortAvailable: Every port in the window is taken.
    """
    for port in range(start, start + attempts):
        if _is_port_free(port, host):
            logger.debug(f"Port {port} is available")
            return port
        logger.debug(f"Port {port} is in use")

    raise NoPortAvailable(start, attempts)


def reclaim_port(port, strategy=None):
    """
    Kill processes still listening on a port from an earlier run.

    Best effort: a missing lsof/netstat or a PID that vanished in the
    meantime is ignored. acquire_port() moves on to the next port if this
    did not free it.
    """
    if _is_port_free(port):
        return

    strategy = strategy or process_group.default_strategy()
    try:
        pids = strategy.listening_pids(port)
    except (FileNotFoundError, subprocess.TimeoutExpired) as e:
        logger.debug(f"Could not list listeners on port {port}: {e}")
        return

    for pid in pids:
        try:
            process_group.kill_pid(pid)
            logger.info(f"Killed stale process {pid} on port {port}")
        except OSError as e:
            logger.debug(f"Could not kill stale process {pid}: {e}")

    if pids:
        time.sleep(1)


# ---------------------------------------------------------------------------
# Spawn / readiness / teardown
# ---------------------------------------------------------------------------


def launch_server(cwd, command=ServerDefaults.DevCommand, port=None, env=None, strategy=None):
    """
    Start the application's dev command as a process group leader.

    stdout and stderr are inherited so the server's output shows up in the
    test run. The port, when given, is passed through the PORT variable.

    Raises:
        ServerSpawnError: The command could not be executed.
    """
    strategy = strategy or process_group.default_strategy()

    argv = shlex.split(command, posix=os.name != "nt")
    if not argv:
        raise ServerSpawnError("Empty dev server command")

    # Resolves npm to npm.cmd on Windows without going through a shell
    executable = shutil.which(argv[0])
    if executable:
        argv[0] = executable

    child_env = dict(os.environ if env is None else env)
    if port is not None:
        child_env["PORT"] = str(port)

    try:
        process = subprocess.Popen(argv, cwd=cwd, env=child_env, **strategy.spawn_kwargs())
    except OSError as e:
        raise ServerSpawnError(f"Could not run {command!r} in {cwd}: {e}") from e

    logger.info(f"Started {command!r} (pid {process.pid}) in {cwd}")
    return process


def _raise_if_exited(process, url):
    if process is not None and process.poll() is not None:
        raise ServerNotReady(
            url,
            f"Dev server exited unexpectedly (code {process.returncode}) "
            f"before {url} became reachable.",
        )


def await_ready(
    url,
    timeout=Timing.ReadyTimeoutSeconds,
    interval=Timing.RetryIntervalSeconds,
    browser_type=None,
    process=None,
):
    """
    Block until a full page load of url succeeds.

    A throwaway browser is launched from browser_type (a Playwright
    BrowserType, e.g. the pytest-playwright fixture). Without one, a private
    Playwright session with Chromium is used.

    Raises:
        ServerNotReady: No successful load within timeout seconds, or the
            server process exited while waiting.
    """
    if browser_type is None:
        with sync_playwright() as playwright:
            return await_ready(url, timeout, interval, playwright.chromium, process)

    browser = browser_type.launch()
    try:
        page = browser.new_page()
        page.set_default_navigation_timeout(timeout * 1000)

        def load_page():
            _raise_if_exited(process, url)
            page.goto(url, wait_until="load")

        retry(load_page, interval=interval, deadline=timeout, retry_on=(PlaywrightError,))
    except RetryTimeout:
        raise ServerNotReady(
            url, f"Server did not start at {url} within {timeout:g} seconds."
        ) from None
    finally:
        browser.close()

    logger.info(f"Server is ready at {url}")


def terminate_server(server, strategy=None):
    """
    Signal the server's whole process group.

    Safe to call from several teardown paths: only the first call signals.
    A group that is already gone is logged and otherwise ignored.

    Raises:
        TerminationFailure: The signal could not be delivered for any reason
            other than the process no longer existing.
    """
    strategy = strategy or process_group.default_strategy()

    with server._lock:
        if server.state == ServerState.Stopped:
            logger.debug(f"Dev server {server.pid} already stopped")
            return
        server.state = ServerState.Stopped

        logger.info("Stopping development server...")
        try:
            strategy.kill(server.pid)
        except ProcessLookupError:
            logger.warning("Dev server process not found. It may have already stopped.")
            return
        except OSError as e:
            raise TerminationFailure(
                server.pid, f"Could not stop dev server group {server.pid}: {e}"
            ) from e

    try:
        server.process.wait(timeout=Timing.TerminateWaitSeconds)
    except subprocess.TimeoutExpired:
        logger.warning(
            f"Dev server {server.pid} still running {Timing.TerminateWaitSeconds:g}s after SIGTERM"
        )


# ---------------------------------------------------------------------------
# Lifecycle owner
# ---------------------------------------------------------------------------


class DevServer:
    """Owns one development server from port search to teardown."""

    def __init__(self, config=None, browser_type=None, strategy=None):
        self.config: SuiteConfig = config or SuiteConfig.from_env()
        self.browser_type = browser_type
        self.strategy = strategy or process_group.default_strategy()
        self.server: ServerProcess | None = None
        self._previous_sigint = None
        self._hooks_installed = False

    def start(self) -> ServerProcess:
        config = self.config

        if config.reclaim_port:
            logger.info(f"Killing any existing process on port {config.start_port}...")
            reclaim_port(config.start_port, self.strategy)

        port = acquire_port(config.start_port, config.port_probe_attempts)
        url = f"http://{config.host}:{port}"

        logger.info("Starting development server...")
        process = launch_server(
            config.app_dir, config.dev_command, port=port, strategy=self.strategy
        )
        self.server = ServerProcess(process=process, port=port, url=url)
        self._install_hooks()

        logger.info("Waiting for server to be ready...")
        try:
            await_ready(
                url,
                timeout=config.ready_timeout_s,
                interval=config.retry_interval_s,
                browser_type=self.browser_type,
                process=process,
            )
        except ServerNotReady:
            self.stop()
            raise

        self.server.state = ServerState.Ready
        os.environ[EnvVars.TestServerPort] = str(port)
        return self.server

    def stop(self):
        if self.server is None:
            logger.warning("Dev server is not running.")
            return

        try:
            terminate_server(self.server, self.strategy)
        finally:
            self._remove_hooks()

    def __enter__(self) -> ServerProcess:
        return self.start()

    def __exit__(self, exc_type, exc, tb):
        self.stop()

    # Process exit hooks --------------------------------------------------

    def _install_hooks(self):
        if self._hooks_installed:
            return
        atexit.register(self._on_exit)
        # signal handlers can only be set from the main thread
        if threading.current_thread() is threading.main_thread():
            self._previous_sigint = signal.signal(signal.SIGINT, self._on_sigint)
        self._hooks_installed = True

    def _remove_hooks(self):
        if not self._hooks_installed:
            return
        atexit.unregister(self._on_exit)
        if (
            threading.current_thread() is threading.main_thread()
            and signal.getsignal(signal.SIGINT) == self._on_sigint
        ):
            signal.signal(signal.SIGINT, self._previous_sigint or signal.default_int_handler)
        self._hooks_installed = False

    def _on_exit(self):
        if self.server is not None:
            terminate_server(self.server, self.strategy)

    def _on_sigint(self, signum, frame):
        previous = self._previous_sigint
        self.stop()
        if previous == signal.SIG_IGN:
            return
        if callable(previous):
            previous(signum, frame)
        else:
            raise KeyboardInterrupt
