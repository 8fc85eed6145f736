"""
Upstream Process Supervisor

Makes sure an upstream is listening before the bridge starts relaying:

1. Probe the event URL. Any HTTP answer means an upstream is already running;
   it is reused and never terminated by the bridge.
2. Otherwise spawn the upstream with stdout/stderr piped (the bridge's stdout
   belongs to the host) and forward its output to the log.
3. Poll the probe until the upstream answers or the attempts run out.

Spawn failures, readiness timeouts and an owned upstream dying before the
bridge shuts down are fatal.
"""

import logging
import subprocess
import threading
from dataclasses import dataclass
from typing import IO, Optional

from sse_bridge.configs.constants import UPSTREAM_LABEL
from sse_bridge.configs.logging import get_logger
from sse_bridge.configs.runtime import BridgeConfig
from sse_bridge.exceptions import (
    StartupAborted,
    UpstreamExitedError,
    UpstreamReadinessTimeout,
    UpstreamSpawnError,
    UpstreamUnavailableError,
    exit_code_for,
)
from sse_bridge.session import BridgeSession
from sse_bridge.utils.http_client import http_probe

logger = get_logger("supervisor")
output_logger = get_logger("upstream")


@dataclass
class UpstreamProcess:
    """Ownership record for the upstream the bridge talks to."""

    owned: bool
    label: str = UPSTREAM_LABEL
    process: Optional[subprocess.Popen] = None

    @property
    def pid(self) -> Optional[int]:
        return self.process.pid if self.process is not None else None

    @property
    def returncode(self) -> Optional[int]:
        """Exit status once the process has ended, None while running or not owned."""
        if self.process is None:
            return None
        return self.process.poll()

    @property
    def running(self) -> bool:
        return self.process is not None and self.returncode is None

    def terminate(self) -> bool:
        """
        Send SIGTERM to an owned, still running upstream.

        Returns:
            True if a signal was sent
        """
        if not self.owned or not self.running:
            return False
        logger.info(f"Stopping {self.label} server (pid {self.pid})...")
        try:
            self.process.terminate()
        except ProcessLookupError:
            return False
        return True


class UpstreamSupervisor:
    """Finds or starts the upstream for one bridge session."""

    def __init__(self, config: BridgeConfig, session: BridgeSession):
        self._config = config
        self._session = session
        self._endpoints = config.endpoints
        self._label = config.upstream_label

    def ensure_upstream(self) -> UpstreamProcess:
        """
        Return a handle to a reachable upstream, starting one if needed.

        The handle is stored on the session as soon as it exists, so an owned
        process is still terminated when startup fails later on.

        Raises:
            UpstreamUnavailableError: Nothing listening and auto-start disabled
            UpstreamSpawnError: Upstream executable could not be started
            UpstreamExitedError: Upstream died before becoming ready
            UpstreamReadinessTimeout: Upstream never answered the probe
            StartupAborted: Session finished while waiting
        """
        url = self._endpoints.event_url

        if self._probe():
            logger.info(f"Connected to existing {self._label} server at {url}")
            handle = UpstreamProcess(owned=False, label=self._label)
            self._session.upstream = handle
            return handle

        if not self._config.auto_start:
            raise UpstreamUnavailableError(f"No {self._label} server at {url} and auto-start is disabled")

        handle = self._spawn()
        self._session.upstream = handle
        self._wait_until_ready(handle)
        return handle

    def _probe(self) -> bool:
        return http_probe(self._endpoints.event_url, timeout=self._config.probe_timeout)

    def _spawn(self) -> UpstreamProcess:
        args = self._config.upstream_args()
        logger.info(f"Starting {self._label} server on {self._endpoints.host}:{self._endpoints.port}...")
        logger.debug(f"Upstream command: {args}")

        try:
            process = subprocess.Popen(
                args,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except OSError as e:
            raise UpstreamSpawnError(args, str(e)) from e

        handle = UpstreamProcess(owned=True, label=self._label, process=process)

        # stdout is drained too, otherwise a chatty upstream blocks on a full pipe
        self._start_thread(self._pump_output, process.stderr, logging.INFO, name="upstream-stderr")
        self._start_thread(self._pump_output, process.stdout, logging.DEBUG, name="upstream-stdout")
        self._start_thread(self._watch_exit, handle, name="upstream-watcher")
        return handle

    @staticmethod
    def _start_thread(target, *args, name: str) -> threading.Thread:
        thread = threading.Thread(target=target, args=args, name=name, daemon=True)
        thread.start()
        return thread

    def _pump_output(self, stream: Optional[IO[bytes]], level: int) -> None:
        """Forward each line of an upstream pipe to the log, tagged with the label."""
        if stream is None:
            return
        with stream:
            for raw in stream:
                line = raw.decode("utf-8", errors="replace").rstrip()
                if line:
                    output_logger.log(level, f"[{self._label}] {line}")

    def _watch_exit(self, handle: UpstreamProcess) -> None:
        """Turn an unexpected upstream exit into a fatal session finish."""
        returncode = handle.process.wait()
        if self._session.shutting_down:
            logger.info(f"{self._label} server exited with code {returncode}")
            return

        logger.error(f"{self._label} server exited unexpectedly with code {returncode}")
        self._session.finish(
            exit_code_for(returncode),
            f"{self._label} server exited with code {returncode}",
        )

    def _wait_until_ready(self, handle: UpstreamProcess) -> None:
        """Poll the probe at a fixed interval until the upstream answers."""
        attempts = self._config.ready_attempts
        logger.info(f"Waiting for {self._label} to be ready...")

        for attempt in range(1, attempts + 1):
            if handle.returncode is not None:
                raise UpstreamExitedError(handle.returncode)
            if self._session.finished:
                raise StartupAborted(
                    f"Startup interrupted: {self._session.reason}",
                    exit_code=self._session.exit_code or 0,
                )

            if self._probe():
                logger.info(f"{self._label} server is ready (attempt {attempt}/{attempts})")
                return
            logger.debug(f"{self._label} not ready yet (attempt {attempt}/{attempts})")

            self._session.sleep(self._config.ready_interval)

        logger.error(f"Timed out waiting for {self._label} server to start")
        raise UpstreamReadinessTimeout(self._endpoints.event_url, attempts)
