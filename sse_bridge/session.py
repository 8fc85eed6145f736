"""
Bridge Session State

Process-wide state shared by the supervisor, the event stream client and the
request forwarder. The session is the single coordination point between
threads:

- finish() records why the bridge should stop; the first caller wins
- wait() blocks the main thread until some component calls finish()
- close() raises the shutdown flag and terminates an owned upstream
"""

import threading
from typing import TYPE_CHECKING, Optional

from sse_bridge.configs.logging import get_logger

if TYPE_CHECKING:
    from sse_bridge.upstream.supervisor import UpstreamProcess

logger = get_logger("session")

# Main thread wakes this often so signal handlers get a chance to run
WAIT_SLICE = 0.5


class BridgeSession:
    """Lifecycle state for one bridge process."""

    def __init__(self):
        self._lock = threading.Lock()
        self._finished = threading.Event()
        self._shutting_down = threading.Event()
        self._exit_code: Optional[int] = None
        self._reason: Optional[str] = None

        self.upstream: Optional["UpstreamProcess"] = None

        # Event stream bookkeeping, written only by the event stream thread
        self.stream_connects = 0
        self.stream_failures = 0

    @property
    def finished(self) -> bool:
        return self._finished.is_set()

    @property
    def shutting_down(self) -> bool:
        return self._shutting_down.is_set()

    @property
    def exit_code(self) -> Optional[int]:
        return self._exit_code

    @property
    def reason(self) -> Optional[str]:
        return self._reason

    def finish(self, exit_code: int, reason: str) -> bool:
        """
        Request the bridge to stop with exit_code.

        Returns:
            True if this call decided the outcome, False if already finished
        """
        with self._lock:
            if self._finished.is_set():
                return False
            self._exit_code = exit_code
            self._reason = reason
            self._finished.set()

        logger.info(f"Stopping bridge ({reason}), exit code {exit_code}")
        return True

    def sleep(self, seconds: float) -> bool:
        """
        Wait for seconds unless the session finishes first.

        Returns:
            True if the session finished during (or before) the wait
        """
        return self._finished.wait(timeout=seconds)

    def wait(self) -> int:
        """Block until finish() is called and return the exit code."""
        while not self._finished.wait(timeout=WAIT_SLICE):
            pass
        return self._exit_code if self._exit_code is not None else 0

    def close(self) -> None:
        """
        Tear down: set the shutdown flag, then terminate the upstream if owned.

        The flag goes up before the signal so the upstream's exit is not
        mistaken for a crash. Safe to call more than once.
        """
        with self._lock:
            if self._shutting_down.is_set():
                return
            self._shutting_down.set()

        upstream = self.upstream
        if upstream is not None and upstream.owned:
            upstream.terminate()
