"""
Pytest fixtures for SSE bridge tests.
"""

import io
import json
import sys
import threading
import time
from pathlib import Path
from typing import Callable, Optional

import pytest

# Add project root to path for package and entrypoint imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from sse_bridge.configs.runtime import BridgeConfig  # noqa: E402
from sse_bridge.session import BridgeSession  # noqa: E402
from sse_bridge.transport.host_io import HostWriter  # noqa: E402


class FakeProcess:
    """Stand-in for subprocess.Popen with controllable exit."""

    def __init__(self, returncode: Optional[int] = None, stdout: bytes = b"", stderr: bytes = b""):
        self.pid = 4242
        self.stdout = io.BytesIO(stdout)
        self.stderr = io.BytesIO(stderr)
        self.returncode: Optional[int] = None
        self.terminated = False
        self._exited = threading.Event()
        if returncode is not None:
            self.exit(returncode)

    def exit(self, returncode: int) -> None:
        self.returncode = returncode
        self._exited.set()

    def poll(self) -> Optional[int]:
        return self.returncode

    def wait(self, timeout: Optional[float] = None) -> Optional[int]:
        self._exited.wait(timeout)
        return self.returncode

    def terminate(self) -> None:
        self.terminated = True
        self.exit(-15)


class HostOutput(io.BytesIO):
    """Captured host stdout."""

    def lines(self) -> list[str]:
        return self.getvalue().decode("utf-8").splitlines()

    def messages(self) -> list:
        return [json.loads(line) for line in self.lines()]


def wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> bool:
    """Poll predicate until it holds or timeout elapses."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


@pytest.fixture(autouse=True)
def isolated_data_path(tmp_path: Path, monkeypatch) -> Path:
    """Point the bridge at an empty data dir and clear SSE_BRIDGE_* env vars."""
    import os

    for name in list(os.environ):
        if name.startswith("SSE_BRIDGE_"):
            monkeypatch.delenv(name)
    data_path = tmp_path / "bridge-data"
    monkeypatch.setenv("SSE_BRIDGE_DATA_PATH", str(data_path))
    return data_path


@pytest.fixture
def config() -> BridgeConfig:
    """Config with fast timers for tests."""
    return BridgeConfig(
        sse_url="http://127.0.0.1:12341/sse",
        ready_interval=0.0,
        reconnect_delay=0.0,
        max_inflight=4,
    )


@pytest.fixture
def session() -> BridgeSession:
    return BridgeSession()


@pytest.fixture
def host_output() -> HostOutput:
    return HostOutput()


@pytest.fixture
def writer(host_output: HostOutput) -> HostWriter:
    return HostWriter(host_output)


@pytest.fixture
def fake_processes():
    """Factory for FakeProcess; all are exited on teardown so watchers stop."""
    created: list[FakeProcess] = []

    def _make(**kwargs) -> FakeProcess:
        process = FakeProcess(**kwargs)
        created.append(process)
        return process

    yield _make

    for process in created:
        if process.returncode is None:
            process.exit(0)
