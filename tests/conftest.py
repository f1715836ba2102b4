import pytest
from fastapi.testclient import TestClient

from loadgen.core.probe import MB, MemoryUsage
from loadgen.main import app


@pytest.fixture
def client():
    # context manager runs the lifespan, which cancels leftover background tasks
    with TestClient(app) as c:
        yield c


class FakeProbe:
    """Scripted stand-in for ProcessProbe. Repeats the last reading once the script runs out."""

    def __init__(self, heap_mb=(0,), cpu=(0.0,)):
        self.heap_mb = list(heap_mb)
        self.cpu = list(cpu)
        self.memory_calls = 0
        self.cpu_calls = 0

    def memory(self):
        value = self.heap_mb[min(self.memory_calls, len(self.heap_mb) - 1)]
        self.memory_calls += 1
        return MemoryUsage(
            heap_used=int(value * MB),
            heap_total=int(value * 2 * MB),
            rss=int(value * MB) + 10 * MB,
            external=MB,
        )

    def cpu_seconds(self):
        value = self.cpu[min(self.cpu_calls, len(self.cpu) - 1)]
        self.cpu_calls += 1
        return value


@pytest.fixture
def fake_probe():
    return FakeProbe
