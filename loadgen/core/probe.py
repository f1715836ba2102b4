"""
Process introspection used by the stress generators.

Everything the generators know about the process goes through ProcessProbe,
so tests can hand them a fake instead of allocating real memory.
"""
from __future__ import annotations

from dataclasses import dataclass, asdict

import psutil

MB = 1024 * 1024


@dataclass(frozen=True)
class MemoryUsage:
    heap_used: int       # private resident memory (bytes)
    heap_total: int      # virtual memory reserved by the process
    rss: int
    external: int        # shared / file-backed resident pages

    @property
    def heap_used_mb(self) -> float:
        return self.heap_used / MB

    def to_dict(self):
        return asdict(self)


class ProcessProbe:
    def __init__(self, pid: int | None = None):
        self._proc = psutil.Process(pid)

    def memory(self) -> MemoryUsage:
        info = self._proc.memory_info()
        # `shared` is only reported on Linux
        shared = getattr(info, "shared", 0)
        return MemoryUsage(
            heap_used=max(info.rss - shared, 0),
            heap_total=info.vms,
            rss=info.rss,
            external=shared,
        )

    def cpu_seconds(self) -> float:
        times = self._proc.cpu_times()
        return times.user + times.system


_default_probe: ProcessProbe | None = None


def get_probe() -> ProcessProbe:
    global _default_probe
    if _default_probe is None:
        _default_probe = ProcessProbe()
    return _default_probe
