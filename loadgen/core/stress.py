"""
CPU burner and bounded memory oscillator.

Both run on the event loop and give control back between units of work,
so /health keeps answering while a test is in flight.
"""
from __future__ import annotations

import asyncio
import gc
import logging
import math
import random
import time
from collections import deque
from typing import Optional

from loadgen.core import config
from loadgen.core.clock import utc_now_iso
from loadgen.core.probe import MB, ProcessProbe, get_probe

logger = logging.getLogger("loadgen")


# -----------------------------
# CPU
# -----------------------------
def burn_chunk(iterations: int) -> float:
    result = 0.0
    for i in range(iterations):
        result += math.sqrt(i) * math.sin(i) * math.cos(i)
    return result


async def cpu_stress(
    duration_seconds: float,
    chunk_iterations: int = config.CPU_CHUNK_ITERATIONS,
    yield_seconds: float = config.CPU_YIELD_SECONDS,
):
    end_time = time.monotonic() + duration_seconds

    while True:
        burn_chunk(chunk_iterations)
        if time.monotonic() >= end_time:
            break
        await asyncio.sleep(yield_seconds)

    return {
        "type": "CPU",
        "duration": duration_seconds,
        "completed": True,
        "timestamp": utc_now_iso(),
    }


# -----------------------------
# Memory
# -----------------------------
ALLOCATE = "allocate"
EVICT = "evict"
GROW = "grow"
SHRINK = "shrink"
HOLD = "hold"


class MemoryOscillator:
    """
    Keeps the process's heap usage between min_mb and max_mb by growing and
    shrinking a set of retained byte blocks, one decision per tick.
    """

    def __init__(
        self,
        min_mb: float,
        max_mb: float,
        probe: Optional[ProcessProbe] = None,
        rng: Optional[random.Random] = None,
        chunk_bytes: int = config.MEMORY_CHUNK_BYTES,
        small_chunk_bytes: int = config.MEMORY_SMALL_CHUNK_BYTES,
    ):
        self.min_mb = min_mb
        self.max_mb = max_mb
        self.probe = probe or get_probe()
        self.rng = rng or random.Random()
        self.chunk_bytes = chunk_bytes
        self.small_chunk_bytes = small_chunk_bytes
        self.retained: deque = deque()

    @staticmethod
    def _block(size: int, fill: bytes) -> bytes:
        # filled, not zeroed, so the pages are actually touched
        return fill * size

    def tick(self) -> str:
        usage_mb = self.probe.memory().heap_used_mb

        if usage_mb < self.min_mb:
            self.retained.append(self._block(self.chunk_bytes, b"X"))
            return ALLOCATE

        if usage_mb > self.max_mb:
            if not self.retained:
                return HOLD
            remove = min(math.ceil(len(self.retained) * config.MEMORY_EVICT_RATIO), len(self.retained))
            for _ in range(remove):
                self.retained.popleft()
            gc.collect()
            return EVICT

        if self.rng.random() > 0.5 and usage_mb < self.max_mb * 0.9:
            self.retained.append(self._block(self.small_chunk_bytes, b"Y"))
            return GROW
        if self.retained and usage_mb > self.min_mb * 1.1:
            self.retained.pop()
            return SHRINK
        return HOLD

    def release(self):
        self.retained.clear()

    @property
    def retained_bytes(self) -> int:
        return sum(len(b) for b in self.retained)


async def controlled_memory_stress(
    duration_seconds: float,
    min_memory_mb: float,
    max_memory_mb: float,
    probe: Optional[ProcessProbe] = None,
    rng: Optional[random.Random] = None,
    tick_seconds: float = config.MEMORY_TICK_SECONDS,
    **oscillator_kwargs,
):
    probe = probe or get_probe()
    oscillator = MemoryOscillator(min_memory_mb, max_memory_mb, probe=probe, rng=rng, **oscillator_kwargs)
    end_time = time.monotonic() + duration_seconds

    try:
        while True:
            await asyncio.sleep(tick_seconds)
            action = oscillator.tick()
            logger.debug(
                f"[MEMORY] {action}: retained={len(oscillator.retained)} blocks "
                f"({oscillator.retained_bytes / MB:.0f} MB)"
            )
            if time.monotonic() >= end_time:
                break
    finally:
        oscillator.release()

    final_memory_mb = probe.memory().heap_used_mb

    return {
        "type": "Controlled Memory",
        "duration": duration_seconds,
        "minMemoryMB": min_memory_mb,
        "maxMemoryMB": max_memory_mb,
        "finalMemoryMB": final_memory_mb,
        "completed": True,
        "timestamp": utc_now_iso(),
    }
