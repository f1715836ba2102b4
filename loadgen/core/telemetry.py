import asyncio
import logging
import math
from typing import Optional

from loadgen.core.clock import utc_now_iso
from loadgen.core.probe import MB, MemoryUsage, ProcessProbe, get_probe

logger = logging.getLogger("loadgen.telemetry")


def planned_log_count(interval_seconds: float, duration_seconds: float) -> int:
    """Ticks a timed run emits: ceil(duration / interval), never fewer than one."""
    # round() absorbs float noise such as 0.3 / 0.1 == 2.9999999999999996
    return max(1, math.ceil(round(duration_seconds / interval_seconds, 9)))


def cpu_percent(cpu_delta_seconds: float, interval_seconds: float) -> float:
    # Not normalised by core count: multi-threaded load can read above 100%.
    return cpu_delta_seconds / interval_seconds * 100


def format_log_line(count: int, elapsed: float, cpu: float, mem: MemoryUsage, timestamp: str) -> str:
    return (
        f"[LOGS-{count}] [{elapsed:.1f}s] CPU: {cpu:.2f}% | "
        f"Memory - Heap: {mem.heap_used / MB:.2f}/{mem.heap_total / MB:.2f} MB | "
        f"RSS: {mem.rss / MB:.2f} MB | External: {mem.external / MB:.2f} MB | "
        f"Timestamp: {timestamp}"
    )


async def continuous_logging(
    interval_seconds: float,
    duration_seconds: Optional[float] = None,
    probe: Optional[ProcessProbe] = None,
):
    """
    Emit one resource-usage line every interval_seconds.

    With duration_seconds the coroutine returns a summary after
    planned_log_count() lines. Without it, it runs until cancelled.
    """
    probe = probe or get_probe()
    loop = asyncio.get_running_loop()
    start = loop.time()
    limit = planned_log_count(interval_seconds, duration_seconds) if duration_seconds else None
    log_count = 0
    previous_cpu = probe.cpu_seconds()

    logger.info(f"[LOGS] Starting continuous logging every {interval_seconds} seconds...")

    while True:
        next_tick = start + (log_count + 1) * interval_seconds
        await asyncio.sleep(max(0.0, next_tick - loop.time()))

        current_cpu = probe.cpu_seconds()
        cpu = cpu_percent(current_cpu - previous_cpu, interval_seconds)
        previous_cpu = current_cpu

        log_count += 1
        elapsed = loop.time() - start
        logger.info(format_log_line(log_count, elapsed, cpu, probe.memory(), utc_now_iso()))

        if limit is not None and log_count >= limit:
            break

    logger.info(f"[LOGS] Continuous logging completed after {log_count} log entries")
    return {
        "type": "Continuous Logging",
        "intervalSeconds": interval_seconds,
        "totalDuration": round(elapsed, 1),
        "logCount": log_count,
        "completed": True,
        "timestamp": utc_now_iso(),
    }
