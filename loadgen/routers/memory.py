import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Query
from fastapi.responses import JSONResponse

from loadgen.core import tasks
from loadgen.core.clock import utc_now_iso
from loadgen.core.stress import controlled_memory_stress
from loadgen.core.validation import (
    check_memory_bounds,
    positive_number,
    positive_query_number,
    require,
)

logger = logging.getLogger("loadgen")

router = APIRouter(prefix="/memory-test", tags=["Memory"])

FIELDS = ["timePeriod", "minMemory", "maxMemory"]
MESSAGES = {
    "timePeriod": "timePeriod must be a positive number (seconds)",
    "minMemory": "minMemory must be a positive number (MB)",
    "maxMemory": "maxMemory must be a positive number (MB)",
}


def _log_start(time_period, min_memory, max_memory):
    logger.info(
        f"Starting controlled memory test for {time_period} seconds "
        f"({min_memory}MB - {max_memory}MB)..."
    )


@router.post("")
async def memory_test(
    payload: Optional[Dict[str, Any]] = Body(
        None, examples=[{"timePeriod": 30, "minMemory": 100, "maxMemory": 300}]
    ),
):
    """
    Hold process memory between minMemory and maxMemory (MB) for timePeriod
    seconds, then release it and report the final reading.
    """
    payload = payload or {}
    require(
        payload,
        FIELDS,
        "Missing required parameters: timePeriod, minMemory, and maxMemory are required",
        example={"timePeriod": 30, "minMemory": 100, "maxMemory": 300},
    )
    time_period, min_memory, max_memory = (positive_number(payload[f], MESSAGES[f]) for f in FIELDS)
    check_memory_bounds(min_memory, max_memory)

    _log_start(time_period, min_memory, max_memory)
    try:
        result = await controlled_memory_stress(time_period, min_memory, max_memory)
    except Exception as e:
        logger.exception("Error during controlled memory test")
        return JSONResponse(
            status_code=500,
            content={"error": "Memory test failed", "message": str(e)},
        )

    logger.info("Controlled memory test completed")
    return result


async def _detached_memory_stress(time_period, min_memory, max_memory):
    await controlled_memory_stress(time_period, min_memory, max_memory)
    logger.info("Controlled memory test completed")


@router.get("")
async def memory_test_detached(
    timePeriod: Optional[str] = Query(None, description="Duration in seconds"),
    minMemory: Optional[str] = Query(None, description="Lower bound in MB"),
    maxMemory: Optional[str] = Query(None, description="Upper bound in MB"),
):
    """
    Start a controlled memory test in the background and return immediately.
    """
    raw = {"timePeriod": timePeriod, "minMemory": minMemory, "maxMemory": maxMemory}
    require(
        raw,
        FIELDS,
        "Missing required query parameters: timePeriod, minMemory, and maxMemory are required",
        example="/memory-test?timePeriod=30&minMemory=100&maxMemory=300",
    )
    time_period, min_memory, max_memory = (positive_query_number(raw[f], MESSAGES[f]) for f in FIELDS)
    check_memory_bounds(min_memory, max_memory)

    _log_start(time_period, min_memory, max_memory)
    tasks.spawn(
        _detached_memory_stress(time_period, min_memory, max_memory),
        name="controlled memory test",
    )

    return {
        "status": "started",
        "type": "Controlled Memory",
        "timePeriod": time_period,
        "minMemory": min_memory,
        "maxMemory": max_memory,
        "timestamp": utc_now_iso(),
    }
