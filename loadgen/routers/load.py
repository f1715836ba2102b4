import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Query
from fastapi.responses import JSONResponse

from loadgen.core import tasks
from loadgen.core.clock import utc_now_iso
from loadgen.core.stress import cpu_stress
from loadgen.core.validation import positive_number, positive_query_number, require

logger = logging.getLogger("loadgen")

router = APIRouter(prefix="/cpu", tags=["CPU"])

SECONDS_ERROR = "seconds must be a positive number"


@router.post("")
async def burn_cpu(payload: Optional[Dict[str, Any]] = Body(None, examples=[{"seconds": 10}])):
    """
    Burn CPU for `seconds` and respond once the burn has finished.
    """
    payload = payload or {}
    require(payload, ["seconds"], "Missing required parameter: seconds is required")
    seconds = positive_number(payload["seconds"], SECONDS_ERROR)

    logger.info(f"Starting CPU stress test for {seconds} seconds...")
    try:
        result = await cpu_stress(seconds)
    except Exception as e:
        logger.exception("Error during CPU stress test")
        return JSONResponse(
            status_code=500,
            content={"error": "CPU stress test failed", "message": str(e)},
        )

    logger.info("CPU stress test completed")
    return result


async def _detached_cpu_stress(seconds):
    await cpu_stress(seconds)
    logger.info("CPU stress test completed")


@router.get("")
async def burn_cpu_detached(seconds: Optional[str] = Query(None, description="Duration in seconds")):
    """
    Start a CPU burn in the background and return immediately.
    """
    require(
        {"seconds": seconds},
        ["seconds"],
        "Missing required query parameter: seconds is required",
        example="/cpu?seconds=10",
    )
    seconds_num = positive_query_number(seconds, SECONDS_ERROR)

    logger.info(f"Starting CPU stress test for {seconds_num} seconds...")
    tasks.spawn(_detached_cpu_stress(seconds_num), name="CPU stress test")

    return {
        "status": "started",
        "type": "CPU",
        "duration": seconds_num,
        "timestamp": utc_now_iso(),
    }
