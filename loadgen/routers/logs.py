import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Query
from fastapi.responses import JSONResponse

from loadgen.core import tasks
from loadgen.core.clock import utc_now_iso
from loadgen.core.telemetry import continuous_logging
from loadgen.core.validation import positive_number, positive_query_number, require

logger = logging.getLogger("loadgen")

router = APIRouter(prefix="/logs", tags=["Logs"])

SECONDS_ERROR = "seconds must be a positive number"
DURATION_ERROR = "duration must be a positive number if provided"


def _log_start(seconds, duration):
    total = f" for {duration}s total" if duration else " (indefinite)"
    logger.info(f"Starting continuous logging with {seconds}s intervals{total}...")


@router.post("")
async def start_logging(
    payload: Optional[Dict[str, Any]] = Body(None, examples=[{"seconds": 5, "duration": 60}]),
):
    """
    Log resource usage every `seconds`. With `duration` the call blocks until
    logging finishes; without it logging runs until the process exits.
    """
    payload = payload or {}
    require(payload, ["seconds"], "Missing required parameter: seconds is required")
    seconds = positive_number(payload["seconds"], SECONDS_ERROR)
    duration = None
    if "duration" in payload:
        duration = positive_number(payload["duration"], DURATION_ERROR)

    _log_start(seconds, duration)

    if duration is None:
        tasks.spawn(continuous_logging(seconds), name="continuous logging")
        return {
            "status": "started",
            "type": "Continuous Logging",
            "intervalSeconds": seconds,
            "mode": "indefinite",
            "timestamp": utc_now_iso(),
        }

    try:
        return await continuous_logging(seconds, duration)
    except Exception as e:
        logger.exception("Error during continuous logging")
        return JSONResponse(
            status_code=500,
            content={"error": "Logging failed", "message": str(e)},
        )


@router.get("")
async def start_logging_detached(
    seconds: Optional[str] = Query(None, description="Interval between log lines"),
    duration: Optional[str] = Query(None, description="Total duration; omit to log indefinitely"),
):
    require(
        {"seconds": seconds},
        ["seconds"],
        "Missing required query parameter: seconds is required",
        example="/logs?seconds=5",
    )
    seconds_num = positive_query_number(seconds, SECONDS_ERROR)
    duration_num = positive_query_number(duration, DURATION_ERROR) if duration else None

    _log_start(seconds_num, duration_num)
    tasks.spawn(continuous_logging(seconds_num, duration_num), name="continuous logging")

    return {
        "status": "started",
        "type": "Continuous Logging",
        "intervalSeconds": seconds_num,
        "duration": duration_num,
        "mode": "timed" if duration_num else "indefinite",
        "timestamp": utc_now_iso(),
    }
