from fastapi import APIRouter

from loadgen.core import config

router = APIRouter()

ENDPOINTS = {
    "health": "GET /health",
    "cpu": "POST /cpu (body: {seconds: number})",
    "cpuGet": "GET /cpu?seconds=10",
    "logs": "POST /logs (body: {seconds: number, duration?: number})",
    "logsGet": "GET /logs?seconds=5&duration=60",
    "memoryTest": "POST /memory-test (body: {timePeriod: number, minMemory: number, maxMemory: number})",
    "memoryTestGet": "GET /memory-test?timePeriod=30&minMemory=100&maxMemory=300",
}


@router.get("/", tags=["Service"])
def service_descriptor():
    return {
        "service": config.SERVICE_NAME,
        "version": config.SERVICE_VERSION,
        "documentation": config.DOCS_URL,
        "environment": config.APP_ENV,
        "endpoints": ENDPOINTS,
    }
