import json
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from loadgen.core import config, tasks
from loadgen.core.probe import get_probe
from loadgen.core.validation import ValidationError
from loadgen.routers import health, load, logs, memory, pages

# -----------------------------
# Logging
# -----------------------------
logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("loadgen")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Load testing API listening on port {config.PORT} ({config.APP_ENV})")
    logger.info(f"Memory usage: {json.dumps(get_probe().memory().to_dict())}")
    yield
    cancelled = await tasks.cancel_all()
    if cancelled:
        logger.info(f"Cancelled {cancelled} background task(s) on shutdown")


app = FastAPI(
    title=config.SERVICE_NAME,
    version=config.SERVICE_VERSION,
    description="API for stress testing CPU and memory resources in containers",
    docs_url=config.DOCS_URL,
    lifespan=lifespan,
)


# -----------------------------
# Errors
# -----------------------------
@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content=exc.to_dict())


# pydantic v2 reports "json_invalid", v1 "value_error.jsondecode"
JSON_SYNTAX_ERRORS = {"json_invalid", "value_error.jsondecode"}


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    if any(e.get("type") in JSON_SYNTAX_ERRORS for e in exc.errors()):
        return JSONResponse(status_code=400, content={"error": "Request body is not valid JSON"})
    return JSONResponse(status_code=400, content={"error": "Request body must be a JSON object"})


# Routers
app.include_router(pages.router)
app.include_router(health.router)
app.include_router(load.router)
app.include_router(memory.router)
app.include_router(logs.router)


def run():
    uvicorn.run(app, host=config.HOST, port=config.PORT, log_level=config.LOG_LEVEL.lower())


if __name__ == "__main__":
    run()
