import os

# -----------------------------
# Runtime
# -----------------------------
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "3000"))
APP_ENV = os.getenv("APP_ENV", "production").lower()

LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG" if APP_ENV == "development" else "INFO").upper()

SERVICE_NAME = "Load Testing API"
SERVICE_VERSION = "1.0.0"
DOCS_URL = "/api-docs"


# -----------------------------
# Stress generators
# -----------------------------
CPU_CHUNK_ITERATIONS = int(os.getenv("CPU_CHUNK_ITERATIONS", "100000"))
CPU_YIELD_SECONDS = 0.01

MEMORY_TICK_SECONDS = 0.1
MEMORY_CHUNK_BYTES = 10 * 1024 * 1024
MEMORY_SMALL_CHUNK_BYTES = 5 * 1024 * 1024
MEMORY_EVICT_RATIO = 0.2
