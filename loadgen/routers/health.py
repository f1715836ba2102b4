from fastapi import APIRouter

from loadgen.core.clock import utc_now_iso

router = APIRouter(prefix="/health", tags=["Health"])


@router.get("")
def health_check():
    """Liveness only; no resource checks."""
    return {"status": "healthy", "timestamp": utc_now_iso()}
