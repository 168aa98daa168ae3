"""FastAPI application main module.

This module defines the main FastAPI application instance and core API
endpoints for the ZidRec recommendation service: health check, snapshot
status and metrics. It serves as the entry point for the API server.
"""

import logging
from typing import Any, Dict

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse

from zidrec.api.deps import get_snapshot_manager
from zidrec.api.exceptions import ZidRecException
from zidrec.api.logging_config import RequestLoggingMiddleware, setup_logging
from zidrec.api.metrics import metrics_service
from zidrec.api.routes import recommend
from zidrec.config import get_settings
from zidrec.recommender.snapshot import SnapshotManager

setup_logging(get_settings().LOG_LEVEL)
logger = logging.getLogger(__name__)

# Create FastAPI application instance
app = FastAPI(
    title="ZidRec API",
    description="Co-purchase product recommendations for Zid storefronts",
    version="0.1.0",
)

app.add_middleware(RequestLoggingMiddleware)

# Include routers
app.include_router(recommend.router)


@app.exception_handler(ZidRecException)
async def zidrec_exception_handler(
    request: Request, exc: ZidRecException
) -> JSONResponse:
    """Render ZidRec errors as ``{"error", "message", "details"}``."""
    logger.error(
        exc.message,
        extra={"path": str(request.url.path), "details": exc.details},
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": type(exc).__name__,
            "message": exc.message,
            "details": exc.details,
        },
    )


@app.get("/ping")
def ping() -> Dict[str, str]:
    """Health check endpoint.

    Returns:
        Dictionary with status key set to "ok".

    Example:
        >>> response = client.get("/ping")
        >>> assert response.json() == {"status": "ok"}
    """
    return {"status": "ok"}


@app.get("/status", response_model=recommend.SnapshotStatus)
def status(
    manager: SnapshotManager = Depends(get_snapshot_manager),
) -> Dict[str, Any]:
    """Report the resident snapshot without triggering a load."""
    snapshot = manager.current
    if snapshot is None:
        return {"loaded": False}
    return snapshot.status()


@app.get("/metrics")
def metrics() -> Dict[str, Any]:
    """Recommendation call counters and latency."""
    return metrics_service.get_metrics()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "zidrec.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
