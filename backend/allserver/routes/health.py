"""
All-Server Backend — Health Check & Welcome Routes
====================================================

What:  GET / greets API clients; GET /health probes the database.
Who:   Health is called by Docker health checks, load balancers, and monitoring.

Status levels:
    - healthy:   database reachable (HTTP 200)
    - unhealthy: database unreachable (HTTP 200, status flags the problem)
"""

import logging
import time

from fastapi import APIRouter, Request

from allserver import __version__
from allserver.database import check_connection
from allserver.schemas.common import HealthResponse, MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

# Uptime is measured from module import
_start_time = time.time()


@router.get("/", response_model=MessageResponse, summary="Welcome message")
async def welcome() -> MessageResponse:
    return MessageResponse(message="Welcome to the API server")


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description="Executes SELECT 1 against the connection pool and reports uptime.",
)
async def health_check(request: Request) -> HealthResponse:
    connected = await check_connection(request.app.state.engine)
    if not connected:
        logger.warning("Health check: database unreachable")

    return HealthResponse(
        status="healthy" if connected else "unhealthy",
        version=__version__,
        database="connected" if connected else "disconnected",
        uptime_seconds=round(time.time() - _start_time, 2),
    )
