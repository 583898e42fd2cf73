"""Health and readiness endpoints.

  /health (liveness)  — the process can answer; never touches the database.
  /ready  (readiness) — the backing store is reachable. A 503 takes this
                        instance out of rotation without restarting it.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request, Response, status
from sqlalchemy.exc import SQLAlchemyError

from idp.db.engine import ping

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict:
    return {"status": "ok"}


@router.get("/ready")
async def ready(request: Request) -> Response:
    engine = request.app.state.engine
    if engine is None:
        # In-memory stores are always available.
        return Response(status_code=status.HTTP_200_OK)
    try:
        await ping(engine)
    except (SQLAlchemyError, OSError):
        logger.warning("Readiness check failed: database unreachable", exc_info=True)
        return Response(status_code=status.HTTP_503_SERVICE_UNAVAILABLE)
    return Response(status_code=status.HTTP_200_OK)
