from __future__ import annotations

from fastapi import APIRouter, Depends

from ..db import ConnectionPool, get_pool
from ..schemas import ErrorEnvelope, HealthOut

router = APIRouter(tags=["health"])


# PUBLIC_INTERFACE
@router.get(
    "/ping",
    response_model=HealthOut,
    summary="Liveness Probe",
    responses={500: {"model": ErrorEnvelope, "description": "Store unreachable"}},
)
def ping(pool: ConnectionPool = Depends(get_pool)) -> HealthOut:
    """
    Acquire a pooled connection and run a trivial query.

    Returns:
        {"status": "healthy"} when the store answers.
    """
    pool.ping()
    return HealthOut()
