"""Database health probe."""

import asyncio
import time

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..logging import get_logger
from ..schemas.common import DatabaseHealthResponse

logger = get_logger("health")

PROBE_TIMEOUT_SECONDS = 5.0


class HealthService:
    def __init__(self, session: AsyncSession, timeout: float = PROBE_TIMEOUT_SECONDS):
        self.session = session
        self.timeout = timeout

    async def _ping(self) -> None:
        result = await self.session.execute(text("SELECT 1"))
        result.scalar()

    async def check_database_health(self) -> DatabaseHealthResponse:
        """Round-trip ``SELECT 1``. A failure or a slow answer reports unhealthy."""
        started = time.perf_counter()
        try:
            await asyncio.wait_for(self._ping(), timeout=self.timeout)
        except asyncio.TimeoutError:
            error = f"no answer within {self.timeout:g}s"
        except (SQLAlchemyError, OSError) as exc:
            error = str(exc)
        else:
            return DatabaseHealthResponse(
                connected=True,
                status="healthy",
                response_time_ms=round((time.perf_counter() - started) * 1000, 2),
            )

        logger.warning("Database health check failed", extra={"error": error})
        return DatabaseHealthResponse(connected=False, status="unhealthy", error=error)
