"""Liveness and readiness reports for the profiling bot."""

import logging
import time
from typing import Any, Dict, List

from .. import __version__

logger = logging.getLogger(__name__)


class HealthCheckService:
    """Builds /health and /ready payloads from the container state.

    Health includes the storage and quiz configuration checks plus the
    number of active and completed test sessions. The bot is ready only
    when the container is initialized and every check passes.
    """

    def __init__(self, container):
        self.container = container
        self.started_at = time.time()

    async def get_health_status(self) -> Dict[str, Any]:
        checks = await self._run_checks()
        failed = self._failed(checks)

        report = {
            "status": "degraded" if failed else "healthy",
            "version": __version__,
            "uptime": round(time.time() - self.started_at, 3),
            "checks": checks,
        }
        if failed:
            report["failed_checks"] = failed

        if self.container.is_initialized:
            try:
                report["sessions"] = await self._session_counts()
            except Exception as e:
                logger.error(f"Could not count test sessions: {e}")
                report["status"] = "degraded"
                report["sessions"] = None

        return report

    async def get_readiness_status(self) -> Dict[str, Any]:
        if not self.container.is_initialized:
            return {"ready": False, "checks": {}, "reason": "container is not initialized"}

        checks = await self._run_checks()
        report = {"ready": not self._failed(checks), "checks": checks}
        if not report["ready"]:
            report["failed_checks"] = self._failed(checks)
        return report

    async def _run_checks(self) -> Dict[str, bool]:
        if not self.container.is_initialized:
            return {"container": False}
        try:
            return await self.container.health_check()
        except Exception as e:
            logger.error(f"Health check failed: {e}")
            return {"container": False}

    async def _session_counts(self) -> Dict[str, int]:
        repository = self.container.session_repository
        return {
            "active": len(await repository.get_all_active()),
            "completed": await repository.count_completed(),
        }

    @staticmethod
    def _failed(checks: Dict[str, bool]) -> List[str]:
        return [name for name, ok in checks.items() if not ok]
