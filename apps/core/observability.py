"""
Health checks for Newskoop.

A small registry of named checks backing the /health/, /livez/ and
/readyz/ endpoints.
"""

import time
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from threading import Lock
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)


class HealthStatus(Enum):
    """Health check status."""
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


@dataclass
class HealthCheckResult:
    """Result of a health check."""
    name: str
    status: HealthStatus
    message: str = ""
    details: Dict[str, Any] = field(default_factory=dict)
    duration_ms: float = 0


class HealthChecker:
    """Health check registry and executor."""

    _instance = None
    _lock = Lock()

    def __new__(cls):
        with cls._lock:
            if cls._instance is None:
                cls._instance = super().__new__(cls)
                cls._instance._checks = {}
        return cls._instance

    def register(self, name: str, check_fn: Callable[[], HealthCheckResult]) -> None:
        self._checks[name] = check_fn

    def check(self, name: str) -> HealthCheckResult:
        """Run a specific health check."""
        if name not in self._checks:
            return HealthCheckResult(
                name=name,
                status=HealthStatus.UNHEALTHY,
                message=f"Unknown check: {name}",
            )

        start = time.perf_counter()
        try:
            result = self._checks[name]()
        except Exception as e:
            logger.warning("Health check %s raised: %s", name, e)
            result = HealthCheckResult(
                name=name,
                status=HealthStatus.UNHEALTHY,
                message=str(e),
            )
        result.duration_ms = (time.perf_counter() - start) * 1000
        return result

    def check_all(self) -> Dict[str, Any]:
        """Run all health checks."""
        results = {}
        overall_status = HealthStatus.HEALTHY

        for name in self._checks:
            result = self.check(name)
            results[name] = {
                "status": result.status.value,
                "message": result.message,
                "details": result.details,
                "duration_ms": result.duration_ms,
            }

            if result.status == HealthStatus.UNHEALTHY:
                overall_status = HealthStatus.UNHEALTHY
            elif result.status == HealthStatus.DEGRADED and overall_status != HealthStatus.UNHEALTHY:
                overall_status = HealthStatus.DEGRADED

        return {
            "status": overall_status.value,
            "checks": results,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    def list_checks(self) -> List[str]:
        return list(self._checks.keys())


health_checker = HealthChecker()


# =============================================================================
# Built-in Health Checks
# =============================================================================

def check_database() -> HealthCheckResult:
    from django.db import connection

    with connection.cursor() as cursor:
        cursor.execute("SELECT 1")
        cursor.fetchone()
    return HealthCheckResult(
        name="database",
        status=HealthStatus.HEALTHY,
        message="Database connection successful",
    )


def check_cache() -> HealthCheckResult:
    from django.core.cache import cache

    cache.set("health_check", "ok", 10)
    if cache.get("health_check") == "ok":
        return HealthCheckResult(
            name="cache",
            status=HealthStatus.HEALTHY,
            message="Cache connection successful",
        )
    return HealthCheckResult(
        name="cache",
        status=HealthStatus.DEGRADED,
        message="Cache get/set mismatch",
    )


def register_default_checks():
    health_checker.register("database", check_database)
    health_checker.register("cache", check_cache)
