"""Use case behind the status report across upstream services."""
from __future__ import annotations

from application.services.health import HealthManager, HostAllowlist
from application.services.health.health_manager import UNHEALTHY, service_targets
from config import settings

from .check_online import Response


class HealthStatusUseCase:
    def __init__(self, manager: HealthManager, allowlist: HostAllowlist) -> None:
        self.manager = manager
        self.allowlist = allowlist

    async def execute(self) -> Response:
        targets = service_targets(
            self.allowlist,
            redcap_host=settings.REDCAP_HOST,
            internet_host=settings.INTERNET_HOST,
        )
        report = await self.manager.check_services(targets, settings.HEALTH_ALLOWED_PORT)
        status_code = 503 if report.status == UNHEALTHY else 200
        return status_code, {"data": report.to_dict(), "error": None}
