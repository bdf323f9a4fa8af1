from __future__ import annotations

import asyncio
import time
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional, Tuple

from core.logging.context import context as log_context
from core.logging.logger import StructuredLogger, get_logger
from .allowlist import HostAllowlist
from .models import HealthStatusReport, OnlineCheckResult, ServiceHealth
from .tcp_checker import TCPChecker
from .tls_checker import TLSChecker
from .timeout_config import ProbeTimeoutConfig

HEALTHY = "healthy"
DEGRADED = "degraded"
UNHEALTHY = "unhealthy"

_PROCESS_START = time.monotonic()


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def overall_status(services: Iterable[ServiceHealth]) -> str:
    statuses = {s.status for s in services}
    if UNHEALTHY in statuses:
        return UNHEALTHY
    if DEGRADED in statuses:
        return DEGRADED
    return HEALTHY


class HealthManager:
    """Runs TCP and TLS probes against a target and folds them into one verdict."""

    def __init__(
        self,
        tcp_checker: TCPChecker,
        tls_checker: TLSChecker,
        logger: Optional[StructuredLogger] = None,
        *,
        timeout: Optional[ProbeTimeoutConfig] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.tcp_checker = tcp_checker
        self.tls_checker = tls_checker
        self.logger = logger or get_logger(__name__, service="health")
        self.timeout = timeout or ProbeTimeoutConfig()
        self._clock = clock

    async def check_online(self, host: str, port: int, timeout_ms: int) -> OnlineCheckResult:
        """Probe (host, port) over TCP and TLS concurrently. Single pass, no retries."""
        with log_context(host=host, port=port):
            tcp, tls = await asyncio.gather(
                self.tcp_checker.check(host, port, timeout_ms),
                self.tls_checker.check(host, port, timeout_ms),
            )
            online = tcp.ok and tls.ok and tls.authorized is True
            self.logger.info(
                lambda: "online-check-done",
                extra={"host": host, "port": port, "online": online},
            )
        return OnlineCheckResult(
            online=online,
            host=host,
            port=port,
            timeout_ms=timeout_ms,
            tcp=tcp,
            tls=tls,
        )

    async def check_service(self, name: str, host: str, port: int) -> ServiceHealth:
        """Check one named service and describe it as healthy or unhealthy."""
        start = self._clock()
        try:
            result = await self.check_online(host, port, self.timeout.default_timeout_ms)
        except Exception as e:
            self.logger.error(lambda: "service-check-exception", extra={"host": host, "error": str(e)})
            return ServiceHealth(name=name, status=UNHEALTHY, message=str(e) or "Unknown error", last_checked=_now_iso())

        if result.online:
            return ServiceHealth(
                name=name,
                status=HEALTHY,
                message="Service is online and responding",
                latency_ms=int((self._clock() - start) * 1000.0),
                last_checked=_now_iso(),
            )
        return ServiceHealth(
            name=name,
            status=UNHEALTHY,
            message=result.tcp.error or result.tls.error or "Service is not responding",
            last_checked=_now_iso(),
        )

    async def check_services(self, services: List[Tuple[str, str]], port: int) -> HealthStatusReport:
        """Check (name, host) pairs concurrently and summarize them."""
        timestamp = _now_iso()
        results = await asyncio.gather(*(self.check_service(name, host, port) for name, host in services))
        report = HealthStatusReport(
            status=overall_status(results),
            timestamp=timestamp,
            uptime=round(time.monotonic() - _PROCESS_START, 3),
            services=list(results),
        )
        self.logger.info(lambda: f"health-status {report.status}", extra={"services": len(results)})
        return report

    @classmethod
    def default(cls, logger: Optional[StructuredLogger] = None) -> "HealthManager":
        timeout = ProbeTimeoutConfig.from_env()
        logger = logger or get_logger(__name__, service="health")
        return cls(
            TCPChecker(timeout=timeout, logger=logger),
            TLSChecker(timeout=timeout, logger=logger),
            logger,
            timeout=timeout,
        )


def service_targets(allowlist: HostAllowlist, *, redcap_host: str, internet_host: str) -> List[Tuple[str, str]]:
    """Named services to include in a status report, restricted to allowed hosts."""
    allowed = allowlist.allowed_hosts()
    targets: List[Tuple[str, str]] = []
    identity_host = allowlist.configured_hostname
    if identity_host and identity_host in allowed:
        targets.append(("Identity", identity_host))
    if redcap_host in allowed:
        targets.append(("REDCap", redcap_host))
    if internet_host in allowed:
        targets.append(("Internet", internet_host))
    return targets


async def check_online(host: str, port: int, timeout_ms: int) -> OnlineCheckResult:
    return await HealthManager.default().check_online(host, port, timeout_ms)

