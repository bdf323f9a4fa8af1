"""Use case behind the online check: validate, gate, probe, build the envelope."""
from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

from application.services.health import (
    HealthManager,
    HealthRequestError,
    HostAllowlist,
    HostNotAllowedError,
    InvalidParametersError,
    PortNotAllowedError,
    ProbeTarget,
    ProbeTimeoutConfig,
)
from config import settings
from core.logging.logger import get_logger

Envelope = Dict[str, Any]
Response = Tuple[int, Envelope]


def _parse_int(value: Optional[str]) -> Optional[int]:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


class CheckOnlineUseCase:
    """Checks one allowlisted host on the single permitted port."""

    def __init__(
        self,
        manager: HealthManager,
        allowlist: HostAllowlist,
        *,
        timeout: Optional[ProbeTimeoutConfig] = None,
        allowed_port: int = settings.HEALTH_ALLOWED_PORT,
    ) -> None:
        self.manager = manager
        self.allowlist = allowlist
        self.timeout = timeout or ProbeTimeoutConfig()
        self.allowed_port = allowed_port
        self._log = get_logger(__name__, service="health")

    def parse(self, host: Optional[str], port: Optional[str], timeout_ms: Optional[str] = None) -> ProbeTarget:
        """Turn raw query values into a ProbeTarget, gating port and host."""
        errors: Dict[str, str] = {}
        if not host:
            errors["host"] = "host must be a non-empty string"

        port_num = None
        if not port:
            errors["port"] = "port is required"
        else:
            port_num = _parse_int(port)
            if port_num is None:
                errors["port"] = "port must be an integer"

        timeout_num = self.timeout.default_timeout_ms
        if timeout_ms:
            parsed = _parse_int(timeout_ms)
            if parsed is None or not self.timeout.accepts(parsed):
                errors["timeoutMs"] = (
                    f"timeoutMs must be between {self.timeout.min_timeout_ms} and {self.timeout.max_timeout_ms}"
                )
            else:
                timeout_num = parsed

        if errors:
            raise InvalidParametersError("Invalid query parameters", details=errors)
        if port_num != self.allowed_port:
            raise PortNotAllowedError(f"Only port {self.allowed_port} is allowed")
        if not self.allowlist.is_allowed(host):
            raise HostNotAllowedError(f"Host '{host}' is not in the allowlist")
        return ProbeTarget(host=host, port=port_num, timeout_ms=timeout_num)

    async def execute(self, host: Optional[str], port: Optional[str], timeout_ms: Optional[str] = None) -> Response:
        try:
            target = self.parse(host, port, timeout_ms)
        except HealthRequestError as e:
            self._log.warning(lambda: f"online-check-rejected {e.code}", extra={"host": host, "port": port})
            return 400, {"data": None, "error": e.to_dict()}

        result = await self.manager.check_online(target.host, target.port, target.timeout_ms)
        if result.online:
            return 200, {"data": result.to_dict(), "error": None}
        return 503, {
            "data": result.to_dict(),
            "error": {"code": "offline", "message": f"Host '{target.host}' is offline or unreachable"},
        }
