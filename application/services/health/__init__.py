from .models import (
    CertificateInfo,
    HealthStatusReport,
    OnlineCheckResult,
    ProbeTarget,
    ServiceHealth,
    TcpCheckResult,
    TlsCheckResult,
)
from .timeout_config import ProbeTimeoutConfig
from .allowlist import HostAllowlist, get_allowed_hosts, is_host_allowed, resolve_configured_hostname
from .tcp_checker import TCPChecker, check_tcp_connection
from .tls_checker import TLSChecker, check_tls_connection
from .health_manager import HealthManager, check_online
from .errors import HealthRequestError, HostNotAllowedError, InvalidParametersError, PortNotAllowedError

__all__ = [
    "CertificateInfo",
    "HealthStatusReport",
    "OnlineCheckResult",
    "ProbeTarget",
    "ServiceHealth",
    "TcpCheckResult",
    "TlsCheckResult",
    "ProbeTimeoutConfig",
    "HostAllowlist",
    "get_allowed_hosts",
    "is_host_allowed",
    "resolve_configured_hostname",
    "TCPChecker",
    "check_tcp_connection",
    "TLSChecker",
    "check_tls_connection",
    "HealthManager",
    "check_online",
    "HealthRequestError",
    "HostNotAllowedError",
    "InvalidParametersError",
    "PortNotAllowedError",
]
