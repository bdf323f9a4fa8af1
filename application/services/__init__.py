"""Application services root exports."""
from .health import HealthManager, HostAllowlist, TCPChecker, TLSChecker

__all__ = [
    "HealthManager",
    "HostAllowlist",
    "TCPChecker",
    "TLSChecker",
]
