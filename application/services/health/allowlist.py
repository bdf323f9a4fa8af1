"""Anti-SSRF allowlist of hosts the health checks may connect to."""
from __future__ import annotations

from typing import Iterable, List, Optional

import httpx

from config import settings


def resolve_configured_hostname(endpoint_url: Optional[str]) -> Optional[str]:
    """Return the hostname of ``endpoint_url``, or None when absent or unparseable."""
    if not endpoint_url:
        return None
    try:
        url = httpx.URL(endpoint_url)
    except (httpx.InvalidURL, TypeError, ValueError):
        return None
    # httpx accepts scheme-less input as a relative URL with an empty host
    if not url.is_absolute_url or not url.host:
        return None
    return url.host


class HostAllowlist:
    """Fixed set of probe targets: static hosts plus the configured endpoint host.

    Matching is exact and case-sensitive. No wildcards, no subdomains.
    """

    def __init__(self, static_hosts: Iterable[str], endpoint_url: Optional[str] = None) -> None:
        self._static_hosts = tuple(static_hosts)
        self._endpoint_url = endpoint_url

    @property
    def configured_hostname(self) -> Optional[str]:
        return resolve_configured_hostname(self._endpoint_url)

    def allowed_hosts(self) -> List[str]:
        hosts: List[str] = []
        for h in (*self._static_hosts, self.configured_hostname):
            if h and h not in hosts:
                hosts.append(h)
        return hosts

    def is_allowed(self, host: str) -> bool:
        return host in self.allowed_hosts()

    @classmethod
    def from_settings(cls) -> "HostAllowlist":
        return cls(settings.HEALTH_STATIC_HOSTS, settings.AUTH_ENDPOINT)


def get_allowed_hosts() -> List[str]:
    return HostAllowlist.from_settings().allowed_hosts()


def is_host_allowed(host: str) -> bool:
    return HostAllowlist.from_settings().is_allowed(host)
