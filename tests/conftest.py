"""
Shared fixtures and fakes for the health check tests.
"""
import asyncio
import logging
from typing import Any, Dict, Optional

import pytest

from application.services.health import HostAllowlist, TcpCheckResult, TlsCheckResult, CertificateInfo

logging.getLogger().setLevel(logging.DEBUG)

STATIC_HOSTS = ("www.google.com", "redcap.univ-lehavre.fr")


class FakeTransport:
    def __init__(self) -> None:
        self.aborted = False

    def abort(self) -> None:
        self.aborted = True


class FakeWriter:
    """Stand-in for asyncio.StreamWriter; records whether it was closed."""

    def __init__(self, extra: Optional[Dict[str, Any]] = None) -> None:
        self._extra = extra or {}
        self.closed = False
        self.transport = FakeTransport()

    def get_extra_info(self, name: str, default: Any = None) -> Any:
        return self._extra.get(name, default)

    def close(self) -> None:
        self.closed = True

    async def wait_closed(self) -> None:
        return None


class FakeSSLObject:
    def __init__(
        self,
        peer: Optional[Dict[str, Any]] = None,
        der: Optional[bytes] = b"fake-der-certificate",
        version: Optional[str] = "TLSv1.3",
        alpn: Optional[str] = "h2",
        der_error: Optional[Exception] = None,
    ) -> None:
        self._peer = peer
        self._der = der
        self._version = version
        self._alpn = alpn
        self._der_error = der_error

    def getpeercert(self, binary_form: bool = False) -> Any:
        if binary_form:
            if self._der_error:
                raise self._der_error
            return self._der
        return self._peer

    def version(self) -> Optional[str]:
        return self._version

    def selected_alpn_protocol(self) -> Optional[str]:
        return self._alpn


GOOGLE_PEER = {
    "subject": ((("commonName", "www.google.com"),),),
    "issuer": (
        (("countryName", "US"),),
        (("organizationName", "Google Trust Services"),),
        (("commonName", "WR2"),),
    ),
    "notBefore": "Sep  8 08:36:33 2026 GMT",
    "notAfter": "Dec  1 08:36:32 2026 GMT",
}


class StubChecker:
    """Checker returning a canned result and recording the calls it received."""

    def __init__(self, result: Any) -> None:
        self.result = result
        self.calls = []

    async def check(self, host: str, port: int, timeout_ms: int) -> Any:
        self.calls.append((host, port, timeout_ms))
        await asyncio.sleep(0)
        return self.result


TCP_OK = TcpCheckResult(ok=True, latency_ms=12)
TCP_FAIL = TcpCheckResult(ok=False, error="Connection refused")
TLS_OK = TlsCheckResult(
    ok=True,
    authorized=True,
    latency_ms=40,
    protocol="TLSv1.3",
    alpn_protocol="h2",
    cert=CertificateInfo("www.google.com", "WR2", "Sep  8 08:36:33 2026 GMT", "Dec  1 08:36:32 2026 GMT", "AB:CD"),
)
TLS_UNAUTHORIZED = TlsCheckResult(ok=True, authorized=False, latency_ms=40, protocol="TLSv1.3")
TLS_FAIL = TlsCheckResult(ok=False, authorized=False, error="TLS connection timeout")


@pytest.fixture
def allowlist():
    return HostAllowlist(STATIC_HOSTS, "https://auth.example.org/v1")


@pytest.fixture
def bare_allowlist():
    return HostAllowlist(STATIC_HOSTS, None)
