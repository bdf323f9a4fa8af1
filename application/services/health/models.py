from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional


def _compact(payload: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in payload.items() if v is not None}


@dataclass(frozen=True, slots=True)
class ProbeTarget:
    """A single (host, port) probe with its timeout budget."""
    host: str
    port: int
    timeout_ms: int


@dataclass(frozen=True, slots=True)
class TcpCheckResult:
    """TCP connect outcome."""
    ok: bool
    latency_ms: Optional[int] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact({"ok": self.ok, "latencyMs": self.latency_ms, "error": self.error})


@dataclass(frozen=True, slots=True)
class CertificateInfo:
    """Summary of the peer certificate of an authorized TLS session."""
    subject_cn: str = ""
    issuer_cn: str = ""
    valid_from: str = ""
    valid_to: str = ""
    fingerprint256: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "subjectCN": self.subject_cn,
            "issuerCN": self.issuer_cn,
            "validFrom": self.valid_from,
            "validTo": self.valid_to,
            "fingerprint256": self.fingerprint256,
        }


@dataclass(frozen=True, slots=True)
class TlsCheckResult:
    """TLS handshake outcome.

    ``ok`` means the handshake completed. ``authorized`` means the chain and
    hostname were verified; it is always False when ``ok`` is False.
    """
    ok: bool
    authorized: bool = False
    latency_ms: Optional[int] = None
    protocol: Optional[str] = None
    alpn_protocol: Optional[str] = None
    cert: Optional[CertificateInfo] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact(
            {
                "ok": self.ok,
                "latencyMs": self.latency_ms,
                "authorized": self.authorized,
                "protocol": self.protocol,
                "alpnProtocol": self.alpn_protocol,
                "cert": self.cert.to_dict() if self.cert else None,
                "error": self.error,
            }
        )


@dataclass(frozen=True, slots=True)
class OnlineCheckResult:
    """Aggregated TCP + TLS verdict for one target."""
    online: bool
    host: str
    port: int
    timeout_ms: int
    tcp: TcpCheckResult
    tls: TlsCheckResult

    def to_dict(self) -> Dict[str, Any]:
        return {
            "online": self.online,
            "host": self.host,
            "port": self.port,
            "timeoutMs": self.timeout_ms,
            "tcp": self.tcp.to_dict(),
            "tls": self.tls.to_dict(),
        }


@dataclass(frozen=True, slots=True)
class ServiceHealth:
    """Health of one named upstream service."""
    name: str
    status: str
    last_checked: str
    message: Optional[str] = None
    latency_ms: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact(
            {
                "name": self.name,
                "status": self.status,
                "message": self.message,
                "latencyMs": self.latency_ms,
                "lastChecked": self.last_checked,
            }
        )


@dataclass(frozen=True, slots=True)
class HealthStatusReport:
    """Overall status across all checked services."""
    status: str
    timestamp: str
    uptime: float
    services: List[ServiceHealth]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "timestamp": self.timestamp,
            "uptime": self.uptime,
            "services": [s.to_dict() for s in self.services],
        }
