from __future__ import annotations

import asyncio
import hashlib
import ssl
import time
from typing import Any, Dict, Optional, Sequence

from core.logging.logger import StructuredLogger, get_logger
from .models import CertificateInfo, TlsCheckResult
from .tcp_checker import Connector, close_writer, open_within
from .timeout_config import ProbeTimeoutConfig

ALPN_PROTOCOLS = ("h2", "http/1.1")


def strict_context(
    alpn_protocols: Sequence[str] = ALPN_PROTOCOLS, cadata: Optional[str] = None
) -> ssl.SSLContext:
    """Client context with chain and hostname verification always on.

    ``cadata`` replaces the system trust store with the given PEM roots.
    """
    ctx = ssl.create_default_context(ssl.Purpose.SERVER_AUTH, cadata=cadata)
    ctx.verify_mode = ssl.CERT_REQUIRED
    ctx.check_hostname = True
    if alpn_protocols:
        ctx.set_alpn_protocols(list(alpn_protocols))
    return ctx


def _name_field(name: Any, field: str) -> str:
    # getpeercert() encodes names as a tuple of RDNs, each a tuple of (key, value) pairs
    for rdn in name or ():
        for key, value in rdn:
            if key == field:
                return str(value)
    return ""


def format_fingerprint(der: bytes) -> str:
    digest = hashlib.sha256(der).hexdigest().upper()
    return ":".join(digest[i:i + 2] for i in range(0, len(digest), 2))


def certificate_info(peer: Dict[str, Any], der: Optional[bytes]) -> CertificateInfo:
    """Summarize a decoded peer certificate, defaulting absent fields to ''."""
    return CertificateInfo(
        subject_cn=_name_field(peer.get("subject"), "commonName"),
        issuer_cn=_name_field(peer.get("issuer"), "commonName"),
        valid_from=str(peer.get("notBefore") or ""),
        valid_to=str(peer.get("notAfter") or ""),
        fingerprint256=format_fingerprint(der) if der else "",
    )


class TLSChecker:
    """TLS handshake probe with strict certificate validation (SNI = host)."""

    def __init__(
        self,
        timeout: Optional[ProbeTimeoutConfig] = None,
        logger: Optional[StructuredLogger] = None,
        *,
        connector: Optional[Connector] = None,
        alpn_protocols: Sequence[str] = ALPN_PROTOCOLS,
        cadata: Optional[str] = None,
    ) -> None:
        self.timeout = timeout or ProbeTimeoutConfig()
        self.logger = logger or get_logger(__name__, service="health")
        self._connect: Connector = connector or asyncio.open_connection
        self._alpn_protocols = tuple(alpn_protocols)
        self._cadata = cadata

    async def check(self, host: str, port: int, timeout_ms: int) -> TlsCheckResult:
        start = time.perf_counter()
        extra: dict[str, Any] = {"host": host, "port": port}
        self.logger.info(lambda: "tls-check-start", extra=dict(extra))
        ctx = strict_context(self._alpn_protocols, self._cadata)
        try:
            writer = await open_within(
                self._connect(host, port, ssl=ctx, server_hostname=host),
                timeout_ms,
                self.timeout.close_timeout_ms,
            )
        except TimeoutError:
            self.logger.error(lambda: "tls-timeout", extra={**extra, "error": "timeout"})
            return TlsCheckResult(ok=False, authorized=False, error="TLS connection timeout")
        except Exception as e:
            # certificate and hostname verification failures surface here as ssl.SSLError
            self.logger.error(lambda: "tls-error", extra={**extra, "error": str(e)})
            return TlsCheckResult(ok=False, authorized=False, error=str(e) or type(e).__name__)

        latency_ms = int((time.perf_counter() - start) * 1000.0)
        try:
            result = self._inspect(writer.get_extra_info("ssl_object"), latency_ms, extra)
        except Exception as e:
            self.logger.error(lambda: "tls-inspect-failed", extra={**extra, "error": str(e)})
            result = TlsCheckResult(ok=False, authorized=False, error=str(e) or type(e).__name__)
        finally:
            await close_writer(writer, self.timeout.close_timeout_ms)
        self.logger.success(
            lambda: "tls-check-ok" if result.authorized else "tls-check-unauthorized",
            extra={**extra, "latency": latency_ms, "protocol": result.protocol},
        )
        return result

    def _inspect(
        self,
        ssl_object: Optional[ssl.SSLObject],
        latency_ms: int,
        extra: Dict[str, Any],
    ) -> TlsCheckResult:
        if ssl_object is None:
            return TlsCheckResult(ok=True, authorized=False, latency_ms=latency_ms)

        peer = ssl_object.getpeercert() or {}
        # the context is always CERT_REQUIRED, so a completed handshake means the chain verified;
        # getpeercert() is empty only when no certificate was exposed
        authorized = bool(peer)
        alpn = ssl_object.selected_alpn_protocol()

        cert: Optional[CertificateInfo] = None
        if authorized:
            try:
                cert = certificate_info(peer, ssl_object.getpeercert(binary_form=True))
            except Exception as e:
                self.logger.warning(lambda: "tls-cert-info-failed", extra={**extra, "error": str(e)})

        return TlsCheckResult(
            ok=True,
            authorized=authorized,
            latency_ms=latency_ms,
            protocol=ssl_object.version() or None,
            alpn_protocol=alpn if isinstance(alpn, str) and alpn else None,
            cert=cert,
        )


async def check_tls_connection(host: str, port: int, timeout_ms: int) -> TlsCheckResult:
    return await TLSChecker().check(host, port, timeout_ms)
