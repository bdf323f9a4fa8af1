from __future__ import annotations

import asyncio
import time
from typing import Any, Awaitable, Callable, Optional, Tuple

from core.logging.logger import StructuredLogger, get_logger
from .models import TcpCheckResult
from .timeout_config import ProbeTimeoutConfig

Connector = Callable[..., Awaitable[Tuple[asyncio.StreamReader, asyncio.StreamWriter]]]


async def close_writer(writer: asyncio.StreamWriter, timeout_ms: int) -> None:
    """Close a stream and wait briefly for the transport to go away."""
    writer.close()
    try:
        async with asyncio.timeout(timeout_ms / 1000.0):
            await writer.wait_closed()
    except (TimeoutError, OSError):
        # TLS peers may never answer close_notify; the transport is aborted anyway
        writer.transport.abort()


async def open_within(
    opening: Awaitable[Tuple[asyncio.StreamReader, asyncio.StreamWriter]],
    timeout_ms: int,
    close_timeout_ms: int,
) -> asyncio.StreamWriter:
    """Await a connection, raising TimeoutError once ``timeout_ms`` has passed.

    The pending connect is cancelled on expiry. A connection that still
    completes while that cancellation is in flight is closed, never returned.
    """
    async with asyncio.timeout(timeout_ms / 1000.0) as deadline:
        _, writer = await opening
    if deadline.expired():
        await close_writer(writer, close_timeout_ms)
        raise TimeoutError
    return writer


class TCPChecker:
    """TCP connect probe."""

    def __init__(
        self,
        timeout: Optional[ProbeTimeoutConfig] = None,
        logger: Optional[StructuredLogger] = None,
        *,
        connector: Optional[Connector] = None,
    ) -> None:
        """Initialize TCP checker with timeouts, logger and connection factory."""
        self.timeout = timeout or ProbeTimeoutConfig()
        self.logger = logger or get_logger(__name__, service="health")
        self._connect: Connector = connector or asyncio.open_connection

    async def check(self, host: str, port: int, timeout_ms: int) -> TcpCheckResult:
        """Open one connection to (host, port) and measure connect latency."""
        start = time.perf_counter()
        extra: dict[str, Any] = {"host": host, "port": port}
        self.logger.info(lambda: "tcp-check-start", extra=dict(extra))
        try:
            writer = await open_within(self._connect(host, port), timeout_ms, self.timeout.close_timeout_ms)
        except TimeoutError:
            self.logger.error(lambda: "tcp-timeout", extra={**extra, "error": "timeout"})
            return TcpCheckResult(ok=False, error="TCP connection timeout")
        except OSError as e:
            self.logger.error(lambda: "tcp-error", extra={**extra, "error": str(e)})
            return TcpCheckResult(ok=False, error=str(e) or type(e).__name__)
        except Exception as e:
            self.logger.error(lambda: "tcp-exception", extra={**extra, "error": str(e)})
            return TcpCheckResult(ok=False, error=str(e) or type(e).__name__)

        latency_ms = int((time.perf_counter() - start) * 1000.0)
        await close_writer(writer, self.timeout.close_timeout_ms)
        self.logger.success(lambda: "tcp-check-ok", extra={**extra, "latency": latency_ms})
        return TcpCheckResult(ok=True, latency_ms=latency_ms)


async def check_tcp_connection(host: str, port: int, timeout_ms: int) -> TcpCheckResult:
    return await TCPChecker().check(host, port, timeout_ms)
