"""
Tests for the TLS handshake check.
"""
import asyncio
import hashlib
import re
import ssl
from contextlib import asynccontextmanager

import pytest
import trustme

from application.services.health import HealthManager, TCPChecker, TLSChecker
from application.services.health.tls_checker import certificate_info, format_fingerprint, strict_context
from tests.conftest import FakeSSLObject, FakeWriter, GOOGLE_PEER


def connector_for(writer, seen=None):
    async def connect(host, port, **kwargs):
        if seen is not None:
            seen.update(kwargs, host=host, port=port)
        return None, writer
    return connect


@asynccontextmanager
async def tls_server(server_cert, alpn=("http/1.1",)):
    """Local TLS listener on 127.0.0.1 presenting ``server_cert``; yields its port."""
    ctx = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
    server_cert.configure_cert(ctx)
    ctx.set_alpn_protocols(list(alpn))

    async def handle(reader, writer):
        writer.close()

    server = await asyncio.start_server(handle, "127.0.0.1", 0, ssl=ctx)
    try:
        yield server.sockets[0].getsockname()[1]
    finally:
        server.close()
        await server.wait_closed()


class TestStrictContext:

    def test_verification_cannot_be_relaxed(self):
        ctx = strict_context()
        assert ctx.verify_mode == ssl.CERT_REQUIRED
        assert ctx.check_hostname is True

    def test_custom_roots_keep_verification_on(self):
        ca = trustme.CA()
        ctx = strict_context(cadata=ca.cert_pem.bytes().decode())
        assert ctx.verify_mode == ssl.CERT_REQUIRED
        assert ctx.check_hostname is True
        assert ctx.cert_store_stats()["x509_ca"] == 1


class TestCertificateInfo:

    def test_extracts_common_names_and_validity(self):
        info = certificate_info(GOOGLE_PEER, b"der")
        assert info.subject_cn == "www.google.com"
        assert info.issuer_cn == "WR2"
        assert info.valid_from == "Sep  8 08:36:33 2026 GMT"
        assert info.valid_to == "Dec  1 08:36:32 2026 GMT"

    def test_missing_fields_default_to_empty_string(self):
        info = certificate_info({"subject": ((("organizationName", "ACME"),),)}, None)
        assert info.subject_cn == ""
        assert info.issuer_cn == ""
        assert info.valid_from == ""
        assert info.valid_to == ""
        assert info.fingerprint256 == ""

    def test_fingerprint_is_colon_separated_sha256(self):
        fp = format_fingerprint(b"fake-der-certificate")
        assert re.fullmatch(r"([0-9A-F]{2}:){31}[0-9A-F]{2}", fp)
        assert fp.replace(":", "").lower() == hashlib.sha256(b"fake-der-certificate").hexdigest()


class TestTLSChecker:

    @pytest.mark.asyncio
    async def test_authorized_handshake_reports_certificate(self):
        writer = FakeWriter({"ssl_object": FakeSSLObject(peer=GOOGLE_PEER)})
        seen = {}
        result = await TLSChecker(connector=connector_for(writer, seen)).check("www.google.com", 443, 1000)

        assert result.ok is True
        assert result.authorized is True
        assert result.protocol == "TLSv1.3"
        assert result.alpn_protocol == "h2"
        assert result.cert is not None
        assert result.cert.subject_cn == "www.google.com"
        assert result.cert.fingerprint256 == format_fingerprint(b"fake-der-certificate")
        assert isinstance(result.latency_ms, int)
        assert result.error is None
        assert writer.closed is True

        assert seen["server_hostname"] == "www.google.com"
        assert seen["ssl"].verify_mode == ssl.CERT_REQUIRED
        assert seen["ssl"].check_hostname is True

    @pytest.mark.asyncio
    async def test_no_peer_certificate_means_unauthorized_without_cert(self):
        writer = FakeWriter({"ssl_object": FakeSSLObject(peer={})})
        result = await TLSChecker(connector=connector_for(writer)).check("www.google.com", 443, 1000)

        assert result.ok is True
        assert result.authorized is False
        assert result.cert is None
        assert "cert" not in result.to_dict()

    @pytest.mark.asyncio
    async def test_missing_alpn_and_protocol_are_omitted(self):
        writer = FakeWriter({"ssl_object": FakeSSLObject(peer=GOOGLE_PEER, alpn=None, version=None)})
        result = await TLSChecker(connector=connector_for(writer)).check("www.google.com", 443, 1000)

        payload = result.to_dict()
        assert "alpnProtocol" not in payload
        assert "protocol" not in payload
        assert payload["authorized"] is True

    @pytest.mark.asyncio
    async def test_certificate_extraction_failure_omits_cert_only(self):
        ssl_object = FakeSSLObject(peer=GOOGLE_PEER, der_error=ValueError("bad DER"))
        writer = FakeWriter({"ssl_object": ssl_object})
        result = await TLSChecker(connector=connector_for(writer)).check("www.google.com", 443, 1000)

        assert result.ok is True
        assert result.authorized is True
        assert result.cert is None

    @pytest.mark.asyncio
    async def test_verification_failure_is_not_ok_and_not_authorized(self):
        async def untrusted(host, port, **kwargs):
            err = ssl.SSLCertVerificationError(1, "[SSL: CERTIFICATE_VERIFY_FAILED] certificate verify failed: self-signed certificate")
            raise err

        result = await TLSChecker(connector=untrusted).check("self-signed.badssl.com", 443, 1000)
        assert result.ok is False
        assert result.authorized is False
        assert result.cert is None
        assert "CERTIFICATE_VERIFY_FAILED" in result.error

    @pytest.mark.asyncio
    async def test_timeout_returns_timeout_error(self):
        cancelled = []

        async def hang(host, port, **kwargs):
            try:
                await asyncio.sleep(1)
            except asyncio.CancelledError:
                cancelled.append(True)
                raise

        result = await TLSChecker(connector=hang).check("www.google.com", 443, 50)
        assert result.ok is False
        assert result.authorized is False
        assert result.error == "TLS connection timeout"
        assert cancelled == [True]

    @pytest.mark.asyncio
    async def test_handshake_completing_during_cancellation_is_closed(self):
        writer = FakeWriter({"ssl_object": FakeSSLObject(peer=GOOGLE_PEER)})

        async def finishes_anyway(host, port, **kwargs):
            try:
                await asyncio.sleep(5)
            except asyncio.CancelledError:
                pass
            return None, writer

        result = await TLSChecker(connector=finishes_anyway).check("www.google.com", 443, 50)
        assert result.ok is False
        assert result.authorized is False
        assert result.cert is None
        assert result.error == "TLS connection timeout"
        assert writer.closed is True

    @pytest.mark.asyncio
    async def test_handshake_against_plain_tcp_server_fails(self):
        async def handle(reader, writer):
            writer.write(b"HTTP/1.1 400 Bad Request\r\n\r\n")
            await writer.drain()
            writer.close()

        server = await asyncio.start_server(handle, "127.0.0.1", 0)
        port = server.sockets[0].getsockname()[1]
        try:
            result = await TLSChecker().check("127.0.0.1", port, 2000)
        finally:
            server.close()
            await server.wait_closed()

        assert result.ok is False
        assert result.authorized is False
        assert result.error


class TestTLSAgainstLocalServer:

    @pytest.mark.asyncio
    async def test_untrusted_certificate_is_not_online(self):
        ca = trustme.CA()
        server_cert = ca.issue_cert("127.0.0.1", common_name="127.0.0.1")

        async with tls_server(server_cert) as port:
            manager = HealthManager(TCPChecker(), TLSChecker())
            result = await manager.check_online("127.0.0.1", port, 2000)

        assert result.online is False
        assert result.tcp.ok is True
        assert result.tls.ok is False
        assert result.tls.authorized is False
        assert result.tls.cert is None
        assert "CERTIFICATE_VERIFY_FAILED" in result.tls.error

    @pytest.mark.asyncio
    async def test_trusted_certificate_is_authorized_with_details(self):
        ca = trustme.CA()
        server_cert = ca.issue_cert("127.0.0.1", common_name="127.0.0.1")
        der = ssl.PEM_cert_to_DER_cert(server_cert.cert_chain_pems[0].bytes().decode())

        async with tls_server(server_cert) as port:
            checker = TLSChecker(cadata=ca.cert_pem.bytes().decode())
            result = await checker.check("127.0.0.1", port, 2000)

        assert result.ok is True
        assert result.authorized is True
        assert result.error is None
        assert result.protocol in ("TLSv1.2", "TLSv1.3")
        assert result.alpn_protocol == "http/1.1"
        assert result.cert is not None
        assert result.cert.subject_cn == "127.0.0.1"
        assert result.cert.valid_from.endswith("GMT")
        assert result.cert.fingerprint256 == format_fingerprint(der)

    @pytest.mark.asyncio
    async def test_hostname_mismatch_fails_even_with_trusted_root(self):
        ca = trustme.CA()
        server_cert = ca.issue_cert("other.example.org")

        async with tls_server(server_cert) as port:
            checker = TLSChecker(cadata=ca.cert_pem.bytes().decode())
            result = await checker.check("127.0.0.1", port, 2000)

        assert result.ok is False
        assert result.authorized is False
        assert "CERTIFICATE_VERIFY_FAILED" in result.error
