"""
Shared pytest fixtures for vault-login tests.

This module provides common fixtures including:
- Throwaway certificate authorities and server certificates
- A local HTTPS server that plays the Vault login endpoint
- httpx MockTransport helpers for login tests without sockets
"""

import ipaddress
import json
import socket
import ssl
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Dict, List, Optional, Tuple

import httpx
import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import ExtendedKeyUsageOID, NameOID

SERVER_HOSTNAME = "vault.test"
LOGIN_SUCCESS_BODY = {"auth": {"client_token": "tok-A", "accessor": "acc-B"}}


# =============================================================================
# Certificate helpers
# =============================================================================

@dataclass
class CertificateAuthority:
    """A self-signed CA that can issue server certificates."""
    certificate: x509.Certificate
    key: ec.EllipticCurvePrivateKey

    @property
    def pem(self) -> str:
        return self.certificate.public_bytes(serialization.Encoding.PEM).decode("ascii")

    def issue_server_cert(self, hostnames: List[str], ips: List[str]) -> Tuple[bytes, bytes]:
        """Issue a server certificate, returning (cert_pem, key_pem)."""
        key = ec.generate_private_key(ec.SECP256R1())
        now = datetime.now(timezone.utc)
        san = [x509.DNSName(name) for name in hostnames]
        san += [x509.IPAddress(ipaddress.ip_address(ip)) for ip in ips]
        cert = (
            x509.CertificateBuilder()
            .subject_name(x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, hostnames[0])]))
            .issuer_name(self.certificate.subject)
            .public_key(key.public_key())
            .serial_number(x509.random_serial_number())
            .not_valid_before(now - timedelta(minutes=5))
            .not_valid_after(now + timedelta(days=1))
            .add_extension(x509.SubjectAlternativeName(san), critical=False)
            .add_extension(x509.BasicConstraints(ca=False, path_length=None), critical=True)
            .add_extension(
                x509.ExtendedKeyUsage([ExtendedKeyUsageOID.SERVER_AUTH]), critical=False
            )
            .add_extension(
                x509.AuthorityKeyIdentifier.from_issuer_public_key(self.key.public_key()),
                critical=False,
            )
            .sign(self.key, hashes.SHA256())
        )
        key_pem = key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )
        return cert.public_bytes(serialization.Encoding.PEM), key_pem


def make_ca(common_name: str) -> CertificateAuthority:
    """Create a self-signed certificate authority."""
    key = ec.generate_private_key(ec.SECP256R1())
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
    now = datetime.now(timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(minutes=5))
        .not_valid_after(now + timedelta(days=1))
        .add_extension(x509.BasicConstraints(ca=True, path_length=None), critical=True)
        .add_extension(
            x509.KeyUsage(
                digital_signature=True,
                content_commitment=False,
                key_encipherment=False,
                data_encipherment=False,
                key_agreement=False,
                key_cert_sign=True,
                crl_sign=True,
                encipher_only=False,
                decipher_only=False,
            ),
            critical=True,
        )
        .add_extension(x509.SubjectKeyIdentifier.from_public_key(key.public_key()), critical=False)
        .sign(key, hashes.SHA256())
    )
    return CertificateAuthority(certificate=cert, key=key)


@pytest.fixture(scope="session")
def vault_ca():
    """CA that signs the test Vault server certificate."""
    return make_ca("vault-login test CA")


@pytest.fixture(scope="session")
def other_ca():
    """CA unrelated to the test Vault server."""
    return make_ca("unrelated CA")


# =============================================================================
# Local HTTPS Vault
# =============================================================================

class _LoginHandler(BaseHTTPRequestHandler):
    protocol_version = "HTTP/1.1"

    def do_POST(self):
        length = int(self.headers.get("Content-Length", 0))
        body = self.rfile.read(length)
        self.server.requests.append({
            "path": self.path,
            "content_type": self.headers.get("Content-Type"),
            "body": body,
            "alpn": self.connection.selected_alpn_protocol(),
        })

        payload = self.server.response_body
        self.send_response(self.server.response_status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(payload)))
        self.end_headers()
        self.wfile.write(payload)

    def log_message(self, format, *args):
        pass


class _VaultServer(ThreadingHTTPServer):
    daemon_threads = True

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.requests: List[Dict[str, Any]] = []
        self.response_status = 200
        self.response_body = json.dumps(LOGIN_SUCCESS_BODY).encode("utf-8")

    def respond_with(self, status: int, body) -> None:
        """Set the canned response for subsequent requests."""
        if isinstance(body, (dict, list)):
            body = json.dumps(body)
        if isinstance(body, str):
            body = body.encode("utf-8")
        self.response_status = status
        self.response_body = body

    @property
    def address(self) -> str:
        host, port = self.server_address[:2]
        return f"https://{host}:{port}"


def _server_context(ca: CertificateAuthority, tmp_path, alpn_protocols: List[str]) -> ssl.SSLContext:
    cert_pem, key_pem = ca.issue_server_cert([SERVER_HOSTNAME], ["127.0.0.1"])
    cert_file = tmp_path / "server.crt"
    key_file = tmp_path / "server.key"
    cert_file.write_bytes(cert_pem)
    key_file.write_bytes(key_pem)

    context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
    context.load_cert_chain(str(cert_file), str(key_file))
    context.set_alpn_protocols(alpn_protocols)
    return context


@pytest.fixture
def vault_server(vault_ca, tmp_path):
    """
    HTTPS server on 127.0.0.1 answering Vault logins.

    Its certificate is signed by ``vault_ca`` and valid for
    ``vault.test`` and ``127.0.0.1``. It speaks HTTP/1.1 only.
    """
    context = _server_context(vault_ca, tmp_path, ["http/1.1"])

    server = _VaultServer(("127.0.0.1", 0), _LoginHandler)
    server.socket = context.wrap_socket(server.socket, server_side=True)

    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield server
    finally:
        server.shutdown()
        server.server_close()
        thread.join(timeout=5)


@dataclass
class ALPNServer:
    """TLS listener that records the negotiated ALPN protocol and hangs up."""
    address: str
    negotiated: List[Optional[str]]
    done: threading.Event


@pytest.fixture
def h2_server(vault_ca, tmp_path):
    """
    TLS server on 127.0.0.1 preferring HTTP/2.

    It completes one handshake, records the protocol the client agreed to
    and closes the connection without answering.
    """
    context = _server_context(vault_ca, tmp_path, ["h2", "http/1.1"])
    listener = socket.create_server(("127.0.0.1", 0))
    listener.settimeout(10)
    negotiated: List[Optional[str]] = []
    done = threading.Event()

    def serve():
        try:
            conn, _ = listener.accept()
            with context.wrap_socket(conn, server_side=True) as tls_conn:
                negotiated.append(tls_conn.selected_alpn_protocol())
        except OSError:
            pass
        finally:
            done.set()

    thread = threading.Thread(target=serve, daemon=True)
    thread.start()
    host, port = listener.getsockname()[:2]
    try:
        yield ALPNServer(address=f"https://{host}:{port}", negotiated=negotiated, done=done)
    finally:
        listener.close()
        thread.join(timeout=5)


# =============================================================================
# MockTransport helpers
# =============================================================================

class TrackingStream(httpx.SyncByteStream):
    """Response stream that records whether it was closed."""

    def __init__(self, content: bytes):
        self.content = content
        self.closed = False

    def __iter__(self):
        yield self.content

    def close(self):
        self.closed = True


@dataclass
class RecordingVault:
    """Canned Vault responses for httpx.MockTransport."""
    status: int = 200
    body: Any = field(default_factory=lambda: dict(LOGIN_SUCCESS_BODY))
    requests: List[httpx.Request] = field(default_factory=list)
    streams: List[TrackingStream] = field(default_factory=list)

    def handler(self, request: httpx.Request) -> httpx.Response:
        request.read()
        self.requests.append(request)

        body = self.body
        if isinstance(body, (dict, list)):
            body = json.dumps(body)
        if isinstance(body, str):
            body = body.encode("utf-8")

        stream = TrackingStream(body)
        self.streams.append(stream)
        return httpx.Response(self.status, stream=stream)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def recording_vault():
    """Mock Vault returning a successful login by default."""
    return RecordingVault()
