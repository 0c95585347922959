# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_jwt_bearer

import socket
from unittest.mock import MagicMock, patch

import httpx
import pytest

from coreason_jwt_bearer.exceptions import SecurityError
from coreason_jwt_bearer.transport import SafeHTTPTransport


@pytest.fixture
def transport() -> SafeHTTPTransport:
    return SafeHTTPTransport()


def test_transport_allows_public_dns(transport: SafeHTTPTransport) -> None:
    """
    The transport resolves a public DNS name and pins the connection,
    preserving the Host header and SNI.
    """
    request = httpx.Request("POST", "https://login.example.com/services/oauth2/token")

    with patch("socket.getaddrinfo") as mock_getaddrinfo:
        mock_getaddrinfo.return_value = [(socket.AF_INET, socket.SOCK_STREAM, 6, "", ("93.184.216.34", 0))]

        with patch("httpx.HTTPTransport.handle_request") as mock_super_handle:
            mock_super_handle.return_value = httpx.Response(200)

            response = transport.handle_request(request)

    assert response.status_code == 200
    modified_request = mock_super_handle.call_args[0][0]
    assert str(modified_request.url) == "https://93.184.216.34/services/oauth2/token"
    assert modified_request.headers["Host"] == "login.example.com"
    assert modified_request.extensions["sni_hostname"] == "login.example.com"


def test_transport_preserves_explicit_port_in_host(transport: SafeHTTPTransport) -> None:
    request = httpx.Request("POST", "https://login.example.com:8443/token")
    # Drop the Host header httpx adds so the transport must derive it
    del request.headers["Host"]

    with patch("socket.getaddrinfo") as mock_getaddrinfo:
        mock_getaddrinfo.return_value = [(socket.AF_INET, socket.SOCK_STREAM, 6, "", ("93.184.216.34", 0))]
        with patch("httpx.HTTPTransport.handle_request", return_value=httpx.Response(200)) as mock_super_handle:
            transport.handle_request(request)

    modified_request = mock_super_handle.call_args[0][0]
    assert modified_request.headers["Host"] == "login.example.com:8443"
    assert modified_request.url.port == 8443


def test_transport_blocks_private_dns(transport: SafeHTTPTransport) -> None:
    request = httpx.Request("POST", "https://internal.corp/token")

    with patch("socket.getaddrinfo") as mock_getaddrinfo:
        mock_getaddrinfo.return_value = [(socket.AF_INET, socket.SOCK_STREAM, 6, "", ("192.168.1.50", 0))]

        with pytest.raises(SecurityError, match="Security violation"):
            transport.handle_request(request)


def test_transport_skips_private_and_uses_public(transport: SafeHTTPTransport) -> None:
    """Only an address that passed validation is ever connected to."""
    request = httpx.Request("POST", "https://split.example.com/token")

    with patch("socket.getaddrinfo") as mock_getaddrinfo:
        mock_getaddrinfo.return_value = [
            (socket.AF_INET, socket.SOCK_STREAM, 6, "", ("10.0.0.5", 0)),
            (socket.AF_INET, socket.SOCK_STREAM, 6, "", ("93.184.216.34", 0)),
        ]
        with patch("httpx.HTTPTransport.handle_request", return_value=httpx.Response(200)) as mock_super_handle:
            transport.handle_request(request)

    assert mock_super_handle.call_args[0][0].url.host == "93.184.216.34"


@pytest.mark.parametrize("ip", ["127.0.0.1", "169.254.169.254", "10.1.2.3", "224.0.0.1"])
def test_transport_blocks_literal_ips(transport: SafeHTTPTransport, ip: str) -> None:
    request = httpx.Request("POST", f"https://{ip}/token")
    with pytest.raises(SecurityError, match="blocked"):
        transport.handle_request(request)


def test_transport_blocks_loopback_ipv6(transport: SafeHTTPTransport) -> None:
    request = httpx.Request("POST", "https://[::1]/token")
    with pytest.raises(SecurityError, match="blocked"):
        transport.handle_request(request)


def test_transport_allows_public_literal_ip(transport: SafeHTTPTransport) -> None:
    request = httpx.Request("POST", "https://93.184.216.34/token")
    with patch("httpx.HTTPTransport.handle_request", return_value=httpx.Response(200)) as mock_super_handle:
        transport.handle_request(request)
    assert mock_super_handle.call_args[0][0] is request


def test_transport_dns_failure(transport: SafeHTTPTransport, mock_dns_resolution: MagicMock) -> None:
    mock_dns_resolution.side_effect = socket.gaierror("Name or service not known")
    request = httpx.Request("POST", "https://does-not-exist.example/token")

    with pytest.raises(SecurityError, match="DNS resolution failed"):
        transport.handle_request(request)
