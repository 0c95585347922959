# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_jwt_bearer

"""
Secure HTTP transport for the token endpoint call, mitigating SSRF via DNS rebinding.
"""

import ipaddress
import json
import socket
from typing import Any

import httpx

from coreason_jwt_bearer.exceptions import OversizedResponseError, SecurityError, TokenEndpointError
from coreason_jwt_bearer.utils.logger import logger

MAX_RESPONSE_BYTES = 1_000_000


class SafeHTTPTransport(httpx.HTTPTransport):
    """
    A secure HTTP transport that enforces DNS pinning to prevent SSRF/DNS Rebinding attacks.

    It resolves the hostname, validates the IP against blocked ranges (private,
    loopback, link-local, reserved, multicast), and connects to that specific IP
    while preserving the original Host header and SNI for TLS verification.
    """

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        hostname = request.url.host

        try:
            ip_obj = ipaddress.ip_address(hostname)
        except ValueError:
            ip_obj = None

        if ip_obj is not None:
            self._validate_ip(ip_obj, hostname)
            return super().handle_request(request)

        try:
            addr_infos = socket.getaddrinfo(hostname, None, 0, socket.SOCK_STREAM)
        except socket.gaierror as e:
            logger.error(f"DNS resolution failed for {hostname}: {e}")
            raise SecurityError(f"DNS resolution failed for {hostname}") from e

        # Only ever connect to an address that passed validation
        target_ip: str | None = None
        for _, _, _, _, sockaddr in addr_infos:
            try:
                candidate = ipaddress.ip_address(sockaddr[0])
                self._validate_ip(candidate, hostname)
            except (SecurityError, ValueError):
                continue
            target_ip = str(candidate)
            break

        if not target_ip:
            logger.error(f"Security violation: No valid public IP found for {hostname}")
            raise SecurityError(f"Security violation: No valid public IP found for {hostname}")

        request.extensions["sni_hostname"] = hostname
        if "Host" not in request.headers:
            request.headers["Host"] = request.url.netloc.decode("ascii")
        request.url = request.url.copy_with(host=target_ip)

        logger.debug(f"DNS Pinned: {hostname} -> {target_ip}")
        return super().handle_request(request)

    def _validate_ip(self, ip_obj: Any, hostname: str) -> None:
        """
        Validates an IP address object against blocked ranges.
        """
        if ip_obj.is_private or ip_obj.is_loopback or ip_obj.is_link_local or ip_obj.is_reserved or ip_obj.is_multicast:
            logger.warning(f"Security violation: Blocked access to {hostname} ({ip_obj})")
            raise SecurityError(f"Security violation: Access to {hostname} ({ip_obj}) is blocked")


def safe_json_post(client: httpx.Client, url: str, data: dict[str, str]) -> dict[str, Any]:
    """
    POSTs form data and parses a JSON object response, refusing bodies over `MAX_RESPONSE_BYTES`.

    Raises:
        OversizedResponseError: If the body exceeds the size cap.
        httpx.HTTPStatusError: For 4xx/5xx responses.
        httpx.HTTPError: For transport failures.
        TokenEndpointError: If the body is not a JSON object.
    """
    with client.stream("POST", url, data=data, headers={"Accept": "application/json"}) as response:
        content_length = response.headers.get("Content-Length")
        if content_length and content_length.isdigit() and int(content_length) > MAX_RESPONSE_BYTES:
            raise OversizedResponseError("Response too large")

        content = bytearray()
        for chunk in response.iter_bytes():
            content.extend(chunk)
            if len(content) > MAX_RESPONSE_BYTES:
                raise OversizedResponseError("Response too large")

        if response.is_error:
            logger.warning(f"Token endpoint returned {response.status_code}: {content[:500].decode('utf-8', 'replace')}")
        response.raise_for_status()

    try:
        payload = json.loads(content)
    except json.JSONDecodeError as e:
        raise TokenEndpointError(f"Invalid JSON response from {url}: {e}") from e

    if not isinstance(payload, dict):
        raise TokenEndpointError(f"Unexpected JSON response from {url}: expected an object")
    return payload
