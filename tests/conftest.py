# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_jwt_bearer

import os
import socket
from collections.abc import Generator
from typing import Any
from unittest.mock import MagicMock, patch

# Keep the test run from writing logs/app.log; must precede the package import
os.environ.setdefault("COREASON_LOG_FILE", "")

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from loguru import logger

from coreason_jwt_bearer.assertion_builder import TokenAssertionBuilder
from coreason_jwt_bearer.config import ProviderConfiguration
from coreason_jwt_bearer.identity import StaticIdentityProvider
from coreason_jwt_bearer.lifecycle import ProviderLifecycle
from coreason_jwt_bearer.signer import InMemoryKeyStore, JoseSigner


@pytest.fixture(autouse=True)
def mock_dns_resolution() -> Generator[MagicMock, None, None]:
    """
    Globally patches socket.getaddrinfo to return a safe public IP by default,
    so no test performs real DNS lookups for dummy token endpoints.

    Tests that need to verify SSRF logic should explicitly patch socket.getaddrinfo again.
    """
    safe_response = [(socket.AF_INET, socket.SOCK_STREAM, 6, "", ("8.8.8.8", 443))]

    with patch("socket.getaddrinfo", return_value=safe_response) as mock:
        yield mock


@pytest.fixture(scope="session")
def rsa_private_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def private_key_pem(rsa_private_key: rsa.RSAPrivateKey) -> bytes:
    return rsa_private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )


@pytest.fixture(scope="session")
def public_key_pem(rsa_private_key: rsa.RSAPrivateKey) -> bytes:
    return rsa_private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )


@pytest.fixture
def key_store(private_key_pem: bytes) -> InMemoryKeyStore:
    return InMemoryKeyStore({"key1": private_key_pem})


@pytest.fixture
def signer(key_store: InMemoryKeyStore) -> JoseSigner:
    return JoseSigner(key_store)


@pytest.fixture
def builder(signer: JoseSigner) -> TokenAssertionBuilder:
    return TokenAssertionBuilder(signer)


@pytest.fixture
def provider_config() -> ProviderConfiguration:
    return ProviderConfiguration(
        {
            "provider_name": "acme",
            "issuer": "https://issuer.example",
            "audience": "https://api.example",
            "certificate": "key1",
        }
    )


@pytest.fixture
def lifecycle(builder: TokenAssertionBuilder) -> ProviderLifecycle:
    return ProviderLifecycle(
        assertion_builder=builder,
        identity_provider=StaticIdentityProvider("svc-user"),
        host_base_url="https://org.my.salesforce.com",
    )


@pytest.fixture
def log_records() -> Generator[list[dict[str, Any]], None, None]:
    """Captures loguru records emitted during the test."""
    records: list[dict[str, Any]] = []
    handler_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    yield records
    logger.remove(handler_id)
