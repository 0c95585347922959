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
Signer component producing compact JWS assertions.
"""

import time
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Protocol, cast

from authlib.jose import JsonWebToken
from authlib.jose.errors import JoseError

from coreason_jwt_bearer.exceptions import SigningError
from coreason_jwt_bearer.models import Claims
from coreason_jwt_bearer.utils.logger import logger
from coreason_jwt_bearer.utils.tokens import generate_opaque_token


class Signer(Protocol):
    """Signs a claim set with the key named by `key_identifier`."""

    def sign(self, claims: Claims, key_identifier: str) -> str: ...


class KeyStore(Protocol):
    """Resolves a key identifier to PEM-encoded private key material."""

    def get_private_key(self, key_identifier: str) -> str | bytes: ...


class InMemoryKeyStore:
    """
    Key store backed by a mapping of key identifier to PEM.
    """

    def __init__(self, keys: Mapping[str, str | bytes]) -> None:
        self._keys = dict(keys)

    def get_private_key(self, key_identifier: str) -> str | bytes:
        try:
            return self._keys[key_identifier]
        except KeyError:
            raise SigningError(f"No signing key registered for '{key_identifier}'") from None


class DirectoryKeyStore:
    """
    Key store reading `<key_identifier>.pem` from a directory.
    """

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)

    def get_private_key(self, key_identifier: str) -> str | bytes:
        if not key_identifier or "/" in key_identifier or "\\" in key_identifier or key_identifier.startswith("."):
            raise SigningError(f"Invalid key identifier '{key_identifier}'")

        path = self.directory / f"{key_identifier}.pem"
        try:
            return path.read_bytes()
        except OSError as e:
            raise SigningError(f"Unable to read signing key '{key_identifier}': {e}") from e


class JoseSigner:
    """
    Signs claims with Authlib's JOSE implementation.

    Every call stamps a fresh `iat`/`exp` window and a random `jti`, so two
    assertions for the same claims never share a signature.

    Attributes:
        key_store (KeyStore): Where private keys are looked up.
        algorithm (str): The JWS algorithm.
        token_lifetime (int): Seconds between `iat` and `exp`.
    """

    def __init__(self, key_store: KeyStore, algorithm: str = "RS256", token_lifetime: int = 300) -> None:
        self.key_store = key_store
        self.algorithm = algorithm
        self.token_lifetime = token_lifetime
        # Restrict the instance to the configured algorithm
        self.jwt = JsonWebToken([self.algorithm])

    def sign(self, claims: Claims, key_identifier: str) -> str:
        """
        Produces the compact serialization of the signed claim set.

        Args:
            claims: The claim set to embed.
            key_identifier: Name of the key in the key store; also emitted as `kid`.

        Returns:
            str: The compact JWS.

        Raises:
            SigningError: If the key is missing or rejected by the signing primitive.
        """
        key = self.key_store.get_private_key(key_identifier)

        issued_at = int(time.time())
        header = {"alg": self.algorithm, "typ": "JWT", "kid": key_identifier}
        payload: dict[str, Any] = {
            **claims.to_payload(),
            "iat": issued_at,
            "exp": issued_at + self.token_lifetime,
            "jti": generate_opaque_token(32),
        }

        try:
            jwt_any = cast("Any", self.jwt)
            token = jwt_any.encode(header, payload, key)
        except (JoseError, ValueError, TypeError) as e:
            raise SigningError(f"Signing with key '{key_identifier}' failed: {e}") from e

        logger.debug(f"Signed assertion with key {key_identifier} ({self.algorithm})")
        return token.decode("ascii") if isinstance(token, bytes) else str(token)
