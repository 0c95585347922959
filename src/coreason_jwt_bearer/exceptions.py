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
Custom exceptions for the coreason-jwt-bearer package.
"""


class CoreasonJwtError(Exception):
    """Base exception for all coreason-jwt-bearer errors."""


class ConfigurationError(CoreasonJwtError):
    """Raised when a required provider configuration field is missing or blank."""


class SigningError(CoreasonJwtError):
    """Raised when the signer rejects the claim set or the key identifier."""


class IdentityResolutionError(CoreasonJwtError):
    """Raised when the current server principal cannot be determined."""


class TokenEndpointError(CoreasonJwtError):
    """Raised when exchanging the assertion at the token endpoint fails."""


class OversizedResponseError(TokenEndpointError):
    """Raised when an HTTP response is too large."""


class SecurityError(TokenEndpointError):
    """Raised when the transport detects a security violation."""


class TokenException(CoreasonJwtError):
    """
    Raised at the provider lifecycle boundary when a token cannot be issued.

    The original failure is always available as ``__cause__``.

    Attributes:
        phase (str): The lifecycle phase that failed (e.g. "handle_callback").
        provider (str | None): The configured provider name, if known.
    """

    def __init__(self, message: str, phase: str, provider: str | None = None) -> None:
        super().__init__(message)
        self.phase = phase
        self.provider = provider
