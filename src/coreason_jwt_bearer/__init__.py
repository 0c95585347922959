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
Server-to-server JWT bearer auth provider: mints signed assertions for the current
principal and serves them through the initiate / callback / refresh lifecycle.
"""

__version__ = "0.1.0"
__author__ = "Gowtham A Rao"
__email__ = "gowtham.rao@coreason.ai"

from .assertion_builder import TokenAssertionBuilder
from .callback import resolve_callback_url
from .config import (
    EnvironmentConfigurationSource,
    JwtBearerSettings,
    MappingConfigurationSource,
    ProviderConfigKey,
    ProviderConfiguration,
)
from .exceptions import ConfigurationError, SigningError, TokenException
from .identity import ContextIdentityProvider, StaticIdentityProvider
from .lifecycle import PLACEHOLDER_AUTHORIZATION_CODE, ProviderLifecycle
from .models import CallbackState, RedirectTarget, RefreshResult, TokenResponse, UserProfile
from .signer import DirectoryKeyStore, InMemoryKeyStore, JoseSigner
from .token_endpoint import TokenEndpointClient
from .utils.tokens import generate_opaque_token

__all__ = [
    "PLACEHOLDER_AUTHORIZATION_CODE",
    "CallbackState",
    "ConfigurationError",
    "ContextIdentityProvider",
    "DirectoryKeyStore",
    "EnvironmentConfigurationSource",
    "InMemoryKeyStore",
    "JoseSigner",
    "JwtBearerSettings",
    "MappingConfigurationSource",
    "ProviderConfigKey",
    "ProviderConfiguration",
    "ProviderLifecycle",
    "RedirectTarget",
    "RefreshResult",
    "SigningError",
    "StaticIdentityProvider",
    "TokenAssertionBuilder",
    "TokenEndpointClient",
    "TokenException",
    "TokenResponse",
    "UserProfile",
    "generate_opaque_token",
    "resolve_callback_url",
]
