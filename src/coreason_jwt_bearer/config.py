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
Configuration for the coreason-jwt-bearer package.
"""

from collections.abc import Iterator, Mapping
from enum import StrEnum
from types import MappingProxyType
from typing import Protocol

from pydantic import Field, SecretStr, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from coreason_jwt_bearer.exceptions import ConfigurationError

ASYMMETRIC_ALGORITHMS = frozenset(
    {"RS256", "RS384", "RS512", "PS256", "PS384", "PS512", "ES256", "ES384", "ES512", "EdDSA"}
)


class ProviderConfigKey(StrEnum):
    PROVIDER_NAME = "provider_name"
    ISSUER = "issuer"
    AUDIENCE = "audience"
    CERTIFICATE = "certificate"
    CALLBACK_URL = "callback_url"
    TOKEN_ENDPOINT = "token_endpoint"


class ProviderConfiguration(Mapping[str, str]):
    """
    Immutable, per-invocation view of a provider's configuration.

    The source mapping is copied on construction, so repeated reads within a
    single call always observe the same values.
    """

    def __init__(self, values: Mapping[str, str] | None = None) -> None:
        self._values: Mapping[str, str] = MappingProxyType(dict(values or {}))

    def __getitem__(self, key: str) -> str:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"ProviderConfiguration(keys={sorted(self._values)!r})"

    def get(self, key: str, default: str | None = None) -> str | None:  # type: ignore[override]
        """
        Returns the value for `key`, treating blank values as absent.
        """
        value = self._values.get(key)
        if value is None or not str(value).strip():
            return default
        return value

    def require(self, key: str) -> str:
        """
        Returns the value for `key`.

        Raises:
            ConfigurationError: If the key is absent or blank.
        """
        value = self.get(key)
        if value is None:
            raise ConfigurationError(f"Missing required provider configuration '{key}'")
        return value

    @property
    def provider_name(self) -> str | None:
        return self.get(ProviderConfigKey.PROVIDER_NAME)

    def present_keys(self) -> list[str]:
        """Sorted keys that carry a non-blank value. Safe to log."""
        return sorted(k for k in self._values if self.get(k) is not None)


class ConfigurationSource(Protocol):
    """Supplies the provider configuration in effect at call time."""

    def load(self) -> ProviderConfiguration: ...


class MappingConfigurationSource:
    """
    Configuration source backed by a caller-owned mapping.
    Each `load()` takes a fresh snapshot so later edits become visible to the next call.
    """

    def __init__(self, values: Mapping[str, str]) -> None:
        self._values = values

    def load(self) -> ProviderConfiguration:
        return ProviderConfiguration(self._values)


class ProviderSettings(BaseSettings):
    """
    Provider configuration read from the environment.

    Attributes:
        provider_name (str | None): The provider's name, used in the callback path.
        issuer (str | None): The `iss` claim.
        audience (str | None): The `aud` claim.
        certificate (str | None): The key identifier passed to the signer.
        callback_url (str | None): Optional override for the generated callback URL.
        token_endpoint (str | None): Optional endpoint to exchange the assertion at.
    """

    model_config = SettingsConfigDict(
        env_prefix="COREASON_JWT_PROVIDER_",
        case_sensitive=False,
    )

    provider_name: str | None = None
    issuer: str | None = None
    audience: str | None = None
    certificate: str | None = None
    callback_url: str | None = None
    token_endpoint: str | None = None

    def to_configuration(self) -> ProviderConfiguration:
        return ProviderConfiguration({k: v for k, v in self.model_dump().items() if v is not None})


class EnvironmentConfigurationSource:
    """Reads `COREASON_JWT_PROVIDER_*` variables on every `load()`."""

    def load(self) -> ProviderConfiguration:
        return ProviderSettings().to_configuration()


class JwtBearerSettings(BaseSettings):
    """
    Runtime settings for the token issuer.

    Attributes:
        unsafe_local_dev (bool): Allows a plain-HTTP host base URL.
        host_base_url (str | None): Base URL of the host, used to build the callback URL.
        signing_algorithm (str): JWS algorithm used by the default signer.
        token_lifetime (int): Seconds between `iat` and `exp` of minted assertions.
        http_timeout (float): Timeout in seconds for the token endpoint call.
        pii_salt (SecretStr): Salt for anonymizing subjects in logs/traces.
        key_directory (str | None): Directory holding `<key_identifier>.pem` files.
    """

    model_config = SettingsConfigDict(
        env_prefix="COREASON_JWT_",
        case_sensitive=False,
    )

    unsafe_local_dev: bool = False
    host_base_url: str | None = None
    signing_algorithm: str = "RS256"
    token_lifetime: int = Field(default=300, gt=0)
    http_timeout: float = Field(default=10.0, gt=0)
    pii_salt: SecretStr = SecretStr("coreason-unsafe-default-salt")
    key_directory: str | None = None

    @field_validator("host_base_url", mode="after")
    @classmethod
    def validate_https(cls, v: str | None, info: ValidationInfo) -> str | None:
        """
        Ensures that the host base URL uses HTTPS, unless strictly opted out for local dev.
        """
        if v and v.startswith("http://") and not info.data.get("unsafe_local_dev", False):
            raise ValueError("HTTPS is required for production. Set 'unsafe_local_dev=True' only for local testing.")
        return v

    @field_validator("signing_algorithm")
    @classmethod
    def validate_algorithm(cls, v: str) -> str:
        if v not in ASYMMETRIC_ALGORITHMS:
            raise ValueError(f"Unsupported signing algorithm '{v}'. Use one of {sorted(ASYMMETRIC_ALGORITHMS)}")
        return v


class LogSettings(BaseSettings):
    """
    Logging settings. `COREASON_LOG_JSON=true` switches the console sink to JSON on stdout.
    An empty `COREASON_LOG_FILE` disables the file sink.
    """

    model_config = SettingsConfigDict(
        env_prefix="COREASON_LOG_",
        case_sensitive=False,
        populate_by_name=True,
    )

    level: str = "INFO"
    serialize: bool = Field(default=False, validation_alias="COREASON_LOG_JSON")
    file: str = "logs/app.log"

    @field_validator("level")
    @classmethod
    def normalize_level(cls, v: str) -> str:
        return v.strip().upper()
