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
Data models for the coreason-jwt-bearer package.
"""

from typing import Any, Literal
from urllib.parse import urlencode

from pydantic import BaseModel, ConfigDict, Field, SecretStr

BEARER = "Bearer"


class Claims(BaseModel):
    """
    The claim set embedded in a minted assertion. Never persisted.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    subject: str = Field(..., description="The current server principal (`sub`).")
    issuer: str = Field(..., description="The configured issuer (`iss`).")
    audience: str = Field(..., description="The configured audience (`aud`).")

    def to_payload(self) -> dict[str, Any]:
        return {"sub": self.subject, "iss": self.issuer, "aud": self.audience}

    def __repr__(self) -> str:
        # The subject is a principal identifier and MUST be redacted in __repr__
        return f"Claims(subject='<REDACTED>', issuer={self.issuer!r}, audience={self.audience!r})"

    def __str__(self) -> str:
        return self.__repr__()


class BearerToken(BaseModel):
    """
    An opaque compact token plus its type label. Handed to the host, never retained.
    """

    model_config = ConfigDict(frozen=True)

    access_token: SecretStr
    token_type: Literal["Bearer"] = BEARER


class CallbackState(BaseModel):
    """
    What the host hands back after the redirect round-trip.

    Attributes:
        state (str): Opaque value propagated from `initiate`, echoed back unmodified.
        code (str | None): The placeholder authorization code. Never inspected.
        query_parameters (dict[str, str]): Any other parameters the host captured.
    """

    model_config = ConfigDict(frozen=True)

    state: str
    code: str | None = None
    query_parameters: dict[str, str] = Field(default_factory=dict)


class RedirectTarget(BaseModel):
    """
    Redirect descriptor produced by `initiate`.
    """

    model_config = ConfigDict(frozen=True)

    url: str
    state: str
    code: str

    @property
    def location(self) -> str:
        """The callback URL with `state` and `code` appended as query parameters."""
        separator = "&" if "?" in self.url else "?"
        return f"{self.url}{separator}{urlencode({'state': self.state, 'code': self.code})}"


class TokenResponse(BaseModel):
    """
    Result of the callback phase.

    Attributes:
        provider (str | None): The configured provider name.
        access_token (SecretStr): The bearer token.
        refresh_token (str): A random placeholder. Carries no verification semantics.
        state (str): The callback state, unchanged.
        token_type (str): Always "Bearer".
    """

    model_config = ConfigDict(frozen=True)

    provider: str | None
    access_token: SecretStr
    refresh_token: str
    state: str
    token_type: Literal["Bearer"] = BEARER


class RefreshResult(BaseModel):
    """Result of the refresh phase."""

    model_config = ConfigDict(frozen=True)

    access_token: SecretStr
    token_type: Literal["Bearer"] = BEARER


class UserProfile(BaseModel):
    """
    Profile handed to the host by `get_user_info`.

    Server-to-server flows have no end-user record, so the principal identifier
    fills every identifier-like field and the descriptive fields stay empty.
    """

    model_config = ConfigDict(frozen=True)

    identifier: str
    email: str
    username: str
    first_name: str | None = None
    last_name: str | None = None
    full_name: str | None = None
    locale: str | None = None
    link: str | None = None
    provider: str | None = None
    attributes: dict[str, str] = Field(default_factory=dict)
