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
Internal data models for the coreason-jwt-bearer package.
These are not exposed in the public API.
"""

from pydantic import BaseModel, ConfigDict, Field


class TokenEndpointResponse(BaseModel):
    """
    Successful response of a jwt-bearer grant at the token endpoint.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    access_token: str = Field(..., min_length=1, description="The issued access token.")
    token_type: str = Field(default="Bearer", description="The token type reported by the endpoint.")
    expires_in: int | None = Field(default=None, description="Lifetime of the access token in seconds.")
    scope: str | None = Field(default=None, description="Granted scopes, space-delimited.")
