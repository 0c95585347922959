# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_jwt_bearer

from urllib.parse import parse_qs, urlparse

import pytest
from pydantic import SecretStr, ValidationError

from coreason_jwt_bearer.models import BearerToken, CallbackState, Claims, RedirectTarget, TokenResponse, UserProfile


def test_claims_payload() -> None:
    claims = Claims(subject="svc-user", issuer="https://issuer.example", audience="https://api.example")
    assert claims.to_payload() == {"sub": "svc-user", "iss": "https://issuer.example", "aud": "https://api.example"}


def test_claims_repr_redacts_subject() -> None:
    claims = Claims(subject="svc-user", issuer="https://issuer.example", audience="https://api.example")
    assert "svc-user" not in repr(claims)
    assert "svc-user" not in str(claims)
    assert "https://issuer.example" in repr(claims)


def test_claims_immutable_and_strict() -> None:
    claims = Claims(subject="a", issuer="b", audience="c")
    with pytest.raises(ValidationError):
        claims.subject = "other"  # type: ignore[misc]
    with pytest.raises(ValidationError):
        Claims(subject="a", issuer="b", audience="c", scope="x")  # type: ignore[call-arg]


def test_bearer_token_hides_secret() -> None:
    token = BearerToken(access_token=SecretStr("header.payload.signature"))
    assert token.token_type == "Bearer"
    assert "header.payload.signature" not in repr(token)
    assert token.access_token.get_secret_value() == "header.payload.signature"


def test_bearer_token_rejects_other_types() -> None:
    with pytest.raises(ValidationError):
        BearerToken(access_token=SecretStr("x"), token_type="MAC")  # type: ignore[arg-type]


def test_redirect_location_appends_query() -> None:
    target = RedirectTarget(url="https://org.example/services/authcallback/acme", state="s 1&x", code="NoCodeRequired")
    parsed = urlparse(target.location)

    assert f"{parsed.scheme}://{parsed.netloc}{parsed.path}" == target.url
    assert parse_qs(parsed.query) == {"state": ["s 1&x"], "code": ["NoCodeRequired"]}


def test_redirect_location_extends_existing_query() -> None:
    target = RedirectTarget(url="https://proxy.example/cb?tenant=7", state="abc", code="NoCodeRequired")
    assert target.location == "https://proxy.example/cb?tenant=7&state=abc&code=NoCodeRequired"


def test_callback_state_defaults() -> None:
    state = CallbackState(state="abc")
    assert state.code is None
    assert state.query_parameters == {}


def test_token_response_defaults_to_bearer() -> None:
    response = TokenResponse(provider="acme", access_token=SecretStr("t"), refresh_token="r", state="s")
    assert response.token_type == "Bearer"
    assert "'t'" not in repr(response)


def test_user_profile_optional_fields_empty() -> None:
    profile = UserProfile(identifier="svc-user", email="svc-user", username="svc-user")
    assert profile.first_name is None
    assert profile.full_name is None
    assert profile.locale is None
    assert profile.link is None
    assert profile.attributes == {}
