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
TokenEndpointClient component for the JWT bearer grant (RFC 7523).
"""

from typing import Any

import httpx
from opentelemetry import trace
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.trace import Status, StatusCode
from pydantic import SecretStr, ValidationError

from coreason_jwt_bearer.exceptions import TokenEndpointError
from coreason_jwt_bearer.models import BearerToken
from coreason_jwt_bearer.models_internal import TokenEndpointResponse
from coreason_jwt_bearer.transport import SafeHTTPTransport, safe_json_post
from coreason_jwt_bearer.utils.logger import logger

JWT_BEARER_GRANT = "urn:ietf:params:oauth:grant-type:jwt-bearer"

tracer = trace.get_tracer(__name__)


class TokenEndpointClient:
    """
    Exchanges a signed assertion for an access token. Single attempt, no retry.

    Attributes:
        client (httpx.Client): The HTTP client used for the exchange.
    """

    def __init__(self, client: httpx.Client | None = None, http_timeout: float = 10.0) -> None:
        """
        Initialize the TokenEndpointClient.

        Args:
            client: External client (optional). If not provided, a `SafeHTTPTransport` client is created.
            http_timeout: Timeout in seconds for the internally created client.
        """
        self._internal_client = client is None
        if client is not None:
            self.client = client
        else:
            self.client = httpx.Client(transport=SafeHTTPTransport(), timeout=http_timeout)

        HTTPXClientInstrumentor().instrument_client(self.client)

    def __enter__(self) -> "TokenEndpointClient":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def close(self) -> None:
        if self._internal_client:
            self.client.close()

    def exchange(self, token_endpoint: str, assertion: BearerToken) -> BearerToken:
        """
        Posts the assertion as a jwt-bearer grant and returns the issued access token.

        Emits an OpenTelemetry span `token_endpoint_exchange`.

        Args:
            token_endpoint: The token endpoint URL.
            assertion: The signed assertion from `TokenAssertionBuilder`.

        Returns:
            BearerToken: The access token issued by the endpoint.

        Raises:
            TokenEndpointError: If the request fails or the response is invalid.
        """
        with tracer.start_as_current_span("token_endpoint_exchange") as span:
            span.set_attribute("http.url", token_endpoint)
            data = {
                "grant_type": JWT_BEARER_GRANT,
                "assertion": assertion.access_token.get_secret_value(),
            }

            try:
                payload = safe_json_post(self.client, token_endpoint, data)
                response = TokenEndpointResponse(**payload)
            except httpx.HTTPStatusError as e:
                error = TokenEndpointError(f"Token endpoint rejected the assertion with status {e.response.status_code}")
                self._record_failure(span, error, e)
                raise error from e
            except httpx.HTTPError as e:
                error = TokenEndpointError(f"Token endpoint request to {token_endpoint} failed: {e}")
                self._record_failure(span, error, e)
                raise error from e
            except httpx.InvalidURL as e:
                error = TokenEndpointError(f"Invalid token endpoint URL {token_endpoint!r}: {e}")
                self._record_failure(span, error, e)
                raise error from e
            except ValidationError as e:
                error = TokenEndpointError(f"Invalid token response from {token_endpoint}: {e}")
                self._record_failure(span, error, e)
                raise error from e
            except TokenEndpointError as e:
                self._record_failure(span, e, e)
                raise

            if response.token_type.lower() != "bearer":
                logger.warning(f"Token endpoint returned token_type '{response.token_type}', treating as Bearer")

            logger.info(f"Exchanged assertion at {token_endpoint} (expires_in={response.expires_in})")
            span.set_status(Status(StatusCode.OK))
            return BearerToken(access_token=SecretStr(response.access_token))

    def _record_failure(self, span: trace.Span, error: TokenEndpointError, cause: BaseException) -> None:
        logger.opt(exception=cause).error(f"Token endpoint exchange failed: {error}")
        span.record_exception(cause)
        span.set_status(Status(StatusCode.ERROR, str(error)))
