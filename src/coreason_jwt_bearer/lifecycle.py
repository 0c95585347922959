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
ProviderLifecycle component implementing the host's initiate / callback / refresh contract.
"""

from typing import Any, Protocol

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

from coreason_jwt_bearer.assertion_builder import TokenAssertionBuilder
from coreason_jwt_bearer.callback import resolve_callback_url
from coreason_jwt_bearer.config import JwtBearerSettings, ProviderConfigKey, ProviderConfiguration
from coreason_jwt_bearer.exceptions import ConfigurationError, TokenException
from coreason_jwt_bearer.identity import IdentityProvider
from coreason_jwt_bearer.models import (
    BearerToken,
    CallbackState,
    RedirectTarget,
    RefreshResult,
    TokenResponse,
    UserProfile,
)
from coreason_jwt_bearer.signer import DirectoryKeyStore, JoseSigner, KeyStore, Signer
from coreason_jwt_bearer.token_endpoint import TokenEndpointClient
from coreason_jwt_bearer.utils.logger import logger
from coreason_jwt_bearer.utils.pii import anonymize
from coreason_jwt_bearer.utils.tokens import generate_opaque_token

# The host's callback shape requires a code; this flow has none to give.
PLACEHOLDER_AUTHORIZATION_CODE = "NoCodeRequired"

tracer = trace.get_tracer(__name__)


class AuthProviderPlugin(Protocol):
    """The entry points a host invokes on an auth provider."""

    def initiate(self, config: ProviderConfiguration, state_to_propagate: str) -> RedirectTarget: ...

    def handle_callback(self, config: ProviderConfiguration, callback_state: CallbackState) -> TokenResponse: ...

    def refresh(self, config: ProviderConfiguration, refresh_token: str | None) -> RefreshResult: ...

    def get_user_info(self, config: ProviderConfiguration, token_response: TokenResponse) -> UserProfile: ...


class ProviderLifecycle:
    """
    Server-to-server auth provider. Each phase is an independent, stateless entry point;
    the host correlates `initiate` and `handle_callback` through the opaque state value.

    Attributes:
        assertion_builder (TokenAssertionBuilder): Mints the signed assertion.
        identity_provider (IdentityProvider): Supplies the current principal.
        host_base_url (str): Base URL used to derive the callback URL.
        token_endpoint_client (TokenEndpointClient | None): Exchanges the assertion when configured.
    """

    def __init__(
        self,
        assertion_builder: TokenAssertionBuilder | Signer,
        identity_provider: IdentityProvider,
        host_base_url: str,
        token_endpoint_client: TokenEndpointClient | None = None,
    ) -> None:
        """
        Initialize the ProviderLifecycle.

        Args:
            assertion_builder: The builder, or a bare `Signer` to wrap in a default builder.
            identity_provider: Supplies the current principal.
            host_base_url: Base URL used to derive the callback URL.
            token_endpoint_client: External client (optional). Not closed by `close()`.
        """
        if not isinstance(assertion_builder, TokenAssertionBuilder):
            assertion_builder = TokenAssertionBuilder(assertion_builder)
        self.assertion_builder = assertion_builder
        self.identity_provider = identity_provider
        self.host_base_url = host_base_url
        self.token_endpoint_client = token_endpoint_client
        self._internal_client = False

    def __enter__(self) -> "ProviderLifecycle":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def close(self) -> None:
        """Closes the token endpoint client if this lifecycle created it."""
        if self._internal_client and self.token_endpoint_client is not None:
            self.token_endpoint_client.close()

    @classmethod
    def from_settings(
        cls,
        settings: JwtBearerSettings,
        identity_provider: IdentityProvider,
        key_store: KeyStore | None = None,
    ) -> "ProviderLifecycle":
        """
        Wires the default `JoseSigner` and `TokenEndpointClient` from settings.
        The returned lifecycle owns the client; release it with `close()` or a `with` block.

        Raises:
            ConfigurationError: If no key store is given and `key_directory` is unset,
                or if `host_base_url` is unset.
        """
        if key_store is None:
            if not settings.key_directory:
                raise ConfigurationError("A key store or COREASON_JWT_KEY_DIRECTORY is required")
            key_store = DirectoryKeyStore(settings.key_directory)

        if not settings.host_base_url:
            raise ConfigurationError("COREASON_JWT_HOST_BASE_URL is required")

        signer = JoseSigner(key_store, algorithm=settings.signing_algorithm, token_lifetime=settings.token_lifetime)
        lifecycle = cls(
            assertion_builder=TokenAssertionBuilder(signer, pii_salt=settings.pii_salt),
            identity_provider=identity_provider,
            host_base_url=settings.host_base_url,
            token_endpoint_client=TokenEndpointClient(http_timeout=settings.http_timeout),
        )
        lifecycle._internal_client = True
        return lifecycle

    def initiate(self, config: ProviderConfiguration, state_to_propagate: str) -> RedirectTarget:
        """
        Produces the redirect the host follows straight back to its own callback.

        Args:
            config: The provider configuration in effect for this call.
            state_to_propagate: Opaque host state, passed through unchanged.

        Returns:
            RedirectTarget: Callback URL with `state` and the placeholder `code`.
        """
        with tracer.start_as_current_span("initiate") as span:
            provider = config.provider_name
            span.set_attribute("auth.provider", provider or "")
            logger.debug(f"initiate: provider={provider}")

            url = resolve_callback_url(config, self.host_base_url)
            target = RedirectTarget(url=url, state=state_to_propagate, code=PLACEHOLDER_AUTHORIZATION_CODE)

            logger.info(f"initiate: redirecting provider {provider} to {url}")
            span.set_status(Status(StatusCode.OK))
            return target

    def handle_callback(self, config: ProviderConfiguration, callback_state: CallbackState) -> TokenResponse:
        """
        Mints a token for the current principal once the host returns from the redirect.

        The callback code is never inspected. The returned refresh token is a random
        placeholder with no verification semantics.

        Args:
            config: The provider configuration in effect for this call.
            callback_state: The host's callback parameters.

        Returns:
            TokenResponse: The token, placeholder refresh token and the unchanged state.

        Raises:
            TokenException: If the token cannot be issued. The cause is chained.
        """
        with tracer.start_as_current_span("handle_callback") as span:
            provider = config.provider_name
            span.set_attribute("auth.provider", provider or "")
            logger.debug(f"handle_callback: provider={provider}")

            token = self._issue_token(config, "handle_callback", span)
            response = TokenResponse(
                provider=provider,
                access_token=token.access_token,
                refresh_token=generate_opaque_token(),
                state=callback_state.state,
            )

            logger.info(f"handle_callback: issued token for provider {provider}")
            span.set_status(Status(StatusCode.OK))
            return response

    def refresh(self, config: ProviderConfiguration, refresh_token: str | None) -> RefreshResult:
        """
        Re-mints a token. The incoming refresh token is ignored: a freshly signed
        assertion replaces it every time.

        Args:
            config: The provider configuration in effect for this call.
            refresh_token: Ignored.

        Returns:
            RefreshResult: The new token with type "Bearer".

        Raises:
            TokenException: If the token cannot be issued. The cause is chained.
        """
        with tracer.start_as_current_span("refresh") as span:
            provider = config.provider_name
            span.set_attribute("auth.provider", provider or "")
            logger.debug(f"refresh: provider={provider}")

            token = self._issue_token(config, "refresh", span)

            logger.info(f"refresh: issued token for provider {provider}")
            span.set_status(Status(StatusCode.OK))
            return RefreshResult(access_token=token.access_token)

    def get_user_info(self, config: ProviderConfiguration, token_response: TokenResponse) -> UserProfile:
        """
        Maps the current principal onto the host's profile shape.

        Args:
            config: The provider configuration in effect for this call.
            token_response: The callback result. Not inspected.

        Returns:
            UserProfile: Identifier, email and username all set to the principal.
        """
        with tracer.start_as_current_span("get_user_info") as span:
            provider = config.provider_name
            span.set_attribute("auth.provider", provider or "")

            identity = self.identity_provider.current_principal()
            subject_hash = anonymize(identity, self.assertion_builder.pii_salt)
            logger.debug(f"get_user_info: provider={provider} user={subject_hash}")

            span.set_status(Status(StatusCode.OK))
            return UserProfile(identifier=identity, email=identity, username=identity, provider=provider)

    def _issue_token(self, config: ProviderConfiguration, phase: str, span: Any) -> BearerToken:
        provider = config.provider_name
        try:
            identity = self.identity_provider.current_principal()
            token = self.assertion_builder.build_assertion(config, identity)

            token_endpoint = config.get(ProviderConfigKey.TOKEN_ENDPOINT)
            if token_endpoint is not None:
                if self.token_endpoint_client is None:
                    raise ConfigurationError(
                        f"Provider '{provider}' configures a token endpoint but no token endpoint client is set"
                    )
                token = self.token_endpoint_client.exchange(token_endpoint, token)
            return token

        except Exception as e:
            # Identity providers are host-supplied and may raise any exception type
            raise self._token_failure(config, phase, span, e) from e

    def _token_failure(
        self, config: ProviderConfiguration, phase: str, span: Any, error: Exception
    ) -> TokenException:
        provider = config.provider_name
        # Hosts do not surface this error; it must be logged before raising
        logger.opt(exception=error).error(
            f"{phase} failed for provider {provider}: {type(error).__name__}: {error} "
            f"| config_keys={config.present_keys()}"
        )
        span.record_exception(error)
        span.set_status(Status(StatusCode.ERROR, str(error)))
        return TokenException(f"Unable to issue token for provider '{provider}': {error}", phase, provider)
