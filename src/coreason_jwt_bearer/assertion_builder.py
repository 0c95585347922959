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
TokenAssertionBuilder component for minting bearer assertions from provider configuration.
"""

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode
from pydantic import SecretStr

from coreason_jwt_bearer.config import ProviderConfigKey, ProviderConfiguration
from coreason_jwt_bearer.exceptions import ConfigurationError, SigningError
from coreason_jwt_bearer.models import BearerToken, Claims
from coreason_jwt_bearer.signer import Signer
from coreason_jwt_bearer.utils.logger import logger
from coreason_jwt_bearer.utils.pii import anonymize

tracer = trace.get_tracer(__name__)


class TokenAssertionBuilder:
    """
    Builds the claim set for the current principal and has it signed.

    Attributes:
        signer (Signer): The signing dependency.
        pii_salt (SecretStr): Salt used to anonymize the subject in logs and spans.
    """

    def __init__(self, signer: Signer, pii_salt: SecretStr | None = None) -> None:
        """
        Initialize the TokenAssertionBuilder.

        Args:
            signer: Produces the compact serialization for a claim set and key identifier.
            pii_salt: Salt for anonymizing the subject. Defaults to the unsafe development salt.
        """
        self.signer = signer
        self.pii_salt = pii_salt or SecretStr("coreason-unsafe-default-salt")

    def build_assertion(self, config: ProviderConfiguration, identity: str) -> BearerToken:
        """
        Mints a fresh bearer token for `identity`.

        Emits an OpenTelemetry span `build_assertion`.

        Args:
            config: The provider configuration in effect for this call.
            identity: The current principal, used as `sub`.

        Returns:
            BearerToken: The signed assertion with type "Bearer".

        Raises:
            ConfigurationError: If issuer, audience or certificate is absent.
            SigningError: If the signer rejects the claims or the key.
        """
        with tracer.start_as_current_span("build_assertion") as span:
            subject_hash = anonymize(identity, self.pii_salt)
            attempted: dict[str, str | None] = {
                "sub": subject_hash,
                "iss": config.get(ProviderConfigKey.ISSUER),
                "aud": config.get(ProviderConfigKey.AUDIENCE),
            }
            span.set_attribute("enduser.id", subject_hash)

            try:
                claims = Claims(
                    subject=identity,
                    issuer=config.require(ProviderConfigKey.ISSUER),
                    audience=config.require(ProviderConfigKey.AUDIENCE),
                )
                key_identifier = config.require(ProviderConfigKey.CERTIFICATE)

                try:
                    compact = self.signer.sign(claims, key_identifier)
                except SigningError:
                    raise
                except Exception as e:
                    raise SigningError(f"Signer failed for key '{key_identifier}': {e}") from e

            except (ConfigurationError, SigningError) as e:
                logger.exception(
                    f"Assertion build failed: {e} | claims={attempted} | config_keys={config.present_keys()}"
                )
                span.record_exception(e)
                span.set_status(Status(StatusCode.ERROR, str(e)))
                raise

            logger.debug(f"Minted assertion for subject {subject_hash} (iss={claims.issuer}, aud={claims.audience})")
            span.set_status(Status(StatusCode.OK))
            return BearerToken(access_token=SecretStr(compact))
