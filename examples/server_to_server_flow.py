import os
import sys

# Add src to path for running directly
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "../src")))

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from coreason_jwt_bearer import (
    CallbackState,
    InMemoryKeyStore,
    JwtBearerSettings,
    MappingConfigurationSource,
    ProviderLifecycle,
    StaticIdentityProvider,
    TokenException,
)


def main() -> None:
    """
    Walks the host's three phases against an in-memory key:
    - initiate: redirect straight back to the callback with a placeholder code
    - handle_callback: mint the first token
    - refresh: mint a fresh one, ignoring the placeholder refresh token
    """
    print(">>> Starting server-to-server JWT bearer example")

    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    pem = private_key.private_bytes(
        serialization.Encoding.PEM, serialization.PrivateFormat.PKCS8, serialization.NoEncryption()
    )

    settings = JwtBearerSettings(host_base_url="https://org.my.salesforce.com", token_lifetime=180)
    with ProviderLifecycle.from_settings(
        settings,
        StaticIdentityProvider("svc-user"),
        key_store=InMemoryKeyStore({"key1": pem}),
    ) as lifecycle:
        source = MappingConfigurationSource(
            {
                "provider_name": "acme",
                "issuer": "https://issuer.example",
                "audience": "https://api.example",
                "certificate": "key1",
            }
        )

        redirect = lifecycle.initiate(source.load(), "host-opaque-state")
        print(f">>> Redirect: {redirect.location}")

        tokens = lifecycle.handle_callback(source.load(), CallbackState(state=redirect.state, code=redirect.code))
        print(f">>> Callback state echoed: {tokens.state}")
        print(f">>> Access token (truncated): {tokens.access_token.get_secret_value()[:24]}...")

        refreshed = lifecycle.refresh(source.load(), tokens.refresh_token)
        refreshed_value = refreshed.access_token.get_secret_value()
        print(f">>> Refreshed {refreshed.token_type} token (truncated): {refreshed_value[:24]}...")

        profile = lifecycle.get_user_info(source.load(), tokens)
        print(f">>> Profile: {profile.identifier} via {profile.provider}")

        try:
            lifecycle.refresh(MappingConfigurationSource({"provider_name": "acme", "certificate": "key1"}).load(), None)
        except TokenException as e:
            print(f">>> Expected failure during {e.phase}: {e.__cause__}")


if __name__ == "__main__":
    main()
