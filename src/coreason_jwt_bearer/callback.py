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
Callback URL resolution for the host's redirect step.
"""

from coreason_jwt_bearer.config import ProviderConfigKey, ProviderConfiguration

CALLBACK_PATH = "/services/authcallback/"


def resolve_callback_url(config: ProviderConfiguration, host_base_url: str) -> str:
    """
    Returns the URL the host redirects back to after `initiate`.

    A non-empty `callback_url` override is returned verbatim (custom domains,
    proxies), whitespace included. Otherwise the URL is
    `host_base_url + CALLBACK_PATH + provider_name`. Neither part is validated
    or trimmed: a missing provider name yields a URL with an empty final segment.

    Args:
        config: The provider configuration in effect for this call.
        host_base_url: The host's base URL, used as-is.

    Returns:
        str: The callback URL.
    """
    override = config[ProviderConfigKey.CALLBACK_URL] if ProviderConfigKey.CALLBACK_URL in config else ""
    if override:
        return override

    provider_name = config[ProviderConfigKey.PROVIDER_NAME] if ProviderConfigKey.PROVIDER_NAME in config else ""
    return f"{host_base_url}{CALLBACK_PATH}{provider_name}"
