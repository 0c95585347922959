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
Current-principal lookup for minting assertions.
"""

from contextvars import ContextVar
from typing import Protocol

from coreason_jwt_bearer.exceptions import IdentityResolutionError

# ContextVar holding the principal for the current task/request.
_current_principal: ContextVar[str | None] = ContextVar("current_principal", default=None)


class IdentityProvider(Protocol):
    """Returns the identifier of the server principal the token is minted for."""

    def current_principal(self) -> str: ...


class StaticIdentityProvider:
    """
    Always returns the same principal. Suitable for integration users.
    """

    def __init__(self, principal: str) -> None:
        if not principal or not principal.strip():
            raise IdentityResolutionError("Principal must be a non-empty string.")
        self._principal = principal

    def current_principal(self) -> str:
        return self._principal


class ContextIdentityProvider:
    """
    Reads the principal set for the running context via `set_current_principal`.
    """

    def current_principal(self) -> str:
        principal = get_current_principal()
        if not principal or not principal.strip():
            raise IdentityResolutionError("No current principal is set for this context.")
        return principal


def get_current_principal() -> str | None:
    """
    Retrieve the current principal from the context.

    Returns:
        str | None: The current principal, or None if not set.
    """
    return _current_principal.get()


def set_current_principal(principal: str) -> None:
    """
    Set the current principal for the running context.

    Args:
        principal: The principal identifier to set.
    """
    _current_principal.set(principal)


def clear_current_principal() -> None:
    """
    Clear the current principal (reset to None).
    """
    _current_principal.set(None)
