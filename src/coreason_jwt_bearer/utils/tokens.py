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
Random opaque strings for values the host contract requires but never verifies.
"""

import secrets
import string

OPAQUE_ALPHABET = string.ascii_letters + string.digits


def generate_opaque_token(length: int = 20) -> str:
    """
    Returns a random alphanumeric string drawn from a cryptographically strong source.

    The result is a placeholder only. Callers must not treat it as a credential.

    Args:
        length: Number of characters. Defaults to 20.

    Raises:
        ValueError: If `length` is negative.
    """
    if length < 0:
        raise ValueError("length must be non-negative")
    return "".join(secrets.choice(OPAQUE_ALPHABET) for _ in range(length))
