"""JWT access token creation and validation.

Token issuance belongs to the authentication service; this module only needs
to agree with it on the claim layout (``sub`` = user email, ``role``).
"""

from datetime import UTC, datetime, timedelta

import jwt


def create_access_token(
    subject: str,
    role: str,
    secret_key: str,
    algorithm: str = "HS256",
    expires_minutes: int = 30,
) -> str:
    """Create a JWT access token.

    Args:
        subject: The token subject (the user's email).
        role: The user's role.
        secret_key: Secret key for signing.
        algorithm: JWT signing algorithm.
        expires_minutes: Token expiration in minutes.

    Returns:
        The encoded JWT string.
    """
    expire = datetime.now(UTC) + timedelta(minutes=expires_minutes)
    payload = {
        "sub": subject,
        "role": role,
        "exp": expire,
        "type": "access",
    }
    return jwt.encode(payload, secret_key, algorithm=algorithm)


def decode_access_token(
    token: str,
    secret_key: str,
    algorithm: str = "HS256",
) -> dict:
    """Decode an access token and return its claims.

    Refresh tokens and tokens without a subject are rejected.

    Raises:
        jwt.ExpiredSignatureError: If the token has expired.
        jwt.InvalidTokenError: If the token is invalid or not an access token.
    """
    payload = jwt.decode(token, secret_key, algorithms=[algorithm], options={"require": ["exp", "sub"]})
    if payload.get("type", "access") != "access":
        msg = f"Expected an access token, got {payload.get('type')!r}"
        raise jwt.InvalidTokenError(msg)
    return payload
