"""Caller identity from signed tokens."""

from typing import Annotated

from fastapi import Depends, Header, HTTPException
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from config import config


class IdentitySigner:
    """Sign and verify player identities using itsdangerous."""

    def __init__(self, secret_key: str | None = None) -> None:
        """Initialize the signer with a secret key."""
        self._secret_key = secret_key or config.security.secret_key
        self._serializer = URLSafeTimedSerializer(self._secret_key, salt="identity")

    def sign(self, identity: str) -> str:
        """Create a signed token from an identity."""
        return self._serializer.dumps(identity)

    def unsign(self, token: str, max_age: int | None = None) -> str | None:
        """
        Verify and extract the identity from a signed token.

        Args:
            token: The signed token to verify
            max_age: Maximum age in seconds (defaults to the configured token age)

        Returns:
            The identity if valid, None otherwise
        """
        max_age = max_age or config.security.token_max_age
        try:
            return self._serializer.loads(token, max_age=max_age)
        except (BadSignature, SignatureExpired):
            return None


# Global signer instance
_identity_signer: IdentitySigner | None = None


def get_identity_signer() -> IdentitySigner:
    """Get or create the identity signer."""
    global _identity_signer
    if _identity_signer is None:
        _identity_signer = IdentitySigner()
    return _identity_signer


def issue_token(identity: str) -> str:
    """Issue a token for an identity; the authentication service's side of the exchange."""
    return get_identity_signer().sign(identity)


async def current_identity(
    token: Annotated[str | None, Header(alias="X-Player-Token")] = None,
) -> str:
    """FastAPI dependency resolving the verified caller identity."""
    if token is None:
        raise HTTPException(status_code=401, detail="Missing identity token")
    identity = get_identity_signer().unsign(token)
    if identity is None:
        raise HTTPException(status_code=401, detail="Invalid or expired identity token")
    return identity


Caller = Annotated[str, Depends(current_identity)]
