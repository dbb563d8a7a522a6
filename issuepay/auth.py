import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header
from jose import jwt, JWTError

from issuepay.config import get_settings
from issuepay.errors import Forbidden, Unauthorized

logger = logging.getLogger(__name__)


@dataclass
class Principal:
    email: str
    subject: Optional[str] = None


class IdentityVerifier:
    """Verifies identity-provider issued JWTs and returns the principal."""

    def __init__(self, secret, algorithm="HS256", audience=None):
        self.secret = secret
        self.algorithm = algorithm
        self.audience = audience

    def verify(self, token: str) -> Principal:
        if not self.secret:
            raise Unauthorized("identity verification is not configured")
        try:
            claims = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                audience=self.audience,
                options={"verify_aud": self.audience is not None},
            )
        except JWTError as e:
            raise Unauthorized() from e

        email = claims.get("email")
        if not email:
            raise Unauthorized()
        return Principal(email=email, subject=claims.get("sub"))


def get_identity_verifier() -> IdentityVerifier:
    settings = get_settings()
    return IdentityVerifier(settings.JWT_SECRET, settings.JWT_ALGORITHM, settings.JWT_AUDIENCE)


def verify_token(
    authorization: Optional[str] = Header(None),
    verifier: IdentityVerifier = Depends(get_identity_verifier),
) -> Principal:
    if not authorization:
        raise Unauthorized()
    try:
        scheme, token = authorization.split()
    except ValueError:
        raise Unauthorized()
    if scheme.lower() != "bearer":
        raise Unauthorized()

    try:
        return verifier.verify(token)
    except Unauthorized:
        logger.info("Rejected bearer credential")
        raise


def ensure_self_access(requested_email: str, principal: Principal):
    if requested_email != principal.email:
        raise Forbidden()
