"""
Identity provider adapter.

Verifies bearer ID tokens and exposes the stable account identifier and
email. Issuing tokens is the provider's job, not ours.
"""
import logging
from dataclasses import dataclass
from typing import List, Optional

from jose import ExpiredSignatureError, JWTError, jwt

from leave_service.core.config import settings
from leave_service.core.exceptions import AuthenticationError, ServiceUnavailableError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IdentityClaims:
    uid: str
    email: Optional[str]


class JWTIdentityProvider:
    def __init__(
        self,
        secret: Optional[str],
        algorithms: List[str],
        audience: Optional[str] = None,
        issuer: Optional[str] = None,
    ):
        self.secret = secret
        self.algorithms = algorithms
        self.audience = audience
        self.issuer = issuer

    def verify(self, token: str) -> IdentityClaims:
        if not self.secret:
            logger.error("Identity provider is not configured (missing verification key)")
            raise ServiceUnavailableError("Identity provider is not configured")

        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=self.algorithms,
                audience=self.audience,
                issuer=self.issuer,
                options={"verify_aud": self.audience is not None},
            )
        except ExpiredSignatureError:
            logger.info("Authentication failed: Token expired")
            raise AuthenticationError("Invalid or expired token")
        except JWTError as e:
            logger.warning(f"Authentication failed: {e}")
            raise AuthenticationError("Invalid or expired token")

        uid = payload.get("sub")
        if not uid or not isinstance(uid, str):
            logger.warning("Authentication failed: Missing subject in token")
            raise AuthenticationError("Missing subject in token")

        return IdentityClaims(uid=uid, email=payload.get("email"))


def build_identity_provider() -> JWTIdentityProvider:
    return JWTIdentityProvider(
        secret=settings.idp.jwt_secret,
        algorithms=[settings.idp.jwt_algorithm],
        audience=settings.idp.audience,
        issuer=settings.idp.issuer,
    )
