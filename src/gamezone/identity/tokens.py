"""Signed bearer tokens (JWT) carrying the account id as ``sub``."""

from datetime import timedelta

from jose import JWTError, jwt

from gamezone.config import Settings
from gamezone.errors import Unauthorized
from gamezone.utils.time import utcnow


class TokenIssuer:
    def __init__(self, settings: Settings) -> None:
        self.secret = settings.jwt_secret
        self.algorithm = settings.jwt_algorithm
        self.ttl = timedelta(days=settings.token_ttl_days)

    def issue(self, user_id: str) -> str:
        now = utcnow()
        claims = {"sub": str(user_id), "iat": now, "exp": now + self.ttl}
        return jwt.encode(claims, self.secret, algorithm=self.algorithm)

    def subject(self, token: str) -> str:
        """Return the account id in ``token`` or raise ``Unauthorized``."""
        try:
            claims = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except JWTError:
            raise Unauthorized("Invalid or expired token") from None
        subject = claims.get("sub")
        if not subject:
            raise Unauthorized("Invalid or expired token")
        return subject
