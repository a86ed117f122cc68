"""
Access/refresh token management for the API.

Access tokens are short-lived signed JWTs; refresh tokens are opaque random
strings whose SHA-256 hash is the only thing persisted. Every refresh
rotates the refresh token: the presented one is revoked and a new pair is
issued, so a refresh token can be redeemed at most once.
"""

import enum
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

import jwt
from sqlalchemy import update
from sqlalchemy.orm import Session as DBSession

from .config import config
from .models import RefreshToken, User
from .utils import Validator, utcnow

logger = logging.getLogger(__name__)


@dataclass
class TokenPayload:
    user_id: str
    email: str


@dataclass
class TokenPair:
    access_token: str
    refresh_token: str


class AccessTokenStatus(enum.Enum):
    VALID = "valid"
    EXPIRED = "expired"
    BAD_SIGNATURE = "bad_signature"
    MALFORMED = "malformed"
    WRONG_TYPE = "wrong_type"


@dataclass
class AccessTokenCheck:
    status: AccessTokenStatus
    payload: Optional[TokenPayload] = None

    @property
    def is_valid(self) -> bool:
        return self.status is AccessTokenStatus.VALID


class TokenService:
    """Manages JWT access tokens and rotating opaque refresh tokens"""

    def __init__(self, db: DBSession):
        self.db = db
        self.secret_key = config.JWT_SECRET_KEY
        self.algorithm = config.JWT_ALGORITHM

    # ---------- access tokens ----------

    def create_access_token(self, user_id: str, email: str) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "sub": user_id,
            "email": email,
            "type": "access",
            "iat": now,
            "exp": now + config.JWT_ACCESS_TOKEN_EXPIRES,
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def inspect_access_token(self, token: str) -> AccessTokenCheck:
        """
        Decode and classify an access token. The distinction between
        failure reasons is for logging only; clients always see one
        generic rejection.
        """
        try:
            claims = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={"require": ["exp", "sub"]},
            )
        except jwt.ExpiredSignatureError:
            return AccessTokenCheck(AccessTokenStatus.EXPIRED)
        except jwt.InvalidSignatureError:
            return AccessTokenCheck(AccessTokenStatus.BAD_SIGNATURE)
        except jwt.InvalidTokenError:
            return AccessTokenCheck(AccessTokenStatus.MALFORMED)

        if claims.get("type") != "access":
            return AccessTokenCheck(AccessTokenStatus.WRONG_TYPE)

        return AccessTokenCheck(
            AccessTokenStatus.VALID,
            TokenPayload(user_id=claims["sub"], email=claims.get("email", "")),
        )

    def verify_access_token(self, token: str) -> Optional[TokenPayload]:
        check = self.inspect_access_token(token)
        return check.payload if check.is_valid else None

    # ---------- refresh tokens ----------

    def create_refresh_token(self, user_id: str) -> str:
        """Opaque high-entropy string. NOT a JWT. Only its hash is stored."""
        token = Validator.generate_token(config.REFRESH_TOKEN_BYTES)
        record = RefreshToken(
            user_id=user_id,
            token_hash=Validator.hash_token(token),
            expires_at=utcnow() + config.JWT_REFRESH_TOKEN_EXPIRES,
        )
        self.db.add(record)
        self.db.commit()
        return token

    def generate_token_pair(self, user_id: str, email: str) -> TokenPair:
        return TokenPair(
            access_token=self.create_access_token(user_id, email),
            refresh_token=self.create_refresh_token(user_id),
        )

    def _find_refresh_token(self, user_id: str, token: str) -> Optional[RefreshToken]:
        if not token or not user_id:
            return None
        return self.db.query(RefreshToken).filter(
            RefreshToken.user_id == user_id,
            RefreshToken.token_hash == Validator.hash_token(token),
        ).first()

    def validate_refresh_token(self, user_id: str, token: str) -> bool:
        record = self._find_refresh_token(user_id, token)
        return record is not None and not record.revoked and record.expires_at > utcnow()

    def refresh_tokens(self, user_id: str, old_refresh_token: str) -> Optional[TokenPair]:
        """
        Rotate a refresh token.

        Returns None when the token is unknown, belongs to someone else,
        is expired or already revoked, or the user no longer exists.
        """
        record = self._find_refresh_token(user_id, old_refresh_token)
        if record is None:
            return None

        if record.revoked:
            logger.warning("Revoked refresh token presented again for user %s", user_id)
            return None

        if record.expires_at <= utcnow():
            return None

        user = self.db.get(User, user_id)
        if user is None:
            return None

        # Conditional update: of two concurrent redeemers only one matches a row
        result = self.db.execute(
            update(RefreshToken)
            .where(RefreshToken.id == record.id, RefreshToken.revoked.is_(False))
            .values(revoked=True, revoked_at=utcnow())
        )
        if result.rowcount != 1:
            self.db.rollback()
            logger.warning("Refresh token for user %s redeemed concurrently", user_id)
            return None

        # The new refresh token commits together with the revocation
        return self.generate_token_pair(user.id, user.email)

    def revoke_refresh_token(self, user_id: str, token: str) -> bool:
        record = self._find_refresh_token(user_id, token)
        if record is None or record.revoked:
            return False
        record.revoked = True
        record.revoked_at = utcnow()
        self.db.commit()
        return True

    def revoke_all_user_tokens(self, user_id: str) -> int:
        """Panic Button / Suspected compromise"""
        result = self.db.execute(
            update(RefreshToken)
            .where(RefreshToken.user_id == user_id, RefreshToken.revoked.is_(False))
            .values(revoked=True, revoked_at=utcnow())
        )
        self.db.commit()
        return result.rowcount
