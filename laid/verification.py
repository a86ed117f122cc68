from typing import Optional

from sqlalchemy.orm import Session as DBSession

from .config import config
from .models import User
from .utils import Validator, utcnow


class VerificationService:
    """
    Single-use, time-limited email verification tokens.

    Only one token is live per user: storing a new one overwrites the old.
    """

    def __init__(self, db: DBSession):
        self.db = db

    @staticmethod
    def generate_verification_token() -> str:
        return Validator.generate_token(config.EMAIL_VERIFICATION_TOKEN_BYTES)

    def store_verification_token(self, user_id: str, token: str):
        user = self.db.get(User, user_id)
        if user is None:
            return
        user.verification_token = token
        user.verification_token_expires = utcnow() + config.EMAIL_VERIFICATION_TOKEN_EXPIRES
        self.db.commit()

    def validate_verification_token(self, token: str) -> Optional[str]:
        """
        Returns the owning user id, or None when the token is unknown,
        expired, or the email is already verified. Callers cannot tell
        which.
        """
        if not token:
            return None
        user = self.db.query(User).filter(
            User.verification_token == token,
            User.verification_token_expires > utcnow(),
            User.email_verified.is_(False),
        ).first()
        return user.id if user else None

    def mark_email_as_verified(self, user_id: str):
        user = self.db.get(User, user_id)
        if user is None:
            return
        user.email_verified = True
        user.verification_token = None
        user.verification_token_expires = None
        self.db.commit()
