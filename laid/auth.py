"""
Authentication Module
Registration, email verification, login and session (token) lifecycle.
"""

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session as DBSession

from .crypto import password_manager
from .email_service import send_verification_email, send_welcome_email
from .errors import AuthenticationError, ForbiddenError, NotFoundError, RequestValidationError
from .models import User
from .schemas import LoginResponse, TokenPairResponse, UserSummary
from .tokens import TokenService
from .users import UserRepository
from .utils import Validator
from .verification import VerificationService

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"


class AuthService:
    """
    Orchestrates the account lifecycle:

        unregistered -> registered (unverified) -> verified -> active | suspended

    Login is only allowed for verified, non-suspended accounts. Credential
    failures are reported generically; account-state failures (unverified,
    suspended) are reported specifically.
    """

    def __init__(self, db: DBSession):
        self.db = db
        self.users = UserRepository(db)
        self.tokens = TokenService(db)
        self.verification = VerificationService(db)

    def register_user(self, email: str, password: str) -> User:
        """
        Register new user and request the verification email.

        Checks (all before any write):
        - Email format
        - Password policy
        - Email uniqueness
        """
        email = Validator.normalize_email(email)

        if not Validator.validate_email(email):
            raise RequestValidationError("Invalid email format")

        result = Validator.validate_password(password)
        if not result.is_valid:
            raise RequestValidationError("Password does not meet requirements", errors=result.errors)

        if self.users.find_by_email(email):
            raise RequestValidationError("Email already in use")

        try:
            user = self.users.create_user(email, password_hash=password_manager.hash_password(password))
        except IntegrityError:
            # Lost a race with a concurrent registration for the same address
            self.db.rollback()
            raise RequestValidationError("Email already in use") from None

        token = self.verification.generate_verification_token()
        self.verification.store_verification_token(user.id, token)

        # A failed send leaves the account in place; the user can ask for a resend
        send_verification_email(user.email, token)

        logger.info("Registered user %s", user.id)
        return user

    def login(self, email: str, password: str) -> LoginResponse:
        if not isinstance(email, str) or not Validator.validate_email(email.strip()):
            raise AuthenticationError(INVALID_CREDENTIALS)

        user = self.users.find_by_email(email)
        if user is None or not user.password_hash:
            logger.info("Login failed: no password account for the given email")
            raise AuthenticationError(INVALID_CREDENTIALS)

        if not user.email_verified:
            raise ForbiddenError("Email not verified. Please check your email.")

        if user.is_suspended:
            logger.info("Login refused for suspended user %s", user.id)
            raise ForbiddenError("Account suspended")

        if not password_manager.verify_password(user.password_hash, password):
            logger.info("Login failed: bad password for user %s", user.id)
            raise AuthenticationError(INVALID_CREDENTIALS)

        if password_manager.needs_rehash(user.password_hash):
            user.password_hash = password_manager.hash_password(password)
            self.db.commit()

        pair = self.tokens.generate_token_pair(user.id, user.email)
        return LoginResponse(
            access_token=pair.access_token,
            refresh_token=pair.refresh_token,
            user=UserSummary.model_validate(user),
        )

    def verify_email(self, token: str):
        user_id = self.verification.validate_verification_token(token)
        if user_id is None:
            raise RequestValidationError("Invalid or expired verification token")

        self.verification.mark_email_as_verified(user_id)

        user = self.users.find_by_id(user_id)
        send_welcome_email(user.email, user.display_name or user.email.split('@')[0])
        logger.info("Verified email for user %s", user_id)

    def resend_verification(self, email: str):
        if not Validator.validate_email(Validator.normalize_email(email)):
            raise RequestValidationError("Invalid email format")

        user = self.users.find_by_email(email)
        if user is None:
            raise NotFoundError("User not found")

        if user.email_verified:
            raise RequestValidationError("Email already verified")

        token = self.verification.generate_verification_token()
        self.verification.store_verification_token(user.id, token)
        send_verification_email(user.email, token)

    def refresh(self, user_id: str, refresh_token: str) -> TokenPairResponse:
        pair = self.tokens.refresh_tokens(user_id, refresh_token)
        if pair is None:
            raise AuthenticationError("Invalid or expired refresh token")
        return TokenPairResponse(access_token=pair.access_token, refresh_token=pair.refresh_token)

    def logout(self, user_id: Optional[str], refresh_token: Optional[str]):
        """Never fails: nothing to revoke is not an error"""
        if user_id and refresh_token:
            self.tokens.revoke_refresh_token(user_id, refresh_token)

    def logout_all(self, user_id: str) -> int:
        revoked = self.tokens.revoke_all_user_tokens(user_id)
        logger.info("Revoked %d refresh token(s) for user %s", revoked, user_id)
        return revoked
