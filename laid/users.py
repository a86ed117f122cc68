from typing import Optional

from sqlalchemy.orm import Session as DBSession

from .models import User
from .utils import Validator

SOCIAL_PROVIDERS = ('google', 'apple', 'facebook', 'instagram')


class UserRepository:
    """CRUD over the user entity, keyed by id, email or social provider id"""

    def __init__(self, db: DBSession):
        self.db = db

    def create_user(
        self,
        email: str,
        password_hash: Optional[str] = None,
        email_verified: bool = False,
        **social_ids,
    ) -> User:
        """
        Create and commit a user. Social accounts pass e.g. ``google_id=...``
        instead of a password hash.
        """
        unknown = set(social_ids) - {f'{p}_id' for p in SOCIAL_PROVIDERS}
        if unknown:
            raise ValueError(f"Unknown social id field(s): {', '.join(sorted(unknown))}")
        if not password_hash and not any(social_ids.values()):
            raise ValueError("A user needs a password hash or a social id")

        user = User(
            email=Validator.normalize_email(email),
            password_hash=password_hash,
            email_verified=email_verified,
            **social_ids,
        )
        self.db.add(user)
        self.db.commit()
        return user

    def find_by_id(self, user_id: str) -> Optional[User]:
        if not user_id:
            return None
        return self.db.get(User, user_id)

    def find_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == Validator.normalize_email(email)).first()

    def find_by_social_id(self, provider: str, provider_id: str) -> Optional[User]:
        if provider not in SOCIAL_PROVIDERS:
            raise ValueError(f"Unknown social provider: {provider}")
        column = getattr(User, f'{provider}_id')
        return self.db.query(User).filter(column == provider_id).first()

    def update_user(self, user: User, **fields) -> User:
        for name, value in fields.items():
            if not hasattr(User, name):
                raise ValueError(f"Unknown user field: {name}")
            setattr(user, name, value)
        self.db.commit()
        return user

    def delete_user(self, user: User):
        self.db.delete(user)
        self.db.commit()
