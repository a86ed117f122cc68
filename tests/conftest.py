import os

os.environ["FLASK_ENV"] = "testing"

import pytest

from laid.config import TestingConfig
from laid.crypto import password_manager
from laid.database import SessionLocal
from laid.discovery import canonical_pair
from laid.main import create_app
from laid.models import Match, ProfilePhoto, User
from laid.tokens import TokenService

PASSWORD = "Str0ng!Pass"


@pytest.fixture
def app(tmp_path):
    class Settings(TestingConfig):
        DATABASE_URL = f"sqlite:///{tmp_path / 'test.db'}"

    app = create_app(Settings())
    yield app
    app.extensions['laid.engine'].dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def session(app):
    db = SessionLocal()
    yield db
    db.close()


@pytest.fixture
def make_user(session):
    counter = {"n": 0}

    def _make_user(email=None, password=PASSWORD, verified=True, complete=False, **fields):
        counter["n"] += 1
        user = User(
            email=email or f"user{counter['n']}@example.com",
            password_hash=password_manager.hash_password(password) if password else None,
            email_verified=verified,
            display_name=fields.pop("display_name", f"User {counter['n']}"),
            **fields,
        )
        session.add(user)
        session.commit()
        if complete:
            for order in range(2):
                session.add(ProfilePhoto(user_id=user.id, photo_url=f"https://img.example.com/{user.id}/{order}.jpg", photo_order=order))
            user.profile_complete = True
            session.commit()
        return user

    return _make_user


@pytest.fixture
def auth_headers(session):
    def _auth_headers(user):
        token = TokenService(session).create_access_token(user.id, user.email)
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers


@pytest.fixture
def make_match(session):
    def _make_match(first, second, created_at=None):
        user1_id, user2_id = canonical_pair(first.id, second.id)
        match = Match(user1_id=user1_id, user2_id=user2_id)
        if created_at is not None:
            match.created_at = created_at
        session.add(match)
        session.commit()
        return match

    return _make_match
