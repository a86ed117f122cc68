from datetime import timedelta

import pytest

from laid.models import ProfilePhoto, RefreshToken, User
from laid.tokens import TokenService
from laid.users import UserRepository
from laid.utils import utcnow
from laid.verification import VerificationService


# --- repository ---

def test_create_and_find_user(session):
    users = UserRepository(session)
    user = users.create_user(" Carol@Example.com ", password_hash="hash")

    assert user.email == "carol@example.com"
    assert not user.email_verified
    assert users.find_by_id(user.id) is user
    assert users.find_by_email("CAROL@example.com").id == user.id
    assert users.find_by_email("nobody@example.com") is None
    assert users.find_by_id(None) is None


def test_social_account_has_no_password(session):
    users = UserRepository(session)
    user = users.create_user("dan@example.com", email_verified=True, google_id="g-42")

    assert user.password_hash is None
    assert users.find_by_social_id("google", "g-42").id == user.id
    assert users.find_by_social_id("apple", "g-42") is None


def test_unknown_social_provider_is_rejected(session):
    users = UserRepository(session)
    with pytest.raises(ValueError):
        users.create_user("eve@example.com", myspace_id="x")
    with pytest.raises(ValueError):
        users.find_by_social_id("myspace", "x")


def test_user_needs_some_credential(session):
    with pytest.raises(ValueError):
        UserRepository(session).create_user("nocreds@example.com")
    assert session.query(User).count() == 0


def test_update_user_rejects_unknown_field(session, make_user):
    user = make_user()
    users = UserRepository(session)

    users.update_user(user, bio="Hello")
    assert session.get(User, user.id).bio == "Hello"
    with pytest.raises(ValueError):
        users.update_user(user, favourite_colour="blue")


def test_delete_user_removes_owned_rows(session, make_user):
    user = make_user(complete=True)
    TokenService(session).generate_token_pair(user.id, user.email)

    UserRepository(session).delete_user(user)

    assert session.get(User, user.id) is None
    assert session.query(ProfilePhoto).filter_by(user_id=user.id).count() == 0
    assert session.query(RefreshToken).filter_by(user_id=user.id).count() == 0


# --- verification tokens ---

def test_verification_token_is_256_bit_hex():
    token = VerificationService.generate_verification_token()
    assert len(token) == 64
    int(token, 16)


def test_store_and_validate_verification_token(session, make_user):
    user = make_user(verified=False)
    verification = VerificationService(session)
    token = verification.generate_verification_token()

    verification.store_verification_token(user.id, token)

    assert verification.validate_verification_token(token) == user.id
    assert verification.validate_verification_token("0" * 64) is None
    assert verification.validate_verification_token("") is None
    expires = session.get(User, user.id).verification_token_expires
    assert timedelta(hours=23, minutes=59) < expires - utcnow() <= timedelta(hours=24)


def test_storing_new_token_invalidates_previous(session, make_user):
    user = make_user(verified=False)
    verification = VerificationService(session)

    verification.store_verification_token(user.id, "first")
    verification.store_verification_token(user.id, "second")

    assert verification.validate_verification_token("first") is None
    assert verification.validate_verification_token("second") == user.id


def test_expired_token_does_not_validate(session, make_user):
    user = make_user(verified=False)
    verification = VerificationService(session)
    verification.store_verification_token(user.id, "tok")

    user.verification_token_expires = utcnow() - timedelta(seconds=1)
    session.commit()

    assert verification.validate_verification_token("tok") is None


def test_mark_verified_clears_token(session, make_user):
    user = make_user(verified=False)
    verification = VerificationService(session)
    verification.store_verification_token(user.id, "tok")

    verification.mark_email_as_verified(user.id)

    user = session.get(User, user.id)
    assert user.email_verified
    assert user.verification_token is None
    assert user.verification_token_expires is None
    assert verification.validate_verification_token("tok") is None


def test_token_of_verified_user_does_not_validate(session, make_user):
    user = make_user(verified=True)
    verification = VerificationService(session)
    verification.store_verification_token(user.id, "tok")

    assert verification.validate_verification_token("tok") is None
