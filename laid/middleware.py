import logging
from functools import wraps

from flask import g, request

from .database import get_db
from .errors import AuthenticationError
from .tokens import TokenService

logger = logging.getLogger(__name__)


def bearer_token():
    header = request.headers.get('Authorization', '')
    scheme, _, token = header.partition(' ')
    if scheme.lower() != 'bearer' or not token.strip():
        return None
    return token.strip()


def require_auth(view):
    """
    Reject the request with 401 unless it carries a valid access token.
    On success the caller's id and email are available as
    ``g.current_user_id`` and ``g.current_user_email``.
    """
    @wraps(view)
    def wrapper(*args, **kwargs):
        token = bearer_token()
        if token is None:
            raise AuthenticationError("Access token required")

        check = TokenService(get_db()).inspect_access_token(token)
        if not check.is_valid:
            logger.debug("Rejected access token: %s", check.status.value)
            raise AuthenticationError("Invalid or expired token")

        g.current_user_id = check.payload.user_id
        g.current_user_email = check.payload.email
        return view(*args, **kwargs)

    return wrapper
