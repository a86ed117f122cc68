"""
Python client for the Laid API.

Mirrors what the web client does outside of rendering: it keeps the tokens
and the logged-in user in a local store, refreshes the access token when the
server rejects it, and polls a match's messages on a fixed interval.
"""

import json
import logging
import time
from pathlib import Path
from typing import Iterator, List, Optional

import requests

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 3.0
DEFAULT_TIMEOUT = 10


class ClientError(Exception):
    def __init__(self, status_code: int, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.errors = errors or []


class SessionExpired(ClientError):
    def __init__(self):
        super().__init__(401, "Session expired")


class MemoryTokenStore:
    KEYS = ('accessToken', 'refreshToken', 'user')

    def __init__(self):
        self._data = {}

    def get(self, key: str):
        return self._data.get(key)

    def set(self, key: str, value):
        self._data[key] = value

    def clear(self):
        self._data = {}


class TokenStore(MemoryTokenStore):
    """Tokens and user persisted as a JSON file, like browser local storage"""

    def __init__(self, path):
        super().__init__()
        self.path = Path(path)
        if self.path.exists():
            self._data = json.loads(self.path.read_text() or '{}')

    def set(self, key: str, value):
        super().set(key, value)
        self._save()

    def clear(self):
        super().clear()
        if self.path.exists():
            self.path.unlink()

    def _save(self):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self._data))


class LaidClient:
    def __init__(self, base_url: str, store=None, http=None, timeout: float = DEFAULT_TIMEOUT):
        self.base_url = base_url.rstrip('/')
        self.store = store if store is not None else MemoryTokenStore()
        self.http = http if http is not None else requests.Session()
        self.timeout = timeout

    # --- transport ---

    def _request(self, method: str, path: str, payload=None, auth: bool = False, retry: bool = True):
        headers = {}
        if auth:
            token = self.store.get('accessToken')
            if not token:
                raise SessionExpired()
            headers['Authorization'] = f'Bearer {token}'

        response = self.http.request(
            method, f'{self.base_url}{path}', json=payload, headers=headers, timeout=self.timeout,
        )

        if auth and retry and response.status_code == 401:
            self.refresh()
            return self._request(method, path, payload, auth=True, retry=False)

        if not response.ok:
            raise self._error(response)
        return response.json()

    @staticmethod
    def _error(response) -> ClientError:
        try:
            body = response.json()
        except ValueError:
            body = {}
        errors = body.get('errors') or []
        message = body.get('error') or ', '.join(errors) or f'Request failed with status {response.status_code}'
        return ClientError(response.status_code, message, errors)

    # --- auth ---

    def register(self, email: str, password: str) -> dict:
        return self._request('POST', '/auth/register', {'email': email, 'password': password})

    def login(self, email: str, password: str) -> dict:
        result = self._request('POST', '/auth/login', {'email': email, 'password': password})
        self.store.set('accessToken', result['accessToken'])
        self.store.set('refreshToken', result['refreshToken'])
        self.store.set('user', result['user'])
        return result

    def verify_email(self, token: str) -> dict:
        return self._request('POST', '/auth/verify-email', {'token': token})

    def resend_verification(self, email: str) -> dict:
        return self._request('POST', '/auth/resend-verification', {'email': email})

    def refresh(self) -> dict:
        user = self.store.get('user') or {}
        payload = {'refreshToken': self.store.get('refreshToken'), 'userId': user.get('id')}
        try:
            result = self._request('POST', '/auth/refresh-token', payload)
        except ClientError:
            self.store.clear()
            raise SessionExpired() from None
        self.store.set('accessToken', result['accessToken'])
        self.store.set('refreshToken', result['refreshToken'])
        return result

    def logout(self):
        refresh_token = self.store.get('refreshToken')
        user = self.store.get('user') or {}
        if refresh_token and user.get('id'):
            try:
                self._request('POST', '/auth/logout', {'refreshToken': refresh_token, 'userId': user['id']})
            except (ClientError, requests.RequestException):
                logger.warning("Server-side logout failed; clearing local session anyway")
        self.store.clear()

    def logout_all(self) -> dict:
        result = self._request('POST', '/auth/logout-all', auth=True)
        self.store.clear()
        return result

    def is_authenticated(self) -> bool:
        return bool(self.store.get('accessToken'))

    @property
    def user(self) -> Optional[dict]:
        return self.store.get('user')

    # --- profile ---

    def get_profile(self, user_id: str = 'me') -> dict:
        return self._request('GET', f'/profile/{user_id}', auth=True)

    def update_profile(self, **fields) -> dict:
        return self._request('PUT', '/profile/me', fields, auth=True)

    def add_photo(self, photo_url: str, photo_order: int) -> dict:
        return self._request('POST', '/profile/photos', {'photoUrl': photo_url, 'photoOrder': photo_order}, auth=True)

    # --- discovery & matches ---

    def get_feed(self) -> list:
        return self._request('GET', '/discovery/feed', auth=True)

    def swipe(self, swiped_id: str, direction: str) -> dict:
        return self._request('POST', '/discovery/swipe', {'swipedId': swiped_id, 'direction': direction}, auth=True)

    def get_matches(self) -> list:
        return self._request('GET', '/matches', auth=True)

    def unmatch(self, match_id: str) -> dict:
        return self._request('DELETE', f'/matches/{match_id}', auth=True)

    # --- messages ---

    def get_messages(self, match_id: str) -> list:
        return self._request('GET', f'/messages/{match_id}', auth=True)

    def send_message(self, match_id: str, content: str) -> dict:
        return self._request('POST', f'/messages/{match_id}', {'content': content}, auth=True)

    def poll_messages(self, match_id: str, interval: float = DEFAULT_POLL_INTERVAL) -> Iterator[dict]:
        """
        Yield messages of a match as they appear, checking every
        ``interval`` seconds. Runs until the caller stops iterating.
        """
        seen = set()
        while True:
            for message in self.get_messages(match_id):
                if message['id'] not in seen:
                    seen.add(message['id'])
                    yield message
            time.sleep(interval)
