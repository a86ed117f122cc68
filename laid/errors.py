"""
Error taxonomy shared by the services and the HTTP layer.

Services raise these; ``main.register_error_handlers`` turns them into JSON
responses. Anything else that escapes a request is logged and reported as a
bare 500.
"""

from typing import List, Optional


class ApiError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": self.message}


class RequestValidationError(ApiError, ValueError):
    status_code = 400

    def __init__(self, message: str, errors: Optional[List[str]] = None, details: Optional[List[dict]] = None):
        super().__init__(message)
        self.errors = errors
        self.details = details

    def to_dict(self) -> dict:
        body = super().to_dict()
        if self.errors:
            body["errors"] = self.errors
        if self.details:
            body["details"] = self.details
        return body


class AuthenticationError(ApiError, PermissionError):
    status_code = 401


class ForbiddenError(ApiError, PermissionError):
    status_code = 403


class NotFoundError(ApiError, LookupError):
    status_code = 404
