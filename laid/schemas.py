"""
Request and response schemas for the JSON API.

Wire names are camelCase; attributes are snake_case. Request models are
validated at the route boundary with ``parse_request``.
"""

from datetime import datetime
from typing import List, Literal, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from .config import config
from .errors import RequestValidationError


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    def to_json(self, **options) -> dict:
        return self.model_dump(by_alias=True, mode='json', **options)


T = TypeVar('T', bound=ApiModel)


def parse_request(model: Type[T], data) -> T:
    """Validate a JSON body, turning pydantic errors into a 400"""
    if not isinstance(data, dict):
        raise RequestValidationError("Request body must be a JSON object")
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        details = [
            {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]}
            for err in exc.errors()
        ]
        raise RequestValidationError("Invalid request", details=details) from None


# ==================== AUTH ====================

class RegisterRequest(ApiModel):
    email: str
    password: str


class LoginRequest(ApiModel):
    email: str
    password: str


class VerifyEmailRequest(ApiModel):
    token: str = Field(min_length=1)


class ResendVerificationRequest(ApiModel):
    email: str


class RefreshTokenRequest(ApiModel):
    refresh_token: str = Field(min_length=1)
    user_id: str = Field(min_length=1)


class LogoutRequest(ApiModel):
    refresh_token: Optional[str] = None
    user_id: Optional[str] = None


class UserSummary(ApiModel):
    id: str
    email: str
    email_verified: bool
    is_verified_user: bool


class TokenPairResponse(ApiModel):
    access_token: str
    refresh_token: str


class LoginResponse(TokenPairResponse):
    message: str = "Login successful"
    user: UserSummary


# ==================== PROFILE ====================

class ProfileUpdateRequest(ApiModel):
    display_name: Optional[str] = Field(default=None, max_length=100)
    age: Optional[int] = None
    bio: Optional[str] = Field(default=None, max_length=2000)
    location: Optional[str] = Field(default=None, max_length=255)
    interests: Optional[List[str]] = None

    @field_validator('age')
    @classmethod
    def check_age(cls, value):
        if value is not None and value < config.MINIMUM_AGE:
            raise ValueError(f"Must be at least {config.MINIMUM_AGE} years old")
        if value is not None and value > config.MAXIMUM_AGE:
            raise ValueError(f"Must be at most {config.MAXIMUM_AGE} years old")
        return value


class PhotoUploadRequest(ApiModel):
    photo_url: str = Field(min_length=1, max_length=2048)
    photo_order: int = Field(ge=0, le=config.MAX_PHOTO_ORDER)


class PhotoResponse(ApiModel):
    id: str
    photo_url: str
    photo_order: int


class ProfileResponse(ApiModel):
    id: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    age: Optional[int] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    interests: Optional[List[str]] = None
    is_verified_user: bool
    profile_complete: bool
    photos: List[PhotoResponse] = []


# ==================== DISCOVERY ====================

class SwipeRequest(ApiModel):
    swiped_id: str = Field(min_length=1)
    direction: Literal['left', 'right']


class SwipeResponse(ApiModel):
    match: bool
    matched_user_id: Optional[str] = None
    match_id: Optional[str] = None


class DiscoveryProfile(ApiModel):
    id: str
    display_name: Optional[str] = None
    age: Optional[int] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    interests: Optional[List[str]] = None
    photos: List[str] = []


# ==================== MATCHES & MESSAGES ====================

class MatchSummary(ApiModel):
    match_id: str
    created_at: datetime
    id: str
    display_name: Optional[str] = None
    age: Optional[int] = None
    bio: Optional[str] = None
    photo: Optional[str] = None


class SendMessageRequest(ApiModel):
    content: str

    @field_validator('content')
    @classmethod
    def check_content(cls, value):
        value = value.strip()
        if not value:
            raise ValueError("Message cannot be empty")
        if len(value) > config.MESSAGE_MAX_LENGTH:
            raise ValueError(f"Message cannot exceed {config.MESSAGE_MAX_LENGTH} characters")
        return value


class MessageResponse(ApiModel):
    id: int
    match_id: str
    sender_id: str
    content: str
    created_at: datetime
    sender_name: Optional[str] = None
