from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session as DBSession

from .config import config
from .errors import NotFoundError, RequestValidationError
from .models import ProfilePhoto, User
from .schemas import PhotoResponse, PhotoUploadRequest, ProfileResponse, ProfileUpdateRequest
from .users import UserRepository

PROFILE_FIELDS = ('display_name', 'age', 'bio', 'location', 'interests')


class ProfileService:
    def __init__(self, db: DBSession):
        self.db = db
        self.users = UserRepository(db)

    def get_profile(self, user_id: str, viewer_id: str) -> ProfileResponse:
        user = self.users.find_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")

        profile = ProfileResponse.model_validate(user)
        if user.id != viewer_id:
            # Contact details stay private to the owner
            profile.email = None
        return profile

    def update_profile(self, user_id: str, data: ProfileUpdateRequest):
        """Full overwrite: fields missing from the request are cleared"""
        user = self._require_user(user_id)
        self.users.update_user(user, **{name: getattr(data, name) for name in PROFILE_FIELDS})

    def add_photo(self, user_id: str, data: PhotoUploadRequest) -> PhotoResponse:
        """
        Append a photo at an explicit order index. Once the user holds
        enough photos the profile is marked complete; removing photos
        later does not clear the flag.
        """
        user = self._require_user(user_id)

        taken = self.db.query(ProfilePhoto).filter(
            ProfilePhoto.user_id == user.id,
            ProfilePhoto.photo_order == data.photo_order,
        ).first()
        if taken:
            raise RequestValidationError("Photo order already in use")

        photo = ProfilePhoto(user_id=user.id, photo_url=data.photo_url, photo_order=data.photo_order)
        self.db.add(photo)
        try:
            self.db.flush()
        except IntegrityError:
            self.db.rollback()
            raise RequestValidationError("Photo order already in use") from None

        photo_count = self.db.query(func.count(ProfilePhoto.id)).filter(ProfilePhoto.user_id == user.id).scalar()
        if photo_count >= config.PROFILE_COMPLETE_MIN_PHOTOS and not user.profile_complete:
            user.profile_complete = True

        self.db.commit()
        return PhotoResponse.model_validate(photo)

    def _require_user(self, user_id: str) -> User:
        user = self.users.find_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user
