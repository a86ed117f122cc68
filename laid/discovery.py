"""
Discovery feed and swipe handling, including match formation.
"""

import logging
import uuid
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session as DBSession, selectinload

from .config import config
from .errors import NotFoundError, RequestValidationError
from .models import Match, Swipe, SwipeDirection, User
from .schemas import DiscoveryProfile, SwipeResponse
from .utils import utcnow

logger = logging.getLogger(__name__)


def canonical_pair(first_id: str, second_id: str) -> tuple:
    """Order a user pair so that (A, B) and (B, A) map to the same match row"""
    return (first_id, second_id) if first_id < second_id else (second_id, first_id)


class DiscoveryService:
    def __init__(self, db: DBSession):
        self.db = db

    def get_discovery_feed(self, user_id: str) -> List[DiscoveryProfile]:
        """
        Candidates for the user: not themselves, not suspended, with a
        complete profile, and not already swiped on (in either direction).
        """
        already_swiped = select(Swipe.swiped_id).where(Swipe.swiper_id == user_id)

        candidates = (
            self.db.query(User)
            .options(selectinload(User.photos))
            .filter(
                User.id != user_id,
                User.is_suspended.is_(False),
                User.profile_complete.is_(True),
                User.id.not_in(already_swiped),
            )
            .order_by(User.created_at, User.id)
            .limit(config.DISCOVERY_PAGE_SIZE)
            .all()
        )

        return [
            DiscoveryProfile(
                id=user.id,
                display_name=user.display_name,
                age=user.age,
                bio=user.bio,
                location=user.location,
                interests=user.interests,
                photos=[photo.photo_url for photo in user.photos],
            )
            for user in candidates
        ]

    def swipe(self, user_id: str, target_id: str, direction: str) -> SwipeResponse:
        """
        Record a swipe. A right swipe on someone who already swiped right
        on the user forms a match.
        """
        if target_id == user_id:
            raise RequestValidationError("Cannot swipe on yourself")
        if self.db.get(User, target_id) is None:
            raise NotFoundError("User not found")

        direction = SwipeDirection(direction)
        self.db.add(Swipe(swiper_id=user_id, swiped_id=target_id, direction=direction))
        self.db.commit()

        if direction is not SwipeDirection.RIGHT:
            return SwipeResponse(match=False)

        reciprocal = self.db.query(Swipe.id).filter(
            Swipe.swiper_id == target_id,
            Swipe.swiped_id == user_id,
            Swipe.direction == SwipeDirection.RIGHT,
        ).first()
        if reciprocal is None:
            return SwipeResponse(match=False)

        match = self._create_match(user_id, target_id)
        return SwipeResponse(match=True, matched_user_id=target_id, match_id=match.id if match else None)

    def _create_match(self, first_id: str, second_id: str) -> Optional[Match]:
        """
        Idempotent insert of the canonical pair. The unique constraint on
        (user1_id, user2_id) decides between concurrent reciprocal swipes;
        the loser's insert is a no-op and it reads the winner's row.
        """
        user1_id, user2_id = canonical_pair(first_id, second_id)

        insert = _dialect_insert(self.db.get_bind().dialect.name)
        if insert is not None:
            statement = insert(Match.__table__).values(
                id=str(uuid.uuid4()), user1_id=user1_id, user2_id=user2_id, created_at=utcnow(),
            ).on_conflict_do_nothing(index_elements=['user1_id', 'user2_id'])
            created = self.db.execute(statement).rowcount == 1
            self.db.commit()
        else:
            try:
                with self.db.begin_nested():
                    self.db.add(Match(user1_id=user1_id, user2_id=user2_id))
                created = True
            except IntegrityError:
                created = False
            self.db.commit()

        match = self._find_match(user1_id, user2_id)
        if created:
            logger.info("Match %s formed between %s and %s", match.id, user1_id, user2_id)
        return match

    def _find_match(self, user1_id: str, user2_id: str) -> Optional[Match]:
        return self.db.query(Match).filter(Match.user1_id == user1_id, Match.user2_id == user2_id).first()


def _dialect_insert(dialect_name: str):
    """INSERT ... ON CONFLICT DO NOTHING for backends that support it"""
    if dialect_name == 'postgresql':
        from sqlalchemy.dialects.postgresql import insert
        return insert
    if dialect_name == 'sqlite':
        from sqlalchemy.dialects.sqlite import insert
        return insert
    return None
