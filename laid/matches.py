from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session as DBSession

from .errors import NotFoundError
from .models import Match, User
from .schemas import MatchSummary


class MatchService:
    def __init__(self, db: DBSession):
        self.db = db

    def find_for_participant(self, match_id: str, user_id: str) -> Optional[Match]:
        """The match, but only if user_id is one of its two members"""
        return self.db.query(Match).filter(
            Match.id == match_id,
            or_(Match.user1_id == user_id, Match.user2_id == user_id),
        ).first()

    def list_matches(self, user_id: str) -> List[MatchSummary]:
        """Counterpart public fields and primary photo, newest match first"""
        matches = (
            self.db.query(Match)
            .filter(or_(Match.user1_id == user_id, Match.user2_id == user_id))
            .order_by(Match.created_at.desc())
            .all()
        )

        summaries = []
        for match in matches:
            other = self.db.get(User, match.counterpart_of(user_id))
            if other is None:
                continue
            summaries.append(MatchSummary(
                match_id=match.id,
                created_at=match.created_at,
                id=other.id,
                display_name=other.display_name,
                age=other.age,
                bio=other.bio,
                photo=other.primary_photo_url,
            ))
        return summaries

    def unmatch(self, match_id: str, user_id: str):
        match = self.find_for_participant(match_id, user_id)
        if match is None:
            raise NotFoundError("Match not found")
        self.db.delete(match)
        self.db.commit()
