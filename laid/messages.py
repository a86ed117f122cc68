from typing import List

from sqlalchemy.orm import Session as DBSession, joinedload

from .errors import ForbiddenError
from .matches import MatchService
from .models import Match, Message
from .schemas import MessageResponse, SendMessageRequest


class MessageService:
    """
    Per-match chat. Only the two participants may read or write; messages
    are append-only and returned oldest first.
    """

    def __init__(self, db: DBSession):
        self.db = db
        self.matches = MatchService(db)

    def require_membership(self, match_id: str, user_id: str) -> Match:
        # Unknown matches and foreign matches look the same to the caller
        match = self.matches.find_for_participant(match_id, user_id)
        if match is None:
            raise ForbiddenError("Not authorized")
        return match

    def list_messages(self, match_id: str, user_id: str) -> List[MessageResponse]:
        self.require_membership(match_id, user_id)

        messages = (
            self.db.query(Message)
            .options(joinedload(Message.sender))
            .filter(Message.match_id == match_id)
            .order_by(Message.created_at.asc(), Message.id.asc())
            .all()
        )
        return [self._to_response(message) for message in messages]

    def send_message(self, match_id: str, user_id: str, data: SendMessageRequest) -> MessageResponse:
        self.require_membership(match_id, user_id)

        message = Message(match_id=match_id, sender_id=user_id, content=data.content)
        self.db.add(message)
        self.db.commit()
        return self._to_response(message)

    @staticmethod
    def _to_response(message: Message) -> MessageResponse:
        return MessageResponse(
            id=message.id,
            match_id=message.match_id,
            sender_id=message.sender_id,
            content=message.content,
            created_at=message.created_at,
            sender_name=message.sender.display_name if message.sender else None,
        )
