"""
Chat messages: persist one message between two users and load a conversation's history.
Shared by the REST routes and the realtime relay; delivery is not handled here.
"""
import logging

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from gymapp.core.errors import Forbidden, InvalidInput, NotFound
from gymapp.core.security import Identity
from gymapp.core.timeutils import isoformat, utcnow
from gymapp.models.message import Message
from gymapp.models.user import User

logger = logging.getLogger(__name__)

MAX_MESSAGE_LENGTH = 4000


def serialize_message(row: Message) -> dict:
    return {
        "id": row.id,
        "sender": row.sender_id,
        "receiver": row.receiver_id,
        "text": row.text,
        "timestamp": isoformat(row.timestamp),
    }


def send_message(db: Session, sender_id: int, receiver_id: int, text: str) -> dict:
    """
    Persist a message stamped with the current time. The caller has already checked that
    sender_id is the authenticated identity. Raises InvalidInput (missing, non-string or
    too long text) or NotFound (unknown receiver).
    """
    if text is not None and not isinstance(text, str):
        raise InvalidInput("Message text must be a string.")
    text = (text or "").strip()
    if not text:
        raise InvalidInput("Message text is required.")
    if len(text) > MAX_MESSAGE_LENGTH:
        raise InvalidInput(f"Message text is limited to {MAX_MESSAGE_LENGTH} characters.")
    if db.get(User, receiver_id) is None:
        raise NotFound("Receiver not found.")
    row = Message(sender_id=sender_id, receiver_id=receiver_id, text=text, timestamp=utcnow())
    db.add(row)
    db.commit()
    db.refresh(row)
    logger.debug("Message %s stored: %s -> %s", row.id, sender_id, receiver_id)
    return serialize_message(row)


def get_history(db: Session, caller: Identity, user_a: int, user_b: int) -> list[dict]:
    """
    All messages between user_a and user_b in either direction, oldest first.
    Raises Forbidden unless caller is one of the two participants.
    """
    if caller.id not in (user_a, user_b):
        raise Forbidden("Access denied. You are not a participant in this chat.")
    rows = (
        db.query(Message)
        .filter(
            or_(
                and_(Message.sender_id == user_a, Message.receiver_id == user_b),
                and_(Message.sender_id == user_b, Message.receiver_id == user_a),
            )
        )
        .order_by(Message.timestamp.asc(), Message.id.asc())
        .all()
    )
    return [serialize_message(r) for r in rows]
