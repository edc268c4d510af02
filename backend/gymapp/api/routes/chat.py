"""
Chat over REST: conversation history between two users and offline send.
REST send only persists; realtime delivery belongs to the /ws connection.
"""
import logging

from fastapi import APIRouter, Depends
from pydantic import AliasChoices, BaseModel, Field
from sqlalchemy.orm import Session

from gymapp.api.deps import get_current_identity
from gymapp.core.errors import Forbidden
from gymapp.core.security import Identity
from gymapp.db.session import get_db
from gymapp.services import chat_service

router = APIRouter()
logger = logging.getLogger(__name__)


class SendMessageRequest(BaseModel):
    sender: int = Field(..., validation_alias=AliasChoices("sender", "sender_id", "senderId"))
    receiver: int = Field(..., validation_alias=AliasChoices("receiver", "receiver_id", "receiverId"))
    text: str


@router.get("/{user_a}/{user_b}")
def chat_history(
    user_a: int,
    user_b: int,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Messages between user_a and user_b, oldest first. Caller must be one of them."""
    return chat_service.get_history(db, identity, user_a, user_b)


@router.post("/send", status_code=201)
def send(
    body: SendMessageRequest,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Persist a message from the caller to receiver, stamped with server time."""
    if body.sender != identity.id:
        logger.warning("REST send: user %s tried to send as %s", identity.id, body.sender)
        raise Forbidden("You can only send messages as yourself.")
    message = chat_service.send_message(db, identity.id, body.receiver, body.text)
    return {"message": "Message sent successfully", "data": message}
