"""
AI suggestions: workout, nutrition and progress advice for a user's profile.
Clients get suggestions for themselves; trainers and gym owners may pass a user_id.
"""
import logging
from typing import NoReturn

from fastapi import APIRouter, Depends
from pydantic import AliasChoices, BaseModel, Field
from sqlalchemy.orm import Session

from gymapp.api.deps import get_current_identity
from gymapp.core.errors import Forbidden, GymAppError, error_to_http
from gymapp.core.security import Identity
from gymapp.db.session import get_db
from gymapp.services.suggestion_service import generate_suggestions

router = APIRouter()
logger = logging.getLogger(__name__)


class SuggestionRequest(BaseModel):
    user_id: int | None = Field(None, validation_alias=AliasChoices("userId", "user_id"))


def _handle_agent_error(exc: Exception, log_message: str) -> NoReturn:
    logger.exception(log_message)
    raise error_to_http(exc) from exc


@router.post("/suggestions")
async def suggestions(
    body: SuggestionRequest | None = None,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    user_id = body.user_id if body and body.user_id is not None else identity.id
    if user_id != identity.id and identity.is_client:
        raise Forbidden("Clients can only request suggestions for themselves.")
    try:
        return await generate_suggestions(db, user_id)
    except GymAppError:
        raise
    except Exception as e:  # noqa: BLE001
        _handle_agent_error(e, "AI suggestions failed")
