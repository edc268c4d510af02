"""
Payments (gym owner): history, cash acceptance, unpaid clients and card payment intents.
"""
import logging

from fastapi import APIRouter, Depends
from pydantic import AliasChoices, BaseModel, Field
from sqlalchemy.orm import Session

from gymapp.api.deps import get_current_identity, require
from gymapp.core.security import Identity, Role
from gymapp.db.session import get_db
from gymapp.services import payment_gateway, payment_service

router = APIRouter()
logger = logging.getLogger(__name__)


class CashPaymentRequest(BaseModel):
    client_id: int = Field(..., validation_alias=AliasChoices("clientId", "client_id"))
    amount: float


class PaymentIntentRequest(BaseModel):
    amount: float
    currency: str = "usd"
    description: str | None = None


@router.get("")
def list_payments(
    limit: int = 200,
    _owner: Identity = Depends(require(Role.GYM_OWNER)),
    db: Session = Depends(get_db),
):
    return payment_service.list_payments(db, limit=min(max(limit, 1), 1000))


@router.post("/cash", status_code=201)
def accept_cash(
    body: CashPaymentRequest,
    owner: Identity = Depends(require(Role.GYM_OWNER)),
    db: Session = Depends(get_db),
):
    """Record a cash payment and reduce the client's balance due."""
    payment = payment_service.accept_cash_payment(db, owner.id, body.client_id, body.amount)
    return {"message": "Payment accepted successfully", "payment": payment}


@router.get("/unpaid-clients")
def unpaid_clients(
    _owner: Identity = Depends(require(Role.GYM_OWNER)),
    db: Session = Depends(get_db),
):
    return payment_service.list_unpaid_clients(db)


@router.post("/stripe")
def create_intent(
    body: PaymentIntentRequest,
    _identity: Identity = Depends(get_current_identity),
):
    """Create a card payment intent; the client completes it with client_secret."""
    return payment_gateway.create_payment_intent(body.amount, body.currency, body.description)


@router.get("/stripe/{intent_id}")
def get_intent(
    intent_id: str,
    _identity: Identity = Depends(get_current_identity),
):
    return payment_gateway.retrieve_payment_intent(intent_id)
