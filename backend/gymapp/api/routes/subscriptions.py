"""
Subscriptions (gym owner): list, add, cancel and renew client plans.
"""
import logging

from fastapi import APIRouter, Depends
from pydantic import AliasChoices, BaseModel, Field
from sqlalchemy.orm import Session

from gymapp.api.deps import require
from gymapp.core.security import Identity, Role
from gymapp.db.session import get_db
from gymapp.services import subscription_service

router = APIRouter()
logger = logging.getLogger(__name__)


class AddSubscriptionRequest(BaseModel):
    client_id: int = Field(..., validation_alias=AliasChoices("clientId", "client_id"))
    plan_type: str = Field(..., validation_alias=AliasChoices("planType", "plan_type"))
    end_date: str = Field(..., validation_alias=AliasChoices("endDate", "end_date"))
    amount_paid: float = Field(..., validation_alias=AliasChoices("amountPaid", "amount_paid"))
    method: str
    transaction_id: str | None = Field(None, validation_alias=AliasChoices("transactionId", "transaction_id"))
    session_discount: float | None = Field(None, validation_alias=AliasChoices("sessionDiscount", "session_discount"))
    max_bookings_per_month: int | None = Field(
        None, validation_alias=AliasChoices("maxBookingsPerMonth", "max_bookings_per_month")
    )


class RenewSubscriptionRequest(BaseModel):
    end_date: str = Field(..., validation_alias=AliasChoices("endDate", "end_date"))
    amount_paid: float = Field(..., validation_alias=AliasChoices("amountPaid", "amount_paid"))
    method: str
    transaction_id: str | None = Field(None, validation_alias=AliasChoices("transactionId", "transaction_id"))


@router.get("")
def list_subscriptions(
    _owner: Identity = Depends(require(Role.GYM_OWNER)),
    db: Session = Depends(get_db),
):
    return subscription_service.list_subscriptions(db)


@router.post("", status_code=201)
def add_subscription(
    body: AddSubscriptionRequest,
    owner: Identity = Depends(require(Role.GYM_OWNER)),
    db: Session = Depends(get_db),
):
    """Create an active subscription for a client and record its payment."""
    subscription = subscription_service.add_subscription(db, owner.id, **body.model_dump())
    return {"message": "Subscription added successfully", "subscription": subscription}


@router.put("/{subscription_id}/cancel")
def cancel_subscription(
    subscription_id: int,
    _owner: Identity = Depends(require(Role.GYM_OWNER)),
    db: Session = Depends(get_db),
):
    subscription = subscription_service.cancel_subscription(db, subscription_id)
    return {"message": "Subscription canceled successfully", "subscription": subscription}


@router.put("/{subscription_id}/renew")
def renew_subscription(
    subscription_id: int,
    body: RenewSubscriptionRequest,
    owner: Identity = Depends(require(Role.GYM_OWNER)),
    db: Session = Depends(get_db),
):
    subscription = subscription_service.renew_subscription(db, owner.id, subscription_id, **body.model_dump())
    return {"message": "Subscription renewed successfully", "subscription": subscription}
