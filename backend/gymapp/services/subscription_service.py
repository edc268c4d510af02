"""
Subscriptions: gym owners add, cancel and renew client plans; the booking engine reads the
active one. Each purchase or renewal records a Payment in the same transaction.
"""
import logging
from datetime import datetime

from sqlalchemy.orm import Session

from gymapp.core.constants import (
    PAYMENT_METHODS,
    PLAN_DEFAULTS,
    PLAN_TYPES,
    SUBSCRIPTION_ACTIVE,
    SUBSCRIPTION_CANCELED,
    SUBSCRIPTION_EXPIRED,
)
from gymapp.core.errors import InvalidInput, NotFound
from gymapp.core.security import Role
from gymapp.core.timeutils import as_utc, isoformat, parse_instant, utcnow
from gymapp.models.payment import Payment
from gymapp.models.subscription import Subscription
from gymapp.models.user import User
from gymapp.services.auth_service import get_user

logger = logging.getLogger(__name__)


def serialize_subscription(row: Subscription, client: User | None = None) -> dict:
    out = {
        "id": row.id,
        "client_id": row.client_id,
        "plan_type": row.plan_type,
        "status": row.status,
        "start_date": isoformat(row.start_date),
        "end_date": isoformat(row.end_date),
        "renewal_date": isoformat(row.renewal_date),
        "amount_paid": row.amount_paid,
        "payment_method": row.payment_method,
        "transaction_id": row.transaction_id,
        "session_discount": row.session_discount,
        "max_bookings_per_month": row.max_bookings_per_month,
    }
    if client is not None:
        out["client"] = {"id": client.id, "username": client.username, "email": client.email}
    return out


def _validate_payment(amount_paid: float, method: str) -> None:
    if amount_paid is None or amount_paid < 0:
        raise InvalidInput("Amount paid must be zero or positive.")
    if method not in PAYMENT_METHODS:
        raise InvalidInput(f"Invalid payment method. Choose from {', '.join(PAYMENT_METHODS)}")


def _future_end(end_date: str | datetime) -> datetime:
    end = parse_instant(end_date, field="end date")
    if end <= utcnow():
        raise InvalidInput("End date must be in the future.")
    return end


def get_active_subscription(db: Session, client_id: int) -> Subscription | None:
    """Active subscription that has not yet ended, even if the expiry job has not caught up."""
    return (
        db.query(Subscription)
        .filter(
            Subscription.client_id == client_id,
            Subscription.status == SUBSCRIPTION_ACTIVE,
            Subscription.end_date > utcnow(),
        )
        .order_by(Subscription.end_date.desc())
        .first()
    )


def add_subscription(
    db: Session,
    owner_id: int,
    *,
    client_id: int,
    plan_type: str,
    end_date: str | datetime,
    amount_paid: float,
    method: str,
    transaction_id: str | None = None,
    session_discount: float | None = None,
    max_bookings_per_month: int | None = None,
) -> dict:
    """Create an active subscription plus its payment. Raises NotFound / InvalidInput."""
    if plan_type not in PLAN_TYPES:
        raise InvalidInput("Invalid plan type.")
    _validate_payment(amount_paid, method)
    end = _future_end(end_date)
    default_discount, default_cap = PLAN_DEFAULTS[plan_type]
    discount = default_discount if session_discount is None else session_discount
    if not 0 <= discount <= 100:
        raise InvalidInput("Session discount must be between 0 and 100.")
    cap = default_cap if max_bookings_per_month is None else max_bookings_per_month
    if cap < 0:
        raise InvalidInput("Monthly booking cap must be zero or positive.")

    client = get_user(db, client_id, Role.CLIENT)
    if get_active_subscription(db, client_id):
        raise InvalidInput("Client already has an active subscription.")

    now = utcnow()
    row = Subscription(
        client_id=client.id,
        plan_type=plan_type,
        status=SUBSCRIPTION_ACTIVE,
        start_date=now,
        end_date=end,
        renewal_date=end,
        amount_paid=amount_paid,
        payment_method=method,
        transaction_id=transaction_id,
        session_discount=discount,
        max_bookings_per_month=cap,
    )
    db.add(row)
    db.add(Payment(client_id=client.id, amount=amount_paid, method=method, transaction_id=transaction_id, recorded_by=owner_id))
    db.commit()
    db.refresh(row)
    logger.info("Subscription %s (%s) created for client %s by owner %s", row.id, plan_type, client.id, owner_id)
    return serialize_subscription(row, client)


def _get(db: Session, subscription_id: int) -> Subscription:
    row = db.get(Subscription, subscription_id)
    if not row:
        raise NotFound("Subscription not found.")
    return row


def cancel_subscription(db: Session, subscription_id: int) -> dict:
    row = _get(db, subscription_id)
    row.status = SUBSCRIPTION_CANCELED
    db.commit()
    logger.info("Subscription %s canceled", subscription_id)
    return serialize_subscription(row)


def renew_subscription(
    db: Session,
    owner_id: int,
    subscription_id: int,
    *,
    end_date: str | datetime,
    amount_paid: float,
    method: str,
    transaction_id: str | None = None,
) -> dict:
    """Reactivate with new dates and record the renewal payment."""
    row = _get(db, subscription_id)
    _validate_payment(amount_paid, method)
    end = _future_end(end_date)
    other = get_active_subscription(db, row.client_id)
    if other is not None and other.id != row.id:
        raise InvalidInput("Client already has an active subscription.")

    row.start_date = utcnow()
    row.end_date = end
    row.renewal_date = end
    row.status = SUBSCRIPTION_ACTIVE
    row.amount_paid = amount_paid
    row.payment_method = method
    row.transaction_id = transaction_id
    db.add(Payment(client_id=row.client_id, amount=amount_paid, method=method, transaction_id=transaction_id, recorded_by=owner_id))
    db.commit()
    db.refresh(row)
    logger.info("Subscription %s renewed until %s", subscription_id, end.isoformat())
    return serialize_subscription(row)


def list_subscriptions(db: Session) -> list[dict]:
    rows = (
        db.query(Subscription, User)
        .join(User, User.id == Subscription.client_id)
        .order_by(Subscription.created_at.desc(), Subscription.id.desc())
        .all()
    )
    return [serialize_subscription(s, u) for s, u in rows]


def expire_subscriptions(db: Session, now: datetime | None = None) -> int:
    """Mark active subscriptions whose end_date has passed as expired. Returns count."""
    now = as_utc(now or utcnow())
    rows = db.query(Subscription).filter(Subscription.status == SUBSCRIPTION_ACTIVE).all()
    expired = 0
    for row in rows:
        if as_utc(row.end_date) <= now:
            row.status = SUBSCRIPTION_EXPIRED
            expired += 1
    if expired:
        db.commit()
    return expired
