"""
Payments recorded by gym owners: cash acceptance against a client's balance, payment history
and clients with an outstanding balance.
"""
import logging

from sqlalchemy.orm import Session

from gymapp.core.errors import InvalidInput, NotFound
from gymapp.core.security import Role
from gymapp.core.timeutils import isoformat
from gymapp.models.payment import Payment
from gymapp.models.user import User

logger = logging.getLogger(__name__)


def serialize_payment(row: Payment, client: User | None = None) -> dict:
    out = {
        "id": row.id,
        "client_id": row.client_id,
        "amount": row.amount,
        "method": row.method,
        "transaction_id": row.transaction_id,
        "recorded_by": row.recorded_by,
        "payment_date": isoformat(row.payment_date),
    }
    if client is not None:
        out["client"] = {"id": client.id, "username": client.username, "email": client.email}
    return out


def accept_cash_payment(db: Session, owner_id: int, client_id: int, amount: float) -> dict:
    """
    Reduce the client's balance_due by amount and record a cash payment, in one transaction.
    Raises NotFound for an unknown client, InvalidInput when amount is not positive or exceeds
    the balance due.
    """
    if amount is None or amount <= 0:
        raise InvalidInput("Amount must be positive.")
    client = (
        db.query(User)
        .filter(User.id == client_id, User.role == Role.CLIENT.value)
        .with_for_update()
        .first()
    )
    if client is None:
        raise NotFound("Client not found.")
    if amount > (client.balance_due or 0):
        raise InvalidInput("Payment exceeds balance due.")

    client.balance_due = round((client.balance_due or 0) - amount, 2)
    row = Payment(client_id=client.id, amount=amount, method="cash", recorded_by=owner_id)
    db.add(row)
    db.commit()
    db.refresh(row)
    logger.info("Cash payment %s of %s accepted for client %s (balance now %s)", row.id, amount, client.id, client.balance_due)
    return {**serialize_payment(row), "balance_due": client.balance_due}


def list_payments(db: Session, limit: int = 200) -> list[dict]:
    rows = (
        db.query(Payment, User)
        .join(User, User.id == Payment.client_id)
        .order_by(Payment.payment_date.desc(), Payment.id.desc())
        .limit(limit)
        .all()
    )
    return [serialize_payment(p, u) for p, u in rows]


def list_unpaid_clients(db: Session) -> list[dict]:
    rows = (
        db.query(User)
        .filter(User.role == Role.CLIENT.value, User.balance_due > 0)
        .order_by(User.balance_due.desc())
        .all()
    )
    return [{"id": r.id, "username": r.username, "email": r.email, "balance_due": r.balance_due} for r in rows]
