"""
Gym owner client management: list clients, take a client under management, release one.
"""
import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from gymapp.api.deps import require
from gymapp.core.security import Identity, Role
from gymapp.db.session import get_db
from gymapp.services import client_service

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/clients")
def list_clients(
    managed: bool = Query(False, description="Only clients managed by the caller"),
    owner: Identity = Depends(require(Role.GYM_OWNER)),
    db: Session = Depends(get_db),
):
    return {"clients": client_service.list_clients(db, owner.id, managed_only=managed)}


@router.post("/clients/{client_id}", status_code=201)
def add_client(
    client_id: int,
    owner: Identity = Depends(require(Role.GYM_OWNER)),
    db: Session = Depends(get_db),
):
    client = client_service.add_managed_client(db, owner.id, client_id)
    return {"message": "Client added to management successfully!", "client": client}


@router.delete("/clients/{client_id}")
def remove_client(
    client_id: int,
    owner: Identity = Depends(require(Role.GYM_OWNER)),
    db: Session = Depends(get_db),
):
    client = client_service.remove_managed_client(db, owner.id, client_id)
    return {"message": "Client removed successfully!", "client": client}
