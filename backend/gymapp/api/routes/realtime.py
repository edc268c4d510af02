"""
Realtime chat over WebSocket at /ws.

The connection is authenticated at handshake (?token=... or Authorization header); an
unauthenticated socket is closed with 1008 before it is accepted. Each accepted connection
joins the room of its user id. Frames are JSON:

    {"event": "sendMessage", "data": {"sender": 1, "receiver": 2, "text": "hi"}}

A valid sendMessage is persisted and delivered as {"event": "receiveMessage", "data": message}
to every connection of both receiver and sender. A frame whose sender is not the connection's
identity is dropped.
"""
import asyncio
import json
import logging

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect, status

from gymapp.core.constants import EVENT_ERROR, EVENT_RECEIVE_MESSAGE, EVENT_SEND_MESSAGE
from gymapp.core.errors import AuthenticationError, GymAppError
from gymapp.core.security import Identity, bearer_token, decode_token
from gymapp.db.session import SessionLocal
from gymapp.services.chat_service import send_message
from gymapp.services.realtime import manager

router = APIRouter()
logger = logging.getLogger(__name__)


async def _send_error(websocket: WebSocket, detail: str) -> None:
    await websocket.send_json({"event": EVENT_ERROR, "data": {"detail": detail}})


def _user_id(value) -> int | None:
    """JSON integer id, or None. Booleans and floats are not ids."""
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def _persist(sender: int, receiver: int, text) -> dict:
    db = SessionLocal()
    try:
        return send_message(db, sender, receiver, text)
    finally:
        db.close()


async def _handle_frame(websocket: WebSocket, identity: Identity, raw: str) -> None:
    try:
        frame = json.loads(raw)
    except json.JSONDecodeError:
        await _send_error(websocket, "Frames must be JSON.")
        return
    if not isinstance(frame, dict) or frame.get("event") != EVENT_SEND_MESSAGE:
        await _send_error(websocket, "Unknown event.")
        return
    data = frame.get("data")
    if not isinstance(data, dict):
        await _send_error(websocket, "sendMessage needs sender, receiver and text.")
        return
    sender = _user_id(data.get("sender"))
    receiver = _user_id(data.get("receiver"))
    if sender is None or receiver is None:
        await _send_error(websocket, "sendMessage needs integer sender and receiver ids.")
        return
    if sender != identity.id:
        logger.warning("Realtime: user %s tried to send as %s; frame dropped", identity.id, sender)
        return

    try:
        message = await asyncio.to_thread(_persist, sender, receiver, data.get("text"))
    except GymAppError as e:
        await _send_error(websocket, e.message)
        return
    await manager.emit({receiver, sender}, EVENT_RECEIVE_MESSAGE, message)


@router.websocket("/ws")
async def chat_socket(websocket: WebSocket, token: str | None = Query(None)):
    try:
        identity = decode_token(token or bearer_token(websocket.headers.get("authorization")))
    except AuthenticationError as e:
        logger.info("Realtime: handshake refused: %s", e.message)
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    manager.join(identity.id, websocket)
    try:
        while True:
            raw = await websocket.receive_text()
            await _handle_frame(websocket, identity, raw)
    except WebSocketDisconnect:
        logger.info("Realtime: user %s disconnected", identity.id)
    finally:
        manager.leave(identity.id, websocket)
