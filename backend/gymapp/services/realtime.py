"""
Realtime rooms: user id -> set of open WebSocket connections.

Delivering to a user means sending to every connection in their room; an empty room is fine
(the message is already persisted). A connection that fails on send is dropped from its room.
Rooms are only touched from the event loop and never across an await, so no lock is needed.
"""
import logging
from collections import defaultdict
from typing import Any

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class ConnectionManager:
    def __init__(self) -> None:
        self._rooms: dict[int, set[WebSocket]] = defaultdict(set)

    def join(self, user_id: int, websocket: WebSocket) -> None:
        self._rooms[user_id].add(websocket)
        logger.info("Realtime: user %s joined (%s connections)", user_id, len(self._rooms[user_id]))

    def leave(self, user_id: int, websocket: WebSocket) -> None:
        room = self._rooms.get(user_id)
        if room is None:
            return
        room.discard(websocket)
        if not room:
            del self._rooms[user_id]

    def connection_count(self, user_id: int) -> int:
        return len(self._rooms.get(user_id, ()))

    async def emit(self, user_ids, event: str, data: Any) -> int:
        """Send {event, data} to every connection in the rooms of user_ids. Returns deliveries made."""
        targets = [(uid, ws) for uid in set(user_ids) for ws in list(self._rooms.get(uid, ()))]
        payload = {"event": event, "data": data}
        delivered = 0
        for uid, ws in targets:
            try:
                await ws.send_json(payload)
                delivered += 1
            except Exception as e:
                logger.warning("Realtime: delivery to user %s failed, dropping connection: %s", uid, e)
                self.leave(uid, ws)
        return delivered


manager = ConnectionManager()
