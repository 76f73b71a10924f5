"""Tracks live draft connections and broadcasts to them."""

import logging
import uuid
from dataclasses import dataclass
from typing import Any

from wuwa_draft.models.room import DiscordUser

logger = logging.getLogger(__name__)


@dataclass
class Connection:
    """An open client connection."""

    id: str
    websocket: Any
    user: DiscordUser | None = None
    session_token: str | None = None  # From the session cookie, if any


class ConnectionManager:
    """In-memory registry of connections for the draft room."""

    def __init__(self):
        self.connections: dict[str, Connection] = {}

    def add(self, websocket: Any) -> Connection:
        """Register an accepted websocket."""
        connection = Connection(id=uuid.uuid4().hex[:12], websocket=websocket)
        self.connections[connection.id] = connection
        logger.info(f"Connection {connection.id} opened ({len(self.connections)} total)")
        return connection

    def remove(self, connection_id: str) -> Connection | None:
        connection = self.connections.pop(connection_id, None)
        if connection:
            logger.info(f"Connection {connection_id} closed ({len(self.connections)} total)")
        return connection

    async def send(self, connection: Connection, message: dict) -> None:
        """Send a message to one connection."""
        await connection.websocket.send_json(message)

    async def broadcast(self, message: dict) -> None:
        """Send a message to every connection, dropping the ones that fail."""
        failed: list[str] = []
        for connection in list(self.connections.values()):
            try:
                await connection.websocket.send_json(message)
            except Exception as e:
                logger.warning(f"Broadcast to {connection.id} failed: {e}")
                failed.append(connection.id)
        for connection_id in failed:
            self.remove(connection_id)

