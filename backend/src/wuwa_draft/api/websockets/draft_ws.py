"""WebSocket channel for the live draft room."""

import json
import logging

from fastapi import WebSocket, WebSocketDisconnect

from wuwa_draft.exceptions import DraftError, InvalidPayload, NotAuthenticated
from wuwa_draft.models.room import DiscordUser
from wuwa_draft.repositories.box_repository import BoxRepository
from wuwa_draft.services.connection_manager import Connection, ConnectionManager
from wuwa_draft.services.draft_engine import DraftEngine
from wuwa_draft.services.room_manager import RoomManager
from wuwa_draft.services.user_session_store import SESSION_COOKIE, UserSessionStore

logger = logging.getLogger(__name__)


def serialize_room_state(room: RoomManager, engine: DraftEngine) -> dict:
    """Seats, draft snapshot and config, as sent to newly logged-in clients."""
    session = engine.get_session_snapshot()
    return {
        **room.to_dict(),
        "draft_state": session.to_dict() if session else None,
        "config": room.config.model_dump(),
    }


class DraftChannel:
    """Dispatches client messages to the room, the engine and the box store.

    Successful draft changes are broadcast as full snapshots to every
    connection. Errors go back to the sender only.
    """

    def __init__(
        self,
        room: RoomManager,
        engine: DraftEngine,
        connections: ConnectionManager,
        boxes: BoxRepository,
        user_sessions: UserSessionStore,
    ):
        self.room = room
        self.engine = engine
        self.connections = connections
        self.boxes = boxes
        self.user_sessions = user_sessions
        self._handlers = {
            "auth:login": self._on_login,
            "box:save": self._on_box_save,
            "room:join": self._on_room_join,
            "room:leave": self._on_room_leave,
            "config:update": self._on_config_update,
            "draft:start": self._on_draft_start,
            "draft:ban": self._on_draft_ban,
            "draft:pick": self._on_draft_pick,
            "draft:reset": self._on_draft_reset,
        }

    async def handle(self, connection: Connection, message: dict) -> None:
        """Run the handler for one decoded client message."""
        msg_type = message.get("type")
        handler = self._handlers.get(msg_type)
        if handler is None:
            logger.warning(f"Unknown message type from {connection.id}: {msg_type}")
            await self.send_error(connection, InvalidPayload(f"Unknown message type: {msg_type}"))
            return

        try:
            await handler(connection, message)
        except DraftError as e:
            logger.warning(f"Rejected {msg_type} from {connection.id}: {e.code}")
            await self.send_error(connection, e)

    async def send_error(self, connection: Connection, error: DraftError) -> None:
        await self.connections.send(connection, {"type": "error", **error.to_dict()})

    async def disconnect(self, connection: Connection) -> None:
        """Forget a closed connection and free any seat it held."""
        self.connections.remove(connection.id)
        if self.room.release_connection(connection.id):
            await self._broadcast_room()

    async def _broadcast_room(self) -> None:
        await self.connections.broadcast({"type": "room:updated", **self.room.to_dict()})

    # Handlers

    async def _on_login(self, connection: Connection, message: dict) -> None:
        token = message.get("token") or connection.session_token
        if token is not None and not isinstance(token, str):
            raise InvalidPayload("token must be a string")
        user = self.user_sessions.get(token)
        if user is None:
            raise NotAuthenticated("Invalid or expired session")

        connection.user = user
        logger.info(f"User authenticated: {user.username} ({user.discord_id})")

        await self.connections.send(connection, {
            "type": "box:loaded",
            "box": self.boxes.get_box(user.discord_id),
        })
        await self.connections.send(connection, {
            "type": "room:state",
            **serialize_room_state(self.room, self.engine),
        })

    async def _on_box_save(self, connection: Connection, message: dict) -> None:
        user = _require_user(connection)
        box = message.get("box")
        if not isinstance(box, list):
            raise InvalidPayload("box must be a list")

        self.boxes.save_box(user.discord_id, box)
        logger.info(f"Box saved for {user.username}")
        await self.connections.send(connection, {"type": "box:saved", "success": True})

    async def _on_room_join(self, connection: Connection, message: dict) -> None:
        user = _require_user(connection)
        self.room.join(user, message.get("slot"), connection_id=connection.id)
        await self._broadcast_room()

    async def _on_room_leave(self, connection: Connection, message: dict) -> None:
        user = _require_user(connection)
        self.room.leave(user)
        await self._broadcast_room()

    async def _on_config_update(self, connection: Connection, message: dict) -> None:
        user = _require_user(connection)
        changes = message.get("config")
        if not isinstance(changes, dict):
            raise InvalidPayload("config must be an object")

        config = self.room.update_config(user, changes)
        await self.connections.broadcast({
            "type": "config:updated",
            "config": config.model_dump(),
        })

    async def _on_draft_start(self, connection: Connection, message: dict) -> None:
        _require_user(connection)
        session = self.engine.start_draft()
        await self.connections.broadcast({
            "type": "draft:started",
            "draft_state": session.to_dict(),
            "config": session.config.model_dump(),
        })

    async def _on_draft_ban(self, connection: Connection, message: dict) -> None:
        user = _require_user(connection)
        session = self.engine.ban(user.discord_id, _item_id(message))
        await self.connections.broadcast({"type": "draft:updated", "draft_state": session.to_dict()})

    async def _on_draft_pick(self, connection: Connection, message: dict) -> None:
        user = _require_user(connection)
        session = self.engine.pick(user.discord_id, _item_id(message))
        await self.connections.broadcast({"type": "draft:updated", "draft_state": session.to_dict()})

    async def _on_draft_reset(self, connection: Connection, message: dict) -> None:
        _require_user(connection)
        self.engine.reset_draft()
        await self.connections.broadcast({"type": "draft:reset"})


def _require_user(connection: Connection) -> DiscordUser:
    if connection.user is None:
        raise NotAuthenticated()
    return connection.user


def _item_id(message: dict) -> str:
    item_id = message.get("item_id")
    if not isinstance(item_id, str) or not item_id:
        raise InvalidPayload("item_id is required")
    return item_id


async def draft_websocket(websocket: WebSocket, channel: DraftChannel):
    """Handle one client connection to the draft room.

    Args:
        websocket: The WebSocket connection
        channel: Shared DraftChannel for the room
    """
    await websocket.accept()
    connection = channel.connections.add(websocket)
    connection.session_token = websocket.cookies.get(SESSION_COOKIE)

    try:
        while True:
            data = await websocket.receive_text()
            try:
                message = json.loads(data)
            except json.JSONDecodeError:
                logger.warning(f"Invalid JSON received: {data}")
                await channel.send_error(connection, InvalidPayload("Invalid JSON"))
                continue

            if not isinstance(message, dict):
                await channel.send_error(connection, InvalidPayload("Message must be an object"))
                continue

            await channel.handle(connection, message)
    except WebSocketDisconnect:
        pass
    finally:
        await channel.disconnect(connection)
