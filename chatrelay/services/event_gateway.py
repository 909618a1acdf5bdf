import asyncio
import json
import logging
from typing import Any, Dict, Optional, Set

from fastapi import WebSocket
from pydantic import ValidationError

from chatrelay.schemas.events import (
    CallAcceptedEvent,
    CallEndedEvent,
    CallInitiatedEvent,
    ChatMessageEvent,
    EventType,
    SignalEvent,
    UserJoinEvent,
    decode_event,
)
from chatrelay.services.broadcast_router import BroadcastRouter
from chatrelay.services.call_coordinator import CallSignalingCoordinator
from chatrelay.services.session_directory import SessionDirectory
from chatrelay.store.base import MessageStore

logger = logging.getLogger(__name__)


class EventGateway:
    """
    Entry point for everything that arrives over a WebSocket.

    Frames are decoded into the closed event set and dispatched; frames
    that fail to decode are dropped without a reply. A failure while
    handling one event is logged and never reaches other connections.
    """

    def __init__(
        self,
        store: MessageStore,
        router: BroadcastRouter,
        sessions: SessionDirectory,
        calls: CallSignalingCoordinator,
    ):
        self.store = store
        self.router = router
        self.sessions = sessions
        self.calls = calls
        self._pending: Set[asyncio.Task] = set()

        self._handlers = {
            UserJoinEvent: self._on_user_join,
            ChatMessageEvent: self._on_chat_message,
            CallInitiatedEvent: self._on_call_initiated,
            CallAcceptedEvent: self._on_call_accepted,
            CallEndedEvent: self._on_call_ended,
            SignalEvent: self._on_signal,
        }

    async def connect(self, websocket: WebSocket) -> str:
        return await self.router.manager.connect(websocket)

    async def dispatch(self, connection_id: str, raw: str) -> None:
        try:
            frame = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning(f"Invalid JSON received from {connection_id}: {raw[:200]}")
            return

        try:
            event = decode_event(frame)
        except ValidationError as e:
            logger.warning(f"Dropping invalid event from {connection_id}: {e.errors(include_url=False)}")
            return

        try:
            await self._handlers[type(event)](connection_id, event, frame["data"])
        except Exception:
            logger.exception(f"Failed to handle {event.type} from {connection_id}")

    async def disconnect(self, connection_id: str) -> None:
        session = self.sessions.remove(connection_id)
        self.router.manager.disconnect(connection_id)
        payload = {
            "connectionId": connection_id,
            "userId": session.user_id if session else None,
            "username": session.username if session else None,
        }
        try:
            await self.router.publish(EventType.USER_LEFT, payload, origin=connection_id)
        except Exception:
            logger.exception(f"Failed to announce departure of {connection_id}")

    async def drain(self) -> None:
        """Wait for in-flight message persistence to finish."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def _on_user_join(self, connection_id: str, event: UserJoinEvent, data: Dict[str, Any]):
        session = self.sessions.upsert(connection_id, event.data.user_id, event.data.username)
        logger.info(f"User {session.username} ({session.user_id}) joined on {connection_id}")
        await self.router.publish(EventType.USER_JOINED, data, origin=connection_id)

    async def _on_chat_message(self, connection_id: str, event: ChatMessageEvent, data: Dict[str, Any]):
        self._persist_in_background(connection_id, event)
        await self.router.publish(EventType.CHAT_MESSAGE, data, origin=connection_id)

    async def _on_call_initiated(self, connection_id: str, event: CallInitiatedEvent, data: Dict[str, Any]):
        call_id = event.data.resolved_call_id
        call = self.calls.initiate(
            call_id,
            caller_id=event.data.caller,
            callee_id=event.data.callee,
            origin=connection_id,
        )
        if call is None:
            return
        await self.router.publish(EventType.CALL_INVITATION, {**data, "callId": call_id}, origin=connection_id)

    async def _on_call_accepted(self, connection_id: str, event: CallAcceptedEvent, data: Dict[str, Any]):
        if self.calls.accept(event.data.call_id) is None:
            return
        await self.router.publish(EventType.CALL_ACCEPTED, data, origin=connection_id)

    async def _on_call_ended(self, connection_id: str, event: CallEndedEvent, data: Dict[str, Any]):
        if self.calls.end(event.data.call_id) is None:
            return
        await self.router.publish(EventType.CALL_ENDED, data, origin=connection_id)

    async def _on_signal(self, connection_id: str, event: SignalEvent, data: Dict[str, Any]):
        await self.router.publish(EventType(event.type), data, origin=connection_id)

    def _persist_in_background(self, connection_id: str, event: ChatMessageEvent) -> None:
        task = asyncio.create_task(self._persist(connection_id, event))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _persist(self, connection_id: str, event: ChatMessageEvent) -> Optional[int]:
        try:
            result = await self.store.append_message(
                event.data.user_id, event.data.username, event.data.text
            )
        except Exception:
            logger.exception(f"Store raised while persisting message from {connection_id}")
            return None

        if not self.router.manager.is_connected(connection_id):
            logger.debug(f"Connection {connection_id} left before its message was persisted, discarding result")
            return None
        if not result.ok:
            logger.warning(
                f"Message from {event.data.username} on {connection_id} not persisted: "
                f"{result.failure.kind.value} {result.failure.detail}"
            )
            return None
        return result.value
