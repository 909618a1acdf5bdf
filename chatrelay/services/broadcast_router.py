import logging
from enum import Enum
from typing import Any, Dict, List, Optional

from chatrelay.schemas.events import EventType, encode_event
from chatrelay.utils.websocket_manager import ConnectionManager

logger = logging.getLogger(__name__)


class FanOut(str, Enum):
    ALL = "all"
    ALL_EXCEPT_ORIGINATOR = "all-except-originator"


# Fixed per outbound event. Never derived from payload content.
FANOUT_POLICY: Dict[EventType, FanOut] = {
    EventType.USER_JOINED: FanOut.ALL_EXCEPT_ORIGINATOR,
    EventType.USER_LEFT: FanOut.ALL_EXCEPT_ORIGINATOR,
    EventType.CHAT_MESSAGE: FanOut.ALL,
    EventType.CALL_INVITATION: FanOut.ALL_EXCEPT_ORIGINATOR,
    EventType.CALL_ACCEPTED: FanOut.ALL_EXCEPT_ORIGINATOR,
    EventType.CALL_ENDED: FanOut.ALL,
    EventType.OFFER: FanOut.ALL_EXCEPT_ORIGINATOR,
    EventType.ANSWER: FanOut.ALL_EXCEPT_ORIGINATOR,
    EventType.ICE_CANDIDATE: FanOut.ALL_EXCEPT_ORIGINATOR,
}


class BroadcastRouter:
    def __init__(self, manager: ConnectionManager):
        self.manager = manager

    def targets(self, event_type: EventType, origin: Optional[str]) -> List[str]:
        """Connection ids an event of this type from ``origin`` is delivered to."""
        policy = FANOUT_POLICY[event_type]
        if policy is FanOut.ALL:
            return self.manager.connection_ids()
        return self.manager.connection_ids(exclude=origin)

    async def publish(self, event_type: EventType, data: Dict[str, Any], origin: Optional[str]) -> List[str]:
        """
        Deliver ``data`` unchanged as ``event_type``.

        Returns the ids the frame was handed to. Connections that vanish
        mid-delivery are skipped silently.
        """
        targets = self.targets(event_type, origin)
        await self.manager.send_to(targets, encode_event(event_type, data))
        logger.debug(f"Relayed {event_type.value} from {origin} to {len(targets)} connection(s)")
        return targets
