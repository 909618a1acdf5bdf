import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from chatrelay.schemas.events import ParticipantId

logger = logging.getLogger(__name__)


class CallState(str, Enum):
    INITIATED = "initiated"
    ACCEPTED = "accepted"
    ENDED = "ended"


@dataclass
class CallSession:
    call_id: str
    caller_id: ParticipantId
    callee_id: Optional[ParticipantId]
    origin: Optional[str]
    state: CallState = CallState.INITIATED


class CallSignalingCoordinator:
    """
    Lifecycle of in-progress call negotiations.

    initiated -> accepted -> ended, or initiated -> ended. Ended calls are
    forgotten at once, so anything arriving for them later finds no call.
    Every method returns the session on a legal transition and None when
    the event is stale and must not be relayed.
    """

    def __init__(self):
        self._calls: Dict[str, CallSession] = {}

    def initiate(
        self,
        call_id: str,
        caller_id: ParticipantId,
        callee_id: Optional[ParticipantId] = None,
        origin: Optional[str] = None,
    ) -> Optional[CallSession]:
        live = self._calls.get(call_id)
        if live is not None:
            logger.debug(
                f"Ignoring call-initiated from {origin} for live call {call_id} "
                f"opened by {live.origin}"
            )
            return None
        call = CallSession(call_id=call_id, caller_id=caller_id, callee_id=callee_id, origin=origin)
        self._calls[call_id] = call
        logger.info(f"Call {call_id} initiated by {caller_id}")
        return call

    def accept(self, call_id: str) -> Optional[CallSession]:
        call = self._calls.get(call_id)
        if call is None or call.state is not CallState.INITIATED:
            logger.debug(f"Ignoring call-accepted for call {call_id} in state {call.state.value if call else 'unknown'}")
            return None
        call.state = CallState.ACCEPTED
        logger.info(f"Call {call_id} accepted")
        return call

    def end(self, call_id: str) -> Optional[CallSession]:
        call = self._calls.pop(call_id, None)
        if call is None:
            logger.debug(f"Ignoring call-ended for unknown call {call_id}")
            return None
        call.state = CallState.ENDED
        logger.info(f"Call {call_id} ended")
        return call

    def get(self, call_id: str) -> Optional[CallSession]:
        return self._calls.get(call_id)

    def __len__(self) -> int:
        return len(self._calls)
