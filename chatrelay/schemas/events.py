"""
Real-time event set carried over the WebSocket.

Every frame is a JSON object ``{"type": <event>, "data": {...}}``. Inbound
frames are validated against the closed union below; anything that does not
fit is dropped by the gateway.
"""
import json
from enum import Enum
from typing import Annotated, Any, Dict, Literal, Optional, Union

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    StringConstraints,
    TypeAdapter,
    model_validator,
)


class EventType(str, Enum):
    USER_JOIN = "user-join"
    USER_JOINED = "user-joined"
    USER_LEFT = "user-left"
    CHAT_MESSAGE = "chat-message"
    CALL_INITIATED = "call-initiated"
    CALL_INVITATION = "call-invitation"
    CALL_ACCEPTED = "call-accepted"
    CALL_ENDED = "call-ended"
    OFFER = "offer"
    ANSWER = "answer"
    ICE_CANDIDATE = "ice-candidate"


def _int_to_str(value: Any) -> Any:
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


CallId = Annotated[str, StringConstraints(min_length=1), BeforeValidator(_int_to_str)]
ParticipantId = Union[int, str]


class _Payload(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class UserJoinData(_Payload):
    user_id: int = Field(..., alias="userId")
    username: str = Field(..., min_length=1)


class ChatMessageData(_Payload):
    user_id: Optional[int] = Field(..., alias="userId")
    username: str = Field(..., min_length=1)
    text: str = Field(..., min_length=1)


class CallInitiatedData(_Payload):
    call_id: Optional[CallId] = Field(default=None, alias="callId")
    caller: ParticipantId
    callee: Optional[ParticipantId] = None

    @model_validator(mode="after")
    def _require_call_id_or_callee(self):
        if self.call_id is None and self.callee is None:
            raise ValueError("call-initiated needs a callId or a callee")
        return self

    @property
    def resolved_call_id(self) -> str:
        """The caller's token, or one derived from the participant pairing."""
        return self.call_id or f"{self.caller}-{self.callee}"


class CallRefData(_Payload):
    call_id: CallId = Field(..., alias="callId")


class UserJoinEvent(BaseModel):
    type: Literal["user-join"]
    data: UserJoinData


class ChatMessageEvent(BaseModel):
    type: Literal["chat-message"]
    data: ChatMessageData


class CallInitiatedEvent(BaseModel):
    type: Literal["call-initiated"]
    data: CallInitiatedData


class CallAcceptedEvent(BaseModel):
    type: Literal["call-accepted"]
    data: CallRefData


class CallEndedEvent(BaseModel):
    type: Literal["call-ended"]
    data: CallRefData


class SignalEvent(BaseModel):
    # Negotiation payloads are opaque; only a non-empty object body is required.
    type: Literal["offer", "answer", "ice-candidate"]
    data: Dict[str, Any] = Field(..., min_length=1)


InboundEvent = Annotated[
    Union[
        UserJoinEvent,
        ChatMessageEvent,
        CallInitiatedEvent,
        CallAcceptedEvent,
        CallEndedEvent,
        SignalEvent,
    ],
    Field(discriminator="type"),
]

_inbound_adapter = TypeAdapter(InboundEvent)


def decode_event(frame: Dict[str, Any]) -> InboundEvent:
    """
    Validate an already JSON-decoded frame.

    Raises:
        pydantic.ValidationError: unknown type or missing/invalid fields
    """
    return _inbound_adapter.validate_python(frame)


def encode_event(event_type: EventType, data: Dict[str, Any]) -> str:
    return json.dumps({"type": event_type.value, "data": data}, default=str)
