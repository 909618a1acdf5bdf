from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class MessageRecord(BaseModel):
    id: int
    user_id: Optional[int] = None
    username: str
    text: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class MessageCreateRequest(BaseModel):
    user_id: int = Field(..., alias="userId", description="ID of the author")
    username: str = Field(..., min_length=1, max_length=50)
    message: str = Field(..., min_length=1, max_length=2000, description="Message content")


class MessageResponse(BaseModel):
    id: int
    user_id: Optional[int] = Field(default=None, serialization_alias="userId")
    username: str
    message: str
    created_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: MessageRecord) -> "MessageResponse":
        return cls(
            id=record.id,
            user_id=record.user_id,
            username=record.username,
            message=record.text,
            created_at=record.created_at,
        )


class MessageSavedResponse(BaseModel):
    message: str
    message_id: int = Field(..., serialization_alias="messageId")
