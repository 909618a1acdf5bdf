from typing import List

from chatrelay.core.exceptions import exception_for_failure
from chatrelay.schemas.message import MessageCreateRequest, MessageResponse, MessageSavedResponse
from chatrelay.services.auth_service import DEMO_SUFFIX
from chatrelay.store.base import MessageStore


class MessageService:
    def __init__(self, store: MessageStore, history_limit: int = 50):
        self.store = store
        self.history_limit = history_limit

    async def save_message(self, request: MessageCreateRequest) -> MessageSavedResponse:
        """Stores a message posted over HTTP."""
        result = await self.store.append_message(request.user_id, request.username, request.message)
        if not result.ok:
            raise exception_for_failure(result.failure)

        message = "Message saved" if self.store.durable else "Message saved" + DEMO_SUFFIX
        return MessageSavedResponse(message=message, message_id=result.value)

    async def get_recent_messages(self) -> List[MessageResponse]:
        """
        Retrieve the most recent messages, newest first.
        Ephemeral stores keep nothing, so this is empty in demo mode.
        """
        result = await self.store.list_recent_messages(self.history_limit)
        if not result.ok:
            raise exception_for_failure(result.failure)
        return [MessageResponse.from_record(record) for record in result.value]
