from typing import List

from fastapi import APIRouter, Depends, status

from chatrelay.dependencies.service_dependencies import get_message_service
from ..schemas.message import MessageCreateRequest, MessageResponse, MessageSavedResponse
from ..services.message_service import MessageService

router = APIRouter(prefix="/api/messages", tags=["messages"])

@router.get("", response_model=List[MessageResponse])
async def get_recent_messages(
    message_service: MessageService = Depends(get_message_service),
):
    """
    Retrieve the most recent messages, newest first.

    Returns:
        List of MessageResponse objects
    """
    return await message_service.get_recent_messages()

@router.post("", response_model=MessageSavedResponse, status_code=status.HTTP_201_CREATED)
async def save_message(
    request: MessageCreateRequest,
    message_service: MessageService = Depends(get_message_service),
):
    """
    Store a message without relaying it.

    Args:
        request: Message creation request
        message_service: Message service instance

    Returns:
        MessageSavedResponse with the stored message id
    """
    return await message_service.save_message(request)
