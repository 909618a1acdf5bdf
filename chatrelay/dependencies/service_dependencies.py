from fastapi import Depends, Request, WebSocket

from chatrelay.core.config import Settings
from chatrelay.services.auth_service import AuthService
from chatrelay.services.event_gateway import EventGateway
from chatrelay.services.message_service import MessageService
from chatrelay.store.base import MessageStore

def get_settings(request: Request) -> Settings:
    """
    Dependency that provides the settings the application was built with.
    """
    return request.app.state.settings

def get_store(request: Request) -> MessageStore:
    """
    Dependency that provides the store selected at startup.
    """
    return request.app.state.store

def get_event_gateway(websocket: WebSocket) -> EventGateway:
    """
    Dependency that provides the singleton EventGateway instance.
    """
    return websocket.app.state.gateway

def get_auth_service(store: MessageStore = Depends(get_store)) -> AuthService:
    """
    Dependency that provides an instance of AuthService over the active store.
    """
    return AuthService(store)

def get_message_service(
    store: MessageStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> MessageService:
    """
    Dependency that provides an instance of MessageService over the active store.
    """
    return MessageService(store, history_limit=settings.history_limit)
