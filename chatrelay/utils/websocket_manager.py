import asyncio
import logging
import uuid
from typing import Dict, Iterable, List, Optional

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class ConnectionManager:
    """
    Registry of the WebSocket connections attached to this process.

    Each connection gets a server-side id when it is registered. The
    registry knows nothing about users; identity lives in the
    SessionDirectory.
    """

    def __init__(self):
        self.active_connections: Dict[str, WebSocket] = {}

    async def connect(self, websocket: WebSocket) -> str:
        """Registers and accepts a new WebSocket connection, returning its id."""
        connection_id = uuid.uuid4().hex
        self.active_connections[connection_id] = websocket
        try:
            await websocket.accept()
        except Exception:
            self.active_connections.pop(connection_id, None)
            raise
        logger.info(f"Connection {connection_id} opened ({len(self.active_connections)} active).")
        return connection_id

    def disconnect(self, connection_id: str) -> Optional[WebSocket]:
        websocket = self.active_connections.pop(connection_id, None)
        if websocket is not None:
            logger.info(f"Connection {connection_id} closed ({len(self.active_connections)} active).")
        return websocket

    def connection_ids(self, exclude: Optional[str] = None) -> List[str]:
        return [cid for cid in self.active_connections if cid != exclude]

    def is_connected(self, connection_id: str) -> bool:
        return connection_id in self.active_connections

    async def send_to(self, connection_ids: Iterable[str], message: str):
        """Sends a text frame to each listed connection concurrently."""
        tasks = [self._send_to_local_websocket(cid, message) for cid in connection_ids]
        if tasks:
            await asyncio.gather(*tasks)

    async def _send_to_local_websocket(self, connection_id: str, message: str):
        """Sends a message directly to a websocket connected to this instance."""
        websocket = self.active_connections.get(connection_id)
        if websocket is None:
            return
        try:
            await websocket.send_text(message)
        except Exception as e:
            # The peer went away between lookup and send.
            logger.debug(f"Dropped message for connection {connection_id}: {e!r}")

    def __len__(self) -> int:
        return len(self.active_connections)
