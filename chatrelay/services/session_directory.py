import logging
from dataclasses import dataclass
from typing import Dict, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Session:
    connection_id: str
    user_id: int
    username: str


class SessionDirectory:
    """
    Identity announced by each live connection.

    Only the relay writes here. A connection holds at most one session;
    announcing again replaces the previous one.
    """

    def __init__(self):
        self._sessions: Dict[str, Session] = {}

    def upsert(self, connection_id: str, user_id: int, username: str) -> Session:
        session = Session(connection_id=connection_id, user_id=user_id, username=username)
        previous = self._sessions.get(connection_id)
        self._sessions[connection_id] = session
        if previous is not None and previous != session:
            logger.debug(f"Connection {connection_id} re-announced as {username} (was {previous.username})")
        return session

    def remove(self, connection_id: str) -> Optional[Session]:
        return self._sessions.pop(connection_id, None)

    def lookup(self, connection_id: str) -> Optional[Session]:
        return self._sessions.get(connection_id)

    def __len__(self) -> int:
        return len(self._sessions)
