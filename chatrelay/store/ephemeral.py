import itertools
import time
from typing import List, Optional

from chatrelay.schemas.message import MessageRecord
from chatrelay.schemas.user import UserRecord
from chatrelay.store.base import MessageStore, StoreResult

DEMO_EMAIL_DOMAIN = "demo.com"


class EphemeralMessageStore(MessageStore):
    """
    Stand-in used when the durable store is unreachable.

    Every call succeeds and nothing is retained: users never conflict, any
    credential logs in, messages are acknowledged and forgotten. Ids are
    millisecond timestamps, bumped so two calls never share one.
    """

    durable = False

    def __init__(self):
        self._ids = itertools.count(int(time.time() * 1000))

    def _next_id(self) -> int:
        return next(self._ids)

    async def append_user(self, username: str, email: str, password: str) -> StoreResult[int]:
        return StoreResult.success(self._next_id())

    async def find_user_by_credential(
        self, username: str, password: str
    ) -> StoreResult[Optional[UserRecord]]:
        return StoreResult.success(
            UserRecord(
                id=self._next_id(),
                username=username,
                email=f"{username}@{DEMO_EMAIL_DOMAIN}",
            )
        )

    async def append_message(
        self, user_id: Optional[int], username: str, text: str
    ) -> StoreResult[int]:
        return StoreResult.success(self._next_id())

    async def list_recent_messages(self, limit: int) -> StoreResult[List[MessageRecord]]:
        return StoreResult.success([])
