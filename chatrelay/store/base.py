from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Generic, List, Optional, TypeVar

from chatrelay.schemas.message import MessageRecord
from chatrelay.schemas.user import UserRecord

T = TypeVar("T")


class FailureKind(str, Enum):
    CONFLICT = "conflict"
    STORE_UNAVAILABLE = "store_unavailable"
    UNKNOWN_USER = "unknown_user"


@dataclass(frozen=True)
class Failure:
    kind: FailureKind
    detail: str = ""


@dataclass(frozen=True)
class StoreResult(Generic[T]):
    """Outcome of a store call. Exactly one of ``value``/``failure`` is meaningful."""

    value: Optional[T] = None
    failure: Optional[Failure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @classmethod
    def success(cls, value: T) -> "StoreResult[T]":
        return cls(value=value)

    @classmethod
    def fail(cls, kind: FailureKind, detail: str = "") -> "StoreResult[T]":
        return cls(failure=Failure(kind=kind, detail=detail))


class MessageStore(ABC):
    """
    Persistence contract shared by the durable and the ephemeral store.

    Implementations never raise for store problems: every call returns a
    StoreResult and the caller decides what a failure means.
    """

    durable: bool = False

    @abstractmethod
    async def append_user(self, username: str, email: str, password: str) -> StoreResult[int]:
        ...

    @abstractmethod
    async def find_user_by_credential(
        self, username: str, password: str
    ) -> StoreResult[Optional[UserRecord]]:
        ...

    @abstractmethod
    async def append_message(
        self, user_id: Optional[int], username: str, text: str
    ) -> StoreResult[int]:
        ...

    @abstractmethod
    async def list_recent_messages(self, limit: int) -> StoreResult[List[MessageRecord]]:
        ...

    async def close(self) -> None:
        pass
