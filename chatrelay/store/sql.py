import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession
from sqlalchemy.orm import sessionmaker

from chatrelay.models.message import Message
from chatrelay.models.user import User
from chatrelay.schemas.message import MessageRecord
from chatrelay.schemas.user import UserRecord
from chatrelay.store.base import FailureKind, MessageStore, StoreResult

logger = logging.getLogger(__name__)


class SqlMessageStore(MessageStore):
    """Durable store backed by an async SQLAlchemy engine."""

    durable = True

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self.async_session = sessionmaker(
            engine, expire_on_commit=False, class_=AsyncSession
        )

    async def append_user(self, username: str, email: str, password: str) -> StoreResult[int]:
        try:
            async with self.async_session() as session:
                existing_user = await session.execute(
                    select(User).filter(
                        (User.username == username) | (User.email == email)
                    )
                )
                if existing_user.scalar():
                    return StoreResult.fail(
                        FailureKind.CONFLICT, "Username or email already exists"
                    )

                user = User(username=username, email=email, password=password)
                session.add(user)
                await session.commit()
                return StoreResult.success(user.id)
        except IntegrityError:
            # Lost a race against a concurrent registration.
            return StoreResult.fail(FailureKind.CONFLICT, "Username or email already exists")
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Failed to create user '{username}': {e}")
            return StoreResult.fail(FailureKind.STORE_UNAVAILABLE, str(e))

    async def find_user_by_credential(
        self, username: str, password: str
    ) -> StoreResult[Optional[UserRecord]]:
        try:
            async with self.async_session() as session:
                result = await session.execute(
                    select(User).filter(User.username == username, User.password == password)
                )
                user = result.scalar_one_or_none()
                if user is None:
                    return StoreResult.success(None)
                return StoreResult.success(UserRecord.model_validate(user))
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Failed to look up user '{username}': {e}")
            return StoreResult.fail(FailureKind.STORE_UNAVAILABLE, str(e))

    async def append_message(
        self, user_id: Optional[int], username: str, text: str
    ) -> StoreResult[int]:
        try:
            async with self.async_session() as session:
                if user_id is not None and await session.get(User, user_id) is None:
                    return StoreResult.fail(
                        FailureKind.UNKNOWN_USER, f"User {user_id} does not exist"
                    )

                message = Message(user_id=user_id, username=username, text=text)
                session.add(message)
                await session.commit()
                return StoreResult.success(message.id)
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Failed to store message from '{username}': {e}")
            return StoreResult.fail(FailureKind.STORE_UNAVAILABLE, str(e))

    async def list_recent_messages(self, limit: int) -> StoreResult[List[MessageRecord]]:
        try:
            async with self.async_session() as session:
                messages = await session.execute(
                    select(Message)
                    .order_by(Message.created_at.desc(), Message.id.desc())
                    .limit(limit)
                )
                return StoreResult.success(
                    [MessageRecord.model_validate(msg) for msg in messages.scalars().all()]
                )
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Failed to list messages: {e}")
            return StoreResult.fail(FailureKind.STORE_UNAVAILABLE, str(e))

    async def close(self) -> None:
        await self.engine.dispose()
        logger.info("Database engine disposed")
