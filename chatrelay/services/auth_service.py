import logging

from chatrelay.core.exceptions import InvalidCredentialsException, exception_for_failure
from chatrelay.schemas.auth import LoginRequest, LoginResponse, RegisterRequest, RegisterResponse
from chatrelay.store.base import MessageStore

logger = logging.getLogger(__name__)

DEMO_SUFFIX = " (demo mode)"


class AuthService:
    def __init__(self, store: MessageStore):
        self.store = store

    def _with_mode(self, message: str) -> str:
        return message if self.store.durable else message + DEMO_SUFFIX

    async def register_user(self, request: RegisterRequest) -> RegisterResponse:
        """
        Handles the logic for registering a user.

        Args:
            request: Registration data

        Returns:
            RegisterResponse carrying the new user's id

        Raises:
            UserAlreadyExistsException: If the username or email is taken
            StoreUnavailableException: If the store fails
        """
        result = await self.store.append_user(request.username, request.email, request.password)
        if not result.ok:
            raise exception_for_failure(result.failure)

        logger.info(f"Registered user {request.username} ({result.value})")
        return RegisterResponse(message=self._with_mode("User registered"), user_id=result.value)

    async def login_user(self, request: LoginRequest) -> LoginResponse:
        """
        Handles the logic for logging in a user.

        Passwords are compared as stored; no hashing is applied.

        Raises:
            InvalidCredentialsException: If no user matches
            StoreUnavailableException: If the store fails
        """
        result = await self.store.find_user_by_credential(request.username, request.password)
        if not result.ok:
            raise exception_for_failure(result.failure)
        if result.value is None:
            raise InvalidCredentialsException()

        return LoginResponse(message=self._with_mode("Login successful"), user=result.value)
