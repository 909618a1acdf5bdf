# chatrelay/core/exceptions.py

from fastapi import HTTPException, status

from chatrelay.store.base import Failure, FailureKind

# Base Exception
class BaseAPIException(HTTPException):
    """Base class for all custom API exceptions."""
    def __init__(self, status_code: int, detail: str, headers: dict = None):
        super().__init__(status_code=status_code, detail=detail, headers=headers)


# Authentication Exceptions
class InvalidCredentialsException(BaseAPIException):
    """Exception raised when credentials are invalid."""
    def __init__(self, detail="Invalid credentials"):
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)

class UserAlreadyExistsException(BaseAPIException):
    """Exception raised when a user already exists."""
    def __init__(self, detail="Username or email already exists"):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)

class UnknownUserException(BaseAPIException):
    """Exception raised when a message references a user that does not exist."""
    def __init__(self, detail="Unknown user"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


# Validation & Input Exceptions
class MissingFieldsException(BaseAPIException):
    """Exception raised when required fields are missing or invalid."""
    def __init__(self, detail="Missing fields"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


# Database & System Exceptions
class StoreUnavailableException(BaseAPIException):
    """Exception raised when the backing store fails."""
    def __init__(self, detail="Store unavailable"):
        super().__init__(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=detail)


_FAILURE_EXCEPTIONS = {
    FailureKind.CONFLICT: UserAlreadyExistsException,
    FailureKind.UNKNOWN_USER: UnknownUserException,
    FailureKind.STORE_UNAVAILABLE: StoreUnavailableException,
}


def exception_for_failure(failure: Failure) -> BaseAPIException:
    """Maps a store failure onto the exception an HTTP caller should see."""
    exc_class = _FAILURE_EXCEPTIONS[failure.kind]
    if failure.kind is FailureKind.STORE_UNAVAILABLE:
        # Driver errors are logged, not echoed to callers.
        return exc_class()
    return exc_class(detail=failure.detail) if failure.detail else exc_class()
