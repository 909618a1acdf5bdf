from pydantic import BaseModel, EmailStr, Field

from chatrelay.schemas.user import UserRecord


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=1)


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class RegisterResponse(BaseModel):
    message: str
    user_id: int = Field(..., serialization_alias="userId")


class LoginResponse(BaseModel):
    message: str
    user: UserRecord
