from fastapi import APIRouter, Depends, status

from chatrelay.dependencies.service_dependencies import get_auth_service
from chatrelay.schemas.auth import LoginRequest, LoginResponse, RegisterRequest, RegisterResponse
from chatrelay.services.auth_service import AuthService

router = APIRouter(prefix="/api", tags=["auth"])

@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(
    request: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service)
):
    """
    Register a new user.
    """
    return await auth_service.register_user(request)

@router.post("/login", response_model=LoginResponse)
async def login(
    request: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service)
):
    """
    Check a username/password pair and return the matching user.
    """
    return await auth_service.login_user(request)
