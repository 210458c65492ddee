from fastapi import APIRouter, Depends
from staffdesk.modules.auth.schemas import LoginRequest, TokenResponse, CurrentUserResponse
from staffdesk.modules.auth.service import AuthService
from staffdesk.core.dependencies import get_auth_service, get_current_user
from typing import Dict

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=TokenResponse)
async def login(
    login_data: LoginRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Login and get access token"""
    return service.login(login_data)


@router.get("/me", response_model=CurrentUserResponse)
async def me(current_user: Dict = Depends(get_current_user)):
    """Current authenticated user"""
    return current_user
