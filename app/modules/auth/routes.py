from fastapi import APIRouter, Depends
from app.core.dependencies import get_access_token, get_auth_service, get_caller
from app.core.permissions import CallerContext
from app.modules.auth.schemas import (
    SignInRequest, SignUpRequest, TokenResponse, SignUpResponse,
    ForgotPasswordRequest, CurrentUserResponse
)
from app.modules.auth.service import AuthService

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/signup", response_model=SignUpResponse, status_code=201)
async def sign_up(
    signup_data: SignUpRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Register a new user"""
    return service.sign_up(signup_data)


@router.post("/signin", response_model=TokenResponse)
async def sign_in(
    signin_data: SignInRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Sign in and get an access token"""
    return service.sign_in(signin_data)


@router.post("/signout", status_code=200)
async def sign_out(
    caller: CallerContext = Depends(get_caller),
    token: str = Depends(get_access_token),
    service: AuthService = Depends(get_auth_service)
):
    service.sign_out(token)
    return {"message": "Signed out successfully"}


@router.post("/forgot-password", status_code=200)
async def forgot_password(
    request: ForgotPasswordRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Always succeeds so the response does not reveal whether the account exists"""
    service.send_password_reset(request.email)
    return {"message": "If an account exists for this email, a reset link has been sent"}


@router.get("/user", response_model=CurrentUserResponse)
async def get_current_user(caller: CallerContext = Depends(get_caller)):
    """Current identity, profile and effective permissions (for frontend UI)"""
    return CurrentUserResponse(
        id=caller.user_id,
        email=caller.identity.email,
        profile=caller.profile,
        permissions=caller.permissions(),
    )
