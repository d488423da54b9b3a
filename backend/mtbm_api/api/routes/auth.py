"""Auth API - Signup, login, profile and password reset"""
from fastapi import APIRouter, Depends, status

from ..deps import get_auth_service, get_current_user_dep
from ..schemas import (
    SignupRequest, LoginRequest, ProfileUpdateRequest,
    ForgotPasswordRequest, VerifyResetCodeRequest, ResetPasswordRequest
)
from ...domain.models import User
from ...services.auth_service import AuthService
from ...utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter()


# =============================================================================
# Account
# =============================================================================

@router.post("/signup", status_code=status.HTTP_201_CREATED)
def signup(
    payload: SignupRequest,
    auth_service: AuthService = Depends(get_auth_service)
):
    """Register an engineer or technician and sign them in"""
    token, user = auth_service.signup(
        email=payload.email,
        password=payload.password,
        role=payload.role,
        full_name=payload.full_name,
        organization=payload.organization,
        photo_url=payload.photo_url,
    )
    logger.info(f"Signup: {user.email} as {user.role}", extra={"user_id": user.id, "role": user.role})
    return {"token": token, "user": user.to_safe()}


@router.post("/login")
def login(
    payload: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service)
):
    token, user = auth_service.login(payload.email, payload.password, payload.role)
    return {"token": token, "user": user.to_safe()}


@router.get("/me")
@router.get("/profile")
def get_me(user: User = Depends(get_current_user_dep)):
    return {"user": user.to_safe()}


@router.patch("/me")
@router.patch("/profile")
def update_me(
    payload: ProfileUpdateRequest,
    user: User = Depends(get_current_user_dep),
    auth_service: AuthService = Depends(get_auth_service)
):
    """Update name, organization or photo; omitted fields stay as they are"""
    updated = auth_service.update_profile(
        user,
        full_name=payload.full_name,
        organization=payload.organization,
        photo_url=payload.photo_url,
    )
    return {"user": updated.to_safe()}


# =============================================================================
# Password reset
# =============================================================================

@router.post("/forgot-password")
def forgot_password(
    payload: ForgotPasswordRequest,
    auth_service: AuthService = Depends(get_auth_service)
):
    """Same answer whether or not the email is registered"""
    auth_service.forgot_password(payload.email)
    return {"message": "If email exists, reset link will be sent"}


@router.post("/verify-reset-otp")
def verify_reset_otp(
    payload: VerifyResetCodeRequest,
    auth_service: AuthService = Depends(get_auth_service)
):
    auth_service.verify_reset_code(payload.email, payload.otp)
    return {"verified": True}


@router.post("/reset-password")
def reset_password(
    payload: ResetPasswordRequest,
    auth_service: AuthService = Depends(get_auth_service)
):
    auth_service.reset_password(
        payload.email,
        payload.otp or payload.token,
        payload.new_password,
    )
    return {"message": "Password reset successful"}
