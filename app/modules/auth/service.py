import logging
from supabase import Client
from app.modules.auth.schemas import (
    SignInRequest, SignUpRequest, TokenResponse, SignUpResponse, Identity
)
from app.core.errors import Unauthorized, ValidationError, ServerError
from fastapi import HTTPException

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, supabase: Client, admin: Client = None):
        self.supabase = supabase
        self.admin = admin or supabase

    def sign_up(self, signup_data: SignUpRequest) -> SignUpResponse:
        """Register a new user with Supabase Auth and create an unassigned profile"""
        try:
            user_metadata = {}
            if signup_data.full_name:
                user_metadata["full_name"] = signup_data.full_name

            auth_response = self.supabase.auth.sign_up({
                "email": signup_data.email,
                "password": signup_data.password,
                "options": {
                    "data": user_metadata
                }
            })

            if not auth_response.user:
                raise ValidationError("Failed to register user")

            user = auth_response.user
            # Organization and role are assigned later by onboarding or invite
            self.admin.table("profiles").upsert({
                "id": user.id,
                "email": user.email or signup_data.email,
                "full_name": signup_data.full_name,
                "role": "employee",
                "is_platform_admin": False,
            }, on_conflict="id").execute()

            return SignUpResponse(
                user_id=user.id,
                email=user.email or signup_data.email,
                message="Signup successful"
            )
        except HTTPException:
            raise
        except Exception as e:
            error_message = str(e)
            if "already registered" in error_message.lower() or "already exists" in error_message.lower():
                raise ValidationError("User already exists")
            logger.error(f"Signup failed: {error_message}")
            raise ServerError(f"Registration failed: {error_message}")

    def sign_in(self, signin_data: SignInRequest) -> TokenResponse:
        """Authenticate with email and password"""
        try:
            auth_response = self.supabase.auth.sign_in_with_password({
                "email": signin_data.email,
                "password": signin_data.password
            })

            if not auth_response.user or not auth_response.session:
                raise Unauthorized("Invalid credentials")

            return TokenResponse(
                access_token=auth_response.session.access_token,
                token_type="bearer",
                user_id=auth_response.user.id,
                email=auth_response.user.email or signin_data.email
            )
        except HTTPException:
            raise
        except Exception as e:
            error_message = str(e)
            if "invalid" in error_message.lower() or "credentials" in error_message.lower():
                raise Unauthorized("Invalid email or password")
            logger.error(f"Sign in failed: {error_message}")
            raise ServerError(f"Login failed: {error_message}")

    def get_identity(self, token: str) -> Identity:
        """Resolve the caller behind a Supabase access token"""
        try:
            user_response = self.supabase.auth.get_user(jwt=token)
        except Exception as e:
            logger.info(f"Token rejected: {e}")
            raise Unauthorized("Invalid or expired token")
        if not user_response or not user_response.user:
            raise Unauthorized("Invalid or expired token")
        user = user_response.user
        return Identity(id=user.id, email=user.email)

    def sign_out(self, token: str) -> bool:
        """Revoke only the session behind `token`"""
        try:
            self.admin.auth.admin.sign_out(token, "local")
            return True
        except Exception as e:
            logger.warning(f"Sign out failed: {e}")
            return False

    def send_password_reset(self, email: str) -> None:
        """Request a password reset email. Outcome is not exposed to the caller."""
        try:
            self.supabase.auth.reset_password_for_email(email)
        except Exception as e:
            logger.warning(f"Password reset request failed: {e}")
