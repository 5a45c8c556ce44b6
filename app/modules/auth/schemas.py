from pydantic import BaseModel, EmailStr
from typing import Optional, List


class SignInRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: str
    email: str


class SignUpRequest(BaseModel):
    email: EmailStr
    password: str
    full_name: Optional[str] = None


class SignUpResponse(BaseModel):
    user_id: str
    email: str
    message: str


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class Identity(BaseModel):
    """Caller reference issued by Supabase Auth."""
    id: str
    email: Optional[str] = None


class Profile(BaseModel):
    id: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    organization_id: Optional[str] = None
    role: str = "employee"
    is_platform_admin: bool = False

    @property
    def platform_admin(self) -> bool:
        return self.is_platform_admin or self.role == "platform_admin"


class CurrentUserResponse(BaseModel):
    id: str
    email: Optional[str] = None
    profile: Profile
    permissions: List[str]
