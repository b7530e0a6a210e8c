from pydantic import BaseModel, EmailStr
from typing import Optional, Dict, Any


class LoginRequest(BaseModel):
    email: EmailStr


class LoginResponse(BaseModel):
    email: str
    message: str


class VerifyRequest(BaseModel):
    email: EmailStr
    token: str


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None
    token_type: str = "bearer"
    user_id: str
    email: str


class CurrentUserResponse(BaseModel):
    id: str
    email: Optional[str] = None
    user_metadata: Dict[str, Any] = {}
    profile: Optional[Dict[str, Any]] = None
