# tribalart/api/schemas/user.py
from pydantic import BaseModel, EmailStr, Field
from typing import Dict, Optional


class SignUpRequest(BaseModel):
    email: EmailStr
    password: str
    full_name: str = ""


class SignInRequest(BaseModel):
    email: EmailStr
    password: str


class ResetPasswordRequest(BaseModel):
    email: str = ""


class ResetPasswordConfirm(BaseModel):
    token: str
    password: str


class UserOut(BaseModel):
    id: str
    email: str
    full_name: Optional[str] = None
    created_at: Optional[str] = None


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: Optional[UserOut] = None


class MessageOut(BaseModel):
    ok: bool = True
    message: str = ""


class ProfileOut(BaseModel):
    id: str
    email: str = ""
    full_name: str = ""
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    pincode: Optional[str] = None
    bio: Optional[str] = None
    date_of_birth: Optional[str] = None
    preferences: Dict[str, bool] = {}


class ProfileUpdate(BaseModel):
    full_name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    pincode: Optional[str] = Field(None, max_length=10)
    bio: Optional[str] = None
    date_of_birth: Optional[str] = None
    preferences: Optional[Dict[str, bool]] = None


class RenameRequest(BaseModel):
    full_name: str
    artist_name: Optional[str] = None
