"""
Pydantic schemas for registration, login and session responses
"""
from pydantic import BaseModel, Field, field_validator
from typing import Optional

from quiz_manager.session import Role


def _bcrypt_max_bytes(v: str) -> str:
    if len(v.encode("utf-8")) > 72:
        raise ValueError("Password too long (max 72 bytes for bcrypt).")
    return v


class RegisterRequest(BaseModel):
    """Request schema for account registration"""
    username: str = Field(..., min_length=1, max_length=50)
    password: str = Field(..., min_length=1)
    full_name: str = Field(..., min_length=1, max_length=100)
    role: Role
    student_code: Optional[str] = Field(None, max_length=20)
    
    @field_validator("password")
    @classmethod
    def bcrypt_max_bytes(cls, v: str) -> str:
        return _bcrypt_max_bytes(v)


class RegisterResponse(BaseModel):
    user_id: int
    username: str
    role: Role


class LoginRequest(BaseModel):
    username: str
    password: str
    
    @field_validator("password")
    @classmethod
    def bcrypt_max_bytes(cls, v: str) -> str:
        return _bcrypt_max_bytes(v)


class SessionResponse(BaseModel):
    """Logged-in identity; token goes in the Authorization header"""
    token: str
    user_id: int
    username: str
    role: Role
    full_name: Optional[str] = None
    
    class Config:
        from_attributes = True


class UserResponse(BaseModel):
    user_id: int
    username: str
    role: Role
    full_name: Optional[str] = None
    
    class Config:
        from_attributes = True
