"""User Pydantic schemas for request/response validation."""

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field

from campus_energy.models.enums import UserRole


class UserBase(BaseModel):
    """Base user schema."""

    email: EmailStr


class UserCreate(UserBase):
    """Schema for creating a new user."""

    password: str = Field(min_length=8)
    role: UserRole = UserRole.STUDENT


class UserResponse(UserBase):
    """Schema for user response."""

    id: int
    role: UserRole
    block_id: int | None = None
    line_id: int | None = None
    created_at: datetime

    model_config = {"from_attributes": True}


class LineAssignment(BaseModel):
    """Schema for assigning a student to a line."""

    line_id: int


class Token(BaseModel):
    """Schema for JWT token response."""

    access_token: str
    token_type: str


class TokenData(BaseModel):
    """Schema for token payload data."""

    email: str | None = None


class LoginRequest(BaseModel):
    """Schema for login request."""

    email: EmailStr
    password: str
