"""
Pydantic schemas for Admin model.

These schemas are used for request/response validation.
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class AdminBase(BaseModel):
    """Base schema for Admin with common fields."""
    name: str = Field(..., max_length=255, description="Admin name")
    email: EmailStr = Field(..., description="Admin email address (unique)")


class AdminCreate(AdminBase):
    """Schema for creating a new admin."""
    password: str = Field(..., min_length=6, max_length=255, description="Plain text password (will be hashed)")


class AdminOut(BaseModel):
    """Schema for admin response (excludes password)."""
    id: int
    name: str
    email: str

    model_config = ConfigDict(from_attributes=True)


class AdminAuth(BaseModel):
    """Schema for admin login request."""
    email: EmailStr = Field(..., description="Admin email address")
    password: str = Field(..., description="Plain text password")


class AdminAuthResponse(BaseModel):
    """Schema for admin login response."""
    access_token: str
    token_type: str = "bearer"
    admin: AdminOut
