"""
User data models for the Users Service.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class User(BaseModel):
    """A row of the users table, also the cached payload."""
    id: int = Field(..., description="Surrogate key")
    username: str = Field(..., description="Unique username")
    email: str = Field(..., description="Email address")
    created_at: Optional[datetime] = Field(None, description="Creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")


class UserCreateRequest(BaseModel):
    """Request model for user creation."""
    username: str = Field(..., min_length=1, max_length=255, description="Unique username")
    email: str = Field(..., min_length=1, max_length=255, description="Email address")


class UserUpdateRequest(BaseModel):
    """Request model for user update. Only the email is mutable."""
    email: str = Field(..., min_length=1, max_length=255, description="New email address")
