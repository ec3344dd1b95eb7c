"""
User-related Pydantic models
"""

from typing import Optional
from pydantic import BaseModel, Field


class User(BaseModel):
    id: str
    email: str


class UserCreateRequest(BaseModel):
    email: Optional[str] = None
    id: Optional[str] = Field(None, description="Caller-supplied id; generated when omitted")


class UserUpdateRequest(BaseModel):
    email: Optional[str] = None
