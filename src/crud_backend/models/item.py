"""
Item-related Pydantic models
"""

from typing import Optional
from pydantic import BaseModel, Field


class Item(BaseModel):
    id: str
    name: str


class ItemCreateRequest(BaseModel):
    # Optional so that a missing name is reported by the service as an
    # invalid field rather than by the request parser
    name: Optional[str] = None
    id: Optional[str] = Field(None, description="Caller-supplied id; generated when omitted")


class ItemUpdateRequest(BaseModel):
    name: Optional[str] = None
