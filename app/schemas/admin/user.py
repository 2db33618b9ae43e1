from typing import Optional

from pydantic import BaseModel, Field


class AdminUserUpdate(BaseModel):
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    english_level: Optional[str] = Field(None, max_length=32)
    age: Optional[int] = Field(None, ge=1, le=150)
    bio: Optional[str] = None
    coins: Optional[int] = Field(None, ge=0)
    is_premium: Optional[bool] = None
    is_teacher: Optional[bool] = None
    is_admin: Optional[bool] = None
    is_active: Optional[bool] = None
