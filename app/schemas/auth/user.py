from typing import Annotated

from pydantic import BaseModel, EmailStr, Field


class UserCreate(BaseModel):
    username: Annotated[str, Field(min_length=3, max_length=64, pattern=r"^[A-Za-z0-9_.-]+$")]
    email: EmailStr
    password: Annotated[str, Field(min_length=6, max_length=72)]
    first_name: str | None = Field(None, max_length=100)
    last_name: str | None = Field(None, max_length=100)
    english_level: str | None = Field(None, max_length=32)
    age: int | None = Field(None, ge=1, le=150)
    bio: str | None = None


class LoginUser(BaseModel):
    email: EmailStr
    password: str
