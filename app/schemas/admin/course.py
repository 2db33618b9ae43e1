from typing import Optional

from pydantic import BaseModel, Field


class AdminCourseUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    level: Optional[str] = Field(None, max_length=32)
    category: Optional[str] = Field(None, max_length=100)
    price: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None
    is_approved: Optional[bool] = None


class CourseApprove(BaseModel):
    approved: bool = True
