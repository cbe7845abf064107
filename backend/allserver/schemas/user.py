"""
All-Server Backend — User Schemas
===================================

What:  Request and response models for /api/users.
How:   Request fields are optional on purpose: the create and update handlers
       do no presence validation of their own, the table's NOT NULL
       constraints are the only check.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class UserResponse(BaseModel):
    """Full user row as returned by list and get-by-id."""
    id: int = Field(description="用户ID")
    name: Optional[str] = Field(default=None, description="用户名称")
    email: Optional[str] = Field(default=None, description="用户邮箱")
    date: Optional[str] = Field(default=None, description="创建日期，例如 2025年1月6日")
    created_at: Optional[datetime] = Field(default=None, description="创建时间")
    updated_at: Optional[datetime] = Field(default=None, description="更新时间")

    model_config = {"from_attributes": True}


class UserCreate(BaseModel):
    """Body of POST /api/users."""
    name: Optional[str] = Field(default=None, description="用户名称")
    email: Optional[str] = Field(default=None, description="用户邮箱")


class UserUpdate(BaseModel):
    """Body of PUT /api/users/{id}; both fields are always written."""
    name: Optional[str] = Field(default=None, description="用户名称")
    email: Optional[str] = Field(default=None, description="用户邮箱")


class UserCreatedResponse(BaseModel):
    """201 body of POST /api/users."""
    id: int = Field(description="新创建的用户ID")
    message: str = Field(default="用户创建成功", description="成功消息")
