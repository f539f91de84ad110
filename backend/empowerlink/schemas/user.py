from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from empowerlink.models.user import UserRole, UserStatus, UserType


class UserBase(BaseModel):
    email: EmailStr
    first_name: str = Field(min_length=1, max_length=120)
    last_name: str = Field(min_length=1, max_length=120)
    phone: Optional[str] = Field(default=None, max_length=50)
    organization: Optional[str] = Field(default=None, max_length=255)
    location: Optional[str] = Field(default=None, max_length=255)
    user_type: UserType


class UserCreate(UserBase):
    password: str = Field(min_length=8)

    @field_validator("user_type")
    @classmethod
    def validate_user_type(cls, v: UserType) -> UserType:
        if v == UserType.ADMIN:
            raise ValueError("Admin accounts cannot be self-registered")
        return v


class UserRead(UserBase):
    id: int
    role: UserRole
    status: UserStatus
    created_at: datetime

    model_config = {
        "from_attributes": True,
    }


class UserDeleted(BaseModel):
    message: str
    user_id: int
    audit_recorded: bool
