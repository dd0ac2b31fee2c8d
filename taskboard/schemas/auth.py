import uuid
from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StringConstraints

DisplayName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=200)]

class RegisterIn(BaseModel):
    name: DisplayName
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)
    department: str | None = None
    # only honored when self role selection is enabled
    role: str | None = None

class LoginIn(BaseModel):
    email: EmailStr
    password: str

class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    email: str
    role: str
    department: str
    avatar: str | None
    provider: str
    created_at: datetime | None = None

class AuthOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserOut

class ProfileOut(UserOut):
    tasks_completed: int = 0
    active_projects: int = 0

class ProfileUpdateIn(BaseModel):
    name: DisplayName | None = None
    department: str | None = Field(default=None, max_length=120)

class ChangePasswordIn(BaseModel):
    current_password: str
    new_password: str = Field(min_length=6, max_length=128)

class PermissionsOut(BaseModel):
    role: str
    permissions: list[str]
