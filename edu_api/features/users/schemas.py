"""
Pydantic schemas for user-related requests and responses.
"""
from datetime import datetime
from pydantic import BaseModel, ConfigDict, EmailStr, Field, computed_field


class UserBase(BaseModel):
    """Base user schema with common fields."""
    email: EmailStr
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)


class UserCreate(UserBase):
    """Schema for creating a new user with an initial role."""
    role_name: str = Field("student", description="Initial role")


class UserUpdate(BaseModel):
    """Schema for updating own profile."""
    first_name: str | None = Field(None, min_length=1, max_length=100)
    last_name: str | None = Field(None, min_length=1, max_length=100)
    avatar_url: str | None = Field(None, max_length=500)


class UserResponse(UserBase):
    """Schema for user responses."""
    id: str
    avatar_url: str | None = None
    is_active: bool
    role_names: list[str] = Field(default_factory=list, serialization_alias="roles")
    last_login_at: datetime | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UserPublic(BaseModel):
    """Public user information (limited fields)."""
    id: str
    first_name: str
    last_name: str
    avatar_url: str | None = None

    model_config = ConfigDict(from_attributes=True)

    @computed_field
    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class RoleGrant(BaseModel):
    """Schema for granting a role to a user."""
    role_name: str = Field(..., min_length=1, max_length=50)


class UserRoleResponse(BaseModel):
    """A role held by a user."""
    role_name: str
    granted_at: datetime
    granted_by_id: str | None = None


class UserAdminUpdate(BaseModel):
    """Schema for an administrator updating another user."""
    email: EmailStr | None = None
    first_name: str | None = Field(None, min_length=1, max_length=100)
    last_name: str | None = Field(None, min_length=1, max_length=100)
    avatar_url: str | None = Field(None, max_length=500)
    is_active: bool | None = None
