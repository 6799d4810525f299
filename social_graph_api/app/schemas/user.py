"""
Pydantic models for user data.

Field names are snake_case in Python; the JSON representation uses the
camelCase keys the browser UI consumes (``createdAt``,
``popularityScore``, ``friendId``).
"""

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


def _not_blank(value: Optional[str]) -> Optional[str]:
    if value is not None and not value.strip():
        raise ValueError("must not be blank")
    return value


class UserCreate(BaseModel):
    """Schema for creating a user."""

    username: str = Field(..., min_length=1, strict=True, examples=["alice"])
    age: int = Field(..., ge=0, strict=True, examples=[25])
    hobbies: List[str] = Field(..., examples=[["reading", "gaming"]])

    @field_validator("username")
    @classmethod
    def check_username(cls, value):
        return _not_blank(value)


class UserUpdate(BaseModel):
    """Schema for updating a user.

    All fields are optional; only provided values will be updated.
    """

    username: Optional[str] = Field(None, min_length=1, strict=True)
    age: Optional[int] = Field(None, ge=0, strict=True)
    hobbies: Optional[List[str]] = None

    @field_validator("username")
    @classmethod
    def check_username(cls, value):
        return _not_blank(value)


class UserRead(BaseModel):
    """Schema for reading a user from the API."""

    id: str
    username: str
    age: int
    hobbies: List[str]
    friends: List[str] = Field(default_factory=list)
    created_at: str = Field(..., alias="createdAt")
    popularity_score: float = Field(0.0, alias="popularityScore")

    model_config = {
        "populate_by_name": True,
    }


class FriendshipRequest(BaseModel):
    """Body of the link/unlink endpoints."""

    friend_id: Optional[str] = Field(None, alias="friendId")

    model_config = {
        "populate_by_name": True,
    }


class HobbyRequest(BaseModel):
    """Body of the add-hobby endpoint."""

    hobby: Optional[str] = None

    @field_validator("hobby")
    @classmethod
    def check_hobby(cls, value):
        return _not_blank(value)
