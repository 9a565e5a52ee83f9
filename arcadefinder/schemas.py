from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


# -------------------- Users / auth --------------------
class UserRegister(BaseModel):
    username: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1)


class UserLogin(BaseModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class UserRead(BaseModel):
    # deliberately has no password/hash field
    id: int
    username: str
    email: str

    model_config = ConfigDict(from_attributes=True)


class AuthResponse(BaseModel):
    token: str
    user: UserRead


# -------------------- Arcades --------------------
class ArcadeIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    address: Optional[str] = Field(default=None, max_length=300)
    days_open: Optional[str] = Field(default=None, max_length=100)
    hours_of_operation: Optional[str] = Field(default=None, max_length=100)
    serves_alcohol: Optional[bool] = None


class ArcadeRead(BaseModel):
    id: int
    name: str
    address: Optional[str] = None
    days_open: Optional[str] = None
    hours_of_operation: Optional[str] = None
    serves_alcohol: Optional[bool] = None

    model_config = ConfigDict(from_attributes=True)


class ArcadeWithRating(ArcadeRead):
    average_rating: float = 0.0


class ArcadeDeleted(BaseModel):
    message: str
    arcade: ArcadeRead


# -------------------- Comments --------------------
class CommentIn(BaseModel):
    comment: str = Field(..., min_length=1)
    # 0 is not a rating: it counts as missing; strict keeps true/false out
    rating: int = Field(..., ge=1, le=5, strict=True)


class CommentRead(BaseModel):
    id: int
    user_id: int
    arcade_id: int
    comment: str
    rating: int
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class CommentWithUsername(CommentRead):
    username: Optional[str] = None


class ProfileComment(CommentRead):
    arcade_name: Optional[str] = None


class ProfileResponse(BaseModel):
    comments: list[ProfileComment] = []


class CommentDeleted(BaseModel):
    message: str
    comment: CommentRead
