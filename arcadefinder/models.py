from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .db import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    # salted one-way hash; the plaintext password is never stored
    password_hash = Column(String, nullable=False)

    comments = relationship("Comment", back_populates="user")


class Arcade(Base):
    __tablename__ = "arcades"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    address = Column(String(300), nullable=True)
    days_open = Column(String(100), nullable=True)
    hours_of_operation = Column(String(100), nullable=True)
    serves_alcohol = Column(Boolean, nullable=True)

    # deleting an arcade removes its comments
    comments = relationship("Comment", back_populates="arcade", cascade="all, delete-orphan")


class Comment(Base):
    __tablename__ = "comments"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    arcade_id = Column(Integer, ForeignKey("arcades.id", ondelete="CASCADE"), nullable=False, index=True)
    comment = Column(Text, nullable=False)
    rating = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    user = relationship("User", back_populates="comments")
    arcade = relationship("Arcade", back_populates="comments")

    @property
    def username(self) -> str | None:
        return self.user.username if self.user is not None else None

    @property
    def arcade_name(self) -> str | None:
        return self.arcade.name if self.arcade is not None else None
