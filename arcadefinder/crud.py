import logging
from typing import List, Tuple

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, contains_eager

from . import models, schemas
from .auth import hash_password, verify_password
from .exceptions import Conflict, InvalidCredentials, NotFound, NotFoundOrUnauthorized, Unauthenticated, ValidationError
from .utils import sanitize_text

logger = logging.getLogger(__name__)


# -------------------- Users --------------------
def get_user_by_email(db: Session, email: str) -> models.User | None:
    return db.query(models.User).filter(models.User.email == email).first()


def register_user(db: Session, data: schemas.UserRegister) -> models.User:
    if get_user_by_email(db, data.email):
        raise Conflict("User already exists")

    username = sanitize_text(data.username)
    if not username:
        raise ValidationError("All fields are required")
    db_user = models.User(
        username=username,
        email=data.email,
        password_hash=hash_password(data.password),
    )
    db.add(db_user)
    try:
        db.commit()
    except IntegrityError as e:
        # lost a race with a concurrent registration of the same email
        db.rollback()
        raise Conflict("User already exists") from e
    db.refresh(db_user)
    logger.info("registered user id=%s", db_user.id)
    return db_user


def authenticate_user(db: Session, data: schemas.UserLogin) -> models.User:
    user = get_user_by_email(db, data.email)
    if not user or not verify_password(data.password, user.password_hash):
        raise InvalidCredentials("Invalid credentials")
    return user


# -------------------- Arcades --------------------
def _arcade_fields(data: schemas.ArcadeIn) -> dict:
    name = sanitize_text(data.name)
    if not name:
        raise ValidationError("Arcade name is required")
    return {
        "name": name,
        "address": sanitize_text(data.address),
        "days_open": sanitize_text(data.days_open),
        "hours_of_operation": sanitize_text(data.hours_of_operation),
        "serves_alcohol": data.serves_alcohol,
    }


def create_arcade(db: Session, data: schemas.ArcadeIn) -> models.Arcade:
    arcade = models.Arcade(**_arcade_fields(data))
    db.add(arcade)
    db.commit()
    db.refresh(arcade)
    logger.info("created arcade id=%s", arcade.id)
    return arcade


def list_arcades_with_rating(db: Session) -> List[Tuple[models.Arcade, float]]:
    """Every arcade with the average of its comment ratings (0 when it has none)."""
    average = func.coalesce(func.round(func.avg(models.Comment.rating), 1), 0).label("average_rating")
    rows = (
        db.query(models.Arcade, average)
        .outerjoin(models.Comment, models.Comment.arcade_id == models.Arcade.id)
        .group_by(models.Arcade.id)
        .order_by(models.Arcade.id)
        .all()
    )
    return [(arcade, float(avg)) for arcade, avg in rows]


def get_arcade(db: Session, arcade_id: int) -> models.Arcade:
    arcade = db.get(models.Arcade, arcade_id)
    if not arcade:
        raise NotFound("Arcade not found")
    return arcade


def update_arcade(db: Session, arcade_id: int, data: schemas.ArcadeIn) -> models.Arcade:
    arcade = get_arcade(db, arcade_id)
    # full replacement: fields left out of the payload become null
    for key, value in _arcade_fields(data).items():
        setattr(arcade, key, value)
    db.commit()
    db.refresh(arcade)
    return arcade


def delete_arcade(db: Session, arcade_id: int) -> schemas.ArcadeRead:
    arcade = get_arcade(db, arcade_id)
    deleted = schemas.ArcadeRead.model_validate(arcade)
    db.delete(arcade)
    db.commit()
    logger.info("deleted arcade id=%s", arcade_id)
    return deleted


# -------------------- Comments --------------------
def _comment_text(data: schemas.CommentIn) -> str:
    text = sanitize_text(data.comment)
    if not text:
        raise ValidationError("Both comment and rating are required")
    return text


def create_comment(db: Session, arcade_id: int, user_id: int, data: schemas.CommentIn) -> models.Comment:
    text = _comment_text(data)
    # a signed token can outlive its user
    if db.get(models.User, user_id) is None:
        raise Unauthenticated("User no longer exists")
    get_arcade(db, arcade_id)
    comment = models.Comment(user_id=user_id, arcade_id=arcade_id, comment=text, rating=data.rating)
    db.add(comment)
    db.commit()
    db.refresh(comment)
    logger.info("user id=%s commented on arcade id=%s", user_id, arcade_id)
    return comment


def list_arcade_comments(db: Session, arcade_id: int) -> List[models.Comment]:
    get_arcade(db, arcade_id)
    return (
        db.query(models.Comment)
        .join(models.Comment.user)
        .options(contains_eager(models.Comment.user))
        .filter(models.Comment.arcade_id == arcade_id)
        .order_by(models.Comment.created_at.desc(), models.Comment.id.desc())
        .all()
    )


def list_user_comments(db: Session, user_id: int) -> List[models.Comment]:
    return (
        db.query(models.Comment)
        .join(models.Comment.arcade)
        .options(contains_eager(models.Comment.arcade))
        .filter(models.Comment.user_id == user_id)
        .order_by(models.Comment.created_at.desc(), models.Comment.id.desc())
        .all()
    )


def _owned_comment(db: Session, comment_id: int, user_id: int) -> models.Comment:
    # one lookup on both predicates: a missing comment and someone else's look the same
    comment = (
        db.query(models.Comment)
        .filter(models.Comment.id == comment_id, models.Comment.user_id == user_id)
        .first()
    )
    if not comment:
        raise NotFoundOrUnauthorized("Comment not found or not authorized")
    return comment


def update_comment(db: Session, comment_id: int, user_id: int, data: schemas.CommentIn) -> models.Comment:
    text = _comment_text(data)
    comment = _owned_comment(db, comment_id, user_id)
    comment.comment = text
    comment.rating = data.rating
    db.commit()
    db.refresh(comment)
    return comment


def delete_comment(db: Session, comment_id: int, user_id: int) -> schemas.CommentRead:
    comment = _owned_comment(db, comment_id, user_id)
    deleted = schemas.CommentRead.model_validate(comment)
    db.delete(comment)
    db.commit()
    logger.info("user id=%s deleted comment id=%s", user_id, comment_id)
    return deleted
