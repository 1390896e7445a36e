from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from relaybot.models.user import User
from relaybot.schemas.telegram import TgUser


def _insert_ignore(db: Session):
    # insert-if-absent must be atomic in the store: duplicate webhook
    # deliveries can race on the same user id
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        return postgresql.insert(User).on_conflict_do_nothing(index_elements=[User.user_id])
    if dialect == "sqlite":
        return sqlite.insert(User).on_conflict_do_nothing(index_elements=[User.user_id])
    raise RuntimeError(f"unsupported database dialect: {dialect}")


def get_user(db: Session, user_id: int) -> User | None:
    return db.get(User, user_id)


def upsert_user(db: Session, tg_user: TgUser) -> User:
    """Create the user on first contact, refresh name fields if they drifted."""
    db.execute(
        _insert_ignore(db).values(
            user_id=tg_user.id,
            username=tg_user.username,
            first_name=tg_user.first_name,
            is_verified=False,
            is_blocked=False,
            created_at=datetime.now(timezone.utc),
        )
    )

    user = db.get(User, tg_user.id, populate_existing=True)
    if user.username != tg_user.username or user.first_name != tg_user.first_name:
        user.username = tg_user.username
        user.first_name = tg_user.first_name
    db.commit()
    return user


def mark_verified(db: Session, user_id: int) -> bool:
    """Set is_verified. Returns True only for the call that actually flipped it."""
    res = db.execute(
        update(User)
        .where(User.user_id == user_id, User.is_verified.is_(False))
        .values(is_verified=True)
        .execution_options(synchronize_session=False)
    )
    db.commit()
    return res.rowcount == 1


def set_language(db: Session, user: User, code: str) -> User:
    user.language = code
    db.commit()
    return user


def set_blocked(db: Session, user_id: int, blocked: bool) -> User | None:
    user = db.get(User, user_id)
    if user is None:
        return None
    if user.is_blocked != blocked:
        user.is_blocked = blocked
        user.blocked_at = datetime.now(timezone.utc) if blocked else None
        db.commit()
    return user
