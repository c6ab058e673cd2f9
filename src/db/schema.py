"""Database tables / schema"""

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from sqlalchemy import JSON, ForeignKey, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class DBUser(Base):
    __tablename__ = "users"
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(unique=True, index=True)
    created_at: Mapped[datetime] = mapped_column(default=utc_now)


class DBGameHeader(Base):
    __tablename__ = "game_headers"
    id: Mapped[UUID] = mapped_column(primary_key=True)
    owner_id: Mapped[int] = mapped_column(ForeignKey("users.id"))
    description: Mapped[str]
    created_at: Mapped[datetime] = mapped_column(default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(default=utc_now, onupdate=utc_now)

    owner: Mapped[DBUser] = relationship()
    members: Mapped[list["DBMember"]] = relationship(
        back_populates="game", order_by="DBMember.id"
    )


class DBMember(Base):
    __tablename__ = "members"
    # One roster entry per (user, game). Backs up the per-pair lock in MembershipService.
    __table_args__ = (UniqueConstraint("game_id", "user_id", name="uq_members_game_user"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    game_id: Mapped[UUID] = mapped_column(ForeignKey("game_headers.id"), index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    role: Mapped[int]  # see ROLE_TO_CODE in src/core/shared_types.py
    accepted: Mapped[bool] = mapped_column(default=False)

    game: Mapped[DBGameHeader] = relationship(back_populates="members")
    user: Mapped[DBUser] = relationship()


class DBNimGame(Base):
    __tablename__ = "nim_games"
    id: Mapped[UUID] = mapped_column(primary_key=True)
    tokens: Mapped[list[str]] = mapped_column(JSON)
    current_player: Mapped[int]
    player_count: Mapped[int]
    max_tokens_per_move: Mapped[int]
    status: Mapped[str]
    winner: Mapped[Optional[int]]
    created_at: Mapped[datetime] = mapped_column(default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(default=utc_now, onupdate=utc_now)
