"""Database configuration and ORM models."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Optional
from uuid import uuid4

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    JSON,
    MetaData,
    String,
    Text,
    func,
)
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from ..config import Settings

NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=NAMING_CONVENTION)

MESSAGE_ROLES = ("user", "assistant", "source", "suggestion")


class Base(DeclarativeBase):
    metadata = metadata


class TimestampMixin:
    """Common timestamp columns."""

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )


class User(TimestampMixin, Base):
    """Application user entity."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid4()))
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    is_superuser: Mapped[bool] = mapped_column(Boolean, default=False)
    is_verified: Mapped[bool] = mapped_column(Boolean, default=False)
    full_name: Mapped[Optional[str]] = mapped_column(String(255))

    chats: Mapped[list["Chat"]] = relationship(
        back_populates="user", cascade="all, delete-orphan", lazy="noload"
    )


class Chat(TimestampMixin, Base):
    """A conversation owned by an authenticated user.

    ``id`` is the opaque token minted by the client; guest conversations never
    reach this table.
    """

    __tablename__ = "chats"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    focus_mode: Mapped[str] = mapped_column(String(64), nullable=False)
    files: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)

    user: Mapped[User] = relationship(back_populates="chats", lazy="noload")
    messages: Mapped[list["Message"]] = relationship(
        back_populates="chat",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="noload",
    )

    def as_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "focusMode": self.focus_mode,
            "files": list(self.files or []),
        }


class Message(Base):
    """One row of a chat transcript.

    ``id`` is the autoincrementing row ordinal that totally orders a chat;
    ``message_id`` is the client-visible token shared by the frames of a turn.
    """

    __tablename__ = "messages"
    __table_args__ = (Index("ix_messages_chat_ordinal", "chat_id", "id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    message_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    chat_id: Mapped[str] = mapped_column(ForeignKey("chats.id", ondelete="CASCADE"), nullable=False)
    user_id: Mapped[Optional[str]] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"))
    role: Mapped[str] = mapped_column(String(16), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    sources: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)
    suggestions: Mapped[list[str]] = mapped_column(JSON, default=list)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    chat: Mapped[Chat] = relationship(back_populates="messages", lazy="noload")

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "messageId": self.message_id,
            "chatId": self.chat_id,
            "role": self.role,
            "content": self.content,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
        if self.role == "source":
            payload["sources"] = list(self.sources or [])
        if self.role == "suggestion":
            payload["suggestions"] = list(self.suggestions or [])
        return payload


AsyncSessionFactory = async_sessionmaker[AsyncSession]

_engine: AsyncEngine | None = None
_session_factory: AsyncSessionFactory | None = None


def configure_engine(settings: Settings) -> AsyncSessionFactory:
    """Configure the database engine and session factory."""

    global _engine, _session_factory
    if _engine is None:
        _engine = create_async_engine(
            settings.sqlalchemy_database_uri(),
            echo=settings.postgres.echo,
            future=True,
        )
    if _session_factory is None:
        _session_factory = async_sessionmaker(_engine, expire_on_commit=False)
    return _session_factory


def get_engine() -> AsyncEngine:
    """Return the configured async engine."""

    if _engine is None:
        raise RuntimeError("Database engine has not been configured")
    return _engine


__all__ = [
    "Base",
    "User",
    "Chat",
    "Message",
    "MESSAGE_ROLES",
    "configure_engine",
    "get_engine",
    "AsyncSessionFactory",
]
