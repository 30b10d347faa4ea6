"""Declarative SQLAlchemy models for the messaging core."""

from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID, uuid4

import sqlalchemy as sa
from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    Enum,
    ForeignKey,
    Index,
    MetaData,
    String,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.types import TypeDecorator

from ..domain.constants import (
    BIO_MAX_LENGTH,
    CHAT_DESCRIPTION_MAX_LENGTH,
    CHAT_NAME_MAX_LENGTH,
    EMAIL_MAX_LENGTH,
    FIRSTNAME_MAX_LENGTH,
    LASTNAME_MAX_LENGTH,
    MESSAGE_MAX_LENGTH,
    SHORTNAME_MAX_LENGTH,
)
from ..domain.enums import ChatRole, ChatType, MentionOwner, UserStatus


NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UTCDateTime(TypeDecorator[datetime]):
    """Timezone-aware timestamp that always comes back in UTC.

    SQLite drops the offset on storage, so naive values read back are
    re-labelled as UTC.
    """

    impl = sa.DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: sa.Dialect) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def process_result_value(self, value: datetime | None, dialect: sa.Dialect) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


def _enum(enum_cls: type) -> Enum:
    return Enum(
        enum_cls,
        native_enum=False,
        length=16,
        values_callable=lambda members: [member.value for member in members],
    )


class Base(DeclarativeBase):
    """Base class that applies a deterministic naming convention."""

    metadata = MetaData(naming_convention=NAMING_CONVENTION)


class User(Base):
    __tablename__ = "users"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    firstname: Mapped[str] = mapped_column(String(FIRSTNAME_MAX_LENGTH), nullable=False)
    lastname: Mapped[str | None] = mapped_column(String(LASTNAME_MAX_LENGTH), nullable=True)
    email: Mapped[str] = mapped_column(String(EMAIL_MAX_LENGTH), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(256), nullable=False)
    password_salt: Mapped[str] = mapped_column(String(128), nullable=False)
    bio: Mapped[str | None] = mapped_column(String(BIO_MAX_LENGTH), nullable=True)
    is_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    email_confirmed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    email_confirmation_token: Mapped[str | None] = mapped_column(String(16), nullable=True)
    email_confirmation_token_expires_at: Mapped[datetime | None] = mapped_column(
        UTCDateTime, nullable=True
    )
    status: Mapped[UserStatus] = mapped_column(
        _enum(UserStatus), nullable=False, default=UserStatus.OFFLINE
    )
    last_seen_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)

    __table_args__ = (
        Index(
            "uq_users_email_active",
            "email",
            unique=True,
            postgresql_where=sa.text("is_deleted = false"),
            sqlite_where=sa.text("is_deleted = 0"),
        ),
    )

    @property
    def fullname(self) -> str:
        if self.lastname:
            return f"{self.firstname} {self.lastname}"
        return self.firstname


class Mention(Base):
    """A shortname bound to exactly one user or one chat."""

    __tablename__ = "mentions"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    shortname: Mapped[str] = mapped_column(String(SHORTNAME_MAX_LENGTH), nullable=False, unique=True)
    owner_kind: Mapped[MentionOwner] = mapped_column(_enum(MentionOwner), nullable=False)
    owner_id: Mapped[UUID] = mapped_column(Uuid, nullable=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)

    __table_args__ = (
        sa.UniqueConstraint("owner_kind", "owner_id", name="uq_mentions_owner"),
    )


class Chat(Base):
    __tablename__ = "chats"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    type: Mapped[ChatType] = mapped_column(_enum(ChatType), nullable=False)
    name: Mapped[str | None] = mapped_column(String(CHAT_NAME_MAX_LENGTH), nullable=True)
    description: Mapped[str | None] = mapped_column(
        String(CHAT_DESCRIPTION_MAX_LENGTH), nullable=True
    )
    is_private: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    direct_key: Mapped[str | None] = mapped_column(String(80), nullable=True, unique=True)
    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "type <> 'one_to_one' OR direct_key IS NOT NULL",
            name="direct_key_required",
        ),
    )

    @staticmethod
    def direct_key_for(user_a: UUID, user_b: UUID) -> str:
        """Order-independent key identifying the one-to-one chat of a user pair."""

        low, high = sorted((user_a.hex, user_b.hex))
        return f"{low}:{high}"


class ChatMember(Base):
    __tablename__ = "chat_members"

    chat_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("chats.id", ondelete="CASCADE"), primary_key=True
    )
    user_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    nickname: Mapped[str | None] = mapped_column(String(64), nullable=True)
    role: Mapped[ChatRole | None] = mapped_column(_enum(ChatRole), nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)

    chat: Mapped[Chat] = relationship(lazy="raise")
    user: Mapped[User] = relationship(lazy="raise")

    __table_args__ = (Index("ix_chat_members_user_id", "user_id"),)

    @property
    def effective_role(self) -> ChatRole:
        return self.role or ChatRole.MEMBER


class Message(Base):
    """Chat message identified by ``(chat_id, id)``; ``id`` is per chat."""

    __tablename__ = "messages"

    chat_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("chats.id", ondelete="CASCADE"), primary_key=True
    )
    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    user_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False)
    text: Mapped[str] = mapped_column(String(MESSAGE_MAX_LENGTH), nullable=False)
    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)

    author: Mapped[User] = relationship(lazy="raise")

    @property
    def is_edited(self) -> bool:
        return self.updated_at is not None


class RefreshToken(Base):
    __tablename__ = "refresh_tokens"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    user_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    token: Mapped[str] = mapped_column(String(256), nullable=False, unique=True)
    access_token_jti: Mapped[str | None] = mapped_column(String(64), nullable=True)
    is_revoked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    revoked_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    user_agent: Mapped[str | None] = mapped_column(String(512), nullable=True)
    device_id: Mapped[str | None] = mapped_column(String(128), nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    expires_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)

    __table_args__ = (Index("ix_refresh_tokens_user_id", "user_id"),)

    def is_active(self, now: datetime | None = None) -> bool:
        return not self.is_revoked and self.expires_at > (now or utcnow())


__all__ = [
    "Base",
    "Chat",
    "ChatMember",
    "Mention",
    "Message",
    "NAMING_CONVENTION",
    "RefreshToken",
    "UTCDateTime",
    "User",
    "utcnow",
]
