"""Repository contracts and their SQLAlchemy implementations."""

from .interfaces import (
    ChatMemberRepository,
    ChatRepository,
    MentionRepository,
    MessageRepository,
    RefreshTokenRepository,
    UserRepository,
)

__all__ = [
    "ChatMemberRepository",
    "ChatRepository",
    "MentionRepository",
    "MessageRepository",
    "RefreshTokenRepository",
    "UserRepository",
]
