"""SQLAlchemy-backed repository implementations."""

from .base import SQLAlchemyRepository
from .chat_members import SQLAlchemyChatMemberRepository
from .chats import SQLAlchemyChatRepository
from .mentions import SQLAlchemyMentionRepository
from .messages import SQLAlchemyMessageRepository
from .refresh_tokens import SQLAlchemyRefreshTokenRepository
from .users import SQLAlchemyUserRepository

__all__ = [
    "SQLAlchemyChatMemberRepository",
    "SQLAlchemyChatRepository",
    "SQLAlchemyMentionRepository",
    "SQLAlchemyMessageRepository",
    "SQLAlchemyRefreshTokenRepository",
    "SQLAlchemyRepository",
    "SQLAlchemyUserRepository",
]
