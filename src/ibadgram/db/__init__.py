"""Database models and session helpers."""

from .models import Base, Chat, ChatMember, Mention, Message, RefreshToken, User
from .session import create_engine, create_session_factory, init_models

__all__ = [
    "Base",
    "Chat",
    "ChatMember",
    "Mention",
    "Message",
    "RefreshToken",
    "User",
    "create_engine",
    "create_session_factory",
    "init_models",
]
