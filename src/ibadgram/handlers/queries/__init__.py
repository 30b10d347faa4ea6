"""Read-only handlers; their transactions are always rolled back."""

from .chats import GetChatHandler, GetGroupMembersHandler
from .messages import GetMessagesHandler
from .users import GetUserHandler, GetUserMembershipsHandler

__all__ = [
    "GetChatHandler",
    "GetGroupMembersHandler",
    "GetMessagesHandler",
    "GetUserHandler",
    "GetUserMembershipsHandler",
]
