"""Handlers that change state."""

from .auth import LoginHandler, LogoutHandler, RefreshTokenHandler
from .chats import (
    CreateChatHandler,
    CreateGroupHandler,
    DeleteGroupHandler,
    MakePrivateGroupHandler,
    MakePublicGroupHandler,
    UpdateGroupHandler,
    UpdateGroupShortnameHandler,
)
from .messages import DeleteMessageHandler, SendMessageHandler, UpdateMessageHandler
from .users import (
    CompleteAccountHandler,
    ConfirmEmailHandler,
    CreateAccountHandler,
    DeleteAccountHandler,
    UpdateConfirmEmailTokenHandler,
    UpdateShortnameHandler,
    UpdateUserHandler,
)

__all__ = [
    "CompleteAccountHandler",
    "ConfirmEmailHandler",
    "CreateAccountHandler",
    "CreateChatHandler",
    "CreateGroupHandler",
    "DeleteAccountHandler",
    "DeleteGroupHandler",
    "DeleteMessageHandler",
    "LoginHandler",
    "LogoutHandler",
    "MakePrivateGroupHandler",
    "MakePublicGroupHandler",
    "RefreshTokenHandler",
    "SendMessageHandler",
    "UpdateConfirmEmailTokenHandler",
    "UpdateGroupHandler",
    "UpdateGroupShortnameHandler",
    "UpdateMessageHandler",
    "UpdateShortnameHandler",
    "UpdateUserHandler",
]
