"""Field limits and fixed values used by validators and handlers."""

from __future__ import annotations

from datetime import timedelta

FIRSTNAME_MIN_LENGTH = 1
FIRSTNAME_MAX_LENGTH = 64
LASTNAME_MAX_LENGTH = 64
BIO_MAX_LENGTH = 2048

PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 64

EMAIL_MAX_LENGTH = 256
ALLOWED_EMAIL_DOMAINS = frozenset({"gmail.com", "yahoo.com", "yandex.ru", "mail.ru"})
EMAIL_CONFIRMATION_TOKEN_LENGTH = 6
EMAIL_CONFIRMATION_TOKEN_TTL = timedelta(minutes=5)

PASSWORD_SALT_LENGTH = 64

SHORTNAME_MIN_LENGTH = 4
SHORTNAME_MAX_LENGTH = 64

CHAT_NAME_MIN_LENGTH = 1
CHAT_NAME_MAX_LENGTH = 128
CHAT_DESCRIPTION_MAX_LENGTH = 1024
CREATOR_NICKNAME = "Creator"

MESSAGE_MIN_LENGTH = 1
MESSAGE_MAX_LENGTH = 1024

MESSAGES_DEFAULT_LIMIT = 20
MESSAGES_MAX_LIMIT = 100

MEMBERS_DEFAULT_LIMIT = 50
MEMBERS_MAX_LIMIT = 200
MEMBERS_SEARCH_MAX_LENGTH = 100

ACCESS_TOKEN_TTL = timedelta(minutes=15)
REFRESH_TOKEN_TTL = timedelta(days=3)
REFRESH_TOKEN_BYTES = 64
