"""Credential and token services consumed by the auth handlers."""

from .passwords import PasswordHasher
from .tokens import TokenService

__all__ = ["PasswordHasher", "TokenService"]
