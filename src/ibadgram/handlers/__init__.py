"""Use-case handlers.

Every handler takes a fresh unit of work and exposes
``async handle(command) -> Result``; see :mod:`.base` for the transaction
discipline they share.
"""

from . import commands, queries
from .base import Handler, QueryHandler

__all__ = ["Handler", "QueryHandler", "commands", "queries"]
