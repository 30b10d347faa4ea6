"""Ibadgram messaging core.

Use-case handlers, repositories and the unit of work that coordinates them
inside one database transaction.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
