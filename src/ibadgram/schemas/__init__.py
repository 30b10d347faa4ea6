"""Lightweight records exchanged with the handlers.

Commands and queries live in :mod:`.commands`, success payloads in
:mod:`.views`.
"""
