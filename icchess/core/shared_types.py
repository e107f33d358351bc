"""
Type definitions used across layers
"""

from enum import StrEnum


class Role(StrEnum):
    WHITE = "White"
    BLACK = "Black"
    SPECTATOR = "Spectator"


class Color(StrEnum):
    WHITE = "white"
    BLACK = "black"


class SessionState(StrEnum):
    START = "start"
    IDENTITY_RESOLVED = "identity resolved"
    URL_PARSED = "url parsed"
    TOKEN_CONSUMED = "token consumed"
    NO_TOKEN = "no token"
    GAME_FETCHED = "game fetched"
    ROLE_RESOLVED = "role resolved"
    READY = "ready"
    FAILED = "failed"


def role_color(role: Role) -> Color | None:
    """Seat color a role is allowed to move, None for spectators."""
    if role is Role.WHITE:
        return Color.WHITE
    if role is Role.BLACK:
        return Color.BLACK
    return None
