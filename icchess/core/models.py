"""
Boundary layer data model(s).

Small value objects handed between the page, the storage layer and the services.
Remote snapshots themselves are the pydantic models in icchess/api/models.py.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class SeatTokens:
    """Both one-time seat tokens of a game, as handed out to its creator."""

    white: str
    black: str


@dataclass(frozen=True)
class InviteLinks:
    spectator: str
    white: Optional[str] = None
    black: Optional[str] = None
