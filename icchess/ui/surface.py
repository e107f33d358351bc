"""Boundary to the board widget that draws the position and reports the user's moves."""

from typing import Protocol

from icchess.core.shared_types import Color


class BoardSurface(Protocol):
    """A board widget. Legality hints and drag handling are its own business."""

    def configure(self, *, orientation: Color, movable_color: Color | None) -> None:
        """Point the board at orientation and let movable_color (None: nobody) drag pieces."""
        ...

    def set_position(self, fen: str) -> None:
        """Display exactly this position."""
        ...

    def show_move(self, origin: str, destination: str) -> None:
        """Move the piece locally, before the service has confirmed anything."""
        ...
