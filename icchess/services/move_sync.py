"""
Optimistic move submission.

The board widget shows the move straight away; the service's answer then either replaces the whole
local snapshot (and the displayed position) or the displayed position is put back.
"""

import logging

from icchess.agent.connection import ConnectionHandle
from icchess.api.models import GameSession, MoveAttempt
from icchess.core.exceptions import InvalidMoveRequestError, RemoteCallError
from icchess.core.result import Err, Ok, Result
from icchess.ui.page import BrowserPage
from icchess.ui.surface import BoardSurface

logger = logging.getLogger(__name__)

MOVE_PENDING = "A move is still being submitted"
DEFAULT_REJECTION = "Illegal move"


class SnapshotStore:
    """
    Local copy of the authoritative snapshot.

    Every request that can produce a snapshot draws a ticket when it is issued. A snapshot only
    replaces the current one if its ticket is newer than the ticket of the snapshot in place, so a
    late move reply never overwrites a fetch that was issued after it.
    """

    def __init__(self, game: GameSession) -> None:
        self.game = game
        self._issued = 0
        self._applied = 0

    def issue_ticket(self) -> int:
        self._issued += 1
        return self._issued

    def apply(self, game: GameSession, ticket: int) -> bool:
        if ticket <= self._applied:
            logger.debug("Dropping snapshot #%s, #%s is already in place", ticket, self._applied)
            return False
        self.game = game
        self._applied = ticket
        return True


class MoveSynchronizer:
    """Submits moves for one board, one at a time."""

    def __init__(
        self,
        connection: ConnectionHandle,
        snapshots: SnapshotStore,
        surface: BoardSurface,
        page: BrowserPage,
    ) -> None:
        self.connection = connection
        self.snapshots = snapshots
        self.surface = surface
        self.page = page
        self._pending = False

    @property
    def pending(self) -> bool:
        return self._pending

    async def submit_move(
        self, origin: str, destination: str, promote_to: str | None = None
    ) -> Result[GameSession]:
        """Show the move, send it, then commit the service's snapshot or roll the board back."""
        if self._pending:
            return Err(MOVE_PENDING)

        before = self.snapshots.game
        try:
            attempt = MoveAttempt(
                game_id=before.id,
                from_square=origin,
                to_square=destination,
                promote_to=promote_to,
            )
        except InvalidMoveRequestError as e:
            self.page.alert(str(e))
            return Err(str(e))

        self.surface.show_move(origin, destination)
        self._pending = True
        ticket = self.snapshots.issue_ticket()
        try:
            result = await self.connection.actor.make_move(attempt.game_id, attempt.notation)
        except RemoteCallError as e:
            result = Err(str(e))
        finally:
            self._pending = False

        match result:
            case Ok(value=game):
                if self.snapshots.apply(game, ticket):
                    self.surface.set_position(game.fen)
                    logger.info("Move %s accepted in game %s", attempt.notation, game.id)
                else:
                    self.surface.set_position(self.snapshots.game.fen)
            case Err(error=error):
                # local snapshot was never touched, it still holds the pre-attempt position
                self.surface.set_position(self.snapshots.game.fen)
                self.page.alert(error or DEFAULT_REJECTION)
        return result
