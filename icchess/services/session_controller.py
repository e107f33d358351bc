"""
Startup of the game view.

Runs once per mount, strictly in order:
identity -> address -> seat token (if any) -> game -> role -> mounted board.
Missing game id and unknown game end the startup; a failed join only leaves a message.
"""

import logging

from icchess.agent.connection import ConnectionProvider
from icchess.core.exceptions import ClientError, InvalidAddressError, RemoteCallError
from icchess.core.result import Err, Ok
from icchess.core.shared_types import Role, SessionState
from icchess.db.repository import LocalStorage
from icchess.invites.codec import consume_token_from_url, parse_game_id, strip_token
from icchess.invites.join_compat import join_by_token
from icchess.services.board import GameBoard
from icchess.services.roles import resolve_role
from icchess.ui.page import BrowserPage
from icchess.ui.surface import BoardSurface

logger = logging.getLogger(__name__)

NO_SUCH_GAME = "No such game"


class SessionController:
    """Brings one board from nothing to Ready."""

    def __init__(
        self,
        connections: ConnectionProvider,
        page: BrowserPage,
        storage: LocalStorage,
        surface: BoardSurface,
    ) -> None:
        self.connections = connections
        self.page = page
        self.storage = storage
        self.surface = surface
        self.state = SessionState.START
        self.transitions: list[SessionState] = [SessionState.START]
        self.error: str | None = None

    async def start(self) -> GameBoard | None:
        """Run the startup sequence. Returns the mounted board, or None after a terminal error."""
        if self.state is not SessionState.START:
            raise ClientError(f"Session already started (state: {self.state})")

        # --- Identity ---
        connection = await self.connections.acquire_connection()
        me = await self.connections.principal_text()
        self._advance(SessionState.IDENTITY_RESOLVED)

        # --- Address ---
        try:
            game_id = parse_game_id(self.page.href)
        except InvalidAddressError as e:
            return self._fail(str(e))
        token = consume_token_from_url(self.page.href)
        self._advance(SessionState.URL_PARSED)

        # --- Seat token ---
        flash = ""
        if token:
            result = await join_by_token(connection, game_id, token)
            # token leaves the address whatever the outcome
            self.page.replace_state(strip_token(self.page.href))
            match result:
                case Ok():
                    logger.info("Claimed a seat in game %s", game_id)
                case Err(error=error):
                    flash = f"Auto-join failed: {error}"
            self._advance(SessionState.TOKEN_CONSUMED)
        else:
            self._advance(SessionState.NO_TOKEN)

        # --- Game ---
        try:
            game = await connection.actor.get_game(game_id)
        except RemoteCallError as e:
            return self._fail(f"Could not load game {game_id}: {e}")
        if game is None:
            return self._fail(NO_SUCH_GAME)
        self._advance(SessionState.GAME_FETCHED)

        # --- Role ---
        try:
            role = await resolve_role(connection, game_id)
        except RemoteCallError as e:
            role = Role.SPECTATOR
            flash = flash or f"Could not resolve role: {e}"
        self._advance(SessionState.ROLE_RESOLVED)

        board = GameBoard(
            connection, self.page, self.storage, self.surface, game, role, me, flash
        )
        board.mount()
        self._advance(SessionState.READY)
        return board

    # -- Internal helpers --
    def _advance(self, state: SessionState) -> None:
        logger.debug("Session %s -> %s", self.state, state)
        self.state = state
        self.transitions.append(state)

    def _fail(self, message: str) -> None:
        self.error = message
        self.page.alert(message)
        self._advance(SessionState.FAILED)
        return None
