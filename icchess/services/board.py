"""Game view once a session is ready: the mounted board, the join form, refresh and invites."""

import logging

from icchess.agent.connection import ConnectionHandle
from icchess.api.models import GameSession
from icchess.core.exceptions import RemoteCallError, StorageError
from icchess.core.models import InviteLinks
from icchess.core.result import Err, Ok, Result
from icchess.core.shared_types import Color, Role, role_color
from icchess.db.repository import LocalStorage
from icchess.invites.codec import encode_invite, load_creation_tokens
from icchess.invites.join_compat import join_by_token
from icchess.services.move_sync import MoveSynchronizer, SnapshotStore
from icchess.services.roles import resolve_role
from icchess.ui.page import BrowserPage
from icchess.ui.surface import BoardSurface

logger = logging.getLogger(__name__)


class GameBoard:
    """A board surface bound to one game session and the caller's role in it."""

    def __init__(
        self,
        connection: ConnectionHandle,
        page: BrowserPage,
        storage: LocalStorage,
        surface: BoardSurface,
        game: GameSession,
        role: Role,
        me: str,
        flash: str = "",
    ) -> None:
        self.connection = connection
        self.page = page
        self.storage = storage
        self.surface = surface
        self.role = role
        self.me = me
        self.flash = flash
        self.join_message = ""
        self.snapshots = SnapshotStore(game)
        self.synchronizer = MoveSynchronizer(connection, self.snapshots, surface, page)

    @property
    def game(self) -> GameSession:
        return self.snapshots.game

    def mount(self) -> None:
        """Draw the current snapshot, oriented and movable for the caller's role."""
        color = role_color(self.role)
        self.surface.configure(orientation=color or Color.WHITE, movable_color=color)
        self.surface.set_position(self.game.fen)

    async def on_move(
        self, origin: str, destination: str, promote_to: str | None = None
    ) -> Result[GameSession]:
        """Move event of the surface."""
        if role_color(self.role) is None:
            self.surface.set_position(self.game.fen)
            return Err("Spectators cannot move")
        return await self.synchronizer.submit_move(origin, destination, promote_to)

    async def refresh(self) -> None:
        """Fetch the game and the caller's role again, replacing both."""
        actor = self.connection.actor
        ticket = self.snapshots.issue_ticket()
        try:
            game = await actor.get_game(self.game.id)
            role = await resolve_role(self.connection, self.game.id)
        except RemoteCallError as e:
            self.flash = f"Refresh failed: {e}"
            return

        if game is not None:
            self.snapshots.apply(game, ticket)
        self.role = role
        logger.info("Refreshed game %s, role %s", self.game.id, role)
        self.mount()

    async def join(self, token: str) -> str:
        """Join form: claim a seat with a pasted token, then refresh."""
        result = await join_by_token(self.connection, self.game.id, token.strip())
        match result:
            case Ok():
                self.join_message = "Joined successfully!"
            case Err(error=error):
                self.join_message = f"Join failed: {error or 'unknown error'}"
        await self.refresh()
        return self.join_message

    async def resign(self) -> Result[GameSession]:
        ticket = self.snapshots.issue_ticket()
        try:
            result = await self.connection.actor.resign(self.game.id)
        except RemoteCallError as e:
            result = Err(str(e))

        match result:
            case Ok(value=game):
                if self.snapshots.apply(game, ticket):
                    self.surface.set_position(game.fen)
            case Err(error=error):
                self.page.alert(f"Resign failed: {error}")
        return result

    async def export_pgn(self) -> str | None:
        try:
            result = await self.connection.actor.export_pgn(self.game.id)
        except RemoteCallError as e:
            result = Err(str(e))

        match result:
            case Ok(value=pgn):
                return pgn
            case Err(error=error):
                self.flash = f"Export failed: {error}"
        return None

    def invite_links(self) -> InviteLinks:
        """Spectator link, plus seat invites when this page created the game."""
        origin, path = self.page.origin, self.page.path
        game_id = self.game.id
        try:
            tokens = load_creation_tokens(self.storage, game_id)
        except StorageError as e:
            logger.warning("Ignoring stored seat tokens: %s", e)
            tokens = None

        spectator = encode_invite(origin, path, game_id)
        if tokens is None:
            return InviteLinks(spectator=spectator)
        return InviteLinks(
            spectator=spectator,
            white=encode_invite(origin, path, game_id, tokens.white),
            black=encode_invite(origin, path, game_id, tokens.black),
        )
