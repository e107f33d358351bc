"""Start page: create a new game, or open an existing one by id."""

import logging

from icchess.agent.connection import ConnectionProvider
from icchess.core.exceptions import ClientError
from icchess.core.shared_types import Color
from icchess.db.repository import LocalStorage
from icchess.invites.codec import encode_invite, is_game_id_text, persist_creation_tokens
from icchess.ui.page import BrowserPage

logger = logging.getLogger(__name__)


class StartPage:
    def __init__(
        self, connections: ConnectionProvider, page: BrowserPage, storage: LocalStorage
    ) -> None:
        self.connections = connections
        self.page = page
        self.storage = storage
        self.flash = ""

    async def create_as(self, color: Color) -> str | None:
        """
        Create a game and navigate to it holding the chosen seat's token.

        Both tokens are stored first, so the game view can still show the invite for the other seat.
        """
        self.flash = ""
        try:
            connection = await self.connections.acquire_connection()
            created = await connection.actor.create_game()
            persist_creation_tokens(
                self.storage, created.game_id, created.white_token, created.black_token
            )
        except ClientError as e:
            self.flash = f"Create failed: {e}"
            return None

        logger.info("Created game %s", created.game_id)
        token = created.white_token if color is Color.WHITE else created.black_token
        url = encode_invite(self.page.origin, self.page.path, created.game_id, token)
        self.page.assign(url)
        return url

    def open_existing(self, game_id_text: str, token_text: str = "") -> str | None:
        """Join form: navigate to a game, with a seat token if one was pasted (spectate otherwise)."""
        self.flash = ""
        game_id_text = game_id_text.strip()
        token = token_text.strip()
        if not game_id_text:
            self.flash = "Enter a game id"
            return None
        if not is_game_id_text(game_id_text):
            self.flash = "Invalid game id"
            return None

        url = encode_invite(self.page.origin, self.page.path, int(game_id_text), token or None)
        self.page.assign(url)
        return url
