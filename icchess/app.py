"""
Entrypoint of the client: one App per page load.

The address decides the view: with a `game` parameter the game view starts up, otherwise the start page.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Literal

import httpx

from icchess.agent.connection import ConnectionProvider
from icchess.core.config import ClientConfig
from icchess.db.database import storage_session
from icchess.db.repository import LocalStorage
from icchess.db.sql_storage import SQLLocalStorage
from icchess.invites.codec import has_game_id
from icchess.services.board import GameBoard
from icchess.services.lobby import StartPage
from icchess.services.session_controller import SessionController
from icchess.ui.page import BrowserPage
from icchess.ui.surface import BoardSurface

View = Literal["start", "game"]


class App:
    def __init__(
        self,
        config: ClientConfig,
        page: BrowserPage,
        storage: LocalStorage,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.page = page
        self.storage = storage
        self.connections = ConnectionProvider(config, storage, transport=transport)

    @property
    def view(self) -> View:
        return "game" if has_game_id(self.page.href) else "start"

    def start_page(self) -> StartPage:
        return StartPage(self.connections, self.page, self.storage)

    async def open_game(self, surface: BoardSurface) -> GameBoard | None:
        """Mount the game view on surface."""
        controller = SessionController(self.connections, self.page, self.storage, surface)
        return await controller.start()

    async def close(self) -> None:
        await self.connections.close()


@asynccontextmanager
async def open_app(
    config: ClientConfig,
    href: str,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AsyncGenerator[App, None]:
    """Page lifetime: local storage from config.storage_url, connection closed on unload."""
    with storage_session(config) as db:
        app = App(config, BrowserPage(href), SQLLocalStorage(db), transport=transport)
        try:
            yield app
        finally:
            await app.close()
