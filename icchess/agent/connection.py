"""
Connection to the game service for the lifetime of a page.

`ConnectionProvider` is the single accessor: the handle is built on first use and every later
caller receives the same, read-only handle. Pass the provider around explicitly.
"""

import asyncio
import logging
from dataclasses import dataclass

import httpx

from icchess.agent.actor import GAME_SERVICE_IDL, GameActor, MethodSpec
from icchess.agent.http_agent import HttpAgent
from icchess.agent.identity import AuthClient, Identity
from icchess.core.config import ClientConfig
from icchess.core.exceptions import ClientError, RootKeyError
from icchess.db.repository import LocalStorage

logger = logging.getLogger(__name__)

ANONYMOUS_TEXT = "anonymous"


@dataclass(frozen=True)
class ConnectionHandle:
    identity: Identity
    auth: AuthClient
    agent: HttpAgent
    actor: GameActor


class ConnectionProvider:
    """Builds the connection once, hands out the cached handle afterwards."""

    def __init__(
        self,
        config: ClientConfig,
        storage: LocalStorage,
        transport: httpx.AsyncBaseTransport | None = None,
        interface: dict[str, MethodSpec] = GAME_SERVICE_IDL,
    ) -> None:
        self.config = config
        self.storage = storage
        self.transport = transport
        self.interface = interface
        self._handle: ConnectionHandle | None = None
        self._lock = asyncio.Lock()

    async def acquire_connection(self) -> ConnectionHandle:
        if self._handle is not None:
            return self._handle
        async with self._lock:
            if self._handle is None:
                self._handle = await self._connect()
        return self._handle

    async def principal_text(self) -> str:
        """Textual principal of the caller, "anonymous" if it cannot be resolved."""
        try:
            handle = await self.acquire_connection()
            return handle.auth.get_identity().get_principal()
        except ClientError as e:
            logger.debug("Could not resolve principal: %s", e)
            return ANONYMOUS_TEXT

    async def close(self) -> None:
        """Page unload."""
        if self._handle is not None:
            await self._handle.agent.close()

    # -- Internal helpers --
    async def _connect(self) -> ConnectionHandle:
        auth = await AuthClient.create(self.storage)
        identity = auth.get_identity()
        agent = HttpAgent(self.config, identity, transport=self.transport)

        if self.config.is_local:
            try:
                await agent.fetch_root_key()
            except RootKeyError as e:
                logger.warning("fetch_root_key failed; replica not reachable? %s", e)

        actor = GameActor(agent, self.config.canister_id, self.interface)
        logger.info(
            "Connected to %s as %s", self.config.host, identity.principal
        )
        return ConnectionHandle(identity=identity, auth=auth, agent=agent, actor=actor)
