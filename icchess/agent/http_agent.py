"""
HTTP transport to the game service.

Every call carries the sender principal of the identity the agent was built with.
Replies are only trusted once a root key is known: the main network key is built in,
a local replica has to hand out its own key first (`fetch_root_key`).
"""

import logging
from typing import Any, Literal, Optional

import httpx
from pydantic import BaseModel, ValidationError

from icchess.agent.identity import Identity
from icchess.core.config import ClientConfig
from icchess.core.exceptions import RemoteCallError, RootKeyError

logger = logging.getLogger(__name__)

MAINNET_ROOT_KEY = bytes.fromhex(
    "308182301d060d2b0601040182dc7c0503010201060c2b0601040182dc7c05030201036100"
    "814c0e6ec71fab583b08bd81373c255c3c371b2e84863c98a4f1e08b74235d14fb5d9c0cd5"
    "46d9685f913a0c0b2cc5341583bf4b4392e467db96d65b9bb4cb717112f8472e0d5a4d1450"
    "5ffd7484b01291091c5f87b98883463f98091a0baaae"
)

CallKind = Literal["query", "call"]


class StatusResponse(BaseModel):
    root_key: str


class CallResponse(BaseModel):
    status: Literal["replied", "rejected"]
    reply: Any = None
    reject_code: Optional[int] = None
    reject_message: Optional[str] = None


class HttpAgent:
    """Sends calls for one identity to one host."""

    def __init__(
        self,
        config: ClientConfig,
        identity: Identity,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self.identity = identity
        self.root_key: bytes | None = None if config.is_local else MAINNET_ROOT_KEY
        self._client = httpx.AsyncClient(
            base_url=config.host,
            timeout=config.request_timeout,
            transport=transport,
        )

    async def fetch_root_key(self) -> bytes:
        """Fetch the root of trust of a local replica. Raises RootKeyError if it cannot be fetched."""
        try:
            response = await self._client.get("/api/v2/status")
            response.raise_for_status()
            status = StatusResponse.model_validate(response.json())
            self.root_key = bytes.fromhex(status.root_key)
        except (httpx.HTTPError, ValidationError, ValueError) as e:
            raise RootKeyError(f"Could not fetch root key from {self.config.host}: {e}") from e
        return self.root_key

    async def query(self, canister_id: str, method: str, args: list[Any]) -> Any:
        return await self._send("query", canister_id, method, args)

    async def call(self, canister_id: str, method: str, args: list[Any]) -> Any:
        return await self._send("call", canister_id, method, args)

    async def close(self) -> None:
        await self._client.aclose()

    # -- Internal helpers --
    async def _send(
        self, kind: CallKind, canister_id: str, method: str, args: list[Any]
    ) -> Any:
        logger.debug("%s %s%s as %s", kind, method, tuple(args), self.identity.principal)
        body = {
            "sender": self.identity.principal,
            "method_name": method,
            "arg": args,
        }
        try:
            response = await self._client.post(
                f"/api/v2/canister/{canister_id}/{kind}", json=body
            )
            response.raise_for_status()
            result = CallResponse.model_validate(response.json())
        except (httpx.HTTPError, ValidationError, ValueError) as e:
            raise RemoteCallError(f"Call to {method} failed: {e}") from e

        self._verify(method)
        if result.status == "rejected":
            raise RemoteCallError(
                f"Call to {method} was rejected (code {result.reject_code}): {result.reject_message}"
            )
        return result.reply

    def _verify(self, method: str) -> None:
        if self.root_key is None:
            raise RootKeyError(
                f"Invalid signature on reply to {method}: root key of {self.config.host} was never fetched"
            )
