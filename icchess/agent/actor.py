"""
Typed proxy for the game service.

The interface description maps every method to its call kind, argument types and reply type.
Arguments are checked against it before anything is sent, so a client built against another
version of the interface fails locally with a "type mismatch" error instead of sending garbage.
"""

from dataclasses import dataclass
from typing import Any, Optional

from pydantic import TypeAdapter, ValidationError

from icchess.agent.http_agent import CallKind, HttpAgent
from icchess.api.models import (
    CreatedGame,
    ErrReply,
    GameSession,
    JoinByTokenArgs,
    OkReply,
)
from icchess.core.exceptions import RemoteCallError
from icchess.core.result import Err, Ok, Result

TYPE_MISMATCH = "type mismatch"


@dataclass(frozen=True)
class MethodSpec:
    kind: CallKind
    arg_names: tuple[str, ...]
    args: tuple[TypeAdapter, ...]
    reply: TypeAdapter
    fallible: bool = False


def _method(kind: CallKind, args: tuple[type, ...], reply: Any, fallible: bool = False) -> MethodSpec:
    if fallible:
        reply = OkReply[reply] | ErrReply
    return MethodSpec(
        kind=kind,
        arg_names=tuple(getattr(arg, "__name__", str(arg)) for arg in args),
        args=tuple(TypeAdapter(arg) for arg in args),
        reply=TypeAdapter(reply),
        fallible=fallible,
    )


# Interface of the current service version
GAME_SERVICE_IDL: dict[str, MethodSpec] = {
    "create_game": _method("call", (), CreatedGame),
    "get_game": _method("query", (int,), Optional[GameSession]),
    "list_recent": _method("query", (int, int), list[GameSession]),
    "my_role": _method("query", (int,), str | dict[str, None]),
    "join_by_token": _method("call", (int, str), GameSession, fallible=True),
    "make_move": _method("call", (int, str), GameSession, fallible=True),
    "resign": _method("call", (int,), GameSession, fallible=True),
    "export_pgn": _method("query", (int,), str, fallible=True),
}

# Older declarations took the join arguments as a single record
LEGACY_GAME_SERVICE_IDL: dict[str, MethodSpec] = {
    **GAME_SERVICE_IDL,
    "join_by_token": _method("call", (JoinByTokenArgs,), GameSession, fallible=True),
}


class GameActor:
    """Remote-call proxy: one coroutine per service method."""

    def __init__(
        self,
        agent: HttpAgent,
        canister_id: str,
        interface: dict[str, MethodSpec] = GAME_SERVICE_IDL,
    ) -> None:
        self.agent = agent
        self.canister_id = canister_id
        self.interface = interface

    # -- Service methods --
    async def create_game(self) -> CreatedGame:
        return await self._invoke("create_game")

    async def get_game(self, game_id: int) -> GameSession | None:
        return await self._invoke("get_game", game_id)

    async def list_recent(self, offset_desc: int, limit: int) -> list[GameSession]:
        return await self._invoke("list_recent", offset_desc, limit)

    async def my_role(self, game_id: int) -> str | dict[str, None]:
        return await self._invoke("my_role", game_id)

    async def join_by_token(self, *args: Any) -> Result[GameSession]:
        """Either `(game_id, token)` or, against the legacy interface, `(JoinByTokenArgs,)`."""
        return await self._invoke("join_by_token", *args)

    async def make_move(self, game_id: int, move: str) -> Result[GameSession]:
        return await self._invoke("make_move", game_id, move)

    async def resign(self, game_id: int) -> Result[GameSession]:
        return await self._invoke("resign", game_id)

    async def export_pgn(self, game_id: int) -> Result[str]:
        return await self._invoke("export_pgn", game_id)

    # -- Internal helpers --
    async def _invoke(self, method: str, *args: Any) -> Any:
        spec = self.interface[method]
        encoded = self._encode_args(method, spec, args)
        send = self.agent.query if spec.kind == "query" else self.agent.call
        raw_reply = await send(self.canister_id, method, encoded)
        return self._decode_reply(method, spec, raw_reply)

    def _encode_args(self, method: str, spec: MethodSpec, args: tuple[Any, ...]) -> list[Any]:
        expected = ", ".join(spec.arg_names)
        if len(args) != len(spec.args):
            raise RemoteCallError(
                f"{TYPE_MISMATCH}: {method} expects ({expected}), got {len(args)} argument(s)"
            )
        try:
            return [
                adapter.dump_python(adapter.validate_python(arg, strict=True), mode="json")
                for adapter, arg in zip(spec.args, args)
            ]
        except ValidationError as e:
            raise RemoteCallError(
                f"{TYPE_MISMATCH}: {method} expects ({expected}): {e}"
            ) from e

    def _decode_reply(self, method: str, spec: MethodSpec, raw_reply: Any) -> Any:
        try:
            reply = spec.reply.validate_python(raw_reply)
        except ValidationError as e:
            raise RemoteCallError(f"Could not decode reply of {method}: {e}") from e

        if not spec.fallible:
            return reply
        match reply:
            case OkReply():
                return Ok(reply.Ok)
            case ErrReply():
                return Err(reply.Err)
