"""Caller's role in a game, as reported by the service."""

from icchess.agent.connection import ConnectionHandle
from icchess.core.shared_types import Role

SEATED_ROLES = {Role.WHITE.value: Role.WHITE, Role.BLACK.value: Role.BLACK}


async def resolve_role(connection: ConnectionHandle, game_id: int) -> Role:
    """
    Ask the service which seat the caller holds.

    ---
    NOTE not cached: call again after every join or refresh, another party's join can change the answer.
    """
    reply = await connection.actor.my_role(game_id)
    return role_from_reply(reply)


def role_from_reply(reply: str | dict[str, None]) -> Role:
    """"White" and "Black" (plain or as variant `{"White": null}`) are seats, anything else spectates."""
    if isinstance(reply, dict):
        reply = next(iter(reply), "") if len(reply) == 1 else ""
    return SEATED_ROLES.get(reply, Role.SPECTATOR)
