"""
Seat claiming that works against both versions of the join_by_token interface.

Current services take `(game_id, token)`; older interface declarations take a single record
`{game_id, token}`. The old shape is only tried when the first attempt fails with a type mismatch.

---
NOTE the mismatch is detected by looking for "type mismatch" in the error text. That is fragile:
any rewording of the error disables the fallback. Keep this probe in this module only; the lasting fix
is for the service to advertise its interface version.
"""

import logging

from icchess.agent.actor import TYPE_MISMATCH
from icchess.agent.connection import ConnectionHandle
from icchess.api.models import GameSession, JoinByTokenArgs
from icchess.core.exceptions import RemoteCallError
from icchess.core.result import Err, Result

logger = logging.getLogger(__name__)


async def join_by_token(
    connection: ConnectionHandle, game_id: int, token: str
) -> Result[GameSession]:
    """Claim a seat with a one-time token. Call failures come back as Err, never raised."""
    actor = connection.actor
    try:
        return await actor.join_by_token(game_id, token)
    except RemoteCallError as e:
        if TYPE_MISMATCH not in str(e):
            return Err(str(e))
        logger.info("join_by_token rejected positional arguments, retrying with a record")

    try:
        return await actor.join_by_token(JoinByTokenArgs(game_id=game_id, token=token))
    except RemoteCallError as e:
        return Err(str(e))
