"""
Seat tokens and game ids in shareable URLs and in local storage.

The address bar and the local storage hold tokens independently: the address loses its token as soon as
a join was attempted, the creator's copy in storage stays so the invite links can be shown again later.
"""

import re
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from icchess.core.exceptions import InvalidAddressError, StorageError
from icchess.core.models import SeatTokens
from icchess.db.repository import LocalStorage

GAME_PARAM = "game"
TOKEN_PARAM = "token"
TOKENS_STORAGE_PREFIX = "icchess_tokens_"
GAME_ID_PATTERN = re.compile(r"[0-9]+")


def tokens_storage_key(game_id: int) -> str:
    return f"{TOKENS_STORAGE_PREFIX}{game_id}"


# --- URL ---
def encode_invite(origin: str, path: str, game_id: int, token: str | None = None) -> str:
    """Shareable link to a game. Carries a seat token only when one is given."""
    if game_id < 0:
        raise InvalidAddressError(f"Game id must be non-negative, got {game_id}")
    params = {GAME_PARAM: str(game_id)}
    if token:
        params[TOKEN_PARAM] = token
    scheme, netloc, *_ = urlsplit(origin)
    return urlunsplit((scheme, netloc, path, urlencode(params), ""))


def consume_token_from_url(url: str) -> str | None:
    """Seat token carried by url, if any. The url itself is left alone: stripping it is up to the caller."""
    return _query_params(url).get(TOKEN_PARAM) or None


def strip_token(url: str) -> str:
    """Same url without its token parameter."""
    parts = urlsplit(url)
    kept = [
        (name, value)
        for name, value in parse_qsl(parts.query, keep_blank_values=True)
        if name != TOKEN_PARAM
    ]
    return urlunsplit(parts._replace(query=urlencode(kept)))


def parse_game_id(url: str) -> int:
    """Decimal game id of the `game` parameter. Raises InvalidAddressError if missing or not a number."""
    raw = _query_params(url).get(GAME_PARAM, "").strip()
    if not raw:
        raise InvalidAddressError("No game ID in URL")
    if not is_game_id_text(raw):
        raise InvalidAddressError(f"Invalid game ID in URL: {raw!r}")
    return int(raw)


def is_game_id_text(text: str) -> bool:
    """ASCII digits only."""
    return GAME_ID_PATTERN.fullmatch(text) is not None


def has_game_id(url: str) -> bool:
    return bool(_query_params(url).get(GAME_PARAM))


# --- Local storage ---
def persist_creation_tokens(
    storage: LocalStorage, game_id: int, white_token: str, black_token: str
) -> None:
    storage.set_item(
        tokens_storage_key(game_id), {"white": white_token, "black": black_token}
    )


def load_creation_tokens(storage: LocalStorage, game_id: int) -> SeatTokens | None:
    """Tokens stored when this page created the game. None for games created elsewhere."""
    stored = storage.get_item(tokens_storage_key(game_id))
    if stored is None:
        return None
    try:
        return SeatTokens(white=stored["white"], black=stored["black"])
    except (KeyError, TypeError) as e:
        raise StorageError(f"Corrupt seat tokens stored for game {game_id}: {stored!r}") from e


# -- Internal helpers --
def _query_params(url: str) -> dict[str, str]:
    return dict(parse_qsl(urlsplit(url).query, keep_blank_values=True))
