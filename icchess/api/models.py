"""Requests and Response models exchanged with the remote game service."""

from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from icchess.core.exceptions import InvalidMoveRequestError

Principal = str

PROMOTION_PIECES = ("q", "r", "b", "n")

T = TypeVar("T")


# --- RESPONSE MODELS ---
class GameStatus(BaseModel):
    """
    Status of a game as reported by the service.

    On the wire this is a variant: `"Ongoing"`, `{"Stalemate": null}`, `{"Checkmate": {"winner_white": true}}`,
    `{"Draw": {"reason": "..."}}` or `{"Resigned": {"winner_white": false}}`.
    """

    model_config = ConfigDict(frozen=True)

    kind: str = "Ongoing"
    winner_white: Optional[bool] = None
    reason: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def from_variant(cls, value: Any) -> Any:
        if isinstance(value, str):
            return {"kind": value}
        if isinstance(value, dict) and "kind" not in value and len(value) == 1:
            ((kind, payload),) = value.items()
            return {"kind": kind, **(payload or {})}
        return value


class GameSession(BaseModel):
    """Authoritative snapshot of one game. Replaced as a whole, never patched."""

    model_config = ConfigDict(frozen=True)

    id: int
    fen: str
    moves_san: tuple[str, ...] = ()
    status: GameStatus = GameStatus()
    white: Optional[Principal] = None
    black: Optional[Principal] = None
    to_move_white: bool = True
    created_ns: int = 0
    updated_ns: int = 0

    @field_validator("id")
    @classmethod
    def validate_id(cls, value: int) -> int:
        if value < 0:
            raise ValueError(f"Game id must be non-negative, got {value}")
        return value


class CreatedGame(BaseModel):
    """Reply of `create_game`: the new id and both one-time seat tokens."""

    game_id: int
    white_token: str
    black_token: str

    @model_validator(mode="before")
    @classmethod
    def from_tuple(cls, value: Any) -> Any:
        if isinstance(value, (list, tuple)) and len(value) == 3:
            game_id, white_token, black_token = value
            return {"game_id": game_id, "white_token": white_token, "black_token": black_token}
        return value


class OkReply(BaseModel, Generic[T]):
    Ok: T


class ErrReply(BaseModel):
    Err: str


# --- REQUEST MODELS ---
class JoinByTokenArgs(BaseModel):
    """Legacy single-record argument of `join_by_token`."""

    game_id: int
    token: str


class MoveAttempt(BaseModel):
    game_id: int
    from_square: str
    to_square: str
    promote_to: Optional[str] = None

    @field_validator(*["from_square", "to_square"])
    @classmethod
    def validate_square(cls, value: str) -> str:
        def _is_algebraic_notation(value: str) -> bool:
            if len(value) != 2:
                return False

            file_character = value[0]
            rank_character = value[1]
            return file_character in "abcdefgh" and rank_character in "12345678"

        if not _is_algebraic_notation(value):
            raise InvalidMoveRequestError(
                f"Cannot interpret {value!r} as a valid square name."
            )
        return value

    @field_validator("promote_to")
    @classmethod
    def validate_promotion(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        if value.lower() not in PROMOTION_PIECES:
            raise InvalidMoveRequestError(
                f"Cannot promote to {value!r}. Pick one from {','.join(PROMOTION_PIECES)}"
            )
        return value.lower()

    @property
    def notation(self) -> str:
        """Single move string sent to the service: origin + destination (+ promotion)."""
        return f"{self.from_square}{self.to_square}{self.promote_to or ''}"
