"""
Pytest will auto-discover / import this file called 'conftest.py'. ]
This file defines fixtures/variables required for testing multiple layers.
"""

import asyncio
import json
from typing import Any, Generator

import httpx
import pytest
from sqlalchemy import StaticPool, create_engine
from sqlalchemy.orm import Session, sessionmaker

from icchess.agent.connection import ConnectionProvider
from icchess.core.config import ClientConfig
from icchess.core.shared_types import Color
from icchess.db.schema import Base
from icchess.db.sql_storage import SQLLocalStorage
from icchess.ui.page import BrowserPage

# Setup an in-memory SQLite database for testing
DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autoflush=False, bind=engine)

CANISTER_ID = "uxrrr-q7777-77774-qaaaq-cai"
LOCAL_HOST = "http://127.0.0.1:4943"
MAINNET_HOST = "https://icchess.icp0.io"
START_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"
AFTER_E4 = "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq - 0 1"
AFTER_E5 = "rnbqkbnr/pppp1ppp/8/4p3/4P3/8/PPPP1PPP/RNBQKBNR w KQkq - 0 2"


# --- MOCK DEPENDENCIES ----
class FakeGameService:
    """
    In-memory game service behind an httpx.MockTransport.

    Knows no chess: only moves listed in `transitions` are legal, everything else is rejected.
    Seats, one-time tokens and turn order behave like the real service.
    """

    def __init__(self, legacy_join: bool = False) -> None:
        self.games: dict[int, dict[str, Any]] = {}
        self.tokens: dict[int, dict[str, str | None]] = {}
        self.transitions: dict[tuple[str, str], tuple[str, str]] = {
            (START_FEN, "e2e4"): (AFTER_E4, "e4"),
            (AFTER_E4, "e7e5"): (AFTER_E5, "e5"),
        }
        self.next_id = 1
        self.legacy_join = legacy_join
        self.root_key_available = True
        self.root_key_fetches = 0
        self.calls: list[tuple[str, list[Any], str]] = []
        self.failures: dict[str, str] = {}

    # -- helpers for tests --
    def add_game(self, game_id: int, white_token: str, black_token: str) -> None:
        self.games[game_id] = {
            "id": game_id,
            "fen": START_FEN,
            "moves_san": [],
            "status": "Ongoing",
            "white": None,
            "black": None,
            "to_move_white": True,
            "created_ns": 0,
            "updated_ns": 0,
        }
        self.tokens[game_id] = {"white": white_token, "black": black_token}
        self.next_id = max(self.next_id, game_id + 1)

    def calls_to(self, method: str) -> list[list[Any]]:
        return [args for name, args, _ in self.calls if name == method]

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def gated_transport(self, method: str, gate: asyncio.Event) -> httpx.MockTransport:
        """Transport that holds calls to method until gate is set."""

        async def handler(request: httpx.Request) -> httpx.Response:
            if request.content and json.loads(request.content)["method_name"] == method:
                await gate.wait()
            return self.handle(request)

        return httpx.MockTransport(handler)

    # -- HTTP --
    def handle(self, request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/v2/status":
            self.root_key_fetches += 1
            if not self.root_key_available:
                return httpx.Response(503, text="replica not running")
            return httpx.Response(200, json={"root_key": "deadbeef"})

        body = json.loads(request.content)
        method, args, sender = body["method_name"], body["arg"], body["sender"]
        self.calls.append((method, args, sender))
        if method in self.failures:
            return httpx.Response(
                200,
                json={"status": "rejected", "reject_code": 5, "reject_message": self.failures[method]},
            )
        try:
            reply = getattr(self, f"_{method}")(sender, *args)
        except (TypeError, ValueError, KeyError) as e:
            return httpx.Response(
                200,
                json={"status": "rejected", "reject_code": 5, "reject_message": f"type mismatch: {e}"},
            )
        return httpx.Response(200, json={"status": "replied", "reply": reply})

    # -- service methods --
    def _create_game(self, sender: str) -> list[Any]:
        game_id = self.next_id
        self.add_game(game_id, f"tok-w-{game_id}", f"tok-b-{game_id}")
        return [game_id, f"tok-w-{game_id}", f"tok-b-{game_id}"]

    def _get_game(self, sender: str, game_id: int) -> dict[str, Any] | None:
        game = self.games.get(game_id)
        return dict(game) if game else None

    def _list_recent(self, sender: str, offset_desc: int, limit: int) -> list[dict[str, Any]]:
        ids = sorted(self.games, reverse=True)[offset_desc : offset_desc + limit]
        return [dict(self.games[game_id]) for game_id in ids]

    def _my_role(self, sender: str, game_id: int) -> str:
        game = self.games.get(game_id)
        if game and game["white"] == sender:
            return "White"
        if game and game["black"] == sender:
            return "Black"
        return "Spectator"

    def _join_by_token(self, sender: str, *args: Any) -> dict[str, Any]:
        if self.legacy_join:
            (record,) = args
            game_id, token = record["game_id"], record["token"]
        else:
            game_id, token = args
        game = self.games.get(game_id)
        if game is None:
            return {"Err": "No such game"}
        if sender in (game["white"], game["black"]):
            return {"Err": "You already occupy a seat in this game"}
        for color in (Color.WHITE, Color.BLACK):
            if token == self.tokens[game_id][color]:
                if game[color] is not None:
                    return {"Err": f"{color.capitalize()} seat already taken"}
                game[color] = sender
                self.tokens[game_id][color] = None
                return {"Ok": dict(game)}
        return {"Err": "Invalid or already-used token"}

    def _make_move(self, sender: str, game_id: int, move: str) -> dict[str, Any]:
        game = self.games.get(game_id)
        if game is None:
            return {"Err": "No such game"}
        seat = "white" if game["to_move_white"] else "black"
        if game[seat] is not None and game[seat] != sender:
            return {"Err": f"Not {seat}"}
        transition = self.transitions.get((game["fen"], move))
        if transition is None:
            return {"Err": "Illegal move"}
        game["fen"], san = transition
        game["moves_san"] = [*game["moves_san"], san]
        game["to_move_white"] = not game["to_move_white"]
        return {"Ok": dict(game)}

    def _resign(self, sender: str, game_id: int) -> dict[str, Any]:
        game = self.games.get(game_id)
        if game is None:
            return {"Err": "No such game"}
        if sender not in (game["white"], game["black"]):
            return {"Err": "You are not seated"}
        game["status"] = {"Resigned": {"winner_white": sender == game["black"]}}
        return {"Ok": dict(game)}

    def _export_pgn(self, sender: str, game_id: int) -> dict[str, Any]:
        game = self.games.get(game_id)
        if game is None:
            return {"Err": "No such game"}
        return {"Ok": f'[Event "IC Chess {game_id}"]\n\n' + " ".join(game["moves_san"])}


class RecordingSurface:
    """Board widget double that remembers everything it was told to show."""

    def __init__(self) -> None:
        self.fen: str | None = None
        self.positions: list[str] = []
        self.orientation: Color | None = None
        self.movable_color: Color | None = None
        self.shown_moves: list[tuple[str, str]] = []

    def configure(self, *, orientation: Color, movable_color: Color | None) -> None:
        self.orientation = orientation
        self.movable_color = movable_color

    def set_position(self, fen: str) -> None:
        self.fen = fen
        self.positions.append(fen)

    def show_move(self, origin: str, destination: str) -> None:
        self.shown_moves.append((origin, destination))
        self.fen = f"{self.fen} (+{origin}{destination})"


class DictStorage:
    """LocalStorage kept in a dict."""

    def __init__(self) -> None:
        self.items: dict[str, Any] = {}

    def get_item(self, key: str) -> Any | None:
        return self.items.get(key)

    def set_item(self, key: str, value: Any) -> None:
        self.items[key] = value

    def remove_item(self, key: str) -> None:
        self.items.pop(key, None)


# --- FIXTURES ---
@pytest.fixture
def db_session_repo() -> Generator[Session, None, None]:
    """Connection to a test database. Tables are removed at teardown to make unit tests of storage independent of each other."""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        Base.metadata.drop_all(bind=engine)
        db.close()


@pytest.fixture
def sql_storage(db_session_repo: Session) -> SQLLocalStorage:
    return SQLLocalStorage(db_session_repo)


@pytest.fixture
def storage() -> DictStorage:
    return DictStorage()


@pytest.fixture
def service() -> FakeGameService:
    return FakeGameService()


@pytest.fixture
def local_config() -> ClientConfig:
    return ClientConfig(host=LOCAL_HOST, canister_id=CANISTER_ID)


@pytest.fixture
def provider(
    local_config: ClientConfig, storage: DictStorage, service: FakeGameService
) -> ConnectionProvider:
    return ConnectionProvider(local_config, storage, transport=service.transport())


@pytest.fixture
def surface() -> RecordingSurface:
    return RecordingSurface()


@pytest.fixture
def page() -> BrowserPage:
    return BrowserPage(f"{LOCAL_HOST}/")
