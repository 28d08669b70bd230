"""FastAPI backend for the board game engine."""

import os
import asyncio
import logging
import random
from concurrent.futures import ThreadPoolExecutor
from contextlib import asynccontextmanager
from fastapi import FastAPI, HTTPException, Request
from pydantic import BaseModel
from typing import Optional, List, Dict, Any
from time import time

from boardgames import (
    Engine,
    GameState,
    IllegalMoveError,
    Piece,
    TerminalStateError,
    Variant,
    apply_move,
    apply_placement,
    flip,
    forfeit,
    legal_destinations,
    new_game as create_game,
    ruleset_for,
)


logger = logging.getLogger(__name__)


def _env_float(name: str, default: float) -> float:
    value = os.environ.get(name)
    return float(value) if value else default


# Configuration (override via environment variables)
RATE_LIMIT_WINDOW = _env_float("RATE_LIMIT_WINDOW", 1.0)  # seconds
RATE_LIMIT_MAX_REQUESTS = int(_env_float("RATE_LIMIT_MAX_REQUESTS", 10))
MAX_IDLE_TIME = _env_float("MAX_IDLE_TIME", 3600)  # seconds
UNDO_LIMIT = int(_env_float("UNDO_LIMIT", 50))
AI_THINK_DELAY = _env_float("AI_THINK_DELAY", 0.0)  # seconds

# Thread pool for AI selection (a full Go board scan is not free)
executor = ThreadPoolExecutor(max_workers=4)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    yield
    executor.shutdown(wait=True)


app = FastAPI(title="Board Game Engine", lifespan=lifespan)


class GameSession:
    """One game's snapshots plus the locking the server needs around them."""

    def __init__(self, state: GameState, engine: Engine):
        self.state = state
        self.engine = engine
        self.lock = asyncio.Lock()
        self.last_access = time()
        self.is_processing = False
        self.undo_stack: List[GameState] = []

    def push(self, new_state: GameState) -> None:
        """Make `new_state` current, keeping the old snapshot for undo."""
        self.undo_stack.append(self.state)
        if len(self.undo_stack) > UNDO_LIMIT:
            self.undo_stack.pop(0)
        self.state = new_state


games: Dict[str, GameSession] = {}
games_lock = asyncio.Lock()

rate_limit_data: Dict[str, List[float]] = {}


async def check_rate_limit(request: Request) -> bool:
    """Check if request should be rate limited."""
    client_ip = request.client.host if request.client else "unknown"
    current_time = time()

    recent = [t for t in rate_limit_data.get(client_ip, []) if current_time - t < RATE_LIMIT_WINDOW]
    if len(recent) >= RATE_LIMIT_MAX_REQUESTS:
        rate_limit_data[client_ip] = recent
        return False

    recent.append(current_time)
    rate_limit_data[client_ip] = recent
    return True


async def enforce_rate_limit(request: Request) -> None:
    if not await check_rate_limit(request):
        raise HTTPException(status_code=429, detail="Too many requests. Please slow down.")


async def get_session(game_id: str) -> GameSession:
    """Get game session with proper error handling."""
    async with games_lock:
        if game_id not in games:
            raise HTTPException(status_code=404, detail="Game not found")
        session = games[game_id]
        session.last_access = time()
        return session


async def cleanup_old_games():
    """Clean up games that haven't been accessed for a long time."""
    current_time = time()
    async with games_lock:
        to_remove = [
            game_id
            for game_id, session in games.items()
            if current_time - session.last_access > MAX_IDLE_TIME
        ]
        for game_id in to_remove:
            del games[game_id]
    if to_remove:
        logger.info("Removed %d idle game(s)", len(to_remove))


class NewGameRequest(BaseModel):
    """Request model for creating a new game."""

    game_id: str
    variant: Variant = Variant.XIANGQI
    strict_generals: bool = False
    seed: Optional[int] = None  # fixes the Banqi deal and AI tie-breaks


class MoveRequest(BaseModel):
    """Request model for moving a piece."""

    game_id: str
    from_x: int
    from_y: int
    to_x: int
    to_y: int


class PointRequest(BaseModel):
    """Request model for stone placement and Banqi flips."""

    game_id: str
    x: int
    y: int


class BoardResponse(BaseModel):
    """Response model for board state."""

    variant: str
    width: int
    height: int
    board: List[List[Optional[Dict[str, Any]]]]
    turn: str
    game_over: bool
    winner: Optional[str]
    captured_light: List[Dict[str, Any]]
    captured_dark: List[Dict[str, Any]]
    history: List[str]
    can_undo: bool = False


def piece_to_dict(piece: Optional[Piece]) -> Optional[Dict[str, Any]]:
    """Convert piece to a JSON-friendly dict; hidden pieces show nothing but their id."""
    if piece is None:
        return None
    if not piece.revealed:
        return {"id": piece.id, "hidden": True}
    return {
        "id": piece.id,
        "kind": piece.kind.value,
        "side": piece.side.value,
        "hidden": False,
    }


def build_board_response(session: GameSession) -> BoardResponse:
    state = session.state
    return BoardResponse(
        variant=state.variant.value,
        width=state.board.width,
        height=state.board.height,
        board=[[piece_to_dict(p) for p in row] for row in state.board.rows],
        turn=state.turn.value,
        game_over=state.is_terminal,
        winner=state.winner.value if state.winner else None,
        captured_light=[piece_to_dict(p) for p in state.captured_light],
        captured_dark=[piece_to_dict(p) for p in state.captured_dark],
        history=list(state.history),
        can_undo=bool(session.undo_stack),
    )


def _http_error(error: Exception) -> HTTPException:
    """Map engine errors onto HTTP errors."""
    if isinstance(error, TerminalStateError):
        return HTTPException(status_code=409, detail=str(error))
    return HTTPException(status_code=400, detail=str(error))


@app.post("/api/new-game")
async def new_game(request: NewGameRequest, req: Request):
    """Create a new game."""
    await enforce_rate_limit(req)

    rng = random.Random(request.seed)
    state = create_game(request.variant, rng=rng, strict_generals=request.strict_generals)
    engine = Engine(rng=rng)

    async with games_lock:
        games[request.game_id] = GameSession(state, engine)

    asyncio.create_task(cleanup_old_games())

    return {
        "status": "ok",
        "game_id": request.game_id,
        "variant": request.variant.value,
        "turn": state.turn.value,
    }


@app.get("/api/board/{game_id}", response_model=BoardResponse)
async def get_board(game_id: str, req: Request):
    """Get current board state."""
    await enforce_rate_limit(req)
    session = await get_session(game_id)
    async with session.lock:
        return build_board_response(session)


@app.get("/api/legal/{game_id}")
async def get_legal_destinations(game_id: str, x: int, y: int, req: Request):
    """Legal destinations for the piece at (x, y)."""
    await enforce_rate_limit(req)
    session = await get_session(game_id)
    async with session.lock:
        piece = session.state.board.get_piece(x, y)
        if piece is None:
            raise HTTPException(status_code=400, detail=f"No piece at ({x}, {y})")
        targets = sorted(legal_destinations(session.state, piece))
    return {"from": [x, y], "destinations": [list(t) for t in targets]}


@app.post("/api/move")
async def make_move(request: MoveRequest, req: Request):
    """Move a piece."""
    await enforce_rate_limit(req)
    session = await get_session(request.game_id)

    async with session.lock:
        piece = session.state.board.get_piece(request.from_x, request.from_y)
        if piece is None:
            raise HTTPException(status_code=400, detail="Illegal move")
        try:
            session.push(apply_move(session.state, piece, (request.to_x, request.to_y)))
        except (IllegalMoveError, TerminalStateError) as e:
            raise _http_error(e) from e
        state = session.state

    return {"status": "ok", "game_over": state.is_terminal, "winner": state.winner.value if state.winner else None}


@app.post("/api/place")
async def place_stone(request: PointRequest, req: Request):
    """Place a stone (Go and Gomoku)."""
    await enforce_rate_limit(req)
    session = await get_session(request.game_id)

    async with session.lock:
        try:
            session.push(apply_placement(session.state, (request.x, request.y)))
        except (IllegalMoveError, TerminalStateError) as e:
            raise _http_error(e) from e
        state = session.state

    return {"status": "ok", "game_over": state.is_terminal, "winner": state.winner.value if state.winner else None}


@app.post("/api/flip")
async def flip_piece(request: PointRequest, req: Request):
    """Reveal a hidden Banqi piece."""
    await enforce_rate_limit(req)
    session = await get_session(request.game_id)

    async with session.lock:
        try:
            session.push(flip(session.state, (request.x, request.y)))
        except (IllegalMoveError, TerminalStateError) as e:
            raise _http_error(e) from e
        revealed = session.state.board.get_piece(request.x, request.y)

    return {"status": "ok", "piece": piece_to_dict(revealed)}


def _run_ai_move(engine: Engine, state: GameState) -> GameState:
    """Run AI selection in a worker thread."""
    return engine.ai_move(state)


@app.post("/api/ai-move/{game_id}")
async def ai_move(game_id: str, req: Request):
    """Let the AI play one move for the side to move."""
    await enforce_rate_limit(req)
    session = await get_session(game_id)

    async with session.lock:
        if session.is_processing:
            raise HTTPException(status_code=409, detail="AI is already processing a move. Please wait.")
        if session.state.is_terminal:
            raise HTTPException(status_code=409, detail="Game is already over")
        session.is_processing = True
        snapshot = session.state

    try:
        if AI_THINK_DELAY > 0:
            await asyncio.sleep(AI_THINK_DELAY)

        loop = asyncio.get_running_loop()
        new_state = await loop.run_in_executor(executor, _run_ai_move, session.engine, snapshot)

        async with session.lock:
            if session.state is not snapshot:
                raise HTTPException(status_code=409, detail="Board changed while the AI was thinking")
            session.push(new_state)

        return {
            "status": "ok",
            "last_action": new_state.history[-1] if len(new_state.history) > len(snapshot.history) else None,
            "moves_considered": session.engine.moves_considered,
            "game_over": new_state.is_terminal,
            "winner": new_state.winner.value if new_state.winner else None,
        }
    finally:
        async with session.lock:
            session.is_processing = False


@app.post("/api/timeout/{game_id}")
async def timeout(game_id: str, req: Request):
    """The side to move ran out of time and loses."""
    await enforce_rate_limit(req)
    session = await get_session(game_id)

    async with session.lock:
        try:
            session.push(forfeit(session.state, reason="timeout"))
        except TerminalStateError as e:
            raise _http_error(e) from e
        winner = session.state.winner

    return {"status": "ok", "winner": winner.value}


@app.post("/api/undo/{game_id}")
async def undo_move(game_id: str, req: Request):
    """Restore the previous snapshot."""
    await enforce_rate_limit(req)
    session = await get_session(game_id)

    async with session.lock:
        if not session.undo_stack:
            raise HTTPException(status_code=400, detail="No moves to undo")
        session.state = session.undo_stack.pop()

    return {"status": "ok", "message": "Move undone successfully"}


@app.get("/api/rules/{variant}")
async def get_rules(variant: Variant):
    """Short rules summary for a variant."""
    rules = ruleset_for(variant)
    return {
        "variant": variant.value,
        "width": rules.width,
        "height": rules.height,
        "first_to_move": rules.first_to_move.value,
        "rules": list(rules.summary),
    }
