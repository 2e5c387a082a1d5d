from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional, Tuple, Union

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ConfigDict, Field

from .error import (
    MoveRejectedError,
    exception_handler,
    http_exception_handler,
    move_rejected_handler,
    request_validation_exception_handler,
)
from .logging_middleware import RequestIDLoggingMiddleware
from ...engine.game import Game, MoveResult
from .session import InMemorySessionStore


logger = logging.getLogger(__name__)

Pair = Tuple[int, int]

# Read by create_app when no level is passed; set by the CLI so reload workers inherit it
LOG_LEVEL_ENV = "CHESSRULES_LOG_LEVEL"


class SetPositionRequest(BaseModel):
    fen: str = Field(..., description="FEN string")


class SelectRequest(BaseModel):
    square: Pair = Field(..., description="[rank, file]; rank 0 is Black's back rank")


class MoveRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_sq: Pair = Field(..., alias="from", description="[rank, file] of the piece to move")
    to_sq: Pair = Field(..., alias="to", description="[rank, file] of the destination")
    promotion: Optional[str] = Field(
        default=None, description="queen, rook, bishop or knight; skips the promotion prompt"
    )


class PromotionRequest(BaseModel):
    kind: str = Field(..., description="queen, rook, bishop or knight")


class GameStatusModel(BaseModel):
    current_player: str
    check: bool
    checkmate: bool
    stalemate: bool


class GameState(BaseModel):
    game_id: str
    fen: str
    phase: str
    status: GameStatusModel
    board: List[List[Optional[Dict[str, str]]]]
    selected: Optional[Pair]
    en_passant_target: Optional[Pair]
    promotion_pending: Optional[Dict[str, Pair]]
    legal_moves: List[str]


class CreateGameResponse(BaseModel):
    game_id: str
    state: GameState


class SelectResponse(BaseModel):
    square: Pair
    legal_destinations: List[Pair]


class MoveResponse(BaseModel):
    committed: bool
    promotion_required: bool
    move: Optional[str]
    captured_square: Optional[Pair]
    is_castle: bool
    is_en_passant: bool
    promoted_to: Optional[str]
    gives_check: bool
    state: GameState


def create_app(
    log_level: Union[int, str, None] = None,
    store: Optional[InMemorySessionStore] = None,
) -> FastAPI:
    app = FastAPI(title="Chess Rules API", version="0.1.0")

    # Basic logging setup
    logging.basicConfig(level=resolve_log_level(log_level))

    # Middleware & error handling
    app.add_middleware(RequestIDLoggingMiddleware)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(MoveRejectedError, move_rejected_handler)
    app.add_exception_handler(Exception, exception_handler)

    # In-memory session store for games
    sessions = store if store is not None else InMemorySessionStore()
    app.state.sessions = sessions

    @app.get("/healthz")
    async def healthz() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/games", response_model=CreateGameResponse)
    async def create_game() -> CreateGameResponse:
        game_id = sessions.create(Game.new())
        logger.info("game created", extra={"game_id": game_id})
        with _checkout(sessions, game_id) as game:
            return CreateGameResponse(game_id=game_id, state=_state(game_id, game))

    @app.get("/api/games/{game_id}/state", response_model=GameState)
    async def get_state(game_id: str) -> GameState:
        with _checkout(sessions, game_id) as game:
            return _state(game_id, game)

    @app.post("/api/games/{game_id}/select", response_model=SelectResponse)
    async def select(game_id: str, req: SelectRequest) -> SelectResponse:
        with _checkout(sessions, game_id) as game:
            result = game.select_square(req.square)
            if result.rejected is not None:
                raise MoveRejectedError(result.rejected)
            return SelectResponse(
                square=req.square,
                legal_destinations=[tuple(sq) for sq in result.legal_destinations],
            )

    @app.post("/api/games/{game_id}/move", response_model=MoveResponse)
    async def make_move(game_id: str, req: MoveRequest) -> MoveResponse:
        with _checkout(sessions, game_id) as game:
            result = game.attempt_move(req.from_sq, req.to_sq, promotion=req.promotion)
            return _move_response(game_id, game, result)

    @app.post("/api/games/{game_id}/promotion", response_model=MoveResponse)
    async def choose_promotion(game_id: str, req: PromotionRequest) -> MoveResponse:
        with _checkout(sessions, game_id) as game:
            result = game.choose_promotion(req.kind)
            return _move_response(game_id, game, result)

    @app.post("/api/games/{game_id}/reset", response_model=GameState)
    async def reset(game_id: str) -> GameState:
        with _checkout(sessions, game_id) as game:
            game.reset()
            return _state(game_id, game)

    @app.post("/api/games/{game_id}/position", response_model=GameState)
    async def set_position(game_id: str, req: SetPositionRequest) -> GameState:
        with _checkout(sessions, game_id):
            try:
                sessions.set(game_id, Game.from_fen(req.fen))
            except ValueError as e:
                raise HTTPException(status_code=400, detail=f"invalid FEN: {e}")
        with _checkout(sessions, game_id) as game:
            return _state(game_id, game)

    @app.delete("/api/games/{game_id}")
    async def delete_game(game_id: str) -> Dict[str, str]:
        if not sessions.delete(game_id):
            raise HTTPException(status_code=404, detail="game not found")
        return {"status": "deleted", "game_id": game_id}

    return app


def resolve_log_level(log_level: Union[int, str, None] = None) -> Union[int, str]:
    if log_level is not None:
        return log_level.upper() if isinstance(log_level, str) else log_level
    return os.environ.get(LOG_LEVEL_ENV, "INFO").upper()


@contextmanager
def _checkout(sessions: InMemorySessionStore, game_id: str) -> Iterator[Game]:
    with sessions.checkout(game_id) as game:
        if game is None:
            raise HTTPException(status_code=404, detail="game not found")
        yield game


def _state(game_id: str, game: Game) -> GameState:
    snap = game.snapshot()
    status = game.query_state()
    return GameState(
        game_id=game_id,
        fen=game.to_fen(),
        phase=snap["phase"],
        status=GameStatusModel(
            current_player=status.current_player.value,
            check=status.check,
            checkmate=status.checkmate,
            stalemate=status.stalemate,
        ),
        board=snap["board"],
        selected=snap["selected"],
        en_passant_target=snap["en_passant_target"],
        promotion_pending=snap["promotion_pending"],
        legal_moves=[m.to_uci() for m in game.legal_moves()],
    )


def _move_response(game_id: str, game: Game, result: MoveResult) -> MoveResponse:
    if result.rejected is not None:
        raise MoveRejectedError(result.rejected)
    move = result.move
    return MoveResponse(
        committed=result.committed,
        promotion_required=result.promotion_required,
        move=move.to_uci() if move is not None else None,
        captured_square=tuple(result.captured_square) if result.captured_square else None,
        is_castle=result.is_castle,
        is_en_passant=result.is_en_passant,
        promoted_to=result.promoted_to.value if result.promoted_to else None,
        gives_check=result.gives_check,
        state=_state(game_id, game),
    )
