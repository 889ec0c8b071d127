from __future__ import annotations

import logging
from typing import Dict, List, Literal, Optional

from fastapi import FastAPI, HTTPException, Response
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, Field
from starlette.exceptions import HTTPException as StarletteHTTPException

from .error import (
    chess_error_handler,
    exception_handler,
    http_exception_handler,
    request_validation_exception_handler,
)
from .logging_middleware import RequestIDLoggingMiddleware
from .session import GameSession, InMemorySessionStore
from ...config import Settings, get_settings
from ...engine.errors import ChessError, ParseError
from ...engine.move import Move
from ...engine.perft import divide as perft_divide
from ...engine.perft import perft as perft_nodes
from ...engine.position import Position
from ...engine.types import Variant
from ...notation.san import parse_san
from ...notation.uci import uci_to_move


logger = logging.getLogger(__name__)


class CreateGameRequest(BaseModel):
    variant: Optional[str] = Field(default=None, description="Variant name, e.g. chess, atomic")
    fen: Optional[str] = Field(default=None, description="Start from this FEN instead")
    chess960_index: Optional[int] = Field(default=None, ge=0, le=959)


class CreateGameResponse(BaseModel):
    game_id: str
    variant: str
    fen: str


class SetPositionRequest(BaseModel):
    fen: str = Field(..., description="FEN string")
    variant: Optional[str] = Field(default=None, description="Defaults to the game's variant")


class MoveRequest(BaseModel):
    move: str = Field(..., description="Move text, e.g. e2e4 or Nf3")
    notation: Literal["uci", "san", "auto"] = "auto"


class PerftRequest(BaseModel):
    fen: Optional[str] = None
    variant: Optional[str] = None
    depth: int = Field(default=1, ge=0)
    divide: bool = False


class PerftResponse(BaseModel):
    variant: str
    fen: str
    depth: int
    nodes: int
    divide: Optional[Dict[str, int]] = None


class VariantsResponse(BaseModel):
    variants: List[str]
    default: str


class GameState(BaseModel):
    game_id: str
    variant: str
    fen: str
    turn: str
    legal_moves: list[str]
    in_check: bool
    checkmate: bool
    stalemate: bool
    variant_end: bool
    insufficient_material: bool
    game_over: bool
    result: str
    last_move: Optional[str]
    move_history: list[str]
    san_history: list[str]


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(title="chessrules API", version="0.1.0")

    logging.basicConfig(level=settings.log_level.upper())

    # Middleware & error handling
    app.add_middleware(RequestIDLoggingMiddleware)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(ChessError, chess_error_handler)
    app.add_exception_handler(Exception, exception_handler)

    store = InMemorySessionStore()
    default_variant = settings.variant

    @app.get("/healthz")
    async def healthz() -> Dict[str, str]:
        return {"status": "ok"}

    @app.get("/api/variants", response_model=VariantsResponse)
    async def variants() -> VariantsResponse:
        return VariantsResponse(variants=[v.value for v in Variant], default=default_variant.value)

    @app.post("/api/games", response_model=CreateGameResponse)
    async def create_game(req: Optional[CreateGameRequest] = None) -> CreateGameResponse:
        req = req or CreateGameRequest()
        variant = _variant(req.variant) if req.variant else default_variant
        if req.fen:
            session = GameSession.from_position(Position.from_fen(req.fen, variant))
        else:
            session = GameSession.new(variant, req.chess960_index)
        game_id = store.create(session)
        logger.info("created game %s (%s)", game_id, variant.value)
        return CreateGameResponse(game_id=game_id, variant=variant.value, fen=session.position.fen())

    @app.get("/api/games/{game_id}/state", response_model=GameState)
    async def get_state(game_id: str) -> GameState:
        return _state(game_id, _require_game(store, game_id))

    @app.post("/api/games/{game_id}/position", response_model=GameState)
    async def set_position(game_id: str, req: SetPositionRequest) -> GameState:
        current = _require_game(store, game_id)
        variant = _variant(req.variant) if req.variant else current.position.variant
        session = GameSession.from_position(Position.from_fen(req.fen, variant))
        store.set(game_id, session)
        return _state(game_id, session)

    @app.post("/api/games/{game_id}/move", response_model=GameState)
    async def make_move(game_id: str, req: MoveRequest) -> GameState:
        session = _require_game(store, game_id)
        move = _resolve_move(session.position, req.move.strip(), req.notation)
        session.push(move)
        return _state(game_id, session)

    @app.post("/api/games/{game_id}/undo", response_model=GameState)
    async def undo(game_id: str) -> GameState:
        session = _require_game(store, game_id)
        try:
            session.undo()
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return _state(game_id, session)

    @app.delete("/api/games/{game_id}", status_code=204)
    async def delete_game(game_id: str) -> Response:
        if not store.delete(game_id):
            raise HTTPException(status_code=404, detail="game not found")
        return Response(status_code=204)

    @app.post("/api/perft", response_model=PerftResponse)
    async def perft(req: PerftRequest) -> PerftResponse:
        if req.depth > settings.max_perft_depth:
            raise HTTPException(
                status_code=400,
                detail=f"depth must be <= {settings.max_perft_depth}",
            )
        variant = _variant(req.variant) if req.variant else default_variant
        pos = Position.from_fen(req.fen, variant) if req.fen else Position.initial(variant)
        per_move: Optional[Dict[str, int]] = None
        if req.divide and req.depth >= 1:
            per_move = perft_divide(pos, req.depth)
            nodes = sum(per_move.values())
        else:
            nodes = perft_nodes(pos, req.depth)
        return PerftResponse(variant=variant.value, fen=pos.fen(), depth=req.depth, nodes=nodes, divide=per_move)

    return app


def _variant(name: str) -> Variant:
    try:
        return Variant.from_name(name)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


def _resolve_move(pos: Position, text: str, notation: str) -> Move:
    if notation == "uci":
        return uci_to_move(pos, text)
    if notation == "san":
        return parse_san(pos, text)
    try:
        return uci_to_move(pos, text)
    except ParseError:
        return parse_san(pos, text)


def _state(game_id: str, session: GameSession) -> GameState:
    pos = session.position
    return GameState(
        game_id=game_id,
        variant=pos.variant.value,
        fen=pos.fen(),
        turn=pos.turn.char,
        legal_moves=[pos.uci(m) for m in pos.legal_moves()],
        in_check=pos.is_check(),
        checkmate=pos.is_checkmate(),
        stalemate=pos.is_stalemate(),
        variant_end=pos.is_variant_end(),
        insufficient_material=pos.is_insufficient_material(),
        game_over=pos.is_game_over(),
        result=pos.outcome().result(),
        last_move=session.uci_history[-1] if session.uci_history else None,
        move_history=list(session.uci_history),
        san_history=list(session.san_history),
    )


def _require_game(store: InMemorySessionStore, game_id: str) -> GameSession:
    game = store.get(game_id)
    if game is None:
        raise HTTPException(status_code=404, detail="game not found")
    return game
