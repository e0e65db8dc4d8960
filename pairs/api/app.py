"""
FastAPI Application - REST and WebSocket transport for the engine.

Endpoints:
    POST   /api/v1/games                 Create a game
    GET    /api/v1/games                 List live games
    GET    /api/v1/games/{id}            Get game state
    POST   /api/v1/games/{id}/flip       Flip a card
    DELETE /api/v1/games/{id}            Delete a game
    WS     /ws                           NEW_GAME / FLIP_CARD messages

Delayed unlock flow:
    1. A flip completes a mismatching pair
    2. Response shows both cards face up, board locked
    3. After the reveal delay the server flips them back, passes the turn
       and pushes GAME_STATE to every socket watching the game

Every game state sent from here is built by the sanitizer.
"""

from pathlib import Path
from typing import Annotated, Union
import json
import logging

from fastapi import Body, FastAPI, Request, WebSocket, WebSocketDisconnect
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from .. import __version__
from ..config import Config, get_config
from ..session import AsyncioScheduler, SessionRegistry
from .connections import ConnectionHub
from .schemas import (
    CreateGameBody,
    EndGameResponse,
    ErrorCode,
    ErrorResponse,
    FlipCardBody,
    FlipResponse,
    GameListResponse,
    GameStateView,
    HealthResponse,
)
from .service import GameService, error_payload, state_payload

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    ErrorCode.INVALID_CONFIGURATION: 400,
    ErrorCode.VALIDATION_ERROR: 422,
    ErrorCode.GAME_NOT_FOUND: 404,
    ErrorCode.ILLEGAL_MOVE: 409,
    ErrorCode.UNKNOWN_MESSAGE: 400,
    ErrorCode.INTERNAL_ERROR: 500,
}


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def create_app(service: GameService | None = None, config: Config | None = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        service: Optional GameService (creates one on the asyncio loop if not provided)
        config: Optional Config (read from the environment if not provided)

    Returns:
        FastAPI application instance
    """
    config = config or get_config()
    api_service = service or GameService(
        registry=SessionRegistry(),
        scheduler=AsyncioScheduler(),
        reveal_delay_ms=config.reveal_delay_ms,
    )
    hub = ConnectionHub()

    app = FastAPI(
        title="Pairs Engine API",
        description="Server-authoritative multiplayer memory-matching game.",
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )
    app.state.service = api_service
    app.state.hub = hub

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.allowed_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    async def push_unlocked(game_id: str, view: dict) -> None:
        await hub.broadcast(game_id, state_payload(view))

    api_service.add_unlock_listener(push_unlocked)

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(error: ErrorResponse) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=ERROR_STATUS[error.error_code],
            content=error.model_dump(mode="json", by_alias=True),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """Report malformed request bodies as VALIDATION_ERROR."""
        errors = exc.errors()
        first = errors[0] if errors else {}
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        return make_error_response(ErrorResponse(
            error="Invalid request",
            error_code=ErrorCode.VALIDATION_ERROR,
            details={"field": field, "reason": first.get("msg", "invalid")},
        ))

    # =========================================================================
    # Game Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/games",
        response_model=GameStateView,
        response_model_exclude_unset=True,
        responses={400: {"model": ErrorResponse}},
        tags=["Games"],
        summary="Create a new game",
    )
    async def create_game(
        body: Annotated[CreateGameBody, Body()],
    ) -> Union[GameStateView, JSONResponse]:
        """Create a game with 1-4 players and a freshly shuffled board."""
        response = api_service.create_game(body.player_count)
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        return response

    @app.get(
        "/api/v1/games",
        response_model=GameListResponse,
        tags=["Games"],
        summary="List live games",
    )
    async def list_games() -> GameListResponse:
        games = api_service.list_games()
        return GameListResponse(games=games, count=len(games))

    @app.get(
        "/api/v1/games/{game_id}",
        response_model=GameStateView,
        response_model_exclude_unset=True,
        responses={404: {"model": ErrorResponse}},
        tags=["Games"],
        summary="Get game state",
    )
    async def get_game(game_id: str) -> Union[GameStateView, JSONResponse]:
        """Get the client-safe state of a game."""
        response = api_service.get_game(game_id)
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        return response

    @app.post(
        "/api/v1/games/{game_id}/flip",
        response_model=FlipResponse,
        response_model_exclude_unset=True,
        responses={
            404: {"model": ErrorResponse, "description": "Game not found"},
            409: {"model": ErrorResponse, "description": "Illegal move"},
        },
        tags=["Games"],
        summary="Flip a card",
    )
    async def flip_card(
        game_id: str,
        body: Annotated[FlipCardBody, Body()],
    ) -> Union[FlipResponse, JSONResponse]:
        """
        Flip a card.

        On a mismatch both cards stay visible for `unlockAfterMs`; watchers
        on `/ws` then receive the unlocked state.
        """
        response = api_service.flip_card(game_id, body.card_id)
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        await hub.broadcast(game_id, state_payload(
            response.game.model_dump(mode="json", by_alias=True, exclude_unset=True)
        ))
        return response

    @app.delete(
        "/api/v1/games/{game_id}",
        response_model=EndGameResponse,
        tags=["Games"],
        summary="Delete a game",
    )
    async def end_game(game_id: str) -> EndGameResponse:
        success = api_service.end_game(game_id)
        return EndGameResponse(success=success, game_id=game_id)

    # =========================================================================
    # WebSocket Endpoint
    # =========================================================================

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket):
        """
        WebSocket game channel.

        Messages from client:
        - {"type": "NEW_GAME", "playerCount": n}
        - {"type": "FLIP_CARD", "gameId": ..., "cardId": ...}

        Messages from server:
        - GAME_STATE: sanitized state, sent to every socket in the game
        - ERROR: {"code", "message"}, sent to the requester only
        """
        await websocket.accept()
        logger.info("WS: client connected %s", websocket.client)

        try:
            while True:
                raw = await websocket.receive_text()
                try:
                    data = json.loads(raw)
                except json.JSONDecodeError:
                    await websocket.send_json(
                        error_payload(ErrorCode.VALIDATION_ERROR, "Invalid message format")
                    )
                    continue

                logger.debug("WS: received %s", data.get("type") if isinstance(data, dict) else None)
                try:
                    reply = api_service.handle_message(data)
                except Exception:
                    logger.exception("WS: failed to handle message")
                    await websocket.send_json(
                        error_payload(ErrorCode.INTERNAL_ERROR, "Internal server error")
                    )
                    continue

                if reply.broadcast:
                    hub.subscribe(reply.game_id, websocket)
                    await hub.broadcast(reply.game_id, reply.payload)
                else:
                    await websocket.send_json(reply.payload)
        except WebSocketDisconnect as e:
            logger.info("WS: client disconnected code=%s", e.code)
        finally:
            hub.unsubscribe_all(websocket)

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        return HealthResponse(status="healthy", service="pairs-engine", version=__version__)

    if config.static_dir and Path(config.static_dir).is_dir():
        app.mount("/", StaticFiles(directory=config.static_dir, html=True), name="frontend")

    return app
