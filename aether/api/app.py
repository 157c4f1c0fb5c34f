"""
FastAPI Application - REST API for the tarot circle.

Endpoints:
    POST   /api/v1/games                         Create a game
    GET    /api/v1/games                         List games
    GET    /api/v1/games/{id}                    Game snapshot
    DELETE /api/v1/games/{id}                    Delete a game
    POST   /api/v1/games/{id}/place              Place an inventory card
    POST   /api/v1/games/{id}/remove             Return a slot card
    POST   /api/v1/games/{id}/buy                Buy a shop item
    POST   /api/v1/games/{id}/activate           Activate a slot card
    POST   /api/v1/games/{id}/choice             Resolve the pending choice
    POST   /api/v1/games/{id}/choice/cancel      Cancel the pending choice
    POST   /api/v1/games/{id}/return-ready       Return every ready card
    POST   /api/v1/games/{id}/advance            Process hours now
    GET    /api/v1/games/{id}/save               Export a save code
    POST   /api/v1/games/{id}/load               Import a save code (form field)
    GET    /api/v1/health                        Health check

All responses are JSON with explicit Pydantic schemas.
Rejected commands return 400 with an ErrorResponse; unknown games 404.
"""

from contextlib import asynccontextmanager
from typing import Annotated, Union
import logging

from .. import config

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


def create_app(service=None):
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (creates new if not provided)

    Returns:
        FastAPI application instance
    """
    try:
        from fastapi import FastAPI, Form
        from fastapi.middleware.cors import CORSMiddleware
        from fastapi.responses import JSONResponse
    except ImportError:
        raise ImportError(
            "FastAPI not installed. Install with: pip install fastapi uvicorn python-multipart"
        )

    from .service import APIService
    from .schemas import (
        # Request models
        CreateGameRequest,
        PlaceCardRequest,
        SlotRequest,
        BuyItemRequest,
        ChoiceRequest,
        AdvanceRequest,
        # Response models
        GameStateResponse,
        CommandResponse,
        SaveResponse,
        GameListResponse,
        EndGameResponse,
        ErrorResponse,
        HealthResponse,
        # Enums
        ErrorCode,
    )

    api_service = service or APIService(realtime_default=config.AETHER_REALTIME)

    @asynccontextmanager
    async def lifespan(app):
        yield
        for game_id in api_service.session_manager.list_active_sessions():
            await api_service.session_manager.end_session(game_id)

    app = FastAPI(
        title="Aether Cycles API",
        description="""
Tarot circle incremental game. Cards in the circle produce resources
every in-game hour according to marks, synergies and card effects.

## Error Codes

| Code | Description |
|------|-------------|
| `GAME_NOT_FOUND` | Game does not exist |
| `INVALID_SAVE` | Save code malformed or from another version |
| `CHOICE_PENDING` | Resolve or cancel the open choice first |
| `ON_COOLDOWN` | Card activation is cooling down |
| `INSUFFICIENT_FUNDS` | Not enough currency |
        """,
        version=API_VERSION,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(error: ErrorResponse) -> JSONResponse:
        """Create a standardized error response."""
        status_code = 404 if error.error_code == ErrorCode.GAME_NOT_FOUND.value else 400
        return JSONResponse(status_code=status_code, content=error.model_dump())

    def respond(response):
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        return response

    command_responses = {
        400: {"model": ErrorResponse, "description": "Command rejected"},
        404: {"model": ErrorResponse, "description": "Game not found"},
    }

    # =========================================================================
    # Game Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/games",
        response_model=GameStateResponse,
        tags=["Games"],
        summary="Create a new game",
    )
    async def create_game(request: CreateGameRequest) -> GameStateResponse:
        """Create and start a game. Hour 0 stocks the shop."""
        return api_service.create_game(request)

    @app.get(
        "/api/v1/games",
        response_model=GameListResponse,
        tags=["Games"],
        summary="List active games",
    )
    async def list_games() -> GameListResponse:
        return api_service.list_games()

    @app.get(
        "/api/v1/games/{game_id}",
        response_model=GameStateResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Games"],
        summary="Get a game snapshot",
    )
    async def get_game(game_id: str) -> Union[GameStateResponse, JSONResponse]:
        return respond(api_service.get_game(game_id))

    @app.delete(
        "/api/v1/games/{game_id}",
        response_model=EndGameResponse,
        tags=["Games"],
        summary="Delete a game",
    )
    async def end_game(game_id: str) -> EndGameResponse:
        """Stop the game's timers and forget it."""
        return await api_service.end_game(game_id)

    # =========================================================================
    # Command Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/games/{game_id}/place",
        response_model=CommandResponse,
        responses=command_responses,
        tags=["Commands"],
        summary="Place an inventory card into a slot",
    )
    async def place_card(game_id: str, request: PlaceCardRequest) -> Union[CommandResponse, JSONResponse]:
        return respond(api_service.place_card(game_id, request))

    @app.post(
        "/api/v1/games/{game_id}/remove",
        response_model=CommandResponse,
        responses=command_responses,
        tags=["Commands"],
        summary="Return a slot card to the inventory",
    )
    async def remove_card(game_id: str, request: SlotRequest) -> Union[CommandResponse, JSONResponse]:
        return respond(api_service.remove_card(game_id, request))

    @app.post(
        "/api/v1/games/{game_id}/buy",
        response_model=CommandResponse,
        responses=command_responses,
        tags=["Commands"],
        summary="Buy a shop item",
    )
    async def buy_item(game_id: str, request: BuyItemRequest) -> Union[CommandResponse, JSONResponse]:
        return respond(api_service.buy_item(game_id, request))

    @app.post(
        "/api/v1/games/{game_id}/activate",
        response_model=CommandResponse,
        responses=command_responses,
        tags=["Commands"],
        summary="Activate a slot card",
    )
    async def activate_effect(game_id: str, request: SlotRequest) -> Union[CommandResponse, JSONResponse]:
        """
        Run the card's activation.

        Lovers, The Hanged Man and The Devil open a choice instead of
        finishing; answer it with POST /choice or close it with
        POST /choice/cancel.
        """
        return respond(api_service.activate_effect(game_id, request))

    @app.post(
        "/api/v1/games/{game_id}/choice",
        response_model=CommandResponse,
        responses=command_responses,
        tags=["Commands"],
        summary="Resolve the pending choice",
    )
    async def resolve_choice(game_id: str, request: ChoiceRequest) -> Union[CommandResponse, JSONResponse]:
        return respond(api_service.resolve_choice(game_id, request))

    @app.post(
        "/api/v1/games/{game_id}/choice/cancel",
        response_model=CommandResponse,
        responses=command_responses,
        tags=["Commands"],
        summary="Cancel the pending choice",
    )
    async def cancel_choice(game_id: str) -> Union[CommandResponse, JSONResponse]:
        return respond(api_service.cancel_choice(game_id))

    @app.post(
        "/api/v1/games/{game_id}/return-ready",
        response_model=CommandResponse,
        responses=command_responses,
        tags=["Commands"],
        summary="Return every ready activatable card",
    )
    async def return_ready(game_id: str) -> Union[CommandResponse, JSONResponse]:
        return respond(api_service.return_ready(game_id))

    @app.post(
        "/api/v1/games/{game_id}/advance",
        response_model=CommandResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Commands"],
        summary="Process hours immediately",
    )
    async def advance(game_id: str, request: AdvanceRequest) -> Union[CommandResponse, JSONResponse]:
        return respond(api_service.advance(game_id, request))

    # =========================================================================
    # Save Endpoints
    # =========================================================================

    @app.get(
        "/api/v1/games/{game_id}/save",
        response_model=SaveResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Saves"],
        summary="Export a save code",
    )
    async def export_save(game_id: str) -> Union[SaveResponse, JSONResponse]:
        return respond(api_service.export_save(game_id))

    @app.post(
        "/api/v1/games/{game_id}/load",
        response_model=CommandResponse,
        responses=command_responses,
        tags=["Saves"],
        summary="Import a save code",
    )
    async def import_save(
        game_id: str,
        code: Annotated[str, Form(description="Save code from GET /save")],
    ) -> Union[CommandResponse, JSONResponse]:
        """Replace the game's persisted state. Rejected codes leave it untouched."""
        return respond(api_service.import_save(game_id, code))

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get(
        "/api/v1/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        return HealthResponse(
            status="healthy",
            service="aether-cycles",
            version=API_VERSION,
        )

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Aether Cycles API",
            "version": API_VERSION,
            "docs": "/api/docs",
            "health": "/api/v1/health",
        }

    return app


# For running directly: uvicorn aether.api.app:app
logging.basicConfig(level=config.AETHER_LOG_LEVEL)
app = create_app()
