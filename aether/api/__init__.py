"""
API Module - HTTP interface to running games.

Exposes the engine via REST API:
1. Create and delete games
2. Send player commands (place, remove, buy, activate, choices)
3. Read snapshots of the circle, shop and clock
4. Export and import save codes

All games are in memory. No user accounts.
"""

from .schemas import (
    # Requests
    CreateGameRequest,
    PlaceCardRequest,
    SlotRequest,
    BuyItemRequest,
    ChoiceRequest,
    AdvanceRequest,
    # Responses
    GameStateResponse,
    CommandResponse,
    SaveResponse,
    ErrorResponse,
    # Shared
    CardInfo,
    SlotInfo,
    ChoiceInfo,
)
from .service import APIService
from .app import create_app

__all__ = [
    # Requests
    "CreateGameRequest",
    "PlaceCardRequest",
    "SlotRequest",
    "BuyItemRequest",
    "ChoiceRequest",
    "AdvanceRequest",
    # Responses
    "GameStateResponse",
    "CommandResponse",
    "SaveResponse",
    "ErrorResponse",
    # Shared
    "CardInfo",
    "SlotInfo",
    "ChoiceInfo",
    # Service
    "APIService",
    "create_app",
]
