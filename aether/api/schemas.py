"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the contract between the UI and the engine.
Every response is a read-only snapshot; commands go in, snapshots
come out.

Error Codes:
- GAME_NOT_FOUND: Game does not exist or has been deleted
- INVALID_SAVE: Save code is malformed or from another version
- Command codes from the reducer (INVALID_SLOT, SLOT_OCCUPIED,
  ON_COOLDOWN, CHOICE_PENDING, INSUFFICIENT_FUNDS, ...)
"""

from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================

class GameStatus(str, Enum):
    """Game status values (mirrors LoopState)."""
    RUNNING = "running"
    WAITING_CHOICE = "waiting_choice"
    RESTOCKING = "restocking"


class ErrorCode(str, Enum):
    """Error codes for API responses."""
    GAME_NOT_FOUND = "GAME_NOT_FOUND"
    INVALID_SAVE = "INVALID_SAVE"
    INVALID_SLOT = "INVALID_SLOT"
    INVALID_INVENTORY_INDEX = "INVALID_INVENTORY_INDEX"
    SLOT_OCCUPIED = "SLOT_OCCUPIED"
    EMPTY_SLOT = "EMPTY_SLOT"
    BLANK_CARD = "BLANK_CARD"
    ON_COOLDOWN = "ON_COOLDOWN"
    NOT_ACTIVATABLE = "NOT_ACTIVATABLE"
    CHOICE_PENDING = "CHOICE_PENDING"
    NO_CHOICE_PENDING = "NO_CHOICE_PENDING"
    INVALID_SELECTION = "INVALID_SELECTION"
    INSUFFICIENT_FUNDS = "INSUFFICIENT_FUNDS"
    UNKNOWN_ITEM = "UNKNOWN_ITEM"
    INVALID_REQUEST = "INVALID_REQUEST"


# =============================================================================
# Nested Models
# =============================================================================

class MarkInfo(BaseModel):
    """A lunar or sign mark."""
    kind: str = Field(..., description="lunar or sign")
    name: str
    icon: str = ""


class CurseInfo(BaseModel):
    type: str
    state: Optional[int] = None


class CardInfo(BaseModel):
    """A card instance in a slot or the inventory."""
    instance_id: str
    card_id: int
    name: str
    effect_id: Optional[str] = None
    marks: list[MarkInfo] = Field(default_factory=list)
    cooldown_until: Optional[int] = None
    on_cooldown: bool = False
    curse: Optional[CurseInfo] = None
    effect_multiplier: Optional[int] = None
    is_blank: bool = False
    justice_bonus: Optional[int] = None
    tower_arcano_active: bool = False
    tower_arcano_cycles: Optional[int] = None
    hanged_man_active: bool = False


class SlotInfo(BaseModel):
    position: int
    card: Optional[CardInfo] = None
    sync_percentage: int = 0


class ShopItemInfo(BaseModel):
    id: str
    card_id: int
    name: str
    description: str
    cost: float
    rarity: str
    marks: list[MarkInfo] = Field(default_factory=list)


class BuffInfo(BaseModel):
    id: str
    source_card_id: int
    type: str
    modifier: float
    duration: int = Field(..., description="Remaining hours")


class PayoutInfo(BaseModel):
    amount: float
    delivery_time: int


class SynergyInfo(BaseModel):
    id: str
    name: str
    description: str
    is_empowered: bool = False


class CycleInfo(BaseModel):
    """Daily/lunar/sign breakdown of the clock."""
    daily: int
    lunar: int
    sign: int
    cycle_duration: int
    is_daytime: bool
    lunar_phase: str
    zodiac_sign: str


class ChoiceInfo(BaseModel):
    """An open Lovers / Hanged Man / Devil choice."""
    choice_id: str
    choice_type: str
    prompt: str
    options: list[Any] = Field(default_factory=list)
    source_slot: int
    min_choices: int = 1
    max_choices: int = 1
    optional: bool = True


# =============================================================================
# Request Models
# =============================================================================

class CreateGameRequest(BaseModel):
    """Request to create a game."""
    seed: Optional[int] = Field(None, description="Seed for deterministic randomness")
    currency: Optional[float] = Field(None, ge=0, description="Starting currency")
    tick_rate: Optional[int] = Field(None, ge=1, description="Real milliseconds per game hour")
    realtime: Optional[bool] = Field(None, description="Run the hourly and real-time timers")


class PlaceCardRequest(BaseModel):
    slot_index: int
    inventory_index: int


class SlotRequest(BaseModel):
    slot_index: int


class BuyItemRequest(BaseModel):
    item_id: str


class ChoiceRequest(BaseModel):
    """
    Answer to the pending choice.

    - Lovers: [card_id]
    - Hanged Man: [instance_id, ...]
    - Devil: [{"instance_id": ..., "mark_index": ...}, ...]
    """
    selection: list[Any] = Field(default_factory=list)


class AdvanceRequest(BaseModel):
    hours: int = Field(1, ge=1, le=672, description="Hours to process back to back")


# =============================================================================
# Response Models
# =============================================================================

class GameStateResponse(BaseModel):
    """Full snapshot of a game."""
    game_id: str
    status: GameStatus
    currency: float
    global_hours: int
    tick_rate: int
    effective_tick_rate: int
    permanent_sync_bonus: float
    global_sync: int
    last_cycle_sync: float
    realtime_rate: float = Field(..., description="Resources per real second")
    cycle: CycleInfo
    slots: list[SlotInfo]
    inventory: list[CardInfo]
    shop_items: list[ShopItemInfo]
    is_restocking: bool
    active_synergies: list[SynergyInfo]
    global_buffs: list[BuffInfo]
    pending_payouts: list[PayoutInfo]
    pending_choice: Optional[ChoiceInfo] = None
    api_version: str = "v1"


class CommandResponse(BaseModel):
    """Response after a successful command."""
    success: bool = True
    changes: list[str] = Field(default_factory=list)
    game: GameStateResponse


class SaveResponse(BaseModel):
    game_id: str
    code: str


class GameListResponse(BaseModel):
    """Response listing active games."""
    games: list[str]
    count: int


class EndGameResponse(BaseModel):
    """Response after deleting a game."""
    success: bool
    game_id: str


class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str
    error_code: str
    details: Optional[dict] = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
