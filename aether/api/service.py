"""
API Service - Business logic layer between API and engine.

The service:
1. Translates API requests to GameLoop commands
2. Manages games through the SessionManager
3. Formats world snapshots for the UI

This layer is framework-agnostic (can be used with FastAPI, Flask, etc.)
Failures are returned as ErrorResponse objects, never raised.
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging

from .. import config
from ..catalog.marks import LUNAR_PHASES, ZODIAC_SIGNS, Mark
from ..engine_core.action import Action, ActionResult
from ..engine_core.clock import is_daytime, phase_index, sign_index
from ..engine_core.state import CardInstance, World
from ..engine_core.synergy import effect_id_of
from ..session import GameLoop, SessionManager
from .schemas import (
    AdvanceRequest,
    BuffInfo,
    BuyItemRequest,
    CardInfo,
    ChoiceInfo,
    ChoiceRequest,
    CommandResponse,
    CreateGameRequest,
    CurseInfo,
    CycleInfo,
    EndGameResponse,
    ErrorCode,
    ErrorResponse,
    GameListResponse,
    GameStateResponse,
    GameStatus,
    MarkInfo,
    PayoutInfo,
    PlaceCardRequest,
    SaveResponse,
    ShopItemInfo,
    SlotInfo,
    SlotRequest,
    SynergyInfo,
)

logger = logging.getLogger(__name__)


@dataclass
class APIService:
    """
    Main API service.

    Usage:
        service = APIService()

        game = service.create_game(CreateGameRequest(seed=7))
        response = service.place_card(game.game_id, PlaceCardRequest(slot_index=0, inventory_index=0))
        save = service.export_save(game.game_id)
    """
    session_manager: SessionManager = field(default_factory=SessionManager)
    realtime_default: bool = False

    def create_game(self, request: CreateGameRequest) -> GameStateResponse:
        """Create and start a new game."""
        seed = request.seed if request.seed is not None else config.AETHER_SEED
        session = self.session_manager.create_session(
            seed=seed,
            currency=request.currency if request.currency is not None else config.AETHER_STARTING_CURRENCY,
            tick_rate=request.tick_rate if request.tick_rate is not None else config.AETHER_TICK_RATE_MS,
            realtime=request.realtime if request.realtime is not None else self.realtime_default,
        )
        return self._to_state_response(session.session_id, session.loop)

    def get_game(self, game_id: str) -> GameStateResponse | ErrorResponse:
        session = self.session_manager.get_session(game_id)
        if session is None:
            return self._not_found(game_id)
        return self._to_state_response(game_id, session.loop)

    async def end_game(self, game_id: str) -> EndGameResponse:
        success = await self.session_manager.end_session(game_id)
        return EndGameResponse(success=success, game_id=game_id)

    def list_games(self) -> GameListResponse:
        games = self.session_manager.list_active_sessions()
        return GameListResponse(games=games, count=len(games))

    # =========================================================================
    # Commands
    # =========================================================================

    def place_card(self, game_id: str, request: PlaceCardRequest) -> CommandResponse | ErrorResponse:
        return self._dispatch(game_id, Action.place_card(request.slot_index, request.inventory_index))

    def remove_card(self, game_id: str, request: SlotRequest) -> CommandResponse | ErrorResponse:
        return self._dispatch(game_id, Action.remove_card(request.slot_index))

    def buy_item(self, game_id: str, request: BuyItemRequest) -> CommandResponse | ErrorResponse:
        return self._dispatch(game_id, Action.buy_item(request.item_id))

    def activate_effect(self, game_id: str, request: SlotRequest) -> CommandResponse | ErrorResponse:
        return self._dispatch(game_id, Action.activate_effect(request.slot_index))

    def resolve_choice(self, game_id: str, request: ChoiceRequest) -> CommandResponse | ErrorResponse:
        return self._dispatch(game_id, Action.resolve_choice(request.selection))

    def cancel_choice(self, game_id: str) -> CommandResponse | ErrorResponse:
        return self._dispatch(game_id, Action.cancel_choice())

    def return_ready(self, game_id: str) -> CommandResponse | ErrorResponse:
        return self._dispatch(game_id, Action.return_ready())

    def import_save(self, game_id: str, code: str) -> CommandResponse | ErrorResponse:
        return self._dispatch(game_id, Action.import_save(code))

    def advance(self, game_id: str, request: AdvanceRequest) -> CommandResponse | ErrorResponse:
        """Process hours immediately (manual clock drive)."""
        session = self.session_manager.get_session(game_id)
        if session is None:
            return self._not_found(game_id)
        results = session.loop.advance(request.hours)
        changes = [change for result in results for change in result.changes]
        return CommandResponse(
            changes=changes,
            game=self._to_state_response(game_id, session.loop),
        )

    def export_save(self, game_id: str) -> SaveResponse | ErrorResponse:
        session = self.session_manager.get_session(game_id)
        if session is None:
            return self._not_found(game_id)
        return SaveResponse(game_id=game_id, code=session.loop.export_save())

    def _dispatch(self, game_id: str, action: Action) -> CommandResponse | ErrorResponse:
        session = self.session_manager.get_session(game_id)
        if session is None:
            return self._not_found(game_id)
        result = session.loop.dispatch(action)
        if not result.success:
            return self._command_error(result)
        return CommandResponse(
            changes=result.state_changes,
            game=self._to_state_response(game_id, session.loop),
        )

    # =========================================================================
    # Conversion Helpers
    # =========================================================================

    @staticmethod
    def _not_found(game_id: str) -> ErrorResponse:
        return ErrorResponse(
            error=f"Game not found: {game_id}",
            error_code=ErrorCode.GAME_NOT_FOUND.value,
        )

    @staticmethod
    def _command_error(result: ActionResult) -> ErrorResponse:
        return ErrorResponse(
            error=result.error or "Command rejected",
            error_code=result.error_code or ErrorCode.INVALID_REQUEST.value,
        )

    @staticmethod
    def _mark_info(mark: Mark) -> MarkInfo:
        return MarkInfo(kind=mark.kind.value, name=mark.name, icon=mark.icon)

    def _card_info(self, card: CardInstance, global_hours: int) -> CardInfo:
        effect = effect_id_of(card)
        return CardInfo(
            instance_id=card.instance_id,
            card_id=card.card_id,
            name=card.display_name,
            effect_id=effect.value if effect else None,
            marks=[self._mark_info(m) for m in card.marks],
            cooldown_until=card.cooldown_until,
            on_cooldown=card.is_on_cooldown(global_hours),
            curse=CurseInfo(type=card.curse.type.value, state=card.curse.state) if card.curse else None,
            effect_multiplier=card.effect_multiplier,
            is_blank=card.is_blank,
            justice_bonus=card.justice_bonus,
            tower_arcano_active=card.tower_arcano_active,
            tower_arcano_cycles=card.tower_arcano_cycles,
            hanged_man_active=card.hanged_man_active,
        )

    def _to_state_response(self, game_id: str, loop: GameLoop) -> GameStateResponse:
        world: World = loop.world
        h = world.global_hours
        choice = world.pending_choice
        return GameStateResponse(
            game_id=game_id,
            status=GameStatus(loop.state.value),
            currency=world.currency,
            global_hours=h,
            tick_rate=world.tick_rate,
            effective_tick_rate=world.effective_tick_rate,
            permanent_sync_bonus=world.permanent_sync_bonus,
            global_sync=loop.global_sync,
            last_cycle_sync=world.last_cycle_sync,
            realtime_rate=loop.realtime_rate,
            cycle=CycleInfo(
                daily=world.cycle.daily,
                lunar=world.cycle.lunar,
                sign=world.cycle.sign,
                cycle_duration=world.cycle.cycle_duration,
                is_daytime=is_daytime(h),
                lunar_phase=LUNAR_PHASES[phase_index(h)].name,
                zodiac_sign=ZODIAC_SIGNS[sign_index(h)].name,
            ),
            slots=[
                SlotInfo(
                    position=slot.position,
                    card=self._card_info(slot.card, h) if slot.card is not None else None,
                    sync_percentage=slot.sync_percentage,
                )
                for slot in world.slots
            ],
            inventory=[self._card_info(card, h) for card in world.inventory],
            shop_items=[
                ShopItemInfo(
                    id=item.id,
                    card_id=item.card_id,
                    name=item.name,
                    description=item.description,
                    cost=item.cost,
                    rarity=item.rarity.value,
                    marks=[self._mark_info(m) for m in item.marks],
                )
                for item in world.shop_items
            ],
            is_restocking=world.is_restocking,
            active_synergies=[
                SynergyInfo(
                    id=active.id.value,
                    name=active.synergy.name,
                    description=active.description,
                    is_empowered=active.is_empowered,
                )
                for active in loop.active_synergies
            ],
            global_buffs=[
                BuffInfo(
                    id=buff.id,
                    source_card_id=buff.source_card_id,
                    type=buff.type.value,
                    modifier=buff.modifier,
                    duration=buff.duration,
                )
                for buff in world.global_buffs
            ],
            pending_payouts=[
                PayoutInfo(amount=p.amount, delivery_time=p.delivery_time)
                for p in world.pending_payouts
            ],
            pending_choice=ChoiceInfo(
                choice_id=choice.choice_id,
                choice_type=choice.choice_type.value,
                prompt=choice.prompt,
                options=list(choice.options),
                source_slot=choice.source_slot,
                min_choices=choice.min_choices,
                max_choices=choice.max_choices,
                optional=choice.optional,
            ) if choice is not None else None,
        )
