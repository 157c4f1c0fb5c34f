"""
Shop - Card offers generated at the start of play and on every new day.
"""

from __future__ import annotations
import uuid

from ..catalog.cards import all_cards
from ..catalog.marks import LUNAR_PHASES, ZODIAC_SIGNS, MarkKind
from .clock import phase_index, sign_index
from .effect_resolver import run_restock_hooks
from .state import ItemType, Rarity, ShopItem, World
from .synergy import ActiveSynergy

SHOP_SIZE = 3
BASE_COST = 100
COST_PER_ID = 100
RARE_THRESHOLD = 0.85


def card_cost(card_id: int) -> float:
    return BASE_COST + COST_PER_ID * card_id


def generate_shop_items(world: World, active_synergies: list[ActiveSynergy]) -> list[ShopItem]:
    """
    Roll a fresh set of offers.

    Each offer's primary mark has an even chance of being rewritten to
    the current sign (or phase); restock hooks run last.
    """
    rng = world.rng
    library = all_cards()
    current_sign = ZODIAC_SIGNS[sign_index(world.global_hours)]
    current_phase = LUNAR_PHASES[phase_index(world.global_hours)]

    items = []
    for _ in range(SHOP_SIZE):
        card = library[rng.randrange(len(library))]
        marks = list(card.marks)
        if marks:
            primary = marks[0]
            body = current_sign if primary.kind == MarkKind.SIGN else current_phase
            if rng.random() < 0.5:
                marks[0] = body.as_mark(primary.kind)
        items.append(ShopItem(
            id=f"card-{uuid.uuid4().hex[:12]}",
            card_id=card.id,
            name=card.name,
            description=card.effect_text,
            cost=card_cost(card.id),
            marks=marks,
            item_type=ItemType.TAROT,
            rarity=Rarity.RARE if rng.random() > RARE_THRESHOLD else Rarity.COMMON,
        ))

    return run_restock_hooks(world, items, active_synergies)
