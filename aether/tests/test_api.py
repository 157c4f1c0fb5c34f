"""
Tests for API layer.

Tests:
- API service methods
- HTTP endpoints and status codes
- Save export/import through the API
- Error handling
"""

import asyncio

import pytest

from ..api.schemas import (
    AdvanceRequest,
    BuyItemRequest,
    ChoiceRequest,
    CreateGameRequest,
    ErrorCode,
    ErrorResponse,
    GameStatus,
    PlaceCardRequest,
    SlotRequest,
)
from ..api.service import APIService


class TestAPIService:
    """Tests for APIService."""

    @pytest.fixture
    def service(self):
        """Create a fresh API service."""
        return APIService()

    @pytest.fixture
    def game(self, service):
        """A seeded game with a stocked shop."""
        return service.create_game(CreateGameRequest(seed=7))

    def test_create_game(self, game):
        """A new game starts at hour 0 with three shop items."""
        assert game.global_hours == 0
        assert game.status == GameStatus.RUNNING
        assert len(game.slots) == 3
        assert len(game.shop_items) == 3
        assert game.currency == 4999

    def test_create_with_currency(self, service):
        """Starting currency can be overridden."""
        game = service.create_game(CreateGameRequest(seed=1, currency=50))
        assert game.currency == 50

    def test_seed_is_deterministic(self, service):
        """Two games with the same seed stock the same cards."""
        first = service.create_game(CreateGameRequest(seed=11))
        second = service.create_game(CreateGameRequest(seed=11))
        assert [i.card_id for i in first.shop_items] == [i.card_id for i in second.shop_items]

    def test_get_nonexistent_game(self, service):
        """Unknown games return GAME_NOT_FOUND."""
        response = service.get_game("nope")
        assert isinstance(response, ErrorResponse)
        assert response.error_code == ErrorCode.GAME_NOT_FOUND.value

    def test_buy_and_place(self, service, game):
        """A bought card can be placed into the circle."""
        item = game.shop_items[0]
        bought = service.buy_item(game.game_id, BuyItemRequest(item_id=item.id))
        assert bought.success
        assert bought.game.currency == pytest.approx(game.currency - item.cost)
        assert bought.game.inventory[0].card_id == item.card_id

        placed = service.place_card(game.game_id, PlaceCardRequest(slot_index=0, inventory_index=0))
        assert placed.success
        assert placed.game.slots[0].card.card_id == item.card_id
        assert placed.game.inventory == []

    def test_command_error(self, service, game):
        """Rejected commands come back as ErrorResponse with the reducer code."""
        response = service.remove_card(game.game_id, SlotRequest(slot_index=0))
        assert isinstance(response, ErrorResponse)
        assert response.error_code == "EMPTY_SLOT"

    def test_choice_without_pending(self, service, game):
        """Resolving with nothing open is rejected."""
        response = service.resolve_choice(game.game_id, ChoiceRequest(selection=[1]))
        assert response.error_code == "NO_CHOICE_PENDING"

    def test_advance(self, service, game):
        """Advancing processes hours and restocks on a new day."""
        response = service.advance(game.game_id, AdvanceRequest(hours=24))
        assert response.game.global_hours == 24
        assert response.game.cycle.daily == 0
        assert not response.game.is_restocking
        assert len(response.game.shop_items) == 3

    def test_save_and_load(self, service, game):
        """A save code restores the exported state."""
        service.advance(game.game_id, AdvanceRequest(hours=5))
        code = service.export_save(game.game_id).code

        other = service.create_game(CreateGameRequest(seed=2))
        loaded = service.import_save(other.game_id, code)

        assert loaded.success
        assert loaded.game.global_hours == 5

    def test_invalid_save(self, service, game):
        """Garbage codes are rejected with INVALID_SAVE."""
        response = service.import_save(game.game_id, "garbage")
        assert response.error_code == ErrorCode.INVALID_SAVE.value

    def test_end_game(self, service, game):
        """Ended games are forgotten."""
        result = asyncio.run(service.end_game(game.game_id))
        assert result.success
        assert game.game_id not in service.list_games().games
        assert not asyncio.run(service.end_game(game.game_id)).success


class TestHTTP:
    """Tests for the FastAPI endpoints."""

    @pytest.fixture
    def client(self):
        from fastapi.testclient import TestClient
        from ..api.app import create_app

        with TestClient(create_app(APIService())) as client:
            yield client

    @pytest.fixture
    def game_id(self, client):
        response = client.post("/api/v1/games", json={"seed": 5})
        assert response.status_code == 200
        return response.json()["game_id"]

    def test_health(self, client):
        """Health check reports healthy."""
        response = client.get("/api/v1/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_get_game(self, client, game_id):
        """The snapshot includes the clock breakdown."""
        data = client.get(f"/api/v1/games/{game_id}").json()
        assert data["global_hours"] == 0
        assert data["cycle"]["lunar_phase"]
        assert data["status"] == "running"

    def test_unknown_game_404(self, client):
        """Unknown games return 404."""
        response = client.get("/api/v1/games/missing")
        assert response.status_code == 404
        assert response.json()["error_code"] == "GAME_NOT_FOUND"

    def test_rejected_command_400(self, client, game_id):
        """Reducer rejections return 400."""
        response = client.post(f"/api/v1/games/{game_id}/activate", json={"slot_index": 0})
        assert response.status_code == 400
        assert response.json()["error_code"] == "EMPTY_SLOT"

    def test_buy_place_flow(self, client, game_id):
        """Buying then placing goes through the command endpoints."""
        item = client.get(f"/api/v1/games/{game_id}").json()["shop_items"][0]

        bought = client.post(f"/api/v1/games/{game_id}/buy", json={"item_id": item["id"]})
        assert bought.status_code == 200

        placed = client.post(
            f"/api/v1/games/{game_id}/place",
            json={"slot_index": 1, "inventory_index": 0},
        )
        assert placed.status_code == 200
        assert placed.json()["game"]["slots"][1]["card"]["card_id"] == item["card_id"]

    def test_advance(self, client, game_id):
        """Advance processes hours immediately."""
        response = client.post(f"/api/v1/games/{game_id}/advance", json={"hours": 24})
        assert response.status_code == 200
        assert response.json()["game"]["global_hours"] == 24

    def test_advance_validation(self, client, game_id):
        """Hours outside 1..672 fail request validation."""
        response = client.post(f"/api/v1/games/{game_id}/advance", json={"hours": 0})
        assert response.status_code == 422

    def test_save_and_load(self, client, game_id):
        """Save codes round-trip through GET /save and the load form."""
        client.post(f"/api/v1/games/{game_id}/advance", json={"hours": 3})
        code = client.get(f"/api/v1/games/{game_id}/save").json()["code"]

        other = client.post("/api/v1/games", json={"seed": 9}).json()["game_id"]
        response = client.post(f"/api/v1/games/{other}/load", data={"code": code})

        assert response.status_code == 200
        assert response.json()["game"]["global_hours"] == 3

    def test_load_garbage(self, client, game_id):
        """Invalid codes return 400 INVALID_SAVE."""
        response = client.post(f"/api/v1/games/{game_id}/load", data={"code": "garbage"})
        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_SAVE"

    def test_delete_game(self, client, game_id):
        """Deleted games disappear from the list."""
        response = client.delete(f"/api/v1/games/{game_id}")
        assert response.json()["success"]
        assert game_id not in client.get("/api/v1/games").json()["games"]
