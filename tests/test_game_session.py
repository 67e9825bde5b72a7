"""Tests for the narrative play loop."""

import asyncio
from unittest.mock import AsyncMock, Mock

import pytest

from echoveil.campaign import CampaignSettings, Difficulty, GMStyle, HistoryEntryType
from echoveil.campaign.demo import DEMO_CAMPAIGN_TITLE, SESSION_SUMMARY_UNAVAILABLE
from echoveil.campaign.models import NarrativeActionResult
from echoveil.character_generation import Character
from echoveil.core import ActionRejectedError, HTTPStatusError, ValidationError
from echoveil.session import GameSession
from echoveil.session.game_session import RESUME_BANNER

CAMPAIGN_PATH = "/api/game/campaign/camp-1"


@pytest.fixture
def session(server, gateway, campaign_payload):
    server.add("GET", CAMPAIGN_PATH, json_body=campaign_payload)
    return GameSession(gateway, "camp-1", character=Character(id="pc-1", name="Kael", experience_points=100))


class TestLoad:
    """Test loading a campaign."""

    @pytest.mark.asyncio
    async def test_load(self, session):
        """Test a loaded campaign with history shows the resume banner."""
        campaign = await session.load()
        assert session.is_loaded is True
        assert session.is_demo is False
        assert campaign.title == "The Kessel Job"
        assert campaign.game_state.active_character is session.character
        assert session.banner == RESUME_BANNER
        session.dismiss_banner()
        assert session.banner is None

    @pytest.mark.asyncio
    async def test_load_falls_back_to_demo(self, offline_gateway):
        """Test an unreachable server yields the demo campaign without a banner."""
        session = GameSession(offline_gateway, "camp-9")
        campaign = await session.load()
        assert session.is_demo is True
        assert campaign.id == "camp-9"
        assert campaign.title == DEMO_CAMPAIGN_TITLE
        assert session.banner is None

    @pytest.mark.asyncio
    async def test_requires_load(self, gateway):
        """Test operations before ``load`` fail loudly."""
        session = GameSession(gateway, "camp-1")
        assert session.can_send_action is False
        with pytest.raises(RuntimeError):
            await session.submit_action("Hello")


class TestSubmitAction:
    """Test narrative actions and history reconciliation."""

    @pytest.mark.asyncio
    async def test_success(self, server, session):
        """Test a successful action confirms the entry and applies the result."""
        await session.load()
        server.add(
            "POST",
            "/api/game/action",
            json_body={
                "success": True,
                "narration": "The guard takes the credits.",
                "suggestedChoices": ["Walk in"],
                "xpAwarded": 50,
                "worldState": {"currentLocation": "Kessel Mines"},
            },
        )
        result = await session.submit_action("  Bribe the guard  ")
        assert result.narration == "The guard takes the credits."

        history = session.campaign.game_state.history
        assert history[-2].content == "Bribe the guard"
        assert history[-2].type is HistoryEntryType.PLAYER_ACTION
        assert history[-2].pending is False
        assert history[-1].content == "The guard takes the credits."
        assert history.pending_entries == []
        assert [c.text for c in session.campaign.game_state.suggested_choices] == ["Walk in"]
        assert session.campaign.current_location == "Kessel Mines"
        assert session.character.experience_points == 150
        assert server.last_json() == {"campaignId": "camp-1", "action": "Bribe the guard"}

    @pytest.mark.asyncio
    async def test_choices_kept_when_absent(self, server, session):
        """Test existing choices stay when the response has none."""
        await session.load()
        server.add("POST", "/api/game/action", json_body={"narration": "Nothing changes."})
        await session.submit_action("Wait")
        assert [c.text for c in session.campaign.game_state.suggested_choices] == ["Bribe the guard", "Sneak past"]

    @pytest.mark.asyncio
    async def test_blank_action(self, session):
        """Test blank actions are rejected."""
        await session.load()
        with pytest.raises(ValidationError):
            await session.submit_action("   ")

    @pytest.mark.asyncio
    async def test_offline_keeps_action(self, server, session):
        """Test a failed request keeps the action and adds offline narration."""
        await session.load()
        before = len(session.campaign.game_state.history)
        server.add("POST", "/api/game/action", status=503)
        assert await session.submit_action("Sneak past") is None

        history = session.campaign.game_state.history
        assert len(history) == before + 2
        assert history[-2].content == "Sneak past"
        assert history[-2].pending is False
        assert history[-1].type is HistoryEntryType.GM_NARRATION
        assert "Offline mode" in history[-1].content
        assert session.is_processing_action is False

    @pytest.mark.asyncio
    async def test_rejected_rolls_back(self, server, session):
        """Test a rejected action is removed from history and the error raised."""
        await session.load()
        before = [entry.id for entry in session.campaign.game_state.history]
        server.add("POST", "/api/game/action", json_body={"success": False, "error": "You are stunned"})
        with pytest.raises(ActionRejectedError):
            await session.submit_action("Attack")
        assert [entry.id for entry in session.campaign.game_state.history] == before

    @pytest.mark.asyncio
    async def test_combat_state_replaced_in_place(self, server, session):
        """Test combat state from an action updates the existing object."""
        await session.load()
        combat = session.campaign.game_state.combat_state
        server.add(
            "POST",
            "/api/game/action",
            json_body={
                "narration": "Ambush!",
                "combatState": {"active": True, "currentTurn": 0, "initiative": [{"id": "pc-1", "isPlayer": True}]},
            },
        )
        await session.submit_action("Open the door")
        assert session.campaign.game_state.combat_state is combat
        assert [c.id for c in combat.participants] == ["pc-1"]

    @pytest.mark.asyncio
    async def test_second_action_dropped(self, gateway, campaign_payload, server):
        """Test only one action is in flight at a time."""
        server.add("GET", CAMPAIGN_PATH, json_body=campaign_payload)
        session = GameSession(gateway, "camp-1")
        await session.load()

        release = asyncio.Event()

        async def slow_action(*args):
            await release.wait()
            return NarrativeActionResult(narration="Done.")

        session.gateway = Mock()
        session.gateway.submit_action = AsyncMock(side_effect=slow_action)

        first = asyncio.create_task(session.submit_action("One"))
        await asyncio.sleep(0)
        assert session.is_processing_action is True
        assert session.can_send_action is False
        assert await session.submit_action("Two") is None

        release.set()
        await first
        assert session.gateway.submit_action.await_count == 1
        contents = [entry.content for entry in session.campaign.game_state.history]
        assert "Two" not in contents


class TestOtherOperations:
    """Test undo, settings, summary and travel."""

    @pytest.mark.asyncio
    async def test_undo(self, server, session, campaign_payload):
        """Test undo adopts the server's campaign and keeps the character."""
        await session.load()
        undone = dict(campaign_payload, history=campaign_payload["history"][:1])
        server.add("DELETE", f"{CAMPAIGN_PATH}/last-action", json_body={"campaign": undone})
        campaign = await session.undo_last_action()
        assert len(campaign.game_state.history) == 1
        assert campaign.game_state.active_character is session.character
        assert session.campaign is campaign

    @pytest.mark.asyncio
    async def test_undo_error_propagates(self, server, session):
        """Test undo failures are raised."""
        await session.load()
        server.add("DELETE", f"{CAMPAIGN_PATH}/last-action", status=409)
        with pytest.raises(HTTPStatusError):
            await session.undo_last_action()

    @pytest.mark.asyncio
    async def test_update_settings(self, server, session):
        """Test settings are sent and stored on the campaign."""
        await session.load()
        server.add("PUT", f"{CAMPAIGN_PATH}/settings", json_body={"difficulty": "story", "gmStyle": "comedic"})
        stored = await session.update_settings(difficulty=Difficulty.STORY)
        assert server.last_json() == {"difficulty": "story", "gmStyle": "gritty"}
        assert stored == CampaignSettings(Difficulty.STORY, GMStyle.COMEDIC)
        assert session.campaign.gm_style is GMStyle.COMEDIC

    @pytest.mark.asyncio
    async def test_summary_fallback(self, session):
        """Test a failed summary returns the fixed message."""
        await session.load()
        assert await session.session_summary() == SESSION_SUMMARY_UNAVAILABLE

    @pytest.mark.asyncio
    async def test_summary(self, server, session):
        """Test a summary from the server."""
        await session.load()
        server.add("GET", f"{CAMPAIGN_PATH}/summary", json_body={"text": "You met a guard."})
        assert await session.session_summary() == "You met a guard."

    @pytest.mark.asyncio
    async def test_travel(self, server, session):
        """Test travel narration, location and choices."""
        await session.load()
        server.add(
            "POST",
            "/api/game/travel",
            json_body={
                "success": True,
                "narration": "You jump to hyperspace.",
                "route": {"toPlanet": "Nar Shaddaa"},
                "arrivalScene": {"description": "Neon everywhere.", "choices": ["Find a cantina"]},
            },
        )
        await session.travel("Nar Shaddaa")
        history = session.campaign.game_state.history
        assert [history[-2].content, history[-1].content] == ["You jump to hyperspace.", "Neon everywhere."]
        assert session.campaign.current_location == "Nar Shaddaa"
        assert [c.text for c in session.campaign.game_state.suggested_choices] == ["Find a cantina"]

    @pytest.mark.asyncio
    async def test_travel_offline(self, session):
        """Test failed travel narrates offline and keeps the location."""
        await session.load()
        assert await session.travel("Hoth") is None
        assert session.campaign.current_location == "Kessel"
        assert "Offline mode" in session.campaign.game_state.history[-1].content

    @pytest.mark.asyncio
    async def test_combat_controller_shares_state(self, session):
        """Test the controller works on the campaign's own combat state and history."""
        await session.load()
        controller = session.combat_controller()
        assert controller.state is session.campaign.game_state.combat_state
        assert controller.history is session.campaign.game_state.history
        assert controller.character is session.character
