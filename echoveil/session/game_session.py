"""Narrative play loop for a single campaign."""

from typing import Optional

import structlog

from ..campaign.demo import SESSION_SUMMARY_UNAVAILABLE, demo_campaign, offline_narration
from ..campaign.models import (
    Campaign,
    CampaignSettings,
    CombatState,
    Difficulty,
    GMStyle,
    HistoryEntryType,
    NarrativeActionResult,
    TravelResult,
)
from ..character_generation.models import Character
from ..core.error_handling import ActionRejectedError, GatewayError, ValidationError
from .combat_controller import CombatTurnController

logger = structlog.get_logger(__name__)

RESUME_BANNER = "Previous session ended. Continue where you left off?"


class GameSession:
    """
    Owns one campaign's state for the lifetime of a play screen.

    Player actions are appended to the history optimistically under a
    correlation id and reconciled when the server answers: confirmed on
    success, kept and followed by an offline narration when the server
    cannot be reached, rolled back when the server rejects the action.
    """

    def __init__(self, gateway, campaign_id: str, character: Optional[Character] = None):
        self.gateway = gateway
        self.campaign_id = campaign_id
        self.character = character
        self.campaign: Optional[Campaign] = None
        self.is_demo = False
        self.banner: Optional[str] = None
        self._action_in_flight = False

    @property
    def is_loaded(self) -> bool:
        return self.campaign is not None

    @property
    def is_processing_action(self) -> bool:
        return self._action_in_flight

    @property
    def can_send_action(self) -> bool:
        return self.campaign is not None and not self._action_in_flight

    def _require_campaign(self) -> Campaign:
        if self.campaign is None:
            raise RuntimeError("Campaign not loaded; call load() first")
        return self.campaign

    async def load(self) -> Campaign:
        """Fetch the campaign, falling back to the offline demo campaign."""
        try:
            campaign = await self.gateway.get_campaign(self.campaign_id)
            self.is_demo = False
        except GatewayError as e:
            logger.warning("Loading demo campaign", campaign_id=self.campaign_id, error=str(e))
            campaign = demo_campaign(self.campaign_id)
            self.is_demo = True

        campaign.game_state.active_character = self.character
        if not self.is_demo and len(campaign.game_state.history):
            self.banner = RESUME_BANNER
        self.campaign = campaign
        return campaign

    def dismiss_banner(self) -> None:
        self.banner = None

    async def submit_action(self, text: str) -> Optional[NarrativeActionResult]:
        """
        Send a narrative action.

        Returns the server's result, or ``None`` when the action was dropped
        (one already in flight) or answered offline.

        Raises:
            ValidationError: ``text`` is blank
            ActionRejectedError: the server refused the action
        """
        action = text.strip()
        if not action:
            raise ValidationError("Action cannot be empty", field="action")
        campaign = self._require_campaign()
        if self._action_in_flight:
            logger.debug("Dropping action while another is in flight", campaign_id=campaign.id)
            return None

        history = campaign.game_state.history
        correlation_id = history.append_pending(HistoryEntryType.PLAYER_ACTION, action)
        self._action_in_flight = True
        try:
            result = await self.gateway.submit_action(campaign.id, action)
        except ActionRejectedError:
            history.rollback(correlation_id)
            raise
        except GatewayError as e:
            logger.warning("Action failed, answering offline", campaign_id=campaign.id, error=str(e))
            history.confirm(correlation_id)
            history.append(HistoryEntryType.GM_NARRATION, offline_narration(len(history)))
            return None
        finally:
            self._action_in_flight = False

        history.confirm(correlation_id)
        self._apply_action_result(result)
        return result

    def _apply_action_result(self, result: NarrativeActionResult) -> None:
        campaign = self._require_campaign()
        state = campaign.game_state
        if result.narration:
            state.history.append(HistoryEntryType.GM_NARRATION, result.narration)
        if result.combat_state is not None:
            self._replace_combat_state(result.combat_state)
        if result.suggested_choices is not None:
            state.suggested_choices = result.suggested_choices
        if result.current_location:
            campaign.current_location = result.current_location
        if result.xp_awarded and state.active_character is not None:
            state.active_character.award_experience(result.xp_awarded)
            logger.info(
                "Experience awarded",
                character_id=state.active_character.id,
                xp=result.xp_awarded,
            )

    def _replace_combat_state(self, incoming: CombatState) -> None:
        # In place so a running CombatTurnController keeps seeing the same object
        current = self._require_campaign().game_state.combat_state
        current.active = incoming.active
        current.replace_roster(incoming.participants, incoming.current_turn_index)

    async def undo_last_action(self) -> Campaign:
        """Remove the last exchange on the server and adopt its campaign. Errors propagate."""
        campaign = self._require_campaign()
        updated = await self.gateway.undo_last_action(campaign.id)
        updated.game_state.active_character = campaign.game_state.active_character
        self.campaign = updated
        logger.info("Last action undone", campaign_id=campaign.id)
        return updated

    async def update_settings(
        self,
        difficulty: Optional[Difficulty] = None,
        gm_style: Optional[GMStyle] = None,
    ) -> CampaignSettings:
        campaign = self._require_campaign()
        requested = CampaignSettings(
            difficulty=difficulty or campaign.difficulty,
            gm_style=gm_style or campaign.gm_style,
        )
        stored = await self.gateway.update_settings(campaign.id, requested)
        campaign.difficulty = stored.difficulty
        campaign.gm_style = stored.gm_style
        return stored

    async def session_summary(self) -> str:
        campaign = self._require_campaign()
        try:
            return await self.gateway.session_summary(campaign.id)
        except GatewayError as e:
            logger.warning("Session summary unavailable", campaign_id=campaign.id, error=str(e))
            return SESSION_SUMMARY_UNAVAILABLE

    async def travel(self, destination: str) -> Optional[TravelResult]:
        campaign = self._require_campaign()
        history = campaign.game_state.history
        try:
            result = await self.gateway.travel(campaign.id, destination)
        except GatewayError as e:
            logger.warning("Travel failed, answering offline", campaign_id=campaign.id, error=str(e))
            history.append(HistoryEntryType.GM_NARRATION, offline_narration(len(history)))
            return None

        if not result.success:
            return result
        for text in (result.narration, result.encounter, result.arrival_scene):
            if text:
                history.append(HistoryEntryType.GM_NARRATION, text)
        campaign.current_location = result.destination or destination
        if result.suggested_choices:
            campaign.game_state.suggested_choices = result.suggested_choices
        return result

    def combat_controller(self) -> CombatTurnController:
        """A turn controller bound to this campaign's combat state and history."""
        campaign = self._require_campaign()
        return CombatTurnController(
            self.gateway,
            campaign.id,
            campaign.game_state.combat_state,
            history=campaign.game_state.history,
            character=campaign.game_state.active_character,
        )
