"""
Combat turn controller.

Drives one encounter: action selection, target selection, submission to
the game server and reconciliation of the server's answer into the
campaign's combat state. The server is authoritative for the roster and
the turn pointer; the only state the client originates is the optimistic
turn advance after End Turn when the server does not say whose turn it is.
"""

from enum import Enum
from typing import Callable, Dict, List, Optional

import structlog

from ..campaign.demo import offline_narration
from ..campaign.models import (
    AttackResolution,
    Combatant,
    CombatActionResult,
    CombatState,
    HistoryEntryType,
    HistoryLog,
)
from ..character_generation.models import Character
from ..core.error_handling import ActionRejectedError, GatewayError, ValidationError, user_message

logger = structlog.get_logger(__name__)

MAX_COMBAT_LOG_ENTRIES = 20


class CombatPhase(Enum):
    IDLE = "idle"
    AWAITING_TARGET = "awaiting_target"
    SUBMITTING = "submitting"
    TURN_RESOLVED = "turn_resolved"
    COMBAT_ENDED = "combat_ended"


class CombatActionType(Enum):
    """Actions offered on the player's turn (wire values)."""

    ATTACK = "attack"
    USE_POWER = "use_power"
    DISENGAGE = "disengage"
    DASH = "dash"
    DODGE = "dodge"
    HELP = "help"
    END_TURN = "end_turn"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").title()

    @property
    def needs_target(self) -> bool:
        return self in (CombatActionType.ATTACK, CombatActionType.USE_POWER)


# Keys the server may use in ``character_updates``
_CHARACTER_FIELDS: Dict[str, str] = {
    "hp": "current_hp",
    "current_hp": "current_hp",
    "currentHp": "current_hp",
    "max_hp": "max_hp",
    "maxHp": "max_hp",
    "force_points": "force_points",
    "forcePoints": "force_points",
    "experience_points": "experience_points",
    "xp": "experience_points",
    "level": "level",
}


class CombatTurnController:
    """State machine over one combat encounter.

    Only one submission is in flight at a time. Requests made while a
    submission is pending are dropped, not queued.
    """

    def __init__(
        self,
        gateway,
        campaign_id: str,
        combat_state: CombatState,
        history: Optional[HistoryLog] = None,
        character: Optional[Character] = None,
        on_combat_ended: Optional[Callable[["CombatTurnController"], None]] = None,
    ):
        self.gateway = gateway
        self.campaign_id = campaign_id
        self.state = combat_state
        self.history = history if history is not None else HistoryLog()
        self.character = character
        self.on_combat_ended = on_combat_ended

        self.phase = CombatPhase.IDLE
        self.pending_action: Optional[CombatActionType] = None
        self.combat_log: List[str] = []
        self.enemy_narration: Optional[str] = None
        self.last_attack: Optional[AttackResolution] = None
        self.victory = False
        self.xp_awarded = 0

        self._seed_roster()
        self._log("⚔️ Combat started! Initiative rolled.")

    def _seed_roster(self) -> None:
        participants = self.state.participants
        if participants and not any(c.is_player for c in participants):
            participants[0].is_player = True
        for index, combatant in enumerate(participants):
            if combatant.initiative is None:
                combatant.initiative = 20 - index * 2
        self.state.normalize_turn_index()

    # Read-only views

    @property
    def is_submitting(self) -> bool:
        return self.phase is CombatPhase.SUBMITTING

    @property
    def combat_ended(self) -> bool:
        return self.phase is CombatPhase.COMBAT_ENDED

    @property
    def is_player_turn(self) -> bool:
        return self.state.is_player_turn

    @property
    def current_combatant(self) -> Optional[Combatant]:
        return self.state.current_combatant

    @property
    def enemies(self) -> List[Combatant]:
        return [c for c in self.state.participants if not c.is_player]

    @property
    def recent_log(self) -> List[str]:
        return self.combat_log[-5:]

    # Player intents

    async def select_action(self, action: CombatActionType) -> Optional[CombatActionResult]:
        """
        Pick an action. Targeted actions wait for ``select_target``; the rest
        are submitted immediately.
        """
        if not self._accepts_input(action):
            return None
        if action.needs_target:
            self.pending_action = action
            self.phase = CombatPhase.AWAITING_TARGET
            return None
        self.pending_action = None
        return await self._submit(action, None)

    async def select_target(self, target_id: str) -> Optional[CombatActionResult]:
        if self.phase is not CombatPhase.AWAITING_TARGET or self.pending_action is None:
            logger.debug("Target selected with no pending action", target_id=target_id)
            return None
        if self.state.find(target_id) is None:
            raise ValidationError(f"Unknown combat target: {target_id}", field="target_id")
        action = self.pending_action
        if not self._accepts_input(action):
            self.cancel_target_selection()
            return None
        self.pending_action = None
        return await self._submit(action, target_id)

    def cancel_target_selection(self) -> None:
        if self.phase is CombatPhase.AWAITING_TARGET:
            self.pending_action = None
            self.phase = CombatPhase.IDLE

    async def end_turn(self) -> Optional[CombatActionResult]:
        """End the turn without a target step, whatever is pending."""
        if not self._accepts_input(CombatActionType.END_TURN):
            return None
        self.pending_action = None
        return await self._submit(CombatActionType.END_TURN, None)

    def acknowledge_resolution(self) -> None:
        """Dismiss the attack result shown after a resolved turn."""
        if self.phase is CombatPhase.TURN_RESOLVED:
            self.phase = CombatPhase.IDLE
        self.last_attack = None

    def dismiss_enemy_narration(self) -> None:
        self.enemy_narration = None

    def _accepts_input(self, action: CombatActionType) -> bool:
        if self.phase in (CombatPhase.SUBMITTING, CombatPhase.COMBAT_ENDED):
            logger.debug("Dropping combat action", action=action.value, phase=self.phase.value)
            return False
        # End Turn is accepted on any combatant's turn
        if action is not CombatActionType.END_TURN and not self.state.is_player_turn:
            logger.debug(
                "Dropping combat action outside the player's turn",
                action=action.value,
                turn_index=self.state.current_turn_index,
            )
            return False
        return True

    # Submission

    async def _submit(self, action: CombatActionType, target_id: Optional[str]) -> Optional[CombatActionResult]:
        self.phase = CombatPhase.SUBMITTING
        self.last_attack = None
        try:
            result = await self.gateway.submit_combat_action(self.campaign_id, action.value, target_id)
        except ActionRejectedError as e:
            logger.info(
                "Combat action rejected",
                campaign_id=self.campaign_id,
                action=action.value,
                reason=e.message,
            )
            self._log(f"⚠️ {user_message(e)}")
            self.phase = CombatPhase.IDLE
            return None
        except GatewayError as e:
            logger.warning(
                "Combat action failed, continuing offline",
                campaign_id=self.campaign_id,
                action=action.value,
                error=str(e),
            )
            self._log(f"⚠️ {user_message(e)}")
            self.history.append(HistoryEntryType.GM_NARRATION, offline_narration(len(self.history)))
            if action is CombatActionType.END_TURN:
                self.state.advance_turn()
            self.phase = CombatPhase.IDLE
            return None
        finally:
            if self.phase is CombatPhase.SUBMITTING:
                self.phase = CombatPhase.IDLE

        self._apply(result, action)
        return result

    def _apply(self, result: CombatActionResult, action: CombatActionType) -> None:
        roster = result.participants if result.participants is not None else self.state.participants
        turn_index = result.current_turn_index
        if turn_index is None:
            turn_index = self.state.current_turn_index
            if action is CombatActionType.END_TURN and roster:
                turn_index = (turn_index + 1) % len(roster)
        self.state.replace_roster(roster, turn_index)

        if result.attack is not None:
            self.last_attack = result.attack

        if result.narration:
            self._log(result.narration)
            self.history.append(HistoryEntryType.COMBAT_RESULT, result.narration)
            if not self.state.is_player_turn:
                self.enemy_narration = result.narration

        if result.character_updates:
            self._apply_character_updates(result.character_updates)

        if result.combat_ended:
            self._end_combat(result)
        elif self.last_attack is not None:
            self.phase = CombatPhase.TURN_RESOLVED
        else:
            self.phase = CombatPhase.IDLE

        logger.debug(
            "Combat action applied",
            action=action.value,
            turn_index=self.state.current_turn_index,
            phase=self.phase.value,
        )

    def _apply_character_updates(self, updates: Dict[str, int]) -> None:
        if self.character is None:
            return
        # max_hp first so a simultaneous current_hp is clamped against the new maximum
        ordered = sorted(updates.items(), key=lambda item: _CHARACTER_FIELDS.get(item[0]) != "max_hp")
        for key, value in ordered:
            attribute = _CHARACTER_FIELDS.get(key)
            if attribute is None:
                logger.debug("Ignoring unknown character update", key=key)
                continue
            setattr(self.character, attribute, value)
        self.character.touch()

    def _end_combat(self, result: CombatActionResult) -> None:
        self.victory = result.victory
        self.xp_awarded = result.xp_awarded
        self.state.active = False
        self.phase = CombatPhase.COMBAT_ENDED
        if self.victory and self.xp_awarded > 0 and self.character is not None:
            self.character.award_experience(self.xp_awarded)
        logger.info(
            "Combat ended",
            campaign_id=self.campaign_id,
            victory=self.victory,
            xp_awarded=self.xp_awarded,
        )
        if self.on_combat_ended:
            self.on_combat_ended(self)

    def _log(self, line: str) -> None:
        self.combat_log.append(line)
        if len(self.combat_log) > MAX_COMBAT_LOG_ENTRIES:
            del self.combat_log[: len(self.combat_log) - MAX_COMBAT_LOG_ENTRIES]
