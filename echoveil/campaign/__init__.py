"""Campaign, combat and history state."""

from .campaign_manager import CampaignManager
from .models import (
    AIStatus,
    Campaign,
    CampaignSettings,
    CampaignSummary,
    Combatant,
    CombatState,
    Difficulty,
    GameHistoryEntry,
    GameState,
    GMStyle,
    HistoryEntryType,
    HistoryLog,
    SuggestedChoice,
)
from .templates import BUILTIN_TEMPLATES, CampaignTemplate

__all__ = [
    "CampaignManager",
    "Campaign",
    "CampaignSummary",
    "CampaignSettings",
    "CampaignTemplate",
    "BUILTIN_TEMPLATES",
    "Combatant",
    "CombatState",
    "Difficulty",
    "GMStyle",
    "GameState",
    "GameHistoryEntry",
    "HistoryEntryType",
    "HistoryLog",
    "SuggestedChoice",
    "AIStatus",
]
