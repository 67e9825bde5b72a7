"""Locally synthesized campaign data for offline play."""

from datetime import timedelta
from typing import List

from ..core.serialization import utcnow
from .models import (
    Campaign,
    CampaignSummary,
    CombatState,
    Difficulty,
    GameHistoryEntry,
    GameState,
    GMStyle,
    HistoryEntryType,
    HistoryLog,
    SuggestedChoice,
)

DEMO_CAMPAIGN_TITLE = "Shadows of the Void"
DEMO_LOCATION = "Solara Prime, Level 1313"

_OPENING_NARRATION = (
    "The neon-drenched corridors of Level 1313 pulse with a hundred languages. "
    "You've tracked your contact to a cantina called The Rusty Hydrospanner, "
    "but the bartender's nervous glance toward the back booth tells you "
    "something has gone wrong."
)

_FOLLOWUP_NARRATION = (
    "A cloaked figure rises from the shadows. Two Rodian enforcers flank "
    "them, blasters drawn. \"You're late,\" the figure hisses. \"And you "
    "brought company.\" Through the Veil you sense danger closing in from "
    "behind."
)

_OFFLINE_REPLIES = (
    "The Veil stirs around you as your action unfolds. The enforcers exchange "
    "uneasy glances, uncertain of your next move. (Offline mode: connect to "
    "the server for full AI narration.)",
    "Your decisive action catches everyone off guard. The cloaked figure "
    "steps back, reassessing. \"Perhaps we can come to an arrangement,\" "
    "they say slowly. (Offline mode)",
    "The cantina grows quiet. Somewhere in the distance a ship's engine "
    "roars to life. Your contact may have just escaped. What do you do "
    "next? (Offline mode)",
)

SESSION_SUMMARY_UNAVAILABLE = "Could not load session summary. Please try again later."


def demo_choices() -> List[SuggestedChoice]:
    return [
        SuggestedChoice("Draw my Veilblade and stand ready", "⚔️"),
        SuggestedChoice("Use Veil Sense to read their intent", "✨"),
        SuggestedChoice("Try to negotiate or stall for time", "\U0001f4ac"),
        SuggestedChoice("Draw my blaster and take cover", "\U0001f52b"),
    ]


def demo_campaign(campaign_id: str) -> Campaign:
    """
    Deterministic stand-in used when a campaign cannot be fetched.

    The campaign keeps the requested id so later calls still address the
    same server-side resource once connectivity returns.
    """
    now = utcnow()
    history = HistoryLog(
        [
            GameHistoryEntry(
                type=HistoryEntryType.GM_NARRATION,
                content=_OPENING_NARRATION,
                timestamp=now - timedelta(minutes=5),
            ),
            GameHistoryEntry(
                type=HistoryEntryType.GM_NARRATION,
                content=_FOLLOWUP_NARRATION,
                timestamp=now - timedelta(minutes=2),
            ),
        ]
    )
    return Campaign(
        id=campaign_id,
        title=DEMO_CAMPAIGN_TITLE,
        current_location=DEMO_LOCATION,
        difficulty=Difficulty.NORMAL,
        gm_style=GMStyle.CINEMATIC,
        game_state=GameState(
            active=True,
            combat_state=CombatState(),
            history=history,
            suggested_choices=demo_choices(),
        ),
    )


def demo_summaries() -> List[CampaignSummary]:
    return [
        CampaignSummary(
            id="demo-campaign-1",
            title=DEMO_CAMPAIGN_TITLE,
            character_name="Kael Voss",
            character_class="Tidecaller",
            last_played_at=utcnow() - timedelta(hours=1),
            current_location=DEMO_LOCATION,
        )
    ]


def offline_narration(history_length: int) -> str:
    """Pick one of the canned offline replies, rotating with the log length."""
    return _OFFLINE_REPLIES[history_length % len(_OFFLINE_REPLIES)]
