"""Campaign, combat and history data models."""

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional

from ..character_generation.models import Character
from ..core.serialization import format_timestamp, utcnow


class Difficulty(Enum):
    """Campaign difficulty (matches backend values)."""

    STORY = "story"
    NORMAL = "normal"
    HEROIC = "heroic"

    @classmethod
    def parse(cls, value: Optional[str]) -> "Difficulty":
        try:
            return cls(value)
        except ValueError:
            return cls.NORMAL

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


class GMStyle(Enum):
    """Narrative style of the game master (matches backend values)."""

    CINEMATIC = "cinematic"
    GRITTY = "gritty"
    COMEDIC = "comedic"

    @classmethod
    def parse(cls, value: Optional[str]) -> "GMStyle":
        try:
            return cls(value)
        except ValueError:
            return cls.CINEMATIC

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


@dataclass
class Combatant:
    """One participant in an encounter."""

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    name: str = ""
    hp: int = 0
    max_hp: int = 0
    ac: int = 10
    initiative: Optional[int] = None
    conditions: List[str] = field(default_factory=list)
    is_player: bool = False

    @property
    def is_down(self) -> bool:
        return self.hp <= 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "hp": self.hp,
            "maxHp": self.max_hp,
            "ac": self.ac,
            "initiative": self.initiative,
            "conditions": list(self.conditions),
            "isPlayer": self.is_player,
        }


@dataclass
class CombatState:
    """
    Combat roster and turn pointer, owned by the campaign.

    The server is authoritative; the client only replaces this state from
    responses or advances the turn optimistically.
    """

    active: bool = False
    current_turn_index: int = 0
    participants: List[Combatant] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.normalize_turn_index()

    def normalize_turn_index(self) -> None:
        """Keep the turn pointer inside the roster."""
        if self.participants:
            self.current_turn_index %= len(self.participants)
        else:
            self.current_turn_index = 0

    def advance_turn(self) -> int:
        if self.participants:
            self.current_turn_index = (self.current_turn_index + 1) % len(self.participants)
        return self.current_turn_index

    def replace_roster(self, participants: List[Combatant], turn_index: Optional[int] = None) -> None:
        self.participants = list(participants)
        if turn_index is not None:
            self.current_turn_index = turn_index
        self.normalize_turn_index()

    @property
    def current_combatant(self) -> Optional[Combatant]:
        if 0 <= self.current_turn_index < len(self.participants):
            return self.participants[self.current_turn_index]
        return None

    @property
    def is_player_turn(self) -> bool:
        combatant = self.current_combatant
        return combatant is not None and combatant.is_player

    def find(self, combatant_id: str) -> Optional[Combatant]:
        return next((c for c in self.participants if c.id == combatant_id), None)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "active": self.active,
            "currentTurn": self.current_turn_index,
            "initiative": [c.to_dict() for c in self.participants],
        }


class HistoryEntryType(Enum):
    GM_NARRATION = "narration"
    PLAYER_ACTION = "action"
    COMBAT_RESULT = "combat"
    SESSION_SUMMARY = "summary"

    @classmethod
    def parse(cls, value: Optional[str]) -> "HistoryEntryType":
        try:
            return cls(value)
        except ValueError:
            return cls.GM_NARRATION


@dataclass(frozen=True)
class GameHistoryEntry:
    """Immutable log entry. ``pending`` marks an optimistic, unconfirmed entry."""

    type: HistoryEntryType
    content: str
    timestamp: datetime = field(default_factory=utcnow)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    correlation_id: Optional[str] = None
    pending: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "text": self.content,
            "timestamp": format_timestamp(self.timestamp),
        }


class HistoryLog:
    """
    Append-only campaign log with explicit reconciliation of optimistic entries.

    Confirmed entries are never edited or removed. A pending entry is either
    confirmed in place or rolled back, identified by its correlation id.
    """

    def __init__(self, entries: Optional[List[GameHistoryEntry]] = None):
        self._entries: List[GameHistoryEntry] = list(entries or [])

    def __iter__(self) -> Iterator[GameHistoryEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __getitem__(self, index: int) -> GameHistoryEntry:
        return self._entries[index]

    @property
    def entries(self) -> List[GameHistoryEntry]:
        return list(self._entries)

    def append(self, entry_type: HistoryEntryType, content: str) -> GameHistoryEntry:
        entry = GameHistoryEntry(type=entry_type, content=content)
        self._entries.append(entry)
        return entry

    def append_pending(self, entry_type: HistoryEntryType, content: str) -> str:
        """Append an optimistic entry and return its correlation id."""
        correlation_id = str(uuid.uuid4())
        self._entries.append(
            GameHistoryEntry(type=entry_type, content=content, correlation_id=correlation_id, pending=True)
        )
        return correlation_id

    def _pending_index(self, correlation_id: str) -> Optional[int]:
        for index, entry in enumerate(self._entries):
            if entry.pending and entry.correlation_id == correlation_id:
                return index
        return None

    def confirm(self, correlation_id: str) -> bool:
        index = self._pending_index(correlation_id)
        if index is None:
            return False
        self._entries[index] = replace(self._entries[index], pending=False)
        return True

    def rollback(self, correlation_id: str) -> bool:
        index = self._pending_index(correlation_id)
        if index is None:
            return False
        del self._entries[index]
        return True

    @property
    def pending_entries(self) -> List[GameHistoryEntry]:
        return [entry for entry in self._entries if entry.pending]

    def to_list(self) -> List[Dict[str, Any]]:
        return [entry.to_dict() for entry in self._entries if not entry.pending]


@dataclass
class SuggestedChoice:
    text: str
    emoji: Optional[str] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))


@dataclass
class GameState:
    active: bool = True
    combat_state: CombatState = field(default_factory=CombatState)
    history: HistoryLog = field(default_factory=HistoryLog)
    suggested_choices: List[SuggestedChoice] = field(default_factory=list)
    active_character: Optional[Character] = None


@dataclass
class Campaign:
    """Full campaign as returned by the game server."""

    id: str
    title: str = "Campaign"
    current_location: str = "Unknown"
    difficulty: Difficulty = Difficulty.NORMAL
    gm_style: GMStyle = GMStyle.CINEMATIC
    game_state: GameState = field(default_factory=GameState)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "currentLocation": self.current_location,
            "difficulty": self.difficulty.value,
            "gmStyle": self.gm_style.value,
            "combatState": self.game_state.combat_state.to_dict(),
            "history": self.game_state.history.to_list(),
            "suggestedChoices": [c.text for c in self.game_state.suggested_choices],
        }


@dataclass
class CampaignSummary:
    """Lightweight list entry; the full campaign is only loaded on entry."""

    id: str
    title: str
    character_name: str = "Unknown"
    character_class: str = ""
    last_played_at: datetime = field(default_factory=utcnow)
    current_location: str = "Unknown"
    is_active: bool = True


@dataclass(frozen=True)
class CampaignSettings:
    difficulty: Difficulty = Difficulty.NORMAL
    gm_style: GMStyle = GMStyle.CINEMATIC

    def to_dict(self) -> Dict[str, str]:
        return {"difficulty": self.difficulty.value, "gmStyle": self.gm_style.value}


@dataclass(frozen=True)
class AIStatus:
    available: bool
    backend: Optional[str] = None
    model: Optional[str] = None
    message: Optional[str] = None

    @classmethod
    def offline(cls) -> "AIStatus":
        return cls(available=False, message="Offline")


@dataclass
class StartedCampaign:
    campaign_id: str
    opening_scene: str = ""
    suggested_choices: List[SuggestedChoice] = field(default_factory=list)


@dataclass
class NarrativeActionResult:
    narration: Optional[str] = None
    combat_state: Optional[CombatState] = None
    suggested_choices: Optional[List[SuggestedChoice]] = None
    xp_awarded: Optional[int] = None
    current_location: Optional[str] = None


@dataclass
class AttackResolution:
    hit: bool
    d20_roll: int
    modifier: int
    total: int
    damage: Optional[int] = None
    damage_type: Optional[str] = None


@dataclass
class CombatActionResult:
    narration: Optional[str] = None
    attack: Optional[AttackResolution] = None
    participants: Optional[List[Combatant]] = None
    current_turn_index: Optional[int] = None
    combat_ended: bool = False
    victory: bool = False
    xp_awarded: int = 0
    character_updates: Dict[str, int] = field(default_factory=dict)


@dataclass
class TravelResult:
    success: bool
    narration: Optional[str] = None
    encounter: Optional[str] = None
    destination: Optional[str] = None
    waypoints: List[str] = field(default_factory=list)
    arrival_scene: Optional[str] = None
    suggested_choices: List[SuggestedChoice] = field(default_factory=list)
