"""
Wire schemas for the game server.

The backend contract is loosely typed: fields go missing, arrive as
``null`` or use camelCase on one endpoint and snake_case on another. Each
schema here accepts both spellings, ignores unknown keys, treats ``null``
as missing so the documented default applies, and converts to the domain
dataclass with ``to_domain()``.
"""

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator
import structlog

from ..campaign.models import (
    AIStatus,
    AttackResolution,
    Campaign,
    CampaignSettings,
    CampaignSummary,
    Combatant,
    CombatActionResult,
    CombatState,
    Difficulty,
    GameHistoryEntry,
    GameState,
    GMStyle,
    HistoryEntryType,
    HistoryLog,
    NarrativeActionResult,
    StartedCampaign,
    SuggestedChoice,
    TravelResult,
)
from ..character_generation.models import (
    AbilityStat,
    BackgroundOption,
    Character,
    ClassOption,
    PowerOption,
    SpeciesOption,
)
from ..core.serialization import parse_timestamp, utcnow

logger = structlog.get_logger(__name__)


class WireModel(BaseModel):
    """Base for every response schema."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, values: Any) -> Any:
        """Explicit ``null`` means "use the default"."""
        if isinstance(values, dict):
            return {key: value for key, value in values.items() if value is not None}
        return values


def _coerce_timestamp(value: Any) -> Any:
    if isinstance(value, str):
        try:
            return parse_timestamp(value)
        except ValueError:
            logger.warning("Unparseable timestamp, using now", value=value)
            return utcnow()
    return value


def _choice_texts(value: Any) -> Any:
    """Choices arrive as plain strings or as ``{"text": ...}`` objects."""
    if isinstance(value, list):
        return [item.get("text", "") if isinstance(item, dict) else item for item in value]
    return value


# Characters

class CharacterSchema(WireModel):
    id: str
    name: str = "Unnamed"
    species: str = "Unknown"
    char_class: str = Field("Unknown", validation_alias=AliasChoices("class", "char_class", "characterClass"))
    level: int = 1
    experience_points: int = Field(0, validation_alias=AliasChoices("experience_points", "experiencePoints"))
    current_hp: int = Field(10, validation_alias=AliasChoices("current_hp", "currentHp", "currentHP"))
    max_hp: int = Field(10, validation_alias=AliasChoices("max_hp", "maxHp", "maxHP"))
    ac: int = 10
    force_points: int = Field(0, validation_alias=AliasChoices("force_points", "forcePoints"))
    last_modified: datetime = Field(
        default_factory=utcnow, validation_alias=AliasChoices("last_modified", "lastModified")
    )
    notes: str = ""
    backstory: str = ""

    parse_last_modified = field_validator("last_modified", mode="before")(_coerce_timestamp)

    @field_validator("level")
    @classmethod
    def level_at_least_one(cls, v: int) -> int:
        return max(1, v)

    def to_domain(self) -> Character:
        return Character(
            id=self.id,
            name=self.name,
            species=self.species,
            char_class=self.char_class,
            level=self.level,
            experience_points=self.experience_points,
            current_hp=self.current_hp,
            max_hp=self.max_hp,
            ac=self.ac,
            force_points=self.force_points,
            last_modified=self.last_modified,
            notes=self.notes,
            backstory=self.backstory,
        )


# Combat

class CombatantSchema(WireModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str = "Unknown"
    hp: int = 0
    max_hp: Optional[int] = Field(None, validation_alias=AliasChoices("maxHp", "max_hp", "maxHP"))
    ac: int = 10
    initiative: Optional[int] = None
    conditions: List[str] = Field(default_factory=list)
    is_player: Optional[bool] = Field(None, validation_alias=AliasChoices("isPlayer", "is_player"))

    def to_domain(self, default_is_player: bool = False) -> Combatant:
        return Combatant(
            id=self.id,
            name=self.name,
            hp=self.hp,
            max_hp=self.max_hp if self.max_hp is not None else self.hp,
            ac=self.ac,
            initiative=self.initiative,
            conditions=list(self.conditions),
            is_player=self.is_player if self.is_player is not None else default_is_player,
        )


def roster_to_domain(items: List[CombatantSchema]) -> List[Combatant]:
    """
    Convert a participant list.

    When no participant says whether it is the player, the first one is
    taken to be the player.
    """
    nobody_flagged = all(item.is_player is None for item in items)
    return [item.to_domain(default_is_player=nobody_flagged and index == 0) for index, item in enumerate(items)]


class CombatStateSchema(WireModel):
    active: bool = False
    current_turn: int = Field(0, validation_alias=AliasChoices("currentTurn", "current_turn", "current_turn_index"))
    participants: List[CombatantSchema] = Field(
        default_factory=list, validation_alias=AliasChoices("initiative", "participants")
    )

    def to_domain(self) -> CombatState:
        return CombatState(
            active=self.active,
            current_turn_index=self.current_turn,
            participants=roster_to_domain(self.participants),
        )


# Campaigns

class HistoryEntrySchema(WireModel):
    type: str = "narration"
    text: str = Field("", validation_alias=AliasChoices("text", "content"))
    timestamp: datetime = Field(default_factory=utcnow)

    parse_timestamp_field = field_validator("timestamp", mode="before")(_coerce_timestamp)

    def to_domain(self) -> GameHistoryEntry:
        return GameHistoryEntry(type=HistoryEntryType.parse(self.type), content=self.text, timestamp=self.timestamp)


class SceneSchema(WireModel):
    description: str = ""
    location: Optional[str] = None
    choices: List[str] = Field(default_factory=list)

    parse_choices = field_validator("choices", mode="before")(_choice_texts)

    def suggested_choices(self) -> List[SuggestedChoice]:
        return [SuggestedChoice(text=text) for text in self.choices if text]


class WorldStateSchema(WireModel):
    current_location: str = Field("Unknown", validation_alias=AliasChoices("currentLocation", "current_location"))


class CampaignSchema(WireModel):
    id: str
    title: str = "Campaign"
    difficulty: Optional[str] = None
    gm_style: Optional[str] = Field(None, validation_alias=AliasChoices("gmStyle", "gm_style"))
    world_state: Optional[WorldStateSchema] = Field(None, validation_alias=AliasChoices("worldState", "world_state"))
    current_scene: Optional[SceneSchema] = Field(None, validation_alias=AliasChoices("currentScene", "current_scene"))
    combat_state: CombatStateSchema = Field(
        default_factory=CombatStateSchema, validation_alias=AliasChoices("combatState", "combat_state")
    )
    history: List[HistoryEntrySchema] = Field(default_factory=list)

    def to_domain(self) -> Campaign:
        return Campaign(
            id=self.id,
            title=self.title,
            current_location=self.world_state.current_location if self.world_state else "Unknown",
            difficulty=Difficulty.parse(self.difficulty),
            gm_style=GMStyle.parse(self.gm_style),
            game_state=GameState(
                active=True,
                combat_state=self.combat_state.to_domain(),
                history=HistoryLog([entry.to_domain() for entry in self.history]),
                suggested_choices=self.current_scene.suggested_choices() if self.current_scene else [],
            ),
        )


class CampaignSummarySchema(WireModel):
    id: str
    title: str
    character_name: str = Field("Unknown", validation_alias=AliasChoices("characterName", "character_name"))
    character_class: str = Field("", validation_alias=AliasChoices("characterClass", "character_class"))
    updated_at: datetime = Field(
        default_factory=utcnow, validation_alias=AliasChoices("updatedAt", "lastPlayedAt", "updated_at")
    )
    current_location: str = Field("Unknown", validation_alias=AliasChoices("currentLocation", "current_location"))

    parse_updated_at = field_validator("updated_at", mode="before")(_coerce_timestamp)

    def to_domain(self) -> CampaignSummary:
        return CampaignSummary(
            id=self.id,
            title=self.title,
            character_name=self.character_name,
            character_class=self.character_class,
            last_played_at=self.updated_at,
            current_location=self.current_location,
            is_active=True,
        )


class AIStatusSchema(WireModel):
    available: bool = False
    backend: Optional[str] = None
    model: Optional[str] = None
    message: Optional[str] = None
    backends: Dict[str, Optional[bool]] = Field(default_factory=dict)

    def to_domain(self) -> AIStatus:
        backend = self.backend
        if backend is None:
            backend = next((name for name, up in self.backends.items() if up), None)
        return AIStatus(available=self.available, backend=backend, model=self.model, message=self.message)


class StartCampaignResponse(WireModel):
    campaign_id: str = Field(validation_alias=AliasChoices("campaignId", "campaign_id"))
    opening_scene: Optional[str] = Field(None, validation_alias=AliasChoices("openingScene", "opening_scene"))
    scene: Optional[SceneSchema] = None

    def to_domain(self) -> StartedCampaign:
        opening = self.opening_scene
        if opening is None:
            opening = self.scene.description if self.scene else ""
        return StartedCampaign(
            campaign_id=self.campaign_id,
            opening_scene=opening,
            suggested_choices=self.scene.suggested_choices() if self.scene else [],
        )


class ActionResponse(WireModel):
    success: bool = True
    error: Optional[str] = None
    narration: Optional[str] = None
    scene: Optional[SceneSchema] = None
    combat_state: Optional[CombatStateSchema] = Field(None, validation_alias=AliasChoices("combatState", "combat_state"))
    suggested_choices: Optional[List[str]] = Field(
        None, validation_alias=AliasChoices("suggestedChoices", "suggested_choices")
    )
    xp_awarded: Optional[int] = Field(None, validation_alias=AliasChoices("xpAwarded", "xp_awarded"))
    world_state: Optional[WorldStateSchema] = Field(None, validation_alias=AliasChoices("worldState", "world_state"))

    parse_choices = field_validator("suggested_choices", mode="before")(_choice_texts)

    def to_domain(self) -> NarrativeActionResult:
        narration = self.narration
        if narration is None and self.scene is not None and self.scene.description:
            narration = self.scene.description
        choices: Optional[List[SuggestedChoice]] = None
        if self.suggested_choices is not None:
            choices = [SuggestedChoice(text=text) for text in self.suggested_choices if text]
        elif self.scene is not None and self.scene.choices:
            choices = self.scene.suggested_choices()
        location = None
        if self.world_state is not None:
            location = self.world_state.current_location
        elif self.scene is not None:
            location = self.scene.location
        return NarrativeActionResult(
            narration=narration,
            combat_state=self.combat_state.to_domain() if self.combat_state else None,
            suggested_choices=choices,
            xp_awarded=self.xp_awarded,
            current_location=location,
        )


class CombatActionResponse(WireModel):
    success: bool = True
    error: Optional[str] = None
    narration: Optional[str] = None
    d20_roll: Optional[int] = Field(None, validation_alias=AliasChoices("d20_roll", "d20Roll"))
    modifier: Optional[int] = None
    total: Optional[int] = None
    hit: Optional[bool] = None
    damage_roll: Optional[int] = Field(None, validation_alias=AliasChoices("damage_roll", "damageRoll"))
    damage_type: Optional[str] = Field(None, validation_alias=AliasChoices("damage_type", "damageType"))
    updated_participants: Optional[List[CombatantSchema]] = Field(
        None, validation_alias=AliasChoices("updated_participants", "updatedParticipants")
    )
    current_turn_index: Optional[int] = Field(
        None, validation_alias=AliasChoices("current_turn_index", "currentTurnIndex")
    )
    combat_state: Optional[CombatStateSchema] = Field(None, validation_alias=AliasChoices("combatState", "combat_state"))
    combat_ended: bool = Field(False, validation_alias=AliasChoices("combat_ended", "combatEnded"))
    victory: bool = False
    xp_awarded: int = Field(0, validation_alias=AliasChoices("xp_awarded", "xpAwarded"))
    character_updates: Dict[str, int] = Field(
        default_factory=dict, validation_alias=AliasChoices("character_updates", "characterUpdates")
    )

    def to_domain(self) -> CombatActionResult:
        attack = None
        if self.d20_roll is not None:
            modifier = self.modifier or 0
            attack = AttackResolution(
                hit=bool(self.hit),
                d20_roll=self.d20_roll,
                modifier=modifier,
                total=self.total if self.total is not None else self.d20_roll + modifier,
                damage=self.damage_roll,
                damage_type=self.damage_type,
            )
        participants = None
        turn_index = self.current_turn_index
        if self.updated_participants is not None:
            participants = roster_to_domain(self.updated_participants)
        elif self.combat_state is not None:
            participants = roster_to_domain(self.combat_state.participants)
            if turn_index is None:
                turn_index = self.combat_state.current_turn
        return CombatActionResult(
            narration=self.narration,
            attack=attack,
            participants=participants,
            current_turn_index=turn_index,
            combat_ended=self.combat_ended,
            victory=self.victory,
            xp_awarded=self.xp_awarded,
            character_updates=dict(self.character_updates),
        )


class SettingsResponse(WireModel):
    difficulty: Optional[str] = None
    gm_style: Optional[str] = Field(None, validation_alias=AliasChoices("gmStyle", "gm_style"))

    def to_domain(self, requested: Optional[CampaignSettings] = None) -> CampaignSettings:
        """Fields the server leaves out fall back to ``requested``."""
        requested = requested or CampaignSettings()
        return CampaignSettings(
            difficulty=Difficulty.parse(self.difficulty) if self.difficulty else requested.difficulty,
            gm_style=GMStyle.parse(self.gm_style) if self.gm_style else requested.gm_style,
        )


class SessionSummaryResponse(WireModel):
    summary: str = Field("", validation_alias=AliasChoices("summary", "text"))


class RouteSchema(WireModel):
    from_planet: Optional[str] = Field(None, validation_alias=AliasChoices("fromPlanet", "from_planet"))
    to_planet: Optional[str] = Field(None, validation_alias=AliasChoices("toPlanet", "to_planet"))
    waypoints: List[str] = Field(default_factory=list)


class TravelResponse(WireModel):
    success: bool = True
    route: Optional[RouteSchema] = None
    encounter: Optional[str] = None
    arrival_scene: Optional[SceneSchema] = Field(None, validation_alias=AliasChoices("arrivalScene", "arrival_scene"))
    narration: Optional[str] = None

    def to_domain(self) -> TravelResult:
        return TravelResult(
            success=self.success,
            narration=self.narration,
            encounter=self.encounter,
            destination=self.route.to_planet if self.route else None,
            waypoints=list(self.route.waypoints) if self.route else [],
            arrival_scene=self.arrival_scene.description if self.arrival_scene else None,
            suggested_choices=self.arrival_scene.suggested_choices() if self.arrival_scene else [],
        )


# Builder catalogs

class SpeciesSchema(WireModel):
    id: str
    name: str
    traits: List[str] = Field(default_factory=list)
    ability_bonuses: Dict[str, int] = Field(
        default_factory=dict, validation_alias=AliasChoices("ability_bonuses", "abilityBonuses")
    )
    description: str = ""

    def to_domain(self) -> SpeciesOption:
        return SpeciesOption(self.id, self.name, list(self.traits), dict(self.ability_bonuses), self.description)


class ClassSchema(WireModel):
    id: str
    name: str
    hit_die: int = Field(8, validation_alias=AliasChoices("hit_die", "hitDie"))
    primary_stat: str = Field("STR", validation_alias=AliasChoices("primary_stat", "primaryStat"))
    role_description: str = Field("", validation_alias=AliasChoices("role_description", "roleDescription"))
    is_force_user: bool = Field(False, validation_alias=AliasChoices("is_force_user", "isForceUser"))
    is_tech_user: bool = Field(False, validation_alias=AliasChoices("is_tech_user", "isTechUser"))

    def to_domain(self) -> ClassOption:
        try:
            stat = AbilityStat(self.primary_stat.upper())
        except ValueError:
            stat = AbilityStat.STRENGTH
        return ClassOption(
            self.id, self.name, self.hit_die, stat, self.role_description, self.is_force_user, self.is_tech_user
        )


class BackgroundSchema(WireModel):
    id: str
    name: str
    skill_grants: List[str] = Field(default_factory=list, validation_alias=AliasChoices("skill_grants", "skillGrants"))
    feature_description: str = Field(
        "", validation_alias=AliasChoices("feature_description", "featureDescription")
    )

    def to_domain(self) -> BackgroundOption:
        return BackgroundOption(self.id, self.name, list(self.skill_grants), self.feature_description)


class PowerSchema(WireModel):
    id: str
    name: str
    level: int = 0
    type: str = "force"
    duration: str = ""
    description: str = ""
    cost: str = ""

    def to_domain(self) -> PowerOption:
        return PowerOption(self.id, self.name, self.level, self.type, self.duration, self.description, self.cost)
