"""Step-by-step character builder backed by the server's data catalogs."""

import random
from typing import List, Optional

import structlog

from ..core.error_handling import GatewayError, ValidationError
from .catalog import (
    BACKGROUND_SAMPLES,
    CLASS_SAMPLES,
    FORCE_POWER_SAMPLES,
    SPECIES_SAMPLES,
    TECH_POWER_SAMPLES,
    starting_equipment,
)
from .models import (
    BackgroundOption,
    Character,
    CharacterDraft,
    ClassOption,
    PowerOption,
    SpeciesOption,
)
from .validators import CharacterValidator

logger = structlog.get_logger(__name__)

BACKSTORY_TEMPLATES = (
    "{name} is a {species} {char_class} whose {background} past shaped a destiny written in "
    "starlight and shadow. They roam the galaxy seeking purpose, leaving legends in their wake.",
    "Born amid the chaos of a galaxy torn by conflict, {name} rose from {background} origins to "
    "become a formidable {char_class}. Their {species} heritage grants them unique strengths few "
    "others possess.",
    "The galaxy whispers the name {name}, a {species} of {background} stock who chose the path "
    "of a {char_class}. Whether by fate or force of will, their journey has only begun.",
)


class CharacterBuilder:
    """
    Holds one ``CharacterDraft`` and the option catalogs it chooses from.

    Catalogs come from the server; when a catalog cannot be fetched the
    bundled samples are used instead. Species, classes and backgrounds are
    fetched at most once per builder.
    """

    def __init__(self, gateway, rng: Optional[random.Random] = None):
        self.gateway = gateway
        self.draft = CharacterDraft()
        self.species: List[SpeciesOption] = []
        self.classes: List[ClassOption] = []
        self.backgrounds: List[BackgroundOption] = []
        self.powers: List[PowerOption] = []
        self.saved_character: Optional[Character] = None
        self._rng = rng or random.Random()

    # Catalogs

    async def load_initial_data(self) -> None:
        await self.load_species()
        await self.load_classes()
        await self.load_backgrounds()

    async def load_species(self) -> List[SpeciesOption]:
        if not self.species:
            try:
                self.species = await self.gateway.fetch_species()
            except GatewayError as e:
                logger.warning("Using bundled species", error=str(e))
                self.species = list(SPECIES_SAMPLES)
        return self.species

    async def load_classes(self) -> List[ClassOption]:
        if not self.classes:
            try:
                self.classes = await self.gateway.fetch_classes()
            except GatewayError as e:
                logger.warning("Using bundled classes", error=str(e))
                self.classes = list(CLASS_SAMPLES)
        return self.classes

    async def load_backgrounds(self) -> List[BackgroundOption]:
        if not self.backgrounds:
            try:
                self.backgrounds = await self.gateway.fetch_backgrounds()
            except GatewayError as e:
                logger.warning("Using bundled backgrounds", error=str(e))
                self.backgrounds = list(BACKGROUND_SAMPLES)
        return self.backgrounds

    async def load_powers(self) -> List[PowerOption]:
        """Force powers for force users, tech powers otherwise."""
        char_class = self.draft.char_class
        kind = "force" if char_class is not None and char_class.is_force_user else "tech"
        try:
            self.powers = await self.gateway.fetch_powers(kind)
        except GatewayError as e:
            logger.warning("Using bundled powers", kind=kind, error=str(e))
            self.powers = list(FORCE_POWER_SAMPLES if kind == "force" else TECH_POWER_SAMPLES)
        return self.powers

    @property
    def shows_powers_step(self) -> bool:
        char_class = self.draft.char_class
        return char_class is not None and (char_class.is_force_user or char_class.is_tech_user)

    # Selections

    def select_species(self, species: SpeciesOption) -> None:
        self.draft.species = species

    def select_class(self, char_class: ClassOption) -> None:
        """Choosing a class resets powers and seeds that class's starting kit."""
        self.draft.char_class = char_class
        self.draft.selected_powers = []
        self.draft.selected_equipment = starting_equipment(char_class.name)

    def select_background(self, background: BackgroundOption) -> None:
        self.draft.background = background

    def toggle_power(self, power: PowerOption) -> bool:
        """Add or remove ``power``; returns whether it is now selected."""
        selected = self.draft.selected_powers
        if any(p.id == power.id for p in selected):
            self.draft.selected_powers = [p for p in selected if p.id != power.id]
            return False
        selected.append(power)
        return True

    def toggle_equipment(self, index: int) -> None:
        if 0 <= index < len(self.draft.selected_equipment):
            item = self.draft.selected_equipment[index]
            item.is_selected = not item.is_selected

    # Backstory

    def local_backstory(self) -> str:
        draft = self.draft
        return self._rng.choice(BACKSTORY_TEMPLATES).format(
            name=draft.name.strip(),
            species=draft.species.name if draft.species else "Unknown",
            char_class=draft.char_class.name if draft.char_class else "Unknown",
            background=draft.background.name if draft.background else "Unknown",
        )

    def fill_backstory(self) -> str:
        self.draft.backstory = self.local_backstory()
        return self.draft.backstory

    # Save

    async def save(self) -> Character:
        """
        Create the character on the server.

        Raises:
            ValidationError: the draft is not ready to save
            GatewayError: the create request failed
        """
        errors = CharacterValidator.validate_draft(self.draft)
        if errors:
            raise ValidationError("; ".join(errors), field="draft")
        character = await self.gateway.create_character(self.draft.to_payload())
        self.saved_character = character
        return character

    def reset(self) -> None:
        """Discard the draft."""
        self.draft = CharacterDraft()
        self.saved_character = None
