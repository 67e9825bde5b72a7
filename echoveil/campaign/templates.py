"""Built-in campaign templates offered when starting a new campaign."""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional


class TemplateDifficulty(Enum):
    EASY = "Easy"
    MODERATE = "Moderate"
    HARD = "Hard"
    BRUTAL = "Brutal"

    @property
    def stars(self) -> int:
        return list(TemplateDifficulty).index(self) + 1


@dataclass(frozen=True)
class CampaignTemplate:
    id: str
    title: str
    era: str
    description: str
    difficulty: TemplateDifficulty


OUTER_RIM_JOB = CampaignTemplate(
    id="outer-rim-job",
    title="Outer Rim Job",
    era="Sovereignty Era",
    description=(
        "A shady cargo run turns deadly when you discover what's really in those "
        "crates. Smugglers, bounty hunters, and desperate choices await beyond the Core."
    ),
    difficulty=TemplateDifficulty.MODERATE,
)

TIDECALLER_ACADEMY = CampaignTemplate(
    id="jedi-academy",
    title="Tidecaller Academy",
    era="New Republic",
    description=(
        "Warden Aelith has taken you as an Initiate. But the Void whispers, and not "
        "every Tidecaller survives their trials. How will you face your destiny?"
    ),
    difficulty=TemplateDifficulty.HARD,
)

COALITION_CELL = CampaignTemplate(
    id="rebel-cell",
    title="Fractured Coalition Cell",
    era="Galactic Civil War",
    description=(
        "Deep in Sovereignty space, your small cell of Fractured fighters fights for "
        "survival. Every mission could be your last, and the Sovereignty is always watching."
    ),
    difficulty=TemplateDifficulty.HARD,
)

SANDBOX = CampaignTemplate(
    id="sandbox",
    title="Sandbox",
    era="Your Choice",
    description=(
        "No rails, no script. The AI Game Master creates a galaxy around your "
        "decisions. Define your era, your faction, your story."
    ),
    difficulty=TemplateDifficulty.EASY,
)

BUILTIN_TEMPLATES: List[CampaignTemplate] = [OUTER_RIM_JOB, TIDECALLER_ACADEMY, COALITION_CELL, SANDBOX]

_BY_ID: Dict[str, CampaignTemplate] = {template.id: template for template in BUILTIN_TEMPLATES}


def get_template(template_id: str) -> Optional[CampaignTemplate]:
    return _BY_ID.get(template_id)
