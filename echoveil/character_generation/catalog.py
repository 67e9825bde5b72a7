"""Bundled builder catalog used when the server's data endpoints are unavailable."""

from datetime import timedelta
from typing import List

from ..core.serialization import utcnow
from .models import (
    AbilityStat,
    BackgroundOption,
    Character,
    ClassOption,
    EquipmentOption,
    PowerOption,
    SpeciesOption,
)

SPECIES_SAMPLES: List[SpeciesOption] = [
    SpeciesOption("arion", "Arion", ["Adaptable", "Ambitious", "Extra Skill"], {"any": 1},
                  "The most widespread species in the galaxy, valued for their ambition and adaptability."),
    SpeciesOption("sylari", "Sylari", ["Charismatic", "Resonant Crest", "Low-light Vision"], {"cha": 2, "dex": 1},
                  "Known for their bioluminescent crests and innate charm, Sylari are natural diplomats."),
    SpeciesOption("vrask", "Vrask", ["Powerful Build", "Natural Claws", "Fury"], {"str": 2, "con": 1},
                  "Large, powerful beings covered in banded grey-silver scales with a deep honor culture."),
    SpeciesOption("mirialan", "Mirialan", ["Veilborn", "Focused", "Acrobatic"], {"wis": 2, "dex": 1},
                  "Naturally attuned to the Veil, Mirialans are disciplined and spiritually aware."),
    SpeciesOption("zabrak", "Zabrak", ["Determined", "Pain Endurance", "Horns"], {"con": 1, "wis": 1},
                  "Strong-willed beings known for their horns and resistance to pain."),
    SpeciesOption("rodian", "Rodian", ["Natural Hunter", "Tracker", "Multi-Directional Eyes"], {"dex": 2},
                  "Patient hunters raised on stations and deep-space vessels, trusted nowhere and everywhere."),
    SpeciesOption("bothan", "Bothan", ["Natural Spy", "Intuitive", "Cunning"], {"int": 1, "cha": 1},
                  "Methodical thinkers whose information networks span the galaxy."),
    SpeciesOption("togruta", "Togruta", ["Pack Tactics", "Spatial Awareness", "Montrals"], {"wis": 1, "cha": 1},
                  "Slender beings with striking skin patterns and heightened Veil perception."),
]

CLASS_SAMPLES: List[ClassOption] = [
    ClassOption("guardian", "Tidecaller", 10, AbilityStat.STRENGTH,
                "Veil-wielding warriors who protect the Tide. Masters of Veilblade combat.", True, False),
    ClassOption("sentinel", "Warden", 8, AbilityStat.DEXTERITY,
                "Agile scouts who blend martial skill with Veil techniques and investigation.", True, False),
    ClassOption("consular", "Lorekeeper", 6, AbilityStat.WISDOM,
                "Diplomatic Veil users who wield powerful Veil powers over brute combat.", True, False),
    ClassOption("engineer", "Fabricant", 8, AbilityStat.INTELLIGENCE,
                "Tech specialists who modify weapons, control machines, and wield tech powers.", False, True),
    ClassOption("fighter", "Fighter", 10, AbilityStat.STRENGTH,
                "Master warriors trained in all forms of combat, unmatched in sustained fighting.", False, False),
    ClassOption("smuggler", "Smuggler", 8, AbilityStat.DEXTERITY,
                "Cunning operators who rely on luck, skill, and knowing when to run.", False, False),
    ClassOption("operative", "Operative", 8, AbilityStat.DEXTERITY,
                "Trained spies and assassins who excel at stealth and precision strikes.", False, False),
    ClassOption("scholar", "Scholar", 6, AbilityStat.INTELLIGENCE,
                "Brilliant minds who support allies with expertise, medicine, and tactics.", False, True),
]

BACKGROUND_SAMPLES: List[BackgroundOption] = [
    BackgroundOption("outlaw", "Outlaw", ["Deception", "Stealth"],
                     "You can always find a criminal safe house in any settlement."),
    BackgroundOption("soldier", "Soldier", ["Athletics", "Intimidation"],
                     "Your military rank earns respect. Soldiers in most armies will cooperate."),
    BackgroundOption("scavenger", "Scavenger", ["Perception", "Survival"],
                     "You find value in discarded tech and can salvage useful parts from wrecks."),
    BackgroundOption("tidecaller-initiate", "Tidecaller Initiate", ["Insight", "History"],
                     "Trained in the Tidecaller Order. Access Tidecaller resources and refuge in sanctuaries."),
    BackgroundOption("bounty-hunter", "Bounty Hunter", ["Perception", "Investigation"],
                     "Contacts in criminal networks. You can get intel on any target for the right price."),
    BackgroundOption("noble", "Noble", ["Persuasion", "History"],
                     "Born to wealth. You have access to the upper echelons of galactic society."),
    BackgroundOption("pilot", "Pilot", ["Piloting", "Acrobatics"],
                     "Extensive flight experience. Acquiring a ship or passage is rarely a problem."),
    BackgroundOption("tech-specialist", "Tech Specialist", ["Technology", "Investigation"],
                     "Expert with droids and tech. You can maintain any technological device."),
]

FORCE_POWER_SAMPLES: List[PowerOption] = [
    PowerOption("veil-push", "Veil Push", 0, "force", "Instant", "Push a creature or object with the Veil.", "At-will"),
    PowerOption("veil-pull", "Veil Pull", 0, "force", "Instant", "Pull a nearby object into your hand.", "At-will"),
    PowerOption("sense-veil", "Sense Veil", 0, "force", "Concentration",
                "Sense Veil emanations of nearby living beings.", "At-will"),
    PowerOption("veil-bond", "Veil Bond", 1, "force", "1 hour", "Create a mental link with a willing creature.", "2 FP"),
    PowerOption("veil-blind", "Veil Blind", 1, "force", "1 minute", "Blind a target with surging Veil energy.", "2 FP"),
    PowerOption("veil-absorb", "Veil Absorb", 1, "force", "Instant", "Absorb Veil damage that would harm you.", "2 FP"),
]

TECH_POWER_SAMPLES: List[PowerOption] = [
    PowerOption("minor-hologram", "Minor Hologram", 0, "tech", "1 minute",
                "Create a small holographic image or sound.", "At-will"),
    PowerOption("shock", "Shock", 0, "tech", "Instant", "Deliver a jolt of electricity to a target.", "At-will"),
    PowerOption("repair-droid", "Repair Droid", 0, "tech", "Instant",
                "Restore 1d6 hit points to a droid or construct.", "At-will"),
    PowerOption("overcharge", "Overcharge", 1, "tech", "Instant",
                "Supercharge a weapon for extra damage on next attack.", "2 TP"),
    PowerOption("decryption", "Decryption", 1, "tech", "10 min", "Slice through electronic security systems.", "2 TP"),
    PowerOption("flash-bang", "Flash Bang", 1, "tech", "Instant", "Throw a tech grenade that blinds and deafens.", "2 TP"),
]


def starting_equipment(class_name: str) -> List[EquipmentOption]:
    """Default kit for a class; every item starts selected."""
    items = [
        EquipmentOption("basic-clothes", "Basic Clothing", "armor", 2.0, True, "Standard adventuring outfit."),
        EquipmentOption("utility-belt", "Utility Belt", "gear", 0.5, True, "Holds up to 20 lbs of small items."),
        EquipmentOption("medpac", "Medpac", "consumable", 1.0, True, "Restores 2d4+2 hit points."),
        EquipmentOption("comlink", "Comlink", "gear", 0.25, False, "Short-range communicator, 1-mile range."),
    ]
    key = class_name.lower()
    if key in ("tidecaller", "fighter", "warden"):
        items.append(EquipmentOption("veilblade", "Veilblade", "weapon", 1.0, True,
                                     "1d8 energy, finesse, versatile (1d10)."))
        items.append(EquipmentOption("light-armor", "Light Battle Armor", "armor", 13.0, True,
                                     "AC 12 + DEX modifier."))
    elif key in ("smuggler", "operative"):
        items.append(EquipmentOption("blaster-pistol", "Blaster Pistol", "weapon", 2.0, True,
                                     "1d6 energy, range 40/160 ft."))
        items.append(EquipmentOption("holdout-blaster", "Holdout Blaster", "weapon", 0.5, False,
                                     "1d4 energy, concealable, 30/120 ft."))
    elif key in ("fabricant", "scholar"):
        items.append(EquipmentOption("techblade", "Techblade", "weapon", 2.0, True, "1d6 kinetic, finesse."))
        items.append(EquipmentOption("tech-kit", "Tech Kit", "gear", 4.0, True, "Required for casting tech powers."))
    elif key == "lorekeeper":
        items.append(EquipmentOption("veil-staff", "Veil-imbued Staff", "weapon", 3.0, True,
                                     "1d6 kinetic, versatile (1d8), focus."))
        items.append(EquipmentOption("robes", "Lorekeeper Robes", "armor", 4.0, True,
                                     "AC 10 + WIS modifier (Veil Focus)."))
    else:
        items.append(EquipmentOption("blaster-pistol", "Blaster Pistol", "weapon", 2.0, True,
                                     "1d6 energy, range 40/160 ft."))
    return items


def demo_characters() -> List[Character]:
    """Offline roster shown when the character list cannot be fetched."""
    now = utcnow()
    return [
        Character(id="demo-1", name="Kael Voss", species="Miraluka", char_class="Guardian",
                  level=7, experience_points=23_000, current_hp=45, max_hp=68,
                  ac=16, force_points=12, last_modified=now - timedelta(hours=1)),
        Character(id="demo-2", name="Zara Teth", species="Twi'lek", char_class="Sentinel",
                  level=3, experience_points=2_100, current_hp=22, max_hp=28,
                  ac=14, force_points=6, last_modified=now - timedelta(days=1)),
        Character(id="demo-3", name="Brom Skalos", species="Zabrak", char_class="Engineer",
                  level=5, experience_points=14_000, current_hp=38, max_hp=42,
                  ac=17, force_points=0, last_modified=now - timedelta(hours=2)),
        Character(id="demo-4", name="Lyss Orann", species="Human", char_class="Consular",
                  level=4, experience_points=5_500, current_hp=30, max_hp=32,
                  ac=13, force_points=20, last_modified=now - timedelta(days=2)),
    ]
