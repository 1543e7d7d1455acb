"""
Catalog data for the Thrune rules engine.

Heritages, cultures, archetypes and the valid skill names are plain immutable
records. A `Catalog` bundles them and is built once at startup, then handed to
the cost resolver, the progression aggregator and the HTTP layer.

Lookups return None on a miss; callers decide the default (the cost resolver
treats a missing heritage/archetype as having no skills).
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple


@dataclass(frozen=True)
class Heritage:
    id: str
    name: str
    body: int
    stamina: int
    secondary_skills: Tuple[str, ...] = ()
    description: str = ""


@dataclass(frozen=True)
class Culture:
    id: str
    name: str
    heritage_id: str


@dataclass(frozen=True)
class Archetype:
    id: str
    name: str
    primary_skills: Tuple[str, ...] = ()
    secondary_skills: Tuple[str, ...] = ()
    description: str = ""


# Base Body/Stamina used when a heritage id does not resolve.
FALLBACK_BASE_BODY = 10
FALLBACK_BASE_STAMINA = 10


@dataclass(frozen=True)
class Catalog:
    skills: Tuple[str, ...]
    heritages: Tuple[Heritage, ...] = ()
    cultures: Tuple[Culture, ...] = ()
    archetypes: Tuple[Archetype, ...] = ()

    _skill_set: FrozenSet[str] = field(init=False, repr=False, compare=False)
    _heritage_by_id: Dict[str, Heritage] = field(init=False, repr=False, compare=False)
    _archetype_by_id: Dict[str, Archetype] = field(init=False, repr=False, compare=False)
    _culture_by_id: Dict[str, Culture] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        # frozen: indexes are set once through object.__setattr__
        object.__setattr__(self, "_skill_set", frozenset(self.skills))
        object.__setattr__(self, "_heritage_by_id", {h.id: h for h in self.heritages})
        object.__setattr__(self, "_archetype_by_id", {a.id: a for a in self.archetypes})
        object.__setattr__(self, "_culture_by_id", {c.id: c for c in self.cultures})

    def is_valid_skill(self, name: str) -> bool:
        return name in self._skill_set

    def heritage(self, heritage_id: Optional[str]) -> Optional[Heritage]:
        if not heritage_id:
            return None
        return self._heritage_by_id.get(heritage_id)

    def archetype(self, archetype_id: Optional[str]) -> Optional[Archetype]:
        if not archetype_id:
            return None
        return self._archetype_by_id.get(archetype_id)

    def culture(self, culture_id: Optional[str]) -> Optional[Culture]:
        if not culture_id:
            return None
        return self._culture_by_id.get(culture_id)

    def cultures_for(self, heritage_id: str) -> List[Culture]:
        return [c for c in self.cultures if c.heritage_id == heritage_id]

    def attribute_bases(self, heritage_id: Optional[str]) -> Tuple[int, int]:
        h = self.heritage(heritage_id)
        if h is None:
            return (FALLBACK_BASE_BODY, FALLBACK_BASE_STAMINA)
        return (h.body, h.stamina)


def build_catalog(
    skills: Iterable[str],
    heritages: Iterable[Heritage] = (),
    archetypes: Iterable[Archetype] = (),
    cultures: Iterable[Culture] = (),
) -> Catalog:
    # dedupe skills, keep first-seen order
    seen: Dict[str, None] = {}
    for s in skills:
        seen.setdefault(s, None)
    return Catalog(
        skills=tuple(seen.keys()),
        heritages=tuple(heritages),
        cultures=tuple(cultures),
        archetypes=tuple(archetypes),
    )


# -------------------------
# Shipped game data
# -------------------------
SKILLS: Tuple[str, ...] = (
    "Alchemy", "Alertness", "Ambidexterity", "Armor Smithing", "Armor Training (Light)",
    "Armor Training (Medium)", "Armor Training (Heavy)", "Backstab", "Bard", "Blacksmithing",
    "Blinding", "Brutal Blow", "Cheat", "Chirurgeon", "Cooking", "Counterspell", "Courage",
    "Dexterity Armor", "Disarm", "Dodge", "Farming", "First Aid", "Fortify Armor", "Hamstring",
    "Healing", "Herbalism", "Hide", "Hunting", "Intercept", "Intimidation", "Iron Will",
    "Knockback", "Knockout Strike", "Lockpicking", "Lore (Any)", "Lore (Engineering)",
    "Lore (Magic)", "Lore (Monster)", "Lore (Nature)", "Lumberjack", "Magic Path (Apprentice): Path of Arcane Mind",
    "Magic Path (Journeyman): Path of Arcane Mind", "Magic Path (Master): Path of Arcane Mind",
    "Magic Path (Apprentice): Path of Flesh", "Magic Path (Journeyman): Path of Flesh",
    "Magic Path (Master): Path of Flesh", "Magic Path (Apprentice): Path of Thorns",
    "Magic Path (Journeyman): Path of Thorns", "Magic Path (Master): Path of Thorns",
    "Magic Path (Apprentice): Path of the Chill Wind", "Magic Path (Journeyman): Path of the Chill Wind",
    "Magic Path (Master): Path of the Chill Wind", "Magic Path (Apprentice): Path of the Eternal Flame",
    "Magic Path (Journeyman): Path of the Eternal Flame", "Magic Path (Master): Path of the Eternal Flame",
    "Magic Path (Apprentice): Path of Shadows", "Magic Path (Journeyman): Path of Shadows",
    "Magic Path (Master): Path of Shadows", "Marksmanship", "Meditation", "Mercantile", "Mining",
    "Parry", "Piercing Strike", "Play Dead", "Plead for Mercy", "Quick Search", "Rapidfire",
    "Riposte", "Scavenging", "Scribe", "Shield", "Shield Master", "Socialite", "Stealth",
    "Stored Spell", "Taunt", "Toughness", "Trader", "Trapper", "Weapon Focus (Any)",
    "Weapon Focus (Small)", "Weapon Focus (Medium)", "Weapon Focus (Large)", "Weapon Focus (Bow)",
    "Weapon Focus (Crossbow)", "Weapon Focus (Firearms)", "Weapon Focus (Polearm)",
    "Weapon Focus (Staff)", "Weapon Focus (Thrown)", "Weapon Focus (Unarmed)",
    "Weapon Proficiency (Small)", "Weapon Proficiency (Medium)", "Weapon Proficiency (Large)",
    "Weapon Proficiency (Bow)", "Weapon Proficiency (Crossbow)", "Weapon Proficiency (Firearms)",
    "Weapon Proficiency (Polearm)", "Weapon Proficiency (Staff)", "Weapon Proficiency (Thrown)",
    "Weapon Smithing", "Wealth", "Withdraw"
)

HERITAGES: Tuple[Heritage, ...] = (
    Heritage(
        id="ar-nura",
        name="Ar-Nura",
        body=8,
        stamina=12,
        secondary_skills=("First Aid", "Bard", "Herbalism", "Meditation"),
        description="The eldest heritage, claiming to be firstborn with vast empires and ancient libraries",
    ),
    Heritage(
        id="human",
        name="Human",
        body=10,
        stamina=10,
        secondary_skills=("First Aid", "Farming", "Lumberjack", "Mining"),
        description="The most populous and widespread people throughout the realm",
    ),
    Heritage(
        id="stoneborn",
        name="Stoneborn",
        body=15,
        stamina=5,
        secondary_skills=("Blacksmithing", "Cooking", "Lumberjack", "Mining"),
        description="Sturdy and stoic people from beneath the mountains, known for craftsmanship",
    ),
    Heritage(
        id="ughol",
        name="Ughol",
        body=12,
        stamina=8,
        secondary_skills=("Quick Search", "Scavenging", "Taunt", "Trapper"),
        description="Commonly called greenskins, they band together in motley crews for protection",
    ),
    Heritage(
        id="rystarri",
        name="Rystarri",
        body=12,
        stamina=8,
        secondary_skills=("Herbalism", "Intercept", "Mercantile", "Scavenging"),
        description="A nomadic feline people known as Bringers of the Lost",
    ),
)

CULTURES: Tuple[Culture, ...] = (
    Culture(id="eisolae", name="Eisolae", heritage_id="ar-nura"),
    Culture(id="jhaniada", name="Jhani'ada", heritage_id="ar-nura"),
    Culture(id="viskela", name="Viskela", heritage_id="ar-nura"),
    Culture(id="erdanian", name="Erdanian", heritage_id="human"),
    Culture(id="khemasuri", name="Khemasuri", heritage_id="human"),
    Culture(id="saronean", name="Saronean", heritage_id="human"),
    Culture(id="vyaldur", name="Vyaldur", heritage_id="human"),
    Culture(id="dargadian", name="Dargadian", heritage_id="stoneborn"),
    Culture(id="akhunrasi", name="Akhunrasi", heritage_id="stoneborn"),
    Culture(id="kahrnuthaen", name="Kahrnuthaen", heritage_id="stoneborn"),
    Culture(id="gragrimn", name="Gragrimn", heritage_id="ughol"),
    Culture(id="skraata", name="Skraata", heritage_id="ughol"),
    Culture(id="voruk", name="Voruk", heritage_id="ughol"),
    Culture(id="maolawki", name="Maolawki", heritage_id="rystarri"),
    Culture(id="yarowi", name="Yarowi", heritage_id="rystarri"),
)

ARCHETYPES: Tuple[Archetype, ...] = (
    Archetype(
        id="advisor",
        name="Advisor",
        primary_skills=("Bard", "Courage", "First Aid", "Lore (Any)", "Mercantile", "Scribe", "Socialite", "Wealth", "Weapon Focus (Staff)", "Withdraw"),
        secondary_skills=("Intimidation", "Meditation", "Plead for Mercy"),
    ),
    Archetype(
        id="alchemist",
        name="Alchemist",
        primary_skills=("Alchemy", "Lore (Magic)", "Meditation", "Magic Path (Apprentice): Path of Flesh", "Magic Path (Journeyman): Path of Flesh", "Magic Path (Apprentice): Path of Thorns", "Magic Path (Journeyman): Path of Thorns", "Stored Spell", "Weapon Proficiency (Staff)", "Herbalism"),
        secondary_skills=("Magic Path (Master): Path of Flesh", "Magic Path (Master): Path of Thorns", "First Aid"),
    ),
    Archetype(
        id="archer",
        name="Archer",
        primary_skills=("Alertness", "Dexterity Armor", "Hide", "Hunting", "Marksmanship", "Rapidfire", "Weapon Focus (Bow)", "Weapon Proficiency (Bow)", "Weapon Focus (Medium)", "Weapon Proficiency (Medium)"),
        secondary_skills=("Dodge", "Stealth", "Trapper"),
    ),
    Archetype(
        id="berserker",
        name="Berserker",
        primary_skills=("Armor Training (Light)", "Brutal Blow", "Courage", "Intimidation", "Knockback", "Taunt", "Toughness", "Weapon Focus (Any)", "Weapon Proficiency (Large, Medium)", "Withdraw"),
        secondary_skills=("Armor Training (Medium)", "Iron Will", "Weapon Focus (Unarmed)"),
    ),
    Archetype(
        id="bodyguard",
        name="Bodyguard",
        primary_skills=("Alertness", "Armor Training (Light)", "Courage", "First Aid", "Intercept", "Parry", "Shield", "Toughness", "Weapon Focus (Medium)", "Weapon Proficiency (Medium)"),
        secondary_skills=("Armor Training (Medium)", "Dodge", "Intimidation"),
    ),
    Archetype(
        id="chef",
        name="Chef",
        primary_skills=("Alchemy", "Alertness", "Cooking", "Courage", "Disarm", "First Aid", "Hamstring", "Intimidation", "Mercantile", "Wealth"),
        secondary_skills=("Herbalism", "Trader", "Weapon Focus (Small)"),
    ),
    Archetype(
        id="courtesan",
        name="Courtesan",
        primary_skills=("Bard", "Cooking", "First Aid", "Healing", "Meditation", "Plead for Mercy", "Scribe", "Socialite", "Wealth", "Withdraw"),
        secondary_skills=("Dodge", "Herbalism", "Mercantile"),
    ),
    Archetype(
        id="ecomancer",
        name="Ecomancer",
        primary_skills=("Alchemy", "First Aid", "Healing", "Herbalism", "Hide", "Lore (Nature)", "Magic Path (Apprentice): Path of Flesh", "Magic Path (Journeyman): Path of Flesh", "Magic Path (Apprentice): Path of Thorns", "Magic Path (Journeyman): Path of Thorns", "Meditation", "Weapon Proficiency (Staff or Bow)"),
        secondary_skills=("Stored Spell", "Magic Path (Master): Path of Flesh", "Magic Path (Master): Path of Thorns"),
    ),
    Archetype(
        id="elementalist",
        name="Elementalist",
        primary_skills=("Armor Training (Light)", "Magic Path (Apprentice): Path of the Chill Wind", "Magic Path (Journeyman): Path of the Chill Wind", "Magic Path (Apprentice): Path of the Eternal Flame", "Magic Path (Journeyman): Path of the Eternal Flame", "Meditation", "Socialite", "Stored Spell", "Toughness", "Weapon Proficiency (Staff)"),
        secondary_skills=("Counterspell", "Magic Path (Master): Path of the Chill Wind", "Magic Path (Master): Path of the Eternal Flame"),
    ),
    Archetype(
        id="entertainer",
        name="Entertainer",
        primary_skills=("Bard", "Cheat", "Dexterity Armor", "Disarm", "Dodge", "Hide", "Play Dead", "Plead for Mercy", "Socialite", "Taunt"),
        secondary_skills=("Backstab", "Weapon Focus (Small)", "Wealth"),
    ),
    Archetype(
        id="erudite",
        name="Erudite",
        primary_skills=("Counterspell", "Lore (Magic)", "Magic Path (Apprentice): Path of Arcane Mind", "Magic Path (Journeyman): Path of Arcane Mind", "Magic Path (Apprentice): Path of Chill Wind", "Magic Path (Journeyman): Path of Chill Wind", "Magic Path (Apprentice): Path of Eternal Flame", "Magic Path (Journeyman): Path of Eternal Flame", "Stored Spell", "Wealth", "Weapon Proficiency (Staff)"),
        secondary_skills=("Magic Path (Master): Path of Arcane Mind", "Magic Path (Master): Path of Chill Wind", "Magic Path (Master): Path of Eternal Flame"),
    ),
    Archetype(
        id="farmer",
        name="Farmer",
        primary_skills=("Bard", "Dodge", "Farming", "First Aid", "Herbalism", "Hunting", "Intimidation", "Knockback", "Plead for Mercy", "Weapon Proficiency (Polearm)"),
        secondary_skills=("Trader", "Trapper", "Weapon Focus (Polearm or Unarmed)"),
    ),
    Archetype(
        id="forester",
        name="Forester",
        primary_skills=("Courage", "First Aid", "Herbalism", "Hunting", "Intimidation", "Lore (Nature)", "Lumberjack", "Rapidfire", "Weapon Proficiency (Bow, Crossbow, or Medium)", "Weapon Focus (Bow, Crossbow, or Medium)"),
        secondary_skills=("Hide", "Stealth", "Trapper"),
    ),
    Archetype(
        id="forgewright",
        name="Forgewright",
        primary_skills=("Armor Smithing", "Armor Training (Medium)", "Blacksmithing", "Fortify Armor", "Mercantile", "Mining", "Scavenging", "Wealth", "Weapon Proficiency (Medium)", "Weapon Smithing"),
        secondary_skills=("Toughness", "Weapon Focus (Small or Medium)", "Shield"),
    ),
    Archetype(
        id="gunslinger",
        name="Gunslinger",
        primary_skills=("Alertness", "Ambidexterity", "Armor Training (Light)", "Dexterity Armor", "Hunting", "Marksmanship", "Rapidfire", "Weapon Focus (Medium, Crossbow, or Firearm)", "Weapon Proficiency (Medium, Crossbow, or Firearm)", "Withdraw"),
        secondary_skills=("Armor Training (Medium)", "Courage", "Iron Will"),
    ),
    Archetype(
        id="juggernaut",
        name="Juggernaut",
        primary_skills=("Armor Training (Medium)", "Armor Training (Heavy)", "Brutal Blow", "Courage", "Fortify Armor", "Knockback", "Shield", "Toughness", "Weapon Proficiency (Medium, Large, or Polearm)", "Weapon Focus (Medium, Large, or Polearm)"),
        secondary_skills=("Intimidation", "Iron Will", "Shield Master"),
    ),
    Archetype(
        id="merchant",
        name="Merchant",
        primary_skills=("Courage", "Intimidation", "Knockback", "Mercantile", "Plead for Mercy", "Trader", "Wealth", "Weapon Proficiency (Staff)", "Weapon Focus (Small)", "Withdraw"),
        secondary_skills=("Scavenging", "Trapper", "Weapon Focus (Staff)"),
    ),
    Archetype(
        id="mystic",
        name="Mystic",
        primary_skills=("Alertness", "Dexterity Armor", "Iron Will", "Lore (Magic, Nature)", "Magic Path (Apprentice): Path of Arcane Mind", "Magic Path (Journeyman): Path of Arcane Mind", "Magic Path (Apprentice): Path of Flesh", "Magic Path (Journeyman): Path of Flesh", "Meditation", "Scribe", "Stored Spell", "Weapon Focus (Unarmed)"),
        secondary_skills=("Courage", "Magic Path (Master): Path of Arcane Mind", "Magic Path (Master): Path of Flesh"),
    ),
    Archetype(
        id="physician",
        name="Physician",
        primary_skills=("Alertness", "Blinding", "Chirurgeon", "Courage", "First Aid", "Hamstring", "Healing", "Herbalism", "Lore (Nature)", "Weapon Focus (Small)"),
        secondary_skills=("Mercantile", "Trader", "Wealth"),
    ),
    Archetype(
        id="rogue",
        name="Rogue",
        primary_skills=("Ambidexterity", "Armor Training (Light)", "Backstab", "Dexterity Armor", "Hide", "Lockpicking", "Parry", "Stealth", "Weapon Proficiency (Firearms, Medium, or Thrown)", "Weapon Focus (Small, Medium, or Thrown)"),
        secondary_skills=("Quick Search", "Knockout Strike", "Herbalism"),
    ),
    Archetype(
        id="scholar",
        name="Scholar",
        primary_skills=("Alertness", "Cheat", "First Aid", "Herbalism", "Hide", "Lore (Any)", "Meditation", "Scribe"),
        secondary_skills=("Play Dead", "Wealth", "Withdraw"),
    ),
    Archetype(
        id="scoundrel",
        name="Scoundrel",
        primary_skills=("Alertness", "Armor Training (Light)", "Backstab", "Cheat", "Hide", "Lockpicking", "Quick Search", "Stealth", "Weapon Proficiency (Medium or Thrown)", "Weapon Focus (Small, Medium, or Thrown)"),
        secondary_skills=("Dexterity Armor", "Scavenging", "Withdraw"),
    ),
    Archetype(
        id="shadowcaster",
        name="Shadowcaster",
        primary_skills=("Courage", "Hide", "Knockout Strike", "Lore (Magic)", "Magic Path (Apprentice): Path of Shadows", "Magic Path (Journeyman): Path of Shadows", "Meditation", "Stealth", "Weapon Focus (Small)", "Withdraw"),
        secondary_skills=("Counterspell", "Stored Spell", "Magic Path (Master): Path of Shadows"),
    ),
    Archetype(
        id="skirmisher",
        name="Skirmisher",
        primary_skills=("Ambidexterity", "Armor Training (Light)", "Dexterity Armor", "Disarm", "Dodge", "Intercept", "Parry", "Piercing Strike", "Riposte", "Weapon Proficiency (Medium, Staff, or Polearm)", "Weapon Focus (Small, Medium, or Polearm)"),
        secondary_skills=("Alertness", "Courage", "Taunt"),
    ),
    Archetype(
        id="slayer",
        name="Slayer",
        primary_skills=("Alertness", "Armor Training (Light)", "Brutal Blow", "Courage", "Hide", "Iron Will", "Lore (Monster)", "Parry", "Weapon Focus (Medium, Large, Polearm, or Thrown)", "Weapon Proficiency (Medium, Large, Polearm, or Thrown)"),
        secondary_skills=("Alchemy", "Hunting", "Stealth"),
    ),
    Archetype(
        id="soldier",
        name="Soldier",
        primary_skills=("Armor Training (Light)", "Armor Training (Medium)", "Brutal Blow", "Courage", "Disarm", "Parry", "Shield", "Weapon Focus (Any)", "Weapon Proficiency (Any)", "Toughness"),
        secondary_skills=("Armor Training (Heavy)", "Dexterity Armor", "Scavenging"),
    ),
    Archetype(
        id="spellblade",
        name="Spellblade",
        primary_skills=("Ambidexterity", "Armor Training (Light)", "Dexterity Armor", "Disarm", "Magic Path (Apprentice): Path of Arcane Mind", "Magic Path (Journeyman): Path of Arcane Mind", "Magic Path (Apprentice): Path of Eternal Flame", "Magic Path (Journeyman): Path of Eternal Flame", "Parry", "Weapon Focus (Medium)", "Weapon Proficiency (Medium)"),
        secondary_skills=("Magic Path (Journeyman): Path of the Chill Wind", "Magic Path (Journeyman): Path of the Eternal Flame", "Intercept"),
    ),
    Archetype(
        id="sorcerer",
        name="Sorcerer",
        primary_skills=("Counterspell", "Magic Path (Apprentice): Path of Arcane Mind", "Magic Path (Journeyman): Path of Arcane Mind", "Magic Path (Apprentice): Path of Eternal Flame", "Magic Path (Journeyman): Path of Eternal Flame", "Magic Path (Apprentice): Path of Flesh", "Magic Path (Journeyman): Path of Flesh", "Meditation", "Scribe", "Stored Spell"),
        secondary_skills=("Magic Path (Apprentice): Path of Shadows", "Magic Path (Apprentice): Path of Thorns", "Weapon Proficiency (Staff)"),
    ),
    Archetype(
        id="thaumaturgist",
        name="Thaumaturgist",
        primary_skills=("Alchemy", "Lore (Magic)", "Magic Path (Apprentice): Path of Arcane Mind", "Magic Path (Journeyman): Path of Arcane Mind", "Magic Path (Apprentice): Path of Chill Wind", "Magic Path (Journeyman): Path of Chill Wind", "Magic Path (Apprentice): Path of Shadows", "Magic Path (Journeyman): Path of Shadows", "Scribe", "Weapon Proficiency (Firearms, Staff)"),
        secondary_skills=("Magic Path (Master): Path of Arcane Mind", "Magic Path (Master): Path of Chill Wind", "Magic Path (Master): Path of Shadows"),
    ),
    Archetype(
        id="tinker",
        name="Tinker",
        primary_skills=("Alchemy", "Alertness", "Blacksmithing", "First Aid", "Fortify Armor", "Lockpicking", "Lore (Engineering)", "Scavenging", "Trader", "Trapper"),
        secondary_skills=("Armor Smithing", "Weapon Smithing", "Weapon Proficiency (Firearms)"),
    ),
    Archetype(
        id="warden",
        name="Warden",
        primary_skills=("Alertness", "Armor Training (Light)", "Courage", "Dexterity Armor", "First Aid", "Herbalism", "Intercept", "Parry", "Weapon Proficiency (Medium, Staff, or Firearms)", "Weapon Focus (Medium, Staff, or Firearms)"),
        secondary_skills=("Magic Path (Apprentice): Path of Thorns", "Magic Path (Journeyman): Path of Thorns", "Mercantile"),
    ),
    Archetype(
        id="wizard",
        name="Wizard",
        primary_skills=("Counterspell", "Lore (Magic)", "Magic Path (Apprentice): Path of Arcane Mind", "Magic Path (Journeyman): Path of Arcane Mind", "Magic Path (Apprentice): Path of Eternal Flame", "Magic Path (Journeyman): Path of Eternal Flame", "Magic Path (Apprentice): Path of Thorns", "Magic Path (Journeyman): Path of Thorns", "Scribe", "Stored Spell"),
        secondary_skills=("Magic Path (Master): Path of Arcane Mind", "Magic Path (Master): Eternal Flame", "Magic Path (Master): Path of Thorns"),
    ),
)


def default_catalog() -> Catalog:
    return build_catalog(SKILLS, HERITAGES, ARCHETYPES, CULTURES)
