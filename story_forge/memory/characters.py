"""Unified character model - tiered character records.

A character starts at the minimal tier (name, role, a short description) and
can be elaborated to balanced (physiology, core psychology, backstory, voice)
and then detailed (full Egri three-dimensional model, evolution, links).
Which payload sections are present is fixed by the tier:

    minimal   -> basic
    balanced  -> basic + balanced
    detailed  -> basic + balanced + detailed

Records are frozen; upgrades and edits produce new instances.
"""

import logging
import uuid
from datetime import datetime
from enum import StrEnum
from typing import Any, ClassVar, Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

from story_forge.utils.placeholders import is_empty_value

logger = logging.getLogger(__name__)


class CharacterRole(StrEnum):
    """Narrative role a character plays in the story."""

    PROTAGONIST = "protagonist"
    ANTAGONIST = "antagonist"
    SECONDARY_ANTAGONIST = "secondary-antagonist"
    LOVE_INTEREST = "love-interest"
    MENTOR = "mentor"
    ALLY = "ally"
    RIVAL = "rival"
    FAMILY = "family"
    FRIEND = "friend"
    AUTHORITY_FIGURE = "authority-figure"
    COMIC_RELIEF = "comic-relief"
    WILDCARD = "wildcard"
    ENSEMBLE = "ensemble"
    CATALYST = "catalyst"
    MIRROR = "mirror"
    THRESHOLD = "threshold"


class CharacterComplexity(StrEnum):
    """Elaboration tier of a character record."""

    MINIMAL = "minimal"
    BALANCED = "balanced"
    DETAILED = "detailed"


class EditedBy(StrEnum):
    """Who last touched a character's content."""

    USER = "user"
    AI = "ai"


TIER_ORDER: tuple[CharacterComplexity, ...] = (
    CharacterComplexity.MINIMAL,
    CharacterComplexity.BALANCED,
    CharacterComplexity.DETAILED,
)

ROLE_ARCHETYPES: dict[CharacterRole, str] = {
    CharacterRole.PROTAGONIST: "Hero",
    CharacterRole.ANTAGONIST: "Villain",
    CharacterRole.SECONDARY_ANTAGONIST: "Secondary Antagonist",
    CharacterRole.LOVE_INTEREST: "Love Interest",
    CharacterRole.MENTOR: "Mentor",
    CharacterRole.ALLY: "Ally",
    CharacterRole.RIVAL: "Rival",
    CharacterRole.FAMILY: "Family Member",
    CharacterRole.FRIEND: "Friend",
    CharacterRole.AUTHORITY_FIGURE: "Authority Figure",
    CharacterRole.COMIC_RELIEF: "Comic Relief",
    CharacterRole.WILDCARD: "Wildcard",
    CharacterRole.ENSEMBLE: "Ensemble",
    CharacterRole.CATALYST: "Catalyst",
    CharacterRole.MIRROR: "Mirror",
    CharacterRole.THRESHOLD: "Threshold Guardian",
}


def tier_rank(complexity: CharacterComplexity | str) -> int:
    """Position of a tier in TIER_ORDER (minimal=0)."""
    return TIER_ORDER.index(CharacterComplexity(complexity))


def archetype_for_role(role: CharacterRole | str) -> str:
    """Display archetype for a role, "Supporting Character" for anything unknown."""
    try:
        return ROLE_ARCHETYPES[CharacterRole(role)]
    except ValueError:
        return "Supporting Character"


# ========== Basic tier ==========


class CharacterBasic(BaseModel):
    """Content present at every tier."""

    description: str = ""
    archetype: str | None = None
    premise_function: str | None = Field(
        default=None, description="How the character tests or proves the story premise"
    )

    model_config = ConfigDict(frozen=True)


# ========== Balanced tier ==========


class SimplifiedPhysiology(BaseModel):
    """Physical essentials used for casting and image prompts."""

    age: str | int | None = None
    gender: str = ""
    appearance: str = ""
    build: str | None = None
    health: str | None = None
    key_traits: list[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class CorePsychology(BaseModel):
    """Want/need/flaw core that drives the character arc."""

    core_value: str = ""
    opposing_value: str | None = None
    want: str = ""
    need: str = ""
    primary_flaw: str = ""
    secondary_flaws: list[str] = Field(default_factory=list)
    temperament: list[str] = Field(default_factory=list)
    key_fears: list[str] = Field(default_factory=list)
    key_strengths: list[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class BasicVoice(BaseModel):
    """How the character speaks."""

    speech_pattern: str = ""
    vocabulary: str | None = None
    quirks: list[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class CharacterBalanced(BaseModel):
    """Payload added by the minimal -> balanced upgrade."""

    physiology: SimplifiedPhysiology
    psychology: CorePsychology
    backstory: str = ""
    voice_profile: BasicVoice

    model_config = ConfigDict(frozen=True)

    REQUIRED_FIELDS: ClassVar[tuple[str, ...]] = (
        "physiology.gender",
        "physiology.appearance",
        "physiology.key_traits",
        "psychology.core_value",
        "psychology.want",
        "psychology.need",
        "psychology.primary_flaw",
        "psychology.temperament",
        "psychology.key_fears",
        "psychology.key_strengths",
        "backstory",
        "voice_profile.speech_pattern",
    )


# ========== Detailed tier ==========


class DetailedSection(BaseModel):
    """Opaque, versioned sub-document of the detailed tier.

    The shape of full physiology/sociology/psychology varies with whoever
    generated it, so only a small set of required keys is enforced. Every
    other key is kept as a pydantic extra and round-trips through
    model_dump() untouched.
    """

    schema_version: int = 1

    model_config = ConfigDict(extra="allow", frozen=True)

    required_keys: ClassVar[tuple[str, ...]] = ()

    def get(self, key: str, default: Any = None) -> Any:
        """Dict-style access to a (possibly extra) key."""
        return self.model_dump().get(key, default)

    def missing_keys(self) -> list[str]:
        """Required keys that are absent or placeholder-only."""
        data = self.model_dump()
        return [key for key in self.required_keys if is_empty_value(data.get(key))]


class FullPhysiology(DetailedSection):
    """Egri physiology dimension."""

    required_keys: ClassVar[tuple[str, ...]] = ("age", "gender", "appearance")


class FullSociology(DetailedSection):
    """Egri sociology dimension."""

    required_keys: ClassVar[tuple[str, ...]] = ("occupation", "education", "home_life")


class FullPsychology(DetailedSection):
    """Egri psychology dimension."""

    required_keys: ClassVar[tuple[str, ...]] = ("want", "need", "temperament")


class EvolutionStage(BaseModel):
    """One stage of a character's transformation across the story."""

    label: str
    description: str = ""

    model_config = ConfigDict(extra="allow", frozen=True)


class CharacterRelationshipLink(BaseModel):
    """A relationship as seen from one character's detailed record."""

    character_name: str
    relationship_type: str = ""
    description: str = ""

    model_config = ConfigDict(frozen=True)


class CharacterDetailed(BaseModel):
    """Payload added by the balanced -> detailed upgrade."""

    full_physiology: FullPhysiology
    full_sociology: FullSociology
    full_psychology: FullPsychology
    character_evolution: list[EvolutionStage] = Field(default_factory=list)
    relationships: list[CharacterRelationshipLink] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    def missing_keys(self) -> list[str]:
        """Dotted paths of required section keys that are empty."""
        missing: list[str] = []
        for section_name in ("full_physiology", "full_sociology", "full_psychology"):
            section: DetailedSection = getattr(self, section_name)
            missing.extend(f"{section_name}.{key}" for key in section.missing_keys())
        return missing


# ========== Character ==========


def _new_character_id() -> str:
    return f"char_{uuid.uuid4().hex[:12]}"


class UnifiedCharacter(BaseModel):
    """A story character at one of the three complexity tiers."""

    id: str = Field(default_factory=_new_character_id)
    name: str
    role: CharacterRole
    complexity: CharacterComplexity = CharacterComplexity.MINIMAL
    basic: CharacterBasic = Field(default_factory=CharacterBasic)
    balanced: CharacterBalanced | None = None
    detailed: CharacterDetailed | None = None
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)
    ai_generated: bool = False
    last_edited_by: EditedBy | None = None

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def check_tier_payloads(self) -> Self:
        """Enforce that payload sections match the complexity tier exactly."""
        wants_balanced = self.complexity in (
            CharacterComplexity.BALANCED,
            CharacterComplexity.DETAILED,
        )
        wants_detailed = self.complexity == CharacterComplexity.DETAILED
        if wants_balanced != (self.balanced is not None):
            raise ValueError(
                f"Character '{self.name}' at tier {self.complexity} "
                f"{'requires' if wants_balanced else 'must not have'} a balanced payload"
            )
        if wants_detailed != (self.detailed is not None):
            raise ValueError(
                f"Character '{self.name}' at tier {self.complexity} "
                f"{'requires' if wants_detailed else 'must not have'} a detailed payload"
            )
        return self

    @property
    def archetype(self) -> str:
        """Authored archetype, or the default archetype for the role."""
        if self.basic.archetype and not is_empty_value(self.basic.archetype):
            return self.basic.archetype
        return archetype_for_role(self.role)

    @classmethod
    def from_legacy(cls, data: dict[str, Any]) -> Self:
        """Convert a pre-tier character dict into a minimal-tier character.

        Legacy records only carry name/archetype/description; the role is
        inferred from the archetype text.

        Args:
            data: Legacy character dict (camelCase keys).

        Returns:
            A new minimal-tier UnifiedCharacter.
        """
        archetype = data.get("archetype") or None
        archetype_lower = (archetype or "").lower()
        if "hero" in archetype_lower:
            role = CharacterRole.PROTAGONIST
        elif "villain" in archetype_lower:
            role = CharacterRole.ANTAGONIST
        else:
            role = CharacterRole.ALLY

        now = datetime.now()
        created_at = data.get("createdAt") or now
        logger.debug(
            "Converting legacy character %r (archetype=%r) -> role %s",
            data.get("name"),
            archetype,
            role,
        )
        return cls(
            id=data.get("id") or _new_character_id(),
            name=data["name"],
            role=role,
            complexity=CharacterComplexity.MINIMAL,
            basic=CharacterBasic(
                description=data.get("description") or "",
                archetype=archetype,
                premise_function=data.get("premiseFunction") or None,
            ),
            created_at=created_at,
            updated_at=now,
            ai_generated=bool(data.get("aiGenerated", False)),
            last_edited_by=EditedBy.USER,
        )


class RelationshipRecord(BaseModel):
    """An authored relationship between two characters, matched by name in either order."""

    character1: str
    character2: str
    relationship_type: str = ""
    description: str = ""
    significance: str | None = None

    model_config = ConfigDict(frozen=True)

    def involves(self, name_a: str, name_b: str) -> bool:
        """True if this record links the two names, in either order."""
        return (self.character1 == name_a and self.character2 == name_b) or (
            self.character1 == name_b and self.character2 == name_a
        )

    def other(self, name: str) -> str | None:
        """The partner of name in this record, or None if name is not a participant."""
        if self.character1 == name:
            return self.character2
        if self.character2 == name:
            return self.character1
        return None
