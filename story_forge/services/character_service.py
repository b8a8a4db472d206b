"""Character service - tier upgrades for unified characters.

An upgrade moves a character exactly one tier forward. The new tier's payload
comes from a CharacterSynthesizer, is merged with whatever the author already
wrote (authored content always wins), validated and checked for required
fields. The upgrade is all-or-nothing: on any failure the caller gets the
original character back together with an error message.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any, Protocol, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from story_forge.memory.characters import (
    CharacterBalanced,
    CharacterComplexity,
    CharacterDetailed,
    CharacterRole,
    EditedBy,
    UnifiedCharacter,
)
from story_forge.settings import Settings
from story_forge.utils.exceptions import (
    CharacterSynthesisError,
    CharacterUpgradeError,
    InvalidUpgradeError,
    summarize_error,
)
from story_forge.utils.logging_config import log_context, log_performance
from story_forge.utils.placeholders import is_empty_value

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

DEFAULT_STORY_THEME = "personal growth"

# Required at the minimal tier (top-level dotted paths)
MINIMAL_REQUIRED_FIELDS: tuple[str, ...] = ("name", "basic.description")


class CharacterUpgradeDirection(StrEnum):
    """Supported single-step tier transitions."""

    MINIMAL_TO_BALANCED = "minimal-to-balanced"
    BALANCED_TO_DETAILED = "balanced-to-detailed"

    @property
    def source(self) -> CharacterComplexity:
        """Tier a character must be at to take this transition."""
        if self is CharacterUpgradeDirection.MINIMAL_TO_BALANCED:
            return CharacterComplexity.MINIMAL
        return CharacterComplexity.BALANCED

    @property
    def target(self) -> CharacterComplexity:
        """Tier the character ends up at."""
        if self is CharacterUpgradeDirection.MINIMAL_TO_BALANCED:
            return CharacterComplexity.BALANCED
        return CharacterComplexity.DETAILED


@dataclass(frozen=True)
class UpgradeOption:
    """A forward transition offered to the user for a character."""

    direction: CharacterUpgradeDirection
    title: str
    description: str
    benefits: tuple[str, ...] = ()


UPGRADE_OPTIONS: dict[CharacterComplexity, tuple[UpgradeOption, ...]] = {
    CharacterComplexity.MINIMAL: (
        UpgradeOption(
            direction=CharacterUpgradeDirection.MINIMAL_TO_BALANCED,
            title="Upgrade to Balanced",
            description="Add psychological depth and story integration",
            benefits=(
                "Want vs Need character arc",
                "Detailed psychology and motivations",
                "Physical appearance description",
                "Backstory and voice profile",
            ),
        ),
    ),
    CharacterComplexity.BALANCED: (
        UpgradeOption(
            direction=CharacterUpgradeDirection.BALANCED_TO_DETAILED,
            title="Upgrade to Detailed",
            description="Full Egri three-dimensional character model",
            benefits=(
                "Complete physiology",
                "Full sociology and background",
                "Full psychology",
                "Character evolution tracking",
                "Relationship mapping",
            ),
        ),
    ),
    CharacterComplexity.DETAILED: (),
}


@dataclass
class UpgradeContext:
    """Inputs available to a synthesizer during an upgrade.

    Attributes:
        reference_characters: Other characters of the story, for relationships.
        story_context: Free-form story facts (theme, premise, genre, ...).
        auto_accept: Backfill required fields the synthesizer left empty
            instead of failing. None uses Settings.auto_accept_upgrades.
    """

    reference_characters: list[UnifiedCharacter] = field(default_factory=list)
    story_context: dict[str, Any] = field(default_factory=dict)
    auto_accept: bool | None = None

    @property
    def theme(self) -> str:
        """Story theme, or the built-in default."""
        theme = self.story_context.get("theme")
        if isinstance(theme, str) and not is_empty_value(theme):
            return theme
        return DEFAULT_STORY_THEME


@dataclass
class CharacterUpgradeResult:
    """Outcome of CharacterService.upgrade().

    On failure character is the unchanged input and changes is empty.
    """

    success: bool
    character: UnifiedCharacter
    changes: list[str] = field(default_factory=list)
    error: str | None = None


class CharacterSynthesizer(Protocol):
    """Produces payload content for tier upgrades.

    Both methods return plain dicts shaped like the target tier's model
    (CharacterBalanced / CharacterDetailed). A "basic" key (balanced
    upgrade) or "balanced" key (detailed upgrade) may carry suggestions for
    the lower tiers; those only fill fields the author left empty.
    """

    def synthesize_balanced(
        self, character: UnifiedCharacter, context: UpgradeContext
    ) -> dict[str, Any]: ...

    def synthesize_detailed(
        self, character: UnifiedCharacter, context: UpgradeContext
    ) -> dict[str, Any]: ...


# Template content per role; roles not listed use the defaults below
_ROLE_TRAITS: dict[CharacterRole, list[str]] = {
    CharacterRole.PROTAGONIST: ["determined", "curious"],
    CharacterRole.ANTAGONIST: ["calculating", "relentless"],
    CharacterRole.SECONDARY_ANTAGONIST: ["ambitious", "opportunistic"],
    CharacterRole.LOVE_INTEREST: ["warm", "guarded"],
    CharacterRole.MENTOR: ["patient", "perceptive"],
    CharacterRole.COMIC_RELIEF: ["quick-witted", "irreverent"],
    CharacterRole.WILDCARD: ["unpredictable", "charismatic"],
}
_ROLE_FLAWS: dict[CharacterRole, str] = {
    CharacterRole.PROTAGONIST: "Refuses help until it is almost too late",
    CharacterRole.ANTAGONIST: "Believes the end justifies any means",
    CharacterRole.MENTOR: "Holds back hard truths",
    CharacterRole.RIVAL: "Measures every success against someone else's",
}
_ROLE_OCCUPATIONS: dict[CharacterRole, str] = {
    CharacterRole.MENTOR: "Teacher",
    CharacterRole.AUTHORITY_FIGURE: "Public official",
}
# Relationship a role implies toward the protagonist
_ROLE_RELATIONSHIPS: dict[CharacterRole, str] = {
    CharacterRole.ANTAGONIST: "rival",
    CharacterRole.SECONDARY_ANTAGONIST: "rival",
    CharacterRole.RIVAL: "rival",
    CharacterRole.LOVE_INTEREST: "romantic",
    CharacterRole.MENTOR: "mentor",
    CharacterRole.FAMILY: "family",
    CharacterRole.FRIEND: "friend",
    CharacterRole.ALLY: "ally",
}


class TemplateCharacterSynthesizer:
    """Deterministic synthesizer built from the character's own content.

    Used when no generator is configured, and to backfill fields another
    synthesizer left empty when an upgrade is auto-accepted.
    """

    def synthesize_balanced(
        self, character: UnifiedCharacter, context: UpgradeContext
    ) -> dict[str, Any]:
        """Build a balanced payload from name, role, archetype, description and theme."""
        theme = context.theme
        archetype = character.archetype
        role_label = character.role.value.replace("-", " ")
        description = character.basic.description.strip()
        backstory = f"{character.name} became the story's {archetype.lower()} long before it began."
        if description and not is_empty_value(description):
            backstory = f"{description} {backstory}"

        return {
            "physiology": {
                "gender": "unspecified",
                "appearance": f"Carries themselves like a {archetype.lower()}",
                "key_traits": list(_ROLE_TRAITS.get(character.role, ["memorable", "resourceful"])),
            },
            "psychology": {
                "core_value": theme,
                "want": f"Achieve their goals as the {role_label}",
                "need": f"Learn about {theme}",
                "primary_flaw": _ROLE_FLAWS.get(character.role, "Trusts the wrong instincts"),
                "temperament": ["adaptable"],
                "key_fears": ["failure"],
                "key_strengths": ["determination"],
            },
            "backstory": backstory,
            "voice_profile": {
                "speech_pattern": f"Speaks in a manner fitting a {archetype.lower()}",
            },
        }

    def synthesize_detailed(
        self, character: UnifiedCharacter, context: UpgradeContext
    ) -> dict[str, Any]:
        """Build a detailed payload by expanding the balanced tier.

        Raises:
            CharacterSynthesisError: If the character has no balanced payload.
        """
        balanced = character.balanced
        if balanced is None:
            raise CharacterSynthesisError(
                f"Character '{character.name}' has no balanced payload to expand",
                character_id=character.id,
                direction=CharacterUpgradeDirection.BALANCED_TO_DETAILED,
            )
        physiology = balanced.physiology
        psychology = balanced.psychology
        name = character.name
        archetype = character.archetype.lower()

        relationships = []
        relationship_type = _ROLE_RELATIONSHIPS.get(character.role, "acquaintance")
        for other in context.reference_characters:
            if other.id == character.id or other.name == name:
                continue
            relationships.append(
                {
                    "character_name": other.name,
                    "relationship_type": (
                        relationship_type
                        if other.role == CharacterRole.PROTAGONIST
                        else "acquaintance"
                    ),
                }
            )

        return {
            "full_physiology": {
                "age": physiology.age if physiology.age is not None else "adult",
                "gender": physiology.gender or "unspecified",
                "appearance": physiology.appearance or f"Looks the part of a {archetype}",
                "build": physiology.build,
                "health": physiology.health,
                "distinguishing_traits": list(physiology.key_traits),
            },
            "full_sociology": {
                "occupation": _ROLE_OCCUPATIONS.get(character.role, f"Working {archetype}"),
                "education": "Learned mostly from experience",
                "home_life": balanced.backstory or f"Lives quietly, apart from {name}'s story",
            },
            "full_psychology": {
                "want": psychology.want,
                "need": psychology.need,
                "temperament": ", ".join(psychology.temperament) or "adaptable",
                "core_value": psychology.core_value,
                "primary_flaw": psychology.primary_flaw,
                "fears": list(psychology.key_fears),
            },
            "character_evolution": [
                {"label": "Beginning", "description": f"{name} wants: {psychology.want}"},
                {
                    "label": "Crisis",
                    "description": f"{name} is tested by: {psychology.primary_flaw}",
                },
                {"label": "Resolution", "description": f"{name} comes to: {psychology.need}"},
            ],
            "relationships": relationships,
        }


def merge_authored(authored: dict[str, Any], synthesized: dict[str, Any]) -> dict[str, Any]:
    """Merge a synthesized payload under authored content.

    Non-empty authored values win; nested dicts are merged key by key;
    keys only one side has are kept.

    Args:
        authored: Existing content (plain dict).
        synthesized: Proposed content (plain dict).

    Returns:
        New merged dict.
    """
    merged = dict(synthesized)
    for key, value in authored.items():
        proposed = merged.get(key)
        if isinstance(value, dict) and isinstance(proposed, dict):
            merged[key] = merge_authored(value, proposed)
        elif not is_empty_value(value) or key not in merged:
            merged[key] = value
    return merged


def diff_paths(before: dict[str, Any], after: dict[str, Any], prefix: str = "") -> list[str]:
    """Dotted paths of every field added, removed or altered between two dumps.

    A value that becomes (or stops being) a whole section is reported by the
    section's own path, not by its leaves.
    """
    changes: list[str] = []
    keys = list(after) + [key for key in before if key not in after]
    for key in keys:
        old, new = before.get(key), after.get(key)
        if old == new:
            continue
        path = f"{prefix}{key}"
        if isinstance(old, dict) and isinstance(new, dict):
            changes.extend(diff_paths(old, new, f"{path}."))
        else:
            changes.append(path)
    return changes


def _empty_paths(model: BaseModel, paths: tuple[str, ...], prefix: str = "") -> list[str]:
    missing = []
    for path in paths:
        value: Any = model
        for part in path.split("."):
            value = getattr(value, part, None)
        if is_empty_value(value):
            missing.append(f"{prefix}{path}")
    return missing


def missing_required_fields(character: UnifiedCharacter) -> list[str]:
    """Dotted paths of required fields that are empty at the character's tier.

    Args:
        character: Character to check.

    Returns:
        Paths such as "balanced.psychology.want"; empty when complete.
    """
    missing = _empty_paths(character, MINIMAL_REQUIRED_FIELDS)
    if character.balanced is not None:
        missing.extend(
            _empty_paths(character.balanced, CharacterBalanced.REQUIRED_FIELDS, "balanced.")
        )
    if character.detailed is not None:
        missing.extend(f"detailed.{path}" for path in character.detailed.missing_keys())
    return missing


class CharacterService:
    """Service for moving characters between complexity tiers.

    This service handles:
    - Offering the next upgrade for a character
    - Running an upgrade through the configured synthesizer
    - Reporting required fields that are still empty
    """

    def __init__(
        self,
        settings: Settings,
        synthesizer: CharacterSynthesizer | None = None,
        now: Callable[[], datetime] = datetime.now,
    ):
        """Initialize character service.

        Args:
            settings: Application settings.
            synthesizer: Content source for upgrades. Defaults to
                TemplateCharacterSynthesizer.
            now: Clock used for updated_at.
        """
        self.settings = settings
        self._template = TemplateCharacterSynthesizer()
        self.synthesizer: CharacterSynthesizer = synthesizer or self._template
        self._now = now
        logger.debug("CharacterService initialized with %s", type(self.synthesizer).__name__)

    def available_upgrades(self, character: UnifiedCharacter) -> list[UpgradeOption]:
        """Forward transitions offered for the character's tier (empty for detailed)."""
        return list(UPGRADE_OPTIONS[character.complexity])

    def missing_required_fields(self, character: UnifiedCharacter) -> list[str]:
        """See missing_required_fields()."""
        return missing_required_fields(character)

    def upgrade(
        self,
        character: UnifiedCharacter,
        direction: CharacterUpgradeDirection | str,
        context: UpgradeContext | None = None,
    ) -> CharacterUpgradeResult:
        """Upgrade a character by one tier.

        Args:
            character: Character to upgrade.
            direction: "minimal-to-balanced" or "balanced-to-detailed".
            context: Synthesis inputs; the story theme defaults to
                Settings.default_story_theme.

        Returns:
            CharacterUpgradeResult. On failure success is False, error is set
            and character is the original object.
        """
        context = self._resolve_context(context)
        with log_context(f"upgrade-{character.id}"), log_performance(logger, "character upgrade"):
            try:
                parsed = self._parse_direction(character, direction)
                upgraded = self._apply(character, parsed, context)
            except (CharacterUpgradeError, PydanticValidationError) as e:
                logger.warning(
                    "Upgrade %s failed for '%s': %s", direction, character.name, summarize_error(e)
                )
                return CharacterUpgradeResult(
                    success=False, character=character, changes=[], error=str(e)
                )

            changes = diff_paths(
                character.model_dump(mode="json"), upgraded.model_dump(mode="json")
            )
            logger.info(
                "Upgraded '%s' %s -> %s (%d changes)",
                character.name,
                parsed.source,
                parsed.target,
                len(changes),
            )
            return CharacterUpgradeResult(success=True, character=upgraded, changes=changes)

    def _resolve_context(self, context: UpgradeContext | None) -> UpgradeContext:
        """Fill context defaults from settings."""
        context = context or UpgradeContext()
        story_context = dict(context.story_context or {})
        if is_empty_value(story_context.get("theme")):
            story_context["theme"] = self.settings.default_story_theme
        auto_accept = (
            context.auto_accept
            if context.auto_accept is not None
            else self.settings.auto_accept_upgrades
        )
        return UpgradeContext(
            reference_characters=list(context.reference_characters or ()),
            story_context=story_context,
            auto_accept=auto_accept,
        )

    @staticmethod
    def _parse_direction(
        character: UnifiedCharacter, direction: CharacterUpgradeDirection | str
    ) -> CharacterUpgradeDirection:
        """Validate the direction against the character's current tier.

        Raises:
            InvalidUpgradeError: If the direction is unknown or does not start
                at the character's tier.
        """
        try:
            parsed = CharacterUpgradeDirection(direction)
        except ValueError:
            raise InvalidUpgradeError(
                f"Unknown upgrade direction '{direction}'",
                character_id=character.id,
                direction=str(direction),
            ) from None
        if character.complexity != parsed.source:
            raise InvalidUpgradeError(
                f"Cannot upgrade '{character.name}' {parsed}: "
                f"character is {character.complexity}, expected {parsed.source}",
                character_id=character.id,
                direction=parsed,
            )
        return parsed

    def _synthesize(
        self,
        synthesize: Callable[[UnifiedCharacter, UpgradeContext], dict[str, Any]],
        character: UnifiedCharacter,
        context: UpgradeContext,
        direction: CharacterUpgradeDirection,
    ) -> dict[str, Any]:
        """Call a synthesizer, normalizing its failures to CharacterSynthesisError."""
        try:
            payload = synthesize(character, context)
        except CharacterUpgradeError:
            raise
        except Exception as e:
            raise CharacterSynthesisError(
                f"Synthesis failed for '{character.name}': {summarize_error(e)}",
                character_id=character.id,
                direction=direction,
            ) from e
        if not isinstance(payload, dict):
            raise CharacterSynthesisError(
                f"Synthesizer returned {type(payload).__name__}, expected dict",
                character_id=character.id,
                direction=direction,
            )
        return dict(payload)

    def _apply(
        self,
        character: UnifiedCharacter,
        direction: CharacterUpgradeDirection,
        context: UpgradeContext,
    ) -> UnifiedCharacter:
        """Build the upgraded character; raises on any failure."""
        data = character.model_dump()

        if direction is CharacterUpgradeDirection.MINIMAL_TO_BALANCED:
            payload = self._synthesize(
                self.synthesizer.synthesize_balanced, character, context, direction
            )
            suggested_basic = payload.pop("basic", None)
            if isinstance(suggested_basic, dict):
                data["basic"] = merge_authored(data["basic"], suggested_basic)
            balanced = self._complete(
                CharacterBalanced,
                payload,
                lambda model: _empty_paths(model, CharacterBalanced.REQUIRED_FIELDS, "balanced."),
                self._template.synthesize_balanced,
                character,
                context,
                direction,
            )
            data["balanced"] = balanced.model_dump()
        else:
            payload = self._synthesize(
                self.synthesizer.synthesize_detailed, character, context, direction
            )
            suggested_balanced = payload.pop("balanced", None)
            if isinstance(suggested_balanced, dict):
                data["balanced"] = merge_authored(data["balanced"], suggested_balanced)
            detailed = self._complete(
                CharacterDetailed,
                payload,
                lambda model: [f"detailed.{path}" for path in model.missing_keys()],
                self._template.synthesize_detailed,
                character,
                context,
                direction,
            )
            data["detailed"] = detailed.model_dump()

        data.update(
            complexity=direction.target,
            updated_at=self._now(),
            ai_generated=True,
            last_edited_by=EditedBy.AI,
        )
        return UnifiedCharacter.model_validate(data)

    def _complete(
        self,
        model_cls: type[M],
        payload: dict[str, Any],
        find_missing: Callable[[M], list[str]],
        backfill: Callable[[UnifiedCharacter, UpgradeContext], dict[str, Any]],
        character: UnifiedCharacter,
        context: UpgradeContext,
        direction: CharacterUpgradeDirection,
    ) -> M:
        """Validate a tier payload and enforce its required fields.

        With auto_accept, everything the payload leaves empty (whole sections
        included) is filled from the template synthesizer first.

        Raises:
            CharacterSynthesisError: If required fields stay empty.
            pydantic.ValidationError: If the payload does not fit the model.
        """
        if context.auto_accept:
            filled = merge_authored(payload, backfill(character, context))
            if filled != payload:
                logger.info("Backfilled empty fields for '%s' from templates", character.name)
            payload = filled
        model = model_cls.model_validate(payload)
        missing = find_missing(model)
        if missing:
            raise CharacterSynthesisError(
                f"Synthesized content for '{character.name}' is missing required fields: "
                f"{', '.join(missing)}",
                character_id=character.id,
                direction=direction,
                missing_fields=missing,
            )
        return model
