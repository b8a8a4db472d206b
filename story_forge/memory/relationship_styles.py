"""Relationship classification and edge styling for the character web.

Free-text relationship descriptions ("estranged brother", "bitter rival and
former friend") are mapped to a small set of categories, each with a fixed
visual style. Classification is an ordered keyword table: rows are tested in
order and the first row with a keyword contained in the normalized text wins.
Containment is plain substring matching, so compound words classify by their
parts ("archenemy" is a rival, "boyfriend" an ally because ally is checked
first).
Row order is part of the visual semantics ("friend and rival" is an ally edge,
"rival" alone is a rival edge), so the table is a tuple, not a dict.
"""

import logging
import re
from dataclasses import dataclass
from enum import StrEnum

logger = logging.getLogger(__name__)


class RelationshipCategory(StrEnum):
    """Canonical relationship categories, in classification priority order."""

    ALLY = "ally"
    RIVAL = "rival"
    FAMILY = "family"
    ROMANTIC = "romantic"
    MENTOR = "mentor"
    PROFESSIONAL = "professional"
    COMPLEX = "complex"
    DEFAULT = "default"
    LATENT = "latent"  # Pair with no authored relationship


@dataclass(frozen=True)
class RelationshipStyle:
    """Visual style of one character-web edge.

    Attributes:
        category: Category the style was derived from.
        color: Stroke color (hex).
        stroke_width: Stroke width in pixels.
        opacity: Stroke opacity (0-1).
        stroke_dasharray: SVG dash pattern, None for a solid line.
        gradient: True when the renderer should draw a multi-stop gradient
            instead of the flat color (see get_complex_gradient_id()).
    """

    category: RelationshipCategory
    color: str
    stroke_width: int
    opacity: float
    stroke_dasharray: str | None = None
    gradient: bool = False


# Tailwind palette, matching the character web renderer
ALLY_GREEN = "#10B981"
RIVAL_RED = "#EF4444"
FAMILY_AMBER = "#F59E0B"
ROMANTIC_PINK = "#EC4899"
MENTOR_BLUE = "#3B82F6"
PROFESSIONAL_GRAY = "#6B7280"
LATENT_GRAY = "#666666"

RELATIONSHIP_STYLES: dict[RelationshipCategory, RelationshipStyle] = {
    RelationshipCategory.ALLY: RelationshipStyle(
        RelationshipCategory.ALLY, ALLY_GREEN, stroke_width=3, opacity=0.6
    ),
    RelationshipCategory.RIVAL: RelationshipStyle(
        RelationshipCategory.RIVAL, RIVAL_RED, stroke_width=3, opacity=0.7, stroke_dasharray="8,4"
    ),
    RelationshipCategory.FAMILY: RelationshipStyle(
        RelationshipCategory.FAMILY, FAMILY_AMBER, stroke_width=4, opacity=0.8
    ),
    RelationshipCategory.ROMANTIC: RelationshipStyle(
        RelationshipCategory.ROMANTIC, ROMANTIC_PINK, stroke_width=3, opacity=0.7
    ),
    RelationshipCategory.MENTOR: RelationshipStyle(
        RelationshipCategory.MENTOR, MENTOR_BLUE, stroke_width=3, opacity=0.6
    ),
    RelationshipCategory.PROFESSIONAL: RelationshipStyle(
        RelationshipCategory.PROFESSIONAL, PROFESSIONAL_GRAY, stroke_width=2, opacity=0.5
    ),
    RelationshipCategory.COMPLEX: RelationshipStyle(
        RelationshipCategory.COMPLEX, ALLY_GREEN, stroke_width=3, opacity=0.7, gradient=True
    ),
    RelationshipCategory.DEFAULT: RelationshipStyle(
        RelationshipCategory.DEFAULT, ALLY_GREEN, stroke_width=3, opacity=0.6
    ),
}

# Faint edge drawn between characters without an authored relationship so the
# complete topology stays visible.
LATENT_EDGE_STYLE = RelationshipStyle(
    RelationshipCategory.LATENT, LATENT_GRAY, stroke_width=1, opacity=0.1
)

# Ordered (category, keywords) rows. First row with any contained keyword wins.
CLASSIFICATION_RULES: tuple[tuple[RelationshipCategory, tuple[str, ...]], ...] = (
    (
        RelationshipCategory.ALLY,
        (
            "friend",
            "ally",
            "allies",
            "alliance",
            "companion",
            "comrade",
            "confidant",
            "loyal",
            "supporter",
        ),
    ),
    (
        RelationshipCategory.RIVAL,
        (
            "rival",
            "enemy",
            "antagonist",
            "nemesis",
            "adversary",
            "opponent",
            "foe",
            "hostile",
            "betray",
        ),
    ),
    (
        RelationshipCategory.FAMILY,
        (
            "family",
            "father",
            "mother",
            "parent",
            "sibling",
            "brother",
            "sister",
            "daughter",
            "cousin",
            "uncle",
            "aunt",
            "grandparent",
            "grandfather",
            "grandmother",
            "relative",
        ),
    ),
    (
        RelationshipCategory.ROMANTIC,
        (
            "love",
            "romantic",
            "romance",
            "lover",
            "spouse",
            "husband",
            "wife",
            "crush",
            "dating",
            "married",
            "fiance",
        ),
    ),
    (
        RelationshipCategory.MENTOR,
        ("mentor", "student", "teacher", "apprentice", "protege", "pupil", "disciple", "master"),
    ),
    (
        RelationshipCategory.PROFESSIONAL,
        (
            "colleague",
            "coworker",
            "co-worker",
            "professional",
            "boss",
            "employee",
            "employer",
            "business",
            "partner",
            "client",
            "supervisor",
        ),
    ),
    (
        RelationshipCategory.COMPLEX,
        ("complex", "complicated", "mixed", "ambivalent", "conflicted", "uneasy"),
    ),
)


def _validate_classification_rules() -> None:
    """Validate that every classified category has a style and appears exactly once."""
    categories = [category for category, _ in CLASSIFICATION_RULES]
    if len(categories) != len(set(categories)):
        raise RuntimeError(f"CLASSIFICATION_RULES lists a category twice: {categories}")
    missing = set(categories) - set(RELATIONSHIP_STYLES)
    if missing:
        raise RuntimeError(f"RELATIONSHIP_STYLES missing categories: {missing}")


_validate_classification_rules()

def classify_relationship(relationship_type: str) -> RelationshipCategory:
    """Classify a free-text relationship type into a RelationshipCategory.

    The text is trimmed and lowercased, then CLASSIFICATION_RULES is scanned
    in order; the first row with a keyword contained in the text wins.

    Args:
        relationship_type: Free-text relationship description.

    Returns:
        The matched category, or RelationshipCategory.DEFAULT if nothing matches.
    """
    normalized = (relationship_type or "").strip().lower()
    if not normalized:
        return RelationshipCategory.DEFAULT

    for category, keywords in CLASSIFICATION_RULES:
        keyword = next((k for k in keywords if k in normalized), None)
        if keyword is not None:
            logger.debug(
                "Classified relationship '%s' as %s (keyword '%s')",
                relationship_type,
                category,
                keyword,
            )
            return category

    logger.debug("No category keyword in relationship '%s', using default", relationship_type)
    return RelationshipCategory.DEFAULT


def get_relationship_style(relationship_type: str) -> RelationshipStyle:
    """Return the edge style for a free-text relationship type.

    Args:
        relationship_type: Free-text relationship description.

    Returns:
        The RelationshipStyle of the first matching category (default style if none).
    """
    return RELATIONSHIP_STYLES[classify_relationship(relationship_type)]


_WHITESPACE_RE = re.compile(r"\s+")


def get_complex_gradient_id(name1: str, name2: str) -> str:
    """Build the stable gradient key for a complex relationship edge.

    Names are concatenated in the given order, whitespace runs become hyphens
    and the result is lowercased. Only unique within one character web, where
    character names are assumed unique.

    Args:
        name1: First participant's name.
        name2: Second participant's name.

    Returns:
        Gradient identifier such as "gradient-ana-reyes-marco-diaz".
    """
    raw = f"gradient-{name1.strip()}-{name2.strip()}"
    return _WHITESPACE_RE.sub("-", raw).lower()
