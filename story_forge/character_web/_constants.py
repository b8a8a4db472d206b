"""Constants and result types for the character web."""

from dataclasses import dataclass
from typing import NamedTuple

from story_forge.memory.relationship_styles import RelationshipCategory

# Canvas is expressed in percent on both axes
CANVAS_MIN = 0.0
CANVAS_MAX = 100.0
CANVAS_CENTER = 50.0

# Ring radius, in percent of the canvas
BASE_RADIUS = 35.0
RADIUS_STEP = 3.0  # Added per ring member beyond CROWDING_THRESHOLD
CROWDING_THRESHOLD = 6
MAX_RADIUS = 45.0  # Keeps every node inside [5, 95]


class LayoutPosition(NamedTuple):
    """A point on the canvas, in percent."""

    x: float
    y: float


ANCHOR_POSITION = LayoutPosition(CANVAS_CENTER, CANVAS_CENTER)


@dataclass(frozen=True)
class PositionedNode:
    """A character placed on the canvas.

    Attributes:
        id: Character ID.
        name: Character display name.
        x: Horizontal position in percent.
        y: Vertical position in percent.
        is_anchor: True for the character fixed at the center.
    """

    id: str
    name: str
    x: float
    y: float
    is_anchor: bool = False

    @property
    def position(self) -> LayoutPosition:
        """The node position as a LayoutPosition."""
        return LayoutPosition(self.x, self.y)


@dataclass(frozen=True)
class StyledEdge:
    """A renderable edge between two characters.

    Attributes:
        from_id: ID of the earlier character in web order.
        to_id: ID of the later character in web order.
        from_name: Display name of the from character.
        to_name: Display name of the to character.
        from_position: Canvas position of the from character.
        to_position: Canvas position of the to character.
        color: Stroke color (hex).
        stroke_width: Stroke width in pixels.
        opacity: Stroke opacity (0-1).
        stroke_dasharray: SVG dash pattern, None for a solid line.
        category: Relationship category the style came from.
        relationship_type: Authored relationship text ("" for latent edges).
        is_latent: True when no (visible) authored relationship exists.
        gradient_id: Gradient key for complex relationships, otherwise None.
    """

    from_id: str
    to_id: str
    from_name: str
    to_name: str
    from_position: LayoutPosition
    to_position: LayoutPosition
    color: str
    stroke_width: int
    opacity: float
    stroke_dasharray: str | None
    category: RelationshipCategory
    relationship_type: str = ""
    is_latent: bool = False
    gradient_id: str | None = None
