"""Character web - circular layout and styled relationship graph.

This package places characters on a circle around an anchor character and
builds one styled edge per character pair, ready for any renderer.
"""

from story_forge.character_web._builder import (
    CharacterWeb,
    WebMember,
    build_character_web,
    find_relationship,
    index_relationships,
)
from story_forge.character_web._constants import (
    ANCHOR_POSITION,
    BASE_RADIUS,
    MAX_RADIUS,
    LayoutPosition,
    PositionedNode,
    StyledEdge,
)
from story_forge.character_web._layout import (
    calculate_circular_layout,
    calculate_position,
    calculate_radius,
)

__all__ = [
    # Constants
    "ANCHOR_POSITION",
    "BASE_RADIUS",
    "MAX_RADIUS",
    # Result types
    "CharacterWeb",
    "LayoutPosition",
    "PositionedNode",
    "StyledEdge",
    "WebMember",
    # Builder
    "build_character_web",
    # Layout functions
    "calculate_circular_layout",
    "calculate_position",
    "calculate_radius",
    "find_relationship",
    "index_relationships",
]
