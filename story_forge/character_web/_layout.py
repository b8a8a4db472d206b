"""Circular layout for the character web.

The anchor character (usually the protagonist) sits at the canvas center and
everyone else is spread evenly on a ring around it, starting at the top and
going clockwise. Positions are a pure function of (index, total), so a
re-render with the same cast produces the same picture.
"""

import logging
import math

from story_forge.character_web._constants import (
    ANCHOR_POSITION,
    BASE_RADIUS,
    CANVAS_CENTER,
    CROWDING_THRESHOLD,
    MAX_RADIUS,
    RADIUS_STEP,
    LayoutPosition,
)

logger = logging.getLogger(__name__)


def calculate_radius(total: int) -> float:
    """Ring radius for a ring of total characters.

    Args:
        total: Number of characters on the ring (anchor excluded).

    Returns:
        Radius in percent of the canvas: BASE_RADIUS, grown by RADIUS_STEP per
        character beyond CROWDING_THRESHOLD, capped at MAX_RADIUS.
    """
    if total > CROWDING_THRESHOLD:
        radius = BASE_RADIUS + (total - CROWDING_THRESHOLD) * RADIUS_STEP
    else:
        radius = BASE_RADIUS
    return min(radius, MAX_RADIUS)


def calculate_position(index: int, total: int) -> LayoutPosition:
    """Position of the index-th ring character.

    Args:
        index: Position on the ring, 0-based (anchor excluded).
        total: Number of characters on the ring.

    Returns:
        LayoutPosition in percent. total <= 0 returns the center point.
    """
    if total <= 0:
        return ANCHOR_POSITION

    angle = (index * 2 * math.pi) / total - math.pi / 2  # Start from top
    radius = calculate_radius(total)
    return LayoutPosition(
        CANVAS_CENTER + radius * math.cos(angle),
        CANVAS_CENTER + radius * math.sin(angle),
    )


def calculate_circular_layout(count: int) -> list[LayoutPosition]:
    """Compute positions for count characters, anchor first.

    Args:
        count: Total number of characters including the anchor.

    Returns:
        List of count positions; element 0 is the center, element i >= 1 is
        calculate_position(i - 1, count - 1).
    """
    logger.debug("Calculating circular layout: count=%s", count)
    if count <= 0:
        return []
    ring_size = count - 1
    return [ANCHOR_POSITION] + [calculate_position(i, ring_size) for i in range(ring_size)]
