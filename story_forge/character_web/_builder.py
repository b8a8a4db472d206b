"""Character web builder - positioned nodes and styled edges for every character pair."""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Protocol

import networkx as nx

from story_forge.character_web._constants import PositionedNode, StyledEdge
from story_forge.character_web._layout import calculate_circular_layout
from story_forge.memory.characters import RelationshipRecord
from story_forge.memory.relationship_styles import (
    LATENT_EDGE_STYLE,
    RelationshipCategory,
    RelationshipStyle,
    get_complex_gradient_id,
    get_relationship_style,
)

logger = logging.getLogger(__name__)

# Authored records without a type are drawn as complex relationships
UNTYPED_RELATIONSHIP = "complex"


class WebMember(Protocol):
    """Anything placeable on the web (UnifiedCharacter satisfies this)."""

    @property
    def id(self) -> str: ...

    @property
    def name(self) -> str: ...


def index_relationships(
    relationships: Iterable[RelationshipRecord],
) -> dict[frozenset[str], RelationshipRecord]:
    """Index relationships by unordered name pair.

    When several records describe the same pair, the first one wins and the
    rest are logged and ignored. Records linking a name to itself are skipped.

    Args:
        relationships: Authored relationship records.

    Returns:
        Mapping of frozenset({name_a, name_b}) to the record for that pair.
    """
    index: dict[frozenset[str], RelationshipRecord] = {}
    for record in relationships:
        if record.character1 == record.character2:
            logger.warning("Ignoring self-relationship for '%s'", record.character1)
            continue
        key = frozenset((record.character1, record.character2))
        if key in index:
            logger.warning(
                "Duplicate relationship for %s <-> %s ('%s'); keeping '%s'",
                record.character1,
                record.character2,
                record.relationship_type,
                index[key].relationship_type,
            )
            continue
        index[key] = record
    return index


def find_relationship(
    relationships: Iterable[RelationshipRecord], name_a: str, name_b: str
) -> RelationshipRecord | None:
    """Return the first record linking name_a and name_b in either order, or None."""
    for record in relationships:
        if record.involves(name_a, name_b):
            return record
    return None


@dataclass(frozen=True)
class CharacterWeb:
    """Layout geometry of a character web, ready for a renderer.

    Attributes:
        nodes: Positioned characters, anchor first.
        edges: One edge per unordered character pair (latent edges included
            unless the web was built with include_latent=False).
    """

    nodes: list[PositionedNode] = field(default_factory=list)
    edges: list[StyledEdge] = field(default_factory=list)

    @property
    def anchor(self) -> PositionedNode | None:
        """The centered character, or None for an empty web."""
        return self.nodes[0] if self.nodes else None

    @property
    def relationship_types(self) -> list[str]:
        """Distinct authored relationship types on the web, in first-seen order."""
        seen: dict[str, None] = {}
        for edge in self.edges:
            if not edge.is_latent and edge.relationship_type:
                seen.setdefault(edge.relationship_type, None)
        return list(seen)

    def node(self, node_id: str) -> PositionedNode | None:
        """Look up a node by character ID."""
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def edges_for(self, name: str, include_latent: bool = False) -> list[StyledEdge]:
        """Edges touching the named character."""
        return [
            edge
            for edge in self.edges
            if name in (edge.from_name, edge.to_name) and (include_latent or not edge.is_latent)
        ]

    def connected_names(self, name: str) -> list[str]:
        """Names linked to name by an authored (non-latent) edge."""
        return [
            edge.to_name if edge.from_name == name else edge.from_name
            for edge in self.edges_for(name)
        ]

    def to_networkx(self) -> nx.Graph:
        """Export the web as an undirected NetworkX graph.

        Node attributes: name, x, y, is_anchor. Edge attributes: every
        StyledEdge style field plus relationship_type and is_latent.

        Returns:
            networkx.Graph keyed by character ID.
        """
        graph = nx.Graph()
        for node in self.nodes:
            graph.add_node(node.id, name=node.name, x=node.x, y=node.y, is_anchor=node.is_anchor)
        for edge in self.edges:
            graph.add_edge(
                edge.from_id,
                edge.to_id,
                color=edge.color,
                stroke_width=edge.stroke_width,
                opacity=edge.opacity,
                stroke_dasharray=edge.stroke_dasharray,
                category=str(edge.category),
                relationship_type=edge.relationship_type,
                is_latent=edge.is_latent,
                gradient_id=edge.gradient_id,
            )
        logger.debug(
            "Character web exported: %d nodes, %d edges",
            graph.number_of_nodes(),
            graph.number_of_edges(),
        )
        return graph


def _make_edge(
    source: PositionedNode,
    target: PositionedNode,
    style: RelationshipStyle,
    relationship_type: str = "",
) -> StyledEdge:
    gradient_id = get_complex_gradient_id(source.name, target.name) if style.gradient else None
    return StyledEdge(
        from_id=source.id,
        to_id=target.id,
        from_name=source.name,
        to_name=target.name,
        from_position=source.position,
        to_position=target.position,
        color=style.color,
        stroke_width=style.stroke_width,
        opacity=style.opacity,
        stroke_dasharray=style.stroke_dasharray,
        category=style.category,
        relationship_type=relationship_type,
        is_latent=style.category == RelationshipCategory.LATENT,
        gradient_id=gradient_id,
    )


def build_character_web(
    characters: Sequence[WebMember],
    relationships: Iterable[RelationshipRecord] = (),
    enabled_types: Iterable[str] | None = None,
    include_latent: bool = True,
) -> CharacterWeb:
    """Lay out characters and style an edge for every unordered pair.

    The first character is the anchor at the center; the rest go on the ring
    in list order. For each pair (i < j) the authored relationship is looked
    up by name in either order. A found relationship whose type passes the
    filter gets its classified style; anything else becomes a latent edge.

    Args:
        characters: Ordered characters; element 0 is the anchor.
        relationships: Authored relationship records.
        enabled_types: Optional filter of relationship types (case-insensitive).
            Relationships whose type is filtered out are drawn as latent edges.
            None shows every type.
        include_latent: If False, omit latent edges from the result.

    Returns:
        CharacterWeb with len(characters) nodes and, with latent edges
        included, exactly n * (n - 1) / 2 edges.
    """
    if not characters:
        return CharacterWeb()

    enabled = {t.lower() for t in enabled_types} if enabled_types is not None else None
    index = index_relationships(relationships)
    positions = calculate_circular_layout(len(characters))

    nodes = [
        PositionedNode(
            id=character.id,
            name=character.name,
            x=position.x,
            y=position.y,
            is_anchor=i == 0,
        )
        for i, (character, position) in enumerate(zip(characters, positions, strict=True))
    ]

    edges: list[StyledEdge] = []
    authored = 0
    for i, source in enumerate(nodes):
        for target in nodes[i + 1 :]:
            record = index.get(frozenset((source.name, target.name)))
            relationship_type = record.relationship_type if record else ""
            visible = record is not None and (
                enabled is None or not relationship_type or relationship_type.lower() in enabled
            )
            if visible:
                style = get_relationship_style(relationship_type or UNTYPED_RELATIONSHIP)
                edges.append(_make_edge(source, target, style, relationship_type))
                authored += 1
            elif include_latent:
                edges.append(_make_edge(source, target, LATENT_EDGE_STYLE))

    logger.debug(
        "Built character web: %d nodes, %d edges (%d authored)",
        len(nodes),
        len(edges),
        authored,
    )
    return CharacterWeb(nodes=nodes, edges=edges)
