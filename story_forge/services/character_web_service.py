"""Character web service - builds relationship graphs with settings applied."""

import logging
from collections.abc import Iterable, Sequence

from story_forge.character_web import CharacterWeb, WebMember, build_character_web
from story_forge.memory.characters import RelationshipRecord
from story_forge.settings import Settings
from story_forge.utils.logging_config import log_performance

logger = logging.getLogger(__name__)


class CharacterWebService:
    """Service for laying out a story's character web."""

    def __init__(self, settings: Settings):
        """Initialize character web service.

        Args:
            settings: Application settings (include_latent_edges).
        """
        self.settings = settings

    def build(
        self,
        characters: Sequence[WebMember],
        relationships: Iterable[RelationshipRecord] = (),
        enabled_types: Iterable[str] | None = None,
        include_latent: bool | None = None,
    ) -> CharacterWeb:
        """Build the web for a cast, anchor first.

        Args:
            characters: Ordered characters; the first is centered.
            relationships: Authored relationship records.
            enabled_types: Optional relationship-type filter.
            include_latent: Override Settings.include_latent_edges.

        Returns:
            CharacterWeb with positioned nodes and styled edges.
        """
        if include_latent is None:
            include_latent = self.settings.include_latent_edges
        with log_performance(logger, "character web"):
            web = build_character_web(
                characters,
                relationships,
                enabled_types=enabled_types,
                include_latent=include_latent,
            )
        logger.info(
            "Character web ready: %d characters, %d edges", len(web.nodes), len(web.edges)
        )
        return web
