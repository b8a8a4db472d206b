"""Services layer - settings-bound access to the core operations.

Each service wraps the pure functions of its module with the values taken
from Settings (theme defaults, base rates, latent-edge display).
"""

from dataclasses import dataclass

from story_forge.settings import Settings
from story_forge.utils.logging_config import configure_logging as apply_logging_settings

from .character_service import (
    CharacterService,
    CharacterSynthesizer,
    CharacterUpgradeDirection,
    CharacterUpgradeResult,
    TemplateCharacterSynthesizer,
    UpgradeContext,
    UpgradeOption,
)
from .character_web_service import CharacterWebService
from .location_pricing import LocationPricingService, PriceEstimate, PriceTier


@dataclass
class ServiceContainer:
    """Dependency injection container for all services.

    Usage:
        settings = Settings.load()
        services = ServiceContainer(settings, configure_logging=True)

        result = services.characters.upgrade(character, "minimal-to-balanced")
        priced = services.pricing.apply_to_all(suggestions)
    """

    settings: Settings
    characters: CharacterService
    web: CharacterWebService
    pricing: LocationPricingService

    def __init__(
        self,
        settings: Settings | None = None,
        synthesizer: CharacterSynthesizer | None = None,
        configure_logging: bool = False,
    ):
        """Initialize all services with shared settings.

        Args:
            settings: Application settings. If None, loads from settings.json.
            synthesizer: Content source for character upgrades. If None, the
                template synthesizer is used.
            configure_logging: Apply Settings.log_level and log_file to the root
                logger. Applications set this once at startup.
        """
        self.settings = settings or Settings.load()
        if configure_logging:
            apply_logging_settings(self.settings)
        self.characters = CharacterService(self.settings, synthesizer)
        self.web = CharacterWebService(self.settings)
        self.pricing = LocationPricingService(self.settings)


__all__ = [
    "CharacterService",
    "CharacterSynthesizer",
    "CharacterUpgradeDirection",
    "CharacterUpgradeResult",
    "CharacterWebService",
    "LocationPricingService",
    "PriceEstimate",
    "PriceTier",
    "ServiceContainer",
    "TemplateCharacterSynthesizer",
    "UpgradeContext",
    "UpgradeOption",
]
