"""Centralized exception hierarchy for Story Forge.

Exception Hierarchy:

    StoryForgeError (base for all application errors)
    └── CharacterUpgradeError (tier transition failures)
        ├── InvalidUpgradeError (unknown direction or wrong source tier)
        └── CharacterSynthesisError (synthesizer could not produce a payload)

Usage:
    from story_forge.utils.exceptions import CharacterSynthesisError

    try:
        payload = synthesizer.synthesize_balanced(character, context)
    except CharacterSynthesisError:
        logger.error("Synthesis failed")

Upgrade errors never leave CharacterService.upgrade(); they are converted into
a failed CharacterUpgradeResult there.
"""

import logging

logger = logging.getLogger(__name__)


def summarize_error(error: Exception, max_length: int = 300) -> str:
    """Create a concise summary of an exception for logging.

    Pydantic validation errors and synthesizer failures can carry very long
    messages (full payload reprs). This keeps log lines readable.

    Args:
        error: The exception to summarize.
        max_length: Maximum length of the summary string.

    Returns:
        A concise error summary suitable for log messages.
    """
    error_type = type(error).__name__
    msg = str(error)

    if len(msg) <= max_length:
        return msg

    # pydantic.ValidationError exposes error_count(); report it instead of the dump
    error_count = getattr(error, "error_count", None)
    if callable(error_count):
        first_line = msg.splitlines()[0] if msg else ""
        return f"{error_type}: {error_count()} validation error(s); {first_line[:150]}"

    return f"{msg[:max_length]}... [{len(msg) - max_length} chars truncated]"


class StoryForgeError(Exception):
    """Base exception for all Story Forge errors.

    All custom exceptions should inherit from this class to allow
    catching all application-specific errors with a single except clause.
    """

    pass


class CharacterUpgradeError(StoryForgeError):
    """Base exception for character tier transition failures.

    Attributes:
        character_id: The character whose upgrade failed.
        direction: The requested upgrade direction.
    """

    def __init__(
        self,
        message: str,
        character_id: str | None = None,
        direction: str | None = None,
    ):
        """Initialize CharacterUpgradeError with context.

        Args:
            message: Human-readable error message.
            character_id: ID of the character being upgraded.
            direction: Requested upgrade direction.
        """
        super().__init__(message)
        self.character_id = character_id
        self.direction = direction
        logger.debug(
            "%s initialized: character_id=%s, direction=%s",
            type(self).__name__,
            character_id,
            direction,
        )


class InvalidUpgradeError(CharacterUpgradeError):
    """Raised when an upgrade direction is unknown or does not start at the character's tier.

    Only forward, single-step transitions exist (minimal-to-balanced,
    balanced-to-detailed); skips and downgrades are rejected.
    """

    pass


class CharacterSynthesisError(CharacterUpgradeError):
    """Raised when a synthesizer cannot produce the fields a target tier requires.

    Attributes:
        missing_fields: Dotted paths of required fields that stayed empty.
    """

    def __init__(
        self,
        message: str,
        character_id: str | None = None,
        direction: str | None = None,
        missing_fields: list[str] | None = None,
    ):
        """Initialize CharacterSynthesisError with the fields that could not be filled.

        Args:
            message: Human-readable error message.
            character_id: ID of the character being upgraded.
            direction: Requested upgrade direction.
            missing_fields: Dotted paths of required fields left empty.
        """
        super().__init__(message, character_id=character_id, direction=direction)
        self.missing_fields = missing_fields or []
