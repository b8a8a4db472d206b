"""Pytest fixtures for Story Forge tests."""

import logging
from datetime import datetime

import pytest

from story_forge.memory.characters import (
    BasicVoice,
    CharacterBalanced,
    CharacterBasic,
    CharacterComplexity,
    CharacterRole,
    CorePsychology,
    RelationshipRecord,
    SimplifiedPhysiology,
    UnifiedCharacter,
)
from story_forge.settings import Settings


@pytest.fixture(autouse=True, scope="function")
def cleanup_production_log_handlers():
    """Remove file handlers pointing to the production log after each test."""
    yield

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        if isinstance(handler, logging.FileHandler) and "story_forge.log" in handler.baseFilename:
            handler.close()
            root_logger.removeHandler(handler)


@pytest.fixture(autouse=True)
def clear_settings_cache_per_test():
    """Clear Settings cache before each test to ensure isolation."""
    Settings.clear_cache()
    yield
    Settings.clear_cache()


@pytest.fixture(autouse=True)
def isolate_settings_file(tmp_path, monkeypatch):
    """Redirect settings.json to a temp directory so tests never touch the real file."""
    settings_file = tmp_path / "settings.json"
    monkeypatch.setattr("story_forge.settings._paths.SETTINGS_FILE", settings_file)
    return settings_file


@pytest.fixture
def settings() -> Settings:
    """Default settings, not persisted."""
    return Settings()


@pytest.fixture
def minimal_character() -> UnifiedCharacter:
    """A minimal-tier protagonist."""
    return UnifiedCharacter(
        id="char_ana",
        name="Ana Reyes",
        role=CharacterRole.PROTAGONIST,
        basic=CharacterBasic(description="A night-shift nurse who wants to paint again."),
        created_at=datetime(2024, 1, 1, 9, 0, 0),
        updated_at=datetime(2024, 1, 1, 9, 0, 0),
    )


@pytest.fixture
def balanced_payload() -> dict:
    """A complete balanced-tier payload as a synthesizer would return it."""
    return {
        "physiology": {
            "age": 34,
            "gender": "female",
            "appearance": "Paint under her fingernails, tired eyes",
            "key_traits": ["stubborn", "kind"],
        },
        "psychology": {
            "core_value": "honesty",
            "want": "A gallery show",
            "need": "To forgive her father",
            "primary_flaw": "Pride",
            "temperament": ["melancholic"],
            "key_fears": ["being ordinary"],
            "key_strengths": ["patience"],
        },
        "backstory": "Raised above her father's hardware store.",
        "voice_profile": {"speech_pattern": "Short sentences, dry jokes"},
    }


@pytest.fixture
def balanced_character(minimal_character, balanced_payload) -> UnifiedCharacter:
    """The minimal protagonist with a complete balanced payload."""
    return minimal_character.model_copy(
        update={
            "complexity": CharacterComplexity.BALANCED,
            "balanced": CharacterBalanced(
                physiology=SimplifiedPhysiology(**balanced_payload["physiology"]),
                psychology=CorePsychology(**balanced_payload["psychology"]),
                backstory=balanced_payload["backstory"],
                voice_profile=BasicVoice(**balanced_payload["voice_profile"]),
            ),
        }
    )


@pytest.fixture
def cast() -> list[UnifiedCharacter]:
    """Four minimal characters, protagonist first."""
    return [
        UnifiedCharacter(id="c1", name="Ana Reyes", role=CharacterRole.PROTAGONIST),
        UnifiedCharacter(id="c2", name="Marco Diaz", role=CharacterRole.ANTAGONIST),
        UnifiedCharacter(id="c3", name="Lena", role=CharacterRole.MENTOR),
        UnifiedCharacter(id="c4", name="Tom", role=CharacterRole.FRIEND),
    ]


@pytest.fixture
def cast_relationships() -> list[RelationshipRecord]:
    """Authored relationships for the cast fixture."""
    return [
        RelationshipRecord(
            character1="Ana Reyes", character2="Marco Diaz", relationship_type="Rival"
        ),
        RelationshipRecord(character1="Lena", character2="Ana Reyes", relationship_type="mentor"),
        RelationshipRecord(
            character1="Marco Diaz", character2="Tom", relationship_type="complicated"
        ),
    ]
