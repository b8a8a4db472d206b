"""Tests for the exception hierarchy and error summaries."""

import pytest
from pydantic import BaseModel, ValidationError

from story_forge.utils.exceptions import (
    CharacterSynthesisError,
    CharacterUpgradeError,
    InvalidUpgradeError,
    StoryForgeError,
    summarize_error,
)


class _Strict(BaseModel):
    count: int


class TestSummarizeError:
    """Tests for summarize_error."""

    def test_short_message_unchanged(self):
        """Short messages are returned as-is."""
        assert summarize_error(ValueError("bad tier")) == "bad tier"

    def test_long_message_truncated(self):
        """Long messages are cut with a truncation note."""
        summary = summarize_error(RuntimeError("x" * 400), max_length=100)
        assert summary.startswith("x" * 100)
        assert summary.endswith("[300 chars truncated]")

    def test_pydantic_error_counted(self):
        """Validation errors report their error count instead of the dump."""
        with pytest.raises(ValidationError) as exc_info:
            _Strict(count="not a number " * 40)
        summary = summarize_error(exc_info.value, max_length=20)
        assert summary.startswith("ValidationError: 1 validation error(s);")


class TestExceptionHierarchy:
    """Tests for exception classes."""

    def test_upgrade_error_context(self):
        """Upgrade errors carry the character and direction."""
        error = CharacterUpgradeError(
            "failed", character_id="char_1", direction="balanced-to-detailed"
        )
        assert str(error) == "failed"
        assert error.character_id == "char_1"
        assert error.direction == "balanced-to-detailed"

    def test_subclasses(self):
        """Specific errors are catchable as the base classes."""
        assert issubclass(InvalidUpgradeError, CharacterUpgradeError)
        assert issubclass(CharacterSynthesisError, CharacterUpgradeError)
        assert issubclass(CharacterUpgradeError, StoryForgeError)

    def test_synthesis_error_missing_fields(self):
        """Synthesis errors list the fields left empty."""
        error = CharacterSynthesisError("incomplete", missing_fields=["balanced.want"])
        assert error.missing_fields == ["balanced.want"]
        assert CharacterSynthesisError("incomplete").missing_fields == []
