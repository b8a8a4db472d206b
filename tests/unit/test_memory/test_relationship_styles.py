"""Tests for relationship classification and edge styles."""

import pytest

from story_forge.memory.relationship_styles import (
    CLASSIFICATION_RULES,
    LATENT_EDGE_STYLE,
    RELATIONSHIP_STYLES,
    RelationshipCategory,
    classify_relationship,
    get_complex_gradient_id,
    get_relationship_style,
)


class TestClassifyRelationship:
    """Tests for the ordered keyword classifier."""

    @pytest.mark.parametrize(
        "relationship_type,expected",
        [
            ("best friend", RelationshipCategory.ALLY),
            ("Sworn Enemy", RelationshipCategory.RIVAL),
            ("estranged brother", RelationshipCategory.FAMILY),
            ("secret lover", RelationshipCategory.ROMANTIC),
            ("former apprentice", RelationshipCategory.MENTOR),
            ("business partner", RelationshipCategory.PROFESSIONAL),
            ("it's complicated", RelationshipCategory.COMPLEX),
            ("neighbor", RelationshipCategory.DEFAULT),
        ],
    )
    def test_categories(self, relationship_type, expected):
        """Each table row is reachable by one of its keywords."""
        assert classify_relationship(relationship_type) == expected

    def test_first_row_wins(self):
        """Table order decides between keywords of several rows."""
        assert classify_relationship("friend and rival") == RelationshipCategory.ALLY
        assert classify_relationship("rival and friend") == RelationshipCategory.ALLY
        assert classify_relationship("rival brother") == RelationshipCategory.RIVAL

    def test_normalizes_case_and_whitespace(self):
        """Input is trimmed and lowercased before matching."""
        assert classify_relationship("  MENTOR  ") == RelationshipCategory.MENTOR

    @pytest.mark.parametrize(
        "relationship_type,expected",
        [
            ("friendship", RelationshipCategory.ALLY),
            ("loved one", RelationshipCategory.ROMANTIC),
            ("archenemy", RelationshipCategory.RIVAL),
            ("godfather", RelationshipCategory.FAMILY),
            ("stepdaughter", RelationshipCategory.FAMILY),
            ("emotionally distant", RelationshipCategory.ALLY),
            ("grandson", RelationshipCategory.DEFAULT),
        ],
    )
    def test_keyword_anywhere_in_text(self, relationship_type, expected):
        """Keywords match as substrings, including inside compound words."""
        assert classify_relationship(relationship_type) == expected

    def test_compound_word_follows_row_order(self):
        """A compound holding keywords of two rows takes the earlier row."""
        assert classify_relationship("boyfriend") == RelationshipCategory.ALLY
        assert classify_relationship("girlfriend") == RelationshipCategory.ALLY

    @pytest.mark.parametrize("relationship_type", ["", "   ", None])
    def test_empty_is_default(self, relationship_type):
        """Empty input gets the default category."""
        assert classify_relationship(relationship_type) == RelationshipCategory.DEFAULT


class TestRelationshipStyles:
    """Tests for the style table."""

    def test_every_rule_has_a_style(self):
        """Each classified category has a style."""
        for category, _keywords in CLASSIFICATION_RULES:
            assert category in RELATIONSHIP_STYLES

    def test_rival_style(self):
        """Rivals are red, dashed."""
        style = get_relationship_style("rival")
        assert style.color == "#EF4444"
        assert style.stroke_width == 3
        assert style.stroke_dasharray == "8,4"
        assert style.opacity == 0.7

    def test_family_style(self):
        """Family edges are amber and thicker."""
        style = get_relationship_style("mother")
        assert style.color == "#F59E0B"
        assert style.stroke_width == 4
        assert style.opacity == 0.8

    def test_professional_style(self):
        """Professional edges are thin gray."""
        style = get_relationship_style("colleague")
        assert style.color == "#6B7280"
        assert style.stroke_width == 2
        assert style.opacity == 0.5

    def test_complex_style_requests_gradient(self):
        """Complex edges ask the renderer for a gradient."""
        style = get_relationship_style("ambivalent")
        assert style.gradient is True
        assert style.category == RelationshipCategory.COMPLEX

    def test_default_style(self):
        """Unmatched types use the default green style."""
        style = get_relationship_style("neighbor")
        assert style.color == "#10B981"
        assert style.stroke_width == 3
        assert style.opacity == 0.6
        assert style.stroke_dasharray is None
        assert style.gradient is False

    def test_latent_style(self):
        """Latent edges are faint gray."""
        assert LATENT_EDGE_STYLE.color == "#666666"
        assert LATENT_EDGE_STYLE.stroke_width == 1
        assert LATENT_EDGE_STYLE.opacity == 0.1
        assert LATENT_EDGE_STYLE.category == RelationshipCategory.LATENT

    def test_only_rival_is_dashed(self):
        """Dash patterns are reserved for rivals."""
        dashed = [c for c, s in RELATIONSHIP_STYLES.items() if s.stroke_dasharray]
        assert dashed == [RelationshipCategory.RIVAL]


class TestComplexGradientId:
    """Tests for gradient identifiers."""

    def test_format(self):
        """Whitespace becomes hyphens and the id is lowercased."""
        gradient_id = get_complex_gradient_id("Ana Reyes", "Marco  Diaz")
        assert gradient_id == "gradient-ana-reyes-marco-diaz"

    def test_order_matters(self):
        """Names are used in the given order."""
        assert get_complex_gradient_id("A", "B") != get_complex_gradient_id("B", "A")
