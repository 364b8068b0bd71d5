"""Unit tests for the task classifier.

This module tests keyword scoring, whole-word matching, tone detection,
level selection, confidence arithmetic and the reasoning trail.
"""

import pytest

from taskcard.classifier import TaskClassifier, _stable_argmax, classify_task, get_classifier
from taskcard.models import Classification, TaskLevel
from taskcard.vocabulary import LEVEL_RECOMMENDATIONS, TONE_REASONS


@pytest.fixture
def classifier():
    return TaskClassifier()


class TestKeywordScoring:
    """Test cases for per-level raw and normalized scores."""

    def test_counts_every_occurrence(self, classifier):
        """Repeated keywords add up."""
        analysis = classifier.analyze("add add add")

        assert analysis.raw_scores[1] == 3
        assert analysis.scores[1] == 1.0

    def test_case_insensitive(self, classifier):
        """Upper-case keywords match lower-cased text and vice versa."""
        analysis = classifier.analyze("Build a Crud PAGE")

        assert analysis.raw_scores[1] == 3
        assert sorted(analysis.matched_keywords[1]) == ["CRUD", "build", "page"]

    def test_normalizes_against_top_level(self, classifier):
        """Scores are divided by the largest raw score."""
        analysis = classifier.analyze("add a form and a button, then integrate")

        assert analysis.raw_scores == {1: 3, 2: 1, 3: 0, 4: 0}
        assert analysis.scores[1] == 1.0
        assert analysis.scores[2] == pytest.approx(1 / 3)
        assert analysis.scores[3] == 0.0

    def test_no_matches_leaves_zero_scores(self, classifier):
        """Text without keywords keeps every score at zero."""
        analysis = classifier.analyze("the quick brown fox")

        assert analysis.raw_scores == {1: 0, 2: 0, 3: 0, 4: 0}
        assert analysis.scores == {1: 0.0, 2: 0.0, 3: 0.0, 4: 0.0}

    def test_duplicate_vocabulary_entry_counted_once(self, classifier):
        """API appears twice in the level 2 list but scores once per occurrence."""
        analysis = classifier.analyze("expose the API")

        assert analysis.raw_scores[2] == 1
        assert analysis.matched_keywords[2] == ["API"]

    def test_keyword_shared_between_levels(self, classifier):
        """A keyword listed for two levels scores for both."""
        analysis = classifier.analyze("分析")

        assert analysis.raw_scores[3] == 1
        assert analysis.raw_scores[4] == 1


class TestWholeWordMatching:
    """Test cases for keyword boundary rules."""

    def test_keyword_inside_longer_word_ignored(self, classifier):
        """'add' must not match inside 'addendum' or 'address'."""
        analysis = classifier.analyze("see the addendum for the address")

        assert analysis.raw_scores[1] == 0

    def test_digits_count_as_word_characters(self, classifier):
        """A digit glued to a keyword blocks the match."""
        analysis = classifier.analyze("api2 add3")

        assert analysis.raw_scores == {1: 0, 2: 0, 3: 0, 4: 0}

    def test_punctuation_is_a_boundary(self, classifier):
        """Hyphens and punctuation separate words."""
        analysis = classifier.analyze("add-on (api), re-add")

        assert analysis.raw_scores[1] == 2
        assert analysis.raw_scores[2] == 1

    def test_multi_word_and_hyphenated_keywords(self, classifier):
        """Hyphenated keywords match as a whole."""
        analysis = classifier.analyze("a cutting-edge idea")

        assert "cutting-edge" in analysis.matched_keywords[4]

    def test_cjk_keyword_inside_cjk_text(self, classifier):
        """CJK neighbours are not Latin letters, so the keyword matches."""
        analysis = classifier.analyze("实现用户登录")

        assert analysis.raw_scores[1] == 1
        assert analysis.matched_keywords[1] == ["实现"]

    def test_cjk_keyword_touching_latin_letters(self, classifier):
        """A CJK keyword directly after a Latin letter does not match."""
        analysis = classifier.analyze("api接口")

        assert analysis.raw_scores[2] == 1
        assert analysis.matched_keywords[2] == ["API"]

    def test_cjk_keyword_nested_in_longer_cjk_keyword(self, classifier):
        """Shorter CJK keywords also match inside longer ones."""
        analysis = classifier.analyze("可扩展性")

        assert set(analysis.matched_keywords[3]) == {"扩展", "可扩展性"}
        assert analysis.raw_scores[3] == 2


class TestToneDetection:
    """Test cases for complexity tone."""

    def test_defaults_to_medium(self, classifier):
        """No marker means medium tone."""
        assert classifier.analyze("add a form").tone == "medium"

    def test_substring_matching(self, classifier):
        """Markers match inside longer words."""
        analysis = classifier.analyze("an uncommon request")

        assert analysis.tone == "simple"
        assert analysis.tone_counts["simple"] == 1

    def test_highest_count_wins(self, classifier):
        """The tone with most markers wins."""
        analysis = classifier.analyze("a basic but complex and difficult job")

        assert analysis.tone_counts["simple"] == 1
        assert analysis.tone_counts["complex"] == 2
        assert analysis.tone == "complex"

    def test_ties_follow_declared_order(self, classifier):
        """simple beats complex when both have the same count."""
        assert classifier.analyze("simple yet complex").tone == "simple"
        assert classifier.analyze("typical but advanced").tone == "medium"

    def test_medium_marker(self, classifier):
        """Explicit medium markers are reported as medium."""
        analysis = classifier.analyze("a typical form")

        assert analysis.tone == "medium"
        assert analysis.tone_counts["medium"] == 1


class TestLevelSelection:
    """Test cases for base level and tone adjustment."""

    def test_tie_goes_to_lower_level(self, classifier):
        """Equal top scores resolve to the lowest numeral."""
        analysis = classifier.analyze("integrate the design")

        assert analysis.scores[2] == analysis.scores[3] == 1.0
        assert analysis.base_level == TaskLevel.INTEGRATION
        assert analysis.classification.level == TaskLevel.INTEGRATION

    def test_all_zero_picks_level_one(self, classifier):
        """With no keywords the base level is 1."""
        assert classifier.analyze("").base_level == TaskLevel.STANDARDIZED

    def test_simple_tone_lowers_level(self, classifier):
        """Simple tone moves the level down by one."""
        analysis = classifier.analyze("a simple integration workflow")

        assert analysis.base_level == TaskLevel.INTEGRATION
        assert analysis.classification.level == TaskLevel.STANDARDIZED

    def test_simple_tone_floors_at_one(self, classifier):
        """Simple tone cannot go below level 1."""
        result = classifier.classify("simple form")

        assert result.level == TaskLevel.STANDARDIZED

    def test_complex_tone_raises_level(self, classifier):
        """Complex tone moves the level up by one."""
        analysis = classifier.analyze("complex architecture design")

        assert analysis.base_level == TaskLevel.ARCHITECTURE
        assert analysis.classification.level == TaskLevel.INNOVATION

    def test_complex_tone_caps_at_four(self, classifier):
        """Complex tone cannot go above level 4."""
        result = classifier.classify("comprehensive research")

        assert result.level == TaskLevel.INNOVATION

    def test_innovation_tone_forces_level_four(self, classifier):
        """Innovation tone ignores the base level entirely."""
        analysis = classifier.analyze("add a breakthrough button")

        assert analysis.base_level == TaskLevel.STANDARDIZED
        assert analysis.tone == "innovation"
        assert analysis.classification.level == TaskLevel.INNOVATION


class TestConfidence:
    """Test cases for confidence arithmetic."""

    def test_clear_winner_is_clamped_to_one(self, classifier):
        """1.0 + bonus is clamped to 1.0."""
        assert classifier.classify("add a form").confidence == 1.0

    def test_empty_text_has_zero_confidence(self, classifier):
        """No signal gives zero confidence after the penalty clamp."""
        assert classifier.classify("").confidence == 0.0

    def test_shifted_level_reads_its_own_score(self, classifier):
        """After a tone shift the confidence uses the new level's score."""
        result = classifier.classify("sync the workflow and the service, then add a form, keep it simple")

        assert result.level == TaskLevel.STANDARDIZED
        assert result.confidence == pytest.approx(2 / 3)

    def test_close_scores_are_penalized(self, classifier):
        """A gap under 0.2 between the two best levels costs 0.15."""
        result = classifier.classify("add " * 10 + "sync " * 9 + "complex")

        assert result.level == TaskLevel.INTEGRATION
        assert result.confidence == pytest.approx(0.9 - 0.15)

    def test_shifted_to_unscored_level(self, classifier):
        """A tone shift onto a level with no keywords gives zero confidence."""
        assert classifier.classify("complex architecture design").confidence == 0.0

    def test_innovation_override_partial_confidence(self, classifier):
        """Overridden level keeps its own normalized score."""
        result = classifier.classify("add a breakthrough button")

        assert result.confidence == pytest.approx(0.5)


class TestReasoning:
    """Test cases for the reasoning trail."""

    def test_three_lines_when_keywords_match(self, classifier):
        """Keyword line, tone line and recommendation."""
        result = classifier.classify("add a form")

        assert result.reasoning == (
            "Description contains many keywords related to Level 1 Standardized Implementation",
            TONE_REASONS["medium"],
            LEVEL_RECOMMENDATIONS[TaskLevel.STANDARDIZED],
        )

    def test_keyword_line_names_top_scoring_level(self, classifier):
        """The keyword line follows the base level, not the adjusted one."""
        result = classifier.classify("complex architecture design")

        assert "Level 3" in result.reasoning[0]
        assert result.reasoning[1] == TONE_REASONS["complex"]
        assert result.reasoning[-1] == LEVEL_RECOMMENDATIONS[TaskLevel.INNOVATION]

    def test_keyword_line_omitted_without_matches(self, classifier):
        """No keyword line when nothing matched."""
        result = classifier.classify("hello there")

        assert result.reasoning == (
            TONE_REASONS["medium"],
            LEVEL_RECOMMENDATIONS[TaskLevel.STANDARDIZED],
        )

    def test_tone_lines(self, classifier):
        """Each tone has its own explanation."""
        assert classifier.classify("simple").reasoning[0] == TONE_REASONS["simple"]
        assert classifier.classify("revolutionary").reasoning[0] == TONE_REASONS["innovation"]


class TestClassifierConstruction:
    """Test cases for custom vocabularies and the shared classifier."""

    def test_custom_vocabularies(self):
        """Keyword and marker tables can be supplied."""
        classifier = TaskClassifier(
            keywords={TaskLevel.ARCHITECTURE: ["blueprint"]},
            complexity_markers={"complex": ["gnarly"]},
        )

        analysis = classifier.analyze("a gnarly blueprint")

        assert analysis.raw_scores == {1: 0, 2: 0, 3: 1, 4: 0}
        assert analysis.tone == "complex"
        assert analysis.classification.level == TaskLevel.INNOVATION

    def test_none_is_treated_as_empty(self, classifier):
        """None degenerates like the empty string."""
        assert classifier.classify(None) == classifier.classify("")

    def test_module_level_helper_uses_shared_classifier(self):
        """classify_task delegates to the shared instance."""
        assert get_classifier() is get_classifier()
        result = classify_task("add a form")

        assert isinstance(result, Classification)
        assert result.level == TaskLevel.STANDARDIZED


class TestStableArgmax:
    """Test cases for the order-preserving argmax helper."""

    def test_first_key_wins_ties(self):
        assert _stable_argmax(["b", "a", "c"], {"a": 1, "b": 1, "c": 0}) == "b"

    def test_returns_key_of_the_given_type(self, classifier):
        """The base level comes back as a TaskLevel, not a bare int."""
        analysis = classifier.analyze("integrate the design")

        assert type(analysis.base_level) is TaskLevel
        assert analysis.base_level is TaskLevel.INTEGRATION
