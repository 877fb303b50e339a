"""
Tests for services.api.classification.classifier.

Covers category scoring and tie-breaks, the negative-biased sentiment
threshold, severity arithmetic and clamping, keyword extraction,
emotion inference and the end-to-end classify() contract.
"""

import pytest

from services.api.classification import classify
from services.api.classification.classifier import (
    AnalysisResult,
    category_scores,
    extract_keywords,
    infer_category,
    infer_emotion,
    infer_sentiment,
    score_severity,
    sentiment_scores,
)
from services.api.classification.taxonomy import (
    CATEGORY_RULES,
    DEFAULT_TAXONOMY,
    VALID_CATEGORIES,
    VALID_EMOTIONS,
    VALID_SENTIMENTS,
    CategoryRule,
    Taxonomy,
)


# ---------------------------------------------------------------------------
# End-to-end
# ---------------------------------------------------------------------------

class TestClassifyEndToEnd:
    TEXT = "Massive pothole on Main St damaged my tire, city needs to fix this ASAP"

    def test_pothole_report(self):
        result = classify(self.TEXT)
        assert isinstance(result, AnalysisResult)
        assert result.category == "Roads"
        assert result.sentiment == "negative"
        assert result.severity >= 6
        assert "pothole" in result.keywords
        assert "damaged" in result.keywords
        assert "main" in result.keywords

    def test_pothole_report_exact_scores(self):
        result = classify(self.TEXT)
        # 3 + damaged(3) + pothole(2) + fix(2) + asap(1) + massive(1), clamped
        assert result.severity == 10
        assert result.keywords == ["massive", "pothole", "main", "damaged", "tire"]
        assert result.emotion == "frustration"

    def test_idempotent(self):
        assert classify(self.TEXT) == classify(self.TEXT)

    def test_empty_text_yields_complete_fallback(self):
        result = classify("")
        assert result.category == "Other"
        assert result.sentiment == "neutral"
        assert result.severity == 3
        assert result.keywords == []
        assert result.emotion == "neutral"

    def test_none_is_treated_as_empty(self):
        assert classify(None) == classify("")

    @pytest.mark.parametrize("text", [
        "",
        "!!!",
        "a" * 5000,
        "emergency fire injured collapse gas leak explosion death",
        "minor small slight suggestion idea cosmetic would be nice",
        "Тротуар сломан 🚧",
    ])
    def test_result_always_in_range(self, text):
        result = classify(text)
        assert 1 <= result.severity <= 10
        assert result.category in VALID_CATEGORIES
        assert result.sentiment in VALID_SENTIMENTS
        assert result.emotion in VALID_EMOTIONS
        assert len(result.keywords) <= 5


# ---------------------------------------------------------------------------
# Category
# ---------------------------------------------------------------------------

class TestCategory:
    def test_negative_indicator_weighs_one_and_a_half(self):
        scores = category_scores("bus sinkhole")
        assert scores["Transport"] == 1
        assert scores["Roads"] == 1.5
        assert infer_category("bus sinkhole") == "Roads"

    def test_keywords_can_outweigh_one_indicator(self):
        assert infer_category("bus train sinkhole") == "Transport"

    @pytest.mark.parametrize("text", ["rent road", "road rent"])
    def test_tie_goes_to_earlier_declared_category(self, text):
        # Housing is declared before Roads
        assert infer_category(text) == "Housing"

    def test_substring_match_inside_other_words(self):
        # "rat" is an Environment keyword and fires inside "moderate"
        assert infer_category("moderate") == "Environment"

    def test_no_match_falls_back_to_other(self):
        assert infer_category("hello world") == "Other"

    def test_case_insensitive(self):
        assert infer_category("POTHOLE") == "Roads"

    def test_repeated_keyword_counts_once(self):
        scores = category_scores("bus bus bus bus")
        assert scores["Transport"] == 1

    def test_scores_cover_every_category_in_order(self):
        scores = category_scores("anything")
        assert list(scores) == [rule.name for rule in CATEGORY_RULES]

    def test_custom_taxonomy(self):
        taxonomy = Taxonomy(
            categories=(CategoryRule("Parks", ("swing",), ("rusty",)),),
            fallback_category="Misc",
            severity=DEFAULT_TAXONOMY.severity,
            negative_intensifiers=(),
            negative_words=(),
            positive_words=(),
            emotions={},
            stop_words=frozenset(),
        )
        assert infer_category("rusty swing", taxonomy) == "Parks"
        assert infer_category("pothole", taxonomy) == "Misc"


# ---------------------------------------------------------------------------
# Sentiment
# ---------------------------------------------------------------------------

class TestSentiment:
    def test_three_negative_two_positive_is_not_negative(self):
        text = "good great bad broken problem"
        assert sentiment_scores(text) == (3, 2)
        assert infer_sentiment(text) == "neutral"

    def test_four_negative_two_positive_is_negative(self):
        text = "good great bad broken problem issue"
        assert sentiment_scores(text) == (4, 2)
        assert infer_sentiment(text) == "negative"

    def test_single_negative_word_is_neutral(self):
        assert sentiment_scores("bad") == (1, 0)
        assert infer_sentiment("bad") == "neutral"

    def test_positive_needs_only_to_exceed_negative(self):
        assert infer_sentiment("great job, thank you") == "positive"

    def test_negative_indicator_counts_double(self):
        neg, pos = sentiment_scores("sidewalk cracked")
        assert (neg, pos) == (2, 0)
        assert infer_sentiment("sidewalk cracked") == "negative"

    def test_intensifiers_add_negativity(self):
        neg, _ = sentiment_scores("fix it asap, this is unacceptable")
        assert neg == 2

    def test_equal_scores_are_neutral(self):
        assert infer_sentiment("good bad") == "neutral"

    def test_no_sentiment_words(self):
        assert sentiment_scores("the sky") == (0, 0)
        assert infer_sentiment("the sky") == "neutral"


# ---------------------------------------------------------------------------
# Severity
# ---------------------------------------------------------------------------

class TestSeverity:
    @pytest.mark.parametrize("text,expected", [
        ("", 3),
        ("urgent", 4),
        ("explosion", 7),
        ("minor suggestion", 1),
        ("minor small slight suggestion idea cosmetic", 1),
        ("gas leak", 10),
        ("emergency fire injured collapse", 10),
    ])
    def test_scores(self, text, expected):
        assert score_severity(text) == expected

    def test_medium_tier_adds_two(self):
        assert score_severity("loud") == 5

    def test_high_tier_adds_three(self):
        assert score_severity("accident") == 6

    def test_low_tier_subtracts_one(self):
        assert score_severity("minor") == 2

    def test_intensifier_adds_one(self):
        assert score_severity("explosion asap") == 8


# ---------------------------------------------------------------------------
# Keywords
# ---------------------------------------------------------------------------

class TestKeywords:
    def test_frequency_then_first_occurrence(self):
        assert extract_keywords("zebra apple zebra apple mango") == ["zebra", "apple", "mango"]

    def test_higher_frequency_first(self):
        assert extract_keywords("mango zebra zebra") == ["zebra", "mango"]

    def test_drops_stop_words_and_short_tokens(self):
        assert extract_keywords("the cat is on the big mat") == ["cat", "big", "mat"]

    def test_strips_punctuation(self):
        assert extract_keywords("pothole! pothole? road.") == ["pothole", "road"]

    def test_limit_five(self):
        text = "alpha bravo charlie delta echo foxtrot golf"
        assert extract_keywords(text) == ["alpha", "bravo", "charlie", "delta", "echo"]

    def test_custom_limit(self):
        assert extract_keywords("alpha bravo charlie", limit=2) == ["alpha", "bravo"]

    def test_lowercases(self):
        assert extract_keywords("Subway SUBWAY subway") == ["subway"]


# ---------------------------------------------------------------------------
# Emotion
# ---------------------------------------------------------------------------

class TestEmotion:
    def test_keyword_hit(self):
        assert infer_emotion("I am so angry", "negative") == "anger"

    def test_satisfaction(self):
        assert infer_emotion("thank you", "positive") == "satisfaction"

    def test_tie_goes_to_earlier_declared_emotion(self):
        # one anger hit ("unacceptable"), one frustration hit ("frustrat")
        assert infer_emotion("unacceptable and frustrating", "negative") == "anger"

    def test_most_hits_wins(self):
        assert infer_emotion("worried and scared, so angry", "negative") == "concern"

    @pytest.mark.parametrize("sentiment,expected", [
        ("negative", "frustration"),
        ("positive", "satisfaction"),
        ("neutral", "neutral"),
    ])
    def test_fallback_follows_sentiment(self, sentiment, expected):
        assert infer_emotion("nothing here", sentiment) == expected

    def test_classify_uses_sentiment_fallback(self):
        result = classify("bad awful")
        assert result.sentiment == "negative"
        assert result.emotion == "frustration"
