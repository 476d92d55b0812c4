"""AFINN-backed sentiment scoring and label thresholds."""

import pytest

from analyzer.sentiment import analyze_sentiment, label_for_score, tokenize


class TestLabelThresholds:
    @pytest.mark.parametrize(
        "score, label",
        [(3, "Positive"), (2, "Neutral"), (0, "Neutral"), (-2, "Neutral"), (-3, "Negative")],
    )
    def test_thresholds(self, score, label):
        assert label_for_score(score) == label


class TestAnalyzeSentiment:
    def test_positive_text(self):
        result = analyze_sentiment("I love this wonderful, amazing product!")
        assert result.label == "Positive"
        assert result.score > 2
        assert result.comparative > 0

    def test_negative_text(self):
        result = analyze_sentiment("A terrible, awful and horrible experience.")
        assert result.label == "Negative"
        assert result.score < -2
        assert result.comparative < 0

    def test_neutral_text(self):
        result = analyze_sentiment("The table is brown and the chair is grey.")
        assert result.label == "Neutral"
        assert result.score == 0
        assert result.comparative == 0

    @pytest.mark.parametrize("text", ["", "   ", "!!! ???"])
    def test_empty_text(self, text):
        result = analyze_sentiment(text)
        assert (result.score, result.label, result.comparative) == (0, "Neutral", 0)

    def test_comparative_is_score_per_token(self):
        result = analyze_sentiment("good good table chair")
        assert result.comparative == round(result.score / 4, 2)

    def test_comparative_rounded_to_two_decimals(self):
        result = analyze_sentiment("good " + "word " * 6)
        assert result.comparative == round(result.comparative, 2)

    def test_tokenize_lowercases_and_drops_punctuation(self):
        assert tokenize("Hello, World! It's GREAT.") == ["hello", "world", "it's", "great"]
