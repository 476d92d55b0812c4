"""
Sentiment scoring backed by the AFINN lexicon.
"""

import re
from typing import Optional

from afinn import Afinn

from models import SentimentResult

POSITIVE_THRESHOLD = 2
NEGATIVE_THRESHOLD = -2

_TOKEN = re.compile(r"[a-z0-9']+")

# Lazy initialization of the AFINN scorer (loads the word list from disk)
_afinn: Optional[Afinn] = None


def get_scorer() -> Afinn:
    global _afinn
    if _afinn is None:
        _afinn = Afinn()
    return _afinn


def tokenize(text: str) -> list:
    return _TOKEN.findall(text.lower())


def label_for_score(score: float) -> str:
    if score > POSITIVE_THRESHOLD:
        return "Positive"
    if score < NEGATIVE_THRESHOLD:
        return "Negative"
    return "Neutral"


def neutral_sentiment() -> SentimentResult:
    return SentimentResult(score=0, label="Neutral", comparative=0)


def analyze_sentiment(text: str) -> SentimentResult:
    """
    Score ``text`` with AFINN.

    ``comparative`` is the score per token, rounded to two decimals.
    """
    tokens = tokenize(text or "")
    if not tokens:
        return neutral_sentiment()

    score = get_scorer().score(" ".join(tokens))
    if float(score).is_integer():
        score = int(score)
    comparative = round(score / len(tokens), 2)

    return SentimentResult(
        score=score,
        label=label_for_score(score),
        comparative=comparative,
    )
