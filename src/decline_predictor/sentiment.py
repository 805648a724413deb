"""News sentiment scoring.

Articles are combined into one weighted average. Each article's weight is the
product of a recency weight, decaying linearly to a floor over
``SENTIMENT_DECAY_HOURS``, and a credibility weight for its outlet.
"""

import logging
from typing import Iterable, List, Optional

import pandas as pd

from .config import (
    DEFAULT_SOURCE_WEIGHT,
    MIN_RECENCY_WEIGHT,
    SENTIMENT_DECAY_HOURS,
    SOURCE_WEIGHTS,
)
from .models import NewsArticle

logger = logging.getLogger(__name__)

def get_source_weight(source: str) -> float:
    """Credibility weight for a news outlet, ``DEFAULT_SOURCE_WEIGHT`` if unlisted."""
    return SOURCE_WEIGHTS.get(source, DEFAULT_SOURCE_WEIGHT)

def calculate_recency_weight(hours_ago: float) -> float:
    """Linear decay over the decay horizon, never below the floor."""
    return max(MIN_RECENCY_WEIGHT, 1 - (hours_ago / SENTIMENT_DECAY_HOURS))

def _utc_now() -> pd.Timestamp:
    return pd.Timestamp.now(tz='UTC')

def calculate_sentiment_score(articles: Iterable[NewsArticle], now: Optional[pd.Timestamp] = None) -> float:
    """Calculate the weighted average sentiment of a set of articles.

    Args:
        articles: News articles with sentiment in [-10, 10]
        now: Reference time for article age (default: current UTC time)

    Returns:
        Weighted average sentiment, or 0.0 when there are no articles
    """
    articles = list(articles)
    if not articles:
        return 0.0

    if now is None:
        now = _utc_now()
    elif now.tzinfo is None:
        now = now.tz_localize('UTC')

    weighted_sum = 0.0
    total_weight = 0.0
    for article in articles:
        hours_ago = (now - article.published_at_utc).total_seconds() / 3600
        weight = calculate_recency_weight(hours_ago) * get_source_weight(article.source)
        weighted_sum += article.sentiment * weight
        total_weight += weight

    score = weighted_sum / total_weight
    logger.debug(f"Sentiment over {len(articles)} articles: {score:.3f}")
    return score

def summarize_sentiment(articles: List[NewsArticle]) -> dict:
    """Count positive, negative and neutral articles."""
    return {
        'positive': sum(1 for a in articles if a.sentiment > 0),
        'negative': sum(1 for a in articles if a.sentiment < 0),
        'neutral': sum(1 for a in articles if a.sentiment == 0),
    }
