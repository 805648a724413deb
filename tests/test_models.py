"""Tests for the models module."""

from datetime import datetime, timezone

import pandas as pd
import pytest

from decline_predictor.models import NewsArticle, PriceSeries, StockAnalysis


def test_price_series_keeps_order():
    """Direct construction is taken as most recent first."""
    series = PriceSeries((103, 102, 101), (30, 20, 10))
    assert series.closes == (103.0, 102.0, 101.0)
    assert series.volumes == (30.0, 20.0, 10.0)
    assert len(series) == 3


def test_price_series_from_chronological():
    """Oldest-first input is reversed."""
    series = PriceSeries.from_chronological([101, 102, 103], [10, 20, 30])
    assert series.closes == (103.0, 102.0, 101.0)
    assert series.volumes == (30.0, 20.0, 10.0)


def test_price_series_from_frame():
    """Frames are sorted newest first regardless of row order."""
    dates = pd.date_range(start='2024-01-01', periods=5, freq='D')
    df = pd.DataFrame({'close': [1.0, 2.0, 3.0, 4.0, 5.0], 'volume': [10, 20, 30, 40, 50]}, index=dates)
    series = PriceSeries.from_frame(df.iloc[::-1].sample(frac=1, random_state=0), limit=3)
    assert series.closes == (5.0, 4.0, 3.0)
    assert series.volumes == (50.0, 40.0, 30.0)


def test_price_series_length_mismatch():
    """Volumes must align with closes."""
    with pytest.raises(ValueError):
        PriceSeries((1.0, 2.0), (10.0,))


def test_price_series_is_immutable():
    series = PriceSeries((1.0,))
    with pytest.raises(AttributeError):
        series.closes = (2.0,)


def test_price_series_to_chronological():
    """Series for ``ta`` is oldest first."""
    series = PriceSeries((3.0, 2.0, 1.0))
    assert series.to_chronological().tolist() == [1.0, 2.0, 3.0]
    assert series.latest(2).closes == (3.0, 2.0)


def test_news_article_from_dict():
    """Articles accept the camelCase wire format."""
    article = NewsArticle.from_dict({
        'title': 'Title',
        'source': 'Reuters',
        'publishedAt': '2024-05-01T09:00:00Z',
        'sentiment': -3,
        'summary': 'Summary',
        'url': 'https://reuters.com/example',
    })
    assert article.sentiment == -3.0
    assert article.published_at_utc == pd.Timestamp('2024-05-01T09:00:00Z')
    assert article.to_dict()['url'] == 'https://reuters.com/example'


def test_news_article_missing_field():
    with pytest.raises(ValueError):
        NewsArticle.from_dict({'title': 'Title', 'publishedAt': '2024-05-01'})


def test_news_article_requires_publication_time():
    """Articles without a publication time are rejected rather than stored as 'None'."""
    with pytest.raises(ValueError, match='publishedAt'):
        NewsArticle.from_dict({'title': 'Title', 'source': 'Reuters', 'sentiment': 5.0})
    with pytest.raises(ValueError, match='publishedAt'):
        NewsArticle.from_dict({'title': 'Title', 'source': 'Reuters', 'sentiment': 5.0, 'publishedAt': None})


def test_stock_analysis_round_trip():
    """Records survive conversion to and from JSON-ready dicts."""
    analysis = StockAnalysis(
        ticker='MSFT', prediction_percentage=-1.5, confidence_level=70, base_decline=-1.0,
        sentiment_score=-2.0, sentiment_impact=-0.6, volume_impact=0.0, technical_impact=0.05,
        market_correlation=0.05, current_price=410.0, daily_change=0.4, volume='20.1M',
        market_cap='$3.05T', rsi_value=55.0,
        news_articles=(NewsArticle('Title', 'CNBC', '2024-05-01T09:00:00+00:00', -2.0, 'Summary'),),
        id='id1', created_at=datetime(2024, 5, 1, tzinfo=timezone.utc),
    )
    assert StockAnalysis.from_dict(analysis.to_dict()) == analysis
