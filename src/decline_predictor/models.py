"""Data structures passed between the loaders, the engines and the store."""

from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple

import pandas as pd


@dataclass(frozen=True)
class PriceSeries:
    """Daily closes and volumes, most recent first.

    Index 0 is the latest session. Every indicator in the package relies on
    this ordering, so build instances from oldest-first data through
    ``from_chronological`` or ``from_frame`` rather than reversing by hand.
    """

    closes: Tuple[float, ...] = ()
    volumes: Tuple[float, ...] = ()

    def __post_init__(self):
        closes = tuple(float(c) for c in self.closes)
        volumes = tuple(float(v) for v in self.volumes)
        if volumes and len(volumes) != len(closes):
            raise ValueError(
                f"Volume history has {len(volumes)} entries but price history has {len(closes)}"
            )
        object.__setattr__(self, 'closes', closes)
        object.__setattr__(self, 'volumes', volumes)

    @classmethod
    def from_chronological(
        cls, closes: Sequence[float], volumes: Optional[Sequence[float]] = None
    ) -> 'PriceSeries':
        """Build a series from oldest-first sequences."""
        return cls(tuple(reversed(list(closes))), tuple(reversed(list(volumes or []))))

    @classmethod
    def from_frame(cls, df: pd.DataFrame, limit: Optional[int] = None) -> 'PriceSeries':
        """Build a series from a date-indexed frame with ``close`` and ``volume`` columns."""
        if df.empty:
            return cls()
        ordered = df.sort_index(ascending=False)
        if limit is not None:
            ordered = ordered.head(limit)
        volumes = ordered['volume'].tolist() if 'volume' in ordered.columns else []
        return cls(tuple(ordered['close'].tolist()), tuple(volumes))

    def __len__(self) -> int:
        return len(self.closes)

    def latest(self, n: int) -> 'PriceSeries':
        """Return the ``n`` most recent sessions."""
        return PriceSeries(self.closes[:n], self.volumes[:n])

    def to_chronological(self) -> pd.Series:
        """Closes as an oldest-first pandas Series, as the ``ta`` indicators expect."""
        return pd.Series(list(reversed(self.closes)), dtype=float)


@dataclass(frozen=True)
class NewsArticle:
    title: str
    source: str
    published_at: str
    sentiment: float
    summary: str
    url: Optional[str] = None

    @property
    def published_at_utc(self) -> pd.Timestamp:
        """Publication time as a UTC timestamp. Naive strings are read as UTC."""
        ts = pd.Timestamp(self.published_at)
        if ts.tzinfo is None:
            return ts.tz_localize('UTC')
        return ts.tz_convert('UTC')

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'NewsArticle':
        published_at = data.get('publishedAt', data.get('published_at'))
        if published_at is None:
            raise ValueError("News article is missing field 'publishedAt'")
        try:
            return cls(
                title=str(data['title']),
                source=str(data['source']),
                published_at=str(published_at),
                sentiment=float(data['sentiment']),
                summary=str(data.get('summary', '')),
                url=data.get('url'),
            )
        except KeyError as e:
            raise ValueError(f"News article is missing field {e}") from e

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'title': self.title,
            'source': self.source,
            'publishedAt': self.published_at,
            'sentiment': self.sentiment,
            'summary': self.summary,
        }
        if self.url is not None:
            data['url'] = self.url
        return data


@dataclass(frozen=True)
class StockData:
    symbol: str
    price: float
    change: float
    change_percent: float
    volume: float
    market_cap: float
    high_52_week: float
    low_52_week: float
    avg_volume: float
    historical_prices: PriceSeries = field(default_factory=PriceSeries)


@dataclass(frozen=True)
class TechnicalIndicators:
    rsi: float
    bollinger_upper: float
    bollinger_middle: float
    bollinger_lower: float
    current_position: str
    volume_anomaly: float


@dataclass(frozen=True)
class PredictionBreakdown:
    """Decomposed weekly decline, each field rounded to two decimals."""

    weekly_decline: float
    base_decline: float
    sentiment_impact: float
    volume_impact: float
    technical_impact: float
    market_correlation: float


# Python attribute -> JSON key, in the order records are written
_ANALYSIS_KEYS = {
    'id': 'id',
    'ticker': 'ticker',
    'prediction_percentage': 'predictionPercentage',
    'confidence_level': 'confidenceLevel',
    'base_decline': 'baseDecline',
    'sentiment_score': 'sentimentScore',
    'sentiment_impact': 'sentimentImpact',
    'volume_impact': 'volumeImpact',
    'technical_impact': 'technicalImpact',
    'market_correlation': 'marketCorrelation',
    'current_price': 'currentPrice',
    'daily_change': 'dailyChange',
    'volume': 'volume',
    'market_cap': 'marketCap',
    'rsi_value': 'rsiValue',
    'news_articles': 'newsArticles',
    'created_at': 'createdAt',
}


@dataclass(frozen=True)
class StockAnalysis:
    """One finished analysis for a ticker."""

    ticker: str
    prediction_percentage: float
    confidence_level: int
    base_decline: float
    sentiment_score: float
    sentiment_impact: float
    volume_impact: float
    technical_impact: float
    market_correlation: float
    current_price: float
    daily_change: float
    volume: str
    market_cap: str
    rsi_value: float
    news_articles: Tuple[NewsArticle, ...] = ()
    id: Optional[str] = None
    created_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name == 'news_articles':
                value = [article.to_dict() for article in value]
            elif f.name == 'created_at' and value is not None:
                value = value.isoformat()
            data[_ANALYSIS_KEYS[f.name]] = value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'StockAnalysis':
        kwargs = {}
        for name, key in _ANALYSIS_KEYS.items():
            if key in data:
                kwargs[name] = data[key]
        kwargs['news_articles'] = tuple(
            NewsArticle.from_dict(a) for a in kwargs.get('news_articles', [])
        )
        created_at = kwargs.get('created_at')
        if isinstance(created_at, str):
            parsed = datetime.fromisoformat(created_at)
            if parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=timezone.utc)
            kwargs['created_at'] = parsed
        return cls(**kwargs)


def articles_from_list(items: List[Dict[str, Any]]) -> List[NewsArticle]:
    """Convert a list of JSON objects to articles."""
    return [NewsArticle.from_dict(item) for item in items]
