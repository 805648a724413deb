"""Configuration settings for the Weekly Decline Predictor."""

from pathlib import Path
from types import MappingProxyType

# Directory paths
DATA_DIR = Path("data")
DEFAULT_STORE_PATH = DATA_DIR / "analyses.json"

# Input parameters
HISTORY_DAYS = 20  # Closes kept from a daily price file
REQUIRED_COLUMNS = ["close", "volume"]
TICKER_PATTERN = r"^[A-Z]{1,10}$"

# Technical indicator parameters
RSI_PERIOD = 14
NEUTRAL_RSI = 50.0
RSI_OVERSOLD = 30
RSI_OVERBOUGHT = 70
BOLLINGER_PERIOD = 20
BOLLINGER_STD_DEV = 2
BOLLINGER_FALLBACK_BAND = 0.02  # +/-2% when history is shorter than the period

# News sentiment parameters
SENTIMENT_DECAY_HOURS = 48
MIN_RECENCY_WEIGHT = 0.1
SENTIMENT_BOUNDS = (-10.0, 10.0)

# Credibility weight per news outlet
SOURCE_WEIGHTS = MappingProxyType({
    'Reuters': 1.0,
    'Bloomberg': 1.0,
    'Financial Times': 1.0,
    'Wall Street Journal': 1.0,
    'MarketWatch': 0.9,
    'CNBC': 0.9,
    'Yahoo Finance': 0.8,
    'CNN Business': 0.8,
})
DEFAULT_SOURCE_WEIGHT = 0.7  # Any outlet not listed above

# Prediction parameters
WEEK_LENGTH = 5          # Trading days per week
MAX_WEEKS = 5            # Weekly windows averaged into the base decline
DEFAULT_BASE_DECLINE = -2.0
DEFAULT_MARKET_CORRELATION = 0.7
IMPACT_WEIGHTS = MappingProxyType({
    'sentiment': 0.3,
    'volume': 0.2,
    'technical': 0.15,
    'market_correlation': 0.1,
})
BOLLINGER_POSITION_TERMS = MappingProxyType({
    'lower': -0.5,
    'middle': 0.0,
    'upper': 0.5,
})

# Confidence parameters
CONFIDENCE_BASE = 50
CONFIDENCE_MIN = 10
CONFIDENCE_MAX = 95
CONFIDENCE_VOLATILITY_WINDOW = 10  # Most recent closes used for the volatility penalty
CONFIDENCE_ADJUSTMENTS = MappingProxyType({
    'history_deep': 20,      # >= 20 closes
    'history_moderate': 10,  # >= 10 closes
    'news_heavy': 15,        # >= 5 articles
    'news_moderate': 10,     # >= 3 articles
    'news_light': 5,         # >= 1 article
    'rsi_extreme': 10,       # RSI < 30 or > 70
    'bollinger_edge': 5,     # Price outside the bands
    'volume_anomaly': 5,     # |anomaly| > 0.2
    'volatility_high': -15,  # > 0.05
    'volatility_medium': -10,  # > 0.03
})
VOLUME_ANOMALY_THRESHOLD = 0.2
HIGH_VOLATILITY = 0.05
MEDIUM_VOLATILITY = 0.03

# Storage parameters
CACHE_TTL_MINUTES = 60
RECENT_LIMIT = 10
