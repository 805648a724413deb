"""Weekly decline prediction and confidence scoring.

The prediction is a heuristic sum of five components:

    weekly_decline = base_decline + sentiment_impact + volume_impact
                     + technical_impact + market_correlation

Components are computed at full precision and rounded to two decimals only
when the breakdown is returned. The confidence level is a rule-based
reliability estimate in [10, 95], not a probability.
"""

import logging
from typing import Iterable, List, Optional, Sequence

import numpy as np
import pandas as pd

from .config import (
    BOLLINGER_POSITION_TERMS,
    CONFIDENCE_ADJUSTMENTS,
    CONFIDENCE_BASE,
    CONFIDENCE_MAX,
    CONFIDENCE_MIN,
    CONFIDENCE_VOLATILITY_WINDOW,
    DEFAULT_BASE_DECLINE,
    DEFAULT_MARKET_CORRELATION,
    HIGH_VOLATILITY,
    IMPACT_WEIGHTS,
    MAX_WEEKS,
    MEDIUM_VOLATILITY,
    RSI_OVERBOUGHT,
    RSI_OVERSOLD,
    SENTIMENT_BOUNDS,
    VOLUME_ANOMALY_THRESHOLD,
    WEEK_LENGTH,
)
from .indicators import calculate_technical_indicators
from .models import NewsArticle, PredictionBreakdown, PriceSeries, StockAnalysis, StockData, TechnicalIndicators
from .output import format_market_cap, format_volume
from .sentiment import calculate_sentiment_score

logger = logging.getLogger(__name__)

def calculate_base_decline(prices: Sequence[float]) -> float:
    """Average percentage change over up to five trailing 5-session windows.

    Windows are taken newest first: sessions 0-4, 5-9, and so on. Each change
    is measured from the oldest close in the window to the newest one.
    Returns ``DEFAULT_BASE_DECLINE`` with fewer than five prices.
    """
    if len(prices) < WEEK_LENGTH:
        return DEFAULT_BASE_DECLINE

    weekly_changes = []
    for i in range(min(MAX_WEEKS, len(prices) // WEEK_LENGTH)):
        week_start = i * WEEK_LENGTH
        week_end = week_start + WEEK_LENGTH - 1
        if week_end < len(prices):
            start_price = prices[week_end]
            end_price = prices[week_start]
            if start_price == 0:
                logger.warning(f"Zero close at session {week_end}, skipping week {i + 1}")
                continue
            weekly_changes.append((end_price - start_price) / start_price * 100)

    if not weekly_changes:
        return DEFAULT_BASE_DECLINE
    return float(np.mean(weekly_changes))

def calculate_volatility(changes: Sequence[float]) -> float:
    """Population standard deviation of fractional changes, 0 when empty."""
    if len(changes) == 0:
        return 0.0
    return float(np.std(np.asarray(changes, dtype=float)))

def calculate_market_correlation(prices: Sequence[float]) -> float:
    """Approximate market correlation from historical volatility.

    There is no index series to regress against, so higher volatility stands
    in for higher exposure to market stress, capped at 1.0.
    """
    if len(prices) < 2:
        return DEFAULT_MARKET_CORRELATION

    arr = np.asarray(prices, dtype=float)
    changes = (arr[:-1] - arr[1:]) / arr[1:]
    volatility = calculate_volatility(changes)
    return min(1.0, 0.5 + volatility * 10)

def calculate_prediction(
    stock_data: StockData,
    indicators: TechnicalIndicators,
    sentiment_score: float
) -> PredictionBreakdown:
    """Combine trend, sentiment, volume and technicals into a weekly decline."""
    prices = stock_data.historical_prices.closes

    base_decline = calculate_base_decline(prices)

    low, high = SENTIMENT_BOUNDS
    normalized_sentiment = max(low, min(high, sentiment_score))
    sentiment_impact = normalized_sentiment * IMPACT_WEIGHTS['sentiment']

    volume_impact = indicators.volume_anomaly * IMPACT_WEIGHTS['volume']

    rsi_deviation = (indicators.rsi - 50) / 50
    bollinger_term = BOLLINGER_POSITION_TERMS.get(indicators.current_position, 0.0)
    technical_impact = (rsi_deviation + bollinger_term) * IMPACT_WEIGHTS['technical']

    market_correlation = calculate_market_correlation(prices) * IMPACT_WEIGHTS['market_correlation']

    weekly_decline = base_decline + sentiment_impact + volume_impact + technical_impact + market_correlation

    logger.debug(
        f"{stock_data.symbol}: base {base_decline:.4f}, sentiment {sentiment_impact:.4f}, "
        f"volume {volume_impact:.4f}, technical {technical_impact:.4f}, "
        f"market {market_correlation:.4f} -> {weekly_decline:.4f}"
    )
    return PredictionBreakdown(
        weekly_decline=round(weekly_decline, 2),
        base_decline=round(base_decline, 2),
        sentiment_impact=round(sentiment_impact, 2),
        volume_impact=round(volume_impact, 2),
        technical_impact=round(technical_impact, 2),
        market_correlation=round(market_correlation, 2),
    )

def _recent_volatility(history: PriceSeries) -> float:
    """Volatility of session-to-session changes within the most recent closes."""
    window = np.asarray(history.latest(CONFIDENCE_VOLATILITY_WINDOW).closes, dtype=float)
    if len(window) < 2:
        return 0.0
    changes = (window[1:] - window[:-1]) / window[:-1]
    return calculate_volatility(changes)

def calculate_confidence_level(
    stock_data: StockData,
    news_count: int,
    indicators: TechnicalIndicators
) -> int:
    """Score how much the prediction can be relied on, from 10 to 95.

    Starts at 50 and adds or subtracts fixed amounts for history depth, news
    coverage, extreme RSI, a price outside the Bollinger Bands, unusual volume
    and recent volatility.
    """
    prices = stock_data.historical_prices.closes
    confidence = CONFIDENCE_BASE

    # Data depth
    if len(prices) >= 20:
        confidence += CONFIDENCE_ADJUSTMENTS['history_deep']
    elif len(prices) >= 10:
        confidence += CONFIDENCE_ADJUSTMENTS['history_moderate']

    # News coverage
    if news_count >= 5:
        confidence += CONFIDENCE_ADJUSTMENTS['news_heavy']
    elif news_count >= 3:
        confidence += CONFIDENCE_ADJUSTMENTS['news_moderate']
    elif news_count >= 1:
        confidence += CONFIDENCE_ADJUSTMENTS['news_light']

    # Technical signals
    if indicators.rsi < RSI_OVERSOLD or indicators.rsi > RSI_OVERBOUGHT:
        confidence += CONFIDENCE_ADJUSTMENTS['rsi_extreme']
    if indicators.current_position != 'middle':
        confidence += CONFIDENCE_ADJUSTMENTS['bollinger_edge']
    if abs(indicators.volume_anomaly) > VOLUME_ANOMALY_THRESHOLD:
        confidence += CONFIDENCE_ADJUSTMENTS['volume_anomaly']

    # Volatility penalty
    volatility = _recent_volatility(stock_data.historical_prices)
    if volatility > HIGH_VOLATILITY:
        confidence += CONFIDENCE_ADJUSTMENTS['volatility_high']
    elif volatility > MEDIUM_VOLATILITY:
        confidence += CONFIDENCE_ADJUSTMENTS['volatility_medium']

    return int(max(CONFIDENCE_MIN, min(CONFIDENCE_MAX, round(confidence))))

def generate_analysis(
    ticker: str,
    stock_data: StockData,
    news_articles: Iterable[NewsArticle],
    now: Optional[pd.Timestamp] = None
) -> StockAnalysis:
    """Run the indicator, sentiment and prediction steps for one ticker.

    Args:
        ticker: Ticker symbol, stored uppercased
        stock_data: Quote and most-recent-first price history
        news_articles: Recent articles about the ticker
        now: Reference time for article recency (default: current UTC time)

    Returns:
        An unsaved StockAnalysis (no id or creation time yet)
    """
    articles: List[NewsArticle] = list(news_articles)

    indicators = calculate_technical_indicators(stock_data)
    sentiment_score = calculate_sentiment_score(articles, now=now)
    prediction = calculate_prediction(stock_data, indicators, sentiment_score)
    confidence_level = calculate_confidence_level(stock_data, len(articles), indicators)

    logger.info(
        f"{ticker.upper()}: predicted weekly change {prediction.weekly_decline:+.2f}% "
        f"(confidence {confidence_level}%)"
    )
    return StockAnalysis(
        ticker=ticker.upper(),
        prediction_percentage=prediction.weekly_decline,
        confidence_level=confidence_level,
        base_decline=prediction.base_decline,
        sentiment_score=sentiment_score,
        sentiment_impact=prediction.sentiment_impact,
        volume_impact=prediction.volume_impact,
        technical_impact=prediction.technical_impact,
        market_correlation=prediction.market_correlation,
        current_price=stock_data.price,
        daily_change=stock_data.change_percent,
        volume=format_volume(stock_data.volume),
        market_cap=format_market_cap(stock_data.market_cap),
        rsi_value=indicators.rsi,
        news_articles=tuple(articles),
    )
