"""Technical indicator calculations over most-recent-first price history."""

import logging
from typing import Dict, Sequence

import numpy as np
import pandas as pd
import ta

from .config import (
    BOLLINGER_FALLBACK_BAND,
    BOLLINGER_PERIOD,
    BOLLINGER_STD_DEV,
    NEUTRAL_RSI,
    RSI_PERIOD,
)
from .models import PriceSeries, StockData, TechnicalIndicators

logger = logging.getLogger(__name__)

def calculate_rsi(prices: Sequence[float], period: int = RSI_PERIOD) -> float:
    """Calculate a simple (non-smoothed) RSI over the latest ``period`` changes.

    Changes are measured from each session to the one after it, so with
    most-recent-first input ``prices[i-1] - prices[i]`` is the move into
    session ``i-1``. Returns the neutral 50 when there are fewer than
    ``period + 1`` prices and 100 when the window has no losses.
    """
    if len(prices) < period + 1:
        return NEUTRAL_RSI

    window = np.asarray(prices[:period + 1], dtype=float)
    changes = window[:-1] - window[1:]
    gains = changes[changes > 0].sum()
    losses = -changes[changes < 0].sum()

    avg_gain = gains / period
    avg_loss = losses / period
    if avg_loss == 0:
        return 100.0

    rs = avg_gain / avg_loss
    return float(100 - (100 / (1 + rs)))

def calculate_bollinger_bands(prices: Sequence[float], period: int = BOLLINGER_PERIOD) -> Dict[str, float]:
    """Calculate Bollinger Bands for the latest ``period`` prices.

    Args:
        prices: Closing prices, most recent first
        period: Number of sessions in the band window

    Returns:
        Dict with ``upper``, ``middle`` and ``lower`` bands. With fewer than
        ``period`` prices the middle is the mean of everything available and
        the bands sit at a fixed +/-2% around it.
    """
    if len(prices) == 0:
        return {'upper': 0.0, 'middle': 0.0, 'lower': 0.0}

    if len(prices) < period:
        middle = float(np.mean(prices))
        logger.debug(f"Only {len(prices)} prices for a {period}-day band, using fixed-width band")
        return {
            'upper': middle * (1 + BOLLINGER_FALLBACK_BAND),
            'middle': middle,
            'lower': middle * (1 - BOLLINGER_FALLBACK_BAND),
        }

    close = PriceSeries(tuple(prices[:period])).to_chronological()
    bollinger = ta.volatility.BollingerBands(close, window=period, window_dev=BOLLINGER_STD_DEV)
    return {
        'upper': float(bollinger.bollinger_hband().iloc[-1]),
        'middle': float(bollinger.bollinger_mavg().iloc[-1]),
        'lower': float(bollinger.bollinger_lband().iloc[-1]),
    }

def classify_position(current_price: float, bands: Dict[str, float]) -> str:
    """Place the current price relative to the bands."""
    if current_price > bands['upper']:
        return 'upper'
    if current_price < bands['lower']:
        return 'lower'
    return 'middle'

def volume_anomaly(current_volume: float, avg_volume: float) -> float:
    """Fractional deviation of today's volume from the average. ``avg_volume`` must be non-zero."""
    return (current_volume - avg_volume) / avg_volume

def calculate_technical_indicators(stock_data: StockData) -> TechnicalIndicators:
    """Calculate the indicator snapshot used by the prediction."""
    prices = stock_data.historical_prices.closes
    if not prices:
        logger.warning(f"No price history for {stock_data.symbol}, using current price for indicators")
        band_prices = (stock_data.price,)
    else:
        band_prices = prices

    rsi = calculate_rsi(prices)
    bands = calculate_bollinger_bands(band_prices)
    position = classify_position(stock_data.price, bands)

    if stock_data.avg_volume and pd.notna(stock_data.avg_volume):
        anomaly = volume_anomaly(stock_data.volume, stock_data.avg_volume)
    else:
        logger.warning(f"Average volume unavailable for {stock_data.symbol}, treating volume as normal")
        anomaly = 0.0

    logger.debug(
        f"{stock_data.symbol}: RSI {rsi:.2f}, bands {bands['lower']:.2f}/{bands['middle']:.2f}/"
        f"{bands['upper']:.2f} ({position}), volume anomaly {anomaly:+.3f}"
    )
    return TechnicalIndicators(
        rsi=rsi,
        bollinger_upper=bands['upper'],
        bollinger_middle=bands['middle'],
        bollinger_lower=bands['lower'],
        current_position=position,
        volume_anomaly=anomaly,
    )
