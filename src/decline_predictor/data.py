"""Loading stock snapshots and news from local files."""

import json
import logging
import re
from pathlib import Path
from typing import List, Optional

import pandas as pd

from .config import HISTORY_DAYS, REQUIRED_COLUMNS, TICKER_PATTERN
from .models import NewsArticle, PriceSeries, StockData, articles_from_list

logger = logging.getLogger(__name__)

def normalize_ticker(ticker: str) -> str:
    """Strip and uppercase a ticker, then check it is 1-10 letters."""
    ticker = (ticker or "").strip().upper()
    if not re.match(TICKER_PATTERN, ticker):
        raise ValueError(f"Invalid ticker '{ticker}': must be 1-10 letters")
    return ticker

def estimate_market_cap(price: float, volume: float) -> float:
    """Rough market cap when shares outstanding are unknown."""
    return price * volume * 100

def standardize_columns_and_date(df: pd.DataFrame) -> pd.DataFrame:
    """Lowercase column names and make the index a naive DatetimeIndex."""
    df = df.copy()
    df.columns = [str(c).lower() for c in df.columns]
    if not isinstance(df.index, pd.DatetimeIndex):
        if 'date' in df.columns:
            df = df.set_index('date')
        df.index = pd.to_datetime(df.index)
    if df.index.tz is not None:
        df.index = df.index.tz_localize(None)
    return df

def read_price_history(file_path: Path) -> pd.DataFrame:
    """Read a daily OHLCV CSV into a frame with lowercase columns and a date index."""
    df = pd.read_csv(file_path, index_col=0)
    df = standardize_columns_and_date(df)
    missing_cols = [col for col in REQUIRED_COLUMNS if col not in df.columns]
    if missing_cols:
        raise ValueError(f"Missing required columns in {file_path}: {missing_cols}")
    return df.sort_index()

def stock_data_from_frame(
    symbol: str,
    df: pd.DataFrame,
    history_days: int = HISTORY_DAYS,
    market_cap: Optional[float] = None
) -> StockData:
    """Build a StockData snapshot from a date-indexed price frame.

    The latest row is the current quote. Average volume and the 52-week
    range are taken over the same ``history_days`` window as the history.
    """
    if df.empty:
        raise ValueError(f"No price data for {symbol}")

    df = df.dropna(subset=['close']).copy()
    df['volume'] = df['volume'].fillna(0.0)
    history = PriceSeries.from_frame(df, limit=history_days)
    closes = history.closes
    price = closes[0]
    prev_close = closes[1] if len(closes) > 1 else price
    change = price - prev_close
    change_percent = (change / prev_close) * 100 if prev_close else 0.0
    volume = history.volumes[0] if history.volumes else 0.0
    avg_volume = float(pd.Series(history.volumes).mean()) if history.volumes else 0.0

    return StockData(
        symbol=symbol,
        price=price,
        change=change,
        change_percent=change_percent,
        volume=volume,
        market_cap=market_cap if market_cap is not None else estimate_market_cap(price, volume),
        high_52_week=max(closes),
        low_52_week=min(closes),
        avg_volume=avg_volume,
        historical_prices=history,
    )

def stock_data_from_dict(data: dict) -> StockData:
    """Build a StockData snapshot from a camelCase JSON object.

    ``historicalPrices`` (and optional ``historicalVolumes``) must be most
    recent first.
    """
    try:
        price = float(data['price'])
        volume = float(data['volume'])
        history = PriceSeries(
            tuple(data.get('historicalPrices', [])),
            tuple(data.get('historicalVolumes', [])),
        )
        market_cap = data.get('marketCap')
        return StockData(
            symbol=str(data['symbol']).upper(),
            price=price,
            change=float(data.get('change', 0.0)),
            change_percent=float(data.get('changePercent', 0.0)),
            volume=volume,
            market_cap=float(market_cap) if market_cap is not None else estimate_market_cap(price, volume),
            high_52_week=float(data.get('high52Week', max(history.closes, default=price))),
            low_52_week=float(data.get('low52Week', min(history.closes, default=price))),
            avg_volume=float(data.get('avgVolume', 0.0)),
            historical_prices=history,
        )
    except (KeyError, TypeError) as e:
        raise ValueError(f"Invalid stock data: {e}") from e

def load_stock_data(
    file_path: Path,
    ticker: str,
    history_days: int = HISTORY_DAYS,
    market_cap: Optional[float] = None
) -> StockData:
    """Load a stock snapshot from a JSON snapshot or a daily price CSV."""
    file_path = Path(file_path)
    if file_path.suffix.lower() == '.json':
        with open(file_path) as f:
            data = json.load(f)
        data.setdefault('symbol', ticker)
        if market_cap is not None:
            data['marketCap'] = market_cap
        stock_data = stock_data_from_dict(data)
    else:
        df = read_price_history(file_path)
        stock_data = stock_data_from_frame(ticker, df, history_days=history_days, market_cap=market_cap)

    logger.info(f"Loaded {len(stock_data.historical_prices)} days of price history for {ticker} from {file_path}")
    return stock_data

def load_news(file_path: Optional[Path]) -> List[NewsArticle]:
    """Load news articles from a JSON list. No path means no news."""
    if file_path is None:
        return []
    with open(file_path) as f:
        items = json.load(f)
    if not isinstance(items, list):
        raise ValueError(f"Expected a list of articles in {file_path}")
    articles = articles_from_list(items)
    logger.info(f"Loaded {len(articles)} news articles from {file_path}")
    return articles
