"""Tests for the data loading module."""

import json

import pandas as pd
import pytest

from decline_predictor.data import (
    load_news,
    load_stock_data,
    normalize_ticker,
    read_price_history,
    stock_data_from_dict,
    stock_data_from_frame,
)
from decline_predictor.prediction import generate_analysis


@pytest.fixture
def price_csv(tmp_path):
    """Write 25 days of rising prices to a CSV file."""
    dates = pd.date_range(start='2024-01-01', periods=25, freq='D')
    df = pd.DataFrame({
        'Open': [100.0 + i for i in range(25)],
        'Close': [100.0 + i for i in range(25)],
        'Volume': [1000 * (i + 1) for i in range(25)],
    }, index=dates)
    df.index.name = 'Date'
    path = tmp_path / 'TEST.csv'
    df.to_csv(path)
    return path


@pytest.fixture
def news_json(tmp_path):
    """Write two articles to a JSON file."""
    path = tmp_path / 'news.json'
    path.write_text(json.dumps([
        {
            'title': 'TEST Faces Supply Chain Disruptions',
            'source': 'Reuters',
            'publishedAt': '2024-05-01T09:00:00Z',
            'sentiment': -7.5,
            'summary': 'Manufacturing delays...',
            'url': 'https://reuters.com/example',
        },
        {
            'title': 'TEST Announces Innovation Partnership',
            'source': 'Bloomberg',
            'publishedAt': '2024-04-30T12:00:00Z',
            'sentiment': 4.2,
            'summary': 'Strategic partnership...',
        },
    ]))
    return path


def test_normalize_ticker():
    """Tickers are stripped and uppercased."""
    assert normalize_ticker(' aapl ') == 'AAPL'
    assert normalize_ticker('MSFT') == 'MSFT'


@pytest.mark.parametrize('ticker', ['', 'BRK.B', 'TOOLONGTICKER', '123'])
def test_normalize_ticker_invalid(ticker):
    with pytest.raises(ValueError):
        normalize_ticker(ticker)


def test_read_price_history(price_csv):
    """Columns are lowercased and rows sorted by date."""
    df = read_price_history(price_csv)
    assert 'close' in df.columns
    assert 'volume' in df.columns
    assert isinstance(df.index, pd.DatetimeIndex)
    assert df.index.is_monotonic_increasing


def test_read_price_history_missing_columns(tmp_path):
    path = tmp_path / 'bad.csv'
    path.write_text('Date,Open\n2024-01-01,100\n')
    with pytest.raises(ValueError):
        read_price_history(path)


def test_load_stock_data_from_csv(price_csv):
    """The latest row is the quote and history is most recent first."""
    stock = load_stock_data(price_csv, 'TEST')

    assert stock.symbol == 'TEST'
    assert stock.price == 124.0
    assert stock.change == pytest.approx(1.0)
    assert stock.change_percent == pytest.approx(1.0 / 123.0 * 100)
    assert stock.volume == 25000
    assert len(stock.historical_prices) == 20
    assert stock.historical_prices.closes[0] == 124.0
    assert stock.historical_prices.closes[-1] == 105.0
    assert stock.avg_volume == pytest.approx(sum(1000 * (i + 1) for i in range(5, 25)) / 20)
    assert stock.high_52_week == 124.0
    assert stock.low_52_week == 105.0
    assert stock.market_cap == pytest.approx(124.0 * 25000 * 100)


def test_load_stock_data_market_cap_override(price_csv):
    stock = load_stock_data(price_csv, 'TEST', market_cap=3e12)
    assert stock.market_cap == 3e12


def test_load_stock_data_from_json(tmp_path):
    """JSON snapshots keep their history order."""
    path = tmp_path / 'TEST.json'
    path.write_text(json.dumps({
        'price': 189.5,
        'change': -1.2,
        'changePercent': -0.63,
        'volume': 54000000,
        'marketCap': 2.95e12,
        'avgVolume': 48000000,
        'historicalPrices': [189.5, 190.7, 188.2],
    }))
    stock = load_stock_data(path, 'TEST')

    assert stock.symbol == 'TEST'
    assert stock.historical_prices.closes == (189.5, 190.7, 188.2)
    assert stock.high_52_week == 190.7
    assert stock.low_52_week == 188.2
    assert stock.avg_volume == 48000000


def test_stock_data_from_dict_missing_price():
    with pytest.raises(ValueError):
        stock_data_from_dict({'symbol': 'TEST', 'volume': 100})


def test_load_news(news_json):
    """Articles are parsed from a JSON list."""
    articles = load_news(news_json)
    assert len(articles) == 2
    assert articles[0].source == 'Reuters'
    assert articles[0].url == 'https://reuters.com/example'
    assert articles[1].url is None


def test_load_news_without_path():
    assert load_news(None) == []


def test_load_news_rejects_non_list(tmp_path):
    path = tmp_path / 'news.json'
    path.write_text(json.dumps({'title': 'Not a list'}))
    with pytest.raises(ValueError):
        load_news(path)


def test_load_stock_data_blank_latest_volume(tmp_path):
    """A blank volume on the latest row reads as zero and the analysis still runs."""
    path = tmp_path / 'GAP.csv'
    path.write_text(
        "Date,Close,Volume\n"
        "2024-01-01,10.0,100\n"
        "2024-01-02,11.0,\n"
    )
    stock = load_stock_data(path, 'GAP')
    assert stock.volume == 0.0
    assert stock.avg_volume == pytest.approx(50.0)
    assert stock.historical_prices.volumes == (0.0, 100.0)

    analysis = generate_analysis('GAP', stock, [])
    assert analysis.volume == '0'
    assert analysis.volume_impact == pytest.approx(-0.2)


def test_stock_data_from_frame_without_any_volume():
    """A frame with no recorded volume produces a neutral volume component."""
    dates = pd.date_range(start='2024-01-01', periods=3, freq='D')
    df = pd.DataFrame({'close': [10.0, 11.0, 12.0], 'volume': [float('nan')] * 3}, index=dates)
    stock = stock_data_from_frame('GAP', df)
    assert stock.volume == 0.0
    assert stock.avg_volume == 0.0

    analysis = generate_analysis('GAP', stock, [])
    assert analysis.volume == '0'
    assert analysis.volume_impact == 0.0


def test_stock_data_from_frame_skips_missing_closes():
    """Rows without a close are dropped from the history."""
    dates = pd.date_range(start='2024-01-01', periods=3, freq='D')
    df = pd.DataFrame({'close': [10.0, float('nan'), 12.0], 'volume': [100.0, 200.0, 300.0]}, index=dates)
    stock = stock_data_from_frame('GAP', df)
    assert stock.historical_prices.closes == (12.0, 10.0)
    assert stock.historical_prices.volumes == (300.0, 100.0)
