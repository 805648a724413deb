"""Command-line interface functionality."""

import logging
from datetime import timedelta
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markdown import Markdown
from rich.table import Table

from . import __version__
from .config import CACHE_TTL_MINUTES, DEFAULT_STORE_PATH, HISTORY_DAYS, RECENT_LIMIT
from .data import load_news, load_stock_data, normalize_ticker
from .models import StockAnalysis
from .output import describe_confidence, generate_analysis_summary, generate_report
from .prediction import generate_analysis
from .storage import AnalysisStore
from .utils import setup_logging

logger = logging.getLogger("decline_predictor")
console = Console()

app = typer.Typer(
    name="decline-predictor",
    help="Estimate a stock's weekly decline from price trend, news sentiment, volume and technicals.",
    add_completion=False,
)

def version_callback(value: bool):
    """Print version and exit."""
    if value:
        console.print(f"[bold blue]Weekly Decline Predictor v{__version__}[/bold blue]")
        raise typer.Exit()

@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Enable debug logging.",
    ),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        help="Also write logs to this file.",
    ),
):
    """Weekly Decline Predictor - heuristic weekly decline estimates for stocks."""
    setup_logging(logging.DEBUG if verbose else logging.INFO, log_file)

def _print_analysis(analysis: StockAnalysis):
    console.print(Markdown(generate_analysis_summary(analysis)))
    confidence = describe_confidence(analysis.confidence_level)
    color = "red" if analysis.prediction_percentage < 0 else "green"
    console.print(
        f"[bold {color}]{analysis.ticker}: {analysis.prediction_percentage:+.2f}%[/bold {color}] "
        f"[dim]({confidence} confidence, {analysis.confidence_level}%)[/dim]"
    )

@app.command()
def analyze(
    ticker: str = typer.Argument(..., help="Ticker symbol to analyze."),
    stock_data: Path = typer.Option(
        ...,
        "--stock-data",
        "-s",
        help="JSON stock snapshot or daily price CSV (Date, Close, Volume).",
    ),
    news: Optional[Path] = typer.Option(
        None,
        "--news",
        "-n",
        help="JSON file with a list of news articles.",
    ),
    store: Path = typer.Option(
        DEFAULT_STORE_PATH,
        "--store",
        help="JSON file holding saved analyses.",
    ),
    max_age: int = typer.Option(
        CACHE_TTL_MINUTES,
        "--max-age",
        help="Reuse a saved analysis younger than this many minutes.",
    ),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Always compute a new analysis.",
    ),
    market_cap: Optional[float] = typer.Option(
        None,
        "--market-cap",
        help="Market cap in dollars (estimated from price and volume if omitted).",
    ),
    history_days: int = typer.Option(
        HISTORY_DAYS,
        "--history-days",
        help="Number of recent sessions to use from a price CSV.",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Path to save the markdown report.",
    ),
    save_json: Optional[Path] = typer.Option(
        None,
        "--save-json",
        help="Path to save structured JSON data.",
    ),
):
    """Predict the weekly decline for a ticker."""
    try:
        ticker = normalize_ticker(ticker)
        analysis_store = AnalysisStore(store)

        analysis = None
        if not force:
            analysis = analysis_store.get_fresh(ticker, timedelta(minutes=max_age))
            if analysis is not None:
                logger.info(f"Using saved analysis for {ticker} from {analysis.created_at:%Y-%m-%d %H:%M}")

        if analysis is None:
            data = load_stock_data(stock_data, ticker, history_days=history_days, market_cap=market_cap)
            articles = load_news(news)
            analysis = analysis_store.save(generate_analysis(ticker, data, articles))

        _print_analysis(analysis)

        if output or save_json:
            generate_report([analysis], output, save_json)

    except Exception as e:
        logger.error(f"Error during analysis: {e}")
        raise typer.Exit(1)

@app.command()
def show(
    ticker: str = typer.Argument(..., help="Ticker symbol."),
    store: Path = typer.Option(
        DEFAULT_STORE_PATH,
        "--store",
        help="JSON file holding saved analyses.",
    ),
):
    """Show the saved analysis for a ticker."""
    try:
        ticker = normalize_ticker(ticker)
    except ValueError as e:
        logger.error(str(e))
        raise typer.Exit(1)

    analysis = AnalysisStore(store).get(ticker)
    if analysis is None:
        logger.error(f"No analysis found for {ticker}")
        raise typer.Exit(1)
    _print_analysis(analysis)

@app.command()
def recent(
    store: Path = typer.Option(
        DEFAULT_STORE_PATH,
        "--store",
        help="JSON file holding saved analyses.",
    ),
    limit: int = typer.Option(
        RECENT_LIMIT,
        "--limit",
        "-l",
        help="Number of analyses to list.",
    ),
):
    """List the most recent analyses."""
    analyses = AnalysisStore(store).recent(limit)
    if not analyses:
        console.print("[yellow]No analyses saved yet.[/yellow]")
        return

    table = Table(title="Recent Analyses")
    table.add_column("Ticker", style="cyan")
    table.add_column("Weekly Change", justify="right")
    table.add_column("Confidence", justify="right")
    table.add_column("Price", justify="right")
    table.add_column("RSI", justify="right")
    table.add_column("Created", style="dim")
    for analysis in analyses:
        table.add_row(
            analysis.ticker,
            f"{analysis.prediction_percentage:+.2f}%",
            f"{analysis.confidence_level}%",
            f"${analysis.current_price:.2f}",
            f"{analysis.rsi_value:.1f}",
            f"{analysis.created_at:%Y-%m-%d %H:%M}" if analysis.created_at else "",
        )
    console.print(table)

def run():
    """Run the CLI application."""
    app()
