"""Report generation and formatting functionality."""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from .models import StockAnalysis
from .sentiment import summarize_sentiment

logger = logging.getLogger(__name__)

def format_market_cap(market_cap: float) -> str:
    """Format a market cap as ``$2.50T``, ``$1.20B``, ``$3.40M`` or ``$500``."""
    if market_cap >= 1e12:
        return f"${market_cap / 1e12:.2f}T"
    if market_cap >= 1e9:
        return f"${market_cap / 1e9:.2f}B"
    if market_cap >= 1e6:
        return f"${market_cap / 1e6:.2f}M"
    return f"${market_cap:,.0f}"

def format_volume(volume: float) -> str:
    """Format a share volume as ``1.2B``, ``3.4M``, ``5.6K`` or the raw count."""
    if volume >= 1e9:
        return f"{volume / 1e9:.1f}B"
    if volume >= 1e6:
        return f"{volume / 1e6:.1f}M"
    if volume >= 1e3:
        return f"{volume / 1e3:.1f}K"
    return str(int(volume))

def describe_confidence(confidence_level: int) -> str:
    if confidence_level >= 75:
        return "High"
    if confidence_level >= 50:
        return "Medium"
    return "Low"

def generate_analysis_summary(analysis: StockAnalysis) -> str:
    """Generate a markdown-formatted summary for one analysis."""
    direction = "decline" if analysis.prediction_percentage < 0 else "gain"
    rsi = analysis.rsi_value
    if rsi >= 70:
        rsi_band = "overbought"
    elif rsi <= 30:
        rsi_band = "oversold"
    else:
        rsi_band = "neutral"

    counts = summarize_sentiment(list(analysis.news_articles))

    summary = [f"\n📊 ${analysis.ticker}"]
    summary.append(
        f"\n💡 Expected weekly {direction}: {analysis.prediction_percentage:+.2f}% "
        f"(confidence {analysis.confidence_level}%, {describe_confidence(analysis.confidence_level).lower()})"
    )
    summary.append(f"Price: ${analysis.current_price:.2f} ({analysis.daily_change:+.2f}% today)")
    summary.append(f"Volume: {analysis.volume} | Market cap: {analysis.market_cap}")
    summary.append(f"RSI: {rsi:.1f} — {rsi_band}")
    summary.append("")
    summary.append("| Component | Impact |")
    summary.append("|---|---|")
    summary.append(f"| Base decline (5-week trend) | {analysis.base_decline:+.2f}% |")
    summary.append(f"| News sentiment | {analysis.sentiment_impact:+.2f}% |")
    summary.append(f"| Volume anomaly | {analysis.volume_impact:+.2f}% |")
    summary.append(f"| Technical indicators | {analysis.technical_impact:+.2f}% |")
    summary.append(f"| Market correlation | {analysis.market_correlation:+.2f}% |")
    summary.append("")

    if analysis.news_articles:
        summary.append(
            f"News: {len(analysis.news_articles)} articles "
            f"({counts['positive']} positive, {counts['negative']} negative), "
            f"weighted sentiment {analysis.sentiment_score:+.2f}"
        )
        for article in analysis.news_articles:
            summary.append(f"- {article.title} ({article.source}, {article.sentiment:+.1f})")
    else:
        summary.append("News: no recent articles")

    return "\n".join(summary)

def generate_structured_data(analysis: StockAnalysis) -> Dict:
    """Generate structured data for an analysis."""
    return analysis.to_dict()

def save_json_report(data: Dict, output_path: Path):
    """Save the structured data to a JSON file."""
    try:
        with open(output_path, 'w') as f:
            json.dump(data, f, indent=2)
    except OSError as e:
        logger.error(f"Error saving JSON report to {output_path}: {e}")

def generate_report(
    analyses: List[StockAnalysis],
    output_path: Optional[Path] = None,
    save_json: Optional[Path] = None
) -> str:
    """Generate the complete report in markdown format."""
    report = ["# Weekly Decline Prediction Report"]
    report.append(f"\nGenerated on: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    report.append("""
---

Predictions combine the 5-week price trend, weighted news sentiment, volume
anomaly, RSI and Bollinger Band position. They are a heuristic, not a
validated model. Confidence reflects data coverage and signal strength, not a
probability.

---
""")

    for analysis in analyses:
        report.append(generate_analysis_summary(analysis))
        report.append("")

    if output_path:
        output_path.write_text("\n".join(report))

    if save_json:
        structured_data = {
            "timestamp": datetime.now().isoformat(),
            "analyses": [generate_structured_data(a) for a in analyses],
        }
        save_json_report(structured_data, save_json)

    return "\n".join(report)
