"""Analysis storage keyed by ticker."""

import json
import logging
import uuid
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, List, Optional

from .config import RECENT_LIMIT
from .models import StockAnalysis

logger = logging.getLogger(__name__)

class AnalysisStore:
    """Latest analysis per ticker, optionally mirrored to a JSON file.

    Saving an analysis for a ticker replaces the previous one.
    """

    def __init__(self, path: Optional[Path] = None):
        """Initialize the store.

        Args:
            path: Optional JSON file to load from and write to
        """
        self.path = Path(path) if path is not None else None
        self._analyses: Dict[str, StockAnalysis] = {}
        if self.path is not None and self.path.exists():
            self._load()

    def _load(self):
        try:
            with open(self.path) as f:
                records = json.load(f)
            for record in records:
                analysis = StockAnalysis.from_dict(record)
                self._analyses[analysis.ticker] = analysis
            logger.debug(f"Loaded {len(self._analyses)} analyses from {self.path}")
        except (OSError, ValueError, TypeError) as e:
            logger.error(f"Error reading analyses from {self.path}: {e}")
            self._analyses = {}

    def _write(self):
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            records = [a.to_dict() for a in self._analyses.values()]
            self.path.write_text(json.dumps(records, indent=2))
        except OSError as e:
            logger.error(f"Error writing analyses to {self.path}: {e}")

    def save(self, analysis: StockAnalysis) -> StockAnalysis:
        """Store an analysis, assigning an id and creation time if missing."""
        saved = replace(
            analysis,
            ticker=analysis.ticker.upper(),
            id=analysis.id or uuid.uuid4().hex,
            created_at=analysis.created_at or datetime.now(timezone.utc),
        )
        self._analyses[saved.ticker] = saved
        if self.path is not None:
            self._write()
        return saved

    def get(self, ticker: str) -> Optional[StockAnalysis]:
        return self._analyses.get(ticker.upper())

    def get_fresh(
        self,
        ticker: str,
        max_age: timedelta,
        now: Optional[datetime] = None
    ) -> Optional[StockAnalysis]:
        """Return the stored analysis only if it is younger than ``max_age``."""
        analysis = self.get(ticker)
        if analysis is None or analysis.created_at is None:
            return None
        if now is None:
            now = datetime.now(timezone.utc)
        if analysis.created_at > now - max_age:
            return analysis
        return None

    def recent(self, limit: int = RECENT_LIMIT) -> List[StockAnalysis]:
        """Most recently created analyses first."""
        epoch = datetime.min.replace(tzinfo=timezone.utc)
        ordered = sorted(
            self._analyses.values(),
            key=lambda a: a.created_at or epoch,
            reverse=True,
        )
        return ordered[:limit]

    def __len__(self) -> int:
        return len(self._analyses)
