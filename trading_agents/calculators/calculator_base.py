import logging
import numpy as np
import pandas as pd
from typing import Optional, List, Any, Dict, Callable

logger = logging.getLogger(__name__)


class CalculatorBase:
    """Price history plus the metrics derived from it.

    Subclasses implement `calculate_*` methods that read `prices` and record
    their outputs with `_record`. Non-finite values are never recorded.
    """

    def __init__(self, history: Optional[pd.DataFrame]):
        self.history = history.copy() if history is not None else pd.DataFrame()
        self.calculations: Dict[str, Any] = {}
        self._closes: Optional[pd.Series] = None

    @property
    def prices(self) -> Optional[pd.Series]:
        """Close prices without gaps, index made tz-naive. None when unavailable."""
        if self._closes is not None:
            return self._closes
        if not self._has_close():
            return None

        closes = self.history['Close'].dropna()
        if closes.empty:
            return None
        if getattr(closes.index, "tz", None) is not None:
            closes = closes.tz_localize(None)

        self._closes = closes
        return closes

    def _has_close(self) -> bool:
        return not self.history.empty and 'Close' in self.history.columns

    def _require_prices(self, min_len: int) -> Optional[pd.Series]:
        closes = self.prices
        return closes if closes is not None and len(closes) >= min_len else None

    def _record(self, key: str, value: Any) -> Optional[float]:
        """Record a metric as float. None, NaN and inf are dropped."""
        if value is None or pd.isna(value) or not np.isfinite(value):
            return None
        self.calculations[key] = float(value)
        return self.calculations[key]

    def _run_steps(self, steps: List[Callable[[], Any]]) -> Dict[str, Any]:
        """Run metric steps in order; a failing step is logged and skipped."""
        for step in steps:
            try:
                step()
            except (ValueError, TypeError, ArithmeticError, KeyError, IndexError) as exc:
                logger.debug("Metric %s skipped: %s", getattr(step, "__name__", step), exc)
        return dict(self.calculations)
