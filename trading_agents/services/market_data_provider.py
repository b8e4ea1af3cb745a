import logging
import pandas as pd
import yfinance as yf
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from trading_agents.calculators.market_trend_calculator import MarketTrendCalculator
from trading_agents.core.config import AppConfig

logger = logging.getLogger(__name__)


class MarketDataProvider:
    """Price history, latest quote and trend snapshot for one symbol from yfinance.

    Failures to reach yfinance degrade to empty data; the analyst prompt then
    simply carries no market section.
    """
    QUOTE_PERIOD: str = "5d"
    # trend period token -> yfinance history period
    TREND_PERIODS: Dict[str, str] = {
        "1D": "1y",
        "1W": "2y",
        "1M": "5y",
    }

    def __init__(
        self,
        symbol: str,
        period_length: Optional[str] = None,
        ticker_factory: Optional[Callable[[str], Any]] = None,
    ):
        """Initialize with symbol and optional period. ticker_factory is for testing."""
        self.symbol = symbol.upper()
        self.period_length = period_length or AppConfig.market_data.period
        self._ticker_factory: Callable[[str], Any] = ticker_factory or (lambda s: yf.Ticker(s))
        self._ticker: Optional[Any] = None

    @property
    def ticker(self) -> Any:
        """Lazy-load ticker object."""
        if self._ticker is None:
            self._ticker = self._ticker_factory(self.symbol)
        return self._ticker

    def history(self, *args, **kwargs) -> pd.DataFrame:
        """Get historical price data; empty DataFrame when the download fails."""
        if "period" not in kwargs and len(args) == 0:
            kwargs["period"] = self.period_length
        try:
            history = self.ticker.history(*args, **kwargs)
        except Exception as e:
            logger.warning("Could not fetch history for %s: %s", self.symbol, e)
            return pd.DataFrame()
        return history if history is not None else pd.DataFrame()

    def get_current_price(self) -> Dict[str, Any]:
        """Latest close and volume. Empty dict when no quote is available."""
        history = self.history(period=self.QUOTE_PERIOD)
        if history.empty or "Close" not in history.columns:
            logger.warning("No quote data", extra={"symbol": self.symbol})
            return {}
        last = history.iloc[-1]
        quote = {
            "symbol": self.symbol,
            "price": round(float(last["Close"]), 2),
            "currency": "USD",
            "timestamp": datetime.now().isoformat(),
        }
        if "Volume" in history.columns:
            quote["volume"] = int(last["Volume"])
        return quote

    def get_market_trend(self, period: Optional[str] = None) -> Dict[str, Any]:
        """Trend snapshot (price, moving averages, RSI, support/resistance, direction)."""
        period = period or AppConfig.market_data.trend_period
        history = self.history(period=self.TREND_PERIODS.get(period.upper(), self.period_length))
        metrics = MarketTrendCalculator(history).calculate_all()
        if not metrics:
            return {}
        return {"symbol": self.symbol, "period": period, **metrics}

    def clear_cache(self) -> None:
        self._ticker = None
        logger.debug("Cleared MarketDataProvider cache for %s", self.symbol)
