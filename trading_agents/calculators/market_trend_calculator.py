import numpy as np
from typing import Dict, Optional, Any

from trading_agents.calculators.calculator_base import CalculatorBase

TREND_BULLISH = "BULLISH"
TREND_BEARISH = "BEARISH"


class MarketTrendCalculator(CalculatorBase):
    """Market trend snapshot for the analyst prompt: price, moving averages, RSI, range, direction."""

    SMA_MID = 50
    SMA_LONG = 200
    RSI_PERIOD = 14
    RANGE_PERIOD = 20
    MIN_DATA_POINTS = 5

    def calculate_current_price(self) -> Optional[float]:
        prices = self.prices
        if prices is None:
            return None
        return self._record('price', prices.iloc[-1])

    def calculate_sma_mid(self) -> Optional[float]:
        prices = self._require_prices(self.SMA_MID)
        if prices is None:
            return None
        return self._record('moving_average_50', prices.rolling(window=self.SMA_MID).mean().iloc[-1])

    def calculate_sma_long(self) -> Optional[float]:
        prices = self._require_prices(self.SMA_LONG)
        if prices is None:
            return None
        return self._record('moving_average_200', prices.rolling(window=self.SMA_LONG).mean().iloc[-1])

    def calculate_rsi(self) -> Optional[float]:
        """RSI using Wilder's exponential moving average."""
        prices = self._require_prices(self.RSI_PERIOD + 1)
        if prices is None:
            return None
        delta = prices.diff()
        alpha = 1 / self.RSI_PERIOD
        avg_gain = delta.where(delta > 0, 0).ewm(alpha=alpha, adjust=False).mean().iloc[-1]
        avg_loss = (-delta.where(delta < 0, 0)).ewm(alpha=alpha, adjust=False).mean().iloc[-1]
        if avg_loss == 0:
            rsi = 100.0 if avg_gain > 0 else 50.0
        else:
            rsi = 100 - (100 / (1 + avg_gain / avg_loss))
        return self._record('rsi', rsi)

    def calculate_support_resistance(self) -> Dict[str, Any]:
        prices = self._require_prices(self.MIN_DATA_POINTS)
        if prices is None:
            return {}
        window = prices.iloc[-self.RANGE_PERIOD:]
        self._record('support', window.min())
        self._record('resistance', window.max())
        return {k: self.calculations[k] for k in ('support', 'resistance') if k in self.calculations}

    def calculate_trend(self) -> Optional[str]:
        """BULLISH when price sits above its mid-term average (or rose over the window), else BEARISH.

        Strength is the distance from the reference level scaled to 0-100.
        """
        prices = self._require_prices(self.MIN_DATA_POINTS)
        if prices is None:
            return None
        current = prices.iloc[-1]
        reference = self.calculations.get('moving_average_50')
        if reference is None:
            reference = prices.iloc[0]
        if not reference:
            return None
        distance = (current - reference) / reference
        trend = TREND_BULLISH if distance >= 0 else TREND_BEARISH
        self.calculations['trend'] = trend
        self._record('strength', float(np.clip(abs(distance) * 1000, 0, 100)))
        return trend

    def calculate_all(self) -> Dict[str, Any]:
        """Execute all trend calculations. Returns {} when there is no usable price history."""
        if not self._has_close():
            return {}
        # trend reads moving_average_50, so averages go first
        return self._run_steps([
            self.calculate_current_price,
            self.calculate_sma_mid,
            self.calculate_sma_long,
            self.calculate_rsi,
            self.calculate_support_resistance,
            self.calculate_trend,
        ])
