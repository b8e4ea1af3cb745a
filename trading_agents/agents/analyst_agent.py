import logging
from typing import Any, Callable, Dict, Optional

from trading_agents.agents.llm_helper import LLMHelperMixin
from trading_agents.core.config import AppConfig
from trading_agents.core.types import AGENT_ANALYST, AnalysisContext
from trading_agents.services.market_data_provider import MarketDataProvider
from trading_agents.prompts.trading_prompts import (
    ANALYST_SYSTEM_PROMPT, ANALYST_MARKET_PROMPT, ANALYST_OPPORTUNITY_PROMPT,
)

logger = logging.getLogger(__name__)


class AnalystAgent(LLMHelperMixin):
    """Market analyst: reads current price and trend, asks the LLM for a trade view.

    Returns raw text; callers turn it into a structured decision.
    """
    AGENT_TYPE = AGENT_ANALYST
    SYSTEM_PROMPT = ANALYST_SYSTEM_PROMPT
    TREND_PERIOD: str = AppConfig.market_data.trend_period

    def __init__(
        self,
        market_data_factory: Optional[Callable[[str], MarketDataProvider]] = None,
        client: Any = None,
    ):
        self._market_data_factory = market_data_factory or (lambda symbol: MarketDataProvider(symbol))
        if client is not None:
            self.set_client(client)

    def _format_market_data(self, quote: Dict[str, Any], trend: Dict[str, Any]) -> str:
        lines = []
        if quote.get("price") is not None:
            lines.append(f"Price: ${quote['price']}")
        if trend.get("trend"):
            lines.append(f"Trend: {trend['trend']} (strength {trend.get('strength', 0):.0f}/100)")
        for key, label in (("rsi", "RSI(14)"), ("moving_average_50", "SMA 50"),
                           ("moving_average_200", "SMA 200"), ("support", "Support"),
                           ("resistance", "Resistance")):
            if trend.get(key) is not None:
                lines.append(f"{label}: {trend[key]:.2f}")
        return "\n".join(lines) if lines else "No market data available"

    def analyze_market(self, symbol: str, context: AnalysisContext) -> str:
        logger.info("Analyst analyzing market", extra={"symbol": symbol})
        provider = self._market_data_factory(symbol)
        quote = provider.get_current_price()
        trend = provider.get_market_trend(self.TREND_PERIOD)

        prompt = self.format_prompt(
            ANALYST_MARKET_PROMPT,
            symbol=symbol.upper(),
            account_balance=context.account_balance,
            risk_tolerance=context.risk_tolerance,
            trading_strategy=context.trading_strategy,
            market_data=self._format_market_data(quote, trend),
        )
        return self._call_llm_text(prompt)

    def evaluate_opportunity(self, query: str, context: AnalysisContext) -> str:
        logger.info("Analyst evaluating opportunity")
        prompt = self.format_prompt(
            ANALYST_OPPORTUNITY_PROMPT,
            query=query,
            account_balance=context.account_balance,
            trading_strategy=context.trading_strategy,
        )
        return self._call_llm_text(prompt)
