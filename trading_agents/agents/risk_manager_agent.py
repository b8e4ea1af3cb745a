import logging
from decimal import Decimal
from typing import Any, Optional

from trading_agents.agents.llm_helper import LLMHelperMixin
from trading_agents.calculators.risk_calculator import RiskCalculator
from trading_agents.core.types import AGENT_RISK_MANAGER, AgentResult, AnalysisContext
from trading_agents.prompts.trading_prompts import (
    RISK_MANAGER_SYSTEM_PROMPT, RISK_EVALUATION_PROMPT, PORTFOLIO_RISK_PROMPT,
)

logger = logging.getLogger(__name__)


class RiskManagerAgent(LLMHelperMixin):
    """Risk manager: sizes the analyst's idea and returns an APPROVE/REJECT verdict as text."""
    AGENT_TYPE = AGENT_RISK_MANAGER
    SYSTEM_PROMPT = RISK_MANAGER_SYSTEM_PROMPT
    TEMPERATURE_VERDICT: float = 0.0

    # Reference entry/stop used for sizing when the analyst gives no levels (5% stop)
    REFERENCE_ENTRY: Decimal = Decimal("100")
    REFERENCE_STOP: Decimal = Decimal("95")
    # daily volatility (%) assumed for VaR when market_conditions has none
    DEFAULT_VOLATILITY_PCT: Decimal = Decimal("5")

    def __init__(self, risk_calculator: Optional[RiskCalculator] = None, client: Any = None):
        self.risk_calculator = risk_calculator or RiskCalculator()
        if client is not None:
            self.set_client(client)

    def evaluate_trade_risk(self, analyst_result: AgentResult, context: AnalysisContext) -> str:
        logger.info("Risk Manager evaluating trade recommendation")
        sizing = self.risk_calculator.calculate_position_size(
            context.account_balance,
            context.risk_tolerance,
            self.REFERENCE_ENTRY,
            self.REFERENCE_STOP,
        )
        prompt = self.format_prompt(
            RISK_EVALUATION_PROMPT,
            analyst_message=analyst_result.message,
            account_balance=context.account_balance,
            current_positions=context.current_positions,
            risk_tolerance=context.risk_tolerance,
            position_size=sizing["positionSize"],
            risk_amount=sizing["riskAmount"],
            risk_reward_ratio=sizing["riskRewardRatio"],
        )
        return self._call_llm_text(prompt, temperature=self.TEMPERATURE_VERDICT)

    def assess_portfolio_risk(self, context: AnalysisContext) -> str:
        logger.info("Risk Manager assessing overall portfolio risk")
        portfolio = self.risk_calculator.evaluate_portfolio_risk(context.current_positions, context.account_balance)
        volatility = context.market_conditions.get("volatility_pct", self.DEFAULT_VOLATILITY_PCT)
        var = self.risk_calculator.calculate_var(portfolio["totalExposure"], Decimal(str(volatility)))
        prompt = self.format_prompt(
            PORTFOLIO_RISK_PROMPT,
            account_balance=context.account_balance,
            current_positions=context.current_positions,
            risk_tolerance=context.risk_tolerance,
            total_exposure=portfolio["totalExposure"],
            exposure_percentage=portfolio["exposurePercentage"],
            risk_level=portfolio["riskLevel"],
            diversification=portfolio["diversification"],
            value_at_risk=var["valueAtRisk"],
            var_confidence=var["confidenceLevel"],
        )
        return self._call_llm_text(prompt)
