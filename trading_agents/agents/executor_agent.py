import logging
from typing import Any, Union

from trading_agents.agents.llm_helper import LLMHelperMixin
from trading_agents.core.types import (
    AGENT_EXECUTOR, DECISION_APPROVE, DECISION_CANCELLED,
    AgentResult, AnalysisContext,
)
from trading_agents.prompts.trading_prompts import (
    EXECUTOR_SYSTEM_PROMPT, EXECUTE_TRADE_PROMPT, MANAGE_POSITIONS_PROMPT, EXECUTION_STATUS_PROMPT,
)

logger = logging.getLogger(__name__)


class ExecutorAgent(LLMHelperMixin):
    """Execution trader: turns an approved idea into orders and manages open positions."""
    AGENT_TYPE = AGENT_EXECUTOR
    SYSTEM_PROMPT = EXECUTOR_SYSTEM_PROMPT

    def __init__(self, client: Any = None):
        if client is not None:
            self.set_client(client)

    def execute_trade(
        self,
        analyst_result: AgentResult,
        risk_result: AgentResult,
        context: AnalysisContext,
    ) -> Union[AgentResult, str]:
        """Execute an approved trade.

        Returns a CANCELLED AgentResult, without calling the LLM, when the
        risk manager did not approve.
        """
        logger.info("Executor processing trade execution")
        if risk_result.decision != DECISION_APPROVE:
            return AgentResult(
                agent_type=AGENT_EXECUTOR,
                message="Trade execution cancelled - Risk Manager did not approve",
                decision=DECISION_CANCELLED,
            )
        prompt = self.format_prompt(
            EXECUTE_TRADE_PROMPT,
            analyst_message=analyst_result.message,
            risk_message=risk_result.message,
            account_balance=context.account_balance,
        )
        return self._call_llm_text(prompt)

    def manage_positions(self, context: AnalysisContext) -> str:
        logger.info("Executor managing existing positions")
        prompt = self.format_prompt(MANAGE_POSITIONS_PROMPT, current_positions=context.current_positions)
        return self._call_llm_text(prompt)

    def get_execution_status(self, query: str, context: AnalysisContext) -> str:
        logger.info("Executor checking execution status")
        prompt = self.format_prompt(EXECUTION_STATUS_PROMPT, query=query, current_positions=context.current_positions)
        return self._call_llm_text(prompt)
