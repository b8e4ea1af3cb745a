import logging
from typing import Optional

from trading_agents.agents.agent_adapter import AgentAdapter
from trading_agents.calculators.recommendation_extractor import RecommendationExtractor
from trading_agents.core.config import AppConfig
from trading_agents.core.types import (
    AGENT_ANALYST, AGENT_RISK_MANAGER, AGENT_EXECUTOR,
    AgentResult, AnalysisContext,
)

logger = logging.getLogger(__name__)

RISK_KEYWORDS = ("risk", "position size")
EXECUTION_KEYWORDS = ("execute", "order")


class QueryRouter:
    """Sends a free-form question to a single agent.

    Adapters:
        opportunity: (query, context) -> analyst view of the question
        portfolio_risk: (context) -> risk manager's portfolio assessment
        execution_status: (query, context) -> executor status report

    Invocation errors propagate as AgentInvocationError.
    """

    def __init__(
        self,
        opportunity: AgentAdapter,
        portfolio_risk: AgentAdapter,
        execution_status: AgentAdapter,
        extractor: Optional[RecommendationExtractor] = None,
    ):
        self.opportunity = opportunity
        self.portfolio_risk = portfolio_risk
        self.execution_status = execution_status
        self.extractor = extractor or RecommendationExtractor(AppConfig.extraction)

    @staticmethod
    def classify(query: str) -> str:
        """Pick an agent for an untargeted query by keyword. Risk wins over execution."""
        lowered = (query or "").lower()
        if any(keyword in lowered for keyword in RISK_KEYWORDS):
            return AGENT_RISK_MANAGER
        if any(keyword in lowered for keyword in EXECUTION_KEYWORDS):
            return AGENT_EXECUTOR
        return AGENT_ANALYST

    def route(self, query: str, agent_type: Optional[str], context: AnalysisContext) -> AgentResult:
        """
        Answer `query` with the agent named by `agent_type`.

        Unknown or missing agent types fall back to keyword routing.
        """
        target = (agent_type or "").upper()
        if target not in (AGENT_ANALYST, AGENT_RISK_MANAGER, AGENT_EXECUTOR):
            target = self.classify(query)
            logger.debug("Routed general query by keyword", extra={"agent_type": target})
        logger.info("Processing query", extra={"agent_type": target, "conversation_id": context.conversation_id})

        if target == AGENT_RISK_MANAGER:
            return self.portfolio_risk.to_report(self.portfolio_risk.invoke(context))
        if target == AGENT_EXECUTOR:
            return self.execution_status.to_report(self.execution_status.invoke(query, context))
        return self.opportunity.to_result(self.opportunity.invoke(query, context), self.extractor)
