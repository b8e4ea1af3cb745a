"""
Wiring of LLM agents into adapters and orchestrators.

Each builder accepts an optional Anthropic client so tests and scripts can
share one client (or a mock) across every agent.
"""
import logging
from typing import Any, List, Optional, Sequence

from trading_agents.agents.agent_adapter import AgentAdapter
from trading_agents.agents.analyst_agent import AnalystAgent
from trading_agents.agents.executor_agent import ExecutorAgent
from trading_agents.agents.market_analysis_agent import MarketAnalysisAgent, PANEL_PROMPTS
from trading_agents.agents.risk_manager_agent import RiskManagerAgent
from trading_agents.core.types import AGENT_ANALYST, AGENT_RISK_MANAGER, AGENT_EXECUTOR
from trading_agents.orchestration.portfolio_review_coordinator import PortfolioReviewCoordinator
from trading_agents.orchestration.query_router import QueryRouter
from trading_agents.orchestration.trading_pipeline import SequentialPipeline
from trading_agents.services.notification_sink import NotificationSink

logger = logging.getLogger(__name__)


def build_trading_pipeline(
    client: Any = None,
    notification_sink: Optional[NotificationSink] = None,
    analyst: Optional[AnalystAgent] = None,
    risk_manager: Optional[RiskManagerAgent] = None,
    executor: Optional[ExecutorAgent] = None,
) -> SequentialPipeline:
    analyst = analyst or AnalystAgent(client=client)
    risk_manager = risk_manager or RiskManagerAgent(client=client)
    executor = executor or ExecutorAgent(client=client)
    return SequentialPipeline(
        AgentAdapter(AGENT_ANALYST, analyst.analyze_market, name="Analyst"),
        AgentAdapter(AGENT_RISK_MANAGER, risk_manager.evaluate_trade_risk, name="RiskManager"),
        AgentAdapter(AGENT_EXECUTOR, executor.execute_trade, name="Executor"),
        notification_sink=notification_sink,
    )


def build_consensus_panel(
    client: Any = None,
    agent_types: Optional[Sequence[str]] = None,
) -> List[AgentAdapter]:
    """Technical, fundamental and sentiment analysts (or the given subset) as adapters."""
    agent_types = list(agent_types or PANEL_PROMPTS)
    panel = []
    for agent_type in agent_types:
        agent = MarketAnalysisAgent(agent_type, client=client)
        panel.append(AgentAdapter(agent_type, agent.analyze, name=f"{agent_type.title()}Analyst"))
    logger.debug("Built consensus panel", extra={"agents": agent_types})
    return panel


def build_portfolio_review_coordinator(
    client: Any = None,
    risk_manager: Optional[RiskManagerAgent] = None,
    executor: Optional[ExecutorAgent] = None,
) -> PortfolioReviewCoordinator:
    risk_manager = risk_manager or RiskManagerAgent(client=client)
    executor = executor or ExecutorAgent(client=client)
    return PortfolioReviewCoordinator(
        risk_assessment=AgentAdapter(AGENT_RISK_MANAGER, risk_manager.assess_portfolio_risk, name="PortfolioRisk"),
        position_management=AgentAdapter(AGENT_EXECUTOR, executor.manage_positions, name="PositionManager"),
    )


def build_query_router(
    client: Any = None,
    analyst: Optional[AnalystAgent] = None,
    risk_manager: Optional[RiskManagerAgent] = None,
    executor: Optional[ExecutorAgent] = None,
) -> QueryRouter:
    analyst = analyst or AnalystAgent(client=client)
    risk_manager = risk_manager or RiskManagerAgent(client=client)
    executor = executor or ExecutorAgent(client=client)
    return QueryRouter(
        opportunity=AgentAdapter(AGENT_ANALYST, analyst.evaluate_opportunity, name="Analyst"),
        portfolio_risk=AgentAdapter(AGENT_RISK_MANAGER, risk_manager.assess_portfolio_risk, name="RiskManager"),
        execution_status=AgentAdapter(AGENT_EXECUTOR, executor.get_execution_status, name="Executor"),
    )
