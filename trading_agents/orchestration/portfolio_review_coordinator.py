import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Dict, List, Optional

from trading_agents.agents.agent_adapter import AgentAdapter
from trading_agents.core.exceptions import AgentInvocationError, AggregationFailure
from trading_agents.core.types import AGENT_ORCHESTRATOR, AgentResult, AnalysisContext

logger = logging.getLogger(__name__)

TASK_RISK_ASSESSMENT = "risk_assessment"
TASK_POSITION_MANAGEMENT = "position_management"


class PortfolioReviewCoordinator:
    """Runs portfolio risk assessment and position management side by side.

    Results are merged without voting, always in [risk, positions] order.
    A failed task, or one that returns an ERROR result, leaves an ERROR
    marker in its slot.
    """

    def __init__(self, risk_assessment: AgentAdapter, position_management: AgentAdapter):
        self.tasks = (
            (TASK_RISK_ASSESSMENT, risk_assessment),
            (TASK_POSITION_MANAGEMENT, position_management),
        )

    @staticmethod
    def _marker(task: str, adapter: AgentAdapter, error: BaseException) -> AgentResult:
        return AgentResult.error(
            AGENT_ORCHESTRATOR,
            f"Portfolio review task {task} failed: {error}",
            failed_task=task,
            failed_agent=adapter.agent_type,
            error=str(error),
        )

    def review(self, context: AnalysisContext) -> List[AgentResult]:
        """
        Review the portfolio in `context`.

        Returns:
            [risk assessment, position management]; a failed task is an ERROR marker

        Raises:
            AggregationFailure: Both tasks failed; `result` holds the two markers
        """
        logger.info("Performing portfolio review", extra={"conversation_id": context.conversation_id})
        slots: List[Optional[AgentResult]] = [None] * len(self.tasks)
        failures: Dict[str, BaseException] = {}

        with ThreadPoolExecutor(max_workers=len(self.tasks)) as executor:
            future_to_index = {
                executor.submit(adapter.invoke, context): index
                for index, (_, adapter) in enumerate(self.tasks)
            }
            for future in as_completed(future_to_index):
                index = future_to_index[future]
                task, adapter = self.tasks[index]
                try:
                    report = adapter.to_report(future.result())
                    if report.is_error:
                        raise AgentInvocationError(report.message, agent_type=adapter.agent_type)
                    slots[index] = report
                except Exception as e:
                    logger.warning(
                        "Portfolio review task %s failed: %s", task, e,
                        extra={"task": task, "agent_type": adapter.agent_type},
                    )
                    failures[task] = e
                    slots[index] = self._marker(task, adapter, e)

        if len(failures) == len(self.tasks):
            raise AggregationFailure(failures, total=len(self.tasks), result=slots)
        return slots
