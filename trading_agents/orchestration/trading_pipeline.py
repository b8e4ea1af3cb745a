import logging
from typing import Any, Dict, List, Optional

from trading_agents.agents.agent_adapter import AgentAdapter, AgentOutput
from trading_agents.calculators.recommendation_extractor import RecommendationExtractor, extract_risk_decision
from trading_agents.core.config import AppConfig
from trading_agents.core.exceptions import AgentInvocationError
from trading_agents.core.types import (
    AGENT_ANALYST, AGENT_RISK_MANAGER, AGENT_EXECUTOR, AGENT_ORCHESTRATOR,
    DECISION_APPROVE, DECISION_EXECUTED,
    STAGE_ANALYZING, STAGE_RISK_EVALUATING, STAGE_EXECUTING, STAGE_EXECUTED, STAGE_BLOCKED,
    STATUS_WORKING, STATUS_COMPLETED, STATUS_APPROVED, STATUS_REJECTED,
    STATUS_EXECUTED, STATUS_BLOCKED, STATUS_ERROR,
    AgentResult, AgentUpdate, AnalysisContext, PipelineRun,
)
from trading_agents.services.notification_sink import NotificationSink, LoggingNotificationSink

logger = logging.getLogger(__name__)


class SequentialPipeline:
    """
    Gated analyst -> risk manager -> executor pipeline.

    Pipeline stages:
    1. Analyst: (subject, context) -> market view
    2. Risk Manager: (analyst result, context) -> APPROVE / REJECT
    3. Executor: (analyst result, risk result, context) -> execution report,
       only when the risk manager approved

    Stage N+1 never starts before stage N finished. A stage that raises
    AgentInvocationError or returns an ERROR result ends the run: an ERROR
    result is appended and no further stage runs. Errors are returned as data, never raised.

    After every transition a progress update goes to the notification sink.
    Sink failures are logged and ignored.
    """

    def __init__(
        self,
        analyst: AgentAdapter,
        risk_manager: AgentAdapter,
        executor: AgentAdapter,
        notification_sink: Optional[NotificationSink] = None,
        extractor: Optional[RecommendationExtractor] = None,
        topic: Optional[str] = None,
    ):
        self.analyst = analyst
        self.risk_manager = risk_manager
        self.executor = executor
        self.notification_sink = notification_sink or LoggingNotificationSink()
        self.extractor = extractor or RecommendationExtractor(AppConfig.extraction)
        self.topic = topic or AppConfig.notifications.topic

    # --- notifications ---

    def _notify(self, agent_type: str, message: str, status: str, context: AnalysisContext) -> None:
        update = AgentUpdate(
            agent_type=agent_type,
            message=message,
            status=status,
            conversation_id=context.conversation_id,
            topic=self.topic,
        )
        try:
            self.notification_sink(update)
        except Exception as e:
            logger.warning(
                "Progress notification failed: %s", e,
                extra={"agent_type": agent_type, "status": status},
            )

    # --- stage interpretation ---

    def _analyst_result(self, output: AgentOutput) -> AgentResult:
        return self.analyst.to_result(output, self.extractor)

    def _risk_result(self, output: AgentOutput) -> AgentResult:
        if isinstance(output, AgentResult):
            return output
        lowered = output.lower()
        metrics: Dict[str, Any] = {"raw_evaluation": output}
        if "position size" in lowered:
            metrics["has_position_sizing"] = True
        if "stop loss" in lowered:
            metrics["has_stop_loss"] = True
        return AgentResult(
            agent_type=self.risk_manager.agent_type,
            message=output,
            analysis=metrics,
            decision=extract_risk_decision(output),
        )

    def _executor_result(self, output: AgentOutput) -> AgentResult:
        if isinstance(output, AgentResult):
            return output
        details: Dict[str, Any] = {"raw_execution": output}
        if "order" in output.lower():
            details["has_orders"] = True
        return AgentResult(
            agent_type=self.executor.agent_type,
            message=output,
            decision=DECISION_EXECUTED,
            metadata=details,
        )

    @staticmethod
    def _checked(adapter: AgentAdapter, result: AgentResult) -> AgentResult:
        """A stage that reports ERROR ends the run like one that raised."""
        if result.is_error:
            raise AgentInvocationError(result.message, agent_type=adapter.agent_type)
        return result

    # --- run ---

    def run(
        self,
        subject: str,
        context: AnalysisContext,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> PipelineRun:
        """
        Execute the gated pipeline for one subject.

        Args:
            subject: Instrument symbol
            context: Shared trading context
            overrides: Optional partial context overrides for this run

        Returns:
            PipelineRun with results in execution order (2 entries when
            blocked, 3 when executed, ERROR last when errored)
        """
        if overrides:
            context = context.with_overrides(**overrides)
        run = PipelineRun(subject=subject)
        logger.info("Orchestrating trading decision", extra={"subject": subject, "conversation_id": context.conversation_id})

        stage_agent = AGENT_ANALYST
        try:
            logger.info("[1/3] Running Analyst...")
            run.advance(STAGE_ANALYZING)
            self._notify(AGENT_ANALYST, f"Starting market analysis for {subject}", STATUS_WORKING, context)
            analyst_result = self._checked(self.analyst, self._analyst_result(self.analyst.invoke(subject, context)))
            run.record(analyst_result)
            self._notify(AGENT_ANALYST, analyst_result.message, STATUS_COMPLETED, context)
            logger.info("Analyst complete", extra={"decision": analyst_result.decision})

            logger.info("[2/3] Running Risk Manager...")
            stage_agent = AGENT_RISK_MANAGER
            run.advance(STAGE_RISK_EVALUATING)
            self._notify(AGENT_RISK_MANAGER, "Evaluating trade risks...", STATUS_WORKING, context)
            risk_result = self._checked(
                self.risk_manager, self._risk_result(self.risk_manager.invoke(analyst_result, context))
            )
            run.record(risk_result)
            approved = risk_result.decision == DECISION_APPROVE
            self._notify(
                AGENT_RISK_MANAGER, risk_result.message,
                STATUS_APPROVED if approved else STATUS_REJECTED, context,
            )
            logger.info("Risk Manager complete", extra={"decision": risk_result.decision})

            if not approved:
                run.advance(STAGE_BLOCKED)
                self._notify(AGENT_EXECUTOR, "Trade rejected by Risk Manager", STATUS_BLOCKED, context)
                logger.info("Pipeline blocked at risk gate", extra={"subject": subject})
                return run

            logger.info("[3/3] Running Executor...")
            stage_agent = AGENT_EXECUTOR
            run.advance(STAGE_EXECUTING)
            self._notify(AGENT_EXECUTOR, "Executing trade...", STATUS_WORKING, context)
            execution_result = self._checked(
                self.executor, self._executor_result(self.executor.invoke(analyst_result, risk_result, context))
            )
            run.record(execution_result)
            run.advance(STAGE_EXECUTED)
            self._notify(AGENT_EXECUTOR, execution_result.message, STATUS_EXECUTED, context)
            logger.info("Executor complete", extra={"decision": execution_result.decision})
        except AgentInvocationError as e:
            logger.exception("Pipeline stage failed", extra={"subject": subject, "failed_stage": run.stage})
            failed_stage = run.stage
            run.fail(AgentResult.error(
                AGENT_ORCHESTRATOR,
                f"Error occurred: {e}",
                failed_stage=failed_stage,
                failed_agent=e.agent_type or stage_agent,
            ))
            self._notify(AGENT_ORCHESTRATOR, f"Error occurred: {e}", STATUS_ERROR, context)
        return run

    def process_trading_decision(
        self,
        subject: str,
        context: AnalysisContext,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> List[AgentResult]:
        """Run the pipeline and return just the ordered results."""
        return self.run(subject, context, overrides=overrides).results
