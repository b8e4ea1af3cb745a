import logging
from typing import Any, Callable, Optional, Union

from trading_agents.core.exceptions import AgentInvocationError
from trading_agents.core.types import AgentResult
from trading_agents.calculators.recommendation_extractor import RecommendationExtractor

logger = logging.getLogger(__name__)

AgentOutput = Union[AgentResult, str]


class AgentAdapter:
    """Uniform wrapper around one analysis capability.

    `capability` is any callable returning an AgentResult or raw text. The
    adapter tags it with an agent type and turns every failure into an
    AgentInvocationError; it does not retry. Retry and backoff belong to
    whatever client the capability uses.

    Attributes:
        agent_type: Tag such as ANALYST, RISK_MANAGER, TECHNICAL
        name: Display/identity name, unique within one panel
    """

    def __init__(self, agent_type: str, capability: Callable[..., Any], name: Optional[str] = None):
        if not agent_type:
            raise ValueError("agent_type is required")
        if not callable(capability):
            raise TypeError("capability must be callable")
        self.agent_type = agent_type
        self.name = name or agent_type
        self._capability = capability

    def __repr__(self) -> str:
        return f"AgentAdapter(agent_type={self.agent_type!r}, name={self.name!r})"

    def invoke(self, *args, **kwargs) -> AgentOutput:
        """Call the capability.

        Returns:
            AgentResult or non-blank text

        Raises:
            AgentInvocationError: If the capability fails or returns anything else
        """
        logger.debug("Invoking agent", extra={"agent_type": self.agent_type, "agent_name": self.name})
        try:
            output = self._capability(*args, **kwargs)
        except AgentInvocationError:
            raise
        except Exception as e:
            raise AgentInvocationError(f"{self.name} failed: {e}", agent_type=self.agent_type) from e

        if isinstance(output, AgentResult):
            return output
        if isinstance(output, str) and output.strip():
            return output
        raise AgentInvocationError(
            f"{self.name} returned malformed output of type {type(output).__name__}",
            agent_type=self.agent_type,
        )

    def to_result(self, output: AgentOutput, extractor: Optional[RecommendationExtractor] = None) -> AgentResult:
        """Normalize raw text into an AgentResult via the extractor; structured results pass through."""
        if isinstance(output, AgentResult):
            return output
        signal = (extractor or RecommendationExtractor()).extract(output)
        return AgentResult(
            agent_type=self.agent_type,
            message=output,
            analysis={"raw_analysis": output},
            recommendations={"action": signal.decision},
            decision=signal.decision,
            confidence=signal.confidence,
            metadata={"agent_name": self.name},
        )

    def to_report(self, output: AgentOutput) -> AgentResult:
        """Wrap text as an AgentResult with no trade decision (reviews, status reports)."""
        if isinstance(output, AgentResult):
            return output
        return AgentResult(
            agent_type=self.agent_type,
            message=output,
            analysis={"raw_response": output},
            metadata={"agent_name": self.name},
        )
