import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from trading_agents.agents.agent_adapter import AgentAdapter
from trading_agents.calculators.recommendation_extractor import RecommendationExtractor
from trading_agents.core.config import AppConfig, ConsensusConfig
from trading_agents.core.exceptions import AgentInvocationError, AggregationFailure, AggregationPartialFailure
from trading_agents.core.types import (
    DECISION_HOLD, TRADE_DECISIONS,
    AgentResult, AgentVote, AnalysisContext, ConsensusResult, ExtractedSignal,
)

logger = logging.getLogger(__name__)


class ConsensusAggregator:
    """
    Fan out one subject to a panel of agents and merge their votes.

    Every adapter runs concurrently with (subject, timeframe, context). The
    join waits for all of them; one failing adapter never cancels its
    siblings. Votes are kept in adapter order, not completion order.

    Voting:
    - each participant votes its decision with its confidence as weight
    - the decision with the highest summed confidence wins
    - a tie at the top resolves to the configured tie decision (HOLD)
    - total confidence below the low-conviction threshold forces HOLD
    - average confidence is the plain mean over participants
    - an adapter returning an ERROR result counts as failed and does not vote
    """

    def __init__(
        self,
        config: Optional[ConsensusConfig] = None,
        extractor: Optional[RecommendationExtractor] = None,
    ):
        self.config = config or AppConfig.consensus
        self.config.validate()
        self.extractor = extractor or RecommendationExtractor(AppConfig.extraction)

    # --- signal ---

    def _signal(self, result: AgentResult) -> ExtractedSignal:
        """Use the agent's own decision/confidence when usable, else read them from its message."""
        if result.decision in TRADE_DECISIONS and result.confidence is not None:
            return ExtractedSignal(result.decision, float(result.confidence))
        extracted = self.extractor.extract(result.message)
        decision = result.decision if result.decision in TRADE_DECISIONS else extracted.decision
        confidence = float(result.confidence) if result.confidence is not None else extracted.confidence
        return ExtractedSignal(decision, confidence)

    # --- voting ---

    def tally(self, votes: Sequence[AgentVote]) -> Tuple[str, Dict[str, float], float]:
        """
        Confidence-weighted vote.

        Returns:
            (final decision, summed confidence per decision, total confidence)
        """
        if not votes:
            return DECISION_HOLD, {}, 0.0

        frame = pd.DataFrame(
            [{"decision": v.signal.decision, "confidence": v.signal.confidence} for v in votes]
        )
        weighted = frame.groupby("decision", sort=False)["confidence"].sum()
        weighted_votes = {decision: float(weight) for decision, weight in weighted.items()}
        total = float(frame["confidence"].sum())

        top = weighted.max()
        leaders = [decision for decision, weight in weighted.items() if np.isclose(weight, top)]
        if len(leaders) > 1:
            logger.debug("Tie at the top of the vote", extra={"leaders": leaders})
            final = self.config.tie_decision
        else:
            final = leaders[0]

        if total < self.config.low_conviction_threshold:
            logger.debug(
                "Low conviction override to HOLD",
                extra={"total_confidence": total, "threshold": self.config.low_conviction_threshold},
            )
            final = DECISION_HOLD
        return final, weighted_votes, total

    # --- fan-out ---

    @staticmethod
    def _failure_key(adapter: AgentAdapter, index: int, taken: Dict) -> str:
        return adapter.name if adapter.name not in taken else f"{adapter.name}#{index}"

    def aggregate(
        self,
        subject: str,
        adapters: Sequence[AgentAdapter],
        context: AnalysisContext,
        timeframe: Optional[str] = None,
    ) -> ConsensusResult:
        """
        Run every adapter concurrently and reduce their results to one decision.

        Args:
            subject: Instrument symbol
            adapters: Panel of agents; empty panel yields HOLD at 0.0
            context: Shared trading context
            timeframe: Horizon passed to each agent (defaults to config)

        Returns:
            ConsensusResult; `partial_failure` is set when some agents failed

        Raises:
            AggregationFailure: Every adapter of a non-empty panel failed
                (unless raise_on_total_failure is off)
        """
        timeframe = timeframe or self.config.default_timeframe
        adapters = list(adapters)
        logger.info(
            "Running consensus analysis",
            extra={"subject": subject, "timeframe": timeframe, "agents": [a.name for a in adapters]},
        )
        if not adapters:
            logger.warning("Consensus requested with no agents", extra={"subject": subject})
            return ConsensusResult(
                subject=subject, votes=[], final_decision=DECISION_HOLD,
                average_confidence=0.0, timeframe=timeframe,
            )

        slots: List[Optional[AgentVote]] = [None] * len(adapters)
        failures: Dict[str, BaseException] = {}

        workers = min(self.config.max_workers, len(adapters))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            future_to_index = {
                executor.submit(adapter.invoke, subject, timeframe, context): index
                for index, adapter in enumerate(adapters)
            }

            for future in as_completed(future_to_index):
                index = future_to_index[future]
                adapter = adapters[index]
                try:
                    result = adapter.to_result(future.result(), self.extractor)
                    if result.is_error:
                        raise AgentInvocationError(result.message, agent_type=adapter.agent_type, subject=subject)
                    slots[index] = AgentVote(adapter.agent_type, result, self._signal(result))
                except Exception as e:
                    logger.warning(
                        "Agent %s failed during consensus: %s", adapter.name, e,
                        extra={"subject": subject, "agent_type": adapter.agent_type},
                    )
                    failures[self._failure_key(adapter, index, failures)] = e

        votes = [vote for vote in slots if vote is not None]
        final, weighted_votes, total = self.tally(votes)
        average = float(np.mean([v.signal.confidence for v in votes])) if votes else 0.0

        result = ConsensusResult(
            subject=subject,
            votes=votes,
            final_decision=final,
            average_confidence=average,
            weighted_votes=weighted_votes,
            total_confidence=total,
            timeframe=timeframe,
        )

        if failures and not votes:
            failure = AggregationFailure(failures, total=len(adapters), result=result)
            result.partial_failure = failure
            logger.error("All consensus agents failed", extra={"subject": subject, "failed": list(failures)})
            if self.config.raise_on_total_failure:
                raise failure
        elif failures:
            result.partial_failure = AggregationPartialFailure(
                failures, succeeded=len(votes), total=len(adapters)
            )

        logger.info(
            "Consensus complete",
            extra={"subject": subject, "decision": final, "average_confidence": average, "failed": len(failures)},
        )
        return result
