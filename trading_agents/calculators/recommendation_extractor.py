import logging
from typing import Optional

from trading_agents.core.config import ExtractionConfig
from trading_agents.core.types import (
    DECISION_BUY, DECISION_SELL, DECISION_HOLD,
    DECISION_APPROVE, DECISION_REJECT, DECISION_REVIEW_REQUIRED,
    ExtractedSignal,
)

logger = logging.getLogger(__name__)


class RecommendationExtractor:
    """Reads a BUY/SELL/HOLD decision and a confidence level out of free text.

    Decision: lowercase the text, then test the BUY keyword set, then the
    SELL keyword set, falling back to HOLD. Text carrying both classes of
    keyword resolves to BUY.

    Confidence: scan the configured tiers in order and return the level of
    the first tier with a matching phrase, or the default level.

    Never raises; empty or missing text yields HOLD at the default confidence.
    """

    def __init__(self, config: Optional[ExtractionConfig] = None):
        self.config = config or ExtractionConfig()

    @staticmethod
    def _normalize(text: Optional[str]) -> str:
        if not text:
            return ""
        return str(text).lower()

    def extract(self, text: Optional[str]) -> ExtractedSignal:
        normalized = self._normalize(text)
        signal = ExtractedSignal(
            decision=self._decision(normalized),
            confidence=self._confidence(normalized),
        )
        logger.debug(
            "Extracted signal",
            extra={"decision": signal.decision, "confidence": signal.confidence, "text_length": len(normalized)},
        )
        return signal

    def extract_decision(self, text: Optional[str]) -> str:
        return self._decision(self._normalize(text))

    def extract_confidence(self, text: Optional[str]) -> float:
        return self._confidence(self._normalize(text))

    def _decision(self, normalized: str) -> str:
        if any(keyword in normalized for keyword in self.config.buy_keywords):
            return DECISION_BUY
        if any(keyword in normalized for keyword in self.config.sell_keywords):
            return DECISION_SELL
        return DECISION_HOLD

    def _confidence(self, normalized: str) -> float:
        for level, phrases in self.config.confidence_tiers:
            if any(phrase in normalized for phrase in phrases):
                return level
        return self.config.default_confidence


_DEFAULT_EXTRACTOR = RecommendationExtractor()


def extract_recommendation(text: Optional[str]) -> ExtractedSignal:
    """Extract with the default keyword tables."""
    return _DEFAULT_EXTRACTOR.extract(text)


def extract_confidence(text: Optional[str]) -> float:
    return _DEFAULT_EXTRACTOR.extract_confidence(text)


def extract_risk_decision(text: Optional[str]) -> str:
    """APPROVE / REJECT / REVIEW_REQUIRED from a risk manager's free-text verdict.

    "approve" is tested before "reject".
    """
    normalized = (text or "").lower()
    if "approve" in normalized:
        return DECISION_APPROVE
    if "reject" in normalized:
        return DECISION_REJECT
    return DECISION_REVIEW_REQUIRED
