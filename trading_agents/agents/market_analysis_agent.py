import logging
from typing import Any, Optional

from trading_agents.agents.llm_helper import LLMHelperMixin
from trading_agents.core.types import AGENT_TECHNICAL, AGENT_FUNDAMENTAL, AGENT_SENTIMENT, AnalysisContext
from trading_agents.prompts.trading_prompts import (
    TECHNICAL_ANALYSIS_PROMPT, FUNDAMENTAL_ANALYSIS_PROMPT, SENTIMENT_ANALYSIS_PROMPT,
)

logger = logging.getLogger(__name__)

PANEL_PROMPTS = {
    AGENT_TECHNICAL: TECHNICAL_ANALYSIS_PROMPT,
    AGENT_FUNDAMENTAL: FUNDAMENTAL_ANALYSIS_PROMPT,
    AGENT_SENTIMENT: SENTIMENT_ANALYSIS_PROMPT,
}


class MarketAnalysisAgent(LLMHelperMixin):
    """One member of the consensus panel. The prompt decides the specialty.

    Attributes:
        agent_type: TECHNICAL, FUNDAMENTAL, SENTIMENT or a custom tag
        prompt_template: Template with {subject} and {timeframe} placeholders
    """

    def __init__(self, agent_type: str, prompt_template: Optional[str] = None, client: Any = None):
        if prompt_template is None:
            if agent_type not in PANEL_PROMPTS:
                raise ValueError(f"No default prompt for agent type {agent_type!r}")
            prompt_template = PANEL_PROMPTS[agent_type]
        self.agent_type = agent_type
        self.AGENT_TYPE = agent_type
        self.prompt_template = prompt_template
        if client is not None:
            self.set_client(client)

    def analyze(self, subject: str, timeframe: str, context: Optional[AnalysisContext] = None) -> str:
        logger.info("Running panel analysis", extra={"agent_type": self.agent_type, "subject": subject, "timeframe": timeframe})
        prompt = self.format_prompt(self.prompt_template, subject=subject, timeframe=timeframe)
        return self._call_llm_text(prompt)
