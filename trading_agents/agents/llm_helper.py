import os
import logging
from typing import Any, Dict, Optional

import anthropic
from anthropic import Anthropic

from trading_agents.core.config import AppConfig
from trading_agents.core.exceptions import AgentInvocationError
from trading_agents.prompts.trading_prompts import TRADING_DESK_SYSTEM_PROMPT

logger = logging.getLogger(__name__)


class LLMHelperMixin:
    """Mixin providing the LLM call pattern for trading agents.

    Centralizes system prompt resolution, model parameter fallback to
    AppConfig, client management, and mapping provider errors onto
    AgentInvocationError.
    """
    AGENT_TYPE: str = ""
    SYSTEM_PROMPT: Optional[str] = None
    DEFAULT_MODEL: Optional[str] = None
    DEFAULT_MAX_TOKENS: Optional[int] = None
    DEFAULT_TEMPERATURE: Optional[float] = None

    def _resolve_system_prompt(self, system: Optional[str]) -> str:
        """Base desk prompt plus the explicit or class-level agent prompt."""
        extra = system if system is not None else self.SYSTEM_PROMPT
        if extra and extra.strip():
            return f"{TRADING_DESK_SYSTEM_PROMPT}\n\n{extra}"
        return TRADING_DESK_SYSTEM_PROMPT

    def _resolve_model_params(self, max_tokens: Optional[int], temperature: Optional[float]):
        """Resolve model parameters from agent defaults or AppConfig fallback."""
        claude_cfg = AppConfig.claude
        model = self.DEFAULT_MODEL or claude_cfg.model
        max_toks = max_tokens if max_tokens is not None else self.DEFAULT_MAX_TOKENS
        temp = temperature if temperature is not None else self.DEFAULT_TEMPERATURE
        if max_toks is None:
            max_toks = claude_cfg.max_tokens
        if temp is None:
            temp = claude_cfg.temperature
        return model, max_toks, temp

    def format_prompt(self, template: str, **kwargs) -> str:
        """Format a prompt template with the provided keyword arguments."""
        return template.format(**kwargs)

    def _call_llm_text(
        self,
        prompt: str,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        system: Optional[str] = None,
    ) -> str:
        """Call the LLM and return the concatenated text blocks.

        Raises:
            AgentInvocationError: On provider errors, rate limits, or an empty reply
        """
        model, max_tokens, temperature = self._resolve_model_params(max_tokens, temperature)
        kwargs: Dict[str, Any] = dict(
            model=model,
            max_tokens=max_tokens,
            temperature=temperature,
            system=self._resolve_system_prompt(system),
            messages=[{"role": "user", "content": prompt}],
        )
        try:
            response = self.client.messages.create(**kwargs)
        except anthropic.RateLimitError as e:
            raise AgentInvocationError(f"rate limited: {e}", agent_type=self.AGENT_TYPE) from e
        except anthropic.APIError as e:
            raise AgentInvocationError(f"LLM call failed: {e}", agent_type=self.AGENT_TYPE) from e

        text = "".join(
            getattr(block, "text", "") for block in response.content
            if getattr(block, "type", None) == "text"
        ).strip()
        if not text:
            raise AgentInvocationError(f"Expected text response, got: {response.content}", agent_type=self.AGENT_TYPE)
        logger.debug("LLM response received", extra={"agent_type": self.AGENT_TYPE, "chars": len(text)})
        return text

    @property
    def client(self) -> Anthropic:
        """Get or initialize Anthropic client from _client or API key."""
        if getattr(self, "_client", None) is not None:
            return self._client
        api_key = AppConfig.claude.api_key or os.getenv("ANTHROPIC_API_KEY")
        if not api_key:
            raise AgentInvocationError(
                "ANTHROPIC_API_KEY required for LLM calls or provide a client via set_client",
                agent_type=self.AGENT_TYPE,
            )
        self._client = Anthropic(api_key=api_key)
        return self._client

    def set_client(self, client: Anthropic) -> None:
        """Inject or replace Anthropic client instance."""
        self._client = client
