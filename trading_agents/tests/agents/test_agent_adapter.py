"""Tests for AgentAdapter."""
import pytest
from unittest.mock import Mock

from trading_agents.agents.agent_adapter import AgentAdapter
from trading_agents.core.exceptions import AgentInvocationError
from trading_agents.core.types import AGENT_ANALYST, DECISION_BUY, AgentResult


class TestAgentAdapter:
    """Test suite for the capability wrapper."""

    def test_requires_agent_type(self):
        with pytest.raises(ValueError):
            AgentAdapter('', Mock())

    def test_requires_callable(self):
        with pytest.raises(TypeError):
            AgentAdapter(AGENT_ANALYST, 'not callable')

    def test_name_defaults_to_agent_type(self):
        assert AgentAdapter(AGENT_ANALYST, Mock()).name == AGENT_ANALYST

    def test_invoke_returns_text(self):
        adapter = AgentAdapter(AGENT_ANALYST, Mock(return_value='buy'))
        assert adapter.invoke('BTC') == 'buy'

    def test_invoke_returns_structured(self):
        result = AgentResult(agent_type=AGENT_ANALYST, message='m')
        adapter = AgentAdapter(AGENT_ANALYST, Mock(return_value=result))
        assert adapter.invoke() is result

    def test_exception_wrapped(self):
        """Any capability exception becomes AgentInvocationError tagged with the agent type."""
        adapter = AgentAdapter(AGENT_ANALYST, Mock(side_effect=KeyError('price')))

        with pytest.raises(AgentInvocationError) as exc_info:
            adapter.invoke('BTC')

        assert exc_info.value.agent_type == AGENT_ANALYST
        assert isinstance(exc_info.value.__cause__, KeyError)
        assert str(exc_info.value).startswith(f'[{AGENT_ANALYST}]')

    def test_invocation_error_passes_through(self):
        original = AgentInvocationError('rate limited', agent_type='CUSTOM')
        adapter = AgentAdapter(AGENT_ANALYST, Mock(side_effect=original))

        with pytest.raises(AgentInvocationError) as exc_info:
            adapter.invoke()

        assert exc_info.value is original

    @pytest.mark.parametrize('output', [None, 42, '', '   ', {'decision': 'BUY'}])
    def test_malformed_output(self, output):
        adapter = AgentAdapter(AGENT_ANALYST, Mock(return_value=output))
        with pytest.raises(AgentInvocationError):
            adapter.invoke()

    def test_to_result_from_text(self):
        adapter = AgentAdapter(AGENT_ANALYST, Mock(), name='Analyst')

        result = adapter.to_result('Buy the dip, high confidence')

        assert result.agent_type == AGENT_ANALYST
        assert result.decision == DECISION_BUY
        assert result.confidence == 0.9
        assert result.recommendations == {'action': DECISION_BUY}
        assert result.metadata == {'agent_name': 'Analyst'}

    def test_to_report_has_no_decision(self):
        result = AgentAdapter(AGENT_ANALYST, Mock()).to_report('Strong quarter')
        assert result.decision is None
        assert result.analysis == {'raw_response': 'Strong quarter'}
