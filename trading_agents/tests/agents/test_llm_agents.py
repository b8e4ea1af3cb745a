"""Tests for the LLM-backed trading agents."""
import anthropic
import httpx
import pytest
from decimal import Decimal
from unittest.mock import Mock

from trading_agents.agents.analyst_agent import AnalystAgent
from trading_agents.agents.executor_agent import ExecutorAgent
from trading_agents.agents.market_analysis_agent import MarketAnalysisAgent
from trading_agents.agents.risk_manager_agent import RiskManagerAgent
from trading_agents.core.config import AppConfig
from trading_agents.core.exceptions import AgentInvocationError
from trading_agents.core.types import (
    AGENT_ANALYST, AGENT_EXECUTOR, AGENT_RISK_MANAGER, AGENT_TECHNICAL, AGENT_SENTIMENT,
    DECISION_APPROVE, DECISION_REJECT, DECISION_CANCELLED, DECISION_BUY,
    AgentResult,
)
from trading_agents.prompts.trading_prompts import (
    TRADING_DESK_SYSTEM_PROMPT, ANALYST_SYSTEM_PROMPT, RISK_MANAGER_SYSTEM_PROMPT,
)


def _sent(client):
    """kwargs of the last messages.create call."""
    return client.messages.create.call_args.kwargs


def _prompt(client):
    return _sent(client)['messages'][0]['content']


@pytest.fixture
def market_provider():
    provider = Mock()
    provider.get_current_price.return_value = {'symbol': 'BTC', 'price': 100.5}
    provider.get_market_trend.return_value = {
        'trend': 'BULLISH', 'strength': 42.0, 'rsi': 61.2, 'moving_average_50': 98.0,
    }
    return provider


class TestLLMHelper:
    """Shared LLM call behaviour, exercised through AnalystAgent."""

    def test_system_prompt_combines_desk_and_agent(self, llm_client, sample_context, market_provider):
        client = llm_client('Buy, high confidence')
        agent = AnalystAgent(market_data_factory=lambda s: market_provider, client=client)

        agent.analyze_market('btc', sample_context)

        system = _sent(client)['system']
        assert system.startswith(TRADING_DESK_SYSTEM_PROMPT)
        assert ANALYST_SYSTEM_PROMPT in system

    def test_model_params_from_config(self, llm_client, sample_context, market_provider):
        client = llm_client('Buy')
        AnalystAgent(market_data_factory=lambda s: market_provider, client=client).analyze_market('BTC', sample_context)

        sent = _sent(client)
        assert sent['model'] == AppConfig.claude.model
        assert sent['max_tokens'] == AppConfig.claude.max_tokens
        assert sent['temperature'] == AppConfig.claude.temperature

    def test_text_blocks_joined(self, sample_context, market_provider):
        client = Mock()
        client.messages.create.return_value = Mock(content=[
            Mock(type='text', text='Buy '),
            Mock(type='tool_use', text='ignored'),
            Mock(type='text', text='now'),
        ])
        agent = AnalystAgent(market_data_factory=lambda s: market_provider, client=client)

        assert agent.analyze_market('BTC', sample_context) == 'Buy now'

    def test_empty_reply_raises(self, llm_client, sample_context, market_provider):
        agent = AnalystAgent(market_data_factory=lambda s: market_provider, client=llm_client('   '))

        with pytest.raises(AgentInvocationError) as exc_info:
            agent.analyze_market('BTC', sample_context)
        assert exc_info.value.agent_type == AGENT_ANALYST

    def test_api_error_mapped(self, sample_context, market_provider):
        client = Mock()
        client.messages.create.side_effect = anthropic.APIConnectionError(
            request=httpx.Request('POST', 'https://api.anthropic.com/v1/messages')
        )
        agent = AnalystAgent(market_data_factory=lambda s: market_provider, client=client)

        with pytest.raises(AgentInvocationError, match='LLM call failed'):
            agent.analyze_market('BTC', sample_context)

    def test_missing_api_key(self, monkeypatch, sample_context, market_provider):
        monkeypatch.setattr(AppConfig.claude, 'api_key', None)
        monkeypatch.delenv('ANTHROPIC_API_KEY', raising=False)
        agent = AnalystAgent(market_data_factory=lambda s: market_provider)

        with pytest.raises(AgentInvocationError, match='ANTHROPIC_API_KEY'):
            agent.analyze_market('BTC', sample_context)


class TestAnalystAgent:
    """Test suite for AnalystAgent."""

    def test_market_data_in_prompt(self, llm_client, sample_context, market_provider):
        client = llm_client('Buy')
        factory = Mock(return_value=market_provider)
        agent = AnalystAgent(market_data_factory=factory, client=client)

        agent.analyze_market('btc', sample_context)

        factory.assert_called_once_with('btc')
        market_provider.get_market_trend.assert_called_once_with('1D')
        prompt = _prompt(client)
        assert 'Analyze the market conditions for BTC' in prompt
        assert 'Price: $100.5' in prompt
        assert 'Trend: BULLISH (strength 42/100)' in prompt
        assert 'RSI(14): 61.20' in prompt
        assert 'SMA 50: 98.00' in prompt
        assert 'Trading Strategy: MODERATE' in prompt

    def test_no_market_data(self, llm_client, sample_context):
        provider = Mock()
        provider.get_current_price.return_value = {}
        provider.get_market_trend.return_value = {}
        client = llm_client('Hold')

        AnalystAgent(market_data_factory=lambda s: provider, client=client).analyze_market('XYZ', sample_context)

        assert 'No market data available' in _prompt(client)

    def test_evaluate_opportunity(self, llm_client, sample_context):
        client = llm_client('Looks promising')
        agent = AnalystAgent(client=client)

        assert agent.evaluate_opportunity('Should I add SOL?', sample_context) == 'Looks promising'
        assert 'Should I add SOL?' in _prompt(client)


class TestRiskManagerAgent:
    """Test suite for RiskManagerAgent."""

    @pytest.fixture
    def analyst_result(self):
        return AgentResult(agent_type=AGENT_ANALYST, message='Buy BTC at 100', decision=DECISION_BUY)

    def test_sizing_in_prompt(self, llm_client, sample_context, analyst_result):
        client = llm_client('APPROVE')
        agent = RiskManagerAgent(client=client)

        assert agent.evaluate_trade_risk(analyst_result, sample_context) == 'APPROVE'

        prompt = _prompt(client)
        assert 'Buy BTC at 100' in prompt
        assert 'Recommended Position Size: 40' in prompt
        assert 'Risk Amount: $200.00' in prompt
        assert 'Risk/Reward Ratio: 0.40' in prompt

    def test_verdict_at_zero_temperature(self, llm_client, sample_context, analyst_result):
        client = llm_client('REJECT')
        RiskManagerAgent(client=client).evaluate_trade_risk(analyst_result, sample_context)

        assert _sent(client)['temperature'] == 0.0
        assert RISK_MANAGER_SYSTEM_PROMPT in _sent(client)['system']

    def test_portfolio_metrics_in_prompt(self, llm_client, sample_context):
        client = llm_client('Moderate risk')
        RiskManagerAgent(client=client).assess_portfolio_risk(sample_context)

        prompt = _prompt(client)
        assert 'Total Exposure: $8000.00 (80.00% of balance)' in prompt
        assert 'Risk Level: MODERATE' in prompt
        assert 'Diversification: POOR' in prompt
        assert 'Value at Risk: $658.00 (95% confidence, 1 day)' in prompt

    def test_var_uses_market_volatility(self, llm_client, sample_context):
        client = llm_client('High risk')
        context = sample_context.with_overrides(market_conditions={'volatility_pct': 10})
        RiskManagerAgent(client=client).assess_portfolio_risk(context)

        assert 'Value at Risk: $1316.00' in _prompt(client)

    def test_uses_injected_calculator(self, llm_client, sample_context, analyst_result):
        calculator = Mock()
        calculator.calculate_position_size.return_value = {
            'positionSize': Decimal('7'), 'riskAmount': Decimal('1'), 'riskRewardRatio': Decimal('2'),
        }
        agent = RiskManagerAgent(risk_calculator=calculator, client=llm_client('APPROVE'))

        agent.evaluate_trade_risk(analyst_result, sample_context)

        calculator.calculate_position_size.assert_called_once_with(
            Decimal('10000'), Decimal('2'), RiskManagerAgent.REFERENCE_ENTRY, RiskManagerAgent.REFERENCE_STOP,
        )


class TestExecutorAgent:
    """Test suite for ExecutorAgent."""

    @pytest.fixture
    def analyst_result(self):
        return AgentResult(agent_type=AGENT_ANALYST, message='Buy BTC', decision=DECISION_BUY)

    def test_cancelled_without_approval(self, llm_client, sample_context, analyst_result):
        client = llm_client('should not be used')
        risk_result = AgentResult(agent_type=AGENT_RISK_MANAGER, message='no', decision=DECISION_REJECT)

        result = ExecutorAgent(client=client).execute_trade(analyst_result, risk_result, sample_context)

        assert isinstance(result, AgentResult)
        assert result.decision == DECISION_CANCELLED
        assert result.agent_type == AGENT_EXECUTOR
        client.messages.create.assert_not_called()

    def test_executes_when_approved(self, llm_client, sample_context, analyst_result):
        client = llm_client('Market order placed')
        risk_result = AgentResult(agent_type=AGENT_RISK_MANAGER, message='Approved, 5% stop', decision=DECISION_APPROVE)

        result = ExecutorAgent(client=client).execute_trade(analyst_result, risk_result, sample_context)

        assert result == 'Market order placed'
        prompt = _prompt(client)
        assert 'Buy BTC' in prompt
        assert 'Approved, 5% stop' in prompt

    def test_manage_positions(self, llm_client, sample_context):
        client = llm_client('Trail stops')
        assert ExecutorAgent(client=client).manage_positions(sample_context) == 'Trail stops'
        assert 'BTC' in _prompt(client)

    def test_execution_status(self, llm_client, sample_context):
        client = llm_client('Filled')
        assert ExecutorAgent(client=client).get_execution_status('Was BTC filled?', sample_context) == 'Filled'
        assert 'Was BTC filled?' in _prompt(client)


class TestMarketAnalysisAgent:
    """Test suite for the consensus panel agent."""

    def test_default_prompt(self, llm_client):
        client = llm_client('Bullish')
        agent = MarketAnalysisAgent(AGENT_TECHNICAL, client=client)

        assert agent.analyze('ETH', '1W') == 'Bullish'
        prompt = _prompt(client)
        assert 'ETH' in prompt
        assert '1W' in prompt

    def test_custom_prompt(self, llm_client):
        client = llm_client('ok')
        MarketAnalysisAgent('MACRO', prompt_template='Macro view on {subject} for {timeframe}', client=client).analyze('BTC', '1M')

        assert _prompt(client) == 'Macro view on BTC for 1M'

    def test_unknown_type_without_prompt(self):
        with pytest.raises(ValueError):
            MarketAnalysisAgent('MACRO')

    def test_errors_tagged_with_panel_type(self, llm_client):
        agent = MarketAnalysisAgent(AGENT_SENTIMENT, client=llm_client(''))
        with pytest.raises(AgentInvocationError) as exc_info:
            agent.analyze('BTC', '1M')
        assert exc_info.value.agent_type == AGENT_SENTIMENT
