"""Shared test fixtures for trading agent tests."""
import pytest
import numpy as np
import pandas as pd
from datetime import datetime
from decimal import Decimal
from unittest.mock import Mock

from trading_agents.agents.agent_adapter import AgentAdapter
from trading_agents.core.types import AgentResult, AnalysisContext


@pytest.fixture
def sample_context():
    """Moderate-risk account with two open positions."""
    return AnalysisContext(
        conversation_id='conv-123',
        account_balance=Decimal('10000'),
        risk_tolerance=Decimal('2'),
        current_positions={'BTC': Decimal('5000'), 'ETH': Decimal('3000')},
        trading_strategy='MODERATE',
        market_conditions={'volatility': 'normal'},
    )


@pytest.fixture
def make_adapter():
    """Factory building an AgentAdapter around a Mock capability.

    Pass `returns` for a fixed output or `raises` for a failing capability.
    """
    def _make(agent_type, returns=None, raises=None, name=None):
        capability = Mock(name=f'{agent_type.lower()}_capability')
        if raises is not None:
            capability.side_effect = raises
        else:
            capability.return_value = returns
        return AgentAdapter(agent_type, capability, name=name)
    return _make


@pytest.fixture
def llm_client():
    """Factory for a mock Anthropic client whose messages.create returns the given text(s)."""
    def _make(*texts):
        client = Mock()
        responses = []
        for text in texts:
            response = Mock()
            response.content = [Mock(type='text', text=text)]
            responses.append(response)
        if len(responses) == 1:
            client.messages.create.return_value = responses[0]
        else:
            client.messages.create.side_effect = responses
        return client
    return _make


@pytest.fixture
def structured_result():
    """Factory for a structured AgentResult carrying its own decision and confidence."""
    def _make(agent_type, decision, confidence=None, message='structured'):
        return AgentResult(agent_type=agent_type, message=message, decision=decision, confidence=confidence)
    return _make


@pytest.fixture
def sample_price_history():
    """Generate sample price history DataFrame."""
    dates = pd.date_range(end=datetime.now(), periods=252, freq='D')
    np.random.seed(42)
    base_price = 100
    returns = np.random.normal(0.001, 0.02, len(dates))
    prices = base_price * (1 + returns).cumprod()

    return pd.DataFrame({
        'Open': prices * 0.99,
        'High': prices * 1.02,
        'Low': prices * 0.98,
        'Close': prices,
        'Volume': np.random.randint(1000000, 10000000, len(dates))
    }, index=dates)


@pytest.fixture
def rising_price_history():
    """Strictly rising closes: bullish, RSI pinned at 100."""
    dates = pd.date_range(end=datetime.now(), periods=260, freq='D')
    prices = np.linspace(100, 200, len(dates))
    return pd.DataFrame({'Close': prices, 'Volume': np.full(len(dates), 1000)}, index=dates)


@pytest.fixture
def falling_price_history():
    """Strictly falling closes: bearish."""
    dates = pd.date_range(end=datetime.now(), periods=260, freq='D')
    prices = np.linspace(200, 100, len(dates))
    return pd.DataFrame({'Close': prices, 'Volume': np.full(len(dates), 1000)}, index=dates)
