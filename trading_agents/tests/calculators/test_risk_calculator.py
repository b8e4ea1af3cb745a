"""Tests for RiskCalculator."""
import pytest
from decimal import Decimal

from trading_agents.calculators.risk_calculator import RiskCalculator


@pytest.fixture
def calculator():
    return RiskCalculator()


class TestPositionSize:
    """Test suite for position sizing."""

    def test_basic_sizing(self, calculator):
        result = calculator.calculate_position_size(Decimal('10000'), Decimal('2'), Decimal('100'), Decimal('95'))

        assert result['positionSize'] == Decimal('40')
        assert result['riskAmount'] == Decimal('200.00')
        assert result['totalPositionValue'] == Decimal('4000.00')
        assert result['riskRewardRatio'] == Decimal('0.40')

    def test_rounds_down_to_whole_units(self, calculator):
        result = calculator.calculate_position_size(Decimal('10000'), Decimal('1'), Decimal('100'), Decimal('97'))
        assert result['positionSize'] == Decimal('33')

    def test_short_side_stop_above_entry(self, calculator):
        result = calculator.calculate_position_size(Decimal('10000'), Decimal('2'), Decimal('95'), Decimal('100'))
        assert result['positionSize'] == Decimal('40')

    def test_equal_entry_and_stop(self, calculator):
        with pytest.raises(ValueError):
            calculator.calculate_position_size(Decimal('10000'), Decimal('2'), Decimal('100'), Decimal('100'))


class TestPortfolioRisk:
    """Exposure and diversification thresholds."""

    @pytest.mark.parametrize('positions,expected', [
        ({'BTC': Decimal('8100')}, 'HIGH'),
        ({'BTC': Decimal('8000')}, 'MODERATE'),
        ({'BTC': Decimal('5100')}, 'MODERATE'),
        ({'BTC': Decimal('5000')}, 'LOW'),
        ({}, 'LOW'),
    ])
    def test_risk_level(self, calculator, positions, expected):
        assert calculator.evaluate_portfolio_risk(positions, Decimal('10000'))['riskLevel'] == expected

    @pytest.mark.parametrize('count,expected', [(0, 'POOR'), (2, 'POOR'), (3, 'MODERATE'), (6, 'MODERATE'), (7, 'GOOD')])
    def test_diversification(self, calculator, count, expected):
        positions = {f'C{i}': Decimal('100') for i in range(count)}
        assert calculator.evaluate_portfolio_risk(positions, Decimal('10000'))['diversification'] == expected

    def test_summary_figures(self, calculator, sample_context):
        result = calculator.evaluate_portfolio_risk(sample_context.current_positions, sample_context.account_balance)

        assert result['totalExposure'] == Decimal('8000.00')
        assert result['exposurePercentage'] == Decimal('80.00')
        assert result['numberOfPositions'] == 2
        assert result['averagePositionSize'] == Decimal('4000.00')

    def test_zero_balance(self, calculator):
        result = calculator.evaluate_portfolio_risk({'BTC': Decimal('100')}, Decimal('0'))
        assert result['exposurePercentage'] == Decimal('0')
        assert result['riskLevel'] == 'LOW'


class TestValueAtRisk:

    def test_var_95(self, calculator):
        result = calculator.calculate_var(Decimal('10000'), Decimal('5'))
        assert result['valueAtRisk'] == Decimal('822.50')
        assert result['confidenceLevel'] == 95
        assert '$822.50' in result['interpretation']

    def test_var_99(self, calculator):
        assert calculator.calculate_var(Decimal('10000'), Decimal('5'), 99)['valueAtRisk'] == Decimal('1163.00')

    def test_unknown_level_uses_95_z(self, calculator):
        result = calculator.calculate_var(Decimal('10000'), Decimal('5'), 90)

        assert result['valueAtRisk'] == Decimal('822.50')
        assert result['confidenceLevel'] == 95
        assert 'There is a 95% probability' in result['interpretation']

    def test_risk_reward(self):
        assert RiskCalculator.calculate_risk_reward_ratio(Decimal('100'), Decimal('95'), Decimal('110')) == Decimal('2.00')
        assert RiskCalculator.calculate_risk_reward_ratio(Decimal('100'), Decimal('100'), Decimal('110')) == Decimal('0')
