import logging
from decimal import Decimal, ROUND_DOWN, ROUND_HALF_UP
from typing import Dict, Any, Mapping

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")
HUNDRED = Decimal("100")


class RiskCalculator:
    """Deterministic risk metrics fed to the risk manager prompt.

    All money arithmetic is Decimal; results are rounded half-up to cents.
    """

    # Exposure above these percentages of balance is HIGH / MODERATE, otherwise LOW
    HIGH_EXPOSURE_PCT: Decimal = Decimal("80")
    MODERATE_EXPOSURE_PCT: Decimal = Decimal("50")

    # Position counts below these are POOR / MODERATE diversification, otherwise GOOD
    POOR_DIVERSIFICATION_BELOW: int = 3
    MODERATE_DIVERSIFICATION_BELOW: int = 7

    # Target used for the reward leg of the risk/reward ratio
    DEFAULT_TARGET_MULTIPLIER: Decimal = Decimal("1.02")

    VAR_Z_SCORES: Dict[int, float] = {95: 1.645, 99: 2.326}
    DEFAULT_VAR_CONFIDENCE: int = 95

    def calculate_position_size(
        self,
        account_balance: Decimal,
        risk_percentage: Decimal,
        entry_price: Decimal,
        stop_loss: Decimal,
    ) -> Dict[str, Any]:
        """
        Size a position so a stop-out loses `risk_percentage` of the balance.

        Args:
            account_balance: Account equity
            risk_percentage: Percent of equity at risk (e.g. 2 for 2%)
            entry_price: Planned entry
            stop_loss: Planned stop

        Returns:
            Dict with positionSize (whole units), riskAmount, totalPositionValue, riskRewardRatio

        Raises:
            ValueError: If entry and stop are equal
        """
        logger.info(
            "Calculating position size",
            extra={"balance": str(account_balance), "risk_pct": str(risk_percentage),
                   "entry": str(entry_price), "stop": str(stop_loss)},
        )
        risk_amount = Decimal(account_balance) * (Decimal(risk_percentage) / HUNDRED)
        price_difference = abs(Decimal(entry_price) - Decimal(stop_loss))
        if price_difference == 0:
            raise ValueError("entry_price and stop_loss must differ")

        position_size = (risk_amount / price_difference).quantize(Decimal("1"), rounding=ROUND_DOWN)
        target = Decimal(entry_price) * self.DEFAULT_TARGET_MULTIPLIER

        return {
            "positionSize": position_size,
            "riskAmount": risk_amount.quantize(CENTS, rounding=ROUND_HALF_UP),
            "totalPositionValue": (position_size * Decimal(entry_price)).quantize(CENTS, rounding=ROUND_HALF_UP),
            "riskRewardRatio": self.calculate_risk_reward_ratio(entry_price, stop_loss, target),
        }

    def evaluate_portfolio_risk(self, positions: Mapping[str, Decimal], account_balance: Decimal) -> Dict[str, Any]:
        """Exposure, concentration and diversification for the open book."""
        logger.info("Evaluating portfolio risk", extra={"positions": len(positions)})
        balance = Decimal(account_balance)
        total_value = sum((Decimal(v) for v in positions.values()), Decimal("0"))

        if balance > 0:
            exposure_pct = (total_value / balance).quantize(Decimal("0.0001"), rounding=ROUND_HALF_UP) * HUNDRED
        else:
            exposure_pct = Decimal("0")

        count = len(positions)
        average = (total_value / count).quantize(CENTS, rounding=ROUND_HALF_UP) if count else Decimal("0")

        if exposure_pct > self.HIGH_EXPOSURE_PCT:
            risk_level = "HIGH"
        elif exposure_pct > self.MODERATE_EXPOSURE_PCT:
            risk_level = "MODERATE"
        else:
            risk_level = "LOW"

        if count < self.POOR_DIVERSIFICATION_BELOW:
            diversification = "POOR"
        elif count < self.MODERATE_DIVERSIFICATION_BELOW:
            diversification = "MODERATE"
        else:
            diversification = "GOOD"

        return {
            "totalExposure": total_value.quantize(CENTS, rounding=ROUND_HALF_UP),
            "exposurePercentage": exposure_pct.quantize(CENTS, rounding=ROUND_HALF_UP),
            "numberOfPositions": count,
            "averagePositionSize": average,
            "riskLevel": risk_level,
            "diversification": diversification,
        }

    def calculate_var(self, position_value: Decimal, volatility: Decimal, confidence_level: int = 95) -> Dict[str, Any]:
        """One-day parametric VaR. Unknown confidence levels fall back to 95% and are reported as 95."""
        if confidence_level not in self.VAR_Z_SCORES:
            logger.debug("Unsupported VaR confidence %s, using %s", confidence_level, self.DEFAULT_VAR_CONFIDENCE)
            confidence_level = self.DEFAULT_VAR_CONFIDENCE
        z_score = self.VAR_Z_SCORES[confidence_level]
        var = (Decimal(position_value) * (Decimal(volatility) / HUNDRED) * Decimal(str(z_score))).quantize(
            CENTS, rounding=ROUND_HALF_UP
        )
        return {
            "valueAtRisk": var,
            "confidenceLevel": confidence_level,
            "timeHorizon": "1 day",
            "interpretation": (
                f"There is a {confidence_level}% probability that the position "
                f"will not lose more than ${var:.2f} in one day"
            ),
        }

    @staticmethod
    def calculate_risk_reward_ratio(entry: Decimal, stop_loss: Decimal, target: Decimal) -> Decimal:
        risk = abs(Decimal(entry) - Decimal(stop_loss))
        reward = abs(Decimal(target) - Decimal(entry))
        if risk == 0:
            return Decimal("0")
        return (reward / risk).quantize(CENTS, rounding=ROUND_HALF_UP)
