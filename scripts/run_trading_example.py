"""
Run the analyst -> risk manager -> executor pipeline for one symbol, then a
portfolio review, and save both to a JSON file.

Calls the live Anthropic API and yfinance. Set ANTHROPIC_API_KEY first.
Progress updates are logged; set AGENT_UPDATES_WEBHOOK_URL to also POST them.

Usage:
    python scripts/run_trading_example.py [SYMBOL]
"""
import os
import sys
import json
import logging
from decimal import Decimal
from datetime import datetime
from dataclasses import is_dataclass, asdict

from trading_agents.agents.agent_factory import build_trading_pipeline, build_portfolio_review_coordinator
from trading_agents.core.config import AppConfig
from trading_agents.core.exceptions import AggregationFailure
from trading_agents.core.types import AnalysisContext
from trading_agents.services.notification_sink import WebhookNotificationSink

OUT_DIR = ""
ERR_PATH = os.path.join(OUT_DIR, "trading_run_error.log")

CONTEXT = AnalysisContext(
    conversation_id="example-run",
    account_balance=Decimal("25000"),
    risk_tolerance=Decimal("1.5"),
    current_positions={"BTC-USD": Decimal("6000"), "ETH-USD": Decimal("2500")},
    trading_strategy="MODERATE",
)


def dataclass_to_dict(obj):
    """Recursively convert dataclasses to dicts for JSON serialization."""
    if is_dataclass(obj):
        return {k: dataclass_to_dict(v) for k, v in asdict(obj).items()}
    if isinstance(obj, list):
        return [dataclass_to_dict(v) for v in obj]
    if isinstance(obj, dict):
        return {k: dataclass_to_dict(v) for k, v in obj.items()}
    if isinstance(obj, datetime):
        return obj.isoformat()
    if isinstance(obj, Decimal):
        return str(obj)
    return obj


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    symbol = sys.argv[1] if len(sys.argv) > 1 else "BTC-USD"
    out_path = os.path.join(OUT_DIR, f"{symbol.lower()}_trading_run.json")

    AppConfig.validate_all(strict=False)
    sink = WebhookNotificationSink() if AppConfig.notifications.webhook_url else None

    print(f"Starting trading pipeline for {symbol}; this calls the LLM up to three times.")
    try:
        run = build_trading_pipeline(notification_sink=sink).run(symbol, CONTEXT)
        try:
            review = build_portfolio_review_coordinator().review(CONTEXT)
        except AggregationFailure as e:
            review = e.result

        output = {
            "subject": run.subject,
            "stage": run.stage,
            "results": dataclass_to_dict(run.results),
            "portfolio_review": dataclass_to_dict(review),
        }
        with open(out_path, "w") as f:
            json.dump(output, f, indent=2)

        print(f"Pipeline finished in stage {run.stage}. Saved run output to {out_path}")
    except Exception as e:
        print("Run failed:", e)
        with open(ERR_PATH, "w") as ef:
            ef.write(str(e))
        print(f"Wrote error to {ERR_PATH}")
        sys.exit(1)
    finally:
        if sink is not None:
            sink.close()


if __name__ == "__main__":
    main()
