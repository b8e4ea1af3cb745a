#!/usr/bin/env python3
import os, json, sys, logging
sys.path.insert(0, os.getcwd())
from decimal import Decimal
from pathlib import Path

from trading_agents.agents.agent_factory import build_consensus_panel
from trading_agents.core.exceptions import AggregationFailure
from trading_agents.core.types import AnalysisContext
from trading_agents.orchestration.consensus_aggregator import ConsensusAggregator

logging.basicConfig(level=logging.INFO)

SUBJECT = sys.argv[1] if len(sys.argv) > 1 else 'ETH'
TIMEFRAME = sys.argv[2] if len(sys.argv) > 2 else '1M'
OUTPUT_DIR = os.path.join(os.getcwd(), 'scripts', 'output')
Path(OUTPUT_DIR).mkdir(parents=True, exist_ok=True)

context = AnalysisContext(conversation_id='consensus-demo', account_balance=Decimal('10000'), risk_tolerance=Decimal('2'))

print(f'Running technical / fundamental / sentiment panel for {SUBJECT} ({TIMEFRAME})...')
try:
    result = ConsensusAggregator().aggregate(SUBJECT, build_consensus_panel(), context, timeframe=TIMEFRAME)
except AggregationFailure as e:
    print('Every panel agent failed:', e.reasons())
    result = e.result

summary = result.to_dict()
print('Decision:', summary['final_decision'], 'avg confidence:', round(summary['average_confidence'], 3))
print('Weighted votes:', summary['weighted_votes'])
if summary['failed_agents']:
    print('Failed agents:', summary['failed_agents'])
out_path = os.path.join(OUTPUT_DIR, f'{SUBJECT}_consensus.json')
with open(out_path, 'w') as fh:
    json.dump(summary, fh, indent=2)
print('Consensus saved to', out_path)
