import time
from decimal import Decimal
from datetime import datetime
from dataclasses import dataclass, field, fields, replace, asdict
from typing import Optional, List, Dict, Any

# --- Decision tags ---
DECISION_BUY = "BUY"
DECISION_SELL = "SELL"
DECISION_HOLD = "HOLD"
DECISION_APPROVE = "APPROVE"
DECISION_REJECT = "REJECT"
DECISION_REVIEW_REQUIRED = "REVIEW_REQUIRED"
DECISION_EXECUTED = "EXECUTED"
DECISION_CANCELLED = "CANCELLED"
DECISION_ERROR = "ERROR"

TRADE_DECISIONS = (DECISION_BUY, DECISION_SELL, DECISION_HOLD)

# --- Agent tags ---
AGENT_ANALYST = "ANALYST"
AGENT_RISK_MANAGER = "RISK_MANAGER"
AGENT_EXECUTOR = "EXECUTOR"
AGENT_ORCHESTRATOR = "ORCHESTRATOR"
AGENT_TECHNICAL = "TECHNICAL"
AGENT_FUNDAMENTAL = "FUNDAMENTAL"
AGENT_SENTIMENT = "SENTIMENT"

# --- Trading strategies ---
STRATEGY_CONSERVATIVE = "CONSERVATIVE"
STRATEGY_MODERATE = "MODERATE"
STRATEGY_AGGRESSIVE = "AGGRESSIVE"

TRADING_STRATEGIES = (STRATEGY_CONSERVATIVE, STRATEGY_MODERATE, STRATEGY_AGGRESSIVE)

# --- Pipeline stages ---
STAGE_ANALYZING = "ANALYZING"
STAGE_RISK_EVALUATING = "RISK_EVALUATING"
STAGE_EXECUTING = "EXECUTING"
STAGE_EXECUTED = "EXECUTED"
STAGE_BLOCKED = "BLOCKED"
STAGE_ERRORED = "ERRORED"

TERMINAL_STAGES = (STAGE_EXECUTED, STAGE_BLOCKED, STAGE_ERRORED)

# --- Progress notification statuses ---
STATUS_WORKING = "WORKING"
STATUS_COMPLETED = "COMPLETED"
STATUS_APPROVED = "APPROVED"
STATUS_REJECTED = "REJECTED"
STATUS_EXECUTED = "EXECUTED"
STATUS_BLOCKED = "BLOCKED"
STATUS_ERROR = "ERROR"


def _to_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() first so floats like 0.1 don't carry binary noise
    return Decimal(str(value))


# --- Shared context ---
@dataclass(frozen=True)
class AnalysisContext:
    """Read-only trading context shared by every agent in one run.

    Defaults are supplied by the caller; this type never invents account data.
    Use `with_overrides` to apply caller-supplied partial overrides.
    """
    conversation_id: str
    account_balance: Decimal
    risk_tolerance: Decimal  # percent of balance risked per trade
    current_positions: Dict[str, Decimal] = field(default_factory=dict)  # symbol -> position value
    trading_strategy: str = STRATEGY_MODERATE
    market_conditions: Dict[str, Any] = field(default_factory=dict)
    user_id: Optional[str] = None
    watchlist: List[str] = field(default_factory=list)

    def __post_init__(self):
        if self.trading_strategy not in TRADING_STRATEGIES:
            raise ValueError(
                f"trading_strategy must be one of {TRADING_STRATEGIES}, got {self.trading_strategy!r}"
            )
        # frozen: normalise through object.__setattr__
        object.__setattr__(self, 'account_balance', _to_decimal(self.account_balance))
        object.__setattr__(self, 'risk_tolerance', _to_decimal(self.risk_tolerance))
        object.__setattr__(
            self,
            'current_positions',
            {symbol.upper(): _to_decimal(size) for symbol, size in (self.current_positions or {}).items()},
        )

    def with_overrides(self, **overrides) -> 'AnalysisContext':
        """Return a copy with the given fields replaced."""
        known = {f.name for f in fields(self)}
        unknown = set(overrides) - known
        if unknown:
            raise ValueError(f"Unknown AnalysisContext fields: {sorted(unknown)}")
        return replace(self, **overrides)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AnalysisContext':
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    def to_dict(self) -> Dict[str, Any]:
        return {
            'conversation_id': self.conversation_id,
            'account_balance': str(self.account_balance),
            'risk_tolerance': str(self.risk_tolerance),
            'current_positions': {k: str(v) for k, v in self.current_positions.items()},
            'trading_strategy': self.trading_strategy,
            'market_conditions': dict(self.market_conditions),
            'user_id': self.user_id,
            'watchlist': list(self.watchlist),
        }


# --- Agent output ---
@dataclass(frozen=True)
class AgentResult:
    """One agent invocation's output. Created once, never mutated."""
    agent_type: str  # ANALYST | RISK_MANAGER | EXECUTOR | ORCHESTRATOR | <domain agent>
    message: str
    analysis: Dict[str, Any] = field(default_factory=dict)
    recommendations: Dict[str, Any] = field(default_factory=dict)
    decision: Optional[str] = None  # BUY | SELL | HOLD | APPROVE | REJECT | ... | ERROR
    timestamp: datetime = field(default_factory=datetime.now)
    metadata: Dict[str, Any] = field(default_factory=dict)
    confidence: Optional[float] = None  # 0-1 when the agent reports one

    @property
    def is_error(self) -> bool:
        return self.decision == DECISION_ERROR

    @classmethod
    def error(cls, agent_type: str, message: str, **metadata) -> 'AgentResult':
        return cls(agent_type=agent_type, message=message, decision=DECISION_ERROR, metadata=metadata)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['timestamp'] = self.timestamp.isoformat()
        return data


@dataclass(frozen=True)
class ExtractedSignal:
    """Decision and confidence read out of free text."""
    decision: str  # BUY | SELL | HOLD
    confidence: float  # 0-1


@dataclass(frozen=True)
class AgentVote:
    """One participating agent in a consensus: its result and the signal it voted with."""
    agent_type: str
    result: AgentResult
    signal: ExtractedSignal


@dataclass
class ConsensusResult:
    """Merged decision across a panel of agents.

    `average_confidence` is always the plain mean over participating agents,
    independent of which decision won.
    """
    subject: str
    votes: List[AgentVote]
    final_decision: str
    average_confidence: float
    weighted_votes: Dict[str, float] = field(default_factory=dict)
    total_confidence: float = 0.0
    timeframe: Optional[str] = None
    partial_failure: Optional[Any] = None  # AggregationPartialFailure when some agents failed
    created_at: str = None

    def __post_init__(self):
        if not self.created_at:
            self.created_at = datetime.now().isoformat()

    @property
    def participants(self) -> int:
        return len(self.votes)

    @property
    def failed_agents(self) -> List[str]:
        if self.partial_failure is None:
            return []
        return list(self.partial_failure.failures)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            'subject': self.subject,
            'timeframe': self.timeframe,
            'final_decision': self.final_decision,
            'average_confidence': self.average_confidence,
            'total_confidence': self.total_confidence,
            'weighted_votes': dict(self.weighted_votes),
            'agents': [
                {
                    'agent_type': v.agent_type,
                    'decision': v.signal.decision,
                    'confidence': v.signal.confidence,
                    'message': v.result.message,
                }
                for v in self.votes
            ],
            'failed_agents': self.failed_agents,
            'created_at': self.created_at,
        }


@dataclass
class PipelineRun:
    """Ordered record of a sequential pipeline run.

    `results` is in execution order. An ERROR entry, if present, is last and
    the run is terminal.
    """
    subject: str
    results: List[AgentResult] = field(default_factory=list)
    stage: str = STAGE_ANALYZING
    terminal: bool = False

    def record(self, result: AgentResult) -> None:
        if self.terminal:
            raise RuntimeError(f"Pipeline run for {self.subject} is already terminal ({self.stage})")
        self.results.append(result)

    def advance(self, stage: str) -> None:
        self.stage = stage
        self.terminal = stage in TERMINAL_STAGES

    def fail(self, result: AgentResult) -> None:
        self.results.append(result)
        self.advance(STAGE_ERRORED)

    @property
    def last_result(self) -> Optional[AgentResult]:
        return self.results[-1] if self.results else None

    @property
    def executed(self) -> bool:
        return self.stage == STAGE_EXECUTED

    @property
    def blocked(self) -> bool:
        return self.stage == STAGE_BLOCKED

    @property
    def errored(self) -> bool:
        return self.stage == STAGE_ERRORED


@dataclass(frozen=True)
class AgentUpdate:
    """Progress notification published after each pipeline transition."""
    agent_type: str
    message: str
    status: str
    sent_at: int = field(default_factory=lambda: int(time.time() * 1000))  # epoch millis
    conversation_id: Optional[str] = None
    topic: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'agentType': self.agent_type,
            'message': self.message,
            'status': self.status,
            'timestamp': self.sent_at,
            'conversationId': self.conversation_id,
        }
