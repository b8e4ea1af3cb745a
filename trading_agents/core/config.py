import os
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, Callable, Tuple

from dotenv import load_dotenv

load_dotenv()


def _as_bool(value: str) -> bool:
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


class EnvConfig:
    """Small helper for reading and casting environment variables.

    Usage: EnvConfig.get('ANTHROPIC_API_KEY', cast=str, aliases=['CLAUDE_API_KEY'])
    """

    @staticmethod
    def get(name: str, default: Any = None, cast: Optional[Callable] = None, aliases: Optional[list] = None):
        aliases = aliases or []
        for key in (name, *aliases):
            val = os.getenv(key)
            if val is not None:
                if cast is not None:
                    try:
                        return cast(val)
                    except Exception as exc:
                        raise ValueError(f"Invalid value for {key}: {exc}")
                return val
        return default


# Keyword sets used to read a decision out of free-text agent output.
# BUY is always tested before SELL.
DEFAULT_BUY_KEYWORDS: Tuple[str, ...] = (
    'buy',
    'bullish',
    'promising',
    'strong',
    'innovative',
    'positive',
    'optimis',
    'hype',
    'upward',
    'uptrend',
)

DEFAULT_SELL_KEYWORDS: Tuple[str, ...] = (
    'sell',
    'bearish',
    'risky',
    'weak',
    'problem',
    'negative',
    'pessimis',
    'fud',
    'downward',
    'downtrend',
)

# (confidence, phrases) scanned top to bottom; first tier with a hit wins
DEFAULT_CONFIDENCE_TIERS: Tuple[Tuple[float, Tuple[str, ...]], ...] = (
    (0.9, ('very high confidence', 'high confidence', 'strong confidence', 'strongly recommend', 'very confident')),
    (0.7, ('moderate confidence', 'recommend', 'fairly confident')),
    (0.5, ('low confidence', 'cautious', 'not confident', 'not sure')),
    (0.3, ('uncertainty', 'hard to say')),
)

DEFAULT_CONFIDENCE: float = 0.6


@dataclass
class BaseConfig:
    """Mixin-like helper for dataclasses that load from envs and validate."""

    @classmethod
    def _env(cls, name: str, default: Any = None, cast: Optional[Callable] = None, aliases: Optional[list] = None):
        return EnvConfig.get(name, default=default, cast=cast, aliases=aliases)

    def validate(self, required: bool = True):
        """Default no-op; override in subclasses with required flag."""
        return None


@dataclass(frozen=True)
class ExtractionConfig:
    """Immutable keyword and confidence-tier tables for RecommendationExtractor."""
    buy_keywords: Tuple[str, ...] = DEFAULT_BUY_KEYWORDS
    sell_keywords: Tuple[str, ...] = DEFAULT_SELL_KEYWORDS
    confidence_tiers: Tuple[Tuple[float, Tuple[str, ...]], ...] = DEFAULT_CONFIDENCE_TIERS
    default_confidence: float = DEFAULT_CONFIDENCE

    def validate(self, required: bool = True) -> None:
        if not self.buy_keywords or not self.sell_keywords:
            raise ValueError('buy_keywords and sell_keywords must not be empty')
        for level, phrases in self.confidence_tiers:
            if not 0.0 <= level <= 1.0:
                raise ValueError(f'confidence tier {level} outside [0, 1]')
            if not phrases:
                raise ValueError(f'confidence tier {level} has no phrases')
        if not 0.0 <= self.default_confidence <= 1.0:
            raise ValueError('default_confidence must be within [0, 1]')


@dataclass(frozen=True)
class ConsensusConfig:
    """Immutable voting thresholds shared by every ConsensusAggregator."""
    low_conviction_threshold: float = 1.5
    max_workers: int = 8
    default_timeframe: str = '1M'
    raise_on_total_failure: bool = True
    tie_decision: str = 'HOLD'

    def __post_init__(self):
        # Respect explicit constructor values: only consult env vars when using the dataclass default
        env_fields = (
            ('low_conviction_threshold', 'CONSENSUS_LOW_CONVICTION_THRESHOLD', float),
            ('max_workers', 'CONSENSUS_MAX_WORKERS', int),
            ('default_timeframe', 'CONSENSUS_DEFAULT_TIMEFRAME', str),
            ('raise_on_total_failure', 'CONSENSUS_RAISE_ON_TOTAL_FAILURE', _as_bool),
        )
        for name, env_name, cast in env_fields:
            default = getattr(ConsensusConfig, name)
            if getattr(self, name) == default:
                # frozen: set through object.__setattr__
                object.__setattr__(self, name, EnvConfig.get(env_name, default=default, cast=cast))

    def validate(self, required: bool = True) -> None:
        if self.low_conviction_threshold < 0:
            raise ValueError('low_conviction_threshold must be >= 0')
        if self.max_workers < 1:
            raise ValueError('max_workers must be >= 1')
        if not self.default_timeframe:
            raise ValueError('default_timeframe must not be empty')
        if self.tie_decision not in ('BUY', 'SELL', 'HOLD'):
            raise ValueError(f'tie_decision must be BUY, SELL or HOLD, got {self.tie_decision!r}')


@dataclass
class ClaudeConfig(BaseConfig):
    api_key: Optional[str] = None
    model: str = "claude-3-haiku-20240307"
    max_tokens: int = 1500
    temperature: float = 0.2

    def __post_init__(self):
        self.api_key = self.api_key or self._env('ANTHROPIC_API_KEY', aliases=['CLAUDE_API_KEY'])
        self.model = self._env('CLAUDE_MODEL', default=self.model)
        tokens = self._env('CLAUDE_MAX_TOKENS', default=None, cast=int)
        if tokens is not None:
            self.max_tokens = tokens
        temp = self._env('CLAUDE_TEMPERATURE', default=None, cast=float)
        if temp is not None:
            self.temperature = temp

    def validate(self, required: bool = True) -> None:
        if required and not self.api_key:
            raise ValueError('ANTHROPIC_API_KEY not set. Set via environment or ClaudeConfig.api_key')
        if self.max_tokens < 100:
            raise ValueError('max_tokens must be >= 100')
        if not 0 <= self.temperature <= 2:
            raise ValueError('temperature must be between 0 and 2')


@dataclass
class MarketDataConfig(BaseConfig):
    period: str = '1y'
    trend_period: str = '1D'

    def __post_init__(self):
        self.period = self._env('MARKET_DATA_PERIOD', default=self.period)
        self.trend_period = self._env('MARKET_TREND_PERIOD', default=self.trend_period)

    def validate(self, required: bool = True) -> None:
        valid_periods = ['1mo', '3mo', '6mo', '1y', '2y', '5y', '10y', 'max']
        if self.period not in valid_periods:
            raise ValueError(f'period must be one of {valid_periods}')
        if self.trend_period.upper() not in ('1D', '1W', '1M'):
            raise ValueError('trend_period must be one of 1D, 1W, 1M')


@dataclass
class NotificationConfig(BaseConfig):
    topic: str = '/topic/agent-updates'
    webhook_url: Optional[str] = None
    timeout_seconds: int = 5
    headers: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        self.topic = self._env('AGENT_UPDATES_TOPIC', default=self.topic)
        self.webhook_url = self.webhook_url or self._env('AGENT_UPDATES_WEBHOOK_URL')
        timeout = self._env('AGENT_UPDATES_TIMEOUT_SECONDS', default=None, cast=int)
        if timeout is not None:
            self.timeout_seconds = timeout

    def validate(self, required: bool = True) -> None:
        if required and not self.webhook_url:
            raise ValueError('AGENT_UPDATES_WEBHOOK_URL not set in environment')
        if self.timeout_seconds < 1:
            raise ValueError('timeout_seconds must be >= 1')


class AppConfig:
    """Central application configuration container.

    Access sub-configs as attributes (e.g., `AppConfig.consensus`).
    Use `AppConfig.from_env()` for a validated instance reflecting the
    current environment.
    """

    claude: ClaudeConfig = ClaudeConfig()
    consensus: ConsensusConfig = ConsensusConfig()
    extraction: ExtractionConfig = ExtractionConfig()
    market_data: MarketDataConfig = MarketDataConfig()
    notifications: NotificationConfig = NotificationConfig()

    @staticmethod
    def validate_all(strict: bool = False) -> None:
        AppConfig.claude.validate(required=strict)
        AppConfig.consensus.validate()
        AppConfig.extraction.validate()
        AppConfig.market_data.validate()
        AppConfig.notifications.validate(required=strict)

    @staticmethod
    def check_availability() -> Dict[str, Dict[str, Any]]:
        """Return availability map for each config.

        For each named sub-config return a dict with keys:
        - available: bool
        - reason: Optional[str] explaining failure when available is False
        """
        results: Dict[str, Dict[str, Any]] = {}
        # Construct fresh instances so availability reflects current environment
        configs = {
            'claude': ClaudeConfig(),
            'consensus': ConsensusConfig(),
            'extraction': ExtractionConfig(),
            'market_data': MarketDataConfig(),
            'notifications': NotificationConfig(),
        }
        for name, cfg in configs.items():
            try:
                cfg.validate(required=True)
                results[name] = {'available': True, 'reason': None}
            except ValueError as e:
                results[name] = {'available': False, 'reason': str(e)}
        return results

    @staticmethod
    def from_env(strict: bool = False) -> 'AppConfig':
        config = AppConfig()
        config.validate_all(strict=strict)
        return config
