from typing import Optional, Dict, Any


class AgentInvocationError(Exception):
    """An agent capability could not produce a usable result.

    Raised when the underlying provider is unreachable, rate-limited, or
    returns malformed output. The core never retries.
    """

    def __init__(self, message: str, agent_type: Optional[str] = None, subject: Optional[str] = None):
        super().__init__(message)
        self.agent_type = agent_type
        self.subject = subject

    def __str__(self) -> str:
        base = super().__str__()
        if self.agent_type:
            return f"[{self.agent_type}] {base}"
        return base


class AggregationPartialFailure(Exception):
    """Some of the concurrently dispatched agent tasks failed.

    Attached to results as data (not raised) while at least one task
    succeeded.
    """

    def __init__(self, failures: Dict[str, BaseException], succeeded: int, total: int):
        self.failures = dict(failures)
        self.succeeded = succeeded
        self.total = total
        names = ", ".join(self.failures) or "none"
        super().__init__(f"{len(self.failures)} of {total} agent tasks failed: {names}")

    @property
    def failed(self) -> int:
        return len(self.failures)

    def reasons(self) -> Dict[str, str]:
        return {name: str(exc) for name, exc in self.failures.items()}


class AggregationFailure(AggregationPartialFailure):
    """Every dispatched agent task failed. `result` carries the degraded output."""

    def __init__(self, failures: Dict[str, BaseException], total: int, result: Any = None):
        super().__init__(failures, succeeded=0, total=total)
        self.result = result
