# src/dashboard/request_state.py

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, Optional, TypeVar

T = TypeVar("T")


class RequestKind(str, Enum):
    PREDICTION = "prediction"
    MARKET_MOVERS = "market_movers"
    NEWS = "news"


class RequestStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    FAILED = "failed"


class InvalidStateTransition(RuntimeError):
    """Raised when a request slot is resolved before it was ever started."""


@dataclass
class RequestState(Generic[T]):
    """
    State machine for one kind of request: Idle -> Loading -> {Success, Failed}.

    ``start`` is allowed from any state. ``succeed``/``fail`` are allowed from
    Loading and from a terminal state, because responses are not sequenced and
    a late response simply overwrites the earlier outcome. A failure keeps the
    last successful payload so it can stay on screen under the error.
    """

    kind: RequestKind
    status: RequestStatus = RequestStatus.IDLE
    data: Optional[T] = None
    error: Optional[str] = None
    attempts: int = 0

    @property
    def has_data(self) -> bool:
        return self.data is not None

    def start(self) -> None:
        self.status = RequestStatus.LOADING
        self.error = None
        self.attempts += 1

    def succeed(self, data: T) -> None:
        self._check_started("succeed")
        self.status = RequestStatus.SUCCESS
        self.data = data
        self.error = None

    def fail(self, message: str) -> None:
        self._check_started("fail")
        self.status = RequestStatus.FAILED
        self.error = message

    def reset(self) -> None:
        self.status = RequestStatus.IDLE
        self.data = None
        self.error = None
        self.attempts = 0

    def _check_started(self, action: str) -> None:
        if self.status is RequestStatus.IDLE:
            raise InvalidStateTransition(f"Cannot {action} {self.kind.value} request: it was never started")


@dataclass
class RequestStateStore:
    """One independent ``RequestState`` per request kind."""

    slots: Dict[RequestKind, RequestState[Any]] = field(
        default_factory=lambda: {kind: RequestState(kind=kind) for kind in RequestKind}
    )

    def __getitem__(self, kind: RequestKind) -> RequestState[Any]:
        return self.slots[RequestKind(kind)]

    def start(self, kind: RequestKind) -> None:
        self[kind].start()

    def succeed(self, kind: RequestKind, data: Any) -> None:
        self[kind].succeed(data)

    def fail(self, kind: RequestKind, message: str) -> None:
        self[kind].fail(message)

    def errors(self) -> Dict[RequestKind, str]:
        """Current error message of every failed slot."""
        return {
            kind: state.error
            for kind, state in self.slots.items()
            if state.status is RequestStatus.FAILED and state.error
        }

    def reset(self) -> None:
        for state in self.slots.values():
            state.reset()
