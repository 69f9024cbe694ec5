"""Process-wide shared state for ghrest clients.

Every client built in one process shares a single ``ClientContext`` unless
one is injected. It owns the outbound query counter, the cached rate-limit
snapshot (and the lock that guards its refresh), and the clock and sleep
functions, so tests can substitute deterministic versions.

"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from ghrest.models import RateLimitSnapshot


class ClientContext:
    """Shared counters, caches, clock, and sleep for the request core.

    Attributes:
        clock: Returns the current time in seconds since the epoch.
        sleep: Blocks for the given number of seconds.
        rate_limit_lock: Guards the rate-limit check-then-refresh.

    Example:
        >>> ctx = ClientContext(clock=lambda: 1000.0, sleep=lambda s: None)
        >>> client = GitHubClient(context=ctx)

    """

    _default: ClassVar[ClientContext | None] = None
    _default_lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(
        self,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.clock = clock
        self.sleep = sleep
        self.rate_limit_lock = threading.RLock()
        self._counter_lock = threading.Lock()
        self._query_count = 0
        self._snapshot: RateLimitSnapshot | None = None

    @classmethod
    def default(cls) -> ClientContext:
        """Return the process-wide shared context, creating it on first use."""
        with cls._default_lock:
            if cls._default is None:
                cls._default = cls()
            return cls._default

    # =========================================================================
    # Query Counter
    # =========================================================================

    def increment_query_count(self) -> int:
        """Record one outbound request and return the new total."""
        with self._counter_lock:
            self._query_count += 1
            return self._query_count

    @property
    def query_count(self) -> int:
        """Total outbound requests made through this context."""
        with self._counter_lock:
            return self._query_count

    def clear_query_count(self) -> None:
        """Reset the query counter to zero."""
        with self._counter_lock:
            self._query_count = 0

    # =========================================================================
    # Rate Limit Snapshot
    # =========================================================================

    @property
    def rate_limit_snapshot(self) -> RateLimitSnapshot | None:
        """The cached rate-limit snapshot, if one has been fetched."""
        with self.rate_limit_lock:
            return self._snapshot

    def store_rate_limit_snapshot(self, snapshot: RateLimitSnapshot) -> None:
        """Replace the cached rate-limit snapshot."""
        with self.rate_limit_lock:
            self._snapshot = snapshot

    def clear_rate_limit_snapshot(self) -> None:
        """Drop the cached rate-limit snapshot so the next read refetches."""
        with self.rate_limit_lock:
            self._snapshot = None

    def __repr__(self) -> str:
        return f"ClientContext(query_count={self.query_count})"
