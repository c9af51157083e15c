"""In-process abuse detection and source-address blocklisting.

Each client source address moves through ``unseen -> tracked -> blocked``.
A tracked address is blocked when it sends more than ``rate_threshold``
requests within ``rate_window`` seconds of first being seen, or touches more
than ``scan_threshold`` distinct paths within ``scan_window`` seconds. The
rate check runs first; either one is enough.

Records only grow while they live. They are dropped by :meth:`AbuseMonitor.sweep`
once idle for longer than ``retention``, which is also the only way a
tracked address starts over with a fresh window.

State lives in a single :class:`AbuseMonitor` owned by the application and
is process-local: several API instances each keep their own view.
"""

from __future__ import annotations

import enum
import logging
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field, replace
from threading import Lock
from typing import Final

from byteverse.core.settings import Settings

logger = logging.getLogger(__name__)

Clock = Callable[[], float]

DEFAULT_EXEMPTIONS: Final[frozenset[str]] = frozenset({"127.0.0.1", "::1"})


class ActivityState(str, enum.Enum):
    UNSEEN = "unseen"
    TRACKED = "tracked"
    BLOCKED = "blocked"


class BlockReason(str, enum.Enum):
    RATE = "rate"
    SCAN = "scan"
    MANUAL = "manual"


@dataclass
class SourceActivity:
    """Observed traffic from one source address."""

    address: str
    first_seen: float
    last_seen: float
    count: int = 1
    endpoints: set[str] = field(default_factory=set)
    state: ActivityState = ActivityState.TRACKED


@dataclass(frozen=True)
class BlockEntry:
    address: str
    reason: BlockReason
    blocked_at: float
    expires_at: float | None = None

    def expired(self, now: float) -> bool:
        return self.expires_at is not None and now >= self.expires_at


@dataclass(frozen=True)
class AbuseVerdict:
    """Outcome of observing one request."""

    allowed: bool
    state: ActivityState
    reason: BlockReason | None = None


@dataclass(frozen=True)
class SweepResult:
    evicted_records: int
    expired_blocks: int


class Blocklist:
    """Set of denied source addresses with optional expiry."""

    def __init__(self, ttl: float | None = 3600.0, clock: Clock = time.monotonic) -> None:
        self.ttl = ttl if ttl and ttl > 0 else None
        self._clock = clock
        self._entries: dict[str, BlockEntry] = {}
        self._lock = Lock()

    def contains(self, address: str, now: float | None = None) -> bool:
        """Return True if ``address`` is currently blocked.

        Expired entries are dropped on access.
        """
        now = self._clock() if now is None else now
        with self._lock:
            entry = self._entries.get(address)
            if entry is None:
                return False
            if entry.expired(now):
                del self._entries[address]
                return False
            return True

    def add(
        self,
        address: str,
        reason: BlockReason,
        *,
        now: float | None = None,
        ttl: float | None = None,
    ) -> BlockEntry:
        """Block ``address``; an explicit ``ttl`` overrides the default."""
        now = self._clock() if now is None else now
        effective_ttl = self.ttl if ttl is None else (ttl if ttl > 0 else None)
        entry = BlockEntry(
            address=address,
            reason=reason,
            blocked_at=now,
            expires_at=now + effective_ttl if effective_ttl is not None else None,
        )
        with self._lock:
            self._entries[address] = entry
        return entry

    def remove(self, address: str) -> bool:
        with self._lock:
            return self._entries.pop(address, None) is not None

    def purge_expired(self, now: float | None = None) -> int:
        now = self._clock() if now is None else now
        with self._lock:
            stale = [addr for addr, entry in self._entries.items() if entry.expired(now)]
            for addr in stale:
                del self._entries[addr]
        return len(stale)

    def entries(self, now: float | None = None) -> list[BlockEntry]:
        """Return live entries ordered by block time."""
        now = self._clock() if now is None else now
        with self._lock:
            live = [entry for entry in self._entries.values() if not entry.expired(now)]
        return sorted(live, key=lambda entry: entry.blocked_at)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class AbuseMonitor:
    """Track request activity per source address and block abusive sources."""

    def __init__(
        self,
        *,
        rate_threshold: int = 50,
        rate_window: float = 10.0,
        scan_threshold: int = 20,
        scan_window: float = 30.0,
        retention: float = 3600.0,
        exemptions: Iterable[str] = DEFAULT_EXEMPTIONS,
        blocklist: Blocklist | None = None,
        clock: Clock = time.monotonic,
    ) -> None:
        self.rate_threshold = rate_threshold
        self.rate_window = rate_window
        self.scan_threshold = scan_threshold
        self.scan_window = scan_window
        self.retention = retention
        self.exemptions: frozenset[str] = frozenset(exemptions)
        self._clock = clock
        self.blocklist = blocklist if blocklist is not None else Blocklist(clock=clock)
        self._records: dict[str, SourceActivity] = {}
        self._lock = Lock()

    @classmethod
    def from_settings(cls, config: Settings, clock: Clock = time.monotonic) -> AbuseMonitor:
        return cls(
            rate_threshold=config.abuse_rate_threshold,
            rate_window=config.abuse_rate_window_seconds,
            scan_threshold=config.abuse_scan_threshold,
            scan_window=config.abuse_scan_window_seconds,
            retention=config.abuse_retention_seconds,
            exemptions=config.loopback_exemptions,
            blocklist=Blocklist(ttl=config.blocklist_ttl, clock=clock),
            clock=clock,
        )

    def now(self) -> float:
        return self._clock()

    def is_exempt(self, address: str) -> bool:
        return address in self.exemptions

    def is_blocked(self, address: str) -> bool:
        """Blocklist gate: True if requests from ``address`` must be refused."""
        if self.is_exempt(address):
            return False
        return self.blocklist.contains(address)

    def observe(self, address: str, path: str) -> AbuseVerdict:
        """Record one request from ``address`` to ``path`` and judge it."""
        if self.is_exempt(address):
            return AbuseVerdict(allowed=True, state=ActivityState.UNSEEN)

        now = self._clock()
        with self._lock:
            record = self._records.get(address)
            if record is not None and record.state is ActivityState.BLOCKED:
                # The block was lifted (expiry or operator); start a fresh window.
                if not self.blocklist.contains(address, now):
                    record = None

            if record is None:
                self._records[address] = SourceActivity(
                    address=address,
                    first_seen=now,
                    last_seen=now,
                    endpoints={path},
                )
                return AbuseVerdict(allowed=True, state=ActivityState.TRACKED)

            record.count += 1
            record.last_seen = now
            record.endpoints.add(path)

            reason = self._evaluate(record, now)
            if reason is None:
                return AbuseVerdict(allowed=True, state=record.state)

            record.state = ActivityState.BLOCKED
            self.blocklist.add(address, reason, now=now)

        logger.warning(
            "Blocking %s: %s threshold exceeded (%d requests, %d endpoints in %.1fs)",
            address,
            reason.value,
            record.count,
            len(record.endpoints),
            now - record.first_seen,
        )
        return AbuseVerdict(allowed=False, state=ActivityState.BLOCKED, reason=reason)

    def _evaluate(self, record: SourceActivity, now: float) -> BlockReason | None:
        elapsed = now - record.first_seen
        if record.count > self.rate_threshold and elapsed < self.rate_window:
            return BlockReason.RATE
        if len(record.endpoints) > self.scan_threshold and elapsed < self.scan_window:
            return BlockReason.SCAN
        return None

    def state_of(self, address: str) -> ActivityState:
        if self.is_exempt(address):
            return ActivityState.UNSEEN
        if self.blocklist.contains(address):
            return ActivityState.BLOCKED
        with self._lock:
            record = self._records.get(address)
        if record is None:
            return ActivityState.UNSEEN
        return ActivityState.TRACKED

    def block(self, address: str, ttl: float | None = None) -> BlockEntry:
        """Manually block ``address`` (operator action)."""
        now = self._clock()
        with self._lock:
            record = self._records.get(address)
            if record is not None:
                record.state = ActivityState.BLOCKED
            entry = self.blocklist.add(address, BlockReason.MANUAL, now=now, ttl=ttl)
        logger.info("Address %s blocked manually", address)
        return entry

    def unblock(self, address: str) -> bool:
        """Remove ``address`` from the blocklist and forget its activity.

        An address that is only tracked keeps its record and window.
        """
        with self._lock:
            removed = self.blocklist.remove(address)
            if removed:
                self._records.pop(address, None)
        if removed:
            logger.info("Address %s unblocked", address)
        return removed

    def sweep(self, now: float | None = None) -> SweepResult:
        """Evict records idle for longer than ``retention`` and expired blocks."""
        now = self._clock() if now is None else now
        cutoff = now - self.retention
        with self._lock:
            stale = [addr for addr, rec in self._records.items() if rec.last_seen < cutoff]
            for addr in stale:
                del self._records[addr]
        expired = self.blocklist.purge_expired(now)
        logger.debug(
            "Abuse sweep evicted %d records and %d expired blocks", len(stale), expired
        )
        return SweepResult(evicted_records=len(stale), expired_blocks=expired)

    def snapshot(self) -> list[SourceActivity]:
        """Return copies of all live records, most recently seen first."""
        with self._lock:
            copies = [
                replace(record, endpoints=set(record.endpoints))
                for record in self._records.values()
            ]
        return sorted(copies, key=lambda rec: rec.last_seen, reverse=True)

    def reset(self) -> None:
        with self._lock:
            self._records.clear()
            self.blocklist.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
