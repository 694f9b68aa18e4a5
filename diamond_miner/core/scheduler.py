"""Delayed continuation queue driven by explicit ticks."""
import heapq
import itertools
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Hashable, List, Optional

logger = logging.getLogger(__name__)


@dataclass(order=True)
class ScheduledCall:
    """A callback waiting for its due time."""
    due: float
    seq: int
    callback: Callable[[], Any] = field(compare=False)
    group: Optional[Hashable] = field(default=None, compare=False)
    channel: Optional[Hashable] = field(default=None, compare=False)
    cancelled: bool = field(default=False, compare=False)


class Scheduler:
    """Virtual-clock timer queue.

    Calls run from ``tick`` in (due time, scheduling order). Calls that share
    a ``channel`` run in the order they were scheduled even if a later one
    asked for a shorter delay. ``group`` tags calls so they can be cancelled
    together, e.g. everything belonging to one board.
    """

    def __init__(self):
        self._now = 0.0
        self._heap: List[ScheduledCall] = []
        self._seq = itertools.count()
        self._channel_tail: Dict[Hashable, float] = {}

    @property
    def now(self) -> float:
        return self._now

    def schedule(
        self,
        delay: float,
        callback: Callable[[], Any],
        group: Optional[Hashable] = None,
        channel: Optional[Hashable] = None,
    ) -> ScheduledCall:
        """Run ``callback`` once ``delay`` seconds of ticks have elapsed."""
        due = self._now + max(0.0, delay)
        if channel is not None:
            due = max(due, self._channel_tail.get(channel, due))
            self._channel_tail[channel] = due

        call = ScheduledCall(
            due=due,
            seq=next(self._seq),
            callback=callback,
            group=group,
            channel=channel,
        )
        heapq.heappush(self._heap, call)
        return call

    def cancel(self, call: ScheduledCall) -> None:
        call.cancelled = True

    def cancel_group(self, group: Hashable) -> int:
        """Cancel every pending call tagged with ``group``."""
        cancelled = 0
        for call in self._heap:
            if call.group == group and not call.cancelled:
                call.cancelled = True
                cancelled += 1
        if cancelled:
            logger.debug("Cancelled %d pending calls for %s", cancelled, group)
        return cancelled

    def pending(self, group: Optional[Hashable] = None) -> int:
        """Number of live calls, optionally limited to one group."""
        return sum(
            1 for call in self._heap
            if not call.cancelled and (group is None or call.group == group)
        )

    def tick(self, elapsed: float) -> int:
        """
        Advance the clock and run every call that has come due.

        Calls scheduled while ticking run in the same tick if they are already
        due.

        Returns:
            Number of callbacks run.
        """
        self._now += max(0.0, elapsed)
        ran = 0
        while self._heap and self._heap[0].due <= self._now:
            call = heapq.heappop(self._heap)
            if call.cancelled:
                continue
            call.callback()
            ran += 1

        if not self._heap:
            self._channel_tail.clear()
        return ran

    def run_all(self, step: float = 0.05, limit: int = 10000) -> int:
        """Tick until nothing is pending (bounded by ``limit`` steps)."""
        ran = 0
        for _ in range(limit):
            if not self.pending():
                break
            ran += self.tick(step)
        return ran
