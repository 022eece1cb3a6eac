from __future__ import annotations

from collections import deque
from collections.abc import Iterable, Iterator
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class PressedSetChange:
    """One actual membership change of the pressed set.

    `snapshot` is the pressed set right after this change; reactions must judge
    against it rather than against whatever the set looks like later.
    """

    key: str
    is_down: bool
    snapshot: frozenset[str]


class PressedSetTracker:
    """Set of keys currently held down, fed by normalized down/up events.

    Changes are queued (FIFO) instead of dispatched to callbacks; a single
    consumer drains them with `drain()`.
    """

    def __init__(self, initial: Iterable[str] = ()) -> None:
        self._down: set[str] = set(initial)
        self._changes: deque[PressedSetChange] = deque()

    @property
    def snapshot(self) -> frozenset[str]:
        return frozenset(self._down)

    def __len__(self) -> int:
        return len(self._down)

    def __contains__(self, key: object) -> bool:
        return key in self._down

    def apply(self, key: str, is_down: bool) -> bool:
        """Apply one event. Returns False for redundant events (nothing queued)."""

        if is_down:
            if key in self._down:
                return False
            self._down.add(key)
        else:
            if key not in self._down:
                return False
            self._down.discard(key)

        self._changes.append(PressedSetChange(key=key, is_down=is_down, snapshot=self.snapshot))
        return True

    def drain(self) -> Iterator[PressedSetChange]:
        while self._changes:
            yield self._changes.popleft()


class RolloverObserver:
    """Running maximum of simultaneously held keys (N-key rollover checker)."""

    def __init__(self, *, current: int = 0, peak: int = 0) -> None:
        self.current = current
        self.peak = max(peak, current)

    def observe(self, change: PressedSetChange) -> None:
        self.current = len(change.snapshot)
        self.peak = max(self.peak, self.current)

    def reset(self) -> None:
        self.peak = self.current
