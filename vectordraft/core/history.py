"""
VectorDraft History Manager

Snapshot-based undo/redo. The present state is an immutable tuple of
shapes; every committed mutation pushes the prior tuple onto a bounded
past stack and clears the future stack.
"""

from collections import deque
from typing import Callable, Deque, List, Optional, Sequence, Tuple
import logging

logger = logging.getLogger(__name__)


DEFAULT_CAPACITY = 100

State = Tuple


def states_identical(a: Sequence, b: Sequence) -> bool:
    """Reference identity, or same length with identical elements."""
    if a is b:
        return True
    if len(a) != len(b):
        return False
    return all(x is y for x, y in zip(a, b))


class HistoryManager:
    """
    Holds the present state with past and future snapshot stacks.

    Changes that leave the state reference- or element-wise identical
    are ignored entirely: no history entry and no notification. Callers
    that run mutations from passive synchronization code rely on this to
    avoid update loops.
    """

    def __init__(self, initial: Sequence = (), capacity: int = DEFAULT_CAPACITY):
        self._present: State = tuple(initial)
        self._past: Deque[State] = deque(maxlen=max(1, int(capacity)))
        self._future: List[State] = []
        self._callbacks: List[Callable[[State], None]] = []

    @property
    def present(self) -> State:
        return self._present

    @property
    def capacity(self) -> int:
        return self._past.maxlen

    @property
    def can_undo(self) -> bool:
        return bool(self._past)

    @property
    def can_redo(self) -> bool:
        return bool(self._future)

    @property
    def past_size(self) -> int:
        return len(self._past)

    @property
    def future_size(self) -> int:
        return len(self._future)

    def apply_change(self, updater: Callable[[State], Sequence],
                     previous: Optional[Sequence] = None,
                     record: bool = True) -> bool:
        """
        Replace the present with ``updater(present)``.

        Args:
            updater: Pure function from the current state to the next
            previous: Snapshot to store instead of the current state
                (an interaction baseline)
            record: False for previews, which move the present without
                touching history

        Returns:
            True if the state changed
        """
        prev = self._present
        nxt = updater(prev)
        if nxt is None or states_identical(prev, nxt):
            return False
        self._present = tuple(nxt)
        if record:
            self._push(tuple(previous) if previous is not None else prev)
        self._notify()
        return True

    def commit(self, baseline: Sequence) -> bool:
        """
        Record ``baseline`` as the undo point for changes already applied
        as previews. Does nothing when the present still equals it.
        """
        if states_identical(baseline, self._present):
            return False
        self._push(tuple(baseline))
        self._notify()
        return True

    def revert(self, baseline: Sequence) -> bool:
        """Restore ``baseline`` without recording history (cancel)."""
        return self.apply_change(lambda _: baseline, record=False)

    def undo(self) -> bool:
        if not self._past:
            return False
        self._future.append(self._present)
        self._present = self._past.pop()
        logger.debug("Undo: %d past, %d future", len(self._past), len(self._future))
        self._notify()
        return True

    def redo(self) -> bool:
        if not self._future:
            return False
        self._past.append(self._present)
        self._present = self._future.pop()
        logger.debug("Redo: %d past, %d future", len(self._past), len(self._future))
        self._notify()
        return True

    def reset(self, state: Sequence = ()) -> None:
        """Drop all history and start from ``state``."""
        self._present = tuple(state)
        self._past.clear()
        self._future.clear()
        self._notify()

    def add_change_callback(self, callback: Callable[[State], None]):
        """Register callback invoked with the new present after each change."""
        self._callbacks.append(callback)

    def remove_change_callback(self, callback: Callable[[State], None]):
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def _push(self, snapshot: State) -> None:
        if len(self._past) == self._past.maxlen:
            logger.debug("History full, dropping oldest snapshot")
        self._past.append(snapshot)
        self._future.clear()

    def _notify(self) -> None:
        for callback in list(self._callbacks):
            callback(self._present)
