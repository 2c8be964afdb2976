"""Cooperative progress reporting and cancellation."""

from __future__ import annotations

from typing import Protocol


class ProgressSink(Protocol):
    """Progress receiver polled for cancellation between units of work."""

    def set_total_work(self, total: float) -> None: ...

    def worked(self, amount: float = 1) -> None: ...

    def done(self) -> None: ...

    def is_canceled(self) -> bool: ...


class Progress:
    """Plain progress counter with a cancel switch."""

    def __init__(self) -> None:
        self.total_work: float = 0
        self.work_done: float = 0
        self.finished = False
        self._canceled = False

    def set_total_work(self, total: float) -> None:
        self.total_work = total

    def worked(self, amount: float = 1) -> None:
        self.work_done += amount

    def done(self) -> None:
        self.finished = True
        if self.total_work:
            self.work_done = self.total_work

    def cancel(self) -> None:
        self._canceled = True

    def is_canceled(self) -> bool:
        return self._canceled

    @property
    def fraction(self) -> float:
        """Return completed share in ``[0, 1]``."""
        if self.finished:
            return 1.0
        if self.total_work <= 0:
            return 0.0
        return min(1.0, self.work_done / self.total_work)


class CompositeProgress:
    """Aggregates weighted sub-progress values into one parent sink.

    The parent sees a total of 1.0; each sub-progress contributes its own
    completed fraction scaled by its share of the summed weights. The parent
    is marked done once every sub-progress created so far is done.
    """

    def __init__(self, parent: ProgressSink) -> None:
        self._parent = parent
        self._children: list[SubProgress] = []
        self._children_done = 0
        self._reported = 0.0
        parent.set_total_work(1.0)

    def create_sub_progress(self, weight: float = 1) -> SubProgress:
        child = SubProgress(self, weight)
        self._children.append(child)
        return child

    def is_canceled(self) -> bool:
        return self._parent.is_canceled()

    def _child_done(self) -> None:
        self._children_done += 1
        if self._children_done != len(self._children):
            return
        self._parent.done()

    def _update(self) -> None:
        total_weight = 0.0
        completed = 0.0
        for child in self._children:
            if child.total_work:
                completed += child.weight * min(1.0, child.work_done / child.total_work)
            total_weight += child.weight
        if total_weight <= 0:
            return
        fraction = completed / total_weight
        delta = fraction - self._reported
        if delta > 0:
            self._reported = fraction
            self._parent.worked(delta)


class SubProgress:
    """One weighted slice of a ``CompositeProgress``."""

    def __init__(self, composite: CompositeProgress, weight: float) -> None:
        self._composite = composite
        self.weight = weight
        self.total_work: float = 0
        self.work_done: float = 0
        self.finished = False

    def set_total_work(self, total: float) -> None:
        self.total_work = total
        self._composite._update()

    def worked(self, amount: float = 1) -> None:
        self.work_done += amount
        self._composite._update()

    def done(self) -> None:
        if self.finished:
            return
        self.finished = True
        if not self.total_work:
            self.total_work = 1
        self.work_done = self.total_work
        self._composite._update()
        self._composite._child_done()

    def is_canceled(self) -> bool:
        return self._composite.is_canceled()
