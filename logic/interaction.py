# interaction.py
"""
Helpers shared by the check-in and chat surfaces.

- InFlightGuard: at most one submission in flight per surface.
- drive(): run an interaction generator with an optional progress callback.
"""

import threading
from contextlib import contextmanager
from typing import Callable, Generator, Iterator, Optional


class SubmissionInProgress(RuntimeError):
    """A submission was attempted while another one is still running."""


class InFlightGuard:
    def __init__(self, name: str):
        self.name = name
        self._lock = threading.Lock()

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    @contextmanager
    def acquire(self) -> Iterator[None]:
        if not self._lock.acquire(blocking=False):
            raise SubmissionInProgress(f"A {self.name} submission is already in progress")
        try:
            yield
        finally:
            self._lock.release()

    def __deepcopy__(self, memo):
        # gradio copies per-session state; every copy starts idle
        return type(self)(self.name)


def drive(
    interaction: Generator[str, None, bool],
    on_update: Optional[Callable[[str], None]] = None,
) -> bool:
    """Exhaust an interaction generator, forwarding each partial text."""
    while True:
        try:
            partial = next(interaction)
        except StopIteration as stop:
            return bool(stop.value)
        if on_update is not None:
            on_update(partial)
