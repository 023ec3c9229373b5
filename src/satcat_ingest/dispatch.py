from __future__ import annotations

import logging
import queue
import threading
import time
from collections import Counter
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Callable, Iterable

from tqdm import tqdm

from .records import DONE, Message

LOGGER = logging.getLogger(__name__)


class Dispatcher:
    """Feeds identifiers to a bounded worker pool.

    At most ``workers`` identifiers are in flight. ``pacing_interval_s`` is
    the minimum delay between two dispatches. Completion is signalled on the
    results queue only after every dispatched worker has returned.
    """

    def __init__(
        self,
        work: Callable[[int], object],
        *,
        results: queue.Queue[Message],
        workers: int = 8,
        pacing_interval_s: float = 0.5,
        progress: bool = False,
    ) -> None:
        if workers < 1:
            raise ValueError("workers must be >= 1")
        if pacing_interval_s < 0:
            raise ValueError("pacing_interval_s must be >= 0")
        self._work = work
        self._results = results
        self._workers = workers
        self._pacing_interval_s = pacing_interval_s
        self._progress = progress
        self._stop = threading.Event()
        self._last_dispatch_at: float | None = None
        self.stats: Counter[str] = Counter()

    def cancel(self) -> None:
        self._stop.set()

    @property
    def cancelled(self) -> bool:
        return self._stop.is_set()

    def _pacing_sleep(self) -> None:
        last = self._last_dispatch_at
        if last is None:
            return
        elapsed = time.monotonic() - last
        if elapsed < self._pacing_interval_s:
            # Wake early on cancel.
            self._stop.wait(self._pacing_interval_s - elapsed)

    def _collect(self, pending: dict[Future, int], *, block_until_empty: bool) -> None:
        while pending:
            done, _ = wait(tuple(pending), return_when=FIRST_COMPLETED)
            for finished in done:
                norad_id = pending.pop(finished)
                try:
                    finished.result()
                except Exception:
                    LOGGER.exception("Worker raised unexpectedly for %d", norad_id)
                    self.stats["failed"] += 1
                else:
                    self.stats["completed"] += 1
            if not block_until_empty:
                return

    def run(self, identifiers: Iterable[int]) -> dict[str, int]:
        try:
            self._dispatch(identifiers)
        finally:
            self._results.put(DONE)
        return dict(self.stats)

    def _dispatch(self, identifiers: Iterable[int]) -> None:
        pending: dict[Future, int] = {}
        with ThreadPoolExecutor(
            max_workers=self._workers, thread_name_prefix="satcat-worker"
        ) as executor:
            try:
                for norad_id in tqdm(
                    identifiers,
                    desc="Satellites",
                    unit="id",
                    disable=not self._progress,
                ):
                    if len(pending) >= self._workers:
                        self._collect(pending, block_until_empty=False)
                    self._pacing_sleep()
                    if self._stop.is_set():
                        LOGGER.warning("Dispatch cancelled before %d", norad_id)
                        break
                    pending[executor.submit(self._work, norad_id)] = norad_id
                    self._last_dispatch_at = time.monotonic()
                    self.stats["dispatched"] += 1
            finally:
                self._collect(pending, block_until_empty=True)
