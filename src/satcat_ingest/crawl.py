from __future__ import annotations

import logging
import queue
import threading
from dataclasses import dataclass
from pathlib import Path

from .aggregator import Aggregator
from .dedup import DedupOracle
from .dispatch import Dispatcher
from .http_client import HttpClient
from .manifest import ManifestWriter, utc_iso
from .records import Message
from .store import SatelliteStore
from .urls import DEFAULT_THUMBNAIL_URL_TEMPLATE
from .worker import SatelliteWorker

LOGGER = logging.getLogger(__name__)

DEFAULT_END_ID = 53000


@dataclass
class IngestConfig:
    out_dir: Path = Path("descriptions")
    start: int = 0
    end: int = DEFAULT_END_ID
    workers: int = 8
    pacing_interval_s: float = 0.5
    timeout_s: float = 45
    queue_size: int = 64
    thumbnail_url_template: str = DEFAULT_THUMBNAIL_URL_TEMPLATE
    progress: bool = False

    def validate(self) -> None:
        if self.start < 0:
            raise ValueError(f"start must be >= 0, got {self.start}")
        if self.end < self.start:
            raise ValueError(f"end ({self.end}) must be >= start ({self.start})")
        if self.workers < 1:
            raise ValueError(f"workers must be >= 1, got {self.workers}")
        if self.pacing_interval_s < 0:
            raise ValueError("pacing interval must be >= 0")
        if self.queue_size < 1:
            raise ValueError(f"queue_size must be >= 1, got {self.queue_size}")
        if "{norad_id}" not in self.thumbnail_url_template:
            raise ValueError("thumbnail URL template must contain {norad_id}")

    @property
    def identifiers(self) -> range:
        return range(self.start, self.end + 1)


class Ingestor:
    """Wires workers, dispatcher and aggregator for one crawl run."""

    def __init__(self, *, http: HttpClient, config: IngestConfig) -> None:
        config.validate()
        self.http = http
        self.cfg = config

        self.store = SatelliteStore(Path(self.cfg.out_dir))
        self.oracle = DedupOracle(self.store)
        self.manifest = ManifestWriter(self.store.root)
        self.results: queue.Queue[Message] = queue.Queue(maxsize=self.cfg.queue_size)

        self.worker = SatelliteWorker(
            http=self.http,
            oracle=self.oracle,
            results=self.results,
            thumbnail_url_template=self.cfg.thumbnail_url_template,
        )
        self.dispatcher = Dispatcher(
            self.worker.run,
            results=self.results,
            workers=self.cfg.workers,
            pacing_interval_s=self.cfg.pacing_interval_s,
            progress=self.cfg.progress,
        )
        self.aggregator = Aggregator(
            store=self.store, results=self.results, manifest=self.manifest
        )

    def cancel(self) -> None:
        self.dispatcher.cancel()

    def run(self) -> dict:
        started_at = utc_iso()
        LOGGER.info(
            "Pulling satellites starting at noradID %d and finishing with %d",
            self.cfg.start,
            self.cfg.end,
        )

        dispatch_stats: dict[str, int] = {}

        def _dispatch() -> None:
            dispatch_stats.update(self.dispatcher.run(self.cfg.identifiers))

        thread = threading.Thread(target=_dispatch, name="satcat-dispatch", daemon=True)
        thread.start()
        try:
            stats = self.aggregator.run()
        except KeyboardInterrupt:
            LOGGER.warning("Interrupted; finishing in-flight satellites")
            self.cancel()
            self.aggregator.run()
            thread.join()
            raise
        except Exception:
            LOGGER.exception("Aggregator failed; cancelling dispatch")
            self.cancel()
            # Keep the queue moving so blocked workers can finish.
            self.aggregator.discard()
            thread.join()
            raise
        thread.join()

        summary = {
            "started_at": started_at,
            "finished_at": utc_iso(),
            "cancelled": self.dispatcher.cancelled,
            "config": {
                "start": self.cfg.start,
                "end": self.cfg.end,
                "workers": self.cfg.workers,
                "pacing_interval_s": self.cfg.pacing_interval_s,
                "timeout_s": self.cfg.timeout_s,
                "thumbnail_url_template": self.cfg.thumbnail_url_template,
            },
            "dispatch": dispatch_stats,
            "stats": stats,
        }
        self.manifest.write_summary(summary)
        return summary
