from __future__ import annotations

import logging
import queue
from collections import Counter

from .manifest import ManifestWriter, relpath_posix
from .records import DONE, CategoryResult, ImageRecord, Message, SatelliteRecord
from .store import SatelliteStore, format_category_list

LOGGER = logging.getLogger(__name__)


class Aggregator:
    """Single consumer of worker results and the only writer to the store."""

    def __init__(
        self,
        *,
        store: SatelliteStore,
        results: queue.Queue[Message],
        manifest: ManifestWriter | None = None,
    ) -> None:
        self.store = store
        self.results = results
        self.manifest = manifest
        self.stats: Counter[str] = Counter()
        # Message taken off the queue but not yet fully handled.
        self._pending: Message | None = None

    def run(self) -> dict[str, int]:
        """Drain results until the completion sentinel arrives.

        A message interrupted mid-handling is handled again on the next call;
        writes are whole-file replacements so repeating one is harmless.
        """

        while True:
            if self._pending is None:
                self._pending = self.results.get()
                self.results.task_done()
            message = self._pending
            if message is DONE:
                self._pending = None
                LOGGER.info("Done")
                return dict(self.stats)
            self.handle(message)
            self._pending = None

    def discard(self) -> int:
        """Throw away everything up to the completion sentinel."""

        dropped = 0
        message = self._pending
        self._pending = None
        while message is not DONE:
            if message is not None:
                dropped += 1
            message = self.results.get()
            self.results.task_done()
        self.stats["dropped"] += dropped
        return dropped

    def handle(self, message: Message) -> None:
        try:
            if isinstance(message, CategoryResult):
                self._on_category(message)
            elif isinstance(message, SatelliteRecord):
                self._on_satellite(message)
            elif isinstance(message, ImageRecord):
                self._on_image(message)
            else:
                raise TypeError(f"Unsupported result type: {type(message)}")
        except OSError:
            LOGGER.exception("Failed to persist %r", message)
            self.stats["write_errors"] += 1

    def _record(self, kind: str, **fields) -> None:
        if self.manifest is not None:
            self.manifest.record(kind, **fields)

    def _on_category(self, result: CategoryResult) -> None:
        LOGGER.info(
            "Received categories: %s", format_category_list(result.descriptions)
        )
        for category_id, description in result.descriptions.items():
            path = self.store.write_category(category_id, description)
            self.stats["categories"] += 1
            self._record(
                "category",
                category_id=category_id,
                path=relpath_posix(path, self.store.root),
            )

    def _on_satellite(self, satellite: SatelliteRecord) -> None:
        LOGGER.info("Received satellite with noradID %d", satellite.norad_id)
        self.stats["satellites"] += 1
        paths: dict[str, str] = {}

        if satellite.description:
            path = self.store.write_satellite_description(
                satellite.norad_id, satellite.description
            )
            paths["description"] = relpath_posix(path, self.store.root)
            self.stats["descriptions"] += 1
            LOGGER.info("\tLoaded description")
        else:
            LOGGER.info(
                "\tDescription exists on disk or doesn't exist online. Not saving."
            )

        if satellite.category_ids:
            path = self.store.write_satellite_categories(
                satellite.norad_id, satellite.category_ids
            )
            paths["categories"] = relpath_posix(path, self.store.root)
            self.stats["category_lists"] += 1
            LOGGER.info("\tCategories: %s", format_category_list(satellite.category_ids))
        else:
            LOGGER.info("\tNo categories")

        self._record(
            "satellite",
            norad_id=satellite.norad_id,
            category_ids=list(satellite.category_ids),
            images=[img.basename for img in satellite.images],
            paths=paths,
        )

    def _on_image(self, image: ImageRecord) -> None:
        path = self.store.write_image(image.owner_id, image.basename, image.payload)
        self.stats["images"] += 1
        LOGGER.info("Stored image %s for noradID %d", image.basename, image.owner_id)
        self._record(
            "image",
            norad_id=image.owner_id,
            url=image.source_url,
            size_bytes=len(image.payload),
            path=relpath_posix(path, self.store.root),
        )
