from __future__ import annotations

import os
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

CATEGORY_LIST_SUFFIX = "-categories"
CATEGORY_LIST_SEPARATOR = ","


def _atomic_write_bytes(path: Path, data: bytes) -> None:
    """Write to a temporary sibling and atomically replace ``path``."""

    tmp = path.with_name(f".{path.name}.tmp.{uuid.uuid4().hex}")
    try:
        with tmp.open("wb") as handle:
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp, path)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise


def format_category_list(category_ids: Iterable[int]) -> str:
    return CATEGORY_LIST_SEPARATOR.join(str(c) for c in category_ids)


def parse_category_list(text: str) -> list[int]:
    out: list[int] = []
    for part in text.strip().split(CATEGORY_LIST_SEPARATOR):
        part = part.strip()
        if part:
            out.append(int(part))
    return out


@dataclass
class SatelliteStore:
    """Directory-per-kind output store.

    Layout under ``root``::

        categories/<category_id>
        satellites/<norad_id>
        satellites/<norad_id>-categories
        images/<norad_id>/<basename>

    Reads are safe from any thread. Writes are expected from a single thread.
    """

    root: Path

    def __post_init__(self) -> None:
        self.root = Path(self.root)
        self.categories_dir = self.root / "categories"
        self.satellites_dir = self.root / "satellites"
        self.images_dir = self.root / "images"
        for d in (self.categories_dir, self.satellites_dir, self.images_dir):
            d.mkdir(parents=True, exist_ok=True)

    def category_path(self, category_id: int) -> Path:
        return self.categories_dir / str(category_id)

    def satellite_description_path(self, norad_id: int) -> Path:
        return self.satellites_dir / str(norad_id)

    def satellite_categories_path(self, norad_id: int) -> Path:
        return self.satellites_dir / f"{norad_id}{CATEGORY_LIST_SUFFIX}"

    def image_dir(self, norad_id: int) -> Path:
        return self.images_dir / str(norad_id)

    def image_path(self, norad_id: int, basename: str) -> Path:
        return self.image_dir(norad_id) / basename

    def category_exists(self, category_id: int) -> bool:
        return self.category_path(category_id).exists()

    def satellite_description_exists(self, norad_id: int) -> bool:
        return self.satellite_description_path(norad_id).exists()

    def image_exists(self, norad_id: int, basename: str) -> bool:
        return self.image_path(norad_id, basename).exists()

    def write_category(self, category_id: int, description: str) -> Path:
        path = self.category_path(category_id)
        _atomic_write_bytes(path, description.encode("utf-8"))
        return path

    def write_satellite_description(self, norad_id: int, description: str) -> Path:
        path = self.satellite_description_path(norad_id)
        _atomic_write_bytes(path, description.encode("utf-8"))
        return path

    def write_satellite_categories(
        self, norad_id: int, category_ids: Iterable[int]
    ) -> Path:
        path = self.satellite_categories_path(norad_id)
        _atomic_write_bytes(path, format_category_list(category_ids).encode("utf-8"))
        return path

    def write_image(self, norad_id: int, basename: str, payload: bytes) -> Path:
        owner_dir = self.image_dir(norad_id)
        owner_dir.mkdir(parents=True, exist_ok=True)
        path = owner_dir / basename
        _atomic_write_bytes(path, payload)
        return path

    def read_satellite_categories(self, norad_id: int) -> list[int]:
        path = self.satellite_categories_path(norad_id)
        if not path.exists():
            return []
        return parse_category_list(path.read_text(encoding="utf-8"))
