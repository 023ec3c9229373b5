from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .manifest import ManifestWriter
from .store import CATEGORY_LIST_SUFFIX


@dataclass(frozen=True)
class StoreInspection:
    out_dir: Path
    categories: int
    satellite_descriptions: int
    category_lists: int
    image_owners: int
    images: int
    lists_without_description: int
    missing_description_sample: list[int]
    last_run: dict[str, Any] | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "out_dir": str(self.out_dir),
            "categories": self.categories,
            "satellite_descriptions": self.satellite_descriptions,
            "category_lists": self.category_lists,
            "image_owners": self.image_owners,
            "images": self.images,
            "lists_without_description": self.lists_without_description,
            "missing_description_sample": list(self.missing_description_sample),
            "last_run": self.last_run,
        }


def _visible_files(directory: Path) -> list[Path]:
    if not directory.is_dir():
        return []
    # Dotfiles are in-progress temporary writes.
    return [
        p for p in directory.iterdir() if p.is_file() and not p.name.startswith(".")
    ]


def inspect_store(
    *,
    out_dir: Path,
    max_missing_sample: int = 25,
) -> StoreInspection:
    out_dir = out_dir.resolve()
    if not out_dir.is_dir():
        raise FileNotFoundError(f"Missing store directory: {out_dir}")

    categories = len(_visible_files(out_dir / "categories"))

    described: set[int] = set()
    listed: set[int] = set()
    for p in _visible_files(out_dir / "satellites"):
        name = p.name
        if name.endswith(CATEGORY_LIST_SUFFIX):
            name = name[: -len(CATEGORY_LIST_SUFFIX)]
            target = listed
        else:
            target = described
        try:
            target.add(int(name))
        except ValueError:
            continue

    image_owners = 0
    images = 0
    images_dir = out_dir / "images"
    if images_dir.is_dir():
        for owner in images_dir.iterdir():
            if not owner.is_dir():
                continue
            count = len(_visible_files(owner))
            if count:
                image_owners += 1
                images += count

    missing = sorted(listed - described)

    return StoreInspection(
        out_dir=out_dir,
        categories=categories,
        satellite_descriptions=len(described),
        category_lists=len(listed),
        image_owners=image_owners,
        images=images,
        lists_without_description=len(missing),
        missing_description_sample=missing[:max_missing_sample],
        last_run=ManifestWriter(out_dir).read_summary(),
    )
