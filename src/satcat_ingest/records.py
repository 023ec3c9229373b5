from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union


@dataclass(frozen=True)
class CategoryResult:
    # Keyed by category id; one category page fetch yields one entry.
    descriptions: dict[int, str]


@dataclass(frozen=True)
class ImageRecord:
    owner_id: int
    basename: str
    payload: bytes
    source_url: str = ""


@dataclass
class SatelliteRecord:
    norad_id: int
    description: str = ""
    category_ids: list[int] = field(default_factory=list)
    images: list[ImageRecord] = field(default_factory=list)


class _Done:
    def __repr__(self) -> str:
        return "DONE"


DONE = _Done()

Message = Union[CategoryResult, SatelliteRecord, ImageRecord, _Done]
