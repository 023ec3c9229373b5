from __future__ import annotations

import json
import time
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


def utc_iso() -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())


def relpath_posix(path: Path, base_dir: Path) -> str:
    return path.relative_to(base_dir).as_posix()


@dataclass
class ManifestWriter:
    """Run log for a store directory.

    ``manifest.jsonl`` gets one line per persisted item (category, satellite,
    image) and ``manifest.json`` holds the summary of the latest run. Events
    are appended from the aggregator thread only.
    """

    out_dir: Path
    counts: Counter = field(default_factory=Counter, init=False)

    def __post_init__(self) -> None:
        self.jsonl_path = self.out_dir / "manifest.jsonl"
        self.json_path = self.out_dir / "manifest.json"

    def record(self, kind: str, **fields: Any) -> None:
        event = {"kind": kind, "at": utc_iso(), **fields}
        self.jsonl_path.parent.mkdir(parents=True, exist_ok=True)
        with self.jsonl_path.open("a", encoding="utf-8", newline="\n") as f:
            f.write(json.dumps(event, ensure_ascii=False) + "\n")
        self.counts[kind] += 1

    def write_summary(self, summary: dict[str, Any]) -> None:
        summary = dict(summary)
        summary.setdefault("events", dict(self.counts))
        self.json_path.write_text(
            json.dumps(summary, indent=2, ensure_ascii=False) + "\n",
            encoding="utf-8",
        )

    def read_summary(self) -> dict[str, Any] | None:
        try:
            return json.loads(self.json_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError, UnicodeDecodeError):
            return None
