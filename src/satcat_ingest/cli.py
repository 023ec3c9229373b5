from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

import requests

from .crawl import DEFAULT_END_ID, IngestConfig, Ingestor
from .http_client import HttpClient
from .store_inspect import inspect_store
from .urls import DEFAULT_THUMBNAIL_URL_TEMPLATE


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="satcat-ingest")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    sub = parser.add_subparsers(dest="cmd", required=True)

    crawl_p = sub.add_parser(
        "crawl",
        help="Pull satellite, category and image records for a NORAD id range",
    )
    crawl_p.add_argument(
        "-s", "--start", type=int, default=0, help="Norad ID to start at"
    )
    crawl_p.add_argument(
        "-e", "--end", type=int, default=DEFAULT_END_ID, help="Norad ID to end at"
    )
    crawl_p.add_argument("--out", type=Path, default=Path("descriptions"))
    crawl_p.add_argument("--workers", type=int, default=8)
    crawl_p.add_argument(
        "--interval",
        type=float,
        default=0.5,
        help="Minimum delay in seconds between two dispatched ids",
    )
    crawl_p.add_argument("--timeout", type=float, default=45)
    crawl_p.add_argument("--queue-size", type=int, default=64)
    crawl_p.add_argument(
        "--thumbnail-url-template",
        default=DEFAULT_THUMBNAIL_URL_TEMPLATE,
        help="Thumbnail URL with a {norad_id} placeholder",
    )
    crawl_p.add_argument("--no-progress", action="store_true")

    inspect_p = sub.add_parser(
        "inspect",
        help="Summarize an existing output store",
    )
    inspect_p.add_argument(
        "--in",
        dest="in_dir",
        type=Path,
        default=Path("descriptions"),
        help="Store directory containing categories/satellites/images",
    )
    inspect_p.add_argument(
        "--json",
        action="store_true",
        help="Print machine-readable JSON to stdout",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    if args.cmd == "crawl":
        crawl_cfg = IngestConfig(
            out_dir=args.out,
            start=int(args.start),
            end=int(args.end),
            workers=int(args.workers),
            pacing_interval_s=float(args.interval),
            timeout_s=float(args.timeout),
            queue_size=int(args.queue_size),
            thumbnail_url_template=str(args.thumbnail_url_template),
            progress=not bool(args.no_progress),
        )
        try:
            session = requests.Session()
            http = HttpClient(session, timeout_s=crawl_cfg.timeout_s)
            ingestor = Ingestor(http=http, config=crawl_cfg)
            summary = ingestor.run()
        except (OSError, ValueError) as e:
            print(str(e), file=sys.stderr)
            return 2
        except KeyboardInterrupt:
            print("crawl: interrupted", file=sys.stderr)
            return 130

        stats = summary.get("stats") or {}
        dispatch = summary.get("dispatch") or {}
        print(
            "crawl: "
            f"satellites={int(stats.get('satellites') or 0)} "
            f"descriptions={int(stats.get('descriptions') or 0)} "
            f"categories={int(stats.get('categories') or 0)} "
            f"images={int(stats.get('images') or 0)} "
            f"worker_errors={int(dispatch.get('failed') or 0)}"
        )
        return 0

    if args.cmd == "inspect":
        try:
            inspected = inspect_store(out_dir=args.in_dir)
        except (OSError, ValueError) as e:
            print(str(e), file=sys.stderr)
            return 2

        if bool(args.json):
            print(json.dumps(inspected.to_dict(), indent=2))
        else:
            print(
                "inspect: "
                f"categories={inspected.categories} "
                f"satellite_descriptions={inspected.satellite_descriptions} "
                f"category_lists={inspected.category_lists} "
                f"images={inspected.images} "
                f"image_owners={inspected.image_owners} "
                f"lists_without_description={inspected.lists_without_description}"
            )
        return 0

    return 2


if __name__ == "__main__":
    raise SystemExit(main())
