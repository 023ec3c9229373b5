"""satcat-ingest core library.

This package crawls a range of catalog identifiers on the n2yo.com satellite
catalog and mirrors category descriptions, satellite descriptions and images
into a directory-per-kind store.

Repo rules:
- The store is the only source of truth for "already have it".
- Only the aggregator writes to the store.
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
