"""Manifest driver — finds every documentation item with a fetch manifest.

Layout:
    <tocs_dir>/
    └── <item>/
        ├── fetch.yml        # manifest (list of entries)
        └── VERSION          # marks the item as released

Each item is fetched into ``<docs_dir>/<item>/<language>/<version>/<fetch_dir>``.
Items are processed one at a time; an item's downloads all finish before
the next item starts.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from fetchdocs.config import FetchDocsConfig
from fetchdocs.entries import load_manifest
from fetchdocs.fetcher import DocFetcher, DumpReport, FetchReport
from fetchdocs.releases import ReleaseLookup

logger = logging.getLogger(__name__)


@dataclass
class DriverOptions:
    force: bool = False
    dump_only: bool = False


@dataclass
class ItemResult:
    item: str
    destination: Path
    fetched: FetchReport | None = None
    dumped: DumpReport | None = None
    skipped_reason: str | None = None


@dataclass
class DriverResult:
    items: list[ItemResult] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """False when a dry run hit an entry without a usable ``dest``."""
        return all(r.dumped is None or r.dumped.ok for r in self.items)


def find_items(config: FetchDocsConfig) -> list[str]:
    """Names of items under tocs_dir holding both a manifest and a version file."""
    layout = config.layout
    if not layout.tocs_dir.is_dir():
        logger.warning("No tocs directory at %s", layout.tocs_dir)
        return []

    items = []
    for item_dir in sorted(p for p in layout.tocs_dir.iterdir() if p.is_dir()):
        if (item_dir / layout.fetch_config).exists() and (item_dir / layout.version_file).exists():
            items.append(item_dir.name)
    return items


def destination_for(config: FetchDocsConfig, item: str) -> Path:
    layout = config.layout
    return layout.docs_dir / item / layout.language / layout.version / layout.fetch_dir


def _prepare_destination(destination: Path, force: bool) -> bool:
    """Create the destination, or decide whether an existing one may be reused."""
    if not destination.exists():
        destination.mkdir(parents=True, exist_ok=True)
        return True
    if not any(destination.iterdir()):
        return True
    if not force:
        logger.warning("Use --force/--clean to overwrite fetch dir %s", destination)
        return False
    logger.warning("Overwriting fetch dir %s", destination)
    return True


async def fetch_item(
    config: FetchDocsConfig,
    item: str,
    options: DriverOptions,
    fetcher: DocFetcher,
) -> ItemResult:
    """Fetch (or dry-run) the manifest of one item.

    Raises ManifestError for an unusable manifest and RemoteStatusError when
    fail-fast stops the download.
    """
    layout = config.layout
    manifest = layout.tocs_dir / item / layout.fetch_config
    destination = destination_for(config, item)
    result = ItemResult(item=item, destination=destination)

    if not _prepare_destination(destination, options.force):
        result.skipped_reason = "destination not empty"
        return result

    logger.debug("Manifest    = %s", manifest)
    logger.debug("Destination = %s", destination)

    entries = load_manifest(manifest)
    if options.dump_only:
        result.dumped = fetcher.dump_entries(destination, entries)
    else:
        result.fetched = await fetcher.fetch_entries(destination, entries)
    return result


async def run(
    config: FetchDocsConfig,
    options: DriverOptions | None = None,
    *,
    fetcher: DocFetcher | None = None,
    release_lookup: ReleaseLookup | None = None,
) -> DriverResult:
    """Process every item found under tocs_dir."""
    options = options or DriverOptions()
    result = DriverResult()

    owned = fetcher is None
    if fetcher is None:
        fetcher = DocFetcher(config, release_lookup=release_lookup)

    try:
        for item in find_items(config):
            logger.info("Fetching docs for %s", item)
            result.items.append(await fetch_item(config, item, options, fetcher))
    finally:
        if owned:
            await fetcher.close()

    logger.debug("fetchdocs done")
    return result
