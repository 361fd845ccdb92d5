"""Fetch orchestrator — downloads every entry of a manifest into a docs tree.

Per entry: resolve -> ensure directory -> GET -> merge front matter -> write.
Downloads of one manifest run concurrently on the event loop; the call
returns once all of them have finished (or one has failed fatally).
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import aiohttp

from fetchdocs import matter
from fetchdocs.config import FetchDocsConfig
from fetchdocs.entries import dest_path_of
from fetchdocs.errors import (
    OutputError,
    ReleaseLookupError,
    RemoteStatusError,
    TransportError,
    ValidationError,
)
from fetchdocs.releases import ReleaseLookup
from fetchdocs.resolver import FetchSpec, resolve_entry

logger = logging.getLogger(__name__)


@dataclass
class FetchReport:
    """Outcome of one manifest download run."""

    written: list[Path] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)  # unresolvable entries
    failed: list[str] = field(default_factory=list)  # download errors

    @property
    def ok(self) -> bool:
        return not self.skipped and not self.failed


@dataclass
class DumpReport:
    """Outcome of a dry run: where files would be written."""

    paths: list[Path] = field(default_factory=list)
    invalid: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.invalid


def output_path(download_root: Path, save_path: str, entry: Any = None) -> Path:
    """Place ``save_path`` under ``download_root``, refusing paths that escape it."""
    path = download_root / save_path.lstrip("/")
    root = download_root.resolve()
    if root not in path.resolve().parents:
        raise ValidationError("path", entry or save_path, within="dest", problem="has invalid")
    return path


def ensure_parent(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


class DocFetcher:
    """Downloads manifest entries over HTTPS with a shared aiohttp session.

    Usable as an async context manager; a session passed in by the caller is
    used as-is and never closed here.
    """

    def __init__(
        self,
        config: FetchDocsConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        release_lookup: ReleaseLookup | None = None,
    ) -> None:
        self.config = config
        self.release_lookup = release_lookup
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self) -> DocFetcher:
        self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            remote = self.config.remote
            timeout = aiohttp.ClientTimeout(total=remote.timeout or None)
            self._session = aiohttp.ClientSession(
                timeout=timeout,
                headers={"User-Agent": remote.user_agent},
            )
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if self._session is not None and self._owns_session:
            await self._session.close()
            self._session = None

    # ── Download ─────────────────────────────────────────────

    async def fetch_entries(self, download_root: Path, entries: Sequence[Any]) -> FetchReport:
        """Download every entry under ``download_root``.

        Unresolvable entries are logged and skipped. A non-200 response raises
        RemoteStatusError after cancelling the remaining downloads, unless
        ``fail_fast`` is off, in which case it is recorded like a transport
        failure.
        """
        report = FetchReport()
        tasks: list[asyncio.Task[Path]] = []

        for index, raw in enumerate(entries):
            try:
                spec = resolve_entry(
                    raw,
                    self.config.remote,
                    release_lookup=self.release_lookup,
                    index=index,
                )
                out_path = output_path(download_root, spec.save_path, spec.entry.label)
            except (ValidationError, ReleaseLookupError) as e:
                logger.error("Skipping entry: %s", e)
                report.skipped.append(str(e))
                continue

            ensure_parent(out_path)
            tasks.append(asyncio.create_task(self._download(spec, out_path)))

        if not tasks:
            return report

        pending: set[asyncio.Task[Path]] = set(tasks)
        try:
            while pending:
                done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_EXCEPTION)
                # Settle every finished task before surfacing a fatal one.
                fatal: BaseException | None = None
                for task in done:
                    exc = self._collect(task, report)
                    if fatal is None:
                        fatal = exc
                if fatal is not None:
                    raise fatal
        finally:
            for task in pending:
                task.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)
                logger.warning("Cancelled %d in-flight download(s)", len(pending))

        return report

    def _collect(self, task: asyncio.Task[Path], report: FetchReport) -> BaseException | None:
        """Record a finished download. Returns the exception that must stop the batch, if any."""
        exc = task.exception()
        if exc is None:
            report.written.append(task.result())
            return None
        if isinstance(exc, RemoteStatusError):
            logger.error("%s", exc)
            if self.config.fail_fast:
                return exc
            report.failed.append(str(exc))
            return None
        if isinstance(exc, (TransportError, OutputError)):
            logger.error("%s", exc)
            report.failed.append(str(exc))
            return None
        return exc

    async def _download(self, spec: FetchSpec, out_path: Path) -> Path:
        url = spec.download_uri
        session = self._ensure_session()
        logger.debug("Fetching %s -> %s", url, out_path)

        try:
            async with session.get(url) as response:
                if response.status != 200:
                    raise RemoteStatusError(url, response.status)
                body = await response.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportError(url, str(e) or type(e).__name__) from e

        text = body.decode("utf-8", errors="replace")
        try:
            out_path.write_text(matter.render(text, spec.front_matter), encoding="utf-8")
        except OSError as e:
            raise OutputError(out_path, str(e)) from e
        logger.info("Wrote %s", out_path)
        return out_path

    # ── Dry run ──────────────────────────────────────────────

    def dump_entries(self, download_root: Path, entries: Sequence[Any]) -> DumpReport:
        """Report where each entry would be written, without any network I/O.

        Only ``dest`` is checked, so entries whose ``src`` would later fail to
        resolve are still listed. Destination directories are created.
        """
        report = DumpReport()
        for index, raw in enumerate(entries):
            try:
                save_path = dest_path_of(raw, index)
                out_path = output_path(download_root, save_path, f"#{index} {save_path}")
            except ValidationError as e:
                logger.error("Invalid dest: %s", e)
                report.invalid.append(str(e))
                continue

            ensure_parent(out_path)
            report.paths.append(out_path)
        return report
