"""Exception types raised by the fetch pipeline.

Only RemoteStatusError is meant to stop a batch; every other error is
contained to the entry (or manifest) that produced it.
"""

from __future__ import annotations

from typing import Any


class FetchDocsError(Exception):
    """Base class for all fetchdocs errors."""


class ManifestError(FetchDocsError):
    """A manifest file is missing, unreadable or not a list of entries."""


class ValidationError(FetchDocsError):
    """A manifest entry is missing a required field or holds an unusable one."""

    def __init__(
        self,
        field: str,
        entry: Any = None,
        within: str | None = None,
        problem: str = "missing",
    ) -> None:
        self.field = field
        self.entry = entry
        self.within = within
        where = f" in '{within}'" if within else ""
        super().__init__(f"entry '{entry}' {problem} '{field}'{where}")


class ReleaseLookupError(FetchDocsError):
    """The latest release of a package could not be determined."""

    def __init__(self, package: str, reason: str = "") -> None:
        self.package = package
        self.reason = reason
        msg = f"cannot find latest release of '{package}'"
        super().__init__(f"{msg}: {reason}" if reason else msg)


class RemoteStatusError(FetchDocsError):
    """The remote answered with something other than 200."""

    def __init__(self, url: str, status: int) -> None:
        self.url = url
        self.status = status
        super().__init__(f"Failed to download {url}: got {status}")


class TransportError(FetchDocsError):
    """Connection or body-stream failure while downloading."""

    def __init__(self, url: str, reason: str = "") -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"Error downloading {url}: {reason or 'transport failure'}")


class OutputError(FetchDocsError):
    """The fetched document could not be written to disk."""

    def __init__(self, path: object, reason: str = "") -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Error writing {path}: {reason or 'write failure'}")
