"""Manifest entries: one row per remote file to fetch.

A manifest is a YAML list of mappings shaped like::

    - src:
        repoName: apache/cordova-plugin-camera
        commit: 8.0.0          # optional, defaults to latest release
        path: README.md        # optional, defaults to the configured doc path
        packageName: ...       # optional, defaults to the repo basename
      dest:
        path: camera/index.md
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from fetchdocs.errors import ManifestError, ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SourceRef:
    """Where an entry's file lives upstream. Optional fields are filled by the resolver."""

    repo_name: str
    path: str | None = None
    commit: str | None = None
    package_name: str | None = None


@dataclass(frozen=True)
class DestRef:
    path: str


@dataclass(frozen=True)
class Entry:
    """A validated manifest row."""

    src: SourceRef
    dest: DestRef
    index: int | None = None

    @property
    def label(self) -> str:
        """Human readable identity used in diagnostics."""
        where = f"#{self.index}" if self.index is not None else "entry"
        return f"{where} ({self.src.repo_name} -> {self.dest.path})"

    @classmethod
    def from_mapping(cls, data: Any, index: int | None = None) -> Entry:
        """Build an Entry from a raw manifest row, raising ValidationError on missing fields."""
        ident = _describe(data, index)
        if not isinstance(data, Mapping):
            raise ValidationError("src", ident)

        src = data.get("src")
        if not isinstance(src, Mapping) or not src:
            raise ValidationError("src", ident)
        if not src.get("repoName"):
            raise ValidationError("repoName", ident, within="src")

        dest = data.get("dest")
        if not isinstance(dest, Mapping) or not dest:
            raise ValidationError("dest", ident)
        if not dest.get("path"):
            raise ValidationError("path", ident, within="dest")

        return cls(
            src=SourceRef(
                repo_name=str(src["repoName"]),
                path=_optional_str(src.get("path")),
                commit=_optional_str(src.get("commit")),
                package_name=_optional_str(src.get("packageName")),
            ),
            dest=DestRef(path=str(dest["path"])),
            index=index,
        )


def dest_path_of(data: Any, index: int | None = None) -> str:
    """Return the ``dest.path`` of a raw row without validating ``src``.

    Used by dry runs, which only care about where files would land.
    """
    ident = _describe(data, index)
    dest = data.get("dest") if isinstance(data, Mapping) else None
    if not isinstance(dest, Mapping) or not dest:
        raise ValidationError("dest", ident)
    if not dest.get("path"):
        raise ValidationError("path", ident, within="dest")
    return str(dest["path"])


def load_manifest(path: Path) -> list[Any]:
    """Read a YAML manifest and return its raw rows in order.

    Rows are validated lazily, one by one, so a bad row never hides the good ones.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ManifestError(f"cannot read manifest {path}: {e}") from e

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ManifestError(f"cannot parse manifest {path}: {e}") from e

    if data is None:
        logger.warning("Manifest %s is empty", path)
        return []
    if not isinstance(data, list):
        raise ManifestError(f"manifest {path} must be a list of entries, got {type(data).__name__}")
    return data


def _optional_str(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def _describe(data: Any, index: int | None) -> str:
    return f"#{index} {data!r}" if index is not None else repr(data)
