"""Entry resolution: manifest row -> concrete fetch spec.

Resolution is pure apart from the latest-release lookup, which is only
consulted when an entry does not pin a commit.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any

from fetchdocs.config import RemoteConfig
from fetchdocs.entries import Entry
from fetchdocs.releases import ReleaseLookup, npm_latest_release

logger = logging.getLogger(__name__)

PLUGIN_NAME_RE = re.compile(r"cordova-plugin-.*")


@dataclass
class FetchSpec:
    """Everything needed to download one file and write it out."""

    front_matter: dict[str, Any]
    download_uri: str
    save_path: str
    entry: Entry | None = field(default=None, repr=False)


def is_plugin_name(package_name: str) -> bool:
    return PLUGIN_NAME_RE.search(package_name) is not None


def package_name_from_repo_name(repo_name: str) -> str:
    """``owner/repo`` -> ``repo``."""
    return repo_name.rstrip("/").split("/")[-1]


def repo_file_uri(remote: RemoteConfig, repo_name: str, commit: str, file_path: str) -> str:
    return f"{remote.fetch_base.rstrip('/')}/{repo_name}/{commit}/{file_path}"


def repo_edit_uri(remote: RemoteConfig, repo_name: str, commit: str, file_path: str) -> str:
    return f"{remote.edit_base.rstrip('/')}/{repo_name}/blob/{commit}/{file_path}"


def resolve_entry(
    entry: Entry | Any,
    remote: RemoteConfig,
    *,
    release_lookup: ReleaseLookup | None = None,
    index: int | None = None,
) -> FetchSpec:
    """Resolve one manifest entry.

    ``entry`` may be a validated Entry or a raw manifest mapping; raw rows are
    validated first and raise ValidationError when required fields are
    missing. A failing release lookup raises ReleaseLookupError.
    """
    if not isinstance(entry, Entry):
        entry = Entry.from_mapping(entry, index)

    src = entry.src
    package_name = src.package_name or package_name_from_repo_name(src.repo_name)
    path = src.path or remote.default_doc_path
    commit = src.commit
    if not commit:
        lookup = release_lookup or npm_latest_release
        commit = lookup(package_name)
        logger.debug("Latest release of %s is %s", package_name, commit)

    front_matter: dict[str, Any] = {
        "edit_link": repo_edit_uri(remote, src.repo_name, commit, path),
        "title": package_name,
    }
    if is_plugin_name(package_name):
        front_matter["plugin_name"] = package_name
        front_matter["plugin_version"] = commit

    return FetchSpec(
        front_matter=front_matter,
        download_uri=repo_file_uri(remote, src.repo_name, commit, path),
        save_path=entry.dest.path,
        entry=entry,
    )
