"""Configuration loading from environment variables and fetchdocs.toml."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib
from pathlib import Path

_CONFIG_FILENAME = "fetchdocs.toml"

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass
class RemoteConfig:
    """Where fetched files come from and where their edit links point."""

    fetch_base: str = "https://raw.githubusercontent.com/"
    edit_base: str = "https://github.com/"
    default_doc_path: str = "README.md"
    timeout: float = 60  # seconds per request, 0 = no timeout
    user_agent: str = "fetchdocs"


@dataclass
class LayoutConfig:
    """On-disk layout of manifests and the generated documentation tree."""

    docs_dir: Path = Path("docs")
    tocs_dir: Path = Path("tocs")
    fetch_config: str = "fetch.yml"
    version_file: str = "VERSION"
    language: str = "en"
    version: str = "dev"
    fetch_dir: str = "fetched"


@dataclass
class FetchDocsConfig:
    """Top-level fetchdocs configuration."""

    remote: RemoteConfig = field(default_factory=RemoteConfig)
    layout: LayoutConfig = field(default_factory=LayoutConfig)
    fail_fast: bool = True
    log_level: str = "INFO"


def _as_bool(value: object) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUE_VALUES


def load_config(config_path: Path | None = None) -> FetchDocsConfig:
    """Load configuration from environment variables and optional fetchdocs.toml.

    Priority: environment variables > fetchdocs.toml > defaults.
    """
    file_data: dict = {}
    if config_path and config_path.exists():
        file_data = tomllib.loads(config_path.read_text())
    else:
        # Search current dir and ~/.fetchdocs/
        for candidate in [
            Path.cwd() / _CONFIG_FILENAME,
            Path.home() / ".fetchdocs" / _CONFIG_FILENAME,
        ]:
            if candidate.exists():
                file_data = tomllib.loads(candidate.read_text())
                break

    remote_data = file_data.get("remote", {})
    layout_data = file_data.get("layout", {})
    remote_defaults = RemoteConfig()
    layout_defaults = LayoutConfig()

    config = FetchDocsConfig(
        remote=RemoteConfig(
            fetch_base=os.getenv(
                "FETCHDOCS_FETCH_BASE", remote_data.get("fetch_base", remote_defaults.fetch_base)
            ),
            edit_base=os.getenv(
                "FETCHDOCS_EDIT_BASE", remote_data.get("edit_base", remote_defaults.edit_base)
            ),
            default_doc_path=os.getenv(
                "FETCHDOCS_DEFAULT_DOC",
                remote_data.get("default_doc_path", remote_defaults.default_doc_path),
            ),
            timeout=float(
                os.getenv("FETCHDOCS_TIMEOUT", remote_data.get("timeout", remote_defaults.timeout))
            ),
            user_agent=remote_data.get("user_agent", remote_defaults.user_agent),
        ),
        layout=LayoutConfig(
            docs_dir=Path(
                os.getenv("FETCHDOCS_DOCS_DIR", layout_data.get("docs_dir", str(layout_defaults.docs_dir)))
            ),
            tocs_dir=Path(
                os.getenv("FETCHDOCS_TOCS_DIR", layout_data.get("tocs_dir", str(layout_defaults.tocs_dir)))
            ),
            fetch_config=layout_data.get("fetch_config", layout_defaults.fetch_config),
            version_file=layout_data.get("version_file", layout_defaults.version_file),
            language=layout_data.get("language", layout_defaults.language),
            version=layout_data.get("version", layout_defaults.version),
            fetch_dir=layout_data.get("fetch_dir", layout_defaults.fetch_dir),
        ),
        fail_fast=_as_bool(os.getenv("FETCHDOCS_FAIL_FAST", file_data.get("fail_fast", True))),
        log_level=os.getenv("FETCHDOCS_LOG_LEVEL", file_data.get("log_level", "INFO")),
    )
    return config
