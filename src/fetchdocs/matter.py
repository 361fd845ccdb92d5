"""YAML front matter: split it off a document, merge it, put it back.

YAML loading and dumping go through python-frontmatter's YAML handler, so a
document starting with ``{`` or ``+++`` is never mistaken for JSON or TOML
front matter. The body is kept byte for byte: only the delimiter lines and
the single blank line ``join`` puts after them are removed.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import Any

import yaml
from frontmatter.default_handlers import YAMLHandler

logger = logging.getLogger(__name__)

WARNING_COMMENT = "<!-- WARNING: This file is generated. See fetchdocs. -->\n\n"

_HANDLER = YAMLHandler()

# Opening delimiter on the first line, closing delimiter on a line of its own.
_BLOCK_RE = re.compile(
    rf"\A{_HANDLER.START_DELIMITER}[ \t]*\r?\n(.*?)^{_HANDLER.END_DELIMITER}[ \t]*(?:\r?\n|\Z)",
    re.DOTALL | re.MULTILINE,
)


def split(text: str) -> tuple[dict[str, Any], str]:
    """Return ``(front_matter, body)``.

    A missing or malformed block yields an empty mapping and the text
    unchanged; a well-formed block that is not a mapping is dropped.
    """
    match = _BLOCK_RE.match(text)
    if match is None:
        return {}, text
    try:
        metadata = _HANDLER.load(match.group(1))
    except yaml.YAMLError as e:
        logger.debug("Ignoring malformed front matter: %s", e)
        return {}, text

    body = text[match.end():]
    if body.startswith("\r\n"):
        body = body[2:]
    elif body.startswith("\n"):
        body = body[1:]
    return (dict(metadata) if isinstance(metadata, dict) else {}), body


def strip(text: str) -> str:
    """Drop any front matter and return the body alone."""
    return split(text)[1]


def join(body: str, front_matter: Mapping[str, Any]) -> str:
    """Prepend ``front_matter`` to ``body``.

    Keys are emitted sorted so output is reproducible for a given mapping.
    """
    if not front_matter:
        return body
    metadata = _HANDLER.export(dict(front_matter), sort_keys=True)
    return f"{_HANDLER.START_DELIMITER}\n{metadata}\n{_HANDLER.END_DELIMITER}\n\n{body}"


def merge(generated: Mapping[str, Any], from_file: Mapping[str, Any]) -> dict[str, Any]:
    """Overlay the file's own front matter on the generated one. The file wins."""
    merged = dict(generated)
    merged.update(from_file)
    return merged


def render(text: str, generated: Mapping[str, Any]) -> str:
    """Turn a fetched document into the file written to disk.

    The warning comment comes first, then the merged front matter, then the
    original body with its own front matter removed.
    """
    file_front_matter, body = split(text)
    merged = merge(generated, file_front_matter)
    return WARNING_COMMENT + join(body, merged)
