"""Latest-release lookup for packages whose manifest entry has no commit."""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Callable

from fetchdocs.errors import ReleaseLookupError

logger = logging.getLogger(__name__)

# (package_name) -> release tag/version
ReleaseLookup = Callable[[str], str]


def npm_latest_release(package_name: str, *, timeout: int = 30) -> str:
    """Ask the npm registry for the latest published version of a package."""
    cmd = ["npm", "view", package_name, "version"]
    logger.debug("Running: %s", " ".join(cmd))

    try:
        result = subprocess.run(cmd, capture_output=True, text=True, timeout=timeout)
    except subprocess.TimeoutExpired:
        raise ReleaseLookupError(package_name, "npm did not respond in time")
    except FileNotFoundError:
        raise ReleaseLookupError(package_name, "`npm` not found")

    if result.returncode != 0:
        stderr = result.stderr.strip()
        logger.error("npm view error (rc=%d): %s", result.returncode, stderr)
        raise ReleaseLookupError(package_name, stderr or "unknown error")

    version = result.stdout.strip()
    if not version:
        raise ReleaseLookupError(package_name, "no published version")
    return version
