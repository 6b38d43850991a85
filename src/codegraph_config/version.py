"""Build version strings for packaged CodeGraph releases.

Precedence:
1. CODEGRAPH_BUILD_VERSION (full override)
2. base + CODEGRAPH_VERSION_SUFFIX
3. base + git metadata
4. base
"""

import logging
import os
import subprocess
from collections.abc import Mapping
from datetime import datetime
from datetime import timezone
from pathlib import Path

logger = logging.getLogger(__name__)

BUILD_VERSION_VAR = "CODEGRAPH_BUILD_VERSION"
VERSION_SUFFIX_VAR = "CODEGRAPH_VERSION_SUFFIX"


def build_version(
    base_version: str,
    repo_root: Path,
    environ: Mapping[str, str] | None = None,
    now: datetime | None = None,
) -> str:
    """Build a version string for the checkout at repo_root.

    Args:
        base_version: Version declared by the package
        repo_root: Repository root to probe for git metadata
        environ: Environment variables (default: os.environ)
        now: Timestamp for dirty builds (default: current UTC time)

    Returns:
        Version string

    Examples:
        >>> build_version("1.2.0", Path("/nonexistent"), environ={"CODEGRAPH_VERSION_SUFFIX": "nightly"})
        '1.2.0+nightly'
    """
    env = os.environ if environ is None else environ

    override = env.get(BUILD_VERSION_VAR, "").strip()
    if override:
        return override

    suffix = env.get(VERSION_SUFFIX_VAR, "").strip()
    if suffix:
        if not suffix.startswith(("+", "-")):
            suffix = f"+{suffix}"
        return f"{base_version}{suffix}"

    metadata = git_metadata(repo_root, now=now)
    if not metadata:
        return base_version
    return f"{base_version}+{metadata}"


def git_metadata(repo_root: Path, now: datetime | None = None) -> str | None:
    """Get git build metadata for a checkout.

    Args:
        repo_root: Repository root
        now: Timestamp for dirty builds (default: current UTC time)

    Returns:
        "g<sha>" or "g<sha>.dirty.<YYYYMMDDTHHMMSSZ>", or None when not in a
        git checkout or git cannot be run
    """
    if not (repo_root / ".git").exists():
        return None

    try:
        short_sha = _git(repo_root, "rev-parse", "--short", "HEAD")
        if not short_sha:
            return None
        dirty = bool(_git(repo_root, "status", "--porcelain"))
    except (OSError, subprocess.SubprocessError) as e:
        logger.debug(f"Could not read git metadata from {repo_root}: {e}")
        return None

    if not dirty:
        return f"g{short_sha}"

    timestamp = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return f"g{short_sha}.dirty.{timestamp.strftime('%Y%m%dT%H%M%SZ')}"


def _git(repo_root: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", *args],
        cwd=repo_root,
        stdin=subprocess.DEVNULL,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout.strip()
