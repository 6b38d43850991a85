"""Utility functions for codegraph-config."""

import logging
import os
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


def atomic_write(path: Path, content: str) -> None:
    """Write a file so readers see either the old or the new content.

    Content goes to a temporary sibling named after the target and the
    current process id, which is then renamed onto the target. The rename is
    the only step that changes the visible file.

    Args:
        path: Target file path
        content: Complete new file content

    Raises:
        OSError: If the write or rename fails. The temporary file is removed
            and the original error re-raised unchanged.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(f"{path.name}.tmp.{os.getpid()}")

    try:
        # newline="" keeps line endings exactly as given
        with open(tmp_path, "w", encoding="utf-8", newline="") as f:
            f.write(content)
        os.replace(tmp_path, path)
    except BaseException:
        try:
            tmp_path.unlink(missing_ok=True)
        except OSError as cleanup_error:
            logger.debug(f"Could not remove temporary file {tmp_path}: {cleanup_error}")
        raise


def append_unique(items: list[Any], additions: list[Any]) -> list[Any]:
    """Append values not already present, preserving existing order.

    Args:
        items: List to extend in place
        additions: Values to add

    Returns:
        The values that were actually appended

    Examples:
        >>> allow = ["foo", "bar"]
        >>> append_unique(allow, ["bar", "baz"])
        ['baz']
        >>> allow
        ['foo', 'bar', 'baz']
    """
    added = []
    for value in additions:
        if value not in items:
            items.append(value)
            added.append(value)
    return added


def drop_duplicates(items: list[Any], values: list[Any]) -> int:
    """Remove repeated occurrences of the given values, keeping the first.

    Values not listed are left alone, duplicates included.

    Args:
        items: List to clean in place
        values: Values that may appear at most once

    Returns:
        Number of entries removed

    Examples:
        >>> allow = ["a", "foo", "a", "foo"]
        >>> drop_duplicates(allow, ["a"])
        1
        >>> allow
        ['a', 'foo', 'foo']
    """
    seen = set()
    kept = []
    for item in items:
        if item in values:
            if item in seen:
                continue
            seen.add(item)
        kept.append(item)
    removed = len(items) - len(kept)
    items[:] = kept
    return removed
