"""Structured document store with corruption quarantine."""

import json
import logging
import shutil
from pathlib import Path
from typing import Any

import yaml

from .exceptions import ConfigFileError
from .utils import atomic_write

logger = logging.getLogger(__name__)

BACKUP_SUFFIX = ".backup"

JSON_SUFFIXES = frozenset({".json"})
YAML_SUFFIXES = frozenset({".yaml", ".yml"})


class DocumentStore:
    """Loads and saves mapping documents (JSON or YAML, chosen by suffix).

    A missing file loads as an empty mapping. A file that cannot be parsed
    is copied to ``<path>.backup`` and also loads as an empty mapping, so the
    caller proceeds as on a fresh install without losing the original bytes.
    """

    def load(self, path: Path, quarantine: bool = True) -> dict[str, Any]:
        """Read a document, defaulting to an empty mapping.

        Args:
            path: Path to the document
            quarantine: Back up an unparseable file before returning.
                Read-only callers pass False so checking never creates files.

        Returns:
            Parsed mapping, or {} if the file is missing or corrupted

        Raises:
            ConfigFileError: If the suffix is not a supported format
            OSError: If the file exists but cannot be read
        """
        self._check_format(path)

        try:
            raw = path.read_bytes()
        except FileNotFoundError:
            logger.debug(f"No configuration at {path}, starting empty")
            return {}

        try:
            data = self._decode(path, raw.decode("utf-8"))
        except (ValueError, yaml.YAMLError) as e:
            self._handle_corrupted(path, f"could not parse: {e}", quarantine)
            return {}

        if not isinstance(data, dict):
            self._handle_corrupted(path, f"expected a mapping, got {type(data).__name__}", quarantine)
            return {}

        return data

    def save(self, path: Path, data: dict[str, Any]) -> None:
        """Serialize a mapping and write it atomically.

        Args:
            path: Path to the document
            data: Mapping to write

        Raises:
            ConfigFileError: If the suffix is not a supported format
            OSError: If the write fails
        """
        self._check_format(path)
        atomic_write(path, self.dumps(path, data))

    def dumps(self, path: Path, data: dict[str, Any]) -> str:
        """Render a mapping in the format for ``path``.

        Keys keep insertion order, indentation is fixed and the output ends
        with a newline, so equal mappings render identically.
        """
        if path.suffix in YAML_SUFFIXES:
            return yaml.safe_dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True)
        return json.dumps(data, indent=2, ensure_ascii=False) + "\n"

    # ===== Private Helpers =====

    def _check_format(self, path: Path) -> None:
        if path.suffix not in JSON_SUFFIXES | YAML_SUFFIXES:
            raise ConfigFileError(f"Unsupported configuration format for {path}")

    def _decode(self, path: Path, text: str) -> Any:
        if path.suffix in YAML_SUFFIXES:
            data = yaml.safe_load(text)
            return data if data is not None else {}
        return json.loads(text)

    def _handle_corrupted(self, path: Path, reason: str, quarantine: bool) -> None:
        """Log a corrupted document and copy it aside.

        Args:
            path: Corrupted document
            reason: Parse failure description
            quarantine: Whether to write the backup copy
        """
        if not quarantine:
            logger.debug(f"Ignoring corrupted configuration at {path}: {reason}")
            return

        backup_path = backup_path_for(path)
        logger.warning(f"Configuration file {path} is corrupted ({reason}); backing it up to {backup_path}")
        try:
            shutil.copyfile(path, backup_path)
        except OSError as e:
            logger.debug(f"Failed to back up {path}: {e}")


def backup_path_for(path: Path) -> Path:
    """Return the quarantine path for a corrupted document."""
    return path.with_name(path.name + BACKUP_SUFFIX)
