"""Data models for codegraph-config."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class InstallLocation(Enum):
    """Install location enumeration.

    Selects both the configuration root and the shape of the MCP server
    registration.
    """

    GLOBAL = "global"
    LOCAL = "local"


@dataclass(frozen=True)
class ConfigPaths:
    """Paths to the files touched by an install.

    Immutable configuration for where the Claude files live. Callers inject
    the root so the reconcilers never look up the home or working directory
    themselves.

    Attributes:
        location: Install location the paths were resolved for
        root: User home (global) or project directory (local)
    """

    location: InstallLocation
    root: Path

    @classmethod
    def for_location(
        cls,
        location: InstallLocation,
        home: Path | None = None,
        cwd: Path | None = None,
    ) -> "ConfigPaths":
        """Resolve paths for an install location.

        Args:
            location: Target install location
            home: User home directory (default: Path.home())
            cwd: Project directory (default: Path.cwd())

        Returns:
            ConfigPaths rooted at home for GLOBAL, at cwd for LOCAL
        """
        if location is InstallLocation.GLOBAL:
            root = home if home is not None else Path.home()
        else:
            root = cwd if cwd is not None else Path.cwd()
        return cls(location=location, root=root)

    @property
    def claude_json(self) -> Path:
        """MCP server registration file (``<root>/.claude.json``)."""
        return self.root / ".claude.json"

    @property
    def config_dir(self) -> Path:
        return self.root / ".claude"

    @property
    def settings_json(self) -> Path:
        """Permission settings file (``<root>/.claude/settings.json``)."""
        return self.config_dir / "settings.json"

    @property
    def claude_md(self) -> Path:
        """Instructions document (``<root>/.claude/CLAUDE.md``)."""
        return self.config_dir / "CLAUDE.md"


@dataclass(frozen=True)
class SectionResult:
    """Outcome of reconciling the managed CLAUDE.md section.

    Attributes:
        created: The file did not exist and was created
        updated: An existing managed or legacy section was replaced
    """

    created: bool
    updated: bool


@dataclass(frozen=True)
class InstallReport:
    """Summary of a full install."""

    paths: ConfigPaths
    claude_md: SectionResult
