"""Configuration writer for installing CodeGraph into Claude settings."""

import logging
from pathlib import Path
from typing import Any

from .markdown import has_section
from .markdown import reconcile_section
from .models import ConfigPaths
from .models import InstallLocation
from .models import InstallReport
from .models import SectionResult
from .store import DocumentStore
from .utils import append_unique
from .utils import atomic_write
from .utils import drop_duplicates

logger = logging.getLogger(__name__)

SERVER_NAME = "codegraph"
SERVER_COMMAND = "codegraph"
PACKAGE_RUNNER = "npx"
PACKAGE_NAME = "@colbymchenry/codegraph"
SERVE_ARGS = ["serve", "--mcp"]

PERMISSION_PREFIX = f"mcp__{SERVER_NAME}__"
PERMISSION_VERBS = ("search", "context", "callers", "callees", "impact", "node", "status")
REQUIRED_PERMISSIONS = [f"{PERMISSION_PREFIX}codegraph_{verb}" for verb in PERMISSION_VERBS]


class ConfigWriter:
    """Reconciles the Claude configuration files for one install location.

    Every operation is a fresh load-merge-write cycle and is idempotent:
    running it again leaves the files byte-identical. All writes go through
    an atomic rename, so a failed call never leaves a partial file.

    Files touched:
    1. ``.claude.json``: MCP server registration
    2. ``.claude/settings.json``: tool permission allowlist
    3. ``.claude/CLAUDE.md``: usage instructions section

    Args:
        paths: Resolved paths for the install location
        store: Document store (default: a new DocumentStore)
    """

    def __init__(self, paths: ConfigPaths, store: DocumentStore | None = None):
        """Initialize writer with injected paths.

        Args:
            paths: ConfigPaths defining the install location and root
            store: Optional DocumentStore to load and save JSON documents
        """
        self.paths = paths
        self.store = store or DocumentStore()

    @property
    def location(self) -> InstallLocation:
        return self.paths.location

    # ===== MCP Server Registration =====

    def server_config(self) -> dict[str, Any]:
        """Get the MCP server registration for this install location.

        Global installs run the ``codegraph`` binary directly (assumes it is
        on PATH); local installs run the package through npx.

        Returns:
            Fresh registration mapping
        """
        if self.location is InstallLocation.GLOBAL:
            return {"type": "stdio", "command": SERVER_COMMAND, "args": list(SERVE_ARGS)}
        return {"type": "stdio", "command": PACKAGE_RUNNER, "args": [PACKAGE_NAME, *SERVE_ARGS]}

    def write_mcp_config(self) -> None:
        """Register the CodeGraph MCP server, replacing any prior entry."""
        path = self.paths.claude_json
        config = self.store.load(path)

        servers = self._ensure_mapping(config, "mcpServers", path)
        servers[SERVER_NAME] = self.server_config()

        self.store.save(path, config)
        logger.info(f"Registered '{SERVER_NAME}' MCP server in {path} ({self.location.value})")

    def has_mcp_config(self) -> bool:
        """Check whether the MCP server is already registered.

        Returns:
            True if a codegraph entry exists under mcpServers
        """
        config = self.store.load(self.paths.claude_json, quarantine=False)
        servers = config.get("mcpServers")
        return isinstance(servers, dict) and bool(servers.get(SERVER_NAME))

    # ===== Tool Permissions =====

    def write_permissions(self) -> None:
        """Add the CodeGraph tool permissions to the allowlist.

        Existing entries keep their order; only missing identifiers are
        appended. Repeated copies of a CodeGraph identifier are collapsed to
        the first one.
        """
        path = self.paths.settings_json
        settings = self.store.load(path)

        permissions = self._ensure_mapping(settings, "permissions", path)
        allow = permissions.get("allow")
        if not isinstance(allow, list):
            if allow is not None:
                logger.warning(f"Replacing non-list permissions.allow in {path}")
            allow = permissions["allow"] = []

        removed = drop_duplicates(allow, REQUIRED_PERMISSIONS)
        if removed:
            logger.warning(f"Removed {removed} duplicate CodeGraph permission(s) from {path}")
        added = append_unique(allow, REQUIRED_PERMISSIONS)

        self.store.save(path, settings)
        logger.info(f"Added {len(added)} CodeGraph permission(s) to {path}")

    def has_permissions(self) -> bool:
        """Check whether any CodeGraph permission is already allowed."""
        settings = self.store.load(self.paths.settings_json, quarantine=False)
        permissions = settings.get("permissions")
        if not isinstance(permissions, dict):
            return False
        allow = permissions.get("allow")
        if not isinstance(allow, list):
            return False
        return any(isinstance(p, str) and p.startswith(PERMISSION_PREFIX) for p in allow)

    # ===== CLAUDE.md Instructions =====

    def write_claude_md(self) -> SectionResult:
        """Write or update the CodeGraph section of CLAUDE.md.

        A marked or hand-written CodeGraph section is replaced in place;
        otherwise the section is appended. Text outside the section is kept.

        Returns:
            SectionResult describing whether the file was created or an
            existing section updated
        """
        path = self.paths.claude_md
        content = self._read_text(path)

        new_content, result = reconcile_section(content)
        atomic_write(path, new_content)

        if result.created:
            logger.info(f"Created {path} with CodeGraph instructions")
        elif result.updated:
            logger.info(f"Updated CodeGraph instructions in {path}")
        else:
            logger.info(f"Appended CodeGraph instructions to {path}")
        return result

    def has_claude_md_section(self) -> bool:
        """Check whether CLAUDE.md already has a CodeGraph section.

        Returns:
            True if the section markers or the legacy heading are present,
            False if the file is missing or unreadable
        """
        try:
            content = self._read_text(self.paths.claude_md)
        except (OSError, UnicodeDecodeError) as e:
            logger.debug(f"Could not read {self.paths.claude_md}: {e}")
            return False
        return content is not None and has_section(content)

    # ===== Full Install =====

    def install(self) -> InstallReport:
        """Run every reconciliation step for this location.

        Returns:
            InstallReport with the CLAUDE.md outcome
        """
        self.write_mcp_config()
        self.write_permissions()
        section = self.write_claude_md()
        return InstallReport(paths=self.paths, claude_md=section)

    # ===== Private Helpers =====

    def _ensure_mapping(self, data: dict[str, Any], key: str, path: Path) -> dict[str, Any]:
        """Get the mapping under key, replacing a missing or non-mapping value.

        Args:
            data: Parent mapping (modified in place)
            key: Key that must hold a mapping
            path: Document path, for diagnostics

        Returns:
            The mapping stored under key
        """
        value = data.get(key)
        if not isinstance(value, dict):
            if value is not None:
                logger.warning(f"Replacing non-object '{key}' in {path}")
            value = data[key] = {}
        return value

    def _read_text(self, path: Path) -> str | None:
        """Read a text file with line endings untouched.

        Returns:
            File content, or None if the file doesn't exist
        """
        try:
            with open(path, encoding="utf-8", newline="") as f:
                return f.read()
        except FileNotFoundError:
            return None
