"""codegraph-config: Idempotent Claude configuration for CodeGraph.

This library installs the CodeGraph MCP server into the Claude code-assistant
configuration for one of two locations:
- Global (~/.claude.json and ~/.claude/)
- Local (./.claude.json and ./.claude/)

Three files are reconciled: the MCP server registration, the tool permission
allowlist, and a managed section of CLAUDE.md. Every operation can be run
repeatedly without duplicating entries, tolerates hand-edited or corrupted
files, and writes atomically.

Public API:
    ConfigWriter: Main class for install operations
    ConfigPaths: Dataclass defining the install root and derived file paths
    InstallLocation: Enum for GLOBAL/LOCAL installs
    SectionResult, InstallReport: Operation outcomes
    DocumentStore: Parse-tolerant JSON/YAML document loader
    atomic_write: Crash-safe file write
    build_version: Version string builder for packaging
    ConfigError, ConfigFileError, MalformedSectionError: Exception types

Example:
    ```python
    from codegraph_config import ConfigPaths, ConfigWriter, InstallLocation

    # Caller resolves the location (policy)
    paths = ConfigPaths.for_location(InstallLocation.LOCAL)

    # Library reconciles the files (mechanism)
    writer = ConfigWriter(paths)
    if not writer.has_mcp_config():
        writer.write_mcp_config()
    writer.write_permissions()
    result = writer.write_claude_md()
    ```
"""

from .exceptions import ConfigError
from .exceptions import ConfigFileError
from .exceptions import MalformedSectionError
from .manager import ConfigWriter
from .models import ConfigPaths
from .models import InstallLocation
from .models import InstallReport
from .models import SectionResult
from .store import DocumentStore
from .utils import atomic_write
from .version import build_version

__version__ = "0.1.0"

__all__ = [
    "ConfigWriter",
    "ConfigPaths",
    "InstallLocation",
    "SectionResult",
    "InstallReport",
    "DocumentStore",
    "atomic_write",
    "build_version",
    "ConfigError",
    "ConfigFileError",
    "MalformedSectionError",
]
