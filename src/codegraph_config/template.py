"""CLAUDE.md section template for CodeGraph instructions.

The rendered section is written to ``~/.claude/CLAUDE.md`` (global) or
``./.claude/CLAUDE.md`` (local). Keep it in sync with the README's
"Recommended: Add Global Instructions" section.
"""

SECTION_START = "<!-- CODEGRAPH_START -->"
SECTION_END = "<!-- CODEGRAPH_END -->"

# Heading that introduces a hand-written (unmarked) section
LEGACY_HEADING = "## CodeGraph"

SECTION_BODY = """\
## CodeGraph

CodeGraph builds a semantic knowledge graph of codebases for faster, smarter code exploration.

### If `.codegraph/` exists in the project

**Use codegraph tools for faster exploration.** These tools provide instant lookups via the code graph instead of scanning files:

| Tool | Use For |
|------|---------|
| `search` | Find symbols by name (functions, classes, types) |
| `context` | Get relevant code context for a task |
| `callers` | Find what calls a function |
| `callees` | Find what a function calls |
| `impact` | See what's affected by changing a symbol |
| `node` | Get details + source code for a symbol |

**When spawning Explore agents in a codegraph-enabled project:**

Tell the Explore agent to use codegraph tools for faster exploration.

**For quick lookups in the main session:**
- Use `search` instead of grep for finding symbols
- Use `callers`/`callees` to trace code flow
- Use `impact` before making changes to see what's affected

### If `.codegraph/` does NOT exist

At the start of a session, ask the user if they'd like to initialize CodeGraph:

"I notice this project doesn't have CodeGraph initialized. Would you like me to run `codegraph init -i` to build a code knowledge graph?"
"""

SECTION_TEMPLATE = f"{SECTION_START}\n{SECTION_BODY}{SECTION_END}"
