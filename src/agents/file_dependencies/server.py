"""
File Dependencies Agent — MCP Server

Exposes one read-only tool that reports the forward dependencies of a
project file: the same report as an IDE's "Analyze -> Dependencies ->
Export to Text File", returned as a JSON envelope.

Run as:  python -m src.agents.file_dependencies.server           (SSE transport)
         python -m src.agents.file_dependencies.server --stdio   (stdio transport)
"""

import sys

from mcp.server.fastmcp import FastMCP
from mcp.server.transport_security import TransportSecuritySettings

from src.agents.file_dependencies.config import FileDependenciesSettings
from src.agents.file_dependencies.service import FileDependencyAnalyzer
from src.shared.logging import setup_logging

logger = setup_logging("file_dependencies", level="INFO")

# ─── Shared resources (lazy init) ─────────────────────────

# Configure transport security to allow Docker service names
transport_security = TransportSecuritySettings(
    enable_dns_rebinding_protection=False,
    allowed_hosts=[
        "file_dependencies", "file_dependencies:8005",
        "localhost", "127.0.0.1", "0.0.0.0",
    ],
    allowed_origins=["*"],
)

mcp = FastMCP("FileDependencies", transport_security=transport_security)

_settings: FileDependenciesSettings | None = None
_analyzer: FileDependencyAnalyzer | None = None


def _get_settings() -> FileDependenciesSettings:
    """Lazy-initialise settings from environment variables."""
    global _settings
    if _settings is None:
        _settings = FileDependenciesSettings()
        logger.setLevel(_settings.log_level.upper())
    return _settings


def _get_analyzer() -> FileDependencyAnalyzer:
    """Lazy-initialise the analyzer on first tool call."""
    global _analyzer
    if _analyzer is None:
        _analyzer = FileDependencyAnalyzer(_get_settings())
    return _analyzer


# ─── Tool ────────────────────────────────────────────────


@mcp.tool()
def get_file_dependencies(path_in_project: str) -> str:
    """Retrieve the forward dependencies of a file in the project.

    Use when asked "what does file X depend on?", "what does X import?",
    or "export the dependency tree of X".  Every file reachable from X is
    analysed, so the result covers transitive dependencies too.

    Returns JSON with:
      - target_file: the analysed file path
      - dependencies_count: total number of dependencies found
      - files_analyzed: number of files in the analysis
      - output_file: where the full XML report was saved (best effort;
        the file is not guaranteed to exist)
      - dependencies_summary: human-readable summary
      - dependencies_xml: complete dependency tree in XML format

    On failure returns {"error": "<message>"}.

    Args:
        path_in_project: File path relative to the project root
              (e.g. "src/app/main.py").
    """
    response = _get_analyzer().analyze(path_in_project)
    return response.to_json()


# ─── Entry point ──────────────────────────────────────────

# Create the ASGI app for uvicorn
app = mcp.sse_app

if __name__ == "__main__":
    if "--stdio" in sys.argv:
        logger.info("Starting File Dependencies MCP server (stdio transport)")
        mcp.run(transport="stdio")
    else:
        import uvicorn

        settings = _get_settings()
        logger.info(
            f"Starting File Dependencies MCP server (SSE transport on {settings.host}:{settings.port})"
        )
        uvicorn.run(
            "src.agents.file_dependencies.server:app",
            host=settings.host,
            port=settings.port,
            log_level="info",
        )
