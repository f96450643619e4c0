"""
Entry point — runs a dependency analysis directly.

This bypasses the MCP server and prints the JSON envelope for one file.
Useful for checking the report format against a local project.

Usage:
    python main.py <path_in_project> [project_root]

For MCP server mode:
    python -m src.agents.file_dependencies.server [--stdio]
"""

import sys

from src.agents.file_dependencies.config import FileDependenciesSettings
from src.agents.file_dependencies.service import FileDependencyAnalyzer
from src.shared.logging import setup_logging

logger = setup_logging("file_dependencies.main", level="INFO")


def main(argv: list[str]) -> int:
    if not argv:
        print(__doc__.strip())
        return 2

    settings = FileDependenciesSettings()
    if len(argv) > 1:
        settings.project_root = argv[1]

    response = FileDependencyAnalyzer(settings).analyze(argv[0])
    print(response.to_json())
    return 1 if response.is_error else 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
