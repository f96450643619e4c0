"""
Dependency Providers

A provider computes the forward dependency map of a root file: every
file reachable from it, each mapped to the files it references
directly. The report formatter consumes the map without knowing how it
was built, so tests can swap in StaticDependencyProvider.
"""

import ast
import logging
from collections import deque
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Protocol

from src.shared.exceptions import UnsupportedFileError

logger = logging.getLogger("file-deps.providers")


class DependencyProvider(Protocol):
    """Anything that can compute the dependency map of a root file."""

    def compute_dependencies(self, root: Path) -> dict[str, list[str]]:
        ...


class StaticDependencyProvider:
    """Returns a fixed dependency map regardless of the root file."""

    def __init__(self, mapping: Mapping[str, Sequence[str]]):
        self._mapping = {key: list(value) for key, value in mapping.items()}

    def compute_dependencies(self, root: Path) -> dict[str, list[str]]:
        return {key: list(value) for key, value in self._mapping.items()}


class PythonImportProvider:
    """
    Forward dependency analysis over Python imports.

    Starting at the root file, follows every import that resolves to a
    file inside the project, breadth-first and without a depth limit.
    Imports of the standard library or third-party packages resolve to
    nothing and are ignored. The walk stops enqueueing new files once
    ``max_files`` have been visited.
    """

    def __init__(self, project_root: Path, max_files: int = 2000):
        self.project_root = Path(project_root).resolve()
        self.max_files = max_files
        self._search_paths = [self.project_root]
        src_dir = self.project_root / "src"
        if src_dir.is_dir():
            self._search_paths.append(src_dir)

    def compute_dependencies(self, root: Path) -> dict[str, list[str]]:
        root = Path(root).resolve()
        if root.suffix != ".py":
            raise UnsupportedFileError(
                f"cannot analyse imports of non-Python file: {root.name}"
            )

        dependencies: dict[str, list[str]] = {}
        visited = {root}
        queue = deque([root])

        while queue:
            current = queue.popleft()
            targets = self.direct_dependencies(current)
            dependencies[str(current)] = [str(t) for t in targets]

            for target in targets:
                if target in visited or len(visited) >= self.max_files:
                    continue
                visited.add(target)
                queue.append(target)

        if len(visited) >= self.max_files:
            logger.warning(
                "Stopped following imports after %d files (root: %s)",
                self.max_files, root,
            )
        return dependencies

    def direct_dependencies(self, file_path: Path) -> list[Path]:
        """Project files imported by one Python file, in source order."""
        try:
            source = file_path.read_text(encoding="utf-8")
            tree = ast.parse(source, filename=str(file_path))
        except (OSError, UnicodeDecodeError, SyntaxError) as e:
            logger.warning("Skipping imports of %s: %s", file_path, e)
            return []

        module_name = self._module_name(file_path)
        is_package = file_path.name == "__init__.py"

        targets: dict[Path, None] = {}
        for node in ast.walk(tree):
            if isinstance(node, ast.Import):
                for alias in node.names:
                    resolved = self._resolve_module(alias.name)
                    if resolved is not None:
                        targets[resolved] = None

            elif isinstance(node, ast.ImportFrom):
                base = node.module or ""
                if node.level:
                    base = self._resolve_relative_import(
                        module_name, base, node.level, is_package
                    )
                for resolved in self._resolve_from_import(base, node.names):
                    targets[resolved] = None

        targets.pop(file_path, None)
        return list(targets)

    # ─── Module resolution ─────────────────────────────────

    def _resolve_from_import(self, base: str, names: list[ast.alias]) -> list[Path]:
        """`from base import a, b`: prefer submodules, else the base module."""
        resolved = []
        fallback_needed = False
        for alias in names:
            submodule = self._resolve_module(f"{base}.{alias.name}") if base else (
                self._resolve_module(alias.name)
            )
            if submodule is not None:
                resolved.append(submodule)
            else:
                fallback_needed = True

        if fallback_needed and base:
            module = self._resolve_module(base)
            if module is not None:
                resolved.append(module)
        return resolved

    def _resolve_module(self, dotted: str) -> Path | None:
        """Map a dotted module name to a file in the project, if any."""
        if not dotted:
            return None
        parts = dotted.split(".")
        for search_path in self._search_paths:
            candidate = search_path.joinpath(*parts)
            module_file = candidate.with_suffix(".py")
            if module_file.is_file():
                return module_file.resolve()
            package_init = candidate / "__init__.py"
            if package_init.is_file():
                return package_init.resolve()
        return None

    def _module_name(self, file_path: Path) -> str:
        """Dotted module name of a project file, relative to its search path."""
        for search_path in reversed(self._search_paths):
            try:
                relative = file_path.relative_to(search_path)
            except ValueError:
                continue
            parts = list(relative.with_suffix("").parts)
            if parts and parts[-1] == "__init__":
                parts.pop()
            return ".".join(parts)
        return file_path.stem

    def _resolve_relative_import(
        self, current_module: str, target: str, level: int,
        is_package: bool = False,
    ) -> str:
        """
        Resolve a relative import to an absolute module path.

        For __init__.py files the module IS the package, so level=1 stays
        at the same level; for regular files level=1 is the parent package.

        Examples:
            pkg/__init__.py:   from .core import X  -> pkg.core
            pkg/sub/utils.py:  from ..params import X -> pkg.params
        """
        parts = current_module.split(".") if current_module else []
        strip = level - 1 if is_package else level

        if strip > len(parts):
            return target

        base_parts = parts[: len(parts) - strip] if strip > 0 else parts
        return ".".join(base_parts + [target]) if target else ".".join(base_parts)
