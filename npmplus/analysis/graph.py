"""Source-level import graphs for Python and JavaScript/TypeScript trees.

Graph keys and edges are root-relative POSIX paths. Only imports that
resolve to a file inside the scanned root become edges; third-party and
standard-library imports are ignored.
"""

from __future__ import annotations

import ast
import fnmatch
import json
import os
import re
from pathlib import Path, PurePosixPath
from typing import Any, Dict, Iterable, Iterator, List, Optional, Set

from npmplus.logger import session_logger as logger

Graph = Dict[str, Set[str]]

PYTHON_EXTENSIONS = (".py",)
JS_EXTENSIONS = (".js", ".jsx", ".mjs", ".cjs", ".ts", ".tsx")

SKIP_DIRS = frozenset(
    {
        "node_modules",
        ".git",
        "__pycache__",
        ".venv",
        "venv",
        ".tox",
        ".mypy_cache",
        ".pytest_cache",
        "dist",
        "build",
    }
)

# Files nothing is expected to import
ENTRY_POINT_PATTERNS = (
    "index.*",
    "main.*",
    "__init__.py",
    "__main__.py",
    "setup.py",
    "conftest.py",
    "test_*",
    "*.test.*",
    "*.spec.*",
)

_JS_IMPORT_PATTERNS = [
    re.compile(r"""\brequire\s*\(\s*['"]([^'"]+)['"]\s*\)"""),
    re.compile(r"""\bimport\s*\(\s*['"]([^'"]+)['"]\s*\)"""),
    re.compile(r"""\bimport\s+(?:[\w*{}\s,$]+?\s+from\s+)?['"]([^'"]+)['"]"""),
    re.compile(r"""\bexport\s+(?:\*|\{[^}]*\}|\*\s+as\s+\w+)\s+from\s+['"]([^'"]+)['"]"""),
]


def iter_source_files(root: Path) -> Iterator[Path]:
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if d not in SKIP_DIRS and not d.endswith(".egg-info"))
        for filename in sorted(filenames):
            if filename.endswith(PYTHON_EXTENSIONS + JS_EXTENSIONS):
                yield Path(dirpath) / filename


def _relative(path: Path, root: Path) -> str:
    return path.relative_to(root).as_posix()


# ---------------------------------------------------------------------- #
# Python
# ---------------------------------------------------------------------- #


def python_module_name(path: Path) -> str:
    """Dotted module name for ``path``.

    Package directories (those holding ``__init__.py``) are climbed even past
    the scanned root, so ``pkg/sub/mod.py`` scanned from ``pkg/sub`` is still
    ``pkg.sub.mod``. Files outside any package are named by their stem.
    """
    parts = [] if path.name == "__init__.py" else [path.stem]
    directory = path.parent
    while (directory / "__init__.py").exists() and directory.parent != directory:
        parts.insert(0, directory.name)
        directory = directory.parent
    return ".".join(parts)


def _python_imports(source: str, module: str, is_package: bool) -> List[str]:
    """Fully qualified names imported by ``source``.

    ``from pkg import name`` yields ``pkg.name``; resolution later falls back
    to ``pkg`` when ``name`` is not a module.
    """
    tree = ast.parse(source)
    names: List[str] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            names.extend(alias.name for alias in node.names)
        elif isinstance(node, ast.ImportFrom):
            if node.level:
                package_parts = module.split(".") if is_package else module.split(".")[:-1]
                if node.level > 1:
                    package_parts = package_parts[: max(len(package_parts) - (node.level - 1), 0)]
                base = ".".join(package_parts + ([node.module] if node.module else []))
            else:
                base = node.module or ""
            if not base:
                continue
            for alias in node.names:
                names.append(base if alias.name == "*" else f"{base}.{alias.name}")
    return names


def _resolve_python(name: str, index: Dict[str, str]) -> Optional[str]:
    """Longest prefix of ``name`` that is a scanned module."""
    parts = name.split(".")
    while parts:
        candidate = ".".join(parts)
        if candidate in index:
            return index[candidate]
        parts.pop()
    return None


def _python_edges(files: List[Path], root: Path) -> Graph:
    modules = {path: python_module_name(path) for path in files}
    index: Dict[str, str] = {}
    for path, module in modules.items():
        index.setdefault(module, _relative(path, root))

    graph: Graph = {}
    for path in files:
        key = _relative(path, root)
        graph[key] = set()
        try:
            source = path.read_text(encoding="utf-8")
            imported = _python_imports(source, modules[path], path.name == "__init__.py")
        except (OSError, UnicodeDecodeError, SyntaxError) as e:
            logger.warning("Skipping unparsable Python file", path=key, error=str(e))
            continue
        for name in imported:
            target = _resolve_python(name, index)
            # "from . import VERSION" in a package falls back to the package itself
            if target is not None and target != key:
                graph[key].add(target)
    return graph


# ---------------------------------------------------------------------- #
# JavaScript / TypeScript
# ---------------------------------------------------------------------- #


def _js_specifiers(source: str) -> Set[str]:
    specifiers: Set[str] = set()
    for pattern in _JS_IMPORT_PATTERNS:
        specifiers.update(pattern.findall(source))
    return specifiers


def _resolve_js(specifier: str, importer: str, known: Set[str]) -> Optional[str]:
    if not specifier.startswith("."):
        return None
    base = PurePosixPath(os.path.normpath(str(PurePosixPath(importer).parent / specifier))).as_posix()
    candidates = [base]
    candidates.extend(base + ext for ext in JS_EXTENSIONS)
    candidates.extend(f"{base}/index{ext}" for ext in JS_EXTENSIONS)
    for candidate in candidates:
        if candidate in known:
            return candidate
    return None


def _js_edges(files: List[Path], root: Path) -> Graph:
    known = {_relative(path, root) for path in files}
    graph: Graph = {}
    for path in files:
        key = _relative(path, root)
        graph[key] = set()
        try:
            source = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Skipping unreadable file", path=key, error=str(e))
            continue
        for specifier in _js_specifiers(source):
            target = _resolve_js(specifier, key, known)
            if target is not None:
                graph[key].add(target)
    return graph


# ---------------------------------------------------------------------- #
# Graph analysis
# ---------------------------------------------------------------------- #


def build_dependency_graph(root: Path) -> Graph:
    """Map every source file under ``root`` to the in-tree files it imports."""
    root = Path(root).resolve()
    files = list(iter_source_files(root))
    python_files = [p for p in files if p.suffix in PYTHON_EXTENSIONS]
    js_files = [p for p in files if p.suffix in JS_EXTENSIONS]

    graph = _python_edges(python_files, root)
    graph.update(_js_edges(js_files, root))
    logger.debug("Built dependency graph", root=str(root), modules=len(graph))
    return graph


def find_circular(graph: Graph) -> List[List[str]]:
    """Strongly connected components that form an import cycle (Tarjan)."""
    index_of: Dict[str, int] = {}
    lowlink: Dict[str, int] = {}
    on_stack: Set[str] = set()
    stack: List[str] = []
    components: List[List[str]] = []
    counter = 0

    for start in sorted(graph):
        if start in index_of:
            continue
        work = [(start, iter(sorted(graph.get(start, ()))))]
        index_of[start] = lowlink[start] = counter
        counter += 1
        stack.append(start)
        on_stack.add(start)

        while work:
            node, children = work[-1]
            advanced = False
            for child in children:
                if child not in index_of:
                    index_of[child] = lowlink[child] = counter
                    counter += 1
                    stack.append(child)
                    on_stack.add(child)
                    work.append((child, iter(sorted(graph.get(child, ())))))
                    advanced = True
                    break
                if child in on_stack:
                    lowlink[node] = min(lowlink[node], index_of[child])
            if advanced:
                continue

            work.pop()
            if work:
                parent = work[-1][0]
                lowlink[parent] = min(lowlink[parent], lowlink[node])
            if lowlink[node] == index_of[node]:
                component: List[str] = []
                while True:
                    member = stack.pop()
                    on_stack.discard(member)
                    component.append(member)
                    if member == node:
                        break
                if len(component) > 1 or node in graph.get(node, ()):
                    components.append(sorted(component))

    return sorted(components)


def is_entry_point(path: str, entry_points: Iterable[str] = ()) -> bool:
    name = PurePosixPath(path).name
    extra = list(entry_points)
    if path in extra or name in extra:
        return True
    return any(fnmatch.fnmatch(name, pattern) for pattern in ENTRY_POINT_PATTERNS)


def find_orphans(graph: Graph, entry_points: Iterable[str] = ()) -> List[str]:
    """Modules no other module imports, entry points excepted."""
    extra = list(entry_points)
    imported: Set[str] = set()
    for source, targets in graph.items():
        imported.update(t for t in targets if t != source)
    return sorted(m for m in graph if m not in imported and not is_entry_point(m, extra))


def summarize_package_json(root: Path) -> Optional[Dict[str, int]]:
    manifest = Path(root) / "package.json"
    if not manifest.is_file():
        return None
    try:
        data = json.loads(manifest.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning("Unreadable package.json", path=str(manifest), error=str(e))
        return None
    dependencies = len(data.get("dependencies") or {})
    dev_dependencies = len(data.get("devDependencies") or {})
    return {
        "dependencies": dependencies,
        "dev_dependencies": dev_dependencies,
        "total": dependencies + dev_dependencies,
    }


def analyze(
    root: Path,
    entry_points: Iterable[str] = (),
    circular: bool = True,
    orphans: bool = True,
) -> Dict[str, Any]:
    """Run cycle and orphan detection over ``root``."""
    root = Path(root).resolve()
    graph = build_dependency_graph(root)
    result: Dict[str, Any] = {
        "root": str(root),
        "module_count": len(graph),
        "circular": find_circular(graph) if circular else None,
        "orphans": find_orphans(graph, entry_points) if orphans else None,
    }
    package_json = summarize_package_json(root)
    if package_json is not None:
        result["package_json"] = package_json
    return result
