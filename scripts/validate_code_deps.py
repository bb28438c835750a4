#!/usr/bin/env python3
"""Check the import graph of skyfeed/ and api/.

Rules:
- A module may import from its own layer or any layer below it.
- The first-party import graph has no cycles.

Exit status is the number of problems, capped at 1.
"""

from __future__ import annotations

import ast
import sys
from dataclasses import dataclass, field
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parent.parent
FIRST_PARTY = ("skyfeed", "api")

# Path prefixes per layer, relative to the repo root.
LAYERS: dict[int, tuple[str, ...]] = {
    0: ("skyfeed/core",),
    1: ("skyfeed/security",),
    2: ("skyfeed/feed", "skyfeed/ingestion", "skyfeed/mail", "skyfeed/accounts"),
    3: ("api/", "skyfeed/cli"),
}


@dataclass
class SourceModule:
    name: str
    rel_path: str
    layer: int | None
    imports: set[str] = field(default_factory=set)


def get_module_layer(module_path: str) -> int | None:
    """Layer for a slash-separated path, or None when outside the layered tree."""
    path = module_path.removesuffix(".py")
    for layer, prefixes in LAYERS.items():
        if any(path.startswith(prefix) for prefix in prefixes):
            return layer
    return None


def _module_name(rel: Path) -> str:
    parts = list(rel.with_suffix("").parts)
    if parts[-1] == "__init__":
        parts.pop()
    return ".".join(parts)


def _absolute(node: ast.ImportFrom, importer: str, is_package: bool) -> str:
    if not node.level:
        return node.module or ""
    base = importer.split(".")
    if not is_package:
        base = base[:-1]
    if node.level > 1:
        base = base[: len(base) - (node.level - 1)]
    return ".".join(base + ([node.module] if node.module else []))


def _first_party_imports(path: Path, name: str) -> set[str]:
    tree = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
    is_package = path.name == "__init__.py"
    found: set[str] = set()
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            targets = [alias.name for alias in node.names]
        elif isinstance(node, ast.ImportFrom):
            targets = [_absolute(node, name, is_package)]
        else:
            continue
        found.update(t for t in targets if t.split(".")[0] in FIRST_PARTY)
    return found


def collect_modules(root: Path = REPO_ROOT) -> dict[str, SourceModule]:
    modules: dict[str, SourceModule] = {}
    for top in FIRST_PARTY:
        for path in sorted((root / top).rglob("*.py")):
            if "__pycache__" in path.parts:
                continue
            rel = path.relative_to(root)
            name = _module_name(rel)
            modules[name] = SourceModule(
                name=name,
                rel_path=rel.as_posix(),
                layer=get_module_layer(rel.as_posix()),
                imports=_first_party_imports(path, name),
            )
    return modules


def _resolve(target: str, modules: dict[str, SourceModule]) -> str | None:
    # `from pkg.mod import name` lists pkg.mod; walk up until a known module matches.
    parts = target.split(".")
    while parts:
        candidate = ".".join(parts)
        if candidate in modules:
            return candidate
        parts.pop()
    return None


def layer_violations(modules: dict[str, SourceModule]) -> list[str]:
    problems: list[str] = []
    for mod in modules.values():
        if mod.layer is None:
            continue
        for target in sorted(mod.imports):
            resolved = _resolve(target, modules)
            if resolved is None:
                continue
            dep_layer = modules[resolved].layer
            if dep_layer is not None and dep_layer > mod.layer:
                problems.append(
                    f"layer: {mod.rel_path} (layer {mod.layer}) imports {target} (layer {dep_layer})"
                )
    return problems


def import_cycles(modules: dict[str, SourceModule]) -> list[str]:
    graph: dict[str, set[str]] = {}
    for name, mod in modules.items():
        resolved = {_resolve(t, modules) for t in mod.imports}
        graph[name] = {r for r in resolved if r is not None and r != name}
    done: set[str] = set()
    stack: list[str] = []
    on_stack: set[str] = set()
    cycles: list[str] = []

    def visit(name: str) -> None:
        stack.append(name)
        on_stack.add(name)
        for dep in sorted(graph[name]):
            if dep in on_stack:
                loop = stack[stack.index(dep):] + [dep]
                cycles.append("cycle: " + " -> ".join(loop))
            elif dep not in done:
                visit(dep)
        on_stack.discard(name)
        stack.pop()
        done.add(name)

    for name in sorted(graph):
        if name not in done:
            visit(name)
    return cycles


def main() -> int:
    modules = collect_modules()
    problems = layer_violations(modules) + import_cycles(modules)

    if problems:
        for problem in problems:
            print(problem, file=sys.stderr)
        print(f"{len(problems)} import problem(s) in {len(modules)} modules", file=sys.stderr)
        return 1

    print(f"imports ok: {len(modules)} modules, layers 0-{max(LAYERS)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
