"""Validate layer import boundaries for password_game."""

from __future__ import annotations

import ast
from pathlib import Path

PACKAGE = "password_game"
PROJECT_ROOT = Path(__file__).resolve().parents[1]
DEFAULT_SOURCE_ROOT = PROJECT_ROOT / "src" / PACKAGE
KNOWN_LAYERS = {"domain", "core", "application", "adapters", "cli"}
# Layer -> layers it may not import. Lower layers never reach upward.
RULES: dict[str, set[str]] = {
    "domain": {"core", "application", "adapters", "cli"},
    "core": {"application", "adapters", "cli"},
    "application": {"adapters", "cli"},
}


def _layer_for_path(path: Path, source_root: Path) -> str | None:
    try:
        relative = path.relative_to(source_root)
    except ValueError:
        return None
    if len(relative.parts) < 2:
        # Top-level modules such as cli.py sit above every layer.
        return None
    return relative.parts[0]


def _layers_in_module(module_name: str, names: list[str]) -> set[str]:
    """Layers reached by importing ``names`` from ``module_name``."""
    parts = module_name.split(".") if module_name else []
    if not parts or parts[0] != PACKAGE:
        return set()
    if len(parts) >= 2:
        return {parts[1]} if parts[1] in KNOWN_LAYERS else set()
    return {name for name in names if name in KNOWN_LAYERS}


def _absolute_module(node: ast.ImportFrom, path: Path, source_root: Path) -> str:
    if node.level == 0:
        return node.module or ""
    package_parts = [PACKAGE, *path.relative_to(source_root).with_suffix("").parts[:-1]]
    if node.level - 1 > len(package_parts) - 1:
        return ""
    base = package_parts[: len(package_parts) - (node.level - 1)]
    return ".".join([*base, *node.module.split(".")] if node.module else base)


def _imported_layers(node: ast.Import | ast.ImportFrom, path: Path, source_root: Path) -> set[str]:
    if isinstance(node, ast.Import):
        layers: set[str] = set()
        for alias in node.names:
            layers |= _layers_in_module(alias.name, [])
        return layers
    module = _absolute_module(node, path, source_root)
    return _layers_in_module(module, [alias.name for alias in node.names])


def check_file(path: Path, source_root: Path = DEFAULT_SOURCE_ROOT) -> list[str]:
    layer = _layer_for_path(path, source_root)
    banned_layers = RULES.get(layer or "", set())
    if not banned_layers:
        return []

    tree = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
    violations: list[str] = []
    for node in ast.walk(tree):
        if not isinstance(node, (ast.Import, ast.ImportFrom)):
            continue
        for imported_layer in sorted(_imported_layers(node, path, source_root) & banned_layers):
            violations.append(f"{path}: {layer} must not import {PACKAGE}.{imported_layer}")
    return violations


def check_import_boundaries(source_root: Path = DEFAULT_SOURCE_ROOT) -> list[str]:
    violations: list[str] = []
    for path in sorted(source_root.rglob("*.py")):
        violations.extend(check_file(path, source_root))
    return violations


def main() -> None:
    violations = check_import_boundaries()
    if violations:
        raise SystemExit("\n".join(violations))
    print("import boundary checks passed")


if __name__ == "__main__":
    main()
