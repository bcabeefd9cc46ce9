"""Import and process-spawning rules for the shipit package."""

from __future__ import annotations

import ast
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class ImportRef:
    module: str
    line: int


def shipit_root() -> Path:
    return Path(__file__).resolve().parents[2]


def iter_source_files() -> list[Path]:
    root = shipit_root()
    files: list[Path] = []
    for path in sorted(root.rglob("*.py")):
        rel = path.relative_to(root)
        if rel.parts[0] == "test" or "__pycache__" in rel.parts:
            continue
        files.append(path)
    return files


def read_tree(path: Path) -> ast.AST:
    return ast.parse(path.read_text(encoding="utf-8"), filename=str(path))


def parse_imports(path: Path) -> list[ImportRef]:
    imports: list[ImportRef] = []
    for node in ast.walk(read_tree(path)):
        if isinstance(node, ast.Import):
            imports.extend(ImportRef(alias.name, node.lineno) for alias in node.names)
        elif isinstance(node, ast.ImportFrom) and not node.level and node.module:
            imports.append(ImportRef(node.module, node.lineno))
    return imports


def matches_prefix(module: str, prefix: str) -> bool:
    return module == prefix or module.startswith(prefix + ".")


def test_rich_is_only_imported_by_console() -> None:
    root = shipit_root()
    offenders = [
        f"{path.relative_to(root)}:{ref.line}: {ref.module}"
        for path in iter_source_files()
        if str(path.relative_to(root)) != "output/console.py"
        for ref in parse_imports(path)
        if matches_prefix(ref.module, "rich")
    ]
    assert not offenders, "direct rich imports:\n" + "\n".join(offenders)


def test_subprocess_is_confined() -> None:
    root = shipit_root()
    allowlist = {"platform/process.py", "services/checkers/common.py"}
    offenders = [
        f"{path.relative_to(root)}:{ref.line}"
        for path in iter_source_files()
        if str(path.relative_to(root)) not in allowlist
        for ref in parse_imports(path)
        if ref.module == "subprocess"
    ]
    assert not offenders, "subprocess outside allowlist:\n" + "\n".join(offenders)


def test_lower_layers_do_not_import_cli() -> None:
    root = shipit_root()
    offenders = [
        f"{path.relative_to(root)}:{ref.line}: {ref.module}"
        for path in iter_source_files()
        if path.relative_to(root).parts[0] != "cli"
        for ref in parse_imports(path)
        if matches_prefix(ref.module, "shipit.cli")
    ]
    assert not offenders, "imports of shipit.cli:\n" + "\n".join(offenders)
