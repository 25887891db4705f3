#!/usr/bin/env python
"""Enforce no sibling imports between config modules.

Each module under chatlink/config/ reads its own env vars. Importing a
sibling (relative or absolute) creates import-order coupling between
concerns; shared values are re-exported by ``config/__init__.py`` only.
"""

from __future__ import annotations

import ast
import sys

from linting.shared import CONFIG_DIR, config_modules, parse_source, rel, report

_PACKAGE = "chatlink.config"


def _sibling_target(node: ast.ImportFrom, siblings: set[str]) -> str | None:
    module = node.module or ""
    if node.level == 1:
        if module in siblings:
            return f".{module}"
        if not module:
            names = [alias.name for alias in node.names if alias.name in siblings]
            return f". import {', '.join(names)}" if names else None
        return None
    if module.startswith(f"{_PACKAGE}.") and module.rsplit(".", 1)[-1] in siblings:
        return module
    return None


def main() -> int:
    modules = config_modules(CONFIG_DIR)
    siblings = {p.stem for p in modules}
    violations: list[str] = []

    for py_file in modules:
        result = parse_source(py_file)
        if result is None:
            continue
        _source, tree = result

        for node in tree.body:
            if not isinstance(node, ast.ImportFrom):
                continue
            target = _sibling_target(node, siblings)
            if target is not None:
                violations.append(f"  {rel(py_file)}: imports {target} (line {node.lineno})")

    return report("No-config-cross-imports violations (config/ must not import siblings)", violations)


if __name__ == "__main__":
    sys.exit(main())
