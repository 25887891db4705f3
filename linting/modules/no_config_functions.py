#!/usr/bin/env python
"""Enforce no function definitions in config modules.

Config modules under chatlink/config/ must be purely declarative (constants
and env reads). Functions belong in helpers/ or the runtime modules that
consume the constants.
"""

from __future__ import annotations

import ast
import sys

from linting.shared import CONFIG_DIR, config_modules, parse_source, rel, report


def main() -> int:
    violations: list[str] = []

    for py_file in config_modules(CONFIG_DIR):
        result = parse_source(py_file)
        if result is None:
            continue
        _source, tree = result

        for node in tree.body:
            if isinstance(node, ast.FunctionDef | ast.AsyncFunctionDef):
                violations.append(f"  {rel(py_file)}: def {node.name}() (line {node.lineno})")

    return report("No-config-functions violations (config/ must be declarative)", violations)


if __name__ == "__main__":
    sys.exit(main())
