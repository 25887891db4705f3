#!/usr/bin/env python
"""Enforce a single conftest.py at the tests/ root.

The root conftest owns custom collection; nested conftest files fragment
fixture scoping.
"""

from __future__ import annotations

import sys

from linting.shared import TESTS_DIR, rel, report


def main() -> int:
    violations: list[str] = []

    if not TESTS_DIR.is_dir():
        return 0

    allowed = TESTS_DIR / "conftest.py"
    for conftest in sorted(TESTS_DIR.rglob("conftest.py")):
        if conftest != allowed:
            violations.append(f"  {rel(conftest)}: conftest.py only allowed at tests/conftest.py")

    return report("No-conftest-in-subfolders violations", violations)


if __name__ == "__main__":
    sys.exit(main())
