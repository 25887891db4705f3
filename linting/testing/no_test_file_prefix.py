#!/usr/bin/env python
"""Enforce no test_ prefix on test filenames.

Test modules use plain names (``transport_backoff.py``, not
``test_transport_backoff.py``) and are collected by ``tests/conftest.py``.
"""

from __future__ import annotations

import sys

from linting.shared import UNIT_DIR, iter_python_files, rel, report


def main() -> int:
    violations: list[str] = []

    for py_file in iter_python_files(UNIT_DIR):
        if py_file.name.startswith("test_"):
            violations.append(f"  {rel(py_file)}: filename must not use test_ prefix")

    return report("No-test-file-prefix violations (use plain names, not test_*)", violations)


if __name__ == "__main__":
    sys.exit(main())
