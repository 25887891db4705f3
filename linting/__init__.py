"""Custom structural lint checks for chatlink.

Each rule is a module with a ``main() -> int`` entry point (0 when clean)
and can be run on its own, e.g. ``python -m linting.modules.no_config_functions``.

Package layout
--------------
shared.py           Path constants, file iteration, parsing and violation
                    reporting used by every rule.

modules/            Config-module purity rules
    no_config_functions.py      Config modules must be purely declarative.
    no_config_cross_imports.py  Config modules must not import siblings.

testing/            Test file placement and naming rules
    unit_test_domain_folders.py Unit tests must live in domain subfolders.
    no_test_file_prefix.py      Test filenames must not use the test_ prefix.
    no_conftest_in_subfolders.py Only one conftest.py allowed (tests root).
"""
