#!/usr/bin/env python3
"""
Check that docs/test_scenarios_business_summary.md covers tests/test_integration_scenarios.py.

Every integration test class must appear as a **Test Class** entry and every
test method as a **Test Method** entry. Entries for tests that no longer exist
are reported as warnings.

Run: python scripts/validate_test_docs_sync.py
"""

import ast
import re
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
TEST_FILE = PROJECT_ROOT / "tests" / "test_integration_scenarios.py"
DOC_FILE = PROJECT_ROOT / "docs" / "test_scenarios_business_summary.md"

DOC_CLASS_PATTERN = re.compile(r"\*\*Test Class\*\*:\s*`(Test\w+)`")
DOC_METHOD_PATTERN = re.compile(r"\*\*Test Method\*\*:\s*`(test_\w+)`")


def collect_tests(test_file: Path) -> dict[str, list[str]]:
    """Map each top-level Test* class to its test_* methods, in file order."""
    tree = ast.parse(test_file.read_text(encoding="utf-8"))
    return {
        node.name: [
            child.name
            for child in node.body
            if isinstance(child, ast.FunctionDef) and child.name.startswith("test_")
        ]
        for node in tree.body
        if isinstance(node, ast.ClassDef) and node.name.startswith("Test")
    }


def collect_documented(doc_file: Path) -> tuple[set[str], set[str]]:
    """Class and method names referenced by the business summary."""
    content = doc_file.read_text(encoding="utf-8")
    return set(DOC_CLASS_PATTERN.findall(content)), set(DOC_METHOD_PATTERN.findall(content))


def check_sync(test_file: Path = TEST_FILE, doc_file: Path = DOC_FILE) -> tuple[list[str], list[str]]:
    """Return (errors, warnings). Undocumented tests are errors, stale entries warnings."""
    tests = collect_tests(test_file)
    doc_classes, doc_methods = collect_documented(doc_file)
    methods = {m for names in tests.values() for m in names}

    errors = [f"Missing class documentation: {c}" for c in sorted(set(tests) - doc_classes)]
    errors += [f"Missing method documentation: {m}" for m in sorted(methods - doc_methods)]
    warnings = [f"Documented class no longer exists: {c}" for c in sorted(doc_classes - set(tests))]
    warnings += [f"Documented method no longer exists: {m}" for m in sorted(doc_methods - methods)]
    return errors, warnings


def main():
    for path in (TEST_FILE, DOC_FILE):
        if not path.exists():
            print(f"File not found: {path}")
            sys.exit(1)

    errors, warnings = check_sync()
    tests = collect_tests(TEST_FILE)

    print(f"{TEST_FILE.name}: {len(tests)} classes, {sum(len(m) for m in tests.values())} methods")

    for error in errors:
        print(f"ERROR   {error}")
    for warning in warnings:
        print(f"WARNING {warning}")

    if not errors and not warnings:
        print(f"{DOC_FILE.name} is in sync")

    sys.exit(1 if errors else 0)


if __name__ == "__main__":
    main()
