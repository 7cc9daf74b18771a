#!/usr/bin/env python3
"""
Build script for the iTerm2 Tab Organizer.

Concatenates src/tab_organizer/*.py into a single tab-organizer.py file
that's compatible with iTerm2 AutoLaunch (which requires a single .py file).

Usage:
    python build.py           # Build tab-organizer.py
    python build.py --check   # Verify output matches (for CI)

Module order matters for dependencies:
1. logging_config.py - Loguru structured logging, trace ID
2. errors.py         - Error/Result types, host exceptions
3. config_loader.py  - TOML config loading
4. workspace.py      - Host workspace interface
5. outcomes.py       - Outcome enum and messages
6. collector.py      - Tab collection and grouping
7. dedup.py          - Duplicate remover
8. sorter.py         - Name sorter
9. organize.py       - Dedup-then-sort pipeline
10. notifier.py      - User notifications
11. iterm2_host.py   - iTerm2 workspace binding
12. main.py          - Entry point (command registration, iterm2.run_*)
"""

import re
import sys
from pathlib import Path

MODULE_ORDER = [
    "logging_config.py",
    "errors.py",
    "config_loader.py",
    "workspace.py",
    "outcomes.py",
    "collector.py",
    "dedup.py",
    "sorter.py",
    "organize.py",
    "notifier.py",
    "iterm2_host.py",
    "main.py",
]

SRC_DIR = Path(__file__).parent / "src" / "tab_organizer"
OUTPUT_FILE = Path(__file__).parent / "tab-organizer.py"

HEADER = '''#!/usr/bin/env python3
# /// script
# requires-python = ">=3.11"
# dependencies = ["iterm2", "loguru", "platformdirs"]
# ///
"""
iTerm2 Tab Organizer

Sorts tabs by name within each window and closes duplicate tabs
(tabs whose session is in the same directory).

Install: symlink into ~/Library/Application Support/iTerm2/Scripts/AutoLaunch/
Configuration: ~/.config/tab-organizer/config.toml

GENERATED by build.py from src/tab_organizer/ - do not edit.
"""
'''

IMPORT_PATTERN = re.compile(r"^(import \S+|from \S+ import .+)$")


def is_package_import(line: str) -> bool:
    """Intra-package imports vanish once modules share one namespace."""
    return line.startswith("from .") or line.startswith("from tab_organizer")


def split_imports(content: str) -> tuple[list[str], str]:
    """Separate top-level import lines from the rest of a module."""
    imports = []
    body = []

    for line in content.split("\n"):
        if IMPORT_PATTERN.match(line):
            if not is_package_import(line):
                imports.append(line)
            continue
        body.append(line)

    return imports, "\n".join(body)


def strip_module_docstring(content: str) -> str:
    """Remove module-level docstring (the header has the main one)."""
    pattern = r'^((?:#[^\n]*\n)*)\s*(?:\'\'\'[\s\S]*?\'\'\'|"""[\s\S]*?""")\s*\n'
    return re.sub(pattern, r'\1', content)


def process_module(path: Path) -> tuple[list[str], str]:
    """Process a single module file for concatenation."""
    content = path.read_text()
    imports, body = split_imports(content)
    body = strip_module_docstring(body)
    return imports, body.strip()


def order_imports(imports: list[str]) -> list[str]:
    """Deduplicate imports; stdlib/plain imports first, then from-imports."""
    unique = list(dict.fromkeys(imports))
    plain = sorted(line for line in unique if line.startswith("import "))
    from_imports = sorted(line for line in unique if line.startswith("from "))
    return plain + from_imports


def build() -> str:
    """Build the concatenated output."""
    all_imports = []
    bodies = []

    for module_name in MODULE_ORDER:
        module_path = SRC_DIR / module_name
        if not module_path.exists():
            print(f"ERROR: Missing module: {module_path}", file=sys.stderr)
            sys.exit(1)

        imports, body = process_module(module_path)
        all_imports.extend(imports)
        if body:
            separator = f"\n\n# {'=' * 77}\n# Module: {module_name}\n# {'=' * 77}\n\n"
            bodies.append(separator + body)

    return HEADER + "\n" + "\n".join(order_imports(all_imports)) + "".join(bodies) + "\n"


def main():
    check_mode = "--check" in sys.argv

    if not SRC_DIR.exists():
        print(f"ERROR: source package not found: {SRC_DIR}", file=sys.stderr)
        sys.exit(1)

    output = build()

    if check_mode:
        if not OUTPUT_FILE.exists():
            print(f"ERROR: Output file not found: {OUTPUT_FILE}", file=sys.stderr)
            sys.exit(1)

        existing = OUTPUT_FILE.read_text()
        if existing != output:
            print("ERROR: Built output differs from existing file.", file=sys.stderr)
            print("Run 'python build.py' to regenerate.", file=sys.stderr)
            sys.exit(1)

        print("OK: Output matches.")
        sys.exit(0)

    OUTPUT_FILE.write_text(output)

    # Verify syntax
    import py_compile
    try:
        py_compile.compile(str(OUTPUT_FILE), doraise=True)
        print(f"Built: {OUTPUT_FILE} ({len(output)} bytes, syntax OK)")
    except py_compile.PyCompileError as e:
        print(f"ERROR: Syntax error in output: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
