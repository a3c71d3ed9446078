"""
Alias hygiene check.

Scans build output for vendor/model identifiers that must never ship to
clients. Exit status 1 on violations, 2 when the directory does not exist.
"""

import argparse
import logging
import re
import sys
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path

LOG = logging.getLogger(__name__)

# Narrower than the log redaction blocklist: bundles legitimately contain "meta".
BANNED_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"\bopenai\b",
        r"\banthropic\b",
        r"\bgoogle\b",
        r"\bmistral\b",
        r"\bxai\b",
        r"\bgemini\b",
        r"\bclaude\b",
        r"\bllama\b",
        r"\bmixtral\b",
        r"\bwhisper(?:-[a-z0-9.-]+)?\b",
        r"\bgpt(?:-[a-z0-9.-]+)?\b",
        r"\bo1(?:-[a-z0-9.-]+)?\b",
        r"\bo3(?:-[a-z0-9.-]+)?\b",
        r"\bo4(?:-[a-z0-9.-]+)?\b",
    )
)

DEFAULT_SUFFIXES = (".js", ".css", ".html", ".txt")


@dataclass(frozen=True)
class Violation:
    path: Path
    pattern: str


def iter_files(root: Path, suffixes: Iterable[str]) -> Iterator[Path]:
    wanted = {suffix.lower() for suffix in suffixes}
    for path in sorted(root.rglob("*")):
        if path.is_file() and path.suffix.lower() in wanted:
            yield path


def scan_text(path: Path, text: str) -> list[Violation]:
    return [Violation(path, pattern.pattern) for pattern in BANNED_PATTERNS if pattern.search(text)]


def scan_paths(root: Path, suffixes: Iterable[str] = DEFAULT_SUFFIXES) -> list[Violation]:
    violations = []
    for path in iter_files(root, suffixes):
        violations.extend(scan_text(path, path.read_text(encoding="utf-8", errors="replace")))
    return violations


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Check build output for vendor/model names")
    parser.add_argument("directory", nargs="?", default="dist")
    parser.add_argument("--suffix", action="append", dest="suffixes")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    args = parse_args(argv)
    root = Path(args.directory)

    if not root.is_dir():
        LOG.error("%s directory not found. Build the client first.", root)
        return 2

    violations = scan_paths(root, args.suffixes or DEFAULT_SUFFIXES)
    if violations:
        LOG.error("Alias hygiene check failed. Banned vendor/model strings found:")
        for violation in violations:
            LOG.error("- %s matches %s", violation.path, violation.pattern)
        return 1

    LOG.info("Alias hygiene check passed.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
