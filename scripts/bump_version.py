"""Bump ``__version__`` in src/volumefs/__init__.py.

pyproject.toml reads the version from that file, so it is the only place
that changes.

Usage:
    python scripts/bump_version.py patch        # 0.1.0 → 0.1.1
    python scripts/bump_version.py minor        # 0.1.1 → 0.2.0
    python scripts/bump_version.py major        # 0.2.0 → 1.0.0
    python scripts/bump_version.py --set 2.0.0
"""

from __future__ import annotations

import argparse
import re
import sys
from pathlib import Path

INIT_PY = Path(__file__).resolve().parent.parent / "src" / "volumefs" / "__init__.py"

VERSION_RE = re.compile(r'^__version__\s*=\s*"(\d+)\.(\d+)\.(\d+)"', re.MULTILINE)
SEMVER_RE = re.compile(r"^\d+\.\d+\.\d+$")


def next_version(current: tuple[int, int, int], part: str) -> str:
    major, minor, patch = current
    if part == "major":
        return f"{major + 1}.0.0"
    if part == "minor":
        return f"{major}.{minor + 1}.0"
    return f"{major}.{minor}.{patch + 1}"


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Bump the volumefs version")
    parser.add_argument("part", nargs="?", choices=("major", "minor", "patch"))
    parser.add_argument("--set", dest="explicit", metavar="X.Y.Z")
    args = parser.parse_args(argv)
    if bool(args.part) == bool(args.explicit):
        parser.error("give exactly one of PART or --set")

    text = INIT_PY.read_text()
    match = VERSION_RE.search(text)
    if match is None:
        print(f"error: no __version__ in {INIT_PY}", file=sys.stderr)
        return 1

    old = ".".join(match.groups())
    if args.explicit:
        if not SEMVER_RE.match(args.explicit):
            parser.error(f"not a X.Y.Z version: {args.explicit}")
        new = args.explicit
    else:
        new = next_version(tuple(int(p) for p in match.groups()), args.part)

    INIT_PY.write_text(VERSION_RE.sub(f'__version__ = "{new}"', text, count=1))
    print(f"{old} → {new}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
