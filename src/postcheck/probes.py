"""Probe programs for checks that are more than one command.

Run as `python -m postcheck.probes <probe> --option=value ...`.
Each probe prints its findings on stdout and exits 0 when the check
passes, 1 when it fails and 2 when it cannot run at all. Nothing here
configures logging; stdout is the check output.
"""

from __future__ import annotations

import os
from collections.abc import Iterator, Sequence
from pathlib import Path

from pydantic import BaseModel, Field
from pydantic_settings import CliApp, CliSubCommand, get_subcommand

from postcheck.core.runner import Runner
from postcheck.manifest import Manifest, ManifestError

PASSED = 0
FAILED = 1
ERROR = 2


def iter_source_files(
    root: Path, extensions: Sequence[str], exclude_dirs: Sequence[str]
) -> Iterator[Path]:
    """Yield files under root with a recognized extension, in sorted
    order, never descending into excluded directory names."""
    suffixes = {f".{ext.lstrip('.')}" for ext in extensions}
    excluded = set(exclude_dirs)
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if d not in excluded)
        for filename in sorted(filenames):
            path = Path(dirpath) / filename
            if path.suffix in suffixes:
                yield path


def find_references(
    root: Path,
    needle: str,
    extensions: Sequence[str],
    exclude_dirs: Sequence[str],
    limit: int | None = None,
) -> list[str]:
    """Return `path:line:text` for lines containing needle literally."""
    matches = []
    for path in iter_source_files(root, extensions, exclude_dirs):
        try:
            text = path.read_text(encoding="utf-8", errors="replace")
        except OSError:
            continue
        for lineno, line in enumerate(text.splitlines(), start=1):
            if needle in line:
                matches.append(f"{path.relative_to(root)}:{lineno}:{line}")
                if limit is not None and len(matches) >= limit:
                    return matches
    return matches


def deprecation_lines(output: str, limit: int | None = None) -> list[str]:
    """Lines mentioning a deprecation, case-insensitively."""
    lines = [
        line for line in output.splitlines() if "deprecat" in line.lower()
    ]
    return lines[:limit] if limit is not None else lines


def trace_deprecation_env() -> dict[str, str]:
    """NODE_OPTIONS with --trace-deprecation added to any existing
    options."""
    existing = os.environ.get("NODE_OPTIONS", "").strip()
    flag = "--trace-deprecation"
    if flag in existing.split():
        return {"NODE_OPTIONS": existing}
    return {"NODE_OPTIONS": f"{existing} {flag}".strip()}


class StaleReferences(BaseModel):
    """Fail if any source file still mentions a package."""

    needle: str = Field(description="Text to search for")
    root: Path = Field(default=Path("."), description="Search root")
    extensions: list[str] = Field(
        default_factory=lambda: ["ts", "tsx", "js", "jsx"],
        description="File extensions to search",
    )
    exclude_dirs: list[str] = Field(
        default_factory=lambda: ["node_modules", "dist", "build"],
        description="Directory names to skip",
    )
    limit: int = Field(default=20, description="Maximum matches printed")

    def run(self) -> int:
        matches = find_references(
            self.root, self.needle, self.extensions, self.exclude_dirs,
            self.limit,
        )
        if matches:
            print("\n".join(matches))
            return FAILED
        print("No references found")
        return PASSED


class ManifestReference(BaseModel):
    """Fail if the manifest still declares a package."""

    package: str = Field(description="Package that should be gone")
    manifest: Path = Field(
        default=Path("package.json"), description="Manifest file"
    )

    def run(self) -> int:
        try:
            manifest = Manifest.load(self.manifest)
        except ManifestError as e:
            print(e)
            return ERROR
        if manifest.declares(self.package):
            print(f"Still in {self.manifest.name}")
            return FAILED
        print(f"Not in {self.manifest.name}")
        return PASSED


class DeprecationScan(BaseModel):
    """Run the test command with deprecation tracing and fail on any
    deprecation warning in its output."""

    command: list[str] = Field(description="Test command argument vector")
    limit: int = Field(default=10, description="Maximum lines printed")
    timeout: int | None = Field(
        default=None, description="Timeout for the test command, seconds"
    )

    def run(self) -> int:
        result = Runner().execute(
            self.command, timeout=self.timeout, env=trace_deprecation_env()
        )
        warnings = deprecation_lines(
            result.stdout + "\n" + result.stderr, self.limit
        )
        if warnings:
            print("\n".join(warnings))
            return FAILED
        print("No deprecation warnings")
        return PASSED


class Probes(BaseModel):
    """Helper checks run as separate processes by postcheck."""

    refs: CliSubCommand[StaleReferences]
    manifest: CliSubCommand[ManifestReference]
    deprecations: CliSubCommand[DeprecationScan]

    def cli_cmd(self) -> None:
        raise SystemExit(get_subcommand(self).run())


def main(argv: list[str] | None = None) -> None:
    CliApp.run(Probes, cli_args=argv)


if __name__ == "__main__":
    main()
