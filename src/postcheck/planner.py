"""Check planning: decide which checks apply to a project.

The planner never runs anything. It turns a manifest plus explicit
options into an ordered list of CheckDescriptors; the executor
does not know why a check was planned.
"""

from __future__ import annotations

import json
import sys

from pydantic import BaseModel, ConfigDict, Field

from postcheck.core.config import PLACEHOLDER_TEST_SCRIPT, CheckCommands
from postcheck.core.result import CheckDescriptor
from postcheck.manifest import Manifest

LABEL_INSTALL = "Dependencies resolve"
LABEL_TYPECHECK = "TypeScript compilation"
LABEL_TEST = "Test suite"
LABEL_LINT = "Linter"
LABEL_BUILD = "Build"
LABEL_DEPRECATIONS = "No deprecation warnings"


def stale_source_label(package: str) -> str:
    return f'Old package "{package}" fully removed from source'


def stale_manifest_label(package: str) -> str:
    return f'Old package "{package}" removed from package.json'


class PlanOptions(BaseModel):
    """Everything the planner needs besides the manifest."""

    model_config = ConfigDict(frozen=True)

    subject: str = "unknown"
    swap_from: str | None = None
    manifest_name: str = "package.json"
    commands: CheckCommands = Field(default_factory=CheckCommands)
    test_placeholder: str = PLACEHOLDER_TEST_SCRIPT
    typecheck_packages: tuple[str, ...] = ("typescript",)
    source_extensions: tuple[str, ...] = ("ts", "tsx", "js", "jsx")
    exclude_dirs: tuple[str, ...] = ("node_modules", "dist", "build")
    max_reference_matches: int = 20
    max_deprecation_lines: int = 10
    timeout: int = 120
    python: str = Field(
        default_factory=lambda: sys.executable,
        description="Interpreter used to run the bundled probes",
    )

    @classmethod
    def from_state(cls, state) -> PlanOptions:
        """Build options from loaded configuration and run arguments."""
        check = state.config.check
        run = state.runtime.verify
        return cls(
            subject=run.package,
            swap_from=run.swap_from,
            manifest_name=state.config.project.manifest,
            commands=check.commands,
            test_placeholder=check.test_placeholder,
            typecheck_packages=tuple(check.typecheck_packages),
            source_extensions=tuple(check.source_extensions),
            exclude_dirs=tuple(check.exclude_dirs),
            max_reference_matches=check.max_reference_matches,
            max_deprecation_lines=check.max_deprecation_lines,
            timeout=check.timeout,
        )


class CheckPlanner:
    """Plan checks for a manifest in a fixed, documented order."""

    def __init__(self, options: PlanOptions):
        self.options = options

    def plan(self, manifest: Manifest) -> list[CheckDescriptor]:
        """Return the checks that apply to this manifest.

        Order: install, typecheck, test, lint, build, swap checks,
        deprecations. Only install is unconditional.
        """
        opts = self.options
        commands = opts.commands
        checks = [self._check(LABEL_INSTALL, commands.install)]

        if any(manifest.declares(p) for p in opts.typecheck_packages):
            checks.append(self._check(LABEL_TYPECHECK, commands.typecheck))

        has_tests = self.has_test_script(manifest)
        if has_tests:
            checks.append(self._check(LABEL_TEST, commands.test))

        if manifest.script("lint"):
            checks.append(self._check(LABEL_LINT, commands.lint))

        if manifest.script("build"):
            checks.append(self._check(LABEL_BUILD, commands.build))

        if opts.swap_from:
            checks.append(self._check(
                stale_source_label(opts.swap_from),
                self._probe(
                    "refs",
                    needle=opts.swap_from,
                    root=".",
                    extensions=json.dumps(list(opts.source_extensions)),
                    exclude_dirs=json.dumps(list(opts.exclude_dirs)),
                    limit=opts.max_reference_matches,
                ),
            ))
            checks.append(self._check(
                stale_manifest_label(opts.swap_from),
                self._probe(
                    "manifest",
                    package=opts.swap_from,
                    manifest=opts.manifest_name,
                ),
            ))

        if has_tests:
            checks.append(self._check(
                LABEL_DEPRECATIONS,
                self._probe(
                    "deprecations",
                    command=json.dumps(list(commands.test)),
                    limit=opts.max_deprecation_lines,
                    timeout=opts.timeout,
                ),
            ))

        return checks

    def has_test_script(self, manifest: Manifest) -> bool:
        test = manifest.script("test")
        return test is not None and test != self.options.test_placeholder

    @staticmethod
    def _check(label: str, command) -> CheckDescriptor:
        return CheckDescriptor(label=label, command=tuple(command))

    def _probe(self, name: str, **options) -> list[str]:
        # --key=value keeps values starting with '-' from being read
        # as flags; the probe CLI spells field names in kebab-case
        return [self.options.python, "-m", "postcheck.probes", name] + [
            f"--{key.replace('_', '-')}={value}"
            for key, value in options.items()
        ]
