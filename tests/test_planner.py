"""Tests for CheckPlanner."""

import json

import pytest

from postcheck.core.config import PLACEHOLDER_TEST_SCRIPT, CheckCommands
from postcheck.manifest import Manifest
from postcheck.planner import (
    LABEL_BUILD,
    LABEL_DEPRECATIONS,
    LABEL_INSTALL,
    LABEL_LINT,
    LABEL_TEST,
    LABEL_TYPECHECK,
    CheckPlanner,
    PlanOptions,
    stale_manifest_label,
    stale_source_label,
)


def plan(swap_from=None, **manifest):
    options = PlanOptions(swap_from=swap_from, python="python3")
    return CheckPlanner(options).plan(Manifest.model_validate(manifest))


def labels(checks):
    return [c.label for c in checks]


def test_empty_manifest_plans_only_install():
    """No scripts and no typecheck dependency: just dependency install."""
    checks = plan(dependencies={}, scripts={})

    assert labels(checks) == [LABEL_INSTALL]
    assert checks[0].command == ("npm", "install", "--ignore-scripts")


def test_full_manifest_order():
    """Every rule applies, in the documented order."""
    checks = plan(
        swap_from="moment",
        devDependencies={"typescript": "^5"},
        scripts={"test": "jest", "lint": "eslint .", "build": "tsc"},
    )

    assert labels(checks) == [
        LABEL_INSTALL,
        LABEL_TYPECHECK,
        LABEL_TEST,
        LABEL_LINT,
        LABEL_BUILD,
        stale_source_label("moment"),
        stale_manifest_label("moment"),
        LABEL_DEPRECATIONS,
    ]


@pytest.mark.parametrize("section", ["dependencies", "devDependencies"])
def test_typescript_in_either_section_enables_typecheck(section):
    """TypeScript may be a runtime or a dev dependency."""
    checks = plan(**{section: {"typescript": "^5"}})

    assert LABEL_TYPECHECK in labels(checks)
    typecheck = checks[labels(checks).index(LABEL_TYPECHECK)]
    assert typecheck.command == ("npx", "tsc", "--noEmit")


def test_placeholder_test_script_plans_no_tests():
    """The npm init stub means there is no test suite, so no
    deprecation scan either."""
    checks = plan(scripts={"test": PLACEHOLDER_TEST_SCRIPT})

    assert LABEL_TEST not in labels(checks)
    assert LABEL_DEPRECATIONS not in labels(checks)


def test_custom_test_script_plans_tests_and_deprecations():
    """A real test script adds the suite and the deprecation scan."""
    checks = plan(scripts={"test": "jest"})

    assert labels(checks) == [LABEL_INSTALL, LABEL_TEST, LABEL_DEPRECATIONS]


def test_swap_adds_exactly_two_checks():
    """A swap source adds the two removal checks whatever else the
    manifest holds."""
    manifests = [
        {},
        {"scripts": {"build": "tsc"}},
        {"scripts": {"test": "jest", "lint": "eslint"}},
    ]
    for manifest in manifests:
        without = plan(**manifest)
        with_swap = plan(swap_from="moment", **manifest)
        assert len(with_swap) == len(without) + 2


def test_stale_reference_probe_arguments():
    """The reference search passes each value as its own argument."""
    checks = plan(swap_from="moment")
    command = checks[1].command

    assert command[:4] == ("python3", "-m", "postcheck.probes", "refs")
    assert "--needle=moment" in command
    assert "--root=." in command
    extensions = next(a for a in command if a.startswith("--extensions="))
    assert json.loads(extensions.split("=", 1)[1]) == ["ts", "tsx", "js", "jsx"]
    excluded = next(a for a in command if a.startswith("--exclude-dirs="))
    assert json.loads(excluded.split("=", 1)[1]) == [
        "node_modules", "dist", "build"
    ]


def test_hostile_package_name_stays_one_argument():
    """Shell metacharacters in the identifier are never split."""
    name = "x\"; rm -rf / #"
    checks = plan(swap_from=name)

    assert f"--needle={name}" in checks[1].command
    assert f"--package={name}" in checks[2].command


def test_manifest_probe_uses_configured_manifest_name():
    options = PlanOptions(
        swap_from="moment", manifest_name="pkg.json", python="python3"
    )
    checks = CheckPlanner(options).plan(Manifest())

    assert "--manifest=pkg.json" in checks[2].command


def test_deprecation_probe_reruns_test_command():
    """The deprecation scan wraps the configured test command."""
    options = PlanOptions(
        commands=CheckCommands(test=["yarn", "test"]),
        timeout=30,
        python="python3",
    )
    checks = CheckPlanner(options).plan(
        Manifest.model_validate({"scripts": {"test": "jest"}})
    )
    command = checks[-1].command

    assert checks[-1].label == LABEL_DEPRECATIONS
    assert command[3] == "deprecations"
    assert '--command=["yarn", "test"]' in command
    assert "--timeout=30" in command
    assert checks[1].command == ("yarn", "test")


def test_plan_is_pure():
    """Planning twice gives equal results."""
    manifest = Manifest.model_validate({"scripts": {"test": "jest"}})
    planner = CheckPlanner(PlanOptions(swap_from="a", python="python3"))

    assert planner.plan(manifest) == planner.plan(manifest)
