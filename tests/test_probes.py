"""Tests for the probe programs behind the composite checks."""

import json
import sys

import pytest

from postcheck.probes import (
    FAILED,
    PASSED,
    DeprecationScan,
    ManifestReference,
    StaleReferences,
    deprecation_lines,
    find_references,
    main,
    trace_deprecation_env,
)

EXTENSIONS = ["ts", "tsx", "js", "jsx"]
EXCLUDED = ["node_modules", "dist", "build"]


@pytest.fixture
def source_tree(tmp_path):
    """A small project with references in and outside excluded dirs."""
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "date.ts").write_text(
        "import dayjs from 'dayjs'\nimport moment from 'moment'\n"
    )
    (tmp_path / "src" / "clean.js").write_text("export const x = 1\n")
    (tmp_path / "README.md").write_text("We used moment before\n")
    for excluded in ("node_modules/moment", "dist", "src/build"):
        (tmp_path / excluded).mkdir(parents=True)
        (tmp_path / excluded / "index.js").write_text("require('moment')\n")
    return tmp_path


def test_find_references_reports_path_and_line(source_tree):
    matches = find_references(source_tree, "moment", EXTENSIONS, EXCLUDED)

    assert matches == ["src/date.ts:2:import moment from 'moment'"]


def test_find_references_skips_other_extensions(source_tree):
    """README.md mentions the package but is not source."""
    matches = find_references(source_tree, "moment", ["md"], EXCLUDED)
    assert matches == ["README.md:1:We used moment before"]


def test_find_references_excluded_dirs_at_any_depth(source_tree):
    """src/build is skipped just like top-level build."""
    matches = find_references(source_tree, "moment", EXTENSIONS, [])
    assert len(matches) == 4

    matches = find_references(source_tree, "moment", EXTENSIONS, EXCLUDED)
    assert len(matches) == 1


def test_find_references_is_literal(tmp_path):
    """Regex metacharacters in package names match literally."""
    (tmp_path / "a.js").write_text("require('lodash.get')\nrequire('lodashxget')\n")
    matches = find_references(tmp_path, "lodash.get", ["js"], [])
    assert matches == ["a.js:1:require('lodash.get')"]


def test_find_references_limit(tmp_path):
    (tmp_path / "a.js").write_text("moment\n" * 50)
    assert len(find_references(tmp_path, "moment", ["js"], [], limit=20)) == 20


def test_stale_references_probe(source_tree, capsys):
    assert StaleReferences(needle="moment", root=source_tree).run() == FAILED
    assert "src/date.ts:2:" in capsys.readouterr().out

    assert StaleReferences(needle="left-pad", root=source_tree).run() == PASSED
    assert capsys.readouterr().out.strip() == "No references found"


def test_manifest_probe(tmp_path, write_manifest, capsys):
    path = write_manifest(devDependencies={"moment": "2"})

    assert ManifestReference(package="moment", manifest=path).run() == FAILED
    assert "Still in package.json" in capsys.readouterr().out

    assert ManifestReference(package="dayjs", manifest=path).run() == PASSED
    assert "Not in package.json" in capsys.readouterr().out


def test_manifest_probe_missing_manifest(tmp_path):
    probe = ManifestReference(package="moment", manifest=tmp_path / "none.json")
    assert probe.run() == 2


def test_deprecation_lines_case_insensitive():
    output = "ok\n(node:1) [DEP0005] DeprecationWarning: Buffer()\nDEPRECATED api\n"
    assert deprecation_lines(output) == [
        "(node:1) [DEP0005] DeprecationWarning: Buffer()",
        "DEPRECATED api",
    ]
    assert deprecation_lines(output, limit=1) == [
        "(node:1) [DEP0005] DeprecationWarning: Buffer()"
    ]


def test_trace_deprecation_env_keeps_existing_options(monkeypatch):
    monkeypatch.setenv("NODE_OPTIONS", "--max-old-space-size=4096")
    assert trace_deprecation_env() == {
        "NODE_OPTIONS": "--max-old-space-size=4096 --trace-deprecation"
    }

    monkeypatch.delenv("NODE_OPTIONS")
    assert trace_deprecation_env() == {"NODE_OPTIONS": "--trace-deprecation"}


def test_deprecation_scan_finds_warnings_on_stderr(capsys):
    code = (
        "import os, sys; "
        "print('NODE_OPTIONS=' + os.environ['NODE_OPTIONS']); "
        "print('DeprecationWarning: old api', file=sys.stderr)"
    )
    probe = DeprecationScan(command=[sys.executable, "-c", code])

    assert probe.run() == FAILED
    assert "DeprecationWarning: old api" in capsys.readouterr().out


def test_deprecation_scan_clean_run(capsys):
    probe = DeprecationScan(command=[sys.executable, "-c", "print('all good')"])

    assert probe.run() == PASSED
    assert capsys.readouterr().out.strip() == "No deprecation warnings"


def test_cli_dispatches_to_probe(source_tree, capsys):
    """main() parses --key=value options, including JSON lists."""
    with pytest.raises(SystemExit) as exit_info:
        main([
            "refs",
            "--needle=moment",
            f"--root={source_tree}",
            f"--extensions={json.dumps(['md'])}",
            f"--exclude-dirs={json.dumps(EXCLUDED)}",
        ])

    assert exit_info.value.code == FAILED
    assert "README.md:1:" in capsys.readouterr().out


def test_cli_manifest_probe(write_manifest):
    path = write_manifest(dependencies={"dayjs": "1"})

    with pytest.raises(SystemExit) as exit_info:
        main(["manifest", "--package=moment", f"--manifest={path}"])

    assert exit_info.value.code == PASSED
